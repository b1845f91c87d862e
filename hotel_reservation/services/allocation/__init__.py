from hotel_reservation.services.allocation.allocation_service import (
    AllocationService,
    distribute_guests,
)
from hotel_reservation.services.allocation.overlap_checker import (
    free_rooms,
    is_room_free,
    ranges_overlap,
)

__all__ = [
    "AllocationService",
    "distribute_guests",
    "free_rooms",
    "is_room_free",
    "ranges_overlap",
]
