from hotel_reservation.db.init_db import init_db
from hotel_reservation.db.session import create_engine_from_settings
from hotel_reservation.db.store import InventoryStore

__all__ = ["InventoryStore", "create_engine_from_settings", "init_db"]
