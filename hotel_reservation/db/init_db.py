# hotel_reservation/db/init_db.py
"""Database initialization utilities."""
from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from hotel_reservation.config.settings import Settings
from hotel_reservation.core.logging import get_logger
from hotel_reservation.models import Admin, AdminRole, Base, Room, RoomType
from hotel_reservation.utils.password_utils import PasswordHelper

logger = get_logger(__name__)

# (room number, type, floor) of the initial inventory
SAMPLE_ROOMS: List[Tuple[str, RoomType, int]] = [
    ("101", RoomType.SINGLE, 1),
    ("102", RoomType.SINGLE, 1),
    ("103", RoomType.SINGLE, 1),
    ("104", RoomType.SINGLE, 1),
    ("201", RoomType.DOUBLE, 2),
    ("202", RoomType.DOUBLE, 2),
    ("203", RoomType.DOUBLE, 2),
    ("301", RoomType.DELUXE, 3),
    ("302", RoomType.DELUXE, 3),
    ("401", RoomType.PENT_HOUSE, 4),
]


def create_tables(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def seed_rooms(session: Session) -> int:
    """Insert the sample inventory when the rooms table is empty"""
    existing = session.execute(select(func.count(Room.id))).scalar_one()
    if existing:
        logger.info("Rooms already exist, skipping insertion", count=existing)
        return 0

    for number, room_type, floor in SAMPLE_ROOMS:
        session.add(
            Room(
                room_number=number,
                room_type=room_type,
                floor=floor,
                price=room_type.base_price,
                is_available=True,
            )
        )
    logger.info("Sample rooms inserted", count=len(SAMPLE_ROOMS))
    return len(SAMPLE_ROOMS)


def seed_admin(session: Session, settings: Settings) -> bool:
    """Create the default admin account if no admin exists"""
    existing = session.execute(select(func.count(Admin.id))).scalar_one()
    if existing:
        return False

    session.add(
        Admin(
            username=settings.DEFAULT_ADMIN_USERNAME,
            password_hash=PasswordHelper.hash_password(
                settings.DEFAULT_ADMIN_PASSWORD, settings.PASSWORD_BCRYPT_ROUNDS
            ),
            name=settings.DEFAULT_ADMIN_NAME,
            role=AdminRole.ADMIN,
        )
    )
    logger.info("Default admin account created", username=settings.DEFAULT_ADMIN_USERNAME)
    return True


def init_db(engine: Engine, settings: Settings) -> None:
    """
    Initialize the database by creating all tables and seeding the
    default admin (and, when enabled, the sample room inventory).
    """
    create_tables(engine)
    with Session(engine) as session:
        try:
            if settings.SEED_SAMPLE_ROOMS:
                seed_rooms(session)
            seed_admin(session, settings)
            session.commit()
        except Exception:
            session.rollback()
            logger.exception("Error initializing database")
            raise
    logger.info("Database initialized")


def drop_db(engine: Engine) -> None:
    """
    Drop all database tables.

    WARNING: This will delete all data! Only for development/testing.
    """
    Base.metadata.drop_all(bind=engine)
    logger.warning("All database tables dropped")
