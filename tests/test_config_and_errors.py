"""Tests for settings, error conversion, logging setup and the CLI."""

import logging

import pytest
import structlog
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from hotel_reservation import main as cli
from hotel_reservation.config.settings import Settings
from hotel_reservation.core.exceptions import (
    ErrorCode,
    InsufficientInventoryError,
    StoreUnavailableError,
)
from hotel_reservation.core.logging import SecurityLogProcessor, configure_logging
from hotel_reservation.db.init_db import SAMPLE_ROOMS, init_db
from hotel_reservation.models import Admin, Guest, Room, RoomType
from hotel_reservation.schemas.reservation import RoomRequest
from hotel_reservation.services.base import BaseService, ServiceError, ServiceResult


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.MAX_CLIENTS >= 1
        assert settings.TAX_RATE == pytest.approx(0.13)
        assert not settings.has_bounded_queue()

    def test_log_level_is_normalized(self):
        assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"LOG_LEVEL": "chatty"},
            {"LOG_FORMAT": "xml"},
            {"MAX_CLIENTS": 0},
            {"MAX_PENDING_CLIENTS": -1},
            {"TAX_RATE": 1.5},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, **overrides)

    def test_redacted_hides_passwords(self):
        data = Settings(_env_file=None).redacted()
        assert data["DEFAULT_ADMIN_PASSWORD"] == "[REDACTED]"
        assert data["APP_NAME"] == "Hotel ABC Reservation System"


class TestServiceErrors:

    def test_app_exception_keeps_code_and_details(self):
        result = ServiceResult.from_app_exception(InsufficientInventoryError(RoomType.DOUBLE, 2, 1))

        assert not result
        assert result.error_code == ErrorCode.INSUFFICIENT_INVENTORY
        assert result.error.details == {"type": "DOUBLE", "requested": 2, "available": 1}

    def test_store_unavailable_is_retryable(self):
        error = ServiceError.from_exception(StoreUnavailableError(operation="allocate"))
        assert error.retryable is True
        assert error.details == {"operation": "allocate"}

    def test_unexpected_errors_become_internal(self, store, settings):
        service = BaseService(store, settings)
        assert service._handle_exception(KeyError("x"), "do thing").error_code == ErrorCode.INTERNAL_ERROR

    def test_rejected_schema_becomes_validation_failure(self, store, settings):
        with pytest.raises(PydanticValidationError) as excinfo:
            RoomRequest(room_type="SUITE", quantity="many")

        result = BaseService(store, settings)._handle_exception(excinfo.value, "build room request")

        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert set(result.error.details["field_errors"]) == {"room_type", "quantity"}
        assert result.error.field == "room_type"


class TestInventoryStore:

    def test_unit_of_work_rolls_back_on_error(self, store):
        with pytest.raises(RuntimeError):
            with store.unit_of_work("test") as session:
                session.add(Room(room_number="999", room_type=RoomType.SINGLE, price=1, floor=9))
                session.flush()
                raise RuntimeError("boom")

        with store.read_session() as session:
            assert session.execute(select(func.count(Room.id))).scalar_one() == 0

    def test_transient_fault_becomes_store_unavailable(self, store):
        with pytest.raises(StoreUnavailableError):
            with store.unit_of_work("test"):
                raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        # lock released
        with store.unit_of_work("after"):
            pass

    def test_init_db_seeds_once(self, store, settings):
        seeded = settings.model_copy(update={"SEED_SAMPLE_ROOMS": True})
        init_db(store.engine, seeded)
        init_db(store.engine, seeded)

        with store.read_session() as session:
            assert session.execute(select(func.count(Room.id))).scalar_one() == len(SAMPLE_ROOMS)
            assert session.execute(select(func.count(Admin.id))).scalar_one() == 1

    def test_back_populated_collections_load(self, store, services, add_rooms, make_reservation, guest_id):
        (room_id,) = add_rooms([("101", RoomType.SINGLE)])
        reservation_id = services.reservations.create_reservation(make_reservation(), RoomType.SINGLE).data

        with store.read_session() as session:
            assert [link.reservation_id for link in session.get(Room, room_id).reservation_links] == [reservation_id]
            assert [r.id for r in session.get(Guest, guest_id).reservations] == [reservation_id]


class TestLogging:

    def test_sensitive_keys_are_masked(self):
        event = SecurityLogProcessor()(None, "info", {"event": "login", "password": "x", "ctx": {"token": "y"}})
        assert event["password"] == "[REDACTED]"
        assert event["ctx"]["token"] == "[REDACTED]"

    @pytest.mark.parametrize("fmt", ["json", "console"])
    def test_configure_logging(self, fmt):
        configure_logging(Settings(_env_file=None, LOG_FORMAT=fmt, LOG_LEVEL="WARNING"))
        assert logging.getLogger().level == logging.WARNING
        structlog.get_logger("test").warning("configured", fmt=fmt)


class TestCommandLine:

    def test_parser(self):
        args = cli.build_parser().parse_args(["serve", "--port", "6000"])
        assert args.command == "serve"
        assert args.port == 6000
        assert args.host is None

    def test_init_db_command(self, settings, monkeypatch, capsys):
        monkeypatch.setattr(cli, "get_settings", lambda: settings.model_copy(update={"SEED_SAMPLE_ROOMS": True}))

        assert cli.main(["init-db", "--reset"]) == 0
        assert "Database ready" in capsys.readouterr().out
