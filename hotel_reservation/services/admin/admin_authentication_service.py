"""
Admin console authentication.
"""

from hotel_reservation.core.exceptions import AuthenticationError, ValidationError
from hotel_reservation.models.admin import Admin
from hotel_reservation.models.base import utcnow
from hotel_reservation.models.enums import AdminRole
from hotel_reservation.repositories.bill_repository import AdminRepository
from hotel_reservation.schemas.billing import AdminRead
from hotel_reservation.services.base import BaseService, ServiceResult
from hotel_reservation.utils.password_utils import PasswordHelper


class AdminAuthenticationService(BaseService):
    """
    Verifies admin credentials against bcrypt hashes.

    Unknown usernames and wrong passwords produce the same failure so the
    console never reveals which accounts exist.
    """

    def authenticate(self, username: str, password: str) -> ServiceResult[AdminRead]:
        try:
            username = (username or "").strip()
            if not username or not password:
                raise AuthenticationError()

            with self.store.unit_of_work("authenticate") as session:
                admin = AdminRepository(session).get_by_username(username)
                if admin is None or not PasswordHelper.verify_password(password, admin.password_hash):
                    raise AuthenticationError()
                admin.last_login = utcnow()
                session.flush()
                result = AdminRead.model_validate(admin)

            self._log_operation("admin login", username)
            return ServiceResult.success(result)
        except Exception as e:
            return self._handle_exception(e, "authenticate admin", username)

    def create_admin(
        self,
        username: str,
        password: str,
        name: str,
        role: AdminRole = AdminRole.ADMIN,
    ) -> ServiceResult[AdminRead]:
        try:
            username = username.strip()
            if not username or not password:
                raise ValidationError(
                    "Username and password are required",
                    field_errors={"username": ["required"], "password": ["required"]},
                )
            with self.store.unit_of_work("create_admin") as session:
                repo = AdminRepository(session)
                if repo.get_by_username(username) is not None:
                    raise ValidationError(f"Admin {username} already exists")
                admin = repo.add(
                    Admin(
                        username=username,
                        password_hash=PasswordHelper.hash_password(
                            password, self.settings.PASSWORD_BCRYPT_ROUNDS
                        ),
                        name=name,
                        role=role,
                    )
                )
                result = AdminRead.model_validate(admin)
            self._log_operation("create admin", username, {"role": role.value})
            return ServiceResult.success(result)
        except Exception as e:
            return self._handle_exception(e, "create admin", username)
