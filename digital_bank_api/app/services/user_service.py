"""
Business logic for users.

Users are the people who log in to the API; they are unrelated to the
owners of bank accounts.  Passwords are stored as PBKDF2 hashes.
"""

import logging
from typing import Optional

from ..core.config import settings
from ..core.errors import DuplicateError, InvalidCredentialsError, NotFoundError, OperationFailedError
from ..core.security import hash_password, verify_password
from ..core.store import users
from ..schemas.user import UserRead
from .listing import FieldMap, Page, query_records

logger = logging.getLogger(__name__)

USER_FIELDS = FieldMap(
    search={"name": "name", "email": "email"},
    sort={"id": "id", "name": "name", "email": "email"},
)


def _public(user: dict) -> dict:
    return UserRead(**user).model_dump()


class UserService:
    """Сервис для работы с пользователями."""

    @classmethod
    async def list_users(
        cls,
        page_number: int = 1,
        page_size: Optional[int] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> Page:
        """Return one page of users, searchable by ``name`` or ``email``."""
        records = [_public(u) for u in users.list_all()]
        return query_records(
            records,
            page_number=page_number,
            page_size=page_size or settings.default_page_size,
            search=search,
            sort=sort,
            fields=USER_FIELDS,
        )

    @classmethod
    async def get_user(cls, user_id: int) -> UserRead:
        user = users.find_by_id(user_id)
        if not user:
            raise NotFoundError("Unknown user")
        return UserRead(**user)

    @classmethod
    async def email_is_registered(cls, email: str) -> bool:
        return users.find_one("email", email) is not None

    @classmethod
    async def create_user(cls, name: str, email: str, password: str) -> UserRead:
        """Register a user.  Raises ``DuplicateError`` if the email is taken."""
        if await cls.email_is_registered(email):
            logger.warning("Email %s is already registered", email)
            raise DuplicateError("Email is already registered")
        user_id = users.create(name=name, email=email, password=hash_password(password))
        logger.info("Registered user %s", email)
        return UserRead(id=user_id, name=name, email=email)

    @classmethod
    async def update_user(cls, user_id: int, name: str, email: str) -> UserRead:
        await cls.get_user(user_id)
        other = users.find_one("email", email)
        if other and other["id"] != user_id:
            raise DuplicateError("Email is already registered")
        if not users.update_fields(user_id, name=name, email=email):
            raise OperationFailedError("Failed to update user")
        logger.info("Updated user %s", user_id)
        return UserRead(id=user_id, name=name, email=email)

    @classmethod
    async def delete_user(cls, user_id: int) -> UserRead:
        user = await cls.get_user(user_id)
        if not users.delete(user_id):
            raise OperationFailedError("Failed to delete user")
        logger.info("Deleted user %s", user_id)
        return user

    @classmethod
    async def check_password(cls, user_id: int, password: str) -> bool:
        user = users.find_by_id(user_id)
        if not user:
            raise NotFoundError("Unknown user")
        return verify_password(password, user["password"])

    @classmethod
    async def change_password(cls, user_id: int, password_old: str, password_new: str) -> None:
        if not await cls.check_password(user_id, password_old):
            logger.warning("Wrong password for user %s", user_id)
            raise InvalidCredentialsError("Wrong password")
        if not users.update_fields(user_id, password=hash_password(password_new)):
            raise OperationFailedError("Failed to change password")
        logger.info("Changed password of user %s", user_id)

    @classmethod
    async def check_login_credentials(cls, email: str, password: str) -> Optional[dict]:
        """Return the stored user if ``password`` matches, otherwise ``None``."""
        user = users.find_one("email", email)
        if user and verify_password(password, user["password"]):
            return user
        return None
