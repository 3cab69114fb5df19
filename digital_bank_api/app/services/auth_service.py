"""
Login with failed-attempt throttling.
"""

import logging
from typing import Optional

from ..core.errors import InvalidCredentialsError
from ..core.security import create_access_token
from ..schemas.auth import LoginResult
from .login_throttle import LoginThrottle
from .user_service import UserService

logger = logging.getLogger(__name__)


class AuthService:

    @classmethod
    async def login(
        cls,
        email: str,
        password: str,
        throttle: LoginThrottle,
        now: Optional[float] = None,
    ) -> LoginResult:
        """Verify credentials and issue an access token.

        The lockout decision uses the attempt record as it was before
        this call: the credentials are checked first, but an identifier
        that was already locked is refused even when they are correct.
        A failure is recorded only for attempts that pass the gate.
        """
        identifier = email.strip().lower()
        now = throttle.clock() if now is None else now
        previous = throttle.lookup(identifier)

        user = await UserService.check_login_credentials(identifier, password)

        throttle.check_gate(identifier, now=now, record=previous)

        if not user:
            throttle.record_failure(identifier, now=now)
            raise InvalidCredentialsError("Wrong email or password")

        throttle.reset(identifier)
        logger.info("User %s logged in", identifier)
        return LoginResult(
            email=user["email"],
            name=user["name"],
            user_id=user["id"],
            token=create_access_token({"sub": user["email"]}),
        )
