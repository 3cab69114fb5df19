"""
Login endpoint for API v1.
"""

from fastapi import APIRouter, Depends, Request

from digital_bank_api.app.schemas.auth import LoginRequest, LoginResult
from digital_bank_api.app.services.auth_service import AuthService
from digital_bank_api.app.services.login_throttle import LoginThrottle

router = APIRouter()


def get_login_throttle(request: Request) -> LoginThrottle:
    """The failed-login tracker owned by the running application."""
    return request.app.state.login_throttle


@router.post("/login", response_model=LoginResult)
async def login(body: LoginRequest, throttle: LoginThrottle = Depends(get_login_throttle)) -> LoginResult:
    """Аутентифицировать пользователя и вернуть токен.

    После пяти неудачных попыток за 30 минут вход блокируется до
    истечения окна, даже при верном пароле.
    """
    return await AuthService.login(body.email, body.password, throttle)
