"""
User endpoints for API v1.

CRUD over the users who may log in.  All routes require a bearer token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from digital_bank_api.app.core.security import get_current_user
from digital_bank_api.app.schemas.common import PasswordChange, PasswordChanged
from digital_bank_api.app.schemas.user import UserChanged, UserCreate, UserPage, UserRead, UserUpdate
from digital_bank_api.app.services.user_service import UserService

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("", response_model=UserPage)
async def list_users(
    page_number: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    search: Optional[str] = Query(None, description="name:<substring> or email:<substring>"),
    sort: Optional[str] = Query(None, description="<field>:asc|desc"),
) -> UserPage:
    """Получить список пользователей с поиском, сортировкой и пагинацией."""
    page = await UserService.list_users(page_number, page_size, search, sort)
    return UserPage(
        page_number=page.page_number,
        page_size=page.page_size,
        count=page.count,
        total_pages=page.total_pages,
        has_previous_page=page.has_previous_page,
        has_next_page=page.has_next_page,
        data=page.items,
    )


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate) -> UserRead:
    return await UserService.create_user(body.name, body.email, body.password)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int) -> UserRead:
    return await UserService.get_user(user_id)


@router.put("/{user_id}", response_model=UserChanged)
async def update_user(user_id: int, body: UserUpdate) -> UserChanged:
    user = await UserService.update_user(user_id, body.name, body.email)
    return UserChanged(**user.model_dump(), message="User changed successfully")


@router.delete("/{user_id}", response_model=UserChanged)
async def delete_user(user_id: int) -> UserChanged:
    user = await UserService.delete_user(user_id)
    return UserChanged(**user.model_dump(), message="User deleted successfully")


@router.post("/{user_id}/change-password", response_model=PasswordChanged)
async def change_password(user_id: int, body: PasswordChange) -> PasswordChanged:
    await UserService.change_password(user_id, body.password_old, body.password_new)
    return PasswordChanged(id=user_id)
