"""
Bank account endpoints for API v1.

Every route requires a bearer token.  Mutations that move money out of
an account, or change/delete it, additionally require the account's own
password in the request body.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from digital_bank_api.app.core.security import get_current_user
from digital_bank_api.app.schemas.account import (
    AccountChanged,
    AccountCreate,
    AccountCreated,
    AccountDelete,
    AccountPage,
    AccountUpdate,
    BalanceRead,
    DepositRequest,
    DepositResult,
    PaymentRequest,
    PaymentResult,
    TransferRequest,
    TransferResult,
)
from digital_bank_api.app.schemas.common import PasswordChange, PasswordChanged
from digital_bank_api.app.services.account_service import AccountService

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("", response_model=AccountPage)
async def list_accounts(
    page_number: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    search: Optional[str] = Query(None, description="ownerName:<substring>"),
    sort: Optional[str] = Query(None, description="<field>:asc|desc"),
) -> AccountPage:
    """Получить список счетов с поиском, сортировкой и пагинацией."""
    page = await AccountService.list_accounts(page_number, page_size, search, sort)
    return AccountPage(
        page_number=page.page_number,
        page_size=page.page_size,
        count=page.count,
        total_pages=page.total_pages,
        has_previous_page=page.has_previous_page,
        has_next_page=page.has_next_page,
        data=page.items,
    )


@router.post("", response_model=AccountCreated, status_code=status.HTTP_201_CREATED)
async def create_account(body: AccountCreate) -> AccountCreated:
    """Открыть новый счёт с начальным депозитом."""
    return await AccountService.create_account(
        owner_name=body.name,
        account_number=body.account_number,
        bank=body.bank,
        deposit=body.deposit,
        password=body.password,
    )


@router.get("/{account_number}", response_model=BalanceRead)
async def get_balance(account_number: str) -> BalanceRead:
    """Узнать баланс по номеру счёта."""
    return await AccountService.get_balance(account_number)


@router.put("/{account_id}", response_model=AccountChanged)
async def update_account(account_id: int, body: AccountUpdate) -> AccountChanged:
    return await AccountService.update_account(account_id, body.name, body.account_number, body.password)


@router.delete("/{account_id}", response_model=AccountChanged)
async def delete_account(account_id: int, body: AccountDelete = Body(...)) -> AccountChanged:
    return await AccountService.delete_account(account_id, body.password)


@router.post("/{account_id}/change-password", response_model=PasswordChanged)
async def change_password(account_id: int, body: PasswordChange) -> PasswordChanged:
    await AccountService.change_password(account_id, body.password_old, body.password_new)
    return PasswordChanged(id=account_id)


@router.put("/{account_id}/deposit", response_model=DepositResult)
async def deposit(account_id: int, body: DepositRequest) -> DepositResult:
    """Пополнить счёт."""
    account = await AccountService.deposit(account_id, body.amount)
    return DepositResult(id=account_id, owner_name=account["owner_name"], amount=body.amount)


@router.post("/{account_id}/payment", response_model=PaymentResult)
async def payment(account_id: int, body: PaymentRequest) -> PaymentResult:
    """Оплата внешнему получателю.  Требует пароль счёта."""
    await AccountService.require_password(account_id, body.password)
    await AccountService.payment(account_id, body.amount)
    return PaymentResult(id=account_id, bank=body.bank, amount=body.amount, title=body.title)


@router.post("/{account_id}/{target_id}/transfer", response_model=TransferResult)
async def transfer(account_id: int, target_id: int, body: TransferRequest) -> TransferResult:
    """Перевод между двумя счетами.  Требует пароль счёта-отправителя."""
    await AccountService.require_password(account_id, body.password)
    _, target = await AccountService.transfer_balance(account_id, target_id, body.amount)
    return TransferResult(id=account_id, owner_name=target["owner_name"], bank=body.bank, amount=body.amount)
