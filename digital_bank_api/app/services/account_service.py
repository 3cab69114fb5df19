"""
Business logic for bank accounts.

Balances are only ever written through the version-checked primitives
of :class:`~digital_bank_api.app.core.store.AccountStore`: every
mutation reads the account, computes the new balance and writes it back
only if nobody else wrote in between, retrying a bounded number of
times.  A transfer writes both balances in one transaction, so a debit
can never be committed without its credit.
"""

import logging
from decimal import Decimal
from typing import Callable, Optional, Tuple

from ..core.config import settings
from ..core.errors import (
    DuplicateError,
    InsufficientFundsError,
    InvalidCredentialsError,
    NotFoundError,
    OperationFailedError,
    ValidationFailedError,
)
from ..core.money import Number, to_decimal
from ..core.security import hash_password, verify_password
from ..core.store import accounts
from ..schemas.account import AccountChanged, AccountCreated, AccountRead, BalanceRead
from .listing import FieldMap, Page, query_records, with_snake_case

logger = logging.getLogger(__name__)

ACCOUNT_FIELDS = FieldMap(
    search={"ownerName": "owner_name"},
    sort=with_snake_case({
        "id": "id",
        "ownerName": "owner_name",
        "accountNumber": "account_number",
        "bank": "bank",
        "balance": "balance",
    }),
)


def _public(account: dict) -> dict:
    return AccountRead(**account).model_dump()


class AccountService:
    """Сервис для работы с банковскими счетами.

    Все операции с балансом проходят через проверку версии записи,
    поэтому параллельные запросы к одному счёту не теряют обновления.
    """

    @classmethod
    async def list_accounts(
        cls,
        page_number: int = 1,
        page_size: Optional[int] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> Page:
        """Return one page of accounts.

        ``search`` is ``ownerName:<substring>``; ``sort`` is
        ``<field>:asc|desc`` over ``id``, ``ownerName``,
        ``accountNumber``, ``bank`` or ``balance``.
        """
        records = [_public(a) for a in accounts.list_all()]
        return query_records(
            records,
            page_number=page_number,
            page_size=page_size or settings.default_page_size,
            search=search,
            sort=sort,
            fields=ACCOUNT_FIELDS,
        )

    @classmethod
    async def get_account(cls, account_id: int) -> dict:
        """Return the stored account record, password hash included."""
        account = accounts.find_by_id(account_id)
        if not account:
            raise NotFoundError("Unknown Bank Account")
        return account

    @classmethod
    async def get_balance(cls, account_number: str) -> BalanceRead:
        account = accounts.find_one("account_number", account_number)
        if not account:
            raise NotFoundError("Unknown Bank Account")
        return BalanceRead(id=account["id"], owner_name=account["owner_name"], balance=account["balance"])

    @classmethod
    async def account_number_is_registered(cls, account_number: str) -> bool:
        return accounts.find_one("account_number", account_number) is not None

    @classmethod
    async def create_account(
        cls,
        owner_name: str,
        account_number: str,
        bank: str,
        deposit: Number,
        password: str,
    ) -> AccountCreated:
        """Open an account whose balance is the initial deposit.

        Raises ``DuplicateError`` if the account number is taken; the
        store is not touched in that case.
        """
        deposit = to_decimal(deposit)
        if await cls.account_number_is_registered(account_number):
            logger.warning("Account number %s is already registered", account_number)
            raise DuplicateError("Account Number is already registered")
        if deposit < 0:
            raise ValidationFailedError("Deposit must not be negative")
        accounts.create(
            owner_name=owner_name,
            account_number=account_number,
            bank=bank,
            balance=deposit,
            password=hash_password(password),
        )
        logger.info("Created bank account %s for %s", account_number, owner_name)
        return AccountCreated(owner_name=owner_name, account_number=account_number, bank=bank, balance=deposit)

    @classmethod
    async def update_account(cls, account_id: int, owner_name: str, account_number: str, password: str) -> AccountChanged:
        """Change the owner name and account number.

        The new number must not belong to another account and the
        password must match.
        """
        account = await cls.get_account(account_id)
        other = accounts.find_one("account_number", account_number)
        if other and other["id"] != account_id:
            raise DuplicateError("Account number is already registered")
        if not verify_password(password, account["password"]):
            logger.warning("Wrong password for account %s update", account_id)
            raise InvalidCredentialsError("Wrong password")
        if not accounts.update_fields(account_id, owner_name=owner_name, account_number=account_number):
            raise OperationFailedError("Failed to update Bank Account")
        logger.info("Updated bank account %s", account_id)
        return AccountChanged(
            id=account_id,
            owner_name=owner_name,
            account_number=account_number,
            message="Account changed successfully",
        )

    @classmethod
    async def delete_account(cls, account_id: int, password: str) -> AccountChanged:
        account = await cls.get_account(account_id)
        if not verify_password(password, account["password"]):
            logger.warning("Wrong password for account %s deletion", account_id)
            raise InvalidCredentialsError("Wrong password")
        if not accounts.delete(account_id):
            raise OperationFailedError("Failed to delete Bank Account")
        logger.info("Deleted bank account %s", account_id)
        return AccountChanged(
            id=account_id,
            owner_name=account["owner_name"],
            account_number=account["account_number"],
            message="Account deleted successfully",
        )

    @classmethod
    async def check_password(cls, account_id: int, password: str) -> bool:
        account = await cls.get_account(account_id)
        return verify_password(password, account["password"])

    @classmethod
    async def require_password(cls, account_id: int, password: str) -> None:
        """Raise ``InvalidCredentialsError`` unless ``password`` matches."""
        if not await cls.check_password(account_id, password):
            logger.warning("Wrong password for account %s", account_id)
            raise InvalidCredentialsError("Wrong password")

    @classmethod
    async def change_password(cls, account_id: int, password_old: str, password_new: str) -> None:
        await cls.require_password(account_id, password_old)
        if not accounts.update_fields(account_id, password=hash_password(password_new)):
            raise OperationFailedError("Failed to change password")
        logger.info("Changed password of account %s", account_id)

    # ------------------------------------------------------------------
    # Balance mutations
    # ------------------------------------------------------------------

    @classmethod
    def _mutate_balance(cls, account_id: int, compute: Callable[[Decimal], Decimal]) -> dict:
        """Read, compute and compare-and-swap a single balance."""
        for _ in range(max(settings.balance_update_retries, 1)):
            account = accounts.find_by_id(account_id)
            if not account:
                raise NotFoundError("Unknown Bank Account")
            new_balance = compute(account["balance"])
            if accounts.conditional_update_balance(account_id, account["version"], new_balance):
                return {**account, "balance": new_balance, "version": account["version"] + 1}
            logger.info("Account %s changed concurrently, retrying", account_id)
        raise OperationFailedError("Failed to update balance")

    @staticmethod
    def _amount(amount: Number) -> Decimal:
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValidationFailedError("Amount must be greater than zero")
        return amount

    @classmethod
    async def deposit(cls, account_id: int, amount: Number) -> dict:
        """Add ``amount`` to the balance and return the updated account."""
        amount = cls._amount(amount)
        account = cls._mutate_balance(account_id, lambda balance: balance + amount)
        logger.info("Deposited %s to account %s", amount, account_id)
        return account

    @classmethod
    async def payment(cls, account_id: int, amount: Number) -> dict:
        """Take ``amount`` out of the account for an external payee."""
        amount = cls._amount(amount)

        def debit(balance: Decimal) -> Decimal:
            if balance < amount:
                logger.warning("Payment of %s from account %s refused: balance %s", amount, account_id, balance)
                raise InsufficientFundsError("Balance not enough")
            return balance - amount

        account = cls._mutate_balance(account_id, debit)
        logger.info("Paid %s from account %s", amount, account_id)
        return account

    @classmethod
    async def transfer_balance(cls, source_id: int, target_id: int, amount: Number) -> Tuple[dict, dict]:
        """Move ``amount`` from one account to another.

        Both balances are written in one transaction guarded by the
        versions read here.  Returns the updated source and target.
        """
        amount = cls._amount(amount)
        if source_id == target_id:
            raise ValidationFailedError("Cannot transfer to the same account")
        for _ in range(max(settings.balance_update_retries, 1)):
            source = accounts.find_by_id(source_id)
            target = accounts.find_by_id(target_id)
            if not source or not target:
                raise NotFoundError("Unknown Bank Account")
            if source["balance"] < amount:
                logger.warning(
                    "Transfer of %s from account %s refused: balance %s", amount, source_id, source["balance"]
                )
                raise InsufficientFundsError("Balance not enough")
            source_balance = source["balance"] - amount
            target_balance = target["balance"] + amount
            committed = accounts.apply_balance_changes([
                (source_id, source["version"], source_balance),
                (target_id, target["version"], target_balance),
            ])
            if committed:
                logger.info("Transferred %s from account %s to %s", amount, source_id, target_id)
                return (
                    {**source, "balance": source_balance, "version": source["version"] + 1},
                    {**target, "balance": target_balance, "version": target["version"] + 1},
                )
            logger.info("Accounts %s/%s changed concurrently, retrying", source_id, target_id)
        raise OperationFailedError("Failed to transfer balance")
