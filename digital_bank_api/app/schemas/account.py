"""
Pydantic models for bank account payloads.

Request bodies use the field names clients already send
(``name``, ``accountNumber``, ``deposit`` ...); responses use
snake_case.  Names and bank codes are upper-cased on input.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .common import Money, PageMeta, check_password_strength, ensure_confirmed

ACCOUNT_NUMBER_PATTERN = r"^[0-9]{9}$"


class AccountCreate(BaseModel):
    """Schema for opening a bank account."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100, examples=["ALICE"])
    account_number: str = Field(..., alias="accountNumber", pattern=ACCOUNT_NUMBER_PATTERN, examples=["123456789"])
    bank: str = Field(..., min_length=1, max_length=20, examples=["ABC"])
    deposit: Money = Field(..., ge=1, decimal_places=2, examples=["50000.00"])
    password: str = Field(..., examples=["Secret-1"])
    password_confirm: str = Field(..., min_length=1, examples=["Secret-1"])

    @field_validator("name", "bank")
    @classmethod
    def to_upper(cls, v: str) -> str:
        return v.upper()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self):
        return ensure_confirmed(self)


class AccountUpdate(BaseModel):
    """Schema for renaming an account or changing its number."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    account_number: str = Field(..., alias="accountNumber", pattern=ACCOUNT_NUMBER_PATTERN)
    password: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def to_upper(cls, v: str) -> str:
        return v.upper()


class AccountDelete(BaseModel):
    password: str = Field(..., min_length=1)


class DepositRequest(BaseModel):
    amount: Money = Field(..., ge=1, decimal_places=2, examples=["10000.00"])


class PaymentRequest(BaseModel):
    """Payment to a payee outside the system."""

    bank: str = Field(..., min_length=1, max_length=20, examples=["XYZ"])
    amount: Money = Field(..., ge=1, decimal_places=2, examples=["2500.50"])
    title: str = Field(..., min_length=1, max_length=200, examples=["Electricity bill"])
    password: str = Field(..., min_length=1)

    @field_validator("bank")
    @classmethod
    def to_upper(cls, v: str) -> str:
        return v.upper()


class TransferRequest(BaseModel):
    bank: str = Field(..., min_length=1, max_length=20)
    amount: Money = Field(..., ge=1, decimal_places=2)
    password: str = Field(..., min_length=1)


class AccountRead(BaseModel):
    """Account as listed by the API.  Never carries the password."""

    id: int
    owner_name: str
    account_number: str
    bank: str
    balance: Money


class AccountCreated(BaseModel):
    owner_name: str
    account_number: str
    bank: str
    balance: Money


class BalanceRead(BaseModel):
    id: int
    owner_name: str
    balance: Money


class AccountChanged(BaseModel):
    id: int
    owner_name: str
    account_number: str
    message: str


class DepositResult(BaseModel):
    id: int
    owner_name: str
    amount: Money
    message: str = "Deposit success"


class PaymentResult(BaseModel):
    id: int
    bank: str
    amount: Money
    title: str
    message: str = "Payment success"


class TransferResult(BaseModel):
    id: int
    owner_name: str
    bank: str
    amount: Money
    message: str = "Transfer success"


class AccountPage(PageMeta):
    data: List[AccountRead]
