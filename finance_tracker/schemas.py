from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from .models import Category, TransactionType


class CamelModel(BaseModel):
    # snake_case in Python, camelCase on the wire
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------- Users ----------
class RegisterIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class MessageOut(BaseModel):
    message: str


class TokenOut(MessageOut):
    token: str


class UserOut(CamelModel):
    id: int
    name: str
    email: str
    created_at: datetime


# ---------- Transactions ----------
class TransactionIn(CamelModel):
    transaction_type: TransactionType
    category: Category
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    date: datetime
    notes: Optional[str] = None


class TransactionOut(CamelModel):
    id: int
    user_id: int
    transaction_type: TransactionType
    category: Category
    amount: float
    date: datetime
    notes: Optional[str] = None


class TransactionCreatedOut(MessageOut):
    transaction: TransactionOut


class SummaryIn(CamelModel):
    start_date: datetime
    end_date: datetime


class SummaryOut(CamelModel):
    total_credit: float
    total_debit: float
    category_summary: Dict[str, float]


class BalanceOut(BaseModel):
    balance: float


class TaxSummaryOut(CamelModel):
    total_income: float
