import math
from datetime import datetime, timezone
from typing import List, Optional, Union

import structlog
from sqlalchemy.orm import Session

from .errors import Forbidden, NotFound, ValidationError
from .models import NOTES_MAX_LENGTH, Category, Transaction, TransactionType, User

logger = structlog.get_logger(__name__)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ---------- Users ----------
def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def create_user(db: Session, name: str, email: str, hashed_password: str) -> User:
    user = User(name=name, email=email, hashed_password=hashed_password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# ---------- Transactions ----------
def add_transaction(
    db: Session,
    owner_id: int,
    transaction_type: Union[TransactionType, str],
    category: Union[Category, str],
    amount: float,
    date: datetime,
    notes: Optional[str] = None,
) -> Transaction:
    try:
        transaction_type = TransactionType(transaction_type)
    except ValueError:
        raise ValidationError(f"Invalid transaction type: {transaction_type!r}")

    try:
        category = Category(category)
    except ValueError:
        raise ValidationError(f"Invalid category: {category!r}")

    if amount is None or not math.isfinite(amount) or amount < 0:
        raise ValidationError("Amount must be a finite, non-negative number")

    if date is None:
        raise ValidationError("Date is required")

    if notes is not None:
        notes = notes.strip()
        if len(notes) > NOTES_MAX_LENGTH:
            raise ValidationError(f"Notes must be at most {NOTES_MAX_LENGTH} characters")

    transaction = Transaction(
        user_id=owner_id,
        transaction_type=transaction_type.value,
        category=category.value,
        amount=float(amount),
        date=to_naive_utc(date),
        notes=notes,
    )
    db.add(transaction)
    db.commit()
    db.refresh(transaction)

    logger.info("transaction_added", user_id=owner_id, transaction_id=transaction.id,
                transaction_type=transaction.transaction_type, category=transaction.category)
    return transaction


def list_by_owner(db: Session, owner_id: int) -> List[Transaction]:
    return (
        db.query(Transaction)
        .filter(Transaction.user_id == owner_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
        .all()
    )


def list_by_owner_in_range(
    db: Session,
    owner_id: int,
    start: datetime,
    end: datetime,
    transaction_type: Optional[TransactionType] = None,
) -> List[Transaction]:
    query = db.query(Transaction).filter(
        Transaction.user_id == owner_id,
        Transaction.date >= to_naive_utc(start),
        Transaction.date <= to_naive_utc(end),
    )
    if transaction_type is not None:
        query = query.filter(Transaction.transaction_type == TransactionType(transaction_type).value)

    return query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()


def delete_by_id(db: Session, owner_id: int, transaction_id: int) -> None:
    transaction = db.query(Transaction).filter(Transaction.id == transaction_id).first()
    if transaction is None:
        raise NotFound("Transaction not found")

    if transaction.user_id != owner_id:
        logger.warning("transaction_delete_forbidden", user_id=owner_id, transaction_id=transaction_id)
        raise Forbidden("Not authorized to delete this transaction")

    db.delete(transaction)
    db.commit()
    logger.info("transaction_deleted", user_id=owner_id, transaction_id=transaction_id)
