import calendar
from datetime import datetime
from typing import Dict, Iterable, Tuple

from .models import TransactionType


def _is_credit(transaction) -> bool:
    return transaction.transaction_type == TransactionType.CREDIT.value


def _is_debit(transaction) -> bool:
    return transaction.transaction_type == TransactionType.DEBIT.value


def _category_key(category) -> str:
    return getattr(category, "value", category)


def summarize(transactions: Iterable) -> Dict[str, object]:
    """Credit and debit totals plus a per-category total.

    Category totals add every amount regardless of type, so the values of
    ``categorySummary`` always sum to ``totalCredit + totalDebit``.
    """
    total_credit = 0.0
    total_debit = 0.0
    category_summary: Dict[str, float] = {}

    for t in transactions:
        if _is_credit(t):
            total_credit += t.amount
        elif _is_debit(t):
            total_debit += t.amount

        key = _category_key(t.category)
        category_summary[key] = category_summary.get(key, 0.0) + t.amount

    return {
        "totalCredit": total_credit,
        "totalDebit": total_debit,
        "categorySummary": category_summary,
    }


def month_bounds(month: int, year: int) -> Tuple[datetime, datetime]:
    """First and last instant of a calendar month, both inclusive."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime(year, month, last_day, 23, 59, 59, 999999)
    return start, end


def monthly_income(transactions: Iterable, month: int, year: int) -> float:
    start, end = month_bounds(month, year)
    return sum(
        (t.amount for t in transactions if _is_credit(t) and start <= t.date <= end),
        0.0,
    )


def balance(transactions: Iterable) -> float:
    total = 0.0
    for t in transactions:
        if _is_credit(t):
            total += t.amount
        elif _is_debit(t):
            total -= t.amount
    return total
