from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from .. import crud, summaries
from ..auth import get_current_user_id
from ..database import get_db
from ..export import build_workbook, export_filename
from ..models import TransactionType
from ..schemas import (
    BalanceOut,
    MessageOut,
    SummaryIn,
    SummaryOut,
    TaxSummaryOut,
    TransactionCreatedOut,
    TransactionIn,
    TransactionOut,
)

router = APIRouter(prefix="/api/transaction", tags=["transactions"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("/add", response_model=TransactionCreatedOut, status_code=status.HTTP_201_CREATED)
def add_transaction(
    payload: TransactionIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    transaction = crud.add_transaction(
        db,
        owner_id=user_id,
        transaction_type=payload.transaction_type,
        category=payload.category,
        amount=payload.amount,
        date=payload.date,
        notes=payload.notes,
    )
    return {"message": "Transaction added successfully", "transaction": transaction}


@router.delete("/delete/{transaction_id}", response_model=MessageOut)
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    crud.delete_by_id(db, owner_id=user_id, transaction_id=transaction_id)
    return {"message": "Transaction deleted successfully"}


@router.get("/view", response_model=List[TransactionOut])
def view_transactions(db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return crud.list_by_owner(db, user_id)


@router.get("/totalBalance", response_model=BalanceOut)
def total_balance(db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    transactions = crud.list_by_owner(db, user_id)
    return {"balance": summaries.balance(transactions)}


@router.post("/transactions-summary", response_model=SummaryOut)
def transactions_summary(
    payload: SummaryIn,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    transactions = crud.list_by_owner_in_range(db, user_id, payload.start_date, payload.end_date)
    return summaries.summarize(transactions)


@router.get("/taxSummary", response_model=TaxSummaryOut)
def tax_summary(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1, le=9999),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    start, end = summaries.month_bounds(month, year)
    income = crud.list_by_owner_in_range(db, user_id, start, end, transaction_type=TransactionType.CREDIT)
    return {"totalIncome": summaries.monthly_income(income, month, year)}


@router.get("/export")
def export_transactions(
    year: int = Query(..., ge=1, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    if month:
        start, end = summaries.month_bounds(month, year)
    else:
        start = datetime(year, 1, 1)
        end = summaries.month_bounds(12, year)[1]

    transactions = crud.list_by_owner_in_range(db, user_id, start, end)
    stream = build_workbook(transactions)

    return StreamingResponse(
        stream,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={export_filename(year, month)}"},
    )
