import io
from typing import Iterable, Optional

import openpyxl

HEADER = ["ID", "Type", "Category", "Amount", "Date", "Notes"]


def build_workbook(transactions: Iterable) -> io.BytesIO:
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "Transactions"

    sheet.append(HEADER)
    for t in transactions:
        sheet.append([
            t.id,
            t.transaction_type,
            t.category,
            t.amount,
            t.date,
            t.notes or "",
        ])

    stream = io.BytesIO()
    workbook.save(stream)
    stream.seek(0)
    return stream


def export_filename(year: int, month: Optional[int] = None) -> str:
    filename = f"transactions_{year}"
    if month:
        filename += f"_{month}"
    return filename + ".xlsx"
