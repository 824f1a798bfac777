# payroll_api/services/payroll_register.py
"""Monthly payroll register as an XLSX workbook (one row per payslip)."""
from __future__ import annotations

from io import BytesIO
from typing import Iterable, List

from openpyxl import Workbook

FIXED_HEADERS = ["SR.NO", "EMP CODE", "NAME", "WORKING DAYS", "PAID DAYS", "ABSENT DAYS"]
TOTAL_HEADERS = ["GROSS EARNINGS", "TOTAL DEDUCTIONS", "NET SALARY", "NEEDS REVIEW"]


def _component_columns(rows: List[dict]):
    """Earning names first, then Deduction names, each in first-seen order."""
    earnings, deductions = [], []
    for r in rows:
        for c in r.get("components") or []:
            bucket = earnings if c.get("category") == "Earning" else deductions
            if c.get("name") not in bucket:
                bucket.append(c.get("name"))
    return earnings, deductions


def build_register(rows: Iterable[dict], month: int, year: int) -> BytesIO:
    """``rows`` are payslip dicts as returned by ``payslip_row_dict``."""
    rows = list(rows)
    earnings, deductions = _component_columns(rows)

    wb = Workbook()
    ws = wb.active
    ws.title = f"PAYROLL {int(month):02d}-{year}"
    ws.append(FIXED_HEADERS + [e.upper() for e in earnings] + [d.upper() for d in deductions] + TOTAL_HEADERS)

    for i, r in enumerate(rows, start=1):
        b = r.get("breakdown") or {}
        paid_days = float(b.get("present_days") or 0) + float(b.get("paid_leave_days") or 0)
        amounts = {(c.get("category"), c.get("name")): c.get("amount") for c in r.get("components") or []}
        ws.append(
            [i, r.get("employee_code"), r.get("employee_name"),
             b.get("working_days"), paid_days, b.get("absent_days")]
            + [amounts.get(("Earning", n), 0) for n in earnings]
            + [amounts.get(("Deduction", n), 0) for n in deductions]
            + [r.get("gross_earnings"), r.get("total_deductions"), r.get("net_salary"),
               "YES" if r.get("needs_review") else ""]
        )

    bio = BytesIO()
    wb.save(bio)
    bio.seek(0)
    return bio
