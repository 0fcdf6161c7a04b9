"""Loan status derivation.

Status is never stored as a fact. It is always recomputed from the
outstanding balance and the due date relative to a caller-supplied day.
"""
from datetime import date, datetime

from microloan.models import Loan, LoanStatus


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_overdue(loan: Loan, today: date) -> bool:
    """True if ``today`` is strictly after the due date and money is still owed."""
    return _as_date(today) > _as_date(loan.due_date) and loan.outstanding_balance > 0


def determine_status(loan: Loan, today: date) -> LoanStatus:
    """Classify a loan as PAID_OFF, OVERDUE or ACTIVE (in that precedence)."""
    if loan.outstanding_balance <= 0:
        return LoanStatus.PAID_OFF
    if is_overdue(loan, today):
        return LoanStatus.OVERDUE
    return LoanStatus.ACTIVE


def with_derived_status(loan: Loan, today: date) -> Loan:
    """Copy of ``loan`` whose cached status matches the derivation."""
    return loan.copy(status=determine_status(loan, today))
