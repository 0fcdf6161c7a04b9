"""Domain records for borrowers and loans."""
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Optional


class LoanStatus(str, Enum):
    """Derived lifecycle classification of a loan."""
    ACTIVE = "ACTIVE"
    OVERDUE = "OVERDUE"
    PAID_OFF = "PAID_OFF"


@dataclass
class Borrower:
    name: str
    email: str
    phone: str
    address: str
    income: float
    id: Optional[int] = None


@dataclass
class Loan:
    """A loan issued to a borrower.
    
    ``principal``, ``interest_rate`` and ``issue_date`` are fixed at issuance.
    ``outstanding_balance`` only goes down, never below zero, and
    ``due_date`` rolls forward after each payment that leaves a balance.
    
    ``status`` is a cached copy of the derived status. It can go stale as
    days pass; use ``microloan.status.determine_status`` for the real value.
    """
    borrower_id: int
    borrower_name: str
    principal: float
    outstanding_balance: float
    interest_rate: float
    issue_date: date
    due_date: date
    term_months: int = 0
    installment: float = 0.0
    status: LoanStatus = LoanStatus.ACTIVE
    id: Optional[int] = None

    def copy(self, **changes) -> 'Loan':
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


@dataclass
class InstallmentRow:
    """One period of an amortization schedule."""
    period: int
    payment: float
    interest_portion: float
    principal_portion: float
    remaining_balance: float
