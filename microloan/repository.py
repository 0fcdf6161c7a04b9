"""Persistence port consumed by the lifecycle services.

Concrete stores (SQLite, in-memory) implement this interface and are
passed into the services explicitly; nothing in the engine holds a global
connection.
"""
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import List, Optional

from microloan.models import Borrower, Loan, LoanStatus


class LoanRepository(ABC):
    """Storage capability for loans and borrowers.
    
    Repositories are context managers: leaving the ``with`` block closes
    the underlying resources.
    """

    # Loans
    @abstractmethod
    def create_loan(self, loan: Loan) -> Optional[int]:
        """Persist a new loan and return its id (also set on ``loan.id``).
        
        Returns None when nothing was written.
        
        Raises:
            BorrowerNotFoundError: If ``loan.borrower_id`` is not a stored borrower.
            DatabaseError: For any other storage failure.
        """

    @abstractmethod
    def get_loan_by_id(self, loan_id: int) -> Optional[Loan]:
        pass

    @abstractmethod
    def list_all_loans(self) -> List[Loan]:
        """All loans, newest issue date first."""

    @abstractmethod
    def list_loans_for_borrower(self, borrower_id: int) -> List[Loan]:
        pass

    @abstractmethod
    def decrement_balance(self, loan_id: int, amount: float) -> bool:
        """Atomically subtract ``amount`` from the outstanding balance.
        
        The decrement only happens when the balance covers the amount, so
        the stored balance can never go below zero. Returns False when no
        row was changed.
        """

    @abstractmethod
    def update_loan(self, loan: Loan) -> bool:
        """Write back the mutable fields: balance, due date and cached status."""

    @abstractmethod
    def update_status(self, loan_id: int, status: LoanStatus) -> bool:
        pass

    # Borrowers
    @abstractmethod
    def create_borrower(self, borrower: Borrower) -> Optional[int]:
        pass

    @abstractmethod
    def get_borrower_by_id(self, borrower_id: int) -> Optional[Borrower]:
        pass

    @abstractmethod
    def list_all_borrowers(self) -> List[Borrower]:
        pass

    @abstractmethod
    def search_borrowers_by_name(self, name: str) -> List[Borrower]:
        """Borrowers whose name contains ``name``, case-insensitively, ordered by name."""

    @abstractmethod
    def update_borrower(self, borrower: Borrower) -> bool:
        pass

    @abstractmethod
    def delete_borrower(self, borrower_id: int) -> bool:
        pass

    # Lifecycle
    @contextmanager
    def transaction(self):
        """Group several calls into one unit that commits or rolls back together."""
        yield

    def close(self):
        """Release any held resources."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
