"""In-memory implementation of the persistence port.

Used by tests and by callers that want the engine without a database.
Records are copied on the way in and out, so callers never hold a live
reference into the store.
"""
import copy
import threading
from contextlib import contextmanager

from microloan.exceptions import BorrowerNotFoundError
from microloan.models import LoanStatus
from microloan.repository import LoanRepository


class InMemoryRepository(LoanRepository):
    """Dictionary-backed store with snapshot rollback for transactions."""

    def __init__(self):
        self._loans = {}
        self._borrowers = {}
        self._next_loan_id = 1
        self._next_borrower_id = 1
        self._lock = threading.RLock()
        self._tx_depth = 0
        self.closed = False

    def close(self):
        self.closed = True

    @contextmanager
    def transaction(self):
        with self._lock:
            snapshot = None
            if self._tx_depth == 0:
                snapshot = (copy.deepcopy(self._loans), copy.deepcopy(self._borrowers),
                            self._next_loan_id, self._next_borrower_id)
            self._tx_depth += 1
            try:
                yield
            except Exception:
                if snapshot is not None:
                    (self._loans, self._borrowers,
                     self._next_loan_id, self._next_borrower_id) = snapshot
                raise
            finally:
                self._tx_depth -= 1

    def _attach_name(self, loan):
        result = copy.copy(loan)
        borrower = self._borrowers.get(loan.borrower_id)
        if borrower is not None:
            result.borrower_name = borrower.name
        return result

    # Loan operations
    def create_loan(self, loan):
        with self._lock:
            if loan.borrower_id not in self._borrowers:
                raise BorrowerNotFoundError(loan.borrower_id)
            loan.id = self._next_loan_id
            self._next_loan_id += 1
            self._loans[loan.id] = copy.copy(loan)
            return loan.id

    def get_loan_by_id(self, loan_id):
        with self._lock:
            loan = self._loans.get(loan_id)
            return self._attach_name(loan) if loan is not None else None

    def list_all_loans(self):
        with self._lock:
            loans = sorted(self._loans.values(), key=lambda l: (l.issue_date, l.id), reverse=True)
            return [self._attach_name(l) for l in loans]

    def list_loans_for_borrower(self, borrower_id):
        return [l for l in self.list_all_loans() if l.borrower_id == borrower_id]

    def decrement_balance(self, loan_id, amount):
        with self._lock:
            loan = self._loans.get(loan_id)
            if loan is None or loan.outstanding_balance < amount:
                return False
            loan.outstanding_balance = max(loan.outstanding_balance - amount, 0.0)
            return True

    def update_loan(self, loan):
        with self._lock:
            stored = self._loans.get(loan.id)
            if stored is None:
                return False
            stored.outstanding_balance = loan.outstanding_balance
            stored.due_date = loan.due_date
            stored.status = LoanStatus(loan.status)
            return True

    def update_status(self, loan_id, status):
        with self._lock:
            stored = self._loans.get(loan_id)
            if stored is None:
                return False
            stored.status = LoanStatus(status)
            return True

    # Borrower operations
    def create_borrower(self, borrower):
        with self._lock:
            borrower.id = self._next_borrower_id
            self._next_borrower_id += 1
            self._borrowers[borrower.id] = copy.copy(borrower)
            return borrower.id

    def get_borrower_by_id(self, borrower_id):
        with self._lock:
            borrower = self._borrowers.get(borrower_id)
            return copy.copy(borrower) if borrower is not None else None

    def list_all_borrowers(self):
        with self._lock:
            return [copy.copy(b) for _, b in sorted(self._borrowers.items(), reverse=True)]

    def search_borrowers_by_name(self, name):
        needle = name.lower()
        with self._lock:
            matches = [b for b in self._borrowers.values() if needle in b.name.lower()]
            return [copy.copy(b) for b in sorted(matches, key=lambda b: (b.name, b.id))]

    def update_borrower(self, borrower):
        with self._lock:
            if borrower.id not in self._borrowers:
                return False
            self._borrowers[borrower.id] = copy.copy(borrower)
            return True

    def delete_borrower(self, borrower_id):
        with self._lock:
            return self._borrowers.pop(borrower_id, None) is not None
