"""Services package for microloan business logic.

This package contains the lifecycle services that orchestrate the
calculator, validation rules and status deriver over a repository.
"""

from .loan_service import LoanService
from .borrower_service import BorrowerService

__all__ = ['LoanService', 'BorrowerService']
