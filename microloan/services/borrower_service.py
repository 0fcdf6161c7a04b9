"""Borrower management service."""
from microloan.exceptions import DatabaseError, BorrowerNotFoundError
from microloan.logging_config import get_logger
from microloan.models import Borrower
from microloan.result import Result, ErrorType
from microloan.validation import is_valid_income, is_valid_phone_number

logger = get_logger(__name__)


class BorrowerService:
    """Registers, updates and removes borrowers."""

    def __init__(self, repository):
        self.repo = repository

    def _validate(self, name, phone, income):
        if not isinstance(name, str) or not name.strip():
            return Result.fail("Borrower name is required", ErrorType.VALIDATION)
        if not is_valid_phone_number(phone):
            return Result.fail("Phone number must contain 10 to 15 digits", ErrorType.VALIDATION)
        if not is_valid_income(income):
            return Result.fail("Income must be greater than 0", ErrorType.VALIDATION)
        return None

    def register_borrower(self, name, email, phone, address, income):
        """Create a borrower record.

        Returns:
            Result holding the stored Borrower with its assigned id.
        """
        failure = self._validate(name, phone, income)
        if failure is not None:
            return failure

        borrower = Borrower(name=name.strip(), email=email, phone=phone,
                            address=address, income=income)
        try:
            if not self.repo.create_borrower(borrower):
                return Result.fail("Failed to create borrower in database",
                                   ErrorType.PERSISTENCE_FAILURE)
        except DatabaseError as e:
            logger.exception("Could not register borrower %r", name)
            return Result.fail(e.message, ErrorType.PERSISTENCE_FAILURE)

        logger.info("Registered borrower %s (%s)", borrower.id, borrower.name)
        return Result.ok(borrower)

    def update_borrower(self, borrower):
        failure = self._validate(borrower.name, borrower.phone, borrower.income)
        if failure is not None:
            return failure
        try:
            if not self.repo.update_borrower(borrower):
                return Result.fail(BorrowerNotFoundError(borrower.id).message,
                                   ErrorType.BORROWER_NOT_FOUND)
        except DatabaseError as e:
            logger.exception("Could not update borrower %s", borrower.id)
            return Result.fail(e.message, ErrorType.PERSISTENCE_FAILURE)
        return Result.ok(borrower)

    def get_borrower(self, borrower_id):
        borrower = self.repo.get_borrower_by_id(borrower_id)
        if borrower is None:
            return Result.fail(BorrowerNotFoundError(borrower_id).message,
                               ErrorType.BORROWER_NOT_FOUND)
        return Result.ok(borrower)

    def list_borrowers(self):
        return self.repo.list_all_borrowers()

    def search_borrowers(self, name):
        """Borrowers whose name contains ``name``; a blank query lists everyone."""
        if not isinstance(name, str) or not name.strip():
            return self.repo.list_all_borrowers()
        return self.repo.search_borrowers_by_name(name.strip())

    def delete_borrower(self, borrower_id):
        """Delete a borrower that has no loan history.

        Loans are never removed by the engine, so a borrower with any loan
        on record (even a paid-off one) cannot be deleted here.
        """
        try:
            if self.repo.list_loans_for_borrower(borrower_id):
                return Result.fail("Borrower has loans on record and cannot be deleted",
                                   ErrorType.VALIDATION)
            if not self.repo.delete_borrower(borrower_id):
                return Result.fail(BorrowerNotFoundError(borrower_id).message,
                                   ErrorType.BORROWER_NOT_FOUND)
        except DatabaseError as e:
            logger.exception("Could not delete borrower %s", borrower_id)
            return Result.fail(e.message, ErrorType.PERSISTENCE_FAILURE)

        logger.info("Deleted borrower %s", borrower_id)
        return Result.ok(True)
