"""Loan lifecycle service.

This service handles all loan-related operations including:
- Loan issuance
- Payment application and due date rollover
- Status derivation against an injected clock
- Portfolio queries (overdue loans, outstanding totals)
"""
import math
import numbers
from datetime import date

from dateutil.relativedelta import relativedelta

from microloan.calculator import compute_installment, total_interest, total_payable
from microloan.config import FIRST_DUE_MONTHS, DUE_DATE_ROLLOVER_MONTHS
from microloan.exceptions import DatabaseError, LoanNotFoundError, BorrowerNotFoundError, TransactionError
from microloan.logging_config import get_logger
from microloan.models import Loan, LoanStatus
from microloan.result import Result, ErrorType
from microloan.status import determine_status, is_overdue, with_derived_status
from microloan.validation import is_valid_loan_amount, is_valid_interest_rate, invalid_loan_amount_message

logger = get_logger(__name__)


def _is_positive_number(value):
    if isinstance(value, bool):
        return False
    try:
        return value > 0 and not math.isinf(value)
    except TypeError:
        return False


class LoanService:
    """Handles loan lifecycle operations.

    The service keeps no state between calls: every operation reads what it
    needs from the repository, computes, and writes back.
    """

    def __init__(self, repository, clock=None):
        """Initialize LoanService.

        Args:
            repository: LoanRepository implementation used for persistence.
            clock: Optional callable returning today's date. Defaults to
                ``date.today``; tests pass a fixed date.
        """
        self.repo = repository
        self.clock = clock or date.today

    def _today(self, today=None):
        return today if today is not None else self.clock()

    def _validate_terms(self, principal, annual_rate, term_months):
        """Check amount, rate and tenure in that order; first violation wins."""
        if not is_valid_loan_amount(principal):
            return Result.fail(invalid_loan_amount_message(), ErrorType.INVALID_LOAN_AMOUNT)
        if not is_valid_interest_rate(annual_rate):
            return Result.fail("Interest rate must be between 0 and 100 percent",
                               ErrorType.INVALID_LOAN_AMOUNT)
        if isinstance(term_months, bool) or not isinstance(term_months, numbers.Integral):
            return Result.fail("Loan tenure must be a whole number of months",
                               ErrorType.INVALID_LOAN_AMOUNT)
        if term_months <= 0:
            return Result.fail("Loan tenure must be greater than 0 months",
                               ErrorType.INVALID_LOAN_AMOUNT)
        return None

    def installment_quote(self, principal, annual_rate, term_months):
        """Quote the repayment figures for a prospective loan without issuing it.

        Returns:
            Result holding a dict with ``installment``, ``total_interest``
            and ``total_payable``.
        """
        failure = self._validate_terms(principal, annual_rate, term_months)
        if failure is not None:
            return failure
        installment = compute_installment(principal, annual_rate, term_months)
        return Result.ok({
            'installment': installment,
            'total_interest': total_interest(installment, term_months, principal),
            'total_payable': total_payable(installment, term_months)
        })

    def issue_loan(self, borrower_id, borrower_name, principal, annual_rate, term_months):
        """Issue a new loan.

        Args:
            borrower_id: ID of the borrower receiving the loan.
            borrower_name: Name of the borrower, must not be blank.
            principal: Loan principal amount.
            annual_rate: Annual interest rate in percent.
            term_months: Loan duration in months.

        Returns:
            Result holding the persisted Loan. Failure tags:
            INVALID_LOAN_AMOUNT, BORROWER_NOT_FOUND or PERSISTENCE_FAILURE.
        """
        failure = self._validate_terms(principal, annual_rate, term_months)
        if failure is not None:
            logger.warning("Loan issuance rejected: %s", failure.error)
            return failure

        if (isinstance(borrower_id, bool) or not isinstance(borrower_id, numbers.Integral) or borrower_id <= 0
                or not isinstance(borrower_name, str) or not borrower_name.strip()):
            logger.warning("Loan issuance rejected: invalid borrower reference %r", borrower_id)
            return Result.fail("Valid borrower must be selected", ErrorType.BORROWER_NOT_FOUND)

        installment = compute_installment(principal, annual_rate, term_months)
        issue_date = self._today()
        loan = Loan(
            borrower_id=borrower_id,
            borrower_name=borrower_name.strip(),
            principal=principal,
            outstanding_balance=principal,
            interest_rate=annual_rate,
            issue_date=issue_date,
            due_date=issue_date + relativedelta(months=FIRST_DUE_MONTHS),
            term_months=term_months,
            installment=installment,
            status=LoanStatus.ACTIVE
        )

        try:
            with self.repo.transaction():
                borrower = self.repo.get_borrower_by_id(borrower_id)
                if borrower is None:
                    raise BorrowerNotFoundError(borrower_id)
                loan.borrower_name = borrower.name
                if not self.repo.create_loan(loan):
                    raise TransactionError("Failed to create loan in database",
                                           {'borrower_id': borrower_id})
        except BorrowerNotFoundError as e:
            logger.warning("Loan issuance rejected: %s", e)
            return Result.fail(e.message, ErrorType.BORROWER_NOT_FOUND)
        except DatabaseError as e:
            logger.exception("Loan issuance failed for borrower %s", borrower_id)
            return Result.fail(e.message, ErrorType.PERSISTENCE_FAILURE)

        logger.info("Issued loan %s to borrower %s: principal=%s rate=%s%% term=%sm",
                    loan.id, borrower_id, principal, annual_rate, term_months)
        return Result.ok(loan)

    def record_payment(self, loan_id, payment_amount):
        """Apply a payment to a loan's outstanding balance.

        The balance decrement, due date rollover and cached status refresh
        run in one repository transaction keyed by the loan id. Payments
        larger than the outstanding balance are refused.

        Args:
            loan_id: ID of the loan being paid.
            payment_amount: Amount paid, must be positive.

        Returns:
            Result holding True on success. Failure tags: INVALID_PAYMENT,
            LOAN_NOT_FOUND or PERSISTENCE_FAILURE.
        """
        if not _is_positive_number(payment_amount):
            logger.warning("Payment rejected for loan %s: amount %r", loan_id, payment_amount)
            return Result.fail("Payment amount must be greater than 0", ErrorType.INVALID_PAYMENT)

        try:
            with self.repo.transaction():
                loan = self.repo.get_loan_by_id(loan_id)
                if loan is None:
                    raise LoanNotFoundError(loan_id)
                if payment_amount > loan.outstanding_balance:
                    logger.warning("Payment rejected for loan %s: %s exceeds balance %s",
                                   loan_id, payment_amount, loan.outstanding_balance)
                    return Result.fail(
                        f"Payment of {payment_amount} exceeds outstanding balance "
                        f"{loan.outstanding_balance}",
                        ErrorType.INVALID_PAYMENT)

                if not self.repo.decrement_balance(loan_id, payment_amount):
                    raise TransactionError("Balance update was rejected by the store",
                                           {'loan_id': loan_id})

                updated = self.repo.get_loan_by_id(loan_id)
                if updated is None:
                    raise LoanNotFoundError(loan_id)
                if updated.outstanding_balance > 0:
                    updated.due_date = updated.due_date + relativedelta(months=DUE_DATE_ROLLOVER_MONTHS)
                updated.status = determine_status(updated, self._today())
                if not self.repo.update_loan(updated):
                    raise TransactionError("Failed to update loan after payment",
                                           {'loan_id': loan_id})
        except LoanNotFoundError as e:
            logger.warning("Payment rejected: %s", e)
            return Result.fail(e.message, ErrorType.LOAN_NOT_FOUND)
        except DatabaseError as e:
            logger.exception("Payment failed for loan %s", loan_id)
            return Result.fail(e.message, ErrorType.PERSISTENCE_FAILURE)

        logger.info("Recorded payment of %s on loan %s, balance now %s (%s)",
                    payment_amount, loan_id, updated.outstanding_balance, updated.status.value)
        return Result.ok(True)

    def get_loan(self, loan_id, today=None):
        """Fetch a loan with its status reconciled against ``today``."""
        loan = self.repo.get_loan_by_id(loan_id)
        if loan is None:
            return Result.fail(LoanNotFoundError(loan_id).message, ErrorType.LOAN_NOT_FOUND)
        return Result.ok(with_derived_status(loan, self._today(today)))

    def determine_status(self, loan, today=None):
        return determine_status(loan, self._today(today))

    def is_overdue(self, loan, today=None):
        return is_overdue(loan, self._today(today))

    # Portfolio queries
    def list_loans(self, today=None):
        """All loans, newest first, each with a freshly derived status."""
        today = self._today(today)
        return [with_derived_status(l, today) for l in self.repo.list_all_loans()]

    def list_active_loans(self, today=None):
        """Loans that still carry a balance (ACTIVE or OVERDUE)."""
        return [l for l in self.list_loans(today) if l.status != LoanStatus.PAID_OFF]

    def list_overdue_loans(self, today=None):
        return [l for l in self.list_loans(today) if l.status == LoanStatus.OVERDUE]

    def overdue_count(self, today=None):
        return len(self.list_overdue_loans(today))

    def total_outstanding(self):
        return sum(l.outstanding_balance for l in self.repo.list_all_loans())

    def total_principal_outstanding(self):
        """Same figure as total_outstanding; payments reduce principal only."""
        return self.total_outstanding()

    def reconcile_statuses(self, today=None):
        """Rewrite cached statuses that no longer match the derivation.

        Returns:
            Number of loans whose stored status changed.
        """
        today = self._today(today)
        changed = 0
        with self.repo.transaction():
            for loan in self.repo.list_all_loans():
                derived = determine_status(loan, today)
                if loan.status != derived and self.repo.update_status(loan.id, derived):
                    changed += 1
        if changed:
            logger.info("Reconciled status of %d loans as of %s", changed, today)
        return changed
