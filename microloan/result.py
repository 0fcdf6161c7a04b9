"""Tagged outcomes for the lifecycle services.

Service operations hand back a ``Result`` instead of raising. A failed
result carries a human readable ``error`` and one of the ``ErrorType``
tags, and callers branch on the tag:

    result = service.record_payment(loan_id, 250)
    if not result:
        if result.error_type == ErrorType.LOAN_NOT_FOUND:
            ...
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


class ErrorType:
    """Failure tags returned by the lifecycle services."""
    INVALID_LOAN_AMOUNT = "INVALID_LOAN_AMOUNT"
    BORROWER_NOT_FOUND = "BORROWER_NOT_FOUND"
    INVALID_PAYMENT = "INVALID_PAYMENT"
    LOAN_NOT_FOUND = "LOAN_NOT_FOUND"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
    VALIDATION = "VALIDATION"

    ALL = frozenset({
        INVALID_LOAN_AMOUNT, BORROWER_NOT_FOUND, INVALID_PAYMENT,
        LOAN_NOT_FOUND, PERSISTENCE_FAILURE, VALIDATION,
    })


@dataclass(frozen=True)
class Result(Generic[T]):
    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def ok(cls, value: T = None) -> 'Result[T]':
        return cls(True, value)

    @classmethod
    def fail(cls, error: str, error_type: Optional[str] = None) -> 'Result[T]':
        """Build a failed result.

        Raises:
            ValueError: If ``error_type`` is given but is not an ErrorType tag.
        """
        if error_type is not None and error_type not in ErrorType.ALL:
            raise ValueError(f"Unknown error type: {error_type!r}")
        return cls(False, error=error, error_type=error_type)

    def __bool__(self) -> bool:
        return self.success

    def failed_with(self, error_type: str) -> bool:
        """True when this is a failure tagged ``error_type``."""
        return not self.success and self.error_type == error_type

    def unwrap(self) -> T:
        if self.success:
            return self.value
        tag = f" [{self.error_type}]" if self.error_type else ""
        raise ValueError(f"Result unwrap failed{tag}: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return self.value if self.success else default
