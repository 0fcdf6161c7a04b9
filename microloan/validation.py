"""Validation rules for loan and borrower input.

Every rule is a pure predicate: it returns a bool and never raises, so
callers decide what a failed check means for them.
"""
import re

from microloan.config import (
    MIN_LOAN_AMOUNT,
    MAX_LOAN_AMOUNT,
    MIN_INTEREST_RATE,
    MAX_INTEREST_RATE,
    MIN_PHONE_DIGITS,
    MAX_PHONE_DIGITS,
    PHONE_SEPARATORS,
)

_SEPARATOR_PATTERN = re.compile("[" + re.escape(PHONE_SEPARATORS) + "]")
_DIGITS_PATTERN = re.compile(r"[0-9]{%d,%d}" % (MIN_PHONE_DIGITS, MAX_PHONE_DIGITS))


def _in_range(value, low, high):
    if isinstance(value, bool):
        return False
    try:
        return low <= value <= high
    except TypeError:
        return False


def is_valid_loan_amount(amount) -> bool:
    return _in_range(amount, MIN_LOAN_AMOUNT, MAX_LOAN_AMOUNT)


def invalid_loan_amount_message() -> str:
    """Error message describing the accepted loan amount range."""
    return f"Loan amount must be between ${MIN_LOAN_AMOUNT:.2f} and ${MAX_LOAN_AMOUNT:.2f}"


def is_valid_interest_rate(rate) -> bool:
    return _in_range(rate, MIN_INTEREST_RATE, MAX_INTEREST_RATE)


def is_valid_income(income) -> bool:
    if isinstance(income, bool):
        return False
    try:
        return income > 0
    except TypeError:
        return False


def is_valid_phone_number(text) -> bool:
    """Accept 10-15 digits once spaces, dashes, dots and parentheses are removed."""
    if not isinstance(text, str) or not text.strip():
        return False
    cleaned = _SEPARATOR_PATTERN.sub("", text)
    return _DIGITS_PATTERN.fullmatch(cleaned) is not None
