"""Installment math for fixed-rate amortized loans.

EMI = P * r * (1+r)^n / ((1+r)^n - 1)

where P is the principal, r the monthly rate (annual percent / 12 / 100)
and n the term in months. All values are plain floats; rounding to
currency precision is left to whoever displays them.
"""
import math
from typing import List

from microloan.exceptions import InvalidCalculationInputError
from microloan.models import InstallmentRow


def monthly_rate(annual_rate_percent: float) -> float:
    """Convert an annual percentage rate to a monthly fractional rate."""
    return annual_rate_percent / 12.0 / 100.0


def compute_installment(principal: float, annual_rate_percent: float, term_months: int) -> float:
    """Calculate the fixed monthly installment (EMI).
    
    Args:
        principal: Loan principal, must be positive.
        annual_rate_percent: Annual interest rate in percent, must not be negative.
        term_months: Number of monthly installments, must be positive.
        
    Returns:
        The monthly installment amount.
        
    Raises:
        InvalidCalculationInputError: If any argument is out of range.
    """
    if principal <= 0 or term_months <= 0 or annual_rate_percent < 0:
        raise InvalidCalculationInputError(principal, annual_rate_percent, term_months)

    r = monthly_rate(annual_rate_percent)
    if r == 0:
        return principal / term_months

    # Same EMI written as P*r / (1 - (1+r)^-n), with (1+r)^-n taken in log space
    try:
        log_growth = term_months * math.log1p(r)
    except OverflowError:
        return principal * r
    discount = -math.expm1(-log_growth)
    if discount == 0:
        return principal / term_months
    return principal * r / discount


def total_interest(installment: float, term_months: int, principal: float) -> float:
    """Total interest over the life of the loan (EMI x term - principal)."""
    return installment * term_months - principal


def total_payable(installment: float, term_months: int) -> float:
    """Total amount repaid over the life of the loan (EMI x term)."""
    return installment * term_months


def amortization_schedule(principal: float, annual_rate_percent: float, term_months: int) -> List[InstallmentRow]:
    """Break the loan into per-month interest and principal portions.
    
    The schedule is informational: payments are applied to the outstanding
    balance as a flat decrement, not split along these rows.
    """
    installment = compute_installment(principal, annual_rate_percent, term_months)
    r = monthly_rate(annual_rate_percent)

    rows = []
    balance = principal
    for period in range(1, term_months + 1):
        interest = balance * r
        principal_portion = installment - interest
        balance = balance - principal_portion
        if period == term_months:
            # Absorb float drift so the schedule ends at exactly zero
            principal_portion += balance
            balance = 0.0
        rows.append(InstallmentRow(
            period=period,
            payment=interest + principal_portion,
            interest_portion=interest,
            principal_portion=principal_portion,
            remaining_balance=balance
        ))
    return rows
