"""Centralized configuration for the microloan engine.

This module contains the business rule constants and default values used
by the calculator, validation rules and lifecycle services.
"""
import os

# =============================================================================
# LOAN LIMITS
# =============================================================================

# Smallest principal that can be issued
MIN_LOAN_AMOUNT = 1.0

# Largest principal that can be issued
MAX_LOAN_AMOUNT = 100000.0

# Annual interest rate bounds (percent)
MIN_INTEREST_RATE = 0.0
MAX_INTEREST_RATE = 100.0

# =============================================================================
# BORROWER RULES
# =============================================================================

# Accepted phone number length once separators are stripped
MIN_PHONE_DIGITS = 10
MAX_PHONE_DIGITS = 15

# Characters removed from a phone number before the digit check
PHONE_SEPARATORS = " \t\n\r\f\v-()."

# =============================================================================
# SCHEDULING
# =============================================================================

# Months between issue date and the first due date
FIRST_DUE_MONTHS = 1

# Months the due date advances after a partial payment
DUE_DATE_ROLLOVER_MONTHS = 1

# =============================================================================
# STORAGE
# =============================================================================

# Date format for storage (ISO 8601)
DATE_FORMAT_STORAGE = "%Y-%m-%d"

# Default SQLite database file
DEFAULT_DB_NAME = "microloan.db"

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = "INFO"


def get_db_path():
    """Database path, honouring the MICROLOAN_DB environment variable."""
    return os.getenv("MICROLOAN_DB", DEFAULT_DB_NAME)


def get_log_level():
    """Log level, honouring the MICROLOAN_LOG_LEVEL environment variable."""
    return os.getenv("MICROLOAN_LOG_LEVEL", LOG_LEVEL)
