"""Custom exceptions for the microloan engine."""


class MicroloanError(Exception):
    """Base exception for all microloan errors."""
    
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class DatabaseError(MicroloanError):
    """Raised when a database operation fails."""
    pass


class TransactionError(DatabaseError):
    """Raised when a database transaction fails to complete."""
    pass


class InvalidCalculationInputError(MicroloanError, ValueError):
    """Raised when installment math receives out-of-range inputs."""
    
    def __init__(self, principal=None, annual_rate=None, term_months=None):
        details = {
            'principal': principal,
            'annual_rate': annual_rate,
            'term_months': term_months
        }
        super().__init__("Invalid parameters for installment calculation", details)


class LoanNotFoundError(MicroloanError):
    """Raised when a loan cannot be found."""
    
    def __init__(self, loan_id: int = None):
        details = {}
        message = "Loan not found"
        if loan_id is not None:
            details['loan_id'] = loan_id
            message = f"Loan with ID {loan_id} not found"
        super().__init__(message, details)


class BorrowerNotFoundError(MicroloanError):
    """Raised when a borrower cannot be found."""
    
    def __init__(self, borrower_id: int = None, name: str = None):
        details = {}
        if borrower_id is not None:
            details['borrower_id'] = borrower_id
        if name:
            details['name'] = name
        
        message = "Borrower not found"
        if name:
            message = f"Borrower '{name}' not found"
        elif borrower_id is not None:
            message = f"Borrower with ID {borrower_id} not found"
        
        super().__init__(message, details)
