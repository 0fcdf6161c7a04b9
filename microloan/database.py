"""SQLite persistence for the microloan engine."""
import sqlite3
from contextlib import contextmanager
from datetime import datetime

from microloan.config import DATE_FORMAT_STORAGE, get_db_path
from microloan.exceptions import BorrowerNotFoundError, DatabaseError, TransactionError
from microloan.logging_config import get_logger
from microloan.models import Borrower, Loan, LoanStatus
from microloan.repository import LoanRepository

logger = get_logger(__name__)

LOAN_SELECT = """
    SELECT l.*, b.name AS borrower_name
    FROM loans l JOIN borrowers b ON l.borrower_id = b.id
"""


def _to_date(value):
    return datetime.strptime(value, DATE_FORMAT_STORAGE).date()


def _from_date(value):
    return value.strftime(DATE_FORMAT_STORAGE)


class SQLiteRepository(LoanRepository):
    """Handles all SQLite database operations.

    Every write commits immediately unless it runs inside ``transaction()``,
    in which case the outermost block commits or rolls back.
    """

    def __init__(self, db_name=None):
        self.db_name = db_name or get_db_path()
        try:
            self.conn = sqlite3.connect(self.db_name)
        except sqlite3.Error as e:
            raise DatabaseError(f"Could not open database: {e}", {'db_name': self.db_name})
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._closed = False
        self._tx_depth = 0
        self.create_tables()
        logger.debug("Opened database %s", self.db_name)

    def close(self):
        """Close the database connection."""
        if self.conn and not self._closed:
            self.conn.close()
            self._closed = True

    def __del__(self):
        """Ensure connection is closed on garbage collection."""
        if hasattr(self, "_closed"):
            self.close()

    @contextmanager
    def transaction(self):
        """Context manager for database transactions with automatic rollback on failure.

        Usage:
            with repo.transaction():
                repo.decrement_balance(loan_id, 100)
                repo.update_loan(loan)

        The write lock is taken up front so concurrent writers queue
        instead of interleaving.
        """
        if self._tx_depth == 0 and not self.conn.in_transaction:
            try:
                self.conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise TransactionError(f"Could not start transaction: {str(e)}")
        self._tx_depth += 1
        try:
            yield
        except sqlite3.Error as e:
            self._tx_depth -= 1
            if self._tx_depth == 0:
                self.conn.rollback()
            raise TransactionError(f"Transaction failed: {str(e)}")
        except Exception:
            self._tx_depth -= 1
            if self._tx_depth == 0:
                self.conn.rollback()
            raise
        else:
            self._tx_depth -= 1
            if self._tx_depth == 0:
                self.conn.commit()

    def _commit(self):
        if self._tx_depth == 0:
            self.conn.commit()

    def _execute(self, query, params=()):
        try:
            cursor = self.conn.cursor()
            cursor.execute(query, params)
            return cursor
        except sqlite3.Error as e:
            if self._tx_depth == 0:
                self.conn.rollback()
            raise DatabaseError(f"Query failed: {str(e)}", {'query': query.split()[0]})

    def create_tables(self):
        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS borrowers (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                email TEXT,
                phone TEXT,
                address TEXT,
                income REAL NOT NULL CHECK (income > 0)
            )
        """)
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS loans (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                borrower_id INTEGER NOT NULL,
                principal REAL NOT NULL CHECK (principal > 0),
                outstanding_balance REAL NOT NULL CHECK (outstanding_balance >= 0),
                interest_rate REAL NOT NULL,
                term_months INTEGER DEFAULT 0,
                installment REAL DEFAULT 0,
                issue_date TEXT NOT NULL,
                due_date TEXT NOT NULL,
                status TEXT DEFAULT 'ACTIVE',
                FOREIGN KEY(borrower_id) REFERENCES borrowers(id)
            )
        """)
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_loans_borrower ON loans(borrower_id)")
        self.conn.commit()

    # Row mapping
    def _rows_to_dicts(self, cursor):
        cols = [description[0] for description in cursor.description]
        return [dict(zip(cols, row)) for row in cursor.fetchall()]

    def _row_to_loan(self, row):
        return Loan(
            id=row['id'],
            borrower_id=row['borrower_id'],
            borrower_name=row['borrower_name'],
            principal=row['principal'],
            outstanding_balance=row['outstanding_balance'],
            interest_rate=row['interest_rate'],
            term_months=row['term_months'],
            installment=row['installment'],
            issue_date=_to_date(row['issue_date']),
            due_date=_to_date(row['due_date']),
            status=LoanStatus(row['status'])
        )

    def _row_to_borrower(self, row):
        return Borrower(
            id=row['id'],
            name=row['name'],
            email=row['email'],
            phone=row['phone'],
            address=row['address'],
            income=row['income']
        )

    # Loan operations
    def create_loan(self, loan):
        try:
            cursor = self._execute("""
            INSERT INTO loans (
                borrower_id, principal, outstanding_balance, interest_rate,
                term_months, installment, issue_date, due_date, status
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (loan.borrower_id, loan.principal, loan.outstanding_balance, loan.interest_rate,
              loan.term_months, loan.installment, _from_date(loan.issue_date),
              _from_date(loan.due_date), LoanStatus(loan.status).value))
        except DatabaseError as e:
            if "FOREIGN KEY" in e.message:
                raise BorrowerNotFoundError(loan.borrower_id)
            raise
        self._commit()
        if cursor.rowcount < 1:
            return None
        loan.id = cursor.lastrowid
        return loan.id

    def get_loan_by_id(self, loan_id):
        cursor = self._execute(LOAN_SELECT + " WHERE l.id = ?", (loan_id,))
        rows = self._rows_to_dicts(cursor)
        return self._row_to_loan(rows[0]) if rows else None

    def list_all_loans(self):
        cursor = self._execute(LOAN_SELECT + " ORDER BY l.issue_date DESC, l.id DESC")
        return [self._row_to_loan(row) for row in self._rows_to_dicts(cursor)]

    def list_loans_for_borrower(self, borrower_id):
        cursor = self._execute(
            LOAN_SELECT + " WHERE l.borrower_id = ? ORDER BY l.issue_date DESC, l.id DESC",
            (borrower_id,))
        return [self._row_to_loan(row) for row in self._rows_to_dicts(cursor)]

    def decrement_balance(self, loan_id, amount):
        # Single conditional UPDATE so concurrent payments cannot overdraw
        cursor = self._execute("""
            UPDATE loans
            SET outstanding_balance = MAX(outstanding_balance - ?, 0)
            WHERE id = ? AND outstanding_balance >= ?
        """, (amount, loan_id, amount))
        self._commit()
        return cursor.rowcount > 0

    def update_loan(self, loan):
        cursor = self._execute("""
            UPDATE loans SET outstanding_balance=?, due_date=?, status=? WHERE id=?
        """, (loan.outstanding_balance, _from_date(loan.due_date),
              LoanStatus(loan.status).value, loan.id))
        self._commit()
        return cursor.rowcount > 0

    def update_status(self, loan_id, status):
        cursor = self._execute("UPDATE loans SET status=? WHERE id=?",
                               (LoanStatus(status).value, loan_id))
        self._commit()
        return cursor.rowcount > 0

    # Borrower operations
    def create_borrower(self, borrower):
        cursor = self._execute(
            "INSERT INTO borrowers (name, email, phone, address, income) VALUES (?, ?, ?, ?, ?)",
            (borrower.name, borrower.email, borrower.phone, borrower.address, borrower.income))
        self._commit()
        if cursor.rowcount < 1:
            return None
        borrower.id = cursor.lastrowid
        return borrower.id

    def get_borrower_by_id(self, borrower_id):
        cursor = self._execute("SELECT * FROM borrowers WHERE id=?", (borrower_id,))
        rows = self._rows_to_dicts(cursor)
        return self._row_to_borrower(rows[0]) if rows else None

    def list_all_borrowers(self):
        cursor = self._execute("SELECT * FROM borrowers ORDER BY id DESC")
        return [self._row_to_borrower(row) for row in self._rows_to_dicts(cursor)]

    def search_borrowers_by_name(self, name):
        pattern = name.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        cursor = self._execute(
            "SELECT * FROM borrowers WHERE name LIKE ? ESCAPE '\\' ORDER BY name, id",
            (f"%{pattern}%",))
        return [self._row_to_borrower(row) for row in self._rows_to_dicts(cursor)]

    def update_borrower(self, borrower):
        cursor = self._execute(
            "UPDATE borrowers SET name=?, email=?, phone=?, address=?, income=? WHERE id=?",
            (borrower.name, borrower.email, borrower.phone, borrower.address,
             borrower.income, borrower.id))
        self._commit()
        return cursor.rowcount > 0

    def delete_borrower(self, borrower_id):
        cursor = self._execute("DELETE FROM borrowers WHERE id=?", (borrower_id,))
        self._commit()
        return cursor.rowcount > 0
