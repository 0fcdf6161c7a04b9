"""
Portfolio reporting for the microloan engine.
Builds loan-level frames and portfolio summaries with derived statuses.
"""
from datetime import date

import pandas as pd

from microloan.models import LoanStatus
from microloan.status import determine_status

LOAN_COLUMNS = [
    'id', 'borrower_id', 'borrower_name', 'principal', 'outstanding_balance',
    'repaid', 'interest_rate', 'term_months', 'installment', 'issue_date',
    'due_date', 'status'
]


class PortfolioReport:
    def __init__(self, repository, clock=None):
        self.repo = repository
        self.clock = clock or date.today

    def loans_frame(self, today=None):
        """One row per loan, status derived as of ``today``.

        Values stay raw floats and dates; formatting is the caller's job.
        """
        if today is None:
            today = self.clock()

        rows = []
        for loan in self.repo.list_all_loans():
            rows.append({
                'id': loan.id,
                'borrower_id': loan.borrower_id,
                'borrower_name': loan.borrower_name,
                'principal': loan.principal,
                'outstanding_balance': loan.outstanding_balance,
                'repaid': loan.principal - loan.outstanding_balance,
                'interest_rate': loan.interest_rate,
                'term_months': loan.term_months,
                'installment': loan.installment,
                'issue_date': loan.issue_date,
                'due_date': loan.due_date,
                'status': determine_status(loan, today).value
            })
        return pd.DataFrame(rows, columns=LOAN_COLUMNS)

    def status_distribution(self, today=None):
        """Loan counts per status, including statuses with no loans."""
        df = self.loans_frame(today)
        counts = df['status'].value_counts()
        return counts.reindex([s.value for s in LoanStatus], fill_value=0).astype(int)

    def summary(self, today=None):
        """Portfolio totals for the reports screen."""
        df = self.loans_frame(today)
        counts = df['status'].value_counts()
        total_loans = len(df)
        total_disbursed = float(df['principal'].sum())
        total_outstanding = float(df['outstanding_balance'].sum())
        total_repaid = float(df['repaid'].sum())

        return {
            'total_loans': total_loans,
            'total_disbursed': total_disbursed,
            'total_outstanding': total_outstanding,
            'total_repaid': total_repaid,
            'repayment_rate': total_repaid / total_disbursed * 100 if total_disbursed else 0.0,
            'outstanding_rate': total_outstanding / total_disbursed * 100 if total_disbursed else 0.0,
            'active_count': int(counts.get(LoanStatus.ACTIVE.value, 0)),
            'overdue_count': int(counts.get(LoanStatus.OVERDUE.value, 0)),
            'paid_off_count': int(counts.get(LoanStatus.PAID_OFF.value, 0)),
            'borrower_count': len(self.repo.list_all_borrowers()),
            'average_loan': float(df['principal'].mean()) if total_loans else 0.0
        }

    def top_loans(self, n=10, today=None):
        """The ``n`` largest loans by principal, biggest first."""
        df = self.loans_frame(today)
        df = df.sort_values(['principal', 'id'], ascending=[False, True])
        return df.head(n).reset_index(drop=True)
