"""
Derived loan figures: interest, totals, remaining balance, progress, days left.
Simple (non-compounding) interest on the principal:
    total_interest = principal * monthly_rate * whole_months / 100
where monthly_rate is the quoted rate scaled to a one-month period.
"""
from datetime import date
from decimal import Decimal
from typing import NamedTuple, Optional, Sequence

from dateutil.relativedelta import relativedelta

from loan_app.exceptions import InvalidInterestType, ZeroTotalAmount


MONTHLY = 'monthly'
QUARTERLY = 'quarterly'
YEARLY = 'yearly'

# Months covered by one quoting period of the stated rate
PERIOD_MONTHS = {
    MONTHLY: 1,
    QUARTERLY: 3,
    YEARLY: 12,
}


class PaymentEntry(NamedTuple):
    amount: Decimal
    payment_date: Optional[date] = None


class LoanTerms(NamedTuple):
    principal_amount: Decimal
    interest_rate: Decimal
    interest_type: str
    start_date: date
    end_date: date
    payments: Sequence[PaymentEntry] = ()


class LoanSummary(NamedTuple):
    monthly_interest_rate: Decimal
    total_interest: Decimal
    total_amount: Decimal
    total_paid: Decimal
    remaining_amount: Decimal
    days_remaining: int
    progress: Optional[Decimal]


def monthly_interest_rate(loan: LoanTerms) -> Decimal:
    """Rate per month, in percent."""
    try:
        months = PERIOD_MONTHS[loan.interest_type]
    except KeyError:
        raise InvalidInterestType(loan.interest_type) from None
    return Decimal(loan.interest_rate) / months


def whole_months_between(start: date, end: date) -> int:
    """Calendar months fully elapsed from start to end (Jan 15 -> Mar 10 is 1)."""
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months


def total_interest(loan: LoanTerms) -> Decimal:
    months = whole_months_between(loan.start_date, loan.end_date)
    return Decimal(loan.principal_amount) * monthly_interest_rate(loan) * months / 100


def total_amount(loan: LoanTerms) -> Decimal:
    return Decimal(loan.principal_amount) + total_interest(loan)


def total_paid(loan: LoanTerms) -> Decimal:
    return sum((Decimal(p.amount) for p in loan.payments), Decimal('0'))


def remaining_amount(loan: LoanTerms) -> Decimal:
    """Amount still owed. Negative when the loan has been overpaid."""
    return total_amount(loan) - total_paid(loan)


def days_remaining(loan: LoanTerms, today: Optional[date] = None) -> int:
    """Days until end_date; negative once it has passed."""
    if today is None:
        today = date.today()
    return (loan.end_date - today).days


def progress(loan: LoanTerms) -> Decimal:
    """Percent of the total amount paid so far. Not capped at 100."""
    amount = total_amount(loan)
    if amount == 0:
        raise ZeroTotalAmount()
    return total_paid(loan) * 100 / amount


def loan_summary(loan: LoanTerms, today: Optional[date] = None) -> LoanSummary:
    """
    All derived figures for a loan. progress is None when the total amount is
    zero (zero principal and zero rate).
    """
    amount = total_amount(loan)
    paid = total_paid(loan)
    try:
        pct = progress(loan)
    except ZeroTotalAmount:
        pct = None
    return LoanSummary(
        monthly_interest_rate=monthly_interest_rate(loan),
        total_interest=total_interest(loan),
        total_amount=amount,
        total_paid=paid,
        remaining_amount=amount - paid,
        days_remaining=days_remaining(loan, today),
        progress=pct,
    )
