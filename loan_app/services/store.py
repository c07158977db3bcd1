"""
ORM-backed persistence handle for users, loans and payments.
Views receive a LoanStore instance instead of reaching for model managers
directly, so tests and callers can hand in their own.
"""
import logging

from django.db import transaction

from loan_app.models import Loan, Payment, User

logger = logging.getLogger(__name__)


class LoanStore:
    def create_user(self, user_id: str):
        """Return (user, created). An existing user_id is returned as-is."""
        user, created = User.objects.get_or_create(user_id=user_id)
        if created:
            logger.info("Created user %s", user_id)
        return user, created

    def find_users(self):
        return User.objects.order_by('id')

    def get_user(self, user_id: str) -> User:
        return User.objects.get(user_id=user_id)

    def create_loan(self, **fields) -> Loan:
        loan = Loan.objects.create(**fields)
        logger.info("Created loan %s for %s", loan.pk, loan.borrower_name)
        return loan

    def find_loans(self, user_id: str = None):
        """Loans with payments prefetched, optionally limited to one owner."""
        loans = Loan.objects.select_related('user').prefetch_related('payments')
        if user_id is not None:
            loans = loans.filter(user__user_id=user_id)
        return loans.order_by('-id')

    def get_loan(self, pk) -> Loan:
        return self.find_loans().get(pk=pk)

    def update_loan(self, loan: Loan, **fields) -> Loan:
        for name, value in fields.items():
            setattr(loan, name, value)
        loan.save(update_fields=list(fields) or None)
        return loan

    def delete_loan(self, loan: Loan) -> None:
        with transaction.atomic():
            loan.delete()
        logger.info("Deleted loan %s", loan.borrower_name)

    def create_payment(self, loan: Loan, amount, payment_date) -> Payment:
        return Payment.objects.create(loan=loan, amount=amount, payment_date=payment_date)

    def find_payments(self, loan_id=None):
        payments = Payment.objects.all()
        if loan_id is not None:
            payments = payments.filter(loan_id=loan_id)
        return payments

    def get_payment(self, pk) -> Payment:
        return Payment.objects.select_related('loan').get(pk=pk)

    def update_payment(self, payment: Payment, **fields) -> Payment:
        for name, value in fields.items():
            setattr(payment, name, value)
        payment.save(update_fields=list(fields) or None)
        return payment

    def delete_payment(self, payment: Payment) -> None:
        payment.delete()
