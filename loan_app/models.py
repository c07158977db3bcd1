from django.db import models

from .services.loan_math import LoanTerms, PaymentEntry


class InterestType(models.TextChoices):
    MONTHLY = 'monthly', 'Monthly'
    QUARTERLY = 'quarterly', 'Quarterly'
    YEARLY = 'yearly', 'Yearly'


class User(models.Model):
    # Opaque identifier issued by the external identity provider
    user_id = models.CharField(max_length=255, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'loan_app_user'

    def __str__(self):
        return self.user_id


class Loan(models.Model):
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='loans', null=True, blank=True
    )
    borrower_name = models.CharField(max_length=200)
    principal_amount = models.DecimalField(max_digits=15, decimal_places=2)
    interest_rate = models.DecimalField(max_digits=6, decimal_places=2)
    interest_type = models.CharField(max_length=10, choices=InterestType.choices)
    start_date = models.DateField()
    end_date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'loan_app_loan'

    def __str__(self):
        return f"{self.borrower_name} ({self.principal_amount})"

    def as_terms(self):
        """Snapshot of this loan and its payments for the math functions."""
        return LoanTerms(
            principal_amount=self.principal_amount,
            interest_rate=self.interest_rate,
            interest_type=self.interest_type,
            start_date=self.start_date,
            end_date=self.end_date,
            payments=tuple(
                PaymentEntry(p.amount, p.payment_date) for p in self.payments.all()
            ),
        )


class Payment(models.Model):
    loan = models.ForeignKey(Loan, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=15, decimal_places=2)
    payment_date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'loan_app_payment'
        ordering = ['payment_date', 'id']
