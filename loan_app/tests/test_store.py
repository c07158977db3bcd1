"""Tests for the ORM-backed LoanStore and model helpers."""
from datetime import date
from decimal import Decimal

from django.test import TestCase

from loan_app.models import Loan, Payment, User
from loan_app.services.loan_math import total_amount, total_paid
from loan_app.services.store import LoanStore


class LoanStoreTests(TestCase):

    def setUp(self):
        self.store = LoanStore()
        self.user, _ = self.store.create_user("user_1")

    def _loan(self, **overrides):
        fields = dict(
            user=self.user,
            borrower_name="Carol",
            principal_amount=Decimal("1000.00"),
            interest_rate=Decimal("6.00"),
            interest_type="quarterly",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 7, 1),
        )
        fields.update(overrides)
        return self.store.create_loan(**fields)

    def test_create_user_is_idempotent(self):
        user, created = self.store.create_user("user_1")
        self.assertFalse(created)
        self.assertEqual(user.pk, self.user.pk)
        self.assertEqual(User.objects.count(), 1)

    def test_find_loans_by_user(self):
        mine = self._loan()
        other_user, _ = self.store.create_user("user_2")
        self._loan(user=other_user)
        self.assertEqual([l.pk for l in self.store.find_loans(user_id="user_1")], [mine.pk])
        self.assertEqual(self.store.find_loans().count(), 2)

    def test_get_missing_loan_raises(self):
        with self.assertRaises(Loan.DoesNotExist):
            self.store.get_loan(123456)

    def test_update_loan_persists_fields(self):
        loan = self._loan()
        self.store.update_loan(loan, borrower_name="Caroline", interest_rate=Decimal("9"))
        loan.refresh_from_db()
        self.assertEqual(loan.borrower_name, "Caroline")
        self.assertEqual(loan.interest_rate, Decimal("9.00"))

    def test_payments_roundtrip_through_terms(self):
        loan = self._loan()
        self.store.create_payment(loan, Decimal("100.00"), date(2024, 2, 1))
        self.store.create_payment(loan, Decimal("50.00"), date(2024, 3, 1))
        terms = self.store.get_loan(loan.pk).as_terms()
        self.assertEqual(total_paid(terms), Decimal("150.00"))
        # 1000 * (6 / 3) * 6 months / 100 = 120
        self.assertEqual(total_amount(terms), Decimal("1120"))

    def test_find_payments_by_loan(self):
        loan = self._loan()
        other = self._loan(borrower_name="Dan")
        self.store.create_payment(loan, Decimal("1.00"), date(2024, 2, 1))
        self.store.create_payment(other, Decimal("2.00"), date(2024, 2, 1))
        self.assertEqual(self.store.find_payments(loan_id=loan.pk).count(), 1)
        self.assertEqual(self.store.find_payments().count(), 2)

    def test_update_and_delete_payment(self):
        loan = self._loan()
        payment = self.store.create_payment(loan, Decimal("10.00"), date(2024, 2, 1))
        self.store.update_payment(payment, amount=Decimal("12.50"))
        self.assertEqual(self.store.get_payment(payment.pk).amount, Decimal("12.50"))
        self.store.delete_payment(payment)
        self.assertFalse(Payment.objects.exists())

    def test_delete_loan_cascades(self):
        loan = self._loan()
        self.store.create_payment(loan, Decimal("10.00"), date(2024, 2, 1))
        self.store.delete_loan(loan)
        self.assertFalse(Loan.objects.exists())
        self.assertFalse(Payment.objects.exists())
