"""Tests for the Excel import tasks (pandas.read_excel is patched)."""
from datetime import date
from decimal import Decimal
from io import StringIO
from unittest import mock

import pandas as pd
from django.core.management import call_command
from django.test import TestCase

from loan_app.models import Loan, Payment, User
from loan_app.tasks import import_loans_from_excel, import_payments_from_excel


def loan_frame():
    return pd.DataFrame([
        {
            'Borrower Name': 'Erin',
            'Principal Amount': 12000,
            'Interest Rate': 12,
            'Interest Type': 'Monthly',
            'Start Date': pd.Timestamp('2024-01-01'),
            'End Date': pd.Timestamp('2025-01-01'),
        },
        {
            'Borrower Name': 'Frank',
            'Principal Amount': 5000.5,
            'Interest Rate': 10,
            'Interest Type': 'yearly',
            'Start Date': '2024-03-01',
            'End Date': '2024-09-01',
        },
        {
            'Borrower Name': 'Bad type',
            'Principal Amount': 100,
            'Interest Rate': 1,
            'Interest Type': 'weekly',
            'Start Date': '2024-03-01',
            'End Date': '2024-09-01',
        },
        {
            'Borrower Name': 'Backwards',
            'Principal Amount': 100,
            'Interest Rate': 1,
            'Interest Type': 'monthly',
            'Start Date': '2024-09-01',
            'End Date': '2024-03-01',
        },
    ])


class ImportLoansTests(TestCase):

    @mock.patch('loan_app.tasks.pd.read_excel')
    def test_imports_valid_rows_and_skips_bad_ones(self, read_excel):
        read_excel.return_value = loan_frame()
        result = import_loans_from_excel('loans.xlsx', user_id='importer')
        self.assertEqual(result, {'ok': True, 'created': 2, 'updated': 0, 'skipped': 2})

        erin = Loan.objects.get(borrower_name='Erin')
        self.assertEqual(erin.user.user_id, 'importer')
        self.assertEqual(erin.interest_type, 'monthly')
        self.assertEqual(erin.principal_amount, Decimal('12000.00'))
        self.assertEqual(erin.start_date, date(2024, 1, 1))
        frank = Loan.objects.get(borrower_name='Frank')
        self.assertEqual(frank.principal_amount, Decimal('5000.50'))

    @mock.patch('loan_app.tasks.pd.read_excel')
    def test_reimport_updates_existing_rows(self, read_excel):
        read_excel.return_value = loan_frame()
        import_loans_from_excel('loans.xlsx', user_id='importer')
        read_excel.return_value = loan_frame()
        result = import_loans_from_excel('loans.xlsx', user_id='importer')
        self.assertEqual(result['created'], 0)
        self.assertEqual(result['updated'], 2)
        self.assertEqual(Loan.objects.count(), 2)
        self.assertEqual(User.objects.count(), 1)

    @mock.patch('loan_app.tasks.pd.read_excel')
    def test_non_finite_principal_or_rate_skips_row(self, read_excel):
        frame = loan_frame().astype(object)
        frame.loc[0, 'Principal Amount'] = 'NaN'
        frame.loc[1, 'Interest Rate'] = 'Infinity'
        read_excel.return_value = frame
        result = import_loans_from_excel('loans.xlsx')
        self.assertEqual(result, {'ok': True, 'created': 0, 'updated': 0, 'skipped': 4})
        self.assertFalse(Loan.objects.exists())

    @mock.patch('loan_app.tasks.pd.read_excel', side_effect=FileNotFoundError('missing.xlsx'))
    def test_unreadable_workbook_reports_error(self, read_excel):
        result = import_loans_from_excel('missing.xlsx')
        self.assertFalse(result['ok'])
        self.assertIn('missing.xlsx', result['error'])


class ImportPaymentsTests(TestCase):

    def setUp(self):
        self.loan = Loan.objects.create(
            borrower_name='Gina',
            principal_amount=Decimal('1000.00'),
            interest_rate=Decimal('1.00'),
            interest_type='monthly',
            start_date=date(2024, 1, 1),
            end_date=date(2024, 12, 1),
        )

    @mock.patch('loan_app.tasks.pd.read_excel')
    def test_imports_payments_for_known_loans(self, read_excel):
        read_excel.return_value = pd.DataFrame([
            {'loan_id': self.loan.pk, 'amount': 250, 'payment_date': '2024-02-01'},
            {'loan_id': self.loan.pk, 'amount': 125.25, 'payment_date': pd.Timestamp('2024-03-01')},
            {'loan_id': 999999, 'amount': 10, 'payment_date': '2024-03-01'},
            {'loan_id': self.loan.pk, 'amount': -3, 'payment_date': '2024-03-01'},
        ])
        result = import_payments_from_excel('payments.xlsx')
        self.assertEqual(result, {'ok': True, 'created': 2, 'skipped': 2})
        amounts = sorted(Payment.objects.values_list('amount', flat=True))
        self.assertEqual(amounts, [Decimal('125.25'), Decimal('250.00')])

    @mock.patch('loan_app.tasks.pd.read_excel')
    def test_non_finite_amounts_are_skipped_not_fatal(self, read_excel):
        read_excel.return_value = pd.DataFrame([
            {'loan_id': self.loan.pk, 'amount': 10, 'payment_date': '2024-02-01'},
            {'loan_id': self.loan.pk, 'amount': 'NaN', 'payment_date': '2024-02-02'},
            {'loan_id': self.loan.pk, 'amount': float('inf'), 'payment_date': '2024-02-03'},
            {'loan_id': self.loan.pk, 'amount': 20, 'payment_date': '2024-02-04'},
        ])
        result = import_payments_from_excel('payments.xlsx')
        self.assertEqual(result, {'ok': True, 'created': 2, 'skipped': 2})
        self.assertEqual(Payment.objects.count(), 2)


class ImportLoansCommandTests(TestCase):

    @mock.patch('loan_app.management.commands.import_loans.import_payments_from_excel')
    @mock.patch('loan_app.management.commands.import_loans.import_loans_from_excel')
    def test_sync_runs_both_imports(self, import_loans, import_payments):
        import_loans.return_value = {'ok': True}
        import_payments.return_value = {'ok': True}
        call_command('import_loans', '--sync', '--user-id', 'cli-user', stdout=StringIO())
        self.assertEqual(import_loans.call_args.args[1], 'cli-user')
        import_payments.assert_called_once()
