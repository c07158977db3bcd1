import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

import pandas as pd
from celery import shared_task

from .models import InterestType, Loan, Payment, User

logger = logging.getLogger(__name__)


def _normalize_columns(df):
    df.columns = [
        str(c).strip().lower().replace(' ', '_') if isinstance(c, str) else c
        for c in df.columns
    ]
    return df


def _parse_date(val):
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    if hasattr(val, 'date'):
        return val.date()
    if isinstance(val, str):
        try:
            return datetime.strptime(val.strip()[:10], '%Y-%m-%d').date()
        except ValueError:
            return None
    return None


def _text(val):
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return ''
    return str(val).strip()


def _parse_amount(val):
    if val is None or pd.isna(val):
        return None
    try:
        amount = Decimal(str(val).strip())
        # NaN and Infinity parse but cannot be compared or stored
        if not amount.is_finite():
            return None
        return amount.quantize(Decimal('0.01'))
    except InvalidOperation:
        return None


def _read_workbook(file_path):
    return _normalize_columns(pd.read_excel(file_path))


@shared_task
def import_loans_from_excel(file_path: str, user_id: str = None) -> dict:
    """Read a loan workbook and upsert rows keyed by (owner, borrower_name, start_date)."""
    try:
        df = _read_workbook(file_path)
    except Exception as e:
        logger.exception("Failed to read loan Excel: %s", file_path)
        return {'ok': False, 'error': str(e), 'created': 0, 'updated': 0, 'skipped': 0}

    user = None
    if user_id:
        user, _ = User.objects.get_or_create(user_id=user_id)

    created = updated = skipped = 0
    for _, row in df.iterrows():
        borrower_name = _text(row.get('borrower_name'))
        principal_amount = _parse_amount(row.get('principal_amount'))
        interest_rate = _parse_amount(row.get('interest_rate'))
        interest_type = _text(row.get('interest_type')).lower()
        start_date = _parse_date(row.get('start_date'))
        end_date = _parse_date(row.get('end_date'))

        problem = None
        if not borrower_name:
            problem = 'missing borrower name'
        elif principal_amount is None or principal_amount <= 0:
            problem = 'principal must be positive'
        elif interest_rate is None or interest_rate < 0:
            problem = 'invalid interest rate'
        elif interest_type not in InterestType.values:
            problem = f'unknown interest type {interest_type!r}'
        elif start_date is None or end_date is None:
            problem = 'missing dates'
        elif end_date < start_date:
            problem = 'end date before start date'
        if problem:
            logger.warning("Skip loan row %s: %s", row.to_dict(), problem)
            skipped += 1
            continue

        try:
            _, was_created = Loan.objects.update_or_create(
                user=user,
                borrower_name=borrower_name,
                start_date=start_date,
                defaults={
                    'principal_amount': principal_amount,
                    'interest_rate': interest_rate,
                    'interest_type': interest_type,
                    'end_date': end_date,
                },
            )
        except Exception as e:
            logger.warning("Skip loan row %s: %s", row.to_dict(), e)
            skipped += 1
            continue
        if was_created:
            created += 1
        else:
            updated += 1
    logger.info("Loan import from %s: %d created, %d updated, %d skipped",
                file_path, created, updated, skipped)
    return {'ok': True, 'created': created, 'updated': updated, 'skipped': skipped}


@shared_task
def import_payments_from_excel(file_path: str) -> dict:
    """Read a payment workbook; each row is added to the loan named by loan_id."""
    try:
        df = _read_workbook(file_path)
    except Exception as e:
        logger.exception("Failed to read payment Excel: %s", file_path)
        return {'ok': False, 'error': str(e), 'created': 0, 'skipped': 0}

    created = skipped = 0
    for _, row in df.iterrows():
        amount = _parse_amount(row.get('amount'))
        payment_date = _parse_date(row.get('payment_date'))
        try:
            loan_id = int(row.get('loan_id'))
        except (TypeError, ValueError):
            loan_id = None

        if loan_id is None or amount is None or amount <= 0 or payment_date is None:
            logger.warning("Skip payment row %s: incomplete or invalid", row.to_dict())
            skipped += 1
            continue
        try:
            loan = Loan.objects.get(pk=loan_id)
        except Loan.DoesNotExist:
            logger.warning("Loan %s not found for payment row", loan_id)
            skipped += 1
            continue

        try:
            Payment.objects.create(loan=loan, amount=amount, payment_date=payment_date)
        except Exception as e:
            logger.warning("Skip payment row %s: %s", row.to_dict(), e)
            skipped += 1
            continue
        created += 1
    logger.info("Payment import from %s: %d created, %d skipped", file_path, created, skipped)
    return {'ok': True, 'created': created, 'skipped': skipped}
