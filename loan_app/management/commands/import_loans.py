import os

from django.conf import settings
from django.core.management.base import BaseCommand

from loan_app.tasks import import_loans_from_excel, import_payments_from_excel


class Command(BaseCommand):
    help = 'Enqueue Celery tasks to import loan_data.xlsx and payment_data.xlsx'

    def add_arguments(self, parser):
        parser.add_argument(
            '--sync',
            action='store_true',
            help='Run the import synchronously instead of via Celery',
        )
        parser.add_argument(
            '--user-id',
            default=None,
            help='Identity-provider user id that will own the imported loans',
        )

    def handle(self, *args, **options):
        loan_path = getattr(settings, 'LOAN_DATA_PATH', None) or os.path.join(
            settings.BASE_DIR, 'data', 'loan_data.xlsx'
        )
        payment_path = getattr(settings, 'PAYMENT_DATA_PATH', None) or os.path.join(
            settings.BASE_DIR, 'data', 'payment_data.xlsx'
        )

        for path in (loan_path, payment_path):
            if not os.path.isfile(path):
                self.stdout.write(self.style.WARNING(
                    f'File not found: {path}. Place it in data/ and retry.'
                ))

        if options['sync']:
            self.stdout.write('Running import synchronously...')
            r1 = import_loans_from_excel(loan_path, options['user_id'])
            self.stdout.write(f'Loans: {r1}')
            r2 = import_payments_from_excel(payment_path)
            self.stdout.write(f'Payments: {r2}')
            self.stdout.write(self.style.SUCCESS('Done.'))
            return

        self.stdout.write('Enqueueing Celery tasks...')
        # Payments reference loan ids, so they must run after the loans land
        (
            import_loans_from_excel.si(loan_path, options['user_id'])
            | import_payments_from_excel.si(payment_path)
        ).delay()
        self.stdout.write(self.style.SUCCESS(
            'Tasks enqueued. Ensure Celery worker is running to process them.'
        ))
