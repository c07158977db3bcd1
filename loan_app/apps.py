from django.apps import AppConfig


class LoanAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'loan_app'
    verbose_name = 'Loans'
