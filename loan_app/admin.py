from django.contrib import admin

from .models import Loan, Payment, User


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0


@admin.register(Loan)
class LoanAdmin(admin.ModelAdmin):
    list_display = ['id', 'borrower_name', 'principal_amount', 'interest_rate', 'interest_type', 'end_date']
    list_filter = ['interest_type']
    search_fields = ['borrower_name', 'user__user_id']
    inlines = [PaymentInline]


admin.site.register(User)
