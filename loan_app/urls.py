from django.urls import path

from . import views
from .services.store import LoanStore

# One persistence handle for the process, shared by every route
store = LoanStore()

urlpatterns = [
    path('users', views.UsersView.as_view(store=store), name='users'),
    path('loans', views.LoansView.as_view(store=store), name='loans'),
    path('loans/<int:loan_id>', views.LoanDetailView.as_view(store=store), name='loan-detail'),
    path('payments', views.PaymentsView.as_view(store=store), name='payments'),
    path('payments/<int:payment_id>', views.PaymentDetailView.as_view(store=store), name='payment-detail'),
]
