import logging

from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Loan, Payment, User
from .serializers import (
    LoanInputSerializer,
    LoanSerializer,
    PaymentCreateSerializer,
    PaymentQuerySerializer,
    PaymentSerializer,
    PaymentUpdateSerializer,
    UserCreateSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


def _storage_error(message):
    logger.exception(message)
    return Response({'detail': message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def _not_found(message):
    return Response({'detail': message}, status=status.HTTP_404_NOT_FOUND)


class StoreView(APIView):
    # LoanStore handed in by the URLconf through as_view(store=...)
    store = None

    def initial(self, request, *args, **kwargs):
        if self.store is None:
            raise ImproperlyConfigured(f"{type(self).__name__} needs a store; use as_view(store=...)")
        super().initial(request, *args, **kwargs)


class UsersView(StoreView):
    def post(self, request):
        serializer = UserCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            user, created = self.store.create_user(serializer.validated_data['user_id'])
        except DatabaseError:
            return _storage_error('Error creating user')
        return Response(
            UserSerializer(user).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def get(self, request):
        try:
            users = list(self.store.find_users())
        except DatabaseError:
            return _storage_error('Error fetching users')
        return Response(UserSerializer(users, many=True).data, status=status.HTTP_200_OK)


class LoansView(StoreView):
    def post(self, request):
        serializer = LoanInputSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = dict(serializer.validated_data)
        user_id = data.pop('user_id', None)
        try:
            if user_id is not None:
                try:
                    data['user'] = self.store.get_user(user_id)
                except User.DoesNotExist:
                    return Response(
                        {'user_id': [f'Unknown user {user_id!r}.']},
                        status=status.HTTP_400_BAD_REQUEST,
                    )
            loan = self.store.create_loan(**data)
            loan = self.store.get_loan(loan.pk)
        except DatabaseError:
            return _storage_error('Error creating loan')
        return Response(LoanSerializer(loan).data, status=status.HTTP_201_CREATED)

    def get(self, request):
        user_id = request.query_params.get('user_id')
        try:
            loans = list(self.store.find_loans(user_id=user_id))
        except DatabaseError:
            return _storage_error('Error fetching loans')
        return Response(LoanSerializer(loans, many=True).data, status=status.HTTP_200_OK)


class LoanDetailView(StoreView):
    def get(self, request, loan_id):
        try:
            loan = self.store.get_loan(loan_id)
        except Loan.DoesNotExist:
            return _not_found('Loan not found')
        except DatabaseError:
            return _storage_error('Error fetching loan')
        return Response(LoanSerializer(loan).data, status=status.HTTP_200_OK)

    def patch(self, request, loan_id):
        try:
            loan = self.store.get_loan(loan_id)
        except Loan.DoesNotExist:
            return _not_found('Loan not found')
        except DatabaseError:
            return _storage_error('Error fetching loan')
        serializer = LoanInputSerializer(loan, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        fields = dict(serializer.validated_data)
        # Ownership is fixed at creation
        fields.pop('user_id', None)
        try:
            self.store.update_loan(loan, **fields)
            loan = self.store.get_loan(loan.pk)
        except DatabaseError:
            return _storage_error('Error updating loan')
        return Response(LoanSerializer(loan).data, status=status.HTTP_200_OK)

    def delete(self, request, loan_id):
        try:
            loan = self.store.get_loan(loan_id)
        except Loan.DoesNotExist:
            return _not_found('Loan not found')
        except DatabaseError:
            return _storage_error('Error fetching loan')
        try:
            self.store.delete_loan(loan)
        except DatabaseError:
            return _storage_error('Error deleting loan')
        return Response(status=status.HTTP_204_NO_CONTENT)


class PaymentsView(StoreView):
    def post(self, request):
        serializer = PaymentCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data
        try:
            loan = self.store.get_loan(data['loan_id'])
        except Loan.DoesNotExist:
            return _not_found('Loan not found')
        except DatabaseError:
            return _storage_error('Error fetching loan')
        try:
            payment = self.store.create_payment(loan, data['amount'], data['payment_date'])
        except DatabaseError:
            return _storage_error('Error creating payment')
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    def get(self, request):
        query = PaymentQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            payments = list(self.store.find_payments(loan_id=query.validated_data.get('loan_id')))
        except DatabaseError:
            return _storage_error('Error fetching payments')
        return Response(PaymentSerializer(payments, many=True).data, status=status.HTTP_200_OK)


class PaymentDetailView(StoreView):
    def patch(self, request, payment_id):
        try:
            payment = self.store.get_payment(payment_id)
        except Payment.DoesNotExist:
            return _not_found('Payment not found')
        except DatabaseError:
            return _storage_error('Error fetching payment')
        serializer = PaymentUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            payment = self.store.update_payment(payment, **serializer.validated_data)
        except DatabaseError:
            return _storage_error('Error updating payment')
        return Response(PaymentSerializer(payment).data, status=status.HTTP_200_OK)

    def delete(self, request, payment_id):
        try:
            payment = self.store.get_payment(payment_id)
        except Payment.DoesNotExist:
            return _not_found('Payment not found')
        except DatabaseError:
            return _storage_error('Error fetching payment')
        try:
            self.store.delete_payment(payment)
        except DatabaseError:
            return _storage_error('Error deleting payment')
        return Response(status=status.HTTP_204_NO_CONTENT)
