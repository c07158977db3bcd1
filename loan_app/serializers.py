from decimal import ROUND_HALF_UP, Decimal

from rest_framework import serializers

from .models import InterestType, Loan, Payment, User
from .services.loan_math import loan_summary

CENT = Decimal('0.01')


def money(value):
    """Two-decimal string, matching how DecimalField renders amounts."""
    if value is None:
        return None
    return str(Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


class UserCreateSerializer(serializers.Serializer):
    user_id = serializers.CharField(max_length=255)


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'user_id', 'created_at']


class LoanInputSerializer(serializers.Serializer):
    """Create payload; with partial=True and an instance, the edit payload."""
    user_id = serializers.CharField(max_length=255, required=False, allow_null=True)
    borrower_name = serializers.CharField(max_length=200)
    principal_amount = serializers.DecimalField(
        max_digits=15, decimal_places=2, min_value=CENT
    )
    interest_rate = serializers.DecimalField(
        max_digits=6, decimal_places=2, min_value=Decimal('0')
    )
    interest_type = serializers.ChoiceField(choices=InterestType.choices)
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError(
                {'end_date': 'End date must be on or after the start date.'}
            )
        return attrs


class PaymentCreateSerializer(serializers.Serializer):
    loan_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=CENT)
    payment_date = serializers.DateField()


class PaymentQuerySerializer(serializers.Serializer):
    loan_id = serializers.IntegerField(required=False, min_value=1)


class PaymentUpdateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=CENT)
    payment_date = serializers.DateField()


class PaymentSerializer(serializers.ModelSerializer):
    loan_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Payment
        fields = ['id', 'loan_id', 'amount', 'payment_date']


class LoanSerializer(serializers.ModelSerializer):
    user_id = serializers.SerializerMethodField()
    payments = PaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Loan
        fields = [
            'id', 'user_id', 'borrower_name', 'principal_amount', 'interest_rate',
            'interest_type', 'start_date', 'end_date', 'payments',
        ]

    def get_user_id(self, obj):
        return obj.user.user_id if obj.user_id is not None else None

    def to_representation(self, instance):
        data = super().to_representation(instance)
        summary = loan_summary(instance.as_terms())
        data.update({
            'total_interest': money(summary.total_interest),
            'total_amount': money(summary.total_amount),
            'total_paid': money(summary.total_paid),
            'remaining_amount': money(summary.remaining_amount),
            'days_remaining': summary.days_remaining,
            'progress': money(summary.progress),
        })
        return data
