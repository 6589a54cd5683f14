import html

import bleach
from rest_framework import serializers


class CashItemSerializer(serializers.Serializer):
    uuid = serializers.UUIDField(required=False, allow_null=True)
    invoice_uuid = serializers.UUIDField(required=False, allow_null=True)


class CashPaymentSerializer(serializers.Serializer):
    """Shape checks for a cash payment.

    ``project_id`` and ``user_id`` are accepted so older clients keep
    working, but their values are discarded; the session decides both.
    The invoice/caution rule is enforced by the cash service, not here.
    """
    uuid = serializers.UUIDField(required=False, allow_null=True)
    amount = serializers.DecimalField(max_digits=19, decimal_places=4)
    currency_id = serializers.IntegerField(min_value=1)
    cashbox_id = serializers.IntegerField(min_value=1)
    debtor_uuid = serializers.UUIDField()
    date = serializers.DateTimeField(required=False, allow_null=True)
    is_caution = serializers.BooleanField(required=False, default=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    items = CashItemSerializer(many=True, required=False)
    project_id = serializers.IntegerField(required=False, write_only=True)
    user_id = serializers.IntegerField(required=False, write_only=True)

    def validate_amount(self, v):
        if v <= 0:
            raise serializers.ValidationError('amount must be greater than zero')
        return v

    def validate_description(self, v):
        if v is None:
            return None
        # bleach escapes text entities; only the tags are meant to go
        return html.unescape(bleach.clean(v.strip(), tags=set(), strip=True))

    def validate(self, attrs):
        attrs.pop('project_id', None)
        attrs.pop('user_id', None)
        return attrs


class CashCreateSerializer(serializers.Serializer):
    payment = CashPaymentSerializer()
