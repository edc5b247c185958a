from rest_framework import serializers

from .models import BookingRequest


class BookingRequestSerializer(serializers.ModelSerializer):
    allowed_transitions = serializers.SerializerMethodField()

    class Meta:
        model = BookingRequest
        fields = [
            'id', 'item_type', 'item_id', 'item_name', 'unit_price',
            'full_name', 'phone', 'email', 'quantity', 'message',
            'promo_code', 'discount_percent', 'final_price',
            'status', 'allowed_transitions', 'created_at', 'updated_at',
        ]

    def get_allowed_transitions(self, obj):
        return list(obj.allowed_transitions())


class BookingReceiptSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingRequest
        fields = [
            'id', 'item_name', 'unit_price', 'quantity',
            'promo_code', 'discount_percent', 'final_price', 'status', 'created_at',
        ]
