from rest_framework import serializers

from .models import PromoCode


class PromoCodeSerializer(serializers.ModelSerializer):
    status = serializers.SerializerMethodField()

    class Meta:
        model = PromoCode
        fields = [
            'id', 'code', 'discount_percent', 'active', 'usage_limit', 'usage_count',
            'expires_at', 'status', 'created_at', 'updated_at',
        ]

    def get_status(self, obj):
        return obj.display_status(self.context.get('now'))
