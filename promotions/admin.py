from django.contrib import admin
from django.utils import timezone
from .models import PromoCode


@admin.register(PromoCode)
class PromoCodeAdmin(admin.ModelAdmin):
    list_display = ['code', 'discount_display', 'status_display', 'usage_display', 'expires_at', 'created_at']
    list_filter = ['active', 'expires_at', 'created_at']
    search_fields = ['code']
    readonly_fields = ['usage_count', 'created_at', 'updated_at']
    actions = ['activate', 'deactivate']

    def discount_display(self, obj):
        return f"{obj.discount_percent}%"
    discount_display.short_description = 'Discount'

    def status_display(self, obj):
        return obj.display_status(timezone.now())
    status_display.short_description = 'Status'

    def usage_display(self, obj):
        if obj.usage_limit is None:
            return f"{obj.usage_count} / ∞"
        return f"{obj.usage_count} / {obj.usage_limit}"
    usage_display.short_description = 'Used'

    @admin.action(description='Activate selected promo codes')
    def activate(self, request, queryset):
        updated = queryset.update(active=True, updated_at=timezone.now())
        self.message_user(request, f"{updated} promo code(s) activated.")

    @admin.action(description='Deactivate selected promo codes')
    def deactivate(self, request, queryset):
        updated = queryset.update(active=False, updated_at=timezone.now())
        self.message_user(request, f"{updated} promo code(s) deactivated.")
