from django.conf import settings
from django.contrib import admin, messages
from core.errors import ValidationError
from .models import BookingRequest


@admin.register(BookingRequest)
class BookingRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'full_name', 'item_name', 'quantity', 'promo_code', 'final_price_display', 'status', 'created_at']
    list_filter = ['status', 'item_type', 'created_at']
    search_fields = ['full_name', 'email', 'phone', 'item_name', 'promo_code']
    readonly_fields = [
        'item_type', 'item_id', 'item_name', 'unit_price', 'full_name', 'phone', 'email',
        'quantity', 'message', 'promo_code', 'discount_percent', 'final_price', 'status',
        'created_at', 'updated_at',
    ]
    actions = ['mark_confirmed', 'mark_completed', 'mark_cancelled']

    def has_add_permission(self, request):
        return False

    def final_price_display(self, obj):
        return f"{settings.CURRENCY_SYMBOL}{obj.final_price:,}"
    final_price_display.short_description = 'Final price'

    def _transition(self, request, queryset, status):
        moved = 0
        for booking in queryset:
            try:
                booking.transition_to(status)
                moved += 1
            except ValidationError as e:
                self.message_user(request, f"Booking #{booking.id}: {e.message}", level=messages.WARNING)
        self.message_user(request, f"{moved} booking request(s) marked {status}.")

    @admin.action(description='Mark selected as confirmed')
    def mark_confirmed(self, request, queryset):
        self._transition(request, queryset, BookingRequest.CONFIRMED)

    @admin.action(description='Mark selected as completed')
    def mark_completed(self, request, queryset):
        self._transition(request, queryset, BookingRequest.COMPLETED)

    @admin.action(description='Mark selected as cancelled')
    def mark_cancelled(self, request, queryset):
        self._transition(request, queryset, BookingRequest.CANCELLED)
