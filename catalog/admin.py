from django.conf import settings
from django.contrib import admin
from .models import Card, Category, ContactSetting, Service


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'card_count', 'created_at']
    search_fields = ['name']
    readonly_fields = ['created_at', 'updated_at']

    def card_count(self, obj):
        return obj.cards.count()
    card_count.short_description = 'Cards'


@admin.register(Card)
class CardAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'set_name', 'rarity', 'condition', 'price_display', 'category', 'featured', 'available', 'created_at']
    list_filter = ['available', 'featured', 'rarity', 'condition', 'category']
    list_editable = ['featured', 'available']
    search_fields = ['name', 'set_name']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['category']

    fieldsets = (
        ('Card', {
            'fields': ('name', 'set_name', 'rarity', 'condition', 'category')
        }),
        ('Listing', {
            'fields': ('price', 'featured', 'available', 'collector_notes')
        }),
        ('Images', {
            'fields': ('image', 'images')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )

    def price_display(self, obj):
        return f"{settings.CURRENCY_SYMBOL}{obj.price:,}"
    price_display.short_description = 'Price'


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'price_display', 'available', 'created_at']
    list_filter = ['available']
    search_fields = ['name', 'description']
    readonly_fields = ['created_at', 'updated_at']

    def price_display(self, obj):
        if obj.price is None:
            return 'On request'
        return f"{settings.CURRENCY_SYMBOL}{obj.price:,}"
    price_display.short_description = 'Price'


@admin.register(ContactSetting)
class ContactSettingAdmin(admin.ModelAdmin):
    list_display = ['key', 'value', 'updated_at']
    readonly_fields = ['key', 'updated_at']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
