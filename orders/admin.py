from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("product", "variant", "name", "sku", "quantity", "unit_price_cents")
    readonly_fields = fields
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "number", "status", "user", "email", "total_cents", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("number", "email", "stripe_session_id", "payment_reference")
    date_hierarchy = "created_at"
    readonly_fields = (
        "subtotal_cents",
        "shipping_cents",
        "tax_cents",
        "total_cents",
        "stripe_session_id",
        "payment_reference",
        "temp_cart",
    )
    inlines = [OrderItemInline]
