"""Admin registration for account carts.

Guest carts live in the cache and are not listed here.
"""

from django.contrib import admin, messages

from .models import Cart, CartItem
from .services import clear_account_cart


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    fields = ("product", "variant", "quantity", "name", "unit_price_cents", "created_at", "updated_at")
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("product", "variant")


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "status", "item_count", "updated_at")
    list_filter = ("status",)
    search_fields = ("user__email",)
    list_select_related = ("user",)
    inlines = [CartItemInline]
    actions = ["clear_selected"]

    @admin.display(description="Items")
    def item_count(self, obj):
        return obj.items.count()

    @admin.action(description="Clear selected carts")
    def clear_selected(self, request, queryset):
        removed = 0
        for cart in queryset.exclude(user__isnull=True).select_related("user"):
            removed += clear_account_cart(user=cart.user)
        self.message_user(request, f"Removed {removed} line(s).", level=messages.SUCCESS)
