from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("unit_price", "subtotal", "status", "created_at")
    fields = ("product", "quantity", "unit_price", "subtotal", "status", "notes")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        # Items go through OrderItemService so totals stay in step
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin configuration for the Order model.
    """

    list_display = (
        "order_number",
        "order_type",
        "status",
        "table",
        "server",
        "get_total_formatted",
        "created_at",
    )

    # Make order_number the clickable link
    list_display_links = ("order_number",)

    search_fields = ("order_number", "server__username", "table__number")

    list_filter = ("status", "order_type", "created_at")

    inlines = [OrderItemInline]

    fieldsets = (
        (
            "Order Overview",
            {"fields": ("id", "order_number", "order_type", "status", "table", "server", "notes")},
        ),
        (
            "Financial Summary",
            {
                "fields": ("subtotal", "tax_amount", "total"),
                "description": "Derived from the order's items; recalculated on every item change.",
            },
        ),
        (
            "Timestamps",
            {
                "classes": ("collapse",),
                "fields": ("created_at", "updated_at", "completed_at"),
            },
        ),
    )

    readonly_fields = (
        "id",
        "order_number",
        "status",
        "table",
        "subtotal",
        "tax_amount",
        "total",
        "created_at",
        "updated_at",
        "completed_at",
    )

    def get_total_formatted(self, obj):
        return f"${obj.total:,.2f}"

    get_total_formatted.short_description = "Total"
    get_total_formatted.admin_order_field = "total"
