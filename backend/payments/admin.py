from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """
    Admin view for the Payment model. Payments are history, so rows are
    read-only here.
    """

    list_display = (
        "payment_number",
        "order",
        "amount",
        "method",
        "status",
        "processed_by",
        "created_at",
    )
    list_filter = ("status", "method", "created_at")
    search_fields = ("payment_number", "order__order_number", "transaction_id")
    readonly_fields = [field.name for field in Payment._meta.fields]
    list_select_related = ("order", "processed_by")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
