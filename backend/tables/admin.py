from django.contrib import admin

from .models import Table


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ("number", "location", "capacity", "status", "current_order", "reserved_for")
    list_filter = ("status", "location")
    search_fields = ("number", "reserved_for")
    # Seating is owned by TableService
    readonly_fields = ("status", "current_order", "created_at", "updated_at")
