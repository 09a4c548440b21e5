from django.contrib import admin

from .models import Transfer, TransferItem


class TransferItemInline(admin.TabularInline):
    model = TransferItem
    extra = 0


@admin.register(Transfer)
class TransferAdmin(admin.ModelAdmin):
    list_display = ("transfer_number", "from_warehouse", "to_warehouse", "status", "transfer_date")
    list_filter = ("status",)
    search_fields = ("transfer_number",)
    inlines = [TransferItemInline]
