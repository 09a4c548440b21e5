from django.contrib import admin

from .models import Receipt, ReceiptItem


class ReceiptItemInline(admin.TabularInline):
    model = ReceiptItem
    extra = 0


@admin.register(Receipt)
class ReceiptAdmin(admin.ModelAdmin):
    list_display = ("receipt_number", "warehouse", "order", "receipt_date", "created_by")
    search_fields = ("receipt_number",)
    inlines = [ReceiptItemInline]
