from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "order_type", "status", "supplier_customer", "order_date", "created_by")
    list_filter = ("order_type", "status")
    search_fields = ("order_number", "supplier_customer")
    inlines = [OrderItemInline]
