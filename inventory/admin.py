from django.contrib import admin

from .models import Location, Stock, StockMovement, Warehouse


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ("short_code", "name", "owner", "created_at")
    search_fields = ("short_code", "name")


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("short_code", "name", "warehouse", "aisle", "rack", "shelf")
    list_filter = ("warehouse",)


@admin.register(Stock)
class StockAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "warehouse", "location", "quantity", "reserved_quantity", "last_updated")
    list_filter = ("warehouse",)
    search_fields = ("product__sku", "product__name")


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("id", "stock", "quantity", "reason", "ref_type", "ref_id", "created_at")
    list_filter = ("reason", "ref_type")
