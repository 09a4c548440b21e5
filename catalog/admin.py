from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "category", "reorder_level", "cost_price", "selling_price", "created_by")
    list_filter = ("category",)
    search_fields = ("sku", "name")
