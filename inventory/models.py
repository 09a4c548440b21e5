import uuid
from django.conf import settings
from django.db import models
from django.db.models import Q

from catalog.models import Product


class Warehouse(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    short_code = models.CharField(max_length=20, unique=True)
    address = models.TextField(blank=True)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="warehouses", on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.name} ({self.short_code})"


class Location(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    warehouse = models.ForeignKey(Warehouse, related_name="locations", on_delete=models.CASCADE)
    name = models.CharField(max_length=255)
    short_code = models.CharField(max_length=20)
    aisle = models.CharField(max_length=50, blank=True)
    rack = models.CharField(max_length=50, blank=True)
    shelf = models.CharField(max_length=50, blank=True)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="locations", on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("warehouse", "short_code")
        ordering = ["warehouse", "short_code"]

    def __str__(self):
        return f"{self.warehouse.short_code}/{self.short_code}"


class Stock(models.Model):
    product = models.ForeignKey(Product, related_name="stock_rows", on_delete=models.CASCADE)
    warehouse = models.ForeignKey(Warehouse, related_name="stock_rows", on_delete=models.CASCADE)
    location = models.ForeignKey(Location, related_name="stock_rows", on_delete=models.SET_NULL, null=True, blank=True)
    quantity = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    reserved_quantity = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="stock_rows", on_delete=models.CASCADE)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "warehouse", "location"],
                condition=Q(location__isnull=False),
                name="inventory_stock_product_warehouse_location_uniq",
            ),
            models.UniqueConstraint(
                fields=["product", "warehouse"],
                condition=Q(location__isnull=True),
                name="inventory_stock_product_warehouse_no_location_uniq",
            ),
        ]

    @property
    def available_quantity(self):
        return self.quantity - self.reserved_quantity

    def __str__(self):
        return f"{self.product.sku} @ {self.warehouse.short_code}: {self.quantity}"


class StockMovement(models.Model):
    stock = models.ForeignKey(Stock, related_name="movements", on_delete=models.CASCADE)
    quantity = models.DecimalField(max_digits=12, decimal_places=2)  # positive for stock_in, negative for stock_out
    reason = models.CharField(max_length=255)  # "Receipt", "Sales Order", "Transfer Out", ...
    ref_type = models.CharField(max_length=30, blank=True)
    ref_id = models.CharField(max_length=64, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="stock_movements", on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
