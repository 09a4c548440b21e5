import uuid
from decimal import Decimal
from django.db import models
from django.conf import settings
from django.utils import timezone

from catalog.models import Product
from inventory.models import Warehouse


class Order(models.Model):
    class OrderType(models.TextChoices):
        PURCHASE = "purchase", "Purchase"
        SALES = "sales", "Sales"

    class Status(models.TextChoices):
        PENDING = "pending"
        CONFIRMED = "confirmed"
        COMPLETED = "completed"
        CANCELLED = "cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=30, unique=True)
    order_type = models.CharField(max_length=10, choices=OrderType.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    supplier_customer = models.CharField(max_length=255, blank=True)
    order_date = models.DateTimeField(default=timezone.now)
    expected_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    # source warehouse of a sales order
    warehouse = models.ForeignKey(Warehouse, related_name="orders", on_delete=models.PROTECT, null=True, blank=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="orders", on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-order_date"]

    def __str__(self):
        return self.order_number

    @property
    def total_amount(self):
        return sum((item.total for item in self.items.all()), Decimal("0"))


class OrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey(Product, related_name="order_items", on_delete=models.PROTECT)
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def total(self):
        return self.quantity * self.unit_price
