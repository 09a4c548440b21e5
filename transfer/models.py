import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone

from catalog.models import Product
from inventory.models import Location, Warehouse


class Transfer(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        IN_TRANSIT = "in_transit", "In Transit"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transfer_number = models.CharField(max_length=30, unique=True)
    from_warehouse = models.ForeignKey(Warehouse, related_name="outgoing_transfers", on_delete=models.PROTECT)
    to_warehouse = models.ForeignKey(Warehouse, related_name="incoming_transfers", on_delete=models.PROTECT)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    transfer_date = models.DateTimeField(default=timezone.now)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="transfers", on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-transfer_date"]

    def __str__(self):
        return self.transfer_number


class TransferItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transfer = models.ForeignKey(Transfer, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey(Product, related_name="transfer_items", on_delete=models.PROTECT)
    from_location = models.ForeignKey(
        Location, related_name="outgoing_transfer_items", on_delete=models.SET_NULL, null=True, blank=True
    )
    to_location = models.ForeignKey(
        Location, related_name="incoming_transfer_items", on_delete=models.SET_NULL, null=True, blank=True
    )
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
