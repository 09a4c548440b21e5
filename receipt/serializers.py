from decimal import Decimal

from rest_framework import serializers

from catalog.models import Product
from core.fields import OwnedPrimaryKeyRelatedField
from inventory.models import Location, Warehouse
from order.models import Order
from .models import Receipt, ReceiptItem


class ReceiptItemCreateSerializer(serializers.Serializer):
    product = OwnedPrimaryKeyRelatedField(queryset=Product.objects.all(), owner_field="created_by")
    location = OwnedPrimaryKeyRelatedField(queryset=Location.objects.all(), required=False, allow_null=True)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ReceiptCreateSerializer(serializers.Serializer):
    receipt_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    warehouse = OwnedPrimaryKeyRelatedField(queryset=Warehouse.objects.all())
    order = OwnedPrimaryKeyRelatedField(queryset=Order.objects.all(), owner_field="created_by", required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = ReceiptItemCreateSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        warehouse = attrs["warehouse"]
        for item in attrs["items"]:
            location = item.get("location")
            if location is not None and location.warehouse_id != warehouse.id:
                raise serializers.ValidationError(
                    {"items": f"Location {location.short_code} does not belong to warehouse {warehouse.short_code}"}
                )
        return attrs


class ReceiptItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    location_code = serializers.CharField(source="location.short_code", read_only=True, default=None)

    class Meta:
        model = ReceiptItem
        fields = ['id', 'product', 'product_name', 'location', 'location_code', 'quantity', 'notes']
        read_only_fields = fields


class ReceiptSerializer(serializers.ModelSerializer):
    items = ReceiptItemSerializer(many=True, read_only=True)
    warehouse_name = serializers.CharField(source="warehouse.name", read_only=True)
    order_number = serializers.CharField(source="order.order_number", read_only=True, default=None)

    class Meta:
        model = Receipt
        fields = ['id', 'receipt_number', 'order', 'order_number', 'warehouse', 'warehouse_name',
                  'receipt_date', 'notes', 'items', 'created_at', 'updated_at']
        read_only_fields = fields
