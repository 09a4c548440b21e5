from decimal import Decimal

from rest_framework import serializers

from catalog.models import Product
from core.fields import OwnedPrimaryKeyRelatedField
from inventory.models import Location, Warehouse
from .models import Transfer, TransferItem


class TransferItemCreateSerializer(serializers.Serializer):
    product = OwnedPrimaryKeyRelatedField(queryset=Product.objects.all(), owner_field="created_by")
    from_location = OwnedPrimaryKeyRelatedField(queryset=Location.objects.all(), required=False, allow_null=True)
    to_location = OwnedPrimaryKeyRelatedField(queryset=Location.objects.all(), required=False, allow_null=True)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class TransferCreateSerializer(serializers.Serializer):
    transfer_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    from_warehouse = OwnedPrimaryKeyRelatedField(queryset=Warehouse.objects.all())
    to_warehouse = OwnedPrimaryKeyRelatedField(queryset=Warehouse.objects.all())
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = TransferItemCreateSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        if attrs["from_warehouse"].id == attrs["to_warehouse"].id:
            raise serializers.ValidationError({"to_warehouse": "Source and destination warehouses must be different"})
        for item in attrs["items"]:
            for field, warehouse in (("from_location", attrs["from_warehouse"]), ("to_location", attrs["to_warehouse"])):
                location = item.get(field)
                if location is not None and location.warehouse_id != warehouse.id:
                    raise serializers.ValidationError(
                        {"items": f"Location {location.short_code} does not belong to warehouse {warehouse.short_code}"}
                    )
        return attrs


class TransferItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = TransferItem
        fields = ['id', 'product', 'product_name', 'from_location', 'to_location', 'quantity', 'notes']
        read_only_fields = fields


class TransferSerializer(serializers.ModelSerializer):
    items = TransferItemSerializer(many=True, read_only=True)
    from_warehouse_name = serializers.CharField(source="from_warehouse.name", read_only=True)
    to_warehouse_name = serializers.CharField(source="to_warehouse.name", read_only=True)

    class Meta:
        model = Transfer
        fields = ['id', 'transfer_number', 'from_warehouse', 'from_warehouse_name', 'to_warehouse',
                  'to_warehouse_name', 'status', 'transfer_date', 'notes', 'items', 'created_at', 'updated_at']
        read_only_fields = fields


class TransferStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Transfer.Status.choices)
