from decimal import Decimal

from rest_framework import serializers

from catalog.models import Product
from inventory.models import Warehouse
from core.fields import OwnedPrimaryKeyRelatedField
from .models import Order, OrderItem


class OrderItemCreateSerializer(serializers.Serializer):
    product = OwnedPrimaryKeyRelatedField(queryset=Product.objects.all(), owner_field="created_by")
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"), required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderCreateSerializer(serializers.Serializer):
    order_number = serializers.CharField(max_length=30, required=False, allow_blank=True)
    order_type = serializers.ChoiceField(choices=Order.OrderType.choices)
    supplier_customer = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    expected_date = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    warehouse = OwnedPrimaryKeyRelatedField(queryset=Warehouse.objects.all(), required=False, allow_null=True)
    items = OrderItemCreateSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        if attrs["order_type"] == Order.OrderType.SALES and not attrs.get("warehouse"):
            raise serializers.ValidationError({"warehouse": "Please select a warehouse for stock deduction"})
        return attrs


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'product_name', 'product_sku', 'quantity', 'unit_price', 'total', 'notes']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'order_number', 'order_type', 'status', 'supplier_customer', 'order_date', 'expected_date',
                  'notes', 'warehouse', 'total_amount', 'items', 'created_at', 'updated_at']
        read_only_fields = fields


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)
