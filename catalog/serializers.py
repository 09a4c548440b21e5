from decimal import Decimal

from django.db.models import Sum
from rest_framework import serializers
from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    on_hand = serializers.SerializerMethodField(read_only=True)
    is_low_stock = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'description', 'category', 'uom', 'reorder_level', 'cost_price',
                  'selling_price', 'on_hand', 'is_low_stock', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'cost_price': {'min_value': Decimal("0")},
            'selling_price': {'min_value': Decimal("0")},
        }

    def get_on_hand(self, obj):
        # list views annotate on_hand; single objects fall back to an aggregate
        value = getattr(obj, "on_hand", None)
        if value is None:
            value = obj.stock_rows.aggregate(total=Sum("quantity"))["total"]
        return str(value or 0)

    def get_is_low_stock(self, obj):
        value = getattr(obj, "on_hand", None)
        if value is None:
            value = obj.stock_rows.aggregate(total=Sum("quantity"))["total"]
        # zero on hand counts as out of stock, not low
        return 0 < (value or 0) <= obj.reorder_level

    def validate_sku(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("sku is required.")
        return value
