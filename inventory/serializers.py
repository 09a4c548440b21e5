from rest_framework import serializers

from .models import Location, Stock, StockMovement, Warehouse


class WarehouseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Warehouse
        fields = ['id', 'name', 'short_code', 'address', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_short_code(self, value):
        return value.strip().upper()


class LocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = ['id', 'warehouse', 'name', 'short_code', 'aisle', 'rack', 'shelf', 'created_at']
        read_only_fields = ['id', 'created_at']

    def validate_warehouse(self, warehouse):
        user = self.context["request"].user
        if warehouse.owner_id != user.id:
            raise serializers.ValidationError("Warehouse not found.")
        location = self.instance
        if location is not None and location.warehouse_id != warehouse.id and location.stock_rows.exists():
            raise serializers.ValidationError("This location holds stock and cannot move to another warehouse.")
        return warehouse


class StockSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    reorder_level = serializers.IntegerField(source="product.reorder_level", read_only=True)
    warehouse_name = serializers.CharField(source="warehouse.name", read_only=True)
    location_code = serializers.SerializerMethodField(read_only=True)
    available_quantity = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    is_low_stock = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Stock
        fields = ['id', 'product', 'product_name', 'product_sku', 'reorder_level', 'warehouse', 'warehouse_name',
                  'location', 'location_code', 'quantity', 'reserved_quantity', 'available_quantity',
                  'is_low_stock', 'last_updated']
        read_only_fields = fields

    def get_location_code(self, obj):
        return obj.location.short_code if obj.location else None

    def get_is_low_stock(self, obj):
        return obj.quantity <= obj.product.reorder_level


class StockMovementSerializer(serializers.ModelSerializer):
    class Meta:
        model = StockMovement
        fields = ['id', 'stock', 'quantity', 'reason', 'ref_type', 'ref_id', 'created_at']
        read_only_fields = fields
