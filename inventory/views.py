from django.db import transaction
from django.db.models import F, ProtectedError
from rest_framework import permissions, serializers, status
from rest_framework.generics import ListAPIView, ListCreateAPIView, RetrieveUpdateDestroyAPIView
from rest_framework.response import Response

from core.fields import query_param

from .models import Location, Stock, StockMovement, Warehouse
from .serializers import LocationSerializer, StockMovementSerializer, StockSerializer, WarehouseSerializer


class WarehouseListCreateView(ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = WarehouseSerializer

    def get_queryset(self):
        return Warehouse.objects.filter(owner=self.request.user)

    def perform_create(self, serializer):
        serializer.save(owner=self.request.user)


class WarehouseDetailView(RetrieveUpdateDestroyAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = WarehouseSerializer

    def get_queryset(self):
        return Warehouse.objects.filter(owner=self.request.user)

    def destroy(self, request, *args, **kwargs):
        warehouse = self.get_object()
        try:
            with transaction.atomic():
                warehouse.stock_rows.all().delete()
                warehouse.delete()
        except ProtectedError:
            return Response(
                {"detail": "This warehouse is used in orders, receipts or transfers and cannot be deleted."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


class LocationListCreateView(ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = LocationSerializer

    def get_queryset(self):
        queryset = Location.objects.filter(owner=self.request.user).select_related("warehouse")
        warehouse_id = query_param(self.request, "warehouse", serializers.UUIDField())
        if warehouse_id:
            queryset = queryset.filter(warehouse_id=warehouse_id)
        return queryset

    def perform_create(self, serializer):
        serializer.save(owner=self.request.user)


class LocationDetailView(RetrieveUpdateDestroyAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = LocationSerializer

    def get_queryset(self):
        return Location.objects.filter(owner=self.request.user).select_related("warehouse")

    def destroy(self, request, *args, **kwargs):
        location = self.get_object()
        if location.stock_rows.filter(quantity__gt=0).exists():
            return Response(
                {"detail": "This location still holds stock and cannot be deleted."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        # rows left with a null location would clash with the warehouse-level row
        with transaction.atomic():
            location.stock_rows.all().delete()
            location.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class StockListView(ListAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = StockSerializer

    def get_queryset(self):
        queryset = (
            Stock.objects.filter(owner=self.request.user)
            .select_related("product", "warehouse", "location")
            .order_by("product__name", "warehouse__name", "id")
        )
        warehouse_id = query_param(self.request, "warehouse", serializers.UUIDField())
        if warehouse_id:
            queryset = queryset.filter(warehouse_id=warehouse_id)
        product_id = query_param(self.request, "product", serializers.UUIDField())
        if product_id:
            queryset = queryset.filter(product_id=product_id)
        if self.request.query_params.get("low_stock") in {"1", "true", "yes"}:
            queryset = queryset.filter(quantity__lte=F("product__reorder_level"))
        return queryset


class StockMovementListView(ListAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = StockMovementSerializer

    def get_queryset(self):
        queryset = StockMovement.objects.filter(stock__owner=self.request.user)
        stock_id = query_param(self.request, "stock", serializers.IntegerField(min_value=1))
        if stock_id:
            queryset = queryset.filter(stock_id=stock_id)
        return queryset
