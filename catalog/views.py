from decimal import Decimal

from django.db.models import DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from rest_framework import permissions, status
from rest_framework.generics import ListAPIView, ListCreateAPIView, RetrieveUpdateDestroyAPIView
from rest_framework.response import Response

from inventory.models import Stock
from inventory.serializers import StockSerializer
from .models import Product
from .serializers import ProductSerializer
from .services import ProductInUseError, ProductService


def _owned_products(user):
    return Product.objects.filter(created_by=user).annotate(
        on_hand=Coalesce(
            Sum("stock_rows__quantity"),
            Value(Decimal("0")),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
    )


class ProductListCreateView(ListCreateAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ProductSerializer

    def get_queryset(self):
        queryset = _owned_products(self.request.user)
        category = self.request.query_params.get("category")
        if category:
            queryset = queryset.filter(category__iexact=category)
        search = self.request.query_params.get("search")
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(sku__icontains=search))
        return queryset

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)


class ProductDetailView(RetrieveUpdateDestroyAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = ProductSerializer

    def get_queryset(self):
        return _owned_products(self.request.user)

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        try:
            ProductService.delete_product(product)
        except ProductInUseError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProductStockView(ListAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = StockSerializer

    def get_queryset(self):
        return (
            Stock.objects.filter(product_id=self.kwargs["pk"], owner=self.request.user)
            .select_related("product", "warehouse", "location")
            .order_by("warehouse__name", "id")
        )
