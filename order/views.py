import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status, permissions

from inventory.services import StockOwnershipError
from .serializers import OrderCreateSerializer, OrderSerializer, OrderStatusSerializer
from .services import OrderService
from .models import *

logger = logging.getLogger(__name__)


def _owned_orders(user):
    return Order.objects.filter(created_by=user).prefetch_related("items__product")


class OrderListCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        orders = _owned_orders(request.user)
        order_type = request.query_params.get("type")
        if order_type:
            orders = orders.filter(order_type=order_type)
        order_status = request.query_params.get("status")
        if order_status:
            orders = orders.filter(status=order_status)
        return Response({"orders": OrderSerializer(orders, many=True).data})

    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = OrderService.create_order(
                user=request.user,
                order_type=data["order_type"],
                items=data["items"],
                warehouse=data.get("warehouse"),
                order_number=data.get("order_number") or None,
                supplier_customer=data.get("supplier_customer", ""),
                expected_date=data.get("expected_date"),
                notes=data.get("notes", ""),
            )
        except StockOwnershipError as e:
            return Response({"detail": str(e)}, status=status.HTTP_403_FORBIDDEN)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except Exception:
            logger.exception("Unexpected error creating %s order", data["order_type"])
            return Response({"detail": "Failed to create order"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

# e.g
# {
#   "order_type": "sales",
#   "warehouse": "591fa1ee-87ae-4b1a-96eb-c2860df9d9b9",
#   "supplier_customer": "Acme Retail",
#   "items": [
#     {"product": "223be6e6-5752-441f-82e6-14f2812acb84", "quantity": "6", "unit_price": "12.50"}
#   ]
# }


class OrderDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        order = _owned_orders(request.user).filter(pk=pk).first()
        if not order:
            return Response({"detail": "Order not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)


class OrderStatusUpdateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, pk):
        order = Order.objects.filter(pk=pk, created_by=request.user).first()
        if not order:
            return Response({"detail": "Order not found"}, status=status.HTTP_404_NOT_FOUND)

        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            OrderService.update_status(order, serializer.validated_data["status"])
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"order_id": str(order.id), "status": order.status}, status=status.HTTP_200_OK)
