import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status, permissions, serializers

from core.fields import query_param
from inventory.services import StockOwnershipError
from .serializers import ReceiptCreateSerializer, ReceiptSerializer
from .services import ReceiptService
from .models import Receipt

logger = logging.getLogger(__name__)


def _owned_receipts(user):
    return (
        Receipt.objects.filter(created_by=user)
        .select_related("warehouse", "order")
        .prefetch_related("items__product", "items__location")
    )


class ReceiptListCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        receipts = _owned_receipts(request.user)
        warehouse_id = query_param(request, "warehouse", serializers.UUIDField())
        if warehouse_id:
            receipts = receipts.filter(warehouse_id=warehouse_id)
        return Response({"receipts": ReceiptSerializer(receipts, many=True).data})

    def post(self, request):
        serializer = ReceiptCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            receipt = ReceiptService.create_receipt(
                user=request.user,
                warehouse=data["warehouse"],
                items=data["items"],
                order=data.get("order"),
                receipt_number=data.get("receipt_number") or None,
                notes=data.get("notes", ""),
            )
        except StockOwnershipError as e:
            return Response({"detail": str(e)}, status=status.HTTP_403_FORBIDDEN)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except Exception:
            logger.exception("Unexpected error creating receipt")
            return Response({"detail": "Failed to create receipt"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(ReceiptSerializer(receipt).data, status=status.HTTP_201_CREATED)

# e.g
# {
#   "warehouse": "591fa1ee-87ae-4b1a-96eb-c2860df9d9b9",
#   "order": null,
#   "items": [
#     {"product": "223be6e6-5752-441f-82e6-14f2812acb84", "location": null, "quantity": "100"}
#   ]
# }


class ReceiptDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        receipt = _owned_receipts(request.user).filter(pk=pk).first()
        if not receipt:
            return Response({"detail": "Receipt not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(ReceiptSerializer(receipt).data)
