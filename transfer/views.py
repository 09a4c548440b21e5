import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status, permissions

from inventory.services import StockOwnershipError
from .serializers import TransferCreateSerializer, TransferSerializer, TransferStatusSerializer
from .services import TransferService
from .models import Transfer

logger = logging.getLogger(__name__)


def _owned_transfers(user):
    return (
        Transfer.objects.filter(created_by=user)
        .select_related("from_warehouse", "to_warehouse")
        .prefetch_related("items__product")
    )


class TransferListCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        transfers = _owned_transfers(request.user)
        transfer_status = request.query_params.get("status")
        if transfer_status:
            transfers = transfers.filter(status=transfer_status)
        return Response({"transfers": TransferSerializer(transfers, many=True).data})

    def post(self, request):
        serializer = TransferCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            transfer = TransferService.create_transfer(
                user=request.user,
                from_warehouse=data["from_warehouse"],
                to_warehouse=data["to_warehouse"],
                items=data["items"],
                transfer_number=data.get("transfer_number") or None,
                notes=data.get("notes", ""),
            )
        except StockOwnershipError as e:
            return Response({"detail": str(e)}, status=status.HTTP_403_FORBIDDEN)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except Exception:
            logger.exception("Unexpected error creating transfer")
            return Response({"detail": "Failed to create transfer"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(TransferSerializer(transfer).data, status=status.HTTP_201_CREATED)

# e.g
# {
#   "from_warehouse": "591fa1ee-87ae-4b1a-96eb-c2860df9d9b9",
#   "to_warehouse": "0b7d52f4-2a55-4c49-9f0e-6f1c8c3f6a11",
#   "items": [
#     {"product": "223be6e6-5752-441f-82e6-14f2812acb84", "from_location": null, "to_location": null, "quantity": "4"}
#   ]
# }


class TransferDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        transfer = _owned_transfers(request.user).filter(pk=pk).first()
        if not transfer:
            return Response({"detail": "Transfer not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(TransferSerializer(transfer).data)


class TransferStatusUpdateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, pk):
        transfer = Transfer.objects.filter(pk=pk, created_by=request.user).first()
        if not transfer:
            return Response({"detail": "Transfer not found"}, status=status.HTTP_404_NOT_FOUND)

        serializer = TransferStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            TransferService.update_status(transfer, serializer.validated_data["status"])
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"transfer_id": str(transfer.id), "status": transfer.status}, status=status.HTTP_200_OK)
