import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction

from core.numbering import generate_document_number
from inventory.services import StockLedger, TransferLine
from .models import Transfer, TransferItem

logger = logging.getLogger(__name__)


def transfer_moves_stock() -> bool:
    return bool(getattr(settings, "STOCKMASTER", {}).get("TRANSFER_MOVES_STOCK", True))


class TransferService:

    TERMINAL_STATUSES = {Transfer.Status.COMPLETED, Transfer.Status.CANCELLED}

    @staticmethod
    @transaction.atomic
    def create_transfer(user, from_warehouse, to_warehouse, items, transfer_number=None, notes=""):
        """
        items: list of dicts like:
        [{"product": Product obj, "quantity": Decimal("4"), "from_location": Location or None, "to_location": Location or None}]

        When transfers move stock the quantities leave ``from_warehouse`` and
        arrive in ``to_warehouse`` before the transfer is marked completed;
        otherwise the transfer is only recorded as pending.
        """
        if from_warehouse is None or to_warehouse is None:
            raise ValueError("Please select both warehouses")
        if from_warehouse.id == to_warehouse.id:
            raise ValueError("Source and destination warehouses must be different")
        valid_items = [item for item in items if item.get("product") and Decimal(str(item.get("quantity") or 0)) > 0]
        if not valid_items:
            raise ValueError("Please add at least one valid item")
        if transfer_number and Transfer.objects.filter(transfer_number=transfer_number).exists():
            raise ValueError(f"Transfer number {transfer_number} already exists")
        for item in valid_items:
            for field, warehouse in (("from_location", from_warehouse), ("to_location", to_warehouse)):
                location = item.get(field)
                if location is not None and location.warehouse_id != warehouse.id:
                    raise ValueError(f"Location {location.short_code} does not belong to warehouse {warehouse.short_code}")

        moves_stock = transfer_moves_stock()
        transfer = Transfer.objects.create(
            transfer_number=transfer_number or generate_document_number(Transfer, "transfer_number", "TRF"),
            from_warehouse=from_warehouse,
            to_warehouse=to_warehouse,
            status=Transfer.Status.PENDING,
            notes=notes or "",
            created_by=user,
        )

        lines = []
        for item in valid_items:
            quantity = Decimal(str(item["quantity"]))
            TransferItem.objects.create(
                transfer=transfer,
                product=item["product"],
                from_location=item.get("from_location"),
                to_location=item.get("to_location"),
                quantity=quantity,
                notes=item.get("notes") or "",
            )
            lines.append(
                TransferLine(
                    product=item["product"],
                    quantity=quantity,
                    from_location=item.get("from_location"),
                    to_location=item.get("to_location"),
                )
            )

        if moves_stock:
            StockLedger.transfer(user, from_warehouse, to_warehouse, lines, ref_type="TRANSFER", ref_id=transfer.id)
            transfer.status = Transfer.Status.COMPLETED
            transfer.save(update_fields=["status", "updated_at"])

        logger.info(
            "Created transfer=%s status=%s with %s item(s)", transfer.transfer_number, transfer.status, len(lines)
        )
        return transfer

    @staticmethod
    def update_status(transfer, new_status):
        # completed is only reached through a stock move
        if new_status not in Transfer.Status.values:
            raise ValueError("Invalid status")
        if transfer.status in TransferService.TERMINAL_STATUSES and new_status != transfer.status:
            raise ValueError(f"Transfer is already {transfer.status} and cannot change status")
        if new_status == Transfer.Status.COMPLETED and transfer.status != Transfer.Status.COMPLETED:
            raise ValueError("Transfers are completed when stock is moved and cannot be completed manually")
        transfer.status = new_status
        transfer.save(update_fields=["status", "updated_at"])
        return transfer
