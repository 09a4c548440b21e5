import logging
from decimal import Decimal

from django.db import transaction

from core.numbering import generate_document_number
from inventory.services import LedgerLine, StockLedger
from order.models import Order
from .models import Receipt, ReceiptItem

logger = logging.getLogger(__name__)


class ReceiptService:

    @staticmethod
    @transaction.atomic
    def create_receipt(user, warehouse, items, order=None, receipt_number=None, notes=""):
        """
        items: list of dicts like:
        [{"product": Product obj, "location": Location obj or None, "quantity": Decimal("5"), "notes": ""}]

        Records the receipt and adds every line to the warehouse stock.
        """
        if warehouse is None:
            raise ValueError("Please select a warehouse")
        valid_items = [item for item in items if item.get("product") and Decimal(str(item.get("quantity") or 0)) > 0]
        if not valid_items:
            raise ValueError("Please add at least one valid item")
        if order is not None and order.order_type != Order.OrderType.PURCHASE:
            raise ValueError("Receipts can only be linked to purchase orders")
        if receipt_number and Receipt.objects.filter(receipt_number=receipt_number).exists():
            raise ValueError(f"Receipt number {receipt_number} already exists")

        receipt = Receipt.objects.create(
            receipt_number=receipt_number or generate_document_number(Receipt, "receipt_number", "RCP"),
            order=order,
            warehouse=warehouse,
            notes=notes or "",
            created_by=user,
        )
        lines = []
        for item in valid_items:
            quantity = Decimal(str(item["quantity"]))
            ReceiptItem.objects.create(
                receipt=receipt,
                product=item["product"],
                location=item.get("location"),
                quantity=quantity,
                notes=item.get("notes") or "",
            )
            lines.append(LedgerLine(product=item["product"], quantity=quantity, location=item.get("location")))

        StockLedger.receive(user, warehouse, lines, ref_type="RECEIPT", ref_id=receipt.id)
        logger.info("Created receipt=%s with %s item(s)", receipt.receipt_number, len(lines))
        return receipt
