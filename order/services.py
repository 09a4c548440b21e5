from django.db import transaction
import logging
from decimal import Decimal

from core.numbering import generate_document_number
from inventory.services import LedgerLine, StockLedger
from .models import *

logger = logging.getLogger(__name__)


class OrderService:

    TERMINAL_STATUSES = {Order.Status.COMPLETED, Order.Status.CANCELLED}

    @staticmethod
    def _generate_order_number():
        return generate_document_number(Order, "order_number", "ORD")

    @staticmethod
    def _get_unit_price(product, unit_price=None):
        if unit_price is not None:
            return Decimal(str(unit_price))
        return product.selling_price if product.selling_price is not None else Decimal("0")

    @staticmethod
    @transaction.atomic
    def create_order(
        user,
        order_type,
        items,
        warehouse=None,
        order_number=None,
        supplier_customer="",
        expected_date=None,
        notes="",
    ):
        """
        items: list of dicts like:
        [{"product": Product obj, "quantity": Decimal("2"), "unit_price": Decimal("10.00") or None, "notes": ""}]

        Sales orders deduct the ordered quantities from ``warehouse``; the
        whole order is rolled back if any line cannot be covered.
        """
        # 1. Validate
        valid_items = [item for item in items if item.get("product") and Decimal(str(item.get("quantity") or 0)) > 0]
        if not valid_items:
            raise ValueError("Please add at least one valid item")
        if order_type == Order.OrderType.SALES and warehouse is None:
            raise ValueError("Please select a warehouse for stock deduction")
        if order_number and Order.objects.filter(order_number=order_number).exists():
            raise ValueError(f"Order number {order_number} already exists")

        # 2. Create Order
        order = Order.objects.create(
            order_number=order_number or OrderService._generate_order_number(),
            order_type=order_type,
            status=Order.Status.PENDING,
            supplier_customer=supplier_customer or "",
            expected_date=expected_date,
            notes=notes or "",
            warehouse=warehouse if order_type == Order.OrderType.SALES else None,
            created_by=user,
        )

        # 3. Create OrderItems
        for item in valid_items:
            OrderItem.objects.create(
                order=order,
                product=item["product"],
                quantity=Decimal(str(item["quantity"])),
                unit_price=OrderService._get_unit_price(item["product"], item.get("unit_price")),
                notes=item.get("notes") or "",
            )

        # 4. Sales orders take stock out of the selected warehouse
        if order_type == Order.OrderType.SALES:
            StockLedger.sell(
                user,
                warehouse,
                [LedgerLine(product=item["product"], quantity=Decimal(str(item["quantity"]))) for item in valid_items],
                ref_type="ORDER",
                ref_id=order.id,
            )

        logger.info("Created %s order=%s with %s item(s)", order_type, order.order_number, len(valid_items))
        return order

    @staticmethod
    def update_status(order, new_status):
        if new_status not in Order.Status.values:
            raise ValueError("Invalid status")
        if order.status in OrderService.TERMINAL_STATUSES and new_status != order.status:
            raise ValueError(f"Order is already {order.status} and cannot change status")
        order.status = new_status
        order.save(update_fields=["status", "updated_at"])
        return order
