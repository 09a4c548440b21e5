import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from django.db import transaction

from catalog.models import Product
from .models import Location, Stock, StockMovement, Warehouse

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class StockLedgerError(ValueError):
    """Base exception for rejected stock ledger updates."""


class InsufficientStockError(StockLedgerError):
    """Raised when a warehouse cannot cover the requested quantity."""


class StockOwnershipError(StockLedgerError):
    """Raised when the acting user does not own a record touched by the ledger."""


@dataclass(frozen=True)
class LedgerLine:
    product: Product
    quantity: Decimal
    location: Optional[Location] = None


@dataclass(frozen=True)
class TransferLine:
    product: Product
    quantity: Decimal
    from_location: Optional[Location] = None
    to_location: Optional[Location] = None


def _dec(value) -> Decimal:
    return Decimal(str(value or 0))


def _fmt(value: Decimal) -> str:
    return format(value.normalize(), "f")


class StockLedger:
    """
    Applies receipt, sale and transfer quantity deltas to stock rows.

    Every public operation takes the acting user explicitly, checks that the
    user owns each warehouse, location and product it touches, locks the
    stock rows it reads and runs inside a single transaction, so a rejected
    submission leaves no stock row modified.
    """

    # -----------------------------
    # Helpers
    # -----------------------------
    @staticmethod
    def _owner_id(obj):
        if isinstance(obj, Product):
            return obj.created_by_id
        return obj.owner_id

    @staticmethod
    def _ensure_owned(user, *objects) -> None:
        if user is None or not getattr(user, "is_authenticated", False):
            raise StockOwnershipError("You must be signed in to update stock")
        for obj in objects:
            if obj is None:
                continue
            if StockLedger._owner_id(obj) != user.id:
                raise StockOwnershipError(f"You do not have access to {obj}")

    @staticmethod
    def _ensure_location_in(location: Optional[Location], warehouse: Warehouse) -> None:
        if location is not None and location.warehouse_id != warehouse.id:
            raise StockLedgerError(f"Location {location.short_code} does not belong to warehouse {warehouse.short_code}")

    @staticmethod
    def _validate_lines(lines) -> List:
        lines = list(lines or [])
        if not lines:
            raise StockLedgerError("Please add at least one valid item")
        for line in lines:
            if _dec(line.quantity) <= ZERO:
                raise StockLedgerError(f"Quantity for {line.product.name} must be greater than zero")
        return lines

    @staticmethod
    def _record(stock: Stock, delta: Decimal, reason: str, user, ref_type: str, ref_id) -> StockMovement:
        return StockMovement.objects.create(
            stock=stock,
            quantity=delta,
            reason=reason,
            ref_type=ref_type,
            ref_id=str(ref_id or ""),
            created_by=user,
        )

    @staticmethod
    def _locked_rows(product: Product, warehouse: Warehouse, location: Optional[Location] = None) -> List[Stock]:
        rows = Stock.objects.select_for_update().filter(product=product, warehouse=warehouse)
        if location is not None:
            rows = rows.filter(location=location)
        return list(rows.order_by("id"))

    @staticmethod
    def _available(rows: Iterable[Stock]) -> Decimal:
        return sum((max(row.available_quantity, ZERO) for row in rows), ZERO)

    @staticmethod
    def _add(user, product, warehouse, location, quantity, reason, ref_type, ref_id) -> Stock:
        quantity = _dec(quantity)
        stock = (
            Stock.objects.select_for_update()
            .filter(product=product, warehouse=warehouse)
            .filter(**({"location": location} if location is not None else {"location__isnull": True}))
            .first()
        )
        if stock:
            stock.quantity = _dec(stock.quantity) + quantity
            stock.save(update_fields=["quantity", "last_updated"])
        else:
            stock = Stock.objects.create(
                product=product,
                warehouse=warehouse,
                location=location,
                quantity=quantity,
                reserved_quantity=ZERO,
                owner=user,
            )
        StockLedger._record(stock, quantity, reason, user, ref_type, ref_id)
        return stock

    @staticmethod
    def _deduct(user, rows: List[Stock], quantity, reason, ref_type, ref_id) -> None:
        remaining = _dec(quantity)
        for row in rows:
            if remaining <= ZERO:
                break
            available = row.available_quantity
            if available <= ZERO:
                continue
            take_qty = min(remaining, available)
            row.quantity = _dec(row.quantity) - take_qty
            row.save(update_fields=["quantity", "last_updated"])
            StockLedger._record(row, -take_qty, reason, user, ref_type, ref_id)
            remaining -= take_qty
        if remaining > ZERO:
            # the availability pre-check makes this unreachable unless rows changed underneath
            raise InsufficientStockError("Stock changed while the submission was being applied")

    @staticmethod
    def _check_available(required: Dict, rows_by_key: Dict, warehouse: Warehouse) -> None:
        for key, (product, requested) in required.items():
            rows = rows_by_key[key]
            if not rows:
                logger.warning("No stock for product=%s in warehouse=%s", product.id, warehouse.id)
                raise InsufficientStockError(f"No stock available for {product.name} in selected warehouse")
            total_available = StockLedger._available(rows)
            if total_available < requested:
                logger.warning(
                    "Insufficient stock for product=%s in warehouse=%s: available=%s required=%s",
                    product.id, warehouse.id, total_available, requested,
                )
                raise InsufficientStockError(
                    f"Insufficient stock for {product.name}. Available: {_fmt(total_available)}, Required: {_fmt(requested)}"
                )

    # -----------------------------
    # Public operations
    # -----------------------------
    @staticmethod
    @transaction.atomic
    def receive(user, warehouse: Warehouse, lines: Iterable[LedgerLine], *, reason="Receipt", ref_type="", ref_id=None) -> List[Stock]:
        if warehouse is None:
            raise StockLedgerError("Please select a warehouse")
        lines = StockLedger._validate_lines(lines)
        StockLedger._ensure_owned(user, warehouse)
        for line in lines:
            StockLedger._ensure_owned(user, line.product, line.location)
            StockLedger._ensure_location_in(line.location, warehouse)

        touched = [
            StockLedger._add(user, line.product, warehouse, line.location, line.quantity, reason, ref_type, ref_id)
            for line in lines
        ]
        logger.info("Received %s line(s) into warehouse=%s ref=%s:%s", len(lines), warehouse.id, ref_type, ref_id)
        return touched

    @staticmethod
    @transaction.atomic
    def sell(user, warehouse: Warehouse, lines: Iterable[LedgerLine], *, reason="Sales Order", ref_type="", ref_id=None) -> None:
        if warehouse is None:
            raise StockLedgerError("Please select a warehouse for stock deduction")
        lines = StockLedger._validate_lines(lines)
        StockLedger._ensure_owned(user, warehouse)

        # 1. Total the request per product so repeated lines are checked together
        required = {}
        for line in lines:
            StockLedger._ensure_owned(user, line.product)
            product, requested = required.get(line.product.id, (line.product, ZERO))
            required[line.product.id] = (product, requested + _dec(line.quantity))

        # 2. Lock rows and verify availability before any write
        rows_by_product = {
            product_id: StockLedger._locked_rows(product, warehouse)
            for product_id, (product, _) in required.items()
        }
        StockLedger._check_available(required, rows_by_product, warehouse)

        # 3. Deduct greedily, oldest row first
        for line in lines:
            StockLedger._deduct(user, rows_by_product[line.product.id], line.quantity, reason, ref_type, ref_id)
        logger.info("Deducted %s line(s) from warehouse=%s ref=%s:%s", len(lines), warehouse.id, ref_type, ref_id)

    @staticmethod
    @transaction.atomic
    def transfer(
        user,
        from_warehouse: Warehouse,
        to_warehouse: Warehouse,
        lines: Iterable[TransferLine],
        *,
        ref_type="",
        ref_id=None,
    ) -> None:
        if from_warehouse is None or to_warehouse is None:
            raise StockLedgerError("Please select both warehouses")
        if from_warehouse.id == to_warehouse.id:
            raise StockLedgerError("Source and destination warehouses must be different")
        lines = StockLedger._validate_lines(lines)
        StockLedger._ensure_owned(user, from_warehouse, to_warehouse)

        # 1. Total the request per product and per source location
        required = {}
        required_at_location = {}
        for line in lines:
            StockLedger._ensure_owned(user, line.product, line.from_location, line.to_location)
            StockLedger._ensure_location_in(line.from_location, from_warehouse)
            StockLedger._ensure_location_in(line.to_location, to_warehouse)
            product, requested = required.get(line.product.id, (line.product, ZERO))
            required[line.product.id] = (product, requested + _dec(line.quantity))
            if line.from_location is not None:
                key = (line.product.id, line.from_location.id)
                product, requested = required_at_location.get(key, (line.product, ZERO))
                required_at_location[key] = (product, requested + _dec(line.quantity))

        # 2. Lock each product's rows once; location lines draw from a slice of the same objects
        rows_by_product = {
            product_id: StockLedger._locked_rows(product, from_warehouse)
            for product_id, (product, _) in required.items()
        }
        rows_by_location = {
            (product_id, location_id): [row for row in rows_by_product[product_id] if row.location_id == location_id]
            for product_id, location_id in required_at_location
        }
        StockLedger._check_available(required_at_location, rows_by_location, from_warehouse)
        StockLedger._check_available(required, rows_by_product, from_warehouse)

        # 3. Location lines first, so lines without a location take what is left
        ordered = sorted(lines, key=lambda line: line.from_location is None)
        for line in ordered:
            if line.from_location is not None:
                rows = rows_by_location[(line.product.id, line.from_location.id)]
            else:
                rows = rows_by_product[line.product.id]
            StockLedger._deduct(user, rows, line.quantity, "Transfer Out", ref_type, ref_id)
            StockLedger._add(user, line.product, to_warehouse, line.to_location, line.quantity, "Transfer In", ref_type, ref_id)
        logger.info(
            "Moved %s line(s) from warehouse=%s to warehouse=%s ref=%s:%s",
            len(lines), from_warehouse.id, to_warehouse.id, ref_type, ref_id,
        )
