from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient

from account.models import User
from catalog.models import Product
from inventory.models import Location, Stock, StockMovement, Warehouse
from inventory.services import (
    InsufficientStockError,
    LedgerLine,
    StockLedger,
    StockLedgerError,
    StockOwnershipError,
    TransferLine,
)
from order.models import Order


class LedgerTestMixin:
    def setUp(self):
        self.user = User.objects.create_user(email="owner@example.com", password="Pass123!")
        self.warehouse = Warehouse.objects.create(name="Main", short_code="MAIN", owner=self.user)
        self.loc_a = Location.objects.create(warehouse=self.warehouse, name="Bay A", short_code="A", owner=self.user)
        self.loc_b = Location.objects.create(warehouse=self.warehouse, name="Bay B", short_code="B", owner=self.user)
        self.product = Product.objects.create(name="Bolt", sku="BOLT-1", reorder_level=5, created_by=self.user)
        self.other_product = Product.objects.create(name="Nut", sku="NUT-1", created_by=self.user)

    def _stock(self, location, quantity, product=None, warehouse=None):
        return Stock.objects.create(
            product=product or self.product,
            warehouse=warehouse or self.warehouse,
            location=location,
            quantity=Decimal(quantity),
            owner=self.user,
        )


class StockLedgerReceiveTests(LedgerTestMixin, TestCase):
    def test_receive_creates_row_then_accumulates(self):
        StockLedger.receive(self.user, self.warehouse, [LedgerLine(self.product, Decimal("100"))])
        StockLedger.receive(self.user, self.warehouse, [LedgerLine(self.product, Decimal("250"))])

        stock = Stock.objects.get(product=self.product, warehouse=self.warehouse, location__isnull=True)
        self.assertEqual(stock.quantity, Decimal("350"))
        self.assertEqual(stock.movements.count(), 2)

    def test_receive_keeps_locations_separate(self):
        StockLedger.receive(
            self.user,
            self.warehouse,
            [LedgerLine(self.product, Decimal("4"), self.loc_a), LedgerLine(self.product, Decimal("6"), self.loc_b)],
        )

        self.assertEqual(Stock.objects.get(location=self.loc_a).quantity, Decimal("4"))
        self.assertEqual(Stock.objects.get(location=self.loc_b).quantity, Decimal("6"))

    def test_receive_without_warehouse_or_lines_is_rejected(self):
        with self.assertRaisesMessage(StockLedgerError, "Please select a warehouse"):
            StockLedger.receive(self.user, None, [LedgerLine(self.product, Decimal("1"))])
        with self.assertRaisesMessage(StockLedgerError, "Please add at least one valid item"):
            StockLedger.receive(self.user, self.warehouse, [])
        self.assertFalse(Stock.objects.exists())

    def test_receive_rejects_location_of_another_warehouse(self):
        other = Warehouse.objects.create(name="Overflow", short_code="OVF", owner=self.user)

        with self.assertRaises(StockLedgerError):
            StockLedger.receive(self.user, other, [LedgerLine(self.product, Decimal("1"), self.loc_a)])
        self.assertFalse(Stock.objects.exists())

    def test_receive_rejects_records_of_another_user(self):
        stranger = User.objects.create_user(email="stranger@example.com", password="Pass123!")

        with self.assertRaises(StockOwnershipError):
            StockLedger.receive(stranger, self.warehouse, [LedgerLine(self.product, Decimal("1"))])
        self.assertFalse(Stock.objects.exists())


class StockLedgerSellTests(LedgerTestMixin, TestCase):
    def test_sell_consumes_oldest_rows_first(self):
        row_a = self._stock(self.loc_a, "5")
        row_b = self._stock(self.loc_b, "3")

        StockLedger.sell(self.user, self.warehouse, [LedgerLine(self.product, Decimal("6"))], ref_type="ORDER", ref_id="x")

        row_a.refresh_from_db()
        row_b.refresh_from_db()
        self.assertEqual(row_a.quantity, Decimal("0"))
        self.assertEqual(row_b.quantity, Decimal("2"))
        deltas = list(StockMovement.objects.order_by("id").values_list("quantity", flat=True))
        self.assertEqual(deltas, [Decimal("-5"), Decimal("-1")])

    def test_sell_respects_reserved_quantity(self):
        row = self._stock(self.loc_a, "10")
        row.reserved_quantity = Decimal("8")
        row.save()

        with self.assertRaisesMessage(InsufficientStockError, "Available: 2, Required: 3"):
            StockLedger.sell(self.user, self.warehouse, [LedgerLine(self.product, Decimal("3"))])

    def test_insufficient_line_leaves_every_row_untouched(self):
        bolts = self._stock(self.loc_a, "10")
        nuts = self._stock(self.loc_a, "1", product=self.other_product)

        with self.assertRaisesMessage(InsufficientStockError, "Insufficient stock for Nut. Available: 1, Required: 2"):
            StockLedger.sell(
                self.user,
                self.warehouse,
                [LedgerLine(self.product, Decimal("4")), LedgerLine(self.other_product, Decimal("2"))],
            )

        bolts.refresh_from_db()
        nuts.refresh_from_db()
        self.assertEqual(bolts.quantity, Decimal("10"))
        self.assertEqual(nuts.quantity, Decimal("1"))
        self.assertFalse(StockMovement.objects.exists())

    def test_repeated_lines_are_checked_together(self):
        self._stock(self.loc_a, "5")

        with self.assertRaises(InsufficientStockError):
            StockLedger.sell(
                self.user,
                self.warehouse,
                [LedgerLine(self.product, Decimal("3")), LedgerLine(self.product, Decimal("3"))],
            )
        self.assertEqual(Stock.objects.get().quantity, Decimal("5"))

    def test_sell_without_stock_rows(self):
        with self.assertRaisesMessage(InsufficientStockError, "No stock available for Bolt in selected warehouse"):
            StockLedger.sell(self.user, self.warehouse, [LedgerLine(self.product, Decimal("1"))])

    def test_sell_total_matches_request(self):
        self._stock(self.loc_a, "7")
        self._stock(self.loc_b, "7")
        self._stock(None, "7")

        StockLedger.sell(self.user, self.warehouse, [LedgerLine(self.product, Decimal("15"))])

        remaining = sum(Stock.objects.values_list("quantity", flat=True), Decimal("0"))
        self.assertEqual(remaining, Decimal("6"))
        self.assertTrue(all(quantity >= 0 for quantity in Stock.objects.values_list("quantity", flat=True)))

    def test_sell_from_another_users_warehouse_is_rejected(self):
        self._stock(self.loc_a, "5")
        stranger = User.objects.create_user(email="stranger@example.com", password="Pass123!")

        with self.assertRaises(StockOwnershipError):
            StockLedger.sell(stranger, self.warehouse, [LedgerLine(self.product, Decimal("1"))])
        self.assertEqual(Stock.objects.get().quantity, Decimal("5"))


class StockLedgerTransferTests(LedgerTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.store = Warehouse.objects.create(name="Store", short_code="STORE", owner=self.user)

    def test_transfer_between_same_warehouse_is_rejected(self):
        self._stock(self.loc_a, "5")

        with self.assertRaisesMessage(StockLedgerError, "Source and destination warehouses must be different"):
            StockLedger.transfer(self.user, self.warehouse, self.warehouse, [TransferLine(self.product, Decimal("1"))])
        self.assertFalse(StockMovement.objects.exists())

    def test_transfer_from_location_only_draws_that_location(self):
        self._stock(self.loc_a, "2")
        self._stock(self.loc_b, "9")

        with self.assertRaises(InsufficientStockError):
            StockLedger.transfer(
                self.user, self.warehouse, self.store, [TransferLine(self.product, Decimal("3"), from_location=self.loc_a)]
            )

        StockLedger.transfer(
            self.user, self.warehouse, self.store, [TransferLine(self.product, Decimal("3"), from_location=self.loc_b)]
        )
        self.assertEqual(Stock.objects.get(location=self.loc_a).quantity, Decimal("2"))
        self.assertEqual(Stock.objects.get(location=self.loc_b).quantity, Decimal("6"))
        self.assertEqual(Stock.objects.get(warehouse=self.store).quantity, Decimal("3"))

    def test_location_and_warehouse_lines_cannot_share_the_same_units(self):
        self._stock(self.loc_a, "5")

        with self.assertRaisesMessage(InsufficientStockError, "Insufficient stock for Bolt. Available: 5, Required: 10"):
            StockLedger.transfer(
                self.user,
                self.warehouse,
                self.store,
                [
                    TransferLine(self.product, Decimal("5"), from_location=self.loc_a),
                    TransferLine(self.product, Decimal("5")),
                ],
            )

        self.assertEqual(Stock.objects.get(warehouse=self.warehouse).quantity, Decimal("5"))
        self.assertFalse(Stock.objects.filter(warehouse=self.store).exists())
        self.assertFalse(StockMovement.objects.exists())

    def test_warehouse_line_takes_what_location_lines_leave(self):
        self._stock(self.loc_a, "5")
        self._stock(self.loc_b, "5")

        StockLedger.transfer(
            self.user,
            self.warehouse,
            self.store,
            [
                TransferLine(self.product, Decimal("5")),
                TransferLine(self.product, Decimal("5"), from_location=self.loc_a),
            ],
        )

        self.assertEqual(Stock.objects.get(location=self.loc_a).quantity, Decimal("0"))
        self.assertEqual(Stock.objects.get(location=self.loc_b).quantity, Decimal("0"))
        self.assertEqual(Stock.objects.get(warehouse=self.store).quantity, Decimal("10"))


class StockModelTests(LedgerTestMixin, TestCase):
    def test_one_row_per_product_warehouse_without_location(self):
        self._stock(None, "1")

        with self.assertRaises(IntegrityError), transaction.atomic():
            self._stock(None, "2")

    def test_one_row_per_product_warehouse_location(self):
        self._stock(self.loc_a, "1")

        with self.assertRaises(IntegrityError), transaction.atomic():
            self._stock(self.loc_a, "2")

    def test_available_quantity(self):
        stock = Stock(quantity=Decimal("10"), reserved_quantity=Decimal("4"))
        self.assertEqual(stock.available_quantity, Decimal("6"))


class InventoryAPITests(LedgerTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(self.user)

    def test_create_warehouse_uppercases_code(self):
        response = self.client.post("/inventory/warehouses/", {"name": "North", "short_code": " nth "}, format="json")

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["short_code"], "NTH")

    def test_location_requires_own_warehouse(self):
        stranger = User.objects.create_user(email="stranger@example.com", password="Pass123!")
        foreign = Warehouse.objects.create(name="Theirs", short_code="THEIRS", owner=stranger)

        response = self.client.post(
            "/inventory/locations/", {"warehouse": str(foreign.id), "name": "Bay", "short_code": "X"}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("warehouse", response.data)

    def test_stock_list_low_stock_filter(self):
        self._stock(self.loc_a, "3")
        self._stock(self.loc_b, "30")

        response = self.client.get("/inventory/stock/", {"low_stock": "1"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["location_code"], "A")
        self.assertTrue(response.data[0]["is_low_stock"])

    def test_movements_are_listed_for_owner(self):
        StockLedger.receive(self.user, self.warehouse, [LedgerLine(self.product, Decimal("5"))], ref_type="RECEIPT")

        response = self.client.get("/inventory/movements/")
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["reason"], "Receipt")

        stranger = User.objects.create_user(email="stranger@example.com", password="Pass123!")
        self.client.force_authenticate(stranger)
        self.assertEqual(self.client.get("/inventory/movements/").data, [])

    def test_location_holding_stock_cannot_be_deleted(self):
        self._stock(self.loc_a, "2")
        self._stock(None, "1")
        empty = self._stock(self.loc_b, "0")

        response = self.client.delete(f"/inventory/locations/{self.loc_a.id}/")
        self.assertEqual(response.status_code, 400)

        response = self.client.delete(f"/inventory/locations/{self.loc_b.id}/")
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Stock.objects.filter(pk=empty.pk).exists())
        self.assertFalse(Location.objects.filter(pk=self.loc_b.pk).exists())

    def test_warehouse_used_by_orders_cannot_be_deleted(self):
        self._stock(self.loc_a, "2")
        Order.objects.create(
            order_number="ORD-1", order_type=Order.OrderType.SALES, warehouse=self.warehouse, created_by=self.user
        )

        response = self.client.delete(f"/inventory/warehouses/{self.warehouse.id}/")

        self.assertEqual(response.status_code, 400)
        self.assertTrue(Stock.objects.filter(warehouse=self.warehouse).exists())

    def test_delete_unused_warehouse_removes_its_stock(self):
        self._stock(self.loc_a, "2")
        self._stock(None, "1")

        response = self.client.delete(f"/inventory/warehouses/{self.warehouse.id}/")

        self.assertEqual(response.status_code, 204)
        self.assertFalse(Stock.objects.exists())
        self.assertFalse(Location.objects.exists())

    def test_location_with_stock_cannot_move_warehouse(self):
        self._stock(self.loc_a, "5")
        other = Warehouse.objects.create(name="Overflow", short_code="OVF", owner=self.user)

        response = self.client.patch(f"/inventory/locations/{self.loc_a.id}/", {"warehouse": str(other.id)}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("warehouse", response.data)
        self.loc_a.refresh_from_db()
        self.assertEqual(self.loc_a.warehouse, self.warehouse)

    def test_empty_location_can_move_warehouse(self):
        other = Warehouse.objects.create(name="Overflow", short_code="OVF", owner=self.user)

        response = self.client.patch(f"/inventory/locations/{self.loc_b.id}/", {"warehouse": str(other.id)}, format="json")

        self.assertEqual(response.status_code, 200, response.data)
        self.loc_b.refresh_from_db()
        self.assertEqual(self.loc_b.warehouse, other)

    def test_malformed_filter_ids_return_400(self):
        for url, params in (
            ("/inventory/stock/", {"warehouse": "abc"}),
            ("/inventory/stock/", {"product": "abc"}),
            ("/inventory/locations/", {"warehouse": "abc"}),
            ("/inventory/movements/", {"stock": "abc"}),
            ("/receipts/", {"warehouse": "abc"}),
        ):
            response = self.client.get(url, params)
            self.assertEqual(response.status_code, 400, url)
            self.assertIn(next(iter(params)), response.data)
