from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from account.models import User
from catalog.models import Product
from inventory.models import Location, Stock, StockMovement, Warehouse
from order.models import Order
from receipt.models import Receipt
from receipt.services import ReceiptService


class ReceiptTestMixin:
    def setUp(self):
        self.user = User.objects.create_user(email="receiver@example.com", password="Pass123!")
        self.warehouse = Warehouse.objects.create(name="Main", short_code="MAIN", owner=self.user)
        self.location = Location.objects.create(warehouse=self.warehouse, name="Bay A", short_code="A1", owner=self.user)
        self.product = Product.objects.create(name="Bolt", sku="BOLT-1", reorder_level=5, created_by=self.user)


class ReceiptServiceTests(ReceiptTestMixin, TestCase):
    def test_receipts_into_same_slot_sum_on_one_row(self):
        ReceiptService.create_receipt(self.user, self.warehouse, [{"product": self.product, "quantity": Decimal("100")}])
        ReceiptService.create_receipt(self.user, self.warehouse, [{"product": self.product, "quantity": Decimal("250")}])

        rows = Stock.objects.filter(product=self.product, warehouse=self.warehouse)
        self.assertEqual(rows.count(), 1)
        self.assertEqual(rows.get().quantity, Decimal("350"))
        self.assertIsNone(rows.get().location)

    def test_receipt_records_movements_with_reference(self):
        receipt = ReceiptService.create_receipt(
            self.user,
            self.warehouse,
            [{"product": self.product, "location": self.location, "quantity": Decimal("12")}],
        )

        self.assertTrue(receipt.receipt_number.startswith("RCP-"))
        movement = StockMovement.objects.get()
        self.assertEqual(movement.quantity, Decimal("12"))
        self.assertEqual(movement.ref_type, "RECEIPT")
        self.assertEqual(movement.ref_id, str(receipt.id))
        self.assertEqual(movement.stock.location, self.location)

    def test_receipt_without_valid_items_is_rejected(self):
        with self.assertRaisesMessage(ValueError, "Please add at least one valid item"):
            ReceiptService.create_receipt(self.user, self.warehouse, [{"product": self.product, "quantity": 0}])
        self.assertFalse(Receipt.objects.exists())

    def test_receipt_cannot_link_sales_order(self):
        order = Order.objects.create(order_number="ORD-SALE", order_type=Order.OrderType.SALES, created_by=self.user)

        with self.assertRaisesMessage(ValueError, "Receipts can only be linked to purchase orders"):
            ReceiptService.create_receipt(
                self.user, self.warehouse, [{"product": self.product, "quantity": 1}], order=order
            )
        self.assertFalse(Stock.objects.exists())


class ReceiptAPITests(ReceiptTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(self.user)

    def test_create_receipt_against_purchase_order(self):
        order = Order.objects.create(order_number="ORD-PO", order_type=Order.OrderType.PURCHASE, created_by=self.user)
        payload = {
            "warehouse": str(self.warehouse.id),
            "order": str(order.id),
            "items": [{"product": str(self.product.id), "location": str(self.location.id), "quantity": "40"}],
        }

        response = self.client.post("/receipts/", payload, format="json")

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["order_number"], "ORD-PO")
        self.assertEqual(Stock.objects.get(location=self.location).quantity, Decimal("40"))

        listing = self.client.get("/receipts/")
        self.assertEqual(len(listing.data["receipts"]), 1)

    def test_location_from_other_warehouse_is_rejected(self):
        other = Warehouse.objects.create(name="Overflow", short_code="OVF", owner=self.user)
        payload = {
            "warehouse": str(other.id),
            "items": [{"product": str(self.product.id), "location": str(self.location.id), "quantity": "5"}],
        }

        response = self.client.post("/receipts/", payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Stock.objects.exists())

    def test_other_users_warehouse_is_not_resolvable(self):
        stranger = User.objects.create_user(email="stranger@example.com", password="Pass123!")
        foreign = Warehouse.objects.create(name="Theirs", short_code="THEIRS", owner=stranger)
        payload = {"warehouse": str(foreign.id), "items": [{"product": str(self.product.id), "quantity": "5"}]}

        response = self.client.post("/receipts/", payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("warehouse", response.data)
        self.assertFalse(Stock.objects.exists())

    def test_receipt_detail_is_owner_scoped(self):
        receipt = ReceiptService.create_receipt(self.user, self.warehouse, [{"product": self.product, "quantity": 3}])
        stranger = User.objects.create_user(email="stranger@example.com", password="Pass123!")

        self.assertEqual(self.client.get(f"/receipts/{receipt.id}/").status_code, 200)
        self.client.force_authenticate(stranger)
        self.assertEqual(self.client.get(f"/receipts/{receipt.id}/").status_code, 404)
