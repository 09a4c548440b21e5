from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from account.models import User
from catalog.models import Product
from inventory.models import Location, Stock, StockMovement, Warehouse
from transfer.models import Transfer
from transfer.services import TransferService


class TransferTestMixin:
    def setUp(self):
        self.user = User.objects.create_user(email="mover@example.com", password="Pass123!")
        self.source = Warehouse.objects.create(name="Main", short_code="MAIN", owner=self.user)
        self.destination = Warehouse.objects.create(name="Store", short_code="STORE", owner=self.user)
        self.shelf = Location.objects.create(warehouse=self.destination, name="Shelf 1", short_code="S1", owner=self.user)
        self.product = Product.objects.create(name="Bolt", sku="BOLT-1", reorder_level=5, created_by=self.user)
        Stock.objects.create(product=self.product, warehouse=self.source, quantity=Decimal("10"), owner=self.user)


class TransferServiceTests(TransferTestMixin, TestCase):
    def test_transfer_moves_stock_and_completes(self):
        transfer = TransferService.create_transfer(
            self.user,
            self.source,
            self.destination,
            [{"product": self.product, "quantity": Decimal("4"), "to_location": self.shelf}],
        )

        self.assertEqual(transfer.status, Transfer.Status.COMPLETED)
        self.assertTrue(transfer.transfer_number.startswith("TRF-"))
        self.assertEqual(Stock.objects.get(warehouse=self.source).quantity, Decimal("6"))
        self.assertEqual(Stock.objects.get(warehouse=self.destination, location=self.shelf).quantity, Decimal("4"))
        reasons = set(StockMovement.objects.values_list("reason", flat=True))
        self.assertEqual(reasons, {"Transfer Out", "Transfer In"})

    def test_same_warehouse_is_rejected_before_any_write(self):
        with self.assertRaisesMessage(ValueError, "Source and destination warehouses must be different"):
            TransferService.create_transfer(
                self.user, self.source, self.source, [{"product": self.product, "quantity": Decimal("1")}]
            )

        self.assertFalse(Transfer.objects.exists())
        self.assertFalse(StockMovement.objects.exists())

    def test_insufficient_source_stock_rolls_back_transfer(self):
        with self.assertRaisesMessage(ValueError, "Insufficient stock for Bolt. Available: 10, Required: 15"):
            TransferService.create_transfer(
                self.user, self.source, self.destination, [{"product": self.product, "quantity": Decimal("15")}]
            )

        self.assertFalse(Transfer.objects.exists())
        self.assertEqual(Stock.objects.get(warehouse=self.source).quantity, Decimal("10"))
        self.assertFalse(Stock.objects.filter(warehouse=self.destination).exists())

    @override_settings(STOCKMASTER={"TRANSFER_MOVES_STOCK": False})
    def test_transfer_is_record_only_when_stock_moves_are_disabled(self):
        transfer = TransferService.create_transfer(
            self.user, self.source, self.destination, [{"product": self.product, "quantity": Decimal("4")}]
        )

        self.assertEqual(transfer.status, Transfer.Status.PENDING)
        self.assertEqual(transfer.items.count(), 1)
        self.assertEqual(Stock.objects.get(warehouse=self.source).quantity, Decimal("10"))
        self.assertFalse(StockMovement.objects.exists())

    def test_completed_transfer_cannot_change_status(self):
        transfer = TransferService.create_transfer(
            self.user, self.source, self.destination, [{"product": self.product, "quantity": Decimal("1")}]
        )

        with self.assertRaisesMessage(ValueError, "Transfer is already completed"):
            TransferService.update_status(transfer, Transfer.Status.CANCELLED)


class TransferAPITests(TransferTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(self.user)

    def test_create_transfer(self):
        payload = {
            "from_warehouse": str(self.source.id),
            "to_warehouse": str(self.destination.id),
            "items": [{"product": str(self.product.id), "quantity": "3"}],
        }

        response = self.client.post("/transfers/", payload, format="json")

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["status"], "completed")
        self.assertEqual(Stock.objects.get(warehouse=self.destination).quantity, Decimal("3"))

    def test_same_warehouse_returns_400(self):
        payload = {
            "from_warehouse": str(self.source.id),
            "to_warehouse": str(self.source.id),
            "items": [{"product": str(self.product.id), "quantity": "3"}],
        }

        response = self.client.post("/transfers/", payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Transfer.objects.exists())

    def test_insufficient_stock_returns_detail(self):
        payload = {
            "from_warehouse": str(self.source.id),
            "to_warehouse": str(self.destination.id),
            "items": [{"product": str(self.product.id), "quantity": "30"}],
        }

        response = self.client.post("/transfers/", payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("Insufficient stock for Bolt", response.data["detail"])

    @override_settings(STOCKMASTER={"TRANSFER_MOVES_STOCK": False})
    def test_pending_transfer_can_be_marked_in_transit(self):
        transfer = TransferService.create_transfer(
            self.user, self.source, self.destination, [{"product": self.product, "quantity": Decimal("2")}]
        )

        response = self.client.patch(f"/transfers/{transfer.id}/status/", {"status": "in_transit"}, format="json")
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["status"], "in_transit")

        response = self.client.patch(f"/transfers/{transfer.id}/status/", {"status": "completed"}, format="json")
        self.assertEqual(response.status_code, 400)

    @override_settings(STOCKMASTER={"TRANSFER_MOVES_STOCK": False})
    def test_location_outside_its_warehouse_is_rejected(self):
        source_bay = Location.objects.create(warehouse=self.source, name="Bay", short_code="BAY", owner=self.user)
        payload = {
            "from_warehouse": str(self.source.id),
            "to_warehouse": str(self.destination.id),
            "items": [{"product": str(self.product.id), "quantity": "1", "to_location": str(source_bay.id)}],
        }

        response = self.client.post("/transfers/", payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("items", response.data)
        self.assertFalse(Transfer.objects.exists())

    @override_settings(STOCKMASTER={"TRANSFER_MOVES_STOCK": False})
    def test_record_only_transfer_checks_locations(self):
        with self.assertRaisesMessage(ValueError, "Location S1 does not belong to warehouse MAIN"):
            TransferService.create_transfer(
                self.user,
                self.source,
                self.destination,
                [{"product": self.product, "quantity": Decimal("1"), "from_location": self.shelf}],
            )
        self.assertFalse(Transfer.objects.exists())
