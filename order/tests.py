from decimal import Decimal

from rest_framework import status
from rest_framework.test import APITestCase
from django.test import TestCase

from account.models import User
from catalog.models import Product
from inventory.models import Stock, StockMovement, Warehouse

from .models import Order, OrderItem
from .services import OrderService


class OrderViewsTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="seller@example.com", password="Pass123!")
        self.client.force_authenticate(self.user)
        self.warehouse = Warehouse.objects.create(name="Main", short_code="MAIN", owner=self.user)
        self.product = Product.objects.create(
            name="Bolt", sku="BOLT-1", selling_price=Decimal("12.50"), created_by=self.user
        )
        self.stock = Stock.objects.create(
            product=self.product, warehouse=self.warehouse, quantity=Decimal("10"), owner=self.user
        )

    def _sales_payload(self, quantity):
        return {
            "order_type": "sales",
            "warehouse": str(self.warehouse.id),
            "supplier_customer": "Acme Retail",
            "items": [{"product": str(self.product.id), "quantity": quantity}],
        }

    def test_sales_order_deducts_stock(self):
        response = self.client.post("/order/orders/", self._sales_payload("6"), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["order_number"].startswith("ORD-"))
        self.assertEqual(Decimal(response.data["total_amount"]), Decimal("75.00"))
        self.stock.refresh_from_db()
        self.assertEqual(self.stock.quantity, Decimal("4"))
        movement = StockMovement.objects.get()
        self.assertEqual(movement.ref_type, "ORDER")
        self.assertEqual(movement.ref_id, response.data["id"])

    def test_sales_order_with_insufficient_stock_is_rolled_back(self):
        response = self.client.post("/order/orders/", self._sales_payload("11"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "Insufficient stock for Bolt. Available: 10, Required: 11")
        self.assertFalse(Order.objects.exists())
        self.assertFalse(OrderItem.objects.exists())
        self.stock.refresh_from_db()
        self.assertEqual(self.stock.quantity, Decimal("10"))

    def test_sales_order_requires_warehouse(self):
        payload = self._sales_payload("1")
        payload.pop("warehouse")

        response = self.client.post("/order/orders/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("warehouse", response.data)

    def test_purchase_order_leaves_stock_alone(self):
        payload = {
            "order_type": "purchase",
            "supplier_customer": "Bolt Supplies",
            "items": [{"product": str(self.product.id), "quantity": "50", "unit_price": "3.00"}],
        }

        response = self.client.post("/order/orders/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIsNone(response.data["warehouse"])
        self.stock.refresh_from_db()
        self.assertEqual(self.stock.quantity, Decimal("10"))

    def test_duplicate_order_number_is_rejected(self):
        Order.objects.create(order_number="ORD-1", order_type=Order.OrderType.PURCHASE, created_by=self.user)
        payload = self._sales_payload("1")
        payload["order_number"] = "ORD-1"

        response = self.client.post("/order/orders/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "Order number ORD-1 already exists")

    def test_product_of_another_user_is_not_resolvable(self):
        stranger = User.objects.create_user(email="stranger@example.com", password="Pass123!")
        foreign = Product.objects.create(name="Hidden", sku="HID-1", created_by=stranger)
        payload = self._sales_payload("1")
        payload["items"][0]["product"] = str(foreign.id)

        response = self.client.post("/order/orders/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Order.objects.exists())

    def test_list_filters_and_scopes_orders(self):
        OrderService.create_order(self.user, Order.OrderType.SALES, [{"product": self.product, "quantity": 1}], warehouse=self.warehouse)
        OrderService.create_order(self.user, Order.OrderType.PURCHASE, [{"product": self.product, "quantity": 1}])

        response = self.client.get("/order/orders/", {"type": "sales"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["orders"]), 1)

        stranger = User.objects.create_user(email="stranger@example.com", password="Pass123!")
        self.client.force_authenticate(stranger)
        self.assertEqual(self.client.get("/order/orders/").data["orders"], [])

    def test_status_update(self):
        order = OrderService.create_order(self.user, Order.OrderType.PURCHASE, [{"product": self.product, "quantity": 1}])

        response = self.client.patch(f"/order/orders/{order.id}/status/", {"status": "completed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        response = self.client.patch(f"/order/orders/{order.id}/status/", {"status": "pending"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class OrderServiceTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="svc@example.com", password="Pass123!")
        self.product = Product.objects.create(name="Nut", sku="NUT-1", created_by=self.user)

    def test_unit_price_falls_back_to_zero_without_selling_price(self):
        order = OrderService.create_order(self.user, Order.OrderType.PURCHASE, [{"product": self.product, "quantity": 2}])

        item = order.items.get()
        self.assertEqual(item.unit_price, Decimal("0"))
        self.assertEqual(order.total_amount, Decimal("0"))

    def test_empty_items_are_rejected(self):
        with self.assertRaisesMessage(ValueError, "Please add at least one valid item"):
            OrderService.create_order(self.user, Order.OrderType.PURCHASE, [{"product": self.product, "quantity": 0}])
        self.assertFalse(Order.objects.exists())
