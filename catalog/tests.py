from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from account.models import User
from catalog.models import Product
from catalog.services import ProductInUseError, ProductService
from inventory.models import Stock, StockMovement, Warehouse
from order.models import Order, OrderItem
from receipt.models import Receipt, ReceiptItem


class ProductServiceTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="owner@example.com", password="Pass123!")
        self.warehouse = Warehouse.objects.create(name="Main", short_code="MAIN", owner=self.user)
        self.product = Product.objects.create(name="Bolt", sku="BOLT-1", created_by=self.user)

    def test_product_used_in_orders_cannot_be_deleted(self):
        order = Order.objects.create(order_number="ORD-1", order_type=Order.OrderType.PURCHASE, created_by=self.user)
        OrderItem.objects.create(order=order, product=self.product, quantity=2, unit_price=Decimal("1"))

        with self.assertRaisesMessage(ProductInUseError, "This product is used in orders and cannot be deleted."):
            ProductService.delete_product(self.product)
        self.assertTrue(Product.objects.filter(pk=self.product.pk).exists())

    def test_product_used_in_receipts_cannot_be_deleted(self):
        receipt = Receipt.objects.create(receipt_number="RCP-1", warehouse=self.warehouse, created_by=self.user)
        ReceiptItem.objects.create(receipt=receipt, product=self.product, quantity=2)

        self.assertEqual(ProductService.usage(self.product), "receipts")
        with self.assertRaises(ProductInUseError):
            ProductService.delete_product(self.product)

    def test_delete_removes_stock_rows_first(self):
        stock = Stock.objects.create(product=self.product, warehouse=self.warehouse, quantity=5, owner=self.user)
        StockMovement.objects.create(stock=stock, quantity=5, reason="Receipt", created_by=self.user)

        ProductService.delete_product(self.product)

        self.assertFalse(Product.objects.exists())
        self.assertFalse(Stock.objects.exists())
        self.assertFalse(StockMovement.objects.exists())


class ProductAPITests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="owner@example.com", password="Pass123!")
        self.client = APIClient()
        self.client.force_authenticate(self.user)

    def test_create_product(self):
        payload = {
            "name": "Bolt",
            "sku": " BOLT-1 ",
            "category": "Hardware",
            "reorder_level": 5,
            "cost_price": "2.50",
            "selling_price": "4.00",
        }

        response = self.client.post("/catalog/products/", payload, format="json")

        self.assertEqual(response.status_code, 201, response.data)
        product = Product.objects.get()
        self.assertEqual(product.sku, "BOLT-1")
        self.assertEqual(product.uom, "Units")
        self.assertEqual(product.created_by, self.user)

    def test_negative_price_is_rejected(self):
        response = self.client.post(
            "/catalog/products/", {"name": "Bolt", "sku": "BOLT-1", "cost_price": "-1"}, format="json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("cost_price", response.data)

    def test_list_reports_on_hand_and_filters(self):
        warehouse = Warehouse.objects.create(name="Main", short_code="MAIN", owner=self.user)
        bolt = Product.objects.create(name="Bolt", sku="BOLT-1", category="Hardware", reorder_level=5, created_by=self.user)
        Product.objects.create(name="Paint", sku="PAINT-1", category="Finishes", created_by=self.user)
        Stock.objects.create(product=bolt, warehouse=warehouse, quantity=Decimal("3"), owner=self.user)

        response = self.client.get("/catalog/products/", {"category": "hardware"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(Decimal(response.data[0]["on_hand"]), Decimal("3"))
        self.assertTrue(response.data[0]["is_low_stock"])

        response = self.client.get("/catalog/products/", {"search": "paint"})
        self.assertEqual([row["sku"] for row in response.data], ["PAINT-1"])

    def test_products_are_scoped_to_owner(self):
        stranger = User.objects.create_user(email="stranger@example.com", password="Pass123!")
        product = Product.objects.create(name="Hidden", sku="HID-1", created_by=stranger)

        self.assertEqual(self.client.get("/catalog/products/").data, [])
        self.assertEqual(self.client.get(f"/catalog/products/{product.id}/").status_code, 404)
        self.assertEqual(self.client.delete(f"/catalog/products/{product.id}/").status_code, 404)

    def test_delete_in_use_product_returns_400(self):
        product = Product.objects.create(name="Bolt", sku="BOLT-1", created_by=self.user)
        order = Order.objects.create(order_number="ORD-1", order_type=Order.OrderType.PURCHASE, created_by=self.user)
        OrderItem.objects.create(order=order, product=product, quantity=1, unit_price=Decimal("1"))

        response = self.client.delete(f"/catalog/products/{product.id}/")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], "This product is used in orders and cannot be deleted.")

    def test_product_stock_lists_rows(self):
        warehouse = Warehouse.objects.create(name="Main", short_code="MAIN", owner=self.user)
        product = Product.objects.create(name="Bolt", sku="BOLT-1", created_by=self.user)
        Stock.objects.create(product=product, warehouse=warehouse, quantity=Decimal("8"), owner=self.user)

        response = self.client.get(f"/catalog/products/{product.id}/stock/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["warehouse_name"], "Main")

    def test_product_without_stock_is_out_of_stock_not_low(self):
        product = Product.objects.create(name="Bolt", sku="BOLT-1", reorder_level=5, created_by=self.user)

        response = self.client.get(f"/catalog/products/{product.id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.data["on_hand"]), Decimal("0"))
        self.assertFalse(response.data["is_low_stock"])
