from datetime import datetime, timedelta
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from account.models import User
from analytics.services import AnalyticsService, months_ago
from catalog.models import Product
from inventory.models import Stock, Warehouse
from order.models import Order, OrderItem


class AggregationTests(SimpleTestCase):
    def test_two_items_in_same_month_sum_revenue(self):
        now = datetime(2025, 3, 20, 12, 0)
        orders = [
            {"order_date": datetime(2025, 3, 2), "items": [{"quantity": Decimal("10"), "unit_price": Decimal("10")}]},
            {"order_date": datetime(2025, 3, 15), "items": [{"quantity": Decimal("5"), "unit_price": Decimal("50")}]},
        ]

        trend = AnalyticsService.sales_trend(orders, now)

        self.assertEqual(trend, [{"month": "2025-03", "label": "Mar 2025", "revenue": 350, "orders": 2}])

    def test_trend_skips_orders_older_than_window_and_sorts_by_month(self):
        now = datetime(2025, 3, 20)
        orders = [
            {"order_date": datetime(2025, 2, 1), "items": [{"quantity": 1, "unit_price": Decimal("9.6")}]},
            {"order_date": datetime(2024, 12, 31), "items": [{"quantity": 2, "unit_price": Decimal("1")}]},
            {"order_date": datetime(2024, 9, 19), "items": [{"quantity": 1, "unit_price": Decimal("999")}]},
        ]

        trend = AnalyticsService.sales_trend(orders, now)

        self.assertEqual([row["month"] for row in trend], ["2024-12", "2025-02"])
        self.assertEqual(trend[1]["revenue"], 10)

    def test_months_ago_clamps_to_month_end(self):
        self.assertEqual(months_ago(datetime(2025, 8, 31), 6), datetime(2025, 2, 28))
        self.assertEqual(months_ago(datetime(2025, 3, 15), 6), datetime(2024, 9, 15))

    def test_best_selling_groups_by_product_and_ranks_by_quantity(self):
        items = [
            {"product_id": 1, "name": "Bolt", "sku": "B", "category": "", "quantity": 3, "unit_price": Decimal("2")},
            {"product_id": 2, "name": "Nut", "sku": "N", "category": "Hardware", "quantity": 5, "unit_price": Decimal("1")},
            {"product_id": 1, "name": "Bolt", "sku": "B", "category": "", "quantity": 4, "unit_price": Decimal("2")},
        ]

        ranked = AnalyticsService.best_selling_products(items, limit=10)

        self.assertEqual([row["name"] for row in ranked], ["Bolt", "Nut"])
        self.assertEqual(ranked[0]["quantity_sold"], Decimal("7"))
        self.assertEqual(ranked[0]["revenue"], Decimal("14"))
        self.assertEqual(ranked[0]["category"], "Uncategorized")
        self.assertEqual(len(AnalyticsService.best_selling_products(items, limit=1)), 1)

    def test_category_sales_rounds_and_keeps_top_entries(self):
        items = [
            {"category": f"C{i}", "quantity": 1, "unit_price": Decimal(i) + Decimal("0.5")}
            for i in range(1, 9)
        ]

        rows = AnalyticsService.category_sales(items)

        self.assertEqual(len(rows), 6)
        self.assertEqual(rows[0], {"category": "C8", "value": 9})
        self.assertEqual(rows[-1]["category"], "C3")

    def test_stock_metrics_counts_low_and_out_of_stock(self):
        products = [
            {"on_hand": Decimal("0"), "reorder_level": 5, "cost_price": Decimal("3")},
            {"on_hand": Decimal("5"), "reorder_level": 5, "cost_price": Decimal("2")},
            {"on_hand": Decimal("20"), "reorder_level": 5, "cost_price": None},
        ]

        metrics = AnalyticsService.stock_metrics(products)

        self.assertEqual(metrics, {
            "total_products": 3,
            "total_stock_value": 10,
            "low_stock_items": 1,
            "out_of_stock": 1,
            "average_turnover": 0,
        })


class AnalyticsAPITests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="analyst@example.com", password="Pass123!")
        self.client = APIClient()
        self.client.force_authenticate(self.user)
        self.warehouse = Warehouse.objects.create(name="Main", short_code="MAIN", owner=self.user)
        self.product = Product.objects.create(
            name="Bolt", sku="BOLT-1", category="Hardware", reorder_level=5, cost_price=Decimal("2"), created_by=self.user
        )
        Stock.objects.create(product=self.product, warehouse=self.warehouse, quantity=Decimal("4"), owner=self.user)

    def _sale(self, number, quantity, unit_price, order_type=Order.OrderType.SALES, days_ago=0):
        order = Order.objects.create(
            order_number=number,
            order_type=order_type,
            order_date=timezone.now() - timedelta(days=days_ago),
            created_by=self.user,
        )
        OrderItem.objects.create(order=order, product=self.product, quantity=quantity, unit_price=unit_price)
        return order

    def test_analytics_report(self):
        self._sale("ORD-1", Decimal("10"), Decimal("10"))
        self._sale("ORD-2", Decimal("5"), Decimal("50"))
        self._sale("ORD-PO", Decimal("100"), Decimal("1"), order_type=Order.OrderType.PURCHASE)

        response = self.client.get("/analytics/")

        self.assertEqual(response.status_code, 200)
        trend = response.data["sales_trend"]
        self.assertEqual(len(trend), 1)
        self.assertEqual(trend[0]["revenue"], 350)
        self.assertEqual(trend[0]["orders"], 2)
        self.assertEqual(response.data["best_selling_products"][0]["quantity_sold"], Decimal("15"))
        self.assertEqual(response.data["category_sales"], [{"category": "Hardware", "value": 350}])
        self.assertEqual(response.data["stock_metrics"]["low_stock_items"], 1)
        self.assertEqual(response.data["stock_metrics"]["total_stock_value"], 8)

    def test_analytics_only_covers_own_records(self):
        stranger = User.objects.create_user(email="stranger@example.com", password="Pass123!")
        self._sale("ORD-1", Decimal("1"), Decimal("10"))
        self.client.force_authenticate(stranger)

        response = self.client.get("/analytics/")

        self.assertEqual(response.data["sales_trend"], [])
        self.assertEqual(response.data["stock_metrics"]["total_products"], 0)

    def test_dashboard(self):
        response = self.client.get("/analytics/dashboard/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {
            "total_products": 1,
            "warehouses": 1,
            "total_stock": 4,
            "low_stock_items": 1,
        })
