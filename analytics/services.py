import calendar
import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone

from catalog.models import Product
from inventory.models import Stock, Warehouse
from order.models import Order, OrderItem

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
UNCATEGORIZED = "Uncategorized"


def _setting(name, default):
    return getattr(settings, "STOCKMASTER", {}).get(name, default)


def _round(value) -> int:
    return int(Decimal(str(value or 0)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _dec(value) -> Decimal:
    return Decimal(str(value or 0))


def months_ago(now: datetime, months: int) -> datetime:
    """Same day and time ``months`` calendar months before ``now``, clamped to the month end."""
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


class AnalyticsService:
    """
    Aggregations behind the analytics and dashboard endpoints.

    The aggregation functions work on plain dict rows so they can be fed from
    any source; the ``load_*`` helpers build those rows from the ORM for one
    user's records.
    """

    # -----------------------------
    # Aggregations
    # -----------------------------
    @staticmethod
    def sales_trend(orders: Iterable[Dict], now: datetime, months: int = 6) -> List[Dict]:
        """
        orders: [{"order_date": datetime, "items": [{"quantity": Decimal, "unit_price": Decimal}]}]
        """
        since = months_ago(now, months)
        buckets = {}
        for order in orders:
            order_date = order["order_date"]
            if order_date < since:
                continue
            key = order_date.strftime("%Y-%m")
            bucket = buckets.setdefault(key, {"revenue": ZERO, "orders": 0, "label": order_date.strftime("%b %Y")})
            bucket["orders"] += 1
            for item in order.get("items", []):
                bucket["revenue"] += _dec(item["quantity"]) * _dec(item["unit_price"])

        return [
            {"month": key, "label": data["label"], "revenue": _round(data["revenue"]), "orders": data["orders"]}
            for key, data in sorted(buckets.items())
        ]

    @staticmethod
    def best_selling_products(items: Iterable[Dict], limit: int = 10) -> List[Dict]:
        """
        items: [{"product_id", "name", "sku", "category", "quantity", "unit_price"}]
        """
        products = {}
        for item in items:
            entry = products.setdefault(
                item["product_id"],
                {
                    "product_id": item["product_id"],
                    "name": item["name"],
                    "sku": item["sku"],
                    "category": item.get("category") or UNCATEGORIZED,
                    "quantity_sold": ZERO,
                    "revenue": ZERO,
                },
            )
            quantity = _dec(item["quantity"])
            entry["quantity_sold"] += quantity
            entry["revenue"] += quantity * _dec(item["unit_price"])

        ranked = sorted(products.values(), key=lambda entry: entry["quantity_sold"], reverse=True)
        return ranked[:limit]

    @staticmethod
    def category_sales(items: Iterable[Dict], limit: int = 6) -> List[Dict]:
        totals = defaultdict(lambda: ZERO)
        for item in items:
            totals[item.get("category") or UNCATEGORIZED] += _dec(item["quantity"]) * _dec(item["unit_price"])

        rows = [{"category": category, "value": _round(value)} for category, value in totals.items()]
        rows.sort(key=lambda row: row["value"], reverse=True)
        return rows[:limit]

    @staticmethod
    def stock_metrics(products: Iterable[Dict]) -> Dict:
        """
        products: [{"on_hand": Decimal, "reorder_level": int, "cost_price": Decimal or None}]
        """
        total_products = 0
        total_value = ZERO
        low_stock = 0
        out_of_stock = 0
        for product in products:
            total_products += 1
            on_hand = _dec(product["on_hand"])
            total_value += on_hand * _dec(product.get("cost_price"))
            if on_hand <= ZERO:
                out_of_stock += 1
            elif on_hand <= product["reorder_level"]:
                low_stock += 1

        return {
            "total_products": total_products,
            "total_stock_value": _round(total_value),
            "low_stock_items": low_stock,
            "out_of_stock": out_of_stock,
            "average_turnover": 0,
        }

    @staticmethod
    def dashboard_stats(product_count: int, warehouse_count: int, stock_rows: Iterable[Dict]) -> Dict:
        """
        stock_rows: [{"quantity": Decimal, "reorder_level": int}]
        """
        total_stock = ZERO
        low_stock = 0
        for row in stock_rows:
            quantity = _dec(row["quantity"])
            total_stock += quantity
            if quantity <= row["reorder_level"]:
                low_stock += 1
        return {
            "total_products": product_count,
            "warehouses": warehouse_count,
            "total_stock": _round(total_stock),
            "low_stock_items": low_stock,
        }

    # -----------------------------
    # ORM loaders
    # -----------------------------
    @staticmethod
    def load_sales_orders(user, since: datetime) -> List[Dict]:
        orders = (
            Order.objects.filter(created_by=user, order_type=Order.OrderType.SALES, order_date__gte=since)
            .prefetch_related("items")
        )
        return [
            {
                "order_date": timezone.localtime(order.order_date),
                "items": [{"quantity": item.quantity, "unit_price": item.unit_price} for item in order.items.all()],
            }
            for order in orders
        ]

    @staticmethod
    def load_sold_items(user) -> List[Dict]:
        rows = OrderItem.objects.filter(
            order__created_by=user, order__order_type=Order.OrderType.SALES
        ).values("product_id", "product__name", "product__sku", "product__category", "quantity", "unit_price")
        return [
            {
                "product_id": row["product_id"],
                "name": row["product__name"],
                "sku": row["product__sku"],
                "category": row["product__category"],
                "quantity": row["quantity"],
                "unit_price": row["unit_price"],
            }
            for row in rows
        ]

    @staticmethod
    def load_product_stock(user) -> List[Dict]:
        products = Product.objects.filter(created_by=user).annotate(on_hand=Sum("stock_rows__quantity"))
        return [
            {"on_hand": product.on_hand or ZERO, "reorder_level": product.reorder_level, "cost_price": product.cost_price}
            for product in products
        ]

    # -----------------------------
    # Reports
    # -----------------------------
    @staticmethod
    def analytics_report(user, now: datetime = None) -> Dict:
        now = timezone.localtime(now or timezone.now())
        months = _setting("SALES_TREND_MONTHS", 6)
        sold_items = AnalyticsService.load_sold_items(user)
        report = {
            "sales_trend": AnalyticsService.sales_trend(
                AnalyticsService.load_sales_orders(user, months_ago(now, months)), now, months
            ),
            "best_selling_products": AnalyticsService.best_selling_products(
                sold_items, _setting("BEST_SELLING_LIMIT", 10)
            ),
            "category_sales": AnalyticsService.category_sales(sold_items, _setting("CATEGORY_SALES_LIMIT", 6)),
            "stock_metrics": AnalyticsService.stock_metrics(AnalyticsService.load_product_stock(user)),
            "currency": _setting("CURRENCY_SYMBOL", "₹"),
        }
        logger.debug("Built analytics report for user=%s from %s sold item(s)", user.id, len(sold_items))
        return report

    @staticmethod
    def dashboard_report(user) -> Dict:
        stock_rows = Stock.objects.filter(owner=user).values("quantity", "product__reorder_level")
        return AnalyticsService.dashboard_stats(
            product_count=Product.objects.filter(created_by=user).count(),
            warehouse_count=Warehouse.objects.filter(owner=user).count(),
            stock_rows=[{"quantity": row["quantity"], "reorder_level": row["product__reorder_level"]} for row in stock_rows],
        )
