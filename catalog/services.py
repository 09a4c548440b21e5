import logging

from django.db import transaction

from .models import Product

logger = logging.getLogger(__name__)


class ProductInUseError(ValueError):
    """Raised when a product is still referenced by order, receipt or transfer lines."""


class ProductService:

    @staticmethod
    def usage(product: Product):
        """Return the name of the first document type that references the product, if any."""
        if product.order_items.exists():
            return "orders"
        if product.receipt_items.exists():
            return "receipts"
        if product.transfer_items.exists():
            return "transfers"
        return None

    @staticmethod
    @transaction.atomic
    def delete_product(product: Product) -> None:
        used_in = ProductService.usage(product)
        if used_in:
            raise ProductInUseError(f"This product is used in {used_in} and cannot be deleted.")

        removed, _ = product.stock_rows.all().delete()
        logger.info("Deleting product=%s after removing %s stock record(s)", product.id, removed)
        product.delete()
