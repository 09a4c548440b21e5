from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Warehouse",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("short_code", models.CharField(max_length=20, unique=True)),
                ("address", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="warehouses", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="Location",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("short_code", models.CharField(max_length=20)),
                ("aisle", models.CharField(blank=True, max_length=50)),
                ("rack", models.CharField(blank=True, max_length=50)),
                ("shelf", models.CharField(blank=True, max_length=50)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="locations", to=settings.AUTH_USER_MODEL)),
                ("warehouse", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="locations", to="inventory.warehouse")),
            ],
            options={
                "ordering": ["warehouse", "short_code"],
                "unique_together": {("warehouse", "short_code")},
            },
        ),
        migrations.CreateModel(
            name="Stock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("reserved_quantity", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("last_updated", models.DateTimeField(auto_now=True)),
                ("location", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="stock_rows", to="inventory.location")),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="stock_rows", to=settings.AUTH_USER_MODEL)),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="stock_rows", to="catalog.product")),
                ("warehouse", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="stock_rows", to="inventory.warehouse")),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.AddConstraint(
            model_name="stock",
            constraint=models.UniqueConstraint(condition=models.Q(("location__isnull", False)), fields=("product", "warehouse", "location"), name="inventory_stock_product_warehouse_location_uniq"),
        ),
        migrations.AddConstraint(
            model_name="stock",
            constraint=models.UniqueConstraint(condition=models.Q(("location__isnull", True)), fields=("product", "warehouse"), name="inventory_stock_product_warehouse_no_location_uniq"),
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.DecimalField(decimal_places=2, max_digits=12)),
                ("reason", models.CharField(max_length=255)),
                ("ref_type", models.CharField(blank=True, max_length=30)),
                ("ref_id", models.CharField(blank=True, max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="stock_movements", to=settings.AUTH_USER_MODEL)),
                ("stock", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="movements", to="inventory.stock")),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
    ]
