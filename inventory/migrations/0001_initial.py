import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("locations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Kanban",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("type", models.CharField(choices=[("order", "Order"), ("receive", "Receive")], max_length=16)),
                ("description", models.TextField(blank=True)),
                (
                    "linked_kanban",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="linked_from",
                        to="inventory.kanban",
                    ),
                ),
                (
                    "location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="kanbans",
                        to="locations.location",
                    ),
                ),
            ],
            options={
                "ordering": ["name", "id"],
                "indexes": [models.Index(fields=["type"], name="kanban_type_idx")],
            },
        ),
        migrations.CreateModel(
            name="KanbanLink",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "order_kanban",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="receive_links",
                        to="inventory.kanban",
                    ),
                ),
                (
                    "receive_kanban",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="order_links",
                        to="inventory.kanban",
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(fields=("order_kanban", "receive_kanban"), name="unique_kanban_link"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "column_status",
                    models.CharField(
                        choices=[
                            ("New Request", "New Request"),
                            ("In Review", "In Review"),
                            ("Purchased", "Purchased"),
                            ("Received", "Received"),
                            ("Stored", "Stored"),
                            ("In Transit", "In Transit"),
                        ],
                        max_length=32,
                    ),
                ),
                ("product_details", models.TextField()),
                ("product_link", models.TextField(blank=True, null=True)),
                ("priority", models.CharField(blank=True, max_length=32, null=True)),
                ("stock_level", models.IntegerField(blank=True, null=True)),
                ("product_image", models.TextField(blank=True, null=True)),
                ("category", models.CharField(blank=True, max_length=255, null=True)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("supplier", models.CharField(blank=True, max_length=255, null=True)),
                ("sku", models.CharField(blank=True, max_length=120, null=True)),
                ("dimensions", models.CharField(blank=True, max_length=255, null=True)),
                ("weight", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("unit", models.CharField(blank=True, max_length=32, null=True)),
                ("unit_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("is_draft", models.BooleanField(default=False)),
                ("column_entered_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "assigned_to_person",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products",
                        to="locations.person",
                    ),
                ),
                (
                    "kanban",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products",
                        to="inventory.kanban",
                    ),
                ),
                (
                    "location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products",
                        to="locations.location",
                    ),
                ),
                (
                    "preferred_receive_kanban",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="preferred_by",
                        to="inventory.kanban",
                    ),
                ),
                (
                    "source_product",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="splits",
                        to="inventory.product",
                    ),
                ),
            ],
            options={
                "ordering": ["-updated_at", "id"],
                "indexes": [
                    models.Index(fields=["column_status"], name="product_column_status_idx"),
                    models.Index(fields=["location", "sku"], name="product_location_sku_idx"),
                    models.Index(fields=["sku"], name="product_sku_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("stock_level__isnull", True), ("stock_level__gte", 0), _connector="OR"),
                        name="product_stock_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductValidation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "column_status",
                    models.CharField(choices=[("Received", "Received"), ("Stored", "Stored")], max_length=32),
                ),
                ("recipient_name", models.CharField(max_length=255)),
                ("received_image", models.TextField(blank=True, null=True)),
                ("storage_photo", models.TextField(blank=True, null=True)),
                ("validated_by", models.CharField(max_length=255)),
                ("notes", models.TextField(blank=True, null=True)),
                (
                    "location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="locations.location",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="validations",
                        to="inventory.product",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("product", "column_status"), name="unique_validation_per_column"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TransferLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("from_column", models.CharField(max_length=32)),
                ("to_column", models.CharField(max_length=32)),
                (
                    "transfer_type",
                    models.CharField(choices=[("automatic", "Automatic"), ("manual", "Manual")], max_length=16),
                ),
                ("notes", models.TextField(blank=True)),
                ("transferred_by", models.CharField(blank=True, max_length=255)),
                (
                    "from_kanban",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="inventory.kanban",
                    ),
                ),
                (
                    "from_location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="locations.location",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transfer_logs",
                        to="inventory.product",
                    ),
                ),
                (
                    "to_kanban",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="inventory.kanban",
                    ),
                ),
                (
                    "to_location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="locations.location",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "id"],
                "indexes": [models.Index(fields=["product"], name="transferlog_product_idx")],
            },
        ),
    ]
