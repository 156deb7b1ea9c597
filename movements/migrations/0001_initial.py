import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("inventory", "0001_initial"),
        ("locations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="BulkMovement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_transit", "In Transit"),
                            ("received", "Received"),
                            ("expired", "Expired"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("public_token", models.CharField(max_length=64, unique=True)),
                ("token_expires_at", models.DateTimeField()),
                ("created_by", models.CharField(blank=True, max_length=255, null=True)),
                ("confirmed_by", models.CharField(blank=True, max_length=255, null=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                (
                    "from_location",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="+", to="locations.location"
                    ),
                ),
                (
                    "to_location",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="+", to="locations.location"
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status"], name="bulkmovement_status_idx"),
                    models.Index(fields=["token_expires_at"], name="bulkmovement_expiry_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("from_location", models.F("to_location")), _negated=True),
                        name="bulk_movement_distinct_locations",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BulkMovementItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("quantity_sent", models.IntegerField()),
                ("quantity_received", models.IntegerField(blank=True, null=True)),
                ("sku", models.CharField(blank=True, max_length=120, null=True)),
                ("product_details", models.TextField(blank=True)),
                ("product_image", models.TextField(blank=True, null=True)),
                ("unit", models.CharField(blank=True, max_length=32, null=True)),
                (
                    "bulk_movement",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="items", to="movements.bulkmovement"
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="bulk_items", to="inventory.product"
                    ),
                ),
            ],
            options={
                "ordering": ["id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity_sent__gt", 0)), name="bulk_item_quantity_sent_positive"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("quantity_received__isnull", True),
                            models.Q(
                                ("quantity_received__gte", 0), ("quantity_received__lte", models.F("quantity_sent"))
                            ),
                            _connector="OR",
                        ),
                        name="bulk_item_received_within_sent",
                    ),
                    models.UniqueConstraint(fields=("bulk_movement", "product"), name="unique_bulk_item_product"),
                ],
            },
        ),
        migrations.CreateModel(
            name="MovementLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("from_area", models.CharField(blank=True, max_length=255, null=True)),
                ("to_area", models.CharField(blank=True, max_length=255, null=True)),
                ("from_stock_level", models.IntegerField(blank=True, null=True)),
                ("to_stock_level", models.IntegerField(blank=True, null=True)),
                ("quantity_moved", models.IntegerField(default=0)),
                ("notes", models.TextField(blank=True, null=True)),
                ("moved_by", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("completed", "Completed"),
                            ("pending", "Pending"),
                            ("received", "Received"),
                            ("expired", "Expired"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="completed",
                        max_length=16,
                    ),
                ),
                ("requires_confirmation", models.BooleanField(default=False)),
                ("public_token", models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ("token_expires_at", models.DateTimeField(blank=True, null=True)),
                ("confirmed_by", models.CharField(blank=True, max_length=255, null=True)),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "bulk_movement",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="movement_logs",
                        to="movements.bulkmovement",
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
                    "to_location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="locations.location",
                    ),
                ),
                (
                    "from_person",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="locations.person",
                    ),
                ),
                (
                    "to_person",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="locations.person",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="movement_logs",
                        to="inventory.product",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["product"], name="movementlog_product_idx"),
                    models.Index(fields=["created_at"], name="movementlog_created_at_idx"),
                    models.Index(fields=["status", "token_expires_at"], name="movementlog_status_expiry_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity_moved__gte", 0)), name="movement_quantity_non_negative"
                    ),
                ],
            },
        ),
    ]
