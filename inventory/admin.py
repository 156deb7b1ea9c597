"""Admin registrations for inventory app."""

from django.contrib import admin

from .models import Kanban, KanbanLink, Product, ProductValidation, TransferLog


@admin.register(Kanban)
class KanbanAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "type", "linked_kanban", "location")
    list_filter = ("type",)
    search_fields = ("name",)


@admin.register(KanbanLink)
class KanbanLinkAdmin(admin.ModelAdmin):
    list_display = ("id", "order_kanban", "receive_kanban", "created_at")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "sku", "column_status", "stock_level", "location", "assigned_to_person", "source_product")
    list_filter = ("column_status",)
    search_fields = ("sku", "product_details")
    raw_id_fields = ("source_product", "location", "assigned_to_person")


@admin.register(ProductValidation)
class ProductValidationAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "column_status", "recipient_name", "validated_by", "created_at")
    list_filter = ("column_status",)


@admin.register(TransferLog)
class TransferLogAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "from_kanban", "to_kanban", "to_column", "transfer_type", "created_at")
    list_filter = ("transfer_type",)


# EOF
