"""Admin registrations for movements app."""

from django.contrib import admin

from .models import BulkMovement, BulkMovementItem, MovementLog


@admin.register(MovementLog)
class MovementLogAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "quantity_moved", "from_area", "to_area", "status", "moved_by", "created_at")
    list_filter = ("status", "requires_confirmation")
    search_fields = ("product__sku", "moved_by", "confirmed_by")
    raw_id_fields = ("product", "bulk_movement", "from_location", "to_location", "from_person", "to_person")
    readonly_fields = ("public_token",)


class BulkMovementItemInline(admin.TabularInline):
    model = BulkMovementItem
    extra = 0
    raw_id_fields = ("product",)
    readonly_fields = ("sku", "product_details", "quantity_sent", "quantity_received")


@admin.register(BulkMovement)
class BulkMovementAdmin(admin.ModelAdmin):
    list_display = ("id", "from_location", "to_location", "status", "token_expires_at", "created_by", "created_at")
    list_filter = ("status",)
    search_fields = ("public_token", "created_by", "confirmed_by")
    readonly_fields = ("public_token",)
    inlines = [BulkMovementItemInline]


# EOF
