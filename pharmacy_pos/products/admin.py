# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe stock):

- Product metadata is editable; stock_total is ledger-owned (read-only).
- StockBatch rows are born in receiving; quantities are read-only here.
- StockMovement and adjustment rows are append-only history (read-only).
"""

from __future__ import annotations

from django.contrib import admin

from products.models import (
    InventoryAggregate,
    Product,
    StockAdjustment,
    StockAdjustmentLine,
    StockBatch,
    StockMovement,
)
from products.services.expiry import classify_expiry


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class StockBatchInline(admin.TabularInline):
    model = StockBatch
    extra = 0
    fields = ("batch_code", "expiry_date", "available_qty", "purchase_price", "is_active")
    readonly_fields = fields
    can_delete = False
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "sale_price", "stock_total", "min_stock", "is_low_stock", "is_active")
    list_filter = ("is_active",)
    search_fields = ("sku", "name", "barcode")
    readonly_fields = ("stock_total", "created_at", "updated_at")
    inlines = [StockBatchInline]

    @admin.display(boolean=True, description="Low stock")
    def is_low_stock(self, obj):
        return obj.is_low_stock


@admin.register(StockBatch)
class StockBatchAdmin(admin.ModelAdmin):
    list_display = ("product", "batch_code", "expiry_date", "expiry_bucket", "available_qty", "is_active")
    list_filter = ("is_active", "expiry_date")
    search_fields = ("batch_code", "product__name", "product__sku")
    readonly_fields = (
        "product",
        "batch_code",
        "available_qty",
        "purchase_price",
        "is_active",
        "version",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description="Expiry")
    def expiry_bucket(self, obj):
        return classify_expiry(obj.expiry_date).label


@admin.register(InventoryAggregate)
class InventoryAggregateAdmin(ReadOnlyAdmin):
    list_display = ("product", "total_stock", "updated_at")


@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "product", "batch", "reason", "quantity_delta", "balance_after", "reference_type")
    list_filter = ("reason",)
    search_fields = ("product__sku", "batch__batch_code", "reference_id")


class StockAdjustmentLineInline(admin.TabularInline):
    model = StockAdjustmentLine
    extra = 0
    readonly_fields = ("batch", "quantity_before", "quantity_after", "quantity_delta")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(StockAdjustment)
class StockAdjustmentAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "reason", "user")
    inlines = [StockAdjustmentLineInline]
