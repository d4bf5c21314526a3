# sales/admin.py

from django.contrib import admin

from sales.models import Sale, SaleLine, SaleReturn, SaleReturnLine


class _NoWriteMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ======================================================
# SALE ADMIN
# ======================================================


class SaleLineInline(_NoWriteMixin, admin.TabularInline):
    model = SaleLine
    extra = 0
    fields = ("line_no", "product", "batch", "quantity", "unit_price", "line_total", "quantity_returned")
    readonly_fields = fields


@admin.register(Sale)
class SaleAdmin(_NoWriteMixin, admin.ModelAdmin):
    list_display = (
        "invoice_no",
        "status",
        "payment_method",
        "total_amount",
        "created_at",
    )
    search_fields = ("invoice_no",)
    list_filter = ("status", "payment_method", "created_at")
    inlines = [SaleLineInline]


# ======================================================
# RETURN ADMIN
# ======================================================


class SaleReturnLineInline(_NoWriteMixin, admin.TabularInline):
    model = SaleReturnLine
    extra = 0
    readonly_fields = ("sale_line", "batch", "quantity", "unit_price", "refund_amount", "reason")


@admin.register(SaleReturn)
class SaleReturnAdmin(_NoWriteMixin, admin.ModelAdmin):
    list_display = (
        "sale",
        "return_type",
        "refund_method",
        "total_amount",
        "user",
        "created_at",
    )
    search_fields = ("sale__invoice_no",)
    list_filter = ("return_type", "refund_method")
    inlines = [SaleReturnLineInline]
