# purchases/admin.py

from django.contrib import admin, messages

from products.services.exceptions import StockLedgerError
from purchases.models import ReceivingLine, ReceivingRecord, Supplier
from purchases.services.receiving_service import approve_receiving


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "contact", "phone", "email", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)


class ReceivingLineInline(admin.TabularInline):
    model = ReceivingLine
    extra = 0
    readonly_fields = ("line_no", "product", "batch", "quantity_received", "purchase_price", "notes")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ReceivingRecord)
class ReceivingRecordAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "supplier", "received_on", "status", "loaded_to_inventory")
    list_filter = ("status",)
    search_fields = ("invoice_number", "supplier__name")
    readonly_fields = (
        "status",
        "loaded_to_inventory",
        "created_by",
        "approved_by",
        "approved_at",
        "created_at",
    )
    inlines = [ReceivingLineInline]
    actions = ["approve_selected"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description="Approve selected drafts (load into inventory)")
    def approve_selected(self, request, queryset):
        approved = 0
        for record in queryset.filter(status=ReceivingRecord.STATUS_DRAFT):
            try:
                approve_receiving(record_id=record.pk, user=request.user)
            except StockLedgerError as exc:
                self.message_user(request, f"{record}: {exc.message}", level=messages.ERROR)
            else:
                approved += 1
        if approved:
            self.message_user(request, f"{approved} record(s) approved.", level=messages.SUCCESS)
