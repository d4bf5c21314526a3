# purchases/api/serializers.py

from rest_framework import serializers

from purchases.models import ReceivingRecord


class ReceivingLineCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    batch_code = serializers.CharField(max_length=128)
    expiry_date = serializers.DateField()
    quantity_received = serializers.IntegerField(min_value=1)
    purchase_price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ReceivingRecordCreateSerializer(serializers.Serializer):
    supplier_id = serializers.UUIDField()
    invoice_number = serializers.CharField(max_length=64)
    received_on = serializers.DateField(required=False, allow_null=True)
    city = serializers.CharField(required=False, allow_blank=True, default="")
    responsible = serializers.CharField(required=False, allow_blank=True, default="")
    record_type = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    lines = ReceivingLineCreateSerializer(many=True, allow_empty=False)


class ReceivingRecordSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    lines = serializers.SerializerMethodField()

    class Meta:
        model = ReceivingRecord
        fields = [
            "id",
            "supplier",
            "supplier_name",
            "invoice_number",
            "received_on",
            "city",
            "responsible",
            "record_type",
            "notes",
            "status",
            "loaded_to_inventory",
            "created_by",
            "approved_by",
            "approved_at",
            "created_at",
            "lines",
        ]

    def get_lines(self, obj):
        qs = obj.lines.select_related("product", "batch").all()
        return [
            {
                "line_no": line.line_no,
                "product_id": str(line.product_id),
                "product_name": getattr(line.product, "name", ""),
                "batch_id": str(line.batch_id),
                "batch_code": line.batch.batch_code,
                "expiry_date": line.batch.expiry_date,
                "batch_active": line.batch.is_active,
                "quantity_received": line.quantity_received,
                "purchase_price": str(line.purchase_price),
                "line_total": str(line.line_total),
            }
            for line in qs
        ]
