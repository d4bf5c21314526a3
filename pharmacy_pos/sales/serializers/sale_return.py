# sales/serializers/sale_return.py

from rest_framework import serializers

from sales.models import SaleReturn, SaleReturnLine


class ReturnLineInputSerializer(serializers.Serializer):
    sale_line_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class SaleReturnCreateSerializer(serializers.Serializer):
    """
    Return command input.

    - return_type="total" may omit lines (returns everything remaining)
    - return_type="partial" requires lines
    """

    sale_id = serializers.UUIDField()
    return_type = serializers.ChoiceField(choices=SaleReturn.ReturnType.choices)
    refund_method = serializers.ChoiceField(choices=SaleReturn.RefundMethod.choices)
    reason = serializers.CharField(max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    lines = ReturnLineInputSerializer(many=True, required=False)

    def validate(self, attrs):
        if attrs["return_type"] == SaleReturn.ReturnType.PARTIAL and not attrs.get("lines"):
            raise serializers.ValidationError({"lines": "A partial return requires at least one line."})
        return attrs


class SaleReturnLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleReturnLine
        fields = [
            "id",
            "sale_line",
            "batch",
            "quantity",
            "unit_price",
            "refund_amount",
            "reason",
        ]
        read_only_fields = fields


class SaleReturnSerializer(serializers.ModelSerializer):
    lines = SaleReturnLineSerializer(many=True, read_only=True)
    sale_status = serializers.CharField(source="sale.status", read_only=True)

    class Meta:
        model = SaleReturn
        fields = [
            "id",
            "sale",
            "sale_status",
            "user",
            "return_type",
            "refund_method",
            "reason",
            "notes",
            "status",
            "total_amount",
            "created_at",
            "lines",
        ]
        read_only_fields = fields
