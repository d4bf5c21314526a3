# products/serializers/adjustment.py

from rest_framework import serializers

from products.models import StockAdjustment, StockAdjustmentLine


class AdjustmentLineInputSerializer(serializers.Serializer):
    batch_id = serializers.UUIDField()
    new_quantity = serializers.IntegerField(min_value=0)


class AdjustmentCreateSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    lines = AdjustmentLineInputSerializer(many=True, allow_empty=False)


class StockAdjustmentLineSerializer(serializers.ModelSerializer):
    batch_code = serializers.CharField(source="batch.batch_code", read_only=True)
    product = serializers.UUIDField(source="batch.product_id", read_only=True)

    class Meta:
        model = StockAdjustmentLine
        fields = [
            "id",
            "batch",
            "batch_code",
            "product",
            "quantity_before",
            "quantity_after",
            "quantity_delta",
        ]


class StockAdjustmentSerializer(serializers.ModelSerializer):
    lines = StockAdjustmentLineSerializer(many=True, read_only=True)

    class Meta:
        model = StockAdjustment
        fields = ["id", "user", "reason", "notes", "created_at", "lines"]
