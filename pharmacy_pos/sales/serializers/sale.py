# sales/serializers/sale.py

from rest_framework import serializers

from sales.models import Sale, SaleLine


class SaleLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    batch_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    discount_pct = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )
    tax_pct = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=0,
        max_value=100,
        required=False,
        help_text="Defaults to SALES_DEFAULT_TAX_PCT when omitted.",
    )


class SaleCreateSerializer(serializers.Serializer):
    """
    Explicit sale input serializer.

    Documents ONLY what the client is allowed to send;
    every amount is recomputed server-side.
    """

    payment_method = serializers.ChoiceField(choices=Sale.PaymentMethod.choices)
    cash_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)
    card_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)
    transfer_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, default=0
    )
    lines = SaleLineInputSerializer(many=True, allow_empty=False)


class SaleLineSerializer(serializers.ModelSerializer):
    """
    Sale line serializer (read-only).
    Designed for receipts + UI display.
    """

    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)
    batch_code = serializers.CharField(source="batch.batch_code", read_only=True)
    remaining_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = SaleLine
        fields = [
            "id",
            "line_no",
            "product",
            "product_name",
            "sku",
            "batch",
            "batch_code",
            "quantity",
            "unit_price",
            "discount_pct",
            "tax_pct",
            "subtotal_amount",
            "discount_amount",
            "tax_amount",
            "line_total",
            "quantity_returned",
            "remaining_quantity",
        ]
        read_only_fields = fields


class SaleSerializer(serializers.ModelSerializer):
    lines = SaleLineSerializer(many=True, read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "invoice_no",
            "user",
            "payment_method",
            "cash_amount",
            "card_amount",
            "transfer_amount",
            "change_amount",
            "subtotal_amount",
            "discount_amount",
            "tax_amount",
            "total_amount",
            "status",
            "created_at",
            "lines",
        ]
        read_only_fields = fields
