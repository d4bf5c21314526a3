# sales/views/sale.py

"""
SALE VIEWSET

- create:   POST /api/sales/         -> sale_processor.create_sale()
- retrieve: GET  /api/sales/<uuid>/

Views stay thin: validate input shape, call the service, map errors.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import stock_error_response
from products.services.exceptions import StockLedgerError
from sales.models import Sale
from sales.serializers import SaleCreateSerializer, SaleSerializer
from sales.services.sale_processor import create_sale


class SaleViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = SaleSerializer
    queryset = Sale.objects.select_related("user").prefetch_related(
        "lines",
        "lines__product",
        "lines__batch",
    )

    @extend_schema(
        tags=["sales"],
        request=SaleCreateSerializer,
        responses={201: SaleSerializer},
    )
    def create(self, request):
        s = SaleCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            sale = create_sale(
                lines=data["lines"],
                payment_method=data["payment_method"],
                cash_amount=data.get("cash_amount", 0),
                card_amount=data.get("card_amount", 0),
                transfer_amount=data.get("transfer_amount", 0),
                user=request.user,
            )
        except StockLedgerError as exc:
            return stock_error_response(exc)

        sale = self.get_queryset().get(pk=sale.pk)
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)
