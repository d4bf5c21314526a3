# sales/views/sale_return.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.errors import stock_error_response
from products.services.exceptions import StockLedgerError
from sales.models import SaleReturn
from sales.serializers import SaleReturnCreateSerializer, SaleReturnSerializer
from sales.services.return_processor import create_return


class SaleReturnCreateView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["sales"],
        request=SaleReturnCreateSerializer,
        responses={201: SaleReturnSerializer},
    )
    def post(self, request):
        s = SaleReturnCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            sale_return = create_return(
                sale_id=data["sale_id"],
                lines=data.get("lines") or [],
                refund_method=data["refund_method"],
                return_type=data["return_type"],
                reason=data["reason"],
                notes=data.get("notes", ""),
                user=request.user,
            )
        except StockLedgerError as exc:
            return stock_error_response(exc)

        sale_return = (
            SaleReturn.objects.select_related("sale")
            .prefetch_related("lines")
            .get(pk=sale_return.pk)
        )
        return Response(
            SaleReturnSerializer(sale_return).data,
            status=status.HTTP_201_CREATED,
        )
