# products/views/adjustment.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import stock_error_response
from products.models import StockAdjustment
from products.serializers import AdjustmentCreateSerializer, StockAdjustmentSerializer
from products.services.exceptions import StockLedgerError
from products.services.stock_adjustments import create_adjustment


class StockAdjustmentCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AdjustmentCreateSerializer

    @extend_schema(
        tags=["products"],
        request=AdjustmentCreateSerializer,
        responses={201: StockAdjustmentSerializer},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            adjustment = create_adjustment(
                reason=data["reason"],
                notes=data.get("notes", ""),
                lines=data["lines"],
                user=request.user,
            )
        except StockLedgerError as exc:
            return stock_error_response(exc)

        adjustment = StockAdjustment.objects.prefetch_related("lines", "lines__batch").get(
            pk=adjustment.pk
        )
        return Response(
            StockAdjustmentSerializer(adjustment).data,
            status=status.HTTP_201_CREATED,
        )
