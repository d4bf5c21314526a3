# purchases/api/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import stock_error_response
from products.services.exceptions import StockLedgerError
from purchases.api.serializers import (
    ReceivingRecordCreateSerializer,
    ReceivingRecordSerializer,
)
from purchases.models import ReceivingRecord
from purchases.services.receiving_service import (
    approve_receiving,
    create_receiving_draft,
)


def _reload(record_id):
    return (
        ReceivingRecord.objects.select_related("supplier")
        .prefetch_related("lines", "lines__product", "lines__batch")
        .get(pk=record_id)
    )


class ReceivingRecordCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReceivingRecordCreateSerializer

    @extend_schema(
        tags=["purchases"],
        request=ReceivingRecordCreateSerializer,
        responses={201: ReceivingRecordSerializer},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            record = create_receiving_draft(
                supplier_id=data["supplier_id"],
                invoice_number=data["invoice_number"],
                received_on=data.get("received_on"),
                city=data.get("city", ""),
                responsible=data.get("responsible", ""),
                record_type=data.get("record_type", ""),
                notes=data.get("notes", ""),
                lines=data["lines"],
                user=request.user,
            )
        except StockLedgerError as exc:
            return stock_error_response(exc)

        return Response(
            ReceivingRecordSerializer(_reload(record.pk)).data,
            status=status.HTTP_201_CREATED,
        )


class ReceivingRecordApproveView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["purchases"], request=None, responses=ReceivingRecordSerializer)
    def post(self, request, record_id):
        try:
            record = approve_receiving(record_id=record_id, user=request.user)
        except StockLedgerError as exc:
            return stock_error_response(exc)

        return Response(
            ReceivingRecordSerializer(_reload(record.pk)).data,
            status=status.HTTP_200_OK,
        )
