# purchases/api/urls.py

from django.urls import path

from purchases.api.views import (
    ReceivingRecordApproveView,
    ReceivingRecordCreateView,
)

urlpatterns = [
    path("receiving/", ReceivingRecordCreateView.as_view(), name="receiving-create"),
    path(
        "receiving/<uuid:record_id>/approve/",
        ReceivingRecordApproveView.as_view(),
        name="receiving-approve",
    ),
]
