# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register stock routes under /api/products/
    /batches/<uuid>/      batch detail + expiry bucket
    /adjustments/         physical recount
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import StockAdjustmentCreateView, StockBatchViewSet

router = DefaultRouter()

router.register(r"batches", StockBatchViewSet, basename="batches")

urlpatterns = [
    path("adjustments/", StockAdjustmentCreateView.as_view(), name="stock-adjustments"),
    path("", include(router.urls)),
]
