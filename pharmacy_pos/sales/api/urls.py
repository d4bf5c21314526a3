# sales/api/urls.py

"""
SALES API URLS

Rules:
- Explicit non-PK routes (like "returns") MUST be registered BEFORE router URLs,
  otherwise the router will treat "returns" as a <pk> and you'll get 405.

Provides:
    POST /api/sales/              create sale
    GET  /api/sales/<uuid>/       retrieve sale
    POST /api/sales/returns/      create return
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.views.sale import SaleViewSet
from sales.views.sale_return import SaleReturnCreateView

router = SimpleRouter()
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("returns/", SaleReturnCreateView.as_view(), name="sale-returns"),
    path("", include(router.urls)),
]
