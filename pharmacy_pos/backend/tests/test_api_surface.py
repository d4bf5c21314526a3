# backend/tests/test_api_surface.py

from unittest import mock

from django.db.utils import OperationalError
from django.test import TestCase
from rest_framework.test import APIClient


class ApiSurfaceTests(TestCase):
    """
    GUARANTEES:
    - /api/ and /api/health/ are public
    - health reports 503 when the database is unreachable
    - framework errors use the same error body as stock errors
    """

    def setUp(self):
        self.client = APIClient()

    def test_api_root_lists_modules(self):
        res = self.client.get("/api/")
        self.assertEqual(res.status_code, 200)
        self.assertIn("sales", res.data["modules"])

    def test_health_ok(self):
        res = self.client.get("/api/health/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data, {"status": "ok", "db": "ok"})

    def test_health_degraded_when_db_down(self):
        with mock.patch("backend.urls.connections") as conns:
            conns.__getitem__.return_value.cursor.side_effect = OperationalError("down")
            with self.assertLogs("backend.urls", level="ERROR"):
                res = self.client.get("/api/health/")

        self.assertEqual(res.status_code, 503)
        self.assertEqual(res.data["db"], "down")

    def test_unknown_route_under_protected_api_needs_auth(self):
        res = self.client.get("/api/sales/00000000-0000-0000-0000-000000000000/")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(
            set(res.data["error"]), {"code", "message", "details"}
        )
