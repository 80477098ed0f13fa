from unittest import mock

from django.db import OperationalError
from django.urls import reverse
from django.test import TestCase

from rest_framework.test import APIClient
from rest_framework import status

HEALTH_URL = reverse("health")


class HealthAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_health_ok(self):
        res = self.client.get(HEALTH_URL)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data, {"status": "ok", "database": "connected"})

    def test_health_reports_database_outage(self):
        with mock.patch("blog_api.views.connection") as connection:
            connection.ensure_connection.side_effect = OperationalError("unreachable")
            res = self.client.get(HEALTH_URL)

        self.assertEqual(res.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(res.data["database"], "disconnected")
