"""
Tests for the HTTP surface.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from checkout_server import http_server
from checkout_server.checkout_client import CheckoutClient


@pytest.fixture
def client(monkeypatch, settings, backend):
    """A TestClient whose backend calls go to the stub backend."""
    monkeypatch.setattr(http_server, "settings", settings)
    monkeypatch.setattr(
        http_server,
        "CheckoutClient",
        lambda s: CheckoutClient(s, transport=backend.transport),
    )
    with TestClient(http_server.app) as test_client:
        yield test_client


class TestPages:
    """Test read-only pages."""

    def test_root_lists_flows(self, client):
        response = client.get("/")
        assert response.status_code == 200
        routes = [flow["route"] for flow in response.json()["flows"]]
        assert "/hosted-checkout" in routes
        assert "/view-invoices" in routes

    def test_health(self, client):
        assert client.get("/health").json() == {
            "status": "healthy",
            "backend": "https://backend.example",
        }

    def test_flow_page(self, client):
        data = client.get("/hosted-checkout").json()
        assert data["title"] == "Hosted Checkout Example"
        assert data["total"] == "30"
        assert data["requires_order_id"] is True
        assert [item["id"] for item in data["items"]] == ["shoe", "slippers"]

    def test_subscription_page_shows_plan_price(self, client):
        assert client.get("/new-subscription").json()["total"] == "4.99"

    def test_unknown_flow_is_404(self, client):
        assert client.get("/no-such-flow").status_code == 404

    @pytest.mark.parametrize("path,outcome", [("/success", "success"), ("/failure", "failure")])
    def test_outcome_pages_make_no_network_call(self, client, backend, path, outcome):
        response = client.get(f"{path}?session_id=cs_test_123")
        assert response.status_code == 200
        assert response.json()["outcome"] == outcome
        assert backend.requests == []


class TestCheckout:
    """Test checkout submissions."""

    def test_redirects_to_backend_destination(self, client, backend):
        response = client.post(
            "/hosted-checkout/checkout",
            json={"customer_name": "Ada Lovelace", "customer_email": "ada@example.com"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == "https://pay.example/session/abc"
        body = backend.last_json()
        assert body["customerName"] == "Ada Lovelace"
        assert body["orderId"] == "1754041736853237761"

    def test_backend_failure_returns_502(self, client, backend):
        backend.error = httpx.ConnectError("connection refused")
        response = client.post("/new-subscription/checkout", json={}, follow_redirects=False)
        assert response.status_code == 502
        assert response.json()["error"] == "transport"

    def test_integrated_checkout_returns_client_secret(self, client, backend):
        backend.body = "pi_123_secret_456"
        response = client.post("/integrated-checkout/checkout", json={})
        assert response.status_code == 200
        assert response.json() == {"client_secret": "pi_123_secret_456"}

    def test_account_flow_has_no_checkout(self, client, backend):
        response = client.post("/view-invoices/checkout", json={})
        assert response.status_code == 405
        assert backend.requests == []


class TestAccount:
    """Test subscription and invoice endpoints."""

    def test_lookup_subscriptions(self, client, backend):
        backend.json_body = [{"subscriptionId": "sub_1", "appProductId": "shoe"}]
        response = client.post("/cancel-subscription/lookup", json={"customer_email": "ada@example.com"})
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["subscriptions"][0]["subscription_id"] == "sub_1"

    def test_cancel_subscription(self, client, backend):
        backend.body = "canceled"
        response = client.post("/cancel-subscription/cancel", json={"subscription_id": "sub_1"})
        assert response.json() == {"subscription_id": "sub_1", "status": "canceled"}

    def test_lookup_invoices_backend_error(self, client, backend):
        backend.status_code = 500
        response = client.post("/view-invoices/lookup", json={"customer_email": "ada@example.com"})
        assert response.status_code == 502
