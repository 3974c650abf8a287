"""Tests for GET /api/data and the read convenience routes."""

import pytest

from core.models import InvoiceStatus, Project, ProjectStatus
from fakes import make_invoice, make_item


@pytest.fixture
def sample_invoices(store, client):
    store.save_invoice(make_invoice("inv1"))
    store.save_invoice(make_invoice(
        "inv2",
        invoice_number="INV-2024-777",
        status=InvoiceStatus.PAID,
        items=[make_item("x", price=40, quantity=2)],
        tax_rate=10,
        discount=8,
    ))
    return store


# =============================================================================
# VALIDATION
# =============================================================================


class TestDataValidation:

    def test_missing_type_returns_400(self, client):
        response = client.get("/api/data")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_unknown_type_returns_400(self, client):
        response = client.get("/api/data", params={"type": "tickets"})
        assert response.status_code == 400
        assert "tickets" in response.json()["error"]["message"]

    def test_bad_status_returns_400(self, client):
        response = client.get("/api/data", params={"type": "invoices", "status": "LOST"})
        assert response.status_code == 400


# =============================================================================
# STATUS
# =============================================================================


class TestStatus:

    def test_online(self, client):
        data = client.get("/api/status").json()["data"]
        assert data == {"mode": "ONLINE", "configured": True, "banner": None}

    def test_offline_after_connection_loss(self, client, remote, store):
        remote.unavailable = True
        store.save_invoice(make_invoice())

        data = client.get("/api/status").json()["data"]
        assert data["mode"] == "OFFLINE"
        assert data["banner"].startswith("Offline Mode")


# =============================================================================
# INVOICES
# =============================================================================


class TestInvoices:

    def test_list(self, client, sample_invoices):
        data = client.get("/api/data", params={"type": "invoices"}).json()["data"]
        assert sorted(i["id"] for i in data) == ["inv1", "inv2"]

    def test_filter_by_status(self, client, sample_invoices):
        data = client.get("/api/data", params={"type": "invoices", "status": "PAID"}).json()["data"]
        assert [i["id"] for i in data] == ["inv2"]

    def test_search_by_number(self, client, sample_invoices):
        data = client.get("/api/data", params={"type": "invoices", "search": "777"}).json()["data"]
        assert [i["id"] for i in data] == ["inv2"]

    def test_search_by_client(self, client, sample_invoices):
        data = client.get("/api/data", params={"type": "invoices", "search": "lee stud"}).json()["data"]
        assert len(data) == 2

    def test_get_by_id_includes_images(self, client, sample_invoices):
        data = client.get("/api/data", params={"type": "invoices", "id": "inv1"}).json()["data"]
        assert len(data["items"][0]["images"]) == 2
        assert "totals" not in data

    def test_get_missing_returns_404(self, client):
        response = client.get("/api/data", params={"type": "invoices", "id": "nope"})
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_include_totals_and_pages(self, client, sample_invoices):
        data = client.get("/api/data", params={
            "type": "invoices", "id": "inv2", "include": "totals,pages",
        }).json()["data"]

        assert data["totals"] == {"subtotal": 80, "taxAmount": 8, "discount": 8, "total": 80}
        assert data["pages"] == [["x"]]

    def test_pages_endpoint(self, client, sample_invoices):
        data = client.get("/api/invoices/inv1/pages").json()["data"]
        assert data["invoiceId"] == "inv1"
        assert data["pageCount"] == 1
        assert data["pages"] == [["a", "b"]]
        assert data["totals"]["total"] == 200

    def test_pages_endpoint_for_empty_invoice(self, client, store):
        store.save_invoice(make_invoice("empty", items=[]))
        data = client.get("/api/invoices/empty/pages").json()["data"]
        assert data["pageCount"] == 1
        assert data["pages"] == [[]]

    def test_pages_endpoint_missing_returns_404(self, client):
        assert client.get("/api/invoices/nope/pages").status_code == 404


# =============================================================================
# CLIENTS / PROJECTS / SETTINGS / DASHBOARD
# =============================================================================


class TestClients:

    def test_list_and_search(self, client, sample_client):
        assert len(client.get("/api/data", params={"type": "clients"}).json()["data"]) == 1
        found = client.get("/api/data", params={"type": "clients", "search": "ann"}).json()["data"]
        assert found[0]["id"] == sample_client.id
        missing = client.get("/api/data", params={"type": "clients", "search": "zzz"}).json()["data"]
        assert missing == []

    def test_include_invoice_count(self, client, sample_client, store):
        store.save_invoice(make_invoice("inv1"))
        data = client.get("/api/data", params={
            "type": "clients", "id": sample_client.id, "include": "invoice_count",
        }).json()["data"]
        assert data["invoiceCount"] == 1

    def test_get_missing_returns_404(self, client):
        assert client.get("/api/data", params={"type": "clients", "id": "nope"}).status_code == 404


class TestProjects:

    def test_list_filter_by_status(self, client, store):
        store.save_project(Project(id="p1", title="A", client_id="c1", client_name="X"))
        store.save_project(Project(
            id="p2", title="B", client_id="c1", client_name="X", status=ProjectStatus.COMPLETED,
        ))

        data = client.get("/api/data", params={"type": "projects", "status": "Completed"}).json()["data"]
        assert [p["id"] for p in data] == ["p2"]

    def test_get_by_id(self, client, store):
        store.save_project(Project(id="p1", title="A", client_id="c1", client_name="X"))
        data = client.get("/api/data", params={"type": "projects", "id": "p1"}).json()["data"]
        assert data["clientName"] == "X"


class TestSettingsAndDashboard:

    def test_settings_defaults(self, client):
        data = client.get("/api/data", params={"type": "settings"}).json()["data"]
        assert data["businessName"] == "PB Creative"
        assert data["defaultBank"]["bankName"] == "Sampath Bank"

    def test_dashboard(self, client, sample_invoices):
        data = client.get("/api/data", params={"type": "dashboard"}).json()["data"]
        assert data["totalRevenue"] == 80
        assert data["outstanding"] == 0
        assert data["statusCounts"]["DRAFT"] == 1


# =============================================================================
# RESPONSE FORMAT
# =============================================================================


class TestResponseFormat:

    def test_success_has_all_fields(self, client):
        response = client.get("/api/data", params={"type": "clients"})

        body = response.json()
        assert body["success"] is True
        assert body["data"] == []
        assert body["error"] is None
        assert body["notice"] is None
        assert "timestamp" in body["meta"]
        assert "request_id" in body["meta"]
        assert response.headers["X-Store-Mode"] == "ONLINE"

    def test_error_has_all_fields(self, client):
        response = client.get("/api/data", params={"type": "clients", "id": "missing"})

        body = response.json()
        assert body["success"] is False
        assert body["data"] is None
        assert body["error"]["code"] == "NOT_FOUND"
        assert isinstance(body["error"]["message"], str)
        assert "timestamp" in body["meta"]
        assert "request_id" in body["meta"]
