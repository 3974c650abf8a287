"""Tests for POST /api/actions unified mutation endpoint."""

import pytest

from core.models import ProjectCreate
from fakes import make_invoice, make_item


def act(client, domain: str, action: str, data: dict | None = None):
    return client.post("/api/actions", json={"domain": domain, "action": action, "data": data or {}})


@pytest.fixture
def draft():
    return make_invoice("draft1", items=[make_item("a", images=1), make_item("b")]).to_document()


# =============================================================================
# VALIDATION
# =============================================================================


class TestActionsValidation:

    def test_missing_domain_returns_422(self, client):
        response = client.post("/api/actions", json={"action": "create", "data": {}})
        assert response.status_code == 422

    def test_unknown_domain_returns_400(self, client):
        response = act(client, "spaceship", "launch")
        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "INVALID_REQUEST"
        assert "spaceship" in body["error"]["message"]

    def test_disallowed_action_returns_400(self, client):
        response = act(client, "client", "hack")
        assert response.status_code == 400
        assert "hack" in response.json()["error"]["message"]

    def test_missing_required_key_returns_400(self, client):
        response = act(client, "invoice", "delete", {})
        assert response.status_code == 400
        assert "'id' is required" in response.json()["error"]["message"]

    def test_invalid_model_data_returns_422(self, client):
        response = act(client, "client", "create", {"name": "No Company"})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


# =============================================================================
# INVOICE ACTIONS
# =============================================================================


class TestInvoiceActions:

    def test_new_draft(self, client):
        response = act(client, "invoice", "new_draft")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["invoiceNumber"].endswith("-001")
        assert data["status"] == "DRAFT"
        assert data["items"] == []

    def test_save_then_read(self, client, draft):
        response = act(client, "invoice", "save", {"invoice": draft})
        assert response.status_code == 200
        body = response.json()
        assert body["data"]["savedRemotely"] is True
        assert body["notice"] is None

        stored = client.get("/api/data", params={"type": "invoices", "id": "draft1"}).json()["data"]
        assert stored["items"][0]["images"] == draft["items"][0]["images"]

    def test_delete(self, client, draft):
        act(client, "invoice", "save", {"invoice": draft})
        response = act(client, "invoice", "delete", {"id": "draft1"})
        assert response.json()["data"]["deleted"] is True

    def test_delete_missing_returns_404(self, client):
        response = act(client, "invoice", "delete", {"id": "nope"})
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_add_and_remove_item(self, client, draft):
        added = act(client, "invoice", "add_item", {"invoice": draft, "description": "Extra", "price": 5}).json()["data"]
        assert [i["description"] for i in added["items"]][-1] == "Extra"

        removed = act(client, "invoice", "remove_item", {"invoice": added, "item_id": "a"}).json()["data"]
        assert [i["id"] for i in removed["items"]][0] == "b"

    def test_add_images_updates_quantity(self, client, draft, png_b64):
        response = act(client, "invoice", "add_images", {
            "invoice": draft, "item_id": "b", "images": [png_b64, "data:image/png;base64," + png_b64],
        })
        item = response.json()["data"]["items"][1]
        assert len(item["images"]) == 2
        assert item["quantity"] == 2

    def test_add_invalid_image_returns_400(self, client, draft):
        response = act(client, "invoice", "add_images", {"invoice": draft, "item_id": "b", "images": ["aGVsbG8="]})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_IMAGE"

    def test_remove_image(self, client, draft):
        response = act(client, "invoice", "remove_image", {"invoice": draft, "item_id": "a", "index": 0})
        item = response.json()["data"]["items"][0]
        assert item["images"] == []
        assert item["quantity"] == 1

    def test_bulk_upload(self, client, draft, png_b64):
        response = act(client, "invoice", "bulk_upload", {
            "invoice": draft, "files": [{"name": "shot1.png", "data": png_b64}],
        })
        items = response.json()["data"]["items"]
        assert items[-1]["description"] == "shot1"
        assert items[-1]["price"] == 1500

    def test_editor_actions_do_not_save(self, client, draft, store):
        act(client, "invoice", "add_item", {"invoice": draft})
        assert store.list_invoices() == []

    def test_select_client_and_project(self, client, draft, sample_client, services):
        project, _ = services["project"].create(ProjectCreate(title="Shoot", client_id=sample_client.id))

        selected = act(client, "invoice", "select_client", {"invoice": draft, "client_id": sample_client.id})
        assert selected.json()["data"]["client"]["id"] == sample_client.id

        linked = act(client, "invoice", "select_project", {"invoice": draft, "project_id": project.id})
        assert linked.json()["data"]["projectId"] == project.id


# =============================================================================
# CLIENT / PROJECT / SETTINGS ACTIONS
# =============================================================================


class TestClientActions:

    def test_create_client(self, client):
        response = act(client, "client", "create", {"name": "Ann", "company": "Lee Studio", "email": "a@b.test"})
        assert response.status_code == 200
        data = response.json()["data"]["client"]
        assert data["company"] == "Lee Studio"
        assert data["id"]

    def test_update_client(self, client, sample_client):
        response = act(client, "client", "update", {"id": sample_client.id, "phone": "555"})
        assert response.json()["data"]["client"]["phone"] == "555"

    def test_delete_client(self, client, sample_client):
        assert act(client, "client", "delete", {"id": sample_client.id}).json()["data"]["deleted"] is True
        assert act(client, "client", "delete", {"id": sample_client.id}).status_code == 404


class TestProjectActions:

    def test_create_update_delete(self, client, sample_client):
        created = act(client, "project", "create", {"title": "Shoot", "clientId": sample_client.id})
        project = created.json()["data"]["project"]
        assert project["clientName"] == "Lee Studio"

        updated = act(client, "project", "update", {"id": project["id"], "status": "Completed", "progress": 100})
        assert updated.json()["data"]["project"]["status"] == "Completed"

        deleted = act(client, "project", "delete", {"id": project["id"]})
        assert deleted.json()["data"]["deleted"] is True


class TestSettingsActions:

    def test_update(self, client):
        response = act(client, "settings", "update", {"settings": {"businessName": "Studio X"}})
        assert response.json()["data"]["settings"]["businessName"] == "Studio X"

    def test_set_and_clear_logo(self, client, png_b64):
        logo = act(client, "settings", "set_logo", {"image": png_b64}).json()["data"]["settings"]
        assert logo["businessLogo"].startswith("data:image/jpeg;base64,")

        cleared = act(client, "settings", "clear_logo").json()["data"]["settings"]
        assert "businessLogo" not in cleared


# =============================================================================
# OFFLINE NOTICES
# =============================================================================


class TestNotices:

    def test_connection_loss_is_a_notice_not_an_error(self, client, remote, draft):
        remote.unavailable = True
        response = act(client, "invoice", "save", {"invoice": draft})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["savedRemotely"] is False
        assert body["notice"]["code"] == "CONNECTION_LOST"
        assert response.headers["X-Store-Mode"] == "OFFLINE"

    def test_image_too_large_notice(self, client, remote, draft):
        remote.limits = remote.limits.model_copy(update={"max_document_bytes": 10})
        response = act(client, "invoice", "save", {"invoice": draft})
        assert response.json()["notice"]["code"] == "IMAGE_TOO_LARGE"
        assert response.headers["X-Store-Mode"] == "ONLINE"
