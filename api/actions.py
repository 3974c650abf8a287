"""POST /api/actions - unified mutation endpoint.

Editor actions (add_item, add_images, select_client, ...) take the draft
invoice in `data["invoice"]` and return the updated draft without saving it.
Only `save` and `delete` persist. Images travel as base64 strings or data URLs.
"""

from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import success_response
from core.dual_store import Notice, WriteResult
from core.images import decode_data_url
from core.models import (
    AppSettings,
    ClientCreate, ClientUpdate,
    Invoice,
    ProjectCreate, ProjectUpdate,
)


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict = {}


def create_actions_router(services: dict) -> APIRouter:
    router = APIRouter()

    handlers = {
        "invoice": InvoiceHandler(services["invoice"]),
        "client": ClientHandler(services["client"]),
        "project": ProjectHandler(services["project"]),
        "settings": SettingsHandler(services["settings"]),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        method = getattr(handler, f"_handle_{body.action}")
        result, notice = method(dict(body.data))
        return success_response(result, notice).model_dump(mode="json")

    return router


# =============================================================================
# HELPERS
# =============================================================================


def _require(data: dict, key: str) -> Any:
    if key not in data or data[key] in (None, ""):
        raise ValueError(f"'{key}' is required")
    return data[key]


def _notice(result: WriteResult | None) -> Notice | None:
    return result.notice if result is not None else None


def _written(result: WriteResult | None) -> dict:
    """Store outcome fields merged into mutation responses."""
    if result is None:
        return {"savedRemotely": False, "changed": False}
    return {"savedRemotely": result.saved_remotely, "changed": True}


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class InvoiceHandler:
    ALLOWED_ACTIONS = {
        "new_draft", "save", "delete",
        "add_item", "remove_item",
        "add_images", "remove_image", "bulk_upload",
        "select_client", "select_project",
    }

    def __init__(self, service):
        self.service = service

    def _draft(self, data: dict) -> Invoice:
        return Invoice.model_validate(_require(data, "invoice"))

    def _handle_new_draft(self, data: dict):
        return self.service.new_draft().to_document(), None

    def _handle_save(self, data: dict):
        invoice = self._draft(data)
        result = self.service.save(invoice)
        return {"invoice": invoice.to_document(), **_written(result)}, _notice(result)

    def _handle_delete(self, data: dict):
        result = self.service.delete(_require(data, "id"))
        return {"deleted": True, **_written(result)}, _notice(result)

    def _handle_add_item(self, data: dict):
        draft = self.service.add_item(
            self._draft(data),
            description=data.get("description", ""),
            quantity=data.get("quantity", 1),
            price=data.get("price", 0),
        )
        return draft.to_document(), None

    def _handle_remove_item(self, data: dict):
        draft = self.service.remove_item(self._draft(data), _require(data, "item_id"))
        return draft.to_document(), None

    def _handle_add_images(self, data: dict):
        raws = [decode_data_url(image) for image in _require(data, "images")]
        draft = self.service.add_images(self._draft(data), _require(data, "item_id"), raws)
        return draft.to_document(), None

    def _handle_remove_image(self, data: dict):
        draft = self.service.remove_image(
            self._draft(data), _require(data, "item_id"), int(_require(data, "index"))
        )
        return draft.to_document(), None

    def _handle_bulk_upload(self, data: dict):
        files = [
            (f.get("name", ""), decode_data_url(_require(f, "data")))
            for f in _require(data, "files")
        ]
        draft = self.service.bulk_upload(self._draft(data), files)
        return draft.to_document(), None

    def _handle_select_client(self, data: dict):
        draft = self.service.select_client(self._draft(data), _require(data, "client_id"))
        return draft.to_document(), None

    def _handle_select_project(self, data: dict):
        draft = self.service.select_project(self._draft(data), data.get("project_id"))
        return draft.to_document(), None


class ClientHandler:
    ALLOWED_ACTIONS = {"create", "update", "delete"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict):
        client, result = self.service.create(ClientCreate(**data))
        return {"client": client.to_document(), **_written(result)}, _notice(result)

    def _handle_update(self, data: dict):
        client_id = _require(data, "id")
        data.pop("id")
        client, result = self.service.update(client_id, ClientUpdate(**data))
        return {"client": client.to_document(), **_written(result)}, _notice(result)

    def _handle_delete(self, data: dict):
        result = self.service.delete(_require(data, "id"))
        return {"deleted": True, **_written(result)}, _notice(result)


class ProjectHandler:
    ALLOWED_ACTIONS = {"create", "update", "delete"}

    def __init__(self, service):
        self.service = service

    def _handle_create(self, data: dict):
        project, result = self.service.create(ProjectCreate(**data))
        return {"project": project.to_document(), **_written(result)}, _notice(result)

    def _handle_update(self, data: dict):
        project_id = _require(data, "id")
        data.pop("id")
        project, result = self.service.update(project_id, ProjectUpdate(**data))
        return {"project": project.to_document(), **_written(result)}, _notice(result)

    def _handle_delete(self, data: dict):
        result = self.service.delete(_require(data, "id"))
        return {"deleted": True, **_written(result)}, _notice(result)


class SettingsHandler:
    ALLOWED_ACTIONS = {"update", "set_logo", "clear_logo"}

    def __init__(self, service):
        self.service = service

    def _handle_update(self, data: dict):
        settings = AppSettings.model_validate(_require(data, "settings"))
        result = self.service.update(settings)
        return {"settings": settings.to_document(), **_written(result)}, _notice(result)

    def _handle_set_logo(self, data: dict):
        settings, result = self.service.set_logo(decode_data_url(_require(data, "image")))
        return {"settings": settings.to_document(), **_written(result)}, _notice(result)

    def _handle_clear_logo(self, data: dict):
        settings, result = self.service.clear_logo()
        return {"settings": settings.to_document(), **_written(result)}, _notice(result)
