"""GET /api/data - unified read endpoint."""

from fastapi import APIRouter, Query, Request

from api.base import success_response
from core.dual_store import DualBackendStore
from core.models import InvoiceStatus, ProjectStatus
from core.pagination import page_item_ids


VALID_TYPES = {"invoices", "clients", "projects", "settings", "dashboard"}


def create_data_router(services: dict, store: DualBackendStore) -> APIRouter:
    router = APIRouter()

    invoice_svc = services["invoice"]
    client_svc = services["client"]
    project_svc = services["project"]
    settings_svc = services["settings"]
    dashboard_svc = services["dashboard"]

    # -------------------------------------------------------------------------
    # Convenience routes
    # -------------------------------------------------------------------------

    @router.get("/status")
    async def status(request: Request):
        return success_response({
            "mode": store.mode.value,
            "configured": store.configured,
            "banner": store.banner(),
        }).model_dump(mode="json")

    @router.get("/invoices/{invoice_id}/pages")
    async def invoice_pages(request: Request, invoice_id: str):
        invoice = invoice_svc.get_by_id(invoice_id)
        if invoice is None:
            raise ValueError(f"Invoice {invoice_id} not found")

        pages = page_item_ids(invoice_svc.pages(invoice))
        return success_response({
            "invoiceId": invoice.id,
            "pageCount": len(pages),
            "pages": pages,
            "totals": invoice_svc.totals(invoice).as_dict(),
        }).model_dump(mode="json")

    # -------------------------------------------------------------------------
    # Generic data endpoint
    # -------------------------------------------------------------------------

    @router.get("/data")
    async def get_data(
        request: Request,
        type: str | None = Query(None),
        id: str | None = Query(None),
        search: str | None = Query(None),
        status: str | None = Query(None),
        include: str | None = Query(None),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")

        if type not in VALID_TYPES:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(VALID_TYPES))}")

        includes = set(include.split(",")) if include else set()

        if type == "invoices":
            return _handle_invoices(invoice_svc, id, search, status, includes)

        if type == "clients":
            return _handle_clients(client_svc, id, search, includes)

        if type == "projects":
            return _handle_projects(project_svc, id, status)

        if type == "settings":
            return success_response(settings_svc.get().to_document()).model_dump(mode="json")

        if type == "dashboard":
            return success_response(dashboard_svc.summary()).model_dump(mode="json")

    return router


def _invoice_data(invoice_svc, invoice, includes):
    data = invoice.to_document()
    if "totals" in includes:
        data["totals"] = invoice_svc.totals(invoice).as_dict()
    if "pages" in includes:
        data["pages"] = page_item_ids(invoice_svc.pages(invoice))
    return data


def _handle_invoices(invoice_svc, id, search, status, includes):
    if id:
        invoice = invoice_svc.get_by_id(id)
        if invoice is None:
            raise ValueError(f"Invoice {id} not found")
        return success_response(_invoice_data(invoice_svc, invoice, includes)).model_dump(mode="json")

    invoice_status = InvoiceStatus(status) if status else None
    invoices = invoice_svc.list_invoices(status=invoice_status, search=search)
    return success_response(
        [_invoice_data(invoice_svc, i, includes) for i in invoices]
    ).model_dump(mode="json")


def _handle_clients(client_svc, id, search, includes):
    if id:
        client = client_svc.get_by_id(id)
        if client is None:
            raise ValueError(f"Client {id} not found")

        data = client.to_document()
        if "invoice_count" in includes:
            data["invoiceCount"] = client_svc.invoice_count(client)
        return success_response(data).model_dump(mode="json")

    clients = client_svc.list_clients(search=search)
    data = []
    for client in clients:
        entry = client.to_document()
        if "invoice_count" in includes:
            entry["invoiceCount"] = client_svc.invoice_count(client)
        data.append(entry)
    return success_response(data).model_dump(mode="json")


def _handle_projects(project_svc, id, status):
    if id:
        project = project_svc.get_by_id(id)
        if project is None:
            raise ValueError(f"Project {id} not found")
        return success_response(project.to_document()).model_dump(mode="json")

    project_status = ProjectStatus(status) if status else None
    projects = project_svc.list_projects(status=project_status)
    return success_response([p.to_document() for p in projects]).model_dump(mode="json")
