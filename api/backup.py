"""GET /api/export and POST /api/import - backup file endpoints."""

from fastapi import APIRouter, Query, Request
from starlette.responses import Response

from api.base import success_response


def create_backup_router(services: dict) -> APIRouter:
    router = APIRouter()

    backup_svc = services["backup"]

    @router.get("/export")
    async def export_backup(request: Request):
        return Response(
            content=backup_svc.export_json(),
            media_type="application/json",
            headers={
                "Content-Disposition": f'attachment; filename="{backup_svc.export_filename()}"',
            },
        )

    @router.post("/import")
    async def import_backup(request: Request, confirm: bool = Query(False)):
        body = await request.body()
        result = backup_svc.import_backup(body, confirm=confirm)
        state = backup_svc.store.snapshot()
        return success_response(
            {
                "imported": {
                    "invoices": len(state.invoices),
                    "clients": len(state.clients),
                    "projects": len(state.projects),
                },
                "savedRemotely": result.saved_remotely,
            },
            result.notice,
        ).model_dump(mode="json")

    return router
