"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.actions import create_actions_router
from api.backup import create_backup_router
from api.data import create_data_router
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware, StoreModeMiddleware
from clients.valkey_client import ValkeyClient
from core.config import AppConfig, load_config
from core.dual_store import DualBackendStore
from core.local_store import LocalStore
from core.remote_store import RemoteStore
from core.services.backup_service import BackupService
from core.services.client_service import ClientService
from core.services.dashboard_service import DashboardService
from core.services.invoice_service import InvoiceService
from core.services.project_service import ProjectService
from core.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


def build_store(config: AppConfig) -> DualBackendStore:
    """
    Local store on Valkey, plus a remote store when a database URL is configured.

    Raises:
        redis.ConnectionError: Valkey is unreachable (no local backstop)
    """
    local = LocalStore(ValkeyClient(config.valkey_url), key_prefix=config.local_key_prefix)
    remote = (
        RemoteStore(config.database_url, limits=config.limits)
        if config.remote_configured
        else None
    )
    return DualBackendStore(local, remote)


def build_services(store: DualBackendStore, config: AppConfig) -> dict:
    return {
        "invoice": InvoiceService(store, config.pagination, config.images),
        "client": ClientService(store),
        "project": ProjectService(store),
        "settings": SettingsService(store, config.images),
        "backup": BackupService(store),
        "dashboard": DashboardService(store),
    }


def create_app(config: AppConfig | None = None, store: DualBackendStore | None = None) -> FastAPI:
    """
    Application with the store bootstrapped on startup.

    Args:
        config: Configuration; loaded from the environment when omitted
        store: Pre-built store (tests); built from config when omitted
    """
    config = config or load_config()
    store = store or build_store(config)
    services = build_services(store, config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        notice = store.bootstrap()
        if notice is not None:
            logger.warning(f"Started in {store.mode.value} mode: {notice.message}")
        else:
            logger.info("Started in ONLINE mode")
        yield
        store.close()
        logger.info("Store connections closed")

    app = FastAPI(title="Invoicer", lifespan=lifespan)
    app.state.store = store
    app.state.services = services

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(StoreModeMiddleware)
    register_error_handlers(app)

    app.include_router(create_data_router(services, store), prefix="/api")
    app.include_router(create_actions_router(services), prefix="/api")
    app.include_router(create_backup_router(services), prefix="/api")

    return app
