"""
Dual-backend store: the single owner of application state.

Reads are served from memory. Every mutation:
1. is applied to a copy of the in-memory state,
2. is written to the local store as a full snapshot, unconditionally, and
   only then replaces the in-memory state,
3. is written to the remote store when ONLINE.

A remote connectivity failure moves the store to OFFLINE for the rest of the
session (sticky, no reconnection). An oversized document is reported but is
not a connectivity problem, so the store stays ONLINE. Remote failures are
returned as notices, never raised: the local snapshot written in step 2
already made the change durable.

Local store failures are not caught. Without the local backstop no write is
safe, so they propagate and the in-memory state is left unchanged.
"""

import logging
import threading
from enum import Enum
from typing import Callable

from pydantic import BaseModel, ValidationError

from core.chunked_invoices import INVOICES, ChunkedInvoiceAdapter
from core.exceptions import PayloadTooLargeError, RemoteUnavailableError, StoreError
from core.local_store import LocalStore
from core.models import AppSettings, AppState, Client, Invoice, Project
from core.remote_store import DocumentWrite, RemoteStore

logger = logging.getLogger(__name__)

CLIENTS = "clients"
PROJECTS = "projects"
SETTINGS = "settings"
SETTINGS_DOC_ID = "general"


class StoreMode(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class NoticeCode(str, Enum):
    """User-facing, non-fatal outcomes of a store operation."""

    OFFLINE_MODE = "OFFLINE_MODE"
    CONNECTION_LOST = "CONNECTION_LOST"
    SAVED_LOCALLY = "SAVED_LOCALLY"
    IMAGE_TOO_LARGE = "IMAGE_TOO_LARGE"


_NOTICE_MESSAGES = {
    NoticeCode.OFFLINE_MODE: "Offline Mode: remote store not configured. Using local storage.",
    NoticeCode.CONNECTION_LOST: "Connection lost. Changes saved locally.",
    NoticeCode.SAVED_LOCALLY: "Saved locally (Offline Mode).",
    NoticeCode.IMAGE_TOO_LARGE: "One of the images is too large. Please try a smaller image.",
}


class Notice(BaseModel):
    code: NoticeCode
    message: str

    @classmethod
    def of(cls, code: NoticeCode) -> "Notice":
        return cls(code=code, message=_NOTICE_MESSAGES[code])


class WriteResult(BaseModel):
    """Outcome of one mutation. The local snapshot is always written."""

    mode: StoreMode
    saved_remotely: bool
    notice: Notice | None = None


def _replace_or_append(records: list, record) -> None:
    for index, existing in enumerate(records):
        if existing.id == record.id:
            records[index] = record
            return
    records.append(record)


def _remove(records: list, record_id: str, kind: str) -> None:
    for index, existing in enumerate(records):
        if existing.id == record_id:
            del records[index]
            return
    raise ValueError(f"{kind} {record_id} not found")


class DualBackendStore:
    """
    Remote-preferred store with a full local mirror.

    Usage:
        store = DualBackendStore(LocalStore(valkey), RemoteStore(database_url))
        notice = store.bootstrap()
        result = store.save_invoice(invoice)
        if result.notice:
            show(result.notice.message)
    """

    def __init__(self, local: LocalStore, remote: RemoteStore | None = None):
        self.local = local
        self.remote = remote
        self._invoices_remote = ChunkedInvoiceAdapter(remote) if remote is not None else None
        self.mode = StoreMode.ONLINE if remote is not None else StoreMode.OFFLINE
        self._state = AppState()
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Mode
    # -------------------------------------------------------------------------

    @property
    def configured(self) -> bool:
        """Whether a remote store was configured at all."""
        return self.remote is not None

    @property
    def online(self) -> bool:
        return self.mode == StoreMode.ONLINE

    def banner(self) -> str | None:
        """Passive offline banner text, None while ONLINE."""
        if self.online:
            return None
        if self.configured:
            return "Offline Mode: Using local storage (remote store disconnected)"
        return "Offline Mode: remote store not configured"

    def _go_offline(self, error: Exception) -> None:
        if self.online:
            logger.warning(f"Remote store failed, switching to offline mode: {error}")
        self.mode = StoreMode.OFFLINE

    def close(self) -> None:
        """Release both backends' connections (application shutdown)."""
        with self._lock:
            if self.remote is not None:
                self.remote.close()
            self.local.close()

    # -------------------------------------------------------------------------
    # Bootstrap
    # -------------------------------------------------------------------------

    def bootstrap(self) -> Notice | None:
        """
        Load state: remote first when configured, local snapshot otherwise.

        Returns a notice when running offline, None when loaded from remote.
        """
        with self._lock:
            if not self.configured:
                self._state = self.local.load_snapshot()
                logger.info("Loaded state from local store (remote not configured)")
                return Notice.of(NoticeCode.OFFLINE_MODE)

            try:
                state = self._fetch_remote()
            except (StoreError, ValidationError) as e:
                self._go_offline(e)
                self._state = self.local.load_snapshot()
                logger.info("Loaded state from local store after remote failure")
                return Notice.of(NoticeCode.CONNECTION_LOST)

            self.local.save_snapshot(state)
            self._state = state
            logger.info(
                f"Loaded state from remote store: {len(state.invoices)} invoices, "
                f"{len(state.clients)} clients, {len(state.projects)} projects"
            )
            return None

    def _fetch_remote(self) -> AppState:
        self.remote.ensure_schema()

        invoices = self._invoices_remote.load_all()
        clients = [Client.model_validate(d) for d in self.remote.list_documents(CLIENTS).values()]
        projects = [Project.model_validate(d) for d in self.remote.list_documents(PROJECTS).values()]

        settings_doc = self.remote.get_document(SETTINGS, SETTINGS_DOC_ID)
        if settings_doc is None:
            settings = AppSettings()
            try:
                self.remote.set_document(SETTINGS, SETTINGS_DOC_ID, settings.to_document())
            except StoreError as e:
                logger.warning(f"Could not seed default settings: {e}")
        else:
            settings = AppSettings.model_validate(settings_doc)

        return AppState(invoices=invoices, clients=clients, projects=projects, settings=settings)

    # -------------------------------------------------------------------------
    # Reads (copies; the store's own state is never handed out)
    # -------------------------------------------------------------------------

    def snapshot(self) -> AppState:
        with self._lock:
            return self._state.model_copy(deep=True)

    def list_invoices(self) -> list[Invoice]:
        with self._lock:
            return [i.model_copy(deep=True) for i in self._state.invoices]

    def get_invoice(self, invoice_id: str) -> Invoice | None:
        with self._lock:
            for invoice in self._state.invoices:
                if invoice.id == invoice_id:
                    return invoice.model_copy(deep=True)
            return None

    def list_clients(self) -> list[Client]:
        with self._lock:
            return [c.model_copy() for c in self._state.clients]

    def get_client(self, client_id: str) -> Client | None:
        with self._lock:
            for client in self._state.clients:
                if client.id == client_id:
                    return client.model_copy()
            return None

    def list_projects(self) -> list[Project]:
        with self._lock:
            return [p.model_copy() for p in self._state.projects]

    def get_project(self, project_id: str) -> Project | None:
        with self._lock:
            for project in self._state.projects:
                if project.id == project_id:
                    return project.model_copy()
            return None

    def get_settings(self) -> AppSettings:
        with self._lock:
            return self._state.settings.model_copy(deep=True)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _mutate(
        self,
        apply: Callable[[AppState], None],
        remote_write: Callable[[], object],
        label: str,
    ) -> WriteResult:
        with self._lock:
            # The change becomes visible only once the local snapshot holds it
            candidate = self._state.model_copy(deep=True)
            apply(candidate)
            self.local.save_snapshot(candidate)
            self._state = candidate

            if not self.online:
                return WriteResult(
                    mode=self.mode,
                    saved_remotely=False,
                    notice=Notice.of(NoticeCode.SAVED_LOCALLY),
                )

            try:
                remote_write()
            except PayloadTooLargeError as e:
                logger.warning(f"Remote write of {label} rejected as too large: {e}")
                return WriteResult(
                    mode=self.mode,
                    saved_remotely=False,
                    notice=Notice.of(NoticeCode.IMAGE_TOO_LARGE),
                )
            except RemoteUnavailableError as e:
                self._go_offline(e)
                return WriteResult(
                    mode=self.mode,
                    saved_remotely=False,
                    notice=Notice.of(NoticeCode.CONNECTION_LOST),
                )

            return WriteResult(mode=self.mode, saved_remotely=True)

    def save_invoice(self, invoice: Invoice) -> WriteResult:
        """Create or replace an invoice (matched by id)."""
        invoice = invoice.model_copy(deep=True)
        return self._mutate(
            lambda state: _replace_or_append(state.invoices, invoice),
            lambda: self._invoices_remote.save(invoice),
            f"invoice {invoice.id}",
        )

    def delete_invoice(self, invoice_id: str) -> WriteResult:
        """Raises ValueError if the invoice does not exist."""
        return self._mutate(
            lambda state: _remove(state.invoices, invoice_id, "Invoice"),
            lambda: self._invoices_remote.delete(invoice_id),
            f"invoice {invoice_id}",
        )

    def save_client(self, client: Client) -> WriteResult:
        client = client.model_copy()
        return self._mutate(
            lambda state: _replace_or_append(state.clients, client),
            lambda: self.remote.set_document(CLIENTS, client.id, client.to_document()),
            f"client {client.id}",
        )

    def delete_client(self, client_id: str) -> WriteResult:
        return self._mutate(
            lambda state: _remove(state.clients, client_id, "Client"),
            lambda: self.remote.delete_document(CLIENTS, client_id),
            f"client {client_id}",
        )

    def save_project(self, project: Project) -> WriteResult:
        project = project.model_copy()
        return self._mutate(
            lambda state: _replace_or_append(state.projects, project),
            lambda: self.remote.set_document(PROJECTS, project.id, project.to_document()),
            f"project {project.id}",
        )

    def delete_project(self, project_id: str) -> WriteResult:
        return self._mutate(
            lambda state: _remove(state.projects, project_id, "Project"),
            lambda: self.remote.delete_document(PROJECTS, project_id),
            f"project {project_id}",
        )

    def save_settings(self, settings: AppSettings) -> WriteResult:
        """Replace the settings singleton wholesale."""
        settings = settings.model_copy(deep=True)

        def apply(state: AppState) -> None:
            state.settings = settings

        return self._mutate(
            apply,
            lambda: self.remote.set_document(SETTINGS, SETTINGS_DOC_ID, settings.to_document()),
            "settings",
        )

    def replace_all(self, new_state: AppState) -> WriteResult:
        """Replace all four collections (backup import)."""
        new_state = new_state.model_copy(deep=True)

        def apply(state: AppState) -> None:
            state.invoices = new_state.invoices
            state.clients = new_state.clients
            state.projects = new_state.projects
            state.settings = new_state.settings

        return self._mutate(apply, lambda: self._push_all(new_state), "full state")

    def _push_all(self, state: AppState) -> None:
        """Make the remote collections match `state` exactly."""
        for collection, records in ((CLIENTS, state.clients), (PROJECTS, state.projects)):
            keep = {r.id for r in records}
            writes = [
                DocumentWrite(collection, doc_id)
                for doc_id in sorted(self.remote.list_ids(collection) - keep)
            ]
            writes.extend(DocumentWrite(collection, r.id, r.to_document()) for r in records)
            self.remote.commit(writes)

        keep_invoices = {i.id for i in state.invoices}
        for invoice_id in sorted(self.remote.list_ids(INVOICES) - keep_invoices):
            self._invoices_remote.delete(invoice_id)
        for invoice in state.invoices:
            self._invoices_remote.save(invoice)

        self.remote.set_document(SETTINGS, SETTINGS_DOC_ID, state.settings.to_document())
