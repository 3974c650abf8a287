"""Whole-application state and the backup document that mirrors it."""

from pydantic import Field

from core.models.base import DocumentModel
from core.models.client import Client
from core.models.invoice import Invoice
from core.models.project import Project
from core.models.settings import AppSettings


class AppState(DocumentModel):
    """The four collections owned by the store."""

    invoices: list[Invoice] = Field(default_factory=list)
    clients: list[Client] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    settings: AppSettings = Field(default_factory=AppSettings)


class BackupDocument(DocumentModel):
    """
    Export/import file.

    On import a missing top-level key leaves that collection as it was.
    Export always writes all four.
    """

    invoices: list[Invoice] | None = None
    clients: list[Client] | None = None
    projects: list[Project] | None = None
    settings: AppSettings | None = None

    def merged_onto(self, current: AppState) -> AppState:
        """State after importing this document over `current`."""
        return AppState(
            invoices=self.invoices if self.invoices is not None else current.invoices,
            clients=self.clients if self.clients is not None else current.clients,
            projects=self.projects if self.projects is not None else current.projects,
            settings=self.settings if self.settings is not None else current.settings,
        )
