"""Core domain models."""

from core.models.base import DocumentModel, new_id
from core.models.client import Client, ClientCreate, ClientUpdate
from core.models.project import Project, ProjectCreate, ProjectUpdate, ProjectStatus
from core.models.settings import AppSettings, BankDetails
from core.models.line_item import LineItem
from core.models.invoice import Invoice, InvoiceStatus
from core.models.state import AppState, BackupDocument

__all__ = [
    # Base
    "DocumentModel", "new_id",
    # Client
    "Client", "ClientCreate", "ClientUpdate",
    # Project
    "Project", "ProjectCreate", "ProjectUpdate", "ProjectStatus",
    # Settings
    "AppSettings", "BankDetails",
    # Invoice
    "LineItem", "Invoice", "InvoiceStatus",
    # State
    "AppState", "BackupDocument",
]
