"""Service fixtures over the ONLINE in-memory store."""

import pytest

from core.models import ClientCreate
from core.services.backup_service import BackupService
from core.services.client_service import ClientService
from core.services.dashboard_service import DashboardService
from core.services.invoice_service import InvoiceService
from core.services.project_service import ProjectService
from core.services.settings_service import SettingsService


@pytest.fixture
def invoice_service(store):
    return InvoiceService(store)


@pytest.fixture
def client_service(store):
    return ClientService(store)


@pytest.fixture
def project_service(store):
    return ProjectService(store)


@pytest.fixture
def settings_service(store):
    return SettingsService(store)


@pytest.fixture
def backup_service(store):
    return BackupService(store)


@pytest.fixture
def dashboard_service(store):
    return DashboardService(store)


@pytest.fixture
def sample_client(client_service):
    client, _ = client_service.create(ClientCreate(
        name="Ann Lee",
        company="Lee Studio",
        email="ann@leestudio.test",
    ))
    return client
