"""
Project service for CRUD operations.

A project names its client by id and keeps a denormalized copy of the
client's company for display.
"""

import logging

from core.dual_store import DualBackendStore, WriteResult
from core.models import Project, ProjectCreate, ProjectStatus, ProjectUpdate, new_id
from utils.timezone import today_iso

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown"


class ProjectService:
    """Service for project operations."""

    def __init__(self, store: DualBackendStore):
        self.store = store

    def _client_name(self, client_id: str) -> str:
        client = self.store.get_client(client_id)
        return client.company if client is not None else UNKNOWN_CLIENT

    def create(self, data: ProjectCreate) -> tuple[Project, WriteResult]:
        """
        Create a new project.

        Args:
            data: Project creation data (title and client id required)

        Returns:
            (created project, write result)
        """
        project = Project(
            id=new_id(),
            title=data.title,
            client_id=data.client_id,
            client_name=self._client_name(data.client_id),
            status=data.status,
            due_date=data.due_date or today_iso(),
            description=data.description,
            progress=data.progress,
        )
        result = self.store.save_project(project)
        logger.info(f"Created project {project.id} for client {project.client_id}")
        return project, result

    def get_by_id(self, project_id: str) -> Project | None:
        return self.store.get_project(project_id)

    def list_projects(self, status: ProjectStatus | None = None) -> list[Project]:
        projects = self.store.list_projects()
        if status is not None:
            projects = [p for p in projects if p.status == status]
        return projects

    def update(self, project_id: str, data: ProjectUpdate) -> tuple[Project, WriteResult | None]:
        """
        Update project fields. Changing the client refreshes client_name.

        Raises:
            ValueError: If project not found
        """
        current = self.get_by_id(project_id)
        if current is None:
            raise ValueError(f"Project {project_id} not found")

        updates = data.model_dump(exclude_none=True)
        if not updates:
            return current, None

        if "client_id" in updates:
            updates["client_name"] = self._client_name(updates["client_id"])

        project = current.model_copy(update=updates)
        return project, self.store.save_project(project)

    def delete(self, project_id: str) -> WriteResult:
        """
        Delete a project. Invoices keep their project id.

        Raises:
            ValueError: If project not found
        """
        result = self.store.delete_project(project_id)
        logger.info(f"Deleted project {project_id}")
        return result
