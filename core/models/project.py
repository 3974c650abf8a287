"""Project domain models."""

from enum import Enum

from pydantic import Field, field_validator

from core.models.base import DocumentModel, zero_if_missing


class ProjectStatus(str, Enum):
    """Project progress status. No enforced transitions."""

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    PENDING_REVIEW = "Pending Review"
    COMPLETED = "Completed"


class ProjectCreate(DocumentModel):
    """Data required to create a project."""

    title: str = Field(..., min_length=1, max_length=255)
    client_id: str = Field(..., min_length=1)
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    due_date: str | None = None  # Defaults to today when created
    description: str = Field("", max_length=5000)
    progress: int = Field(0, ge=0, le=100)


class ProjectUpdate(DocumentModel):
    """Data that can be updated on a project. All fields optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    client_id: str | None = Field(None, min_length=1)
    status: ProjectStatus | None = None
    due_date: str | None = None
    description: str | None = Field(None, max_length=5000)
    progress: int | None = Field(None, ge=0, le=100)


class Project(DocumentModel):
    """Full project record as stored."""

    id: str
    title: str
    client_id: str
    client_name: str  # Denormalized copy of the client's company
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    due_date: str = ""
    description: str = ""
    progress: int = Field(0, ge=0, le=100)

    @field_validator("progress", mode="before")
    @classmethod
    def _default_progress(cls, value):
        return zero_if_missing(value)
