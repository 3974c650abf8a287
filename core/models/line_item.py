"""Line item domain model.

Prices are plain currency amounts. Images are self-describing data URLs
(``data:image/jpeg;base64,...``) produced by core.images before they reach
any store.
"""

from pydantic import Field, field_validator

from core.models.base import DocumentModel, new_id, zero_if_missing


class LineItem(DocumentModel):
    """One billable row of an invoice."""

    id: str = Field(default_factory=new_id)
    description: str = ""
    quantity: int = Field(1, ge=0)
    price: float = Field(0, ge=0)
    images: list[str] = Field(default_factory=list)
    pages: int | None = Field(None, ge=0)  # Optional billing unit

    @field_validator("quantity", "price", mode="before")
    @classmethod
    def _zero_default(cls, value):
        return zero_if_missing(value)

    @field_validator("pages", mode="before")
    @classmethod
    def _unset_zero_pages(cls, value):
        # 0 pages is stored as absent, locally and remotely alike
        return value or None

    @property
    def amount(self) -> float:
        """price * quantity."""
        return self.price * self.quantity

    @property
    def image_count(self) -> int:
        return len(self.images)
