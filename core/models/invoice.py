"""Invoice domain models.

The total is never stored. It is always recomputed from the items by
core.calculator.
"""

from enum import Enum

from pydantic import Field, field_validator

from core.models.base import DocumentModel, new_id, zero_if_missing
from core.models.client import Client
from core.models.line_item import LineItem
from core.models.settings import BankDetails


class InvoiceStatus(str, Enum):
    """Invoice status. Any status may follow any other."""

    DRAFT = "DRAFT"
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class Invoice(DocumentModel):
    """Full invoice entity, with images embedded in its items."""

    id: str = Field(default_factory=new_id)
    invoice_number: str
    date: str  # YYYY-MM-DD
    due_date: str
    project_id: str | None = None
    client: Client = Field(default_factory=Client)  # Snapshot, copied by value
    items: list[LineItem] = Field(default_factory=list)
    tax_rate: float = Field(0, ge=0)  # Percentage: 10 = 10%
    discount: float = Field(0, ge=0)  # Absolute amount
    status: InvoiceStatus = InvoiceStatus.DRAFT
    bank_details: BankDetails = Field(default_factory=BankDetails)

    @field_validator("tax_rate", "discount", mode="before")
    @classmethod
    def _zero_default(cls, value):
        return zero_if_missing(value)

    def find_item(self, item_id: str) -> LineItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    @property
    def image_count(self) -> int:
        """Total images across all items."""
        return sum(len(item.images) for item in self.items)
