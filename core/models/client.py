"""Client (customer contact) domain models.

A Client is copied by value into each invoice when the invoice is edited, so
later changes to the Client never rewrite historical invoices.
"""

from pydantic import Field

from core.models.base import DocumentModel


class ClientCreate(DocumentModel):
    """Data required to create a client."""

    name: str = Field(..., min_length=1, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    address: str = Field("", max_length=500)
    email: str = Field("", max_length=255)
    phone: str = Field("", max_length=50)


class ClientUpdate(DocumentModel):
    """Data that can be updated on a client. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    company: str | None = Field(None, min_length=1, max_length=255)
    address: str | None = Field(None, max_length=500)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)


class Client(DocumentModel):
    """Full client record as stored, also the snapshot embedded in invoices."""

    id: str = ""
    name: str = ""
    company: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match on name or company."""
        needle = term.lower()
        return needle in self.name.lower() or needle in self.company.lower()
