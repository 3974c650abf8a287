"""Application settings singleton and bank details."""

from pydantic import Field, field_validator

from core.models.base import DocumentModel, zero_if_missing


class BankDetails(DocumentModel):
    """Bank account printed on invoices."""

    bank_name: str = ""
    account_name: str = ""
    account_number: str = ""
    branch: str = ""


class AppSettings(DocumentModel):
    """
    Business profile and invoice defaults.

    Created with these defaults on first run, replaced wholesale on save,
    never deleted.
    """

    business_name: str = "PB Creative"
    business_address: str = ""
    contact_email: str = ""
    business_logo: str | None = None  # data URL
    default_bank: BankDetails = Field(
        default_factory=lambda: BankDetails(bank_name="Sampath Bank")
    )
    default_image_price: float = Field(1500, ge=0)

    @field_validator("default_image_price", mode="before")
    @classmethod
    def _default_price(cls, value):
        return zero_if_missing(value)
