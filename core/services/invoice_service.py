"""
Invoice service: drafts, editing, persistence and derived views.

Editing happens on a draft Invoice held by the caller. The editor helpers
return an updated copy and never touch the store; only save() and delete()
persist.

Quantity policy: attaching or removing images through the editor sets the
item's quantity to max(1, image count). Bulk upload creates one item per
image with quantity 1 at the default image price. A quantity set directly
by the user is never overwritten.
"""

import logging
from pathlib import PurePath
from typing import Sequence

from core.calculator import InvoiceTotals, invoice_totals
from core.config import ImageConfig, PaginationConfig
from core.dual_store import DualBackendStore, WriteResult
from core.images import encode_images
from core.models import Client, Invoice, InvoiceStatus, LineItem, new_id
from core.pagination import Page, paginate
from utils.timezone import days_from_today_iso, now_utc, today_iso

logger = logging.getLogger(__name__)

DEFAULT_DUE_DAYS = 14
BULK_ITEM_DESCRIPTION = "Image Deliverable"


class InvoiceService:
    """Service for invoice operations."""

    def __init__(
        self,
        store: DualBackendStore,
        pagination: PaginationConfig | None = None,
        image_config: ImageConfig | None = None,
    ):
        self.store = store
        self.pagination = pagination or PaginationConfig()
        self.image_config = image_config or ImageConfig()

    # -------------------------------------------------------------------------
    # Drafts and persistence
    # -------------------------------------------------------------------------

    def next_invoice_number(self) -> str:
        """
        Next display number: INV-<year>-<count + 1, 3 digits>.

        Not guaranteed unique (deleting an invoice frees a number).
        """
        count = len(self.store.list_invoices())
        return f"INV-{now_utc().year}-{count + 1:03d}"

    def new_draft(self) -> Invoice:
        """Unsaved draft with today's date, a two-week due date and default bank details."""
        settings = self.store.get_settings()
        return Invoice(
            id=new_id(),
            invoice_number=self.next_invoice_number(),
            date=today_iso(),
            due_date=days_from_today_iso(DEFAULT_DUE_DAYS),
            client=Client(),
            status=InvoiceStatus.DRAFT,
            bank_details=settings.default_bank,
        )

    def save(self, invoice: Invoice) -> WriteResult:
        """Create or replace an invoice, images included."""
        result = self.store.save_invoice(invoice)
        logger.info(
            f"Saved invoice {invoice.id} ({invoice.invoice_number}, "
            f"{len(invoice.items)} items, {invoice.image_count} images)"
        )
        return result

    def delete(self, invoice_id: str) -> WriteResult:
        """
        Delete an invoice and its stored images.

        Raises:
            ValueError: If invoice not found
        """
        result = self.store.delete_invoice(invoice_id)
        logger.info(f"Deleted invoice {invoice_id}")
        return result

    def get_by_id(self, invoice_id: str) -> Invoice | None:
        return self.store.get_invoice(invoice_id)

    def list_invoices(
        self,
        status: InvoiceStatus | None = None,
        search: str | None = None,
    ) -> list[Invoice]:
        """
        Invoices, optionally filtered.

        Args:
            status: Only invoices in this status
            search: Case-insensitive substring of the number, client name or company
        """
        invoices = self.store.list_invoices()
        if status is not None:
            invoices = [i for i in invoices if i.status == status]
        if search:
            needle = search.lower()
            invoices = [
                i for i in invoices
                if needle in i.invoice_number.lower() or i.client.matches(search)
            ]
        return invoices

    def totals(self, invoice: Invoice) -> InvoiceTotals:
        return invoice_totals(invoice)

    def pages(self, invoice: Invoice) -> list[Page]:
        return paginate(invoice.items, self.pagination)

    # -------------------------------------------------------------------------
    # Editor helpers (pure: return an updated copy of the draft)
    # -------------------------------------------------------------------------

    def _item(self, invoice: Invoice, item_id: str) -> LineItem:
        item = invoice.find_item(item_id)
        if item is None:
            raise ValueError(f"Line item {item_id} not found")
        return item

    def add_item(
        self,
        invoice: Invoice,
        description: str = "",
        quantity: int = 1,
        price: float = 0,
    ) -> Invoice:
        draft = invoice.model_copy(deep=True)
        draft.items.append(LineItem(description=description, quantity=quantity, price=price))
        return draft

    def remove_item(self, invoice: Invoice, item_id: str) -> Invoice:
        """
        Raises:
            ValueError: If the item is not on the invoice
        """
        draft = invoice.model_copy(deep=True)
        self._item(draft, item_id)
        draft.items = [item for item in draft.items if item.id != item_id]
        return draft

    def add_images(self, invoice: Invoice, item_id: str, raws: Sequence[bytes]) -> Invoice:
        """
        Encode uploads and append them to an item, in upload order.

        Raises:
            ValueError: If the item is not on the invoice
            ImageProcessingError: An upload is not a decodable image
        """
        draft = invoice.model_copy(deep=True)
        item = self._item(draft, item_id)
        item.images.extend(encode_images(raws, config=self.image_config))
        item.quantity = max(1, len(item.images))
        return draft

    def remove_image(self, invoice: Invoice, item_id: str, index: int) -> Invoice:
        """
        Raises:
            ValueError: If the item is not on the invoice or index is out of range
        """
        draft = invoice.model_copy(deep=True)
        item = self._item(draft, item_id)
        if not 0 <= index < len(item.images):
            raise ValueError(f"Image index {index} out of range for item {item_id}")
        del item.images[index]
        item.quantity = max(1, len(item.images))
        return draft

    def bulk_upload(self, invoice: Invoice, files: Sequence[tuple[str, bytes]]) -> Invoice:
        """
        One new item per uploaded file, named after the file stem.

        Args:
            files: (filename, raw bytes) pairs

        Raises:
            ImageProcessingError: A file is not a decodable image; no item is added
        """
        price = self.store.get_settings().default_image_price
        images = encode_images([raw for _, raw in files], config=self.image_config)

        draft = invoice.model_copy(deep=True)
        for (filename, _), image in zip(files, images):
            stem = PurePath(filename).name.split(".")[0]
            draft.items.append(LineItem(
                description=stem or BULK_ITEM_DESCRIPTION,
                quantity=1,
                price=price,
                images=[image],
            ))
        logger.info(f"Bulk upload added {len(images)} items to invoice {invoice.id}")
        return draft

    def select_client(self, invoice: Invoice, client_id: str) -> Invoice:
        """
        Copy a client into the invoice by value.

        Raises:
            ValueError: If client not found
        """
        client = self.store.get_client(client_id)
        if client is None:
            raise ValueError(f"Client {client_id} not found")
        return invoice.model_copy(deep=True, update={"client": client})

    def select_project(self, invoice: Invoice, project_id: str | None) -> Invoice:
        """
        Link a project and copy its client when that client still exists.

        An unknown or empty project id clears the link.
        """
        project = self.store.get_project(project_id) if project_id else None
        if project is None:
            return invoice.model_copy(deep=True, update={"project_id": None})

        updates = {"project_id": project.id}
        client = self.store.get_client(project.client_id)
        if client is not None:
            updates["client"] = client
        return invoice.model_copy(deep=True, update=updates)
