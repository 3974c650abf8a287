"""
Chunked invoice persistence.

An invoice is stored as one lightweight document (every item's images
stripped) in 'invoices', plus one child document per image in
'invoices/<invoice id>/invoiceImages', keyed '<item id>_<image index>' with
body {"data": <data URL>}. This keeps each write under the remote store's
per-document size limit regardless of how many images an invoice carries.

Reassembly never trusts the order documents come back in: images are placed
by the index encoded in their key.
"""

import logging
from collections import defaultdict
from typing import Any, Mapping

from core.exceptions import MalformedRecordError
from core.models import Invoice
from core.remote_store import DocumentWrite, RemoteStore

logger = logging.getLogger(__name__)

INVOICES = "invoices"
IMAGES_SUBCOLLECTION = "invoiceImages"


def images_collection(invoice_id: str) -> str:
    return f"{INVOICES}/{invoice_id}/{IMAGES_SUBCOLLECTION}"


def image_key(item_id: str, index: int) -> str:
    return f"{item_id}_{index}"


def parse_image_key(key: str) -> tuple[str, int]:
    """
    Split '<item id>_<index>' on the last underscore.

    Raises ValueError for keys without a numeric index suffix.
    """
    item_id, sep, index = key.rpartition("_")
    if not sep or not item_id or not index.isdigit():
        raise ValueError(f"Malformed image key '{key}'")
    return item_id, int(index)


def lightweight_document(invoice: Invoice) -> dict[str, Any]:
    """Invoice document with every item's images emptied."""
    document = invoice.to_document()
    for item in document["items"]:
        item["images"] = []
    return document


def image_documents(invoice: Invoice) -> dict[str, dict[str, str]]:
    """One {"data": image} document per (item, index), keyed by image_key."""
    return {
        image_key(item.id, index): {"data": image}
        for item in invoice.items
        for index, image in enumerate(item.images)
    }


def split_invoice(invoice: Invoice) -> tuple[dict[str, Any], dict[str, dict[str, str]]]:
    """(lightweight document, image documents) for one invoice."""
    return lightweight_document(invoice), image_documents(invoice)


def reassemble(lightweight: Mapping[str, Any] | Invoice, images: Mapping[str, Mapping[str, Any]]) -> Invoice:
    """
    Rebuild a full invoice from its lightweight document and image documents.

    Images are grouped by item id and ordered by key index. Items without any
    image documents keep the images the lightweight record already had.
    Documents naming an unknown item or carrying a malformed key are dropped
    with a warning.

    Raises:
        MalformedRecordError: An image document has no string `data`
    """
    invoice = (
        lightweight.model_copy(deep=True)
        if isinstance(lightweight, Invoice)
        else Invoice.model_validate(lightweight)
    )

    grouped: dict[str, list[tuple[int, str]]] = defaultdict(list)
    for key, document in images.items():
        try:
            item_id, index = parse_image_key(key)
        except ValueError as e:
            logger.warning(f"Invoice {invoice.id}: {e}")
            continue
        data = document.get("data") if isinstance(document, Mapping) else None
        if not isinstance(data, str):
            raise MalformedRecordError(f"Invoice {invoice.id}: image record '{key}' has no data")
        grouped[item_id].append((index, data))

    known = {item.id for item in invoice.items}
    for item_id in grouped.keys() - known:
        logger.warning(f"Invoice {invoice.id}: dropping images of unknown item {item_id}")

    for item in invoice.items:
        if item.id in grouped:
            item.images = [data for _, data in sorted(grouped[item.id])]

    return invoice


class ChunkedInvoiceAdapter:
    """Reads and writes invoices on a RemoteStore using the chunked layout."""

    def __init__(self, remote: RemoteStore):
        self.remote = remote

    def build_writes(self, invoice: Invoice, existing_image_keys: set[str]) -> list[DocumentWrite]:
        """
        Writes for saving `invoice`, in commit order.

        Stale image documents are deleted first, then images are written, and
        the lightweight document comes last, so a reader never finds a main
        document pointing at images that are not there yet.
        """
        lightweight, images = split_invoice(invoice)
        collection = images_collection(invoice.id)

        writes = [
            DocumentWrite(collection, key)
            for key in sorted(existing_image_keys - set(images))
        ]
        writes.extend(DocumentWrite(collection, key, data) for key, data in images.items())
        writes.append(DocumentWrite(INVOICES, invoice.id, lightweight))
        return writes

    def save(self, invoice: Invoice) -> int:
        """
        Persist an invoice and its images.

        Returns:
            Number of batches committed.

        Raises:
            PayloadTooLargeError: An image (or the lightweight document) is too large
            RemoteUnavailableError: The remote store failed
        """
        existing = self.remote.list_ids(images_collection(invoice.id))
        writes = self.build_writes(invoice, existing)
        batches = self.remote.commit(writes)
        logger.info(
            f"Saved invoice {invoice.id}: {len(writes)} writes in {batches} batches"
        )
        return batches

    def load(self, invoice_id: str) -> Invoice | None:
        """Full invoice, or None if no lightweight document exists."""
        lightweight = self.remote.get_document(INVOICES, invoice_id)
        if lightweight is None:
            return None
        return reassemble(lightweight, self.remote.list_documents(images_collection(invoice_id)))

    def load_all(self) -> list[Invoice]:
        """Every invoice with its images restored."""
        return [
            reassemble(lightweight, self.remote.list_documents(images_collection(invoice_id)))
            for invoice_id, lightweight in self.remote.list_documents(INVOICES).items()
        ]

    def delete(self, invoice_id: str) -> None:
        """Remove the invoice's image documents, then its lightweight document."""
        collection = images_collection(invoice_id)
        writes = [DocumentWrite(collection, key) for key in sorted(self.remote.list_ids(collection))]
        writes.append(DocumentWrite(INVOICES, invoice_id))
        self.remote.commit(writes)
