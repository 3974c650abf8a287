"""
Backup export and import.

The backup is one JSON document with the four collections as top-level keys,
in the same camelCase shape the stores use. Import validates the whole
document before anything is replaced.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from core.dual_store import DualBackendStore, WriteResult
from core.exceptions import ImportValidationError
from core.models import AppState, BackupDocument
from utils.timezone import today_iso

logger = logging.getLogger(__name__)


class BackupService:
    """Service for exporting and importing the full application state."""

    def __init__(self, store: DualBackendStore):
        self.store = store

    def export_document(self) -> dict[str, Any]:
        """All four collections as a JSON-compatible dict."""
        return self.store.snapshot().to_document()

    def export_json(self) -> str:
        return json.dumps(self.export_document(), indent=2)

    def export_filename(self) -> str:
        return f"pb_creative_backup_{today_iso()}.json"

    def parse(self, payload: str | bytes | dict[str, Any]) -> BackupDocument:
        """
        Validate a backup.

        Raises:
            ImportValidationError: Not JSON, not an object, or fields of the wrong shape
        """
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ImportValidationError(f"Backup is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ImportValidationError("Backup must be a JSON object")

        try:
            return BackupDocument.model_validate(payload)
        except ValidationError as e:
            raise ImportValidationError(
                f"Backup does not match the expected format ({e.error_count()} errors): "
                f"{e.errors()[0]['msg']}"
            ) from e

    def preview(self, backup: BackupDocument) -> AppState:
        """State that importing `backup` would produce. Nothing is written."""
        return backup.merged_onto(self.store.snapshot())

    def import_backup(self, payload: str | bytes | dict[str, Any], confirm: bool) -> WriteResult:
        """
        Replace the application state with a backup.

        Collections missing from the backup keep their current contents.

        Args:
            payload: Backup document (raw JSON or parsed)
            confirm: Must be True; the import overwrites everything

        Raises:
            ImportValidationError: Malformed backup (nothing is changed)
            ValueError: confirm is not True
        """
        backup = self.parse(payload)
        if not confirm:
            raise ValueError("Import overwrites all current data and must be confirmed")

        state = self.preview(backup)
        result = self.store.replace_all(state)
        logger.info(
            f"Imported backup: {len(state.invoices)} invoices, {len(state.clients)} clients, "
            f"{len(state.projects)} projects"
        )
        return result
