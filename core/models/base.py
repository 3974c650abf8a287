"""Shared base for every persisted document model.

Fields are snake_case in Python and camelCase in stored documents and backup
files, so existing data keeps its original key names.
"""

import math
from typing import Any
from uuid import uuid4

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Opaque record identifier. Never contains '_' (image keys split on it)."""
    return uuid4().hex


def zero_if_missing(value: Any) -> Any:
    """Treat missing, blank and NaN numeric input as 0."""
    if value is None or value == "":
        return 0
    if isinstance(value, float) and math.isnan(value):
        return 0
    return value


class DocumentModel(BaseModel):
    """Model stored as a JSON document (remote record, local snapshot, backup)."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_document(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys; unset optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
