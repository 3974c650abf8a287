"""
Local fallback store: the whole application state as four Valkey keys.

Each key holds one JSON-serialized collection (<prefix>invoices,
<prefix>clients, <prefix>projects, <prefix>settings). Every save rewrites all
four keys in one MSET, so a reader never sees a half-applied mutation.
"""

import json
import logging

from pydantic import TypeAdapter, ValidationError

from clients.valkey_client import ValkeyClient
from core.models import AppSettings, AppState, Client, Invoice, Project

logger = logging.getLogger(__name__)

_COLLECTIONS = {
    "invoices": TypeAdapter(list[Invoice]),
    "clients": TypeAdapter(list[Client]),
    "projects": TypeAdapter(list[Project]),
    "settings": TypeAdapter(AppSettings),
}


class LocalStore:
    """Snapshot persistence on a ValkeyClient."""

    def __init__(self, valkey: ValkeyClient, key_prefix: str = "pb_"):
        self.valkey = valkey
        self.key_prefix = key_prefix

    def key(self, collection: str) -> str:
        return f"{self.key_prefix}{collection}"

    def save_snapshot(self, state: AppState) -> None:
        """Overwrite all four keys with the given state."""
        document = state.to_document()
        self.valkey.set_many({
            self.key(name): json.dumps(document[name]) for name in _COLLECTIONS
        })

    def load_snapshot(self) -> AppState:
        """
        Most recent snapshot.

        Missing keys fall back to empty collections / default settings. A key
        that no longer parses is skipped with a warning rather than blocking
        startup; the next save overwrites it.
        """
        loaded = {}
        for name, adapter in _COLLECTIONS.items():
            key = self.key(name)
            try:
                raw = self.valkey.get_json(key)
            except ValueError as e:
                logger.warning(f"Skipping unreadable local key {key}: {e}")
                continue
            if raw is None:
                continue
            try:
                loaded[name] = adapter.validate_python(raw)
            except ValidationError as e:
                logger.warning(f"Skipping malformed local key {key}: {e.error_count()} errors")

        return AppState(**loaded)

    def close(self) -> None:
        self.valkey.close()
