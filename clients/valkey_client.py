"""
Valkey (Redis-compatible) client backing the local fallback store.

Simple wrapper around redis-py. Fail-fast: raises on connection failure. The
local store is the durability backstop, so there is nothing to fall back to.
"""

import json
import logging
from typing import Any

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        client.set_many({"pb_clients": "[]"})
        clients = client.get_json("pb_clients")  # None if missing
    """

    def __init__(self, url: str):
        """
        Connect and verify connectivity.

        Raises:
            redis.ConnectionError: If the server is unreachable
        """
        self._client = redis.from_url(url, decode_responses=True)
        self._client.ping()
        logger.info("ValkeyClient connected")

    def get(self, key: str) -> str | None:
        """Value for key, None if the key doesn't exist."""
        return self._client.get(key)

    def set_many(self, values: dict[str, str]) -> None:
        """Store several keys in one round trip (MSET is atomic)."""
        if values:
            self._client.mset(values)

    def get_json(self, key: str) -> Any:
        """
        Deserialized JSON value, None if the key doesn't exist.

        Raises ValueError if the stored value is not valid JSON.
        """
        value = self.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in key '{key}': {e}")

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
        logger.info("ValkeyClient closed")
