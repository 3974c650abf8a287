"""Tests for ValkeyClient - Redis-compatible local store backend."""

import pytest
import redis

from clients.valkey_client import ValkeyClient


class TestValkeyClientInit:
    """Connection initialization."""

    def test_connects_with_valid_url(self, valkey):
        assert valkey.get("test:anything") is None

    def test_unreachable_server_raises(self, monkeypatch):
        """Fail-fast: no silent degradation when Valkey is down."""

        class Down:
            def ping(self):
                raise redis.ConnectionError("refused")

        monkeypatch.setattr(
            "clients.valkey_client.redis.from_url",
            lambda url, decode_responses: Down(),
        )
        with pytest.raises(redis.ConnectionError):
            ValkeyClient("redis://nowhere:6379/0")


class TestBasicOperations:
    """Get and multi-key set."""

    def test_get_missing_returns_none(self, valkey):
        assert valkey.get("test:nonexistent:xyz123") is None

    def test_set_many_is_one_round_trip(self, valkey, redis_backend):
        valkey.set_many({"test:a": "1", "test:b": "2"})
        assert redis_backend.mset_calls == 1
        assert valkey.get("test:a") == "1"
        assert valkey.get("test:b") == "2"

    def test_set_many_empty_is_noop(self, valkey, redis_backend):
        valkey.set_many({})
        assert redis_backend.mset_calls == 0


class TestJsonOperations:
    """JSON reads."""

    def test_reads_json(self, valkey, redis_backend):
        redis_backend.data["test:json"] = '[{"id": "a", "quantity": 2}]'
        assert valkey.get_json("test:json") == [{"id": "a", "quantity": 2}]

    def test_missing_returns_none(self, valkey):
        assert valkey.get_json("test:nothing") is None

    def test_invalid_json_raises_value_error(self, valkey, redis_backend):
        redis_backend.data["test:json"] = "{not json"
        with pytest.raises(ValueError, match="test:json"):
            valkey.get_json("test:json")


class TestLiveServer:
    """Against a real Valkey/Redis server."""

    def test_set_many_then_read(self, live_valkey):
        live_valkey.set_many({"test:a": "1", "test:json": '{"businessName": "PB Creative"}'})
        assert live_valkey.get("test:a") == "1"
        assert live_valkey.get_json("test:json") == {"businessName": "PB Creative"}
