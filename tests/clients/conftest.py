"""Fixtures for infrastructure client tests.

Tests marked with the `live_db` / `live_valkey` fixtures need real servers
and are skipped unless INVOICER_TEST_DATABASE_URL / INVOICER_TEST_VALKEY_URL
are set.
"""

import os

import pytest
import redis

from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient


@pytest.fixture
def live_db():
    url = os.getenv("INVOICER_TEST_DATABASE_URL")
    if not url:
        pytest.skip("INVOICER_TEST_DATABASE_URL not set")
    db = PostgresClient(url)
    db.execute("CREATE TABLE IF NOT EXISTS invoicer_test_scratch (id TEXT PRIMARY KEY, data JSONB)")
    db.execute("DELETE FROM invoicer_test_scratch")
    yield db
    db.execute("DROP TABLE IF EXISTS invoicer_test_scratch")
    db.close()


@pytest.fixture
def live_valkey():
    url = os.getenv("INVOICER_TEST_VALKEY_URL")
    if not url:
        pytest.skip("INVOICER_TEST_VALKEY_URL not set")
    client = ValkeyClient(url)
    yield client
    client.close()
    cleanup = redis.from_url(url)
    cleanup.delete("test:json", "test:a")
    cleanup.close()
