"""Tests for core/config.py - environment, .env and Vault resolution."""

import pytest
from pydantic import ValidationError

from core.config import AppConfig, PaginationConfig, load_config

ENV_VARS = ["INVOICER_DATABASE_URL", "INVOICER_VALKEY_URL", "INVOICER_LOCAL_KEY_PREFIX", "VAULT_ADDR"]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv first so teardown also removes values a .env file loads
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)
    empty_env = tmp_path / "empty.env"
    empty_env.write_text("")
    return str(empty_env)


class TestDefaults:

    def test_pagination_defaults(self):
        config = PaginationConfig()
        assert (config.page_height, config.header_height, config.footer_height) == (1050, 200, 140)
        assert (config.item_base_height, config.image_row_height, config.images_per_row) == (45, 160, 5)
        assert config.continuation_top_margin == 80

    def test_images_per_row_must_be_positive(self):
        with pytest.raises(ValidationError):
            PaginationConfig(images_per_row=0)

    def test_remote_not_configured_without_url(self):
        assert not AppConfig().remote_configured
        assert AppConfig(database_url="postgresql://x/y").remote_configured


class TestLoadConfig:

    def test_nothing_set_means_offline(self, clean_env):
        config = load_config(clean_env)
        assert config.database_url is None
        assert config.valkey_url == "redis://localhost:6379/0"
        assert config.local_key_prefix == "pb_"

    def test_reads_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("INVOICER_DATABASE_URL", "postgresql://db/invoicer")
        monkeypatch.setenv("INVOICER_VALKEY_URL", "redis://cache:6379/1")
        monkeypatch.setenv("INVOICER_LOCAL_KEY_PREFIX", "dev_")
        config = load_config(clean_env)
        assert config.database_url == "postgresql://db/invoicer"
        assert config.valkey_url == "redis://cache:6379/1"
        assert config.local_key_prefix == "dev_"

    def test_reads_env_file(self, clean_env, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("INVOICER_DATABASE_URL=postgresql://from-file/db\n")
        config = load_config(str(env_file))
        assert config.database_url == "postgresql://from-file/db"

    def test_falls_back_to_vault(self, clean_env, monkeypatch):
        monkeypatch.setenv("VAULT_ADDR", "http://vault:8200")
        monkeypatch.setattr("core.config.get_database_url", lambda: "postgresql://vault/db")
        monkeypatch.setattr("core.config.get_valkey_url", lambda: "redis://vault:6379/0")
        config = load_config(clean_env)
        assert config.database_url == "postgresql://vault/db"
        assert config.valkey_url == "redis://vault:6379/0"

    def test_vault_failure_means_not_configured(self, clean_env, monkeypatch):
        monkeypatch.setenv("VAULT_ADDR", "http://vault:8200")

        def denied():
            raise PermissionError("Access denied")

        monkeypatch.setattr("core.config.get_database_url", denied)
        monkeypatch.setattr("core.config.get_valkey_url", denied)
        config = load_config(clean_env)
        assert not config.remote_configured
        assert config.valkey_url == "redis://localhost:6379/0"

    def test_vault_ignored_without_vault_addr(self, clean_env, monkeypatch):
        def must_not_be_called():
            raise AssertionError("Vault consulted without VAULT_ADDR")

        monkeypatch.setattr("core.config.get_database_url", must_not_be_called)
        assert load_config(clean_env).database_url is None
