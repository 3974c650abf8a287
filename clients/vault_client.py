"""
HashiCorp Vault lookup of the store connection URLs.

Optional: the application only consults Vault when VAULT_ADDR is set and the
matching INVOICER_* variable is not. Authenticates with AppRole and reads KV
v2 secrets under the 'invoicer/' prefix.
"""

import os
import logging

import hvac
from hvac.exceptions import InvalidPath, Unauthorized, Forbidden

logger = logging.getLogger(__name__)

_SECRET_PREFIX = "invoicer"

_vault_client_instance: "VaultClient | None" = None
_secret_cache: dict[str, dict[str, str]] = {}


class VaultClient:
    """AppRole-authenticated KV v2 reader. Raises on any misconfiguration."""

    def __init__(self, vault_addr: str | None = None):
        addr = vault_addr or os.getenv("VAULT_ADDR")
        role_id = os.getenv("VAULT_ROLE_ID")
        secret_id = os.getenv("VAULT_SECRET_ID")

        if not addr:
            raise ValueError("VAULT_ADDR environment variable is required")
        if not role_id or not secret_id:
            raise ValueError(
                "VAULT_ROLE_ID and VAULT_SECRET_ID environment variables are required"
            )

        namespace = os.getenv("VAULT_NAMESPACE")
        self.client = hvac.Client(url=addr, namespace=namespace) if namespace else hvac.Client(url=addr)

        try:
            login = self.client.auth.approle.login(role_id=role_id, secret_id=secret_id)
        except Exception as e:
            raise PermissionError(f"AppRole authentication failed: {e}")
        self.client.token = login["auth"]["client_token"]

        if not self.client.is_authenticated():
            raise PermissionError("Vault authentication failed")
        logger.info(f"Vault client authenticated against {addr}")

    def read(self, path: str) -> dict[str, str]:
        """
        All fields of the secret at invoicer/<path>.

        Raises:
            PermissionError: Path missing or access denied.
        """
        full_path = f"{_SECRET_PREFIX}/{path}"
        try:
            response = self.client.secrets.kv.v2.read_secret_version(
                path=full_path, raise_on_deleted_version=True
            )
        except InvalidPath:
            raise PermissionError(f"Secret path '{full_path}' not found in Vault")
        except (Unauthorized, Forbidden) as e:
            raise PermissionError(f"Access denied to secret '{full_path}': {e}")
        return response["data"]["data"]


def _field(path: str, field: str) -> str:
    """Cached single-field lookup. Raises KeyError if the field is absent."""
    global _vault_client_instance

    if path not in _secret_cache:
        if _vault_client_instance is None:
            _vault_client_instance = VaultClient()
        _secret_cache[path] = _vault_client_instance.read(path)

    secret = _secret_cache[path]
    if field not in secret:
        raise KeyError(f"Field '{field}' not found in secret '{_SECRET_PREFIX}/{path}'")
    return secret[field]


def get_database_url() -> str:
    """Remote document store (PostgreSQL) URL."""
    return _field("database", "url")


def get_valkey_url() -> str:
    """Local fallback store (Valkey) URL."""
    return _field("valkey", "url")
