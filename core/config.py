"""Application configuration.

Layout constants and store limits are pydantic models so they can be tuned
without touching the algorithms. Connection URLs come from the environment
(optionally a .env file) or, failing that, from Vault.
"""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from clients.vault_client import get_database_url, get_valkey_url

logger = logging.getLogger(__name__)


class PaginationConfig(BaseModel):
    """
    Height estimates for the printable invoice template.

    Tuned by eye for one visual template (A4, five-column image grid).
    Recalibrate when the template changes.
    """

    page_height: int = Field(default=1050, description="Page-height budget", gt=0)
    header_height: int = Field(default=200, description="Header block on the first page", ge=0)
    footer_height: int = Field(default=140, description="Totals/bank footer on the last page", ge=0)
    continuation_top_margin: int = Field(
        default=80,
        description="Starting height of every page after the first",
        ge=0,
    )
    item_base_height: int = Field(default=45, description="Row height of an item without images", ge=0)
    image_row_height: int = Field(default=160, description="Height of one row of thumbnails", ge=0)
    images_per_row: int = Field(default=5, description="Thumbnails per grid row", ge=1)


class StoreLimits(BaseModel):
    """Remote store write limits."""

    max_document_bytes: int = Field(
        default=1_048_576,
        description="Largest serialized document accepted by the remote store",
        gt=0,
    )
    max_batch_writes: int = Field(
        default=500,
        description="Most writes committed in one atomic batch",
        ge=1,
    )


class ImageConfig(BaseModel):
    """Client-side image downscaling before persistence."""

    max_width: int = Field(default=600, description="Deliverable image width cap (px)", ge=1)
    logo_max_width: int = Field(default=300, description="Business logo width cap (px)", ge=1)
    jpeg_quality: int = Field(default=50, description="JPEG re-encode quality", ge=1, le=95)
    max_workers: int = Field(default=4, description="Concurrent encodes per upload", ge=1)


class AppConfig(BaseModel):
    """Root configuration."""

    database_url: str | None = Field(
        default=None,
        description="Remote document store DSN. None means permanently offline.",
    )
    valkey_url: str = Field(
        default="redis://localhost:6379/0",
        description="Local fallback store URL",
    )
    local_key_prefix: str = Field(default="pb_", description="Prefix of local snapshot keys")
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    limits: StoreLimits = Field(default_factory=StoreLimits)
    images: ImageConfig = Field(default_factory=ImageConfig)

    @property
    def remote_configured(self) -> bool:
        return bool(self.database_url)


def _vault_secret(getter) -> str | None:
    """Read a secret via a vault_client helper; None when Vault is unusable."""
    if not os.getenv("VAULT_ADDR"):
        return None
    try:
        return getter()
    except (ValueError, KeyError, OSError) as e:
        logger.warning(f"Vault lookup failed, treating as not configured: {e}")
        return None


def load_config(env_file: str | None = None) -> AppConfig:
    """
    Build configuration from the environment.

    Resolution order per URL: INVOICER_* environment variable, then Vault
    (only when VAULT_ADDR is set), then the default.
    """
    load_dotenv(env_file, override=False)

    database_url = os.getenv("INVOICER_DATABASE_URL") or _vault_secret(get_database_url)
    valkey_url = os.getenv("INVOICER_VALKEY_URL") or _vault_secret(get_valkey_url)

    kwargs = {"database_url": database_url}
    if valkey_url:
        kwargs["valkey_url"] = valkey_url
    if os.getenv("INVOICER_LOCAL_KEY_PREFIX"):
        kwargs["local_key_prefix"] = os.environ["INVOICER_LOCAL_KEY_PREFIX"]

    config = AppConfig(**kwargs)
    if not config.remote_configured:
        logger.info("Remote store not configured; running offline")
    return config
