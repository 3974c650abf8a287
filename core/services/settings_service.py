"""Settings service: the business profile singleton."""

import logging

from core.config import ImageConfig
from core.dual_store import DualBackendStore, WriteResult
from core.images import encode_image
from core.models import AppSettings

logger = logging.getLogger(__name__)


class SettingsService:
    """Service for the settings singleton. Settings are never deleted."""

    def __init__(self, store: DualBackendStore, image_config: ImageConfig | None = None):
        self.store = store
        self.image_config = image_config or ImageConfig()

    def get(self) -> AppSettings:
        return self.store.get_settings()

    def update(self, settings: AppSettings) -> WriteResult:
        """Replace the settings wholesale."""
        return self.store.save_settings(settings)

    def set_logo(self, raw: bytes) -> tuple[AppSettings, WriteResult]:
        """
        Encode an uploaded logo and store it on the settings.

        Raises:
            ImageProcessingError: raw is not a decodable image
        """
        logo = encode_image(raw, self.image_config.logo_max_width, self.image_config.jpeg_quality)
        settings = self.get().model_copy(update={"business_logo": logo})
        return settings, self.store.save_settings(settings)

    def clear_logo(self) -> tuple[AppSettings, WriteResult]:
        settings = self.get().model_copy(update={"business_logo": None})
        return settings, self.store.save_settings(settings)
