"""
Image preprocessing for uploads.

Every image is downsized and re-encoded as a JPEG data URL before it reaches
application state, which keeps each image document well under the remote
store's size limit.
"""

import base64
import logging
from concurrent.futures import ThreadPoolExecutor
from io import BytesIO
from typing import Sequence

from PIL import Image, UnidentifiedImageError

from core.config import ImageConfig
from core.exceptions import ImageProcessingError

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:image/jpeg;base64,"


def encode_image(raw: bytes, max_width: int | None = None, quality: int | None = None) -> str:
    """
    Downsize to max_width (aspect ratio kept) and re-encode as a JPEG data URL.

    Images narrower than max_width are not enlarged. Transparency is
    flattened onto white.

    Raises:
        ImageProcessingError: raw is not a decodable image
    """
    defaults = ImageConfig()
    max_width = max_width or defaults.max_width
    quality = quality or defaults.jpeg_quality

    try:
        image = Image.open(BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageProcessingError(f"Could not read image: {e}") from e

    if image.width > max_width:
        height = max(1, round(image.height * max_width / image.width))
        image = image.resize((max_width, height), Image.Resampling.LANCZOS)

    if image.mode in ("RGBA", "LA", "P"):
        image = image.convert("RGBA")
        background = Image.new("RGB", image.size, "white")
        background.paste(image, mask=image.getchannel("A"))
        image = background
    elif image.mode != "RGB":
        image = image.convert("RGB")

    output = BytesIO()
    image.save(output, format="JPEG", quality=quality)
    return DATA_URL_PREFIX + base64.b64encode(output.getvalue()).decode("ascii")


def encode_images(
    raws: Sequence[bytes],
    max_width: int | None = None,
    config: ImageConfig | None = None,
) -> list[str]:
    """Encode several images concurrently. Output order matches input order."""
    config = config or ImageConfig()
    if not raws:
        return []

    with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
        encoded = list(pool.map(
            lambda raw: encode_image(raw, max_width or config.max_width, config.jpeg_quality),
            raws,
        ))

    logger.info(f"Encoded {len(encoded)} images")
    return encoded


def decode_data_url(value: str) -> bytes:
    """
    Bytes of an uploaded file sent as a base64 string or data URL.

    Raises:
        ImageProcessingError: value is not valid base64
    """
    _, _, payload = value.rpartition(",")
    try:
        return base64.b64decode(payload, validate=True)
    except ValueError as e:
        raise ImageProcessingError(f"Image upload is not valid base64: {e}") from e
