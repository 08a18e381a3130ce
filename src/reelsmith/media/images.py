"""Still image normalization before images enter a filter graph."""

import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from reelsmith.config import get_settings
from reelsmith.models.errors import ConversionError

logger = logging.getLogger(__name__)


class ImageNormalizer:
    """Re-encodes arbitrary stills as orientation-corrected RGB JPEGs.

    Palette, CMYK, 16-bit and alpha images all come out as 8-bit RGB at a
    fixed quality, so ffmpeg's image decoders see one predictable format.
    """

    def __init__(self, quality: int | None = None, suffix: str | None = None):
        settings = get_settings()
        self.quality = quality or settings.jpeg_quality
        self.suffix = suffix or settings.normalized_suffix

    def output_path(self, image_path: Path) -> Path:
        image_path = Path(image_path)
        return image_path.with_name(image_path.stem + self.suffix)

    def is_normalized(self, image_path: Path) -> bool:
        return Path(image_path).name.lower().endswith(self.suffix.lower())

    def normalize(self, image_path: Path) -> Path:
        """Write the normalized sibling of ``image_path`` and return its path."""
        image_path = Path(image_path)
        new_path = self.output_path(image_path)
        try:
            with Image.open(image_path) as img:
                img = ImageOps.exif_transpose(img)
                if img.mode in ("RGBA", "LA", "P"):
                    img = img.convert("RGBA")
                    background = Image.new("RGB", img.size, (0, 0, 0))
                    background.paste(img, mask=img.getchannel("A"))
                    img = background
                else:
                    img = img.convert("RGB")
                img.save(new_path, "JPEG", quality=self.quality, optimize=True, progressive=True)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.error("Failed to convert image %s: %s", image_path, e)
            raise ConversionError(
                f"Failed to convert image {image_path}: {e}",
                details={"image": str(image_path), "cause": str(e)},
            ) from e
        logger.debug("Normalized %s -> %s", image_path.name, new_path.name)
        return new_path
