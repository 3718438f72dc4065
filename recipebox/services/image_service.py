"""Image processing service."""

import io
import logging
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from recipebox.config import settings
from recipebox.utils.exceptions import ImageProcessingError

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_MIME = ("image/jpeg", "image/png", "image/webp", "image/heic", "image/gif")

# Resize/compress before sending to Gemini; recipe cards stay legible at this size
VISION_MAX_DIM = 1600
JPEG_QUALITY = 82
RESIZE_MIN_BYTES = 350_000

_PIL_FORMAT_TO_MIME = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
    "HEIF": "image/heic",
}


class ImageService:
    """Service for validating and preparing uploaded recipe photos."""

    @staticmethod
    def validate_image(file_content: bytes, declared_type: Optional[str] = None) -> Tuple[bytes, str]:
        """
        Validate an uploaded image.

        Args:
            file_content: Image file bytes
            declared_type: Content type sent by the client, used when sniffing is inconclusive

        Returns:
            Tuple of (image_bytes, mime_type)

        Raises:
            ImageProcessingError: If image is invalid
        """
        if not file_content:
            raise ImageProcessingError("Image file is empty")

        if len(file_content) > settings.max_image_size:
            raise ImageProcessingError(
                f"Image file too large (max {settings.max_image_size / 1024 / 1024:.0f}MB)"
            )

        mime_type = ImageService._detect_mime_type(file_content)
        if mime_type == "application/octet-stream" and declared_type:
            mime_type = declared_type.lower()

        if mime_type not in SUPPORTED_IMAGE_MIME:
            raise ImageProcessingError(
                f"Unsupported image format: {mime_type}. Supported: JPEG, PNG, WebP, HEIC, GIF"
            )

        return file_content, mime_type

    @staticmethod
    def _detect_mime_type(file_content: bytes) -> str:
        """Detect MIME type from magic bytes, falling back to Pillow."""
        if file_content.startswith(b"\xff\xd8\xff"):
            return "image/jpeg"
        if file_content.startswith(b"\x89PNG\r\n\x1a\n"):
            return "image/png"
        if file_content.startswith(b"RIFF") and file_content[8:12] == b"WEBP":
            return "image/webp"
        if file_content[:6] in (b"GIF87a", b"GIF89a"):
            return "image/gif"
        if file_content[4:8] == b"ftyp" and file_content[8:12] in (b"heic", b"heix", b"mif1", b"heif"):
            return "image/heic"

        try:
            with Image.open(io.BytesIO(file_content)) as image:
                return _PIL_FORMAT_TO_MIME.get(image.format or "", "application/octet-stream")
        except Image.DecompressionBombError as e:
            raise ImageProcessingError(f"Image dimensions too large: {e}") from e
        except (UnidentifiedImageError, OSError):
            return "application/octet-stream"

    @staticmethod
    def prepare_for_vision(image_bytes: bytes, mime_type: str) -> Tuple[bytes, str]:
        """
        Downscale and recompress large photos to cut Gemini latency.

        Small images and formats Pillow cannot open are returned unchanged.
        Raises ImageProcessingError for decompression bombs.
        """
        if len(image_bytes) < RESIZE_MIN_BYTES:
            return image_bytes, mime_type

        try:
            with Image.open(io.BytesIO(image_bytes)) as im:
                # Phone photos carry rotation in EXIF
                im = ImageOps.exif_transpose(im)
                if im.mode in ("RGBA", "LA") or (im.mode == "P" and "transparency" in im.info):
                    bg = Image.new("RGBA", im.size, (255, 255, 255, 255))
                    im = Image.alpha_composite(bg, im.convert("RGBA")).convert("RGB")
                else:
                    im = im.convert("RGB")

                im.thumbnail((VISION_MAX_DIM, VISION_MAX_DIM), Image.Resampling.LANCZOS)

                out = io.BytesIO()
                im.save(out, format="JPEG", quality=JPEG_QUALITY, optimize=True)
        except Image.DecompressionBombError as e:
            raise ImageProcessingError(f"Image dimensions too large: {e}") from e
        except (UnidentifiedImageError, OSError) as e:
            logger.warning(f"Image resize skipped: {e}")
            return image_bytes, mime_type

        optimized = out.getvalue()
        if len(optimized) >= len(image_bytes):
            return image_bytes, mime_type

        logger.info(
            "Image optimized for vision",
            extra={"orig_bytes": len(image_bytes), "opt_bytes": len(optimized)},
        )
        return optimized, "image/jpeg"
