"""Upload validation and image normalisation ahead of OCR.

Screenshots arrive in any size and colour mode.  Before OCR they are
reduced to a canonical form: fitted inside a square bound (aspect ratio
kept, never enlarged), grayscale, contrast-stretched, sharpened and
re-encoded as PNG.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

from ..core.config import OcrConfig
from ..core.errors import (
    ImageTooLargeError,
    ImageValidationError,
    PreprocessingError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIMENSION = 2000


def validate_upload(
    content_type: str | None,
    size: int,
    config: OcrConfig | None = None,
) -> None:
    """Reject an upload before any file or image work starts.

    Raises
    ------
    UnsupportedFormatError
        Content type is not one of the accepted image types.
    ImageTooLargeError
        Payload exceeds ``config.max_upload_bytes``.
    ImageValidationError
        Payload is empty.
    """
    cfg = config or OcrConfig()
    if (content_type or "").lower() not in cfg.allowed_content_types:
        raise UnsupportedFormatError(
            "Invalid file format. Allowed: PNG, JPEG, JPG, WEBP"
        )
    if size <= 0:
        raise ImageValidationError("No image data uploaded")
    if size > cfg.max_upload_bytes:
        raise ImageTooLargeError(size, cfg.max_upload_bytes)


def normalize(img: Image.Image, max_dimension: int = DEFAULT_MAX_DIMENSION) -> Image.Image:
    """Grayscale, bounded, contrast-normalised and sharpened copy."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        # Flatten transparency onto white so it does not read as black text
        rgba = img.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        img = Image.alpha_composite(background, rgba)

    out = img.convert("L")
    out.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
    out = ImageOps.autocontrast(out)
    return out.filter(ImageFilter.SHARPEN)


def preprocess_image(
    raw: bytes,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
) -> bytes:
    """Normalise raw image bytes into OCR-ready PNG bytes.

    Raises
    ------
    PreprocessingError
        The bytes are not a decodable image.
    """
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            out = normalize(img, max_dimension)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise PreprocessingError(f"Image preprocessing failed: {exc}") from exc

    buf = io.BytesIO()
    out.save(buf, format="PNG")
    logger.debug("Preprocessed image to %dx%d", out.width, out.height)
    return buf.getvalue()


def preprocess_file(
    src: str | Path,
    dst: str | Path,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
) -> Path:
    """File-to-file variant of :func:`preprocess_image`."""
    dst = Path(dst)
    dst.write_bytes(preprocess_image(Path(src).read_bytes(), max_dimension))
    return dst
