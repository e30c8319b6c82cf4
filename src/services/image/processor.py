"""Image validation, metadata extraction and thumbnailing."""
import io
import logging
import warnings
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar

from PIL import ExifTags, Image, ImageOps, UnidentifiedImageError

from src.app.exceptions import BadRequestError, PayloadTooLargeError, UnsupportedMediaTypeError
from src.models.base import utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")

ALLOWED_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
)

THUMBNAIL_SIZE = (300, 300)
THUMBNAIL_QUALITY = 80
DEFAULT_DOMINANT_COLOR = "#808080"

_EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
_PALETTE_COLORS = 5
_PALETTE_SAMPLE = (100, 100)


class ExtractionSource(str, Enum):
    EXTRACTED = "extracted"
    DEFAULTED = "defaulted"


@dataclass(frozen=True)
class Extraction(Generic[T]):
    """A metadata value tagged with whether it was read from the image or defaulted."""
    value: T
    source: ExtractionSource
    reason: Optional[str] = None

    @classmethod
    def extracted(cls, value: T) -> "Extraction[T]":
        return cls(value, ExtractionSource.EXTRACTED)

    @classmethod
    def defaulted(cls, value: T, reason: str) -> "Extraction[T]":
        return cls(value, ExtractionSource.DEFAULTED, reason)

    @property
    def is_defaulted(self) -> bool:
        return self.source is ExtractionSource.DEFAULTED


@dataclass(frozen=True)
class ImageMetadata:
    mime_type: str
    size_bytes: int
    acquired_at: Extraction[datetime]
    dominant_color: Extraction[str]


@dataclass(frozen=True)
class ProcessedImage:
    original: bytes
    thumbnail: bytes
    metadata: ImageMetadata


@contextmanager
def open_image(data: bytes):
    """
    Open image bytes with Pillow, refusing decompression bombs.

    Raises:
        PayloadTooLargeError: pixel count above Image.MAX_IMAGE_PIXELS
    """
    with warnings.catch_warnings():
        warnings.simplefilter("error", Image.DecompressionBombWarning)
        try:
            with Image.open(io.BytesIO(data)) as img:
                yield img
        except (Image.DecompressionBombError, Image.DecompressionBombWarning) as exc:
            raise PayloadTooLargeError(f"Image dimensions too large: {exc}")


def sniff_mime_type(data: bytes) -> str:
    """
    Identify the image type from its content, ignoring any client-declared type.

    Raises:
        UnsupportedMediaTypeError: not an image, or not an allowed image type
    """
    if not data:
        raise UnsupportedMediaTypeError("Empty file")
    try:
        with open_image(data) as img:
            mime_type = img.get_format_mimetype()
    except (UnidentifiedImageError, OSError):
        mime_type = None

    if mime_type not in ALLOWED_MIME_TYPES:
        raise UnsupportedMediaTypeError(
            f"File type not allowed. Use: {', '.join(ALLOWED_MIME_TYPES)}"
        )
    return mime_type


def _parse_exif_datetime(raw) -> Optional[datetime]:
    if raw is None:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("ascii", errors="ignore")
    text = str(raw).strip().strip("\x00")
    if not text:
        return None
    return datetime.strptime(text[:19], _EXIF_DATE_FORMAT)


def extract_acquired_at(img: Image.Image) -> Extraction[datetime]:
    """DateTimeOriginal, then DateTimeDigitized; falls back to the current time."""
    try:
        exif_ifd = img.getexif().get_ifd(ExifTags.IFD.Exif)
    except Exception as exc:
        logger.debug(f"EXIF unreadable: {exc}")
        return Extraction.defaulted(utcnow(), f"unreadable EXIF: {exc}")

    reason = "no EXIF date"
    for tag in (ExifTags.Base.DateTimeOriginal, ExifTags.Base.DateTimeDigitized):
        try:
            value = _parse_exif_datetime(exif_ifd.get(tag))
        except (TypeError, ValueError) as exc:
            logger.debug(f"EXIF date tag {tag} unreadable: {exc}")
            reason = f"unreadable EXIF date: {exc}"
            continue
        if value is not None:
            return Extraction.extracted(value)
    return Extraction.defaulted(utcnow(), reason)


def extract_dominant_color(img: Image.Image) -> Extraction[str]:
    """Most populous colour of a small median-cut palette, as #rrggbb."""
    try:
        sample = img.convert("RGB")
        sample.thumbnail(_PALETTE_SAMPLE)
        quantized = sample.quantize(colors=_PALETTE_COLORS, method=Image.Quantize.MEDIANCUT)
        colors = quantized.getcolors()
        palette = quantized.getpalette()
        if not colors or not palette:
            return Extraction.defaulted(DEFAULT_DOMINANT_COLOR, "empty palette")
        _, index = max(colors, key=lambda item: item[0])
        red, green, blue = palette[index * 3:index * 3 + 3]
        return Extraction.extracted(f"#{red:02x}{green:02x}{blue:02x}")
    except Exception as exc:
        logger.debug(f"Dominant colour extraction failed: {exc}")
        return Extraction.defaulted(DEFAULT_DOMINANT_COLOR, f"palette failed: {exc}")


def make_thumbnail(img: Image.Image) -> bytes:
    """Centre-cropped, fixed-size JPEG."""
    oriented = ImageOps.exif_transpose(img)
    fitted = ImageOps.fit(
        oriented.convert("RGB"),
        THUMBNAIL_SIZE,
        method=Image.Resampling.LANCZOS,
        centering=(0.5, 0.5),
    )
    buffer = io.BytesIO()
    fitted.save(buffer, format="JPEG", quality=THUMBNAIL_QUALITY)
    return buffer.getvalue()


class ImageProcessor:
    """Turns raw upload bytes into original + thumbnail + metadata."""

    def process(self, data: bytes) -> ProcessedImage:
        """
        Validate and process an uploaded image.

        Raises:
            UnsupportedMediaTypeError: content is not an allowed image type
            BadRequestError: content claims an allowed type but cannot be decoded
            PayloadTooLargeError: pixel dimensions exceed the decompression limit
        """
        mime_type = sniff_mime_type(data)

        try:
            with open_image(data) as img:
                img.load()
                acquired_at = extract_acquired_at(img)
                dominant_color = extract_dominant_color(img)
                thumbnail = make_thumbnail(img)
        except (UnidentifiedImageError, OSError) as exc:
            raise BadRequestError(f"Invalid or corrupted image: {exc}")

        if acquired_at.is_defaulted or dominant_color.is_defaulted:
            logger.info(
                f"Image metadata defaulted (acquired_at={acquired_at.source.value}, "
                f"dominant_color={dominant_color.source.value})"
            )

        return ProcessedImage(
            original=data,
            thumbnail=thumbnail,
            metadata=ImageMetadata(
                mime_type=mime_type,
                size_bytes=len(data),
                acquired_at=acquired_at,
                dominant_color=dominant_color,
            ),
        )

    def process_avatar(self, data: bytes) -> bytes:
        """Validate an avatar upload and return its square JPEG rendition."""
        sniff_mime_type(data)
        try:
            with open_image(data) as img:
                img.load()
                return make_thumbnail(img)
        except (UnidentifiedImageError, OSError) as exc:
            raise BadRequestError(f"Invalid or corrupted image: {exc}")
