"""Image payloads kept for display and re-submission."""

import base64
import binascii
from dataclasses import dataclass

from homefix.errors import InvalidImageError

SUPPORTED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/gif",
        "image/heic",
        "image/heif",
    }
)

_HEIC_BRANDS = {b"heic", b"heix", b"hevc", b"hevx"}
_HEIF_BRANDS = {b"mif1", b"msf1", b"heif"}


@dataclass(frozen=True)
class MediaPreview:
    """Displayable reference to an uploaded image."""

    url: str
    type: str

    @classmethod
    def from_bytes(
        cls, image_bytes: bytes, mime_type: str | None = None
    ) -> "MediaPreview":
        """Build a data URL preview from raw image bytes."""
        if not image_bytes:
            raise InvalidImageError("Image data is empty")
        resolved_type = mime_type or detect_mime_type(image_bytes)
        if resolved_type is None:
            raise InvalidImageError(
                "Unrecognised image format; pass the MIME type explicitly"
            )
        ensure_supported_image(image_bytes, resolved_type)
        return cls(url=to_data_url(image_bytes, resolved_type), type=resolved_type)

    def decode(self) -> bytes:
        """Return the raw image bytes carried by the data URL."""
        return parse_data_url(self.url)[0]


def ensure_supported_image(image_bytes: bytes, mime_type: str) -> None:
    """Reject empty payloads and non-image MIME types."""
    if not image_bytes:
        raise InvalidImageError("Image data is empty")
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise InvalidImageError(f"Unsupported image type: {mime_type!r}")


def to_data_url(image_bytes: bytes, mime_type: str) -> str:
    """Convert bytes to a base64 data URL for image input."""
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def parse_data_url(url: str) -> tuple[bytes, str]:
    """Split a base64 data URL into its bytes and MIME type."""
    header, sep, payload = url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise InvalidImageError("Media preview is not a base64 data URL")
    mime_type = header[len("data:") : -len(";base64")]
    try:
        return base64.b64decode(payload, validate=True), mime_type
    except binascii.Error as exc:
        raise InvalidImageError("Media preview has invalid base64 data") from exc


def detect_mime_type(image_bytes: bytes) -> str | None:
    """Infer an image MIME type from file signatures, or None if unknown."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes[:6] in {b"GIF87a", b"GIF89a"}:
        return "image/gif"
    if image_bytes[4:8] == b"ftyp":
        brand = image_bytes[8:12]
        if brand in _HEIC_BRANDS:
            return "image/heic"
        if brand in _HEIF_BRANDS:
            return "image/heif"
    return None
