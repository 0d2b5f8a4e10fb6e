from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MediaKind(str, Enum):
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    GIF = "gif"
    BMP = "bmp"
    TIFF = "tiff"
    AVIF = "avif"
    ICO = "ico"
    PDF = "pdf"

    @property
    def mime_type(self) -> str:
        return MIME_MAP[self]


@dataclass(slots=True)
class DetectionResult:
    kind: MediaKind
    mime_type: str
    declared_type: str


MIME_MAP: dict[MediaKind, str] = {
    MediaKind.JPEG: "image/jpeg",
    MediaKind.PNG: "image/png",
    MediaKind.WEBP: "image/webp",
    MediaKind.GIF: "image/gif",
    MediaKind.BMP: "image/bmp",
    MediaKind.TIFF: "image/tiff",
    MediaKind.AVIF: "image/avif",
    MediaKind.ICO: "image/x-icon",
    MediaKind.PDF: "application/pdf",
}

DECLARED_ALIASES: dict[str, MediaKind] = {
    "image/jpg": MediaKind.JPEG,
    "image/pjpeg": MediaKind.JPEG,
    "image/vnd.microsoft.icon": MediaKind.ICO,
    "application/x-pdf": MediaKind.PDF,
}


class DetectionError(RuntimeError):
    """Raised when the payload does not match any known container."""


def sniff_kind(payload: bytes) -> MediaKind | None:
    header = payload[:32]
    if header.startswith(b"\xff\xd8\xff"):
        return MediaKind.JPEG
    if header.startswith(b"\x89PNG\r\n\x1a\n"):
        return MediaKind.PNG
    if header[:4] == b"RIFF" and header[8:12] == b"WEBP":
        return MediaKind.WEBP
    if header[:6] in {b"GIF87a", b"GIF89a"}:
        return MediaKind.GIF
    if header.startswith(b"BM"):
        return MediaKind.BMP
    if header[:4] in {b"II*\x00", b"MM\x00*"}:
        return MediaKind.TIFF
    if header[4:8] == b"ftyp" and header[8:12] in {b"avif", b"avis"}:
        return MediaKind.AVIF
    if header.startswith(b"\x00\x00\x01\x00"):
        return MediaKind.ICO
    if b"%PDF" in payload[:1024]:
        return MediaKind.PDF
    return None


def declared_kind(media_type: str) -> MediaKind | None:
    normalized = media_type.split(";", 1)[0].strip().lower()
    if not normalized:
        return None
    if normalized in DECLARED_ALIASES:
        return DECLARED_ALIASES[normalized]
    for kind, mime in MIME_MAP.items():
        if mime == normalized:
            return kind
    return None


def detect_media(payload: bytes, declared_type: str = "") -> DetectionResult:
    kind = sniff_kind(payload)
    if kind is None:
        raise DetectionError(f"Unrecognized file signature (declared {declared_type or 'unknown'})")
    return DetectionResult(kind=kind, mime_type=kind.mime_type, declared_type=declared_type)


def is_pdf(payload: bytes, declared_type: str = "") -> bool:
    return declared_kind(declared_type) is MediaKind.PDF or sniff_kind(payload) is MediaKind.PDF
