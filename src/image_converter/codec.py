"""Image and document capabilities backed by Pillow and PyMuPDF.

Everything that touches pixels or PDF objects lives here; the rest of the
package only derives parameters and moves bytes around.  MuPDF keeps global
state that is not thread safe, so every PyMuPDF call is serialized through
``_MUPDF_LOCK``.  Pillow work is left unserialized.
"""

from __future__ import annotations

import io
import threading
from dataclasses import dataclass
from functools import lru_cache

import fitz  # PyMuPDF
from PIL import Image, ImageOps, UnidentifiedImageError, features

_MUPDF_LOCK = threading.Lock()

ICON_SIZES: tuple[int, ...] = (16, 32, 48, 64, 128, 256)

# target name -> (Pillow format, media type, file extension)
FORMAT_TABLE: dict[str, tuple[str, str, str]] = {
    "png": ("PNG", "image/png", "png"),
    "jpg": ("JPEG", "image/jpeg", "jpg"),
    "jpeg": ("JPEG", "image/jpeg", "jpg"),
    "webp": ("WEBP", "image/webp", "webp"),
    "avif": ("AVIF", "image/avif", "avif"),
    "tiff": ("TIFF", "image/tiff", "tiff"),
}


class CodecError(RuntimeError):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass(slots=True)
class DecodedImage:
    format: str
    width: int
    height: int
    image: Image.Image


@dataclass(slots=True)
class EncodedImage:
    content: bytes
    format: str
    media_type: str
    extension: str
    width: int
    height: int


@dataclass(slots=True)
class DocumentInfo:
    page_count: int
    encrypted: bool = False


@dataclass(slots=True)
class IconFrame:
    size: int
    image: Image.Image


@lru_cache(maxsize=1)
def supported_formats() -> tuple[str, ...]:
    formats = ["png", "jpg", "jpeg", "webp", "tiff"]
    if "avif" in features.get_supported_modules():
        formats.append("avif")
    return tuple(formats)


def format_spec(target_format: str) -> tuple[str, str, str]:
    key = target_format.lower()
    if key not in FORMAT_TABLE or key not in supported_formats():
        raise CodecError("UNSUPPORTED_FORMAT", f"Unsupported format: {target_format}")
    return FORMAT_TABLE[key]


def decode_image(data: bytes) -> DecodedImage:
    try:
        image = Image.open(io.BytesIO(data))
    except UnidentifiedImageError as exc:
        raise CodecError("UNSUPPORTED_FORMAT", "Invalid image file") from exc
    except (OSError, Image.DecompressionBombError) as exc:
        raise CodecError("CORRUPT_INPUT", f"Corrupt image data: {exc}") from exc
    source_format = image.format or ""
    try:
        image.load()
    except (OSError, ValueError, SyntaxError) as exc:
        raise CodecError("CORRUPT_INPUT", f"Corrupt image data: {exc}") from exc
    except Image.DecompressionBombError as exc:
        raise CodecError("CORRUPT_INPUT", str(exc)) from exc
    if not source_format or not image.width or not image.height:
        raise CodecError("UNSUPPORTED_FORMAT", "Invalid image file")
    return DecodedImage(format=source_format, width=image.width, height=image.height, image=image)


def flatten(image: Image.Image, background: tuple[int, int, int] = (255, 255, 255)) -> Image.Image:
    """Drop transparency onto *background* and return an RGB image."""

    if image.mode == "RGB":
        return image
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, background)
        canvas.paste(rgba, mask=rgba.getchannel("A"))
        return canvas
    return image.convert("RGB")


def _prepare_for(image: Image.Image, pillow_format: str) -> Image.Image:
    if pillow_format == "JPEG":
        return flatten(image)
    if pillow_format in ("WEBP", "AVIF") and image.mode not in ("RGB", "RGBA"):
        return image.convert("RGBA" if "A" in image.getbands() or "transparency" in image.info else "RGB")
    if pillow_format == "PNG" and image.mode == "CMYK":
        return image.convert("RGB")
    return image


def resize_image(image: Image.Image, size: tuple[int, int]) -> Image.Image:
    if image.size == size:
        return image
    return image.resize(size, Image.Resampling.LANCZOS)


def encode_image(
    image: Image.Image,
    target_format: str,
    quality: int | None = None,
    resize: tuple[int, int] | None = None,
) -> EncodedImage:
    pillow_format, media_type, extension = format_spec(target_format)
    if resize is not None:
        image = resize_image(image, resize)
    prepared = _prepare_for(image, pillow_format)
    params: dict[str, object] = {}
    if pillow_format == "PNG":
        params["compress_level"] = 9
    elif pillow_format in ("JPEG", "WEBP", "AVIF") and quality is not None:
        params["quality"] = quality
    buffer = io.BytesIO()
    try:
        prepared.save(buffer, format=pillow_format, **params)
    except (OSError, ValueError) as exc:
        raise CodecError("ENCODE_FAILED", f"Could not encode {target_format}: {exc}") from exc
    return EncodedImage(
        content=buffer.getvalue(),
        format=extension,
        media_type=media_type,
        extension=extension,
        width=prepared.width,
        height=prepared.height,
    )


def contain_square(image: Image.Image, size: int) -> Image.Image:
    """Fit *image* inside a transparent ``size`` x ``size`` square, centred."""

    rgba = image.convert("RGBA")
    fitted = ImageOps.contain(rgba, (size, size), Image.Resampling.LANCZOS)
    canvas = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    offset = ((size - fitted.width) // 2, (size - fitted.height) // 2)
    canvas.paste(fitted, offset)
    return canvas


def pack_icon_set(frames: list[IconFrame]) -> bytes:
    if not frames:
        raise CodecError("ENCODE_FAILED", "No icon frames to pack")
    ordered = sorted(frames, key=lambda frame: frame.size)
    largest = ordered[-1]
    buffer = io.BytesIO()
    try:
        largest.image.save(
            buffer,
            format="ICO",
            sizes=[(frame.size, frame.size) for frame in ordered],
            append_images=[frame.image for frame in ordered[:-1]],
        )
    except (OSError, ValueError) as exc:
        raise CodecError("ENCODE_FAILED", f"Could not pack icon: {exc}") from exc
    return buffer.getvalue()


def _open_pdf(data: bytes) -> fitz.Document:
    try:
        return fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise CodecError("CORRUPT_INPUT", f"Could not read PDF: {exc}") from exc


def load_document(data: bytes) -> DocumentInfo:
    with _MUPDF_LOCK:
        document = _open_pdf(data)
        try:
            return DocumentInfo(page_count=document.page_count, encrypted=document.needs_pass)
        finally:
            document.close()


def render_page(data: bytes, page_index: int, dpi: int) -> Image.Image:
    with _MUPDF_LOCK:
        document = _open_pdf(data)
        try:
            if not 0 <= page_index < document.page_count:
                raise CodecError("CORRUPT_INPUT", f"Page {page_index + 1} does not exist")
            try:
                pixmap = document.load_page(page_index).get_pixmap(dpi=dpi, alpha=False)
            except RuntimeError as exc:
                raise CodecError("CORRUPT_INPUT", f"Could not render page {page_index + 1}: {exc}") from exc
            return Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)
        finally:
            document.close()


class PdfDocumentBuilder:
    """Single-writer PDF assembly; callers must not share it across threads."""

    def __init__(self) -> None:
        with _MUPDF_LOCK:
            self._document = fitz.open()

    @property
    def page_count(self) -> int:
        return self._document.page_count

    def add_page(
        self,
        image_bytes: bytes,
        page_size: tuple[float, float],
        rect: tuple[float, float, float, float],
    ) -> None:
        width, height = page_size
        if width <= 0 or height <= 0:
            raise CodecError("ENCODE_FAILED", "Invalid page dimensions")
        with _MUPDF_LOCK:
            page = self._document.new_page(width=width, height=height)
            try:
                page.insert_image(fitz.Rect(*rect), stream=image_bytes)
            except (RuntimeError, ValueError) as exc:
                self._document.delete_page(page.number)
                raise CodecError("ENCODE_FAILED", str(exc)) from exc

    def serialize(self) -> bytes:
        with _MUPDF_LOCK:
            return self._document.tobytes(garbage=3, deflate=True)

    def close(self) -> None:
        with _MUPDF_LOCK:
            self._document.close()

    def __enter__(self) -> "PdfDocumentBuilder":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = [
    "CodecError",
    "DecodedImage",
    "EncodedImage",
    "DocumentInfo",
    "IconFrame",
    "ICON_SIZES",
    "PdfDocumentBuilder",
    "contain_square",
    "decode_image",
    "encode_image",
    "flatten",
    "format_spec",
    "load_document",
    "pack_icon_set",
    "render_page",
    "resize_image",
    "supported_formats",
]
