"""Request validation and option normalization.

Each ``validate_*`` method checks, in order: items present, item count,
required options, option ranges, item sizes, and reports the first failure.
Missing optional fields take their documented defaults; malformed values are
rejected rather than coerced.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence

from .codec import ICON_SIZES, supported_formats
from .config import AppConfig, RouteLimits
from .errors import ValidationError
from .models import (
    CompressOptions,
    ConversionRequest,
    ConvertOptions,
    CropOptions,
    IconOptions,
    ImageToPdfOptions,
    InputItem,
    PdfToImageOptions,
    ResizeOptions,
    RotateOptions,
)
from .utils import unique_sorted

Fields = Mapping[str, "str | None"]

PAGE_SIZES: dict[str, tuple[float, float]] = {
    "a4": (595, 842),
    "a5": (420, 595),
    "letter": (612, 792),
    "legal": (612, 1008),
    "tabloid": (792, 1224),
}
ORIENTATIONS = ("auto", "portrait", "landscape")
PAGE_FORMATS = ("jpg", "jpeg", "png", "webp")
MIN_DPI = 36
MAX_DPI = 600


def _raw(fields: Fields, key: str) -> str | None:
    value = fields.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _int_field(fields: Fields, key: str, label: str, default: int | None = None) -> int | None:
    raw = _raw(fields, key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        try:
            number = float(raw)
        except ValueError:
            raise ValidationError("INVALID_OPTION", f"{label} must be a number") from None
        if not number.is_integer():
            raise ValidationError("INVALID_OPTION", f"{label} must be a whole number")
        return int(number)


def _float_field(fields: Fields, key: str, label: str, default: float) -> float:
    raw = _raw(fields, key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValidationError("INVALID_OPTION", f"{label} must be a number") from None


def _bool_field(fields: Fields, key: str) -> bool:
    raw = _raw(fields, key)
    return raw is not None and raw.lower() in {"1", "true", "yes", "on"}


def _check_quality(quality: int) -> None:
    if not 1 <= quality <= 100:
        raise ValidationError("INVALID_OPTION", "Quality must be between 1 and 100")


def _check_positive(*values: int | None) -> None:
    for value in values:
        if value is not None and value < 1:
            raise ValidationError("INVALID_OPTION", "Width and height must be positive numbers")


class RequestValidator:
    def __init__(self, config: AppConfig) -> None:
        self._limits = config.runtime.limits

    # shared checks, in priority order

    def _require_items(self, items: Sequence[InputItem], message: str = "No files provided") -> None:
        if not items:
            raise ValidationError("NO_FILES", message)

    def _check_count(self, items: Sequence[InputItem], limits: RouteLimits) -> None:
        if len(items) > limits.max_files:
            if limits.max_files == 1:
                raise ValidationError("TOO_MANY_FILES", "Only one file is allowed")
            raise ValidationError("TOO_MANY_FILES", f"Maximum {limits.max_files} files allowed at once")

    def _check_sizes(self, items: Sequence[InputItem], limits: RouteLimits) -> None:
        for item in items:
            if item.size > limits.max_file_size_bytes:
                raise ValidationError(
                    "SIZE_LIMIT",
                    f"File {item.name} exceeds {limits.max_file_size_mb}MB limit",
                )

    def _request(self, items: Sequence[InputItem], options):  # type: ignore[no-untyped-def]
        return ConversionRequest(items=tuple(items), options=options)

    # operations

    def validate_convert(self, items: Sequence[InputItem], fields: Fields) -> ConversionRequest[ConvertOptions]:
        limits = self._limits.convert
        self._require_items(items)
        self._check_count(items, limits)
        target = _raw(fields, "format")
        if target is None:
            raise ValidationError("MISSING_OPTION", "Format is required")
        target = target.lower()
        quality = _int_field(fields, "quality", "Quality", 80)
        width = _int_field(fields, "width", "Width")
        height = _int_field(fields, "height", "Height")
        if target not in supported_formats():
            raise ValidationError("UNSUPPORTED_FORMAT", f"Unsupported format: {target}")
        _check_quality(quality)
        _check_positive(width, height)
        self._check_sizes(items, limits)
        options = ConvertOptions(target_format=target, quality=quality, width=width, height=height)
        return self._request(items, options)

    def validate_compress(self, items: Sequence[InputItem], fields: Fields) -> ConversionRequest[CompressOptions]:
        limits = self._limits.edit
        self._require_items(items, "No file provided")
        self._check_count(items, limits)
        quality = _int_field(fields, "quality", "Quality", 60)
        _check_quality(quality)
        self._check_sizes(items, limits)
        return self._request(items, CompressOptions(quality=quality))

    def validate_resize(self, items: Sequence[InputItem], fields: Fields) -> ConversionRequest[ResizeOptions]:
        limits = self._limits.edit
        self._require_items(items, "No file provided")
        self._check_count(items, limits)
        width = _int_field(fields, "width", "Width")
        height = _int_field(fields, "height", "Height")
        if not width or not height:
            raise ValidationError("MISSING_OPTION", "Width and height are required")
        quality = _int_field(fields, "quality", "Quality", 80)
        _check_positive(width, height)
        _check_quality(quality)
        self._check_sizes(items, limits)
        options = ResizeOptions(
            width=width,
            height=height,
            keep_aspect_ratio=_bool_field(fields, "keepAspectRatio"),
            quality=quality,
        )
        return self._request(items, options)

    def validate_crop(self, items: Sequence[InputItem], fields: Fields) -> ConversionRequest[CropOptions]:
        limits = self._limits.edit
        self._require_items(items, "No file provided")
        self._check_count(items, limits)
        width = _int_field(fields, "width", "Width")
        height = _int_field(fields, "height", "Height")
        if not width or not height:
            raise ValidationError("MISSING_OPTION", "Width and height are required")
        x = _int_field(fields, "x", "X", 0)
        y = _int_field(fields, "y", "Y", 0)
        quality = _int_field(fields, "quality", "Quality", 80)
        _check_positive(width, height)
        if x < 0 or y < 0:
            raise ValidationError("INVALID_OPTION", "Crop offsets must not be negative")
        _check_quality(quality)
        self._check_sizes(items, limits)
        return self._request(items, CropOptions(width=width, height=height, x=x, y=y, quality=quality))

    def validate_rotate(self, items: Sequence[InputItem], fields: Fields) -> ConversionRequest[RotateOptions]:
        limits = self._limits.edit
        self._require_items(items, "No file provided")
        self._check_count(items, limits)
        angle = _int_field(fields, "angle", "Angle", 0)
        quality = _int_field(fields, "quality", "Quality", 80)
        _check_quality(quality)
        self._check_sizes(items, limits)
        return self._request(items, RotateOptions(angle=angle, quality=quality))

    def validate_icon(self, items: Sequence[InputItem], fields: Fields) -> ConversionRequest[IconOptions]:
        limits = self._limits.icon
        self._require_items(items, "No file uploaded")
        self._check_count(items, limits)
        raw_sizes = _raw(fields, "sizes")
        if raw_sizes is None:
            raise ValidationError("MISSING_OPTION", "Missing sizes")
        try:
            parsed = json.loads(raw_sizes)
        except json.JSONDecodeError:
            raise ValidationError("INVALID_OPTION", "Invalid sizes format") from None
        if not isinstance(parsed, list):
            raise ValidationError("INVALID_OPTION", "Invalid sizes format")
        sizes = unique_sorted(
            value for value in parsed if isinstance(value, int) and not isinstance(value, bool) and value in ICON_SIZES
        )
        if not sizes:
            raise ValidationError("INVALID_OPTION", "No valid sizes selected")
        self._check_sizes(items, limits)
        return self._request(items, IconOptions(sizes=tuple(sizes)))

    def validate_image_to_pdf(
        self, items: Sequence[InputItem], fields: Fields
    ) -> ConversionRequest[ImageToPdfOptions]:
        limits = self._limits.image_to_pdf
        self._require_items(items)
        if len(items) > limits.max_files:
            raise ValidationError("TOO_MANY_FILES", f"Maximum {limits.max_files} files allowed")
        page_size = (_raw(fields, "pageSize") or "auto").lower()
        orientation = (_raw(fields, "orientation") or "auto").lower()
        quality = _int_field(fields, "quality", "Quality", 85)
        margin = _float_field(fields, "margin", "Margin", 0.0)
        if page_size != "auto" and page_size not in PAGE_SIZES:
            raise ValidationError("INVALID_OPTION", f"Unsupported page size: {page_size}")
        if orientation not in ORIENTATIONS:
            raise ValidationError("INVALID_OPTION", f"Unsupported orientation: {orientation}")
        _check_quality(quality)
        if not 0 <= margin < 50:
            raise ValidationError("INVALID_OPTION", "Margin must be between 0 and 49 percent")
        self._check_sizes(items, limits)
        options = ImageToPdfOptions(
            page_size=page_size,
            orientation=orientation,  # type: ignore[arg-type]
            quality=quality,
            margin=margin,
        )
        return self._request(items, options)

    def validate_pdf_to_image(
        self, items: Sequence[InputItem], fields: Fields
    ) -> ConversionRequest[PdfToImageOptions]:
        limits = self._limits.pdf_to_image
        self._require_items(items, "No PDF file provided")
        self._check_count(items, limits)
        target = (_raw(fields, "format") or "jpg").lower()
        quality = _int_field(fields, "quality", "Quality", 85)
        dpi = _int_field(fields, "dpi", "DPI", 150)
        page_range = _raw(fields, "pageRange") or "all"
        if target not in PAGE_FORMATS:
            raise ValidationError("UNSUPPORTED_FORMAT", f"Unsupported format: {target}")
        _check_quality(quality)
        if not MIN_DPI <= dpi <= MAX_DPI:
            raise ValidationError("INVALID_OPTION", f"DPI must be between {MIN_DPI} and {MAX_DPI}")
        for item in items:
            if item.size > limits.max_file_size_bytes:
                raise ValidationError("SIZE_LIMIT", f"PDF file exceeds {limits.max_file_size_mb}MB limit")
        options = PdfToImageOptions(target_format=target, quality=quality, page_range=page_range, dpi=dpi)
        return self._request(items, options)


def page_dimensions(page_size: str, orientation: str, image_size: tuple[int, int]) -> tuple[float, float]:
    """Page size in points; ``auto`` pages take the source image's size."""

    if page_size == "auto":
        return float(image_size[0]), float(image_size[1])
    width, height = PAGE_SIZES.get(page_size, PAGE_SIZES["a4"])
    landscape = orientation == "landscape" or (orientation == "auto" and image_size[0] > image_size[1])
    if landscape:
        return float(height), float(width)
    return float(width), float(height)


__all__ = ["RequestValidator", "PAGE_SIZES", "ORIENTATIONS", "PAGE_FORMATS", "page_dimensions"]
