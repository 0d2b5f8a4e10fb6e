from typing import Any

import pytest

from image_converter import core
from image_converter.config import AppConfig
from image_converter.core import ConversionService
from image_converter.errors import ValidationError
from image_converter.models import InputItem
from image_converter.validation import RequestValidator, page_dimensions


def items(count: int, content: bytes = b"x") -> list[InputItem]:
    return [InputItem(name=f"image-{i}.png", content=content, media_type="image/png") for i in range(count)]


def test_no_files(config: AppConfig) -> None:
    with pytest.raises(ValidationError) as excinfo:
        RequestValidator(config).validate_convert([], {"format": "png"})
    assert str(excinfo.value) == "No files provided"
    assert excinfo.value.status_code == 400


def test_count_checked_before_format(config: AppConfig) -> None:
    with pytest.raises(ValidationError) as excinfo:
        RequestValidator(config).validate_convert(items(21), {})
    assert excinfo.value.code == "TOO_MANY_FILES"
    assert str(excinfo.value) == "Maximum 20 files allowed at once"


def test_format_required(config: AppConfig) -> None:
    with pytest.raises(ValidationError, match="Format is required"):
        RequestValidator(config).validate_convert(items(1), {"format": "  "})


def test_unsupported_format(config: AppConfig) -> None:
    with pytest.raises(ValidationError) as excinfo:
        RequestValidator(config).validate_convert(items(1), {"format": "bmp"})
    assert excinfo.value.code == "UNSUPPORTED_FORMAT"


def test_quality_out_of_range_runs_no_transform(service: ConversionService, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[Any] = []
    monkeypatch.setattr(core, "get_transform", lambda operation: calls.append(operation))
    with pytest.raises(ValidationError, match="Quality must be between 1 and 100"):
        service.convert_images(items(3), {"format": "png", "quality": "150"})
    assert calls == []


def test_size_limit_checked_last(config: AppConfig) -> None:
    config.runtime.limits.convert.max_file_size_mb = 1
    big = items(1, b"\0" * (1024 * 1024 + 1))
    with pytest.raises(ValidationError) as excinfo:
        RequestValidator(config).validate_convert(big, {"format": "png", "quality": "0"})
    assert excinfo.value.message == "Quality must be between 1 and 100"
    with pytest.raises(ValidationError) as excinfo:
        RequestValidator(config).validate_convert(big, {"format": "png"})
    assert excinfo.value.message == "File image-0.png exceeds 1MB limit"


def test_convert_defaults(config: AppConfig) -> None:
    request = RequestValidator(config).validate_convert(items(2), {"format": "WEBP", "width": ""})
    assert request.options.target_format == "webp"
    assert request.options.quality == 80
    assert request.options.width is None
    assert len(request.items) == 2


def test_malformed_number_rejected(config: AppConfig) -> None:
    with pytest.raises(ValidationError, match="Width must be a number"):
        RequestValidator(config).validate_convert(items(1), {"format": "png", "width": "wide"})


def test_negative_dimensions_rejected(config: AppConfig) -> None:
    with pytest.raises(ValidationError, match="Width and height must be positive numbers"):
        RequestValidator(config).validate_convert(items(1), {"format": "png", "height": "-4"})


def test_single_file_routes(config: AppConfig) -> None:
    validator = RequestValidator(config)
    with pytest.raises(ValidationError, match="Only one file is allowed"):
        validator.validate_compress(items(2), {})
    assert validator.validate_compress(items(1), {}).options.quality == 60
    with pytest.raises(ValidationError, match="Width and height are required"):
        validator.validate_resize(items(1), {"width": "10"})
    resize = validator.validate_resize(items(1), {"width": "10", "height": "5", "keepAspectRatio": "true"})
    assert resize.options.keep_aspect_ratio is True
    with pytest.raises(ValidationError, match="Crop offsets must not be negative"):
        validator.validate_crop(items(1), {"width": "10", "height": "5", "x": "-1"})
    assert validator.validate_rotate(items(1), {"angle": "90"}).options.angle == 90


def test_icon_sizes(config: AppConfig) -> None:
    validator = RequestValidator(config)
    with pytest.raises(ValidationError, match="Missing sizes"):
        validator.validate_icon(items(1), {})
    with pytest.raises(ValidationError, match="Invalid sizes format"):
        validator.validate_icon(items(1), {"sizes": "16,32"})
    with pytest.raises(ValidationError, match="No valid sizes selected"):
        validator.validate_icon(items(1), {"sizes": "[15, 1000]"})
    request = validator.validate_icon(items(1), {"sizes": "[48, 16, 48, 17, true]"})
    assert request.options.sizes == (16, 48)


def test_image_to_pdf_options(config: AppConfig) -> None:
    validator = RequestValidator(config)
    with pytest.raises(ValidationError, match="Maximum 30 files allowed"):
        validator.validate_image_to_pdf(items(31), {})
    with pytest.raises(ValidationError, match="Margin must be between 0 and 49 percent"):
        validator.validate_image_to_pdf(items(1), {"margin": "50"})
    with pytest.raises(ValidationError, match="Unsupported page size"):
        validator.validate_image_to_pdf(items(1), {"pageSize": "b5"})
    request = validator.validate_image_to_pdf(items(2), {"pageSize": "A4", "margin": "10"})
    assert request.options.page_size == "a4"
    assert request.options.orientation == "auto"
    assert request.options.quality == 85
    assert request.options.margin == 10.0


def test_pdf_to_image_options(config: AppConfig) -> None:
    validator = RequestValidator(config)
    with pytest.raises(ValidationError, match="No PDF file provided"):
        validator.validate_pdf_to_image([], {})
    with pytest.raises(ValidationError, match="DPI must be between 36 and 600"):
        validator.validate_pdf_to_image(items(1), {"dpi": "1200"})
    with pytest.raises(ValidationError) as excinfo:
        validator.validate_pdf_to_image(items(1), {"format": "tiff"})
    assert excinfo.value.code == "UNSUPPORTED_FORMAT"
    request = validator.validate_pdf_to_image(items(1), {})
    assert request.options.target_format == "jpg"
    assert request.options.page_range == "all"
    assert request.options.dpi == 150


def test_page_dimensions() -> None:
    assert page_dimensions("auto", "auto", (640, 480)) == (640.0, 480.0)
    assert page_dimensions("a4", "auto", (300, 600)) == (595.0, 842.0)
    assert page_dimensions("a4", "auto", (600, 300)) == (842.0, 595.0)
    assert page_dimensions("letter", "landscape", (10, 10)) == (792.0, 612.0)
    assert page_dimensions("letter", "portrait", (900, 10)) == (612.0, 792.0)
