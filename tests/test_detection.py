import pytest

from image_converter.detection import (
    DetectionError,
    MediaKind,
    declared_kind,
    detect_media,
    is_pdf,
)


def test_detect_png(make_image):
    result = detect_media(make_image("PNG"), "image/png")
    assert result.kind == MediaKind.PNG
    assert result.mime_type == "image/png"


def test_detect_jpeg_and_webp(make_image):
    assert detect_media(make_image("JPEG")).kind == MediaKind.JPEG
    assert detect_media(make_image("WEBP")).kind == MediaKind.WEBP


def test_detect_unknown_payload():
    with pytest.raises(DetectionError) as exc:
        detect_media(b"hello world", "text/plain")
    assert "Unrecognized file signature" in str(exc.value)


def test_declared_aliases():
    assert declared_kind("image/jpg") == MediaKind.JPEG
    assert declared_kind("application/pdf; charset=binary") == MediaKind.PDF
    assert declared_kind("") is None
    assert declared_kind("text/html") is None


def test_is_pdf(make_pdf):
    assert is_pdf(make_pdf(1))
    assert is_pdf(b"", "application/pdf")
    assert not is_pdf(b"\x89PNG\r\n\x1a\n", "image/png")
