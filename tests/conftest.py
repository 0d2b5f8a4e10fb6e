from __future__ import annotations

import io
from pathlib import Path
from typing import Callable

import fitz  # PyMuPDF
import pytest
from PIL import Image

from image_converter.config import AppConfig, BatchConfig, RuntimeConfig
from image_converter.core import ConversionService

ImageFactory = Callable[..., bytes]


def _encode(fmt: str, size: tuple[int, int], color: tuple[int, ...], mode: str) -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_image() -> ImageFactory:
    def factory(
        fmt: str = "PNG",
        size: tuple[int, int] = (64, 48),
        color: tuple[int, ...] = (200, 30, 30),
        mode: str = "RGB",
    ) -> bytes:
        return _encode(fmt, size, color, mode)

    return factory


@pytest.fixture
def make_pdf() -> Callable[[int], bytes]:
    def factory(pages: int = 3) -> bytes:
        document = fitz.open()
        for number in range(pages):
            page = document.new_page(width=200, height=300)
            page.insert_text((40, 60), f"Page {number + 1}")
        data = document.tobytes()
        document.close()
        return data

    return factory


def build_config(log_dir: Path, concurrency: int = 5) -> AppConfig:
    runtime = RuntimeConfig()
    runtime.log_file = log_dir / "conversions.jsonl"
    runtime.batch = BatchConfig(concurrency=concurrency)
    return AppConfig(runtime=runtime)


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return build_config(tmp_path / "logs")


@pytest.fixture
def service(config: AppConfig) -> ConversionService:
    return ConversionService(config)
