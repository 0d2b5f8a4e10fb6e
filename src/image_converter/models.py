"""Domain models for image conversion services."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Literal, TypeVar, Union

OptionsT = TypeVar("OptionsT")


class Operation(str, Enum):
    CONVERT = "convert"
    COMPRESS = "compress"
    RESIZE = "resize"
    CROP = "crop"
    ROTATE = "rotate"
    IMAGE_TO_PDF = "img-to-pdf"
    PDF_TO_IMAGE = "pdf-to-img"
    ICON = "ico"


@dataclass(frozen=True, slots=True)
class InputItem:
    name: str
    content: bytes
    media_type: str = ""
    size: int = -1

    def __post_init__(self) -> None:
        if self.size < 0:
            object.__setattr__(self, "size", len(self.content))


@dataclass(frozen=True, slots=True)
class PageItem:
    """One page of an uploaded PDF, rendered independently of its siblings."""

    name: str
    document: bytes
    page_index: int

    @property
    def page_number(self) -> int:
        return self.page_index + 1


@dataclass(frozen=True, slots=True)
class ConvertOptions:
    target_format: str
    quality: int = 80
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True, slots=True)
class CompressOptions:
    quality: int = 60


@dataclass(frozen=True, slots=True)
class ResizeOptions:
    width: int
    height: int
    keep_aspect_ratio: bool = False
    quality: int = 80


@dataclass(frozen=True, slots=True)
class CropOptions:
    width: int
    height: int
    x: int = 0
    y: int = 0
    quality: int = 80


@dataclass(frozen=True, slots=True)
class RotateOptions:
    angle: int = 0
    quality: int = 80


@dataclass(frozen=True, slots=True)
class ImageToPdfOptions:
    page_size: str = "auto"
    orientation: Literal["auto", "portrait", "landscape"] = "auto"
    quality: int = 85
    margin: float = 0.0


@dataclass(frozen=True, slots=True)
class PdfToImageOptions:
    target_format: str = "jpg"
    quality: int = 85
    page_range: str = "all"
    dpi: int = 150


@dataclass(frozen=True, slots=True)
class IconOptions:
    sizes: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class ConversionRequest(Generic[OptionsT]):
    items: tuple[InputItem, ...]
    options: OptionsT


@dataclass(slots=True)
class Artifact:
    name: str
    content: bytes
    media_type: str
    metadata: dict[str, object] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True, slots=True)
class ItemSuccess:
    name: str
    artifact: Artifact
    ok: Literal[True] = True


@dataclass(frozen=True, slots=True)
class ItemFailure:
    name: str
    reason: str
    code: str = "TRANSFORM_FAILED"
    ok: Literal[False] = False


ItemOutcome = Union[ItemSuccess, ItemFailure]


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Ordered outcomes of one batch; ``outcomes[i]`` belongs to ``items[i]``."""

    outcomes: tuple[ItemOutcome, ...]

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def successes(self) -> list[ItemSuccess]:
        return [outcome for outcome in self.outcomes if isinstance(outcome, ItemSuccess)]

    @property
    def failures(self) -> list[ItemFailure]:
        return [outcome for outcome in self.outcomes if isinstance(outcome, ItemFailure)]

    @property
    def succeeded(self) -> int:
        return len(self.successes)

    @property
    def failed(self) -> int:
        return len(self.failures)


@dataclass(frozen=True, slots=True)
class DocumentResult:
    name: str
    content: bytes
    page_count: int
    result: BatchResult


@dataclass(frozen=True, slots=True)
class PageBatch:
    result: BatchResult
    total_pages: int
    original_name: str


__all__ = [
    "Operation",
    "InputItem",
    "PageItem",
    "ConvertOptions",
    "CompressOptions",
    "ResizeOptions",
    "CropOptions",
    "RotateOptions",
    "ImageToPdfOptions",
    "PdfToImageOptions",
    "IconOptions",
    "ConversionRequest",
    "Artifact",
    "ItemSuccess",
    "ItemFailure",
    "ItemOutcome",
    "BatchResult",
    "DocumentResult",
    "PageBatch",
]
