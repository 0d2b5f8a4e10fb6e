from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Type

from .base import Transform, artifact_from, decode, fit_inside, translate_errors
from .icon import IconTransform
from .image import CompressTransform, ConvertTransform, CropTransform, ResizeTransform, RotateTransform
from .pdf import ImagePageTransform, PageRenderTransform, margin_size
from ..models import Operation

_TRANSFORM_CLASSES: Dict[Operation, Type[Any]] = {
    Operation.CONVERT: ConvertTransform,
    Operation.COMPRESS: CompressTransform,
    Operation.RESIZE: ResizeTransform,
    Operation.CROP: CropTransform,
    Operation.ROTATE: RotateTransform,
    Operation.IMAGE_TO_PDF: ImagePageTransform,
    Operation.PDF_TO_IMAGE: PageRenderTransform,
    Operation.ICON: IconTransform,
}


@lru_cache(maxsize=len(_TRANSFORM_CLASSES))
def get_transform(operation: Operation) -> Transform[Any, Any]:
    transform_cls = _TRANSFORM_CLASSES.get(operation)
    if not transform_cls:
        raise KeyError(f"No transform registered for {operation}")
    return transform_cls()


__all__ = [
    "Transform",
    "artifact_from",
    "decode",
    "fit_inside",
    "get_transform",
    "margin_size",
    "translate_errors",
]
