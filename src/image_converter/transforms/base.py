from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Protocol, TypeVar

from ..codec import CodecError, DecodedImage, EncodedImage, decode_image
from ..errors import TransformError
from ..models import Artifact, Operation

ItemT = TypeVar("ItemT", contravariant=True)
OptionsT = TypeVar("OptionsT", contravariant=True)


class Transform(Protocol[ItemT, OptionsT]):
    operation: Operation

    def __call__(self, item: ItemT, options: OptionsT) -> Artifact:  # pragma: no cover - interface
        ...


@contextmanager
def translate_errors(name: str) -> Iterator[None]:
    """Re-raise codec failures as a :class:`TransformError` for *name*."""

    try:
        yield
    except CodecError as exc:
        raise TransformError(name, str(exc), exc.code) from exc


def decode(name: str, content: bytes) -> DecodedImage:
    with translate_errors(name):
        return decode_image(content)


def fit_inside(
    source: tuple[int, int],
    width: int | None,
    height: int | None,
    *,
    allow_enlarge: bool = False,
) -> tuple[int, int]:
    """Largest size within ``width`` x ``height`` that keeps the aspect ratio.

    A missing bound leaves that axis unconstrained.
    """

    src_w, src_h = source
    scales: list[float] = []
    if width:
        scales.append(width / src_w)
    if height:
        scales.append(height / src_h)
    if not scales:
        return source
    scale = min(scales)
    if not allow_enlarge:
        scale = min(scale, 1.0)
    return max(1, round(src_w * scale)), max(1, round(src_h * scale))


def artifact_from(name: str, encoded: EncodedImage, **metadata: object) -> Artifact:
    payload: dict[str, object] = {
        "format": encoded.format,
        "width": encoded.width,
        "height": encoded.height,
        "size": len(encoded.content),
    }
    payload.update(metadata)
    return Artifact(name=name, content=encoded.content, media_type=encoded.media_type, metadata=payload)


__all__ = ["Transform", "translate_errors", "decode", "fit_inside", "artifact_from"]
