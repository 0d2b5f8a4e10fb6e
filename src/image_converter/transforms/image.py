from __future__ import annotations

from PIL import Image

from ..codec import encode_image
from ..errors import TransformError
from ..models import (
    Artifact,
    CompressOptions,
    ConvertOptions,
    CropOptions,
    InputItem,
    Operation,
    ResizeOptions,
    RotateOptions,
)
from ..utils import file_stem
from .base import artifact_from, decode, fit_inside, translate_errors


class ConvertTransform:
    operation = Operation.CONVERT

    def __call__(self, item: InputItem, options: ConvertOptions) -> Artifact:
        decoded = decode(item.name, item.content)
        resize = None
        if options.width or options.height:
            resize = fit_inside((decoded.width, decoded.height), options.width, options.height)
        with translate_errors(item.name):
            encoded = encode_image(decoded.image, options.target_format, options.quality, resize=resize)
        name = f"{file_stem(item.name)}.{encoded.extension}"
        return artifact_from(
            name,
            encoded,
            source=item.name,
            source_width=decoded.width,
            source_height=decoded.height,
            quality=options.quality,
        )


class CompressTransform:
    operation = Operation.COMPRESS

    def __call__(self, item: InputItem, options: CompressOptions) -> Artifact:
        decoded = decode(item.name, item.content)
        with translate_errors(item.name):
            encoded = encode_image(decoded.image, "jpeg", options.quality)
        return artifact_from("compressed-image.jpg", encoded, source=item.name, quality=options.quality)


class ResizeTransform:
    operation = Operation.RESIZE

    def __call__(self, item: InputItem, options: ResizeOptions) -> Artifact:
        decoded = decode(item.name, item.content)
        if options.keep_aspect_ratio:
            target = fit_inside((decoded.width, decoded.height), options.width, options.height)
        else:
            target = (options.width, options.height)
        with translate_errors(item.name):
            encoded = encode_image(decoded.image, "jpeg", options.quality, resize=target)
        return artifact_from("resized-image.jpg", encoded, source=item.name, quality=options.quality)


class CropTransform:
    operation = Operation.CROP

    def __call__(self, item: InputItem, options: CropOptions) -> Artifact:
        decoded = decode(item.name, item.content)
        right = options.x + options.width
        bottom = options.y + options.height
        if right > decoded.width or bottom > decoded.height:
            raise TransformError(
                item.name,
                f"Crop area exceeds image bounds ({decoded.width}x{decoded.height})",
                "INVALID_CROP",
            )
        cropped = decoded.image.crop((options.x, options.y, right, bottom))
        with translate_errors(item.name):
            encoded = encode_image(cropped, "jpeg", options.quality)
        return artifact_from("cropped-image.jpg", encoded, source=item.name, quality=options.quality)


class RotateTransform:
    operation = Operation.ROTATE

    def __call__(self, item: InputItem, options: RotateOptions) -> Artifact:
        decoded = decode(item.name, item.content)
        # Pillow rotates counter-clockwise; the API angle is clockwise.
        rotated = decoded.image.rotate(-options.angle, resample=Image.Resampling.BICUBIC, expand=True)
        with translate_errors(item.name):
            encoded = encode_image(rotated, "jpeg", options.quality)
        return artifact_from(
            "rotated-image.jpg",
            encoded,
            source=item.name,
            angle=options.angle,
            quality=options.quality,
        )


__all__ = [
    "ConvertTransform",
    "CompressTransform",
    "ResizeTransform",
    "CropTransform",
    "RotateTransform",
]
