from __future__ import annotations

import math

from ..codec import encode_image, render_page
from ..models import Artifact, ImageToPdfOptions, InputItem, Operation, PageItem, PdfToImageOptions
from .base import artifact_from, decode, translate_errors


def margin_size(size: tuple[int, int], margin: float) -> tuple[int, int]:
    """Image size after reserving *margin* percent of each dimension."""

    if margin <= 0:
        return size
    factor = 1 - margin / 100
    return max(1, math.floor(size[0] * factor)), max(1, math.floor(size[1] * factor))


class ImagePageTransform:
    """Prepare one image for embedding as a PDF page (JPEG payload)."""

    operation = Operation.IMAGE_TO_PDF

    def __call__(self, item: InputItem, options: ImageToPdfOptions) -> Artifact:
        decoded = decode(item.name, item.content)
        source = {"source_width": decoded.width, "source_height": decoded.height}
        if decoded.format == "JPEG" and options.page_size == "auto" and options.margin == 0:
            return Artifact(
                name=item.name,
                content=item.content,
                media_type="image/jpeg",
                metadata={
                    "format": "jpg",
                    "width": decoded.width,
                    "height": decoded.height,
                    "size": item.size,
                    "passthrough": True,
                    **source,
                },
            )
        target = margin_size((decoded.width, decoded.height), options.margin)
        with translate_errors(item.name):
            encoded = encode_image(decoded.image, "jpeg", options.quality, resize=target)
        return artifact_from(item.name, encoded, passthrough=False, **source)


class PageRenderTransform:
    """Rasterize one PDF page and encode it in the requested format."""

    operation = Operation.PDF_TO_IMAGE

    def __call__(self, item: PageItem, options: PdfToImageOptions) -> Artifact:
        with translate_errors(item.name):
            image = render_page(item.document, item.page_index, options.dpi)
            encoded = encode_image(image, options.target_format, options.quality)
        name = f"page-{item.page_number:03d}.{encoded.extension}"
        return artifact_from(name, encoded, page=item.page_number, dpi=options.dpi)


__all__ = ["ImagePageTransform", "PageRenderTransform", "margin_size"]
