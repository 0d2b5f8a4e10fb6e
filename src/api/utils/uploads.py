"""Turn multipart uploads into immutable input items."""

from __future__ import annotations

from collections.abc import Iterable

from fastapi import UploadFile

from image_converter.models import InputItem


async def read_uploads(uploads: Iterable[UploadFile | str] | None) -> list[InputItem]:
    items: list[InputItem] = []
    for upload in uploads or []:
        # Browsers send an empty string for an untouched file input.
        if isinstance(upload, str):
            continue
        content = await upload.read()
        items.append(
            InputItem(
                name=upload.filename or "upload",
                content=content,
                media_type=upload.content_type or "",
                size=len(content),
            )
        )
    return items


__all__ = ["read_uploads"]
