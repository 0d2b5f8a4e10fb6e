"""Single image tools that answer with the file itself."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from api.dependencies import get_service
from api.utils import read_uploads, run_conversion
from image_converter.assembler import assemble_binary
from image_converter.core import ConversionService
from image_converter.models import Artifact

router = APIRouter(prefix="/api", tags=["edit"])


def _binary_response(artifact: Artifact) -> Response:
    payload = assemble_binary(artifact)
    return Response(content=payload.content, media_type=payload.media_type, headers=payload.headers)


def _single(file: UploadFile | None) -> list[UploadFile] | None:
    return [file] if file is not None else None


@router.post("/compress", summary="Compress an image to JPEG")
async def compress_image(
    file: UploadFile | None = File(None),
    quality: str | None = Form(None),
    service: ConversionService = Depends(get_service),
) -> Response:
    items = await read_uploads(_single(file))
    artifact = await run_conversion(service.compress, items, {"quality": quality})
    return _binary_response(artifact)


@router.post("/resize", summary="Resize an image")
async def resize_image(
    file: UploadFile | None = File(None),
    width: str | None = Form(None),
    height: str | None = Form(None),
    keep_aspect_ratio: str | None = Form(None, alias="keepAspectRatio"),
    quality: str | None = Form(None),
    service: ConversionService = Depends(get_service),
) -> Response:
    items = await read_uploads(_single(file))
    fields = {"width": width, "height": height, "keepAspectRatio": keep_aspect_ratio, "quality": quality}
    artifact = await run_conversion(service.resize, items, fields)
    return _binary_response(artifact)


@router.post("/crop", summary="Crop an image")
async def crop_image(
    file: UploadFile | None = File(None),
    x: str | None = Form(None),
    y: str | None = Form(None),
    width: str | None = Form(None),
    height: str | None = Form(None),
    quality: str | None = Form(None),
    service: ConversionService = Depends(get_service),
) -> Response:
    items = await read_uploads(_single(file))
    fields = {"x": x, "y": y, "width": width, "height": height, "quality": quality}
    artifact = await run_conversion(service.crop, items, fields)
    return _binary_response(artifact)


@router.post("/rotate", summary="Rotate an image clockwise")
async def rotate_image(
    file: UploadFile | None = File(None),
    angle: str | None = Form(None),
    quality: str | None = Form(None),
    service: ConversionService = Depends(get_service),
) -> Response:
    items = await read_uploads(_single(file))
    artifact = await run_conversion(service.rotate, items, {"angle": angle, "quality": quality})
    return _binary_response(artifact)


@router.post("/ico", summary="Build a multi-size ICO file")
async def image_to_icon(
    file: UploadFile | None = File(None),
    sizes: str | None = Form(None),
    service: ConversionService = Depends(get_service),
) -> Response:
    items = await read_uploads(_single(file))
    artifact = await run_conversion(service.make_icon, items, {"sizes": sizes})
    return _binary_response(artifact)


__all__ = ["router"]
