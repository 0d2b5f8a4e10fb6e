from __future__ import annotations

from typing import Any, List

from fastapi import APIRouter, Depends, File, Form, UploadFile

from api.dependencies import get_service
from api.utils import read_uploads, run_conversion
from image_converter.assembler import assemble_files
from image_converter.core import ConversionService
from image_converter.models import Operation
from models.schemas import BatchResponse

router = APIRouter(prefix="/api", tags=["conversion"])


@router.post(
    "/convert",
    summary="Convert a batch of images to another format",
    response_model=BatchResponse,
    response_model_by_alias=True,
)
async def convert_images(
    files: List[UploadFile] | None = File(None),
    target_format: str | None = Form(None, alias="format"),
    width: str | None = Form(None),
    height: str | None = Form(None),
    quality: str | None = Form(None),
    service: ConversionService = Depends(get_service),
) -> BatchResponse:
    items = await read_uploads(files)
    fields = {"format": target_format, "width": width, "height": height, "quality": quality}
    result = await run_conversion(service.convert_images, items, fields)
    return assemble_files(result)


@router.get("/convert", summary="Describe the image converter")
def describe_convert(service: ConversionService = Depends(get_service)) -> dict[str, Any]:
    return service.capabilities(Operation.CONVERT)


__all__ = ["router"]
