from __future__ import annotations

from typing import Any, List

from fastapi import APIRouter, Depends, File, Form, UploadFile

from api.dependencies import get_service
from api.utils import read_uploads, run_conversion
from image_converter.assembler import assemble_document, assemble_pages
from image_converter.core import ConversionService
from image_converter.models import Operation
from models.schemas import DocumentResponse, PageResponse

router = APIRouter(prefix="/api", tags=["documents"])


@router.post(
    "/img-to-pdf",
    summary="Merge images into a single PDF",
    response_model=DocumentResponse,
    response_model_by_alias=True,
)
async def images_to_pdf(
    files: List[UploadFile] | None = File(None),
    page_size: str | None = Form(None, alias="pageSize"),
    orientation: str | None = Form(None),
    quality: str | None = Form(None),
    margin: str | None = Form(None),
    service: ConversionService = Depends(get_service),
) -> DocumentResponse:
    items = await read_uploads(files)
    fields = {"pageSize": page_size, "orientation": orientation, "quality": quality, "margin": margin}
    document = await run_conversion(service.images_to_pdf, items, fields)
    return assemble_document(document)


@router.get("/img-to-pdf", summary="Describe the image to PDF converter")
def describe_images_to_pdf(service: ConversionService = Depends(get_service)) -> dict[str, Any]:
    return service.capabilities(Operation.IMAGE_TO_PDF)


@router.post(
    "/pdf-to-img",
    summary="Render PDF pages as images",
    response_model=PageResponse,
    response_model_by_alias=True,
)
async def pdf_to_images(
    file: UploadFile | None = File(None),
    target_format: str | None = Form(None, alias="format"),
    quality: str | None = Form(None),
    page_range: str | None = Form(None, alias="pageRange"),
    dpi: str | None = Form(None),
    service: ConversionService = Depends(get_service),
) -> PageResponse:
    items = await read_uploads([file] if file is not None else None)
    fields = {"format": target_format, "quality": quality, "pageRange": page_range, "dpi": dpi}
    batch = await run_conversion(service.pdf_to_images, items, fields)
    return assemble_pages(batch)


@router.get("/pdf-to-img", summary="Describe the PDF to image converter")
def describe_pdf_to_images(service: ConversionService = Depends(get_service)) -> dict[str, Any]:
    return service.capabilities(Operation.PDF_TO_IMAGE)


__all__ = ["router"]
