"""Turn batch outcomes into wire payloads."""

from __future__ import annotations

from dataclasses import dataclass

from models.schemas import (
    BatchResponse,
    DocumentEntry,
    DocumentResponse,
    ErrorResponse,
    FailedItem,
    FileEntry,
    PageEntry,
    PageResponse,
)

from .errors import ConversionError, InternalError
from .models import Artifact, BatchResult, DocumentResult, PageBatch
from .utils import data_url

GENERIC_ERROR = "Internal server error"


@dataclass(slots=True)
class BinaryPayload:
    content: bytes
    media_type: str
    filename: str

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Disposition": f'attachment; filename="{self.filename}"',
            "Content-Length": str(len(self.content)),
        }


def _int_or_none(value: object) -> int | None:
    return int(value) if isinstance(value, (int, float)) else None


def _file_entry(artifact: Artifact) -> FileEntry:
    return FileEntry(
        name=artifact.name,
        data=data_url(artifact.content, artifact.media_type),
        size=artifact.size,
        format=str(artifact.metadata.get("format")) if artifact.metadata.get("format") else None,
        width=_int_or_none(artifact.metadata.get("width")),
        height=_int_or_none(artifact.metadata.get("height")),
    )


def _failed_items(result: BatchResult) -> list[FailedItem]:
    return [FailedItem(name=failure.name, error=failure.reason) for failure in result.failures]


def assemble_files(result: BatchResult) -> BatchResponse:
    return BatchResponse(
        files=[_file_entry(success.artifact) for success in result.successes],
        processed_count=result.succeeded,
        failed_count=result.failed,
        failed=_failed_items(result),
    )


def assemble_document(document: DocumentResult) -> DocumentResponse:
    entry = DocumentEntry(
        name=document.name,
        data=data_url(document.content, "application/pdf"),
        size=len(document.content),
        page_count=document.page_count,
        processed_count=document.result.succeeded,
        failed_count=document.result.failed,
        failed_images=_failed_items(document.result),
    )
    return DocumentResponse(files=[entry])


def assemble_pages(batch: PageBatch) -> PageResponse:
    files: list[PageEntry] = []
    for success in batch.result.successes:
        base = _file_entry(success.artifact)
        files.append(PageEntry(**base.model_dump(), page=int(success.artifact.metadata.get("page", 0))))
    return PageResponse(
        files=files,
        total_pages=batch.total_pages,
        converted_pages=batch.result.succeeded,
        original_name=batch.original_name,
        failed_count=batch.result.failed,
        failed=_failed_items(batch.result),
    )


def assemble_binary(artifact: Artifact) -> BinaryPayload:
    return BinaryPayload(content=artifact.content, media_type=artifact.media_type, filename=artifact.name)


def assemble_error(exc: BaseException) -> tuple[int, ErrorResponse]:
    """Map any exception onto a status code and ``{error, code}`` body."""

    if isinstance(exc, ConversionError):
        status = exc.status_code
        message = exc.message if status < 500 or exc.code == "TIMEOUT" else GENERIC_ERROR
        return status, ErrorResponse(error=message or exc.code, code=exc.code)
    return assemble_error(InternalError(GENERIC_ERROR))


__all__ = [
    "BinaryPayload",
    "assemble_files",
    "assemble_document",
    "assemble_pages",
    "assemble_binary",
    "assemble_error",
]
