from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class HealthStatus(WireModel):
    status: str
    version: str


class FailedItem(WireModel):
    name: str
    error: str


class FileEntry(WireModel):
    name: str
    data: str
    size: int
    format: str | None = None
    width: int | None = None
    height: int | None = None


class BatchResponse(WireModel):
    files: list[FileEntry]
    processed_count: int = Field(alias="processedCount")
    failed_count: int = Field(alias="failedCount")
    failed: list[FailedItem] = Field(default_factory=list)


class DocumentEntry(WireModel):
    name: str
    data: str
    size: int
    page_count: int = Field(alias="pageCount")
    processed_count: int = Field(alias="processedCount")
    failed_count: int = Field(alias="failedCount")
    failed_images: list[FailedItem] = Field(default_factory=list, alias="failedImages")


class DocumentResponse(WireModel):
    files: list[DocumentEntry]


class PageEntry(FileEntry):
    page: int


class PageResponse(WireModel):
    files: list[PageEntry]
    total_pages: int = Field(alias="totalPages")
    converted_pages: int = Field(alias="convertedPages")
    original_name: str = Field(alias="originalName")
    failed_count: int = Field(default=0, alias="failedCount")
    failed: list[FailedItem] = Field(default_factory=list)


class ErrorResponse(WireModel):
    error: str
    code: str


__all__ = [
    "HealthStatus",
    "FailedItem",
    "FileEntry",
    "BatchResponse",
    "DocumentEntry",
    "DocumentResponse",
    "PageEntry",
    "PageResponse",
    "ErrorResponse",
]
