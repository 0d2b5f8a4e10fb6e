from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import date
from functools import partial
from typing import Any, Sequence

from .batch import BatchCoordinator
from .codec import CodecError, PdfDocumentBuilder, load_document, supported_formats
from .config import AppConfig, RouteLimits
from .detection import is_pdf
from .errors import ConversionError, NoItemsConvertedError, ValidationError
from .logging import RunLogger, entries_for
from .models import (
    Artifact,
    BatchResult,
    ConversionRequest,
    DocumentResult,
    ImageToPdfOptions,
    InputItem,
    ItemFailure,
    ItemOutcome,
    ItemSuccess,
    Operation,
    PageBatch,
    PageItem,
)
from .transforms import get_transform
from .utils import file_stem, generate_run_id, parse_page_range
from .validation import ORIENTATIONS, PAGE_FORMATS, PAGE_SIZES, Fields, RequestValidator, page_dimensions

logger = logging.getLogger(__name__)


class ConversionService:
    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._validator = RequestValidator(config)
        self._run_logger = RunLogger(config.runtime.log_file)

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def validator(self) -> RequestValidator:
        return self._validator

    def coordinator(self, limits: RouteLimits, *, empty_message: str = "No files could be converted") -> BatchCoordinator:
        return BatchCoordinator(
            self._config.runtime.batch.concurrency,
            timeout_s=float(limits.timeout_s) if limits.timeout_s > 0 else None,
            empty_message=empty_message,
        )

    # batch routes

    def convert_images(self, items: Sequence[InputItem], fields: Fields) -> BatchResult:
        request = self._validator.validate_convert(items, fields)
        return self._run_batch(Operation.CONVERT, request, self._config.runtime.limits.convert)

    def images_to_pdf(self, items: Sequence[InputItem], fields: Fields) -> DocumentResult:
        request = self._validator.validate_image_to_pdf(items, fields)
        options = request.options
        limits = self._config.runtime.limits.image_to_pdf
        transform = get_transform(Operation.IMAGE_TO_PDF)
        coordinator = self.coordinator(limits, empty_message="No images could be converted to PDF")
        run_id = generate_run_id("pdf")
        start = time.perf_counter()
        with PdfDocumentBuilder() as builder:
            accumulate = partial(self._append_page, builder, options)
            try:
                result = coordinator.run(
                    request.items,
                    partial(transform, options=options),
                    accumulate=accumulate,
                )
            except NoItemsConvertedError as exc:
                self._log_batch(run_id, Operation.IMAGE_TO_PDF, exc.result, request.items, start)
                raise
            content = builder.serialize()
            page_count = builder.page_count
        self._log_batch(run_id, Operation.IMAGE_TO_PDF, result, request.items, start)
        if len(request.items) == 1:
            name = f"{file_stem(request.items[0].name)}.pdf"
        else:
            name = f"images-{date.today().isoformat()}.pdf"
        return DocumentResult(name=name, content=content, page_count=page_count, result=result)

    def pdf_to_images(self, items: Sequence[InputItem], fields: Fields) -> PageBatch:
        request = self._validator.validate_pdf_to_image(items, fields)
        source = request.items[0]
        limits = self._config.runtime.limits.pdf_to_image
        total_pages, indexes = self._plan_pages(source, request.options.page_range, limits)
        page_items = [
            PageItem(name=f"page-{index + 1:03d}", document=source.content, page_index=index) for index in indexes
        ]
        transform = get_transform(Operation.PDF_TO_IMAGE)
        coordinator = self.coordinator(limits, empty_message="No pages could be converted")
        run_id = generate_run_id("pages")
        start = time.perf_counter()
        sizes = [0] * len(page_items)
        try:
            result = coordinator.run(page_items, partial(transform, options=request.options))
        except NoItemsConvertedError as exc:
            self._log_outcomes(run_id, Operation.PDF_TO_IMAGE, exc.result, sizes, start)
            raise
        self._log_outcomes(run_id, Operation.PDF_TO_IMAGE, result, sizes, start)
        return PageBatch(result=result, total_pages=total_pages, original_name=source.name)

    # single item routes

    def compress(self, items: Sequence[InputItem], fields: Fields) -> Artifact:
        request = self._validator.validate_compress(items, fields)
        return self._run_single(Operation.COMPRESS, request, self._config.runtime.limits.edit)

    def resize(self, items: Sequence[InputItem], fields: Fields) -> Artifact:
        request = self._validator.validate_resize(items, fields)
        return self._run_single(Operation.RESIZE, request, self._config.runtime.limits.edit)

    def crop(self, items: Sequence[InputItem], fields: Fields) -> Artifact:
        request = self._validator.validate_crop(items, fields)
        return self._run_single(Operation.CROP, request, self._config.runtime.limits.edit)

    def rotate(self, items: Sequence[InputItem], fields: Fields) -> Artifact:
        request = self._validator.validate_rotate(items, fields)
        return self._run_single(Operation.ROTATE, request, self._config.runtime.limits.edit)

    def make_icon(self, items: Sequence[InputItem], fields: Fields) -> Artifact:
        request = self._validator.validate_icon(items, fields)
        return self._run_single(Operation.ICON, request, self._config.runtime.limits.icon)

    def capabilities(self, operation: Operation) -> dict[str, Any]:
        limits = self._config.runtime.limits
        if operation is Operation.CONVERT:
            return {
                "message": "Image Converter API",
                "version": "1.0",
                "maxFileSize": f"{limits.convert.max_file_size_mb}MB",
                "maxFiles": limits.convert.max_files,
                "supportedFormats": list(supported_formats()),
            }
        if operation is Operation.IMAGE_TO_PDF:
            return {
                "message": "Image to PDF Converter API",
                "version": "1.0",
                "maxFileSize": f"{limits.image_to_pdf.max_file_size_mb}MB",
                "maxFiles": limits.image_to_pdf.max_files,
                "features": {
                    "pageSizes": ["auto", *PAGE_SIZES],
                    "orientations": list(ORIENTATIONS),
                    "quality": "1-100 (default: 85)",
                    "margin": "0-49%",
                },
            }
        if operation is Operation.PDF_TO_IMAGE:
            return {
                "message": "PDF to Image Converter API",
                "version": "1.0",
                "maxFileSize": f"{limits.pdf_to_image.max_file_size_mb}MB",
                "maxPages": limits.pdf_to_image.max_pages,
                "supportedFormats": list(PAGE_FORMATS),
            }
        raise KeyError(f"No capabilities published for {operation.value}")

    # internals

    def _run_batch(self, operation: Operation, request: ConversionRequest[Any], limits: RouteLimits) -> BatchResult:
        transform = get_transform(operation)
        coordinator = self.coordinator(limits)
        run_id = generate_run_id(operation.value)
        start = time.perf_counter()
        try:
            result = coordinator.run(request.items, partial(transform, options=request.options))
        except NoItemsConvertedError as exc:
            self._log_batch(run_id, operation, exc.result, request.items, start)
            raise
        self._log_batch(run_id, operation, result, request.items, start)
        return result

    def _run_single(self, operation: Operation, request: ConversionRequest[Any], limits: RouteLimits) -> Artifact:
        try:
            result = self._run_batch(operation, request, limits)
        except NoItemsConvertedError as exc:
            failure = exc.result.failures[0]
            raise NoItemsConvertedError(failure.reason, exc.result) from exc
        return result.successes[0].artifact

    def _append_page(
        self,
        builder: PdfDocumentBuilder,
        options: ImageToPdfOptions,
        outcome: ItemOutcome,
    ) -> ItemOutcome:
        if not isinstance(outcome, ItemSuccess):
            return outcome
        artifact = outcome.artifact
        image_size = (int(artifact.metadata["width"]), int(artifact.metadata["height"]))
        source_size = (int(artifact.metadata["source_width"]), int(artifact.metadata["source_height"]))
        page_width, page_height = page_dimensions(options.page_size, options.orientation, source_size)
        draw_width, draw_height = float(image_size[0]), float(image_size[1])
        if draw_width > page_width or draw_height > page_height:
            scale = min(page_width / draw_width, page_height / draw_height)
            draw_width, draw_height = draw_width * scale, draw_height * scale
        x = max(0.0, (page_width - draw_width) / 2)
        y = max(0.0, (page_height - draw_height) / 2)
        try:
            builder.add_page(artifact.content, (page_width, page_height), (x, y, x + draw_width, y + draw_height))
        except CodecError as exc:
            logger.warning("Could not embed %s: %s", outcome.name, exc)
            return ItemFailure(name=outcome.name, reason=f"Failed to embed in PDF: {exc}", code="EMBED_FAILED")
        page = replace(artifact, metadata={**artifact.metadata, "page": builder.page_count})
        return ItemSuccess(name=outcome.name, artifact=page)

    def _plan_pages(self, source: InputItem, page_range: str, limits: RouteLimits) -> tuple[int, list[int]]:
        if not is_pdf(source.content, source.media_type):
            raise ValidationError("NOT_A_PDF", "File must be a PDF")
        try:
            info = load_document(source.content)
        except CodecError as exc:
            raise ValidationError(exc.code, str(exc)) from exc
        if info.encrypted:
            raise ValidationError("ENCRYPTED_PDF", "PDF is password protected")
        if info.page_count == 0:
            raise ValidationError("EMPTY_PDF", "PDF has no pages")
        if limits.max_pages and info.page_count > limits.max_pages:
            raise ValidationError(
                "TOO_MANY_PAGES",
                f"PDF has {info.page_count} pages. Maximum allowed is {limits.max_pages}",
            )
        indexes = parse_page_range(page_range, info.page_count)
        if not indexes:
            raise ValidationError("NO_PAGES", "No valid pages to convert")
        return info.page_count, indexes

    def _log_batch(
        self,
        run_id: str,
        operation: Operation,
        result: BatchResult,
        items: Sequence[InputItem],
        start: float,
    ) -> None:
        self._log_outcomes(run_id, operation, result, [item.size for item in items], start)

    def _log_outcomes(
        self,
        run_id: str,
        operation: Operation,
        result: BatchResult,
        sizes: list[int],
        start: float,
    ) -> None:
        elapsed = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s: %d/%d succeeded in %.0fms",
            run_id,
            operation.value,
            result.succeeded,
            result.total,
            elapsed,
        )
        self._run_logger.extend(entries_for(run_id, operation.value, result, sizes, elapsed))


__all__ = [
    "ConversionService",
    "ConversionError",
]
