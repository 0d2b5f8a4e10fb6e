from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.constraint import APP_VERSION
from core.settings import Settings, get_settings
from image_converter.assembler import assemble_error
from image_converter.config import AppConfig, load_config
from image_converter.core import ConversionService
from image_converter.errors import ConversionError

from .routers import convert, documents, edit, health

logger = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None) -> FastAPI:
    if config is None:
        config = prepare_config(get_settings())

    app = FastAPI(title="Image Converter", version=APP_VERSION)
    app.state.config = config
    app.state.service = ConversionService(config)

    app.include_router(health.router)
    app.include_router(convert.router)
    app.include_router(documents.router)
    app.include_router(edit.router)
    _register_error_handlers(app)
    return app


def prepare_config(settings: Settings) -> AppConfig:
    config = load_config(settings.config_path)
    if settings.log_level is not None:
        config.runtime.log_level = settings.log_level
    if settings.concurrency is not None:
        config.runtime.batch.concurrency = settings.concurrency
    return config


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConversionError)
    async def conversion_error_handler(request: Request, exc: ConversionError) -> JSONResponse:
        status, body = assemble_error(exc)
        if status >= 500:
            logger.error("%s failed with %s: %s", request.url.path, exc.code, exc)
        return JSONResponse(status_code=status, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        field = ".".join(str(part) for part in errors[0].get("loc", ())[1:]) if errors else ""
        message = f"Invalid field: {field}" if field else "Invalid request"
        return JSONResponse(status_code=400, content={"error": message, "code": "INVALID_REQUEST"})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception path=%s", request.url.path)
        status, body = assemble_error(exc)
        return JSONResponse(status_code=status, content=body.model_dump())


__all__ = ["create_app", "prepare_config"]
