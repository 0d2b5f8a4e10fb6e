"""Error taxonomy shared by the validator, transforms and coordinator."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .models import BatchResult


class ConversionError(RuntimeError):
    status_code = 500

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(ConversionError):
    """Raised before any processing when the request shape or options are invalid."""

    status_code = 400


class TransformError(ConversionError):
    """Raised by a single item transform; recorded, never fatal to the batch."""

    status_code = 400

    def __init__(self, name: str, reason: str, code: str = "TRANSFORM_FAILED") -> None:
        super().__init__(code, reason)
        self.name = name
        self.reason = reason


class NoItemsConvertedError(ConversionError):
    status_code = 400

    def __init__(self, message: str, result: "BatchResult") -> None:
        super().__init__("NO_ITEMS_CONVERTED", message)
        self.result = result


class ConversionTimeoutError(ConversionError):
    status_code = 504

    def __init__(self, message: str) -> None:
        super().__init__("TIMEOUT", message)


class InternalError(ConversionError):
    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__("INTERNAL_ERROR", message)


__all__ = [
    "ConversionError",
    "ValidationError",
    "TransformError",
    "NoItemsConvertedError",
    "ConversionTimeoutError",
    "InternalError",
]
