"""Image and PDF conversion toolkit."""

from .config import AppConfig, load_config
from .core import ConversionService
from .errors import ConversionError, NoItemsConvertedError, TransformError, ValidationError
from .models import BatchResult, InputItem, ItemFailure, ItemSuccess, Operation

__all__ = [
    "AppConfig",
    "load_config",
    "BatchResult",
    "ConversionService",
    "ConversionError",
    "InputItem",
    "ItemFailure",
    "ItemSuccess",
    "NoItemsConvertedError",
    "Operation",
    "TransformError",
    "ValidationError",
]
