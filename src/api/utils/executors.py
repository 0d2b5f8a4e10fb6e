"""Run the blocking conversion service off the event loop."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from typing import TypeVar

from image_converter.models import InputItem
from image_converter.validation import Fields

ResultT = TypeVar("ResultT")

logger = logging.getLogger(__name__)


async def run_conversion(
    operation: Callable[[Sequence[InputItem], Fields], ResultT],
    items: Sequence[InputItem],
    fields: Fields,
) -> ResultT:
    """Call *operation* in a worker thread; decoding and encoding block."""

    start = time.perf_counter()
    try:
        return await asyncio.to_thread(operation, items, fields)
    finally:
        logger.debug(
            "%s handled %d upload(s) in %.0fms",
            getattr(operation, "__name__", "operation"),
            len(items),
            (time.perf_counter() - start) * 1000,
        )


__all__ = ["run_conversion"]
