"""Chunked fan-out/fan-in over a batch of items.

Items are split into contiguous chunks of ``concurrency``.  Every item of a
chunk runs on its own worker thread; the next chunk starts only after the
whole chunk has settled, which caps how many images are decoded at once.
A :class:`TransformError` is recorded against its item and never stops the
batch.  Outcomes always come back in input order.
"""

from __future__ import annotations

import concurrent.futures
import logging
import time
from collections.abc import Callable, Sequence
from typing import Protocol, TypeVar

from .errors import ConversionTimeoutError, NoItemsConvertedError, TransformError
from .models import Artifact, BatchResult, ItemFailure, ItemOutcome, ItemSuccess
from .utils import chunked

logger = logging.getLogger(__name__)


class NamedItem(Protocol):
    @property
    def name(self) -> str:  # pragma: no cover - interface
        ...


ItemT = TypeVar("ItemT", bound=NamedItem)

Accumulator = Callable[[ItemOutcome], ItemOutcome]


class BatchCoordinator:
    def __init__(
        self,
        concurrency: int,
        *,
        timeout_s: float | None = None,
        empty_message: str = "No files could be converted",
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._concurrency = concurrency
        self._timeout_s = timeout_s
        self._empty_message = empty_message

    @property
    def concurrency(self) -> int:
        return self._concurrency

    def run(
        self,
        items: Sequence[ItemT],
        transform: Callable[[ItemT], Artifact],
        *,
        accumulate: Accumulator | None = None,
    ) -> BatchResult:
        """Run *transform* over *items* and return one outcome per item.

        ``accumulate`` is applied to each outcome on the calling thread, in
        input order, after its chunk settles and before the next chunk
        starts.  It may replace a success with a failure.

        Raises :class:`NoItemsConvertedError` when nothing succeeded and
        :class:`ConversionTimeoutError` when the deadline passes.
        """

        deadline = time.monotonic() + self._timeout_s if self._timeout_s is not None else None
        outcomes: list[ItemOutcome] = []
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=self._concurrency,
            thread_name_prefix="batch-worker",
        )
        try:
            for index, chunk in enumerate(chunked(items, self._concurrency)):
                logger.debug("Processing chunk %d (%d items)", index + 1, len(chunk))
                settled = self._run_chunk(executor, chunk, transform, deadline)
                if accumulate is not None:
                    settled = [accumulate(outcome) for outcome in settled]
                outcomes.extend(settled)
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        result = BatchResult(outcomes=tuple(outcomes))
        if items and result.succeeded == 0:
            raise NoItemsConvertedError(self._empty_message, result)
        return result

    def _run_chunk(
        self,
        executor: concurrent.futures.ThreadPoolExecutor,
        chunk: Sequence[ItemT],
        transform: Callable[[ItemT], Artifact],
        deadline: float | None,
    ) -> list[ItemOutcome]:
        futures = [executor.submit(transform, item) for item in chunk]
        remaining = None if deadline is None else max(deadline - time.monotonic(), 0.0)
        _, pending = concurrent.futures.wait(futures, timeout=remaining)
        if pending:
            for future in pending:
                future.cancel()
            raise ConversionTimeoutError(f"Processing exceeded {self._timeout_s:g}s limit")
        return [self._settle(item, future) for item, future in zip(chunk, futures)]

    def _settle(self, item: ItemT, future: concurrent.futures.Future[Artifact]) -> ItemOutcome:
        try:
            artifact = future.result()
        except TransformError as exc:
            logger.warning("Item %s failed: %s", item.name, exc.reason)
            return ItemFailure(name=item.name, reason=exc.reason or "Unknown error", code=exc.code)
        return ItemSuccess(name=item.name, artifact=artifact)


__all__ = ["BatchCoordinator", "NamedItem", "Accumulator"]
