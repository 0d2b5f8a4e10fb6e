from __future__ import annotations

import json
import threading
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .models import BatchResult, ItemSuccess


@dataclass(slots=True)
class RunLogEntry:
    run_id: str
    operation: str
    source: str
    status: str
    error_code: str | None
    reason: str | None
    bytes_in: int
    bytes_out: int
    elapsed_ms: float
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RunLogger:
    """Append-only JSON lines log of processed items; a ``None`` path disables it."""

    def __init__(self, log_file: Path | None) -> None:
        self._log_file = log_file
        self._lock = threading.Lock()

    def extend(self, entries: list[RunLogEntry]) -> None:
        if self._log_file is None or not entries:
            return
        lines = "".join(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n" for entry in entries)
        with self._lock:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            with self._log_file.open("a", encoding="utf-8") as handle:
                handle.write(lines)


def entries_for(
    run_id: str,
    operation: str,
    result: BatchResult,
    sizes_in: list[int],
    elapsed_ms: float,
) -> list[RunLogEntry]:
    entries: list[RunLogEntry] = []
    for outcome, bytes_in in zip(result.outcomes, sizes_in):
        if isinstance(outcome, ItemSuccess):
            entries.append(
                RunLogEntry(
                    run_id=run_id,
                    operation=operation,
                    source=outcome.name,
                    status="success",
                    error_code=None,
                    reason=None,
                    bytes_in=bytes_in,
                    bytes_out=outcome.artifact.size,
                    elapsed_ms=elapsed_ms,
                )
            )
        else:
            entries.append(
                RunLogEntry(
                    run_id=run_id,
                    operation=operation,
                    source=outcome.name,
                    status="failure",
                    error_code=outcome.code,
                    reason=outcome.reason,
                    bytes_in=bytes_in,
                    bytes_out=0,
                    elapsed_ms=elapsed_ms,
                )
            )
    return entries
