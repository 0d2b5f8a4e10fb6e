from __future__ import annotations

import base64
import hashlib
import os
import re
import time
from collections.abc import Iterable, Iterator, Sequence
from typing import TypeVar

T = TypeVar("T")

SAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


def slugify(value: str, max_length: int = 120) -> str:
    normalized = SAFE_FILENAME_RE.sub("-", value.strip())
    normalized = re.sub("-+", "-", normalized)
    normalized = normalized.replace("-.", ".")
    normalized = normalized.strip("-._")
    if not normalized:
        normalized = "file"
    if len(normalized) > max_length:
        normalized = normalized[:max_length]
    return normalized


def generate_run_id(prefix: str = "run") -> str:
    epoch_ms = int(time.time() * 1000)
    random_bits = hashlib.sha256(os.urandom(16)).hexdigest()[:8]
    return f"{prefix}-{epoch_ms}-{random_bits}"


def file_stem(name: str, default: str = "image") -> str:
    """Return *name* without its last extension, e.g. ``a.b.png`` -> ``a.b``."""

    base = name.replace("\\", "/").rsplit("/", 1)[-1]
    if "." not in base:
        return default
    stem = base.rsplit(".", 1)[0]
    return stem or default


def data_url(content: bytes, media_type: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    if size < 1:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _to_int(value: str) -> int | None:
    try:
        return int(value.strip())
    except ValueError:
        return None


def parse_page_range(spec: str, total_pages: int) -> list[int]:
    """Translate ``"all"`` or ``"1-3,5"`` into sorted zero-based page indexes.

    Ranges are clamped to the document; parts that do not parse are ignored.
    """

    if spec.strip().lower() == "all":
        return list(range(total_pages))
    pages: set[int] = set()
    for part in (chunk.strip() for chunk in spec.split(",")):
        if not part:
            continue
        if "-" in part:
            start_raw, _, end_raw = part.partition("-")
            start, end = _to_int(start_raw), _to_int(end_raw)
            if start is None or end is None:
                continue
            for index in range(max(start - 1, 0), min(end, total_pages)):
                pages.add(index)
        else:
            number = _to_int(part)
            if number is not None and 1 <= number <= total_pages:
                pages.add(number - 1)
    return sorted(pages)


def unique_sorted(values: Iterable[int]) -> list[int]:
    return sorted(set(values))
