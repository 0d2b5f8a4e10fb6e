from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping


CONFIG_FILE = Path("config.toml")


@dataclass(slots=True)
class RouteLimits:
    max_files: int = 1
    max_file_size_mb: int = 50
    timeout_s: int = 60
    max_pages: int = 0

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


def _convert_limits() -> RouteLimits:
    return RouteLimits(max_files=20, max_file_size_mb=50, timeout_s=60)


def _image_to_pdf_limits() -> RouteLimits:
    return RouteLimits(max_files=30, max_file_size_mb=50, timeout_s=120)


def _pdf_to_image_limits() -> RouteLimits:
    return RouteLimits(max_files=1, max_file_size_mb=100, timeout_s=120, max_pages=50)


def _icon_limits() -> RouteLimits:
    return RouteLimits(max_files=1, max_file_size_mb=4, timeout_s=60)


def _edit_limits() -> RouteLimits:
    return RouteLimits(max_files=1, max_file_size_mb=100, timeout_s=60)


@dataclass(slots=True)
class LimitConfig:
    convert: RouteLimits = field(default_factory=_convert_limits)
    image_to_pdf: RouteLimits = field(default_factory=_image_to_pdf_limits)
    pdf_to_image: RouteLimits = field(default_factory=_pdf_to_image_limits)
    icon: RouteLimits = field(default_factory=_icon_limits)
    edit: RouteLimits = field(default_factory=_edit_limits)


@dataclass(slots=True)
class BatchConfig:
    concurrency: int = 5


@dataclass(slots=True)
class RuntimeConfig:
    log_file: Path | None = Path("logs/conversions.jsonl")
    log_level: str = "INFO"
    limits: LimitConfig = field(default_factory=LimitConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    api: APIConfig = field(default_factory=APIConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _build_route(data: object, default: RouteLimits) -> RouteLimits:
    if not isinstance(data, Mapping):
        return default
    return RouteLimits(
        max_files=int(data.get("max_files", default.max_files)),
        max_file_size_mb=int(data.get("max_file_size_mb", default.max_file_size_mb)),
        timeout_s=int(data.get("timeout_s", default.timeout_s)),
        max_pages=int(data.get("max_pages", default.max_pages)),
    )


def _build_limits(data: Mapping[str, object] | None) -> LimitConfig:
    defaults = LimitConfig()
    if not data:
        return defaults
    return LimitConfig(
        convert=_build_route(data.get("convert"), defaults.convert),
        image_to_pdf=_build_route(data.get("image_to_pdf"), defaults.image_to_pdf),
        pdf_to_image=_build_route(data.get("pdf_to_image"), defaults.pdf_to_image),
        icon=_build_route(data.get("icon"), defaults.icon),
        edit=_build_route(data.get("edit"), defaults.edit),
    )


def _build_batch(data: Mapping[str, object] | None) -> BatchConfig:
    if not data:
        return BatchConfig()
    return BatchConfig(concurrency=max(1, int(data.get("concurrency", 5))))


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    limits = _build_limits(data.get("limits") if isinstance(data.get("limits"), Mapping) else None)
    batch = _build_batch(data.get("batch") if isinstance(data.get("batch"), Mapping) else None)
    log_file = data.get("log_file", "logs/conversions.jsonl")
    return RuntimeConfig(
        log_file=Path(str(log_file)) if log_file else None,
        log_level=str(data.get("log_level", "INFO")).upper(),
        limits=limits,
        batch=batch,
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=int(data.get("port", 8000)))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or CONFIG_FILE
    raw = _read_toml(path)
    runtime_data = raw.get("runtime") if isinstance(raw, Mapping) else None
    api_data = raw.get("api") if isinstance(raw, Mapping) else None
    runtime = _build_runtime(runtime_data if isinstance(runtime_data, Mapping) else None)
    api = _build_api(api_data if isinstance(api_data, Mapping) else None)
    return AppConfig(runtime=runtime, api=api)


def _route_dict(limits: RouteLimits) -> dict[str, int]:
    return {
        "max_files": limits.max_files,
        "max_file_size_mb": limits.max_file_size_mb,
        "timeout_s": limits.timeout_s,
        "max_pages": limits.max_pages,
    }


def dump_config(config: AppConfig) -> str:
    limits = config.runtime.limits
    payload = {
        "runtime": {
            "log_file": str(config.runtime.log_file) if config.runtime.log_file else "",
            "log_level": config.runtime.log_level,
            "batch": {"concurrency": config.runtime.batch.concurrency},
            "limits": {
                "convert": _route_dict(limits.convert),
                "image_to_pdf": _route_dict(limits.image_to_pdf),
                "pdf_to_image": _route_dict(limits.pdf_to_image),
                "icon": _route_dict(limits.icon),
                "edit": _route_dict(limits.edit),
            },
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2)
