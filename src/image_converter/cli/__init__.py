from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..config import AppConfig, dump_config, load_config
from ..core import ConversionError, ConversionService
from ..detection import DetectionError, detect_media
from ..models import Artifact, BatchResult, InputItem
from ..utils import slugify

console = Console()

app = typer.Typer(help="Local image and PDF conversion toolkit")


def _load_config(path: Path | None) -> AppConfig:
    return load_config(path)


def _read_items(paths: list[Path]) -> list[InputItem]:
    items: list[InputItem] = []
    for path in paths:
        content = path.read_bytes()
        try:
            media_type = detect_media(content).mime_type
        except DetectionError:
            media_type = ""
        items.append(InputItem(name=path.name, content=content, media_type=media_type))
    return items


def _unique_name(name: str, taken: set[str]) -> str:
    candidate = name
    stem, dot, extension = name.rpartition(".")
    if not dot:
        stem, extension = name, ""
    counter = 1
    while candidate in taken:
        candidate = f"{stem}-{counter}{dot}{extension}"
        counter += 1
    taken.add(candidate)
    return candidate


def _write(artifact: Artifact, output_dir: Path, taken: set[str] | None = None) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    name = _unique_name(slugify(artifact.name), taken if taken is not None else set())
    target = output_dir / name
    target.write_bytes(artifact.content)
    return target


def _report(result: BatchResult, output_dir: Path, title: str) -> None:
    table = Table(title=title)
    table.add_column("Item")
    table.add_column("Status")
    table.add_column("Output")
    # output names already used in this run
    taken: set[str] = set()
    for outcome in result.outcomes:
        if outcome.ok:
            path = _write(outcome.artifact, output_dir, taken)
            table.add_row(outcome.name, "[green]ok[/green]", str(path))
        else:
            table.add_row(outcome.name, "[red]failed[/red]", outcome.reason)
    console.print(table)
    console.print(f"Processed {result.total} items, {result.succeeded} succeeded, {result.failed} failed.")


def _fail(exc: ConversionError) -> typer.Exit:
    console.print(f"[red]Conversion failed[/red]: {exc.code} - {exc}")
    return typer.Exit(1)


@app.command()
def convert(
    files: list[Path],
    target: str = typer.Option(..., "--format", "-f", help="Output format, e.g. png or webp"),
    quality: int = typer.Option(80, "--quality", "-q"),
    width: int | None = typer.Option(None, "--width"),
    height: int | None = typer.Option(None, "--height"),
    output_dir: Path = typer.Option(Path("converted"), "--out", "-o"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    service = ConversionService(_load_config(config))
    fields = {
        "format": target,
        "quality": str(quality),
        "width": str(width) if width else None,
        "height": str(height) if height else None,
    }
    try:
        result = service.convert_images(_read_items(files), fields)
    except ConversionError as exc:
        raise _fail(exc) from exc
    _report(result, output_dir, "Conversion summary")


@app.command()
def pdf(
    files: list[Path],
    page_size: str = typer.Option("auto", "--page-size"),
    orientation: str = typer.Option("auto", "--orientation"),
    quality: int = typer.Option(85, "--quality", "-q"),
    margin: float = typer.Option(0.0, "--margin", help="Margin as a percentage of the page"),
    output_dir: Path = typer.Option(Path("converted"), "--out", "-o"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    service = ConversionService(_load_config(config))
    fields = {
        "pageSize": page_size,
        "orientation": orientation,
        "quality": str(quality),
        "margin": str(margin),
    }
    try:
        document = service.images_to_pdf(_read_items(files), fields)
    except ConversionError as exc:
        raise _fail(exc) from exc
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / document.name
    target.write_bytes(document.content)
    for failure in document.result.failures:
        console.print(f"[yellow]Skipped[/yellow] {failure.name}: {failure.reason}")
    console.print(f"[green]Success[/green]: {document.page_count} pages written to {target}")


@app.command()
def rasterize(
    file: Path,
    target: str = typer.Option("jpg", "--format", "-f"),
    quality: int = typer.Option(85, "--quality", "-q"),
    pages: str = typer.Option("all", "--pages", help="Page range such as 1-3,5"),
    dpi: int = typer.Option(150, "--dpi"),
    output_dir: Path = typer.Option(Path("converted"), "--out", "-o"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    service = ConversionService(_load_config(config))
    fields = {"format": target, "quality": str(quality), "pageRange": pages, "dpi": str(dpi)}
    try:
        batch = service.pdf_to_images(_read_items([file]), fields)
    except ConversionError as exc:
        raise _fail(exc) from exc
    _report(batch.result, output_dir, f"{batch.original_name} ({batch.total_pages} pages)")


@app.command()
def icon(
    file: Path,
    sizes: list[int] = typer.Option([16, 32, 48], "--size", "-s", help="Icon edge length; repeat for more"),
    output_dir: Path = typer.Option(Path("converted"), "--out", "-o"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    service = ConversionService(_load_config(config))
    fields = {"sizes": "[" + ",".join(str(size) for size in sizes) + "]"}
    try:
        artifact = service.make_icon(_read_items([file]), fields)
    except ConversionError as exc:
        raise _fail(exc) from exc
    console.print(f"[green]Success[/green]: {_write(artifact, output_dir)}")


@app.command("show-config")
def show_config(
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    console.print_json(dump_config(_load_config(config)))


if __name__ == "__main__":
    app()
