"""Typer CLI: analyze a local image and check image signatures."""

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from landmark_lens.core.config import get_config
from landmark_lens.core.image_signature import detect_image_format, stream_has_image_signature
from landmark_lens.enrichment.schema import SearchStatus
from landmark_lens.errors import VisionProviderError
from landmark_lens.service import build_analysis_service

app = typer.Typer(no_args_is_help=True)


def _status_cell(status: SearchStatus) -> Text:
    if status is SearchStatus.found:
        return Text(status.value, style="green")
    if status is SearchStatus.error:
        return Text(status.value, style="red")
    return Text(status.value, style="yellow")


@app.command()
def analyze(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image file (JPEG, PNG, GIF or BMP)"),
    provider: str = typer.Option(None, "--provider", help="Vision provider: azure or mock (default: from config)"),
    config: Path = typer.Option(None, "--config", help="YAML config file (default: LANDMARK_LENS_CONFIG or landmark_lens.yml)"),
    json_out: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging to stdout"),
) -> None:
    """Detect the landmark in IMAGE and look up where it is."""
    if verbose:
        root = logging.getLogger()
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)
        root.addHandler(handler)
        root.setLevel(logging.DEBUG)

    with open(image, "rb") as f:
        if not stream_has_image_signature(f):
            typer.secho(f"Not a supported image: {image}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        data = f.read()

    try:
        cfg = get_config(config)
        service = build_analysis_service(cfg, provider=provider)
    except (ValueError, FileNotFoundError) as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    try:
        result, attempts = service.analyze_with_trace(data)
    except VisionProviderError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    finally:
        service.close()

    if json_out:
        typer.echo(result.model_dump_json(indent=2))
        return

    console = Console()
    if result.landmark_name:
        console.print(f"Landmark: [bold]{result.landmark_name}[/bold] ({result.landmark_confidence:.3f})")
    else:
        console.print("Landmark: [dim]none detected[/dim]")

    table = Table(title=None)
    table.add_column("Descriptions")
    table.add_column("Tags")
    table.add_column("Objects")
    rows = max(len(result.descriptions), len(result.tags), len(result.objects))
    for i in range(rows):
        table.add_row(
            result.descriptions[i] if i < len(result.descriptions) else "",
            result.tags[i] if i < len(result.tags) else "",
            result.objects[i] if i < len(result.objects) else "",
        )
    console.print(table)

    if attempts:
        searches = Table(title="Searches")
        searches.add_column("Source")
        searches.add_column("Term")
        searches.add_column("Status")
        for attempt in attempts:
            searches.add_row(attempt.source, attempt.term, _status_cell(attempt.status))
        console.print(searches)

    loc = result.location_info
    if loc is None:
        console.print("Location: [dim]no match[/dim]")
        return
    console.print(f"Location: [bold]{loc.name}[/bold] ({loc.source})")
    if loc.latitude is not None and loc.longitude is not None:
        console.print(f"  Lat: {loc.latitude:.4f}, Lng: {loc.longitude:.4f}")
    if loc.description:
        console.print(f"  {loc.description}")
    if loc.url:
        console.print(f"  {loc.url}")


@app.command()
def check(
    images: list[Path] = typer.Argument(..., exists=True, dir_okay=False, help="Files to check"),
) -> None:
    """Report the image format detected from each file's leading bytes."""
    failed = False
    for path in images:
        with open(path, "rb") as f:
            fmt = detect_image_format(f.read(4))
        if fmt is None:
            failed = True
            typer.secho(f"{path}: not an image", fg=typer.colors.RED)
        else:
            typer.echo(f"{path}: {fmt}")
    if failed:
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
