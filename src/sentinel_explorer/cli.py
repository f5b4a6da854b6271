import json
from datetime import datetime
from pathlib import Path
from typing import Annotated, Literal

import typer
from dotenv import load_dotenv

from sentinel_explorer.utils import setup_logging

load_dotenv()
app = typer.Typer(
    name="sentinel-explorer",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
context = {}


def init_reporter() -> None:
    if "progress" not in context:
        raise ValueError("Missing reporter, please ensure at least an `empty` reporter is registered")
    reporter = context["progress"]
    reporter.start()


def stop_reporter() -> None:
    reporter = context.get("progress")
    if reporter is not None:
        reporter.stop()


@app.callback()
def main(
    log_level: Annotated[str, typer.Option("--log-level", "-l", help="Set logging level")] = "INFO",
    progress: Annotated[Literal["empty", "simple", "rich"], typer.Option("--progress", "-p")] = "empty",
):
    from sentinel_explorer.progress import create_reporter, registry

    reporter_cls = registry.get(progress)
    setup_logging(
        log_level=log_level,
        reporter_cls=reporter_cls,
        suppressions={"error": ["urllib3", "requests"]},
    )
    context["progress"] = create_reporter(reporter_name=progress)


@app.command()
def search(
    satellite: Annotated[str, typer.Argument(help="One of SENTINEL-1, SENTINEL-2, SENTINEL-3")],
    product: Annotated[str | None, typer.Option("--product", "-P", help="Product type, e.g. L2A, GRD")] = None,
    start: Annotated[datetime | None, typer.Option("--start", "-s", help="Start time interval.")] = None,
    end: Annotated[datetime | None, typer.Option("--end", "-e", help="End time interval.")] = None,
    tile: Annotated[str | None, typer.Option("--tile", "-t", help="Sentinel-2 tile id")] = None,
    clouds: Annotated[float | None, typer.Option("--clouds", "-c", help="Maximum cloud cover (%)")] = None,
    area_file: Annotated[
        Path | None, typer.Option("--area", "-a", help="Path to a GeoJSON file containing the AoI")
    ] = None,
    max_results: Annotated[int, typer.Option("--max-results", "-n", help="Maximum number of results")] = 100,
    as_json: Annotated[bool, typer.Option("--json", help="Print results as JSON")] = False,
):
    from sentinel_explorer.catalogue import search as search_catalogue
    from sentinel_explorer.model import AreaParams

    if (start is None) != (end is None):
        raise typer.BadParameter("--start and --end must be provided together")
    dates = (start, end) if start is not None and end is not None else None
    geometry = AreaParams.from_file(area_file).area_geometry if area_file is not None else None

    records = search_catalogue(
        satellite,
        product=product,
        dates=dates,
        tile=tile,
        clouds=clouds,
        geometry=geometry,
        # GeoJSON coordinates are always (lon, lat)
        axis_order="lonlat",
        max_results=max_results,
        allow_empty=True,
    )
    if as_json:
        rows = [r.model_dump(mode="json", by_alias=True) for r in records]
        typer.echo(json.dumps(rows, indent=2))
        return

    from rich.console import Console
    from rich.table import Table

    table = Table("Name", "AcquisitionDate", "PublicationDate", "CloudCover", "Id")
    for record in records:
        table.add_row(
            record.name,
            record.acquisition_date.isoformat(),
            record.publication_date.isoformat(),
            "" if record.cloud_cover is None else f"{record.cloud_cover:.2f}",
            record.id,
        )
    Console().print(table)


@app.command()
def download(
    scenes: list[str],
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-o", help="Path to where the outputs will be stored"),
    ] = None,
    unpack: Annotated[bool, typer.Option("--unpack", "-u", help="Extract and delete the archive")] = False,
    username: Annotated[str | None, typer.Option("--user", help="Copernicus Data Space username")] = None,
    password: Annotated[str | None, typer.Option("--password", help="Copernicus Data Space password")] = None,
):
    from sentinel_explorer.auth import get_access_token
    from sentinel_explorer.retrieval import retrieve_scene

    output_dir = output_dir or Path("outputs/downloads")
    token = get_access_token(username, password)
    if token is None:
        typer.echo("Error: authentication failed, no token available", err=True)
        raise typer.Exit(code=1)

    init_reporter()
    try:
        for scene in scenes:
            path = retrieve_scene(scene, token, destination=output_dir, unpack=unpack)
            typer.echo(str(path))
    finally:
        stop_reporter()


@app.command()
def token(
    username: Annotated[str | None, typer.Option("--user", help="Copernicus Data Space username")] = None,
    password: Annotated[str | None, typer.Option("--password", help="Copernicus Data Space password")] = None,
):
    from sentinel_explorer.auth import get_access_token

    access_token = get_access_token(username, password)
    if access_token is None:
        raise typer.Exit(code=1)
    typer.echo(access_token)


if __name__ == "__main__":
    app()
