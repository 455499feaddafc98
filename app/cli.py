from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import orjson
import typer
import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from adapters.filesystem.diagram_repository import FileSystemDiagramRepository
from adapters.filesystem.json_utils import load_json, write_json_atomic
from adapters.filesystem.terraform_repository import FileSystemTerraformRepository
from app.config import AppSettings, load_settings
from app.wiring import build_importer, build_relationship_map_service
from domain.models import DiagramMetadata, InvalidDiagramFormat, ItilSnapshot
from domain.services.diagram_envelope import export_diagram

app = typer.Typer(no_args_is_help=True)
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log diagnostic counts."),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )
    try:
        ctx.obj = load_settings(config)
    except FileNotFoundError as exc:
        console.print(f"[red]{escape(str(exc))}[/]")
        raise typer.Exit(code=1) from exc


@app.command("import")
def import_terraform(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="A .tf file or a directory of .tf files."),
    output_dir: Optional[Path] = typer.Option(
        None, help="Directory to write diagram files. Defaults to settings.output_dir.",
    ),
    name: Optional[str] = typer.Option(None, help="Diagram name stored in the metadata."),
) -> None:
    settings: AppSettings = ctx.obj
    source_repo = FileSystemTerraformRepository()
    diagram_repo = FileSystemDiagramRepository()
    importer = build_importer(settings)
    target_dir = output_dir or settings.output_dir

    try:
        pairs = source_repo.load_all_with_paths(source)
    except FileNotFoundError as exc:
        console.print(f"[red]{escape(str(exc))}[/]")
        raise typer.Exit(code=1) from exc
    if not pairs:
        console.print(f"[yellow]No Terraform files found in {source}[/]")
        raise typer.Exit(code=0)

    for path, text in pairs:
        result = importer.convert(text)
        document = export_diagram(
            result,
            DiagramMetadata(name=name or path.stem, environment="imported"),
        )
        target_path = diagram_repo.output_path(target_dir, path)
        diagram_repo.save(document, target_path)
        console.print(
            f"[green]Wrote[/] {target_path} "
            f"({len(result.zones)} zones, {len(result.components)} components)"
        )


@app.command("validate")
def validate(input_path: Path = typer.Argument(..., help="Diagram file to validate.")) -> None:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)

    try:
        document = FileSystemDiagramRepository().load(input_path)
    except InvalidDiagramFormat as exc:
        console.print(f"[red]Validation failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    console.print(
        f"[green]Valid diagram:[/] {input_path} "
        f"({len(document.nodes)} nodes, {len(document.edges)} edges)"
    )


@app.command("relationship-map")
def relationship_map(
    ctx: typer.Context,
    input_path: Path = typer.Argument(
        ..., help="JSON file with problems, incidents and changes lists."
    ),
    output: Optional[Path] = typer.Option(None, help="Write the map here instead of stdout."),
) -> None:
    settings: AppSettings = ctx.obj
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)

    try:
        snapshot = ItilSnapshot.model_validate(load_json(input_path))
    except (orjson.JSONDecodeError, ValidationError) as exc:
        console.print(f"[red]Invalid input:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    service = build_relationship_map_service(settings)
    result = service.build(snapshot.problems, snapshot.incidents, snapshot.changes)
    payload = result.to_dict()
    if output is None:
        console.print_json(orjson.dumps(payload).decode("utf-8"))
        return
    write_json_atomic(output, payload)
    summary = result.summary
    console.print(
        f"[green]Wrote[/] {output} ({summary['problems']} problems, "
        f"{summary['related_incidents']} incidents, {summary['related_changes']} changes)"
    )


@app.command("serve")
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8000, help="Port to listen on."),
) -> None:
    from app.web_main import create_app

    uvicorn.run(create_app(ctx.obj), host=host, port=port)


if __name__ == "__main__":
    app()
