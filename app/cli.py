from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
import uvicorn
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from adapters.filesystem.scene_repository import FileSystemSceneRepository
from adapters.scene.memory_graph import InMemorySceneGraph
from app.config import AppSettings, load_settings
from app.web_main import create_app
from domain.errors import StackError
from domain.models import OffsetSpec, SceneDocument, StackMode
from domain.services.offset_stack import OffsetStackService, describe

app = typer.Typer(no_args_is_help=True)
console = Console()
logger = logging.getLogger(__name__)


def configure_logging(settings: AppSettings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _settings(config: Optional[Path]) -> AppSettings:
    try:
        settings = load_settings(config)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Invalid configuration:[/] {exc}")
        raise typer.Exit(code=1) from exc
    configure_logging(settings)
    return settings


def _load_scene(repo: FileSystemSceneRepository, scene_path: Path) -> SceneDocument:
    if not scene_path.exists():
        console.print(f"[red]File not found:[/] {scene_path}")
        raise typer.Exit(code=1)
    try:
        return repo.load(scene_path)
    except ValueError as exc:
        console.print(f"[red]Invalid scene file {scene_path}:[/] {exc}")
        raise typer.Exit(code=1) from exc


@app.command("stack")
def stack(
    scene_path: Path = typer.Argument(..., help="Scene document to update."),
    select: List[str] = typer.Option(..., "--select", "-s", help="Layer id to stack (repeat)."),
    mode: Optional[str] = typer.Option(
        None, help="Where the anchor ends up: top or bottom. Defaults to the configured mode."
    ),
    dx: Optional[float] = typer.Option(None, help="Horizontal offset per layer."),
    dy: Optional[float] = typer.Option(None, help="Vertical offset per layer."),
    output: Optional[Path] = typer.Option(
        None, help="Where to write the result. Defaults to updating the scene in place."
    ),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    settings = _settings(config)
    try:
        stack_mode = StackMode.parse(mode) if mode else settings.stack.mode
    except ValueError as exc:
        console.print(f"[red]Unknown mode:[/] {mode}")
        raise typer.Exit(code=1) from exc
    offset = OffsetSpec(
        dx=settings.stack.offset_x if dx is None else dx,
        dy=settings.stack.offset_y if dy is None else dy,
    )

    repo = FileSystemSceneRepository()
    graph = InMemorySceneGraph.from_document(_load_scene(repo, scene_path))
    try:
        result = OffsetStackService(graph).run(select, stack_mode, offset)
    except StackError as exc:
        logger.warning("Stack failed (%s): %s", exc.code, exc.message)
        console.print(f"[red]{exc.user_message()}[/]")
        if exc.partial:
            target = output or scene_path
            repo.save(graph.to_document(), target)
            console.print(f"[yellow]Wrote partial result[/] {target}")
        raise typer.Exit(code=1) from exc

    target = output or scene_path
    repo.save(graph.to_document(), target)
    console.print(f"[green]{result.summary}[/]")
    console.print(f"[green]Wrote[/] {target}")


@app.command("order")
def order(
    scene_path: Path = typer.Argument(..., help="Scene document to inspect."),
    select: List[str] = typer.Option(..., "--select", "-s", help="Layer id to order (repeat)."),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    _settings(config)
    graph = InMemorySceneGraph.from_document(_load_scene(FileSystemSceneRepository(), scene_path))
    try:
        stacking = OffsetStackService(graph).resolve_order(select)
    except StackError as exc:
        console.print(f"[red]{exc.user_message()}[/]")
        raise typer.Exit(code=1) from exc

    table = Table(title="Z-order (front first)")
    table.add_column("#", justify="right")
    table.add_column("Layer")
    table.add_column("Parent")
    for position, node_id in enumerate(reversed(stacking.ascending), start=1):
        parent = graph.parent_of(node_id)
        table.add_row(str(position), describe(graph, node_id), parent or "")
    console.print(table)


@app.command("settings")
def show_settings(config: Optional[Path] = typer.Option(None, help="YAML settings file.")) -> None:
    settings = _settings(config)
    console.print_json(settings.model_dump_json())


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8080, help="Port to listen on."),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    settings = _settings(config)
    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


if __name__ == "__main__":
    app()
