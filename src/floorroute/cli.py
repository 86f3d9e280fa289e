"""Command Line Interface for floorroute.

This module provides a small CLI to scan SVG floorplans, list their rooms,
plan routes to a room and render debug overlays.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .core.model import Point
from .engine.api import analyze, find_rooms, plan_route
from .io.overlay import OverlayError, load_overlay, save_overlay
from .routing import RouteStrategy
from .routing.visibility import path_length
from .visualization.overlay import render_overlay

app = typer.Typer(
    name="floorroute",
    help="Scan SVG floorplans and find routes to rooms",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _read_svg(path: Path) -> str:
    if not path.exists():
        raise FileNotFoundError(str(path))
    return path.read_text(encoding="utf-8", errors="replace")


def _fmt(point: Optional[Point]) -> str:
    if point is None:
        return "-"
    return f"({point.x:.2f}, {point.y:.2f})"


@app.command()
def detect(
    svg: Path = typer.Option(..., "--svg", "-s", help="Path to SVG floorplan"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Write an overlay JSON file"),
    building_id: Optional[str] = typer.Option(
        None, "--building-id", help="Building identifier stored in the overlay (default: file stem)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Scan a floorplan and summarize what was detected."""
    _setup_logging(verbose)
    try:
        analysis = analyze(_read_svg(svg))
        written = None
        if output is not None:
            written = save_overlay(output, building_id or svg.stem, analysis.detection, analysis.geometry)
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)

    detection = analysis.detection
    geometry = analysis.geometry
    table = Table(title=f"Detection: {svg.name}")
    table.add_column("Kind", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Walls", str(len(detection.walls)))
    table.add_row("Filtered walls", str(len(geometry.filtered_walls)))
    table.add_row("Floors", str(len(detection.floors)))
    table.add_row("Entrances", str(len(detection.entrances)))
    table.add_row("Doors", str(len(detection.doors)))
    table.add_row("Corridors", str(len(detection.corridors)))
    table.add_row("Rooms", str(len(detection.room_labels)))
    table.add_row("Room boxes", str(len(geometry.room_boxes)))
    console.print(table)

    bounds = geometry.building_bounds
    if bounds is not None:
        console.print(
            f"Bounds: ({bounds.min_x:.2f}, {bounds.min_y:.2f}) - ({bounds.max_x:.2f}, {bounds.max_y:.2f})"
        )
    else:
        console.print("[yellow]No building bounds[/yellow]")
    if written is not None:
        console.print(f"[green]Saved overlay to {written}[/green]")


@app.command()
def rooms(
    svg: Path = typer.Option(..., "--svg", "-s", help="Path to SVG floorplan"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Only show rooms matching this text"),
):
    """List the room labels found in a floorplan."""
    try:
        analysis = analyze(_read_svg(svg))
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)

    labels = analysis.detection.room_labels
    if query:
        labels = find_rooms(labels, query, analysis.geometry.building_bounds)
    boxes = {box.id: box for box in analysis.geometry.room_boxes}

    table = Table(title=f"Rooms: {len(labels)}")
    table.add_column("Room", style="cyan")
    table.add_column("Anchor", style="green")
    table.add_column("Box", style="magenta")
    for label in labels:
        box = boxes.get(label.id)
        box_text = (
            f"x {box.left:.1f}..{box.right:.1f}, y {box.top:.1f}..{box.bottom:.1f}" if box else "-"
        )
        table.add_row(label.id, _fmt(label.point), box_text)
    console.print(table)


@app.command()
def route(
    svg: Path = typer.Option(..., "--svg", "-s", help="Path to SVG floorplan"),
    room: str = typer.Option(..., "--room", "-r", help="Room label to route to"),
    strategy: str = typer.Option("visibility", "--strategy", help="Routing strategy: visibility or grid"),
    match: int = typer.Option(0, "--match", "-m", help="Index of the match to use when several rooms match"),
    origin_x: Optional[float] = typer.Option(None, "--origin-x", help="Start x when there is no entrance"),
    origin_y: Optional[float] = typer.Option(None, "--origin-y", help="Start y when there is no entrance"),
    as_json: bool = typer.Option(False, "--json", help="Print the plan as JSON"),
    image: Optional[Path] = typer.Option(None, "--image", help="Render the route to a PNG image"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Plan a route from the nearest entrance to a room."""
    _setup_logging(verbose)
    origin = Point(origin_x, origin_y) if origin_x is not None and origin_y is not None else None
    try:
        analysis = analyze(_read_svg(svg))
        plan = plan_route(
            analysis, room, origin=origin, match_index=match, strategy=RouteStrategy.parse(strategy)
        )
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if plan is None:
        console.print(f"[red]Error: No room matches '{room}'[/red]")
        raise typer.Exit(1)

    if image is not None:
        if render_overlay(analysis, image, plan.route):
            console.print(f"[green]Saved image to {image}[/green]")
        else:
            console.print(f"[yellow]Could not render image to {image}[/yellow]")

    if as_json:
        payload = {
            "room": plan.target.id,
            "door": None if plan.door is None else [plan.door.x, plan.door.y],
            "goal": [plan.goal.x, plan.goal.y],
            "start": None if plan.start is None else [plan.start.x, plan.start.y],
            "route": None if plan.route is None else [[p.x, p.y] for p in plan.route],
        }
        typer.echo(json.dumps(payload))
    else:
        console.print(f"[bold]Room {plan.target.id}[/bold] at {_fmt(plan.target.point)}")
        console.print(f"Door: {_fmt(plan.door)}")
        console.print(f"Start: {_fmt(plan.start)}")
        if plan.route:
            table = Table(title=f"Route: {len(plan.route)} points, length {path_length(plan.route):.2f}")
            table.add_column("#", justify="right")
            table.add_column("Point", style="cyan")
            for i, point in enumerate(plan.route):
                table.add_row(str(i), _fmt(point))
            console.print(table)

    if plan.start is None:
        console.print("[red]No entrance or origin inside the building[/red]")
        raise typer.Exit(1)
    if plan.route is None:
        console.print("[red]No route found[/red]")
        raise typer.Exit(1)


@app.command()
def overlay(
    svg: Path = typer.Option(..., "--svg", "-s", help="Path to SVG floorplan"),
    output: Path = typer.Option(..., "--out", "-o", help="Path to output PNG image"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Render what was detected in a floorplan to a PNG image."""
    _setup_logging(verbose)
    try:
        analysis = analyze(_read_svg(svg))
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)

    if not render_overlay(analysis, output):
        console.print(f"[red]Error: Could not render {output}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Saved image to {output}[/green]")


@app.command()
def inspect(
    overlay_file: Path = typer.Option(..., "--overlay", help="Path to overlay JSON file"),
):
    """Show the contents of a saved overlay file."""
    try:
        detection, geometry = load_overlay(overlay_file)
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)
    except OverlayError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Overlay: {overlay_file.name}")
    table.add_column("Kind", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Walls", str(len(detection.walls)))
    table.add_row("Floors", str(len(detection.floors)))
    table.add_row("Entrances", str(len(detection.entrances)))
    table.add_row("Doors", str(len(detection.doors)))
    table.add_row("Corridors", str(len(detection.corridors)))
    table.add_row("Rooms", str(len(detection.room_labels)))
    if geometry is not None:
        table.add_row("Filtered walls", str(len(geometry.filtered_walls)))
        table.add_row("Room boxes", str(len(geometry.room_boxes)))
    console.print(table)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
