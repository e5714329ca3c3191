"""
Typer CLI for the fidelity engine.

Commands:
    fidelity probe SNAPSHOT.json           - Probe a client snapshot and show the device context
    fidelity probe --header "DPR: 2" ...   - Probe from HTTP client-hint headers
    fidelity adapt SNAPSHOT.json LESSON.json - Adapt a lesson's content for a device
    fidelity avatar SNAPSHOT.json          - Show the avatar asset bundle for a device

Usage:
    fidelity --help
    fidelity probe client.json --json
    fidelity adapt client.json lesson.json --output adapted.json
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from loguru import logger
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import get_settings
from src.fidelity import scorer
from src.fidelity.avatar import avatar_asset_bundle
from src.fidelity.content_adapter import adapt
from src.fidelity.context import DeviceContext
from src.fidelity.probe import CapabilityProbe
from src.fidelity.signals import ClientHintsSignalSource, SignalSource, SnapshotSignalSource
from src.fidelity.stores import parse_content_items

app = typer.Typer(
    name="fidelity",
    help="Device-adaptive content and avatar fidelity selection",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

TIER_COLORS = {
    "high_3d": "green",
    "medium_2_5d": "cyan",
    "low_2d": "yellow",
    "text_only": "red",
    "ultra": "green",
    "high": "green",
    "medium": "cyan",
    "low": "yellow",
    "minimal": "red",
}


def style_tier(value: str) -> str:
    color = TIER_COLORS.get(value, "white")
    return f"[{color}]{value}[/{color}]"


# =============================================================================
# Helpers
# =============================================================================

def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        console.print(f"[red]File not found:[/red] {path}")
        raise typer.Exit(code=1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {path}:[/red] {e}")
        raise typer.Exit(code=1)


def _load_snapshot(path: Path) -> dict:
    data = _load_json(path)
    if not isinstance(data, dict):
        console.print(f"[red]Snapshot in {path} must be a JSON object[/red]")
        raise typer.Exit(code=1)
    return data


def _load_lesson_items(path: Path) -> list:
    data = _load_json(path)
    items = data.get("content", []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        console.print(f"[red]Lesson in {path} must be a list of items or {{'content': [...]}}[/red]")
        raise typer.Exit(code=1)
    return items


def _parse_headers(raw_headers: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in raw_headers:
        name, sep, value = raw.partition(":")
        if not sep:
            console.print(f"[red]Header must look like 'Name: value':[/red] {raw}")
            raise typer.Exit(code=1)
        headers[name.strip()] = value.strip()
    return headers


def _source_for(snapshot: Optional[Path], headers: list[str]) -> SignalSource:
    if snapshot is not None:
        return SnapshotSignalSource(_load_snapshot(snapshot))
    if headers:
        return ClientHintsSignalSource(_parse_headers(headers))
    console.print("[red]Provide a snapshot file or at least one --header[/red]")
    raise typer.Exit(code=1)


def _detect(source: SignalSource) -> DeviceContext:
    probe = CapabilityProbe.from_settings(get_settings())
    capabilities = asyncio.run(probe.probe(source))
    return DeviceContext.build(capabilities, source.is_mobile())


def _context_table(context: DeviceContext) -> Table:
    table = Table(title="Device Context", box=box.ROUNDED)
    table.add_column("Signal", style="cyan")
    table.add_column("Value")

    table.add_row("Device class", context.device_class.value)
    table.add_row("Orientation", context.orientation.value)
    table.add_row("Performance score", str(context.performance_score))
    table.add_row("Avatar fidelity", style_tier(context.avatar_fidelity.value))
    table.add_row("Content quality", style_tier(context.content_quality.value))
    table.add_row("Bandwidth", context.bandwidth.value)
    table.add_row("Processing power", context.capabilities.processing_power.value)
    table.add_row("Interaction modes", ", ".join(sorted(m.value for m in context.interaction_modes)) or "-")
    return table


def _score_table(context: DeviceContext) -> Table:
    breakdown = scorer.score_breakdown(context.capabilities)
    table = Table(title="Score Breakdown", box=box.SIMPLE)
    table.add_column("Signal", style="cyan")
    table.add_column("Points", justify="right")
    for name, points in breakdown.to_dict().items():
        table.add_row(name, str(points))
    return table


# =============================================================================
# Commands
# =============================================================================

@app.command()
def probe(
    snapshot: Optional[Path] = typer.Argument(None, help="Client capability snapshot (JSON)"),
    header: list[str] = typer.Option([], "--header", "-H", help="HTTP header 'Name: value' (repeatable)"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of tables"),
) -> None:
    """Probe a client and show its device context."""
    context = _detect(_source_for(snapshot, header))

    if as_json:
        typer.echo(json.dumps(context.to_dict(), indent=2))
        return

    console.print(_context_table(context))
    console.print(_score_table(context))


@app.command("adapt")
def adapt_command(
    snapshot: Path = typer.Argument(..., help="Client capability snapshot (JSON)"),
    lesson: Path = typer.Argument(..., help="Lesson content: a list of items or {'content': [...]}"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write adapted content here"),
) -> None:
    """Adapt a lesson's content items for a client device."""
    context = _detect(SnapshotSignalSource(_load_snapshot(snapshot)))

    items = parse_content_items(_load_lesson_items(lesson), source=str(lesson))
    adapted = adapt(items, context.device_class, context.capabilities)
    payload = [item.to_dict() for item in adapted]

    if output is not None:
        output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        console.print(f"[green]Wrote {len(payload)} items to {output}[/green]")
        return

    table = Table(title=f"Adapted for {context.device_class.value}", box=box.ROUNDED)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Original")
    table.add_column("Adapted")
    table.add_column("Quality")
    table.add_column("Size")
    for index, (before, after) in enumerate(zip(items, adapted), start=1):
        changed = before != after
        table.add_row(
            str(index),
            before.type.value,
            f"[yellow]{after.type.value}[/yellow]" if changed else after.type.value,
            after.quality or "-",
            after.size or "-",
        )
    console.print(table)


@app.command()
def avatar(
    snapshot: Path = typer.Argument(..., help="Client capability snapshot (JSON)"),
    avatar_id: Optional[str] = typer.Option(None, "--avatar-id", help="Avatar identifier"),
) -> None:
    """Show the avatar asset bundle selected for a client device."""
    settings = get_settings()
    context = _detect(SnapshotSignalSource(_load_snapshot(snapshot)))
    bundle = avatar_asset_bundle(
        avatar_id or settings.default_avatar_id,
        context.avatar_fidelity,
        settings.avatar_asset_base,
    )

    if bundle.is_text_only:
        body = "[red]Text-only avatar[/red] (no graphics acceleration or low performance)"
    else:
        body = "\n".join([
            f"Model:      {bundle.model_url}",
            f"Texture:    {bundle.texture_url}",
            f"Animations: {bundle.animation_set}",
        ])
    console.print(Panel(body, title=f"Avatar {bundle.avatar_id} @ {style_tier(bundle.fidelity.value)}", border_style="cyan"))


# =============================================================================
# Entry Point
# =============================================================================

def configure_logging() -> None:
    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="10 MB", retention=5)


def main() -> None:
    """CLI entry point."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
