"""
Aura CLI - inspect the Cognitive Aura engine from the terminal.

Runs the decision engine over knowledge-graph snapshots stored as JSON
files, which is handy for tuning weights and for debugging why a learner
was sent to a particular concept.

Usage:
    aura evaluate graph.json                      # One evaluation cycle
    aura evaluate graph.json -r reviews.json      # With review records
    aura evaluate graph.json --health 1.2 --json  # Wellness multiplier, JSON output
    aura tune graph.json feedback.json            # Replay feedback, show drift
    aura config                                   # Effective settings
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import Settings, get_settings
from cognitive_aura.core.models import AuraContext, AuraState
from cognitive_aura.delivery.composer import presentation_label
from cognitive_aura.delivery.state_log import JsonlStateLog
from cognitive_aura.engine import CognitiveAuraEngine
from cognitive_aura.graph.models import GraphSnapshot, ReviewRecord
from cognitive_aura.graph.providers import (
    StaticGraphProvider,
    StaticHealthProvider,
    StaticReviewProvider,
)
from cognitive_aura.graph.snapshot_loader import load_feedback, load_reviews, load_snapshot

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="aura",
    help="Cognitive Aura - adaptive cognitive-state decision engine",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()

CONTEXT_STYLES = {
    AuraContext.RECOVERY: "blue",
    AuraContext.FOCUS: "green",
    AuraContext.OVERLOAD: "red",
}


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )


def build_engine(
    snapshot: GraphSnapshot,
    reviews: list[ReviewRecord],
    health: float | None,
    settings: Settings,
) -> CognitiveAuraEngine:
    """Wire an engine over in-memory providers, plus the state log if configured."""
    engine = CognitiveAuraEngine(
        graph_provider=StaticGraphProvider(snapshot),
        review_provider=StaticReviewProvider(reviews),
        health_provider=StaticHealthProvider(health) if health is not None else None,
        settings=settings,
    )
    if settings.state_log_path:
        engine.subscribe(JsonlStateLog(Path(settings.state_log_path)))
    return engine


def _load_inputs(
    snapshot_path: Path,
    reviews_path: Path | None,
) -> tuple[GraphSnapshot, list[ReviewRecord]]:
    # pydantic ValidationError and JSONDecodeError are both ValueErrors
    try:
        snapshot = load_snapshot(snapshot_path)
        reviews = load_reviews(reviews_path) if reviews_path else []
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not load input: {e}[/]")
        raise typer.Exit(1)
    return snapshot, reviews


# =============================================================================
# Rendering
# =============================================================================


def render_state(state: AuraState, engine: CognitiveAuraEngine) -> None:
    style = CONTEXT_STYLES[state.context]
    target = state.target_node.label if state.target_node else "None"
    priority = state.target_priority.value if state.target_priority else "n/a"

    console.print(Panel(
        f"[bold {style}]{state.context.value.upper()}[/] "
        f"[dim]({presentation_label(state.context)})[/]\n"
        f"CCS: {state.composite_score * 100:.1f}%   Confidence: {state.confidence * 100:.0f}%\n"
        f"Target: [bold]{target}[/] [dim]({priority})[/]\n\n"
        f"{state.micro_task}",
        title="Cognitive Aura",
        border_style=style,
    ))

    table = Table(title="Details")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    breakdown = engine.last_breakdown
    if breakdown is not None:
        for name, value in breakdown.components.to_dict().items():
            table.add_row(f"Factor {name}", f"{value:.3f}")
        table.add_row("Health adjustment", f"x{breakdown.health_adjustment:.2f}")
        if breakdown.failed_factors:
            table.add_row("Failed factors", ", ".join(breakdown.failed_factors))

    table.add_row("Soundscape", state.recommended_soundscape.value)
    table.add_row("Physics mode", state.physics_mode.value)
    table.add_row("Session", state.session_id)
    console.print(table)


def render_drift(
    before: dict[str, float],
    after: dict[str, float],
    title: str,
) -> None:
    table = Table(title=title)
    table.add_column("Key", style="cyan")
    table.add_column("Before", justify="right")
    table.add_column("After", justify="right", style="green")
    table.add_column("Delta", justify="right", style="yellow")

    for key, old in before.items():
        new = after[key]
        table.add_row(key, f"{old:.4f}", f"{new:.4f}", f"{new - old:+.4f}")
    console.print(table)


def state_payload(state: AuraState, engine: CognitiveAuraEngine) -> dict[str, Any]:
    payload: dict[str, Any] = {
        **state.to_dict(),
        "presentation_label": presentation_label(state.context),
    }
    if engine.last_breakdown is not None:
        payload["breakdown"] = engine.last_breakdown.to_dict()
    return payload


# =============================================================================
# Commands
# =============================================================================


@app.command()
def evaluate(
    snapshot: Annotated[Path, typer.Argument(help="Knowledge graph snapshot (JSON)")],
    reviews: Annotated[
        Path | None, typer.Option("--reviews", "-r", help="Review records (JSON array)")
    ] = None,
    health: Annotated[
        float | None, typer.Option("--health", help="Wellness multiplier (clamped to 0.5-1.5)")
    ] = None,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the aura state as JSON")
    ] = False,
) -> None:
    """
    Run one evaluation cycle over a graph snapshot.

    Examples:
        aura evaluate graph.json
        aura evaluate graph.json -r reviews.json --health 0.8
    """
    settings = get_settings()
    graph, records = _load_inputs(snapshot, reviews)
    engine = build_engine(graph, records, health, settings)

    state = asyncio.run(engine.evaluate())

    if as_json:
        typer.echo(json.dumps(state_payload(state, engine), indent=2, default=str))
    else:
        render_state(state, engine)


@app.command()
def tune(
    snapshot: Annotated[Path, typer.Argument(help="Knowledge graph snapshot (JSON)")],
    feedback: Annotated[Path, typer.Argument(help="Performance records (JSON array)")],
    reviews: Annotated[
        Path | None, typer.Option("--reviews", "-r", help="Review records (JSON array)")
    ] = None,
) -> None:
    """
    Replay feedback records and show how weights and thresholds drift.

    Evaluates once, feeds every record to the adaptive learner, then
    re-evaluates with the tuned weights.
    """
    settings = get_settings()
    graph, records = _load_inputs(snapshot, reviews)
    try:
        performance = load_feedback(feedback)
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not load feedback: {e}[/]")
        raise typer.Exit(1)

    engine = build_engine(graph, records, None, settings)
    weights_before = engine.weights.to_dict()
    thresholds_before = engine.thresholds.to_dict()

    async def _replay() -> tuple[AuraState, AuraState]:
        initial = await engine.evaluate()
        for record in performance:
            await engine.record_performance(record)
        # cached CCS was computed with the pre-tuning weights
        engine.clear_caches()
        return initial, await engine.refresh_state()

    initial, tuned = asyncio.run(_replay())

    console.print(f"[cyan]Replayed {len(performance)} feedback records[/]")
    render_drift(weights_before, engine.weights.to_dict(), "Factor Weights")
    render_drift(thresholds_before, engine.thresholds.to_dict(), "Context Thresholds")

    stats = engine.performance_stats()
    console.print(
        f"Average accuracy: {stats.average_accuracy * 100:.1f}%   "
        f"Completion: {stats.average_completion * 100:.1f}%   "
        f"Satisfaction: {stats.average_satisfaction:.1f}/5"
    )
    console.print(
        f"Context: {initial.context.value} ({initial.composite_score * 100:.1f}%) -> "
        f"[bold]{tuned.context.value}[/] ({tuned.composite_score * 100:.1f}%)"
    )


@app.command("config")
def show_config() -> None:
    """Print the effective engine settings (after AURA_* overrides)."""
    settings = get_settings()

    for section, values in settings.get_aura_config().items():
        table = Table(title=section.title())
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        for key, value in values.items():
            table.add_row(key, str(value))
        console.print(table)

    console.print(f"Log level: {settings.log_level}")
    console.print(f"State log: {settings.state_log_path or 'disabled'}")


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Entry point for the CLI."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    run()
