"""
Typer CLI for exploring the drawlearn engine.

Commands:
    drawlearn catalog              - List challenges in the bank
    drawlearn plan --word w-cat    - Plan one turn for a fresh learner
    drawlearn simulate --turns 30  - Run a seeded simulated learner
    drawlearn schedule --quality 5 - Show the interval sequence for repeated reviews
    drawlearn config               - Show effective settings

All commands run against in-memory stores; nothing is persisted.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import get_settings
from drawlearn.core.errors import CatalogError
from drawlearn.core.models import (
    ChallengeResult,
    ReviewOutcome,
    Stage,
    utc_now,
)
from drawlearn.logging_setup import configure_logging

console = Console()

app = typer.Typer(
    help="drawlearn CLI: inspect the adaptive vocabulary engine",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show engine debug logs"),
) -> None:
    """Configure logging for every command."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


def _load_catalog():
    from drawlearn.study.catalog import load_catalog

    settings = get_settings()
    try:
        return load_catalog(settings.challenge_bank_path, settings.words_path)
    except CatalogError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


class _SimClock:
    """Manually advanced clock for simulations."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


# ========================================
# catalog
# ========================================


@app.command("catalog")
def catalog_cmd(
    stage: Optional[Stage] = typer.Option(None, "--stage", "-s", help="Only this stage"),
) -> None:
    """List the challenge bank."""
    catalog = _load_catalog()
    challenges = [c for c in catalog.challenges if stage is None or c.stage == stage]

    table = Table(title=f"Challenge Bank ({len(challenges)})")
    table.add_column("ID", style="cyan")
    table.add_column("Stage")
    table.add_column("Difficulty")
    table.add_column("Mechanic")
    table.add_column("Modalities")
    table.add_column("XP", justify="right")
    table.add_column("Badge", style="yellow")

    for c in challenges:
        table.add_row(
            c.id,
            c.stage.value,
            c.difficulty.value,
            c.mechanic.value,
            ", ".join(sorted(m.value for m in c.modalities)),
            str(c.scoring.xp),
            c.scoring.badge or "",
        )
    console.print(table)


# ========================================
# plan
# ========================================


@app.command("plan")
def plan_cmd(
    word: str = typer.Option(..., "--word", "-w", help="Word id, e.g. w-cat"),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for the challenge draw (default: DRAWLEARN_RANDOM_SEED)"
    ),
) -> None:
    """Plan a single turn for a learner with no history."""
    from drawlearn.study.learning_engine import LearningEngine

    catalog = _load_catalog()
    if catalog.word(word) is None:
        rprint(f"[red]Unknown word:[/red] {word}")
        raise typer.Exit(code=1)

    engine = LearningEngine.from_settings(get_settings(), catalog=catalog, seed=seed)
    plan = engine.plan_turn("cli-learner", word)

    if plan.challenge is None:
        rprint(f"[yellow]No challenge available for stage {plan.stage.value}. Come back later![/yellow]")
        return

    body = (
        f"Stage: [bold]{plan.stage.value}[/bold]\n"
        f"Difficulty: {plan.difficulty.value}\n"
        f"Challenge: [cyan]{plan.challenge.id}[/cyan] ({plan.challenge.mechanic.value})\n"
        f"Prompt: {plan.challenge.prompt or '-'}\n"
        f"Hint level: {plan.hint_level.value}"
    )
    console.print(Panel(body, title=f"[bold]Next turn for {word}[/bold]", border_style="blue"))


# ========================================
# simulate
# ========================================


@app.command("simulate")
def simulate_cmd(
    turns: int = typer.Option(20, "--turns", "-n", min=1, help="Number of turns"),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for both learner and challenge draw (default: DRAWLEARN_RANDOM_SEED)"
    ),
    pass_rate: float = typer.Option(0.75, "--pass-rate", min=0.0, max=1.0),
    hours_between: float = typer.Option(12.0, "--hours-between", min=0.0),
) -> None:
    """Run a simulated learner through the engine and print the turn log."""
    from drawlearn.study.learning_engine import LearningEngine

    catalog = _load_catalog()
    settings = get_settings()
    if seed is None:
        seed = settings.random_seed
    clock = _SimClock(utc_now())
    learner_rng = random.Random(seed)
    learner_id = "sim-learner"

    engine = LearningEngine.from_settings(settings, catalog=catalog, seed=seed, clock=clock)

    table = Table(title=f"Simulation ({turns} turns, seed={seed})")
    table.add_column("#", justify="right")
    table.add_column("Word", style="cyan")
    table.add_column("Stage")
    table.add_column("Difficulty")
    table.add_column("Challenge")
    table.add_column("Result")
    table.add_column("Hints", justify="right")
    table.add_column("Interval", justify="right")
    table.add_column("Mastery", justify="right")

    engine.start_session(learner_id)
    for turn in range(1, turns + 1):
        item = engine.pick_next_item(learner_id) or catalog.words[0]
        plan = engine.plan_turn(learner_id, item.id)
        if plan.challenge is None:
            table.add_row(str(turn), item.id, plan.stage.value, plan.difficulty.value, "-", "-", "-", "-", "-")
            clock.advance(timedelta(hours=hours_between))
            continue

        passed = learner_rng.random() < pass_rate
        result = ChallengeResult.PASS if passed else ChallengeResult.RETRY
        hints = learner_rng.choice([0, 0, 1, 2]) if not passed else learner_rng.choice([0, 0, 0, 1])
        time_ms = learner_rng.uniform(8000, 60000)

        outcome = engine.record_outcome(plan, result, hints, time_ms)
        style = "green" if passed else "red"
        table.add_row(
            str(turn),
            item.id,
            plan.stage.value,
            plan.difficulty.value,
            plan.challenge.id,
            f"[{style}]{result.value}[/{style}]",
            str(hints),
            f"{outcome.state.interval_days}d",
            f"{outcome.state.mastery_score:.2f}",
        )
        clock.advance(timedelta(hours=hours_between))
    duration = engine.end_session(learner_id)

    console.print(table)
    progress = engine.learner_progress(learner_id)
    logger.debug(f"Simulated session lasted {duration}s of simulated time")
    rprint(
        f"\n[bold]XP:[/bold] {progress.total_xp}  "
        f"[bold]Badges:[/bold] {', '.join(progress.badges) or 'none'}  "
        f"[bold]Words mastered:[/bold] {progress.words_mastered}"
    )


# ========================================
# schedule
# ========================================


@app.command("schedule")
def schedule_cmd(
    quality: int = typer.Option(5, "--quality", "-q", min=0, max=5),
    reviews: int = typer.Option(6, "--reviews", "-n", min=1),
    hint: bool = typer.Option(False, "--hint", help="Every review used a hint"),
) -> None:
    """Show how intervals and mastery evolve under repeated identical reviews."""
    from drawlearn.study.spaced_repetition import SpacedRepetitionScheduler

    settings = get_settings()
    scheduler = SpacedRepetitionScheduler(
        max_interval_days=settings.max_interval_days,
        expected_time_ms=settings.expected_time_ms,
    )

    table = Table(title=f"Review sequence (quality={quality}, hint={hint})")
    table.add_column("Review", justify="right")
    table.add_column("Interval", justify="right")
    table.add_column("Mastery", justify="right")

    now = utc_now()
    state = None
    for _ in range(reviews):
        state = scheduler.calculate_next_review(
            state, ReviewOutcome(quality=quality, was_hint_used=hint), now=now, item_id="demo"
        )
        table.add_row(str(state.review_count), f"{state.interval_days}d", f"{state.mastery_score:.2f}")
        now = state.next_due
    console.print(table)


# ========================================
# config
# ========================================


@app.command("config")
def config_cmd() -> None:
    """Show effective settings."""
    settings = get_settings()

    table = Table(title="drawlearn settings")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", overflow="fold")
    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))
    console.print(table)


def run() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    run()
