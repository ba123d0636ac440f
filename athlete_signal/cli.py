"""Command-line interface for the AthleteSignal training engine."""

import logging
from datetime import timedelta
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .config import config
from .db import DailyRecordRepository, GoalStore
from .analysis import (
    CalendarGenerator,
    GoalTracker,
    RecommendationEngine,
    RecoveryScorer,
    WorkloadRatioAnalyzer,
    YearlyProgressionPlanner,
    summarize_period,
)
from .analysis.goals import METRICS, PERIODS
from .analysis.records import records_between
from .analysis.workload import INSUFFICIENT_HISTORY
from .analysis.yearly_planner import ProgressionType, current_week_of_year

console = Console()

HISTORY_DAYS = 400  # enough for this year's baseline plus a chronic window


def _load_history(repository: DailyRecordRepository, end=None):
    """Gap-filled history ending at ``end`` (or the latest record)."""
    end = end or repository.latest_date()
    if end is None:
        return [], None
    start = end - timedelta(days=HISTORY_DAYS - 1)
    return repository.fetch(start, end), end


def _format_optional(value, fmt="{:.1f}", missing="N/A"):
    return missing if value is None else fmt.format(value)


@click.group()
def cli():
    """AthleteSignal training load and periodization tool."""
    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))


@cli.command("import-csv")
@click.option("--file", "csv_file", required=True, help="Path to a daily records CSV file")
def import_csv(csv_file):
    """Import merged daily records from CSV."""
    console.print(Panel.fit("📥 Importing Daily Records", style="bold blue"))

    if not Path(csv_file).exists():
        console.print(f"[red]❌ File not found: {csv_file}[/red]")
        return

    try:
        results = DailyRecordRepository().import_csv(csv_file)
    except ValueError as e:
        console.print(f"[red]❌ Error importing data: {e}[/red]")
        return

    console.print(f"[green]✅ Inserted {results['inserted']}, updated {results['updated']} days[/green]")
    if results["skipped"]:
        console.print(f"[yellow]ℹ️ Skipped {results['skipped']} unreadable rows[/yellow]")
    if results["duplicates"]:
        console.print(f"[yellow]ℹ️ Replaced {results['duplicates']} duplicate dates with their later row[/yellow]")


@cli.command()
@click.option("--date", "as_of", type=click.DateTime(formats=["%Y-%m-%d"]), help="Day to analyze (YYYY-MM-DD), defaults to the latest record")
def analyze(as_of):
    """Workload ratio, recovery and today's recommendation."""
    console.print(Panel.fit("📊 Training Load Analysis", style="bold blue"))

    repository = DailyRecordRepository()
    records, end = _load_history(repository, as_of.date() if as_of else None)
    if not records:
        console.print("[yellow]No daily records yet. Run 'athlete-signal import-csv' first.[/yellow]")
        return

    analysis = WorkloadRatioAnalyzer().analyze(records, as_of=end)
    today = records[-1]
    recovery = RecoveryScorer().score_record(today)
    risk_level = analysis.risk_level if analysis.available else None
    recommendation = (
        RecommendationEngine().recommend(risk_level, recovery.level, today.distance) if recovery else None
    )

    table = Table(title=f"Status for {end}", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    if analysis.available:
        table.add_row("Acute avg (7d)", f"{analysis.acute_avg:.2f} mi/day")
        table.add_row("Chronic avg (28d)", f"{analysis.chronic_avg:.2f} mi/day")
        table.add_row("Workload ratio", f"{analysis.ratio:.2f}")
        table.add_row("Injury risk", analysis.risk_level.value.upper())
    elif analysis.reason == INSUFFICIENT_HISTORY:
        table.add_row("Workload ratio", f"Need more history ({analysis.days_of_history} days)")
    else:
        table.add_row("Workload ratio", "No runs in the last 28 days")

    if recovery:
        table.add_row(
            "Recovery",
            f"[{recovery.color}]{recovery.score:.0f}[/{recovery.color}] ({recovery.level.value}, {recovery.source})",
        )
    else:
        table.add_row("Recovery", "No data")

    if recommendation:
        table.add_row("Intensity", recommendation.intensity.value.upper())
    console.print(table)

    if analysis.available:
        console.print(f"\n[bold]Workload:[/bold] {analysis.recommendation}")
    if recommendation:
        console.print(f"[bold]Today:[/bold] {recommendation.text}")


@cli.command()
@click.option("--days", default=config.CALENDAR_DAYS, help="Number of days to show")
def calendar(days):
    """Per-day recovery and recommendation calendar."""
    repository = DailyRecordRepository()
    records, end = _load_history(repository)
    if not records:
        console.print("[yellow]No daily records yet.[/yellow]")
        return

    start = end - timedelta(days=days - 1)
    entries = CalendarGenerator().generate(records, start, end)

    table = Table(title=f"Training Calendar {start} → {end}", box=box.ROUNDED)
    table.add_column("Date", style="cyan")
    table.add_column("Miles", justify="right")
    table.add_column("Recovery", justify="right")
    table.add_column("Risk")
    table.add_column("Intensity")

    for entry in entries:
        intensity = "-"
        if entry.recommendation:
            color = entry.recommendation.color
            intensity = f"[{color}]{entry.recommendation.intensity.value}[/{color}]"
        table.add_row(
            entry.date.strftime("%a %m/%d"),
            f"{entry.distance:.1f}",
            _format_optional(entry.recovery_score, "{:.0f}", "-")
            + (" 👑" if RecoveryScorer.is_crown(entry.recovery_score) else ""),
            entry.risk_level.value if entry.risk_level else "-",
            intensity,
        )
    console.print(table)


@cli.command()
def streaks():
    """Update and show consecutive-day streaks."""
    records, _ = _load_history(DailyRecordRepository())
    store = GoalStore()
    tracker = GoalTracker.load(store)
    state = tracker.update_progress(records)
    tracker.save(store)

    table = Table(title="🔥 Streaks", box=box.ROUNDED)
    table.add_column("Goal", style="cyan")
    table.add_column("Current", justify="right")
    table.add_column("Best", justify="right")
    table.add_row(f"Sleep {config.SLEEP_GOAL_HOURS:.0f}h+", str(state.streaks.current_sleep), str(state.streaks.best_sleep))
    table.add_row("Run days", str(state.streaks.current_run), str(state.streaks.best_run))
    table.add_row(
        f"Readiness {config.READINESS_GOAL_SCORE:.0f}+",
        str(state.streaks.current_readiness),
        str(state.streaks.best_readiness),
    )
    console.print(table)


@cli.command()
@click.option("--days", default=30, help="Number of days to summarize")
def stats(days):
    """Summary statistics for the trailing period."""
    records, end = _load_history(DailyRecordRepository())
    if not records:
        console.print("[yellow]No daily records yet.[/yellow]")
        return

    period = records_between(records, end - timedelta(days=days - 1), end)
    summary = summarize_period(period)

    table = Table(title=f"Last {days} days", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total distance", f"{summary.total_distance:.1f} mi")
    table.add_row("Runs", str(summary.days_with_runs))
    table.add_row("Avg distance / run", f"{summary.avg_distance:.1f} mi")
    table.add_row("Avg pace", _format_optional(summary.avg_pace, "{:.2f} min/mi"))
    table.add_row("Avg heart rate", _format_optional(summary.avg_heart_rate, "{:.0f} bpm"))
    table.add_row("Max heart rate", _format_optional(summary.max_heart_rate, "{:.0f} bpm"))
    table.add_row("Avg cadence", _format_optional(summary.avg_cadence, "{:.0f} spm"))
    table.add_row("Avg sleep", f"{summary.avg_sleep_hours:.1f} h")
    table.add_row("Avg sleep score", _format_optional(summary.avg_sleep_score))
    table.add_row("Avg readiness", _format_optional(summary.avg_readiness_score))
    table.add_row("Crowns", f"👑 {summary.total_crowns}")
    console.print(table)


@cli.group()
def goals():
    """Weekly and monthly goals."""
    pass


@goals.command("show")
def goals_show():
    """Recompute and show goal progress."""
    records, _ = _load_history(DailyRecordRepository())
    store = GoalStore()
    tracker = GoalTracker.load(store)
    if records:
        tracker.update_progress(records)
        tracker.save(store)

    active = tracker.active_goals()
    if not active:
        console.print("[yellow]No goals enabled. Use 'athlete-signal goals set'.[/yellow]")
        return

    table = Table(title="🎯 Goals", box=box.ROUNDED)
    table.add_column("Period", style="cyan")
    table.add_column("Metric")
    table.add_column("Current", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Progress", justify="right")
    for goal in active:
        table.add_row(goal["period"], goal["metric"], f"{goal['current']:g}", f"{goal['target']:g}", f"{goal['progress']}%")
    console.print(table)


@goals.command("set")
@click.argument("period", type=click.Choice(PERIODS))
@click.argument("metric", type=click.Choice(METRICS))
@click.option("--target", type=float, required=True, help="Goal target value")
@click.option("--enable/--disable", default=True, help="Enable or disable the goal")
def goals_set(period, metric, target, enable):
    """Set a goal target."""
    store = GoalStore()
    tracker = GoalTracker.load(store)
    try:
        tracker.update_goal(period, metric, enable, target)
    except ValueError as e:
        console.print(f"[red]❌ {e}[/red]")
        return
    tracker.save(store)
    state = "enabled" if enable else "disabled"
    console.print(f"[green]✅ {period} {metric} goal {state} with target {target:g}[/green]")


@cli.group()
def plan():
    """Yearly mileage progression plan."""
    pass


def _print_plan(planner: YearlyProgressionPlanner, yearly_plan):
    summary = yearly_plan.summary
    console.print(
        Panel.fit(
            f"{summary.starting_mileage} → {summary.target_mileage} mi/week "
            f"({summary.increase_percent:+d}%), {summary.total_year_mileage:.0f} mi total, "
            f"{summary.deload_weeks} deload weeks",
            title=f"📅 {yearly_plan.year} plan ({summary.progression_type.value})",
            style="bold blue",
        )
    )

    table = Table(title="Quarterly Breakdown", box=box.ROUNDED)
    table.add_column("Quarter", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Avg / week", justify="right")
    for quarter in planner.quarterly_breakdown(yearly_plan):
        table.add_row(quarter.quarter, f"{quarter.total_mileage:.0f}", f"{quarter.avg_weekly_mileage:.1f}")
    console.print(table)


@plan.command("generate")
@click.option("--starting-mileage", type=float, help="Weekly mileage to start from (defaults to this year's average)")
@click.option("--increase", default=config.DEFAULT_TARGET_INCREASE, help="Target increase over the year (percent)")
@click.option("--aggressive", is_flag=True, help="Use the aggressive progression type")
@click.option("--no-deload", is_flag=True, help="Skip deload weeks")
@click.option("--save/--no-save", default=True, help="Store the plan")
def plan_generate(starting_mileage, increase, aggressive, no_deload, save):
    """Generate next year's progressive mileage plan."""
    records, _ = _load_history(DailyRecordRepository())
    planner = YearlyProgressionPlanner()
    current = planner.analyze_current_training(records)

    yearly_plan = planner.generate_yearly_plan(
        current_training=current,
        starting_mileage=starting_mileage,
        target_increase=increase,
        include_deload_weeks=not no_deload,
        progression_type=ProgressionType.AGGRESSIVE if aggressive else ProgressionType.CONSERVATIVE,
    )
    if yearly_plan is None:
        console.print("[yellow]No running data this year. Pass --starting-mileage to plan anyway.[/yellow]")
        return

    _print_plan(planner, yearly_plan)
    for line in planner.generate_recommendations(current):
        console.print(f"  • {line}")

    if save:
        planner.save_plan(GoalStore(), yearly_plan)
        console.print("[green]✅ Plan saved[/green]")


@plan.command("custom")
@click.option("--file", "values_file", required=True, help="File with 52 weekly mileage values")
def plan_custom(values_file):
    """Save a custom plan from 52 weekly values (comma or newline separated)."""
    path = Path(values_file)
    if not path.exists():
        console.print(f"[red]❌ File not found: {values_file}[/red]")
        return

    values = [token.strip() for token in path.read_text().replace(",", "\n").splitlines() if token.strip()]
    planner = YearlyProgressionPlanner()
    result = planner.save_custom_plan(GoalStore(), values)
    if not result.is_valid:
        console.print(f"[red]❌ Plan rejected: {result.reason}[/red]")
        return

    _print_plan(planner, planner.load_plan(GoalStore()))
    console.print("[green]✅ Custom plan saved[/green]")


@plan.command("show")
def plan_show():
    """Show the stored plan."""
    planner = YearlyProgressionPlanner()
    yearly_plan = planner.load_plan(GoalStore())
    if yearly_plan is None:
        console.print("[yellow]No plan saved. Use 'athlete-signal plan generate'.[/yellow]")
        return
    _print_plan(planner, yearly_plan)


@plan.command("clear")
def plan_clear():
    """Delete the stored plan."""
    YearlyProgressionPlanner().save_plan(GoalStore(), None)
    console.print("[green]✅ Plan cleared[/green]")


@plan.command("progress")
@click.option("--week", type=int, help="Plan week to check (defaults to the current week)")
def plan_progress(week):
    """Compare this week's mileage with the plan."""
    planner = YearlyProgressionPlanner()
    yearly_plan = planner.load_plan(GoalStore())
    if yearly_plan is None:
        console.print("[yellow]No plan saved.[/yellow]")
        return

    records, end = _load_history(DailyRecordRepository())
    # Plan week N is compared with ISO week N of the latest record's year
    reference = end or planner.today
    if week is None:
        week = current_week_of_year(reference)
    iso_year = reference.year
    actual = sum(
        record.distance for record in records if record.date.isocalendar()[:2] == (iso_year, week)
    )

    progress = planner.check_weekly_progress(yearly_plan, actual, week)
    if progress is None:
        console.print("[yellow]That week is not in the plan.[/yellow]")
        return

    status = "[green]on track[/green]" if progress.is_on_track else "[orange3]off track[/orange3]"
    console.print(
        f"Week {progress.week}: {progress.actual:.1f} / {progress.planned:.1f} mi "
        f"(range {progress.min:.1f}-{progress.max:.1f}) {status}"
    )
    if progress.percent_complete is not None:
        console.print(f"{progress.percent_complete}% of planned mileage")


if __name__ == "__main__":
    cli()
