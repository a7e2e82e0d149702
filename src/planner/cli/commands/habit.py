"""Habit tracking commands."""

import click
from planner.cli.error_handling import handle_domain_error
from planner.domain.errors import NotFoundError, habit_not_found
from planner.domain.habits import HabitTracker
from planner.utils.date_parser import parse_date


def _tracker_with(ctx, habit_id: str) -> HabitTracker | None:
    tracker = HabitTracker(ctx.obj["storage"])
    if tracker.get(habit_id) is None:
        handle_domain_error(ctx, NotFoundError(habit_not_found(habit_id)))
        return None
    return tracker


@click.group()
def habit_group():
    """Track habits and their momentum."""
    pass


@habit_group.command("add")
@click.argument("name")
@click.option(
    "--frequency",
    type=click.Choice(["daily", "weekly"], case_sensitive=False),
    default="daily",
    help="How often the habit is meant to be done (default: daily)",
)
@click.option("--target", "target_per_week", type=click.IntRange(1, 7), default=7, help="Target days per week")
@click.option("--description", default="", help="Optional description")
@click.pass_context
def add_habit(ctx, name: str, frequency: str, target_per_week: int, description: str):
    """Create a habit."""
    tracker = HabitTracker(ctx.obj["storage"])
    habit = tracker.add(
        name=name,
        description=description,
        frequency=frequency.lower(),
        target_per_week=target_per_week,
    )
    click.echo(f"Created habit '{name}' (ID: {habit.id})")


@habit_group.command("list")
@click.option("--as-of", "as_of", help="Day to score as of (default: today)")
@click.pass_context
def list_habits(ctx, as_of: str | None):
    """Show every habit with its strength and streak."""
    tracker = HabitTracker(ctx.obj["storage"])
    try:
        day = parse_date(as_of) if as_of else None
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    dashboard = tracker.dashboard(day)
    if not dashboard.computed:
        click.echo("No habits found.")
        return

    click.echo(f"\nMomentum: {dashboard.overall_strength}% | Mastered: {dashboard.mastered_count}")
    click.echo("-" * 60)
    for item in dashboard.computed:
        mark = "x" if item.done_today else " "
        click.echo(
            f"[{mark}] {item.habit.name:20s} | strength {item.score.strength:3d} | "
            f"streak {item.score.streak:3d} | week {item.week_done}/{item.habit.target_per_week} "
            f"| ID: {item.habit.id}"
        )


@habit_group.command("checkin")
@click.argument("habit_id")
@click.option("--on", "on", help="Day to toggle (default: today)")
@click.pass_context
def checkin(ctx, habit_id: str, on: str | None):
    """Toggle a habit's check-in for a day."""
    tracker = _tracker_with(ctx, habit_id)
    if tracker is None:
        return
    try:
        day = parse_date(on) if on else tracker.today()
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    tracker.toggle_checkin(habit_id, day)
    done = day.isoformat() in tracker.get(habit_id).checkins_iso
    click.echo(f"{'Checked in' if done else 'Removed check-in'} for {day.isoformat()}")


@habit_group.command("mastery")
@click.argument("habit_id")
@click.argument("value", type=int)
@click.pass_context
def set_mastery(ctx, habit_id: str, value: int):
    """Set self-reported mastery (0-100)."""
    tracker = _tracker_with(ctx, habit_id)
    if tracker is None:
        return
    tracker.set_mastery(habit_id, value)
    click.echo(f"Mastery set to {tracker.get(habit_id).mastery}")


@habit_group.command("remove")
@click.argument("habit_id")
@click.pass_context
def remove_habit(ctx, habit_id: str):
    """Delete a habit."""
    tracker = _tracker_with(ctx, habit_id)
    if tracker is None:
        return
    tracker.remove(habit_id)
    click.echo(f"Removed habit {habit_id}")


def register_commands(cli):
    """Register habit commands with main CLI."""
    cli.add_command(habit_group, name="habit")
