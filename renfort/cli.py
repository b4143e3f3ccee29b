"""
Renfort Command Line Interface

Operator commands for the matching service: database setup, mission
creation, candidate search, applications and mission status changes.
"""

from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="renfort",
    help="SOS Renfort mission matching CLI",
    add_completion=False,
)
console = Console()


def _require_database() -> None:
    """Exit unless MongoDB answers."""
    from renfort.data.database import get_database_manager

    if not get_database_manager().ping():
        console.print("[red]Error: Could not connect to MongoDB. Run 'init-db' first.[/red]")
        raise typer.Exit(1)


def _fail(error: Exception) -> None:
    console.print(f"[red]Error: {error}[/red]")
    raise typer.Exit(1)


@app.command()
def version():
    """Show application version."""
    from renfort import __version__, __app_name__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show configuration."""
    from renfort.utils.config import get_settings

    settings = get_settings()

    table = Table(title="Renfort Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Database Host", settings.database.host)
    table.add_row("Database Name", settings.database.name)
    table.add_row("Default Radius (km)", str(settings.matching.default_radius_km))
    table.add_row("Default Limit", str(settings.matching.default_limit))
    table.add_row("SMTP Host", settings.mail.smtp_host or "not configured")
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_db():
    """Initialize the database with required indexes."""
    import asyncio

    from renfort.data.database import get_database_manager

    console.print("[yellow]Initializing database...[/yellow]")
    _require_database()
    console.print("  [green]✓[/green] Connected to MongoDB")

    try:
        console.print("  Creating indexes...")
        asyncio.run(get_database_manager().ensure_indexes())
        console.print("  [green]✓[/green] Indexes created")
    except Exception as e:
        _fail(e)

    console.print("\n[green]Database initialized successfully![/green]")


@app.command()
def create_mission(
    client_id: str = typer.Option(..., "--client", help="Client user ID"),
    job_title: str = typer.Option(..., "--job-title", "-j", help="Job title, e.g. 'Aide-soignant'"),
    start: datetime = typer.Option(..., "--start", help="Start date/time (ISO)"),
    end: Optional[datetime] = typer.Option(None, "--end", help="End date/time (defaults to start + 8h)"),
    hourly_rate: float = typer.Option(..., "--rate", help="Hourly rate in EUR"),
    city: str = typer.Option(..., "--city"),
    postal_code: str = typer.Option(..., "--postal-code"),
    latitude: Optional[float] = typer.Option(None, "--lat"),
    longitude: Optional[float] = typer.Option(None, "--lng"),
    radius_km: Optional[float] = typer.Option(None, "--radius", help="Search radius in km"),
    urgency: str = typer.Option("HIGH", "--urgency", "-u", help="LOW, MEDIUM, HIGH or CRITICAL"),
    night_shift: bool = typer.Option(False, "--night", help="Night shift"),
    skills: Optional[list[str]] = typer.Option(None, "--skill", "-s", help="Required skill (repeatable)"),
    diplomas: Optional[list[str]] = typer.Option(None, "--diploma", "-d", help="Required diploma (repeatable)"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Custom mission title"),
):
    """Create a relief mission."""
    from renfort.core.exceptions import RenfortError
    from renfort.core.matching import get_matching_engine

    _require_database()

    try:
        mission = get_matching_engine().create_mission(
            {
                "job_title": job_title,
                "title": title,
                "hourly_rate": hourly_rate,
                "is_night_shift": night_shift,
                "urgency_level": urgency.upper(),
                "start_date": start,
                "end_date": end,
                "city": city,
                "postal_code": postal_code,
                "latitude": latitude,
                "longitude": longitude,
                "radius_km": radius_km,
                "required_skills": skills or [],
                "required_diplomas": diplomas or [],
            },
            client_id,
        )
    except RenfortError as e:
        _fail(e)

    console.print(f"[green]✓ Mission created:[/green] [cyan]{mission.id}[/cyan] - {mission.title}")


@app.command()
def find_candidates(
    mission_id: str = typer.Argument(..., help="Mission ID to staff"),
    skills: Optional[list[str]] = typer.Option(None, "--skill", "-s", help="Extra required skill (repeatable)"),
    radius_km: Optional[float] = typer.Option(None, "--radius", "-r", help="Override search radius in km"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Number of candidates to show (defaults to MATCHING_DEFAULT_LIMIT)"),
):
    """Find and rank candidates for a mission."""
    from renfort.core.exceptions import RenfortError
    from renfort.core.matching import get_matching_engine

    _require_database()

    try:
        result = get_matching_engine().find_candidates(
            mission_id, {"skills": skills or [], "radius_km": radius_km, "limit": limit}
        )
    except RenfortError as e:
        _fail(e)

    if not result.candidates:
        console.print(f"[yellow]No candidates within {result.search_radius:g} km.[/yellow]")
        raise typer.Exit(0)

    table = Table(
        title=f"Top {len(result.candidates)} of {result.total_found} candidates "
        f"({result.search_radius:g} km)"
    )
    table.add_column("Rank", style="dim", width=4)
    table.add_column("Talent", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Rating", justify="right")
    table.add_column("Missions", justify="right")
    table.add_column("Available", justify="center")
    table.add_column("User ID", style="dim")

    for rank, candidate in enumerate(result.candidates, start=1):
        score_style = "green" if candidate.match_score >= 70 else "yellow" if candidate.match_score >= 50 else "red"
        table.add_row(
            str(rank),
            f"{candidate.first_name} {candidate.last_name}",
            f"[{score_style}]{candidate.match_score}[/{score_style}]",
            f"{candidate.distance:.1f} km",
            f"{candidate.average_rating:.1f}",
            str(candidate.total_missions),
            "[green]✓[/green]" if candidate.is_available else "[red]✗[/red]",
            candidate.user_id,
        )

    console.print(table)


@app.command()
def apply(
    mission_id: str = typer.Argument(..., help="Mission ID"),
    talent_id: str = typer.Argument(..., help="Talent user ID"),
    cover_letter: Optional[str] = typer.Option(None, "--cover-letter", "-m"),
    proposed_rate: Optional[float] = typer.Option(None, "--rate", help="Proposed hourly rate"),
):
    """Apply a talent to a mission."""
    from renfort.core.exceptions import RenfortError
    from renfort.core.matching import get_matching_engine

    _require_database()

    try:
        application = get_matching_engine().apply_to_mission(
            mission_id, talent_id, cover_letter, proposed_rate
        )
    except RenfortError as e:
        _fail(e)

    console.print(f"[green]✓ Application {application.id} recorded ({application.status})[/green]")


@app.command()
def show_mission(
    mission_id: str = typer.Argument(..., help="Mission ID to display"),
):
    """Show a mission and its applications."""
    from renfort.core.exceptions import RenfortError
    from renfort.core.matching import get_matching_engine

    _require_database()

    try:
        details = get_matching_engine().get_mission_with_applications(mission_id)
    except RenfortError as e:
        _fail(e)

    mission = details.mission
    console.print(f"\n[bold cyan]Mission Details[/bold cyan]")
    console.print(f"[dim]{'─' * 50}[/dim]")
    console.print(f"[bold]ID:[/bold] {mission.id}")
    console.print(f"[bold]Title:[/bold] {mission.title}")
    console.print(f"[bold]Status:[/bold] {mission.status}")
    console.print(f"[bold]Urgency:[/bold] {mission.urgency_level}")
    console.print(f"[bold]Start:[/bold] {mission.start_date}  [bold]End:[/bold] {mission.end_date}")
    console.print(f"[bold]Location:[/bold] {mission.address} ({mission.postal_code} {mission.city})")
    if mission.required_skills:
        console.print(f"[bold]Required Skills:[/bold] {', '.join(mission.required_skills)}")
    if mission.required_diplomas:
        console.print(f"[bold]Required Diplomas:[/bold] {', '.join(mission.required_diplomas)}")

    if not details.applications:
        console.print("\n[dim]No applications yet.[/dim]")
        return

    table = Table(title=f"Applications ({details.application_count})")
    table.add_column("Talent ID", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Proposed Rate", justify="right")
    table.add_column("Applied", style="dim")
    for application in details.applications:
        table.add_row(
            str(application.talent_id),
            application.status,
            f"{application.proposed_rate:.2f}" if application.proposed_rate is not None else "-",
            application.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@app.command()
def set_status(
    mission_id: str = typer.Argument(..., help="Mission ID"),
    action: str = typer.Argument(..., help="assign, start, complete or cancel"),
    talent_id: Optional[str] = typer.Option(None, "--talent", help="Talent to assign (assign only)"),
):
    """Move a mission through its lifecycle."""
    from renfort.core.exceptions import RenfortError
    from renfort.core.matching import get_matching_engine

    _require_database()
    engine = get_matching_engine()

    actions = {
        "assign": lambda: engine.assign_mission(mission_id, talent_id),
        "start": lambda: engine.start_mission(mission_id),
        "complete": lambda: engine.complete_mission(mission_id),
        "cancel": lambda: engine.cancel_mission(mission_id),
    }
    if action not in actions:
        console.print(f"[red]Unknown action: {action}[/red]")
        raise typer.Exit(1)

    try:
        mission = actions[action]()
    except RenfortError as e:
        _fail(e)

    console.print(f"[green]✓ Mission {mission.id} is now {mission.status}[/green]")


if __name__ == "__main__":
    app()
