"""Command-line interface for EduInsight."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from analytics import ALL_CATEGORIES, filter_by_category, rank_by_quality, system_health
from eduinsight.config import get_settings
from eduinsight.logging_setup import configure_logging
from models import RiskLevel, TeacherStats
from orchestration import DashboardService, create_dashboard_service

app = typer.Typer(
    name="eduinsight",
    help="EduInsight - Teacher quality analytics from student feedback",
    add_completion=False,
)

console = Console()

RISK_STYLES = {
    RiskLevel.HIGH: "bold red",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.LOW: "green",
}

OFFLINE_OPTION = typer.Option(False, "--offline", help="Use built-in data and skip the LLM")


async def _start(offline: bool) -> DashboardService:
    settings = get_settings()
    configure_logging(settings.app.effective_log_level)
    service = create_dashboard_service(settings, offline=offline)
    await service.initialize()
    await service.wait_for_summaries()
    return service


def _risk(level: RiskLevel) -> str:
    return f"[{RISK_STYLES[level]}]{level.value}[/{RISK_STYLES[level]}]"


def _print_stats(service: DashboardService, stats: TeacherStats) -> None:
    teacher = service.state.find_teacher(stats.teacher_id)
    title = f"{teacher.name} - {teacher.subject}" if teacher else stats.teacher_id

    console.print(Panel.fit(
        f"Quality score: [bold]{stats.quality_score:.2f}[/bold]\n"
        f"Average rating: {stats.average_rating:.2f}\n"
        f"Reviews: {stats.total_reviews}\n"
        f"Risk: {_risk(stats.risk_level)}\n\n"
        f"{stats.ai_summary.display()}",
        title=title,
    ))

    if stats.top_topics:
        topics = Table(title="Top topics")
        topics.add_column("Topic")
        topics.add_column("Mentions", justify="right")
        topics.add_column("Sentiment", justify="right")
        for topic in stats.top_topics:
            topics.add_row(topic.topic, str(topic.count), f"{topic.sentiment:+.2f}")
        console.print(topics)

    if stats.sentiment_trend:
        trend = Table(title="Sentiment trend")
        trend.add_column("Date")
        trend.add_column("Score", justify="right")
        for point in stats.sentiment_trend:
            trend.add_row(point.date.strftime("%Y-%m-%d %H:%M"), f"{point.score:+.2f}")
        console.print(trend)


@app.command()
def version():
    """Show version information."""
    from eduinsight import __version__

    console.print(Panel.fit(
        f"[bold blue]EduInsight[/bold blue]\n"
        f"Version: [green]{__version__}[/green]",
        title="Version Info"
    ))


@app.command()
def dashboard(
    category: str = typer.Option(
        ALL_CATEGORIES,
        "--category",
        "-c",
        help="All, School, University or Professional",
    ),
    offline: bool = OFFLINE_OPTION,
):
    """Show system health and the teacher quality ranking."""
    service = asyncio.run(_start(offline))
    state = service.state

    try:
        visible = filter_by_category(state.stats, state.teachers, category)
    except ValueError:
        console.print(f"[red]Unknown category: {category}[/red]")
        raise typer.Exit(code=2)

    health = system_health(state.stats)
    console.print(Panel.fit(
        f"System quality: [bold]{health.average_quality:.1f}[/bold]\n"
        f"Total feedback: {health.total_reviews}\n"
        f"Intervention needed: [red]{health.high_risk_count}[/red]",
        title="EduInsight Dashboard",
    ))

    table = Table(title=f"Teachers ({category})")
    table.add_column("ID")
    table.add_column("Teacher")
    table.add_column("Score", justify="right")
    table.add_column("Rating", justify="right")
    table.add_column("Risk")
    for row in rank_by_quality(visible, state.teachers):
        table.add_row(row.teacher_id, row.name, f"{row.score:.2f}", f"{row.rating:.2f}", _risk(row.risk_level))
    console.print(table)


@app.command()
def teacher(
    teacher_id: str = typer.Argument(..., help="Teacher id, e.g. p_python"),
    offline: bool = OFFLINE_OPTION,
):
    """Show detailed stats for one teacher."""
    service = asyncio.run(_start(offline))
    stats = service.state.find_stats(teacher_id)
    if stats is None:
        console.print(f"[red]Unknown teacher: {teacher_id}[/red]")
        raise typer.Exit(code=1)
    _print_stats(service, stats)


@app.command()
def submit(
    teacher_id: str = typer.Argument(..., help="Teacher id the feedback is about"),
    rating: float = typer.Option(..., "--rating", "-r", min=1, max=10, help="Rating from 1 to 10"),
    comment: str = typer.Option(..., "--comment", "-m", help="Feedback comment"),
    offline: bool = OFFLINE_OPTION,
):
    """Submit anonymous feedback and show the teacher's updated stats."""

    async def run() -> Optional[DashboardService]:
        service = await _start(offline)
        try:
            await service.submit_feedback(teacher_id, rating, comment)
        except ValueError as e:
            console.print(f"[red]❌ {e}[/red]")
            return None
        await service.wait_for_summaries()
        return service

    service = asyncio.run(run())
    if service is None:
        raise typer.Exit(code=1)

    console.print("[green]✅ Feedback recorded[/green]")
    _print_stats(service, service.state.find_stats(teacher_id))


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
