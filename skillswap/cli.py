"""
Command-line interface for skillswap.

Provides commands to run the API server, initialize the database,
and recompute or inspect scores by hand.

Usage:
    skillswap serve                              # Run the API server
    skillswap init-db                            # Initialize database
    skillswap create-user NAME EMAIL             # Register a user
    skillswap recompute-skill USER SKILL NAME    # Recompute one skill score
    skillswap recompute-credibility USER         # Recompute credibility
    skillswap show-credibility USER              # Print the dashboard view
    skillswap health                             # Check service health
"""

import asyncio
import os
import sys

import click

from skillswap.config.settings import get_settings
from skillswap.observability.logging import setup_logging
from skillswap.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """skillswap - peer tutoring with skill and credibility scoring."""
    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


def _run_with_scoring(coro_factory):
    """Run ``coro_factory(scoring_service)`` against a fresh connection."""
    from skillswap.scoring.service import ScoringService
    from skillswap.storage.database import Database

    async def run():
        async with Database() as db:
            return await coro_factory(ScoringService.from_database(db))

    return asyncio.run(run())


@main.command("init-db")
def init_db() -> None:
    """Initialize the database schema."""
    from skillswap.storage.database import Database
    from skillswap.storage.schema import create_all_tables

    async def run():
        async with Database() as db:
            await create_all_tables(db)
        click.echo("Database initialized successfully")

    asyncio.run(run())


@main.command("create-user")
@click.argument("name")
@click.argument("email")
@click.option("--teach", multiple=True, help="Skill the user can teach (repeatable)")
@click.option("--learn", multiple=True, help="Skill the user wants to learn (repeatable)")
def create_user(name: str, email: str, teach: tuple[str, ...], learn: tuple[str, ...]) -> None:
    """Register a user, optionally with skill listings."""
    from skillswap.errors import SkillSwapError
    from skillswap.storage.database import Database
    from skillswap.users.repository import UserRepository
    from skillswap.users.service import UserService

    async def run():
        async with Database() as db:
            service = UserService(UserRepository(db))
            user = await service.register(name, email)
            listings = [
                await service.add_skill(user.user_id, skill, kind)
                for kind, skills in (("teach", teach), ("learn", learn))
                for skill in skills
            ]
            return user, listings

    try:
        user, listings = asyncio.run(run())
    except SkillSwapError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Created user {user.user_id} ({user.email})")
    for listing in listings:
        click.echo(f"  {listing.kind}: {listing.skill_name} [{listing.skill_id}]")


@main.command("recompute-skill")
@click.argument("user_id")
@click.argument("skill_id")
@click.argument("skill_name")
def recompute_skill(user_id: str, skill_id: str, skill_name: str) -> None:
    """Recompute one user's score for one skill."""
    score = _run_with_scoring(
        lambda service: service.recompute_skill_score(user_id, skill_id, skill_name)
    )
    click.echo(f"Skill score for {user_id} / {skill_name}: {score.final_score}")
    click.echo(f"  assignments: {score.assignment_avg}")
    click.echo(f"  feedback:    {score.feedback_avg}")
    click.echo(f"  sessions:    {score.session_count}")


@main.command("recompute-credibility")
@click.argument("user_id")
def recompute_credibility(user_id: str) -> None:
    """Recompute one user's credibility score."""
    result = _run_with_scoring(
        lambda service: service.recompute_credibility_score(user_id)
    )
    stats = result.stats
    click.echo(f"Credibility for {user_id}: {result.credibility_score}")
    click.echo(f"  avg skill score:     {stats.avg_skill_score}")
    click.echo(f"  avg teaching rating: {stats.avg_teaching_rating}")
    click.echo(f"  completed sessions:  {stats.session_count}")
    click.echo(f"  consistency bonus:   +{stats.consistency_bonus}")


@main.command("show-credibility")
@click.argument("user_id")
def show_credibility(user_id: str) -> None:
    """Print a user's credibility dashboard."""
    view = _run_with_scoring(lambda service: service.get_credibility(user_id))

    click.echo(f"\nCredibility: {view.credibility_score}")
    click.echo("-" * 40)
    click.echo(f"  sessions completed: {view.sessions_completed}")
    click.echo(f"  students taught:    {view.students_count}")
    click.echo(f"  teaching hours:     {view.teaching_hours}")
    click.echo(f"  average rating:     {view.avg_rating} ({view.total_reviews} reviews)")
    for stars, percent in view.rating_breakdown.items():
        click.echo(f"    {stars}*: {percent}%")
    click.echo(f"  skills taught:      {view.skills_taught_count}")
    click.echo(f"  skills learned:     {view.skills_learned_count}")
    if view.upcoming_sessions:
        click.echo("  upcoming:")
        for s in view.upcoming_sessions:
            when = s.scheduled_at.isoformat() if s.scheduled_at else "unscheduled"
            click.echo(f"    {when}  {s.skill} ({s.role})")


@main.command()
def health() -> None:
    """Check health of all dependencies."""
    import structlog
    logger = structlog.get_logger()

    async def check():
        results: dict[str, bool] = {}
        settings = get_settings()

        try:
            import redis.asyncio as redis

            client = redis.from_url(str(settings.redis_url))
            results["redis"] = bool(await client.ping())
            await client.aclose()
        except Exception as e:
            results["redis"] = False
            logger.error("Redis health check failed", error=str(e))

        try:
            from skillswap.storage.database import Database

            async with Database() as db:
                results["postgres"] = await db.health_check()
        except Exception as e:
            results["postgres"] = False
            logger.error("Postgres health check failed", error=str(e))

        from skillswap.assignments.config import AssignmentConfig

        assignment_config = AssignmentConfig()
        results["question_api_configured"] = assignment_config.gemini_api_key is not None

        click.echo("\nHealth Check Results:")
        click.echo("-" * 40)

        all_healthy = True
        for name, status in results.items():
            icon = "✓" if status else "✗"
            color = "green" if status else "red"
            click.echo(click.style(f"  {icon} {name}: {status}", fg=color))
            if name == "postgres" and not status:
                all_healthy = False
            if (
                name == "redis"
                and not status
                and assignment_config.cache_backend == "redis"
            ):
                all_healthy = False

        click.echo("-" * 40)

        if all_healthy:
            click.echo(click.style("All core services healthy!", fg="green"))
            sys.exit(0)
        else:
            click.echo(click.style("Some services unhealthy!", fg="red"))
            sys.exit(1)

    asyncio.run(check())


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "skillswap.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
