"""Enrichment Tracker CLI."""

from pathlib import Path
from typing import Optional

import typer

from enrichment_tracker.core.settings import get_settings

app = typer.Typer(
    name="enrichment",
    help="Enrichment tracker API and database CLI",
    no_args_is_help=True,
)


# Database commands
db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")


@db_app.command("migrate")
def db_migrate(
    migrations_path: Optional[str] = typer.Option(
        None, help="Path to migrations directory (defaults to the bundled one)"
    ),
):
    """Apply pending SQL migrations."""
    import psycopg

    from enrichment_tracker.core import database

    migrations_dir = Path(migrations_path) if migrations_path else None
    try:
        applied = database.init_db(migrations_dir)
    except FileNotFoundError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)
    except psycopg.Error as e:
        typer.echo(f"Migration failed: {e}", err=True)
        raise typer.Exit(1)

    if not applied:
        typer.echo("Database is up to date")
        return
    for name in applied:
        typer.echo(f"  Applied: {name}")
    typer.echo("Migrations complete")


@db_app.command("check")
def db_check():
    """Check connectivity and list applied migrations."""
    import psycopg

    from enrichment_tracker.core import database

    settings = get_settings()
    typer.echo(f"Database host: {settings.database_host}")
    try:
        with database.get_connection() as conn:
            applied = database.applied_migrations(conn)
    except psycopg.Error as e:
        typer.echo(f"  ✗ Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("  ✓ Connected")
    typer.echo(f"  Migrations applied: {len(applied)}")
    for name in applied:
        typer.echo(f"    {name}")


@db_app.command("reset")
def db_reset(
    confirm: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Reset database (drop all tables)."""
    if not confirm:
        confirm = typer.confirm("This will drop all tables. Continue?")
        if not confirm:
            raise typer.Abort()

    from enrichment_tracker.core import database

    dropped = database.reset_db()
    typer.echo(f"Database reset complete ({dropped} tables dropped)")


# Job commands
jobs_app = typer.Typer(help="Enrichment job commands")
app.add_typer(jobs_app, name="jobs")


@jobs_app.command("list")
def jobs_list(
    status: Optional[str] = typer.Option(None, help="Filter by status"),
    domain: Optional[str] = typer.Option(None, help="Filter by domain"),
    limit: int = typer.Option(20, help="Max results"),
):
    """List jobs, newest first."""
    from enrichment_tracker.core.models import JobStatus
    from enrichment_tracker.repositories import JobRepository

    try:
        status_enum = JobStatus(status) if status else None
    except ValueError:
        typer.echo(f"Unknown status: {status}", err=True)
        raise typer.Exit(1)

    rows, total = JobRepository().list_jobs(status=status_enum, domain=domain, limit=limit)
    if not rows:
        typer.echo("No jobs found")
        return

    for job in rows:
        typer.echo(
            f"{str(job['id'])[:8]}... | {job['domain']:30} | {job['status']:15} | "
            f"{job.get('facts_extracted') or 0:>5} facts | {job['created_at']}"
        )
    typer.echo(f"\nShowing {len(rows)} of {total}")


@jobs_app.command("show")
def jobs_show(job_id: str = typer.Argument(..., help="Job ID")):
    """Show a job's status, step states and counters."""
    from enrichment_tracker.core.models import is_uuid
    from enrichment_tracker.repositories import JobRepository
    from enrichment_tracker.services.pipeline import workflow_summary

    job = JobRepository().get(job_id) if is_uuid(job_id) else None
    if job is None:
        typer.echo("Job not found", err=True)
        raise typer.Exit(1)

    typer.echo(f"Domain: {job['domain']}")
    typer.echo(f"Status: {job['status']}")
    typer.echo(f"Created: {job['created_at']}")
    if job.get("started_at"):
        typer.echo(f"Started: {job['started_at']}")
    if job.get("completed_at"):
        typer.echo(f"Completed: {job['completed_at']}")
    if job.get("error_message"):
        typer.echo(f"Error: {job['error_message']}")

    workflow = workflow_summary(job)
    typer.echo(f"Steps ({workflow['completedSteps']}/{workflow['totalSteps']} completed):")
    for step in workflow["steps"]:
        typer.echo(f"  {step['name']:16} {step['status'] or 'pending'}")


@jobs_app.command("create")
def jobs_create(
    domain: str = typer.Argument(..., help="Company domain"),
    llm: Optional[str] = typer.Option(None, help="Model the runner should use"),
):
    """Create a pending job for a domain."""
    from enrichment_tracker.core.domains import normalize_domain, validate_domain
    from enrichment_tracker.repositories import JobRepository

    normalized = normalize_domain(domain)
    if not validate_domain(domain) or not validate_domain(normalized):
        typer.echo(f"Invalid domain: {domain}", err=True)
        raise typer.Exit(1)

    job = JobRepository().create(normalized, llm_used=llm or get_settings().default_llm)
    typer.echo(f"Job created: {job['id']}")


@jobs_app.command("delete")
def jobs_delete(
    job_id: str = typer.Argument(..., help="Job ID"),
    confirm: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a job and everything recorded for it."""
    if not confirm:
        confirm = typer.confirm(f"Delete job {job_id} and all of its facts and logs?")
        if not confirm:
            raise typer.Abort()

    from enrichment_tracker.core.models import is_uuid
    from enrichment_tracker.repositories import JobRepository

    if not is_uuid(job_id) or not JobRepository().delete(job_id):
        typer.echo("Job not found", err=True)
        raise typer.Exit(1)
    typer.echo("Job deleted")


# Fact commands
facts_app = typer.Typer(help="Fact review commands")
app.add_typer(facts_app, name="facts")


def _review_fact(fact_id: str, status) -> None:
    from enrichment_tracker.core.models import is_uuid
    from enrichment_tracker.repositories import FactRepository

    fact = FactRepository().set_status(fact_id, status) if is_uuid(fact_id) else None
    if fact is None:
        typer.echo("Fact not found", err=True)
        raise typer.Exit(1)
    typer.echo(f"Fact {fact_id} {status.value}")


@facts_app.command("approve")
def facts_approve(fact_id: str = typer.Argument(..., help="Fact ID")):
    """Mark a fact as approved."""
    from enrichment_tracker.core.models import FactStatus

    _review_fact(fact_id, FactStatus.APPROVED)


@facts_app.command("reject")
def facts_reject(fact_id: str = typer.Argument(..., help="Fact ID")):
    """Mark a fact as rejected."""
    from enrichment_tracker.core.models import FactStatus

    _review_fact(fact_id, FactStatus.REJECTED)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address"),
    port: Optional[int] = typer.Option(None, help="Bind port"),
    reload: Optional[bool] = typer.Option(None, help="Reload on code changes"),
):
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "enrichment_tracker.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=settings.api_reload if reload is None else reload,
    )


if __name__ == "__main__":
    app()
