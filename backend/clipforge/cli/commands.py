"""CLI commands for clipforge using Typer and Rich.

Implements the operator commands:
- init-db: Create database tables
- create-user: Register an account
- generate: Create a project and run the pipeline in-process
- status: Show detailed project information
- list: List a user's projects in a table
- sweep: Fail projects orphaned in processing status
- serve: Run the API server
"""

import asyncio
import getpass
import uuid

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy import select

from clipforge import configure_logging, validate_configuration
from clipforge.config import settings
from clipforge.db import async_session, init_database, shutdown
from clipforge.db.models import PipelineRun
from clipforge.errors import BadRequest
from clipforge.orchestrator.pipeline import build_pipeline, run_project
from clipforge.orchestrator.state import COMPLETED, FAILED, PROCESSING
from clipforge.services import auth, project_store
from clipforge.workers.processing_tasks import fail_orphaned_projects

app = typer.Typer(name="clipforge", help="AI-powered short-form video and script generation")
console = Console()


@app.callback()
def main():
    configure_logging(settings)


@app.command("init-db")
def init_db():
    """Create any missing database tables."""
    asyncio.run(_run(init_database()))
    console.print(f"[green]Database ready:[/green] {settings.storage.database_url}")


@app.command("create-user")
def create_user(
    email: str = typer.Argument(..., help="Account email"),
    password: str = typer.Option(None, "--password", "-p", help="Password (prompted when omitted)"),
):
    """Register an account."""
    if not password:
        password = getpass.getpass("Password: ")
    if not password:
        console.print("[red]Error:[/red] Password must not be empty")
        raise typer.Exit(code=1)
    asyncio.run(_run(_create_user_async(email, password)))


async def _create_user_async(email: str, password: str):
    await init_database()
    async with async_session() as session:
        try:
            user = await auth.register_user(session, email, password)
        except BadRequest as e:
            console.print(f"[red]Error:[/red] {e.detail}")
            raise typer.Exit(code=1)
    console.print(f"[green]Created user:[/green] {user.email} ({user.id})")


@app.command()
def generate(
    prompt: str = typer.Argument(..., help="What the content should be about"),
    content_type: str = typer.Option("tiktok", "--type", "-t", help="Content type (tiktok, reels, shorts, vsl, ads, roteiro, custom)"),
    email: str = typer.Option(..., "--email", "-e", help="Owner account email"),
):
    """Create a project and run the full pipeline in this process.

    Runs validation, script, image, audio, video and hosting, then prints
    the stored result.
    """
    # Fail-fast configuration validation
    try:
        validate_configuration(settings)
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(code=1)

    asyncio.run(_run(_generate_async(prompt, content_type, email)))


async def _generate_async(prompt: str, content_type: str, email: str):
    await init_database()
    pipeline = build_pipeline(settings)

    try:
        async with async_session() as session:
            user = await project_store.get_user_by_email(session, email)
            if user is None:
                console.print(f"[red]Error:[/red] No account for {email}")
                raise typer.Exit(code=1)

            project = await project_store.create_project(session, user.id, content_type, prompt)
            console.print(f"[green]Created project:[/green] {project.id}")
            console.print()

            with console.status("[bold green]Running pipeline..."):
                result = await run_project(session, project.id, pipeline)

        if result.rejected:
            console.print(f"[red]✗ {result.error}[/red]")
        else:
            console.print("[green]✓[/green] Pipeline complete" + (" (with fallbacks)" if result.degraded else ""))
        await _status_async(str(project.id))
    finally:
        await pipeline.close()


@app.command()
def status(
    project_id: str = typer.Argument(..., help="Project UUID"),
):
    """Show detailed project status and information."""
    asyncio.run(_run(_status_async(project_id)))


async def _status_async(project_id_str: str):
    """Async implementation of status command."""
    # Parse UUID
    try:
        project_uuid = uuid.UUID(project_id_str)
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid project UUID: {project_id_str}")
        raise typer.Exit(code=1)

    await init_database()

    async with async_session() as session:
        project = await project_store.get_project(session, project_uuid)
        if not project:
            console.print(f"[red]Error:[/red] Project not found: {project_uuid}")
            raise typer.Exit(code=1)

        # Query latest pipeline run
        run_result = await session.execute(
            select(PipelineRun)
            .where(PipelineRun.project_id == project.id)
            .order_by(PipelineRun.started_at.desc())
            .limit(1)
        )
        latest_run = run_result.scalar_one_or_none()

    status_color = _get_status_color(project.status)
    prompt_display = project.prompt if len(project.prompt) <= 80 else project.prompt[:77] + "..."
    metadata = project.metadata_json or {}

    info_lines = [
        f"[bold]ID:[/bold] {project.id}",
        f"[bold]Type:[/bold] {project.type}",
        f"[bold]Prompt:[/bold] {prompt_display}",
        f"[bold]Status:[/bold] [{status_color}]{project.status}[/{status_color}]",
        f"[bold]Created:[/bold] {project.created_at.strftime('%Y-%m-%d %H:%M:%S')}",
    ]

    if project.status == COMPLETED:
        info_lines.append(f"[bold]Video:[/bold] [green]{project.video_url}[/green]")
        info_lines.append(f"[bold]Audio:[/bold] {project.audio_url}")
        hosted = metadata.get("hosted_urls") or {}
        if hosted.get("video"):
            info_lines.append(f"[bold]Hosted video:[/bold] {hosted['video']}")
        steps = metadata.get("steps") or {}
        if steps:
            info_lines.append("[bold]Steps:[/bold] " + ", ".join(f"{k}={v}" for k, v in steps.items()))

    if project.status == FAILED and metadata.get("error"):
        info_lines.append(f"[bold]Error:[/bold] [red]{metadata['error']}[/red]")

    if latest_run and latest_run.total_duration_seconds:
        info_lines.append(f"[bold]Last Run Duration:[/bold] {latest_run.total_duration_seconds:.1f}s")

    console.print(Panel("\n".join(info_lines), title="[bold]Project Status[/bold]", border_style="blue"))

    if project.script_text:
        console.print(Panel(project.script_text, title="[bold]Script[/bold]", border_style="dim"))


@app.command(name="list")
def list_projects(
    email: str = typer.Argument(..., help="Owner account email"),
):
    """List a user's projects."""
    asyncio.run(_run(_list_async(email)))


async def _list_async(email: str):
    await init_database()

    async with async_session() as session:
        user = await project_store.get_user_by_email(session, email)
        if user is None:
            console.print(f"[red]Error:[/red] No account for {email}")
            raise typer.Exit(code=1)
        projects = await project_store.list_projects_by_owner(session, user.id)

    if not projects:
        console.print("[yellow]No projects found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("ID", style="dim")
    table.add_column("Type")
    table.add_column("Prompt")
    table.add_column("Status")
    table.add_column("Created")

    for project in projects:
        prompt_display = project.prompt if len(project.prompt) <= 50 else project.prompt[:47] + "..."
        status_color = _get_status_color(project.status)
        table.add_row(
            str(project.id)[:8] + "...",
            project.type,
            prompt_display,
            f"[{status_color}]{project.status}[/{status_color}]",
            project.created_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command()
def sweep():
    """Mark projects stuck in processing as failed.

    Only run this while no API server is processing projects.
    """
    count = asyncio.run(_run(_sweep_async()))
    if count:
        console.print(f"[yellow]Marked {count} orphaned project(s) as failed[/yellow]")
    else:
        console.print("[green]No orphaned projects[/green]")


async def _sweep_async() -> int:
    await init_database()
    return await fail_orphaned_projects()


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (default from settings)"),
    port: int = typer.Option(None, "--port", help="Port (default from settings)"),
):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "clipforge.api.app:app",
        host=host or settings.server.host,
        port=port or settings.server.port,
        reload=False,
        # Single worker: in-flight runs live in this process only
        workers=1,
    )


async def _run(coro):
    """Await coro, then release pooled database connections."""
    try:
        return await coro
    finally:
        await shutdown()


def _get_status_color(status: str) -> str:
    """Get Rich color for a project status."""
    if status == COMPLETED:
        return "green"
    elif status == FAILED:
        return "red"
    elif status == PROCESSING:
        return "yellow"
    else:
        return "white"
