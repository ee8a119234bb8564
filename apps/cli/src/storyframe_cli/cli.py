"""StoryFrame CLI - chained storyboard frame generation from a scene script."""

import asyncio
import logging
import os
import signal
from pathlib import Path
from typing import Iterable, Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from storyframe_core_schemas import AspectRatio, GenerationResult, GenerationStatus, ServiceError
from storyframe_services import Settings, StoryboardSession

app = typer.Typer(
    name="storyframe",
    help="Generate a storyboard from a scene script, one chained frame at a time",
    no_args_is_help=True,
)
console = Console()

STATUS_STYLES = {
    GenerationStatus.PENDING: "yellow",
    GenerationStatus.SUCCEEDED: "green",
    GenerationStatus.FAILED: "red",
    GenerationStatus.CANCELLED: "dim",
}


def configure_logging(level: str) -> None:
    """Route log records through rich.

    Leaves an already configured root logger alone, so an embedding
    application or test harness keeps its handlers.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def run_async(coro):
    """Run an async coroutine.

    Handles both standalone CLI usage and environments with existing event loops
    (Jupyter notebooks, IDEs, etc.) by using nest_asyncio when needed.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is None:
        return asyncio.run(coro)

    # Event loop already running (Jupyter, IDE, etc.)
    import nest_asyncio
    nest_asyncio.apply()
    return loop.run_until_complete(coro)


def parse_character_spec(spec: str) -> tuple[str, Path]:
    """Parse a character specification string.

    Formats:
        "Name:path/to/image.png" -> (Name, Path)
        "path/to/image.png"      -> (image, Path)  (named after the file)

    Returns:
        Tuple of (name, image_path)
    """
    if ":" in spec and not Path(spec).exists():
        name, path = spec.split(":", 1)
        return name.strip(), Path(path.strip())
    path = Path(spec.strip())
    return path.stem, path


def build_session(
    script: Path,
    settings: Settings,
    character: Optional[list[str]] = None,
) -> StoryboardSession:
    """Create a session loaded with the script and character references."""
    if not script.exists():
        console.print(f"[red]Error: Script not found: {script}[/red]")
        raise typer.Exit(1)

    session = StoryboardSession(settings=settings)
    session.script_text = script.read_text(encoding="utf-8")

    for spec in character or []:
        name, image_path = parse_character_spec(spec)
        if not image_path.exists():
            console.print(f"[red]Error: Character image not found: {image_path}[/red]")
            raise typer.Exit(1)
        session.characters.add_from_file(image_path, name=name)

    return session


def results_table(results: Iterable[GenerationResult], session: StoryboardSession) -> Table:
    """Render the result store as a table."""
    run = session.generation.active_run
    title = f"Storyboard ({run.progress}/{run.total})" if run else "Storyboard"
    table = Table(title=title)
    table.add_column("Scene", style="cyan", no_wrap=True)
    table.add_column("Character")
    table.add_column("Status")
    table.add_column("Prompt", overflow="ellipsis")

    for result in results:
        character = session.characters.find_character(result.character_ref_id)
        style = STATUS_STYLES[result.status]
        table.add_row(
            result.scene_label,
            character.name if character else "-",
            f"[{style}]{result.status.value}[/{style}]",
            result.prompt[:80],
        )
    return table


@app.callback()
def main(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to STORYFRAME_LOG_LEVEL or WARNING)",
    ),
):
    """StoryFrame command line."""
    settings = Settings()
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings.log_level)
    ctx.obj = settings


@app.command()
def parse(
    ctx: typer.Context,
    script: Path = typer.Argument(..., help="Scene script file"),
    character: Optional[list[str]] = typer.Option(
        None, "--character", "-c", help="Character reference (format: 'Name:path/to/image.png')"
    ),
):
    """Show the scenes found in a script and their character matches."""
    session = build_session(script, ctx.obj or Settings(), character)
    scenes = session.parse_scenes()

    if not scenes:
        console.print("[red]No valid prompts found. Please check the script format.[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{len(scenes)} scene(s)")
    table.add_column("Scene", style="cyan", no_wrap=True)
    table.add_column("Character")
    table.add_column("Reference")
    table.add_column("Prompt", overflow="ellipsis")

    for scene in scenes:
        match = session.characters.resolve(scene.character_name)
        table.add_row(
            scene.label,
            scene.character_name,
            f"[green]{match.name}[/green]" if match else "-",
            scene.prompt[:80],
        )
    console.print(table)


@app.command()
def generate(
    ctx: typer.Context,
    script: Path = typer.Argument(..., help="Scene script file"),
    context: Optional[Path] = typer.Option(None, "--context", help="Story context file"),
    style: str = typer.Option("", "--style", "-s", help="Art style applied to every frame"),
    aspect_ratio: AspectRatio = typer.Option(
        AspectRatio.WIDESCREEN, "--aspect-ratio", "-a", help="Frame aspect ratio"
    ),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-n", min=1, help="Maximum number of scenes (defaults to 10)"
    ),
    character: Optional[list[str]] = typer.Option(
        None, "--character", "-c", help="Character reference (format: 'Name:path/to/image.png')"
    ),
):
    """Generate every scene in order, chaining each frame into the next.

    Press Ctrl-C to stop after the frame in progress.
    """
    if not os.environ.get("GOOGLE_API_KEY"):
        console.print("[red]Error: Missing API key[/red]")
        console.print("\n[dim]Set your API key with:[/dim]")
        console.print('  export GOOGLE_API_KEY="your-api-key"')
        raise typer.Exit(1)

    session = build_session(script, ctx.obj or Settings(), character)
    if context:
        session.story_context = context.read_text(encoding="utf-8")
    session.art_style = style
    session.aspect_ratio = aspect_ratio
    if batch_size:
        session.batch_size = batch_size

    async def do_generate():
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, session.stop)
        except (NotImplementedError, RuntimeError):
            pass  # No signal handlers on this platform; Ctrl-C aborts instead

        with Live(results_table(session.results, session), console=console, refresh_per_second=4) as live:
            unsubscribe = session.store.subscribe(
                lambda snapshot: live.update(results_table(snapshot, session))
            )
            try:
                return await session.generate()
            finally:
                unsubscribe()

    try:
        run = run_async(do_generate())
    except ServiceError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[green]{run.succeeded} succeeded[/green], "
            f"[red]{run.failed} failed[/red], "
            f"[dim]{run.cancelled} cancelled[/dim]",
            title=f"Run {run.status.value}: {run.progress}/{run.total} frame(s)",
            border_style="blue",
        )
    )
    if run.failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
