"""palmleaf command line: restore, analyze and manage palm-leaf manuscript photos."""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from pathlib import Path

import click

from palmleaf.config.settings import Settings
from palmleaf.database.connection import close_pool, ensure_schema, init_pool
from palmleaf.database.models import ManuscriptRecord
from palmleaf.images.encoding import parse_encoded_image
from palmleaf.images.exceptions import InvalidImageEncodingError
from palmleaf.inference.factory import InferenceClientFactory
from palmleaf.logging.logger import Log
from palmleaf.processor.exceptions import ProcessorError
from palmleaf.processor.orchestrator import ManuscriptOrchestrator, build_orchestrator
from palmleaf.processor.redo import RedoController, build_redo_controller
from palmleaf.processor.state import SessionEvent, SessionView

Command = Callable[[ManuscriptOrchestrator, RedoController], Awaitable[int]]


def _print_progress(event: SessionEvent, view: SessionView) -> None:
    if event is SessionEvent.RESTORED:
        click.echo(f"restoration: {'done' if view.restored_image else 'no image returned'}")
    elif event is SessionEvent.ANALYSIS and view.analysis is not None:
        click.echo("analysis: done")
        click.echo(f"  source: {view.analysis.source_info.detected_source}")
        click.echo(f"  translation: {view.analysis.translation}")
    elif event is SessionEvent.STATE and view.processing.error:
        click.echo(f"error: {view.processing.error}", err=True)


def _format_record(record: ManuscriptRecord) -> str:
    created = datetime.fromtimestamp(record.timestamp / 1000, tz=timezone.utc)
    source = record.analysis.source_info.detected_source if record.analysis else "-"
    restored = "restored" if record.restored_image else "not restored"
    return f"{record.id}\t{created:%Y-%m-%d %H:%M:%S}\t{restored}\t{source}"


async def _run(settings: Settings, command: Command) -> int:
    client = InferenceClientFactory.create_client(settings)
    try:
        orchestrator = build_orchestrator(settings, client=client)
        redo = build_redo_controller(settings, orchestrator.session, client=client)
        return await command(orchestrator, redo)
    finally:
        await client.close()


def _execute(command: Command) -> int:
    """Initialize pool -> ensure schema -> run the command on one shared client."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    try:
        ensure_schema()
        return asyncio.run(_run(settings, command))
    except (ProcessorError, InvalidImageEncodingError) as exc:
        Log.error(f"Command failed: {exc}")
        click.echo(f"✗ {exc}", err=True)
        return 1
    finally:
        close_pool()


async def _redo(
    orchestrator: ManuscriptOrchestrator,
    record_id: int,
    output: Path | None,
    apply: Callable[[], Awaitable[str | None]],
) -> int:
    if await orchestrator.open_record(record_id) is None:
        click.echo(f"✗ manuscript {record_id} not found", err=True)
        return 1
    orchestrator.subscribe(_print_progress)
    image = await apply()
    if image is None:
        click.echo("no new image, keeping the previous one")
        return 1
    if output is not None:
        output.write_bytes(parse_encoded_image(image).to_bytes())
        click.echo(f"wrote {output}")
    return 0


@click.group()
def main() -> None:
    """palmleaf - restore and analyze palm-leaf manuscript photos.

    Every submission is restored and analyzed concurrently and stored once.
    Retry and edit work on a stored manuscript without changing it.
    """


@main.command("submit")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def submit(ctx: click.Context, path: Path) -> None:
    """Restore and analyze one image and store the result."""

    async def command(orchestrator: ManuscriptOrchestrator, redo: RedoController) -> int:
        orchestrator.subscribe(_print_progress)
        record_id = await orchestrator.submit_file(path)
        click.echo(f"✓ saved manuscript {record_id}")
        return 0

    ctx.exit(_execute(command))


@main.command("list")
@click.pass_context
def list_records(ctx: click.Context) -> None:
    """List stored manuscripts, newest first."""

    async def command(orchestrator: ManuscriptOrchestrator, redo: RedoController) -> int:
        records = await orchestrator.refresh_records()
        if not records:
            click.echo("No manuscripts stored.")
        for record in records:
            click.echo(_format_record(record))
        return 0

    ctx.exit(_execute(command))


@main.command("delete")
@click.argument("record_id", type=int)
@click.pass_context
def delete(ctx: click.Context, record_id: int) -> None:
    """Delete a stored manuscript."""

    async def command(orchestrator: ManuscriptOrchestrator, redo: RedoController) -> int:
        if not await orchestrator.delete_record(record_id):
            click.echo(f"✗ manuscript {record_id} not found", err=True)
            return 1
        click.echo(f"✓ deleted manuscript {record_id}")
        return 0

    ctx.exit(_execute(command))


@main.command("retry")
@click.argument("record_id", type=int)
@click.option(
    "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write the new image here"
)
@click.pass_context
def retry(ctx: click.Context, record_id: int, output: Path | None) -> None:
    """Produce another restoration of a stored manuscript (not saved)."""

    async def command(orchestrator: ManuscriptOrchestrator, redo: RedoController) -> int:
        return await _redo(orchestrator, record_id, output, redo.retry)

    ctx.exit(_execute(command))


@main.command("edit")
@click.argument("record_id", type=int)
@click.argument("instruction")
@click.option(
    "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write the edited image here"
)
@click.pass_context
def edit(ctx: click.Context, record_id: int, instruction: str, output: Path | None) -> None:
    """Edit the restoration of a stored manuscript (not saved)."""
    if not instruction.strip():
        raise click.BadParameter("must not be blank", param_hint="INSTRUCTION")

    async def command(orchestrator: ManuscriptOrchestrator, redo: RedoController) -> int:
        return await _redo(
            orchestrator, record_id, output, lambda: redo.edit(None, instruction)
        )

    ctx.exit(_execute(command))


@main.command("export")
@click.argument("record_id", type=int)
@click.argument("zip_path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def export(ctx: click.Context, record_id: int, zip_path: Path) -> None:
    """Bundle a stored manuscript's images and texts into a zip archive."""

    async def command(orchestrator: ManuscriptOrchestrator, redo: RedoController) -> int:
        members = await orchestrator.export_record(record_id, zip_path)
        if members is None:
            click.echo(f"✗ manuscript {record_id} not found", err=True)
            return 1
        click.echo(f"✓ wrote {zip_path} ({', '.join(members)})")
        return 0

    ctx.exit(_execute(command))


if __name__ == "__main__":
    main()
