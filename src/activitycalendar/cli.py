"""CLI interface for ActivityCalendar."""

import mimetypes
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from activitycalendar.config import get_settings
from activitycalendar.services.compressor import get_compressor
from activitycalendar.services.google_auth import (
    GoogleCredentialsError,
    get_credentials,
    resolve_credential_source,
)
from activitycalendar.services.holidays import holidays_for_year
from activitycalendar.services.sheets import GoogleSheetStore, SheetsError
from activitycalendar.services.storage import DriveStorage, StorageError

app = typer.Typer(
    name="calendar",
    help="ActivityCalendar - activity calendar with Drive attachments.",
    no_args_is_help=True,
)
console = Console()


def _status(ok: bool, message: str) -> str:
    color = "green" if ok else "red"
    return f"[{color}]{message}[/{color}]"


@app.command("check-google")
def check_google():
    """Check Google credentials and which storage the upload pipeline will use."""
    settings = get_settings()

    table = Table(title="Google configuration")
    table.add_column("Item", style="bold")
    table.add_column("Status")

    source = resolve_credential_source(settings)
    table.add_row("Credential source", source or _status(False, "none"))

    try:
        credentials = get_credentials(settings)
        table.add_row("Service account", _status(True, credentials.service_account_email))
    except GoogleCredentialsError as e:
        table.add_row("Service account", _status(False, e.message))

    table.add_row("Spreadsheet id", settings.google_spreadsheet_id or _status(False, "not set"))
    table.add_row("Drive folder id", settings.google_drive_folder_id or _status(False, "not set"))

    try:
        DriveStorage.from_settings(settings)
        table.add_row("Drive client", _status(True, "ok"))
    except StorageError as e:
        table.add_row("Drive client", _status(False, e.message))

    try:
        GoogleSheetStore.from_settings(settings)
        table.add_row("Sheets client", _status(True, "ok"))
    except SheetsError as e:
        table.add_row("Sheets client", _status(False, e.details or e.message))

    console.print(table)
    mode = "Google Drive" if settings.drive_configured and source else "Local Storage"
    console.print(f"Upload mode: [bold]{mode}[/bold] (local fallback: {settings.upload_dir})")


@app.command()
def holidays(
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Gregorian year, e.g. 2026"),
):
    """List the bundled public holiday presets."""
    presets = holidays_for_year(year)
    if not presets:
        console.print("[dim]No holidays found.[/dim]")
        return

    table = Table(title=f"Holidays ({len(presets)})")
    table.add_column("Date", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Source", style="dim")
    for h in presets:
        table.add_row(h.date, h.name, h.source)
    console.print(table)


@app.command()
def compress(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the result here"),
):
    """Run the server-side image compressor on a local file."""
    settings = get_settings()
    mime_type, _ = mimetypes.guess_type(path.name)
    mime_type = mime_type or "application/octet-stream"

    data = path.read_bytes()
    compressor = get_compressor()
    compressed = compressor.compress(data, mime_type)
    if len(compressed) > settings.max_compressed_size_bytes:
        compressed = compressor.fit_to_size(compressed, mime_type, settings.max_compressed_size_bytes)
    thumbnail = compressor.thumbnail(data, mime_type)

    ratio = len(compressed) / len(data) if data else 1.0
    console.print(Panel(
        f"Compressor: {type(compressor).__name__}\n"
        f"Type: {mime_type}\n"
        f"Original: {len(data):,} bytes\n"
        f"Compressed: {len(compressed):,} bytes ({ratio:.0%})\n"
        f"Thumbnail: {f'{len(thumbnail):,} bytes' if thumbnail else 'none'}",
        title=path.name,
    ))

    if output:
        output.write_bytes(compressed)
        console.print(f"[green]Wrote[/green] {output}")


@app.command()
def server(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
):
    """Start the API server."""
    import uvicorn

    console.print(f"[green]Starting ActivityCalendar server at http://{host}:{port}[/green]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    uvicorn.run(
        "activitycalendar.main:app",
        host=host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    app()
