"""
Functions for formatting and displaying launcher data in the console using Rich.
"""

import os
from pathlib import Path
from typing import Any

from rich import box, filesize
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bbmp_launcher.models.config import LauncherConfig
from bbmp_launcher.models.records import ArtifactRecord, LaunchResult, RuntimeStatus

SUGGESTIONS = {
    "NetworkError": [
        "• Check your internet connection.",
        "• The release server or a redirect target may be unreachable.",
        "• Run with -vv to see every request and redirect hop.",
    ],
    "HttpStatusError": [
        "• GitHub may be rate-limiting anonymous requests (HTTP 403).",
        "• The release or custom URL may no longer exist (HTTP 404).",
        "• Please try again in a few minutes.",
    ],
    "NoAssetFoundError": [
        "• The latest release has no .jar attached yet.",
        "• Use `bbmp-launcher download --url <jar url>` to fetch a specific build.",
    ],
    "InstallError": [
        "• Install Java 17 manually and pass it with `--java <path>`.",
        "• Or store it permanently with `bbmp-launcher pick-java`.",
        "• On Windows, PowerShell is required to unpack the runtime.",
    ],
    "AlreadyRunningError": [
        "• The proxy is already running in this launcher.",
        "• Stop it first (Ctrl-C in the launching terminal).",
    ],
    "SpawnError": [
        "• The Java executable could not be started.",
        "• Check the configured `java_path` with `bbmp-launcher --show-config`.",
        "• Run `bbmp-launcher check-java` to test the runtime.",
    ],
    "ConfigurationError": [
        "• Fix the reported value in the configuration file.",
        "• Or reset a value with `bbmp-launcher set`.",
    ],
}


def format_session_length(seconds: float) -> str:
    """Proxy uptime as ``H:MM:SS``, e.g. '0:04:07' or '26:00:00'."""
    minutes, secs = divmod(max(int(seconds), 0), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_error_with_suggestions(
    error: Exception | str, context: dict | None = None
) -> Panel:
    """
    Formats an error with actionable suggestions into a Rich Panel. Accepts an
    exception or the '<Type>: <message>' string carried by an OperationResult.
    """
    if isinstance(error, str):
        error_type, _, error_msg = error.partition(": ")
        if not error_msg:
            error_type, error_msg = "Error", error
    else:
        error_type = type(error).__name__
        error_msg = str(error)

    suggestions = SUGGESTIONS.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the stored configuration."""
    console = Console()
    content = ""
    for key, value in sorted(config_data.items()):
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif value == "":
            value = "[dim](not set)[/dim]"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_artifact(record: ArtifactRecord):
    """Displays where a downloaded or cached jar lives."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column()

    table.add_row("Version:", f"[green]{record.version_tag}[/green]")
    if record.name:
        table.add_row("Asset:", record.name)
    table.add_row("Path:", f"[dim]{record.local_path}[/dim]")
    if os.path.isfile(record.local_path):
        table.add_row("Size:", filesize.decimal(os.path.getsize(record.local_path)))

    console.print(
        Panel(table, title="[bold green]✓ Jar Ready[/bold green]", border_style="green")
    )


def print_runtime_status(status: RuntimeStatus):
    """Displays the result of a Java probe."""
    console = Console()
    if status.available:
        console.print(
            f"[green]✓ Java found:[/green] [cyan]{status.executable}[/cyan]"
            + (f" [dim]({status.banner})[/dim]" if status.banner else "")
        )
    else:
        console.print(
            f"[red]✗ No usable Java at[/red] [cyan]{status.executable}[/cyan]. "
            "Run [cyan]bbmp-launcher install-java[/cyan] to install one."
        )


def print_launch_panel(result: LaunchResult, config: LauncherConfig):
    """Displays what was started, before the proxy output begins."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column()

    table.add_row("Version:", f"[green]{result.version}[/green]")
    table.add_row("Command:", f"[dim]{result.cmd}[/dim]")
    table.add_row("Working Dir:", f"[dim]{config.data_dir}[/dim]")
    table.add_row("Stop:", "Press [bold]Ctrl-C[/bold]")

    console.print(
        Panel(
            table,
            title="[bold cyan]🚀 Proxy Started[/bold cyan]",
            border_style="cyan",
            expand=False,
        )
    )


def print_exit_panel(exit_code: int | None, duration_s: float):
    """Displays how the proxy session ended."""
    console = Console()
    ok = exit_code == 0
    color = "green" if ok else "yellow"
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column()
    table.add_row("Exit Code:", f"[{color}]{exit_code}[/{color}]")
    table.add_row("Session:", f"[blue]{format_session_length(duration_s)}[/blue]")

    console.print()
    console.print(
        Panel(
            table,
            title=f"[bold {color}]Proxy Exited[/bold {color}]",
            border_style=color,
            box=box.DOUBLE,
            expand=False,
        )
    )
