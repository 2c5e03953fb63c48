"""
Defines the command-line interface for the launcher using Typer.
"""

import asyncio
import logging
import signal
import time
from contextlib import suppress

import typer
from rich.console import Console
from rich.logging import RichHandler

from bbmp_launcher import __version__
from bbmp_launcher.core.dispatcher import BoundaryDispatcher
from bbmp_launcher.core.events import (
    DOWNLOAD_PROGRESS,
    PROCESS_EXIT,
    PROCESS_LOG,
    RUNTIME_PROGRESS,
)
from bbmp_launcher.core.orchestrator import LaunchOrchestrator
from bbmp_launcher.exceptions import LauncherError
from bbmp_launcher.models.config import LaunchOptions, LauncherConfig
from bbmp_launcher.models.records import OperationResult
from bbmp_launcher.storage.config_manager import ConfigManager
from bbmp_launcher.utils.path import get_config_dir

from .formatters import (
    format_error_with_suggestions,
    print_artifact,
    print_config,
    print_exit_panel,
    print_launch_panel,
    print_runtime_status,
)
from .host import ConsoleHost
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("bbmp_launcher")

app = typer.Typer(
    name="bbmp-launcher",
    help=(
        "Downloads, provisions and runs BlueBerryMinecraftProxy. Use 'bbmp-launcher"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)

CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict | None = None) -> LauncherConfig:
    try:
        config = ConfigManager(CONFIG_FILE).load_config(cli_options)
    except LauncherError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    log.debug(f"Loaded configuration from {CONFIG_FILE}")
    return config


def _fail(result: OperationResult) -> None:
    console.print(format_error_with_suggestions(result.error or "Unknown error"))
    raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """BlueBerryMinecraftProxy Launcher"""
    if version:
        console.print(f"[bold]bbmp-launcher[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("bbmp_launcher").setLevel(log_level)

    if show_config:
        _load_config()
        print_config(CONFIG_FILE, ConfigManager(CONFIG_FILE).as_display_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def download(
    url: str | None = typer.Option(
        None, "--url", "-u", help="Download this jar URL instead of the latest release."
    ),
    custom: bool = typer.Option(
        False, "--custom", help="Download the custom URL saved with 'set --url'."
    ),
):
    """Download the latest proxy jar (or a custom one)."""
    config = _load_config()
    if custom and not url:
        if not config.custom_url:
            console.print(
                "[red]✗ No custom URL saved.[/red] "
                "Use [cyan]bbmp-launcher set --url <URL>[/cyan] first."
            )
            raise typer.Exit(code=1)
        url = config.custom_url

    async def _download_async() -> OperationResult:
        async with LaunchOrchestrator(config, host=ConsoleHost(console)) as orchestrator:
            dispatcher = BoundaryDispatcher(orchestrator)
            async with ProgressManager(console, orchestrator.events) as progress:
                progress.watch(DOWNLOAD_PROGRESS, "Downloading jar")
                if url:
                    return await dispatcher.download_from_url(url)
                return await dispatcher.download_latest()

    result = asyncio.run(_download_async())
    if not result.ok:
        _fail(result)
    print_artifact(result.value)


@app.command(name="check-java")
def check_java(
    java: str | None = typer.Option(
        None, "--java", help="Probe this executable instead of 'java' on PATH."
    ),
):
    """Check whether a usable Java runtime is available."""
    config = _load_config()

    async def _check_async():
        async with LaunchOrchestrator(config) as orchestrator:
            if java:
                return await orchestrator.provisioner.detect_runtime(java)
            result = await BoundaryDispatcher(orchestrator).check_runtime()
            if not result.ok:
                _fail(result)
            return result.value

    status = asyncio.run(_check_async())
    print_runtime_status(status)
    if not status.available:
        raise typer.Exit(code=1)


@app.command(name="install-java")
def install_java():
    """Download and unpack a Java runtime into the launcher's data directory."""
    config = _load_config()

    async def _install_async() -> OperationResult:
        async with LaunchOrchestrator(config) as orchestrator:
            async with ProgressManager(console, orchestrator.events) as progress:
                progress.watch(RUNTIME_PROGRESS, "Downloading Java")
                return await BoundaryDispatcher(orchestrator).install_runtime()

    result = asyncio.run(_install_async())
    if not result.ok:
        _fail(result)
    console.print(
        f"[bold green]✓ Java ready:[/bold green] [cyan]{result.value.executable_path}[/cyan]"
    )


@app.command()
def launch(
    server: str | None = typer.Option(
        None, "--server", "-s", help="Remote server to proxy to."
    ),
    port: int | None = typer.Option(None, "--port", "-p", help="Local listen port."),
    rport: int | None = typer.Option(None, "--rport", help="Remote server port."),
    devmode: bool | None = typer.Option(
        None, "--devmode/--no-devmode", help="Start the proxy in developer mode."
    ),
    java: str | None = typer.Option(
        None, "--java", help="Java executable to use (skips detection)."
    ),
):
    """Download if needed, then run the proxy and stream its output."""
    config = _load_config()
    try:
        options = LaunchOptions.from_config(
            config, server=server, port=port, rport=rport, devmode=devmode, java_path=java
        )
    except ValueError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    async def _launch_async() -> int:
        loop = asyncio.get_running_loop()
        exit_codes: list[int] = []
        exited = asyncio.Event()
        stop_requested = False

        async with LaunchOrchestrator(config, host=ConsoleHost(console)) as orchestrator:
            dispatcher = BoundaryDispatcher(orchestrator)

            def on_exit(code: int) -> None:
                exit_codes.append(code)
                exited.set()

            orchestrator.events.subscribe(
                PROCESS_LOG, lambda chunk: console.out(chunk, end="", highlight=False)
            )
            orchestrator.events.subscribe(PROCESS_EXIT, on_exit)

            async with ProgressManager(console, orchestrator.events) as progress:
                progress.watch(DOWNLOAD_PROGRESS, "Downloading jar")
                progress.watch(RUNTIME_PROGRESS, "Installing Java")
                result = await dispatcher.launch(options)

            if not result.ok:
                _fail(result)
            print_launch_panel(result.value, config)
            started = time.monotonic()

            def request_stop() -> None:
                nonlocal stop_requested
                stop_requested = True
                console.print("\n[yellow]Stopping proxy...[/yellow]")
                orchestrator.stop()

            with suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(signal.SIGINT, request_stop)
            try:
                await exited.wait()
            finally:
                with suppress(NotImplementedError, RuntimeError):
                    loop.remove_signal_handler(signal.SIGINT)

            code = exit_codes[0]
            print_exit_panel(code, time.monotonic() - started)
            if stop_requested or code == 0:
                return 0
            return code if code > 0 else 1

    exit_code = asyncio.run(_launch_async())
    if exit_code:
        raise typer.Exit(code=exit_code)


@app.command(name="pick-java")
def pick_java():
    """Choose a Java executable and save it as the default runtime."""
    config = _load_config()

    async def _pick_async():
        async with LaunchOrchestrator(config, host=ConsoleHost(console)) as orchestrator:
            result = await BoundaryDispatcher(orchestrator).pick_runtime_executable()
            if not result.ok:
                _fail(result)
            if result.value is None:
                return None, None
            status = await orchestrator.provisioner.detect_runtime(result.value)
            return result.value, status

    path, status = asyncio.run(_pick_async())
    if path is None:
        console.print("[dim]No file chosen; java_path left unchanged.[/dim]")
        return
    print_runtime_status(status)
    if not status.available and not typer.confirm("Save it anyway?", default=False):
        raise typer.Abort()
    ConfigManager(CONFIG_FILE).save_settings({"java_path": path})
    console.print(f"[green]✓ java_path saved to '{CONFIG_FILE}'[/green]")


@app.command(name="always-on-top")
def always_on_top(
    enabled: bool = typer.Argument(..., help="on / off"),
):
    """Pin the launcher window above other windows (saved for GUI hosts)."""
    config = _load_config()

    async def _apply_async() -> OperationResult:
        async with LaunchOrchestrator(config, host=ConsoleHost(console)) as orchestrator:
            return await BoundaryDispatcher(orchestrator).set_always_on_top(enabled)

    result = asyncio.run(_apply_async())
    if not result.ok:
        _fail(result)
    ConfigManager(CONFIG_FILE).save_settings({"always_on_top": enabled})
    console.print(
        f"[green]✓ Always on top {'enabled' if enabled else 'disabled'}.[/green]"
    )


@app.command(name="set")
def set_defaults(
    server: str | None = typer.Option(None, "--server", "-s", help="Remote server."),
    port: int | None = typer.Option(None, "--port", "-p", help="Local listen port."),
    rport: int | None = typer.Option(None, "--rport", help="Remote server port."),
    devmode: bool | None = typer.Option(
        None, "--devmode/--no-devmode", help="Developer mode by default."
    ),
    url: str | None = typer.Option(None, "--url", "-u", help="Custom jar URL."),
    java: str | None = typer.Option(
        None, "--java", help="Default Java executable ('' to clear)."
    ),
):
    """Save default launch settings."""
    updates = {
        "server": server,
        "port": port,
        "rport": rport,
        "devmode": devmode,
        "custom_url": url,
        "java_path": java,
    }
    if all(v is None for v in updates.values()):
        console.print("[yellow]⚠️  Nothing to save.[/yellow] See --help for options.")
        raise typer.Exit(code=1)
    try:
        ConfigManager(CONFIG_FILE).save_settings(updates)
    except LauncherError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Settings saved to '{CONFIG_FILE}'[/bold green]")


@app.command()
def diagnose():
    """Diagnose common configuration, connectivity and runtime issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False
    config = _load_config()
    console.print(f"[green]✓[/] Configuration is valid: [dim]{CONFIG_FILE}[/dim]")
    console.print(f"[green]✓[/] Data directory: [dim]{config.data_dir}[/dim]")

    async def _diagnose_async() -> bool:
        problems = False
        async with LaunchOrchestrator(config) as orchestrator:
            console.print("\n[dim]Querying the release feed...[/dim]")
            try:
                release = await orchestrator.store.resolver.get_latest_release()
                console.print(
                    f"[green]✓[/] Latest release [cyan]{release.tag}[/cyan] "
                    f"provides [cyan]{release.asset_name}[/cyan]."
                )
                cached = orchestrator.store.jar_path(release.tag)
                if cached.is_file():
                    console.print(f"[green]✓[/] Already downloaded: [dim]{cached}[/dim]")
                else:
                    console.print("[yellow]○[/] Not downloaded yet.")
            except LauncherError as e:
                console.print(f"[red]✗ Release check failed: {e}[/red]")
                problems = True

            console.print("\n[dim]Checking Java...[/dim]")
            status = await orchestrator.provisioner.detect_runtime(config.java_path or None)
            print_runtime_status(status)
            if not status.available:
                installed = orchestrator.provisioner.locate_executable()
                if installed.found:
                    console.print(
                        f"[green]✓[/] Launcher-installed Java: "
                        f"[dim]{installed.executable_path}[/dim]"
                    )
                else:
                    problems = True
        return problems

    if asyncio.run(_diagnose_async()):
        issues_found = True
    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
