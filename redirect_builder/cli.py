"""
Redirect Builder CLI.

Command-line interface for building launcher-redirect APKs.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core.config import Config, get_config
from .core.exceptions import RedirectBuilderError
from .core.logging import setup_logging
from .models.build import BuildRequest
from .models.color import Color

app = typer.Typer(
    name="redirect-builder",
    help="Build brandable Android apps that redirect to an installed package",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"Redirect Builder v{__version__}")
        raise typer.Exit()


def parse_accent(value: str | None, config: Config) -> Color | None:
    """Parse an accent given as a palette number (1-based) or a hex color."""
    if value is None:
        return None
    palette = config.icons.accent_palette
    if value.isdigit():
        index = int(value) - 1
        if not 0 <= index < len(palette):
            raise typer.BadParameter(f"Palette has colors 1-{len(palette)}", param_hint="--accent")
        return Color.from_hex(palette[index])
    try:
        return Color.from_hex(value)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--accent")


def swatch(color: Color) -> str:
    return f"[on {color.to_hex()[:7]}]      [/] {color.to_hex()}"


@app.callback()
def callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Redirect Builder: specialize the app host template into a redirect APK."""
    pass


@app.command()
def build(
    package_name: str = typer.Option(
        ...,
        "--package",
        "-p",
        help="Package the redirect app launches (e.g., com.example.app)",
    ),
    app_name: str = typer.Option(
        ...,
        "--name",
        "-n",
        help="Display name of the redirect app",
    ),
    foreground: Optional[Path] = typer.Option(None, "--foreground", help="Foreground icon image"),
    background: Optional[Path] = typer.Option(None, "--background", help="Background icon image"),
    monochrome: Optional[Path] = typer.Option(None, "--monochrome", help="Monochrome icon image"),
    accent: Optional[str] = typer.Option(
        None,
        "--accent",
        "-a",
        help="Accent color for adaptive icon layers: palette number or #RRGGBB",
    ),
    template_dir: Optional[Path] = typer.Option(
        None,
        "--template",
        "-t",
        help="App host template directory (discovered when omitted)",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory where saved APKs are stored",
    ),
    interactive: bool = typer.Option(
        False,
        "--interactive",
        "-i",
        help="Prompt for icon images that were not given as options",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Answer yes to every prompt"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
) -> None:
    """Build a redirect APK for a package."""
    config = get_config()
    overrides: dict[str, object] = {}
    if verbose:
        overrides["log_level"] = "DEBUG"
    if output_dir is not None:
        overrides["storage"] = config.storage.model_copy(update={"base_path": output_dir})
    if overrides:
        config = config.model_copy(update=overrides)
    setup_logging(config)

    accent_color = parse_accent(accent, config)

    async def run_async() -> None:
        from .orchestration import BuildOrchestrator
        from .presentation import ConsolePresenter
        from .services.artifacts import ArtifactSaveService
        from .services.icons import pick_image
        from .services.staging import BuildSession
        from .storage import LocalStorageBackend

        presenter = ConsolePresenter(console, assume_yes=yes)

        try:
            session = BuildSession.discover(template_dir, config=config)
        except RedirectBuilderError as e:
            await presenter.notify("No App Host", str(e))
            raise typer.Exit(1)

        icons = {"foreground": foreground, "background": background, "monochrome": monochrome}
        if interactive:
            for label, path in icons.items():
                if path is None:
                    icons[label] = await pick_image(presenter, f"Select a {label} image", config)

        try:
            request = BuildRequest(
                package_name=package_name,
                app_name=app_name,
                foreground_image_path=icons["foreground"],
                background_image_path=icons["background"],
                monochrome_image_path=icons["monochrome"],
                accent_color=accent_color,
            )
        except PydanticValidationError as e:
            console.print(f"[red]Invalid build request:[/red]\n{e}")
            raise typer.Exit(2)

        console.print(Panel.fit(
            f"[bold]Package:[/bold] {request.package_name}\n"
            f"[bold]App Name:[/bold] {request.app_name}\n"
            f"[bold]Template:[/bold] {session.template_root}",
            title="Redirect Builder",
            border_style="blue",
        ))

        saver = ArtifactSaveService(presenter, LocalStorageBackend(config.storage.base_path))
        orchestrator = BuildOrchestrator(presenter, config=config, saver=saver)
        outcome = await orchestrator.run(request, session)

        table = Table(title="Build Stages")
        table.add_column("Stage", style="cyan")
        table.add_column("Status")
        table.add_column("Duration", justify="right")
        for stage in outcome.stages:
            color = "green" if stage.status.value == "completed" else "red"
            table.add_row(stage.stage_name, f"[{color}]{stage.status.value}[/{color}]", f"{stage.duration_seconds:.1f}s")
        console.print(table)

        if not outcome.success:
            raise typer.Exit(1)

    asyncio.run(run_async())


@app.command()
def check() -> None:
    """Check that a supported toolchain is installed."""
    config = get_config()
    setup_logging(config)

    async def run_async() -> None:
        from .services.toolchain import ToolchainInvoker

        result = await ToolchainInvoker(config).check_toolchain_version()
        if result.success:
            console.print(f"[bold green]✓ {config.toolchain.executable} {result.data}[/bold green]")
        else:
            console.print(f"[red]✗ {result.error}[/red]")
            raise typer.Exit(1)

    asyncio.run(run_async())


@app.command()
def colors(
    accent: Optional[str] = typer.Option(
        None, "--accent", "-a", help="Also derive the background for this #RRGGBB color"
    ),
) -> None:
    """Show the accent palette and the derived icon backgrounds."""
    from .services.colors import color_pair

    config = get_config()

    table = Table(title="Accent Palette")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Foreground")
    table.add_column("Background")

    accents = [(str(i), Color.from_hex(h)) for i, h in enumerate(config.icons.accent_palette, start=1)]
    custom = parse_accent(accent, config)
    if custom is not None:
        accents.append(("custom", custom))

    for label, color in accents:
        pair = color_pair(color)
        table.add_row(label, swatch(pair.foreground), swatch(pair.background))

    console.print(table)


@app.command()
def tint(
    monochrome: Path = typer.Argument(
        ...,
        help="Monochrome icon image",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    accent: str = typer.Option("1", "--accent", "-a", help="Palette number or #RRGGBB"),
    output_dir: Path = typer.Option(Path("."), "--output", "-o", help="Directory for the layers"),
) -> None:
    """Render adaptive icon layers from a monochrome image."""
    from .services.colors import render_adaptive_layers

    config = get_config()
    setup_logging(config)
    accent_color = parse_accent(accent, config)

    try:
        layers = render_adaptive_layers(
            monochrome,
            accent_color,  # type: ignore[arg-type]
            output_dir,
            tinted_name=config.icons.tinted_layer_name,
            background_name=config.icons.background_layer_name,
        )
    except RedirectBuilderError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    for layer in layers:
        console.print(f"[green]✓[/green] {layer}")


@app.command("config")
def show_config() -> None:
    """Show the current configuration."""
    cfg = get_config()

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", cfg.log_level)
    table.add_row("App Host Dir", str(cfg.template.app_host_dir or "(discover)"))
    table.add_row("Workspaces", f"{cfg.template.workspace_container}/{cfg.template.workspace_prefix}<package>")
    table.add_row("Toolchain", cfg.toolchain.executable)
    table.add_row("Configuration", cfg.toolchain.configuration)
    table.add_row("Minimum Version", str(cfg.toolchain.min_major_version))
    table.add_row("Artifacts", f"{cfg.artifacts.output_dir}/**/*{cfg.artifacts.extension}")
    table.add_row("Storage Path", str(cfg.storage.base_path))

    console.print(table)

    console.print("\n[dim]Configure via environment variables:[/dim]")
    console.print("  ARB_LOG_LEVEL, ARB_APPHOST_DIR, ARB_TOOLCHAIN")
    console.print("  ARB_BUILD_CONFIGURATION, ARB_MIN_TOOLCHAIN_MAJOR, ARB_OUTPUT_PATH")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
