"""CLI entry point for Packwright."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.syntax import Syntax
from rich.table import Table

from packwright_core.compiler import Compiler, CompileWatcher
from packwright_core.config import PackwrightConfig, load_config
from packwright_core.config.loader import DEFAULT_CONFIG_TEMPLATE

app = typer.Typer(
    name="packwright",
    help="Compile frontend asset bundles only when their sources changed.",
)

config_app = typer.Typer(help="Manage Packwright configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: PackwrightConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _get_config() -> PackwrightConfig:
    if _config is None:
        return load_config()
    return _config


def _configure_logging(cfg: PackwrightConfig) -> None:
    logging.basicConfig(
        level=_LOG_LEVELS[cfg.log_level],
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to packwright.yml")
    ] = None,
    env: Annotated[
        str | None, typer.Option("--env", "-e", help="Environment name (default: $PACKWRIGHT_ENV or development)")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config, env)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    _configure_logging(_config)


@app.command("compile")
def compile_cmd() -> None:
    """Run the bundler if any watched file changed since the last attempt."""
    cfg = _get_config()
    compiler = Compiler(cfg)
    try:
        ok = compiler.compile()
    except (FileNotFoundError, PermissionError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not ok:
        rprint("[red]Compilation failed.[/red] See the log output above.")
        raise typer.Exit(1)
    rprint(f"[green]Packs up to date[/green] in {cfg.resolve(cfg.public_output_path)}")


@app.command()
def check(
    ci: Annotated[bool, typer.Option("--ci", help="Machine-readable output")] = False,
    fail_on_stale: Annotated[bool, typer.Option("--fail-on-stale", help="Exit 1 if packs are stale")] = False,
) -> None:
    """Compare the watched files against the last compilation without building."""
    cfg = _get_config()
    compiler = Compiler(cfg)
    try:
        recorded = compiler.last_compilation_digest()
        current = compiler.watched_files_digest()
    except (FileNotFoundError, PermissionError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    is_stale = recorded != current

    if ci:
        typer.echo("STALE" if is_stale else "OK")
        typer.echo(f"recorded_digest={recorded or ''}")
        typer.echo(f"current_digest={current}")
    else:
        table = Table(title=f"Compilation Status ({cfg.env})")
        table.add_column("", style="dim")
        table.add_column("Value", style="cyan")
        table.add_row("Recorded digest", recorded or "-")
        table.add_row("Current digest", current)
        table.add_row("Digest file", str(compiler.digest_path))
        rprint(table)

        if recorded is None:
            rprint("\n[yellow]Never compiled.[/yellow]")
        elif is_stale:
            rprint("\n[red]Packs are stale.[/red]")
        else:
            rprint("\n[green]Packs are up to date.[/green]")

    if fail_on_stale and is_stale:
        raise typer.Exit(code=1)


@app.command()
def watch(
    debounce: Annotated[
        float | None, typer.Option("--debounce", help="Seconds between compiles (overrides config)")
    ] = None,
) -> None:
    """Compile once, then recompile whenever the project changes."""
    cfg = _get_config()
    compiler = Compiler(cfg)
    try:
        compiler.compile()
    except (FileNotFoundError, PermissionError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    watcher = CompileWatcher(compiler, debounce_seconds=debounce)
    watcher.start()
    rprint(f"[green]Watching[/green] {cfg.root} (Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create a default config/packwright.yml."""
    target = Path("config") / "packwright.yml"
    if target.exists() and not force:
        rprint(f"[yellow]{target} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
