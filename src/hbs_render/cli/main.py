import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .. import __version__
from ..config.loader import load_config
from ..error.exceptions import ConfigurationError
from ..templates.manager import TemplateManager
from ..utils.logging import configure_logging, to_logging_level

app = typer.Typer(
    name="hbs-render",
    help="Render Handlebars views, partials and layouts from disk"
)
console = Console()
err_console = Console(stderr=True)


def _configure_cli_logging(log_level: str, log_file: Optional[str] = None, json_logs: bool = False) -> None:
    if log_file or json_logs:
        configure_logging(
            log_level,
            log_file=log_file,
            structured=json_logs,
            log_to_console=log_file is None,
            stream=sys.stderr,
        )
        return

    logging.basicConfig(
        level=to_logging_level(log_level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=err_console)],
        force=True,
    )


def _load_context(file_path: Optional[Path]) -> Dict[str, Any]:
    """
    Load a render context from a JSON or YAML file.

    Args:
        file_path: Context file, or None for an empty context

    Returns:
        Context dictionary
    """
    if file_path is None:
        return {}

    content = file_path.read_text(encoding="utf-8")
    if file_path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(content) or {}
    else:
        data = json.loads(content)

    if not isinstance(data, dict):
        raise ConfigurationError(f"Context file {file_path} must contain a mapping")
    return data


def _build_manager(
    config_path: Optional[str],
    views_dir: Optional[str],
    partials_dir: Optional[str],
    layouts_dir: Optional[str],
    log_level: Optional[str],
    log_file: Optional[str] = None,
    json_logs: bool = False
) -> TemplateManager:
    config = load_config(config_path, use_dotenv=False)
    overrides = {
        "VIEWS_DIR": views_dir,
        "PARTIALS_DIR": partials_dir,
        "LAYOUTS_DIR": layouts_dir,
        "LOG_LEVEL": log_level,
    }
    manager = TemplateManager(config)
    manager.set_config({key: value for key, value in overrides.items() if value is not None})
    _configure_cli_logging(manager.config.log_level, log_file, json_logs)
    return manager


@app.command("render")
def render_command(
    template: str = typer.Argument(..., help="Template path relative to the views directory"),
    layout: Optional[str] = typer.Option(None, "--layout", "-l", help="Layout name relative to the layouts directory"),
    context_file: Optional[Path] = typer.Option(None, "--context", "-c", help="JSON or YAML file with the render context"),
    views_dir: Optional[str] = typer.Option(None, "--views-dir", help="Views directory"),
    partials_dir: Optional[str] = typer.Option(None, "--partials-dir", help="Partials directory"),
    layouts_dir: Optional[str] = typer.Option(None, "--layouts-dir", help="Layouts directory"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="debug, info, warn or error"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Configuration file (YAML or JSON)"),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable the template cache"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Write logs to a rotating file instead of stderr"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
):
    """Render a template and print the result."""
    try:
        manager = _build_manager(config_path, views_dir, partials_dir, layouts_dir, log_level, log_file, json_logs)
        manager.set_caching(not no_cache)
        context = _load_context(context_file)

        async def _run() -> str:
            await manager.initialize()
            return await manager.render(template, context, layout)

        output = asyncio.run(_run())
    except Exception as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    typer.echo(output, nl=False)


@app.command("partials")
def partials_command(
    views_dir: Optional[str] = typer.Option(None, "--views-dir", help="Views directory"),
    partials_dir: Optional[str] = typer.Option(None, "--partials-dir", help="Partials directory"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="debug, info, warn or error"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Configuration file (YAML or JSON)"),
):
    """List the partials that would be registered."""
    try:
        manager = _build_manager(config_path, views_dir, partials_dir, None, log_level)
        names = asyncio.run(manager.initialize())
    except Exception as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if not names:
        console.print("[yellow]No partials found.[/yellow]")
        return

    table = Table(title=f"Partials in {manager.config.partials_root}")
    table.add_column("Name")
    table.add_column("Size (chars)")
    table.add_column("Modified (ns)")

    for name in sorted(names):
        entry = manager.partial_cache.entry(name)
        table.add_row(name, str(len(entry.artifact)), str(entry.mtime))
    console.print(table)


@app.command("version")
def version_command():
    """Display version information."""
    console.print(f"hbs-render {__version__}")


def main():
    load_dotenv()
    app()


if __name__ == "__main__":
    main()
