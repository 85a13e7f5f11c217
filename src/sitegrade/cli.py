"""CLI entry point using Typer."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from sitegrade import __version__
from sitegrade.config import ScanConfig, load_config
from sitegrade.errors import GuardError
from sitegrade.models import ScanResult

app = typer.Typer(
    name="sitegrade",
    help="Passive website security audit — headers, TLS, grading and compliance mapping.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"sitegrade {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """sitegrade: passive website security audit."""


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command()
def scan(
    url: Annotated[str, typer.Argument(help="Website URL or hostname")],
    format: Annotated[str, typer.Option("--format", "-f", help="Output format")] = "terminal",
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output file path")
    ] = None,
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Config file path")
    ] = None,
    timeout: Annotated[
        float | None, typer.Option("--timeout", "-t", help="Header fetch timeout (seconds)")
    ] = None,
    allow_unresolved: Annotated[
        bool,
        typer.Option("--allow-unresolved", help="Scan hostnames that resolve to no address"),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log progress")] = False,
) -> None:
    """Scan a website and print a graded report."""
    cfg = load_config(config)

    cfg.format = format
    cfg.output = output
    if timeout is not None:
        cfg.timeout = timeout
    if allow_unresolved:
        cfg.fail_closed = False
    _setup_logging("INFO" if verbose else cfg.log_level)

    from sitegrade.scan import run_security_scan

    try:
        result = asyncio.run(run_security_scan(url, cfg))
    except GuardError as exc:
        err_console.print(
            f"[red]Refused to scan {escape(exc.url or url)}: {escape(exc.message)}[/red]"
        )
        raise typer.Exit(2) from None

    _output_report(result, cfg)


def _output_report(result: ScanResult, cfg: ScanConfig) -> None:
    if cfg.format == "json":
        from sitegrade.reporters.json_report import render_json

        text = render_json(result)
    elif cfg.format == "markdown":
        from sitegrade.reporters.markdown import render_markdown

        text = render_markdown(result)
    else:
        from sitegrade.reporters.terminal import render_terminal

        render_terminal(result, console)
        return

    if cfg.output:
        Path(cfg.output).write_text(text, encoding="utf-8")
        console.print(f"\n[green]Report saved to {cfg.output}[/green]")
    else:
        console.print(text, markup=False, highlight=False, soft_wrap=True)


@app.command()
def catalogs() -> None:
    """List compliance requirements and the checks they depend on."""
    from sitegrade.analysis.compliance import CATALOGS

    for name, catalog in CATALOGS.items():
        console.print(f"[bold]{name}[/bold]")
        for req in catalog:
            related = ", ".join(req.related_check_ids) or "[dim]not measured[/dim]"
            console.print(f"  {req.label}: {related}")


@app.command(name="config")
def config_show(
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Config file path")
    ] = None,
) -> None:
    """Show current configuration."""
    cfg = load_config(config)
    console.print_json(json.dumps(cfg.model_dump(), default=str))
