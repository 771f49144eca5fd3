"""
Root Typer application for the sequent CLI.

Debugging aids for pipelines defined in importable modules::

    sequent tree myapp.pipelines:checkout
    sequent run myapp.pipelines:checkout --context '{"cart": []}'
"""

from __future__ import annotations

import asyncio

import typer
from typer import Typer

from sequent.cli.utils import build_tree, console, err_console, load_target, parse_context, print_json
from sequent.core.logging import configure_logging
from sequent.engine.hierarchy import children_of, hierarchy
from sequent.engine.outcome import Outcome
from sequent.engine.visualizer import summarize

app = Typer(
    name="sequent",
    help="sequent - inspect and run handler pipelines.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from sequent import __version__

        typer.echo(f"sequent {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override SEQUENT_LOG_LEVEL."),
) -> None:
    """sequent CLI - inspect and run handler pipelines."""
    if log_level:
        configure_logging(level=log_level, force=True)


# ── Commands ─────────────────────────────────────────────────────────────


def _load_container(target: str):
    obj = load_target(target)
    if children_of(obj) is None:
        err_console.print(f"[bold red]Error[/bold red]: {target} is not a container")
        raise typer.Exit(code=1)
    return obj


@app.command("tree")
def tree(
    target: str = typer.Argument(..., help="Container to inspect, as MODULE:ATTR"),
    json_out: bool = typer.Option(False, "--json", help="Print the metadata hierarchy as JSON."),
    summary: bool = typer.Option(False, "--summary", help="Print node counts and depth."),
) -> None:
    """Show the handler hierarchy of a container."""
    container = _load_container(target)

    if summary:
        print_json(summarize(container))
    elif json_out:
        print_json(hierarchy(container).to_dict())
    else:
        console.print(build_tree(container))


@app.command("run")
def run(
    target: str = typer.Argument(..., help="Container to run, as MODULE:ATTR"),
    context: str | None = typer.Option(None, "--context", "-c", help="Initial context as JSON."),
) -> None:
    """Process a JSON context through a container and print the result."""
    container = _load_container(target)
    ctx = parse_context(context)

    try:
        result = asyncio.run(container.process(ctx))
    except Exception as e:
        err_console.print(f"[bold red]Unhandled error[/bold red]: {e!r}")
        raise typer.Exit(code=1) from e

    outcome = result if isinstance(result, Outcome) else Outcome.proceed()
    print_json({"outcome": outcome.to_dict(), "context": ctx})
