"""CLI command implementations"""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any, Optional

import typer

from nixeval.config import ConfigError, Settings, book_table, load_config
from nixeval.core.exceptions import NixEvalError
from nixeval.core.transform import scratch_workspace, transform_content
from nixeval.preprocessor import NixEvalPreprocessor


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(table: dict = None, overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(table=table, overrides=overrides)
    except ConfigError as e:
        _fail(str(e))


def _configure_logging(settings: Settings, verbose: bool) -> None:
    """Send log records to stderr; stdout is reserved for the book JSON."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _read_input(raw: str) -> tuple[dict[str, Any], dict[str, Any]]:
    """Decode the `[context, book]` pair mdBook writes to stdin."""
    try:
        payload = json.loads(raw)
    except ValueError as e:
        _fail("Preprocessor input is not valid JSON", e)
    if not (isinstance(payload, list) and len(payload) == 2 and all(isinstance(p, dict) for p in payload)):
        _fail("Preprocessor input must be a JSON array [context, book]")
    return payload[0], payload[1]


def main_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log evaluator invocations")] = False,
    ):
    """Run as an mdBook preprocessor: read [context, book] on stdin, write the book to stdout."""
    ctx.obj = {"verbose": verbose}
    if ctx.invoked_subcommand is not None:
        return

    context, book = _read_input(sys.stdin.read())
    try:
        table = book_table(context)
    except ConfigError as e:
        _fail(str(e))
    settings = _settings(table)
    _configure_logging(settings, verbose)

    book = NixEvalPreprocessor(settings).run(context, book)
    typer.echo(json.dumps(book))


def supports_cmd(
    renderer: Annotated[str, typer.Argument(help="Renderer name mdBook is about to run")],
    ):
    """Exit 0 if the renderer is supported (html only), 1 otherwise."""
    supported = NixEvalPreprocessor(Settings()).supports_renderer(renderer)
    raise typer.Exit(0 if supported else 1)


def render_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Markdown file to render")],
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Write the result here instead of stdout")] = None,
    eval_command: Annotated[Optional[str], typer.Option("--eval-command", help="Evaluator binary")] = None,
    eval_args: Annotated[Optional[str], typer.Option("--eval-args", help="Extra evaluator arguments")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Evaluate the Nix blocks of a single Markdown file outside of mdBook."""
    settings = _settings(overrides={
        "eval_command": eval_command, "eval_args": eval_args, "parser_config": parser,
    })
    _configure_logging(settings, (ctx.obj or {}).get("verbose", False))

    content = path.read_text(encoding="utf-8")
    try:
        with scratch_workspace() as workspace:
            rendered = transform_content(content, settings, workspace)
    except (NixEvalError, OSError) as e:
        _fail(f"Failed to render {path}", e)

    if out:
        out.write_text(rendered, encoding="utf-8")
        typer.echo(f"  {path} -> {out}", err=True)
    else:
        typer.echo(rendered, nl=False)
