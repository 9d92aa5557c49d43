"""CLI entrypoint: Typer app definition and command registration"""

import typer

from nixeval.cli.commands import main_callback, render_cmd, supports_cmd


app = typer.Typer(
    name="mdbook-nix-eval",
    invoke_without_command=True,
    help="mdBook preprocessor evaluating Nix code blocks with nix-instantiate",
)

app.callback(invoke_without_command=True)(main_callback)
app.command(name="supports")(supports_cmd)
app.command(name="render")(render_cmd)
