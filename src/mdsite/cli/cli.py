"""CLI entrypoint: Typer app definition and command registration"""

from typing import Annotated

import typer

from mdsite.cli.commands import build_cmd, check_cmd, list_cmd
from mdsite.log import configure_logging


app = typer.Typer(name="mdsite", no_args_is_help=True, help="Markdown content -> static site build pipeline")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    log_json: Annotated[bool, typer.Option("--log-json", help="Emit logs as JSON lines on stderr")] = False,
    ):
    """Build a static site from markdown files with YAML front matter."""
    configure_logging(verbose=verbose, log_json=log_json)


app.command(name="build")(build_cmd)
app.command(name="check")(check_cmd)
app.command(name="list")(list_cmd)
