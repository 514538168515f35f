"""CLI entrypoint: Typer app definition and command registration"""

import typer

from postpub.cli.commands import build_cmd, check_cmd, configure_logging, init_cmd, show_cmd


app = typer.Typer(name="postpub", no_args_is_help=True, help="Blog post ingestion and rendering pipeline")

app.callback()(configure_logging)
app.command(name="build")(build_cmd)
app.command(name="check")(check_cmd)
app.command(name="show")(show_cmd)
app.command(name="init")(init_cmd)
