"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdedit.cli.commands import check_cmd, render_cmd, restore_cmd


app = typer.Typer(name="mdedit", no_args_is_help=True, help="Markdown to annotated-document round trip")

app.command(name="render")(render_cmd)
app.command(name="restore")(restore_cmd)
app.command(name="check")(check_cmd)
