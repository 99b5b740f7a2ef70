"""CLI entrypoint: Typer app definition and command registration"""

import typer

from draftkit.cli.commands import build_cmd, detect_cmd, export_cmd, import_cmd, main_callback, preview_cmd


app = typer.Typer(name="draftkit", no_args_is_help=True, help="Article draft import and export pipeline")

app.callback()(main_callback)
app.command(name="import")(import_cmd)
app.command(name="export")(export_cmd)
app.command(name="build")(build_cmd)
app.command(name="preview")(preview_cmd)
app.command(name="detect")(detect_cmd)
