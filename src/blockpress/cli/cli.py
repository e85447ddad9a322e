"""CLI entrypoint: Typer app definition and command registration"""

import typer

from blockpress.cli.commands import (
    build_cmd, commit_cmd, export_cmd, extract_cmd, fields_cmd, init_cmd,
    list_cmd, move_cmd, publish_cmd, render_cmd, update_cmd,
)


app = typer.Typer(name="blockpress", no_args_is_help=True, help="HTML block import and page rendering")

app.command(name="build")(build_cmd)
app.command(name="init")(init_cmd)
app.command(name="extract")(extract_cmd)
app.command(name="commit")(commit_cmd)
app.command(name="export")(export_cmd)
app.command(name="list")(list_cmd)
app.command(name="fields")(fields_cmd)
app.command(name="render")(render_cmd)
app.command(name="update")(update_cmd)
app.command(name="move")(move_cmd)
app.command(name="publish")(publish_cmd)
