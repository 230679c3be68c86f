import logging

import typer

from visual_editor.cli.elements import analyze, delete, update
from visual_editor.cli.serve import serve_app

app = typer.Typer(
    name="visual-editor",
    help="Visual editor CLI — inspect and edit JSX elements in place.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity to stderr."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


app.command("analyze")(analyze)
app.command("update")(update)
app.command("delete")(delete)
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
