import typer

from .commands import (
    scan as scan_cmd,
    wfp as wfp_cmd,
)

app = typer.Typer(help="snippetscan CLI")

app.add_typer(wfp_cmd.app, name="wfp")
app.add_typer(scan_cmd.app, name="scan")


if __name__ == "__main__":
    app()
