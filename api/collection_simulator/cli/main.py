"""Collection Simulator CLI - Main entry point."""

import typer
from typing_extensions import Annotated

app = typer.Typer(
    name="collect-sim",
    help="Collection Simulator - synthetic UPI payments for QR collection points",
    add_completion=True,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from collection_simulator import __version__
        from collection_simulator.cli.output import console

        console.print(f"[bold]Collection Simulator[/bold] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Collection Simulator CLI."""
    pass


# Import commands after app is defined to avoid circular imports
from collection_simulator.cli.commands.db import db_app
from collection_simulator.cli.commands.seed import seed
from collection_simulator.cli.commands.serve import serve
from collection_simulator.cli.commands.status import status, tick

app.command(name="serve", help="Run the HTTP API server")(serve)
app.command(name="seed", help="Create demo collection points and transactions")(seed)
app.command(name="status", help="Show stored collection point state")(status)
app.command(name="tick", help="Run one generation step for a collection point")(tick)
app.add_typer(db_app, name="db")


if __name__ == "__main__":
    app()
