"""Main CLI application."""

from typing import Annotated

import typer

from gatewayctl.cli.commands import service

app = typer.Typer(
    name="gatewayctl",
    help="gatewayctl - manage the gateway launch agent",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Log level (DEBUG, INFO, WARNING, ERROR)",
        ),
    ] = None,
) -> None:
    """Configure logging before any command runs."""
    from gatewayctl.logging import configure_logging

    configure_logging(level=log_level, use_rich=True)


service.register(app)


if __name__ == "__main__":
    app()
