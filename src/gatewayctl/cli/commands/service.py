"""Gateway launch agent commands."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from gatewayctl.cli.console import console, dim, error, success, warning

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration file",
    ),
]


def _get_manager(config: Path | None):
    from gatewayctl.config.models import ConfigError
    from gatewayctl.launchd import ServiceManager, create_launch_agent

    try:
        return ServiceManager(create_launch_agent(config_path=config))
    except ConfigError as e:
        error(str(e))
        raise typer.Exit(1) from None


def _report(result: tuple[bool, str]) -> None:
    ok, message = result
    if ok:
        success(message)
    else:
        error(message)
        raise typer.Exit(1)


def register(app: typer.Typer) -> None:
    """Register gateway launch agent commands."""
    service_app = typer.Typer(
        help="Manage the gateway launch agent", no_args_is_help=True
    )
    app.add_typer(service_app, name="service")

    @service_app.command("enable")
    def service_enable(
        port: Annotated[
            int,
            typer.Option(
                "--port",
                "-p",
                help="Port the gateway listens on",
            ),
        ] = 8787,
        config: ConfigOption = None,
    ) -> None:
        """Install and load the gateway launch agent."""
        manager = _get_manager(config)
        _report(asyncio.run(manager.enable(port)))

    @service_app.command("disable")
    def service_disable(config: ConfigOption = None) -> None:
        """Unload and remove the gateway launch agent."""
        manager = _get_manager(config)
        _report(asyncio.run(manager.disable()))

    @service_app.command("kickstart")
    def service_kickstart(
        force: Annotated[
            bool,
            typer.Option(
                "--force/--no-force",
                help="Kill the running gateway before restarting it",
            ),
        ] = True,
        config: ConfigOption = None,
    ) -> None:
        """Restart the gateway job."""
        manager = _get_manager(config)
        _report(asyncio.run(manager.kickstart(force=force)))

    @service_app.command("status")
    def service_status(config: ConfigOption = None) -> None:
        """Show the gateway launch agent status."""
        from gatewayctl.cli.console import create_table

        manager = _get_manager(config)
        status = asyncio.run(manager.status())

        table = create_table(
            "Gateway Launch Agent",
            [
                ("Property", "cyan"),
                ("Value", ""),
            ],
        )
        table.add_row("Label", status.label)
        table.add_row("Plist", str(status.plist_path))
        table.add_row(
            "Loaded", "[green]yes[/green]" if status.loaded else "[yellow]no[/yellow]"
        )
        table.add_row("Write gate", "present" if status.write_disabled else "-")

        installed = status.installed
        if installed is not None:
            table.add_row("", "")
            table.add_row("[bold]Installed[/bold]", "")
            table.add_row("Port", str(installed.port) if installed.port else "-")
            table.add_row("Bind", str(installed.bind) if installed.bind else "-")
            table.add_row("Token", "set" if installed.token else "-")
            table.add_row("Password", "set" if installed.password else "-")

        console.print(table)
        if installed is None:
            dim("No launch agent plist installed")
        if status.write_disabled:
            warning("Write gate marker present; enable is a no-op")
