"""skein tools -- list the tools a profile exposes."""

from __future__ import annotations

import click

from skein.cli.formatting import format_error, format_tools, get_console


@click.command()
@click.option(
    "--profile",
    default="main",
    show_default=True,
    type=click.Choice(["main", "subagent"], case_sensitive=False),
    help="Tool profile to list.",
)
def tools(profile: str) -> None:
    """List the built-in tools available to an agent."""
    from skein.shell.manager import ShellSessionManager
    from skein.subagents.supervisor import SubAgentSupervisor
    from skein.toolkit.definitions import get_tools

    console = get_console()
    try:
        shells = ShellSessionManager()
        supervisor = SubAgentSupervisor(shells=shells)
        format_tools(
            get_tools(profile.lower(), shells=shells, supervisor=supervisor),
            console,
        )
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None
