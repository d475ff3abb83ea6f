"""Skein CLI -- run agents from the terminal.

This module is NEVER imported from skein/__init__.py.
It is only loaded via the ``skein`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install skein[cli]"
    ) from None

if TYPE_CHECKING:
    from skein.llm.protocols import LLMClient

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase log output (-v info, -vv debug).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int) -> None:
    """Skein: an agent runtime for tool-using LLM conversations."""
    ctx.ensure_object(dict)
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=_LOG_FORMAT)


def _get_client(ctx: click.Context, model: str, max_tokens: int) -> LLMClient:
    """Return the LLM client for a command.

    A client placed in ``ctx.obj["client"]`` wins; otherwise an
    AnthropicClient is built from the environment.
    """
    client = ctx.obj.get("client") if ctx.obj else None
    if client is not None:
        return client
    from skein.llm.client import AnthropicClient

    return AnthropicClient(default_model=model, default_max_tokens=max_tokens)


# Register subcommands after cli group is defined
from skein.cli.commands.run import run  # noqa: E402
from skein.cli.commands.tools import tools  # noqa: E402

cli.add_command(run)
cli.add_command(tools)
