"""skein run -- run an agent on a prompt and stream its conversation."""

from __future__ import annotations

import asyncio
import dataclasses
from typing import TYPE_CHECKING

import click

from skein.cli.formatting import format_error, format_event, get_console
from skein.orchestrator.config import OrchestratorConfig
from skein.orchestrator.models import RunOutcome

if TYPE_CHECKING:
    from rich.console import Console

    from skein.llm.protocols import LLMClient
    from skein.orchestrator.models import OrchestratorResult


@click.command()
@click.argument("prompt", required=False)
@click.option(
    "-f",
    "--file",
    "prompt_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read the prompt from a file.",
)
@click.option(
    "--max-iterations",
    default=50,
    show_default=True,
    type=click.IntRange(min=1),
    help="Maximum model requests before giving up.",
)
@click.option("--model", default=OrchestratorConfig.model, show_default=True, help="Model identifier.")
@click.option("--max-tokens", default=4096, show_default=True, type=int, help="Maximum tokens per response.")
@click.option("--temperature", default=0.7, show_default=True, type=float, help="Sampling temperature.")
@click.pass_context
def run(
    ctx: click.Context,
    prompt: str | None,
    prompt_file: str | None,
    max_iterations: int,
    model: str,
    max_tokens: int,
    temperature: float,
) -> None:
    """Run an agent on PROMPT until it calls sequence_complete."""
    from skein.cli import _get_client

    console = get_console()
    if prompt_file:
        with open(prompt_file, encoding="utf-8") as f:
            prompt = f.read()
    if not prompt or not prompt.strip():
        format_error("Provide a PROMPT argument or --file.", console)
        raise SystemExit(1)

    config = OrchestratorConfig(
        max_iterations=max_iterations,
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
    )
    try:
        client = _get_client(ctx, model, max_tokens)
        result = asyncio.run(_run_agent(prompt, config, client, console))
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    if result.outcome == RunOutcome.CANCELLED:
        raise SystemExit(130)


async def _run_agent(
    prompt: str,
    config: OrchestratorConfig,
    client: LLMClient,
    console: Console,
) -> OrchestratorResult:
    from skein.orchestrator.loop import Orchestrator
    from skein.prompts.system import SUBAGENT_SYSTEM_PROMPT
    from skein.shell.manager import ShellSessionManager
    from skein.subagents.supervisor import SubAgentSupervisor
    from skein.toolkit.definitions import get_tools

    shells = ShellSessionManager()
    supervisor = SubAgentSupervisor(
        shells=shells,
        client=client,
        config=dataclasses.replace(config, system_prompt=SUBAGENT_SYSTEM_PROMPT),
    )
    orchestrator = Orchestrator(
        get_tools("main", shells=shells, supervisor=supervisor),
        client=client,
        config=config,
    )
    agent_run = orchestrator.start(prompt)
    try:
        async for event in agent_run.events:
            format_event(event, console)
        return await agent_run.done
    finally:
        supervisor.clear()
        await shells.clear()
        await client.aclose()
