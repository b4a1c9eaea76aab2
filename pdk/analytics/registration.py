"""Attach the telemetry barrier to every way a click command can conclude."""
from __future__ import annotations

import click

from pdk.analytics.barrier import TelemetryBarrier


def _no_subcommand() -> bool:
    ctx = click.get_current_context(silent=True)
    return ctx is None or ctx.invoked_subcommand is None


def ensure_registration(command: click.Command, barrier: TelemetryBarrier) -> click.Command:
    """Wrap `command` and its subcommands so each conclusion is reported once.

    - parse_args: flag parsing and argument validation errors
    - get_help: help display
    - resolve_command (groups): unknown subcommands
    - callback: normal completion. Groups flagged `runs_without_subcommand`
      report only when no subcommand was given; other groups never run
      anything of their own.
    """
    name = command.name

    command.parse_args = barrier.wrap(command.parse_args, name, only_on=click.UsageError)
    command.get_help = barrier.wrap(command.get_help, name)

    if isinstance(command, click.Group):
        command.resolve_command = barrier.wrap(
            command.resolve_command, name, only_on=click.UsageError,
        )
        if command.callback is not None and getattr(command, "runs_without_subcommand", False):
            command.callback = barrier.wrap(command.callback, name, when=_no_subcommand)
        for sub in command.commands.values():
            ensure_registration(sub, barrier)
    elif command.callback is not None:
        command.callback = barrier.wrap(command.callback, name)

    return command
