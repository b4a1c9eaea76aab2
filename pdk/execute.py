"""Hand a parsed command over to the external PDK executable."""
from __future__ import annotations

import glob
import logging
import os
import re
import subprocess

import click

from pdk.errors import PDKNotFoundError
from pdk.output.terminal import print_error

logger = logging.getLogger(__name__)

EXECUTABLE_ENV = "PDK_RUBY_EXECUTABLE"
INSTALL_GLOB = "/opt/puppetlabs/pdk/private/ruby/*/bin/pdk"


def _install_version(path: str) -> tuple[int, ...]:
    """Numeric version of the ruby directory holding `path`, e.g. (2, 10, 0)."""
    ruby_dir = os.path.basename(os.path.dirname(os.path.dirname(path)))
    return tuple(int(p) for p in re.findall(r"\d+", ruby_dir))


def find_pdk_executable() -> str:
    """Locate the PDK executable.

    PDK_RUBY_EXECUTABLE wins; otherwise the newest ruby under the PDK
    install prefix is used.
    """
    override = os.environ.get(EXECUTABLE_ENV, "")
    if override:
        if os.path.isfile(override):
            return override
        raise PDKNotFoundError([override])

    candidates = sorted(glob.glob(INSTALL_GLOB), key=_install_version)
    if not candidates:
        raise PDKNotFoundError([f"${EXECUTABLE_ENV}", INSTALL_GLOB])
    return candidates[-1]


def _command_path(ctx: click.Context) -> list[str]:
    """Subcommand names below the root, outermost first."""
    names = []
    while ctx.parent is not None:
        names.append(ctx.info_name or ctx.command.name)
        ctx = ctx.parent
    return list(reversed(names))


def _option_args(param: click.Option, value) -> list[str]:
    flag = max(param.opts, key=len)
    if param.is_flag and param.is_bool_flag:
        if value:
            return [flag]
        return [max(param.secondary_opts, key=len)] if param.secondary_opts else []
    values = value if param.multiple else [value]
    return [f"{flag}={v}" for v in values]


def build_argv(ctx: click.Context) -> list[str]:
    """Rebuild the arguments the external executable should receive.

    Options left at their default are not forwarded, so PDK applies its
    own defaults.
    """
    argv = _command_path(ctx)
    positional: list[str] = []

    for param in ctx.command.params:
        if not param.expose_value:
            continue
        value = ctx.params.get(param.name)
        if value is None or value == () or value == param.default:
            continue
        if isinstance(param, click.Option):
            argv.extend(_option_args(param, value))
        elif isinstance(value, (list, tuple)):
            positional.extend(str(v) for v in value)
        else:
            positional.append(str(value))

    return argv + positional


def execute_pdk_command(ctx: click.Context) -> None:
    """Run PDK for `ctx` and exit with its return code."""
    try:
        executable = find_pdk_executable()
    except PDKNotFoundError as e:
        print_error(str(e))
        ctx.exit(1)

    argv = build_argv(ctx)
    logger.debug("Executing %s %s", executable, " ".join(argv))
    try:
        completed = subprocess.run([executable, *argv], check=False)
    except OSError as e:
        print_error(f"Failed to run {executable}: {e}")
        ctx.exit(1)
    ctx.exit(completed.returncode)
