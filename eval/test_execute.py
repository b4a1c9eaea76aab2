"""Tests for forwarding parsed commands to the PDK executable."""
import os

import click
import pytest

from pdk import execute
from pdk.cli import create_root_command
from pdk.errors import PDKNotFoundError
from pdk.execute import build_argv, find_pdk_executable


# ── Helpers ──────────────────────────────────────────────────────────


def _context(path, args):
    """Build the click context chain for `pdk <path...> <args...>`."""
    ctx = click.Context(create_root_command(), info_name="pdk")
    for i, name in enumerate(path):
        cmd = ctx.command.commands[name]
        if i == len(path) - 1:
            return cmd.make_context(name, list(args), parent=ctx)
        ctx = click.Context(cmd, info_name=name, parent=ctx)
    return ctx


# ── build_argv ───────────────────────────────────────────────────────


def test_defaults_are_not_forwarded():
    assert build_argv(_context(["build"], [])) == ["build"]


def test_options_then_positionals():
    ctx = _context(["validate"], ["--parallel", "--format", "junit:report.xml", "metadata", "manifests/"])

    assert build_argv(ctx) == [
        "validate", "--format=junit:report.xml", "--parallel", "metadata", "manifests/",
    ]


def test_repeated_option_forwarded_per_value():
    ctx = _context(["test", "unit"], ["--format", "text", "--format", "junit:out.xml"])

    assert build_argv(ctx) == ["test", "unit", "--format=text", "--format=junit:out.xml"]


def test_nested_path_and_long_option_name():
    ctx = _context(["set", "config"], ["--as", "boolean", "user.analytics.disabled", "true"])

    assert build_argv(ctx) == [
        "set", "config", "--type=boolean", "user.analytics.disabled", "true",
    ]


def test_short_flag_forwarded_as_long():
    ctx = _context(["validate"], ["-a"])

    assert build_argv(ctx) == ["validate", "--auto-correct"]


def test_group_options_forwarded():
    ctx = _context(["release"], ["--version", "1.2.3", "--force"])

    assert build_argv(ctx) == ["release", "--force", "--version=1.2.3"]


def test_bundle_passes_unknown_options_through():
    ctx = _context(["bundle"], ["exec", "rake", "--trace", "spec"])

    assert build_argv(ctx) == ["bundle", "exec", "rake", "--trace", "spec"]


def test_console_mixes_known_and_passthrough():
    ctx = _context(["console"], ["--puppet-version", "7", "--run-once"])

    assert build_argv(ctx) == ["console", "--puppet-version=7", "--run-once"]


# ── find_pdk_executable ──────────────────────────────────────────────


def test_env_override(tmp_path, monkeypatch):
    exe = tmp_path / "pdk"
    exe.write_text("")
    monkeypatch.setenv("PDK_RUBY_EXECUTABLE", str(exe))

    assert find_pdk_executable() == str(exe)


def test_env_override_missing_file(tmp_path, monkeypatch):
    monkeypatch.setenv("PDK_RUBY_EXECUTABLE", str(tmp_path / "missing"))

    with pytest.raises(PDKNotFoundError) as exc:
        find_pdk_executable()
    assert str(tmp_path / "missing") in str(exc.value)


def test_newest_install_wins(tmp_path, monkeypatch):
    monkeypatch.delenv("PDK_RUBY_EXECUTABLE", raising=False)
    for ver in ("2.7.0", "2.10.0", "2.9.12"):
        bin_dir = tmp_path / ver / "bin"
        bin_dir.mkdir(parents=True)
        (bin_dir / "pdk").write_text("")
    monkeypatch.setattr(execute, "INSTALL_GLOB", os.path.join(str(tmp_path), "*", "bin", "pdk"))

    assert find_pdk_executable() == str(tmp_path / "2.10.0" / "bin" / "pdk")


def test_no_install_found(tmp_path, monkeypatch):
    monkeypatch.delenv("PDK_RUBY_EXECUTABLE", raising=False)
    monkeypatch.setattr(execute, "INSTALL_GLOB", os.path.join(str(tmp_path), "*", "bin", "pdk"))

    with pytest.raises(PDKNotFoundError):
        find_pdk_executable()
