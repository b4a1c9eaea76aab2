"""Click CLI entry point for pdk.

Every command except `version` and `completion` is handed over to the
external PDK executable; this module only builds the command tree.
"""
from __future__ import annotations

import logging

import click
from click.shell_completion import get_completion_class

from pdk import __version__, commit, date
from pdk.analytics import Client, TelemetryBarrier, ensure_registration, load_config
from pdk.execute import execute_pdk_command
from pdk.version import format_version

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}

debug_option = click.option("--debug", is_flag=True, help="Enable debug output.")


def puppet_version_options(f):
    """--puppet-version, --pe-version and --puppet-dev."""
    f = click.option("--puppet-dev", is_flag=True,
                     help="Use the puppet/puppet repository HEAD.")(f)
    f = click.option("--pe-version", help="Puppet Enterprise version to run against.")(f)
    f = click.option("--puppet-version", help="Puppet version to run against.")(f)
    return f


def init_logger(level: str) -> None:
    logging.basicConfig(
        level=LOG_LEVELS.get(level, logging.WARNING),
        format="%(name)s: %(message)s",
    )


def _help_without_subcommand(ctx: click.Context) -> None:
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def create_root_command() -> click.Group:
    @click.group("pdk", invoke_without_command=True)
    @click.version_option(
        version=__version__, prog_name="pdk",
        message=format_version(__version__, date, commit).rstrip("\n"),
    )
    @click.option("--log-level", type=click.Choice(list(LOG_LEVELS)), default="warn",
                  help="Set the log level.")
    @click.pass_context
    def pdk(ctx: click.Context, log_level: str) -> None:
        """Puppet Development Kit - tools to develop Puppet modules."""
        init_logger(log_level)
        _help_without_subcommand(ctx)

    pdk.add_command(create_version_command())
    pdk.add_command(create_completion_command())

    test = create_container_command("test", "Run tests.")
    test.add_command(create_unit_command())
    pdk.add_command(test)

    pdk.add_command(create_build_command())
    pdk.add_command(create_convert_command())
    pdk.add_command(create_update_command())

    release = create_release_command()
    release.add_command(create_release_prep_command())
    release.add_command(create_release_publish_command())
    pdk.add_command(release)

    pdk.add_command(create_env_command())
    pdk.add_command(create_validate_command())

    set_ = create_container_command("set", "Set or update information about the PDK or current project.")
    set_.add_command(create_set_config_command())
    pdk.add_command(set_)

    get = create_container_command("get", "Retrieve information about the PDK or current project.")
    get.add_command(create_get_config_command())
    pdk.add_command(get)

    remove = create_container_command("remove", "Remove or delete information about the PDK or current project.")
    remove.add_command(create_remove_config_command())
    pdk.add_command(remove)

    new = create_container_command("new", "Create a new module, etc.")
    new.add_command(create_new_fact_command())
    pdk.add_command(new)

    pdk.add_command(create_bundle_command())
    pdk.add_command(create_console_command())
    return pdk


def create_container_command(name: str, short_help: str) -> click.Group:
    """A group that only holds subcommands and shows help on its own."""
    @click.group(name, invoke_without_command=True, help=short_help)
    @click.pass_context
    def group(ctx: click.Context) -> None:
        _help_without_subcommand(ctx)
    return group


def create_version_command() -> click.Command:
    @click.command("version")
    def version() -> None:
        """Display version information."""
        click.echo(format_version(__version__, date, commit), nl=False)
    return version


def create_completion_command() -> click.Command:
    @click.command("completion")
    @click.argument("shell", type=click.Choice(["bash", "zsh", "fish"]))
    @click.pass_context
    def completion(ctx: click.Context, shell: str) -> None:
        """Generate the autocompletion script for SHELL."""
        root = ctx.find_root()
        comp_cls = get_completion_class(shell)
        comp = comp_cls(root.command, {}, root.info_name or "pdk", "_PDK_COMPLETE")
        click.echo(comp.source())
    return completion


def create_unit_command() -> click.Command:
    @click.command("unit")
    @click.option("--list", "list_tests", is_flag=True, help="List all available unit test files.")
    @click.option("--parallel", is_flag=True, help="Run unit tests in parallel.")
    @click.option("--clean-fixtures", is_flag=True, help="Clean up downloaded fixtures after the test run.")
    @click.option("--verbose", is_flag=True, help="More verbose output. Displays examples in each unit test file.")
    @click.option("--tests", help="Specify a comma-separated list of unit test files to run.")
    @click.option("--format", "formats", multiple=True,
                  help="Specify desired output format, optionally with a target file (FORMAT[:TARGET]).")
    @puppet_version_options
    @debug_option
    @click.pass_context
    def unit(ctx: click.Context, **_) -> None:
        """Run unit tests."""
        execute_pdk_command(ctx)
    return unit


def create_build_command() -> click.Command:
    @click.command("build")
    @click.option("--force", is_flag=True, help="Skips the prompts and builds the module package.")
    @click.option("--target-dir", type=click.Path(file_okay=False),
                  help="The target directory where you want PDK to write the package.")
    @debug_option
    @click.pass_context
    def build(ctx: click.Context, **_) -> None:
        """Builds a package from the module that can be published to the Puppet Forge."""
        execute_pdk_command(ctx)
    return build


def create_convert_command() -> click.Command:
    @click.command("convert")
    @click.option("--noop", is_flag=True, help="Do not convert the module, just output what would be done.")
    @click.option("--force", is_flag=True, help="Convert the module automatically, with no prompts.")
    @click.option("--template-url", help="Specifies the URL to the template to use when converting.")
    @click.option("--template-ref", help="Specifies the template git branch or tag to use.")
    @click.option("--skip-interview", is_flag=True, help="When specified, skips interactive querying of metadata.")
    @click.option("--full-interview", is_flag=True, help="When specified, interactive querying of metadata will include all optional questions.")
    @click.option("--add-tests", is_flag=True, help="Add any missing tests while converting the module.")
    @click.option("--default-template", is_flag=True, help="Convert the module to use the default PDK template.")
    @debug_option
    @click.pass_context
    def convert(ctx: click.Context, **_) -> None:
        """Convert an existing module to be compatible with the PDK."""
        execute_pdk_command(ctx)
    return convert


def create_update_command() -> click.Command:
    @click.command("update")
    @click.option("--noop", is_flag=True, help="Do not update the module, just output what would be done.")
    @click.option("--force", is_flag=True, help="Update the module automatically, with no prompts.")
    @click.option("--template-ref", help="Specifies the template git branch or tag to use.")
    @debug_option
    @click.pass_context
    def update(ctx: click.Context, **_) -> None:
        """Update a module that has been created by or converted for use by PDK."""
        execute_pdk_command(ctx)
    return update


def _release_options(f):
    f = click.option("--version", "release_version", help="Release the module with a specific version.")(f)
    f = click.option("--skip-documentation", is_flag=True, help="Skips the documentation update.")(f)
    f = click.option("--skip-dependency", is_flag=True, help="Skips the module dependency check.")(f)
    f = click.option("--skip-changelog", is_flag=True, help="Skips the automatic changelog generation.")(f)
    f = click.option("--skip-validation", is_flag=True, help="Skips the module validation check.")(f)
    f = click.option("--force", is_flag=True, help="Release the module automatically, with no prompts.")(f)
    return f


def _publish_options(f):
    f = click.option("--file", "package_file", type=click.Path(dir_okay=False),
                     help="Path to the built module to push to the Forge.")(f)
    f = click.option("--forge-token", help="Set Forge API token.")(f)
    f = click.option("--forge-upload-url", help="Set forge upload url path.")(f)
    return f


def create_release_command() -> click.Group:
    @click.group("release", invoke_without_command=True)
    @_release_options
    @_publish_options
    @click.option("--skip-build", is_flag=True, help="Skips module build.")
    @click.option("--skip-publish", is_flag=True, help="Skips publishing the module to the forge.")
    @debug_option
    @click.pass_context
    def release(ctx: click.Context, **_) -> None:
        """Release a module to the Puppet Forge."""
        if ctx.invoked_subcommand is None:
            execute_pdk_command(ctx)

    release.runs_without_subcommand = True
    return release


def create_release_prep_command() -> click.Command:
    @click.command("prep")
    @_release_options
    @debug_option
    @click.pass_context
    def prep(ctx: click.Context, **_) -> None:
        """Performs all the pre-release checks to ensure module is ready to be released."""
        execute_pdk_command(ctx)
    return prep


def create_release_publish_command() -> click.Command:
    @click.command("publish")
    @click.option("--force", is_flag=True, help="Publish the module automatically, with no prompts.")
    @_publish_options
    @debug_option
    @click.pass_context
    def publish(ctx: click.Context, **_) -> None:
        """Publishes the module to the Forge."""
        execute_pdk_command(ctx)
    return publish


def create_env_command() -> click.Command:
    @click.command("env")
    @puppet_version_options
    @debug_option
    @click.pass_context
    def env(ctx: click.Context, **_) -> None:
        """Output environment variables for specific Puppet context."""
        execute_pdk_command(ctx)
    return env


def create_validate_command() -> click.Command:
    @click.command("validate")
    @click.argument("targets", nargs=-1)
    @click.option("--list", "list_validators", is_flag=True, help="List all available validators.")
    @click.option("--format", "formats", multiple=True,
                  help="Specify desired output format, optionally with a target file (FORMAT[:TARGET]).")
    @click.option("--parallel", is_flag=True, help="Run validations in parallel.")
    @click.option("-a", "--auto-correct", is_flag=True, help="Automatically correct problems where possible.")
    @puppet_version_options
    @debug_option
    @click.pass_context
    def validate(ctx: click.Context, **_) -> None:
        """Run static analysis tests.

        TARGETS are validator names followed by files or directories to check.
        """
        execute_pdk_command(ctx)
    return validate


def create_set_config_command() -> click.Command:
    @click.command("config")
    @click.argument("name")
    @click.argument("value")
    @click.option("--type", "--as", "value_type",
                  type=click.Choice(["array", "boolean", "number", "string"]),
                  help="The type of value to set.")
    @click.option("--force", is_flag=True, help="Force the configuration setting to be overwritten.")
    @debug_option
    @click.pass_context
    def set_config(ctx: click.Context, **_) -> None:
        """Set or update the configuration for NAME."""
        execute_pdk_command(ctx)
    return set_config


def create_get_config_command() -> click.Command:
    @click.command("config")
    @click.argument("name", required=False)
    @click.option("--format", "output_format", type=click.Choice(["text", "json"]),
                  help="Specify desired output format.")
    @debug_option
    @click.pass_context
    def get_config(ctx: click.Context, **_) -> None:
        """Retrieve the configuration for NAME, or all configuration if omitted."""
        execute_pdk_command(ctx)
    return get_config


def create_remove_config_command() -> click.Command:
    @click.command("config")
    @click.argument("name")
    @click.argument("value", required=False)
    @click.option("--force", is_flag=True, help="Force multi-value configuration settings to be removed instead of emptied.")
    @debug_option
    @click.pass_context
    def remove_config(ctx: click.Context, **_) -> None:
        """Remove VALUE from the configuration NAME, or clear NAME entirely."""
        execute_pdk_command(ctx)
    return remove_config


def create_new_fact_command() -> click.Command:
    @click.command("fact")
    @click.argument("name", required=False)
    @debug_option
    @click.pass_context
    def fact(ctx: click.Context, **_) -> None:
        """Create a new custom fact named NAME."""
        execute_pdk_command(ctx)
    return fact


def create_bundle_command() -> click.Command:
    @click.command("bundle", context_settings={"ignore_unknown_options": True})
    @click.argument("args", nargs=-1, type=click.UNPROCESSED)
    @click.pass_context
    def bundle(ctx: click.Context, args: tuple[str, ...]) -> None:
        """(Experimental) Command pass-through to bundler."""
        execute_pdk_command(ctx)
    return bundle


def create_console_command() -> click.Command:
    @click.command("console", context_settings={"ignore_unknown_options": True})
    @click.argument("args", nargs=-1, type=click.UNPROCESSED)
    @puppet_version_options
    @debug_option
    @click.pass_context
    def console(ctx: click.Context, **_) -> None:
        """(Experimental) Start a session of the puppet debugger console."""
        execute_pdk_command(ctx)
    return console


def build_cli(barrier: TelemetryBarrier) -> click.Group:
    """Build the command tree with analytics attached."""
    return ensure_registration(create_root_command(), barrier)


def main() -> None:
    """Entry point."""
    config = load_config()
    cli = build_cli(TelemetryBarrier(Client(config)))
    cli(prog_name="pdk")


if __name__ == "__main__":
    main()
