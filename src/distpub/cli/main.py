"""
Main CLI entry point for distpub.

This module provides the Click-based command-line interface for distpub.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from distpub import __version__
from distpub.core.config import GlobalConfig, load_config
from distpub.core.output import OutputLevel

from .config_commands import create_config_group
from .publish_commands import create_check_command, create_publish_command

# Click context settings to enable -h as alias for --help
CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.config/distpub/config.yaml, or $DISTPUB_CONFIG)",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors")
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: bool, quiet: bool) -> None:
    """distpub - Publish Python distributions to package registries.

    Uploads wheels and source distributions to PyPI and PyPI-compatible
    registries (Artifactory, Nexus, GitLab, pypiserver).
    """
    ctx.ensure_object(dict)

    if quiet:
        ctx.obj["output_level"] = OutputLevel.QUIET
    elif verbose:
        ctx.obj["output_level"] = OutputLevel.VERBOSE
    else:
        ctx.obj["output_level"] = OutputLevel.NORMAL

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        ctx.obj["config"] = load_config(config)
    except FileNotFoundError:
        if config:
            click.echo(f"Error: Configuration file not found: {config}", err=True)
            ctx.exit(1)
        else:
            ctx.obj["config"] = GlobalConfig()
    except ValueError as e:
        # YAML syntax error or validation error
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


create_publish_command(cli)
create_check_command(cli)
create_config_group(cli)


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
