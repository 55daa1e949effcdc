from __future__ import annotations

"""Configuration commands."""

from pathlib import Path

import click

from distpub.core.config import GlobalConfig, create_example_config, default_registries

# Click context settings to enable -h as alias for --help
CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def create_config_group(cli: click.Group) -> click.Group:
    """Create and return the config command group.

    Args:
        cli: Parent CLI group to attach to

    Returns:
        The config command group
    """

    @cli.group(context_settings=CONTEXT_SETTINGS)
    def config() -> None:
        """Configuration commands."""
        pass

    @config.command("init")
    @click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
    @click.option("--force", is_flag=True, help="Overwrite an existing file")
    def config_init(output: Path, force: bool) -> None:
        """Write an example configuration file to OUTPUT."""
        if output.exists() and not force:
            click.echo(f"Error: {output} already exists (use --force to overwrite)", err=True)
            raise click.Abort()

        output.parent.mkdir(parents=True, exist_ok=True)
        create_example_config(output)
        click.echo(f"✓ Example configuration written to {output}")

    @config.command("registries")
    @click.pass_context
    def config_registries(ctx: click.Context) -> None:
        """List configured and built-in registries."""
        global_config: GlobalConfig = ctx.obj["config"]

        seen = set()
        for registry in global_config.registries + default_registries():
            if registry.name in seen:
                continue
            seen.add(registry.name)
            marker = "*" if registry.name == global_config.default_registry else " "
            click.echo(f"{marker} {registry.name:<16} {registry.url}")

    return config
