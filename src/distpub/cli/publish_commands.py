from __future__ import annotations

"""Publish and check commands."""

from pathlib import Path
from typing import Optional, Tuple

import click

from distpub.core.client import create_session
from distpub.core.config import TOKEN_USERNAME, GlobalConfig
from distpub.core.errors import PublishError, format_error_chain
from distpub.core.filename import DistFilename
from distpub.core.files import files_for_publishing
from distpub.core.output import PublishOutputter
from distpub.core.publisher import Publisher
from distpub.core.uploader import prepare_form

DEFAULT_FILES = ("dist/*",)


def resolve_credentials(
    username: Optional[str],
    password: Optional[str],
    token: Optional[str],
    config_username: Optional[str] = None,
    config_password: Optional[str] = None,
) -> Tuple[Optional[str], Optional[str]]:
    """Combine command line and configured credentials.

    Command line values win over configured ones. A token is sent as the
    password of the ``__token__`` user.

    Raises:
        click.UsageError: If a token is combined with username or password
    """
    if token:
        if password or (username and username != TOKEN_USERNAME):
            raise click.UsageError("--token cannot be combined with --username or --password")
        return TOKEN_USERNAME, token
    return username or config_username, password or config_password


def create_publish_command(cli: click.Group) -> click.Command:
    """Create and attach the publish command.

    Args:
        cli: Parent CLI group to attach to

    Returns:
        The publish command
    """

    @cli.command("publish")
    @click.argument("files", nargs=-1)
    @click.option(
        "--publish-url",
        envvar="DISTPUB_PUBLISH_URL",
        help="Upload endpoint (overrides the registry's URL)",
    )
    @click.option("--registry", "registry_name", help="Registry name from the configuration")
    @click.option("--username", "-u", envvar="DISTPUB_USERNAME", help="Username for the upload")
    @click.option("--password", "-p", envvar="DISTPUB_PASSWORD", help="Password for the upload")
    @click.option(
        "--token", "-t", envvar="DISTPUB_TOKEN", help="API token (sent as user __token__)"
    )
    @click.pass_context
    def publish(
        ctx: click.Context,
        files: Tuple[str, ...],
        publish_url: Optional[str],
        registry_name: Optional[str],
        username: Optional[str],
        password: Optional[str],
        token: Optional[str],
    ) -> None:
        """Upload distributions to a registry.

        FILES are glob patterns; the default is dist/*. Files that already
        exist on the registry are skipped.

        Examples:
          distpub publish
          distpub publish --registry testpypi dist/*.whl
          distpub publish --publish-url https://nexus.example.com/repository/pypi/ -u deploy
        """
        config: GlobalConfig = ctx.obj["config"]
        outputter = PublishOutputter(ctx.obj["output_level"])

        registry = config.get_registry(registry_name)
        if registry is None and not publish_url:
            raise click.UsageError(f"Unknown registry: {registry_name or config.default_registry}")

        upload_url = publish_url or registry.url
        config_username, config_password = registry.credentials() if registry else (None, None)
        username, password = resolve_credentials(
            username, password, token, config_username, config_password
        )

        try:
            dist_files = files_for_publishing(list(files or DEFAULT_FILES))
        except PublishError as e:
            outputter.error(format_error_chain(e))
            ctx.exit(1)

        def announce(path: Path, filename: DistFilename) -> None:
            try:
                size: Optional[int] = path.stat().st_size
            except OSError:
                # The upload itself reports the unreadable file
                size = None
            outputter.uploading(str(filename), size)

        publisher = Publisher(
            session=create_session(config.proxy, config.ssl),
            registry=upload_url,
            username=username,
            password=password,
            reporter=outputter.reporter(),
            timeout=config.upload.timeout,
            on_upload_start=announce,
        )

        outputter.header(upload_url, len(dist_files))
        try:
            summary = publisher.publish_files(dist_files)
        except PublishError as e:
            outputter.error(format_error_chain(e))
            ctx.exit(1)

        for path in summary.skipped:
            outputter.warning(f"File {path.name} already exists, skipping")
        outputter.summary(uploaded=len(summary.uploaded), skipped=len(summary.skipped))

    return publish


def create_check_command(cli: click.Group) -> click.Command:
    """Create and attach the check command.

    Args:
        cli: Parent CLI group to attach to

    Returns:
        The check command
    """

    @cli.command("check")
    @click.argument("files", nargs=-1)
    @click.pass_context
    def check(ctx: click.Context, files: Tuple[str, ...]) -> None:
        """Validate distributions without uploading them.

        Classifies each file matched by FILES (default dist/*), reads its
        metadata and builds the upload form.
        """
        outputter = PublishOutputter(ctx.obj["output_level"])

        try:
            dist_files = files_for_publishing(list(files or DEFAULT_FILES))
        except PublishError as e:
            outputter.error(format_error_chain(e))
            ctx.exit(1)

        failed = 0
        for path, filename in dist_files:
            try:
                form = prepare_form(path, filename)
            except PublishError as e:
                outputter.error(format_error_chain(e))
                failed += 1
                continue

            fields = dict(form)
            outputter.success(
                f"{filename}: {fields['name']} {fields['version']} ({fields['filetype']})"
            )
            for name, value in form:
                if name != "description":
                    outputter.verbose(f"  {name}: {value}")

        if failed:
            ctx.exit(1)

    return check
