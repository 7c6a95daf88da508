"""Command-line interface for workspace-size."""

from __future__ import annotations

from pathlib import Path

import click

from workspace_size.core.config import ConfigurationError, discover_config_file


def validate_config_path(
    ctx: click.Context,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    param: click.Parameter,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    value: Path | None,
) -> Path | None:
    """Validate configuration file path.

    Args:
        ctx: Click context (required by Click callback signature)
        param: Click parameter (required by Click callback signature)
        value: Path value to validate

    Returns:
        Validated Path object

    Raises:
        click.BadParameter: If validation fails
    """
    if value is None:
        return value

    if value.exists() and value.is_dir():
        raise click.BadParameter('Configuration path must be a file, not a directory')

    valid_extensions = {'.yaml', '.yml'}
    if value.suffix.lower() not in valid_extensions:
        extensions_str = ", ".join(sorted(valid_extensions))
        raise click.BadParameter(
            f'Invalid configuration file extension. Supported extensions: {extensions_str}'
        )

    return value


def validate_log_level(
    ctx: click.Context,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    param: click.Parameter,  # pyright: ignore[reportUnusedParameter] # required by Click callback signature
    value: str | None,
) -> str | None:
    """Validate and normalize log level.

    Raises:
        click.BadParameter: If the level is not recognised
    """
    if value is None:
        return value

    normalized_value = value.upper().strip()

    valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
    if normalized_value not in valid_levels:
        raise click.BadParameter(
            f'Invalid log level "{value}". Valid options: {", ".join(sorted(valid_levels))}'
        )

    return normalized_value


try:
    from importlib.metadata import PackageNotFoundError, version
    __version__ = version("workspace-size")
except PackageNotFoundError:
    __version__ = "unknown"


@click.command()
@click.argument(
    'roots',
    nargs=-1,
    type=click.Path(path_type=Path, file_okay=False),
)
@click.option(
    '--config', '-c',
    type=click.Path(path_type=Path),
    default=None,
    callback=validate_config_path,
    help='Configuration file path (.yaml or .yml). If not specified, searches for config files in standard locations.'
)
@click.option(
    '--concurrency', '-j',
    type=click.IntRange(min=1),
    default=None,
    help='Maximum number of stat operations in flight per directory batch (default: 32 or the configured value)'
)
@click.option(
    '--timeout', '-t',
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help='Cancel the scan after this many seconds'
)
@click.option(
    '--format', '-f', 'output_format',
    type=click.Choice(['text', 'json']),
    default='text',
    help='Output format'
)
@click.option(
    '--log-level', '-l',
    type=str,
    default=None,
    callback=validate_log_level,
    help='Logging verbosity level (DEBUG, INFO, WARNING, ERROR, CRITICAL)'
)
@click.version_option(version=__version__, prog_name='workspace-size')
def cli(
    roots: tuple[Path, ...],
    config: Path | None,
    concurrency: int | None,
    timeout: float | None,
    output_format: str,
    log_level: str | None,
) -> None:
    """Workspace Size - measure the total size of directory trees.

    Sums the sizes of all regular files beneath each ROOT (default: the
    configured roots, or the current directory). Symbolic links are never
    followed. Press Ctrl+C to cancel a long scan.

    Examples:

        # Measure the current directory
        workspace-size

        # Measure two projects and print JSON
        workspace-size ~/src/api ~/src/web --format json

        # Limit concurrent stats on a slow network share
        workspace-size /mnt/share --concurrency 4 --timeout 60
    """
    from workspace_size.app.runner import ApplicationRunner, render_json, render_text

    config_path = config if config is not None else discover_config_file()

    runner = ApplicationRunner(
        config_path=config_path,
        roots=roots,
        stat_concurrency=concurrency,
        timeout=timeout,
        log_level=log_level,
    )

    try:
        report = runner.run()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    if report.cancelled:
        click.echo(report.error_message or "Scan cancelled", err=True)
        click.get_current_context().exit(report.exit_code)
    if report.error_message is not None:
        raise click.ClickException(report.error_message)

    if output_format == 'json':
        click.echo(render_json(report))
    else:
        click.echo(render_text(report))
