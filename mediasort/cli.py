"""CLI interface for mediasort."""

import logging
import sys
from pathlib import Path

import click

from mediasort.config import Config, config_from_dict, load_config, validate_config
from mediasort.errors import ConfigError
from mediasort.extractor import ExiftoolMetadataReader, ExiftoolNotFoundError, NullMetadataReader
from mediasort.extractor.reader import MetadataReader
from mediasort.pipeline import run_pipeline
from mediasort.report import format_statistics
from mediasort.report.units import plural

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "mediasort.toml"


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.ensure_object(dict)


@cli.command()
@click.argument("sources", nargs=-1, type=click.Path(path_type=Path))
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    help=f"Path to a TOML config file (default: ./{DEFAULT_CONFIG_NAME} if present)",
)
@click.option("--target", type=click.Path(path_type=Path), help="Target folder")
@click.option("--threads", type=int, help="Number of scanner threads")
@click.option("--min-files", type=int, help="Files a date needs to get its own folder")
@click.option(
    "--always-device-subdirs",
    is_flag=True,
    help="Create device folders even for a single device",
)
@click.option("--move", is_flag=True, help="Plan moves instead of copies")
@click.option(
    "--no-recursive", is_flag=True, help="Only read the top level of each source folder"
)
@click.option("--compact", type=int, help="Elide runs of same-status lines longer than N")
@click.option("--no-align", is_flag=True, help="Do not align preview columns")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output, no compaction")
@click.pass_context
def plan(
    ctx: click.Context,
    sources: tuple[Path, ...],
    config_path: Path | None,
    target: Path | None,
    threads: int | None,
    min_files: int | None,
    always_device_subdirs: bool,
    move: bool,
    no_recursive: bool,
    compact: int | None,
    no_align: bool,
    verbose: bool,
) -> None:
    """Preview how SOURCES would be sorted into date and device folders.

    Nothing is created, copied or moved.
    """
    try:
        config = _load(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    if sources:
        config.folders.source_dirs = list(sources)
    if target is not None:
        config.folders.target_dir = target
    if threads is not None:
        config.advanced.max_threads = threads
    if min_files is not None:
        config.folders.min_files_per_dir = min_files
    if compact is not None:
        config.folders.compacting_threshold = compact
    if always_device_subdirs:
        config.options.always_create_device_subdirs = True
    if move:
        config.options.copy_not_move = False
    if no_recursive:
        config.options.source_recursive = False
    if no_align:
        config.options.align_file_output = False
    if verbose:
        config.options.verbose = True

    _configure_logging(config.options.verbose)

    try:
        validate_config(config)
        report = run_pipeline(config, _metadata_reader())
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)
    except KeyboardInterrupt:
        sys.exit(130)

    for issue in report.scan.issues:
        click.echo(
            f"Warning: could not read source folder {issue.path}: {issue.message}", err=True
        )

    if report.plan.is_empty:
        click.echo("There are no supported files in the current source(s), nothing to do.")
        return

    click.echo("=" * 60)
    for source, files in report.scan.by_source().items():
        click.echo(f"Source folder:    {source} ({plural(len(files), 'file')})")
    click.echo(f"Target folder:    {config.folders.target_dir}")
    operation = "copied" if config.options.copy_not_move else "moved"
    planned = report.statistics.files_total - report.statistics.unsupported_skipped
    click.echo(f"Files to be {operation}: {planned}")
    click.echo("=" * 60)
    click.echo("This is a dry run. No folders will be created. No files will be copied or moved.")
    click.echo()

    for line in report.preview:
        click.echo(line)

    if report.unknown_extensions:
        quoted = ", ".join(f"'{ext}'" for ext in report.unknown_extensions)
        click.echo(f"Skipped files with these unknown extensions: {quoted}")
        click.echo()

    if report.non_custom_devices:
        quoted = ", ".join(f"'{name}'" for name in report.non_custom_devices)
        click.echo(f"Device models with non-custom names: {quoted}")
        click.echo()

    for line in format_statistics(report.statistics):
        click.echo(line)


def _load(config_path: Path | None) -> Config:
    if config_path is not None:
        return load_config(config_path)

    default = Path.cwd() / DEFAULT_CONFIG_NAME
    if default.is_file():
        logger.info("Using config file %s", default)
        return load_config(default)
    return config_from_dict({})


def _metadata_reader() -> MetadataReader:
    try:
        return ExiftoolMetadataReader()
    except ExiftoolNotFoundError as e:
        logger.warning("%s", e)
        click.echo(
            "Warning: exiftool not found, dates fall back to file modification times.",
            err=True,
        )
        return NullMetadataReader()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


if __name__ == "__main__":
    cli()
