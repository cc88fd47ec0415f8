"""Command-line interface for the export reader."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import DEFAULT_MAX_NESTING_DEPTH, DEFAULT_WORKERS, ConverterConfig
from .converter import ExportConverter
from .error_handler import ErrorHandler
from .io import GCSObjectStore, LocalObjectStore, OutputSink
from .types import ObjectStoreInterface, OutputPolicy, ProcessingError


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr; stdout only carries JSON lines."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(threadName)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


@click.command()
@click.version_option(version=__version__)
@click.argument("source")
@click.option("--workers", "-w", default=DEFAULT_WORKERS, show_default=True,
              help="Number of shards converted in parallel")
@click.option("--format", "-f", "output_format",
              type=click.Choice([policy.value for policy in OutputPolicy]),
              default=OutputPolicy.EXPORT.value, show_default=True,
              help="JSON shape: export (collection/id/data) or backup (key/value)")
@click.option("--keep-going", is_flag=True,
              help="Keep converting other shards after a shard fails")
@click.option("--lenient-framing", is_flag=True,
              help="Drop corrupt blocks instead of failing the shard")
@click.option("--skip-checksums", is_flag=True,
              help="Do not verify chunk checksums")
@click.option("--strict-multiple", is_flag=True,
              help="Fail on multi-valued properties that are not contiguous")
@click.option("--max-depth", default=DEFAULT_MAX_NESTING_DEPTH, show_default=True,
              help="Maximum depth of embedded entities")
@click.option("--local-root", type=click.Path(exists=True, file_okay=False, path_type=Path),
              help="Read <bucket>/<prefix> from this directory instead of Cloud Storage")
@click.option("--project", help="Google Cloud project for the storage client")
@click.option("--profile", "enable_profiling", is_flag=True,
              help="Log duration, throughput and memory usage")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def main(source: str, workers: int, output_format: str, keep_going: bool,
         lenient_framing: bool, skip_checksums: bool, strict_multiple: bool,
         max_depth: int, local_root: Optional[Path], project: Optional[str],
         enable_profiling: bool, verbose: bool):
    """Convert export shards under SOURCE (<bucket>/<path-prefix>) to NDJSON on stdout."""
    _configure_logging(verbose)
    error_handler = ErrorHandler()

    source_validation = error_handler.validate_source_path(source)
    if not source_validation.is_valid:
        raise click.UsageError("; ".join(error.message for error in source_validation.errors))

    worker_validation = error_handler.validate_worker_count(workers)
    if not worker_validation.is_valid:
        raise click.UsageError("; ".join(error.message for error in worker_validation.errors))

    if max_depth < 1:
        raise click.UsageError("--max-depth must be at least 1")

    config = ConverterConfig(
        workers=workers,
        policy=output_format,
        strict_framing=not lenient_framing,
        verify_checksums=not skip_checksums,
        fail_fast=not keep_going,
        strict_multiple=strict_multiple,
        max_nesting_depth=max_depth,
        enable_profiling=enable_profiling,
    )

    try:
        store: ObjectStoreInterface
        if local_root is not None:
            store = LocalObjectStore(local_root)
        else:
            store = GCSObjectStore(project=project)

        converter = ExportConverter(store, config, OutputSink())
        report = converter.convert(source)
    except ProcessingError as e:
        response = error_handler.handle_processing_error(e)
        click.echo(f"❌ Error: {e}", err=True)
        click.echo(f"   {response.suggested_action}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
        sys.exit(1)

    if not report.success:
        for shard in report.failures:
            response = error_handler.handle_processing_error(shard.error)
            click.echo(f"❌ {shard.name}: {shard.error}", err=True)
            click.echo(f"   {response.suggested_action}", err=True)
        if report.skipped:
            click.echo(f"❌ {report.skipped} shards were not converted", err=True)
        sys.exit(1)

    if verbose:
        click.echo(f"✅ Converted {len(report.shards)} shards, {report.total_records} records", err=True)


if __name__ == '__main__':
    main()
