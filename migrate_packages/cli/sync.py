"""
Sync command for the migrate-packages CLI.

This module provides the sync command for migrating packages from one
organization to another.
"""

import logging
from typing import Optional

import click

from ..models import MigrationSummary
from ..models.context import SyncContext
from ..services import SyncService
from ..utils import setup_logging
from ..utils.constants import DEFAULT_MAX_RETRIES, DEFAULT_MAX_WORKERS, EXIT_GENERAL_ERROR, EXIT_PARTIAL_SUCCESS
from ..utils.error_handling import log_and_exit, with_error_handling
from .options import build_context, envvar, package_type_option


@click.command()
@click.option(
    "-s",
    "--source-organization",
    required=True,
    envvar=envvar("SOURCE_ORGANIZATION"),
    help="Source organization to sync packages from",
)
@click.option(
    "-t",
    "--target-organization",
    required=True,
    envvar=envvar("TARGET_ORGANIZATION"),
    help="Target organization to sync packages to",
)
@click.option(
    "-a",
    "--source-token",
    required=True,
    envvar=envvar("SOURCE_TOKEN"),
    help="Source organization GitHub token",
)
@click.option(
    "-b",
    "--target-token",
    required=True,
    envvar=envvar("TARGET_TOKEN"),
    help="Target organization GitHub token",
)
@click.option(
    "-m",
    "--mapping-file",
    type=click.Path(dir_okay=False),
    envvar=envvar("MAPPING_FILE"),
    help="CSV file mapping source package names to target package names",
)
@click.option(
    "-u",
    "--source-hostname",
    envvar=envvar("SOURCE_HOSTNAME"),
    help="GitHub Enterprise Server hostname of the source (optional)",
)
@package_type_option()
@click.option(
    "-k",
    "--skip-existing",
    is_flag=True,
    envvar=envvar("SKIP_EXISTING"),
    help="Skip versions that already exist in the target organization",
)
@click.option(
    "--max-concurrent",
    type=int,
    default=DEFAULT_MAX_WORKERS,
    show_default=True,
    help="Maximum number of packages migrated at the same time (1 migrates sequentially)",
)
@click.option(
    "--max-retries",
    type=int,
    default=DEFAULT_MAX_RETRIES,
    show_default=True,
    help="Attempts per upload or download before a version is marked failed",
)
@click.option(
    "--work-dir",
    type=click.Path(file_okay=False),
    help="Directory to stage downloads in (default: a temporary directory removed afterwards)",
)
@click.pass_context
def sync(  # pylint: disable=too-many-positional-arguments,too-many-arguments
    ctx: click.Context,
    source_organization: str,
    target_organization: str,
    source_token: str,
    target_token: str,
    mapping_file: Optional[str],
    source_hostname: Optional[str],
    package_type: Optional[str],
    skip_existing: bool,
    max_concurrent: int,
    max_retries: int,
    work_dir: Optional[str],
) -> None:
    """Migrate packages from a source organization to a target organization."""
    debug = ctx.obj["debug"] if ctx.obj else 0
    setup_logging(debug)

    context = build_context(
        SyncContext,
        source_organization=source_organization,
        target_organization=target_organization,
        source_token=source_token,
        target_token=target_token,
        mapping_file=mapping_file,
        source_hostname=source_hostname,
        package_type=package_type,
        skip_existing=skip_existing,
        max_workers=max_concurrent,
        max_retries=max_retries,
        work_dir=work_dir,
        debug=debug,
    )

    service = SyncService(context)
    try:
        summary = _run_sync(service)
    finally:
        service.close()
        logging.debug("Registry client sessions closed")

    if summary.has_failures:
        log_and_exit(
            f"{summary.partial + summary.failed} of {summary.total} packages were not fully migrated",
            EXIT_PARTIAL_SUCCESS,
        )

    logging.info("All packages migrated successfully")


@with_error_handling("sync operation", exit_on_error=True, exit_code=EXIT_GENERAL_ERROR)
def _run_sync(service: SyncService) -> MigrationSummary:
    return service.run()


__all__ = ["sync"]
