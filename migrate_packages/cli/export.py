"""
Export command for the migrate-packages CLI.

This module provides the export command for writing an organization's
package catalog to CSV files and optionally downloading every version.
"""

from typing import Optional

import click

from ..models import ExportResult
from ..models.context import ExportContext
from ..services import ExportService
from ..utils import format_file_size, setup_logging
from ..utils.constants import EXIT_GENERAL_ERROR, EXIT_PARTIAL_SUCCESS
from ..utils.error_handling import log_and_exit, with_error_handling
from .options import build_context, envvar, package_type_option


@click.command()
@click.option(
    "-o",
    "--organization",
    required=True,
    envvar=envvar("SOURCE_ORGANIZATION"),
    help="Organization to export packages from",
)
@click.option(
    "-t",
    "--token",
    required=True,
    envvar=envvar("SOURCE_TOKEN"),
    help="GitHub token with read access to the organization's packages",
)
@click.option(
    "-f",
    "--file-prefix",
    envvar=envvar("OUTPUT_FILE"),
    help="Prefix for the generated CSV files (default: the organization name)",
)
@click.option(
    "-u",
    "--hostname",
    envvar=envvar("SOURCE_HOSTNAME"),
    help="GitHub Enterprise Server hostname (optional)",
)
@package_type_option()
@click.option(
    "--download/--no-download",
    default=False,
    show_default=True,
    help="Download every version's files after writing the CSVs",
)
@click.option(
    "--download-path",
    type=click.Path(file_okay=False),
    default="downloads",
    show_default=True,
    help="Directory downloaded files are written to",
)
@click.pass_context
def export(  # pylint: disable=too-many-positional-arguments,too-many-arguments
    ctx: click.Context,
    organization: str,
    token: str,
    file_prefix: Optional[str],
    hostname: Optional[str],
    package_type: Optional[str],
    download: bool,
    download_path: str,
) -> None:
    """Export an organization's packages and versions to CSV files."""
    debug = ctx.obj["debug"] if ctx.obj else 0
    setup_logging(debug)

    context = build_context(
        ExportContext,
        organization=organization,
        token=token,
        file_prefix=file_prefix,
        hostname=hostname,
        package_type=package_type,
        download=download,
        download_path=download_path,
        debug=debug,
    )

    service = ExportService(context)
    try:
        result = _run_export(service)
    finally:
        service.close()

    click.echo(f"Exported {result.packages_count} packages to {result.packages_csv}")
    click.echo(f"Exported {result.versions_count} versions to {result.versions_csv}")
    if context.download:
        click.echo(
            f"Downloaded {result.downloads_completed} versions "
            f"({format_file_size(result.bytes_downloaded)}), {result.downloads_failed} failed"
        )

    if result.has_download_failures:
        log_and_exit(f"{result.downloads_failed} version download(s) failed", EXIT_PARTIAL_SUCCESS)


@with_error_handling("export operation", exit_on_error=True, exit_code=EXIT_GENERAL_ERROR)
def _run_export(service: ExportService) -> ExportResult:
    return service.run()


__all__ = ["export"]
