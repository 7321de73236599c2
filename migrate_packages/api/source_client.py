"""
Source registry client: catalog fetch and file download.

The catalog is read with cursor pagination over the GraphQL
``organization.packages`` connection. The fetch is all-or-nothing: any
failed page discards what was accumulated and raises FetchError.
"""

# Standard library imports
import logging
import os
import threading
from pathlib import Path
from typing import List, Optional

# Third-party imports
import httpx
from pydantic import ValidationError as PydanticValidationError

# Local imports
from ..exceptions import FetchError, TransferCancelledError
from ..models.graphql import PackagesPage
from ..models.packages import Package, PackageType, normalize_package_type
from ..utils import create_session_with_retry, ensure_directory_exists
from ..utils.constants import (
    FILES_PAGE_SIZE,
    MAX_CHUNK_SIZE,
    MIN_CHUNK_SIZE,
    PACKAGES_PAGE_SIZE,
    TRANSFER_TIMEOUT,
    VERSIONS_PAGE_SIZE,
)
from .auth import TokenAuth
from .graphql_client import GraphQLResponseError, RateLimitAwareGraphQLClient

PACKAGES_QUERY = f"""
query($login: String!, $first: Int!, $after: String, $packageType: PackageType) {{
  organization(login: $login) {{
    packages(first: $first, after: $after, packageType: $packageType) {{
      pageInfo {{ endCursor hasNextPage }}
      nodes {{
        id
        name
        packageType
        repository {{ name url }}
        statistics {{ downloadsTotalCount }}
        versions(first: {VERSIONS_PAGE_SIZE}) {{
          nodes {{
            id
            version
            summary
            preRelease
            platform
            createdAt
            updatedAt
            files(first: {FILES_PAGE_SIZE}) {{ nodes {{ name size sha256 url }} }}
          }}
        }}
      }}
    }}
  }}
}}
"""


class SourceRegistryClient:
    """Read packages from the source organization and download their files."""

    def __init__(
        self,
        token: str,
        hostname: Optional[str] = None,
        *,
        graphql: Optional[RateLimitAwareGraphQLClient] = None,
        session: Optional[httpx.Client] = None,
        page_size: int = PACKAGES_PAGE_SIZE,
    ) -> None:
        """
        Initialize the source client.

        Args:
            token: Access token with read:packages
            hostname: Optional GitHub Enterprise Server hostname
            graphql: Optional preconfigured GraphQL client
            session: Optional httpx client used for file downloads
            page_size: Packages requested per page
        """
        self.graphql = graphql or RateLimitAwareGraphQLClient(token, hostname)
        self.session = session or create_session_with_retry(auth=TokenAuth(token), timeout=TRANSFER_TIMEOUT)
        self.page_size = page_size

    # ============================================================================
    # Catalog
    # ============================================================================

    def fetch_packages(self, organization: str, package_type: Optional[str] = None) -> List[Package]:
        """
        Fetch every package of an organization, following the cursor to the last page.

        Args:
            organization: Organization login
            package_type: Optional lowercase package type filter

        Returns:
            Packages in page order

        Raises:
            FetchError: If any page request fails; no partial result is returned
        """
        variables = {
            "login": organization,
            "first": self.page_size,
            "after": None,
            "packageType": PackageType(normalize_package_type(package_type)).graphql_name if package_type else None,
        }
        packages: List[Package] = []
        page_number = 0

        while True:
            page_number += 1
            try:
                data = self.graphql.query(PACKAGES_QUERY, variables)
                page = PackagesPage.model_validate(data)
            except (httpx.HTTPError, GraphQLResponseError, PydanticValidationError, ValueError) as e:
                raise FetchError(f"failed to query packages for {organization} (page {page_number}): {e}") from e

            if page.organization is None:
                raise FetchError(f"organization '{organization}' not found or not accessible")

            connection = page.organization.packages
            packages.extend(node.to_package() for node in connection.nodes)
            logging.debug("Fetched page %d with %d packages", page_number, len(connection.nodes))

            if not connection.page_info.has_next_page:
                break
            variables["after"] = connection.page_info.end_cursor

        logging.info("Fetched %d packages from %s", len(packages), organization)
        return packages

    # ============================================================================
    # File Download
    # ============================================================================

    def download_file(
        self, url: str, destination: Path, cancel_event: Optional[threading.Event] = None
    ) -> int:
        """
        Stream a file to disk.

        The file is written to a ``.part`` sibling and renamed once complete,
        so an interrupted download never leaves a file that looks finished.

        Args:
            url: Source download URL
            destination: Final path of the file
            cancel_event: Checked between chunks; aborts the download when set

        Returns:
            Number of bytes written

        Raises:
            httpx.HTTPError: On transport errors or non-2xx responses
            TransferCancelledError: If the run is cancelled mid-download
        """
        logging.debug("Downloading %s", url)
        ensure_directory_exists(destination)
        partial = destination.with_name(destination.name + ".part")
        written = 0

        with self.session.stream("GET", url) as response:
            response.raise_for_status()

            # Use larger chunks for bigger files, but cap at 64KB
            content_length = response.headers.get("content-length")
            chunk_size = MIN_CHUNK_SIZE
            if content_length:
                chunk_size = min(max(MIN_CHUNK_SIZE, int(content_length) // 100), MAX_CHUNK_SIZE)

            try:
                with open(partial, "wb") as f:
                    for chunk in response.iter_bytes(chunk_size=chunk_size):
                        if cancel_event is not None and cancel_event.is_set():
                            raise TransferCancelledError(f"download of {destination.name} cancelled")
                        f.write(chunk)
                        written += len(chunk)
            except BaseException:
                if partial.exists():
                    partial.unlink()
                raise

        os.replace(partial, destination)
        return written

    def close(self) -> None:
        """Close sessions and release all connections."""
        self.session.close()
        self.graphql.close()

    def __enter__(self) -> "SourceRegistryClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["SourceRegistryClient", "PACKAGES_QUERY"]
