"""
Target registry client.

Wraps the registry endpoints of the target organization (container blobs
and manifests, npm publish, Maven layout PUTs, NuGet push, RubyGems push)
and the GitHub REST package API used for existence probes, metadata and
visibility. Every method issues a single request; retries are applied by
the transfer pipeline.
"""

# Standard library imports
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

# Third-party imports
import httpx

# Local imports
from ..utils import create_session_with_retry
from ..utils.constants import (
    CONTAINER_MANIFEST_MEDIA_TYPE,
    CONTAINER_REGISTRY_URL,
    GITHUB_REST_URL,
    MAVEN_REGISTRY_URL,
    NPM_REGISTRY_URL,
    NUGET_REGISTRY_URL,
    RUBYGEMS_REGISTRY_URL,
    TRANSFER_TIMEOUT,
)
from .auth import TokenAuth

REST_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": "2022-11-28",
}

# Versions listed per REST page during existence probes
VERSIONS_PER_PAGE = 100


class TargetRegistryClient:
    """Publish packages into the target organization."""

    def __init__(
        self,
        organization: str,
        token: str,
        *,
        session: Optional[httpx.Client] = None,
        rest_url: str = GITHUB_REST_URL,
    ) -> None:
        """
        Initialize the target client.

        Args:
            organization: Target organization login
            token: Access token with write:packages
            session: Optional preconfigured httpx client
            rest_url: GitHub REST API base URL
        """
        self.organization = organization
        self.rest_url = rest_url.rstrip("/")
        self.session = session or create_session_with_retry(auth=TokenAuth(token), timeout=TRANSFER_TIMEOUT)

    # ============================================================================
    # Response Handling
    # ============================================================================

    def _log_server_error(self, response: httpx.Response, operation: str) -> None:
        """Log detailed information for server errors (5xx)."""
        logging.error("SERVER ERROR (%d) during %s", response.status_code, operation)
        logging.error("  Method: %s", response.request.method if response.request else "Unknown")
        logging.error("  URL: %s", response.url)
        logging.error("  Body: %s", response.text[:500])

    def _check_response(self, response: httpx.Response, operation: str = "request") -> None:
        """Check if a response is successful, raise exception if not."""
        if response.is_success:
            return

        if response.status_code >= 500:
            self._log_server_error(response, operation)
        else:
            logging.debug("Client error during %s: %s - %s", operation, response.status_code, response.text)

        raise httpx.HTTPError(f"Failed to {operation}: {response.status_code} - {response.text}")

    def _exists(self, url: str, operation: str) -> bool:
        """HEAD probe: 200 means present, 404 means absent, anything else is an error."""
        response = self.session.head(url)
        if response.status_code == 404:
            return False
        self._check_response(response, operation)
        return response.status_code == 200

    # ============================================================================
    # Container Registry
    # ============================================================================

    def container_base_url(self, package_name: str) -> str:
        """Registry base URL of a container repository in the target organization."""
        return f"{CONTAINER_REGISTRY_URL}/{self.organization}/{package_name}"

    def blob_exists(self, package_name: str, digest: str) -> bool:
        """Check whether a blob is already stored in the target repository."""
        return self._exists(f"{self.container_base_url(package_name)}/blobs/{digest}", f"check blob {digest}")

    def upload_blob(self, package_name: str, digest: str, content: Union[bytes, Path]) -> None:
        """
        Upload a blob with a monolithic POST-then-PUT upload.

        Args:
            package_name: Target repository name
            digest: ``sha256:<hex>`` digest of the content
            content: Blob bytes or path of the file to stream
        """
        base_url = self.container_base_url(package_name)
        response = self.session.post(f"{base_url}/blobs/uploads/")
        self._check_response(response, f"start upload of blob {digest}")
        location = response.headers.get("Location")
        if not location:
            raise httpx.HTTPError(f"Failed to start upload of blob {digest}: no Location header")

        upload_url = httpx.URL(base_url).join(location).copy_merge_params({"digest": digest})
        headers = {"Content-Type": "application/octet-stream"}

        if isinstance(content, Path):
            headers["Content-Length"] = str(content.stat().st_size)
            with open(content, "rb") as f:
                response = self.session.put(upload_url, content=f, headers=headers)
        else:
            response = self.session.put(upload_url, content=content, headers=headers)
        self._check_response(response, f"upload blob {digest}")

    def manifest_exists(self, package_name: str, reference: str) -> bool:
        """Check whether a manifest exists for a tag or digest."""
        url = f"{self.container_base_url(package_name)}/manifests/{reference}"
        response = self.session.head(url, headers={"Accept": CONTAINER_MANIFEST_MEDIA_TYPE})
        if response.status_code == 404:
            return False
        self._check_response(response, f"check manifest {reference}")
        return response.status_code == 200

    def put_manifest(self, package_name: str, reference: str, manifest: Dict[str, Any]) -> None:
        """Upload an image manifest under a tag."""
        url = f"{self.container_base_url(package_name)}/manifests/{reference}"
        response = self.session.put(
            url,
            content=json.dumps(manifest).encode("utf-8"),
            headers={"Content-Type": manifest.get("mediaType", CONTAINER_MANIFEST_MEDIA_TYPE)},
        )
        self._check_response(response, f"upload manifest {reference}")

    # ============================================================================
    # Language Registries
    # ============================================================================

    def publish_npm(self, package_name: str, document: Dict[str, Any]) -> None:
        """PUT an npm publish document (metadata plus base64 tarball attachment)."""
        url = f"{NPM_REGISTRY_URL}/{quote(package_name, safe='@')}"
        response = self.session.put(url, json=document)
        self._check_response(response, f"publish npm package {package_name}")

    def maven_url(self, path: str) -> str:
        """URL of a file in the target organization's Maven repository."""
        return f"{MAVEN_REGISTRY_URL}/{self.organization}/{path}"

    def put_maven_file(self, path: str, content: Union[bytes, Path]) -> None:
        """PUT a file (artifact, POM or checksum sidecar) into the Maven layout."""
        url = self.maven_url(path)
        if isinstance(content, Path):
            with open(content, "rb") as f:
                response = self.session.put(url, content=f, headers={"Content-Length": str(content.stat().st_size)})
        else:
            response = self.session.put(url, content=content)
        self._check_response(response, f"upload {path}")

    def push_nuget(self, nupkg: Path) -> None:
        """Push a .nupkg as a multipart ``package`` upload."""
        url = f"{NUGET_REGISTRY_URL}/{self.organization}/upload"
        with open(nupkg, "rb") as f:
            response = self.session.put(url, files={"package": (nupkg.name, f, "application/octet-stream")})
        self._check_response(response, f"push {nupkg.name}")

    def push_gem(self, gem: Path) -> None:
        """Push a .gem file."""
        url = f"{RUBYGEMS_REGISTRY_URL}/{self.organization}/api/v1/gems"
        with open(gem, "rb") as f:
            response = self.session.post(
                url,
                content=f,
                headers={"Content-Type": "application/octet-stream", "Content-Length": str(gem.stat().st_size)},
            )
        self._check_response(response, f"push {gem.name}")

    # ============================================================================
    # GitHub Package API
    # ============================================================================

    def package_url(self, package_type: str, package_name: str) -> str:
        """REST URL of a package in the target organization."""
        return f"{self.rest_url}/orgs/{self.organization}/packages/{package_type}/{quote(package_name, safe='')}"

    def version_exists(self, package_type: str, package_name: str, version: str) -> bool:
        """
        Check whether a version of a package already exists in the target.

        Container versions are probed by manifest tag; other types are
        looked up in the package's version listing.
        """
        if package_type == "container":
            return self.manifest_exists(package_name, version)

        url = f"{self.package_url(package_type, package_name)}/versions"
        page = 1
        while True:
            response = self.session.get(url, params={"per_page": VERSIONS_PER_PAGE, "page": page}, headers=REST_HEADERS)
            if response.status_code == 404:
                return False
            self._check_response(response, f"list versions of {package_name}")
            versions = response.json()
            if any(v.get("name") == version for v in versions):
                return True
            if len(versions) < VERSIONS_PER_PAGE:
                return False
            page += 1

    def update_version_metadata(
        self, package_type: str, package_name: str, version: str, metadata: Dict[str, Any]
    ) -> None:
        """Apply free-form metadata to a version of a target package."""
        url = f"{self.package_url(package_type, package_name)}/versions/{quote(version, safe='')}"
        response = self.session.patch(url, json={"metadata": metadata}, headers=REST_HEADERS)
        self._check_response(response, f"update metadata of {package_name} {version}")

    def update_visibility(self, package_type: str, package_name: str, visibility: str) -> None:
        """Set the visibility of a target package."""
        response = self.session.patch(
            self.package_url(package_type, package_name), json={"visibility": visibility}, headers=REST_HEADERS
        )
        self._check_response(response, f"update visibility of {package_name}")

    def close(self) -> None:
        """Close the session and release all connections."""
        self.session.close()
        logging.debug("Target registry session closed")

    def __enter__(self) -> "TargetRegistryClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Optional[type], exc_val: Optional[BaseException], exc_tb: Optional[Any]) -> None:
        """Context manager exit - ensures session is closed."""
        self.close()


__all__ = ["TargetRegistryClient", "REST_HEADERS"]
