"""
Test fixtures and sample data for migrate-packages tests.

This module provides catalog factories, GraphQL payload builders, registry
client doubles and builders for the package files each registry expects.

Best Practices for Temporary Files in Tests:
1. Prefer pytest's tmp_path fixture for test-specific temp directories
2. Build package archives with the ``artifacts`` fixture instead of checking in binaries
"""

import gzip
import io
import json
import tarfile
import threading
import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple
from unittest.mock import Mock

import httpx
import pytest
import respx
import yaml

from migrate_packages.api import TargetRegistryClient
from migrate_packages.models import Package, PackageFile, RepositoryRef, Version
from migrate_packages.transfer import RetryPolicy

FILES_BASE_URL = "https://files.example.com"
RESET_AT = "2030-01-01T00:00:00Z"


# ============================================================================
# HTTP Mocking
# ============================================================================


@pytest.fixture
def httpx_mock():
    """Provide respx mock for HTTP mocking."""
    with respx.mock:
        yield respx


class FakeGraphQLServer:
    """
    Scripted GraphQL endpoint for respx side effects.

    Rate limit probes are answered from ``rate_limits`` (plenty of budget
    once the list is exhausted); catalog queries are answered from ``pages``
    in order. Every request is recorded in ``events`` as ``"probe"`` or
    ``"query"``.
    """

    def __init__(self, pages: Sequence, rate_limits: Optional[Sequence[int]] = None) -> None:
        self.pages = list(pages)
        self.rate_limits = list(rate_limits or [])
        self.events: List[str] = []
        self.variables: List[Dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if "rateLimit" in body["query"]:
            self.events.append("probe")
            remaining = self.rate_limits.pop(0) if self.rate_limits else 5000
            return httpx.Response(200, json={"data": {"rateLimit": {"remaining": remaining, "resetAt": RESET_AT}}})

        self.events.append("query")
        self.variables.append(body["variables"])
        page = self.pages.pop(0)
        if isinstance(page, httpx.Response):
            return page
        return httpx.Response(200, json={"data": page})


class CatalogPayloads:
    """Builders for GraphQL catalog responses."""

    @staticmethod
    def file_node(name: str, size: int = 10) -> Dict:
        return {"name": name, "size": size, "sha256": None, "url": f"{FILES_BASE_URL}/{name}"}

    @staticmethod
    def version_node(version: str, files: Sequence[Tuple[str, int]] = (), **extra) -> Dict:
        node = {
            "id": f"V_{version}",
            "version": version,
            "summary": None,
            "preRelease": None,
            "platform": None,
            "createdAt": "2024-01-01T00:00:00Z",
            "updatedAt": "2024-01-02T00:00:00Z",
            "files": {"nodes": [CatalogPayloads.file_node(n, s) for n, s in files]},
        }
        node.update(extra)
        return node

    @staticmethod
    def package_node(name: str, package_type: str = "NPM", versions: Sequence[Dict] = ()) -> Dict:
        return {
            "id": f"P_{name}",
            "name": name,
            "packageType": package_type,
            "repository": {"name": "widgets", "url": "https://github.com/source-org/widgets"},
            "statistics": {"downloadsTotalCount": 7},
            "versions": {"nodes": list(versions)},
        }

    @staticmethod
    def page(nodes: Sequence[Dict], has_next: bool = False, cursor: Optional[str] = None) -> Dict:
        return {
            "organization": {
                "packages": {"pageInfo": {"endCursor": cursor, "hasNextPage": has_next}, "nodes": list(nodes)}
            }
        }


@pytest.fixture
def payloads():
    """GraphQL catalog payload builders."""
    return CatalogPayloads


@pytest.fixture
def graphql_server():
    """Factory for scripted GraphQL endpoints."""

    def _create(pages: Sequence, rate_limits: Optional[Sequence[int]] = None) -> FakeGraphQLServer:
        return FakeGraphQLServer(pages, rate_limits)

    return _create


# ============================================================================
# Catalog Models
# ============================================================================


@pytest.fixture
def make_version():
    """Factory for catalog versions; files are ``(name, size)`` pairs."""

    def _create(
        name: str = "1.0.0", files: Sequence[Tuple[str, int]] = (), package: str = "widgets", **kwargs
    ) -> Version:
        return Version(
            id=kwargs.pop("id", f"V_{name}"),
            name=name,
            files=tuple(
                PackageFile(name=n, size=s, url=f"{FILES_BASE_URL}/{package}/{name}/{n}") for n, s in files
            ),
            **kwargs,
        )

    return _create


@pytest.fixture
def make_package():
    """Factory for catalog packages."""

    def _create(name: str, package_type: str = "npm", versions: Sequence[Version] = (), **kwargs) -> Package:
        return Package(
            id=kwargs.pop("id", f"P_{name}"),
            name=name,
            package_type=package_type,
            repository=RepositoryRef(name="widgets", url="https://github.com/source-org/widgets"),
            versions=tuple(versions),
            **kwargs,
        )

    return _create


# ============================================================================
# Client Doubles
# ============================================================================


class FakeSource:
    """
    Source client double serving file contents from memory.

    ``failures`` maps a URL to the number of attempts that fail with a
    connection error before the download succeeds.
    """

    def __init__(self, contents: Optional[Dict[str, bytes]] = None, packages: Sequence[Package] = ()) -> None:
        self.contents: Dict[str, bytes] = dict(contents or {})
        self.packages = list(packages)
        self.failures: Dict[str, int] = {}
        self.downloads: List[str] = []
        self.closed = False
        self._lock = threading.Lock()

    def add_version(self, version: Version, contents: Dict[str, bytes]) -> None:
        """Register the contents of a version's files by file name."""
        for package_file in version.files:
            self.contents[package_file.url] = contents[package_file.name]

    def fetch_packages(self, organization: str, package_type: Optional[str] = None) -> List[Package]:
        return [p for p in self.packages if package_type is None or p.package_type == package_type]

    def download_file(self, url: str, destination: Path, cancel_event: Optional[threading.Event] = None) -> int:
        with self._lock:
            self.downloads.append(url)
            remaining = self.failures.get(url, 0)
            if remaining:
                self.failures[url] = remaining - 1
                raise httpx.ConnectError("connection reset by peer")
        data = self.contents[url]
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
        return len(data)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_source():
    """In-memory source client."""
    return FakeSource()


@pytest.fixture
def mock_target():
    """TargetRegistryClient mock where nothing exists in the target yet."""
    target = Mock(spec=TargetRegistryClient)
    target.organization = "target-org"
    target.version_exists.return_value = False
    target.blob_exists.return_value = False
    return target


@pytest.fixture
def fast_retry():
    """Retry policy that never sleeps between attempts."""
    return RetryPolicy(max_attempts=3, delay=0.0, wait=lambda seconds: False)


# ============================================================================
# Package Files
# ============================================================================


class ArtifactBuilder:
    """Builders for the files each registry expects."""

    @staticmethod
    def package_json(name: str, version: str, **fields) -> bytes:
        document = {"name": name, "version": version, "description": "Widgets for everyone"}
        document.update(fields)
        return json.dumps(document).encode("utf-8")

    @staticmethod
    def pom(group_id: str, artifact_id: str, version: str) -> bytes:
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<project xmlns="http://maven.apache.org/POM/4.0.0">\n'
            "  <modelVersion>4.0.0</modelVersion>\n"
            f"  <groupId>{group_id}</groupId>\n"
            f"  <artifactId>{artifact_id}</artifactId>\n"
            f"  <version>{version}</version>\n"
            "</project>\n"
        ).encode("utf-8")

    @staticmethod
    def nuspec(package_id: str, version: str) -> bytes:
        return (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            '<package xmlns="http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd">\n'
            "  <metadata>\n"
            f"    <id>{package_id}</id>\n"
            f"    <version>{version}</version>\n"
            "    <authors>octocat</authors>\n"
            "  </metadata>\n"
            "</package>\n"
        ).encode("utf-8")

    @staticmethod
    def nupkg(package_id: str, version: str) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr(f"{package_id}.nuspec", ArtifactBuilder.nuspec(package_id, version))
            archive.writestr("lib/net8.0/Widgets.dll", b"MZ")
        return buffer.getvalue()

    @staticmethod
    def gemspec(name: str, version: str) -> bytes:
        spec = (
            "--- !ruby/object:Gem::Specification\n"
            f"name: {name}\n"
            "version: !ruby/object:Gem::Version\n"
            f"  version: {version}\n"
            "platform: ruby\n"
            "authors:\n"
            "- octocat\n"
        )
        return spec.encode("utf-8")

    @staticmethod
    def gem(name: str, version: str, metadata: Optional[bytes] = None) -> bytes:
        compressed = gzip.compress(metadata if metadata is not None else ArtifactBuilder.gemspec(name, version))
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as archive:
            for member_name, data in (("metadata.gz", compressed), ("data.tar.gz", gzip.compress(b"lib"))):
                info = tarfile.TarInfo(member_name)
                info.size = len(data)
                archive.addfile(info, io.BytesIO(data))
        return buffer.getvalue()

    @staticmethod
    def layer(content: bytes = b"layer contents") -> bytes:
        return gzip.compress(content)

    @staticmethod
    def yaml_dump(data: Dict) -> bytes:
        return yaml.safe_dump(data).encode("utf-8")


@pytest.fixture
def artifacts():
    """Package file builders."""
    return ArtifactBuilder
