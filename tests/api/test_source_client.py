"""
Tests for SourceRegistryClient.

This module tests paginated catalog fetch and streamed file download.
"""

import threading

import httpx
import pytest

from migrate_packages.api import RateLimitAwareGraphQLClient, SourceRegistryClient
from migrate_packages.exceptions import FetchError, TransferCancelledError

ENDPOINT = "https://api.github.com/graphql"


@pytest.fixture
def source_client():
    """Source client whose rate limit waits return immediately."""
    graphql = RateLimitAwareGraphQLClient("ghp_example", sleep=lambda seconds: None)
    client = SourceRegistryClient("ghp_example", graphql=graphql, page_size=2)
    yield client
    client.close()


class TestFetchPackages:
    """Test catalog pagination."""

    def test_concatenates_pages_in_order(self, httpx_mock, graphql_server, payloads, source_client):
        """Test every page is fetched and packages keep page order."""
        server = graphql_server(
            [
                payloads.page(
                    [payloads.package_node("@octo/a"), payloads.package_node("@octo/b")], has_next=True, cursor="c1"
                ),
                payloads.page([payloads.package_node("@octo/c", versions=[payloads.version_node("1.0.0")])]),
            ]
        )
        httpx_mock.post(ENDPOINT).mock(side_effect=server)

        packages = source_client.fetch_packages("source-org")

        assert [p.name for p in packages] == ["@octo/a", "@octo/b", "@octo/c"]
        assert packages[2].versions[0].name == "1.0.0"
        assert [v["after"] for v in server.variables] == [None, "c1"]
        assert server.variables[0]["login"] == "source-org"
        assert server.variables[0]["first"] == 2
        assert server.events == ["probe", "query", "probe", "query"]

    def test_package_type_filter(self, httpx_mock, graphql_server, payloads, source_client):
        """Test the container filter uses the DOCKER enum value."""
        server = graphql_server([payloads.page([payloads.package_node("api", "DOCKER")])])
        httpx_mock.post(ENDPOINT).mock(side_effect=server)

        packages = source_client.fetch_packages("source-org", "container")

        assert server.variables[0]["packageType"] == "DOCKER"
        assert packages[0].package_type == "container"

    def test_no_filter(self, httpx_mock, graphql_server, payloads, source_client):
        """Test all types are requested without a filter."""
        server = graphql_server([payloads.page([])])
        httpx_mock.post(ENDPOINT).mock(side_effect=server)

        assert source_client.fetch_packages("source-org") == []
        assert server.variables[0]["packageType"] is None

    def test_failed_page_discards_everything(self, httpx_mock, graphql_server, payloads, source_client):
        """Test a failure on page 2 returns no partial catalog."""
        server = graphql_server(
            [
                payloads.page([payloads.package_node("@octo/a")], has_next=True, cursor="c1"),
                httpx.Response(502, text="Bad Gateway"),
            ]
        )
        httpx_mock.post(ENDPOINT).mock(side_effect=server)

        with pytest.raises(FetchError) as exc_info:
            source_client.fetch_packages("source-org")

        assert "page 2" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, httpx.HTTPError)

    def test_graphql_errors_raise_fetch_error(self, httpx_mock, source_client):
        """Test GraphQL errors are reported as FetchError."""
        httpx_mock.post(ENDPOINT).mock(
            side_effect=[
                httpx.Response(200, json={"data": {"rateLimit": {"remaining": 1, "resetAt": "2030-01-01T00:00:00Z"}}}),
                httpx.Response(200, json={"errors": [{"message": "Something went wrong"}]}),
            ]
        )

        with pytest.raises(FetchError, match="Something went wrong"):
            source_client.fetch_packages("source-org")

    def test_null_data_raises_fetch_error(self, httpx_mock, source_client):
        """Test a response with null data and no errors is reported as FetchError."""
        httpx_mock.post(ENDPOINT).mock(return_value=httpx.Response(200, json={"data": None}))

        with pytest.raises(FetchError, match="page 1"):
            source_client.fetch_packages("source-org")

    def test_unknown_organization(self, httpx_mock, graphql_server, source_client):
        """Test a null organization raises FetchError."""
        httpx_mock.post(ENDPOINT).mock(side_effect=graphql_server([{"organization": None}]))

        with pytest.raises(FetchError, match="not found or not accessible"):
            source_client.fetch_packages("missing-org")


class TestDownloadFile:
    """Test streamed downloads."""

    def test_download_writes_file(self, httpx_mock, source_client, tmp_path):
        """Test the file is written and its size returned."""
        url = "https://files.example.com/widgets-1.0.0.tgz"
        httpx_mock.get(url).mock(return_value=httpx.Response(200, content=b"tarball bytes"))
        destination = tmp_path / "npm" / "widgets" / "1.0.0" / "widgets-1.0.0.tgz"

        written = source_client.download_file(url, destination)

        assert written == len(b"tarball bytes")
        assert destination.read_bytes() == b"tarball bytes"
        assert not destination.with_name("widgets-1.0.0.tgz.part").exists()

    def test_download_http_error(self, httpx_mock, source_client, tmp_path):
        """Test non-2xx responses raise and leave no file behind."""
        url = "https://files.example.com/missing.tgz"
        httpx_mock.get(url).mock(return_value=httpx.Response(404))
        destination = tmp_path / "missing.tgz"

        with pytest.raises(httpx.HTTPStatusError):
            source_client.download_file(url, destination)

        assert not destination.exists()

    def test_download_cancelled(self, httpx_mock, source_client, tmp_path):
        """Test a set cancel event aborts the download and removes the partial file."""
        url = "https://files.example.com/layer.tar.gz"
        httpx_mock.get(url).mock(return_value=httpx.Response(200, content=b"layer"))
        destination = tmp_path / "layer.tar.gz"
        cancel_event = threading.Event()
        cancel_event.set()

        with pytest.raises(TransferCancelledError):
            source_client.download_file(url, destination, cancel_event)

        assert not destination.exists()
        assert not (tmp_path / "layer.tar.gz.part").exists()
