"""
Tests for SyncService.

This module runs whole migrations against an in-memory source and a
mocked target, covering name mapping, validation failures, partial
results and cancellation.
"""

import threading

import pytest

from migrate_packages.exceptions import FetchError, MappingFileError
from migrate_packages.models import SyncContext, TransferStatus
from migrate_packages.services import SyncService
from migrate_packages.transfer import ResultAggregator


@pytest.fixture
def output():
    """Lines printed by the aggregator."""
    return []


@pytest.fixture
def make_npm_package(fake_source, make_package, make_version, artifacts):
    """Factory for downloadable npm packages registered with the fake source."""

    def _create(name, versions=("1.0.0",)):
        catalog_versions = []
        for number in versions:
            package_json = artifacts.package_json(name, number)
            tarball = f"{name.rsplit('/', 1)[-1]}-{number}.tgz"
            version = make_version(
                number, [("package.json", len(package_json)), (tarball, 7)], package=name
            )
            fake_source.add_version(version, {"package.json": package_json, tarball: b"tarball"})
            catalog_versions.append(version)
        package = make_package(name, versions=catalog_versions)
        fake_source.packages.append(package)
        return package

    return _create


@pytest.fixture
def make_service(fake_source, mock_target, fast_retry, output):
    """Factory for a SyncService wired to the test doubles."""

    def _create(cancel_event=None, **overrides):
        options = {
            "source_organization": "source-org",
            "target_organization": "target-org",
            "source_token": "source-token",
            "target_token": "target-token",
        }
        options.update(overrides)
        cancel_event = cancel_event or threading.Event()
        fast_retry.cancel_event = cancel_event
        return SyncService(
            SyncContext(**options),
            source=fake_source,
            target=mock_target,
            aggregator=ResultAggregator(echo=output.append, color=False),
            cancel_event=cancel_event,
            retry=fast_retry,
        )

    return _create


def _by_name(summary):
    return {report.package_name: report for report in summary.reports}


class TestSyncService:
    """Test complete sync runs."""

    def test_name_mapping(self, make_service, make_npm_package, mock_target, tmp_path):
        """Test mapped packages are created under their new name, others keep theirs."""
        make_npm_package("@source-org/pkg-a")
        make_npm_package("@source-org/pkg-b")
        mapping = tmp_path / "mapping.csv"
        mapping.write_text("source,target\n@source-org/pkg-a,@source-org/pkg-a2\n", encoding="utf-8")

        summary = make_service(mapping_file=str(mapping)).run()

        published = sorted(c.args[0] for c in mock_target.publish_npm.call_args_list)
        assert published == ["@source-org/pkg-a2", "@source-org/pkg-b"]
        reports = _by_name(summary)
        assert reports["@source-org/pkg-a"].target_name == "@source-org/pkg-a2"
        assert reports["@source-org/pkg-b"].target_name == "@source-org/pkg-b"
        assert summary.successful == 2
        assert not summary.has_failures

    def test_invalid_package_not_transferred(self, make_service, fake_source, make_package, make_version, mock_target):
        """Test an unscoped npm package fails validation and nothing is transferred."""
        fake_source.packages.append(make_package("lodash", versions=[make_version("1.0.0", [("package.json", 2)])]))

        summary = make_service().run()

        report = summary.reports[0]
        assert report.status == TransferStatus.FAILED
        assert "must be scoped" in report.error_message
        assert fake_source.downloads == []
        mock_target.publish_npm.assert_not_called()
        mock_target.update_visibility.assert_not_called()

    def test_partial_success(self, make_service, make_npm_package, fake_source, mock_target):
        """Test one failing version makes the package a partial success."""
        package = make_npm_package("@source-org/widgets", versions=("1.0.0", "2.0.0"))
        fake_source.failures[package.versions[1].files[1].url] = 10

        summary = make_service().run()

        report = summary.reports[0]
        assert report.status == TransferStatus.PARTIAL_SUCCESS
        assert report.versions_count == 2
        assert report.versions_failed == 1
        assert report.error_message.startswith("2.0.0: ")
        mock_target.update_visibility.assert_called_once_with("npm", "@source-org/widgets", "private")

    def test_every_package_reported_once(self, make_service, make_npm_package, fake_source, make_package, output):
        """Test each fetched package yields exactly one report."""
        for i in range(8):
            make_npm_package(f"@source-org/pkg-{i}")
        fake_source.packages.append(make_package("unscoped", versions=()))

        summary = make_service(max_workers=3).run()

        names = [report.package_name for report in summary.reports]
        assert len(names) == 9
        assert len(set(names)) == 9
        assert summary.successful == 8
        assert summary.failed == 1
        assert "- Successful: 8" in output

    def test_skip_existing(self, make_service, make_npm_package, fake_source, mock_target):
        """Test existing versions count as successful without transfer."""
        make_npm_package("@source-org/widgets")
        mock_target.version_exists.return_value = True

        summary = make_service(skip_existing=True).run()

        assert summary.reports[0].status == TransferStatus.SUCCESS
        assert summary.reports[0].versions_skipped == 1
        assert fake_source.downloads == []

    def test_package_type_filter(self, make_service, make_npm_package, fake_source, make_package):
        """Test only packages of the requested type are migrated."""
        make_npm_package("@source-org/widgets")
        fake_source.packages.append(make_package("api", "container"))

        summary = make_service(package_type="npm").run()

        assert [r.package_name for r in summary.reports] == ["@source-org/widgets"]

    def test_work_dir_is_kept(self, make_service, make_npm_package, tmp_path):
        """Test files staged in an explicit work directory are not removed."""
        make_npm_package("@source-org/widgets")

        make_service(work_dir=str(tmp_path / "staging")).run()

        assert (tmp_path / "staging" / "npm" / "@source-org_widgets" / "1.0.0" / "package.json").exists()

    def test_cancelled_before_start(self, make_service, make_npm_package, fake_source):
        """Test a cancelled run still reports every package."""
        make_npm_package("@source-org/a")
        make_npm_package("@source-org/b")
        cancel_event = threading.Event()
        cancel_event.set()

        summary = make_service(cancel_event=cancel_event).run()

        assert summary.failed == 2
        assert all(r.error_message == "cancelled before start" for r in summary.reports)
        assert fake_source.downloads == []

    def test_empty_catalog(self, make_service, output):
        """Test an organization without packages."""
        summary = make_service().run()

        assert summary.total == 0
        assert "No packages were migrated" in output

    def test_fetch_error_aborts(self, make_service, fake_source, mocker):
        """Test catalog failures abort the run."""
        mocker.patch.object(fake_source, "fetch_packages", side_effect=FetchError("page 2 failed"))

        with pytest.raises(FetchError):
            make_service().run()

    def test_missing_mapping_file(self, make_service, tmp_path):
        """Test an unreadable mapping file aborts before fetching."""
        with pytest.raises(MappingFileError):
            make_service(mapping_file=str(tmp_path / "missing.csv")).run()

    def test_close(self, make_service, fake_source, mock_target):
        """Test both clients are closed."""
        make_service().close()

        assert fake_source.closed
        mock_target.close.assert_called_once()
