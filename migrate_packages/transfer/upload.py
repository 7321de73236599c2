"""
Per package type upload strategies.

Each strategy turns a TransferSpec into the requests its registry expects.
Declared versions in npm, NuGet and RubyGems descriptors must equal the
version being transferred; a mismatch fails the version without retrying.
"""

import base64
import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..api.target_client import TargetRegistryClient
from ..descriptors import Descriptor, gem_path, maven_path, parse_gem, parse_nupkg, parse_package_json, parse_pom
from ..exceptions import DescriptorError
from ..models.packages import PackageType
from ..models.transfer import TransferSpec
from ..protocols import UploadStrategy
from ..utils.checksums import calculate_checksums, sri_integrity
from ..utils.constants import MAVEN_ARTIFACT_SUFFIXES, NPM_REGISTRY_URL
from .container import ContainerPublisher, DigestLocks
from .retry import RetryPolicy


def _require(path: Optional[Path], description: str, spec: TransferSpec) -> Path:
    if path is None:
        raise DescriptorError(f"missing {description} for {spec.package_name} {spec.version}")
    return path


def _check_declared_version(descriptor: Descriptor, source: str, spec: TransferSpec) -> None:
    if not descriptor.matches_version(spec.version):
        raise DescriptorError(f"version mismatch: {source} has {descriptor.version}, expected {spec.version}")


class _Strategy:
    def __init__(self, target: TargetRegistryClient, retry: RetryPolicy) -> None:
        self.target = target
        self.retry = retry


class ContainerUpload(_Strategy):
    """Layers, config and manifest through the OCI distribution API."""

    def __init__(self, target: TargetRegistryClient, retry: RetryPolicy, locks: Optional[DigestLocks] = None) -> None:
        super().__init__(target, retry)
        self.publisher = ContainerPublisher(target, retry, locks)

    def upload(self, spec: TransferSpec) -> None:
        self.publisher.publish(spec)


class NpmUpload(_Strategy):
    """Publish document with the tarball attached, as ``npm publish`` sends it."""

    def build_document(self, spec: TransferSpec, descriptor: Descriptor, tarball: Path) -> Dict[str, Any]:
        """
        Build the npm publish document for a version.

        The package is published under the target name, so the manifest's
        ``name`` is rewritten and the repository points at the target organization.
        """
        name = spec.package_name
        basename = name.rsplit("/", 1)[-1]
        tarball_name = f"{basename}-{spec.version}.tgz"
        checksums = calculate_checksums(str(tarball), ("sha1",))

        manifest = dict(descriptor.data)
        manifest.update(
            {
                "name": name,
                "version": spec.version,
                "_id": f"{name}@{spec.version}",
                "repository": {"type": "git", "url": f"https://github.com/{spec.organization}/{basename}.git"},
                "dist": {
                    "shasum": checksums["sha1"],
                    "integrity": sri_integrity(str(tarball)),
                    "tarball": f"{NPM_REGISTRY_URL}/{name}/-/{tarball_name}",
                },
            }
        )
        with open(tarball, "rb") as f:
            data = base64.b64encode(f.read()).decode("ascii")

        return {
            "_id": name,
            "name": name,
            "description": manifest.get("description", ""),
            "dist-tags": {"latest": spec.version},
            "versions": {spec.version: manifest},
            "_attachments": {
                tarball_name: {
                    "content_type": "application/octet-stream",
                    "data": data,
                    "length": tarball.stat().st_size,
                }
            },
        }

    def upload(self, spec: TransferSpec) -> None:
        package_json = _require(spec.find("package.json"), "package.json", spec)
        tarballs = spec.with_suffix(".tgz")
        tarball = _require(tarballs[0] if tarballs else None, "npm tarball (.tgz)", spec)

        descriptor = parse_package_json(package_json)
        _check_declared_version(descriptor, "package.json", spec)

        document = self.build_document(spec, descriptor, tarball)
        self.retry.run(
            f"publish npm {spec.package_name}@{spec.version}",
            lambda: self.target.publish_npm(spec.package_name, document),
        )


class MavenUpload(_Strategy):
    """POM first, then binary artifacts, each followed by checksum sidecars."""

    def _put_with_checksums(self, path: str, local_file: Path) -> None:
        self.retry.run(f"upload {path}", lambda: self.target.put_maven_file(path, local_file))
        for algorithm, digest in calculate_checksums(str(local_file)).items():
            sidecar = f"{path}.{algorithm}"
            self.retry.run(f"upload {sidecar}", lambda s=sidecar, d=digest: self.target.put_maven_file(s, d.encode()))

    def upload(self, spec: TransferSpec) -> None:
        poms = spec.with_suffix(".pom")
        pom = _require(spec.find("pom.xml") or (poms[0] if poms else None), "pom.xml", spec)
        descriptor = parse_pom(pom)
        group_id = descriptor.data["group_id"]
        artifact_id = descriptor.data["artifact_id"]

        pom_path = maven_path(group_id, artifact_id, spec.version, f"{artifact_id}-{spec.version}.pom")
        self._put_with_checksums(pom_path, pom)

        for artifact in spec.with_suffix(*MAVEN_ARTIFACT_SUFFIXES):
            self._put_with_checksums(maven_path(group_id, artifact_id, spec.version, artifact.name), artifact)

        logging.info("Uploaded Maven artifacts for %s:%s:%s", group_id, artifact_id, spec.version)


class NuGetUpload(_Strategy):
    """Push the .nupkg after checking its embedded nuspec."""

    def upload(self, spec: TransferSpec) -> None:
        packages = spec.with_suffix(".nupkg")
        nupkg = _require(packages[0] if packages else None, ".nupkg", spec)
        descriptor = parse_nupkg(nupkg)
        _check_declared_version(descriptor, "nuspec", spec)

        self.retry.run(f"push {nupkg.name}", lambda: self.target.push_nuget(nupkg))


class RubyGemsUpload(_Strategy):
    """Push the .gem after checking its embedded specification."""

    def upload(self, spec: TransferSpec) -> None:
        gems = spec.with_suffix(".gem")
        gem = _require(gems[0] if gems else None, ".gem", spec)
        descriptor = parse_gem(gem)
        _check_declared_version(descriptor, "gemspec", spec)

        logging.debug("Pushing %s", gem_path(descriptor.identity, descriptor.version))
        self.retry.run(f"push {os.path.basename(gem)}", lambda: self.target.push_gem(gem))


def build_upload_strategies(
    target: TargetRegistryClient, retry: RetryPolicy, locks: Optional[DigestLocks] = None
) -> Mapping[PackageType, UploadStrategy]:
    """
    Build the total mapping from package type to upload strategy.

    Args:
        target: Target registry client
        retry: Retry policy for every network mutation
        locks: Digest locks shared by all container uploads of the run

    Returns:
        Read-only mapping with one strategy per PackageType
    """
    return MappingProxyType(
        {
            PackageType.CONTAINER: ContainerUpload(target, retry, locks),
            PackageType.NPM: NpmUpload(target, retry),
            PackageType.MAVEN: MavenUpload(target, retry),
            PackageType.NUGET: NuGetUpload(target, retry),
            PackageType.RUBYGEMS: RubyGemsUpload(target, retry),
        }
    )


__all__ = [
    "ContainerUpload",
    "NpmUpload",
    "MavenUpload",
    "NuGetUpload",
    "RubyGemsUpload",
    "build_upload_strategies",
]
