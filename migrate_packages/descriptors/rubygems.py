"""
Gem specification parsing.

A ``.gem`` is a tar archive whose ``metadata.gz`` member is the gzipped YAML
dump of the ``Gem::Specification``. Ruby object tags are loaded as plain
mappings.
"""

import gzip
import tarfile
from pathlib import Path
from typing import Any, Union

import yaml

from ..exceptions import DescriptorError
from ..utils.constants import RUBYGEMS_METADATA_MAX_SIZE
from .base import Descriptor


class GemSpecLoader(yaml.SafeLoader):
    """SafeLoader that accepts ``!ruby/...`` tags."""


def _construct_ruby_object(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Any:
    if isinstance(node, yaml.MappingNode):
        return loader.construct_mapping(node, deep=True)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    return loader.construct_scalar(node)


GemSpecLoader.add_multi_constructor("!ruby/", _construct_ruby_object)


def _version_string(value: Any) -> str:
    # Gem::Version is dumped as a mapping with a single "version" key
    if isinstance(value, dict):
        value = value.get("version")
    return str(value) if value is not None else ""


def parse_gemspec_yaml(content: Union[str, bytes]) -> Descriptor:
    """
    Read name and version from a YAML gem specification.

    Raises:
        DescriptorError: If the YAML is invalid or lacks name/version
    """
    try:
        spec = yaml.load(content, Loader=GemSpecLoader)  # nosec B506 - SafeLoader subclass
    except yaml.YAMLError as e:
        raise DescriptorError(f"failed to parse gemspec: {e}") from e

    if not isinstance(spec, dict):
        raise DescriptorError("gemspec is not a mapping")

    name = spec.get("name")
    version = _version_string(spec.get("version"))
    if not name:
        raise DescriptorError("gemspec missing required field: name")
    if not version:
        raise DescriptorError("gemspec missing required field: version")

    return Descriptor(identity=str(name), version=version, data=spec)


def parse_gem(path: Union[str, Path]) -> Descriptor:
    """
    Read name and version from the metadata of a .gem archive.

    Raises:
        DescriptorError: If the archive is invalid, has no metadata.gz, or the metadata exceeds 2MB
    """
    try:
        with tarfile.open(path, "r") as archive:
            try:
                member = archive.getmember("metadata.gz")
            except KeyError:
                raise DescriptorError("gem has no metadata.gz") from None
            if member.size > RUBYGEMS_METADATA_MAX_SIZE:
                raise DescriptorError("metadata.gz exceeds size limit of 2MB")
            extracted = archive.extractfile(member)
            if extracted is None:
                raise DescriptorError("gem metadata.gz is not a regular file")
            compressed = extracted.read()
    except (OSError, tarfile.TarError) as e:
        raise DescriptorError(f"failed to open gem: {e}") from e

    try:
        content = gzip.decompress(compressed)
    except (OSError, EOFError) as e:
        raise DescriptorError(f"failed to decompress gem metadata: {e}") from e

    return parse_gemspec_yaml(content)


def gem_path(name: str, version: str) -> str:
    """
    Repository path of a gem file.

    Example:
        >>> gem_path("widgets", "1.0.0")
        'gems/w/widgets/widgets-1.0.0.gem'
    """
    return f"gems/{name[:1].lower()}/{name}/{name}-{version}.gem"


__all__ = ["GemSpecLoader", "parse_gemspec_yaml", "parse_gem", "gem_path"]
