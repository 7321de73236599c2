"""
Package name mapping between the source and target organizations.

The mapping file is a UTF-8 CSV with a ``source,target`` header row followed
by one pair per line. It is loaded once before a run and never changes
afterwards, so workers can resolve names without locking.
"""

import csv
import logging
from types import MappingProxyType
from typing import Mapping, Optional

from ..exceptions import MappingFileError


class NameMappingResolver:
    """Resolve source package names to target package names."""

    def __init__(self, mapping: Optional[Mapping[str, str]] = None) -> None:
        self._mapping: Mapping[str, str] = MappingProxyType(dict(mapping or {}))

    @classmethod
    def from_csv(cls, path: str) -> "NameMappingResolver":
        """
        Load a mapping from a CSV file.

        The first row is always treated as a header and skipped. Rows with
        fewer than two columns or an empty source name are ignored.

        Args:
            path: Path to the mapping CSV

        Returns:
            Resolver holding the loaded mapping

        Raises:
            MappingFileError: If the file cannot be opened or decoded
        """
        mapping = {}
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                reader = csv.reader(f)
                next(reader, None)
                for line_number, row in enumerate(reader, start=2):
                    if len(row) < 2:
                        continue
                    source, target = row[0].strip(), row[1].strip()
                    if not source or not target:
                        logging.debug("Skipping incomplete mapping on line %d of %s", line_number, path)
                        continue
                    if source in mapping and mapping[source] != target:
                        logging.warning(
                            "Mapping for '%s' redefined on line %d (%s -> %s)",
                            source,
                            line_number,
                            mapping[source],
                            target,
                        )
                    mapping[source] = target
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise MappingFileError(f"failed to read mapping file {path}: {e}") from e

        logging.info("Loaded %d package name mappings from %s", len(mapping), path)
        return cls(mapping)

    @property
    def mapping(self) -> Mapping[str, str]:
        """Read-only view of the loaded mapping."""
        return self._mapping

    def resolve(self, source_name: str) -> str:
        """Return the mapped target name, or the source name when it is not mapped."""
        return self._mapping.get(source_name, source_name)

    def __len__(self) -> int:
        return len(self._mapping)


__all__ = ["NameMappingResolver"]
