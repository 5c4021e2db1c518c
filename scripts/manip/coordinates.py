"""Parsing of Maven coordinate lists.

``dependencyManagement=org.foo:bar:1.0,org.foo:baz:2.0`` becomes an ordered
list of :class:`VersionReference` forming the alignment candidate set.
"""

from typing import Optional

from .errors import MalformedCoordinateError
from .models import VersionReference

LIST_DELIMITER = ","


def _split_coordinate(raw: str, expected_fields: int, expected: str) -> list[str]:
    parts = raw.strip().split(":")
    if len(parts) != expected_fields or any(not p.strip() for p in parts):
        raise MalformedCoordinateError(raw, expected)
    return [p.strip() for p in parts]


def parse_gav(raw: str) -> VersionReference:
    """Parse one ``group:artifact:version`` triple.

    Raises:
        MalformedCoordinateError: If the entry does not have exactly three
            non-empty fields.
    """
    group_id, artifact_id, version = _split_coordinate(raw, 3, "group:artifact:version")
    return VersionReference(group_id, artifact_id, version)


def parse_gavs(text: Optional[str]) -> list[VersionReference]:
    """Parse a comma-separated list of ``group:artifact:version`` triples.

    Whitespace around entries is ignored. Order and duplicates are kept.
    Parsing stops at the first malformed entry.

    Args:
        text: Raw property value, or ``None``.

    Returns:
        The parsed references; ``[]`` for ``None``, empty or blank input.

    Raises:
        MalformedCoordinateError: Naming the first malformed entry.
    """
    if text is None or not text.strip():
        return []
    return [parse_gav(raw) for raw in text.split(LIST_DELIMITER)]


def parse_ga(raw: str) -> tuple[str, str]:
    """Parse a ``group:artifact`` pair.

    Raises:
        MalformedCoordinateError: If the entry is not two non-empty fields.
    """
    group_id, artifact_id = _split_coordinate(raw, 2, "group:artifact")
    return group_id, artifact_id
