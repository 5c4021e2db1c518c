"""Error types raised by the manipulation core.

All errors derive from :class:`ManipulationError` so a build collaborator can
catch one type and print an actionable diagnostic. Each error keeps the raw
input that triggered it.
"""

from typing import Optional


class ManipulationError(Exception):
    """Base class for every error surfaced by this package."""


class MalformedOperationError(ManipulationError):
    """An encoded operation record has a bad field count or a dangling escape.

    Attributes:
        record: The raw (still escaped) record substring that failed to parse.
    """

    def __init__(self, message: str, record: str):
        super().__init__(f"{message}: '{record}'")
        self.record = record


class MalformedCoordinateError(ManipulationError):
    """A ``group:artifact:version`` entry does not have three non-empty fields.

    Attributes:
        coordinate: The offending raw entry.
    """

    def __init__(self, coordinate: str, expected: str = "group:artifact:version"):
        super().__init__(f"Malformed coordinate '{coordinate}', expected {expected}")
        self.coordinate = coordinate


class InvalidPathError(ManipulationError, ValueError):
    """A path expression is syntactically invalid."""


class PathNotFoundError(ManipulationError):
    """A path expression did not resolve to any node of the target document.

    Attributes:
        target: Logical identifier of the document (usually a file name).
        path: The unresolved path expression.
    """

    def __init__(self, target: Optional[str], path: str):
        super().__init__(f"Unable to locate path '{path}' in '{target}'")
        self.target = target
        self.path = path


class PolicyViolationError(ManipulationError):
    """A strict alignment mismatch with ``strictViolationFails`` enabled.

    Attributes:
        candidate_version: Version offered by dependency management.
        managed_version: Version currently declared by the project.
        coordinate: ``group:artifact`` of the dependency, if known.
    """

    def __init__(self, candidate_version: str, managed_version: str, coordinate: Optional[str] = None):
        where = f" for {coordinate}" if coordinate else ""
        super().__init__(
            f"Strict alignment violation{where}: '{candidate_version}' "
            f"is not compatible with '{managed_version}'"
        )
        self.candidate_version = candidate_version
        self.managed_version = managed_version
        self.coordinate = coordinate
