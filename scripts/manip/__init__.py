"""Build-property driven JSON edits and Maven dependency alignment."""

from .alignment import Decision, align_module, check, decide
from .coordinates import parse_gavs
from .errors import (
    InvalidPathError,
    MalformedCoordinateError,
    MalformedOperationError,
    ManipulationError,
    PathNotFoundError,
    PolicyViolationError,
)
from .models import AlignmentResult, Operation, VersionReference
from .operation_parser import parse_operations
from .patcher import apply, apply_all
from .state import DependencyState, JSONState

__all__ = [
    "AlignmentResult",
    "Decision",
    "DependencyState",
    "InvalidPathError",
    "JSONState",
    "MalformedCoordinateError",
    "MalformedOperationError",
    "ManipulationError",
    "Operation",
    "PathNotFoundError",
    "PolicyViolationError",
    "VersionReference",
    "align_module",
    "apply",
    "apply_all",
    "check",
    "decide",
    "parse_gavs",
    "parse_operations",
]
