"""Configuration state built once per build pass from raw properties.

Two independent states exist: :class:`DependencyState` for version alignment
and :class:`JSONState` for JSON document edits. Both are frozen after
construction. Changes decided during the pass are returned as
:class:`~manip.models.AlignmentResult` objects instead of being stored here.
"""

import enum
from dataclasses import dataclass
from typing import Mapping

from .coordinates import parse_ga, parse_gavs
from .errors import MalformedOperationError
from .models import DependencyExclusion, Operation, VersionReference
from .operation_parser import format_operation, parse_operations
from .properties import parse_bool

OVERRIDE_TRANSITIVE = "overrideTransitive"
OVERRIDE_DEPENDENCIES = "overrideDependencies"

# Enables strict checking of dependency versions before aligning. For example,
# 1.1 will match 1.1-rebuild-1 in strict mode, but 1.2 will not.
STRICT_DEPENDENCIES = "strictAlignment"

# When false, strict violations are logged as warnings and the dependency is
# left alone. When true, the build fails.
STRICT_VIOLATION_FAILS = "strictViolationFails"

# Comma separated group:artifact:version list of managed versions.
DEPENDENCY_MANAGEMENT = "dependencyManagement"

# dependencyExclusion.junit:junit@org.groupId:artifactId=4.12
DEPENDENCY_EXCLUSION_PREFIX = "dependencyExclusion."

VERSION_PROPERTY_FORMAT = "versionPropertyFormat"

JSON_UPDATE = "jsonUpdate"


class VersionPropertyFormat(enum.Enum):
    """Naming of version properties injected for literal versions.

    ``VG`` gives ``version.<group>``, ``VGA`` gives
    ``version.<group>.<artifact>``, ``NONE`` keeps literal versions.
    """
    VG = "VG"
    VGA = "VGA"
    NONE = "NONE"

    @classmethod
    def parse(cls, value):
        if not value:
            return cls.NONE
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise ValueError(
                f"Unknown {VERSION_PROPERTY_FORMAT} '{value}', expected one of VG, VGA, NONE"
            ) from None

    def property_name(self, group_id: str, artifact_id: str):
        if self is VersionPropertyFormat.VG:
            return f"version.{group_id}"
        if self is VersionPropertyFormat.VGA:
            return f"version.{group_id}.{artifact_id}"
        return None


def _parse_exclusions(props: Mapping[str, str]) -> tuple:
    exclusions = []
    for key, value in props.items():
        if not key.startswith(DEPENDENCY_EXCLUSION_PREFIX):
            continue
        entry = key[len(DEPENDENCY_EXCLUSION_PREFIX):]
        dependency, _, module = entry.partition("@")
        group_id, artifact_id = parse_ga(dependency)
        exclusions.append(
            DependencyExclusion(group_id, artifact_id, (module or "*").strip(), (value or "").strip())
        )
    return tuple(exclusions)


@dataclass(frozen=True)
class DependencyState:
    """Configuration for dependency alignment.

    Attributes:
        remote_dep_mgmt: Candidate set of managed versions, in declaration order.
        override_transitive: Add candidates the module does not declare to its
            dependencyManagement. Defaults to true.
        override_dependencies: Align versions in ``<dependencies>`` as well as
            ``<dependencyManagement>``. Defaults to true.
        strict: Only align qualifier-suffixed versions of the declared one.
        fail_on_strict_violation: Raise instead of warning on strict mismatches.
        version_property_format: Property naming for literal versions.
        exclusions: ``dependencyExclusion.*`` overrides.
    """
    remote_dep_mgmt: tuple = ()
    override_transitive: bool = True
    override_dependencies: bool = True
    strict: bool = False
    fail_on_strict_violation: bool = False
    version_property_format: VersionPropertyFormat = VersionPropertyFormat.NONE
    exclusions: tuple = ()

    @classmethod
    def from_properties(cls, props: Mapping[str, str]) -> "DependencyState":
        """Build the state from user properties.

        Raises:
            MalformedCoordinateError: If ``dependencyManagement`` or an
                exclusion key holds a malformed coordinate.
        """
        return cls(
            remote_dep_mgmt=tuple(parse_gavs(props.get(DEPENDENCY_MANAGEMENT))),
            override_transitive=parse_bool(props.get(OVERRIDE_TRANSITIVE), True),
            override_dependencies=parse_bool(props.get(OVERRIDE_DEPENDENCIES), True),
            strict=parse_bool(props.get(STRICT_DEPENDENCIES), False),
            fail_on_strict_violation=parse_bool(props.get(STRICT_VIOLATION_FAILS), False),
            version_property_format=VersionPropertyFormat.parse(props.get(VERSION_PROPERTY_FORMAT)),
            exclusions=_parse_exclusions(props),
        )

    def is_enabled(self) -> bool:
        """Enabled only when ``dependencyManagement`` lists at least one coordinate."""
        return self.remote_dep_mgmt is not None and len(self.remote_dep_mgmt) > 0

    def managed_versions(self) -> dict[str, VersionReference]:
        """Map ``group:artifact`` to its reference; the first declaration wins."""
        managed = {}
        for ref in self.remote_dep_mgmt:
            managed.setdefault(ref.ga, ref)
        return managed

    def exclusion_for(self, ga: str, module_ga: str):
        """Return the exclusion for dependency ``ga`` in module ``module_ga``.

        A module-specific exclusion takes precedence over a ``*`` one.
        """
        wildcard = None
        for exclusion in self.exclusions:
            if exclusion.ga != ga:
                continue
            if exclusion.module == module_ga:
                return exclusion
            if exclusion.applies_to(module_ga):
                wildcard = exclusion
        return wildcard


@dataclass(frozen=True)
class JSONState:
    """Configuration for JSON document edits taken from ``jsonUpdate``.

    Attributes:
        operations: Parsed operations in declaration order.
    """
    operations: tuple = ()

    @classmethod
    def from_properties(cls, props: Mapping[str, str]) -> "JSONState":
        """Parse the ``jsonUpdate`` property.

        Raises:
            MalformedOperationError: If the value does not parse, or an
                operation's path does not start at the JSON root ``$``.
        """
        operations = parse_operations(props.get(JSON_UPDATE))
        for op in operations:
            if not op.path.startswith("$"):
                raise MalformedOperationError(
                    "JSON path must start with '$'", format_operation(op)
                )
        return cls(operations=tuple(operations))

    def is_enabled(self) -> bool:
        return len(self.operations) > 0

    def operations_by_target(self) -> dict[str, list[Operation]]:
        """Group operations per target, keeping declaration order within each."""
        grouped = {}
        for op in self.operations:
            grouped.setdefault(op.target, []).append(op)
        return grouped
