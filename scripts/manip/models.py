"""Data model classes.

Pure data structures: parsed edit operations, version references, the parsed
parts of a Maven POM, and the accumulator returned by dependency alignment.
No behavior or imports from other manip modules apart from the shared types.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Operation:
    """A single edit instruction: set ``value`` at ``path`` inside ``target``.

    Attributes:
        target: Logical document identifier, usually a file name relative to
            the project root (e.g. ``amg-plugin-registry.json``).
        path: Path expression understood by the document's resolver
            (e.g. ``$.repository.url`` or ``properties/junit.version``).
        value: Replacement scalar value. ``None`` deletes the located node.
    """
    target: str
    path: str
    value: Optional[str] = None


@dataclass(frozen=True)
class VersionReference:
    """A ``group:artifact:version`` coordinate from the candidate set.

    Attributes:
        group_id: Maven groupId (e.g. ``org.jboss.logging``).
        artifact_id: Maven artifactId (e.g. ``jboss-logging``).
        version: Managed version (e.g. ``3.3.0.Final-redhat-1``).
    """
    group_id: str
    artifact_id: str
    version: str

    @property
    def ga(self) -> str:
        """The ``group:artifact`` key used to match project dependencies."""
        return f"{self.group_id}:{self.artifact_id}"

    def __str__(self):
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True)
class DependencyExclusion:
    """A ``dependencyExclusion.<g>:<a>@<module>`` override.

    Attributes:
        group_id: groupId of the dependency to override.
        artifact_id: artifactId of the dependency to override.
        module: ``group:artifact`` of the module the override applies to, or
            ``*`` for every module.
        version: Forced version. An empty string leaves the dependency alone.
    """
    group_id: str
    artifact_id: str
    module: str
    version: str

    @property
    def ga(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    def applies_to(self, module_ga: str) -> bool:
        return self.module == "*" or self.module == module_ga


@dataclass
class Dependency:
    """A Maven ``<dependency>`` element.

    Attributes:
        group_id: Maven groupId.
        artifact_id: Maven artifactId.
        version: Explicit version string (possibly a ``${property}``
            reference), or ``None`` if managed elsewhere.
        scope: Maven scope, defaults to ``compile``.
        dep_type: Optional packaging type (e.g. ``pom`` for BOM imports).
        location: Element path of the ``<dependency>`` inside its POM, in the
            syntax accepted by the POM resolver
            (e.g. ``dependencyManagement/dependencies/dependency[0]``).
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    scope: str = "compile"
    dep_type: Optional[str] = None
    location: Optional[str] = None

    @property
    def ga(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def is_managed_entry(self) -> bool:
        """Whether the element sits under ``<dependencyManagement>``."""
        return bool(self.location) and self.location.startswith("dependencyManagement/")


@dataclass
class MavenModule:
    """Parse result for a single ``pom.xml`` file.

    Attributes:
        group_id: Maven groupId (inherited from parent if not declared).
        artifact_id: Maven artifactId.
        version: Version string (inherited from parent if not declared).
        parent_group_id: Parent POM groupId, if any. With
            ``parent_artifact_id`` it locates the parent in the reactor, whose
            properties the module inherits.
        parent_artifact_id: Parent POM artifactId, if any.
        properties: ``<properties>`` dict.
        dependencies: Direct ``<dependencies>`` list.
        dep_management: ``<dependencyManagement>`` dependencies.
        modules: Child module directory names from ``<modules>``.
        source_dir: Relative filesystem path (set by the CLI orchestrator).
    """
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    parent_group_id: Optional[str] = None
    parent_artifact_id: Optional[str] = None
    properties: dict = field(default_factory=dict)
    dependencies: list = field(default_factory=list)
    dep_management: list = field(default_factory=list)
    modules: list = field(default_factory=list)
    source_dir: Optional[str] = None

    @property
    def ga(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def pom_target(self) -> str:
        """Logical identifier of this module's POM, relative to the project root."""
        if not self.source_dir or self.source_dir == ".":
            return "pom.xml"
        return f"{self.source_dir}/pom.xml"


@dataclass
class AlignmentResult:
    """Changes decided by the alignment phase for one or more modules.

    Returned by :func:`manip.alignment.align_module` and merged by the caller,
    which then applies ``operations`` through the document patcher and hands
    ``version_property_updates`` to reporting.

    Attributes:
        version_property_updates: Original version property name -> new
            version. Entries are only ever added.
        operations: POM edits to apply, in order.
        new_properties: Per POM target, properties to add
            (``{target: {name: version}}``).
        injected_dependencies: Per POM target, candidates added to
            ``<dependencyManagement>`` because the module does not declare them.
        warnings: Non-fatal strict alignment mismatches.
    """
    version_property_updates: dict = field(default_factory=dict)
    operations: list = field(default_factory=list)
    new_properties: dict = field(default_factory=dict)
    injected_dependencies: dict = field(default_factory=dict)
    warnings: list = field(default_factory=list)

    def merge(self, other: "AlignmentResult") -> "AlignmentResult":
        """Fold ``other`` into this result and return ``self``.

        The first decision wins: a property or element already set to another
        value keeps it, and the conflict is added to ``warnings``. Identical
        edits are kept once.
        """
        self.warnings.extend(other.warnings)
        for name, version in other.version_property_updates.items():
            previous = self.version_property_updates.setdefault(name, version)
            if previous != version:
                self.warnings.append(
                    f"Property '{name}' aligned to both '{previous}' and '{version}'; keeping '{previous}'"
                )
        edits = {(op.target, op.path): op for op in self.operations}
        for op in other.operations:
            existing = edits.get((op.target, op.path))
            if existing is None:
                self.operations.append(op)
                edits[(op.target, op.path)] = op
            elif existing.value != op.value:
                self.warnings.append(
                    f"Conflicting edit of {op.path} in {op.target}: keeping '{existing.value}'"
                )
        for target, props in other.new_properties.items():
            self.new_properties.setdefault(target, {}).update(props)
        for target, deps in other.injected_dependencies.items():
            self.injected_dependencies.setdefault(target, []).extend(deps)
        return self

    @property
    def has_changes(self) -> bool:
        return bool(self.operations or self.new_properties or self.injected_dependencies)
