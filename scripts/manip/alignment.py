"""Dependency version alignment policy.

The policy compares a *candidate* version (offered by the dependency
management candidate set) with the *managed* version a project currently
declares:

- loose mode matches only identical strings;
- strict mode also accepts a candidate that extends the managed version with
  a qualifier suffix, e.g. ``1.1-rebuild-1`` or ``1.1.redhat-2`` for ``1.1``.

Strict matching is a string prefix check followed by a separator check, not a
semantic version comparison. The separator check keeps ``1.10`` from
matching ``1.1``.
"""

import enum
import logging
from typing import Optional

from .errors import PolicyViolationError
from .models import AlignmentResult, Dependency, MavenModule, Operation
from .pom_parser import is_bom_import, property_reference, resolve_property, resolve_property_name
from .state import DependencyState

logger = logging.getLogger(__name__)

QUALIFIER_SEPARATORS = ("-", ".")


class Decision(enum.Enum):
    MATCH = "match"
    MISMATCH = "mismatch"


def decide(candidate_version: str, managed_version: str, strict: bool) -> Decision:
    """Decide whether ``candidate_version`` may replace ``managed_version``.

    Args:
        candidate_version: Version from the dependency management candidate set.
        managed_version: Version currently declared by the project.
        strict: Use strict (qualifier-suffix) matching.

    Returns:
        ``Decision.MATCH`` or ``Decision.MISMATCH``.
    """
    if candidate_version == managed_version:
        return Decision.MATCH
    if not strict or not managed_version:
        return Decision.MISMATCH
    size = len(managed_version)
    if (
        len(candidate_version) > size
        and candidate_version.startswith(managed_version)
        and candidate_version[size] in QUALIFIER_SEPARATORS
    ):
        return Decision.MATCH
    return Decision.MISMATCH


def check(
    candidate_version: str,
    managed_version: str,
    strict: bool,
    fail_on_violation: bool,
    coordinate: Optional[str] = None,
) -> Decision:
    """Run :func:`decide` and enforce the violation mode.

    Raises:
        PolicyViolationError: On a mismatch when ``fail_on_violation`` is set.
    """
    decision = decide(candidate_version, managed_version, strict)
    if decision is Decision.MISMATCH:
        if fail_on_violation:
            raise PolicyViolationError(candidate_version, managed_version, coordinate)
        logger.warning(
            "Not aligning %s: '%s' is not compatible with '%s'",
            coordinate or "dependency", candidate_version, managed_version,
        )
    return decision


def inherited_properties(module: MavenModule, reactor: dict) -> dict:
    """Collect the properties ``module`` inherits from parent POMs in the reactor.

    The parent chain is followed through ``parent_group_id`` /
    ``parent_artifact_id``; a nearer parent overrides a farther one. Parents
    outside the reactor contribute nothing.

    Args:
        module: The module whose ancestors are inspected.
        reactor: ``group:artifact`` -> MavenModule for every parsed module.

    Returns:
        Property name -> ``(value, pom_target)`` of the POM defining it.
    """
    chain = []
    seen = {module.ga}
    current = module
    while current.parent_artifact_id:
        parent = reactor.get(f"{current.parent_group_id}:{current.parent_artifact_id}")
        if parent is None or parent.ga in seen:
            break
        chain.append(parent)
        seen.add(parent.ga)
        current = parent

    scope = {}
    for ancestor in reversed(chain):
        for name, value in ancestor.properties.items():
            scope[name] = (value, ancestor.pom_target)
    return scope


def _record_alignment(
    result: AlignmentResult,
    module: MavenModule,
    dep: Dependency,
    new_version: str,
    state: DependencyState,
    scope: dict,
):
    target = module.pom_target
    values = {name: value for name, (value, _) in scope.items()}
    prop = resolve_property_name(dep.version, values)

    if prop:
        previous = result.version_property_updates.get(prop)
        if previous is not None:
            if previous != new_version:
                message = (
                    f"Property '{prop}' is shared by dependencies aligned to different "
                    f"versions ('{previous}' and '{new_version}' for {dep.ga}); keeping '{previous}'"
                )
                logger.warning(message)
                result.warnings.append(message)
            return
        result.version_property_updates[prop] = new_version
        owner = scope[prop][1]
        result.operations.append(Operation(owner, f"properties/{prop}", new_version))
        return

    name = state.version_property_format.property_name(dep.group_id, dep.artifact_id)
    if name:
        result.operations.append(Operation(target, f"{dep.location}/version", f"${{{name}}}"))
        result.new_properties.setdefault(target, {})[name] = new_version
    else:
        result.operations.append(Operation(target, f"{dep.location}/version", new_version))


def align_module(
    module: MavenModule,
    state: DependencyState,
    inject_transitive: bool = True,
    parent_properties: Optional[dict] = None,
) -> AlignmentResult:
    """Compute the edits aligning ``module`` with the managed versions.

    Nothing is modified; the returned result carries the POM operations, new
    properties, injected managed dependencies and the version property
    updates for reporting. A version property is edited in the POM that
    defines it, which may be a parent of ``module``.

    Args:
        module: Parsed POM module.
        state: Alignment configuration.
        inject_transitive: Whether this module receives candidates it does not
            declare (normally only the root module).
        parent_properties: Inherited properties as returned by
            :func:`inherited_properties`.

    Raises:
        PolicyViolationError: On a strict mismatch when violations are fatal.
    """
    result = AlignmentResult()
    if not state.is_enabled():
        return result

    scope = dict(parent_properties or {})
    for name, value in module.properties.items():
        scope[name] = (value, module.pom_target)
    values = {name: value for name, (value, _) in scope.items()}

    managed = state.managed_versions()
    declared = set()
    candidates = list(module.dep_management)
    if state.override_dependencies:
        candidates += module.dependencies

    for dep in candidates:
        declared.add(dep.ga)
        ref = managed.get(dep.ga)
        if ref is None or not dep.version:
            continue
        if is_bom_import(dep):
            logger.debug("Skipping BOM import %s in %s", dep.ga, module.pom_target)
            continue

        new_version = ref.version
        exclusion = state.exclusion_for(dep.ga, module.ga)
        if exclusion is not None:
            if not exclusion.version:
                logger.debug("Excluded %s from alignment in %s", dep.ga, module.ga)
                continue
            new_version = exclusion.version

        current = resolve_property(dep.version, values)
        if "${" in current or (
            property_reference(dep.version) and resolve_property_name(dep.version, values) not in scope
        ):
            message = (
                f"{dep.ga}: cannot resolve version '{dep.version}' in {module.pom_target}; not aligning"
            )
            logger.warning(message)
            result.warnings.append(message)
            continue
        if current == new_version:
            continue

        if exclusion is None and state.strict:
            decision = check(new_version, current, True, state.fail_on_strict_violation, coordinate=dep.ga)
            if decision is Decision.MISMATCH:
                result.warnings.append(
                    f"{dep.ga}: '{new_version}' is not compatible with '{current}' in {module.pom_target}"
                )
                continue

        logger.info("Aligning %s in %s: %s -> %s", dep.ga, module.pom_target, current, new_version)
        _record_alignment(result, module, dep, new_version, state, scope)

    if inject_transitive and state.override_transitive:
        injected = [
            Dependency(ref.group_id, ref.artifact_id, ref.version)
            for ga, ref in managed.items()
            if ga not in declared
        ]
        if injected:
            result.injected_dependencies[module.pom_target] = injected

    return result
