"""Maven POM parsing, XML helpers, and property resolution.

Reads the parts of a pom.xml that dependency alignment needs: coordinates,
parent info, properties, dependencies, dependency management and modules.
Each parsed dependency remembers its element path so alignment can address it
through the POM resolver.
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from .models import Dependency, MavenModule
from .pom_tree import POM_NAMESPACE, load_pom_tree, local_name

NS = {"m": POM_NAMESPACE}

_PROPERTY_REF = re.compile(r"^\$\{([^}]+)\}$")


def _find(el, tag, ns=NS):
    """Find a direct child XML element, trying with and without the Maven namespace.

    Args:
        el: Parent XML element to search within.
        tag: Tag name to look for (without namespace prefix).
        ns: Namespace mapping (defaults to Maven POM 4.0.0).

    Returns:
        The first matching child element, or ``None`` if not found.
    """
    result = el.find(f"m:{tag}", ns)
    if result is not None:
        return result
    return el.find(tag)


def _findall(el, tag, ns=NS):
    return list(el.findall(f"m:{tag}", ns)) + list(el.findall(tag))


def _text(el, tag, ns=NS):
    """Extract the stripped text of a child element, or ``None`` if absent or empty."""
    child = _find(el, tag, ns)
    if child is not None and child.text:
        return child.text.strip()
    return None


def _parse_dependency(dep_el, location: str) -> Dependency:
    """Parse a ``<dependency>`` element found at ``location``."""
    return Dependency(
        group_id=_text(dep_el, "groupId") or "",
        artifact_id=_text(dep_el, "artifactId") or "",
        version=_text(dep_el, "version"),
        scope=_text(dep_el, "scope") or "compile",
        dep_type=_text(dep_el, "type"),
        location=location,
    )


def _parse_dependencies(deps_el, prefix: str) -> list:
    if deps_el is None:
        return []
    return [
        _parse_dependency(dep_el, f"{prefix}/dependency[{i}]")
        for i, dep_el in enumerate(_findall(deps_el, "dependency"))
    ]


def parse_pom_root(root: ET.Element) -> MavenModule:
    """Build a MavenModule from an already parsed ``<project>`` element.

    Fields not present in the POM (groupId, version) are inherited from the
    parent declaration when available.
    """
    parent_el = _find(root, "parent")
    parent_gid = parent_aid = parent_ver = None
    if parent_el is not None:
        parent_gid = _text(parent_el, "groupId")
        parent_aid = _text(parent_el, "artifactId")
        parent_ver = _text(parent_el, "version")

    properties = {}
    props_el = _find(root, "properties")
    if props_el is not None:
        for child in props_el:
            tag = local_name(child.tag)
            if tag and child.text:
                properties[tag] = child.text.strip()

    dep_mgmt = []
    dm_el = _find(root, "dependencyManagement")
    if dm_el is not None:
        dep_mgmt = _parse_dependencies(
            _find(dm_el, "dependencies"), "dependencyManagement/dependencies"
        )

    modules = []
    modules_el = _find(root, "modules")
    if modules_el is not None:
        for mod_el in _findall(modules_el, "module"):
            if mod_el.text:
                modules.append(mod_el.text.strip())

    return MavenModule(
        group_id=_text(root, "groupId") or parent_gid or "",
        artifact_id=_text(root, "artifactId") or "",
        version=_text(root, "version") or parent_ver,
        parent_group_id=parent_gid,
        parent_artifact_id=parent_aid,
        properties=properties,
        dependencies=_parse_dependencies(_find(root, "dependencies"), "dependencies"),
        dep_management=dep_mgmt,
        modules=modules,
    )


def parse_pom(pom_path: Path) -> MavenModule:
    """Parse a ``pom.xml`` file into a MavenModule.

    Handles both namespaced and non-namespaced POM files.
    """
    return parse_pom_root(load_pom_tree(pom_path).getroot())


def property_reference(value: Optional[str]) -> Optional[str]:
    """Return the property name if ``value`` is exactly one ``${...}`` reference."""
    if not value:
        return None
    match = _PROPERTY_REF.match(value)
    return match.group(1) if match else None


def resolve_property_name(value: str, properties: dict, _depth: int = 0) -> Optional[str]:
    """Follow a ``${a}`` -> ``${b}`` chain and return the last property name.

    The last name is the property holding the literal version, i.e. the one
    that must be edited to change the version. Returns ``None`` when ``value``
    is not a property reference. Chains are followed to a depth of 10.
    """
    name = property_reference(value)
    if name is None:
        return None
    resolved = properties.get(name)
    if _depth < 10 and property_reference(resolved):
        return resolve_property_name(resolved, properties, _depth + 1)
    return name


def resolve_property(value: str, properties: dict, _depth: int = 0) -> Optional[str]:
    """Resolve ``${property}`` references against a properties dict.

    Only resolves values that are entirely a single ``${...}`` reference.
    Concatenated values like ``${prefix}/${suffix}`` are returned unchanged.

    Chained references are followed up to a depth of 10 to guard against
    circular definitions. The ``project.`` prefix is also tried stripped for
    ``${project.version}`` style properties.

    Args:
        value: The string potentially containing a ``${property}`` reference.
        properties: Property dict of the module.
        _depth: Internal recursion counter (callers should not set this).

    Returns:
        The resolved value, or the original value if unresolvable.
        Returns ``None`` if value is ``None``.
    """
    if not value or _depth > 10:
        return value
    prop_name = property_reference(value)
    if prop_name:
        for key in [prop_name, prop_name.replace("project.", "")]:
            if key in properties:
                resolved = properties[key]
                if resolved and "${" in resolved:
                    return resolve_property(resolved, properties, _depth + 1)
                return resolved
    return value


def is_bom_import(dep: Dependency) -> bool:
    """Check whether a dependency is a BOM import (``type=pom``, ``scope=import``)."""
    return dep.dep_type == "pom" and dep.scope == "import"
