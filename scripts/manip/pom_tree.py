"""Path resolution and in-place edits for POM element trees.

POM paths are slash separated element names relative to ``<project>``, with
an optional zero-based ``[n]`` index per step::

    properties/junit.version
    dependencyManagement/dependencies/dependency[2]/version
    /project/parent/version

Matching ignores the Maven namespace so namespaced and plain POMs behave the
same.
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Union

from .errors import InvalidPathError
from .models import Dependency

# XML namespace used by Maven POM files (POM model version 4.0.0).
POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"

_STEP_RE = re.compile(r"^(?P<name>[^\[\]/]+)(?:\[(?P<index>\d+)\])?$")


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from an element tag.

    Comments and processing instructions have no string tag and yield ``""``.
    """
    if not isinstance(tag, str):
        return ""
    return tag.split("}")[-1] if "}" in tag else tag


def _qualified(root: ET.Element, name: str) -> str:
    """Build a tag in the same namespace as ``root``."""
    if root.tag.startswith("{"):
        return root.tag[: root.tag.index("}") + 1] + name
    return name


def parse_pom_path(path: str) -> list[tuple[str, int]]:
    """Split a POM path into ``(element_name, index)`` steps.

    A leading ``/`` and ``project`` step are optional.

    Raises:
        InvalidPathError: On empty paths or malformed steps.
    """
    steps = [s for s in path.strip().split("/") if s]
    if steps and steps[0] == "project":
        steps = steps[1:]
    if not steps:
        raise InvalidPathError(f"POM path must name at least one element: '{path}'")
    parsed = []
    for step in steps:
        match = _STEP_RE.match(step)
        if not match:
            raise InvalidPathError(f"Malformed step '{step}' in POM path '{path}'")
        parsed.append((match.group("name"), int(match.group("index") or 0)))
    return parsed


def find_element(root: ET.Element, path: str) -> Optional[tuple[ET.Element, ET.Element]]:
    """Locate ``path`` below ``root``.

    Returns:
        ``(parent, element)`` for the located element, or ``None`` when any
        step is missing.
    """
    parent = None
    current = root
    for name, index in parse_pom_path(path):
        matches = [child for child in current if local_name(child.tag) == name]
        if index >= len(matches):
            return None
        parent, current = current, matches[index]
    return parent, current


def load_pom_tree(pom_path: Union[str, Path]) -> ET.ElementTree:
    """Parse a ``pom.xml`` keeping comments and the default Maven namespace."""
    ET.register_namespace("", POM_NAMESPACE)
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    return ET.parse(pom_path, parser=parser)


def write_pom_tree(tree: ET.ElementTree, pom_path: Union[str, Path]):
    ET.register_namespace("", POM_NAMESPACE)
    tree.write(pom_path, encoding="UTF-8", xml_declaration=True)


def _child(parent: ET.Element, root: ET.Element, name: str) -> ET.Element:
    for child in parent:
        if local_name(child.tag) == name:
            return child
    return ET.SubElement(parent, _qualified(root, name))


def add_properties(root: ET.Element, properties: dict):
    """Set ``<properties>`` entries, creating the section and entries as needed."""
    props_el = _child(root, root, "properties")
    for name, value in properties.items():
        _child(props_el, root, name).text = value


def add_managed_dependencies(root: ET.Element, dependencies: list[Dependency]):
    """Append entries to ``<dependencyManagement><dependencies>``."""
    dm_el = _child(root, root, "dependencyManagement")
    deps_el = _child(dm_el, root, "dependencies")
    for dep in dependencies:
        dep_el = ET.SubElement(deps_el, _qualified(root, "dependency"))
        ET.SubElement(dep_el, _qualified(root, "groupId")).text = dep.group_id
        ET.SubElement(dep_el, _qualified(root, "artifactId")).text = dep.artifact_id
        ET.SubElement(dep_el, _qualified(root, "version")).text = dep.version
