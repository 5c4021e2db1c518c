"""CLI entry point, multi-module orchestration, and file I/O.

Wires together property loading, the configuration states, dependency
alignment and the document patcher, then writes the edited documents back
(or prints them on a dry run).
"""

import argparse
import json
import logging
import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from .alignment import align_module, inherited_properties
from .errors import ManipulationError
from .models import AlignmentResult, MavenModule
from .patcher import apply_all
from .pom_parser import parse_pom_root
from .pom_tree import add_managed_dependencies, add_properties, load_pom_tree, write_pom_tree
from .properties import load_properties, parse_define
from .state import DependencyState, JSONState


def _fail(message: str):
    print(f"ERROR: {message}", file=sys.stderr)
    sys.exit(1)


def _print_section(title: str, content: str):
    print("=" * 60)
    print(title)
    print("=" * 60)
    print(content)
    print()


def _parse_modules_recursive(
    project_path: Path,
    module_dirs: list[str],
    trees: dict,
    parent_path: str = "",
    _visited: set = None,
) -> list[MavenModule]:
    """Recursively parse child modules, handling nested multi-module structures.

    Visited paths are tracked to prevent infinite recursion from circular
    module references. Parsed element trees are stored in ``trees`` keyed by
    the module's POM target so they can be edited afterwards.

    Args:
        project_path: Filesystem path to the root project.
        module_dirs: Module directory names from the parent's ``<modules>``.
        trees: Output mapping of POM target -> ElementTree.
        parent_path: Relative path prefix for nested modules.
        _visited: Internal set of visited paths (callers should not set this).

    Returns:
        Flat list of MavenModule instances (depth-first), with ``source_dir``
        set relative to the project root.
    """
    if _visited is None:
        _visited = set()

    result = []
    for mod_dir in module_dirs:
        relative_dir = f"{parent_path}/{mod_dir}" if parent_path else mod_dir
        abs_path = (project_path / relative_dir).resolve()
        if abs_path in _visited:
            continue
        _visited.add(abs_path)

        child_pom = project_path / relative_dir / "pom.xml"
        if child_pom.exists():
            tree = load_pom_tree(child_pom)
            child = parse_pom_root(tree.getroot())
            child.source_dir = relative_dir
            trees[child.pom_target] = tree
            result.append(child)
            if child.modules:
                result.extend(
                    _parse_modules_recursive(project_path, child.modules, trees, relative_dir, _visited)
                )
        else:
            print(f"WARNING: Module '{relative_dir}' has no pom.xml, skipping", file=sys.stderr)
    return result


def apply_json_updates(project_path: Path, state: JSONState, dry_run: bool = False) -> list[str]:
    """Apply the ``jsonUpdate`` operations to files under ``project_path``.

    Each target file is loaded once, receives its operations in declaration
    order and is written back with two-space indentation.

    Returns:
        The targets that were updated.

    Raises:
        PathNotFoundError: If an operation's path does not resolve.
    """
    updated = []
    for target, operations in state.operations_by_target().items():
        json_file = project_path / target
        if not json_file.exists():
            _fail(f"JSON file {json_file} not found")
        with open(json_file, encoding="utf-8") as f:
            document = json.load(f)

        apply_all(document, operations)
        content = json.dumps(document, indent=2, ensure_ascii=False) + "\n"

        if dry_run:
            _print_section(target, content)
        else:
            json_file.write_text(content, encoding="utf-8")
            print(f"  ✓ {json_file}")
        updated.append(target)
    return updated


def align_project(project_path: Path, state: DependencyState, dry_run: bool = False) -> AlignmentResult:
    """Align the root POM and all child modules with the managed versions.

    Returns:
        The merged alignment result of every module.

    Raises:
        PolicyViolationError: On a fatal strict mismatch.
        PathNotFoundError: If a generated POM edit does not resolve.
    """
    root_pom = project_path / "pom.xml"
    if not root_pom.exists():
        _fail(f"No pom.xml found at {root_pom}")

    trees = {}
    root_tree = load_pom_tree(root_pom)
    root_module = parse_pom_root(root_tree.getroot())
    root_module.source_dir = "."
    trees[root_module.pom_target] = root_tree

    modules = [root_module]
    if root_module.modules:
        modules += _parse_modules_recursive(project_path, root_module.modules, trees)

    reactor = {module.ga: module for module in modules}
    result = AlignmentResult()
    for module in modules:
        result.merge(align_module(
            module,
            state,
            inject_transitive=module is root_module,
            parent_properties=inherited_properties(module, reactor),
        ))

    changed = []
    for module in modules:
        target = module.pom_target
        tree = trees[target]
        operations = [op for op in result.operations if op.target == target]
        apply_all(tree, operations)
        if target in result.new_properties:
            add_properties(tree.getroot(), result.new_properties[target])
        if target in result.injected_dependencies:
            add_managed_dependencies(tree.getroot(), result.injected_dependencies[target])
        if operations or target in result.new_properties or target in result.injected_dependencies:
            changed.append(target)

    for target in changed:
        if dry_run:
            _print_section(target, ET.tostring(trees[target].getroot(), encoding="unicode"))
        else:
            write_pom_tree(trees[target], project_path / target)
            print(f"  ✓ {project_path / target}")
    return result


def report(result: AlignmentResult):
    """Print the version property changes and alignment warnings of a build pass."""
    for warning in result.warnings:
        print(f"WARNING: {warning}", file=sys.stderr)
    if not result.version_property_updates:
        print("No version properties changed.")
        return
    print("Version property updates:")
    for name, version in sorted(result.version_property_updates.items()):
        print(f"  {name} -> {version}")


def run(project_path: Path, props: dict, dry_run: bool = False) -> Optional[AlignmentResult]:
    """Run one build pass over ``project_path`` with the given properties.

    Configuration is parsed up front, so a malformed property aborts the pass
    before any document is touched.

    Returns:
        The alignment result, or ``None`` when dependency alignment is disabled.
    """
    json_state = JSONState.from_properties(props)
    dependency_state = DependencyState.from_properties(props)

    if not json_state.is_enabled() and not dependency_state.is_enabled():
        print("Nothing to do: neither jsonUpdate nor dependencyManagement is set.")
        return None

    if json_state.is_enabled():
        apply_json_updates(project_path, json_state, dry_run)

    if not dependency_state.is_enabled():
        return None
    result = align_project(project_path, dependency_state, dry_run)
    report(result)
    return result


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Apply JSON edits and align Maven dependency versions from build properties"
    )
    parser.add_argument("project", type=Path, help="Path to the project root")
    parser.add_argument(
        "-D", "--define", action="append", default=[], metavar="KEY=VALUE",
        help="Set a build property (repeatable, overrides --properties)",
    )
    parser.add_argument("--properties", "-p", type=Path, default=None, help="Read build properties from a file")
    parser.add_argument("--dry-run", "-n", action="store_true", help="Print output without writing files")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every applied change")
    args = parser.parse_args(argv)

    try:
        args.define = dict(parse_define(d) for d in args.define)
    except ValueError as e:
        parser.error(str(e))
    return args


def main(argv=None):
    """CLI entry point. Parses arguments and delegates to ``run()``."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    props = {}
    if args.properties is not None:
        if not args.properties.exists():
            _fail(f"Properties file {args.properties} not found")
        props.update(load_properties(args.properties))
    props.update(args.define)

    try:
        run(args.project, props, args.dry_run)
    except ManipulationError as e:
        _fail(str(e))
