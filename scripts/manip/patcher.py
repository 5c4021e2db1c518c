"""Document patcher: apply :class:`Operation` edits to loaded documents.

Resolution goes through a small capability interface so the same patching
logic serves JSON trees and POM element trees:

    resolver.resolve(document, path) -> Location | None

The patcher replaces the located node's value (or deletes it when the value
is ``None``). It never creates missing nodes and never persists the document;
loading and storing belong to the caller.
"""

import enum
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Protocol, Union

from . import json_path, pom_tree
from .errors import PathNotFoundError
from .models import Operation

logger = logging.getLogger(__name__)


class OperationStatus(enum.Enum):
    """Terminal outcome of a single operation.

    :func:`apply` returns ``APPLIED``. ``NOT_FOUND`` is never returned: it is
    surfaced to callers as :class:`PathNotFoundError` and only names the
    outcome in debug logs.
    """
    APPLIED = "applied"
    NOT_FOUND = "not_found"


class Location(Protocol):
    def get(self) -> Any: ...

    def set(self, value: Any) -> None: ...

    def delete(self) -> None: ...


class Resolver(Protocol):
    def resolve(self, document: Any, path: str) -> Optional[Location]: ...


@dataclass
class JsonLocation:
    container: Union[dict, list]
    key: Union[str, int]

    def get(self) -> Any:
        return self.container[self.key]

    def set(self, value: Any) -> None:
        self.container[self.key] = value

    def delete(self) -> None:
        del self.container[self.key]


@dataclass
class ElementLocation:
    parent: ET.Element
    element: ET.Element

    def get(self) -> Optional[str]:
        return self.element.text

    def set(self, value: Any) -> None:
        self.element.text = value

    def delete(self) -> None:
        self.parent.remove(self.element)


class JsonTreeResolver:
    """Resolves JSONPath expressions against ``dict``/``list`` trees."""

    def resolve(self, document: Any, path: str) -> Optional[JsonLocation]:
        location = json_path.find_first(document, path)
        if location is None:
            return None
        return JsonLocation(*location)


class PomTreeResolver:
    """Resolves POM element paths against ``ElementTree`` documents."""

    def resolve(self, document: Any, path: str) -> Optional[ElementLocation]:
        root = document.getroot() if isinstance(document, ET.ElementTree) else document
        found = pom_tree.find_element(root, path)
        if found is None:
            return None
        return ElementLocation(*found)


def resolver_for(document: Any) -> Resolver:
    """Pick the resolver matching the document's tree type."""
    if isinstance(document, (ET.ElementTree, ET.Element)):
        return PomTreeResolver()
    if isinstance(document, (dict, list)):
        return JsonTreeResolver()
    raise TypeError(f"No path resolver for document of type {type(document).__name__}")


def apply(document: Any, operation: Operation, resolver: Optional[Resolver] = None) -> OperationStatus:
    """Apply one operation to ``document`` in place.

    Args:
        document: A parsed JSON tree or POM element tree.
        operation: The edit to apply.
        resolver: Path resolver; chosen from the document type when omitted.

    Returns:
        ``OperationStatus.APPLIED``.

    Raises:
        PathNotFoundError: If ``operation.path`` does not resolve. The
            document is left untouched.
    """
    resolver = resolver or resolver_for(document)
    logger.debug("Resolving %s in %s", operation.path, operation.target)

    location = resolver.resolve(document, operation.path)
    if location is None:
        logger.debug("%s: %s in %s", OperationStatus.NOT_FOUND.value, operation.path, operation.target)
        raise PathNotFoundError(operation.target, operation.path)

    if operation.value is None:
        location.delete()
    else:
        location.set(operation.value)
    logger.debug("Updated %s in %s to %r", operation.path, operation.target, operation.value)
    return OperationStatus.APPLIED


def apply_all(document: Any, operations: Iterable[Operation], resolver: Optional[Resolver] = None) -> int:
    """Apply ``operations`` sequentially to one document.

    Not transactional: when an operation fails, the ones already applied stay
    applied and the error propagates.

    Returns:
        Number of operations applied.
    """
    resolver = resolver or resolver_for(document)
    count = 0
    for operation in operations:
        apply(document, operation, resolver)
        count += 1
    return count
