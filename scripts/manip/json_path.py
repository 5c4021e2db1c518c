"""A JSONPath subset for locating nodes in parsed JSON documents.

Supported syntax::

    $.a.b[2]["key.with.dots"]['other'][*].c..name..*

- ``$`` root (mandatory).
- ``.key`` / ``["key"]`` / ``['key']`` for object members. Quoted keys accept
  ``\\`` escapes for the quote and the backslash.
- ``[n]`` for non-negative array indices.
- ``.*`` / ``[*]`` wildcards.
- ``..key`` / ``..*`` / ``..[n]`` recursive descent.

Locations are ``(container, key)`` pairs so a caller can replace or delete the
located node in place. Matches are produced lazily in document order.
"""

from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

from .errors import InvalidPathError, PathNotFoundError

KEY = "key"
INDEX = "index"
WILDCARD = "wildcard"


@dataclass(frozen=True)
class Segment:
    """One step of a compiled path.

    Attributes:
        kind: ``key``, ``index`` or ``wildcard``.
        value: Member name for ``key``, position for ``index``, ``None``
            for ``wildcard``.
        recursive: ``True`` when the step was introduced by ``..``.
    """
    kind: str
    value: Union[str, int, None] = None
    recursive: bool = False


def tokenize(path: str) -> list[Segment]:
    """Compile a path expression into segments.

    Raises:
        InvalidPathError: On any syntax error.
    """
    if not isinstance(path, str) or not path.startswith("$"):
        raise InvalidPathError(f"JSON path must start with '$': '{path}'")

    n = len(path)
    i = 1
    segments: list[Segment] = []

    def read_name(start: int) -> tuple[str, int]:
        j = start
        while j < n and path[j] not in ".[":
            j += 1
        if j == start:
            raise InvalidPathError(f"Expected member name at position {start} in '{path}'")
        return path[start:j], j

    def read_bracket(start: int, recursive: bool) -> tuple[Segment, int]:
        j = start + 1
        if j >= n:
            raise InvalidPathError(f"Unclosed '[' at position {start} in '{path}'")
        if path[j] in ("'", '"'):
            quote = path[j]
            j += 1
            buf = []
            while j < n:
                ch = path[j]
                if ch == "\\":
                    j += 1
                    if j >= n:
                        raise InvalidPathError(f"Trailing backslash in quoted key in '{path}'")
                    buf.append(path[j])
                elif ch == quote:
                    break
                else:
                    buf.append(ch)
                j += 1
            else:
                raise InvalidPathError(f"Unclosed quoted key at position {start} in '{path}'")
            j += 1
            if j >= n or path[j] != "]":
                raise InvalidPathError(f"Expected ']' after quoted key at position {j} in '{path}'")
            return Segment(KEY, "".join(buf), recursive), j + 1
        if path[j] == "*":
            if j + 1 >= n or path[j + 1] != "]":
                raise InvalidPathError(f"Expected ']' after '*' at position {j} in '{path}'")
            return Segment(WILDCARD, None, recursive), j + 2
        k = j
        while k < n and path[k].isdigit():
            k += 1
        if k == j:
            raise InvalidPathError(
                f"Expected non-negative integer index after '[' at position {start} in '{path}'"
            )
        if k >= n or path[k] != "]":
            raise InvalidPathError(f"Expected ']' after index at position {k} in '{path}'")
        return Segment(INDEX, int(path[j:k]), recursive), k + 1

    while i < n:
        ch = path[i]
        if ch == "[":
            segment, i = read_bracket(i, recursive=False)
        elif ch == ".":
            recursive = path.startswith("..", i)
            i += 2 if recursive else 1
            if i >= n:
                raise InvalidPathError(f"Path ends after '.' in '{path}'")
            if path[i] == "*":
                segment, i = Segment(WILDCARD, None, recursive), i + 1
            elif path[i] == "[" and recursive:
                segment, i = read_bracket(i, recursive=True)
            else:
                name, i = read_name(i)
                segment = Segment(KEY, name, recursive)
        else:
            raise InvalidPathError(f"Unexpected '{ch}' at position {i} in '{path}'")
        segments.append(segment)

    return segments


def _select(node: Any, segment: Segment) -> Iterator[tuple[Any, Union[str, int]]]:
    if segment.kind == KEY:
        if isinstance(node, dict) and segment.value in node:
            yield node, segment.value
    elif segment.kind == INDEX:
        if isinstance(node, list) and segment.value < len(node):
            yield node, segment.value
    elif isinstance(node, dict):
        for key in node:
            yield node, key
    elif isinstance(node, list):
        for idx in range(len(node)):
            yield node, idx


def _descendants(node: Any) -> Iterator[Any]:
    yield node
    if isinstance(node, dict):
        for child in node.values():
            yield from _descendants(child)
    elif isinstance(node, list):
        for child in node:
            yield from _descendants(child)


def _walk(node: Any, segments: list[Segment]) -> Iterator[tuple[Any, Union[str, int]]]:
    segment, rest = segments[0], segments[1:]
    candidates = _descendants(node) if segment.recursive else (node,)
    for candidate in candidates:
        for container, key in _select(candidate, segment):
            if rest:
                yield from _walk(container[key], rest)
            else:
                yield container, key


def iter_locations(doc: Any, path: str) -> Iterator[tuple[Any, Union[str, int]]]:
    """Yield every ``(container, key)`` location matched by ``path``.

    The bare root ``$`` has no container and therefore yields nothing.
    """
    segments = tokenize(path)
    if not segments:
        return iter(())
    return _walk(doc, segments)


def find_first(doc: Any, path: str) -> Optional[tuple[Any, Union[str, int]]]:
    """Return the first location matched by ``path``, or ``None``."""
    return next(iter_locations(doc, path), None)


def get_by_json_path(doc: Any, path: str) -> Any:
    """Return the value at the first location matched by ``path``.

    Raises:
        PathNotFoundError: If nothing matches.
    """
    location = find_first(doc, path)
    if location is None:
        raise PathNotFoundError(None, path)
    container, key = location
    return container[key]
