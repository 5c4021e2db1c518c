"""Loading of flat key/value build properties.

Properties come from a Java-style ``.properties`` file and from ``-D``
command-line definitions. Backslashes inside values are kept as written so
operation strings keep their escapes; only a trailing backslash (line
continuation) is interpreted.
"""

from pathlib import Path
from typing import Iterable, Optional, Union


def parse_bool(value: Optional[str], default: bool) -> bool:
    """Interpret a property value like Java's ``Boolean.valueOf``.

    Only a case-insensitive ``"true"`` is true; any other present value is
    false. ``None`` yields ``default``.
    """
    if value is None:
        return default
    return value.strip().lower() == "true"


def _split_entry(line: str) -> tuple[str, str]:
    for i, ch in enumerate(line):
        if ch in "=:":
            return line[:i].strip(), line[i + 1:].lstrip()
        if ch.isspace():
            rest = line[i:].lstrip()
            if rest[:1] in ("=", ":"):
                rest = rest[1:].lstrip()
            return line[:i], rest
    return line.strip(), ""


def _continues(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def parse_properties(lines: Iterable[str]) -> dict[str, str]:
    """Parse ``.properties`` content.

    Supports ``#`` and ``!`` comments, ``=``, ``:`` or whitespace separators
    and backslash line continuation.
    """
    props = {}
    pending = ""
    for raw in lines:
        line = raw.rstrip("\r\n")
        if pending:
            line = pending + line.lstrip()
            pending = ""
        elif not line.strip() or line.lstrip()[0] in "#!":
            continue
        if _continues(line):
            pending = line[:-1]
            continue
        key, value = _split_entry(line.lstrip())
        if key:
            props[key] = value
    if pending:
        key, value = _split_entry(pending.lstrip())
        if key:
            props[key] = value
    return props


def load_properties(path: Union[str, Path]) -> dict[str, str]:
    """Read a ``.properties`` file (UTF-8)."""
    with open(path, encoding="utf-8") as f:
        return parse_properties(f)


def parse_define(text: str) -> tuple[str, str]:
    """Parse a ``key=value`` definition as passed with ``-D``.

    A definition without ``=`` sets the key to ``"true"``, mirroring Maven.

    Raises:
        ValueError: If the key is empty.
    """
    key, sep, value = text.partition("=")
    key = key.strip()
    if not key:
        raise ValueError(f"Invalid property definition '{text}'")
    return key, value if sep else "true"
