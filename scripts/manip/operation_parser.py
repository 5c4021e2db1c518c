"""Parser for the operation micro-language.

A single property value encodes any number of edit operations::

    target:path:value,target:path:value,...

``,`` separates records and ``:`` separates the fields of a record. A
backslash makes the next character literal, so ``\\:``, ``\\,`` and ``\\\\``
denote a colon, a comma and a backslash inside a field. Whitespace is
significant and never trimmed.
"""

import enum
from typing import Iterable, Optional

from .errors import MalformedOperationError
from .models import Operation

RECORD_DELIMITER = ","
FIELD_DELIMITER = ":"
ESCAPE = "\\"


class _ScanState(enum.Enum):
    IN_FIELD = "in_field"
    ESCAPE_PENDING = "escape_pending"


def split_records(text: str) -> list[tuple[str, list[str]]]:
    """Split ``text`` into records of unescaped fields.

    Scans left to right. An unescaped record delimiter closes the current
    record, an unescaped field delimiter closes the current field, and an
    escaped character is copied into the field without changing state.

    Args:
        text: The encoded operations string.

    Returns:
        One ``(raw_record, fields)`` tuple per record, where ``raw_record`` is
        the original escaped substring (used for diagnostics).

    Raises:
        MalformedOperationError: If the input ends with a dangling escape.
    """
    records = []
    fields = []
    buf = []
    start = 0
    state = _ScanState.IN_FIELD

    for i, ch in enumerate(text):
        if state is _ScanState.ESCAPE_PENDING:
            buf.append(ch)
            state = _ScanState.IN_FIELD
        elif ch == ESCAPE:
            state = _ScanState.ESCAPE_PENDING
        elif ch == FIELD_DELIMITER:
            fields.append("".join(buf))
            buf = []
        elif ch == RECORD_DELIMITER:
            fields.append("".join(buf))
            records.append((text[start:i], fields))
            fields, buf = [], []
            start = i + 1
        else:
            buf.append(ch)

    if state is _ScanState.ESCAPE_PENDING:
        raise MalformedOperationError("Dangling escape character at end of input", text[start:])

    fields.append("".join(buf))
    records.append((text[start:], fields))
    return records


def _to_operation(raw: str, fields: list[str]) -> Operation:
    if len(fields) < 2:
        raise MalformedOperationError("Operation needs at least target:path", raw)
    if len(fields) > 3:
        raise MalformedOperationError(
            "Too many fields in operation (escape literal ':' and ',' with '\\')", raw
        )
    target, path = fields[0], fields[1]
    if not target:
        raise MalformedOperationError("Operation target is empty", raw)
    if not path:
        raise MalformedOperationError("Operation path is empty", raw)
    value = fields[2] if len(fields) == 3 else None
    return Operation(target=target, path=path, value=value)


def parse_operations(text: Optional[str]) -> list[Operation]:
    """Parse an encoded operations string into :class:`Operation` records.

    Args:
        text: Encoded string, or ``None``.

    Returns:
        Operations in declaration order. ``None`` or ``""`` yields ``[]``.
        A record with two fields has ``value=None``.

    Raises:
        MalformedOperationError: On a record with fewer than two or more than
            three fields, an empty target or path, or a dangling escape. No
            partial result is returned.
    """
    if not text:
        return []
    return [_to_operation(raw, fields) for raw, fields in split_records(text)]


def escape_field(text: str) -> str:
    """Escape delimiters and backslashes so ``text`` parses back literally."""
    out = []
    for ch in text:
        if ch in (ESCAPE, FIELD_DELIMITER, RECORD_DELIMITER):
            out.append(ESCAPE)
        out.append(ch)
    return "".join(out)


def format_operation(op: Operation) -> str:
    """Serialize a single operation into the micro-language."""
    fields = [op.target, op.path]
    if op.value is not None:
        fields.append(op.value)
    return FIELD_DELIMITER.join(escape_field(f) for f in fields)


def format_operations(ops: Iterable[Operation]) -> str:
    return RECORD_DELIMITER.join(format_operation(op) for op in ops)
