"""Export Python values as PHP literal expressions, and read them back.

Used for configuration files (``return array(...);``) and for method bodies
that return a nested array.  The supported value space is:

* ``None``, ``bool``, ``int``, ``float``, ``str``
* ``list`` (a PHP array without explicit keys)
* ``dict`` (ordered; keys are ``str``, ``int`` or :class:`PhpExpression`)
* :class:`PhpExpression` for anything that is not a literal, kept verbatim
"""

from __future__ import annotations

import math
import re
from typing import Any

from zfscaffold.codegen.models import PhpExpression, RenderPolicy
from zfscaffold.codegen.scanner import Scanner
from zfscaffold.errors import ParseError

_NUMBER = re.compile(r"-?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?(?![A-Za-z0-9_.])")
_KEYWORD = re.compile(r"(true|false|null)(?![A-Za-z0-9_\\(:])", re.IGNORECASE)
_ARRAY_OPEN = re.compile(r"array\s*\(", re.IGNORECASE)
_DOUBLE_QUOTE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"', "$": "$"}

_NOT_LITERAL = object()


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def quote_string(value: str) -> str:
    """Render *value* as a single-quoted PHP string.

    Backslashes are only doubled where PHP would otherwise read them as an
    escape, so namespaced class names stay readable.
    """
    out: list[str] = []
    for index, char in enumerate(value):
        if char == "'":
            out.append("\\'")
        elif char == "\\" and (index + 1 == len(value) or value[index + 1] in "\\'"):
            out.append("\\\\")
        else:
            out.append(char)
    return "'" + "".join(out) + "'"


def _export_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NAN"
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        return repr(value)
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, PhpExpression):
        return value.code
    raise TypeError(f"Cannot export {type(value).__name__} as a PHP value")


def export_value(value: Any, policy: RenderPolicy | None = None, level: int = 0) -> str:
    """Render *value* as a PHP expression.

    Nested arrays are laid out one item per line with a trailing comma,
    indented by ``policy.indent`` per nesting level.
    """
    policy = policy or RenderPolicy()
    if not isinstance(value, (dict, list, tuple)):
        return _export_scalar(value)

    opening, closing = ("[", "]") if policy.short_arrays else ("array(", ")")
    if not value:
        return opening + closing

    inner = policy.indent * (level + 1)
    lines = [opening]
    if isinstance(value, dict):
        for key, item in value.items():
            rendered = export_value(item, policy, level + 1)
            lines.append(f"{inner}{_export_scalar(key)} => {rendered},")
    else:
        for item in value:
            lines.append(f"{inner}{export_value(item, policy, level + 1)},")
    lines.append(policy.indent * level + closing)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _unescape_single(raw: str) -> str:
    return re.sub(r"\\([\\'])", r"\1", raw)


def _unescape_double(raw: str) -> Any:
    out: list[str] = []
    index = 0
    while index < len(raw):
        char = raw[index]
        if char == "$":
            return _NOT_LITERAL
        if char == "\\" and index + 1 < len(raw):
            nxt = raw[index + 1]
            if nxt in _DOUBLE_QUOTE_ESCAPES:
                out.append(_DOUBLE_QUOTE_ESCAPES[nxt])
                index += 2
                continue
            if nxt in "uxv0123456789ef":
                return _NOT_LITERAL
        out.append(char)
        index += 1
    return "".join(out)


def _parse_literal(scanner: Scanner) -> Any:
    char = scanner.peek()
    if char in ("'", '"'):
        start = scanner.pos
        scanner.skip_string()
        raw = scanner.text[start + 1 : scanner.pos - 1]
        return _unescape_single(raw) if char == "'" else _unescape_double(raw)

    match = _ARRAY_OPEN.match(scanner.text, scanner.pos)
    if match:
        scanner.pos = match.end()
        return _parse_array_items(scanner, ")")
    if char == "[":
        scanner.pos += 1
        return _parse_array_items(scanner, "]")

    match = _NUMBER.match(scanner.text, scanner.pos)
    if match:
        scanner.pos = match.end()
        text = match.group(0)
        if any(c in text for c in ".eE"):
            return float(text)
        return int(text)

    match = _KEYWORD.match(scanner.text, scanner.pos)
    if match:
        scanner.pos = match.end()
        return {"true": True, "false": False, "null": None}[match.group(1).lower()]

    return _NOT_LITERAL


def _at_value_end(scanner: Scanner) -> bool:
    return scanner.peek() in (",", ";", ")", "]") or scanner.startswith("=>")


def parse_value(scanner: Scanner) -> Any:
    """Parse one value at the cursor.

    Literal values become Python values; any other expression is captured
    verbatim as a :class:`PhpExpression`.
    """
    scanner.skip_trivia()
    start = scanner.pos
    value = _parse_literal(scanner)
    if value is not _NOT_LITERAL:
        end = scanner.pos
        scanner.skip_trivia()
        if _at_value_end(scanner):
            return value
        scanner.pos = end

    scanner.pos = start
    while not scanner.at_end and not _at_value_end(scanner):
        if scanner.peek() in "([{":
            scanner.skip_balanced()
        else:
            scanner.skip_token()
    code = scanner.text[start : scanner.pos].strip()
    if not code:
        raise scanner.error("Expected a value")
    return PhpExpression(code)


def _parse_array_items(scanner: Scanner, closing: str) -> list[Any] | dict[Any, Any]:
    items: list[tuple[Any, Any]] = []
    has_keys = False
    while True:
        scanner.skip_trivia()
        if scanner.at_end:
            raise scanner.error(f"Unterminated array, expected {closing!r}")
        if scanner.peek() == closing:
            scanner.pos += 1
            break

        value = parse_value(scanner)
        scanner.skip_trivia()
        key = None
        if scanner.startswith("=>"):
            if isinstance(value, (dict, list, float)) or value is None:
                raise scanner.error("Invalid array key")
            scanner.pos += 2
            key, value = value, parse_value(scanner)
            has_keys = True
            scanner.skip_trivia()
        items.append((key, value))

        if scanner.peek() == ",":
            scanner.pos += 1
        elif scanner.peek() != closing:
            raise scanner.error(f"Expected ',' or {closing!r} in array")

    if not has_keys:
        return [value for _, value in items]

    result: dict[Any, Any] = {}
    next_index = 0
    for key, value in items:
        if key is None:
            key = next_index
        if isinstance(key, bool):
            key = int(key)
        if isinstance(key, int):
            next_index = max(next_index, key + 1)
        result[key] = value
    return result


def parse_return_statement(text: str) -> Any:
    """Parse a PHP file of the form ``<?php return <value>;``.

    Comments are allowed anywhere; nothing else may appear at the top level.

    Raises:
        ParseError: If the text does not have that shape.
    """
    scanner = Scanner(text)
    scanner.skip_whitespace()
    if not scanner.startswith("<?php"):
        raise ParseError("Expected the file to start with '<?php'")
    scanner.pos += len("<?php")
    scanner.skip_trivia()

    keyword = scanner.read_name()
    if keyword is None or keyword.lower() != "return":
        raise scanner.error("Expected a 'return' statement")

    value = parse_value(scanner)
    scanner.skip_trivia()
    scanner.expect(";")
    scanner.skip_trivia()
    if scanner.startswith("?>"):
        scanner.pos += 2
        scanner.skip_whitespace()
    if not scanner.at_end:
        raise scanner.error("Unexpected content after the return statement")
    return value
