"""Word filters used to derive canonical identifiers from user input.

Every function here is pure and total: any string goes in, a string comes
out.  The behaviour mirrors the Zend ``Word`` filters so generated names match
what a ZF2 application expects:

* ``underscore_to_camel("foo_bar")``  -> ``"FooBar"``
* ``dash_to_camel("blog-post")``      -> ``"BlogPost"``
* ``camel_to_dash("BlogPost")``       -> ``"Blog-Post"``
* ``dash_to_underscore("my-module")`` -> ``"my_module"``
"""

from __future__ import annotations

import re

_UPPER_BEFORE_UPPER_LOWER = re.compile(r"(?<=[A-Z])([A-Z][a-z])")
_UPPER_AFTER_LOWER_OR_DIGIT = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _separator_to_camel(value: str, separator: str) -> str:
    pattern = re.compile(re.escape(separator) + r"([^\W\d_])")
    result = pattern.sub(lambda m: m.group(1).upper(), value)
    if result[:1].islower():
        result = result[0].upper() + result[1:]
    return result


def underscore_to_camel(value: str) -> str:
    """Convert ``some_thing`` to ``SomeThing``.

    An underscore is only dropped when a letter follows it, so ``foo_1``
    becomes ``Foo_1``.
    """
    return _separator_to_camel(value, "_")


def dash_to_camel(value: str) -> str:
    """Convert ``some-thing`` to ``SomeThing``."""
    return _separator_to_camel(value, "-")


def camel_to_dash(value: str) -> str:
    """Insert dashes at camel-case word boundaries (``HTMLParser`` -> ``HTML-Parser``)."""
    result = _UPPER_BEFORE_UPPER_LOWER.sub(r"-\1", value)
    return _UPPER_AFTER_LOWER_OR_DIGIT.sub(r"-\1", result)


def dash_to_underscore(value: str) -> str:
    return value.replace("-", "_")


def to_lower(value: str) -> str:
    return value.lower()


def lcfirst(value: str) -> str:
    """Lower-case the first character only."""
    return value[:1].lower() + value[1:]


def to_class_name(value: str, ignore_conventions: bool = False) -> str:
    """Normalise a raw identifier into a class-style name.

    Convention mode camel-cases underscores and dashes; literal mode keeps
    the user's casing and only turns dashes into underscores.
    """
    if ignore_conventions:
        return dash_to_underscore(value)
    return dash_to_camel(underscore_to_camel(value))


def to_view_name(value: str) -> str:
    """Lower-dash form used for view directories and view script names."""
    return to_lower(camel_to_dash(value))
