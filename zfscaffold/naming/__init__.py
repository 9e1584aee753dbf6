"""Naming conventions and path resolution for scaffolding commands."""

from zfscaffold.naming.conventions import (
    camel_to_dash,
    dash_to_camel,
    dash_to_underscore,
    lcfirst,
    to_class_name,
    to_lower,
    to_view_name,
    underscore_to_camel,
)
from zfscaffold.naming.resolver import ResolvedNames, ScaffoldRequest, resolve

__all__ = [
    "ResolvedNames",
    "ScaffoldRequest",
    "camel_to_dash",
    "dash_to_camel",
    "dash_to_underscore",
    "lcfirst",
    "resolve",
    "to_class_name",
    "to_lower",
    "to_view_name",
    "underscore_to_camel",
]
