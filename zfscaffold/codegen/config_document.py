"""Load, mutate and persist PHP configuration documents.

A configuration document is the array returned by a file such as
``config/application.config.php``.  It is held as an ordered ``dict`` (see
:mod:`zfscaffold.codegen.php_values` for the value space).  Mutators never
modify their input; they return a new document and whether anything changed.
"""

from __future__ import annotations

import copy
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from zfscaffold.codegen.models import DocComment, RenderPolicy
from zfscaffold.codegen.php_values import parse_return_statement
from zfscaffold.codegen.synthesizer import GENERATOR_NAME, Synthesizer
from zfscaffold.errors import ParseError, ScaffoldIOError

ConfigDocument = dict[Any, Any]


@dataclass
class ConfigUpdate:
    """Outcome of :func:`update_config`."""

    path: Path
    changed: bool
    backup_path: Path | None = None


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_config(path: str | Path) -> ConfigDocument:
    """Read the configuration document stored in *path*.

    Raises:
        ScaffoldIOError: If the file cannot be read.
        ParseError: If the file is not ``<?php return array(...);`` with a
            keyed array.
    """
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ScaffoldIOError(f"Cannot read configuration file {file_path}: {exc}") from exc

    try:
        value = parse_return_statement(text)
    except ParseError as exc:
        raise ParseError(f"{file_path}: {exc.message}") from exc

    if value == []:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"{file_path}: the configuration must be a keyed array")
    return value


# ---------------------------------------------------------------------------
# Mutators
# ---------------------------------------------------------------------------


def _mapping_at(document: ConfigDocument, *keys: str) -> dict[Any, Any]:
    """Walk (and create) nested mappings; empty arrays count as mappings."""
    node = document
    for key in keys:
        child = node.get(key)
        if child is None or child == []:
            child = {}
            node[key] = child
        if not isinstance(child, dict):
            raise ParseError(f"The configuration entry '{key}' is not a keyed array")
        node = child
    return node


def add_module_entry(document: ConfigDocument, module_name: str) -> tuple[ConfigDocument, bool]:
    """Append *module_name* to the ``modules`` list unless it is already there."""
    modules = document.get("modules", [])
    if not isinstance(modules, list):
        raise ParseError("The configuration entry 'modules' is not a list")
    if module_name in modules:
        return document, False
    updated = copy.deepcopy(document)
    updated["modules"] = [*modules, module_name]
    return updated, True


def add_controller_entry(
    document: ConfigDocument, controller_key: str, controller_class: str
) -> tuple[ConfigDocument, bool]:
    """Register ``controllers.invokables[controller_key] = controller_class``."""
    invokables = document.get("controllers", {})
    if isinstance(invokables, dict):
        invokables = invokables.get("invokables", {})
    if isinstance(invokables, dict) and controller_key in invokables:
        return document, False

    updated = copy.deepcopy(document)
    _mapping_at(updated, "controllers", "invokables")[controller_key] = controller_class
    return updated, True


def add_routes(
    document: ConfigDocument, routes: dict[str, Any]
) -> tuple[ConfigDocument, bool]:
    """Add each route of *routes* under ``router.routes`` unless its name is taken."""
    updated = copy.deepcopy(document)
    existing = _mapping_at(updated, "router", "routes")
    missing = {name: route for name, route in routes.items() if name not in existing}
    if not missing:
        return document, False
    existing.update(copy.deepcopy(missing))
    return updated, True


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def backup_path_for(path: Path, suffix: str = ".old") -> Path:
    """``application.config.php`` -> ``application.config.old``."""
    return path.with_suffix(suffix)


def write_config(
    path: str | Path,
    document: ConfigDocument,
    policy: RenderPolicy | None = None,
    *,
    backup_suffix: str | None = ".old",
) -> Path | None:
    """Render *document* into *path*, backing up the current file first.

    The backup is taken before anything is written, so the previous version
    survives a failed write.

    Returns:
        The backup path, or ``None`` when no backup was made.

    Raises:
        ScaffoldIOError: If the backup or the write fails.
    """
    file_path = Path(path)
    synthesizer = Synthesizer(policy)

    backup: Path | None = None
    if backup_suffix and file_path.exists():
        backup = backup_path_for(file_path, backup_suffix)
        try:
            shutil.copy2(file_path, backup)
        except OSError as exc:
            raise ScaffoldIOError(
                f"Cannot back up {file_path} to {backup}: {exc}", step="backup"
            ) from exc

    header = DocComment(
        summary=f"Configuration file generated by {GENERATOR_NAME}",
        description=(
            f"The previous configuration file is stored in {backup.name}" if backup else ""
        ),
        tags=synthesizer.see_tag(),
    )
    content = synthesizer.synthesize_config_file(document, header)
    try:
        file_path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ScaffoldIOError(f"Cannot write {file_path}: {exc}", step="write") from exc
    return backup


def update_config(
    path: str | Path,
    mutation: Callable[[ConfigDocument], tuple[ConfigDocument, bool]],
    policy: RenderPolicy | None = None,
    *,
    backup_suffix: str | None = ".old",
) -> ConfigUpdate:
    """Load *path*, apply *mutation* and write the result if it changed."""
    file_path = Path(path)
    document, changed = mutation(load_config(file_path))
    if not changed:
        return ConfigUpdate(path=file_path, changed=False)
    backup = write_config(file_path, document, policy, backup_suffix=backup_suffix)
    return ConfigUpdate(path=file_path, changed=True, backup_path=backup)
