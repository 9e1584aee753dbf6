"""Derive every name and filesystem path a scaffolding command needs.

``resolve()`` turns the raw user input captured in a :class:`ScaffoldRequest`
into a :class:`ResolvedNames`.  The function is deterministic: the same
request always produces an equal result, which is what makes re-running a
command safe.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from zfscaffold.errors import ValidationError
from zfscaffold.naming.conventions import lcfirst, to_class_name, to_view_name

APPLICATION_CONFIG = Path("config") / "application.config.php"
MODULE_CONFIG = Path("config") / "module.config.php"

_PHP_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ScaffoldRequest(BaseModel):
    """Raw user input for one scaffolding command."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(default=".", description="Project root")
    module_name: str | None = None
    controller_name: str | None = None
    action_name: str | None = None
    ignore_conventions: bool = False
    no_docblocks: bool = False
    no_config: bool = False
    single_route: bool = False


class ResolvedNames(BaseModel):
    """Every derived identifier and path for a request.

    Fields belonging to a level the command did not ask for (e.g. the action
    fields of a ``create module`` command) stay ``None``.
    """

    model_config = ConfigDict(frozen=True)

    project_path: Path

    module_name: str | None = None
    module_path: Path | None = None
    module_view_dir: str | None = None

    controller_name: str | None = None
    controller_class: str | None = None
    controller_file: str | None = None
    controller_path: Path | None = None
    controller_view_path: Path | None = None

    action_name: str | None = None
    action_method: str | None = None
    action_view_file: str | None = None
    action_view_path: Path | None = None

    @property
    def application_config_path(self) -> Path:
        return self.project_path / APPLICATION_CONFIG

    @property
    def module_config_path(self) -> Path | None:
        if self.module_path is None:
            return None
        return self.module_path / MODULE_CONFIG

    @property
    def controller_file_path(self) -> Path | None:
        if self.controller_path is None or self.controller_file is None:
            return None
        return self.controller_path / self.controller_file

    @property
    def controller_namespace(self) -> str | None:
        if self.module_name is None:
            return None
        return f"{self.module_name}\\Controller"

    @property
    def controller_key(self) -> str | None:
        """Service key under which the controller is registered (``Blog\\Controller\\Index``)."""
        if self.controller_name is None:
            return None
        return f"{self.controller_namespace}\\{self.controller_name}"


def _check_identifier(kind: str, raw: str, name: str) -> None:
    if not _PHP_IDENTIFIER.match(name):
        raise ValidationError(
            f'The {kind} name "{raw}" does not produce a valid class name ("{name}").'
        )


def resolve(
    request: ScaffoldRequest,
    source_extension: str = ".php",
    view_extension: str = ".phtml",
) -> ResolvedNames:
    """Compute the :class:`ResolvedNames` for *request*.

    Raises:
        ValidationError: If a prerequisite name is missing (an action without
            a controller, a controller without a module) or a derived name is
            not a valid PHP identifier.
    """
    root = request.path or "."
    if len(root) > 1:
        root = root.rstrip("/") or "/"
    values: dict = {"project_path": Path(root)}
    mode = request.ignore_conventions

    if request.controller_name and not request.module_name:
        raise ValidationError("A module name is required to resolve a controller.")
    if request.action_name and not request.controller_name:
        raise ValidationError("A controller name is required to resolve an action.")

    if request.module_name:
        module_name = to_class_name(request.module_name, mode)
        _check_identifier("module", request.module_name, module_name)
        module_path = values["project_path"] / "module" / module_name
        values.update(
            module_name=module_name,
            module_path=module_path,
            module_view_dir=to_view_name(module_name),
        )

    if request.controller_name:
        controller_name = to_class_name(request.controller_name, mode)
        _check_identifier("controller", request.controller_name, controller_name)
        controller_class = f"{controller_name}Controller"
        module_path = values["module_path"]
        values.update(
            controller_name=controller_name,
            controller_class=controller_class,
            controller_file=f"{controller_class}{source_extension}",
            controller_path=module_path / "src" / values["module_name"] / "Controller",
            controller_view_path=(
                module_path / "view" / values["module_view_dir"] / to_view_name(controller_name)
            ),
        )

    if request.action_name:
        action_name = to_class_name(request.action_name, mode)
        _check_identifier("action", request.action_name, action_name)
        action_view_file = f"{to_view_name(action_name)}{view_extension}"
        values.update(
            action_name=action_name,
            action_method=f"{lcfirst(action_name)}Action",
            action_view_file=action_view_file,
            action_view_path=values["controller_view_path"] / action_view_file,
        )

    return ResolvedNames(**values)
