"""Module, controller, action and routing scaffolding.

``ModuleGenerator`` works from a fully resolved :class:`ResolvedNames` and
keeps the two halves of every operation apart: an explicit filesystem
preparation step (directories) followed by synthesis and writing of files.
Each write failure is reported with the name of the step that failed; files
written by earlier steps stay in place and the idempotency checks make a
re-run safe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from zfscaffold.codegen.config_document import (
    ConfigDocument,
    ConfigUpdate,
    add_controller_entry,
    add_module_entry,
    add_routes,
    update_config,
)
from zfscaffold.codegen.merger import merge_method
from zfscaffold.codegen.models import (
    ClassModel,
    DocComment,
    DocTag,
    FileModel,
    MethodModel,
    PhpExpression,
    RenderPolicy,
)
from zfscaffold.codegen.php_values import export_value
from zfscaffold.codegen.synthesizer import GENERATOR_NAME, Synthesizer
from zfscaffold.errors import GenerationConflictError, ScaffoldIOError, ValidationError
from zfscaffold.naming.conventions import to_view_name
from zfscaffold.naming.resolver import ResolvedNames

# ---------------------------------------------------------------------------
# Framework class names used by generated code
# ---------------------------------------------------------------------------

ACTION_CONTROLLER = "AbstractActionController"
CONTROLLER_IMPORTS = (
    "Zend\\Mvc\\Controller\\AbstractActionController",
    "Zend\\View\\Model\\ViewModel",
)
STANDARD_AUTOLOADER = "Zend\\Loader\\StandardAutoloader"

SEGMENT_CONSTRAINT = "[a-zA-Z][a-zA-Z0-9_-]*"


@dataclass
class GenerationResult:
    """Files written (and config documents updated) by one operation."""

    written: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    config_updates: list[ConfigUpdate] = field(default_factory=list)


class ModuleGenerator:
    """Generates the PHP sources of modules, controllers and actions."""

    def __init__(
        self,
        names: ResolvedNames,
        policy: RenderPolicy | None = None,
        *,
        source_extension: str = ".php",
        view_extension: str = ".phtml",
        backup_suffix: str = ".old",
    ) -> None:
        self.names = names
        self.policy = policy or RenderPolicy()
        self.source_extension = source_extension
        self.view_extension = view_extension
        self.backup_suffix = backup_suffix
        self.synthesizer = Synthesizer(self.policy)

    # ------------------------------------------------------------------
    # Doc comment helpers
    # ------------------------------------------------------------------

    def _file_doc(self) -> DocComment:
        return DocComment(
            summary=f"This file was generated by {GENERATOR_NAME}.",
            tags=[DocTag("package", self.names.module_name or ""), *self.synthesizer.see_tag()],
        )

    def _doc(self, summary: str, description: str = "", tags: list[DocTag] | None = None) -> DocComment | None:
        if not self.policy.doc_blocks:
            return None
        return DocComment(summary=summary, description=description, tags=tags or [])

    # ------------------------------------------------------------------
    # Source models
    # ------------------------------------------------------------------

    def build_action_method(self, method_name: str) -> MethodModel:
        return MethodModel(
            name=method_name,
            body="return new ViewModel();",
            doc_comment=self._doc(
                f"Method {method_name}",
                "Please add a proper description for this action",
                [DocTag("return", "ViewModel")],
            ),
        )

    def build_controller_file(self) -> FileModel:
        names = self.names
        class_model = ClassModel(
            name=names.controller_class,
            parent=ACTION_CONTROLLER,
            doc_comment=self._doc(
                f"Class {names.controller_class}",
                f"Please add a proper description for the {names.controller_class}",
                [DocTag("package", names.module_name)],
            ),
        )
        class_model.add_method(self.build_action_method("indexAction"))
        return FileModel(
            namespace=names.controller_namespace,
            imports=list(CONTROLLER_IMPORTS),
            doc_comment=self._doc_or_none(self._file_doc()),
            class_model=class_model,
        )

    def build_module_file(self) -> FileModel:
        names = self.names
        autoloader = {
            STANDARD_AUTOLOADER: {
                "namespaces": {
                    PhpExpression("__NAMESPACE__"): PhpExpression(
                        "__DIR__ . '/src/' . __NAMESPACE__"
                    ),
                },
            },
        }
        class_model = ClassModel(
            name="Module",
            doc_comment=self._doc(
                "Module",
                f"Please add a proper description for the {names.module_name} module",
                [DocTag("package", names.module_name)],
            ),
        )
        class_model.add_method(
            MethodModel(
                name="getConfig",
                body="return include __DIR__ . '/config/module.config.php';",
                doc_comment=self._doc("Get module configuration", tags=[DocTag("return", "array")]),
            )
        )
        class_model.add_method(
            MethodModel(
                name="getAutoloaderConfig",
                body=f"return {export_value(autoloader, self.policy)};",
                doc_comment=self._doc(
                    "Get autoloader configuration", tags=[DocTag("return", "array")]
                ),
            )
        )
        return FileModel(
            namespace=names.module_name,
            doc_comment=self._doc_or_none(self._file_doc()),
            class_model=class_model,
        )

    def module_config_document(self) -> ConfigDocument:
        return {
            "controllers": {"invokables": {}},
            "view_manager": {
                "template_path_stack": {
                    self.names.module_view_dir: PhpExpression("__DIR__ . '/../view'"),
                },
            },
        }

    def routes_document(self, controllers: list[str], single_route: bool) -> dict[str, Any]:
        """Build router entries for *controllers* (controller names, not classes)."""
        names = self.names
        module_dir = names.module_view_dir
        namespace = f"{names.module_name}\\Controller"
        if single_route:
            default = "Index" if "Index" in controllers else controllers[0]
            return {
                module_dir: {
                    "type": "Segment",
                    "options": {
                        "route": f"/{module_dir}[/:controller[/:action]]",
                        "constraints": {
                            "controller": SEGMENT_CONSTRAINT,
                            "action": SEGMENT_CONSTRAINT,
                        },
                        "defaults": {
                            "__NAMESPACE__": namespace,
                            "controller": default,
                            "action": "index",
                        },
                    },
                },
            }

        routes: dict[str, Any] = {}
        for controller in controllers:
            controller_dir = to_view_name(controller)
            routes[f"{module_dir}-{controller_dir}"] = {
                "type": "Segment",
                "options": {
                    "route": f"/{module_dir}/{controller_dir}[/:action]",
                    "constraints": {"action": SEGMENT_CONSTRAINT},
                    "defaults": {
                        "controller": f"{namespace}\\{controller}",
                        "action": "index",
                    },
                },
            }
        return routes

    def _doc_or_none(self, doc: DocComment) -> DocComment | None:
        return doc if self.policy.doc_blocks else None

    # ------------------------------------------------------------------
    # Filesystem preparation
    # ------------------------------------------------------------------

    def prepare_module_directories(self) -> list[Path]:
        """Create the directory tree of a new module.

        Raises:
            GenerationConflictError: If the module directory already exists.
            ScaffoldIOError: If a directory cannot be created.
        """
        names = self.names
        if names.module_path.exists():
            raise GenerationConflictError(f"The module {names.module_name} already exists.")
        directories = [
            names.module_path / "config",
            names.module_path / "src" / names.module_name / "Controller",
            names.module_path / "view" / names.module_view_dir,
        ]
        for directory in directories:
            _mkdir(directory, step="create module directories")
        return directories

    def prepare_view_directory(self) -> Path:
        path = self.names.controller_view_path
        _mkdir(path, step="create view directory")
        return path

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create_module(self) -> GenerationResult:
        """Create the module tree, ``Module.php`` and ``module.config.php``."""
        names = self.names
        result = GenerationResult()
        self.prepare_module_directories()

        module_file = names.module_path / f"Module{self.source_extension}"
        _write(
            module_file,
            self.synthesizer.synthesize_class_file(self.build_module_file()),
            step="write Module.php",
        )
        result.written.append(module_file)

        config_file = names.module_config_path
        _write(
            config_file,
            self.synthesizer.synthesize_config_file(self.module_config_document()),
            step="write module.config.php",
        )
        result.written.append(config_file)
        return result

    def register_module(self) -> ConfigUpdate:
        """Add the module to ``application.config.php`` (no-op when present)."""
        return update_config(
            self.names.application_config_path,
            lambda doc: add_module_entry(doc, self.names.module_name),
            self.policy,
            backup_suffix=self.backup_suffix,
        )

    def create_controller(self, register: bool = True) -> GenerationResult:
        """Create the controller class, its index view and its registration."""
        names = self.names
        result = GenerationResult()
        controller_file = names.controller_file_path
        if controller_file.exists():
            raise GenerationConflictError(
                f'The controller "{names.controller_class}" already exists in module '
                f'"{names.module_name}".'
            )
        if not names.controller_path.is_dir():
            raise ValidationError(
                f"The module {names.module_name} has no controller directory "
                f"({names.controller_path})."
            )

        _write(
            controller_file,
            self.synthesizer.synthesize_class_file(self.build_controller_file()),
            step=f"write {names.controller_file}",
        )
        result.written.append(controller_file)

        self.prepare_view_directory()
        index_view = names.controller_view_path / f"index{self.view_extension}"
        self._write_view_script("index", index_view, result)

        if register:
            result.config_updates.append(
                update_config(
                    names.module_config_path,
                    lambda doc: add_controller_entry(
                        doc,
                        names.controller_key,
                        f"{names.controller_namespace}\\{names.controller_class}",
                    ),
                    self.policy,
                    backup_suffix=self.backup_suffix,
                )
            )
        return result

    def create_action(self) -> GenerationResult:
        """Append the action method to an existing controller and add its view."""
        names = self.names
        result = GenerationResult()
        controller_file = names.controller_file_path
        if not controller_file.exists():
            raise ValidationError(
                f'The controller "{names.controller_class}" does not exist in module '
                f'"{names.module_name}".'
            )
        try:
            existing = controller_file.read_bytes().decode("utf-8")
        except OSError as exc:
            raise ScaffoldIOError(
                f"Cannot read {controller_file}: {exc}", step=f"read {names.controller_file}"
            ) from exc

        updated = merge_method(
            existing,
            names.controller_class,
            self.build_action_method(names.action_method),
            imports=CONTROLLER_IMPORTS,
            parent=ACTION_CONTROLLER,
            namespace=names.controller_namespace,
            policy=self.policy,
        )
        _write(controller_file, updated, step=f"write {names.controller_file}")
        result.written.append(controller_file)

        self.prepare_view_directory()
        self._write_view_script(names.action_name, names.action_view_path, result)
        return result

    def create_routing(self, single_route: bool = False) -> GenerationResult:
        """Write router configuration for every controller of the module."""
        names = self.names
        controller_dir = names.module_path / "src" / names.module_name / "Controller"
        suffix = f"Controller{self.source_extension}"
        controllers = sorted(
            path.name[: -len(suffix)]
            for path in controller_dir.glob(f"*{suffix}")
            if path.name != suffix
        )
        if not controllers:
            raise ValidationError(f"The module {names.module_name} has no controllers.")

        routes = self.routes_document(controllers, single_route)
        result = GenerationResult()
        result.config_updates.append(
            update_config(
                names.module_config_path,
                lambda doc: add_routes(doc, routes),
                self.policy,
                backup_suffix=self.backup_suffix,
            )
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _write_view_script(self, action_name: str, path: Path, result: GenerationResult) -> None:
        # An existing view script may hold user edits.
        if path.exists():
            result.skipped.append(path)
            return
        names = self.names
        content = self.synthesizer.synthesize_view_script(
            action_name, names.controller_name, names.module_name
        )
        _write(path, content, step=f"write view script {path.name}")
        result.written.append(path)


def _mkdir(path: Path, step: str) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ScaffoldIOError(f"Cannot create directory {path}: {exc}", step=step) from exc


def _write(path: Path, content: str, step: str) -> None:
    try:
        path.write_text(content, encoding="utf-8", newline="")
    except OSError as exc:
        raise ScaffoldIOError(f"Cannot write {path}: {exc}", step=step) from exc
