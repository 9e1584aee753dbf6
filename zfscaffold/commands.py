"""Command layer: one method per scaffolding command.

Every command returns a :class:`CommandResult` carrying a human-readable
status line and an error level (``0`` on success, :data:`ABORT_ERROR_LEVEL`
when the command was aborted).  Engine errors are never swallowed: each
:class:`~zfscaffold.errors.ScaffoldError` is reported and converted into the
result, anything else propagates.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from zfscaffold.codegen.config_document import load_config
from zfscaffold.codegen.generator import GenerationResult, ModuleGenerator
from zfscaffold.config import ToolConfig
from zfscaffold.errors import ScaffoldError, ValidationError
from zfscaffold.naming.resolver import ResolvedNames, ScaffoldRequest, resolve
from zfscaffold.skeleton.bootstrap import SkeletonBootstrap
from zfscaffold.skeleton.cache import SkeletonCache
from zfscaffold.skeleton.client import SkeletonClient
from zfscaffold.utils import (
    print_error,
    print_info,
    print_success,
    print_summary_table,
    print_warning,
    relative_to,
)


@dataclass
class CommandResult:
    """Status line and error level reported for one command."""

    message: str
    error_level: int = 0
    details: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error_level == 0


class ScaffoldCommands:
    """Runs scaffolding commands against a project on disk.

    Attributes:
        config: Tool configuration (skeleton source, generator settings).
        client: HTTP client for the skeleton repository.
        cache: Cache of downloaded skeleton archives.
    """

    def __init__(
        self,
        config: ToolConfig | None = None,
        *,
        client: SkeletonClient | None = None,
        cache: SkeletonCache | None = None,
    ) -> None:
        self.config = config or ToolConfig()
        self.client = client or SkeletonClient(self.config.skeleton)
        self.cache = cache or SkeletonCache(
            self.config.skeleton.cache_dir, self.config.skeleton.cache_prefix
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def project(self, path: str) -> CommandResult:
        """``create project <path>``"""

        def run() -> CommandResult:
            bootstrap = SkeletonBootstrap(self.client, self.cache)
            result = bootstrap.run(path)
            if result.used_fallback:
                print_warning(
                    f"Cannot reach the skeleton repository ({result.fallback_reason}); "
                    f"using the cached revision {result.revision}"
                )
            elif result.downloaded:
                print_info(f"Downloaded skeleton revision {result.revision}")
            return CommandResult(
                f"ZF2 skeleton application installed in {path}.",
                details=[f"revision: {result.revision}"],
            )

        return self._run(run)

    def module(
        self,
        module_name: str,
        path: str = ".",
        *,
        ignore_conventions: bool = False,
        no_docblocks: bool = False,
    ) -> CommandResult:
        """``create module <moduleName> [<path>]``"""

        def run() -> CommandResult:
            request = ScaffoldRequest(
                path=path,
                module_name=module_name,
                ignore_conventions=ignore_conventions,
                no_docblocks=no_docblocks,
            )
            names = self._resolve(request)
            generator = self._generator(names, no_docblocks)
            result = generator.create_module()
            result.config_updates.append(generator.register_module())
            self._report(names, result)
            return CommandResult(
                f"The module {names.module_name} has been created",
                details=[relative_to(p, names.project_path) for p in result.written],
            )

        return self._run(run)

    def controller(
        self,
        controller_name: str,
        module_name: str,
        path: str = ".",
        *,
        ignore_conventions: bool = False,
        no_docblocks: bool = False,
        no_config: bool = False,
    ) -> CommandResult:
        """``create controller <controllerName> <moduleName> [<path>]``"""

        def run() -> CommandResult:
            request = ScaffoldRequest(
                path=path,
                module_name=module_name,
                controller_name=controller_name,
                ignore_conventions=ignore_conventions,
                no_docblocks=no_docblocks,
                no_config=no_config,
            )
            names = self._resolve(request, require_module=True)
            result = self._generator(names, no_docblocks).create_controller(
                register=not no_config
            )
            self._report(names, result)
            return CommandResult(
                f"The controller {names.controller_name} has been created "
                f"in module {names.module_name}.",
                details=[relative_to(p, names.project_path) for p in result.written],
            )

        return self._run(run)

    def action(
        self,
        action_name: str,
        controller_name: str,
        module_name: str,
        path: str = ".",
        *,
        ignore_conventions: bool = False,
        no_docblocks: bool = False,
    ) -> CommandResult:
        """``create action <actionName> <controllerName> <moduleName> [<path>]``"""

        def run() -> CommandResult:
            request = ScaffoldRequest(
                path=path,
                module_name=module_name,
                controller_name=controller_name,
                action_name=action_name,
                ignore_conventions=ignore_conventions,
                no_docblocks=no_docblocks,
            )
            names = self._resolve(request, require_module=True)
            result = self._generator(names, no_docblocks).create_action()
            self._report(names, result)
            return CommandResult(
                f"Created action {names.action_name} in controller "
                f"{names.controller_name} of module {names.module_name}.",
                details=[relative_to(p, names.project_path) for p in result.written],
            )

        return self._run(run)

    def routing(
        self,
        module_name: str,
        path: str = ".",
        *,
        single_route: bool = False,
        ignore_conventions: bool = False,
        no_docblocks: bool = False,
    ) -> CommandResult:
        """``create routing <moduleName> [<path>]``"""

        def run() -> CommandResult:
            request = ScaffoldRequest(
                path=path,
                module_name=module_name,
                ignore_conventions=ignore_conventions,
                no_docblocks=no_docblocks,
                single_route=single_route,
            )
            names = self._resolve(request, require_module=True)
            result = self._generator(names, no_docblocks).create_routing(single_route)
            self._report(names, result)
            if not any(update.changed for update in result.config_updates):
                return CommandResult(
                    f"The routing of module {names.module_name} is already up to date."
                )
            return CommandResult(
                f"The routing of module {names.module_name} has been written to "
                f"{relative_to(names.module_config_path, names.project_path)}."
            )

        return self._run(run)

    def list_modules(self, path: str = ".") -> CommandResult:
        """``modules [list] [<path>]``"""

        def run() -> CommandResult:
            names = self._resolve(ScaffoldRequest(path=path))
            document = load_config(names.application_config_path)
            modules = document.get("modules", [])
            if not isinstance(modules, list):
                modules = list(modules.values()) if isinstance(modules, dict) else []
            modules = [str(module) for module in modules]
            if not modules:
                return CommandResult("No modules installed.")
            print_summary_table(
                {str(i): module for i, module in enumerate(modules, start=1)},
                title="Modules installed",
            )
            return CommandResult(f"{len(modules)} module(s) installed.", details=modules)

        return self._run(run)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run(self, command: Callable[[], CommandResult]) -> CommandResult:
        try:
            result = command()
        except ScaffoldError as exc:
            print_error(exc.message)
            return CommandResult(exc.message, error_level=exc.error_level)
        print_success(result.message)
        return result

    def _resolve(self, request: ScaffoldRequest, require_module: bool = False) -> ResolvedNames:
        """Resolve *request* and check the project (and module) it targets."""
        names = resolve(
            request,
            source_extension=self.config.generator.source_extension,
            view_extension=self.config.generator.view_extension,
        )
        root = names.project_path
        if not (root / "module").is_dir() or not names.application_config_path.is_file():
            raise ValidationError(f"The path {root} doesn't contain a ZF2 application.")
        if require_module and not names.module_path.is_dir():
            raise ValidationError(f"The module {names.module_name} does not exist.")
        return names

    def _generator(self, names: ResolvedNames, no_docblocks: bool) -> ModuleGenerator:
        generator_config = self.config.generator
        return ModuleGenerator(
            names,
            self.config.render_policy(no_docblocks),
            source_extension=generator_config.source_extension,
            view_extension=generator_config.view_extension,
            backup_suffix=generator_config.backup_suffix,
        )

    @staticmethod
    def _report(names: ResolvedNames, result: GenerationResult) -> None:
        for written in result.written:
            print_info(f"written {relative_to(written, names.project_path)}")
        for skipped in result.skipped:
            print_warning(f"kept existing {relative_to(skipped, names.project_path)}")
        for update in result.config_updates:
            target = relative_to(update.path, names.project_path)
            if not update.changed:
                print_info(f"{target} already up to date")
            elif update.backup_path is not None:
                print_info(
                    f"updated {target} (backup in "
                    f"{relative_to(update.backup_path, names.project_path)})"
                )
            else:
                print_info(f"updated {target}")
