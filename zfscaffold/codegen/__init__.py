"""zfscaffold code generation -- PHP source synthesis and merging.

Quick usage::

    from zfscaffold.codegen import ModuleGenerator, RenderPolicy
    from zfscaffold.naming import ScaffoldRequest, resolve

    names = resolve(ScaffoldRequest(path="/srv/app", module_name="blog"))
    ModuleGenerator(names, RenderPolicy()).create_module()
"""

from zfscaffold.codegen.config_document import (
    ConfigUpdate,
    add_controller_entry,
    add_module_entry,
    add_routes,
    load_config,
    update_config,
    write_config,
)
from zfscaffold.codegen.generator import GenerationResult, ModuleGenerator
from zfscaffold.codegen.merger import merge_method
from zfscaffold.codegen.models import (
    ClassModel,
    DocComment,
    DocTag,
    FileModel,
    MethodModel,
    OpaqueMember,
    PhpExpression,
    RenderPolicy,
)
from zfscaffold.codegen.parser import parse_class_file
from zfscaffold.codegen.synthesizer import (
    Synthesizer,
    synthesize_class_file,
    synthesize_config_file,
)
from zfscaffold.codegen.templates import TemplateRenderer

__all__ = [
    "ClassModel",
    "ConfigUpdate",
    "DocComment",
    "DocTag",
    "FileModel",
    "GenerationResult",
    "MethodModel",
    "ModuleGenerator",
    "OpaqueMember",
    "PhpExpression",
    "RenderPolicy",
    "Synthesizer",
    "TemplateRenderer",
    "add_controller_entry",
    "add_module_entry",
    "add_routes",
    "load_config",
    "merge_method",
    "parse_class_file",
    "synthesize_class_file",
    "synthesize_config_file",
    "update_config",
    "write_config",
]
