"""Render :class:`FileModel` instances and configuration documents to PHP.

Synthesis is a pure function of its inputs: nothing here reads or writes the
filesystem.  Members and doc comments that carry a ``source`` (because they
were parsed from an existing file) are emitted verbatim; everything else is
rendered according to the :class:`RenderPolicy`.
"""

from __future__ import annotations

from typing import Any

from zfscaffold.codegen.models import (
    ClassModel,
    DocComment,
    DocTag,
    FileModel,
    MethodModel,
    OpaqueMember,
    RenderPolicy,
)
from zfscaffold.codegen.php_values import export_value
from zfscaffold.codegen.templates import TemplateRenderer

GENERATOR_NAME = "zfscaffold"


class Synthesizer:
    """Turns the structural source model into PHP text."""

    def __init__(
        self,
        policy: RenderPolicy | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.policy = policy or RenderPolicy()
        self.renderer = renderer or TemplateRenderer()

    # -- Doc comments ------------------------------------------------------

    def see_tag(self) -> list[DocTag]:
        """The ``@see`` tag appended to file-level doc comments, if configured."""
        if not self.policy.see_url:
            return []
        return [DocTag("see", self.policy.see_url)]

    def render_doc_comment(self, doc: DocComment | None, level: int = 0) -> str:
        """Render *doc* indented to *level*; empty when there is nothing to emit."""
        if doc is None:
            return ""
        if doc.source is not None:
            return doc.source
        if not self.policy.doc_blocks:
            return ""

        lines: list[str] = []
        if doc.summary:
            lines.extend(doc.summary.splitlines())
        if doc.description:
            if lines:
                lines.append("")
            lines.extend(doc.description.splitlines())
        if doc.tags:
            if lines:
                lines.append("")
            lines.extend(f"@{tag.name} {tag.description}".rstrip() for tag in doc.tags)

        prefix = self.policy.indent * level
        out = [f"{prefix}/**"]
        out.extend(f"{prefix} * {line}" if line else f"{prefix} *" for line in lines)
        out.append(f"{prefix} */")
        return "\n".join(out)

    # -- Class members -----------------------------------------------------

    def render_method(self, method: MethodModel) -> str:
        if method.source is not None:
            return method.source

        signature = method.visibility
        if method.static:
            signature += " static"
        signature += f" function {method.name}({method.parameters})"
        body = method.body.strip("\n")
        context = {
            "doc": self.render_doc_comment(method.doc_comment, level=1),
            "indent": self.policy.indent,
            "signature": signature,
            "body_lines": body.split("\n") if body else [],
        }
        return self.renderer.render("method.php.j2", context).rstrip("\n")

    def render_member(self, member: MethodModel | OpaqueMember) -> str:
        if isinstance(member, OpaqueMember):
            return member.source
        return self.render_method(member)

    @staticmethod
    def class_header(class_model: ClassModel) -> str:
        parts = [*class_model.modifiers, "class", class_model.name]
        if class_model.parent:
            parts += ["extends", class_model.parent]
        header = " ".join(parts)
        if class_model.interfaces:
            header += " implements " + ", ".join(class_model.interfaces)
        return header

    # -- Files -------------------------------------------------------------

    @staticmethod
    def render_statements(file_model: FileModel, before: str) -> str:
        """Opaque top-level text preceding the *before* section, one per line."""
        return "".join(
            statement.source + ("\n\n" if statement.blank_line_after else "\n")
            for statement in file_model.statements
            if statement.before == before
        )

    def synthesize_class_file(self, file_model: FileModel) -> str:
        """Render a file containing exactly one class.

        The output uses ``file_model.newline`` for every line break.
        """
        class_model = file_model.class_model
        if class_model is None:
            raise ValueError("synthesize_class_file() needs a FileModel with a class")
        trailing = self.render_statements(file_model, "end")
        context = {
            "before_namespace": self.render_statements(file_model, "namespace"),
            "file_doc": self.render_doc_comment(file_model.doc_comment),
            "namespace": file_model.namespace,
            "before_imports": self.render_statements(file_model, "imports"),
            "imports": file_model.imports,
            "before_class": self.render_statements(file_model, "class"),
            "class_doc": self.render_doc_comment(class_model.doc_comment),
            "class_header": self.class_header(class_model),
            "members": [self.render_member(m) for m in class_model.members],
            "after_class": trailing.rstrip("\n") + "\n" if trailing else "",
        }
        text = self.renderer.render("class_file.php.j2", context)
        if file_model.newline != "\n":
            text = text.replace("\n", file_model.newline)
        return text

    def synthesize_raw_file(self, file_model: FileModel) -> str:
        """Render a non-class PHP file from its raw body."""
        context = {
            "file_doc": self.render_doc_comment(file_model.doc_comment),
            "body": (file_model.body or "").strip("\n"),
        }
        return self.renderer.render("raw_file.php.j2", context)

    def synthesize_config_file(
        self, document: dict[str, Any], header: DocComment | None = None
    ) -> str:
        """Render a configuration document as ``return <array>;``."""
        if header is None:
            header = DocComment(
                summary=f"Configuration file generated by {GENERATOR_NAME}",
                tags=self.see_tag(),
            )
        context = {
            "file_doc": self.render_doc_comment(header),
            "value": export_value(document, self.policy),
        }
        return self.renderer.render("config_file.php.j2", context)

    def synthesize_view_script(
        self, action_name: str, controller_name: str, module_name: str
    ) -> str:
        """Render the placeholder view script of an action."""
        header = DocComment(
            summary=f"View script generated by {GENERATOR_NAME}",
            tags=[DocTag("package", module_name)],
        )
        context = {
            "file_doc": self.render_doc_comment(header),
            "action_name": action_name,
            "controller_name": controller_name,
            "module_name": module_name,
        }
        return self.renderer.render("view_script.phtml.j2", context)


def synthesize_class_file(file_model: FileModel, policy: RenderPolicy | None = None) -> str:
    return Synthesizer(policy).synthesize_class_file(file_model)


def synthesize_config_file(
    document: dict[str, Any],
    policy: RenderPolicy | None = None,
    header: DocComment | None = None,
) -> str:
    return Synthesizer(policy).synthesize_config_file(document, header)
