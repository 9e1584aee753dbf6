"""In-memory structural model of a generated PHP source file.

A :class:`FileModel` holds either one class (namespace, imports, doc comment
and an ordered list of members) or a raw body for non-class files such as
view scripts.  Members parsed from an existing file keep their exact source
text in ``source`` and are re-emitted verbatim; members built in memory are
rendered by the synthesizer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

VISIBILITIES = ("public", "protected", "private")


class RenderPolicy(BaseModel):
    """Formatting policy threaded through every synthesizer call."""

    model_config = ConfigDict(frozen=True)

    doc_blocks: bool = Field(default=True, description="Emit /** */ comment blocks")
    short_arrays: bool = Field(default=False, description="Use [] instead of array()")
    indent: str = Field(default="    ")
    see_url: str = Field(default="https://github.com/zendframework/ZFTool")


@dataclass(frozen=True)
class PhpExpression:
    """A PHP expression kept as opaque code (``__DIR__ . '/../view'``)."""

    code: str

    def __str__(self) -> str:
        return self.code


@dataclass
class DocTag:
    name: str
    description: str = ""


@dataclass
class DocComment:
    """A ``/** ... */`` block.

    When ``source`` is set the block came from an existing file and is
    emitted exactly as it was written.
    """

    summary: str = ""
    description: str = ""
    tags: list[DocTag] = field(default_factory=list)
    source: str | None = None

    @classmethod
    def from_source(cls, text: str) -> "DocComment":
        """Recover summary, description and tags from a doc comment."""
        inner = text.strip()
        inner = re.sub(r"^/\*\*", "", inner)
        inner = re.sub(r"\*/$", "", inner)
        lines = [re.sub(r"^\s*\* ?", "", line).rstrip() for line in inner.splitlines()]

        paragraphs: list[list[str]] = [[]]
        tags: list[DocTag] = []
        for line in lines:
            stripped = line.strip()
            if stripped.startswith("@"):
                name, _, description = stripped[1:].partition(" ")
                tags.append(DocTag(name=name, description=description.strip()))
            elif tags and stripped:
                tags[-1].description = f"{tags[-1].description} {stripped}".strip()
            elif not stripped:
                if paragraphs[-1]:
                    paragraphs.append([])
            else:
                paragraphs[-1].append(stripped)

        paragraphs = [p for p in paragraphs if p]
        summary = " ".join(paragraphs[0]) if paragraphs else ""
        description = "\n\n".join(" ".join(p) for p in paragraphs[1:])
        return cls(summary=summary, description=description, tags=tags, source=text)


@dataclass
class MethodModel:
    name: str
    visibility: str = "public"
    body: str = ""
    parameters: str = ""
    static: bool = False
    doc_comment: DocComment | None = None
    source: str | None = None


@dataclass
class OpaqueMember:
    """A non-method class member (property, constant, trait use) kept verbatim."""

    source: str


@dataclass
class OpaqueStatement:
    """Top-level text outside the class structure (a plain comment, ``declare``).

    ``before`` names the section it precedes: ``"namespace"``, ``"imports"``
    or ``"class"``.
    """

    source: str
    before: str = "class"
    blank_line_after: bool = False


@dataclass
class ClassModel:
    name: str
    parent: str | None = None
    interfaces: list[str] = field(default_factory=list)
    modifiers: list[str] = field(default_factory=list)
    doc_comment: DocComment | None = None
    members: list[MethodModel | OpaqueMember] = field(default_factory=list)

    @property
    def methods(self) -> list[MethodModel]:
        return [m for m in self.members if isinstance(m, MethodModel)]

    def has_method(self, name: str) -> bool:
        # PHP method names are case-insensitive.
        wanted = name.lower()
        return any(m.name.lower() == wanted for m in self.methods)

    def add_method(self, method: MethodModel) -> None:
        self.members.append(method)


@dataclass
class FileModel:
    namespace: str | None = None
    imports: list[str] = field(default_factory=list)
    doc_comment: DocComment | None = None
    class_model: ClassModel | None = None
    body: str | None = None
    statements: list[OpaqueStatement] = field(default_factory=list)
    newline: str = "\n"

    def has_import(self, name: str) -> bool:
        wanted = name.lstrip("\\").lower()
        return any(i.lstrip("\\").lower() == wanted for i in self.imports)

    def add_import(self, name: str) -> bool:
        """Append *name* to the imports unless present. Returns whether it was added."""
        if self.has_import(name):
            return False
        self.imports.append(name)
        return True
