"""Structural parser for PHP class files produced by this engine.

Only the file-level structure is understood: the opening tag, a leading doc
comment, ``namespace``, ``use`` statements, one class declaration and the
boundaries of each member inside the class body.  Plain comments and
``declare`` statements around the class are carried as opaque text.  Member
text is never interpreted; it is sliced out of the original file so it can be
written back byte for byte.
"""

from __future__ import annotations

from zfscaffold.codegen.models import (
    VISIBILITIES,
    ClassModel,
    DocComment,
    FileModel,
    MethodModel,
    OpaqueMember,
    OpaqueStatement,
)
from zfscaffold.codegen.scanner import Scanner
from zfscaffold.errors import ParseError

CLASS_MODIFIERS = ("abstract", "final", "readonly")
MEMBER_MODIFIERS = (*VISIBILITIES, "static", "abstract", "final", "var", "readonly")


def _split_imports(statement: str) -> list[str]:
    statement = " ".join(statement.split())
    if "{" in statement:
        return [statement]
    return [part.strip() for part in statement.split(",") if part.strip()]


def _read_keyword(scanner: Scanner) -> str | None:
    start = scanner.pos
    name = scanner.read_name()
    if name is None or "\\" in name:
        scanner.pos = start
        return None
    return name


def _member_start(scanner: Scanner, region_start: int) -> int:
    line_start = scanner.text.rfind("\n", 0, scanner.pos) + 1
    return line_start if line_start >= region_start else scanner.pos


def _take_line_comment(scanner: Scanner) -> None:
    """Move past a comment that closes the line the cursor is on."""
    end = scanner.text.find("\n", scanner.pos)
    if end == -1:
        end = len(scanner.text)
    rest = scanner.text[scanner.pos : end].lstrip(" \t")
    comment = Scanner(scanner.text, end - len(rest))
    if not rest or not comment.at_comment() or comment.at_doc_comment():
        return
    comment.read_comment()
    if comment.pos <= end and not scanner.text[comment.pos : end].strip():
        scanner.pos = comment.pos


def _blank_line_follows(scanner: Scanner) -> bool:
    rest = scanner.text[scanner.pos :]
    stripped = rest.lstrip()
    return bool(stripped) and rest[: len(rest) - len(stripped)].count("\n") >= 2


def _parse_class_header(scanner: Scanner, class_model: ClassModel) -> None:
    scanner.skip_trivia()
    name = _read_keyword(scanner)
    if name is None:
        raise scanner.error("Expected a class name")
    class_model.name = name

    scanner.skip_trivia()
    start = scanner.pos
    if (_read_keyword(scanner) or "").lower() == "extends":
        scanner.skip_trivia()
        class_model.parent = scanner.read_name()
        if class_model.parent is None:
            raise scanner.error("Expected a parent class name")
        scanner.skip_trivia()
    else:
        scanner.pos = start

    start = scanner.pos
    if (_read_keyword(scanner) or "").lower() == "implements":
        while True:
            scanner.skip_trivia()
            interface = scanner.read_name()
            if interface is None:
                raise scanner.error("Expected an interface name")
            class_model.interfaces.append(interface)
            scanner.skip_trivia()
            if scanner.peek() != ",":
                break
            scanner.pos += 1
    else:
        scanner.pos = start

    scanner.skip_trivia()
    if scanner.peek() != "{":
        raise scanner.error(f"Expected '{{' after class {class_model.name}")


def _parse_member(scanner: Scanner, start: int, doc: str | None) -> MethodModel | OpaqueMember:
    modifiers: list[str] = []
    while True:
        scanner.skip_trivia()
        keyword = _read_keyword(scanner)
        if keyword is None:
            if not modifiers:
                raise scanner.error("Expected a class member")
            # ``public $x`` / ``private ?Foo $x``
            lowered = ""
            break
        lowered = keyword.lower()
        if lowered in MEMBER_MODIFIERS:
            modifiers.append(lowered)
            continue
        break

    if lowered != "function":
        # Property, constant or trait use: kept as opaque text.
        scanner.skip_to(";{")
        if scanner.at_end:
            raise scanner.error("Unterminated class member")
        if scanner.peek() == "{":
            scanner.skip_balanced()
        else:
            scanner.pos += 1
        _take_line_comment(scanner)
        return OpaqueMember(source=scanner.text[start : scanner.pos])

    scanner.skip_trivia()
    if scanner.peek() == "&":
        scanner.pos += 1
        scanner.skip_trivia()
    name = _read_keyword(scanner)
    if name is None:
        raise scanner.error("Expected a method name")

    scanner.skip_trivia()
    if scanner.peek() != "(":
        raise scanner.error(f"Expected '(' after method {name}")
    params_start = scanner.pos
    scanner.skip_balanced()
    parameters = scanner.text[params_start + 1 : scanner.pos - 1]

    scanner.skip_to(";{")
    if scanner.at_end:
        raise scanner.error(f"Unterminated method {name}")
    body = ""
    if scanner.peek() == "{":
        body_start = scanner.pos
        scanner.skip_balanced()
        body = scanner.text[body_start + 1 : scanner.pos - 1]
    else:
        scanner.pos += 1
    _take_line_comment(scanner)

    visibility = next((m for m in modifiers if m in VISIBILITIES), "public")
    return MethodModel(
        name=name,
        visibility=visibility,
        body=body,
        parameters=parameters,
        static="static" in modifiers,
        doc_comment=DocComment.from_source(doc) if doc else None,
        source=scanner.text[start : scanner.pos],
    )


def _parse_class_body(scanner: Scanner, class_model: ClassModel) -> None:
    scanner.expect("{")
    while True:
        region_start = scanner.pos
        scanner.skip_whitespace()
        if scanner.at_end:
            raise scanner.error(f"Unterminated class {class_model.name}")
        start = _member_start(scanner, region_start)

        doc: str | None = None
        while True:
            scanner.skip_whitespace()
            if scanner.at_doc_comment():
                doc = scanner.read_comment()
            elif scanner.at_comment():
                scanner.read_comment()
                doc = None
            elif scanner.startswith("#["):
                scanner.pos += 1
                scanner.skip_balanced()
            else:
                break

        if scanner.peek() == "}":
            leftover = scanner.text[start : scanner.pos].rstrip()
            if leftover:
                class_model.members.append(OpaqueMember(source=leftover))
            scanner.pos += 1
            return
        class_model.members.append(_parse_member(scanner, start, doc))


def parse_class_file(text: str, expected_class: str | None = None) -> FileModel:
    """Parse *text* into a :class:`FileModel` with a single class.

    Plain comments and ``declare`` statements outside the class are kept as
    :class:`OpaqueStatement` entries in the order they appear.  CRLF files
    are read with ``\\n`` line endings and remember their newline in
    ``FileModel.newline``.

    Args:
        text: Contents of a PHP file.
        expected_class: When given, the class declared in the file must have
            this (unqualified) name.

    Raises:
        ParseError: If the file holds a statement outside the supported
            structure, no class, more than one class, or a class with a
            different name.
    """
    model = FileModel(newline="\r\n" if "\r\n" in text else "\n")
    scanner = Scanner(text.replace("\r\n", "\n"))
    scanner.skip_whitespace()
    if not scanner.startswith("<?php"):
        raise ParseError("Expected the file to start with '<?php'")
    scanner.pos += len("<?php")

    pending_doc: str | None = None
    pending_start = 0
    seen_statement = False

    def take_file_doc() -> None:
        nonlocal pending_doc
        if pending_doc is None:
            return
        if model.doc_comment is not None or seen_statement:
            raise scanner.error("Unexpected doc comment")
        model.doc_comment = DocComment.from_source(pending_doc)
        pending_doc = None

    def add_statement(start: int, before: str) -> None:
        nonlocal pending_doc
        # A doc comment directly above opaque text travels with it.
        if pending_doc is not None:
            start = pending_start
            pending_doc = None
        model.statements.append(
            OpaqueStatement(
                source=scanner.text[start : scanner.pos],
                before=before,
                blank_line_after=_blank_line_follows(scanner),
            )
        )

    while True:
        scanner.skip_whitespace()
        if scanner.at_end:
            raise ParseError("No class declaration found")

        if model.namespace is None and not seen_statement:
            section = "namespace"
        elif not seen_statement:
            section = "imports"
        else:
            section = "class"

        start = scanner.pos
        if scanner.at_doc_comment():
            take_file_doc()
            pending_doc = scanner.read_comment()
            pending_start = start
            continue
        if scanner.at_comment():
            scanner.read_comment()
            add_statement(start, section)
            continue

        keyword = _read_keyword(scanner)
        lowered = (keyword or "").lower()

        if lowered == "declare":
            scanner.skip_trivia()
            if scanner.peek() != "(":
                raise scanner.error("Expected '(' after declare")
            scanner.skip_to(";{")
            if scanner.at_end:
                raise scanner.error("Unterminated declare statement")
            if scanner.peek() == "{":
                scanner.skip_balanced()
            else:
                scanner.pos += 1
            add_statement(start, section)
            continue

        if lowered == "namespace":
            take_file_doc()
            if model.namespace is not None or seen_statement:
                raise scanner.error("Unexpected namespace declaration")
            scanner.skip_trivia()
            model.namespace = scanner.read_name()
            scanner.skip_trivia()
            if model.namespace is None or scanner.peek() != ";":
                raise scanner.error("Only 'namespace Name;' declarations are supported")
            scanner.pos += 1
            continue

        if lowered == "use":
            take_file_doc()
            seen_statement = True
            start = scanner.pos
            scanner.skip_to(";")
            if scanner.at_end:
                raise scanner.error("Unterminated use statement")
            for name in _split_imports(scanner.text[start : scanner.pos]):
                model.add_import(name)
            scanner.pos += 1
            continue

        modifiers: list[str] = []
        while lowered in CLASS_MODIFIERS:
            modifiers.append(lowered)
            scanner.skip_trivia()
            keyword = _read_keyword(scanner)
            lowered = (keyword or "").lower()

        if lowered != "class":
            raise scanner.error(f"Unsupported statement {keyword or scanner.peek()!r}")

        class_model = ClassModel(name="", modifiers=modifiers)
        if pending_doc is not None:
            class_model.doc_comment = DocComment.from_source(pending_doc)
            pending_doc = None
        _parse_class_header(scanner, class_model)
        _parse_class_body(scanner, class_model)
        model.class_model = class_model
        break

    while True:
        scanner.skip_whitespace()
        if not scanner.at_comment():
            break
        start = scanner.pos
        scanner.read_comment()
        add_statement(start, "end")
    if scanner.startswith("?>"):
        scanner.pos += 2
        scanner.skip_whitespace()
    if not scanner.at_end:
        raise scanner.error("Only a single class per file is supported")

    if expected_class is not None and model.class_model.name.lower() != expected_class.lower():
        raise ParseError(
            f'Expected class "{expected_class}" but found "{model.class_model.name}"'
        )
    return model
