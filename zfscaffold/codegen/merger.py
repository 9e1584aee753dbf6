"""Add a method to a previously generated class file.

The existing file is parsed into a :class:`FileModel`; every member keeps
its original text, the new method is appended last, and the file is
re-rendered.  Members that were already there come out byte-identical.
"""

from __future__ import annotations

from collections.abc import Iterable

from zfscaffold.codegen.models import MethodModel, RenderPolicy
from zfscaffold.codegen.parser import parse_class_file
from zfscaffold.codegen.synthesizer import Synthesizer
from zfscaffold.errors import GenerationConflictError, ParseError


def merge_method(
    existing_text: str,
    class_name: str,
    new_method: MethodModel,
    *,
    imports: Iterable[str] = (),
    parent: str | None = None,
    namespace: str | None = None,
    policy: RenderPolicy | None = None,
) -> str:
    """Return *existing_text* with *new_method* appended to *class_name*.

    Args:
        existing_text: Current contents of the class file.
        class_name: Unqualified name of the class the file must declare.
        new_method: The method to add.
        imports: Class names the new method relies on; added to the ``use``
            statements when missing.
        parent: Base class to set when the class does not extend anything.
        namespace: When given, the file must declare this namespace.
        policy: Formatting policy for the newly rendered parts.

    Raises:
        ParseError: If the file is not a single recognisable class named
            *class_name* (in *namespace*, when given).
        GenerationConflictError: If a method with the same name exists.
    """
    model = parse_class_file(existing_text, expected_class=class_name)
    if namespace is not None and (model.namespace or "").lower() != namespace.lower():
        raise ParseError(
            f'Expected namespace "{namespace}" but found "{model.namespace or ""}"'
        )

    class_model = model.class_model
    if class_model.has_method(new_method.name):
        raise GenerationConflictError(
            f'The method "{new_method.name}" already exists in class "{class_model.name}".'
        )

    for name in imports:
        model.add_import(name)
    if parent and not class_model.parent:
        class_model.parent = parent
    class_model.add_method(new_method)

    return Synthesizer(policy).synthesize_class_file(model)
