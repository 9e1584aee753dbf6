"""Character-level scanning helpers for the PHP grammar subset we read.

The scanner only knows enough PHP to find structural boundaries: it can skip
whitespace, comments, quoted strings and heredocs, read names, and jump over
a balanced ``{}``/``()``/``[]`` group.  Everything it skips is left for the
caller to slice out of the original text untouched.
"""

from __future__ import annotations

import re

from zfscaffold.errors import ParseError

_NAME = re.compile(r"\\?[A-Za-z_\x80-\uffff][A-Za-z0-9_\x80-\uffff]*(?:\\[A-Za-z_\x80-\uffff][A-Za-z0-9_\x80-\uffff]*)*")
_HEREDOC_START = re.compile(r"<<<[ \t]*(['\"]?)([A-Za-z_][A-Za-z0-9_]*)\1\r?\n")

_PAIRS = {"{": "}", "(": ")", "[": "]"}


class Scanner:
    """A cursor over PHP source text."""

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    # -- Inspection --------------------------------------------------------

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, length: int = 1) -> str:
        return self.text[self.pos : self.pos + length]

    def startswith(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.pos)

    def at_comment(self) -> bool:
        return (
            self.startswith("/*")
            or self.startswith("//")
            or (self.startswith("#") and not self.startswith("#["))
        )

    def at_doc_comment(self) -> bool:
        return self.startswith("/**") and not self.startswith("/**/")

    def line_number(self, pos: int | None = None) -> int:
        return self.text.count("\n", 0, self.pos if pos is None else pos) + 1

    def error(self, message: str) -> ParseError:
        return ParseError(f"{message} (line {self.line_number()})")

    # -- Skipping ----------------------------------------------------------

    def skip_whitespace(self) -> None:
        while not self.at_end and self.text[self.pos].isspace():
            self.pos += 1

    def read_comment(self) -> str:
        """Consume the comment at the cursor and return its text."""
        start = self.pos
        if self.startswith("/*"):
            end = self.text.find("*/", self.pos + 2)
            if end == -1:
                raise self.error("Unterminated comment")
            self.pos = end + 2
        else:
            end = self.text.find("\n", self.pos)
            self.pos = len(self.text) if end == -1 else end
        return self.text[start : self.pos]

    def skip_trivia(self) -> None:
        """Skip whitespace and comments."""
        while True:
            self.skip_whitespace()
            if self.at_comment():
                self.read_comment()
            else:
                return

    def skip_string(self) -> None:
        """Skip a single- or double-quoted string starting at the cursor."""
        quote = self.text[self.pos]
        index = self.pos + 1
        while index < len(self.text):
            char = self.text[index]
            if char == "\\":
                index += 2
                continue
            if char == quote:
                self.pos = index + 1
                return
            index += 1
        raise self.error("Unterminated string literal")

    def skip_heredoc(self) -> bool:
        """Skip a heredoc/nowdoc if one starts at the cursor."""
        match = _HEREDOC_START.match(self.text, self.pos)
        if not match:
            return False
        closing = re.compile(r"^[ \t]*" + re.escape(match.group(2)) + r"\b", re.M)
        end = closing.search(self.text, match.end())
        if not end:
            raise self.error(f"Unterminated heredoc {match.group(2)}")
        self.pos = end.end()
        return True

    def skip_token(self) -> None:
        """Advance past one string, comment, heredoc or single character."""
        char = self.text[self.pos]
        if char in ("'", '"', "`"):
            self.skip_string()
        elif self.at_comment():
            self.read_comment()
        elif not (char == "<" and self.skip_heredoc()):
            self.pos += 1

    def skip_balanced(self) -> None:
        """Skip a bracketed group; the cursor must be on the opening bracket."""
        opening = self.text[self.pos]
        if opening not in _PAIRS:
            raise self.error(f"Expected a bracket, found {opening!r}")
        stack = [_PAIRS[opening]]
        self.pos += 1
        while stack:
            if self.at_end:
                raise self.error(f"Unbalanced {opening!r}")
            char = self.text[self.pos]
            if char in _PAIRS:
                stack.append(_PAIRS[char])
                self.pos += 1
            elif char in ")]}":
                if char != stack.pop():
                    raise self.error(f"Mismatched {char!r}")
                self.pos += 1
            else:
                self.skip_token()

    def skip_to(self, terminators: str) -> None:
        """Advance to the next top-level character in *terminators*."""
        while not self.at_end:
            char = self.text[self.pos]
            if char in terminators:
                return
            if char in _PAIRS:
                self.skip_balanced()
            else:
                self.skip_token()

    # -- Reading -----------------------------------------------------------

    def read_name(self) -> str | None:
        """Read a (possibly namespaced) PHP name, or return ``None``."""
        match = _NAME.match(self.text, self.pos)
        if not match:
            return None
        self.pos = match.end()
        return match.group(0)

    def expect(self, literal: str) -> None:
        if not self.startswith(literal):
            raise self.error(f"Expected {literal!r}")
        self.pos += len(literal)
