"""Exceptions raised while turning proto source into a JSON document."""

from __future__ import annotations

from typing import List, Optional


class ProtoError(Exception):
    """Base class for every failure a parse call can report."""


class ProtoSyntaxError(ProtoError):
    """Raised when the source does not match the proto grammar."""

    def __init__(
        self,
        message: str,
        *,
        line: int,
        col: int,
        offset: int = 0,
        expected: Optional[List[str]] = None,
        context: Optional[str] = None,
    ):
        self.line = line
        self.col = col
        self.offset = offset
        self.expected = list(expected or [])
        self.context = context
        detail = message
        if context:
            detail = f"{detail} in {context}"
        super().__init__(f"Line {line}:{col}: {detail}")


class ProtoIOError(ProtoError):
    """Raised when a .proto file cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Cannot read {path}: {reason}")


class ProtoSerializationError(ProtoError):
    """Raised when the parsed document cannot be converted to JSON."""


class ProtoNestingError(ProtoError):
    """Raised when definitions nest deeper than the interpreter stack allows."""
