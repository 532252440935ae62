"""Parse tree node definitions for protobuf (.proto) files.

The tree is a generic, rule-labeled view over the source text. Every node
records the span it matched so the typed models can be built from it and
errors can point back into the input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional


class Rule(Enum):
    PROTO_FILE = "proto_file"
    SYNTAX = "syntax"
    PACKAGE = "package"
    IMPORT = "import"
    OPTION = "option"
    MESSAGE_DEF = "message_def"
    FIELD = "field"
    FIELD_RULE = "field_rule"
    TYPE_NAME = "type_name"
    PRIMITIVE_TYPE = "primitive_type"
    FIELD_OPTIONS = "field_options"
    ENUM_DEF = "enum_def"
    ENUM_VALUE = "enum_value"
    SERVICE_DEF = "service_def"
    RPC_DEF = "rpc_def"
    MESSAGE_TYPE = "message_type"
    STREAM = "stream"
    IDENT = "ident"
    FULL_IDENT = "full_ident"
    NUMBER = "number"
    STRING_LIT = "string_lit"
    CONSTANT = "constant"


@dataclass
class ParseNode:
    """A rule match: ``text`` is ``source[start:end]``."""

    rule: Rule
    text: str
    start: int
    end: int
    line: int
    col: int
    children: List[ParseNode] = field(default_factory=list)

    def inner(self) -> Iterator[ParseNode]:
        return iter(self.children)

    def first(self, rule: Rule) -> Optional[ParseNode]:
        """Return the first direct child labeled ``rule``."""
        for child in self.children:
            if child.rule is rule:
                return child
        return None
