"""Typed, immutable models of a parsed .proto document.

Attribute declaration order is the JSON key order used by the serializer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from protoc_json import config


@dataclass(frozen=True)
class Field:
    """A field declaration: [field_rule] type name = tag;"""

    name: str
    type_name: str
    tag: int = 0
    repeated: bool = False


@dataclass(frozen=True)
class EnumValue:
    name: str
    number: int = 0


@dataclass(frozen=True)
class EnumDef:
    name: str
    values: Tuple[EnumValue, ...] = ()


@dataclass(frozen=True)
class Message:
    """A message definition, possibly containing nested messages and enums."""

    name: str
    fields: Tuple[Field, ...] = ()
    nested_messages: Tuple[Message, ...] = ()
    nested_enums: Tuple[EnumDef, ...] = ()


@dataclass(frozen=True)
class Method:
    """An rpc; stream markers are not kept on the type names."""

    name: str
    input_type: str
    output_type: str


@dataclass(frozen=True)
class Service:
    name: str
    methods: Tuple[Method, ...] = ()


@dataclass(frozen=True)
class Proto:
    """Top-level parsed representation of a .proto file."""

    syntax: str = config.DEFAULT_SYNTAX
    package: Optional[str] = None
    imports: Tuple[str, ...] = ()
    messages: Tuple[Message, ...] = ()
    enums: Tuple[EnumDef, ...] = ()
    services: Tuple[Service, ...] = ()
