"""Transform a proto parse tree into the typed models.

Each builder walks the direct children of one node and dispatches on their
rule label. Labels a builder does not handle (options, for instance) are
ignored.
"""

from __future__ import annotations

from typing import List, Optional

from protoc_json import config
from protoc_json.models import EnumDef, EnumValue, Field, Message, Method, Proto, Service
from protoc_json.utils.logging import get_logger

from .proto_tree import ParseNode, Rule

logger = get_logger(__name__)


def transform_proto(tree: ParseNode) -> Proto:
    """Build a Proto from a proto_file parse tree."""
    syntax = config.DEFAULT_SYNTAX
    package: Optional[str] = None
    imports: List[str] = []
    messages: List[Message] = []
    enums: List[EnumDef] = []
    services: List[Service] = []

    for node in tree.inner():
        if node.rule is Rule.SYNTAX:
            syntax = _unquote(node.children[0].text)
        elif node.rule is Rule.PACKAGE:
            package = _dotted_name(node.children[0])
        elif node.rule is Rule.IMPORT:
            imports.append(_unquote(node.children[0].text))
        elif node.rule is Rule.MESSAGE_DEF:
            messages.append(_transform_message(node))
        elif node.rule is Rule.ENUM_DEF:
            enums.append(_transform_enum(node))
        elif node.rule is Rule.SERVICE_DEF:
            services.append(_transform_service(node))

    return Proto(
        syntax=syntax,
        package=package,
        imports=tuple(imports),
        messages=tuple(messages),
        enums=tuple(enums),
        services=tuple(services),
    )


def _transform_message(node: ParseNode) -> Message:
    """Transform a message_def, recursing into nested definitions."""
    name = ""
    fields: List[Field] = []
    nested_messages: List[Message] = []
    nested_enums: List[EnumDef] = []

    for child in node.inner():
        if child.rule is Rule.IDENT:
            name = child.text
        elif child.rule is Rule.FIELD:
            fields.append(_transform_field(child))
        elif child.rule is Rule.MESSAGE_DEF:
            nested_messages.append(_transform_message(child))
        elif child.rule is Rule.ENUM_DEF:
            nested_enums.append(_transform_enum(child))

    return Message(
        name=name,
        fields=tuple(fields),
        nested_messages=tuple(nested_messages),
        nested_enums=tuple(nested_enums),
    )


def _transform_field(node: ParseNode) -> Field:
    """Transform a field node.

    The field rule, when present, is always the first child, so the type is
    told apart from the modifier by position and label alone.
    """
    children = iter(node.children)
    first = next(children)
    repeated = False
    if first.rule is Rule.FIELD_RULE:
        repeated = first.text == "repeated"
        type_node = next(children)
    else:
        type_node = first
    name_node = next(children)
    tag_node = next(children)

    return Field(
        name=name_node.text,
        type_name=_dotted_name(type_node),
        tag=_to_int32(tag_node),
        repeated=repeated,
    )


def _transform_enum(node: ParseNode) -> EnumDef:
    name = ""
    values: List[EnumValue] = []

    for child in node.inner():
        if child.rule is Rule.IDENT:
            name = child.text
        elif child.rule is Rule.ENUM_VALUE:
            value_name, number = child.children[0], child.children[1]
            values.append(EnumValue(name=value_name.text, number=_to_int32(number)))

    return EnumDef(name=name, values=tuple(values))


def _transform_service(node: ParseNode) -> Service:
    name = ""
    methods: List[Method] = []

    for child in node.inner():
        if child.rule is Rule.IDENT:
            name = child.text
        elif child.rule is Rule.RPC_DEF:
            rpc_name, input_type, output_type = child.children[:3]
            methods.append(
                Method(
                    name=rpc_name.text,
                    input_type=_message_type_name(input_type),
                    output_type=_message_type_name(output_type),
                )
            )

    return Service(name=name, methods=tuple(methods))


def _message_type_name(node: ParseNode) -> str:
    """Return the type identifier inside a message_type, without ``stream``."""
    type_node = node.first(Rule.FULL_IDENT)
    return _dotted_name(type_node) if type_node is not None else ""


def _dotted_name(node: ParseNode) -> str:
    """Join full_ident segments with dots, dropping anything skipped between them."""
    if node.rule is Rule.FULL_IDENT:
        return ".".join(part.text for part in node.children)
    if node.children:
        return _dotted_name(node.children[0])
    return node.text


def _to_int32(node: ParseNode) -> int:
    """Convert a number lexeme, falling back to 0 when it overflows int32."""
    try:
        value = int(node.text)
    except ValueError:
        value = None
    if value is None or not config.INT32_MIN <= value <= config.INT32_MAX:
        logger.warning(
            "number_out_of_range",
            lexeme=node.text,
            line=node.line,
            col=node.col,
            fallback=config.NUMBER_FALLBACK,
        )
        return config.NUMBER_FALLBACK
    return value


def _unquote(literal: str) -> str:
    return literal.strip('"')
