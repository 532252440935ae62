"""Recursive descent parser for protobuf (.proto) files.

Consumes a token stream from proto_tokenizer and produces a rule-labeled
parse tree (see proto_tree). Parsing is all-or-nothing: the first mismatch
raises ProtoSyntaxError and no tree is returned.

Grammar::

    proto_file   = [syntax] [package] {import | option}
                   {message_def | enum_def | service_def | option} EOF
    syntax       = "syntax" "=" string_lit ";"
    package      = "package" full_ident ";"
    import       = "import" ["public" | "weak"] string_lit ";"
    option       = "option" option_name "=" constant ";"
    message_def  = "message" ident "{" {field | message_def | enum_def | option | ";"} "}"
    field        = [field_rule] type_name ident "=" number [field_options] ";"
    enum_def     = "enum" ident "{" {enum_value | option | ";"} "}"
    enum_value   = ident "=" number [field_options] ";"
    service_def  = "service" ident "{" {rpc_def | option | ";"} "}"
    rpc_def      = "rpc" ident "(" message_type ")" "returns" "(" message_type ")"
                   (";" | "{" {option | ";"} "}")
    message_type = ["stream"] full_ident
"""

from __future__ import annotations

from typing import List, Optional

from protoc_json.errors import ProtoSyntaxError

from .proto_tokenizer import (
    FIELD_RULES,
    PROTO_PRIMITIVES,
    ProtoToken,
    ProtoTokenType,
    tokenize_proto,
)
from .proto_tree import ParseNode, Rule

_TOKEN_NAMES = {
    ProtoTokenType.LBRACE: '"{"',
    ProtoTokenType.RBRACE: '"}"',
    ProtoTokenType.LPAREN: '"("',
    ProtoTokenType.RPAREN: '")"',
    ProtoTokenType.LBRACKET: '"["',
    ProtoTokenType.RBRACKET: '"]"',
    ProtoTokenType.SEMICOLON: '";"',
    ProtoTokenType.EQUALS: '"="',
    ProtoTokenType.DOT: '"."',
    ProtoTokenType.COMMA: '","',
    ProtoTokenType.COLON: '":"',
    ProtoTokenType.MINUS: '"-"',
    ProtoTokenType.IDENT: "ident",
    ProtoTokenType.NUMBER: "number",
    ProtoTokenType.STRING_LIT: "string_lit",
    ProtoTokenType.EOF: "end of input",
}


class ProtoTreeParser:
    """Recursive descent parser producing a ParseNode tree."""

    def __init__(self, tokens: List[ProtoToken], text: str):
        self._tokens = tokens
        self._text = text
        self._pos = 0

    # -- public API --

    def parse(self) -> ParseNode:
        """Parse the full token stream into a proto_file node."""
        children: List[ParseNode] = []

        if self._at_keyword("syntax"):
            children.append(self._parse_syntax())
        if self._at_keyword("package"):
            children.append(self._parse_package())

        while self._at_keyword("import") or self._at_keyword("option"):
            if self._at_keyword("import"):
                children.append(self._parse_import())
            else:
                children.append(self._parse_option())

        while not self._at_end():
            if self._at_keyword("message"):
                children.append(self._parse_message())
            elif self._at_keyword("enum"):
                children.append(self._parse_enum())
            elif self._at_keyword("service"):
                children.append(self._parse_service())
            elif self._at_keyword("option"):
                children.append(self._parse_option())
            else:
                raise self._error(
                    ['"message"', '"enum"', '"service"', '"option"', "end of input"],
                    "proto_file",
                )

        return ParseNode(
            rule=Rule.PROTO_FILE,
            text=self._text,
            start=0,
            end=len(self._text),
            line=1,
            col=1,
            children=children,
        )

    # -- file-level statements --

    def _parse_syntax(self) -> ParseNode:
        """Parse: "syntax" "=" string_lit ";" """
        first = self._expect_keyword("syntax", "syntax")
        self._expect(ProtoTokenType.EQUALS, "syntax")
        value = self._parse_leaf(ProtoTokenType.STRING_LIT, Rule.STRING_LIT, "syntax")
        last = self._expect(ProtoTokenType.SEMICOLON, "syntax")
        return self._node(Rule.SYNTAX, first, last, [value])

    def _parse_package(self) -> ParseNode:
        """Parse: "package" full_ident ";" """
        first = self._expect_keyword("package", "package")
        name = self._parse_full_ident("package")
        last = self._expect(ProtoTokenType.SEMICOLON, "package")
        return self._node(Rule.PACKAGE, first, last, [name])

    def _parse_import(self) -> ParseNode:
        """Parse: "import" ["public" | "weak"] string_lit ";" """
        first = self._expect_keyword("import", "import")
        if self._peek().type == ProtoTokenType.IDENT and self._peek().value in ("public", "weak"):
            self._advance()
        path = self._parse_leaf(ProtoTokenType.STRING_LIT, Rule.STRING_LIT, "import")
        last = self._expect(ProtoTokenType.SEMICOLON, "import")
        return self._node(Rule.IMPORT, first, last, [path])

    def _parse_option(self) -> ParseNode:
        """Parse: "option" option_name "=" constant ";" """
        first = self._expect_keyword("option", "option")
        name = self._parse_option_name()
        self._expect(ProtoTokenType.EQUALS, "option")
        value = self._parse_constant()
        last = self._expect(ProtoTokenType.SEMICOLON, "option")
        return self._node(Rule.OPTION, first, last, [name, value])

    def _parse_option_name(self) -> ParseNode:
        """Parse: (ident | "(" full_ident ")") {"." ident}"""
        first = self._peek()
        parts: List[ParseNode] = []
        if first.type == ProtoTokenType.LPAREN:
            self._advance()
            parts.append(self._parse_full_ident("option"))
            self._expect(ProtoTokenType.RPAREN, "option")
        else:
            parts.append(self._parse_ident("option"))
        while self._peek().type == ProtoTokenType.DOT:
            self._advance()
            parts.append(self._parse_ident("option"))
        return self._node(Rule.FULL_IDENT, first, self._previous(), parts)

    def _parse_constant(self) -> ParseNode:
        """Parse: string_lit | ["-"] number ["." number] | full_ident"""
        first = self._peek()
        if first.type == ProtoTokenType.STRING_LIT:
            self._advance()
        elif first.type == ProtoTokenType.IDENT:
            self._parse_full_ident("option")
        else:
            if first.type == ProtoTokenType.MINUS:
                self._advance()
            if self._peek().type == ProtoTokenType.IDENT:
                # -inf, -nan
                self._advance()
            else:
                self._expect(ProtoTokenType.NUMBER, "constant")
                if self._peek().type == ProtoTokenType.DOT:
                    self._advance()
                    self._expect(ProtoTokenType.NUMBER, "constant")
        return self._node(Rule.CONSTANT, first, self._previous())

    # -- message parsing --

    def _parse_message(self) -> ParseNode:
        """Parse: "message" ident "{" {message_element} "}" """
        first = self._expect_keyword("message", "message_def")
        children = [self._parse_ident("message_def")]
        self._expect(ProtoTokenType.LBRACE, "message_def")

        while self._peek().type != ProtoTokenType.RBRACE:
            tok = self._peek()
            if tok.type == ProtoTokenType.SEMICOLON:
                self._advance()
            elif self._at_block("message"):
                children.append(self._parse_message())
            elif self._at_block("enum"):
                children.append(self._parse_enum())
            elif self._at_keyword("option"):
                children.append(self._parse_option())
            elif tok.type == ProtoTokenType.IDENT:
                children.append(self._parse_field())
            else:
                raise self._error(["field", '"message"', '"enum"', '";"', '"}"'], "message_def")

        last = self._expect(ProtoTokenType.RBRACE, "message_def")
        return self._node(Rule.MESSAGE_DEF, first, last, children)

    def _parse_field(self) -> ParseNode:
        """Parse: [field_rule] type_name ident "=" number [field_options] ";"

        A leading repeated/optional/required word is a field rule only when a
        type and a name still follow it; ``repeated x = 1;`` declares a field
        of type ``repeated``.
        """
        first = self._peek()
        children: List[ParseNode] = []

        if (
            first.value in FIELD_RULES
            and self._peek(1).type == ProtoTokenType.IDENT
            and self._peek(2).type != ProtoTokenType.EQUALS
        ):
            children.append(self._parse_leaf(ProtoTokenType.IDENT, Rule.FIELD_RULE, "field"))

        children.append(self._parse_type_name())
        children.append(self._parse_ident("field"))
        self._expect(ProtoTokenType.EQUALS, "field")
        children.append(self._parse_leaf(ProtoTokenType.NUMBER, Rule.NUMBER, "field"))
        if self._peek().type == ProtoTokenType.LBRACKET:
            children.append(self._parse_field_options())
        last = self._expect(ProtoTokenType.SEMICOLON, "field")
        return self._node(Rule.FIELD, first, last, children)

    def _parse_type_name(self) -> ParseNode:
        """Parse: primitive_type | full_ident"""
        first = self._peek()
        if (
            first.type == ProtoTokenType.IDENT
            and first.value in PROTO_PRIMITIVES
            and self._peek(1).type != ProtoTokenType.DOT
        ):
            inner = self._parse_leaf(ProtoTokenType.IDENT, Rule.PRIMITIVE_TYPE, "type_name")
        else:
            inner = self._parse_full_ident("type_name")
        return self._node(Rule.TYPE_NAME, first, self._previous(), [inner])

    def _parse_field_options(self) -> ParseNode:
        """Skip a balanced [ ... ] options block, keeping only its span."""
        first = self._expect(ProtoTokenType.LBRACKET, "field_options")
        depth = 1
        while depth > 0:
            tok = self._peek()
            if tok.type == ProtoTokenType.EOF:
                raise self._error(['"]"'], "field_options")
            if tok.type == ProtoTokenType.LBRACKET:
                depth += 1
            elif tok.type == ProtoTokenType.RBRACKET:
                depth -= 1
            self._advance()
        return self._node(Rule.FIELD_OPTIONS, first, self._previous())

    # -- enum parsing --

    def _parse_enum(self) -> ParseNode:
        """Parse: "enum" ident "{" {enum_value | option | ";"} "}" """
        first = self._expect_keyword("enum", "enum_def")
        children = [self._parse_ident("enum_def")]
        self._expect(ProtoTokenType.LBRACE, "enum_def")

        while self._peek().type != ProtoTokenType.RBRACE:
            tok = self._peek()
            if tok.type == ProtoTokenType.SEMICOLON:
                self._advance()
            elif self._at_keyword("option") and self._peek(1).type != ProtoTokenType.EQUALS:
                children.append(self._parse_option())
            elif tok.type == ProtoTokenType.IDENT:
                children.append(self._parse_enum_value())
            else:
                raise self._error(["enum_value", '";"', '"}"'], "enum_def")

        last = self._expect(ProtoTokenType.RBRACE, "enum_def")
        return self._node(Rule.ENUM_DEF, first, last, children)

    def _parse_enum_value(self) -> ParseNode:
        """Parse: ident "=" number [field_options] ";" """
        first = self._peek()
        children = [self._parse_ident("enum_value")]
        self._expect(ProtoTokenType.EQUALS, "enum_value")
        children.append(self._parse_leaf(ProtoTokenType.NUMBER, Rule.NUMBER, "enum_value"))
        if self._peek().type == ProtoTokenType.LBRACKET:
            children.append(self._parse_field_options())
        last = self._expect(ProtoTokenType.SEMICOLON, "enum_value")
        return self._node(Rule.ENUM_VALUE, first, last, children)

    # -- service parsing --

    def _parse_service(self) -> ParseNode:
        """Parse: "service" ident "{" {rpc_def | option | ";"} "}" """
        first = self._expect_keyword("service", "service_def")
        children = [self._parse_ident("service_def")]
        self._expect(ProtoTokenType.LBRACE, "service_def")

        while self._peek().type != ProtoTokenType.RBRACE:
            if self._peek().type == ProtoTokenType.SEMICOLON:
                self._advance()
            elif self._at_keyword("rpc"):
                children.append(self._parse_rpc())
            elif self._at_keyword("option"):
                children.append(self._parse_option())
            else:
                raise self._error(['"rpc"', '"option"', '";"', '"}"'], "service_def")

        last = self._expect(ProtoTokenType.RBRACE, "service_def")
        return self._node(Rule.SERVICE_DEF, first, last, children)

    def _parse_rpc(self) -> ParseNode:
        """Parse: "rpc" ident "(" message_type ")" "returns" "(" message_type ")" body"""
        first = self._expect_keyword("rpc", "rpc_def")
        children = [self._parse_ident("rpc_def")]
        self._expect(ProtoTokenType.LPAREN, "rpc_def")
        children.append(self._parse_message_type())
        self._expect(ProtoTokenType.RPAREN, "rpc_def")
        self._expect_keyword("returns", "rpc_def")
        self._expect(ProtoTokenType.LPAREN, "rpc_def")
        children.append(self._parse_message_type())
        self._expect(ProtoTokenType.RPAREN, "rpc_def")

        if self._peek().type == ProtoTokenType.LBRACE:
            self._advance()
            while self._peek().type != ProtoTokenType.RBRACE:
                if self._peek().type == ProtoTokenType.SEMICOLON:
                    self._advance()
                elif self._at_keyword("option"):
                    children.append(self._parse_option())
                else:
                    raise self._error(['"option"', '";"', '"}"'], "rpc_def")
            last = self._advance()
        else:
            last = self._expect(ProtoTokenType.SEMICOLON, "rpc_def", ['";"', '"{"'])
        return self._node(Rule.RPC_DEF, first, last, children)

    def _parse_message_type(self) -> ParseNode:
        """Parse: ["stream"] full_ident"""
        first = self._peek()
        children: List[ParseNode] = []
        if first.value == "stream" and self._peek(1).type == ProtoTokenType.IDENT:
            children.append(self._parse_leaf(ProtoTokenType.IDENT, Rule.STREAM, "message_type"))
        children.append(self._parse_full_ident("message_type"))
        return self._node(Rule.MESSAGE_TYPE, first, self._previous(), children)

    # -- identifiers and leaves --

    def _parse_ident(self, context: str) -> ParseNode:
        return self._parse_leaf(ProtoTokenType.IDENT, Rule.IDENT, context)

    def _parse_full_ident(self, context: str) -> ParseNode:
        """Parse: ident {"." ident}"""
        first = self._peek()
        parts = [self._parse_ident(context)]
        while self._peek().type == ProtoTokenType.DOT:
            self._advance()
            parts.append(self._parse_ident(context))
        return self._node(Rule.FULL_IDENT, first, self._previous(), parts)

    def _parse_leaf(self, expected: ProtoTokenType, rule: Rule, context: str) -> ParseNode:
        tok = self._expect(expected, context, [rule.value])
        return self._node(rule, tok, tok)

    def _node(
        self,
        rule: Rule,
        first: ProtoToken,
        last: ProtoToken,
        children: Optional[List[ParseNode]] = None,
    ) -> ParseNode:
        return ParseNode(
            rule=rule,
            text=self._text[first.start:last.end],
            start=first.start,
            end=last.end,
            line=first.line,
            col=first.col,
            children=children or [],
        )

    # -- token helpers --

    def _peek(self, ahead: int = 0) -> ProtoToken:
        return self._tokens[min(self._pos + ahead, len(self._tokens) - 1)]

    def _previous(self) -> ProtoToken:
        return self._tokens[self._pos - 1]

    def _advance(self) -> ProtoToken:
        tok = self._tokens[self._pos]
        if tok.type != ProtoTokenType.EOF:
            self._pos += 1
        return tok

    def _expect(
        self,
        expected: ProtoTokenType,
        context: str,
        names: Optional[List[str]] = None,
    ) -> ProtoToken:
        if self._peek().type != expected:
            raise self._error(names or [_TOKEN_NAMES[expected]], context)
        return self._advance()

    def _expect_keyword(self, keyword: str, context: str) -> ProtoToken:
        if not self._at_keyword(keyword):
            raise self._error([f'"{keyword}"'], context)
        return self._advance()

    def _at_keyword(self, keyword: str) -> bool:
        tok = self._peek()
        return tok.type == ProtoTokenType.IDENT and tok.value == keyword

    def _at_block(self, keyword: str) -> bool:
        """True for ``keyword ident {``, i.e. a definition rather than a field."""
        return (
            self._at_keyword(keyword)
            and self._peek(1).type == ProtoTokenType.IDENT
            and self._peek(2).type == ProtoTokenType.LBRACE
        )

    def _at_end(self) -> bool:
        return self._peek().type == ProtoTokenType.EOF

    def _error(self, expected: List[str], context: str) -> ProtoSyntaxError:
        tok = self._peek()
        got = "end of input" if tok.type == ProtoTokenType.EOF else repr(tok.value)
        return ProtoSyntaxError(
            f"Expected {' or '.join(expected)}, got {got}",
            line=tok.line,
            col=tok.col,
            offset=tok.start,
            expected=expected,
            context=context,
        )


def parse_tree(text: str) -> ParseNode:
    """Tokenize and parse ``text`` into a proto_file parse tree."""
    return ProtoTreeParser(tokenize_proto(text), text).parse()
