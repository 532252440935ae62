"""Tokenizer for protobuf (.proto) files.

Words are always emitted as IDENT tokens. Keywords only mean something in the
grammar positions that expect them, so the parser checks token values.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import List

from protoc_json.errors import ProtoSyntaxError


class ProtoTokenType(Enum):
    # Delimiters
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    SEMICOLON = auto()
    EQUALS = auto()
    DOT = auto()
    COMMA = auto()
    COLON = auto()
    MINUS = auto()

    # Literals
    IDENT = auto()
    NUMBER = auto()
    STRING_LIT = auto()

    # Special
    EOF = auto()


_DELIMITERS = {
    "{": ProtoTokenType.LBRACE,
    "}": ProtoTokenType.RBRACE,
    "(": ProtoTokenType.LPAREN,
    ")": ProtoTokenType.RPAREN,
    "[": ProtoTokenType.LBRACKET,
    "]": ProtoTokenType.RBRACKET,
    ";": ProtoTokenType.SEMICOLON,
    "=": ProtoTokenType.EQUALS,
    ".": ProtoTokenType.DOT,
    ",": ProtoTokenType.COMMA,
    ":": ProtoTokenType.COLON,
    "-": ProtoTokenType.MINUS,
}

_IDENT_START = set(string.ascii_letters)
_IDENT_CHARS = set(string.ascii_letters + string.digits + "_")
_WHITESPACE = {" ", "\t", "\r", "\n"}

FIELD_RULES = {"repeated", "optional", "required"}

# Proto scalar types; any other field type is a message or enum reference.
PROTO_PRIMITIVES = {
    "int32", "sint32", "sfixed32", "uint32", "fixed32",
    "int64", "sint64", "sfixed64", "uint64", "fixed64",
    "float", "double", "bool", "string", "bytes",
}


@dataclass(frozen=True)
class ProtoToken:
    type: ProtoTokenType
    value: str
    line: int
    col: int
    start: int
    end: int


class _Scanner:
    """Character cursor that keeps line/column bookkeeping in one place."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.col = 1

    def peek(self, ahead: int = 0) -> str:
        i = self.pos + ahead
        return self.text[i] if i < len(self.text) else ""

    def advance(self) -> str:
        ch = self.text[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def at_end(self) -> bool:
        return self.pos >= len(self.text)


def tokenize_proto(text: str) -> List[ProtoToken]:
    """Tokenize a protobuf source string into a list of tokens.

    Whitespace and both comment forms are skipped between tokens.
    Raises ProtoSyntaxError on unterminated literals or comments and on
    characters that start no token.
    """
    tokens: List[ProtoToken] = []
    sc = _Scanner(text)

    while not sc.at_end():
        ch = sc.peek()
        line, col, start = sc.line, sc.col, sc.pos

        if ch in _WHITESPACE:
            sc.advance()
            continue

        # Single-line comment
        if ch == "/" and sc.peek(1) == "/":
            while not sc.at_end() and sc.peek() != "\n":
                sc.advance()
            continue

        # Multi-line comment
        if ch == "/" and sc.peek(1) == "*":
            sc.advance()
            sc.advance()
            while not (sc.peek() == "*" and sc.peek(1) == "/"):
                if sc.at_end():
                    raise ProtoSyntaxError(
                        "Unterminated block comment",
                        line=line, col=col, offset=start, context="COMMENT",
                    )
                sc.advance()
            sc.advance()
            sc.advance()
            continue

        if ch in _DELIMITERS:
            sc.advance()
            tokens.append(ProtoToken(_DELIMITERS[ch], ch, line, col, start, sc.pos))
            continue

        # String literal; quotes are kept and stripped by the AST constructor.
        if ch == '"':
            sc.advance()
            while sc.peek() != '"':
                if sc.at_end() or sc.peek() == "\n":
                    raise ProtoSyntaxError(
                        "Unterminated string literal",
                        line=line, col=col, offset=start,
                        expected=['"'], context="string_lit",
                    )
                if sc.peek() == "\\":
                    sc.advance()
                    if sc.at_end():
                        continue
                sc.advance()
            sc.advance()  # closing quote
            tokens.append(
                ProtoToken(ProtoTokenType.STRING_LIT, text[start:sc.pos], line, col, start, sc.pos)
            )
            continue

        if ch in string.digits:
            while not sc.at_end() and sc.peek() in string.digits:
                sc.advance()
            tokens.append(
                ProtoToken(ProtoTokenType.NUMBER, text[start:sc.pos], line, col, start, sc.pos)
            )
            continue

        if ch in _IDENT_START:
            while not sc.at_end() and sc.peek() in _IDENT_CHARS:
                sc.advance()
            tokens.append(
                ProtoToken(ProtoTokenType.IDENT, text[start:sc.pos], line, col, start, sc.pos)
            )
            continue

        raise ProtoSyntaxError(
            f"Unexpected character {ch!r}", line=line, col=col, offset=start,
        )

    tokens.append(ProtoToken(ProtoTokenType.EOF, "", sc.line, sc.col, sc.pos, sc.pos))
    return tokens
