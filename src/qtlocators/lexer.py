from __future__ import annotations

import logging

from .errors import PathLexError
from .models import Token

logger = logging.getLogger(__name__)

DELIMITERS = frozenset("/[]@=!<>*")
QUOTES = frozenset("\"'")
_SINGLE_CHAR_TOKENS = {
    "@": "attribute",
    "[": "predicate",
    "]": "predicate",
    "*": "wildcard",
}
_OPERATOR_STARTS = frozenset("=!<>")


def tokenize(path: str) -> list[Token]:
    """Split a locator path into tokens, always ending with an ``end`` token.

    Raises ``PathLexError`` for a quoted literal that is never closed.
    """
    tokens: list[Token] = []
    length = len(path)
    pos = 0

    while pos < length:
        char = path[pos]
        if char.isspace():
            pos += 1
            continue

        if char == "/":
            if pos + 1 < length and path[pos + 1] == "/":
                tokens.append(Token("slash", "//", pos))
                pos += 2
            else:
                tokens.append(Token("slash", "/", pos))
                pos += 1
            continue

        kind = _SINGLE_CHAR_TOKENS.get(char)
        if kind is not None:
            tokens.append(Token(kind, char, pos))
            pos += 1
            continue

        if char in QUOTES:
            token, pos = _read_literal(path, pos)
            tokens.append(token)
            continue

        if char in _OPERATOR_STARTS:
            end = pos + 2 if pos + 1 < length and path[pos + 1] == "=" else pos + 1
            tokens.append(Token("operator", path[pos:end], pos))
            pos = end
            continue

        axis_end = _axis_name_end(path, pos)
        if axis_end is not None:
            tokens.append(Token("axis", path[pos:axis_end], pos))
            pos = axis_end + 2
            continue

        start = pos
        while pos < length and not path[pos].isspace() and path[pos] not in DELIMITERS:
            pos += 1
        tokens.append(Token("tag", path[start:pos], start))

    tokens.append(Token("end", "", length))
    logger.debug("Tokenized %r into %d token(s)", path, len(tokens))
    return tokens


def unescape_literal(value: str) -> str:
    characters: list[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if char == "\\" and index + 1 < len(value):
            characters.append(value[index + 1])
            index += 2
            continue
        characters.append(char)
        index += 1
    return "".join(characters)


def _read_literal(path: str, quote_offset: int) -> tuple[Token, int]:
    quote = path[quote_offset]
    start = quote_offset + 1
    pos = start
    while pos < len(path) and path[pos] != quote:
        # a backslash shields the next character from closing the literal
        if path[pos] == "\\" and pos + 1 < len(path):
            pos += 1
        pos += 1
    if pos >= len(path):
        raise PathLexError("Unterminated string literal", quote_offset)
    return Token("literal", path[start:pos], quote_offset), pos + 1


def _axis_name_end(path: str, start: int) -> int | None:
    pos = start
    while pos < len(path):
        char = path[pos]
        if char.isspace() or char == ":" or char in DELIMITERS or char in QUOTES:
            break
        pos += 1
    if pos > start and path.startswith("::", pos):
        return pos
    return None
