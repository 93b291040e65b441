from __future__ import annotations

import logging
import re
from typing import Sequence

from .errors import PathParseError
from .lexer import unescape_literal
from .models import (
    DEFAULT_AXIS,
    WILDCARD,
    AttributeCondition,
    Condition,
    PositionCondition,
    Predicate,
    Step,
    Token,
    TokenKind,
)

logger = logging.getLogger(__name__)

DESCENDANT_OR_SELF = "descendant-or-self"
CONNECTIVES = frozenset({"and", "or"})
_LEADING_DIGITS = re.compile(r"\d+")


def parse_tokens(tokens: Sequence[Token]) -> list[Step]:
    """Turn a token sequence into path steps in source order.

    Raises ``PathParseError`` on the first syntax problem; no partial
    result is returned.
    """
    steps = _TokenCursor(tokens).parse()
    logger.debug("Parsed %d step(s)", len(steps))
    return steps


class _TokenCursor:
    def __init__(self, tokens: Sequence[Token]) -> None:
        if not tokens or tokens[-1].kind != "end":
            offset = tokens[-1].offset + len(tokens[-1].text) if tokens else 0
            tokens = [*tokens, Token("end", "", offset)]
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> list[Step]:
        steps: list[Step] = []
        while not self._at_end():
            is_absolute = False
            if self._match("slash"):
                is_absolute = True
                if self._match("slash"):
                    steps.append(Step(node_test=WILDCARD, axis=DESCENDANT_OR_SELF, is_absolute=True))
                    continue
            steps.append(self._parse_step(is_absolute))
        return steps

    def _parse_step(self, is_absolute: bool) -> Step:
        axis = self._previous().text if self._match("axis") else DEFAULT_AXIS

        if self._match("wildcard"):
            node_test = WILDCARD
        elif self._match("tag"):
            node_test = self._previous().text
        else:
            raise PathParseError("Expected tag or '*'", self._current().offset)

        predicate: Predicate | None = None
        if self._current().is_open_bracket():
            self._advance()
            predicate = self._parse_predicate()
            if not self._current().is_close_bracket():
                raise PathParseError("Expected closing ']'", self._current().offset)
            self._advance()

        if self._match("namespace"):
            node_test = f"{self._previous().text}:{node_test}"

        return Step(node_test=node_test, axis=axis, predicate=predicate, is_absolute=is_absolute)

    def _parse_predicate(self) -> Predicate:
        conditions: list[Condition] = []
        while not self._current().is_close_bracket():
            current = self._current()
            if current.kind == "end":
                raise PathParseError("Expected closing ']'", current.offset)

            # unprefixed comparison such as price>35
            if (
                current.kind == "tag"
                and self._peek(1).kind == "operator"
                and self._peek(2).kind in ("literal", "tag")
            ):
                name = self._advance().text
                operator = self._advance().text
                value = self._advance().text
                conditions.append(AttributeCondition(name=name, value=value, operator=operator))
                continue

            if self._match("attribute"):
                name = self._consume("tag").text
                operator = self._consume("operator").text
                value = unescape_literal(self._consume("literal").text)
                conditions.append(AttributeCondition(name=name, value=value, operator=operator))
                continue

            if current.kind == "tag":
                digits = _LEADING_DIGITS.match(current.text)
                if digits:
                    self._advance()
                    conditions.append(PositionCondition(index=int(digits.group(0))))
                    continue
                if current.text in CONNECTIVES:
                    self._advance()
                    continue

            raise PathParseError("Unexpected token in predicate", current.offset)
        return Predicate(conditions=tuple(conditions))

    def _match(self, kind: TokenKind) -> bool:
        if self._check(kind):
            self._advance()
            return True
        return False

    def _check(self, kind: TokenKind) -> bool:
        return not self._at_end() and self._current().kind == kind

    def _consume(self, kind: TokenKind) -> Token:
        if self._check(kind):
            return self._advance()
        raise PathParseError(f"Expected {kind}", self._current().offset)

    def _advance(self) -> Token:
        if not self._at_end():
            self._pos += 1
        return self._previous()

    def _peek(self, distance: int) -> Token:
        index = min(self._pos + distance, len(self._tokens) - 1)
        return self._tokens[index]

    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _previous(self) -> Token:
        return self._tokens[self._pos - 1]

    def _at_end(self) -> bool:
        return self._current().kind == "end"
