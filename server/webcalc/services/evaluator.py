from __future__ import annotations

import math
import operator
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List

from webcalc.core.exceptions import AppError


class ExpressionParseError(AppError):
    status_code = 400
    error_type = "EXPRESSION_PARSE_ERROR"


class OperatorCategory(str, Enum):
    addition = "Addition"
    subtract = "Subtract"
    multiply = "Multiply"
    divide = "Divide"
    combine = "Combine"
    other = "Other"


class TokenKind(str, Enum):
    number = "number"
    operator = "operator"


class _State(Enum):
    expect_number = "expect_number"
    expect_operator = "expect_operator"
    done = "done"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    position: int


def _divide(left: float, right: float) -> float:
    # Python raises on float division by zero; keep IEEE 754 results instead.
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


OPERATORS: dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _divide,
}

# Checked in this order when exactly one operator is present.
_SINGLE_OPERATOR_CATEGORIES: tuple[tuple[str, OperatorCategory], ...] = (
    ("+", OperatorCategory.addition),
    ("-", OperatorCategory.subtract),
    ("*", OperatorCategory.multiply),
    ("/", OperatorCategory.divide),
)

_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?|\.\d+")
_NUMBER_CHARS = frozenset("0123456789.")


def classify(expression: str) -> OperatorCategory:
    """
    Label an expression by the operators it contains.

    Two or more operator occurrences (of any kind, repeated or mixed) yield
    ``Combine``; a single occurrence yields the matching category; none yields
    ``Other``. The input is not validated, so this never raises.
    """

    total = sum(1 for char in expression if char in OPERATORS)
    if total >= 2:
        return OperatorCategory.combine
    if total == 1:
        for symbol, category in _SINGLE_OPERATOR_CATEGORIES:
            if symbol in expression:
                return category
    return OperatorCategory.other


def tokenize(expression: str) -> List[Token]:
    """
    Split an expression into alternating number and operator tokens.

    Grammar: ``expression := number (operator number)*`` where a number is an
    unsigned invariant decimal (``12``, ``0.5``, ``.5``). Whitespace between
    tokens is ignored.
    """

    if not expression.strip():
        raise ExpressionParseError("Expression cannot be empty.", details={"expression": expression})

    tokens: list[Token] = []
    state = _State.expect_number
    index = 0
    length = len(expression)

    while state is not _State.done:
        while index < length and expression[index].isspace():
            index += 1

        if index >= length:
            if state is _State.expect_number:
                raise _parse_error("Unterminated expression: missing operand after operator.", expression, index)
            state = _State.done
            continue

        char = expression[index]
        if char not in OPERATORS and char not in _NUMBER_CHARS:
            raise _parse_error(f"Invalid character {char!r}.", expression, index)

        if state is _State.expect_number:
            if char in OPERATORS:
                if not tokens:
                    raise _parse_error(f"Expression cannot start with operator {char!r}.", expression, index)
                raise _parse_error(f"Unexpected operator {char!r}: missing operand.", expression, index)
            end = _scan_literal(expression, index)
            tokens.append(Token(TokenKind.number, expression[index:end], index))
            index = end
            state = _State.expect_operator
        else:
            if char not in OPERATORS:
                raise _parse_error("Unexpected number: missing operator.", expression, index)
            tokens.append(Token(TokenKind.operator, char, index))
            index += 1
            state = _State.expect_number

    return tokens


def evaluate(expression: str) -> float:
    """
    Evaluate an expression by chained left-to-right reduction.

    Operators have no precedence: ``2+3*4`` is ``(2+3)*4``. Division by zero
    follows IEEE 754 and yields infinity or NaN rather than raising.
    """

    tokens = tokenize(expression)
    accumulator = float(tokens[0].text)
    for operator_token, operand in zip(tokens[1::2], tokens[2::2]):
        accumulator = OPERATORS[operator_token.text](accumulator, float(operand.text))
    return accumulator


def render(tokens: List[Token]) -> str:
    return " ".join(token.text for token in tokens)


def _scan_literal(expression: str, start: int) -> int:
    end = start
    while end < len(expression) and expression[end] in _NUMBER_CHARS:
        end += 1
    literal = expression[start:end]
    if not _NUMBER_PATTERN.fullmatch(literal):
        raise _parse_error(f"Malformed number {literal!r}.", expression, start)
    return end


def _parse_error(message: str, expression: str, position: int) -> ExpressionParseError:
    return ExpressionParseError(message, details={"expression": expression, "position": position})
