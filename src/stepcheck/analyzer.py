"""Step text analysis: quote-aware word splitting and scalar typing.

A step such as ``Given I have "Bob Smith" and 42 and $19.99`` splits on
spaces that are outside double quotes::

    Given | I | have | "Bob Smith" | and | 42 | and | $19.99

Each token is then classified. Numbers and quoted strings are argument
positions; everything else is a literal word.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum

QUOTE = '"'
CURRENCY = "$"


class TokenKind(Enum):
    INTEGER = "integer"
    DECIMAL = "decimal"
    CURRENCY_DECIMAL = "currency-decimal"
    QUOTED_STRING = "quoted-string"
    WORD = "word"


ARGUMENT_KINDS = frozenset({
    TokenKind.INTEGER,
    TokenKind.DECIMAL,
    TokenKind.CURRENCY_DECIMAL,
    TokenKind.QUOTED_STRING,
})


def tokenize(text: str) -> list[str]:
    """Split step text on spaces, keeping quoted phrases together.

    Quotes toggle quoting and are never escaped, so an unmatched quote
    simply quotes the rest of the text. Runs of spaces produce no empty
    tokens, but the trailing token is always kept, even when empty.
    """
    tokens: list[str] = []
    quoted = False
    start = 0
    for i, char in enumerate(text):
        if char == QUOTE:
            quoted = not quoted
        if not quoted and char == " ":
            if start < i:
                tokens.append(text[start:i])
            start = i + 1
    tokens.append(text[start:])
    return tokens


def is_integer(token: str) -> bool:
    try:
        int(token)
    except ValueError:
        return False
    return True


def _parses_as_decimal(token: str) -> bool:
    try:
        value = Decimal(token)
    except (InvalidOperation, ValueError):
        return False
    return value.is_finite()


def is_currency_decimal(token: str) -> bool:
    return len(token) >= 2 and token[0] == CURRENCY and _parses_as_decimal(token[1:])


def is_decimal(token: str) -> bool:
    return _parses_as_decimal(token) or is_currency_decimal(token)


def is_quoted_string(token: str) -> bool:
    # A bare "" is deliberately not a string argument.
    return len(token) > 2 and token[0] == QUOTE and token[-1] == QUOTE


def classify(token: str) -> TokenKind:
    """Classify a token, checking integer, decimal, quoted string, then word."""
    if is_integer(token):
        return TokenKind.INTEGER
    if _parses_as_decimal(token):
        return TokenKind.DECIMAL
    if is_currency_decimal(token):
        return TokenKind.CURRENCY_DECIMAL
    if is_quoted_string(token):
        return TokenKind.QUOTED_STRING
    return TokenKind.WORD


def is_argument(kind: TokenKind) -> bool:
    return kind in ARGUMENT_KINDS


def unquote(token: str) -> str:
    if is_quoted_string(token):
        return token[1:-1]
    return token
