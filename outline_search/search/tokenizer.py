"""Split a raw search query into tokens.

The tokenizer never fails: anything it cannot make sense of becomes a
token the parser will reject with a proper message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

logger = logging.getLogger(__name__)


class TokenKind(Enum):
    """Kinds of tokens produced by :func:`tokenize`."""

    TEXT = auto()
    FILTER = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    LPAREN = auto()
    RPAREN = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    """A single query token.

    For FILTER tokens ``text`` is the raw payload including its prefix
    (``d:>2``, ``@status=done``, ``child:task``) and ``sign`` holds a
    ``+``/``-`` written directly in front of a relationship keyword.
    """

    kind: TokenKind
    text: str
    pos: int
    sign: str = ""


# Prefixes that turn a run of characters into a FILTER token
FILTER_PREFIXES: tuple[str, ...] = (
    "@",
    "~",
    "d:",
    "c:",
    "m:",
    "children:",
    "ref:",
    "parent:",
    "parent*:",
    "child:",
    "child*:",
    "sibling:",
)

# Relationship filters that accept a leading quantifier sign
QUANTIFIED_PREFIXES: tuple[str, ...] = ("parent*:", "child:", "child*:", "sibling:")

_WHITESPACE = " \t\r\n"
_RUN_STOP = _WHITESPACE + "()|"

# A "+" right after these is the sign of a value (c:+7d, @due<=+2w), not AND
_SIGN_CONTEXT = ":=<>"


def is_filter_start(text: str) -> bool:
    """Return whether ``text`` begins with a filter prefix."""
    return text.startswith(FILTER_PREFIXES)


class _Tokenizer:
    """Character scanner over a single query string."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.length = len(text)

    def _skip_whitespace(self) -> None:
        while self.pos < self.length and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def _read_quoted(self) -> str:
        """Read a double-quoted string starting at the opening quote.

        Backslash escapes the next character. An unterminated quote runs to
        the end of the input.
        """
        self.pos += 1  # opening quote
        chars: list[str] = []
        while self.pos < self.length:
            ch = self.text[self.pos]
            if ch == "\\" and self.pos + 1 < self.length:
                chars.append(self.text[self.pos + 1])
                self.pos += 2
                continue
            if ch == '"':
                self.pos += 1
                break
            chars.append(ch)
            self.pos += 1
        return "".join(chars)

    def _read_run(self) -> str:
        """Read up to the next whitespace, paren, ``|`` or joining ``+``.

        Double-quoted segments inside the run are kept verbatim, quotes
        included, so filter payloads like ``@title="two words"`` stay whole.
        """
        start = self.pos
        while self.pos < self.length:
            ch = self.text[self.pos]
            if ch in _RUN_STOP:
                break
            if ch == "+" and self.pos > start and self.text[self.pos - 1] not in _SIGN_CONTEXT:
                break
            if ch == '"':
                self.pos += 1
                while self.pos < self.length and self.text[self.pos] != '"':
                    if self.text[self.pos] == "\\":
                        self.pos += 1
                    self.pos += 1
                self.pos = min(self.pos + 1, self.length)
                continue
            self.pos += 1
        return self.text[start : self.pos]

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []

        while True:
            self._skip_whitespace()
            if self.pos >= self.length:
                break

            start = self.pos
            ch = self.text[start]

            if ch == "(":
                tokens.append(Token(TokenKind.LPAREN, "(", start))
                self.pos += 1
            elif ch == ")":
                tokens.append(Token(TokenKind.RPAREN, ")", start))
                self.pos += 1
            elif ch == "|":
                tokens.append(Token(TokenKind.OR, "|", start))
                self.pos += 1
            elif ch in "+-":
                rest = self.text[start + 1 :]
                if rest.startswith(QUANTIFIED_PREFIXES):
                    # Quantifier sign: +child:x (all), -child:x (none)
                    self.pos += 1
                    payload = self._read_run()
                    tokens.append(Token(TokenKind.FILTER, payload, start, sign=ch))
                elif ch == "+":
                    tokens.append(Token(TokenKind.AND, "+", start))
                    self.pos += 1
                else:
                    tokens.append(Token(TokenKind.NOT, "-", start))
                    self.pos += 1
            elif ch == '"':
                tokens.append(Token(TokenKind.TEXT, self._read_quoted(), start))
            else:
                run = self._read_run()
                kind = TokenKind.FILTER if is_filter_start(run) else TokenKind.TEXT
                tokens.append(Token(kind, run, start))

        tokens.append(Token(TokenKind.EOF, "", self.length))
        logger.debug("Tokenized %r into %s", self.text, [t.kind.name for t in tokens])
        return tokens


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens, always terminated by an EOF token."""
    return _Tokenizer(text).tokenize()
