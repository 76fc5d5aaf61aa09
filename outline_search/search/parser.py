"""Parse search queries into filter expression trees.

Two layers:

- a recursive descent parser over the token stream handles grouping,
  ``|``, explicit ``+`` and implicit (adjacent) AND, and ``-`` negation;
- each FILTER token's payload is parsed with a small Lark grammar
  (``grammar.lark``) into the matching filter node.

Precedence from loosest to tightest: OR, AND, NOT, primary.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from importlib import resources
from typing import Any

from lark import Lark, Token as LarkToken, Transformer, UnexpectedInput
from lark.exceptions import VisitError

from outline_search.exceptions import QueryParseError
from outline_search.search.ast_nodes import (
    AlwaysMatch,
    AncestorExpr,
    AndExpr,
    AttributeDateExpr,
    AttributeExpr,
    ChildExpr,
    ChildrenExpr,
    DateExpr,
    DepthExpr,
    DescendantExpr,
    FilterExpr,
    FilterType,
    FuzzyExpr,
    NotExpr,
    OrExpr,
    ParentExpr,
    Quantifier,
    RefExpr,
    SiblingExpr,
    TextExpr,
)
from outline_search.search.dates import ComparisonOp, is_date_literal, parse_op
from outline_search.search.tokenizer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)


def _load_grammar() -> str:
    """Load the filter payload grammar from the package resources."""
    return resources.files("outline_search.search").joinpath("grammar.lark").read_text()


_GRAMMAR_TEXT = _load_grammar()

_filter_parser = Lark(
    _GRAMMAR_TEXT,
    parser="earley",
    ambiguity="resolve",
)


def _unquote(token: LarkToken) -> str:
    """Return token text, stripping quotes and escapes from quoted strings."""
    raw = str(token)
    if token.type != "QUOTED_STRING":
        return raw
    body = raw[1:-1]
    chars: list[str] = []
    i = 0
    while i < len(body):
        if body[i] == "\\" and i + 1 < len(body):
            i += 1
        chars.append(body[i])
        i += 1
    return "".join(chars)


def _parse_int(value: str, message: str) -> int:
    text = value.strip()
    digits = text[1:] if text[:1] in "+-" else text
    if not digits.isdigit():
        raise QueryParseError(f"{message}: {value}", fragment=value)
    return int(text)


class _FilterTransformer(Transformer):
    """Transform a filter payload parse tree into filter expression nodes."""

    def comparison(self, items: list[Any]) -> tuple[ComparisonOp, str]:
        op_token, value_token = items
        op = parse_op(str(op_token)) if op_token is not None else ComparisonOp.EQ
        value = str(value_token) if value_token is not None else ""
        return op, value

    def depth_filter(self, items: list[Any]) -> DepthExpr:
        op, value = items[0]
        return DepthExpr(op, _parse_int(value, "invalid depth value"))

    def children_filter(self, items: list[Any]) -> ChildrenExpr:
        op, value = items[0]
        return ChildrenExpr(op, _parse_int(value, "invalid children count"))

    def created_filter(self, items: list[Any]) -> DateExpr:
        op, value = items[0]
        return DateExpr(FilterType.CREATED, op, value)

    def modified_filter(self, items: list[Any]) -> DateExpr:
        op, value = items[0]
        return DateExpr(FilterType.MODIFIED, op, value)

    def attr_exists(self, items: list[Any]) -> AttributeExpr:
        return AttributeExpr(str(items[0]))

    def attr_compare(self, items: list[Any]) -> AttributeExpr | AttributeDateExpr:
        key_token, op_token, value_token = items
        key = str(key_token)
        op = parse_op(str(op_token))
        value = _unquote(value_token) if value_token is not None else ""
        if is_date_literal(value):
            return AttributeDateExpr(key, op, value)
        return AttributeExpr(key, op, value)

    def fuzzy_filter(self, items: list[Any]) -> FuzzyExpr:
        return FuzzyExpr(_unquote(items[0]))

    def ref_filter(self, items: list[Any]) -> RefExpr:
        return RefExpr(_unquote(items[0]).strip())

    def term(self, items: list[Any]) -> TextExpr:
        return TextExpr(_unquote(items[0]))

    def inner(self, items: list[Any]) -> FilterExpr:
        negate, expr = items
        if negate is not None:
            return NotExpr(expr)
        return expr

    def parent_filter(self, items: list[Any]) -> ParentExpr:
        return ParentExpr(items[0])

    def ancestor_filter(self, items: list[Any]) -> AncestorExpr:
        return AncestorExpr(items[0])

    def child_filter(self, items: list[Any]) -> ChildExpr:
        return ChildExpr(items[0])

    def descendant_filter(self, items: list[Any]) -> DescendantExpr:
        return DescendantExpr(items[0])

    def sibling_filter(self, items: list[Any]) -> SiblingExpr:
        return SiblingExpr(items[0])


_transformer = _FilterTransformer()


def parse_filter(payload: str) -> FilterExpr:
    """Parse the payload of a single filter token.

    Args:
        payload: Filter text such as ``d:>2`` or ``child:@status=done``.

    Returns:
        The filter expression node.

    Raises:
        QueryParseError: If the payload is empty, malformed or carries an
            invalid value.
    """
    try:
        tree = _filter_parser.parse(payload)
        return _transformer.transform(tree)
    except UnexpectedInput as e:
        raise QueryParseError(f"invalid filter: {payload}", fragment=payload) from e
    except VisitError as e:
        if isinstance(e.orig_exc, QueryParseError):
            raise e.orig_exc from None
        raise


# Tokens that can start an operand; used for implicit AND
_OPERAND_START = frozenset({TokenKind.TEXT, TokenKind.FILTER, TokenKind.LPAREN, TokenKind.NOT})

_SIGN_QUANTIFIERS = {"+": Quantifier.ALL, "-": Quantifier.NONE}


class _Parser:
    """Recursive descent parser over a token list."""

    def __init__(self, tokens: list[Token], query: str) -> None:
        self.tokens = tokens
        self.query = query
        self.pos = 0

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return token

    def _error(self, message: str, token: Token) -> QueryParseError:
        return QueryParseError(message, fragment=token.text, position=token.pos, query=self.query)

    def _expect_operand(self, operator: Token) -> None:
        if self._current().kind not in _OPERAND_START:
            raise self._error(f"missing operand after '{operator.text}'", operator)

    def parse(self) -> FilterExpr:
        if self._current().kind is TokenKind.EOF:
            return AlwaysMatch()

        expr = self._parse_or()

        token = self._current()
        if token.kind is TokenKind.RPAREN:
            raise self._error("unbalanced parentheses: unexpected ')'", token)
        if token.kind is not TokenKind.EOF:
            raise self._error(f"unexpected token: {token.text}", token)
        return expr

    def _parse_or(self) -> FilterExpr:
        left = self._parse_and()
        while self._current().kind is TokenKind.OR:
            operator = self._advance()
            self._expect_operand(operator)
            right = self._parse_and()
            left = OrExpr(left, right)
        return left

    def _parse_and(self) -> FilterExpr:
        left = self._parse_unary()
        while True:
            token = self._current()
            if token.kind is TokenKind.AND:
                self._advance()
                self._expect_operand(token)
            elif token.kind not in _OPERAND_START:
                break
            right = self._parse_unary()
            left = AndExpr(left, right)
        return left

    def _parse_unary(self) -> FilterExpr:
        if self._current().kind is TokenKind.NOT:
            operator = self._advance()
            self._expect_operand(operator)
            return NotExpr(self._parse_unary())
        return self._parse_primary()

    def _parse_primary(self) -> FilterExpr:
        token = self._current()

        if token.kind is TokenKind.LPAREN:
            self._advance()
            if self._current().kind is TokenKind.RPAREN:
                raise self._error("empty parentheses", self._current())
            expr = self._parse_or()
            closing = self._current()
            if closing.kind is not TokenKind.RPAREN:
                raise self._error("unbalanced parentheses: expected ')'", token)
            self._advance()
            return expr

        if token.kind is TokenKind.TEXT:
            self._advance()
            return TextExpr(token.text)

        if token.kind is TokenKind.FILTER:
            self._advance()
            return self._parse_filter_token(token)

        if token.kind is TokenKind.EOF:
            raise self._error("unexpected end of input", token)
        if token.kind is TokenKind.RPAREN:
            raise self._error("unbalanced parentheses: unexpected ')'", token)
        raise self._error(f"unexpected token: {token.text}", token)

    def _parse_filter_token(self, token: Token) -> FilterExpr:
        try:
            expr = parse_filter(token.text)
        except QueryParseError as e:
            e.query = self.query
            if e.position is None:
                e.position = token.pos
            raise
        if token.sign:
            expr = replace(expr, quantifier=_SIGN_QUANTIFIERS[token.sign])
        return expr


def parse_query(query_string: str) -> FilterExpr:
    """Parse a search query into a filter expression tree.

    Args:
        query_string: The search query, e.g. ``(task | project) d:>0``.

    Returns:
        The root expression. An empty query yields ``AlwaysMatch``.

    Raises:
        QueryParseError: On the first syntax or value error.
    """
    tokens = tokenize(query_string)
    expr = _Parser(tokens, query_string).parse()
    logger.debug("Parsed %r as %s", query_string, expr)
    return expr
