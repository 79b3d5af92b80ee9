"""
Holomorph — Expression Parser
Turns a string like "z^2 + sin(z)" into an immutable expression tree.

Grammar (lowest to highest precedence):
    expression := term (('+'|'-') term)*
    term       := factor (('*'|'/') factor)*
    factor     := primary ('^' primary)*
    primary    := number | 'z' | name '(' expression ')' | '(' expression ')' | '-' factor

Every binary level folds left, '^' included: "2^3^2" is (2^3)^2.
A '-' directly in front of a number literal is part of the literal, so
"-3" is Number(-3.0) and "-2^2" is (-2)^2.
"""

import math
import re
from dataclasses import dataclass

import numpy as np

from functions import is_function

# Limits
MAX_EXPRESSION_LENGTH = 1000
MAX_DEPTH = 64             # Nested parens / calls / negations

BINARY_OPS = ("+", "-", "*", "/", "^")
UNARY_OPS = ("-",)

_TOKEN_RE = re.compile(
    r"\s*(?:(?P<number>\d+(?:\.\d+)?)|(?P<name>[A-Za-z_][A-Za-z_0-9]*)|(?P<op>[-+*/^()]))"
)


class ParseError(Exception):
    """Malformed expression. Carries the 0-based position and a reason."""

    def __init__(self, reason: str, position: int, text: str = ""):
        self.reason = reason
        self.position = position
        self.text = text
        super().__init__(f"{reason} at position {position}")


# --- Tree nodes ---

@dataclass(frozen=True)
class Number:
    value: float

    def __str__(self):
        text = np.format_float_positional(self.value, trim="-")
        return f"({text})" if self.value < 0 else text


@dataclass(frozen=True)
class Variable:
    def __str__(self):
        return "z"


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: object

    def __str__(self):
        return f"({self.op}({self.operand}))"


@dataclass(frozen=True)
class BinaryOp:
    left: object
    op: str
    right: object

    def __str__(self):
        return f"({self.left} {self.op} {self.right})"


@dataclass(frozen=True)
class Call:
    name: str
    argument: object

    def __str__(self):
        return f"{self.name}({self.argument})"


Expression = Number | Variable | UnaryOp | BinaryOp | Call


# --- Tokenizer ---

@dataclass(frozen=True)
class Token:
    kind: str      # "number", "name", "op", "end"
    value: str
    position: int


def tokenize(text: str) -> list[Token]:
    """Split an expression into tokens. Whitespace is dropped.

    Raises:
        ParseError: On a character that cannot start any token.
    """
    tokens = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None or match.end() == pos:
            # Only whitespace (or nothing) left
            rest = text[pos:]
            if rest.strip():
                bad = pos + (len(rest) - len(rest.lstrip()))
                raise ParseError(f"Unexpected character '{text[bad]}'", bad, text)
            break
        kind = match.lastgroup
        tokens.append(Token(kind, match.group(kind), match.start(kind)))
        pos = match.end()
    tokens.append(Token("end", "", len(text)))
    return tokens


# --- Parser ---

class Parser:
    """Recursive descent parser over a token list. One instance per parse."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0
        self.depth = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def peek_next(self) -> Token:
        return self.tokens[min(self.pos + 1, len(self.tokens) - 1)]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.kind != "end":
            self.pos += 1
        return tok

    def at_op(self, *ops) -> bool:
        tok = self.peek()
        return tok.kind == "op" and tok.value in ops

    def error(self, reason: str, tok: Token = None) -> ParseError:
        tok = tok or self.peek()
        return ParseError(reason, tok.position, self.text)

    def expect(self, op: str, context: str) -> Token:
        if not self.at_op(op):
            tok = self.peek()
            found = "end of input" if tok.kind == "end" else f"'{tok.value}'"
            raise self.error(f"Expected '{op}' {context}, found {found}")
        return self.advance()

    def parse(self):
        if self.peek().kind == "end":
            raise self.error("Empty expression")
        tree = self.expression()
        tok = self.peek()
        if tok.kind != "end":
            if tok.value == ")":
                raise self.error("Unmatched ')'")
            raise self.error(f"Unexpected trailing input '{self.text[tok.position:].strip()}'")
        return tree

    def expression(self):
        node = self.term()
        while self.at_op("+", "-"):
            op = self.advance().value
            node = BinaryOp(node, op, self.term())
        return node

    def term(self):
        node = self.factor()
        while self.at_op("*", "/"):
            op = self.advance().value
            node = BinaryOp(node, op, self.factor())
        return node

    def factor(self):
        node = self.primary()
        while self.at_op("^"):
            self.advance()
            node = BinaryOp(node, "^", self.primary())
        return node

    def primary(self):
        tok = self.peek()

        if tok.kind == "number":
            self.advance()
            return self._number(tok, negative=False)

        if tok.kind == "name":
            return self._name()

        if tok.kind == "op" and tok.value == "(":
            self.advance()
            self._enter(tok)
            node = self.expression()
            if not self.at_op(")"):
                raise ParseError("Unmatched '('", tok.position, self.text)
            self.advance()
            self.depth -= 1
            return node

        if tok.kind == "op" and tok.value == "-":
            self.advance()
            nxt = self.peek()
            if nxt.kind == "number":
                self.advance()
                return self._number(nxt, negative=True)
            self._enter(tok)
            node = UnaryOp("-", self.factor())
            self.depth -= 1
            return node

        if tok.kind == "end":
            raise self.error("Unexpected end of input, expected a value")
        raise self.error(f"Unexpected '{tok.value}', expected a value")

    def _number(self, tok: Token, negative: bool) -> Number:
        value = float(tok.value)
        if not math.isfinite(value):
            raise self.error("Number out of range", tok)
        return Number(-value if negative else value)

    def _name(self):
        tok = self.advance()
        name = tok.value
        if name == "z":
            return Variable()
        if not is_function(name):
            raise self.error(f"Unknown identifier '{name}'", tok)
        self.expect("(", f"after function '{name}'")
        self._enter(tok)
        argument = self.expression()
        if not self.at_op(")"):
            raise self.error(f"Unmatched '(' in call to '{name}'", tok)
        self.advance()
        self.depth -= 1
        return Call(name, argument)

    def _enter(self, tok: Token):
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise self.error(f"Expression nested too deeply (max {MAX_DEPTH})", tok)


def parse(text: str):
    """Parse an expression string into a tree.

    Args:
        text: Expression over the variable z, e.g. "z^2 + sin(z)".

    Returns:
        Root node (Number, Variable, UnaryOp, BinaryOp, or Call).

    Raises:
        ParseError: On any syntax error. No partial tree is returned.
    """
    if not isinstance(text, str):
        raise ParseError(f"Expression must be a string, got {type(text).__name__}", 0)
    if len(text) > MAX_EXPRESSION_LENGTH:
        raise ParseError(
            f"Expression too long ({len(text)} chars, max {MAX_EXPRESSION_LENGTH})",
            MAX_EXPRESSION_LENGTH, text,
        )
    return Parser(text).parse()


def validate_expression(text: str) -> tuple[bool, str]:
    """Check an expression without keeping the tree.

    Returns:
        (is_valid, error_message)
    """
    try:
        parse(text)
        return True, ""
    except ParseError as e:
        return False, str(e)
