# src/pheres/core/lexer.py
"""
Tokenizer for AgentSpeak source text.

Every token keeps its character offset and 1-based line/column so the
parser can point at the exact spot of a problem. Malformed input (an
unterminated comment or string, a stray character) still produces a token;
it is the parser that turns those into errors.
"""

import re
from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    WHITESPACE = "whitespace"
    LINE_COMMENT = "line comment"
    BLOCK_COMMENT = "block comment"

    FUNCTOR = "functor"
    VARIABLE = "variable"
    WILDCARD = "wildcard"
    NUMBER = "number"
    STRING = "string"

    TRUE = "true"
    FALSE = "false"
    NOT = "not"
    DIV = "div"
    MOD = "mod"
    IF = "if"
    ELSE = "else"
    WHILE = "while"

    OPEN_PAREN = "("
    CLOSE_PAREN = ")"
    OPEN_BRACKET = "["
    CLOSE_BRACKET = "]"
    OPEN_BRACE = "{"
    CLOSE_BRACE = "}"

    ARROW = "<-"
    DEFINE = ":-"
    COLON = ":"

    BANG_BANG = "!!"
    BANG = "!"
    QUESTION = "?"
    MINUS_PLUS = "-+"

    PLUS = "+"
    MINUS = "-"
    SLASH = "/"
    POW = "**"
    STAR = "*"
    AND = "&"
    OR = "|"

    LE = "<="
    GE = ">="
    NOT_EQUAL = "\\=="
    EQUAL = "=="
    UNIFY = "="
    LT = "<"
    GT = ">"

    SEMI = ";"
    COMMA = ","
    DOT = "."
    AT = "@"

    UNKNOWN = "unknown"
    EOF = "end of input"


KEYWORDS = {
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "not": TokenKind.NOT,
    "div": TokenKind.DIV,
    "mod": TokenKind.MOD,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "while": TokenKind.WHILE,
}

# Longest operators first so that "<-" wins over "<" and "**" over "*"
_OPERATORS = [
    "<-", ":-", "!!", "-+", "**", "<=", ">=", "\\==", "==",
    "(", ")", "[", "]", "{", "}", ":", "!", "?", "+", "-", "/", "*",
    "&", "|", "=", "<", ">", ";", ",", ".", "@",
]
_OPERATOR_KINDS = {kind.value: kind for kind in TokenKind if kind.value in _OPERATORS}

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<line_comment>(?://|\#)[^\n]*)
  | (?P<block_comment>/\*(?:.|\n)*?(?:(?P<comment_close>\*/)|\Z))
  | (?P<number>\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
  | (?P<string>"(?:\\.|[^"\\\n])*(?:(?P<string_close>")|(?=\n)|\Z))
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>""" + "|".join(re.escape(op) for op in _OPERATORS) + r""")
  | (?P<unknown>.)
    """,
    re.VERBOSE,
)

TRIVIA = frozenset({TokenKind.WHITESPACE, TokenKind.LINE_COMMENT, TokenKind.BLOCK_COMMENT})


@dataclass
class Token:
    kind: TokenKind
    text: str
    offset: int  # character offset in the source
    line: int
    column: int
    terminated: bool = True  # False for an unclosed block comment or string

    @property
    def end(self) -> int:
        return self.offset + len(self.text)


def tokenize(text: str) -> list[Token]:
    """Split text into tokens, trivia included, followed by a single EOF token."""
    tokens = []
    line = 1
    line_start = 0

    for match in _TOKEN_RE.finditer(text):
        value = match.group()
        start = match.start()
        kind, terminated = _classify(match)

        tokens.append(Token(kind, value, start, line, start - line_start + 1, terminated))

        newlines = value.count("\n")
        if newlines:
            line += newlines
            line_start = start + value.rindex("\n") + 1

    tokens.append(Token(TokenKind.EOF, "", len(text), line, len(text) - line_start + 1))
    return tokens


def _classify(match: re.Match) -> tuple[TokenKind, bool]:
    group = match.lastgroup
    value = match.group()

    if group == "ws":
        return TokenKind.WHITESPACE, True
    if group == "line_comment":
        return TokenKind.LINE_COMMENT, True
    if group == "block_comment":
        return TokenKind.BLOCK_COMMENT, match.group("comment_close") is not None
    if group == "number":
        return TokenKind.NUMBER, True
    if group == "string":
        return TokenKind.STRING, match.group("string_close") is not None
    if group == "name":
        if value == "_":
            return TokenKind.WILDCARD, True
        if value in KEYWORDS:
            return KEYWORDS[value], True
        if value[0].isupper() or value[0] == "_":
            return TokenKind.VARIABLE, True
        return TokenKind.FUNCTOR, True
    if group == "op":
        return _OPERATOR_KINDS[value], True
    return TokenKind.UNKNOWN, True


def significant(tokens: list[Token]) -> list[Token]:
    """Drop whitespace and comments; unterminated block comments are kept so the parser can report them."""
    return [t for t in tokens if t.kind not in TRIVIA or not t.terminated]
