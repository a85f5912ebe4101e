"""Two-stage lexical scanner for untyped lambda calculus source.

The first stage classifies every character of the source; the second stage groups those primitive tokens into the
tokens the parser consumes:

```
<variable> ::= <character>+                  ; maximal run of non-delimiter characters
<lambda>   ::= "\" | "/"
<equal>    ::= "="
<dot>      ::= "."
<lparen>   ::= "("
<rparen>   ::= ")"
<comment>  ::= "(*" <anything> "*)"          ; discarded, does not nest
```

Whitespace separates tokens and never reaches the parser. A stray "*" outside of a comment is dropped as well.
"""

from dataclasses import dataclass
from enum import Enum

from untyped_lambda.lang.error import UnexpectedEof


class CharKind(Enum):
    """Kinds of first stage (character) tokens."""
    WHITE = "white"
    CHARACTER = "character"
    EQUAL = "="
    ASTERISK = "*"
    LAMBDA = "\\"
    DOT = "."
    LPAREN = "("
    RPAREN = ")"
    END = "end"


class TokenKind(Enum):
    """Kinds of second stage tokens, the ones the parser sees."""
    VARIABLE = "variable"
    LAMBDA = "\\"
    EQUAL = "="
    DOT = "."
    LPAREN = "("
    RPAREN = ")"
    END = "end"


@dataclass
class Token:
    """A token of either stage. start and end index into the source, line and column are 0-based."""
    kind: Enum
    start: int
    end: int
    line: int
    column: int
    text: str = ""


CLASSIFICATION = {
    "/": CharKind.LAMBDA,
    "\\": CharKind.LAMBDA,
    "=": CharKind.EQUAL,
    "*": CharKind.ASTERISK,
    ".": CharKind.DOT,
    "(": CharKind.LPAREN,
    ")": CharKind.RPAREN,
    " ": CharKind.WHITE,
    "\t": CharKind.WHITE,
    "\n": CharKind.WHITE,
    "\r": CharKind.WHITE,
}

PASS_THROUGH = {
    CharKind.LAMBDA: TokenKind.LAMBDA,
    CharKind.EQUAL: TokenKind.EQUAL,
    CharKind.DOT: TokenKind.DOT,
    CharKind.LPAREN: TokenKind.LPAREN,
    CharKind.RPAREN: TokenKind.RPAREN,
    CharKind.END: TokenKind.END,
}


def decode(source):
    """Returns source as text; bytes are decoded as UTF-8, invalid sequences becoming U+FFFD characters."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source).decode("utf-8", errors="replace")
    return source


def source_line(source, line):
    """Returns the 0-based line of source, or an empty string if there is no such line. Used for diagnostics."""
    lines = decode(source).split("\n")
    return lines[line].rstrip("\r") if 0 <= line < len(lines) else ""


def classify(source):
    """First stage: converts every character of source into a token. Never fails."""
    source = decode(source)
    tokens = []
    line = column = 0

    for idx, char in enumerate(source):
        kind = CLASSIFICATION.get(char, CharKind.CHARACTER)
        tokens.append(Token(kind, idx, idx + 1, line, column, char))

        if char == "\t":
            column += 4
        elif char in "\n\r":
            if char == "\n":
                line += 1
            column = 0
        else:
            column += 1

    tokens.append(Token(CharKind.END, len(source), len(source), line, column + 1))
    return tokens


def group(chars, source=None):
    """Second stage: drops whitespace and comments, fuses character runs into variables. Raises UnexpectedEof if a
    comment is never closed. source is only used for error messages.
    """
    tokens = []
    idx = 0

    while idx < len(chars):
        token = chars[idx]

        if token.kind is CharKind.LPAREN and chars[idx + 1].kind is CharKind.ASTERISK:
            idx += 2
            while not (chars[idx].kind is CharKind.ASTERISK and chars[idx + 1].kind is CharKind.RPAREN):
                if chars[idx].kind is CharKind.END:
                    raise UnexpectedEof(token.line + 1, source_line(source or "", token.line), token.column)
                idx += 1
            idx += 2

        elif token.kind is CharKind.CHARACTER:
            first = idx
            while chars[idx].kind is CharKind.CHARACTER:
                idx += 1
            text = "".join(char.text for char in chars[first:idx])
            tokens.append(Token(TokenKind.VARIABLE, token.start, chars[idx].start, token.line, token.column, text))

        else:
            if token.kind in PASS_THROUGH:
                tokens.append(Token(PASS_THROUGH[token.kind], token.start, token.end, token.line, token.column,
                                    token.text))
            idx += 1

    return tokens


def tokenize(source):
    """Runs both stages over source. The result always ends with exactly one END token."""
    return group(classify(source), source)
