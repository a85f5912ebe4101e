r"""Recursive-descent parser for untyped lambda calculus statements.

A source is a series of statements, each terminated by "." (the final one may be terminated by the end of the
source instead):

```
<lines>      ::= (<line> ("." | <end>))*
<line>       ::= <assignment>
               | <expr>
<assignment> ::= <variable> "=" <expr>          ; binds <variable>; falls back to <expr> if incomplete
<expr>       ::= <atom>+                        ; juxtaposition: one flat Sequence, f a b = f applied to a and b
<atom>       ::= "\" <variable>* "." <expr>     ; abstraction bodies are greedy: \x. x y = \x. (x y)
               | <variable>
               | "(" <expr> ")"
```

Every parsing method takes the position of its first token and returns (result, position after the result). Returning
the first position unchanged means the production did not match.
"""

from dataclasses import dataclass
from typing import Optional

from untyped_lambda.lang.error import ParsingError, ParsingFailed
from untyped_lambda.pure.bindings import BindingTable
from untyped_lambda.pure.scanner import TokenKind, source_line, tokenize, decode
from untyped_lambda.pure.term import Lambda, LambdaTerm, Sequence, Variable


@dataclass
class Statement:
    """A parsed statement: a binding if name is set, otherwise an expression to evaluate. line is 1-based."""
    term: LambdaTerm
    name: Optional[str] = None
    line: int = 1
    text: str = ""

    @property
    def is_binding(self):
        return self.name is not None


class Parser:
    """Parses a token stream into statements, binding names into namespace as a side effect."""

    def __init__(self, tokens, namespace, source=""):
        self.tokens = tokens
        self.namespace = namespace
        self.source = decode(source)

    def _error(self, cls, pos):
        token = self.tokens[pos]
        return cls(token.line + 1, source_line(self.source, token.line), token.column)

    def _kind(self, pos):
        return self.tokens[pos].kind

    def lines(self):
        """Parses every statement until the END token."""
        statements = []
        pos = 0
        while self._kind(pos) is not TokenKind.END:
            statement, pos = self.line(pos)
            statements.append(statement)

            if self._kind(pos) is TokenKind.DOT:
                pos += 1
            elif self._kind(pos) is not TokenKind.END:
                raise self._error(ParsingFailed, pos)
        return statements

    def line(self, first):
        """<line> ::= <assignment> | <expr>. Raises ParsingError if neither matches."""
        statement, pos = self.assignment(first)
        if pos == first:
            term, pos = self.expr(first)
            if pos == first:
                raise self._error(ParsingError, first)
            statement = Statement(term)

        statement.line = self.tokens[first].line + 1
        statement.text = self.source[self.tokens[first].start:self.tokens[pos].start].strip()
        return statement, pos

    def assignment(self, first):
        """<assignment> ::= <variable> "=" <expr>. On success the term is also bound in the namespace."""
        if self._kind(first) is not TokenKind.VARIABLE or self._kind(first + 1) is not TokenKind.EQUAL:
            return None, first

        name = self.tokens[first].text
        term, pos = self.expr(first + 2)
        if pos == first + 2:
            return None, first

        self.namespace.bind(name, term)
        return Statement(term, name), pos

    def expr(self, first):
        """<expr> ::= <atom>+. Stops at ".", ")" or the end; any other token fails the whole expr."""
        atoms = []
        pos = first
        while self._kind(pos) not in (TokenKind.DOT, TokenKind.RPAREN, TokenKind.END):
            atom, end = self.atom(pos)
            if end == pos:
                return None, first
            atoms.append(atom)
            pos = end

        if not atoms:
            return None, first
        return (atoms[0] if len(atoms) == 1 else Sequence(atoms)), pos

    def atom(self, first):
        """<atom> ::= <abstraction> | <variable> | "(" <expr> ")"."""
        kind = self._kind(first)
        if kind is TokenKind.LAMBDA:
            return self.abstraction(first)
        elif kind is TokenKind.VARIABLE:
            return self.variable(first)
        elif kind is TokenKind.LPAREN:
            term, pos = self.expr(first + 1)
            if pos == first + 1 or self._kind(pos) is not TokenKind.RPAREN:
                raise self._error(ParsingError, first)
            return term, pos + 1
        return None, first

    def abstraction(self, first):
        """<abstraction> ::= "\" <variable>* "." <expr>. A lambda may have no parameters."""
        pos = first + 1
        params = []
        while self._kind(pos) is TokenKind.VARIABLE:
            params.append(self.tokens[pos].text)
            pos += 1

        if self._kind(pos) is not TokenKind.DOT:
            return None, first

        body, end = self.expr(pos + 1)
        if end == pos + 1:
            return None, first
        return Lambda(params, body), end

    def variable(self, first):
        return Variable(self.tokens[first].text), first + 1


def parse_all(source, namespace=None):
    """Tokenizes and parses every statement in source. Bindings are written into namespace (a fresh BindingTable if
    omitted). Raises UnexpectedEof, ParsingError or ParsingFailed.
    """
    if namespace is None:
        namespace = BindingTable()
    return Parser(tokenize(source), namespace, source).lines()


def parse(source, namespace=None):
    """Parses source that holds a single expression and returns its term."""
    statements = parse_all(source, namespace)
    if len(statements) != 1:
        raise ValueError(f"expected exactly one statement, got {len(statements)}")
    return statements[0].term
