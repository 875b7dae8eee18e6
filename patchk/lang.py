"""
This module allows you to define the vocabulary of type tags that signatures
are written in. It also handles parsing type tags, type sets, signatures and
whole lists of declarations from text.
"""

from __future__ import annotations

from itertools import groupby
from typing import Any, Iterable, Iterator, NamedTuple, Optional

from patchk.type import TypeTag, TypeSet
from patchk.signature import Signature
from patchk.solver import check_completeness

EMPTY = ("⊥", "_|_")


class Declaration(NamedTuple):
    """
    An interface together with the implementations that were declared for it.
    """
    name: Optional[str]
    interface: Signature
    implementations: list[Signature]

    def check(self, **options) -> set[Signature]:
        return check_completeness(self.interface, self.implementations,
            **options)


class Language(object):
    def __init__(self, scope: dict[str, Any] = {},
            closed: Optional[bool] = None):
        """
        The tags of a language may be given in bulk via a scope. A closed
        language only accepts the tags that were added to it; an open one
        treats any name as a tag. By default, a language is closed exactly
        when a scope was given.
        """
        self.tags: dict[str, TypeTag] = dict()

        if scope:
            self.add_scope(scope)

        self.closed = bool(scope) if closed is None else closed

    def add_scope(self, scope: dict[str, Any]) -> None:
        """
        For convenience, you may add tags in bulk via a dictionary. This allows
        you to simply pass `globals()` or `locals()`. Irrelevant items, and
        tags that have arguments, are filtered out without complaint.
        """
        for v in dict(scope).values():
            if isinstance(v, TypeTag) and v.basic:
                self.add(v)

    def add(self, tag: TypeTag) -> None:
        if not tag.basic:
            raise ValueError(f"Only nullary tags can be added, not {tag}")
        if self.tags.get(tag.name, tag) != tag:
            raise ValueError(f"Tag {tag} already exists in the language")
        self.tags[tag.name] = tag

    def __contains__(self, key: str | TypeTag) -> bool:
        if isinstance(key, str):
            return key in self.tags
        elif isinstance(key, TypeTag):
            return key.name in self.tags and all(
                a in self for a in key.arguments)
        else:
            return False

    def parse_tag(self, value: str | Iterator[str]) -> TypeTag:
        return self._parse(value, self._tag)

    def parse_set(self, value: str | Iterator[str]) -> TypeSet:
        return self._parse(value, self._set)

    def parse_signature(self, value: str | Iterator[str]) -> Signature:
        return self._parse(value, self._signature)

    def parse_declarations(self, text: str | Iterable[str]) \
            -> list[Declaration]:
        """
        Parse declarations, one per line. A line `interface [name] (...)`
        starts a new interface; lines `implementation (...)` or `impl (...)`
        add implementations to the most recent interface. Anything after a
        `#` is a comment.
        """
        lines = text.splitlines() if isinstance(text, str) else text
        result: list[Declaration] = []

        for lineno, line in enumerate(lines, start=1):
            line = line.split("#", 1)[0].strip()
            if not line:
                continue

            keyword, _, rest = line.partition(" ")
            try:
                if keyword == "interface":
                    result.append(self._interface(rest))
                elif keyword in ("implementation", "impl"):
                    if not result:
                        raise ParseError(
                            "Implementation declared before any interface.")
                    result[-1].implementations.append(
                        self.parse_signature(rest))
                else:
                    raise UnexpectedTokenError(keyword)
            except ParseError as e:
                raise DeclarationError(lineno, line) from e

        return result

    def _parse(self, value, parser):
        tokens = Tokens(tokenize(value) if isinstance(value, str) else value)
        result = parser(tokens)
        if isinstance(value, str) and tokens.peek() is not None:
            raise UnexpectedTokenError(tokens.peek())
        return result

    def _interface(self, value: str) -> Declaration:
        # The name is optional and may touch the opening bracket
        tokens = Tokens(tokenize(value))
        name: Optional[str] = None
        token = tokens.peek()
        if token is not None and token != "(":
            if token in "),|" or token in EMPTY:
                raise UnexpectedTokenError(token)
            name = tokens.next()
        signature = self._signature(tokens)
        if tokens.peek() is not None:
            raise UnexpectedTokenError(tokens.peek())
        return Declaration(name, signature, [])

    def _tag(self, tokens: Tokens) -> TypeTag:
        token = tokens.next()
        if token is None:
            raise EmptyParse
        elif token in "(),|" or token in EMPTY:
            raise UnexpectedTokenError(token)

        tag = self.lookup(token)
        if tokens.peek() == "(":
            tokens.next()
            args = [self._tag(tokens)]
            while tokens.peek() == ",":
                tokens.next()
                args.append(self._tag(tokens))
            if tokens.next() != ")":
                raise BracketMismatch(")")
            tag = tag(*args)
        return tag

    def _set(self, tokens: Tokens) -> TypeSet:
        if tokens.peek() in EMPTY:
            tokens.next()
            return TypeSet()
        tags = [self._tag(tokens)]
        while tokens.peek() == "|":
            tokens.next()
            tags.append(self._tag(tokens))
        return TypeSet(tags)

    def _signature(self, tokens: Tokens) -> Signature:
        token = tokens.next()
        if token is None:
            raise EmptyParse
        elif token != "(":
            raise UnexpectedTokenError(token)

        params: list[TypeSet] = []
        if tokens.peek() == ")":
            tokens.next()
            return Signature()
        while True:
            params.append(self._set(tokens))
            token = tokens.next()
            if token == ")":
                return Signature(*params)
            elif token != ",":
                raise BracketMismatch(")")

    def lookup(self, token: str) -> TypeTag:
        try:
            return self.tags[token]
        except KeyError as e:
            if self.closed:
                raise UndefinedTokenError(token) from e
            return TypeTag(token)


class Tokens(object):
    """
    A token stream with a single token of lookahead.
    """

    def __init__(self, tokens: Iterator[str]):
        self.tokens = tokens
        self.lookahead: Optional[str] = None

    def peek(self) -> Optional[str]:
        if self.lookahead is None:
            self.lookahead = next(self.tokens, None)
        return self.lookahead

    def next(self) -> Optional[str]:
        token = self.peek()
        self.lookahead = None
        return token


def tokenize(string: str, specials: str = "(),|") -> Iterator[str]:
    """
    Break up a string into special characters and identifiers (that is, any
    sequence of non-special characters). Skip spaces. The empty set `_|_` is
    kept together.
    """
    string = string.replace("_|_", " ⊥ ")
    for group, tokens in groupby(string,
            lambda x: -2 if x.isspace() else specials.find(x)):
        if group == -1:
            yield "".join(tokens)
        elif group >= 0:
            yield from tokens


# Errors #####################################################################

class ParseError(Exception):
    pass


class BracketMismatch(ParseError):
    def __init__(self, expected: str = ")"):
        self.expected = expected

    def __str__(self) -> str:
        return f"Mismatched bracket; expected '{self.expected}'."


class EmptyParse(ParseError):
    def __str__(self) -> str:
        return "Empty parse."


class UndefinedTokenError(ParseError):
    def __init__(self, token: str):
        self.token = token

    def __str__(self) -> str:
        return f"Type tag '{self.token}' is undefined."


class UnexpectedTokenError(ParseError):
    def __init__(self, token: str):
        self.token = token

    def __str__(self) -> str:
        return f"Unexpected token '{self.token}'."


class DeclarationError(ParseError):
    "Raised when a line of a declaration list could not be parsed."

    def __init__(self, lineno: int, line: str):
        self.lineno = lineno
        self.line = line

    def __str__(self) -> str:
        assert self.__cause__, "must be caused by another error"
        return f"Line {self.lineno}: `{self.line}`\n\t{self.__cause__}"
