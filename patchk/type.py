"""
The type values over which completeness is checked. A type tag is an opaque,
already resolved type identity: a name with some tag arguments. Tags are
collected into type sets, one for every parameter position of a signature.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Set
from itertools import chain
from typing import Iterable, Iterator


class Type(ABC):
    """
    The base class for anything that can be written at a parameter position:
    a single tag or an alternation of tags.
    """

    def __repr__(self) -> str:
        return str(self)

    def __str__(self) -> str:
        return self.text()

    def __or__(self, other: Type) -> TypeUnion:
        """
        Alternation. This is an overloaded (ab)use of Python's bitwise or
        operator, so that `A | B | C` can be written for the union of three
        tags.
        """
        if not isinstance(other, Type):
            return NotImplemented
        return TypeUnion(self, other)

    @abstractmethod
    def tags(self) -> Iterator[TypeTag]:
        """
        Iterate through the tags this type stands for.
        """
        return NotImplemented

    @abstractmethod
    def text(self, sep: str = ", ", lparen: str = "(", rparen: str = ")",
            alt: str = " | ") -> str:
        return NotImplemented


class TypeTag(Type):
    """
    An atomic or parametric type identity. Two tags are the same if their
    names are the same and their arguments are pairwise the same; there is no
    other relation between tags.
    """

    __slots__ = ("name", "arguments", "_hash")

    def __init__(self, name: str, *arguments: TypeTag):
        if not isinstance(name, str) or not name:
            raise TypeTagError(f"A type tag needs a name, not {name!r}.")
        for arg in arguments:
            if not isinstance(arg, TypeTag):
                raise TypeTagError(
                    f"Argument {arg!r} of tag {name} is not a type tag.")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "arguments", tuple(arguments))
        object.__setattr__(self, "_hash", hash((name,) + self.arguments))

    def __setattr__(self, key, value) -> None:
        raise AttributeError(f"Type tag {self} is immutable.")

    def __eq__(self, other: object) -> bool:
        return self is other or (isinstance(other, TypeTag)
            and self._hash == other._hash
            and self.name == other.name
            and self.arguments == other.arguments)

    def __hash__(self) -> int:
        return self._hash

    def __call__(self, *arguments: TypeTag) -> TypeTag:
        """
        Calling a nullary tag applies it to arguments, so that a tag can
        double as the constructor for its parametric versions:

            >>> List = TypeTag("List")
            >>> List(TypeTag("Int"))
            List(Int)
        """
        if self.arguments:
            raise TypeTagError(
                f"Cannot apply tag {self}; it already has arguments.")
        return TypeTag(self.name, *arguments)

    @property
    def basic(self) -> bool:
        return not self.arguments

    def nesting(self) -> int:
        """
        The maximum nesting level of tag arguments.
        """
        return max(a.nesting() for a in self.arguments) + 1 \
            if self.arguments else 0

    def tags(self) -> Iterator[TypeTag]:
        yield self

    def text(self, sep: str = ", ", lparen: str = "(", rparen: str = ")",
            alt: str = " | ") -> str:
        if self.arguments:
            args = sep.join(a.text(sep, lparen, rparen, alt)
                for a in self.arguments)
            return f"{self.name}{lparen}{args}{rparen}"
        else:
            return self.name


class TypeUnion(Type):
    """
    An alternation of tags, as in `A | B(C)`. Unions only exist to make
    writing type sets convenient: a type set flattens them into their members
    on insertion, so that set algebra never needs to look inside a union.
    """

    def __init__(self, *types: Type):
        members: dict[TypeTag, None] = dict()
        for t in types:
            if not isinstance(t, Type):
                raise TypeTagError(f"{t!r} is not a type.")
            members.update((tag, None) for tag in t.tags())
        self.members: tuple[TypeTag, ...] = tuple(members)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TypeUnion) and \
            set(self.members) == set(other.members)

    def __hash__(self) -> int:
        return hash(frozenset(self.members))

    def __len__(self) -> int:
        return len(self.members)

    def tags(self) -> Iterator[TypeTag]:
        return iter(self.members)

    def text(self, sep: str = ", ", lparen: str = "(", rparen: str = ")",
            alt: str = " | ") -> str:
        if not self.members:
            return "⊥"
        return alt.join(m.text(sep, lparen, rparen, alt)
            for m in self.members)


class TypeSet(Set):
    """
    The set of tags accepted at one parameter position. A type set is a value:
    it is never changed after construction, and operations that would change
    it return a new set instead. An empty type set accepts nothing.
    """

    __slots__ = ("_elements", "_digest")

    def __init__(self, types: Iterable[Type] = ()):
        self._elements: frozenset[TypeTag] = frozenset(chain.from_iterable(
            _tags(t) for t in types))
        self._digest: int | None = None

    @classmethod
    def _from_tags(cls, elements: Iterable[TypeTag]) -> TypeSet:
        # Results of set algebra on type sets contain nothing but tags, so
        # they can skip flattening.
        result = cls.__new__(cls)
        result._elements = frozenset(elements)
        result._digest = None
        return result

    def __contains__(self, value: object) -> bool:
        return value in self._elements

    def __iter__(self) -> Iterator[TypeTag]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TypeSet):
            return self._elements == other._elements
        return super().__eq__(other)

    def __hash__(self) -> int:
        if self._digest is None:
            self._digest = hash(self._elements)
        return self._digest

    def __repr__(self) -> str:
        return self.text()

    def __str__(self) -> str:
        return self.text()

    @property
    def is_empty(self) -> bool:
        return not self._elements

    def contains(self, tag: TypeTag) -> bool:
        return tag in self._elements

    def intersects(self, other: TypeSet) -> bool:
        """
        Test whether some tag occurs in both sets, without computing the
        intersection.
        """
        return not self._elements.isdisjoint(other._elements)

    def intersection(self, other: TypeSet) -> TypeSet:
        return TypeSet._from_tags(self._elements & other._elements)

    def difference(self, other: TypeSet) -> TypeSet:
        """
        Return the set of tags in this set that do not occur in the other.
        """
        return TypeSet._from_tags(self._elements - other._elements)

    def union(self, other: TypeSet) -> TypeSet:
        return TypeSet._from_tags(self._elements | other._elements)

    def insert(self, new: Type) -> TypeSet:
        """
        Return a copy of this set that also contains the given tag, or every
        member of the given union.
        """
        return TypeSet._from_tags(self._elements.union(_tags(new)))

    def text(self, sep: str = ", ", lparen: str = "(", rparen: str = ")",
            alt: str = " | ") -> str:
        if not self._elements:
            return "⊥"
        return alt.join(sorted(t.text(sep, lparen, rparen, alt)
            for t in self._elements))


def _tags(value: object) -> Iterator[TypeTag]:
    if not isinstance(value, Type):
        raise TypeTagError(f"{value!r} is not a type.")
    return value.tags()


# Errors #####################################################################

class TypingError(Exception):
    "There is an issue with the types of a completeness check."


class TypeTagError(TypingError):
    """
    Raised when a type tag, union or set is built from something that is not
    a type.
    """
