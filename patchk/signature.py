"""
A signature is what the declaration of an interface or of an implementation
expresses: for every parameter position, the set of type tags it accepts.
Together, these describe a region of argument tuples, namely the cartesian
product of its type sets.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Iterable, Iterator, overload

from patchk.type import Type, TypeSet, TypingError


class Signature(Sequence):
    """
    An ordered sequence of type sets, one per parameter. Signatures are values:
    operations on them produce new signatures and never modify the operands.
    """

    __slots__ = ("parameters", "_hash")

    def __init__(self, *parameters: TypeSet | Type | Iterable[Type]):
        self.parameters: tuple[TypeSet, ...] = tuple(
            p if isinstance(p, TypeSet) else
            TypeSet((p,)) if isinstance(p, Type) else TypeSet(p)
            for p in parameters)
        self._hash = hash(self.parameters)

    @overload
    def __getitem__(self, index: int) -> TypeSet: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[TypeSet, ...]: ...

    def __getitem__(self, index):
        return self.parameters[index]

    def __len__(self) -> int:
        return len(self.parameters)

    def __iter__(self) -> Iterator[TypeSet]:
        return iter(self.parameters)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Signature) and \
            self._hash == other._hash and self.parameters == other.parameters

    def __hash__(self) -> int:
        return self._hash

    def __repr__(self) -> str:
        return str(self)

    def __str__(self) -> str:
        return self.text()

    @property
    def arity(self) -> int:
        return len(self.parameters)

    @property
    def is_inhabited(self) -> bool:
        """
        Whether there exists a sequence of arguments that matches this
        signature, that is, whether no position is empty.
        """
        return all(not p.is_empty for p in self.parameters)

    @property
    def is_partially_inhabited(self) -> bool:
        """
        Whether at least one position accepts some tag. This does not mean
        that any argument tuple matches; it is only of interest for reporting.
        """
        return any(not p.is_empty for p in self.parameters)

    def check_arity(self, other: Signature) -> None:
        if len(self.parameters) != len(other.parameters):
            raise ArityMismatch(self, other)

    def overlaps(self, other: Signature) -> bool:
        """
        Whether some sequence of arguments matches both signatures.
        """
        self.check_arity(other)
        for p, q in zip(self.parameters, other.parameters):
            if not p.intersects(q):
                return False
        return True

    def intersection(self, other: Signature) -> Signature:
        """
        The signature matching those arguments matched by both signatures.
        """
        self.check_arity(other)
        return Signature(*(p.intersection(q)
            for p, q in zip(self.parameters, other.parameters)))

    def positional_difference(self, other: Signature) -> Signature:
        """
        Subtract the other signature at every position independently. Note
        that the result is not the region accepted by this signature and
        rejected by the other: it contains, per position, the tags that the
        other signature fails to accept.
        """
        self.check_arity(other)
        return Signature(*(p.difference(q)
            for p, q in zip(self.parameters, other.parameters)))

    def substitute(self, positions: Iterable[int], other: Signature) \
            -> Signature:
        """
        Return a copy of this signature in which the type sets at the given
        positions are taken from the other signature.
        """
        self.check_arity(other)
        params = list(self.parameters)
        for k in positions:
            params[k] = other.parameters[k]
        return Signature(*params)

    def is_satisfied_by(self, implementations: Iterable[Signature],
            **options) -> set[Signature]:
        """
        Return the parts of this signature that none of the given
        implementations accept. See `patchk.solver.check_completeness`.
        """
        from patchk.solver import check_completeness
        return check_completeness(self, implementations, **options)

    def text(self, sep: str = ", ", lparen: str = "(", rparen: str = ")",
            alt: str = " | ") -> str:
        return lparen + sep.join(p.text(sep, lparen, rparen, alt)
            for p in self.parameters) + rparen


# Errors #####################################################################

class ArityMismatch(TypingError):
    """
    Raised when two signatures with a different number of parameters are
    combined. This is a mistake on the part of the caller.
    """

    def __init__(self, left: Signature, right: Signature):
        self.left = left
        self.right = right

    def __str__(self) -> str:
        return (
            f"Signature {self.left} takes {self.left.arity} "
            f"parameter{'' if self.left.arity == 1 else 's'}, "
            f"but {self.right} takes {self.right.arity}."
        )
