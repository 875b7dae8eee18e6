"""
Decide whether the implementations of an interface together accept every
combination of arguments that the interface accepts.

The region of the interface is decomposed step by step. Every signature on
the frontier is compared to each implementation; what an implementation does
not cover is split into smaller signatures that become the next frontier.
Signatures that no implementation overlaps with at all are the leaves: the
argument combinations that are left unimplemented.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import Iterable, Iterator, Optional, Sequence, TypeVar

from patchk.type import TypingError
from patchk.signature import Signature

logger = logging.getLogger(__name__)

T = TypeVar('T')


def powerset(items: Sequence[T]) -> Iterator[tuple[T, ...]]:
    """
    Generate all subsets of the given items, including the empty one, from
    small to large.
    """
    for n in range(len(items) + 1):
        yield from combinations(items, n)


class CompletenessSolver(object):
    """
    Checks interfaces against a fixed list of implementations.

    With `strict` unset, a residual signature that unexpectedly turns out
    uninhabited does not raise an error; instead, the signature it was derived
    from is reported as a leaf, since it is safer to report a region too many
    than to drop one. With `max_rounds` set, the analysis is abandoned after
    that many rounds of decomposition.
    """

    def __init__(self, implementations: Iterable[Signature],
            max_rounds: Optional[int] = None,
            strict: bool = True):
        self.implementations: list[Signature] = list(implementations)
        self.max_rounds = max_rounds
        self.strict = strict
        self.rounds = 0

        if max_rounds is not None and max_rounds < 1:
            raise ValueError("The number of rounds must be positive.")

    def solve(self, interface: Signature) -> set[Signature]:
        """
        Return the signatures that are accepted by the interface but not by
        any implementation. An empty result means that the interface is
        completely implemented.
        """
        for i in self.implementations:
            interface.check_arity(i)

        self.rounds = 0
        if not interface.is_inhabited:
            return set()

        frontier: set[Signature] = {interface}
        visited: set[Signature] = {interface}
        leaves: set[Signature] = set()

        while frontier:
            if self.max_rounds is not None and self.rounds >= self.max_rounds:
                raise AnalysisBudgetExceeded(interface, self.rounds, leaves,
                    frontier)

            self.rounds += 1
            logger.debug("Round %d of %s: %d signatures on the frontier, "
                "%d leaves", self.rounds, interface, len(frontier),
                len(leaves))

            successors: set[Signature] = set()
            for s in frontier:
                complete, new_successors = self.step(s, visited)
                if complete:
                    continue
                elif new_successors:
                    successors.update(new_successors)
                else:
                    leaves.add(s)

            frontier = successors - visited
            visited.update(successors)

        logger.debug("Checked %s in %d rounds: %d leaves", interface,
            self.rounds, len(leaves))
        return leaves

    def step(self, s: Signature, visited: set[Signature]) \
            -> tuple[bool, set[Signature]]:
        """
        Decompose a single signature against every implementation. Return
        whether it is completely implemented, and otherwise the signatures
        that remain to be checked. If there are none, no implementation
        overlaps with the signature at all.
        """
        successors: set[Signature] = set()

        for i in self.implementations:
            if s == i:
                return True, set()

            if not s.overlaps(i):
                continue
            matched = s.intersection(i)

            # The positions at which `i` fails to accept some tag of `s`
            deficient = s.positional_difference(i)
            positions = [k for k, p in enumerate(deficient) if not p.is_empty]

            # Every part of `s` that is not covered by `i` deviates from `i`
            # at some nonempty subset of the deficient positions
            candidates: set[Signature] = set()
            for variant in powerset(positions):
                if not variant:
                    continue

                t = matched.substitute(variant, deficient)
                if not t.is_inhabited:
                    if self.strict:
                        raise InvariantViolation(s, i, t)
                    logger.warning("Uninhabited residual %s of %s under %s; "
                        "reporting %s as unimplemented", t, s, i, s)
                    return False, set()

                if t not in visited:
                    candidates.add(t)

            if not candidates:
                return True, set()
            successors.update(candidates)

        return False, successors


def check_completeness(interface: Signature,
        implementations: Iterable[Signature],
        **options) -> set[Signature]:
    """
    Return the set of signatures that are accepted by the interface, but that
    are not accepted by any of the implementations. The options are passed to
    `CompletenessSolver`.
    """
    return CompletenessSolver(implementations, **options).solve(interface)


# Errors #####################################################################

class SolverError(TypingError):
    "Raised when a completeness check could not be completed."


class InvariantViolation(SolverError):
    """
    Raised when decomposing a signature produces an uninhabited residual. This
    indicates a bug in the signature algebra.
    """

    def __init__(self, signature: Signature, implementation: Signature,
            residual: Signature):
        self.signature = signature
        self.implementation = implementation
        self.residual = residual

    def __str__(self) -> str:
        return (
            f"Decomposing {self.signature} under {self.implementation} "
            f"produced the uninhabited signature {self.residual}."
        )


class AnalysisBudgetExceeded(SolverError):
    """
    Raised when a check takes more rounds than allowed. The leaves found so
    far and the signatures that were still to be checked are kept, so that
    the caller may report them.
    """

    def __init__(self, interface: Signature, rounds: int,
            leaves: set[Signature], frontier: set[Signature]):
        self.interface = interface
        self.rounds = rounds
        self.leaves = set(leaves)
        self.frontier = set(frontier)

    def __str__(self) -> str:
        return (
            f"Gave up checking {self.interface} after {self.rounds} "
            f"round{'' if self.rounds == 1 else 's'}, with "
            f"{len(self.frontier)} signatures left to check."
        )
