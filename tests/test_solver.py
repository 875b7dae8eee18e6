"""
Tests for the completeness check. The leaves that come out of a check are
compared to the argument tuples that are really left uncovered, which can be
enumerated for the small signatures used here.
"""

import unittest
from unittest import mock

from .testcase import TestCase, arguments  # type: ignore

from patchk.type import TypeTag
from patchk.signature import Signature, ArityMismatch
from patchk.solver import CompletenessSolver, check_completeness, \
    powerset, InvariantViolation, AnalysisBudgetExceeded

A, B, C = TypeTag('A'), TypeTag('B'), TypeTag('C')
F = TypeTag('F')


class TestPowerset(unittest.TestCase):

    def test_powerset(self):
        self.assertEqual(list(powerset([1, 2])), [(), (1,), (2,), (1, 2)])
        self.assertEqual(list(powerset([])), [()])
        self.assertEqual(len(list(powerset(range(4)))), 16)


class TestCompleteness(TestCase):

    def check(self, interface: Signature, *implementations: Signature,
            **options) -> set[Signature]:
        leaves = check_completeness(interface, implementations, **options)
        self.assertUncovered(leaves, interface, list(implementations))
        return leaves

    def test_trivially_complete(self):
        # An interface is satisfied by an implementation with the same
        # signature
        for s in (Signature(A, B), Signature(A | B, C), Signature(F(A)),
                Signature()):
            with self.subTest(signature=s):
                self.assertEqual(check_completeness(s, [s]), set())

    def test_enumeration(self):
        leaves = self.check(Signature(A | B, A | B),
            Signature(A, A), Signature(A, B),
            Signature(B, A), Signature(B, B))
        self.assertEqual(leaves, set())

    def test_partial_match(self):
        # Each implementation covers the first position completely, but the
        # second position only partially
        leaves = self.check(Signature(A | B, A | B),
            Signature(A | B, A), Signature(A | B, B))
        self.assertEqual(leaves, set())

    def test_trivially_incomplete(self):
        leaves = self.check(Signature(A | B, A | B),
            Signature(A, A), Signature(A, B), Signature(B, A))
        self.assertEqual(leaves, {Signature(B, B)})

    def test_parameter_dependency_tracking(self):
        # Taking the union of what the implementations accept at every
        # position independently would suggest that this is complete
        leaves = self.check(Signature(A | B | C, A | B | C),
            Signature(A, A | B), Signature(A | B, A), Signature(C, C))
        self.assertTrue(leaves)

    def test_no_implementations(self):
        s = Signature(A | B, C)
        self.assertEqual(check_completeness(s, []), {s})

    def test_disjoint_implementation(self):
        s = Signature(A, B)
        self.assertEqual(check_completeness(s, [Signature(B, A)]), {s})

    def test_implementation_wider_than_interface(self):
        leaves = self.check(Signature(A, B), Signature(A | B | C, A | B))
        self.assertEqual(leaves, set())

    def test_three_parameters(self):
        leaves = self.check(Signature(A | B, A | B, A | B),
            Signature(A, A, A | B), Signature(A | B, A, A))
        self.assertTrue(leaves)

        leaves = self.check(Signature(A | B, A | B, A | B),
            Signature(A, A | B, A | B), Signature(B, A, A | B),
            Signature(B, B, A), Signature(B, B, B))
        self.assertEqual(leaves, set())

    def test_parametric_tags(self):
        leaves = self.check(Signature(F(A) | F(B), A),
            Signature(F(A), A))
        self.assertEqual(leaves, {Signature(F(B), A)})

    def test_uninhabited_interface(self):
        self.assertEqual(check_completeness(Signature(A, []), []), set())

    def test_monotonicity(self):
        # Adding implementations never makes more arguments uncovered
        interface = Signature(A | B | C, A | B | C)
        implementations = [Signature(A, A | B), Signature(A | B, A),
            Signature(C, C), Signature(B | C, B), Signature(B, C),
            Signature(C, A), Signature(A, C)]
        previous = self.check(interface)
        for n in range(1, len(implementations) + 1):
            with self.subTest(implementations=n):
                current = self.check(interface, *implementations[:n])
                self.assertLessEqual(arguments(current), arguments(previous))
                previous = current
        self.assertEqual(previous, set())

    def test_arity_mismatch(self):
        # An implementation with the wrong number of parameters is an error,
        # even if it could never match anyway
        self.assertRaises(ArityMismatch, check_completeness,
            Signature(A, B), [Signature(A, B), Signature(C)])
        self.assertRaises(ArityMismatch, check_completeness,
            Signature(A, B), [Signature(A, B, C), Signature(A, B)])

    def test_satisfied_by(self):
        s = Signature(A | B)
        self.assertEqual(s.is_satisfied_by([Signature(A)]), {Signature(B)})


class TestSolver(TestCase):

    def test_budget(self):
        solver = CompletenessSolver([Signature(A, A)], max_rounds=1)
        with self.assertRaises(AnalysisBudgetExceeded) as cm:
            solver.solve(Signature(A | B, A | B))
        self.assertEqual(cm.exception.rounds, 1)
        self.assertEqual(cm.exception.leaves, set())
        self.assertEqual(cm.exception.frontier, {Signature(B, A),
            Signature(A, B), Signature(B, B)})

    def test_budget_sufficient(self):
        solver = CompletenessSolver([Signature(A, A)], max_rounds=2)
        leaves = solver.solve(Signature(A | B, A | B))
        self.assertEqual(solver.rounds, 2)
        self.assertUncovered(leaves, Signature(A | B, A | B),
            [Signature(A, A)])

    def test_invalid_budget(self):
        self.assertRaises(ValueError, CompletenessSolver, [], max_rounds=0)

    def test_disjointness_decided_by_overlap(self):
        # Implementations that do not overlap are skipped before any algebra
        # is done on them
        interface = Signature(A | B, A)
        with mock.patch.object(Signature, 'overlaps',
                return_value=False) as overlaps, \
                mock.patch.object(Signature, 'intersection') as intersection:
            leaves = check_completeness(interface, [Signature(A, A)])
        overlaps.assert_called()
        intersection.assert_not_called()
        self.assertEqual(leaves, {interface})

    def test_invariant_violation(self):
        # Simulate a broken signature algebra, in which an inhabited
        # signature becomes uninhabited after substitution
        interface = Signature(A | B, A)
        implementation = Signature(A, A)
        broken = Signature(A, [])

        with mock.patch.object(Signature, 'substitute', return_value=broken):
            self.assertRaises(InvariantViolation, check_completeness,
                interface, [implementation])

            # When not strict, the signature is conservatively reported
            with self.assertLogs('patchk.solver', level='WARNING'):
                leaves = check_completeness(interface, [implementation],
                    strict=False)
            self.assertEqual(leaves, {interface})


if __name__ == '__main__':
    unittest.main()
