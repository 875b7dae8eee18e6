import unittest

from io import StringIO
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock
from contextlib import redirect_stdout
from rdflib import Graph

from patchk.namespace import PCK
from patchk.util.cli import CLI

DECLARATIONS = """
interface show (Int | Str)
implementation (Int)
implementation (Str)

interface add (Int | Real, Int | Real)
impl (Int, Int)
impl (Real, Int | Real)
"""


class TestCLI(unittest.TestCase):

    def run_cli(self, *args: str) -> tuple[int, str, str]:
        out, err = StringIO(), StringIO()
        # The driver writes errors to the stream it imported from `sys`
        with redirect_stdout(out), \
                mock.patch("patchk.util.cli.stderr", err):
            _, retcode = CLI.run(["patchk", *args], exit=False)
        return retcode, out.getvalue(), err.getvalue()

    def test_complete(self):
        code, out, _ = self.run_cli("check", "-i", "(A | B)",
            "-m", "(A)", "-m", "(B)")
        self.assertEqual(code, 0)
        self.assertEqual(out, "(A | B): complete\n")

    def test_incomplete(self):
        code, out, _ = self.run_cli("check", "-i", "(A | B, A | B)",
            "-m", "(A, A | B)")
        self.assertEqual(code, 1)
        self.assertEqual(out, "(A | B, A | B): incomplete\n\t(B, A | B)\n")

    def test_file(self):
        with TemporaryDirectory() as d:
            path = Path(d) / "decls.txt"
            path.write_text(DECLARATIONS, encoding="utf-8")
            code, out, _ = self.run_cli("check", str(path))

        self.assertEqual(code, 1)
        self.assertEqual(out.splitlines(), [
            "show (Int | Str): complete",
            "add (Int | Real, Int | Real): incomplete",
            "\t(Int, Real)",
        ])

    def test_rdf_output(self):
        with TemporaryDirectory() as d:
            path = Path(d) / "out.ttl"
            code, _, _ = self.run_cli("check", "-t", "ttl", "-o", str(path),
                "-i", "(A | B)", "-m", "(A)")
            g = Graph()
            g.parse(path, format="ttl")

        self.assertEqual(code, 1)
        self.assertEqual(len(set(g.subjects(None, PCK.Check))), 1)
        self.assertEqual(len(set(g.objects(None, PCK.leaf))), 1)

    def test_parse_error(self):
        code, _, err = self.run_cli("check", "-i", "(A | B")
        self.assertEqual(code, 2)
        self.assertIn("Mismatched bracket", err)

    def test_arity_error(self):
        code, _, err = self.run_cli("check", "-i", "(A, B)", "-m", "(A)")
        self.assertEqual(code, 2)
        self.assertIn("takes 2 parameters", err)

    def test_budget_exceeded(self):
        code, _, err = self.run_cli("check", "--max-rounds", "1",
            "-i", "(A | B, A | B)", "-m", "(A, A)")
        self.assertEqual(code, 2)
        self.assertIn("Gave up", err)

    def test_missing_input(self):
        code, _, err = self.run_cli("check")
        self.assertEqual(code, 2)
        self.assertIn("missing", err)


if __name__ == '__main__':
    unittest.main()
