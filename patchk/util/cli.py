"""
Command-line interface for checking the completeness of declarations.
"""

from __future__ import annotations

import sys
import logging
from sys import stderr
from pathlib import Path

from plumbum import cli  # type: ignore
from patchk.lang import Language, Declaration, ParseError
from patchk.signature import Signature
from patchk.type import TypingError
from patchk.graph import CoverageGraph

logger = logging.getLogger(__name__)

caught_errors = (ParseError, TypingError)


class WithOutput:
    output_path = cli.SwitchAttr(["-o", "--output"],
        help="file which to write to; standard output if absent")
    output_format = cli.SwitchAttr(["-t", "--to"],
        cli.Set("text", "ttl", "xml", "nt", "json-ld", "trig"),
        default="text")

    def write(self, result: str) -> None:
        """
        Convenience method to write the result to the given file.
        """
        if self.output_path:
            with open(self.output_path, 'w', encoding="utf-8") as f:
                f.write(result)
        else:
            print(result, end="" if result.endswith("\n") else "\n")


class CLI(cli.Application):
    """
    A utility to check that the implementations of multiple-dispatch
    interfaces together handle every combination of argument types
    """

    PROGNAME = "patchk"

    verbose = cli.Flag(["-v", "--verbose"], default=False,
        help="Log the progress of the analysis")

    def main(self, *args):
        logging.basicConfig(
            level=logging.DEBUG if self.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s")

        if args:
            print(f"Unknown command {args[0]}", file=stderr)
            return 1
        if not self.nested_command:
            self.help()
            return 1


@CLI.subcommand("check")
class CompletenessChecker(cli.Application, WithOutput):
    """
    Check declarations for completeness. Declarations are read from files, one
    per line: `interface [name] (A | B, C)` introduces an interface and
    `implementation (A, C)` adds an implementation to it. The exit status is 1
    if some interface is incomplete.
    """

    interface = cli.SwitchAttr(["-i", "--interface"],
        help="Provide an interface signature to check.")
    implementations = cli.SwitchAttr(["-m", "--implementation"], list=True,
        requires=["-i"],
        help="Provide an implementation signature for the interface.")
    max_rounds = cli.SwitchAttr(["--max-rounds"], cli.Range(1, sys.maxsize),
        default=None,
        help="Give up after this many rounds of decomposition")
    lenient = cli.Flag(["--lenient"], default=False,
        help="Report internal inconsistencies as unimplemented signatures "
        "instead of failing")

    def declarations(self, *paths: str) -> list[Declaration]:
        language = Language()
        result: list[Declaration] = []

        if self.interface:
            result.append(Declaration(None,
                language.parse_signature(self.interface),
                [language.parse_signature(m)
                    for m in self.implementations or ()]))

        for path in paths:
            logger.debug("Reading declarations from %s", path)
            result.extend(language.parse_declarations(
                Path(path).read_text(encoding="utf-8")))

        return result

    def main(self, *DECLARATION_FILE) -> int:
        if not (DECLARATION_FILE or self.interface):
            print("Error: missing interface or declaration file", file=stderr)
            return 2

        try:
            declarations = self.declarations(*DECLARATION_FILE)
        except (ParseError, OSError) as e:
            print(f"Error:\n\t{e}", file=stderr)
            return 2

        results: list[tuple[Declaration, set[Signature]]] = []
        for decl in declarations:
            try:
                leaves = decl.check(max_rounds=self.max_rounds,
                    strict=not self.lenient)
            except caught_errors as e:
                print(f"Error in {decl.name or decl.interface}:\n\t{e}",
                    file=stderr)
                return 2
            results.append((decl, leaves))

        if self.output_format == "text":
            self.write(report(results))
        else:
            g = CoverageGraph()
            for decl, leaves in results:
                g.add_check(decl.interface, decl.implementations, leaves,
                    name=decl.name)
            self.write(g.write(self.output_format))

        return 0 if all(not leaves for _, leaves in results) else 1


def report(results: list[tuple[Declaration, set[Signature]]]) -> str:
    """
    Describe the outcome of checks in plain text.
    """
    lines: list[str] = []
    for decl, leaves in results:
        label = f"{decl.name} {decl.interface}" if decl.name \
            else str(decl.interface)
        if leaves:
            lines.append(f"{label}: incomplete")
            lines.extend(f"\t{text}" for text in
                sorted(leaf.text() for leaf in leaves))
        else:
            lines.append(f"{label}: complete")
    return "\n".join(lines) + "\n" if lines else ""


def main():
    CLI.run()


if __name__ == '__main__':
    main()
