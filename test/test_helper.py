"""
Help rendering tests.

Scope
- Layout: usage line, arguments section, option flags section, column alignment.
- Metavars: required/optional brackets, choice lists, the compact "|..." marker.
- The help.show filter (described / defined / all).
- Colorful rendering through a rich Console.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console

from argparcel import ArgParse, Flag, Positional, Value


class TestLayout(TestCase):
    """Help text layout."""

    def setUp(self):
        self.parser = ArgParse("program.name=tool")
        self.parser.define(Positional("input", "file to read", required=True))
        self.parser.define(Positional("output", "where to write"))
        self.parser.define(Flag("--mode", "-m", "processing mode", Value(required=True, choices=["fast", "safe"])))

    def testFullText(self):
        self.assertEqual(self.parser.help(), "\n".join((
            "usage: tool <input> [<output>]",
            "",
            "arguments:",
            "    <input>     file to read",
            "    [<output>]  where to write",
            "",
            "option flags:",
            "    -h, --help" + " " * 30 + "Show this help.",
            "    -m <fast|safe>, --mode <fast|safe|...>  processing mode",
        )))

    def testExpandedChoices(self):
        parser = ArgParse("program.name=tool,help.compact=false,help.add=false")
        parser.define(Flag("--mode", "-m", "processing mode", Value(required=True, choices=["fast", "safe"])))
        self.assertIn("    -m <fast|safe>, --mode <fast|safe>  processing mode", parser.help())

    def testCompactMarkerKeepsFullChoiceList(self):
        parser = ArgParse("program.name=tool,help.add=false")
        parser.define(Flag("--color", "-c", "palette", Value("auto", choices=["auto", "always", "never"])))
        self.assertIn(
            "    -c [<auto|always|never>], --color [<auto|always|never|...>]  palette",
            parser.help(),
        )

    def testCustomTab(self):
        parser = ArgParse(["program.name=tool", "tab=\t", "help.add=false"])
        parser.define(Flag("--verbose", "-v", "talk more"))
        self.assertIn("\n\t-v, --verbose  talk more", parser.help())

    def testOptionalNamedValue(self):
        parser = ArgParse("program.name=tool,help.add=false")
        parser.define(Flag("--level", "", "compression level", Value("6", name="N")))
        self.assertIn("    --level [<N>]  compression level", parser.help())

    def testUnnamedValueHasNoMetavar(self):
        parser = ArgParse("program.name=tool,help.add=false")
        parser.define(Flag("--level", "", "compression level", Value()))
        self.assertIn("    --level  compression level", parser.help())

    def testFlagWithoutDescription(self):
        parser = ArgParse("program.name=tool,help.add=false,help.show=all")
        parser.define(Flag("--quiet"))
        self.assertTrue(parser.help().endswith("option flags:\n    --quiet"))

    def testUnnamedPositionalsHidden(self):
        parser = ArgParse("program.name=tool,help.add=false")
        parser.define(Positional())
        self.assertEqual(parser.help(), "usage: tool")

    def testProgramFallsBackToArgvZero(self):
        parser = ArgParse("help.add=false")
        parser.parse(["runner"])
        self.assertEqual(parser.help(), "usage: runner")


class TestVisibility(TestCase):
    """The help.show filter."""

    def build(self, mode):
        parser = ArgParse(f"program.name=tool,help.add=false,help.show={mode}")
        parser.define(Flag("--described", "", "has a description"))
        parser.define(Flag("--silent"))
        parser.parse(["tool", "--extra"])
        return parser.help()

    def testDescribedOnly(self):
        help = self.build("described")
        self.assertIn("--described", help)
        self.assertNotIn("--silent", help)
        self.assertNotIn("--extra", help)

    def testDefinedOnly(self):
        help = self.build("defined")
        self.assertIn("--described", help)
        self.assertIn("--silent", help)
        self.assertNotIn("--extra", help)

    def testAll(self):
        help = self.build("all")
        self.assertIn("--extra", help)

    def testDefinitionOrder(self):
        help = self.build("all")
        self.assertLess(help.index("--described"), help.index("--silent"))
        self.assertLess(help.index("--silent"), help.index("--extra"))


class TestPrintHelp(TestCase):
    """Rendering through a rich Console."""

    def testPrintHelp(self):
        parser = ArgParse("program.name=tool")
        parser.define(Positional("input", "file to read", required=True))
        console = Console(file=io.StringIO(), width=120, color_system=None)
        parser.print_help(console)
        output = console.file.getvalue()
        self.assertIn("usage: tool <input>", output)
        self.assertIn("-h, --help", output)


if __name__ == "__main__":
    unittest.main()
