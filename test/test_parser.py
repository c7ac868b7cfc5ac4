"""
Parser behavioral tests.

Scope
- Argument vector guards (empty vector, argument count).
- Positional binding, synthesized slots and required positionals.
- Long and short flags, inline and separate values, lookahead, clusters.
- Fault accumulation policy: every parse starts clean.
- Queries (check, check_and_read, indexing, counts), callbacks and reporting.

Conventions
- Test method names follow CamelCase per project convention.
- Every vector starts with the program name, as sys.argv does.
"""
import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from argparcel import (
    ArgParse, Counts, ErrorCode, Flag, ParseError, ParseExit, Positional,
    Subject, Tally, Value, WRONG_ARG, WRONG_FLAG,
)


class TestVectorGuards(TestCase):
    """Checks performed before any token is read."""

    def setUp(self):
        self.parser = ArgParse()
        self.input = self.parser.define(Positional("input"))

    def assertSingleError(self, code):
        self.assertEqual(len(self.parser.errors), 1)
        self.assertIs(self.parser.errors[0].code, code)

    def testEmptyVector(self):
        self.assertFalse(self.parser.parse([]))
        self.assertSingleError(ErrorCode.ARGV_EMPTY)
        self.assertFalse(self.input.is_set)

    def testNoneVector(self):
        self.assertFalse(self.parser.parse(None))
        self.assertSingleError(ErrorCode.ARGV_EMPTY)

    def testMissingProgramName(self):
        self.assertFalse(self.parser.parse([""]))
        self.assertSingleError(ErrorCode.ARGV_EMPTY)

    def testEmptyVectorMutatesNothing(self):
        self.parser.parse(["tool", "data.bin", "--verbose"])
        self.parser.parse([])
        self.assertEqual(self.input.text, "data.bin")
        self.assertTrue(self.parser.check("--verbose"))

    def testArgcExceedsVector(self):
        self.assertFalse(self.parser.parse(["tool", "a"], argc=3))
        self.assertSingleError(ErrorCode.ARGC_EXCEEDS_ARGV)

    def testArgcZero(self):
        self.assertFalse(self.parser.parse(["tool", "a"], argc=0))
        self.assertSingleError(ErrorCode.ARGV_EMPTY)

    def testArgcTruncates(self):
        self.assertTrue(self.parser.parse(["tool", "a", "b"], argc=2))
        self.assertEqual(len(self.parser.positionals), 1)
        self.assertEqual(self.input.text, "a")

    def testArgcValidation(self):
        with self.assertRaises(TypeError):
            self.parser.parse(["tool"], argc="1")
        with self.assertRaises(ValueError):
            self.parser.parse(["tool"], argc=-1)

    def testNonStringTokenRejected(self):
        with self.assertRaises(TypeError):
            self.parser.parse(["tool", 3])
        with self.assertRaises(TypeError):
            self.parser.parse(3)

    def testShellString(self):
        self.assertTrue(self.parser.parse("tool 'my file.txt'"))
        self.assertEqual(self.input.text, "my file.txt")

    def testDefaultsToSysArgv(self):
        with mock.patch("sys.argv", ["runner", "data.bin"]):
            self.assertTrue(self.parser.parse())
        self.assertEqual(self.parser.program, "runner")
        self.assertEqual(self.input.text, "data.bin")


class TestPositionals(TestCase):
    """Positional binding."""

    def setUp(self):
        self.parser = ArgParse()
        self.first = self.parser.define(Positional("first", required=True))
        self.second = self.parser.define(Positional("second"))

    def testOrderingAndSynthesis(self):
        self.assertTrue(self.parser.parse(["tool", "posA", "posB", "posC"]))
        self.assertEqual(self.first.text, "posA")
        self.assertEqual(self.second.text, "posB")
        self.assertEqual(len(self.parser.positionals), 3)
        extra = self.parser[2]
        self.assertEqual(extra.text, "posC")
        self.assertFalse(extra.is_user_defined)

    def testRequiredMissing(self):
        self.assertFalse(self.parser.parse(["tool"]))
        self.assertEqual(len(self.parser.errors), 1)
        error = self.parser.errors[0]
        self.assertIs(error.code, ErrorCode.REQUIRED_ARGUMENT_MISSING)
        self.assertEqual(error.subject, Subject.arg(0))
        self.assertIs(self.parser.resolve(error.subject), self.first)
        self.assertIn("<first>", error.message)
        self.assertIn("first position", error.message)

    def testEveryMissingRequiredReported(self):
        parser = ArgParse()
        parser.define(Positional("a", required=True))
        parser.define(Positional("b", required=True))
        self.assertFalse(parser.parse(["tool"]))
        self.assertEqual([error.subject for error in parser.errors], [Subject.arg(0), Subject.arg(1)])

    def testOptionalMayBeOmitted(self):
        self.assertTrue(self.parser.parse(["tool", "posA"]))
        self.assertFalse(self.second.is_set)

    def testEmptyTokenIsPositional(self):
        self.assertTrue(self.parser.parse(["tool", ""]))
        self.assertTrue(self.first.is_set)
        self.assertEqual(self.first.text, "")

    def testDashesArePositional(self):
        self.assertTrue(self.parser.parse(["tool", "-", "--"]))
        self.assertEqual(self.first.text, "-")
        self.assertEqual(self.second.text, "--")

    def testIndexingOutOfRange(self):
        self.assertIs(self.parser[5], WRONG_ARG)


class TestFlags(TestCase):
    """Flag presence and value binding."""

    def setUp(self):
        self.parser = ArgParse()
        self.name = self.parser.define(Flag("--name", "-n", "a name", Value()))
        self.required = self.parser.define(Flag("--output", "-o", "target", Value(required=True)))
        self.verbose = self.parser.define(Flag("--verbose", "-v", "talk more"))

    def testInlineValue(self):
        self.assertTrue(self.parser.parse(["prog", "--name=value"]))
        self.assertTrue(self.name.is_set)
        self.assertEqual(self.name.value.text, "value")

    def testSeparateValue(self):
        self.assertTrue(self.parser.parse(["prog", "--name", "value"]))
        self.assertTrue(self.name.is_set)
        self.assertEqual(self.name.value.text, "value")
        self.assertEqual(len(self.parser.positionals), 0)

    def testInlineValueKeepsEqualsSigns(self):
        self.parser.parse(["prog", "--name=a=b"])
        self.assertEqual(self.name.value.text, "a=b")

    def testShortFlagValue(self):
        self.assertTrue(self.parser.parse(["prog", "-n", "value"]))
        self.assertEqual(self.name.value.text, "value")

    def testOptionalValueSkipsDefinedFlag(self):
        self.assertTrue(self.parser.parse(["prog", "--name", "--verbose"]))
        self.assertTrue(self.name.is_set)
        self.assertFalse(self.name.value.is_set)
        self.assertTrue(self.verbose.is_set)

    def testOptionalValueTakesUnknownFlag(self):
        self.assertTrue(self.parser.parse(["prog", "--name", "--other"]))
        self.assertEqual(self.name.value.text, "--other")
        self.assertFalse(self.parser.is_defined("--other"))

    def testRequiredValueTakesDefinedFlag(self):
        self.assertTrue(self.parser.parse(["prog", "--output", "--verbose"]))
        self.assertEqual(self.required.value.text, "--verbose")
        self.assertFalse(self.verbose.is_set)

    def testRequiredValueMissingAtEnd(self):
        self.assertFalse(self.parser.parse(["prog", "--output"]))
        self.assertEqual(len(self.parser.errors), 1)
        error = self.parser.errors[0]
        self.assertIs(error.code, ErrorCode.REQUIRED_FLAG_VALUE_MISSING)
        self.assertIs(self.parser.resolve(error.subject), self.required)
        self.assertTrue(self.required.is_set)

    def testRequiredValueEmptyInline(self):
        self.assertFalse(self.parser.parse(["prog", "--output="]))
        self.assertIs(self.parser.errors[0].code, ErrorCode.REQUIRED_FLAG_VALUE_MISSING)

    def testOptionalValueEmptyInline(self):
        self.assertTrue(self.parser.parse(["prog", "--name="]))
        self.assertTrue(self.name.value.is_set)
        self.assertEqual(self.name.value.text, "")

    def testOptionalValueAbsentAtEnd(self):
        self.assertTrue(self.parser.parse(["prog", "--name"]))
        self.assertTrue(self.name.is_set)
        self.assertFalse(self.name.value.is_set)

    def testRepeatedValueLastWins(self):
        self.parser.parse(["prog", "--name=a", "-n", "b"])
        self.assertEqual(self.name.value.text, "b")

    def testUnknownFlagsAutoRegister(self):
        self.assertTrue(self.parser.parse(["prog", "--color", "-q"]))
        color = self.parser["--color"]
        self.assertTrue(color.is_set)
        self.assertFalse(color.is_defined)
        self.assertTrue(self.parser.check("-q"))

    def testUnknownInlineValueDropped(self):
        self.assertTrue(self.parser.parse(["prog", "--color=red"]))
        self.assertTrue(self.parser.check("--color"))
        self.assertFalse(self.parser["--color"].has_value)

    def testMalformedFlagSkipped(self):
        self.assertTrue(self.parser.parse(["prog", "--=x"]))
        self.assertEqual(len(self.parser.flags), 4)

    def testCluster(self):
        self.assertTrue(self.parser.parse(["prog", "-vnx"]))
        self.assertTrue(self.verbose.is_set)
        self.assertTrue(self.name.is_set)
        self.assertFalse(self.name.value.is_set)
        self.assertTrue(self.parser.check("-x"))
        self.assertFalse(self.parser["-x"].is_defined)

    def testFlagsAndPositionalsInterleave(self):
        parser = ArgParse()
        source = parser.define(Positional("source", required=True))
        level = parser.define(Flag("--level", "-l", value=Value("6")))
        self.assertTrue(parser.parse(["tool", "-l", "9", "data.bin"]))
        self.assertEqual(level.value.text, "9")
        self.assertEqual(source.text, "data.bin")


class TestAccumulation(TestCase):
    """Each parse starts a clean accumulation."""

    def setUp(self):
        self.parser = ArgParse()
        self.input = self.parser.define(Positional("input", required=True))
        self.verbose = self.parser.define(Flag("--verbose", "-v"))

    def testErrorsClearedBetweenParses(self):
        self.assertFalse(self.parser.parse(["tool"]))
        self.assertTrue(self.parser.parse(["tool", "data.bin"]))
        self.assertEqual(self.parser.errors, ())
        self.assertEqual(self.parser.error(), "")

    def testStateClearedBetweenParses(self):
        self.parser.parse(["tool", "data.bin", "-v", "--extra", "more"])
        self.parser.parse(["tool", "other.bin"])
        self.assertFalse(self.verbose.is_set)
        self.assertEqual(self.input.text, "other.bin")
        self.assertEqual(len(self.parser.positionals), 1)
        self.assertFalse(self.parser.is_defined("--extra"))

    def testSuccessMatchesErrors(self):
        for argv in (["tool"], ["tool", "x"], [], ["tool", "x", "y"]):
            with self.subTest(argv=argv):
                self.assertEqual(self.parser.parse(argv), not self.parser.errors)

    def testRedefinitionOverwrites(self):
        self.parser.parse(["tool", "x", "-v"])
        replacement = self.parser.define(Flag("--verbose", "-v", "louder"))
        self.assertEqual(len([flag for flag in self.parser.flags if flag.key == "-v--verbose"]), 1)
        self.assertIs(self.parser["--verbose"], replacement)
        self.assertFalse(replacement.is_set)

    def testCounts(self):
        self.parser.parse(["tool", "x", "extra", "-v", "--extra", "-ab"])
        self.assertEqual(self.parser.counts, Counts(flags=Tally(1, 3), args=Tally(1, 1)))
        self.parser.parse(["tool", "x"])
        self.assertEqual(self.parser.counts, Counts(flags=Tally(0, 0), args=Tally(1, 0)))


class TestQueries(TestCase):
    """Reading results after parsing."""

    def setUp(self):
        self.parser = ArgParse()
        self.parser.define(Flag("--port", "-p", "port", Value("8080")))
        self.parser.define(Flag("--verbose", "-v"))
        self.parser.parse(["tool", "--port=9000", "-v"])

    def testCheck(self):
        self.assertTrue(self.parser.check("--port"))
        self.assertTrue(self.parser.check("-v"))
        self.assertFalse(self.parser.check("--missing"))
        self.assertFalse(self.parser.is_defined("--missing"))

    def testCheckAndRead(self):
        self.assertEqual(self.parser.check_and_read("--port"), (True, "9000"))
        self.assertEqual(self.parser.check_and_read("-p", int), (True, 9000))

    def testCheckAndReadFailures(self):
        self.assertEqual(self.parser.check_and_read("--verbose"), (False, None))
        self.assertEqual(self.parser.check_and_read("--missing"), (False, None))
        self.parser.parse(["tool", "--port=high"])
        self.assertEqual(self.parser.check_and_read("--port", int), (False, None))

    def testLookupIsIdempotent(self):
        first = self.parser["--missing"]
        second = self.parser["--missing"]
        self.assertIs(first, second)
        self.assertEqual(len([flag for flag in self.parser.flags if flag.long == "--missing"]), 1)

    def testSentinelNeverObservable(self):
        parser = ArgParse("help.add=false")
        self.assertIs(parser.define(Flag()), WRONG_FLAG)
        for name in ("-x", "--x", "-xy"):
            self.assertIsNot(parser[name], WRONG_FLAG)

    def testSentinelsDoNotLeakAcrossParsers(self):
        first = ArgParse()
        first.define(Positional("input"))
        with self.assertRaises(TypeError):
            first[7].bind("leaked")
        with self.assertRaises(TypeError):
            first.define(Flag()).is_set = True

        other = ArgParse()
        other.parse(["prog"])
        self.assertEqual(other[0].text, "")
        self.assertFalse(other[0].is_set)
        self.assertFalse(other.check("--never"))

    def testEmptyNameQueries(self):
        self.assertFalse(self.parser.check(""))
        self.assertFalse(self.parser.is_defined(""))
        self.assertEqual(self.parser.check_and_read(""), (False, None))
        self.assertIs(self.parser[""], WRONG_FLAG)

    def testIndexTypeChecked(self):
        with self.assertRaises(TypeError):
            self.parser[1.5]

    def testResolveGeneralSubject(self):
        self.assertIsNone(self.parser.resolve(Subject.general()))

    def testDefineRejectsOtherTypes(self):
        with self.assertRaises(TypeError):
            self.parser.define("--port")
        with self.assertRaises(TypeError):
            self.parser.define(Positional("x"), print)

    def testHelpFlagDefinedByDefault(self):
        self.assertTrue(self.parser.is_defined("-h"))
        self.assertFalse(ArgParse("help.add=false").is_defined("--help"))


class TestCallbacks(TestCase):
    """Callbacks run only through dispatch()."""

    def testDispatch(self):
        calls = []
        parser = ArgParse()
        parser.define(Flag("--verbose", "-v"), lambda: calls.append("verbose"))
        parser.define(Flag("--level", "-l", value=Value()), lambda text: calls.append(text))
        parser.define(Flag("--quiet", "-q"), lambda: calls.append("quiet"))

        parser.parse(["tool", "-l", "3", "-v"])
        self.assertEqual(calls, [])

        dispatched = parser.dispatch()
        self.assertEqual(calls, ["verbose", "3"])
        self.assertEqual([flag.long for flag in dispatched], ["--verbose", "--level"])

    def testCallbackCarriedByFlag(self):
        calls = []
        parser = ArgParse()
        parser.define(Flag("--verbose", callback=lambda: calls.append(True)))
        parser.parse(["tool", "--verbose"])
        parser.dispatch()
        self.assertEqual(calls, [True])


class TestReporting(TestCase):
    """Printing and raising faults."""

    def setUp(self):
        self.parser = ArgParse("program.name=tool")
        self.parser.define(Positional("input", required=True))
        self.parser.parse(["tool"])

    def testError(self):
        self.assertEqual(self.parser.error(), "error: required argument <input> at first position is missing")

    def testReport(self):
        console = Console(file=io.StringIO(), width=120, color_system=None)
        self.parser.report(console)
        output = console.file.getvalue()
        self.assertIn("tool", output)
        self.assertIn("required argument missing", output)
        self.assertIn("run 'tool --help'", output)

    def testRaiseForErrors(self):
        with self.assertRaises(ParseExit) as context:
            self.parser.raise_for_errors()
        self.assertEqual(len(context.exception.exceptions), 1)
        self.assertIsInstance(context.exception.exceptions[0], ParseError)
        self.assertEqual(context.exception.options["prog"], "tool")

    def testNoRaiseOnSuccess(self):
        self.parser.parse(["tool", "data.bin"])
        self.parser.raise_for_errors()

    def testRepr(self):
        self.assertEqual(repr(self.parser), "arg-parse(program='tool', flags=1, positionals=1)")


if __name__ == "__main__":
    unittest.main()
