"""
Argparcel parser: define flags and positionals, parse an argument vector, query results.

What this module provides
- ArgParse: the public façade owning one Registry, one FaultLog and the resolved
  Options. It defines items, runs the single-pass parse, and answers queries
  (check, check_and_read, indexing), renders help, and reports faults.
- Counts / Tally: how many flag and positional occurrences of the last parse
  matched defined items versus items created on the fly.

Quick start
    from argparcel import ArgParse, Flag, Positional, Value

    parser = ArgParse("program.name=tool")
    parser.define(Positional("input", "file to read", required=True))
    parser.define(Flag("--level", "-l", "compression level", Value("6", name="N")))
    parser.define(Flag("--verbose", "-v", "talk more"))

    if not parser.parse(["tool", "--level=9", "-v", "data.bin"]):
        parser.report()

Parsing model
- one left-to-right scan, looking at most one token ahead to find a flag value.
- positional tokens fill the declared slots in order; extra ones synthesize
  optional, undeclared slots.
- unknown flags are registered on the fly (permissive parsing), not reported.
- user input never raises: failures are recorded as ParseError entries and
  parse() returns False. partial results stay visible.
- every parse() starts clean: the fault log and counts are cleared and the
  registry drops what the previous parse synthesized.
"""
import copy
import logging
import shlex
import sys
from collections import deque
from collections.abc import Iterable
from typing import NamedTuple

from rich.console import Console

from .convert import read
from .faults import ErrorCode, FaultLog, ParseError, ParseExit, Subject, SubjectKind
from .helper import render
from .options import Options
from .registry import Registry
from .tokens import TokenKind, classify
from .utils import Unset, ordinal
from .values import Flag, Positional, WRONG_FLAG, WRONG_ARG

logger = logging.getLogger(__name__)


class Tally(NamedTuple):
    defined: int = 0
    undefined: int = 0


class Counts(NamedTuple):
    """occurrences seen by the last parse, split by defined/undefined targets."""
    flags: Tally = Tally()
    args: Tally = Tally()


class ArgParse:
    """
    Command-line argument parser.

    Parameters
    - options: Unset | str | Iterable[str] | Options
      configuration, see argparcel.options. With help.add (the default) a
      "-h/--help" flag is defined right away.

    Lifecycle
    - setup: define() flags and positionals.
    - parse(argv): bind tokens, record faults; returns True when no fault was recorded.
    - query: check(), check_and_read(), parser["--name"], parser[0], errors, counts.
    - dispatch(): run callbacks of the flags that were set.
    """

    def __init__(self, options=Unset, /):
        if isinstance(options, Options):
            self._options = options
        else:
            self._options = Options.parse(options)

        self._registry = Registry()
        self._faults = FaultLog()
        self._tallies = {"flags": [0, 0], "args": [0, 0]}
        self._argv0 = ""
        self._index = 0

        if self._options.help_add:
            self.define_flag(Flag("--help", "-h", "Show this help."))

    # --- setup -----------------------------------------------------------

    def define_flag(self, flag, /, callback=Unset):
        """store a flag (see Registry.define_flag); returns the stored flag or WRONG_FLAG."""
        return self._registry.define_flag(flag, callback)

    def define_positional(self, positional, /):
        """append a positional slot; returns the stored positional."""
        return self._registry.define_positional(positional)

    def define(self, item, /, callback=Unset):
        """define a Flag or a Positional."""
        if isinstance(item, Flag):
            return self.define_flag(item, callback)
        if isinstance(item, Positional):
            if callback is not Unset:
                raise TypeError("define() callback is only supported for flags")
            return self.define_positional(item)
        raise TypeError("define() argument must be a flag or a positional")

    # --- introspection ---------------------------------------------------

    @property
    def options(self):
        return self._options

    @property
    def program(self):
        """configured program name, else argv[0] of the last parse."""
        return self._options.program_name or self._argv0

    @property
    def flags(self):
        return self._registry.flags

    @property
    def positionals(self):
        return self._registry.positionals

    @property
    def errors(self):
        return tuple(self._faults)

    @property
    def counts(self):
        return Counts(Tally(*self._tallies["flags"]), Tally(*self._tallies["args"]))

    def __getitem__(self, key):
        """
        parser["--name"] / parser["-n"]: flag lookup (unknown names are registered).
        parser[0]: positional by index (WRONG_ARG when out of range).
        """
        if isinstance(key, str):
            return self._registry.lookup(key)
        if isinstance(key, int) and not isinstance(key, bool):
            return self._registry.positional_at(key)
        raise TypeError("parser index must be a flag name or a positional index")

    def is_defined(self, name, /):
        return self._registry.is_defined(name)

    def check(self, name, /):
        """true if the flag named by 'name' was set by the last parse."""
        return self._registry.find(name).is_set

    def check_and_read(self, name, /, type=str):
        """
        (True, converted value) when the flag is set, carries a value and the
        conversion succeeds; (False, None) otherwise.
        """
        flag = self._registry.find(name)
        if not flag.is_set or not flag.has_value:
            return False, None
        missing = object()
        if (value := read(flag, type, missing)) is missing:
            return False, None
        return True, value

    def resolve(self, subject, /):
        """the flag or positional an error subject points at, None for general subjects."""
        match subject:
            case Subject(kind=SubjectKind.FLAG, index=index):
                return self._registry.flag_at(index)
            case Subject(kind=SubjectKind.ARG, index=index):
                return self._registry.positional_at(index)
            case Subject():
                return None
        raise TypeError("resolve() argument must be a subject")

    # --- faults ----------------------------------------------------------

    def _record(self, code, message, /, subject=Unset, hint=Unset):
        self._faults.append(ParseError(code, message, subject=subject, hint=hint, prog=self.program))

    def error(self):
        """one line per fault of the last parse, empty when it succeeded."""
        return "\n".join("error: %s" % fault.message for fault in self._faults)

    def report(self, console=Unset, /, *, colorful=True):
        """print the faults of the last parse (stderr console by default)."""
        console = Console(stderr=True) if console is Unset else console
        for fault in self._faults:
            console.print(copy.replace(fault, prog=self.program, colorful=colorful))

    def raise_for_errors(self):
        """raise ParseExit grouping the faults of the last parse, if any."""
        if self._faults:
            raise ParseExit(self._faults, prog=self.program)

    # --- help ------------------------------------------------------------

    def help(self):
        return render(self).plain

    def print_help(self, console=Unset, /):
        console = Console() if console is Unset else console
        console.print(render(self, colorful=True))

    # --- parsing ---------------------------------------------------------

    def _tally(self, group, defined):
        self._tallies[group][0 if defined else 1] += 1

    def _parse_positional(self, token, cursor):
        """bind token to the cursor-th slot, or synthesize an undeclared one."""
        positional = self._registry.positional_at(cursor)
        if positional is WRONG_ARG:
            self._registry.append_positional(Positional.synthesize(token))
            logger.debug("synthesized positional %r at %s position", token, ordinal(self._index))
            self._tally("args", False)
            return
        positional.bind(token)
        self._tally("args", True)

    def _mark(self, name):
        """resolve (or register) a flag by name and mark it set; WRONG_FLAG if malformed."""
        flag = self._registry.lookup(name)
        if flag is WRONG_FLAG:
            logger.debug("skipped malformed flag %r at %s position", name, ordinal(self._index))
            return flag
        self._tally("flags", flag.is_defined)
        flag.is_set = True
        return flag

    def _parse_flag(self, name, inline, tokens):
        """
        mark a short/long flag and bind its value.

        - inline ('--name=value'): bound directly.
        - otherwise the next token is consumed when the value is required or the
          token is not itself a known flag.
        """
        if (flag := self._mark(name)) is WRONG_FLAG or not flag.has_value:
            return
        value = flag.value
        subject = Subject.flag(self._registry.index_of(flag))

        if inline is not Unset:
            if not inline and value.required:
                self._record(
                    ErrorCode.REQUIRED_FLAG_VALUE_MISSING,
                    "flag %r at %s position has an empty value" % (name, ordinal(self._index)),
                    subject=subject,
                    hint="add a value after '=' (for example: %s=<value>)" % name,
                )
                return
            value.bind(inline)
            return

        if not tokens:
            if value.required:
                self._record(
                    ErrorCode.REQUIRED_FLAG_VALUE_MISSING,
                    "flag %r at %s position requires a value" % (name, ordinal(self._index)),
                    subject=subject,
                    hint="pass the value after the flag (for example: %s <value>)" % name,
                )
            return

        following = tokens[0]
        if value.required or not self._registry.is_defined(following):
            value.bind(tokens.popleft())
            self._index += 1

    def _parse_cluster(self, token):
        """'-abc' marks -a, -b and -c as set; clusters never bind values."""
        for char in token[1:]:
            self._mark("-" + char)

    def parse(self, argv=Unset, /, argc=Unset):
        """
        parse an argument vector whose first element is the program name.

        parameters
        - argv: Unset (sys.argv) | str (split like a shell) | Iterable[str]
        - argc: optional element count; only the first argc elements are read.

        returns
        - True when no fault was recorded, False otherwise (see errors).
        """
        self._faults.clear()
        self._tallies = {"flags": [0, 0], "args": [0, 0]}

        if argv is Unset:
            argv = sys.argv
        elif isinstance(argv, str):
            argv = shlex.split(argv)
        elif argv is not None and not isinstance(argv, Iterable):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        argv = [] if argv is None else list(argv)

        if argc is not Unset:
            if not isinstance(argc, int) or isinstance(argc, bool):
                raise TypeError("parse() 'argc' must be an integer")
            if argc < 0:
                raise ValueError("parse() 'argc' cannot be negative")

        if not argv or not argv[0]:
            self._record(
                ErrorCode.ARGV_EMPTY,
                "argument vector is empty",
                hint="pass at least the program name as the first element",
            )
            return False

        if argc is not Unset:
            if argc > len(argv):
                self._record(
                    ErrorCode.ARGC_EXCEEDS_ARGV,
                    "argument count %d exceeds the %d elements of the argument vector" % (argc, len(argv)),
                    hint="pass an argument count no larger than the vector",
                )
                return False
            if argc < 1:
                self._record(
                    ErrorCode.ARGV_EMPTY,
                    "argument count is zero",
                    hint="pass at least the program name as the first element",
                )
                return False
            argv = argv[:argc]

        for token in argv:
            if not isinstance(token, str):
                raise TypeError("parse() argument must be a string or an iterable of strings")

        self._registry.reset()
        self._argv0 = argv[0]
        logger.debug("parsing %d tokens for %r", len(argv) - 1, self.program)

        tokens = deque(argv[1:])
        cursor = 0
        self._index = 1
        while tokens:
            token = tokens.popleft()

            if not token:  # an explicit '' is a positional value
                kind = TokenKind.POSITIONAL
            else:
                kind = classify(token)

            match kind:
                case TokenKind.POSITIONAL:
                    self._parse_positional(token, cursor)
                    cursor += 1
                case TokenKind.SHORT_FLAG | TokenKind.LONG_FLAG_BARE:
                    self._parse_flag(token, Unset, tokens)
                case TokenKind.SHORT_FLAG_CLUSTER:
                    self._parse_cluster(token)
                case TokenKind.LONG_FLAG_WITH_VALUE:
                    name, _, value = token.partition("=")
                    self._parse_flag(name, value, tokens)

            self._index += 1

        for index, positional in enumerate(self._registry.positionals):
            if positional.required and not positional.is_set:
                label = " <%s>" % positional.name if positional.name else ""
                self._record(
                    ErrorCode.REQUIRED_ARGUMENT_MISSING,
                    "required argument%s at %s position is missing" % (label, ordinal(index + 1)),
                    subject=Subject.arg(index),
                    hint="run '%s --help' to see the expected usage" % self.program,
                )

        return not self._faults

    # --- callbacks -------------------------------------------------------

    def dispatch(self):
        """
        run the callback of every set flag, in definition order.

        bare flags are called without arguments, valued flags with their text.
        exceptions raised by callbacks propagate. returns the dispatched flags.
        """
        dispatched = []
        for flag in self._registry.flags:
            if not flag.is_set or flag.callback is None:
                continue
            if flag.has_value:
                flag.callback(flag.value.text)
            else:
                flag.callback()
            dispatched.append(flag)
        return tuple(dispatched)

    def __rich_repr__(self):
        yield "program", self.program
        yield "flags", self.flags
        yield "positionals", self.positionals
        yield "errors", self.errors

    def __repr__(self):
        return f"arg-parse(program={self.program!r}, flags={len(self._registry)}, positionals={len(self.positionals)})"


__all__ = (
    "ArgParse",
    "Counts",
    "Tally",
)
