"""
Argparcel faults (parse errors) and rendering.

Scope
- ErrorCode: closed set of parse failure codes.
- SubjectKind / Subject: tagged reference from an error to the offending flag
  or positional, expressed as an index into the registry (never a live object).
- ParseError: one recorded failure; an Exception subclass so callers may raise it.
- FaultLog: ordered, append-only accumulator filled during ArgParse.parse().
- ParseExit: ExceptionGroup of ParseError, raised on request by
  ArgParse.raise_for_errors().

The parser never raises for malformed user input; it records a ParseError and
reports overall failure through the boolean result of parse().

Rendering
- ParseError and ParseExit implement __rich__, so they print nicely through a
  rich Console. Styles may be overridden with a __styles__ mapping and codes
  relabelled with a __codes__ mapping, both looked up in __main__.
"""
import enum
import logging
from collections import defaultdict
from collections.abc import Sequence
from enum import IntEnum
from types import MappingProxyType
from typing import NamedTuple

from rich.console import Group
from rich.text import Text

from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class ErrorCode(IntEnum):
    """
    parse failure codes (stable identifiers).

    - NO_ERROR: placeholder, never recorded.
    - REQUIRED_FLAG_VALUE_MISSING: a flag whose value is required got none.
    - REQUIRED_ARGUMENT_MISSING: a required positional was never bound.
    - ARGV_EMPTY: the argument vector is missing, empty, or has no program name.
    - ARGC_EXCEEDS_ARGV: the declared argument count is larger than the vector.
    """
    NO_ERROR                    = 0
    REQUIRED_FLAG_VALUE_MISSING = 1
    REQUIRED_ARGUMENT_MISSING   = 2
    ARGV_EMPTY                  = 3
    ARGC_EXCEEDS_ARGV           = 4

    def normalize(self):
        """
        return a host-normalized label for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override the numeric ids; otherwise the number is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class SubjectKind(enum.Enum):
    GENERAL = "general"
    FLAG = "flag"
    ARG = "arg"


class Subject(NamedTuple):
    """what an error is about: nothing, a flag slot, or a positional slot."""
    kind: SubjectKind
    index: int | None = None

    @classmethod
    def general(cls):
        return cls(SubjectKind.GENERAL)

    @classmethod
    def flag(cls, index, /):
        return cls(SubjectKind.FLAG, index)

    @classmethod
    def arg(cls, index, /):
        return cls(SubjectKind.ARG, index)


def _styles():
    return defaultdict(str, {
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #00E5FF",  # neon cyan error code
        "error-title": "bold #FF4DA6",  # pinky title
        "error-message": "#C8C8D0",  # soft light gray message
        "hint-arrow": "#9CE19C dim",  # gentle green arrow
        "hint": "italic #9CE19C",  # gentle green hint text
    } | getattr(__import__("__main__"), "__styles__", {}))


def _text(fragment, style, colorful):
    if not fragment:
        return Text("")
    if not colorful:
        return Text(str(fragment))
    if isinstance(fragment, Text):
        return fragment
    return Text(str(fragment), style)


class ParseError(Exception):
    """
    one recorded parse failure.

    fields
    - code: ErrorCode
    - message: lower-case, position-first explanation
    - subject: Subject pointing at the offending flag/positional (or general)
    - hint: optional next step for the user

    rendering options (prog, colorful) are carried separately and can be
    swapped with copy.replace(error, colorful=False).
    """

    def __init__(self, code, message, /, subject=Unset, hint=Unset, **options):
        if not isinstance(code, ErrorCode):
            raise TypeError("parse error code must be an error-code")
        if not isinstance(message, str):
            raise TypeError("parse error message must be a string")
        if not isinstance(subject, Subject | Unset):
            raise TypeError("parse error subject must be a subject")
        super().__init__(message)
        self.code = code
        self.message = message
        self.subject = coalesce(subject, Subject.general())
        self.hint = coalesce(hint)
        self.options = MappingProxyType(options)

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return (self.code, self.message, self.subject) == (other.code, other.message, other.subject)

    def __hash__(self):
        return hash((self.code, self.message, self.subject))

    def __repr__(self):
        return f"parse-error(code={self.code.name}, message={self.message!r}, subject={self.subject!r})"

    def __str__(self):
        return self.message

    def __rich__(self):
        styles = _styles()
        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        header = Text.assemble(
            "[ ",
            _text(self.options.get("prog") or "argparcel", styler("prog-name"), colorful),
            " — ",
            _text(self.code.normalize(), styler("code"), colorful),
            " | ",
            _text(self.code.name.replace("_", " ").lower(), styler("error-title"), colorful),
            " ]"
        )
        message = _text(self.message, styler("error-message"), colorful)
        if not self.hint:
            return Group(header, message)
        hint = Text.assemble(_text(" → ", styler("hint-arrow"), colorful), _text(self.hint, styler("hint"), colorful))
        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(
            self.code,
            self.message,
            subject=self.subject,
            hint=self.hint if self.hint is not None else Unset,
            **{**self.options, **overrides}
        )


class FaultLog(Sequence):
    """
    ordered, append-only accumulator of ParseError records.

    no deduplication is performed. the parser clears it only when a new parse
    starts, so the log always describes the most recent parse.
    """

    def __init__(self):
        self._faults = []

    def append(self, fault, /):
        if not isinstance(fault, ParseError):
            raise TypeError("fault log only accepts parse errors")
        logger.debug("recorded %s: %s", fault.code.name, fault.message)
        self._faults.append(fault)

    def clear(self):
        self._faults.clear()

    def __getitem__(self, index):
        return self._faults[index]

    def __len__(self):
        return len(self._faults)

    def __repr__(self):
        return f"fault-log({self._faults!r})"


class ParseExit(ExceptionGroup[ParseError]):
    """
    grouped parse failures, raised by ArgParse.raise_for_errors().
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad parse", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad parse", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        styles = _styles()
        colorful = self.options.get("colorful", True)
        header = Text.assemble(
            "[ ",
            _text(self.options.get("prog") or "argparcel", styles["prog-name"] if colorful else "", colorful),
            " — ",
            _text("bad parse".title(), styles["error-title"] if colorful else "", colorful),
            " ]"
        )
        return Group(header, *self.exceptions)


__all__ = (
    "ErrorCode",
    "SubjectKind",
    "Subject",
    "ParseError",
    "FaultLog",
    "ParseExit",
)
