r"""
Argparcel value, flag and positional definitions.

Overview
- Value: a named, optionally-defaulted, optionally-required scalar text payload.
- Flag: a switch identified by a short name ("-v"), a long name ("--verbose"),
  or both, optionally carrying a Value.
- Positional (alias Arg): a slot matched by position; composes a Value with an
  is_user_defined marker distinguishing declared slots from slots synthesized
  while parsing.

Introspection & representation
- ArgumentType metaclass derives a __typename__ from the class name, exposes
  definition-time metadata listed in __introspectable__ as read-only
  properties (see utils.mirror), and provides stable __repr__/__rich_repr__.

Metadata (sanitized on construction)
- name/descr: Unset | str, non-empty after trimming when provided; default to None.
- default: str (the text a value carries until something is bound).
- choices: Iterable[str]; duplicates rejected, normalized to a tuple; a
  non-empty default must be one of them.
- Flag names: short is "-" plus one character other than "-" or "=";
  long is "--" plus at least one character, without "=" or whitespace.

Sentinels
- WRONG_FLAG: the canonical invalid flag (both names empty). Lookups and
  definitions that fail hand it back instead of None.
- WRONG_ARG: returned for positional lookups that fall out of range.
- both are shared by every parser in the process and are read-only: attribute
  writes, bind() and reset() raise TypeError.
"""
import functools
import operator
import re
from collections.abc import Iterable

from rich.text import Text

from .utils import *


class ArgumentType(type):
    """
    Metaclass wiring introspection for values, flags and positionals.

    Responsibilities
    - __typename__: hyphenated lower-case class name, used in messages.
    - Read-only properties for every name in the class' own __introspectable__.
    - __repr__/__rich_repr__ over __displayable__ (falls back to __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize the help metadata shared by every definition ('name', 'descr').

    - Unset becomes None.
    - Strings are trimmed and must stay non-empty.
    - Explicit None is rejected; omit the argument instead.
    """
    for field in ("name", "descr"):
        if field not in metadata:
            continue
        if not isinstance(object := metadata[field], str | Text | Unset):
            raise TypeError(f"{cls.__typename__} {field!r} must be a string")
        if isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
        metadata[field] = coalesce(object)


def _sanitize_value_metadata(cls, metadata, /):
    """
    Internal: validate the value-bearing fields ('default', 'required', 'choices').
    """
    if not isinstance(metadata["default"], str):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")

    if not isinstance(metadata["required"], bool):
        raise TypeError(f"{cls.__typename__} 'required' must be a boolean")

    if isinstance(choices := metadata["choices"], str) or not isinstance(choices, Iterable):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
    sanitized = []
    for choice in choices:
        if not isinstance(choice, str):
            raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
        if choice in sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
        sanitized.append(choice)
    metadata["choices"] = tuple(sanitized)

    if metadata["default"] and sanitized and metadata["default"] not in sanitized:
        raise ValueError(f"{cls.__typename__} 'default' must be one of its 'choices'")


def valid_short(name, /):
    """true if name is a well-formed short flag name ('-v')."""
    return isinstance(name, str) and re.fullmatch(r"-[^-=\s]", name) is not None


def valid_long(name, /):
    """true if name is a well-formed long flag name ('--verbose')."""
    return isinstance(name, str) and re.fullmatch(r"--[^=\s]+", name) is not None


def _sanitize_flag_names(cls, metadata, /):
    """
    Internal: validate the 'long' and 'short' names of a flag.

    Both may be empty (the sentinel shape); non-empty names must be well formed.
    """
    if not isinstance(long := metadata["long"], str):
        raise TypeError(f"{cls.__typename__} long name must be a string")
    if not isinstance(short := metadata["short"], str):
        raise TypeError(f"{cls.__typename__} short name must be a string")

    if long and not valid_long(long):
        raise ValueError(f"{cls.__typename__} long name {long!r} must look like '--name'")
    if short and not valid_short(short):
        raise ValueError(f"{cls.__typename__} short name {short!r} must look like '-x'")


class Value(metaclass=ArgumentType):
    """
    Scalar textual payload with optional required/choice-set semantics.

    State
    - text: the raw captured text; the default until something is bound.
    - is_set: True once a token has been bound during parsing.

    Binding is last-write-wins: repeated tokens overwrite, they never accumulate.
    """

    __introspectable__ = (
        "default",
        "required",
        "name",
        "descr",
        "choices",
    )

    __displayable__ = (
        "name",
        "text",
        "is_set",
        "required",
        "choices",
    )

    def __init__(self, default="", /, required=False, name=Unset, descr=Unset, choices=()):
        metadata = {
            "default": default,
            "required": required,
            "name": name,
            "descr": descr,
            "choices": choices,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_value_metadata(type(self), metadata)

        for field, object in metadata.items():
            setattr(self, "_" + field, object)

        self.text = self._default
        self.is_set = False

    @property
    def empty(self):
        return not self.text

    def bind(self, text, /):
        """bind raw text to this value and mark it as set."""
        if not isinstance(text, str):
            raise TypeError(f"{type(self).__typename__} text must be a string")
        self.text = text
        self.is_set = True

    def reset(self):
        """forget any bound text and fall back to the default."""
        self.text = self._default
        self.is_set = False


class Flag(metaclass=ArgumentType):
    """
    Named switch, optionally carrying a Value.

    Flag("--name", "-n", "descr", Value(...)) mirrors the usual long/short/
    description/value ordering. At least one name is needed for the flag to be
    registered; Flag() is the sentinel shape (see WRONG_FLAG).

    Parse state
    - is_set: True once the flag was encountered on the command line.
    - is_defined: True when registered through a definition, False when the
      registry created it on the fly for an unknown name.
    - callback: optional hook run by ArgParse.dispatch() after parsing.
    """

    __introspectable__ = (
        "long",
        "short",
        "descr",
        "value",
    )

    __displayable__ = (
        "short",
        "long",
        "descr",
        "is_set",
        "is_defined",
        "value",
    )

    def __init__(self, long="", short="", /, descr=Unset, value=Unset, *, callback=Unset):
        metadata = {
            "long": long,
            "short": short,
            "descr": descr,
        }
        _sanitize_flag_names(type(self), metadata)
        _sanitize_metadata(type(self), metadata)

        if not isinstance(value, Value | Unset):
            raise TypeError(f"{type(self).__typename__} 'value' must be a value")
        if callback is not Unset and not callable(callback):
            raise TypeError(f"{type(self).__typename__} 'callback' must be callable")

        for field, object in metadata.items():
            setattr(self, "_" + field, object)
        self._value = coalesce(value)

        self.callback = coalesce(callback)
        self.is_set = False
        self.is_defined = False

    @property
    def key(self):
        """canonical registry identity: short name followed by long name."""
        return self._short + self._long

    @property
    def names(self):
        return tuple(name for name in (self._short, self._long) if name)

    @property
    def has_value(self):
        return self._value is not None

    @property
    def is_valid(self):
        return bool(self._short or self._long)

    def reset(self):
        """forget parse state (presence and bound value)."""
        self.is_set = False
        if self._value is not None:
            self._value.reset()


class Positional(metaclass=ArgumentType):
    """
    Required-or-optional positional slot.

    Composes a Value (default, required, name, descr, choices) and adds
    is_user_defined: True for declared slots, False for slots synthesized when
    more positional tokens arrive than were declared.
    """

    __introspectable__ = (
        "value",
    )

    __displayable__ = (
        "name",
        "text",
        "is_set",
        "required",
        "is_user_defined",
    )

    def __init__(self, name=Unset, /, descr=Unset, required=False, default="", choices=()):
        self._value = Value(default, required, name, descr, choices)
        self.is_user_defined = True

    @classmethod
    def synthesize(cls, text, /):
        """build an optional, undeclared positional already bound to text."""
        self = cls()
        self.is_user_defined = False
        self._value.bind(text)
        return self

    @property
    def text(self):
        return self._value.text

    @property
    def is_set(self):
        return self._value.is_set

    @property
    def required(self):
        return self._value.required

    @property
    def name(self):
        return self._value.name

    @property
    def descr(self):
        return self._value.descr

    @property
    def default(self):
        return self._value.default

    @property
    def choices(self):
        return self._value.choices

    def bind(self, text, /):
        self._value.bind(text)

    def reset(self):
        self._value.reset()


Arg = Positional


class _Sealed:
    """
    Internal mixin: once seal() ran, every attribute write or deletion raises
    TypeError. bind() and reset() go through attribute writes, so they raise too.
    """

    def seal(self):
        object.__setattr__(self, "_sealed", True)
        return self

    def __setattr__(self, name, value):
        if getattr(self, "_sealed", False):
            raise TypeError(f"{type(self).__typename__} is read-only")
        super().__setattr__(name, value)

    def __delattr__(self, name):
        if getattr(self, "_sealed", False):
            raise TypeError(f"{type(self).__typename__} is read-only")
        super().__delattr__(name)


class WrongValue(_Sealed, Value):
    """read-only empty value, the payload of WRONG_ARG."""

    def __init__(self):
        super().__init__()
        self.seal()


class WrongFlag(_Sealed, Flag):
    """read-only flag without names; see WRONG_FLAG."""

    def __init__(self):
        super().__init__()
        self.seal()


class WrongArg(_Sealed, Positional):
    """read-only undeclared positional; see WRONG_ARG."""

    def __init__(self):
        super().__init__()
        self._value = WrongValue()
        self.is_user_defined = False
        self.seal()


WRONG_FLAG = WrongFlag()
"""canonical invalid flag, returned in place of failed definitions and lookups."""

WRONG_ARG = WrongArg()
"""canonical invalid positional, returned for out-of-range index lookups."""


__all__ = (
    # Definitions
    "Value",
    "Flag",
    "Positional",
    "Arg",

    # Name checks
    "valid_short",
    "valid_long",

    # Sentinels
    "WRONG_FLAG",
    "WRONG_ARG",
)

del ArgumentType
