"""
Parser configuration from option strings.

A parser accepts its configuration either as one comma-separated string or as
an iterable of "key=value" strings:

    ArgParse("program.name=tool,tab=  ,help.show=2,help.add=false")
    ArgParse(["program.name=tool", "tab=\t", "help.show=all"])

Recognized keys
- program.name   program name used in help (default: argv[0] at parse time)
- tab            indentation string for help rows (default: four spaces)
- mode.strict    reserved; stored but not consulted by parsing
- help.add       add a "-h/--help" flag on construction (default: true)
- help.compact   mark repeated choice lists with "|..." in help (default: true)
- help.show      which flags help lists: 0/described, 1/defined, 2/all

Booleans accept 1/0, true/false, yes/no, on/off (case-insensitive).
"""
from collections.abc import Iterable
from enum import IntEnum

from .utils import Unset

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


class HelpMode(IntEnum):
    """which flags the help formatter lists."""
    DESCRIBED = 0  # only flags carrying a description
    DEFINED = 1  # only flags registered through a definition
    ALL = 2  # every stored flag, auto-registered ones included


def boolean(text, /):
    """convert a configuration/CLI word into a bool, ValueError when unknown."""
    if not isinstance(text, str):
        raise TypeError("boolean() argument must be a string")
    if (word := text.strip().lower()) in _TRUE:
        return True
    if word in _FALSE:
        return False
    raise ValueError(f"invalid boolean {text!r}")


def _help_mode(text):
    word = text.strip().lower()
    try:
        return HelpMode(int(word))
    except ValueError:
        pass
    try:
        return HelpMode[word.upper()]
    except KeyError:
        raise ValueError(f"invalid help mode {text!r}") from None


class Options:
    """
    resolved parser configuration.

    attributes mirror the option keys: program_name, tab, strict, help_add,
    help_compact, help_show.
    """

    __keys__ = {
        "program.name": ("program_name", str),
        "tab": ("tab", str),
        "mode.strict": ("strict", boolean),
        "help.add": ("help_add", boolean),
        "help.compact": ("help_compact", boolean),
        "help.show": ("help_show", _help_mode),
    }

    def __init__(
            self,
            program_name="",
            tab="    ",
            strict=False,
            help_add=True,
            help_compact=True,
            help_show=HelpMode.DEFINED,
    ):
        if not isinstance(program_name, str):
            raise TypeError("options 'program_name' must be a string")
        if not isinstance(tab, str):
            raise TypeError("options 'tab' must be a string")
        self.program_name = program_name.strip()
        self.tab = tab
        self.strict = bool(strict)
        self.help_add = bool(help_add)
        self.help_compact = bool(help_compact)
        self.help_show = HelpMode(help_show)

    @classmethod
    def parse(cls, source=Unset, /):
        """
        build Options from a comma-separated string or an iterable of entries.

        raises
        - TypeError: source (or an entry) is not a string.
        - ValueError: an entry lacks '=', names an unknown key, or holds a bad value.
        """
        if source is Unset or source is None:
            return cls()
        if isinstance(source, str):
            entries = source.split(",")
        elif isinstance(source, Iterable):
            entries = list(source)
        else:
            raise TypeError("options must be a string or an iterable of strings")

        settings = {}
        for entry in entries:
            if not isinstance(entry, str):
                raise TypeError("options entries must be strings")
            if not entry.strip():
                continue
            key, separator, value = entry.partition("=")
            if not separator:
                raise ValueError(f"options entry {entry!r} must look like 'key=value'")
            try:
                field, converter = cls.__keys__[key := key.strip()]
            except KeyError:
                raise ValueError(f"unknown options key {key!r}") from None
            settings[field] = converter(value)
        return cls(**settings)

    def __eq__(self, other):
        if not isinstance(other, Options):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        return "options(%s)" % ", ".join("%s=%r" % item for item in vars(self).items())


__all__ = (
    "HelpMode",
    "Options",
    "boolean",
)
