"""
Help rendering.

render() is a read-only pass over a parser's registry producing a rich Text:

    usage: tool <input> [<output>]

    arguments:
        <input>     file to read
        [<output>]  where to write

    option flags:
        -h, --help                              Show this help.
        -m <fast|safe>, --mode <fast|safe|...>  processing mode

Palette keys
- usage-label, program-name, group-label
- argument-name, flag-name, metavar, argument-description

Define a mapping named __styles__ in __main__ to override any palette entry.
With colorful=False no styling is applied (the default used by ArgParse.help()).
"""
from collections import defaultdict

from rich.text import Text

from .options import HelpMode


def _styles():
    return defaultdict(str, {
        "usage-label": "bold #00E6FF",  # cyan
        "program-name": "bold #FF4D94",  # magenta-pink
        "group-label": "bold #FFFFFF",  # white headers
        "argument-name": "bold #FFD600",  # amber
        "flag-name": "bold #22C55E",  # green
        "metavar": "#FFD600",  # amber
        "argument-description": "#9CA3AF",  # muted gray
    } | getattr(__import__("__main__"), "__styles__", {}))


def _visible(flag, mode):
    match mode:
        case HelpMode.DESCRIBED:
            return bool(flag.descr)
        case HelpMode.DEFINED:
            return flag.is_defined
        case _:
            return True


def _metavar(value, *, abbreviated=False):
    """'<NAME>' / '[<NAME>]' label of a value, or None when it has nothing to show."""
    if value.choices:
        label = "|".join(value.choices) + ("|..." if abbreviated else "")
    elif value.name:
        label = str(value.name)
    else:
        return None
    return f"<{label}>" if value.required else f"[<{label}>]"


def render(parser, /, *, colorful=False):
    """
    render usage, positional and flag sections of a parser as rich Text.
    """
    styles = _styles()
    options = parser.options

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if isinstance(fragment, Text):
            return fragment.copy() if colorful else Text(fragment.plain)
        return Text(str(fragment), styler(style))

    def section(title, rows):
        width = max(len(label) for label, _ in rows) + 2
        block = Text()
        block.append(title, styler("group-label")).append(":")
        for label, descr in rows:
            block.append("\n").append(options.tab).append_text(label)
            if descr:
                block.append(" " * (width - len(label))).append_text(text(descr, "argument-description"))
        return block

    positionals = [positional for positional in parser.positionals if positional.name]

    def argument(positional):
        name = f"<{positional.name}>" if positional.required else f"[<{positional.name}>]"
        return text(name, "argument-name")

    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(parser.program, styler("program-name"))
    for positional in positionals:
        usage.append(" ").append_text(argument(positional))

    renders = [usage]

    if positionals:
        renders.append(section("arguments", [(argument(positional), positional.descr) for positional in positionals]))

    rows = []
    for flag in filter(lambda x: x.is_valid and _visible(x, options.help_show), parser.flags):
        label = Text()
        for index, name in enumerate(flag.names):
            if index:
                label.append(", ")
            label.append(name, styler("flag-name"))
            if flag.has_value and (metavar := _metavar(flag.value, abbreviated=options.help_compact and index > 0)):
                label.append(" ").append(metavar, styler("metavar"))
        rows.append((label, flag.descr))

    if rows:
        renders.append(section("option flags", rows))

    return Text("\n\n").join(renders)


__all__ = (
    "render",
)
