"""
Typed reading of parsed text.

Parsing only ever captures text; callers convert afterwards:

    >>> port = read(parser["--port"], int, 8080)
    >>> verbose = read(parser["--color"], bool, False)
"""
from .options import boolean
from .values import Flag, Positional, Value


def _payload(item):
    if isinstance(item, Flag | Positional):
        return item.value
    if isinstance(item, Value):
        return item
    raise TypeError("read() argument must be a value, a flag or a positional")


def read(item, /, type=str, default=None):
    """
    convert the text carried by a value, flag or positional.

    - the text is converted when present (bound, or a non-empty default).
    - bool uses the boolean vocabulary (1/0, true/false, yes/no, on/off).
    - a missing text or a failed conversion gives back default.
    """
    if not callable(type):
        raise TypeError("read() 'type' must be callable")
    if (payload := _payload(item)) is None or payload.empty:
        return default
    converter = boolean if type is bool else type
    try:
        return converter(payload.text)
    except (ValueError, TypeError):
        return default


__all__ = (
    "read",
)
