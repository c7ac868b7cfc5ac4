"""
Token classification.

Every raw token of an argument vector maps to exactly one TokenKind, purely
from its spelling (no registry is consulted):

    x, -, --        → POSITIONAL
    -x              → SHORT_FLAG
    -xyz            → SHORT_FLAG_CLUSTER
    --flag          → LONG_FLAG_BARE
    --flag=value    → LONG_FLAG_WITH_VALUE

A bare '-' and a bare '--' stay positional, following the getopt convention
where they are stream or terminator markers rather than switches.
"""
import enum


class TokenKind(enum.Enum):
    """syntactic category of a raw token."""
    POSITIONAL = "positional"
    SHORT_FLAG = "short-flag"
    SHORT_FLAG_CLUSTER = "short-flag-cluster"
    LONG_FLAG_WITH_VALUE = "long-flag-with-value"
    LONG_FLAG_BARE = "long-flag-bare"

    @property
    def flagged(self):
        return self is not TokenKind.POSITIONAL


def classify(token, /):
    """
    classify one non-empty raw token.

    raises
    - TypeError: token is not a string.
    - ValueError: token is empty (callers must never hand in empty tokens).
    """
    if not isinstance(token, str):
        raise TypeError("classify() argument must be a string")
    if not token:
        raise ValueError("classify() argument must be a non-empty string")

    if len(token) == 1 or token[0] != "-" or token == "--":
        return TokenKind.POSITIONAL
    if len(token) == 2:
        return TokenKind.SHORT_FLAG
    if token[1] != "-":
        return TokenKind.SHORT_FLAG_CLUSTER
    if "=" in token:
        return TokenKind.LONG_FLAG_WITH_VALUE
    return TokenKind.LONG_FLAG_BARE


def flag_name(token, /):
    """
    return the flag name a token resolves to, or None for positional tokens.

    - clusters resolve to their leading short flag ('-xyz' → '-x').
    - inline values are cut at the first '=' ('--name=v' → '--name').
    """
    if not (kind := classify(token)).flagged:
        return None
    match kind:
        case TokenKind.SHORT_FLAG_CLUSTER:
            return token[:2]
        case TokenKind.LONG_FLAG_WITH_VALUE:
            return token.partition("=")[0]
        case _:
            return token


__all__ = (
    "TokenKind",
    "classify",
    "flag_name",
)
