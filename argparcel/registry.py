"""
Flag and positional registry.

Storage model
- One owning arena (list) of Flags, addressed by index.
- A key map: canonical identity (short + long) → arena index.
- Secondary name indexes: long name → arena index, short name → arena index.
- An ordered list of Positionals.

Indexes hold arena indices, never objects, and are only touched by the
registry itself when a flag is stored or the registry is reset. A flag with
both names is reachable from both indexes.
"""
import copy
import logging

from .tokens import TokenKind, classify, flag_name
from .utils import Unset
from .values import Flag, Positional, WRONG_FLAG, WRONG_ARG, valid_long, valid_short

logger = logging.getLogger(__name__)


class Registry:
    """
    owner of every defined (or auto-registered) flag and positional.

    lookups that fail return the WRONG_FLAG / WRONG_ARG sentinels; the sentinels
    are never stored.
    """

    def __init__(self):
        self._flags = []
        self._keys = {}
        self._longs = {}
        self._shorts = {}
        self._positionals = []

    @property
    def flags(self):
        """stored flags in definition order."""
        return tuple(self._flags)

    @property
    def positionals(self):
        """stored positionals in declaration order."""
        return tuple(self._positionals)

    def _store(self, flag):
        """put a flag in the arena under its key and relink its names."""
        try:
            index = self._keys[flag.key]
            self._flags[index] = flag
        except KeyError:
            index = self._keys[flag.key] = len(self._flags)
            self._flags.append(flag)
        if flag.long:
            self._longs[flag.long] = index
        if flag.short:
            self._shorts[flag.short] = index
        return flag

    def define_flag(self, flag, /, callback=Unset):
        """
        store a copy of a flag and return the stored copy.

        - flags with both names empty are rejected: WRONG_FLAG is returned.
        - an existing flag with the same key is overwritten (last definition wins).
        - callback, when given, replaces the callback carried by the flag.
        """
        if not isinstance(flag, Flag):
            raise TypeError("define_flag() argument must be a flag")
        if callback is not Unset and not callable(callback):
            raise TypeError("define_flag() callback must be callable")
        if not flag.is_valid:
            logger.debug("rejected flag without names")
            return WRONG_FLAG

        stored = copy.deepcopy(flag)
        stored.is_defined = True
        if callback is not Unset:
            stored.callback = callback
        if flag.key in self._keys:
            logger.debug("redefined flag %r", flag.key)
        return self._store(stored)

    def define_positional(self, positional, /):
        """append a copy of a positional and return the stored copy."""
        if not isinstance(positional, Positional):
            raise TypeError("define_positional() argument must be a positional")
        self._positionals.append(stored := copy.deepcopy(positional))
        return stored

    def append_positional(self, positional, /):
        """append a positional as-is (used for slots synthesized while parsing)."""
        self._positionals.append(positional)
        return positional

    def _name(self, token):
        """flag name of a caller-supplied token, None for positional or empty tokens."""
        return None if token == "" else flag_name(token)

    def _index(self, name):
        if name is None:
            return None
        if name.startswith("--"):
            return self._longs.get(name)
        return self._shorts.get(name)

    def find(self, token, /):
        """read-only lookup of the flag a token resolves to, WRONG_FLAG if unknown."""
        index = self._index(self._name(token))
        return WRONG_FLAG if index is None else self._flags[index]

    def is_defined(self, token, /):
        """true if the token's flag name resolves to a stored flag; never registers."""
        return self._index(self._name(token)) is not None

    def lookup(self, token, /):
        """
        resolve the flag a token names, registering it when unknown.

        - '-xyz' resolves to '-x' (only the leading flag of a cluster is addressable).
        - '--name=value' resolves to '--name'.
        - unknown names become bare, undefined flags; names that cannot form a
          flag (and positional tokens) give WRONG_FLAG.
        """
        if (name := self._name(token)) is None:
            return WRONG_FLAG
        if (index := self._index(name)) is not None:
            return self._flags[index]

        if classify(name) is TokenKind.SHORT_FLAG:
            if not valid_short(name):
                return WRONG_FLAG
            flag = Flag("", name)
        else:
            if not valid_long(name):
                return WRONG_FLAG
            flag = Flag(name)
        logger.debug("auto-registered undefined flag %r", name)
        return self._store(flag)

    def flag_at(self, index, /):
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            return WRONG_FLAG
        try:
            return self._flags[index]
        except IndexError:
            return WRONG_FLAG

    def positional_at(self, index, /):
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            return WRONG_ARG
        try:
            return self._positionals[index]
        except IndexError:
            return WRONG_ARG

    def index_of(self, item, /):
        """arena or positional index of a stored item (by identity), None if not stored."""
        for index, stored in enumerate(self._flags if isinstance(item, Flag) else self._positionals):
            if stored is item:
                return index
        return None

    def reset(self):
        """
        drop auto-registered flags and synthesized positionals, clear the parse
        state of everything else, and rebuild the name indexes.
        """
        flags = [flag for flag in self._flags if flag.is_defined]
        self._flags = []
        self._keys.clear()
        self._longs.clear()
        self._shorts.clear()
        for flag in flags:
            flag.reset()
            self._store(flag)

        self._positionals = [positional for positional in self._positionals if positional.is_user_defined]
        for positional in self._positionals:
            positional.reset()

    def __len__(self):
        return len(self._flags)

    def __repr__(self):
        return f"registry(flags={len(self._flags)}, positionals={len(self._positionals)})"


__all__ = (
    "Registry",
)
