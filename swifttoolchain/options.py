# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

from __future__ import annotations
import typing as T
from enum import Enum


class Option(Enum):

    """The driver options read while resolving the toolchain.

    The value is the spelling on the driver command line.
    """

    RESOURCE_DIR = '-resource-dir'
    SDK = '-sdk'
    RUNTIME_COMPATIBILITY_VERSION = '-runtime-compatibility-version'
    TOOLCHAIN_STDLIB_RPATH = '-toolchain-stdlib-rpath'
    NO_TOOLCHAIN_STDLIB_RPATH = '-no-toolchain-stdlib-rpath'
    NO_STDLIB_RPATH = '-no-stdlib-rpath'
    TARGET = '-target'
    TARGET_VARIANT = '-target-variant'

    @property
    def takes_argument(self) -> bool:
        return self in _SEPARATE_ARGUMENT_OPTIONS


_SEPARATE_ARGUMENT_OPTIONS = frozenset({
    Option.RESOURCE_DIR,
    Option.SDK,
    Option.RUNTIME_COMPATIBILITY_VERSION,
    Option.TARGET,
    Option.TARGET_VARIANT,
})

_by_spelling = {o.value: o for o in Option}  # type: T.Dict[str, Option]


class ParsedOptions:

    """An ordered, read-only bag of already validated driver options.

    Entries keep command line order so that "last one wins" queries are
    answered the same way the driver's own parser answers them.
    """

    def __init__(self, entries: T.Iterable[T.Tuple[Option, T.Optional[str]]] = ()):
        self._entries = tuple(entries)  # type: T.Tuple[T.Tuple[Option, T.Optional[str]], ...]

    def __repr__(self) -> str:
        return '<ParsedOptions: {}>'.format(' '.join(
            o.value if v is None else '{} {}'.format(o.value, v) for o, v in self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_args(cls, args: T.Sequence[str]) -> 'ParsedOptions':
        """Pick the options we understand out of a driver argument list.

        Both `-sdk /path` and `-sdk=/path` are accepted. Anything else is
        skipped; it belongs to other parts of the driver.
        """
        entries = []  # type: T.List[T.Tuple[Option, T.Optional[str]]]
        i = 0
        while i < len(args):
            arg = args[i]
            i += 1
            name, sep, inline = arg.partition('=')
            opt = _by_spelling.get(name)
            if opt is None:
                continue
            if not opt.takes_argument:
                if not sep:
                    entries.append((opt, None))
                continue
            if sep:
                entries.append((opt, inline))
            elif i < len(args):
                entries.append((opt, args[i]))
                i += 1
        return cls(entries)

    def get_last_argument(self, option: Option) -> T.Optional[str]:
        for opt, value in reversed(self._entries):
            if opt is option:
                return value
        return None

    def has_argument(self, *options: Option) -> bool:
        return any(opt in options for opt, _ in self._entries)

    def has_flag(self, positive: Option, negative: Option, default: bool) -> bool:
        for opt, _ in reversed(self._entries):
            if opt is positive:
                return True
            if opt is negative:
                return False
        return default
