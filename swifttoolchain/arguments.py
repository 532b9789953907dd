# SPDX-License-Identifier: Apache-2.0
# Copyright © 2025 Intel Corporation

"""An abstract IR for linker command line arguments.

This lets us build up a command line without committing to how paths are
spelled on the host, and lower it into plain strings only when the command
is written out.
"""

from __future__ import annotations
import dataclasses
import os
import typing as T

from .toollib import join_args

if T.TYPE_CHECKING:
    from typing_extensions import TypeAlias

    # A Union of all Argument types
    Argument: TypeAlias = T.Union['Flag', 'PathArgument']


@dataclasses.dataclass(frozen=True)
class Flag:

    """A literal flag, passed through unchanged.

    :param value: The flag, including any leading dashes.
    """

    value: str

    def render(self) -> str:
        return self.value


@dataclasses.dataclass(frozen=True)
class PathArgument:

    """An absolute filesystem path.

    :param path: The path. It is normalised for the host when rendered.
    """

    path: str

    def render(self) -> str:
        return os.path.normpath(self.path)


class CommandLine:

    """An append-only sequence of arguments for one tool invocation."""

    def __init__(self, args: T.Iterable[Argument] = ()):
        self._args = list(args)  # type: T.List[Argument]

    def __repr__(self) -> str:
        return '<CommandLine: {}>'.format(self.join())

    def __len__(self) -> int:
        return len(self._args)

    def __iter__(self) -> T.Iterator[Argument]:
        return iter(self._args)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommandLine):
            return NotImplemented
        return self._args == other._args

    def append_flag(self, flag: str) -> None:
        self._args.append(Flag(flag))

    def append_path(self, path: str) -> None:
        self._args.append(PathArgument(path))

    def extend(self, other: T.Iterable[Argument]) -> None:
        self._args.extend(other)

    def to_strings(self) -> T.List[str]:
        return [a.render() for a in self._args]

    def join(self) -> str:
        return join_args(self.to_strings())
