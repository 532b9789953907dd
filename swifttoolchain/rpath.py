# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

from __future__ import annotations
import typing as T
from enum import Enum

from .options import Option

if T.TYPE_CHECKING:
    from .options import ParsedOptions
    from .triple import Triple

# Where an OS with a built-in Swift runtime keeps it
OS_RUNTIME_DIR = '/usr/lib/swift'


class RpathPolicy(Enum):

    """The rpaths needed to find the standard library at runtime."""

    # Let the toolchain's runtime directories override the OS copy
    TOOLCHAIN = 'toolchain'
    # Search the OS location only
    OS = 'os'
    # Add no rpaths at all
    NONE = 'none'

    def paths(self, runtime_library_paths: T.Sequence[str]) -> T.List[str]:
        if self is RpathPolicy.TOOLCHAIN:
            return list(runtime_library_paths)
        if self is RpathPolicy.OS:
            return [OS_RUNTIME_DIR]
        if self is RpathPolicy.NONE:
            return []
        raise AssertionError('unhandled rpath policy {!r}'.format(self))


def resolve_rpath_policy(options: 'ParsedOptions', triple: 'Triple') -> RpathPolicy:
    if options.has_flag(Option.TOOLCHAIN_STDLIB_RPATH, Option.NO_TOOLCHAIN_STDLIB_RPATH, False):
        return RpathPolicy.TOOLCHAIN
    if triple.supports_swift_in_the_os or options.has_argument(Option.NO_STDLIB_RPATH):
        # The stdlib install name is already an absolute /usr/lib/swift path
        return RpathPolicy.NONE
    # Back-deploying to an OS that predates the built-in runtime
    return RpathPolicy.OS
