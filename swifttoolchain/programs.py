# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The Meson development team

"""Finding the external programs the driver runs."""

from __future__ import annotations
import os
import typing as T
from enum import Enum

from . import mlog
from .toollib import (
    ToolchainException, ToolNotFound, check_nonzero_exit, chomp,
    is_executable_file, validate_absolute_path,
)

if T.TYPE_CHECKING:
    from .envconfig import ToolchainConfig

    # A strategy returns a path, or None to let the next one try
    LookupStrategy = T.Callable[[str, ToolchainConfig], T.Optional[str]]


class Tool(Enum):
    SWIFT_COMPILER = 'swift-compiler'
    STATIC_LINKER = 'static-linker'
    DYNAMIC_LINKER = 'dynamic-linker'
    CLANG = 'clang'
    SWIFT_AUTOLINK_EXTRACT = 'swift-autolink-extract'
    DSYMUTIL = 'dsymutil'
    LLDB = 'lldb'
    DWARFDUMP = 'dwarfdump'
    SWIFT_HELP = 'swift-help'


FRONTEND_NAME = 'swift-frontend'
LEGACY_FRONTEND_NAME = 'swift'
XCRUN = 'xcrun'


def lookup_executable_path(filename: str, search_paths: T.Iterable[str]) -> T.Optional[str]:
    for d in search_paths:
        trial = os.path.join(d, filename)
        if is_executable_file(trial):
            return trial
    return None


def _from_env_override(executable: str, config: 'ToolchainConfig') -> T.Optional[str]:
    value = config.env_override_for(executable)
    if value is None:
        return None
    return validate_absolute_path(value)


def _from_executable_dir(executable: str, config: 'ToolchainConfig') -> T.Optional[str]:
    return lookup_executable_path(executable, [config.executable_dir])


def _from_xcrun(executable: str, config: 'ToolchainConfig') -> T.Optional[str]:
    xcrun = lookup_executable_path(XCRUN, config.search_paths)
    if xcrun is None:
        mlog.debug('xcrun not found, not asking it for', executable)
        return None
    try:
        out = check_nonzero_exit([xcrun, '--find', executable], env=config.env)
    except ToolchainException as e:
        mlog.debug('xcrun could not find {}: {}'.format(executable, e))
        return None
    path = chomp(out.decode(errors='replace'))
    if not os.path.isabs(path):
        return None
    return path


def _from_search_paths(executable: str, config: 'ToolchainConfig') -> T.Optional[str]:
    return lookup_executable_path(executable, config.search_paths)


def _from_legacy_name(executable: str, config: 'ToolchainConfig') -> T.Optional[str]:
    # Older toolchains only ship the frontend under the driver's name
    if executable != FRONTEND_NAME:
        return None
    try:
        return lookup(LEGACY_FRONTEND_NAME, config)
    except ToolNotFound:
        return None


def _from_test_fallback(executable: str, config: 'ToolchainConfig') -> T.Optional[str]:
    if not config.exec_path_fallback_enabled:
        return None
    path = '/usr/bin/' + executable
    mlog.warning('Assuming', mlog.bold(path), 'for', executable, 'without checking it exists')
    return path


LOOKUP_STRATEGIES = [
    _from_env_override,
    _from_executable_dir,
    _from_xcrun,
    _from_search_paths,
    _from_legacy_name,
    _from_test_fallback,
]  # type: T.List[LookupStrategy]


def lookup(executable: str, config: 'ToolchainConfig') -> str:
    """Find an executable by name.

    Each strategy in LOOKUP_STRATEGIES is asked in turn and the first path
    returned wins. An invalid environment override is an error, not a miss.
    """
    for strategy in LOOKUP_STRATEGIES:
        path = strategy(executable, config)
        if path is not None:
            return path
    raise ToolNotFound(executable)
