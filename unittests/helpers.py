# SPDX-License-Identifier: Apache-2.0
# Copyright © 2024 Intel Corporation

from __future__ import annotations
import os
import stat
import tempfile
import typing as T
import unittest
from contextlib import contextmanager

from swifttoolchain import mlog
from swifttoolchain.envconfig import ToolchainConfig
from swifttoolchain.programs import Tool
from swifttoolchain.toollib import is_windows

# A toolchain laid out as <prefix>/usr/bin/swift-frontend
TOOLCHAIN_PREFIX = '/Toolchains/swift-latest.xctoolchain/usr'
FRONTEND = TOOLCHAIN_PREFIX + '/bin/swift-frontend'
RESOURCE_ROOT = TOOLCHAIN_PREFIX + '/lib/swift'
STATIC_RESOURCE_ROOT = TOOLCHAIN_PREFIX + '/lib/swift_static'


def skip_if_windows(f):
    '''Tests that build fake executables with a POSIX mode bit.'''
    return unittest.skipIf(is_windows(), 'POSIX executables only')(f)


def make_config(env: T.Optional[T.Mapping[str, str]] = None,
                tool_overrides: T.Optional[T.Mapping[Tool, str]] = None,
                executable_dir: str = '/nonexistent/driver/bin',
                cwd: str = '/work') -> ToolchainConfig:
    return ToolchainConfig(env=env or {}, tool_overrides=tool_overrides or {},
                           executable_dir=executable_dir, cwd=cwd)


def frontend_config(**kwargs: T.Any) -> ToolchainConfig:
    '''A config whose frontend is pinned, so no lookup ever runs.'''
    overrides = dict(kwargs.pop('tool_overrides', {}))
    overrides.setdefault(Tool.SWIFT_COMPILER, FRONTEND)
    return make_config(tool_overrides=overrides, **kwargs)


def make_executable(path: str, contents: str = '#!/bin/sh\nexit 0\n') -> str:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(contents)
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def make_plain_file(path: str) -> str:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write('not a program\n')
    os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
    return path


@contextmanager
def temp_tree() -> T.Iterator[str]:
    with tempfile.TemporaryDirectory() as d:
        yield os.path.realpath(d)


class QuietTestCase(unittest.TestCase):

    def setUp(self) -> None:
        super().setUp()
        mlog.disable()
        self.addCleanup(mlog.enable)
