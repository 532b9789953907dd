# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

"""A library of helper functionality shared by the toolchain modules."""

from __future__ import annotations
import os
import re
import shlex
import stat
import subprocess
import sys
import typing as T

from . import mlog

version = '0.4.0'


class ToolchainException(Exception):
    '''Exceptions thrown while resolving a toolchain'''

    def __init__(self, message: str, *, hint: T.Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        msg = super().__str__()
        if self.hint:
            return '{}\nHint: {}'.format(msg, self.hint)
        return msg


class ToolNotFound(ToolchainException):
    '''Every lookup strategy for a tool failed'''

    def __init__(self, tool: str) -> None:
        super().__init__('Unable to find executable {!r}'.format(tool),
                         hint='set SWIFT_DRIVER_{}_EXEC to its absolute path'.format(env_var_component(tool)))
        self.tool = tool


class InvalidPathError(ToolchainException):
    '''A path given by the user is not a well formed absolute path'''

    def __init__(self, path: str) -> None:
        super().__init__('Invalid absolute path: {!r}'.format(path))
        self.path = path


class MalformedTargetInfo(ToolchainException):
    '''The frontend returned target information we could not decode'''

    def __init__(self, raw: str) -> None:
        super().__init__('Could not decode frontend target info:\n{}'.format(raw))
        self.raw = raw


class UnsupportedTargetError(ToolchainException):
    '''A well formed target triple that cannot be resolved to a deployment target'''

    def __init__(self, triple: str, reason: str) -> None:
        super().__init__('Unsupported target {}: {}'.format(triple, reason))
        self.triple = triple


class ProcessError(ToolchainException):
    '''An external tool exited with a non-zero status'''

    def __init__(self, cmd: T.List[str], returncode: int, stderr: str = '') -> None:
        msg = 'Command "{}" failed with status {}.'.format(join_args(cmd), returncode)
        if stderr:
            msg += '\n' + stderr.rstrip()
        super().__init__(msg)
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr


def is_windows() -> bool:
    return sys.platform == 'win32'


def env_var_component(name: str) -> str:
    '''Turn an executable name into the form used inside environment variable names.

    swift-frontend -> SWIFT_FRONTEND
    '''
    return re.sub(r'[^A-Za-z0-9]', '_', name).upper()


def validate_absolute_path(path: T.Optional[str]) -> str:
    if not path or not os.path.isabs(path):
        raise InvalidPathError(path or '')
    return os.path.normpath(path)


def is_executable_file(path: str) -> bool:
    try:
        mode = os.stat(path).st_mode
    except OSError:
        return False
    if not stat.S_ISREG(mode):
        return False
    if is_windows():
        return os.path.splitext(path)[1].lower() in {'.exe', '.bat', '.cmd', '.com'}
    return bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def quote_arg(arg: str) -> str:
    return shlex.quote(arg)


def join_args(args: T.Iterable[str]) -> str:
    return ' '.join([quote_arg(x) for x in args])


def Popen_safe(args: T.List[str], env: T.Optional[T.Mapping[str, str]] = None,
               **kwargs: T.Any) -> T.Tuple[subprocess.Popen, bytes, bytes]:
    '''Run a command to completion and return the raw stdout and stderr.

    Output is handed back undecoded so callers can decide how strict to be
    about the encoding.
    '''
    # Redirect stdin to DEVNULL otherwise the command run by us here might mess
    # up the console.
    kwargs.setdefault('stdin', subprocess.DEVNULL)
    mlog.debug('Running command:', join_args(args))
    try:
        p = subprocess.Popen(args, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                             env=dict(env) if env is not None else None,
                             close_fds=False, **kwargs)
    except OSError as e:
        raise ProcessError(args, -1, str(e))
    o, e = p.communicate()
    return p, o, e


def check_nonzero_exit(args: T.List[str], env: T.Optional[T.Mapping[str, str]] = None) -> bytes:
    '''Run a command and return its stdout, raising ProcessError on failure.'''
    p, o, e = Popen_safe(args, env=env)
    if p.returncode != 0:
        raise ProcessError(args, p.returncode, e.decode(errors='replace'))
    return o


def chomp(s: str) -> str:
    return s.rstrip('\r\n')
