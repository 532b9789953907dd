# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The Meson development team

"""Progress and diagnostic output for toolchain resolution.

Everything passed to log() is shown on stdout and, once initialize() has
been called, copied to swift-toolchain-log.txt. debug() only ever goes to
the log file, so it is the place for detail nobody asked to see.
"""

from __future__ import annotations
import os
import sys
import typing as T

log_file = None                       # type: T.Optional[T.TextIO]
log_fname = 'swift-toolchain-log.txt'  # type: str
log_disable_stdout = False            # type: bool
log_errors_only = False               # type: bool


def disable() -> None:
    global log_disable_stdout  # pylint: disable=global-statement
    log_disable_stdout = True


def enable() -> None:
    global log_disable_stdout  # pylint: disable=global-statement
    log_disable_stdout = False


def set_quiet() -> None:
    global log_errors_only  # pylint: disable=global-statement
    log_errors_only = True


def set_verbose() -> None:
    global log_errors_only  # pylint: disable=global-statement
    log_errors_only = False


def initialize(logdir: str) -> None:
    global log_file  # pylint: disable=global-statement
    log_file = open(os.path.join(logdir, log_fname), 'w', encoding='utf-8')


def shutdown() -> T.Optional[str]:
    """Close the log file, returning its path if there was one."""
    global log_file  # pylint: disable=global-statement
    if log_file is None:
        return None
    f, log_file = log_file, None
    f.close()
    return f.name


def colorize_console() -> bool:
    stream = sys.stdout
    try:
        if not os.isatty(stream.fileno()):
            return False
    except (AttributeError, OSError, ValueError):
        # Replaced streams (io.StringIO under test) have no usable descriptor
        return False
    if sys.platform == 'win32':
        return 'ANSICON' in os.environ or 'WT_SESSION' in os.environ
    return os.environ.get('TERM', 'dumb') != 'dumb'


class AnsiDecorator:

    """A fragment of a log line that is coloured on capable terminals."""

    reset = '\033[0m'

    def __init__(self, text: str, code: str, quoted: bool = False):
        self.text = text
        self.code = code
        self.quoted = quoted

    def get_text(self, with_codes: bool) -> str:
        text = self.code + self.text + self.reset if with_codes else self.text
        return '"{}"'.format(text) if self.quoted else text

    def __str__(self) -> str:
        return self.get_text(colorize_console())


TV_Loggable = T.Union[str, AnsiDecorator]


def bold(text: str, quoted: bool = False) -> AnsiDecorator:
    return AnsiDecorator(text, '\033[1m', quoted=quoted)


def red(text: str) -> AnsiDecorator:
    return AnsiDecorator(text, '\033[1;31m')


def green(text: str) -> AnsiDecorator:
    return AnsiDecorator(text, '\033[1;32m')


def yellow(text: str) -> AnsiDecorator:
    return AnsiDecorator(text, '\033[1;33m')


def _render(args: T.Sequence[TV_Loggable], with_codes: bool) -> T.List[str]:
    return [a.get_text(with_codes) if isinstance(a, AnsiDecorator) else str(a) for a in args]


def _to_file(args: T.Sequence[TV_Loggable]) -> None:
    if log_file is not None:
        print(*_render(args, False), file=log_file)
        log_file.flush()


def debug(*args: TV_Loggable) -> None:
    _to_file(args)


def log(*args: TV_Loggable, is_error: bool = False) -> None:
    _to_file(args)
    if log_disable_stdout or (log_errors_only and not is_error):
        return
    line = ' '.join(_render(args, colorize_console()))
    try:
        print(line)
    except UnicodeEncodeError:
        print(line.encode('ascii', 'replace').decode('ascii'))


def warning(*args: TV_Loggable) -> None:
    log(yellow('WARNING:'), *args, is_error=True)


def error(*args: TV_Loggable) -> None:
    log(red('ERROR:'), *args, is_error=True)


def exception(e: Exception) -> None:
    """Report an error that stopped a command."""
    log()
    error(str(e))
