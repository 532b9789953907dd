# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

from __future__ import annotations
import argparse
import json
import sys
import typing as T

from . import mlog
from .arguments import CommandLine
from .envconfig import ToolchainConfig
from .linkers import add_args_to_link_stdlib
from .options import Option, ParsedOptions
from .programs import Tool
from .toolchains import LinkOutputType, toolchain_for_triple
from .toollib import ToolchainException, version
from .triple import Triple


def add_target_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--target', required=True, help='Target triple.')
    parser.add_argument('--sdk', default=None, help='Path to the SDK to link against.')
    parser.add_argument('--resource-dir', default=None,
                        help='Override the Swift runtime resource directory.')


def add_link_args_arguments(parser: argparse.ArgumentParser) -> None:
    add_target_arguments(parser)
    parser.add_argument('--runtime-compatibility-version', default=None,
                        help='Runtime version to link compatibility libraries for (5.0, 5.1 or none).')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--toolchain-stdlib-rpath', action='store_true',
                       help='Add rpaths to the toolchain\'s runtime directories.')
    group.add_argument('--no-toolchain-stdlib-rpath', action='store_true',
                       help='Do not add rpaths to the toolchain\'s runtime directories (default).')
    parser.add_argument('--no-stdlib-rpath', action='store_true',
                        help='Do not add any rpath for the standard library.')
    parser.add_argument('--output-kind', default=LinkOutputType.EXECUTABLE.value,
                        choices=[t.value for t in LinkOutputType],
                        help='Kind of binary being linked (default: %(default)s).')


def add_runtime_paths_arguments(parser: argparse.ArgumentParser) -> None:
    add_target_arguments(parser)
    parser.add_argument('--static', action='store_true',
                        help='Use the static runtime directories.')


def add_find_tool_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('tool', choices=[t.value for t in Tool])
    parser.add_argument('--target', default=None,
                        help='Target triple, selects the toolchain flavour (default: host).')


def add_target_info_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--target', default=None)
    parser.add_argument('--target-variant', default=None)


def options_from_namespace(options: argparse.Namespace) -> ParsedOptions:
    entries = []  # type: T.List[T.Tuple[Option, T.Optional[str]]]
    if options.sdk is not None:
        entries.append((Option.SDK, options.sdk))
    if options.resource_dir is not None:
        entries.append((Option.RESOURCE_DIR, options.resource_dir))
    if getattr(options, 'runtime_compatibility_version', None) is not None:
        entries.append((Option.RUNTIME_COMPATIBILITY_VERSION, options.runtime_compatibility_version))
    if getattr(options, 'toolchain_stdlib_rpath', False):
        entries.append((Option.TOOLCHAIN_STDLIB_RPATH, None))
    if getattr(options, 'no_toolchain_stdlib_rpath', False):
        entries.append((Option.NO_TOOLCHAIN_STDLIB_RPATH, None))
    if getattr(options, 'no_stdlib_rpath', False):
        entries.append((Option.NO_STDLIB_RPATH, None))
    return ParsedOptions(entries)


def run_link_args(options: argparse.Namespace, config: ToolchainConfig) -> int:
    triple = Triple.parse(options.target)
    parsed = options_from_namespace(options)
    toolchain = toolchain_for_triple(triple, config)
    command_line = CommandLine()
    add_args_to_link_stdlib(toolchain, command_line, parsed, options.sdk, triple,
                            LinkOutputType(options.output_kind))
    print(command_line.join())
    return 0


def run_runtime_paths(options: argparse.Namespace, config: ToolchainConfig) -> int:
    triple = Triple.parse(options.target)
    toolchain = toolchain_for_triple(triple, config)
    for path in toolchain.runtime_library_paths(triple, options_from_namespace(options),
                                                options.sdk, is_shared=not options.static):
        print(path)
    return 0


def _build_machine_triple() -> Triple:
    # Only used to pick the toolchain flavour, so the architecture is irrelevant
    if sys.platform == 'darwin':
        return Triple.parse('x86_64-apple-macosx')
    return Triple.parse('x86_64-unknown-linux-gnu')


def run_find_tool(options: argparse.Namespace, config: ToolchainConfig) -> int:
    triple = Triple.parse(options.target) if options.target else _build_machine_triple()
    toolchain = toolchain_for_triple(triple, config)
    print(toolchain.get_tool_path(Tool(options.tool)))
    return 0


def run_target_info(options: argparse.Namespace, config: ToolchainConfig) -> int:
    target = Triple.parse(options.target) if options.target else None
    variant = Triple.parse(options.target_variant) if options.target_variant else None
    toolchain = toolchain_for_triple(target or _build_machine_triple(), config)
    info = toolchain.get_frontend_target_info(target, variant)
    print(json.dumps(info.to_json(), indent=2))
    return 0


def open_log(logdir: str) -> None:
    try:
        mlog.initialize(logdir)
    except OSError as e:
        raise ToolchainException('Could not open log file in {!r}: {}'.format(logdir, e.strerror or e))


class CommandLineParser:
    def __init__(self) -> None:
        self.commands = {}  # type: T.Dict[str, T.Callable[[argparse.Namespace, ToolchainConfig], int]]
        self.parser = argparse.ArgumentParser(prog='swift-toolchain')
        self.parser.add_argument('--version', action='version', version=version)
        self.parser.add_argument('-q', '--quiet', action='store_true',
                                 help='Only print errors.')
        self.parser.add_argument('--logdir', default=None,
                                 help='Also write a log file to this directory.')
        self.subparsers = self.parser.add_subparsers(title='Commands', dest='command')

        self.add_command('find-tool', add_find_tool_arguments, run_find_tool,
                         help_msg='Print the absolute path of a toolchain program')
        self.add_command('link-args', add_link_args_arguments, run_link_args,
                         help_msg='Print the linker arguments for the Swift standard library')
        self.add_command('runtime-paths', add_runtime_paths_arguments, run_runtime_paths,
                         help_msg='Print the runtime library search paths for a target')
        self.add_command('print-target-info', add_target_info_arguments, run_target_info,
                         help_msg='Ask the frontend to describe a target')

    def add_command(self, name: str, add_arguments_func: T.Callable[[argparse.ArgumentParser], None],
                    run_func: T.Callable[[argparse.Namespace, ToolchainConfig], int],
                    help_msg: str) -> None:
        p = self.subparsers.add_parser(name, help=help_msg)
        add_arguments_func(p)
        p.set_defaults(run_func=run_func)
        self.commands[name] = run_func

    def run(self, args: T.List[str], config: T.Optional[ToolchainConfig] = None) -> int:
        options = self.parser.parse_args(args)
        if options.command is None:
            self.parser.print_help()
            return 2
        if options.quiet:
            mlog.set_quiet()
        if config is None:
            config = ToolchainConfig.from_environment()
        stdout_disabled = mlog.log_disable_stdout
        try:
            if options.logdir:
                open_log(options.logdir)
            # Commands print machine readable output, so progress only goes
            # to the log file while they run
            mlog.disable()
            return options.run_func(options, config)
        except ToolchainException as e:
            if not stdout_disabled:
                mlog.enable()
            mlog.exception(e)
            return 1
        finally:
            if not stdout_disabled:
                mlog.enable()
            mlog.shutdown()
            mlog.set_verbose()


def run(args: T.List[str], config: T.Optional[ToolchainConfig] = None) -> int:
    return CommandLineParser().run(args, config)


def main() -> int:
    return run(sys.argv[1:])


if __name__ == '__main__':
    sys.exit(main())
