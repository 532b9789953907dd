# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

"""Toolchains: where the tools and runtime libraries for a target live."""

from __future__ import annotations
import os
import threading
import typing as T
from enum import Enum

from . import mlog
from .options import Option
from .programs import Tool, XCRUN, lookup, lookup_executable_path
from .targetinfo import parse_target_info
from .toollib import (
    ToolchainException, ToolNotFound, check_nonzero_exit, chomp,
    validate_absolute_path,
)
from .triple import Triple

if T.TYPE_CHECKING:
    from .arguments import CommandLine
    from .envconfig import ToolchainConfig
    from .options import ParsedOptions
    from .targetinfo import FrontendTargetInfo

    ExistsCheck = T.Callable[[str], bool]


class LinkOutputType(Enum):
    EXECUTABLE = 'executable'
    DYNAMIC_LIBRARY = 'dynamic-library'
    STATIC_LIBRARY = 'static-library'
    OBJECT = 'object'


class Sanitizer(Enum):
    ADDRESS = 'address'
    THREAD = 'thread'
    UNDEFINED = 'undefined'
    FUZZER = 'fuzzer'
    SCUDO = 'scudo'

    @property
    def library_name(self) -> str:
        return _sanitizer_library_names[self]


_sanitizer_library_names = {
    Sanitizer.ADDRESS: 'asan',
    Sanitizer.THREAD: 'tsan',
    Sanitizer.UNDEFINED: 'ubsan',
    Sanitizer.FUZZER: 'fuzzer',
    Sanitizer.SCUDO: 'scudo',
}  # type: T.Dict[Sanitizer, str]


class Toolchain:

    """Tools and runtime locations shared by every platform.

    One instance lives for one driver invocation. Tool paths and frontend
    target info are looked up lazily and then cached on the instance.
    """

    tool_names = {}  # type: T.Dict[Tool, str]
    library_path_var = 'LD_LIBRARY_PATH'
    shared_library_suffix = '.so'
    static_library_suffix = '.a'

    def __init__(self, config: 'ToolchainConfig') -> None:
        self.config = config
        self._lock = threading.Lock()
        self._tool_paths = {tool: validate_absolute_path(path)
                            for tool, path in config.tool_overrides.items()}  # type: T.Dict[Tool, str]
        self._target_info = {}  # type: T.Dict[T.Tuple[T.Optional[str], T.Optional[str]], FrontendTargetInfo]

    def __repr__(self) -> str:
        return '<{}>'.format(self.__class__.__name__)

    @property
    def env(self) -> T.Mapping[str, str]:
        return self.config.env

    def tool_executable_name(self, tool: Tool) -> str:
        return self.tool_names[tool]

    def get_tool_path(self, tool: Tool) -> str:
        with self._lock:
            path = self._tool_paths.get(tool)
        if path is not None:
            return path
        name = self.tool_executable_name(tool)
        try:
            path = lookup(name, self.config)
        except ToolNotFound:
            mlog.log('Program', mlog.bold(name), 'found:', mlog.red('NO'))
            raise
        mlog.log('Program', mlog.bold(name), 'found:', mlog.green('YES'), '({})'.format(path))
        with self._lock:
            # Another thread may have got here first; keep whichever was stored
            return self._tool_paths.setdefault(tool, path)

    # Frontend queries

    def get_frontend_target_info(self, target: T.Optional[Triple] = None,
                                 target_variant: T.Optional[Triple] = None) -> 'FrontendTargetInfo':
        key = (target.triple if target else None, target_variant.triple if target_variant else None)
        with self._lock:
            cached = self._target_info.get(key)
        if cached is not None:
            return cached

        args = [self.get_tool_path(Tool.SWIFT_COMPILER), '-print-target-info']
        # Without a target the frontend describes the host
        if target is not None:
            args += ['-target', target.triple]
        if target_variant is not None:
            args += ['-target-variant', target_variant.triple]
        info = parse_target_info(check_nonzero_exit(args, env=self.env))
        with self._lock:
            return self._target_info.setdefault(key, info)

    def host_target_triple(self) -> Triple:
        return self.get_frontend_target_info().target.triple

    def swift_compiler_version(self) -> str:
        out = check_nonzero_exit([self.get_tool_path(Tool.SWIFT_COMPILER), '-version'], env=self.env)
        lines = out.decode(errors='replace').splitlines()
        return lines[0] if lines else ''

    # Runtime locations

    def compute_resource_dir_path(self, triple: Triple, options: 'ParsedOptions', is_shared: bool) -> str:
        variant = 'swift' if is_shared else 'swift_static'
        resource_dir = options.get_last_argument(Option.RESOURCE_DIR)
        sdk = options.get_last_argument(Option.SDK)
        if resource_dir is not None:
            base = validate_absolute_path(resource_dir)
        elif not triple.is_darwin and sdk and os.path.isabs(sdk):
            base = os.path.join(os.path.normpath(sdk), 'usr', 'lib', variant)
        else:
            frontend = self.get_tool_path(Tool.SWIFT_COMPILER)
            # <prefix>/bin/swift-frontend -> <prefix>/lib/<variant>
            prefix = os.path.dirname(os.path.dirname(frontend))
            base = os.path.join(prefix, 'lib', variant)
        platform = triple.platform_name()
        if platform:
            return os.path.join(base, platform)
        return base

    def compute_secondary_resource_dir_path(self, triple: Triple, primary_path: str) -> T.Optional[str]:
        # Mac Catalyst code also links against the macOS runtime
        if not triple.is_mac_catalyst:
            return None
        return os.path.join(os.path.dirname(primary_path), 'macosx')

    def clang_library_path(self, triple: Triple, options: 'ParsedOptions') -> str:
        platform = triple.platform_name(conflating_darwin=True)
        if platform is None:
            raise ToolchainException('No clang runtime directory for target {}'.format(triple))
        resource_dir = self.compute_resource_dir_path(triple, options, is_shared=True)
        return os.path.join(os.path.dirname(resource_dir), 'clang', 'lib', platform)

    def runtime_library_paths(self, triple: Triple, options: 'ParsedOptions',
                              sdk_path: T.Optional[str], is_shared: bool) -> T.List[str]:
        """Directories searched for the Swift runtime at link time.

        Order is search precedence and duplicates are kept.
        """
        primary = self.compute_resource_dir_path(triple, options, is_shared)
        result = [primary]

        secondary = self.compute_secondary_resource_dir_path(triple, primary)
        if secondary is not None:
            result.append(secondary)

        if sdk_path is not None:
            sdk = validate_absolute_path(sdk_path)
            if secondary is not None:
                result.append(os.path.join(sdk, 'System', 'iOSSupport', 'usr', 'lib', 'swift'))
            result.append(os.path.join(sdk, 'usr', 'lib', 'swift'))
        return result

    def runtime_library_name(self, sanitizer: Sanitizer, triple: Triple, is_shared: bool) -> str:
        raise NotImplementedError('runtime_library_name is not implemented for {}'.format(self))

    def runtime_library_exists(self, sanitizer: Sanitizer, triple: Triple, options: 'ParsedOptions',
                               is_shared: bool, exists: 'ExistsCheck' = os.path.exists) -> bool:
        name = self.runtime_library_name(sanitizer, triple, is_shared)
        return exists(os.path.join(self.clang_library_path(triple, options), name))

    def add_link_runtime_library(self, name: str, command_line: 'CommandLine',
                                 triple: Triple, options: 'ParsedOptions') -> None:
        command_line.append_path(os.path.join(self.clang_library_path(triple, options), name))

    def make_linker_output_filename(self, module_name: str, output_type: LinkOutputType) -> str:
        if output_type is LinkOutputType.EXECUTABLE:
            return module_name
        if output_type is LinkOutputType.DYNAMIC_LIBRARY:
            return 'lib' + module_name + self.shared_library_suffix
        if output_type is LinkOutputType.STATIC_LIBRARY:
            return 'lib' + module_name + self.static_library_suffix
        return module_name + '.o'

    def default_sdk_path(self, triple: T.Optional[Triple] = None) -> T.Optional[str]:
        return None

    @property
    def should_store_invocation_in_debug_info(self) -> bool:
        return 'RC_DEBUG_OPTIONS' in self.env

    def interpreter_environment(self, options: 'ParsedOptions', sdk_path: T.Optional[str],
                                triple: Triple) -> T.Dict[str, str]:
        """Variables needed to run Swift code in-process against this runtime."""
        paths = self.runtime_library_paths(triple, options, sdk_path, is_shared=True)
        existing = self.env.get(self.library_path_var)
        if existing:
            paths.append(existing)
        return {self.library_path_var: os.pathsep.join(paths)}


class DarwinToolchain(Toolchain):

    tool_names = {
        Tool.SWIFT_COMPILER: 'swift-frontend',
        Tool.STATIC_LINKER: 'libtool',
        Tool.DYNAMIC_LINKER: 'ld',
        Tool.CLANG: 'clang',
        Tool.SWIFT_AUTOLINK_EXTRACT: 'swift-autolink-extract',
        Tool.DSYMUTIL: 'dsymutil',
        Tool.LLDB: 'lldb',
        Tool.DWARFDUMP: 'dwarfdump',
        Tool.SWIFT_HELP: 'swift-help',
    }
    library_path_var = 'DYLD_LIBRARY_PATH'
    shared_library_suffix = '.dylib'

    def runtime_library_name(self, sanitizer: Sanitizer, triple: Triple, is_shared: bool) -> str:
        suffix = triple.darwin_library_name_suffix
        if suffix is None:
            raise ToolchainException('{} is not a Darwin target'.format(triple))
        if is_shared:
            return 'libclang_rt.{}_{}_dynamic.dylib'.format(sanitizer.library_name, suffix)
        return 'libclang_rt.{}_{}.a'.format(sanitizer.library_name, suffix)

    def default_sdk_path(self, triple: T.Optional[Triple] = None) -> T.Optional[str]:
        xcrun = lookup_executable_path(XCRUN, self.config.search_paths)
        if xcrun is None:
            return None
        sdk = 'macosx'
        if triple is not None and not triple.is_mac_catalyst:
            sdk = triple.platform_name() or sdk
        out = check_nonzero_exit([xcrun, '--sdk', sdk, '--show-sdk-path'], env=self.env)
        return validate_absolute_path(chomp(out.decode(errors='replace')))


class GenericUnixToolchain(Toolchain):

    tool_names = {
        Tool.SWIFT_COMPILER: 'swift-frontend',
        Tool.STATIC_LINKER: 'ar',
        # clang drives the system linker
        Tool.DYNAMIC_LINKER: 'clang',
        Tool.CLANG: 'clang',
        Tool.SWIFT_AUTOLINK_EXTRACT: 'swift-autolink-extract',
        Tool.DSYMUTIL: 'dsymutil',
        Tool.LLDB: 'lldb',
        Tool.DWARFDUMP: 'llvm-dwarfdump',
        Tool.SWIFT_HELP: 'swift-help',
    }

    def runtime_library_name(self, sanitizer: Sanitizer, triple: Triple, is_shared: bool) -> str:
        ext = self.shared_library_suffix if is_shared else self.static_library_suffix
        return 'libclang_rt.{}-{}{}'.format(sanitizer.library_name, triple.arch, ext)


def toolchain_for_triple(triple: Triple, config: 'ToolchainConfig') -> Toolchain:
    if triple.is_darwin:
        return DarwinToolchain(config)
    return GenericUnixToolchain(config)
