# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

"""Linker arguments needed to link against the Swift standard library."""

from __future__ import annotations
import os
import typing as T

from . import mlog
from .arguments import CommandLine
from .options import Option
from .rpath import resolve_rpath_policy
from .runtimecompat import (
    BACK_DEPLOY_LIBRARIES, NO_VERSION, CompatibilityVersion,
    get_runtime_compatibility_version, resolve_requested_compatibility_version,
)
from .toolchains import LinkOutputType

if T.TYPE_CHECKING:
    from .options import ParsedOptions
    from .toolchains import ExistsCheck, Toolchain
    from .triple import Triple


def runtime_compatibility_version(options: 'ParsedOptions', triple: 'Triple',
                                  output_type: LinkOutputType) -> T.Optional[CompatibilityVersion]:
    """The runtime version to provide compatibility libraries for.

    A recognised -runtime-compatibility-version always applies. Otherwise the
    version is inferred from the deployment target, for executables only.
    """
    requested = options.get_last_argument(Option.RUNTIME_COMPATIBILITY_VERSION)
    if requested is not None:
        version = resolve_requested_compatibility_version(requested)
        if version is NO_VERSION:
            return None
        if version is not None:
            return T.cast('CompatibilityVersion', version)
        # TODO: diagnose unknown runtime compatibility versions once we know
        # whether existing build scripts depend on them being ignored.
        mlog.debug('Ignoring unknown runtime compatibility version', mlog.bold(requested))
    if output_type is LinkOutputType.EXECUTABLE:
        return get_runtime_compatibility_version(triple)
    return None


def add_args_to_link_stdlib(toolchain: 'Toolchain', command_line: CommandLine,
                            options: 'ParsedOptions', sdk_path: T.Optional[str],
                            triple: 'Triple', output_type: LinkOutputType,
                            exists: 'ExistsCheck' = os.path.exists) -> None:
    # Collected separately so a failure leaves the caller's command line untouched
    args = CommandLine()
    compatibility_version = runtime_compatibility_version(options, triple, output_type)
    resource_dir = toolchain.compute_resource_dir_path(triple, options, is_shared=True)

    # Force load compatibility libraries when deploying to an OS whose
    # runtime is older than what we build against.
    if compatibility_version is not None:
        mlog.log('Swift runtime compatibility version:', mlog.bold('{}.{}'.format(*compatibility_version)))
        for lib in BACK_DEPLOY_LIBRARIES:
            if compatibility_version > lib.threshold:
                continue
            if lib.executable_only and output_type is not LinkOutputType.EXECUTABLE:
                continue
            path = os.path.join(resource_dir, lib.filename)
            if not exists(path):
                mlog.debug('Compatibility library', path, 'does not exist, skipping')
                continue
            args.append_flag('-force_load')
            args.append_path(path)

    runtime_paths = toolchain.runtime_library_paths(triple, options, sdk_path, is_shared=True)
    for path in runtime_paths:
        args.append_flag('-L')
        args.append_path(path)

    policy = resolve_rpath_policy(options, triple)
    mlog.debug('Stdlib rpath policy for', triple.triple, 'is', policy.value)
    for path in policy.paths(runtime_paths):
        args.append_flag('-rpath')
        args.append_path(path)

    command_line.extend(args)


def plan_stdlib_link_args(toolchain: 'Toolchain', options: 'ParsedOptions',
                          sdk_path: T.Optional[str], triple: 'Triple',
                          output_type: LinkOutputType,
                          exists: 'ExistsCheck' = os.path.exists) -> CommandLine:
    """Compute the stdlib arguments as a new command line.

    Nothing is returned if any step fails, so callers never see a partial
    plan.
    """
    command_line = CommandLine()
    add_args_to_link_stdlib(toolchain, command_line, options, sdk_path, triple, output_type, exists)
    return command_line
