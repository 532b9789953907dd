# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

from __future__ import annotations
import dataclasses
import os
import sys
import typing as T
from types import MappingProxyType

from . import mlog
from .toollib import env_var_component

if T.TYPE_CHECKING:
    from .programs import Tool


# This holds every input the toolchain reads from its surroundings: the
# environment, explicit tool paths and where the driver itself lives. It is
# built once at startup and then only read, so toolchains for different
# architectures can share one instance across threads.
#
# Anything derived from these inputs (resolved tool paths, frontend target
# info) lives on the Toolchain objects instead.

EXEC_PATH_FALLBACK_VAR = 'SWIFT_DRIVER_TESTS_ENABLE_EXEC_PATH_FALLBACK'


def _default_executable_dir() -> str:
    return os.path.dirname(os.path.realpath(sys.argv[0] or sys.executable))


def env_override_name(executable: str) -> str:
    """
    SWIFT_DRIVER_<NAME>_EXEC, the variable that pins the path of an executable.
    """
    return 'SWIFT_DRIVER_{}_EXEC'.format(env_var_component(executable))


def get_env_search_paths(path_string: T.Optional[str], cwd: str) -> T.List[str]:
    """Split a PATH style string into absolute directories, keeping order."""
    if not path_string:
        return []
    result = []  # type: T.List[str]
    for entry in path_string.split(os.pathsep):
        if not entry:
            continue
        result.append(os.path.normpath(os.path.join(cwd, entry)))
    return result


@dataclasses.dataclass(frozen=True)
class ToolchainConfig:

    env: T.Mapping[str, str] = dataclasses.field(default_factory=dict)
    tool_overrides: T.Mapping['Tool', str] = dataclasses.field(default_factory=dict)
    executable_dir: str = dataclasses.field(default_factory=_default_executable_dir)
    cwd: str = dataclasses.field(default_factory=os.getcwd)

    def __post_init__(self) -> None:
        # Snapshot the mappings so later changes to the caller's dicts (or to
        # os.environ) are not observed.
        object.__setattr__(self, 'env', MappingProxyType(dict(self.env)))
        object.__setattr__(self, 'tool_overrides', MappingProxyType(dict(self.tool_overrides)))

    @classmethod
    def from_environment(cls, tool_overrides: T.Optional[T.Mapping['Tool', str]] = None,
                         executable_dir: T.Optional[str] = None) -> 'ToolchainConfig':
        kwargs = {}  # type: T.Dict[str, T.Any]
        if executable_dir is not None:
            kwargs['executable_dir'] = executable_dir
        return cls(env=os.environ.copy(), tool_overrides=tool_overrides or {}, **kwargs)

    def with_tool_override(self, tool: 'Tool', path: str) -> 'ToolchainConfig':
        overrides = dict(self.tool_overrides)
        overrides[tool] = path
        return dataclasses.replace(self, tool_overrides=overrides)

    @property
    def search_paths(self) -> T.List[str]:
        return get_env_search_paths(self.env.get('PATH'), self.cwd)

    def env_override_for(self, executable: str) -> T.Optional[str]:
        var = env_override_name(executable)
        value = self.env.get(var)
        if value is None:
            mlog.debug('{!r} is not defined in the environment.'.format(var))
            return None
        mlog.log('Using {!r} from environment with value: {!r}'.format(var, value))
        return value

    @property
    def exec_path_fallback_enabled(self) -> bool:
        return self.env.get(EXEC_PATH_FALLBACK_VAR) == '1'
