# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

"""Which Swift runtime ABI a deployment target is guaranteed to have.

Binaries deployed to an OS that predates a runtime feature must statically
link a compatibility library providing it. The tables here map an OS
version to the newest runtime that OS is known to ship.
"""

from __future__ import annotations
import sys
import typing as T
from dataclasses import dataclass

from .triple import OSFamily

if T.TYPE_CHECKING:
    from .triple import OSVersion, Triple

CompatibilityVersion = T.Tuple[int, int]

# Stands in for "any value" in a rule ceiling
ANY = sys.maxsize

# arm64e shipped alongside Swift 5.3, so there is nothing older to support
ARM64E_COMPATIBILITY_VERSION = (5, 3)  # type: CompatibilityVersion


@dataclass(frozen=True)
class CompatibilityRule:

    """OS versions up to and including `ceiling` have runtime `version`."""

    ceiling: 'OSVersion'
    version: CompatibilityVersion

    def matches(self, os_version: 'OSVersion') -> bool:
        return os_version <= self.ceiling


# Rules are tried in order and the first match wins. Each ceiling is looser
# than the one before it, so reordering them changes the answers.
MACOS_RULES = [
    CompatibilityRule((10, 14, ANY), (5, 0)),
    CompatibilityRule((10, 15, 3), (5, 1)),
    CompatibilityRule((10, 15, ANY), (5, 2)),
]  # type: T.List[CompatibilityRule]

IOS_RULES = [
    CompatibilityRule((12, ANY, ANY), (5, 0)),
    CompatibilityRule((13, 3, ANY), (5, 1)),
    CompatibilityRule((13, ANY, ANY), (5, 2)),
]  # type: T.List[CompatibilityRule]

WATCHOS_RULES = [
    CompatibilityRule((5, ANY, ANY), (5, 0)),
    CompatibilityRule((6, 1, ANY), (5, 1)),
    CompatibilityRule((6, ANY, ANY), (5, 2)),
]  # type: T.List[CompatibilityRule]


def _first_match(rules: T.Sequence[CompatibilityRule], os_version: 'OSVersion') -> T.Optional[CompatibilityVersion]:
    for rule in rules:
        if rule.matches(os_version):
            return rule.version
    return None


def get_runtime_compatibility_version(triple: 'Triple') -> T.Optional[CompatibilityVersion]:
    if triple.arch == 'arm64e':
        return ARM64E_COMPATIBILITY_VERSION
    if triple.is_macosx:
        return _first_match(MACOS_RULES, triple.version_for(OSFamily.MACOSX))
    if triple.is_ios:
        return _first_match(IOS_RULES, triple.version_for(OSFamily.IOS))
    if triple.is_watchos:
        return _first_match(WATCHOS_RULES, triple.version_for(OSFamily.WATCHOS))
    return None


class _NoVersion:
    def __repr__(self) -> str:
        return 'NO_VERSION'


# Returned when the user explicitly asked for no compatibility libraries,
# as opposed to None which means the request was not understood
NO_VERSION = _NoVersion()

_requested_versions = {
    '5.0': (5, 0),
    '5.1': (5, 1),
    'none': NO_VERSION,
    'disable': NO_VERSION,
}  # type: T.Dict[str, T.Union[CompatibilityVersion, _NoVersion]]


def resolve_requested_compatibility_version(value: str) -> T.Union[CompatibilityVersion, _NoVersion, None]:
    return _requested_versions.get(value)


# Back-deployment libraries, in the order they are passed to the linker
@dataclass(frozen=True)
class BackDeployLibrary:
    filename: str
    # Linked when the compatibility version is at or below this
    threshold: CompatibilityVersion
    executable_only: bool = False


BACK_DEPLOY_LIBRARIES = [
    BackDeployLibrary('libswiftCompatibility50.a', (5, 0)),
    BackDeployLibrary('libswiftCompatibility51.a', (5, 1)),
    BackDeployLibrary('libswiftCompatibilityDynamicReplacements.a', (5, 0), executable_only=True),
]  # type: T.List[BackDeployLibrary]
