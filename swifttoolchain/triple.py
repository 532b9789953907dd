# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

"""Target triples.

A triple is parsed once into an immutable description of the machine code
is being built for. The OS family decides which accessors are meaningful;
asking a watchOS triple for its iOS version is a programming error and
raises ValueError rather than returning a misleading number.
"""

from __future__ import annotations
import re
import typing as T
from dataclasses import dataclass
from enum import Enum

from .toollib import UnsupportedTargetError

OSVersion = T.Tuple[int, int, int]


class OSFamily(Enum):
    DARWIN = 'darwin'
    MACOSX = 'macosx'
    IOS = 'ios'
    TVOS = 'tvos'
    WATCHOS = 'watchos'
    LINUX = 'linux'
    FREEBSD = 'freebsd'
    OPENBSD = 'openbsd'
    WINDOWS = 'windows'
    HAIKU = 'haiku'
    WASI = 'wasi'


_os_aliases = {
    'macos': OSFamily.MACOSX,
    'win32': OSFamily.WINDOWS,
}  # type: T.Dict[str, OSFamily]

DARWIN_FAMILIES = frozenset({OSFamily.DARWIN, OSFamily.MACOSX, OSFamily.IOS,
                             OSFamily.TVOS, OSFamily.WATCHOS})

# First OS releases that ship the Swift runtime in /usr/lib/swift
SWIFT_IN_THE_OS = {
    OSFamily.MACOSX: (10, 14, 4),
    OSFamily.IOS: (12, 2, 0),
    OSFamily.WATCHOS: (5, 2, 0),
}  # type: T.Dict[OSFamily, OSVersion]

_os_re = re.compile(r'^([a-zA-Z_]+)([0-9][0-9.]*)?$')


def _parse_version(s: T.Optional[str]) -> OSVersion:
    parts = [int(p) for p in (s or '').split('.') if p.isdigit()]
    parts = (parts + [0, 0, 0])[:3]
    return (parts[0], parts[1], parts[2])


@dataclass(frozen=True)
class Triple:

    """A parsed `arch-vendor-os[version][-environment]` target triple."""

    triple: str
    arch: str
    vendor: str
    os: T.Optional[OSFamily]
    os_version: OSVersion
    environment: T.Optional[str]

    @classmethod
    def parse(cls, triple: str) -> 'Triple':
        components = triple.split('-', 3)
        arch = components[0]
        vendor = components[1] if len(components) > 1 else 'unknown'
        os_component = components[2] if len(components) > 2 else ''
        environment = components[3] if len(components) > 3 else None

        os_family = None  # type: T.Optional[OSFamily]
        version = (0, 0, 0)
        m = _os_re.match(os_component)
        if m:
            name = m.group(1).lower()
            try:
                os_family = OSFamily(name)
            except ValueError:
                os_family = _os_aliases.get(name)
            version = _parse_version(m.group(2))
        return cls(triple, arch, vendor, os_family, version, environment)

    def __str__(self) -> str:
        return self.triple

    @property
    def is_darwin(self) -> bool:
        return self.os in DARWIN_FAMILIES

    @property
    def is_macosx(self) -> bool:
        return self.os in {OSFamily.DARWIN, OSFamily.MACOSX}

    @property
    def is_ios(self) -> bool:
        """iOS, tvOS and Mac Catalyst all report as iOS."""
        return self.os in {OSFamily.IOS, OSFamily.TVOS}

    @property
    def is_tvos(self) -> bool:
        return self.os is OSFamily.TVOS

    @property
    def is_watchos(self) -> bool:
        return self.os is OSFamily.WATCHOS

    @property
    def is_mac_catalyst(self) -> bool:
        return self.os is OSFamily.IOS and self.environment == 'macabi'

    @property
    def is_simulator(self) -> bool:
        if not (self.is_ios or self.is_watchos) or self.is_mac_catalyst:
            return False
        if self.environment == 'simulator':
            return True
        # Older triples spell the simulator only through the architecture
        return self.arch in {'i386', 'x86_64'}

    def version_for(self, family: OSFamily) -> OSVersion:
        """Return the deployment version of this triple for an OS family.

        Only MACOSX, IOS and WATCHOS may be requested; tvOS answers to IOS.
        """
        if family is OSFamily.MACOSX:
            if self.os is OSFamily.MACOSX:
                if self.os_version[0] == 0:
                    return (10, 4, 0)
                return self.os_version
            if self.os is OSFamily.DARWIN:
                return self._darwin_kernel_to_macos()
        elif family is OSFamily.IOS:
            if self.is_ios:
                if self.os_version[0] == 0:
                    return (7, 0, 0) if self.arch in {'arm64', 'arm64e', 'aarch64'} else (3, 0, 0)
                return self.os_version
        elif family is OSFamily.WATCHOS:
            if self.is_watchos:
                if self.os_version[0] == 0:
                    return (2, 0, 0)
                return self.os_version
        raise ValueError('{} has no {} version'.format(self.triple, family.value))

    def _darwin_kernel_to_macos(self) -> OSVersion:
        major = self.os_version[0] or 8
        if major < 4:
            raise UnsupportedTargetError(self.triple, 'darwin kernel versions before 4 have no macOS release')
        if major <= 19:
            return (10, major - 4, 0)
        return (major - 9, 0, 0)

    @property
    def supports_swift_in_the_os(self) -> bool:
        if self.is_mac_catalyst:
            return True
        if self.is_macosx:
            return self.version_for(OSFamily.MACOSX) >= SWIFT_IN_THE_OS[OSFamily.MACOSX]
        if self.is_ios:
            return self.version_for(OSFamily.IOS) >= SWIFT_IN_THE_OS[OSFamily.IOS]
        if self.is_watchos:
            return self.version_for(OSFamily.WATCHOS) >= SWIFT_IN_THE_OS[OSFamily.WATCHOS]
        return False

    def platform_name(self, conflating_darwin: bool = False) -> T.Optional[str]:
        """Name of the per-platform directory in the runtime resource tree."""
        if self.is_darwin and conflating_darwin:
            return 'darwin'
        if self.is_macosx:
            return 'macosx'
        if self.is_mac_catalyst:
            return 'maccatalyst'
        if self.os is OSFamily.IOS:
            return 'iphonesimulator' if self.is_simulator else 'iphoneos'
        if self.os is OSFamily.TVOS:
            return 'appletvsimulator' if self.is_simulator else 'appletvos'
        if self.os is OSFamily.WATCHOS:
            return 'watchsimulator' if self.is_simulator else 'watchos'
        if self.os is OSFamily.LINUX:
            if self.environment and self.environment.startswith('android'):
                return 'android'
            return 'linux'
        if self.os is OSFamily.WINDOWS:
            if self.environment == 'cygnus':
                return 'cygwin'
            return 'windows'
        if self.os is None:
            return None
        return self.os.value

    @property
    def darwin_library_name_suffix(self) -> T.Optional[str]:
        if self.is_macosx or self.is_mac_catalyst:
            return 'osx'
        if self.os is OSFamily.IOS:
            return 'iossim' if self.is_simulator else 'ios'
        if self.os is OSFamily.TVOS:
            return 'tvossim' if self.is_simulator else 'tvos'
        if self.os is OSFamily.WATCHOS:
            return 'watchossim' if self.is_simulator else 'watchos'
        return None
