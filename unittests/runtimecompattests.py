# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

import itertools
import unittest

from swifttoolchain.runtimecompat import (
    ARM64E_COMPATIBILITY_VERSION, BACK_DEPLOY_LIBRARIES, IOS_RULES, MACOS_RULES, NO_VERSION,
    WATCHOS_RULES, get_runtime_compatibility_version, resolve_requested_compatibility_version,
)
from swifttoolchain.triple import Triple


def compat(triple: str):
    return get_runtime_compatibility_version(Triple.parse(triple))


def newest_first_key(version):
    # No compatibility library needed is newer than any tabulated version
    return (1, 0, 0) if version is None else (0,) + version


class CompatibilityVersionTests(unittest.TestCase):

    def test_macos(self):
        cases = [
            ('x86_64-apple-macosx10.9', (5, 0)),
            ('x86_64-apple-macosx10.14', (5, 0)),
            ('x86_64-apple-macosx10.14.4', (5, 0)),
            ('x86_64-apple-macosx10.15', (5, 1)),
            ('x86_64-apple-macosx10.15.3', (5, 1)),
            ('x86_64-apple-macosx10.15.4', (5, 2)),
            ('x86_64-apple-macosx10.15.7', (5, 2)),
            ('x86_64-apple-macosx11.0', None),
            ('x86_64-apple-darwin18', (5, 0)),
            ('x86_64-apple-darwin19', (5, 1)),
        ]
        for triple, expected in cases:
            with self.subTest(triple=triple):
                self.assertEqual(compat(triple), expected)

    def test_ios_and_tvos(self):
        cases = [
            ('arm64-apple-ios12.1', (5, 0)),
            ('arm64-apple-ios12.4', (5, 0)),
            ('arm64-apple-ios13.0', (5, 1)),
            ('arm64-apple-ios13.3.1', (5, 1)),
            ('arm64-apple-ios13.4', (5, 2)),
            ('arm64-apple-ios14', None),
            ('arm64-apple-tvos12', (5, 0)),
            ('arm64-apple-tvos13.4', (5, 2)),
            ('arm64-apple-ios', (5, 0)),
        ]
        for triple, expected in cases:
            with self.subTest(triple=triple):
                self.assertEqual(compat(triple), expected)

    def test_watchos(self):
        cases = [
            ('armv7k-apple-watchos5.1', (5, 0)),
            ('armv7k-apple-watchos6.0', (5, 1)),
            ('armv7k-apple-watchos6.1.1', (5, 1)),
            ('armv7k-apple-watchos6.2', (5, 2)),
            ('armv7k-apple-watchos7', None),
        ]
        for triple, expected in cases:
            with self.subTest(triple=triple):
                self.assertEqual(compat(triple), expected)

    def test_other_platforms(self):
        self.assertIsNone(compat('x86_64-unknown-linux-gnu'))
        self.assertIsNone(compat('x86_64-unknown-windows-msvc'))

    def test_arm64e_is_fixed(self):
        for triple in ('arm64e-apple-macosx10.14', 'arm64e-apple-macosx12', 'arm64e-apple-ios12',
                       'arm64e-apple-ios17', 'arm64e-apple-macosx'):
            with self.subTest(triple=triple):
                self.assertEqual(compat(triple), ARM64E_COMPATIBILITY_VERSION)
        self.assertEqual(ARM64E_COMPATIBILITY_VERSION, (5, 3))

    def test_monotonic(self):
        for family, majors in (('macosx', (10, 11)), ('ios', (12, 13, 14)), ('watchos', (5, 6, 7))):
            versions = sorted(itertools.product(majors, range(0, 17), range(0, 4)))
            with self.subTest(family=family):
                previous = None
                for v in versions:
                    current = compat('x86_64-apple-{}{}.{}.{}'.format(family, *v))
                    if previous is not None:
                        self.assertLessEqual(newest_first_key(previous), newest_first_key(current), v)
                    previous = current

    def test_rule_order(self):
        for rules in (MACOS_RULES, IOS_RULES, WATCHOS_RULES):
            ceilings = [r.ceiling for r in rules]
            self.assertEqual(ceilings, sorted(ceilings))
            results = [r.version for r in rules]
            self.assertEqual(results, sorted(results))


class RequestedVersionTests(unittest.TestCase):

    def test_literals(self):
        self.assertEqual(resolve_requested_compatibility_version('5.0'), (5, 0))
        self.assertEqual(resolve_requested_compatibility_version('5.1'), (5, 1))
        self.assertIs(resolve_requested_compatibility_version('none'), NO_VERSION)
        self.assertIs(resolve_requested_compatibility_version('disable'), NO_VERSION)

    def test_unknown(self):
        for value in ('5.2', '', 'None', '5'):
            with self.subTest(value=value):
                self.assertIsNone(resolve_requested_compatibility_version(value))

    def test_back_deploy_libraries(self):
        names = [lib.filename for lib in BACK_DEPLOY_LIBRARIES]
        self.assertEqual(names, ['libswiftCompatibility50.a', 'libswiftCompatibility51.a',
                                 'libswiftCompatibilityDynamicReplacements.a'])
        self.assertEqual([lib.executable_only for lib in BACK_DEPLOY_LIBRARIES], [False, False, True])
