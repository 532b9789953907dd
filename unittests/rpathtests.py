# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

import itertools
import unittest

from swifttoolchain.options import Option, ParsedOptions
from swifttoolchain.rpath import OS_RUNTIME_DIR, RpathPolicy, resolve_rpath_policy
from swifttoolchain.triple import Triple

BACK_DEPLOYED = Triple.parse('x86_64-apple-macosx10.14')
SWIFT_IN_OS = Triple.parse('x86_64-apple-macosx10.15')


def policy(triple: Triple, *flags: str) -> RpathPolicy:
    return resolve_rpath_policy(ParsedOptions.from_args(list(flags)), triple)


class RpathPolicyTests(unittest.TestCase):

    def test_os_default_for_back_deployment(self):
        self.assertIs(policy(BACK_DEPLOYED), RpathPolicy.OS)
        self.assertIs(policy(Triple.parse('arm64-apple-ios12.1')), RpathPolicy.OS)
        self.assertIs(policy(Triple.parse('x86_64-unknown-linux-gnu')), RpathPolicy.OS)

    def test_none_when_swift_in_the_os(self):
        self.assertIs(policy(SWIFT_IN_OS), RpathPolicy.NONE)
        self.assertIs(policy(Triple.parse('x86_64-apple-ios13.1-macabi')), RpathPolicy.NONE)
        self.assertIs(policy(Triple.parse('armv7k-apple-watchos5.2')), RpathPolicy.NONE)

    def test_no_stdlib_rpath(self):
        self.assertIs(policy(BACK_DEPLOYED, '-no-stdlib-rpath'), RpathPolicy.NONE)

    def test_toolchain_opt_in_wins(self):
        self.assertIs(policy(SWIFT_IN_OS, '-toolchain-stdlib-rpath'), RpathPolicy.TOOLCHAIN)
        self.assertIs(policy(BACK_DEPLOYED, '-toolchain-stdlib-rpath', '-no-stdlib-rpath'),
                      RpathPolicy.TOOLCHAIN)

    def test_last_paired_flag_wins(self):
        self.assertIs(policy(SWIFT_IN_OS, '-no-toolchain-stdlib-rpath', '-toolchain-stdlib-rpath'),
                      RpathPolicy.TOOLCHAIN)
        self.assertIs(policy(SWIFT_IN_OS, '-toolchain-stdlib-rpath', '-no-toolchain-stdlib-rpath'),
                      RpathPolicy.NONE)
        self.assertIs(policy(BACK_DEPLOYED, '-toolchain-stdlib-rpath', '-no-toolchain-stdlib-rpath'),
                      RpathPolicy.OS)

    def test_exhaustive(self):
        flags = ['-toolchain-stdlib-rpath', '-no-toolchain-stdlib-rpath', '-no-stdlib-rpath']
        for triple in (BACK_DEPLOYED, SWIFT_IN_OS, Triple.parse('x86_64-unknown-linux-gnu')):
            for n in range(len(flags) + 1):
                for combo in itertools.permutations(flags, n):
                    with self.subTest(triple=triple.triple, flags=combo):
                        self.assertIn(policy(triple, *combo), set(RpathPolicy))

    def test_paths(self):
        runtime_paths = ['/toolchain/lib/swift/macosx', '/sdk/usr/lib/swift']
        self.assertEqual(RpathPolicy.TOOLCHAIN.paths(runtime_paths), runtime_paths)
        self.assertIsNot(RpathPolicy.TOOLCHAIN.paths(runtime_paths), runtime_paths)
        self.assertEqual(RpathPolicy.OS.paths(runtime_paths), [OS_RUNTIME_DIR])
        self.assertEqual(RpathPolicy.NONE.paths(runtime_paths), [])
        self.assertEqual(OS_RUNTIME_DIR, '/usr/lib/swift')
