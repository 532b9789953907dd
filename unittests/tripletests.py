# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

import unittest

from swifttoolchain.toollib import ToolchainException, UnsupportedTargetError
from swifttoolchain.triple import OSFamily, Triple


class TripleParseTests(unittest.TestCase):

    def test_components(self):
        t = Triple.parse('arm64-apple-ios13.1-macabi')
        self.assertEqual(t.arch, 'arm64')
        self.assertEqual(t.vendor, 'apple')
        self.assertIs(t.os, OSFamily.IOS)
        self.assertEqual(t.os_version, (13, 1, 0))
        self.assertEqual(t.environment, 'macabi')
        self.assertEqual(str(t), 'arm64-apple-ios13.1-macabi')

    def test_no_version_or_environment(self):
        t = Triple.parse('x86_64-unknown-linux')
        self.assertIs(t.os, OSFamily.LINUX)
        self.assertEqual(t.os_version, (0, 0, 0))
        self.assertIsNone(t.environment)

    def test_aliases(self):
        self.assertIs(Triple.parse('x86_64-apple-macos10.15').os, OSFamily.MACOSX)
        self.assertIs(Triple.parse('i686-pc-win32').os, OSFamily.WINDOWS)

    def test_unknown_os(self):
        t = Triple.parse('x86_64-unknown-plan9')
        self.assertIsNone(t.os)
        self.assertIsNone(t.platform_name())
        self.assertFalse(t.is_darwin)

    def test_short_triples(self):
        t = Triple.parse('x86_64')
        self.assertEqual(t.vendor, 'unknown')
        self.assertIsNone(t.os)

    def test_immutable(self):
        t = Triple.parse('x86_64-apple-macosx10.15')
        with self.assertRaises(AttributeError):
            t.arch = 'arm64'  # type: ignore[misc]


class TripleVersionTests(unittest.TestCase):

    def test_macos_versions(self):
        self.assertEqual(Triple.parse('x86_64-apple-macosx10.14.4').version_for(OSFamily.MACOSX), (10, 14, 4))
        self.assertEqual(Triple.parse('x86_64-apple-macosx').version_for(OSFamily.MACOSX), (10, 4, 0))

    def test_darwin_kernel_versions(self):
        self.assertEqual(Triple.parse('x86_64-apple-darwin').version_for(OSFamily.MACOSX), (10, 4, 0))
        self.assertEqual(Triple.parse('x86_64-apple-darwin18').version_for(OSFamily.MACOSX), (10, 14, 0))
        self.assertEqual(Triple.parse('x86_64-apple-darwin19').version_for(OSFamily.MACOSX), (10, 15, 0))
        self.assertEqual(Triple.parse('arm64-apple-darwin20').version_for(OSFamily.MACOSX), (11, 0, 0))
        self.assertEqual(Triple.parse('arm64-apple-darwin22').version_for(OSFamily.MACOSX), (13, 0, 0))

    def test_ios_default_depends_on_arch(self):
        self.assertEqual(Triple.parse('arm64-apple-ios').version_for(OSFamily.IOS), (7, 0, 0))
        self.assertEqual(Triple.parse('armv7-apple-ios').version_for(OSFamily.IOS), (3, 0, 0))
        self.assertEqual(Triple.parse('arm64-apple-ios12.2').version_for(OSFamily.IOS), (12, 2, 0))

    def test_tvos_answers_to_ios(self):
        self.assertEqual(Triple.parse('arm64-apple-tvos12.1').version_for(OSFamily.IOS), (12, 1, 0))

    def test_watchos(self):
        self.assertEqual(Triple.parse('armv7k-apple-watchos').version_for(OSFamily.WATCHOS), (2, 0, 0))
        self.assertEqual(Triple.parse('armv7k-apple-watchos6.1').version_for(OSFamily.WATCHOS), (6, 1, 0))

    def test_mismatched_family_raises(self):
        with self.assertRaises(ValueError):
            Triple.parse('armv7k-apple-watchos5.2').version_for(OSFamily.IOS)
        with self.assertRaises(ValueError):
            Triple.parse('arm64-apple-ios13').version_for(OSFamily.MACOSX)
        with self.assertRaises(ValueError):
            Triple.parse('x86_64-unknown-linux-gnu').version_for(OSFamily.WATCHOS)

    def test_ancient_darwin_kernel(self):
        with self.assertRaises(UnsupportedTargetError) as cm:
            Triple.parse('x86_64-apple-darwin3').version_for(OSFamily.MACOSX)
        self.assertIsInstance(cm.exception, ToolchainException)
        self.assertEqual(Triple.parse('x86_64-apple-darwin4').version_for(OSFamily.MACOSX), (10, 0, 0))


class TriplePlatformTests(unittest.TestCase):

    def test_platform_names(self):
        cases = [
            ('x86_64-apple-macosx10.15', 'macosx'),
            ('x86_64-apple-darwin19', 'macosx'),
            ('x86_64-apple-ios13.1-macabi', 'maccatalyst'),
            ('arm64-apple-ios13', 'iphoneos'),
            ('x86_64-apple-ios13', 'iphonesimulator'),
            ('arm64-apple-ios13-simulator', 'iphonesimulator'),
            ('arm64-apple-tvos13', 'appletvos'),
            ('x86_64-apple-tvos13', 'appletvsimulator'),
            ('armv7k-apple-watchos6', 'watchos'),
            ('i386-apple-watchos6', 'watchsimulator'),
            ('x86_64-unknown-linux-gnu', 'linux'),
            ('aarch64-unknown-linux-android21', 'android'),
            ('x86_64-unknown-windows-msvc', 'windows'),
            ('x86_64-unknown-windows-cygnus', 'cygwin'),
            ('x86_64-unknown-freebsd12', 'freebsd'),
            ('wasm32-unknown-wasi', 'wasi'),
        ]
        for triple, expected in cases:
            with self.subTest(triple=triple):
                self.assertEqual(Triple.parse(triple).platform_name(), expected)

    def test_conflating_darwin(self):
        self.assertEqual(Triple.parse('arm64-apple-ios13').platform_name(conflating_darwin=True), 'darwin')
        self.assertEqual(Triple.parse('x86_64-unknown-linux-gnu').platform_name(conflating_darwin=True), 'linux')

    def test_family_predicates(self):
        catalyst = Triple.parse('x86_64-apple-ios13.1-macabi')
        self.assertTrue(catalyst.is_darwin)
        self.assertTrue(catalyst.is_ios)
        self.assertTrue(catalyst.is_mac_catalyst)
        self.assertFalse(catalyst.is_simulator)
        self.assertFalse(catalyst.is_macosx)

        tvos = Triple.parse('arm64-apple-tvos')
        self.assertTrue(tvos.is_ios)
        self.assertTrue(tvos.is_tvos)
        self.assertFalse(tvos.is_mac_catalyst)

        linux = Triple.parse('x86_64-unknown-linux-gnu')
        self.assertFalse(linux.is_darwin)
        self.assertFalse(linux.is_simulator)

    def test_swift_in_the_os(self):
        cases = [
            ('x86_64-apple-macosx10.14.3', False),
            ('x86_64-apple-macosx10.14.4', True),
            ('x86_64-apple-macosx11.0', True),
            ('x86_64-apple-darwin18', False),
            ('arm64-apple-ios12.1', False),
            ('arm64-apple-ios12.2', True),
            ('arm64-apple-tvos12.2', True),
            ('armv7k-apple-watchos5.1', False),
            ('armv7k-apple-watchos5.2', True),
            ('x86_64-apple-ios13.1-macabi', True),
            ('x86_64-unknown-linux-gnu', False),
        ]
        for triple, expected in cases:
            with self.subTest(triple=triple):
                self.assertEqual(Triple.parse(triple).supports_swift_in_the_os, expected)

    def test_darwin_library_suffix(self):
        self.assertEqual(Triple.parse('x86_64-apple-macosx10.15').darwin_library_name_suffix, 'osx')
        self.assertEqual(Triple.parse('x86_64-apple-ios13.1-macabi').darwin_library_name_suffix, 'osx')
        self.assertEqual(Triple.parse('arm64-apple-ios13').darwin_library_name_suffix, 'ios')
        self.assertEqual(Triple.parse('x86_64-apple-ios13').darwin_library_name_suffix, 'iossim')
        self.assertEqual(Triple.parse('arm64-apple-tvos').darwin_library_name_suffix, 'tvos')
        self.assertEqual(Triple.parse('i386-apple-watchos').darwin_library_name_suffix, 'watchossim')
        self.assertIsNone(Triple.parse('x86_64-unknown-linux-gnu').darwin_library_name_suffix)
