# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

import os

from swifttoolchain.arguments import CommandLine
from swifttoolchain.linkers import (
    add_args_to_link_stdlib, plan_stdlib_link_args, runtime_compatibility_version,
)
from swifttoolchain.options import Option, ParsedOptions
from swifttoolchain.rpath import RpathPolicy, resolve_rpath_policy
from swifttoolchain.toolchains import DarwinToolchain, GenericUnixToolchain, LinkOutputType
from swifttoolchain.toollib import InvalidPathError, UnsupportedTargetError
from swifttoolchain.triple import Triple

from .helpers import RESOURCE_ROOT, QuietTestCase, frontend_config

SDK = '/SDKs/MacOSX.sdk'
MACOS_RESOURCES = os.path.join(RESOURCE_ROOT, 'macosx')
SDK_RUNTIME = os.path.join(SDK, 'usr', 'lib', 'swift')

COMPAT50 = os.path.join(MACOS_RESOURCES, 'libswiftCompatibility50.a')
COMPAT51 = os.path.join(MACOS_RESOURCES, 'libswiftCompatibility51.a')
DYNAMIC_REPLACEMENTS = os.path.join(MACOS_RESOURCES, 'libswiftCompatibilityDynamicReplacements.a')
ALL_SHIMS = {COMPAT50, COMPAT51, DYNAMIC_REPLACEMENTS}


def all_exist(path: str) -> bool:
    return True


def none_exist(path: str) -> bool:
    return False


class StdlibLinkTests(QuietTestCase):

    def setUp(self):
        super().setUp()
        self.toolchain = DarwinToolchain(frontend_config())

    def plan(self, triple, args=(), output_type=LinkOutputType.EXECUTABLE, sdk=SDK, exists=all_exist):
        options = ParsedOptions.from_args(list(args))
        return plan_stdlib_link_args(self.toolchain, options, sdk, Triple.parse(triple),
                                     output_type, exists=exists).to_strings()

    def force_loaded(self, strings):
        return [strings[i + 1] for i, s in enumerate(strings) if s == '-force_load']

    def flag_values(self, strings, flag):
        return [strings[i + 1] for i, s in enumerate(strings) if s == flag]

    def test_scenario_a_back_deploy_to_10_14(self):
        triple = Triple.parse('x86_64-apple-macosx10.14')
        self.assertEqual(runtime_compatibility_version(ParsedOptions(), triple, LinkOutputType.EXECUTABLE),
                         (5, 0))
        self.assertEqual(self.plan('x86_64-apple-macosx10.14'), [
            '-force_load', COMPAT50,
            '-force_load', COMPAT51,
            '-force_load', DYNAMIC_REPLACEMENTS,
            '-L', MACOS_RESOURCES,
            '-L', SDK_RUNTIME,
            '-rpath', '/usr/lib/swift',
        ])

    def test_scenario_b_10_15_4(self):
        triple = Triple.parse('x86_64-apple-macosx10.15.4')
        self.assertEqual(runtime_compatibility_version(ParsedOptions(), triple, LinkOutputType.EXECUTABLE),
                         (5, 2))
        strings = self.plan('x86_64-apple-macosx10.15.4')
        self.assertEqual(self.force_loaded(strings), [])
        self.assertEqual(strings, ['-L', MACOS_RESOURCES, '-L', SDK_RUNTIME])

    def test_scenario_c_explicit_none(self):
        for literal in ('none', 'disable'):
            with self.subTest(literal=literal):
                options = ParsedOptions([(Option.RUNTIME_COMPATIBILITY_VERSION, literal)])
                triple = Triple.parse('x86_64-apple-macosx10.14')
                self.assertIsNone(runtime_compatibility_version(options, triple, LinkOutputType.EXECUTABLE))
                seen = []
                strings = self.plan('x86_64-apple-macosx10.14', ['-runtime-compatibility-version', literal],
                                    exists=lambda p: seen.append(p) or True)
                self.assertEqual(self.force_loaded(strings), [])
                self.assertEqual(seen, [])

    def test_scenario_d_toolchain_rpath(self):
        triple = Triple.parse('x86_64-apple-macosx10.15')
        options = ParsedOptions([(Option.TOOLCHAIN_STDLIB_RPATH, None)])
        self.assertIs(resolve_rpath_policy(options, triple), RpathPolicy.TOOLCHAIN)
        strings = self.plan('x86_64-apple-macosx10.15', ['-toolchain-stdlib-rpath'])
        runtime_paths = self.toolchain.runtime_library_paths(triple, options, SDK, True)
        self.assertEqual(self.flag_values(strings, '-rpath'), runtime_paths)
        self.assertEqual(self.flag_values(strings, '-L'), runtime_paths)

    def test_scenario_e_swift_in_the_os(self):
        strings = self.plan('arm64-apple-macosx12.0')
        self.assertEqual(self.flag_values(strings, '-rpath'), [])
        self.assertNotIn('-rpath', strings)

    def test_missing_shims_are_skipped(self):
        strings = self.plan('x86_64-apple-macosx10.14', exists=lambda p: p == COMPAT51)
        self.assertEqual(self.force_loaded(strings), [COMPAT51])
        self.assertEqual(self.force_loaded(self.plan('x86_64-apple-macosx10.14', exists=none_exist)), [])

    def test_shim_thresholds(self):
        self.assertEqual(self.force_loaded(self.plan('x86_64-apple-macosx10.15')), [COMPAT51])
        self.assertEqual(self.force_loaded(self.plan('x86_64-apple-macosx10.14', ['-runtime-compatibility-version', '5.1'])),
                         [COMPAT51])

    def test_libraries_do_not_infer(self):
        strings = self.plan('x86_64-apple-macosx10.14', output_type=LinkOutputType.DYNAMIC_LIBRARY)
        self.assertEqual(self.force_loaded(strings), [])

    def test_libraries_honour_explicit_version(self):
        strings = self.plan('x86_64-apple-macosx10.14', ['-runtime-compatibility-version', '5.0'],
                            output_type=LinkOutputType.DYNAMIC_LIBRARY)
        self.assertEqual(self.force_loaded(strings), [COMPAT50, COMPAT51])

    def test_explicit_version_overrides_table(self):
        strings = self.plan('x86_64-apple-macosx11.0', ['-runtime-compatibility-version', '5.0'])
        self.assertEqual(set(self.force_loaded(strings)), ALL_SHIMS)

    def test_unknown_version_falls_back_to_table(self):
        options = ParsedOptions([(Option.RUNTIME_COMPATIBILITY_VERSION, '4.2')])
        self.assertEqual(runtime_compatibility_version(options, Triple.parse('x86_64-apple-macosx10.15'),
                                                       LinkOutputType.EXECUTABLE), (5, 1))
        self.assertIsNone(runtime_compatibility_version(options, Triple.parse('x86_64-apple-macosx10.15'),
                                                        LinkOutputType.DYNAMIC_LIBRARY))

    def test_arm64e(self):
        strings = self.plan('arm64e-apple-macosx10.14')
        self.assertEqual(self.force_loaded(strings), [])

    def test_no_stdlib_rpath(self):
        strings = self.plan('x86_64-apple-macosx10.14', ['-no-stdlib-rpath'])
        self.assertNotIn('-rpath', strings)

    def test_catalyst(self):
        strings = self.plan('x86_64-apple-ios13.1-macabi', ['-toolchain-stdlib-rpath'])
        expected_paths = [
            os.path.join(RESOURCE_ROOT, 'maccatalyst'),
            MACOS_RESOURCES,
            os.path.join(SDK, 'System', 'iOSSupport', 'usr', 'lib', 'swift'),
            SDK_RUNTIME,
        ]
        self.assertEqual(self.flag_values(strings, '-L'), expected_paths)
        self.assertEqual(self.flag_values(strings, '-rpath'), expected_paths)
        # Compatibility libraries come from the primary directory
        self.assertEqual(self.force_loaded(strings),
                         [os.path.join(RESOURCE_ROOT, 'maccatalyst', 'libswiftCompatibility51.a')])

    def test_linux(self):
        toolchain = GenericUnixToolchain(frontend_config())
        options = ParsedOptions([(Option.SDK, '/sysroot')])
        cl = plan_stdlib_link_args(toolchain, options, '/sysroot', Triple.parse('x86_64-unknown-linux-gnu'),
                                   LinkOutputType.EXECUTABLE, exists=all_exist)
        linux_runtime = os.path.join('/sysroot', 'usr', 'lib', 'swift')
        self.assertEqual(cl.to_strings(), [
            '-L', os.path.join(linux_runtime, 'linux'),
            '-L', linux_runtime,
            '-rpath', '/usr/lib/swift',
        ])

    def test_appends_to_existing_command_line(self):
        cl = CommandLine()
        cl.append_flag('-dylib')
        add_args_to_link_stdlib(self.toolchain, cl, ParsedOptions(), None,
                                Triple.parse('x86_64-apple-macosx12'), LinkOutputType.EXECUTABLE,
                                exists=none_exist)
        self.assertEqual(cl.to_strings(), ['-dylib', '-L', MACOS_RESOURCES])

    def test_invalid_sdk_leaves_command_line_untouched(self):
        cl = CommandLine()
        cl.append_flag('-dylib')
        with self.assertRaises(InvalidPathError):
            add_args_to_link_stdlib(self.toolchain, cl, ParsedOptions(), 'relative/sdk',
                                    Triple.parse('x86_64-apple-macosx10.14'), LinkOutputType.EXECUTABLE,
                                    exists=all_exist)
        self.assertEqual(cl.to_strings(), ['-dylib'])

    def test_invalid_resource_dir(self):
        with self.assertRaises(InvalidPathError):
            self.plan('x86_64-apple-macosx10.14', ['-resource-dir', 'lib/swift'])

    def test_unsupported_darwin_kernel(self):
        cl = CommandLine()
        with self.assertRaises(UnsupportedTargetError):
            add_args_to_link_stdlib(self.toolchain, cl, ParsedOptions(), SDK,
                                    Triple.parse('x86_64-apple-darwin3'), LinkOutputType.EXECUTABLE,
                                    exists=all_exist)
        self.assertEqual(cl.to_strings(), [])
