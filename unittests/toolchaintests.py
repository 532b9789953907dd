# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

import os
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest import mock

from swifttoolchain.arguments import CommandLine
from swifttoolchain.options import Option, ParsedOptions
from swifttoolchain.programs import Tool
from swifttoolchain.toolchains import (
    DarwinToolchain, GenericUnixToolchain, LinkOutputType, Sanitizer, Toolchain,
    toolchain_for_triple,
)
from swifttoolchain.toollib import InvalidPathError, ProcessError, ToolNotFound
from swifttoolchain.triple import Triple

from .helpers import (
    FRONTEND, RESOURCE_ROOT, STATIC_RESOURCE_ROOT, QuietTestCase, frontend_config,
    make_config, make_executable, skip_if_windows, temp_tree,
)
from .targetinfotests import target_info_bytes

MACOS = Triple.parse('x86_64-apple-macosx10.15')
CATALYST = Triple.parse('x86_64-apple-ios13.1-macabi')
LINUX = Triple.parse('x86_64-unknown-linux-gnu')


def j(*parts: str) -> str:
    return os.path.join(*parts)


class ToolPathTests(QuietTestCase):

    def test_flavour(self):
        self.assertIsInstance(toolchain_for_triple(MACOS, make_config()), DarwinToolchain)
        self.assertIsInstance(toolchain_for_triple(CATALYST, make_config()), DarwinToolchain)
        self.assertIsInstance(toolchain_for_triple(LINUX, make_config()), GenericUnixToolchain)

    def test_executable_names(self):
        darwin = DarwinToolchain(make_config())
        unix = GenericUnixToolchain(make_config())
        self.assertEqual(darwin.tool_executable_name(Tool.DYNAMIC_LINKER), 'ld')
        self.assertEqual(darwin.tool_executable_name(Tool.STATIC_LINKER), 'libtool')
        self.assertEqual(unix.tool_executable_name(Tool.DYNAMIC_LINKER), 'clang')
        self.assertEqual(unix.tool_executable_name(Tool.DWARFDUMP), 'llvm-dwarfdump')
        for tool in Tool:
            with self.subTest(tool=tool):
                self.assertTrue(darwin.tool_executable_name(tool))
                self.assertTrue(unix.tool_executable_name(tool))

    def test_override_skips_lookup(self):
        tc = DarwinToolchain(frontend_config())
        with mock.patch('swifttoolchain.toolchains.lookup', side_effect=AssertionError) as m:
            self.assertEqual(tc.get_tool_path(Tool.SWIFT_COMPILER), FRONTEND)
        m.assert_not_called()

    def test_invalid_override(self):
        with self.assertRaises(InvalidPathError):
            DarwinToolchain(make_config(tool_overrides={Tool.CLANG: 'clang'}))

    def test_lookup_is_cached(self):
        tc = GenericUnixToolchain(make_config())
        with mock.patch('swifttoolchain.toolchains.lookup', return_value='/usr/bin/clang') as m:
            self.assertEqual(tc.get_tool_path(Tool.CLANG), '/usr/bin/clang')
            self.assertEqual(tc.get_tool_path(Tool.DYNAMIC_LINKER), '/usr/bin/clang')
            self.assertEqual(tc.get_tool_path(Tool.CLANG), '/usr/bin/clang')
        self.assertEqual(m.call_count, 2)
        m.assert_any_call('clang', tc.config)

    def test_not_found(self):
        tc = GenericUnixToolchain(make_config())
        with self.assertRaises(ToolNotFound) as cm:
            tc.get_tool_path(Tool.LLDB)
        self.assertEqual(cm.exception.tool, 'lldb')

    @skip_if_windows
    def test_concurrent_lookups_agree(self):
        with temp_tree() as d:
            expected = make_executable(j(d, 'bin', 'swift-frontend'))
            tc = DarwinToolchain(make_config(env={'PATH': j(d, 'bin')}))
            barrier = threading.Barrier(8)

            def resolve(_):
                barrier.wait()
                return tc.get_tool_path(Tool.SWIFT_COMPILER)

            with ThreadPoolExecutor(max_workers=8) as pool:
                results = list(pool.map(resolve, range(8)))
        self.assertEqual(results, [expected] * 8)


class FrontendQueryTests(QuietTestCase):

    def test_target_info_is_cached(self):
        tc = DarwinToolchain(frontend_config())
        with mock.patch('swifttoolchain.toolchains.check_nonzero_exit',
                        return_value=target_info_bytes()) as m:
            first = tc.get_frontend_target_info(MACOS)
            second = tc.get_frontend_target_info(MACOS)
        self.assertIs(first, second)
        m.assert_called_once_with([FRONTEND, '-print-target-info', '-target', MACOS.triple],
                                  env=tc.env)

    def test_target_variant(self):
        tc = DarwinToolchain(frontend_config())
        variant = Triple.parse('x86_64-apple-ios13.1-macabi')
        with mock.patch('swifttoolchain.toolchains.check_nonzero_exit',
                        return_value=target_info_bytes()) as m:
            tc.get_frontend_target_info(MACOS, variant)
            tc.get_frontend_target_info(MACOS)
        self.assertEqual(m.call_count, 2)
        self.assertEqual(m.call_args_list[0][0][0][-2:], ['-target-variant', variant.triple])

    def test_host_triple(self):
        tc = DarwinToolchain(frontend_config())
        with mock.patch('swifttoolchain.toolchains.check_nonzero_exit',
                        return_value=target_info_bytes()) as m:
            self.assertEqual(tc.host_target_triple().triple, 'arm64-apple-macosx13.0')
        m.assert_called_once_with([FRONTEND, '-print-target-info'], env=tc.env)

    def test_frontend_failure_propagates(self):
        tc = GenericUnixToolchain(frontend_config())
        err = ProcessError([FRONTEND, '-print-target-info'], 1, 'boom')
        with mock.patch('swifttoolchain.toolchains.check_nonzero_exit', side_effect=err):
            with self.assertRaises(ProcessError):
                tc.get_frontend_target_info(LINUX)

    def test_compiler_version(self):
        tc = GenericUnixToolchain(frontend_config())
        out = b'Swift version 5.9 (swift-5.9-RELEASE)\nTarget: x86_64-unknown-linux-gnu\n'
        with mock.patch('swifttoolchain.toolchains.check_nonzero_exit', return_value=out):
            self.assertEqual(tc.swift_compiler_version(), 'Swift version 5.9 (swift-5.9-RELEASE)')


class ResourceDirTests(QuietTestCase):

    def test_from_frontend(self):
        tc = DarwinToolchain(frontend_config())
        opts = ParsedOptions()
        self.assertEqual(tc.compute_resource_dir_path(MACOS, opts, True), j(RESOURCE_ROOT, 'macosx'))
        self.assertEqual(tc.compute_resource_dir_path(MACOS, opts, False), j(STATIC_RESOURCE_ROOT, 'macosx'))

    def test_explicit_resource_dir(self):
        tc = DarwinToolchain(make_config())
        opts = ParsedOptions([(Option.RESOURCE_DIR, '/custom/lib/swift/'), (Option.SDK, '/sdk')])
        self.assertEqual(tc.compute_resource_dir_path(MACOS, opts, True), j('/custom/lib/swift', 'macosx'))
        self.assertEqual(tc.compute_resource_dir_path(LINUX, opts, False), j('/custom/lib/swift', 'linux'))

    def test_relative_resource_dir(self):
        tc = DarwinToolchain(frontend_config())
        opts = ParsedOptions([(Option.RESOURCE_DIR, 'lib/swift')])
        with self.assertRaises(InvalidPathError) as cm:
            tc.compute_resource_dir_path(MACOS, opts, True)
        self.assertEqual(cm.exception.path, 'lib/swift')

    def test_sdk_for_non_darwin(self):
        tc = GenericUnixToolchain(make_config())
        opts = ParsedOptions([(Option.SDK, '/sysroot')])
        self.assertEqual(tc.compute_resource_dir_path(LINUX, opts, True), j('/sysroot', 'usr', 'lib', 'swift', 'linux'))
        self.assertEqual(tc.compute_resource_dir_path(LINUX, opts, False),
                         j('/sysroot', 'usr', 'lib', 'swift_static', 'linux'))

    def test_sdk_ignored_for_darwin(self):
        tc = DarwinToolchain(frontend_config())
        opts = ParsedOptions([(Option.SDK, '/sdk')])
        self.assertEqual(tc.compute_resource_dir_path(MACOS, opts, True), j(RESOURCE_ROOT, 'macosx'))

    def test_relative_sdk_uses_frontend(self):
        tc = GenericUnixToolchain(frontend_config())
        opts = ParsedOptions([(Option.SDK, 'sysroot')])
        self.assertEqual(tc.compute_resource_dir_path(LINUX, opts, True), j(RESOURCE_ROOT, 'linux'))

    def test_platform_without_directory(self):
        tc = GenericUnixToolchain(frontend_config())
        triple = Triple.parse('x86_64-unknown-plan9')
        self.assertEqual(tc.compute_resource_dir_path(triple, ParsedOptions(), True), RESOURCE_ROOT)

    def test_secondary_dir(self):
        tc = DarwinToolchain(frontend_config())
        primary = tc.compute_resource_dir_path(CATALYST, ParsedOptions(), True)
        self.assertEqual(primary, j(RESOURCE_ROOT, 'maccatalyst'))
        self.assertEqual(tc.compute_secondary_resource_dir_path(CATALYST, primary), j(RESOURCE_ROOT, 'macosx'))
        self.assertIsNone(tc.compute_secondary_resource_dir_path(MACOS, j(RESOURCE_ROOT, 'macosx')))
        ios = Triple.parse('arm64-apple-ios13')
        self.assertIsNone(tc.compute_secondary_resource_dir_path(ios, j(RESOURCE_ROOT, 'iphoneos')))

    def test_clang_library_path(self):
        tc = DarwinToolchain(frontend_config())
        self.assertEqual(tc.clang_library_path(MACOS, ParsedOptions()),
                         j(RESOURCE_ROOT, 'clang', 'lib', 'darwin'))
        unix = GenericUnixToolchain(frontend_config())
        self.assertEqual(unix.clang_library_path(LINUX, ParsedOptions()),
                         j(RESOURCE_ROOT, 'clang', 'lib', 'linux'))


class RuntimeLibraryPathTests(QuietTestCase):

    def test_no_sdk(self):
        tc = DarwinToolchain(frontend_config())
        self.assertEqual(tc.runtime_library_paths(MACOS, ParsedOptions(), None, True),
                         [j(RESOURCE_ROOT, 'macosx')])

    def test_sdk_is_last(self):
        tc = DarwinToolchain(frontend_config())
        paths = tc.runtime_library_paths(MACOS, ParsedOptions(), '/SDKs/MacOSX.sdk', True)
        self.assertEqual(paths, [j(RESOURCE_ROOT, 'macosx'), j('/SDKs/MacOSX.sdk', 'usr', 'lib', 'swift')])

    def test_catalyst(self):
        tc = DarwinToolchain(frontend_config())
        paths = tc.runtime_library_paths(CATALYST, ParsedOptions(), '/SDKs/MacOSX.sdk', True)
        self.assertEqual(paths, [
            j(RESOURCE_ROOT, 'maccatalyst'),
            j(RESOURCE_ROOT, 'macosx'),
            j('/SDKs/MacOSX.sdk', 'System', 'iOSSupport', 'usr', 'lib', 'swift'),
            j('/SDKs/MacOSX.sdk', 'usr', 'lib', 'swift'),
        ])

    def test_catalyst_without_sdk(self):
        tc = DarwinToolchain(frontend_config())
        self.assertEqual(tc.runtime_library_paths(CATALYST, ParsedOptions(), None, True),
                         [j(RESOURCE_ROOT, 'maccatalyst'), j(RESOURCE_ROOT, 'macosx')])

    def test_duplicates_are_kept(self):
        tc = GenericUnixToolchain(make_config())
        opts = ParsedOptions([(Option.SDK, '/sysroot'), (Option.RESOURCE_DIR, '/sysroot/usr/lib/swift')])
        paths = tc.runtime_library_paths(Triple.parse('x86_64-unknown-plan9'), opts, '/sysroot', True)
        self.assertEqual(paths, [j('/sysroot', 'usr', 'lib', 'swift')] * 2)

    def test_deterministic(self):
        tc = DarwinToolchain(frontend_config())
        first = tc.runtime_library_paths(CATALYST, ParsedOptions(), '/sdk', True)
        second = tc.runtime_library_paths(CATALYST, ParsedOptions(), '/sdk', True)
        self.assertEqual(first, second)
        self.assertEqual(first[-1], j('/sdk', 'usr', 'lib', 'swift'))

    def test_relative_sdk(self):
        tc = DarwinToolchain(frontend_config())
        with self.assertRaises(InvalidPathError) as cm:
            tc.runtime_library_paths(MACOS, ParsedOptions(), 'SDKs/MacOSX.sdk', True)
        self.assertEqual(cm.exception.path, 'SDKs/MacOSX.sdk')


class SanitizerRuntimeTests(QuietTestCase):

    def test_darwin_names(self):
        tc = DarwinToolchain(make_config())
        self.assertEqual(tc.runtime_library_name(Sanitizer.ADDRESS, MACOS, True),
                         'libclang_rt.asan_osx_dynamic.dylib')
        self.assertEqual(tc.runtime_library_name(Sanitizer.FUZZER, Triple.parse('arm64-apple-ios13'), False),
                         'libclang_rt.fuzzer_ios.a')
        self.assertEqual(tc.runtime_library_name(Sanitizer.THREAD, Triple.parse('x86_64-apple-ios13'), True),
                         'libclang_rt.tsan_iossim_dynamic.dylib')

    def test_unix_names(self):
        tc = GenericUnixToolchain(make_config())
        self.assertEqual(tc.runtime_library_name(Sanitizer.UNDEFINED, LINUX, True), 'libclang_rt.ubsan-x86_64.so')
        self.assertEqual(tc.runtime_library_name(Sanitizer.SCUDO, LINUX, False), 'libclang_rt.scudo-x86_64.a')

    def test_base_has_no_names(self):
        with self.assertRaises(NotImplementedError):
            Toolchain(make_config()).runtime_library_name(Sanitizer.ADDRESS, LINUX, True)

    def test_exists_and_link(self):
        tc = GenericUnixToolchain(frontend_config())
        expected = j(RESOURCE_ROOT, 'clang', 'lib', 'linux', 'libclang_rt.asan-x86_64.so')
        seen = []

        def exists(path):
            seen.append(path)
            return True

        self.assertTrue(tc.runtime_library_exists(Sanitizer.ADDRESS, LINUX, ParsedOptions(), True, exists=exists))
        self.assertEqual(seen, [expected])
        self.assertFalse(tc.runtime_library_exists(Sanitizer.ADDRESS, LINUX, ParsedOptions(), True,
                                                   exists=lambda p: False))
        cl = CommandLine()
        tc.add_link_runtime_library('libclang_rt.asan-x86_64.so', cl, LINUX, ParsedOptions())
        self.assertEqual(cl.to_strings(), [expected])


class MiscTests(QuietTestCase):

    def test_output_filenames(self):
        darwin = DarwinToolchain(make_config())
        unix = GenericUnixToolchain(make_config())
        self.assertEqual(darwin.make_linker_output_filename('Foo', LinkOutputType.EXECUTABLE), 'Foo')
        self.assertEqual(darwin.make_linker_output_filename('Foo', LinkOutputType.DYNAMIC_LIBRARY), 'libFoo.dylib')
        self.assertEqual(unix.make_linker_output_filename('Foo', LinkOutputType.DYNAMIC_LIBRARY), 'libFoo.so')
        self.assertEqual(unix.make_linker_output_filename('Foo', LinkOutputType.STATIC_LIBRARY), 'libFoo.a')
        self.assertEqual(unix.make_linker_output_filename('Foo', LinkOutputType.OBJECT), 'Foo.o')

    def test_debug_info_invocation(self):
        self.assertTrue(DarwinToolchain(make_config(env={'RC_DEBUG_OPTIONS': '1'})).should_store_invocation_in_debug_info)
        self.assertFalse(DarwinToolchain(make_config()).should_store_invocation_in_debug_info)

    def test_interpreter_environment(self):
        tc = DarwinToolchain(frontend_config(env={'DYLD_LIBRARY_PATH': '/existing'}))
        env = tc.interpreter_environment(ParsedOptions(), '/sdk', MACOS)
        self.assertEqual(env, {'DYLD_LIBRARY_PATH': os.pathsep.join([
            j(RESOURCE_ROOT, 'macosx'), j('/sdk', 'usr', 'lib', 'swift'), '/existing'])})
        unix = GenericUnixToolchain(frontend_config())
        self.assertEqual(unix.interpreter_environment(ParsedOptions(), None, LINUX),
                         {'LD_LIBRARY_PATH': j(RESOURCE_ROOT, 'linux')})

    def test_default_sdk_path(self):
        self.assertIsNone(GenericUnixToolchain(make_config()).default_sdk_path(LINUX))
        self.assertIsNone(DarwinToolchain(make_config()).default_sdk_path(MACOS))

    @skip_if_windows
    def test_default_sdk_path_from_xcrun(self):
        with temp_tree() as d:
            xcrun = make_executable(j(d, 'bin', 'xcrun'))
            tc = DarwinToolchain(make_config(env={'PATH': j(d, 'bin')}))
            with mock.patch('swifttoolchain.toolchains.check_nonzero_exit',
                            return_value=b'/SDKs/iPhoneOS.sdk\n') as m:
                self.assertEqual(tc.default_sdk_path(Triple.parse('arm64-apple-ios13')), '/SDKs/iPhoneOS.sdk')
                tc.default_sdk_path(CATALYST)
        m.assert_any_call([xcrun, '--sdk', 'iphoneos', '--show-sdk-path'], env=tc.env)
        m.assert_called_with([xcrun, '--sdk', 'macosx', '--show-sdk-path'], env=tc.env)
