# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

import io
import json
import os
import shlex
import unittest
from unittest import mock

from swifttoolchain import mlog, toolchainmain
from swifttoolchain.options import Option
from swifttoolchain.programs import Tool

from .helpers import (
    FRONTEND, RESOURCE_ROOT, STATIC_RESOURCE_ROOT, QuietTestCase, frontend_config, make_config,
    make_executable, skip_if_windows, temp_tree,
)
from .targetinfotests import target_info_bytes


class CommandLineTests(QuietTestCase):

    def run_command(self, args, config=None):
        if config is None:
            config = frontend_config()
        with mock.patch('sys.stdout', new_callable=io.StringIO) as out:
            rc = toolchainmain.run(args, config)
        return rc, out.getvalue()

    def test_link_args(self):
        # Compatibility libraries are looked up on disk, and this toolchain does not exist
        rc, out = self.run_command(['link-args', '--target', 'x86_64-apple-macosx10.14',
                                    '--sdk', '/SDKs/MacOSX.sdk'])
        self.assertEqual(rc, 0)
        self.assertEqual(shlex.split(out), [
            '-L', os.path.join(RESOURCE_ROOT, 'macosx'),
            '-L', os.path.join('/SDKs/MacOSX.sdk', 'usr', 'lib', 'swift'),
            '-rpath', '/usr/lib/swift',
        ])

    def test_link_args_toolchain_rpath(self):
        rc, out = self.run_command(['link-args', '--target', 'x86_64-apple-macosx12',
                                    '--toolchain-stdlib-rpath'])
        self.assertEqual(rc, 0)
        macos = os.path.join(RESOURCE_ROOT, 'macosx')
        self.assertEqual(shlex.split(out), ['-L', macos, '-rpath', macos])

    def test_link_args_linux_sdk(self):
        rc, out = self.run_command(['link-args', '--target', 'x86_64-unknown-linux-gnu',
                                    '--sdk', '/sysroot', '--no-stdlib-rpath',
                                    '--output-kind', 'dynamic-library'])
        self.assertEqual(rc, 0)
        runtime = os.path.join('/sysroot', 'usr', 'lib', 'swift')
        self.assertEqual(shlex.split(out), ['-L', os.path.join(runtime, 'linux'), '-L', runtime])

    def test_runtime_paths(self):
        rc, out = self.run_command(['runtime-paths', '--target', 'x86_64-apple-ios13.1-macabi', '--static'])
        self.assertEqual(rc, 0)
        self.assertEqual(out.splitlines(), [os.path.join(STATIC_RESOURCE_ROOT, 'maccatalyst'),
                                            os.path.join(STATIC_RESOURCE_ROOT, 'macosx')])

    def test_find_tool(self):
        config = frontend_config(tool_overrides={Tool.DYNAMIC_LINKER: '/opt/bin/ld'})
        rc, out = self.run_command(['find-tool', 'dynamic-linker', '--target', 'arm64-apple-macosx12'], config)
        self.assertEqual(rc, 0)
        self.assertEqual(out.strip(), '/opt/bin/ld')
        rc, out = self.run_command(['find-tool', 'swift-compiler'])
        self.assertEqual(out.strip(), FRONTEND)

    def test_print_target_info(self):
        with mock.patch('swifttoolchain.toolchains.check_nonzero_exit', return_value=target_info_bytes()) as m:
            rc, out = self.run_command(['print-target-info', '--target', 'arm64-apple-macosx13.0'])
        self.assertEqual(rc, 0)
        self.assertEqual(json.loads(out)['target']['triple'], 'arm64-apple-macosx13.0')
        m.assert_called_once_with([FRONTEND, '-print-target-info', '-target', 'arm64-apple-macosx13.0'],
                                  env=mock.ANY)

    def test_errors_return_1(self):
        rc, _ = self.run_command(['link-args', '--target', 'x86_64-apple-macosx10.14', '--sdk', 'relative'])
        self.assertEqual(rc, 1)
        rc, _ = self.run_command(['runtime-paths', '--target', 'x86_64-apple-macosx10.14',
                                  '--resource-dir', 'relative'])
        self.assertEqual(rc, 1)

    def test_error_is_logged(self):
        mlog.enable()
        rc, out = self.run_command(['link-args', '--target', 'x86_64-apple-macosx10.14', '--sdk', 'relative'])
        self.assertEqual(rc, 1)
        self.assertIn("Invalid absolute path: 'relative'", out)

    def test_no_command(self):
        rc, out = self.run_command([])
        self.assertEqual(rc, 2)
        self.assertIn('find-tool', out)

    def test_conflicting_rpath_flags(self):
        with mock.patch('sys.stderr', new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                self.run_command(['link-args', '--target', 'x86_64-apple-macosx10.14',
                                  '--toolchain-stdlib-rpath', '--no-toolchain-stdlib-rpath'])

    def test_logdir(self):
        config = make_config(env={'SWIFT_DRIVER_LLDB_EXEC': '/opt/bin/lldb'})
        with temp_tree() as d:
            rc, _ = self.run_command(['--logdir', d, 'find-tool', 'lldb'], config)
            self.assertEqual(rc, 0)
            self.assertIsNone(mlog.log_file)
            with open(os.path.join(d, mlog.log_fname), encoding='utf-8') as f:
                contents = f.read()
        self.assertIn('Program lldb found: YES (/opt/bin/lldb)', contents)

    def test_quiet_is_reset(self):
        self.run_command(['-q', 'find-tool', 'swift-compiler'])
        self.assertFalse(mlog.log_errors_only)

    def test_unsupported_darwin_kernel(self):
        mlog.enable()
        rc, out = self.run_command(['link-args', '--target', 'x86_64-apple-darwin3'])
        self.assertEqual(rc, 1)
        self.assertIn('Unsupported target x86_64-apple-darwin3', out)
        self.assertNotIn('Traceback', out)

    def test_missing_logdir(self):
        with temp_tree() as d:
            missing = os.path.join(d, 'does', 'not', 'exist')
            rc, _ = self.run_command(['--logdir', missing, 'find-tool', 'swift-compiler'])
        self.assertEqual(rc, 1)
        self.assertIsNone(mlog.log_file)

    def test_target_is_not_an_option(self):
        parser = toolchainmain.CommandLineParser().parser
        options = parser.parse_args(['link-args', '--target', 'x86_64-apple-macosx10.14',
                                     '--sdk', '/SDKs/MacOSX.sdk'])
        parsed = toolchainmain.options_from_namespace(options)
        self.assertIsNone(parsed.get_last_argument(Option.TARGET))
        self.assertEqual(parsed.get_last_argument(Option.SDK), '/SDKs/MacOSX.sdk')


class CommandOutputTests(unittest.TestCase):

    '''Commands run with logging left on must still print only their result.'''

    def setUp(self):
        super().setUp()
        mlog.enable()
        self.addCleanup(mlog.enable)

    def run_command(self, args, config):
        with mock.patch('sys.stdout', new_callable=io.StringIO) as out:
            rc = toolchainmain.run(args, config)
        return rc, out.getvalue()

    @skip_if_windows
    def test_link_args_stdout(self):
        with temp_tree() as d:
            bindir = os.path.join(d, 'usr', 'bin')
            make_executable(os.path.join(bindir, 'swift-frontend'))
            config = make_config(env={'PATH': bindir})
            rc, out = self.run_command(['--logdir', d, 'link-args', '--target', 'x86_64-apple-macosx10.14'],
                                       config)
            with open(os.path.join(d, mlog.log_fname), encoding='utf-8') as f:
                contents = f.read()
        self.assertEqual(rc, 0)
        self.assertEqual(len(out.splitlines()), 1)
        args = shlex.split(out)
        self.assertEqual(args[:2], ['-L', os.path.join(d, 'usr', 'lib', 'swift', 'macosx')])
        self.assertIn('Program swift-frontend found: YES', contents)
        self.assertFalse(mlog.log_disable_stdout)

    @skip_if_windows
    def test_find_tool_stdout(self):
        with temp_tree() as d:
            bindir = os.path.join(d, 'bin')
            clang = make_executable(os.path.join(bindir, 'clang'))
            config = make_config(env={'PATH': bindir})
            rc, out = self.run_command(['find-tool', 'clang', '--target', 'x86_64-unknown-linux-gnu'], config)
        self.assertEqual(rc, 0)
        self.assertEqual(out.splitlines(), [clang])
