# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The Meson development team

import dataclasses
import os
from unittest import mock

from swifttoolchain import programs
from swifttoolchain.envconfig import (
    EXEC_PATH_FALLBACK_VAR, ToolchainConfig, env_override_name, get_env_search_paths,
)
from swifttoolchain.programs import Tool, lookup, lookup_executable_path
from swifttoolchain.toollib import InvalidPathError, ProcessError, ToolNotFound

from .helpers import (
    QuietTestCase, make_config, make_executable, make_plain_file, skip_if_windows, temp_tree,
)


def _must_not_run(executable, config):
    raise AssertionError('strategy should not have been consulted for ' + executable)


class EnvConfigTests(QuietTestCase):

    def test_env_override_name(self):
        self.assertEqual(env_override_name('swift-frontend'), 'SWIFT_DRIVER_SWIFT_FRONTEND_EXEC')
        self.assertEqual(env_override_name('clang++'), 'SWIFT_DRIVER_CLANG___EXEC')
        self.assertEqual(env_override_name('ld.lld'), 'SWIFT_DRIVER_LD_LLD_EXEC')

    def test_search_paths(self):
        path = os.pathsep.join(['bin', '/usr/bin', '', '/opt/../usr/local/bin'])
        self.assertEqual(get_env_search_paths(path, '/work'),
                         [os.path.normpath('/work/bin'), os.path.normpath('/usr/bin'),
                          os.path.normpath('/usr/local/bin')])
        self.assertEqual(get_env_search_paths(None, '/work'), [])
        self.assertEqual(get_env_search_paths('', '/work'), [])

    def test_config_is_a_snapshot(self):
        env = {'PATH': '/usr/bin'}
        overrides = {Tool.CLANG: '/opt/clang'}
        config = make_config(env=env, tool_overrides=overrides)
        env['PATH'] = '/changed'
        overrides[Tool.LLDB] = '/opt/lldb'
        self.assertEqual(config.env['PATH'], '/usr/bin')
        self.assertNotIn(Tool.LLDB, config.tool_overrides)
        with self.assertRaises(TypeError):
            config.env['PATH'] = '/x'  # type: ignore[index]
        with self.assertRaises(dataclasses.FrozenInstanceError):
            config.cwd = '/'  # type: ignore[misc]

    def test_with_tool_override(self):
        config = make_config()
        other = config.with_tool_override(Tool.CLANG, '/opt/clang')
        self.assertEqual(dict(config.tool_overrides), {})
        self.assertEqual(dict(other.tool_overrides), {Tool.CLANG: '/opt/clang'})
        self.assertEqual(other.cwd, config.cwd)

    def test_from_environment(self):
        with mock.patch.dict(os.environ, {'SWIFT_DRIVER_LD_EXEC': '/opt/ld'}):
            config = ToolchainConfig.from_environment(executable_dir='/driver/bin')
        self.assertEqual(config.env['SWIFT_DRIVER_LD_EXEC'], '/opt/ld')
        self.assertEqual(config.executable_dir, '/driver/bin')

    def test_exec_path_fallback_needs_exact_value(self):
        self.assertTrue(make_config(env={EXEC_PATH_FALLBACK_VAR: '1'}).exec_path_fallback_enabled)
        self.assertFalse(make_config(env={EXEC_PATH_FALLBACK_VAR: 'true'}).exec_path_fallback_enabled)
        self.assertFalse(make_config().exec_path_fallback_enabled)


class LookupTests(QuietTestCase):

    def test_env_override_short_circuits(self):
        config = make_config(env={'SWIFT_DRIVER_SWIFT_FRONTEND_EXEC': '/custom/bin/swift-frontend'})
        strategies = [programs._from_env_override] + [_must_not_run] * 5
        with mock.patch.object(programs, 'LOOKUP_STRATEGIES', strategies):
            self.assertEqual(lookup('swift-frontend', config), os.path.normpath('/custom/bin/swift-frontend'))

    def test_override_beats_real_strategies(self):
        with temp_tree() as d:
            make_executable(os.path.join(d, 'bin', 'clang'))
            config = make_config(env={'PATH': os.path.join(d, 'bin'),
                                      'SWIFT_DRIVER_CLANG_EXEC': '/pinned/clang'},
                                 executable_dir=os.path.join(d, 'bin'))
            self.assertEqual(lookup('clang', config), os.path.normpath('/pinned/clang'))

    def test_relative_env_override_is_an_error(self):
        config = make_config(env={'SWIFT_DRIVER_CLANG_EXEC': 'bin/clang'})
        with self.assertRaises(InvalidPathError) as cm:
            lookup('clang', config)
        self.assertEqual(cm.exception.path, 'bin/clang')

    @skip_if_windows
    def test_executable_dir(self):
        with temp_tree() as d:
            driver_dir = os.path.join(d, 'driver')
            path_dir = os.path.join(d, 'path')
            expected = make_executable(os.path.join(driver_dir, 'swift-frontend'))
            make_executable(os.path.join(path_dir, 'swift-frontend'))
            config = make_config(env={'PATH': path_dir}, executable_dir=driver_dir)
            self.assertEqual(lookup('swift-frontend', config), expected)

    @skip_if_windows
    def test_search_path_order(self):
        with temp_tree() as d:
            first = os.path.join(d, 'first')
            second = os.path.join(d, 'second')
            third = os.path.join(d, 'third')
            make_plain_file(os.path.join(first, 'ld'))
            expected = make_executable(os.path.join(second, 'ld'))
            make_executable(os.path.join(third, 'ld'))
            config = make_config(env={'PATH': os.pathsep.join([first, second, third])})
            self.assertEqual(lookup('ld', config), expected)
            self.assertEqual(lookup_executable_path('ld', [third, second]), os.path.join(third, 'ld'))

    @skip_if_windows
    def test_directories_are_not_executables(self):
        with temp_tree() as d:
            os.makedirs(os.path.join(d, 'bin', 'lldb'))
            self.assertIsNone(lookup_executable_path('lldb', [os.path.join(d, 'bin')]))

    @skip_if_windows
    def test_xcrun(self):
        with temp_tree() as d:
            bindir = os.path.join(d, 'bin')
            xcrun = make_executable(os.path.join(bindir, 'xcrun'))
            config = make_config(env={'PATH': bindir})
            with mock.patch('swifttoolchain.programs.check_nonzero_exit',
                            return_value=b'/Applications/Xcode.app/usr/bin/dsymutil\n') as m:
                self.assertEqual(lookup('dsymutil', config), '/Applications/Xcode.app/usr/bin/dsymutil')
            m.assert_called_once_with([xcrun, '--find', 'dsymutil'], env=config.env)

    @skip_if_windows
    def test_xcrun_failure_falls_through(self):
        with temp_tree() as d:
            bindir = os.path.join(d, 'bin')
            make_executable(os.path.join(bindir, 'xcrun'))
            expected = make_executable(os.path.join(bindir, 'dsymutil'))
            config = make_config(env={'PATH': bindir})
            err = ProcessError(['xcrun', '--find', 'dsymutil'], 72, 'xcrun: error: unable to find utility')
            with mock.patch('swifttoolchain.programs.check_nonzero_exit', side_effect=err):
                self.assertEqual(lookup('dsymutil', config), expected)

    @skip_if_windows
    def test_xcrun_relative_answer_is_ignored(self):
        with temp_tree() as d:
            bindir = os.path.join(d, 'bin')
            make_executable(os.path.join(bindir, 'xcrun'))
            config = make_config(env={'PATH': bindir})
            with mock.patch('swifttoolchain.programs.check_nonzero_exit', return_value=b'dsymutil\n'):
                with self.assertRaises(ToolNotFound):
                    lookup('dsymutil', config)

    @skip_if_windows
    def test_legacy_frontend_name(self):
        with temp_tree() as d:
            expected = make_executable(os.path.join(d, 'bin', 'swift'))
            config = make_config(env={'PATH': os.path.join(d, 'bin')})
            self.assertEqual(lookup('swift-frontend', config), expected)
            # Only the frontend has a legacy name
            with self.assertRaises(ToolNotFound):
                lookup('swift-autolink-extract', config)

    def test_test_fallback(self):
        config = make_config(env={EXEC_PATH_FALLBACK_VAR: '1'})
        self.assertEqual(lookup('ld', config), '/usr/bin/ld')
        self.assertEqual(lookup('swift-frontend', config), '/usr/bin/swift')

    def test_not_found(self):
        with self.assertRaises(ToolNotFound) as cm:
            lookup('clang', make_config())
        self.assertEqual(cm.exception.tool, 'clang')
        self.assertIn('SWIFT_DRIVER_CLANG_EXEC', str(cm.exception))

    def test_tool_names(self):
        self.assertEqual(Tool('swift-compiler'), Tool.SWIFT_COMPILER)
        self.assertEqual(len({t.value for t in Tool}), len(list(Tool)))
