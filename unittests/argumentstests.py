# SPDX-License-Identifier: Apache-2.0
# Copyright © 2025 Intel Corporation

import os
import unittest

from swifttoolchain.arguments import CommandLine, Flag, PathArgument


class CommandLineTests(unittest.TestCase):

    def test_render(self):
        self.assertEqual(Flag('-L').render(), '-L')
        self.assertEqual(PathArgument('/usr//lib/../lib/swift').render(), os.path.normpath('/usr/lib/swift'))

    def test_order_is_kept(self):
        cl = CommandLine()
        cl.append_flag('-L')
        cl.append_path('/b')
        cl.append_flag('-L')
        cl.append_path('/a')
        self.assertEqual(cl.to_strings(), ['-L', os.path.normpath('/b'), '-L', os.path.normpath('/a')])
        self.assertEqual(len(cl), 4)
        self.assertEqual(list(cl), [Flag('-L'), PathArgument('/b'), Flag('-L'), PathArgument('/a')])

    def test_join_quotes(self):
        cl = CommandLine([Flag('-rpath'), PathArgument('/Library/My Toolchain')])
        self.assertEqual(cl.join(), "-rpath '{}'".format(os.path.normpath('/Library/My Toolchain')))

    def test_extend_and_equality(self):
        a = CommandLine([Flag('-force_load')])
        b = CommandLine()
        b.extend(a)
        self.assertEqual(a, b)
        b.append_path('/x.a')
        self.assertNotEqual(a, b)
        self.assertNotEqual(a, ['-force_load'])
