# SPDX-License-Identifier: Apache-2.0
# Copyright 2024 Meson project contributors

import unittest

from swifttoolchain.options import Option, ParsedOptions


class ParsedOptionsTests(unittest.TestCase):

    def test_separate_and_joined_values(self):
        opts = ParsedOptions.from_args(['-sdk', '/sdk', '-resource-dir=/res'])
        self.assertEqual(opts.get_last_argument(Option.SDK), '/sdk')
        self.assertEqual(opts.get_last_argument(Option.RESOURCE_DIR), '/res')
        self.assertEqual(len(opts), 2)

    def test_unknown_arguments_are_skipped(self):
        opts = ParsedOptions.from_args(['-c', 'main.swift', '-O', '-sdk', '/sdk', '-module-name', 'Foo'])
        self.assertEqual(len(opts), 1)
        self.assertEqual(opts.get_last_argument(Option.SDK), '/sdk')

    def test_missing_value_is_dropped(self):
        opts = ParsedOptions.from_args(['-no-stdlib-rpath', '-sdk'])
        self.assertTrue(opts.has_argument(Option.NO_STDLIB_RPATH))
        self.assertIsNone(opts.get_last_argument(Option.SDK))

    def test_flag_with_value_is_not_a_flag(self):
        opts = ParsedOptions.from_args(['-no-stdlib-rpath=yes'])
        self.assertFalse(opts.has_argument(Option.NO_STDLIB_RPATH))

    def test_last_argument_wins(self):
        opts = ParsedOptions.from_args(['-sdk', '/a', '-sdk', '/b'])
        self.assertEqual(opts.get_last_argument(Option.SDK), '/b')
        self.assertIsNone(opts.get_last_argument(Option.RESOURCE_DIR))

    def test_has_argument_any_of(self):
        opts = ParsedOptions([(Option.NO_TOOLCHAIN_STDLIB_RPATH, None)])
        self.assertTrue(opts.has_argument(Option.TOOLCHAIN_STDLIB_RPATH, Option.NO_TOOLCHAIN_STDLIB_RPATH))
        self.assertFalse(opts.has_argument(Option.TOOLCHAIN_STDLIB_RPATH))

    def test_has_flag(self):
        pos, neg = Option.TOOLCHAIN_STDLIB_RPATH, Option.NO_TOOLCHAIN_STDLIB_RPATH
        self.assertFalse(ParsedOptions().has_flag(pos, neg, False))
        self.assertTrue(ParsedOptions().has_flag(pos, neg, True))
        self.assertTrue(ParsedOptions.from_args(['-toolchain-stdlib-rpath']).has_flag(pos, neg, False))
        self.assertFalse(ParsedOptions.from_args(['-no-toolchain-stdlib-rpath']).has_flag(pos, neg, True))
        both = ParsedOptions.from_args(['-no-toolchain-stdlib-rpath', '-toolchain-stdlib-rpath'])
        self.assertTrue(both.has_flag(pos, neg, False))
        both = ParsedOptions.from_args(['-toolchain-stdlib-rpath', '-no-toolchain-stdlib-rpath'])
        self.assertFalse(both.has_flag(pos, neg, False))

    def test_takes_argument(self):
        self.assertTrue(Option.SDK.takes_argument)
        self.assertTrue(Option.RUNTIME_COMPATIBILITY_VERSION.takes_argument)
        self.assertFalse(Option.NO_STDLIB_RPATH.takes_argument)

    def test_repr(self):
        opts = ParsedOptions.from_args(['-sdk', '/sdk', '-no-stdlib-rpath'])
        self.assertEqual(repr(opts), '<ParsedOptions: -sdk /sdk -no-stdlib-rpath>')
