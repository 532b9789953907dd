# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The Meson development team

import io
import os
import unittest
from unittest import mock

from swifttoolchain import mlog

from .helpers import temp_tree


class MlogTests(unittest.TestCase):

    def setUp(self):
        mlog.enable()
        mlog.set_verbose()
        self.addCleanup(mlog.shutdown)
        self.addCleanup(mlog.set_verbose)

    def capture(self, func, *args):
        with mock.patch('sys.stdout', new_callable=io.StringIO) as out:
            func(*args)
        return out.getvalue()

    def test_plain_text_when_not_a_tty(self):
        self.assertEqual(self.capture(mlog.log, 'Program', mlog.bold('ld'), 'found:', mlog.green('YES')),
                         'Program ld found: YES\n')

    def test_quoted(self):
        self.assertEqual(mlog.bold('x', quoted=True).get_text(False), '"x"')
        self.assertEqual(mlog.red('x').get_text(True), '\033[1;31mx\033[0m')

    def test_quiet_keeps_errors(self):
        mlog.set_quiet()
        self.assertEqual(self.capture(mlog.log, 'progress'), '')
        self.assertEqual(self.capture(mlog.warning, 'careful'), 'WARNING: careful\n')
        self.assertEqual(self.capture(mlog.error, 'broken'), 'ERROR: broken\n')

    def test_disable(self):
        mlog.disable()
        self.addCleanup(mlog.enable)
        self.assertEqual(self.capture(mlog.error, 'broken'), '')

    def test_debug_only_goes_to_file(self):
        with temp_tree() as d:
            mlog.initialize(d)
            self.assertEqual(self.capture(mlog.debug, 'hidden', mlog.bold('detail')), '')
            self.assertEqual(self.capture(mlog.log, 'shown'), 'shown\n')
            self.assertEqual(mlog.shutdown(), os.path.join(d, mlog.log_fname))
            self.assertIsNone(mlog.shutdown())
            with open(os.path.join(d, mlog.log_fname), encoding='utf-8') as f:
                self.assertEqual(f.read(), 'hidden detail\nshown\n')

    def test_exception(self):
        out = self.capture(mlog.exception, ValueError('it went wrong'))
        self.assertEqual(out, '\nERROR: it went wrong\n')
