#!/usr/bin/env python3
# SPDX-License-Identifier: Apache-2.0
# Copyright 2016-2024 The Meson development team

import sys
import unittest

from unittests.argumentstests import CommandLineTests
from unittests.linkertests import StdlibLinkTests
from unittests.mlogtests import MlogTests
from unittests.optionstests import ParsedOptionsTests
from unittests.programstests import EnvConfigTests, LookupTests
from unittests.rpathtests import RpathPolicyTests
from unittests.runtimecompattests import CompatibilityVersionTests, RequestedVersionTests
from unittests.targetinfotests import TargetInfoTests
from unittests.toolchainmaintests import CommandLineTests as CommandLineFrontEndTests, CommandOutputTests
from unittests.toolchaintests import (
    FrontendQueryTests, MiscTests, ResourceDirTests, RuntimeLibraryPathTests,
    SanitizerRuntimeTests, ToolPathTests,
)
from unittests.tripletests import TripleParseTests, TriplePlatformTests, TripleVersionTests

cases = [
    'MlogTests',
    'TripleParseTests', 'TripleVersionTests', 'TriplePlatformTests',
    'ParsedOptionsTests', 'CommandLineTests',
    'EnvConfigTests', 'LookupTests',
    'TargetInfoTests',
    'ToolPathTests', 'FrontendQueryTests', 'ResourceDirTests', 'RuntimeLibraryPathTests',
    'SanitizerRuntimeTests', 'MiscTests',
    'CompatibilityVersionTests', 'RequestedVersionTests',
    'RpathPolicyTests',
    'StdlibLinkTests',
    'CommandLineFrontEndTests', 'CommandOutputTests',
]

def main():
    try:
        import pytest # noqa: F401
    except ImportError:
        print('pytest not found, using unittest instead')
        return unittest.main(defaultTest=cases, buffer=True)
    return pytest.main(['-q', __file__] + sys.argv[1:])

if __name__ == '__main__':
    sys.exit(main())
