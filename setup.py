#!/usr/bin/env python3

# Copyright 2016 The Meson development team

# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at

#     http://www.apache.org/licenses/LICENSE-2.0

# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import sys

if sys.version_info < (3, 7):
    raise SystemExit('ERROR: Tried to install swift-toolchain with an unsupported Python version: \n{}'
                     '\nswift-toolchain requires Python 3.7 or greater'.format(sys.version))

from swifttoolchain.toollib import version
from setuptools import setup

entries = {'console_scripts': ['swift-toolchain=swifttoolchain.toolchainmain:main']}
packages = ['swifttoolchain']

if __name__ == '__main__':
    setup(name='swift-toolchain',
          version=version,
          description='Toolchain and standard library link argument resolution for the Swift driver',
          license='Apache-2.0',
          packages=packages,
          python_requires='>=3.7',
          extras_require={'tests': ['pytest']},
          entry_points=entries)
