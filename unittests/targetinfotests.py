# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

import json
import unittest

from swifttoolchain.targetinfo import parse_target_info
from swifttoolchain.toollib import MalformedTargetInfo, ToolchainException

MACOS_TARGET_INFO = {
    'compilerVersion': 'Apple Swift version 5.9',
    'target': {
        'triple': 'arm64-apple-macosx13.0',
        'unversionedTriple': 'arm64-apple-macosx',
        'moduleTriple': 'arm64-apple-macos',
        'swiftRuntimeCompatibilityVersion': '5.7',
        'librariesRequireRPath': False,
    },
    'paths': {
        'runtimeLibraryPaths': ['/usr/lib/swift'],
        'runtimeLibraryImportPaths': ['/Toolchains/usr/lib/swift/macosx'],
        'runtimeResourcePath': '/Toolchains/usr/lib/swift',
    },
}


def target_info_bytes(data=None) -> bytes:
    return json.dumps(MACOS_TARGET_INFO if data is None else data).encode('utf-8')


class TargetInfoTests(unittest.TestCase):

    def test_parse(self):
        info = parse_target_info(target_info_bytes())
        self.assertEqual(info.target.triple.triple, 'arm64-apple-macosx13.0')
        self.assertEqual(info.target.unversioned_triple.os_version, (0, 0, 0))
        self.assertEqual(info.target.module_triple.arch, 'arm64')
        self.assertFalse(info.target.libraries_require_rpath)
        self.assertIsNone(info.target_variant)
        self.assertEqual(info.paths.runtime_library_paths, ['/usr/lib/swift'])
        self.assertEqual(info.paths.runtime_resource_path, '/Toolchains/usr/lib/swift')

    def test_target_variant(self):
        data = dict(MACOS_TARGET_INFO)
        data['targetVariant'] = {
            'triple': 'arm64-apple-ios16.0-macabi',
            'unversionedTriple': 'arm64-apple-ios-macabi',
            'moduleTriple': 'arm64-apple-ios-macabi',
            'librariesRequireRPath': True,
        }
        info = parse_target_info(target_info_bytes(data))
        self.assertTrue(info.target_variant.triple.is_mac_catalyst)
        self.assertTrue(info.target_variant.libraries_require_rpath)
        self.assertEqual(info.to_json()['targetVariant']['triple'], 'arm64-apple-ios16.0-macabi')

    def test_to_json(self):
        info = parse_target_info(target_info_bytes())
        out = info.to_json()
        self.assertEqual(out['target']['moduleTriple'], 'arm64-apple-macos')
        self.assertEqual(out['paths'], MACOS_TARGET_INFO['paths'])
        self.assertNotIn('targetVariant', out)

    def test_not_utf8(self):
        with self.assertRaises(MalformedTargetInfo) as cm:
            parse_target_info(b'{"target": "\xff\xfe"}')
        self.assertIn('"target"', cm.exception.raw)

    def test_not_json(self):
        with self.assertRaises(MalformedTargetInfo) as cm:
            parse_target_info(b'<unknown>:0: error: unknown argument')
        self.assertEqual(cm.exception.raw, '<unknown>:0: error: unknown argument')
        self.assertIsInstance(cm.exception, ToolchainException)

    def test_missing_keys(self):
        for key in ('target', 'paths'):
            data = dict(MACOS_TARGET_INFO)
            del data[key]
            with self.subTest(key=key):
                with self.assertRaises(MalformedTargetInfo):
                    parse_target_info(target_info_bytes(data))

    def test_wrong_types(self):
        data = json.loads(target_info_bytes())
        data['paths']['runtimeLibraryPaths'] = '/usr/lib/swift'
        with self.assertRaises(MalformedTargetInfo):
            parse_target_info(target_info_bytes(data))
        data = json.loads(target_info_bytes())
        data['target']['triple'] = 42
        with self.assertRaises(MalformedTargetInfo):
            parse_target_info(target_info_bytes(data))

    def test_rpath_requirement_must_be_a_bool(self):
        data = json.loads(target_info_bytes())
        del data['target']['librariesRequireRPath']
        with self.assertRaises(MalformedTargetInfo):
            parse_target_info(target_info_bytes(data))
        data = json.loads(target_info_bytes())
        data['target']['librariesRequireRPath'] = 'false'
        with self.assertRaises(MalformedTargetInfo):
            parse_target_info(target_info_bytes(data))

    def test_not_an_object(self):
        with self.assertRaises(MalformedTargetInfo):
            parse_target_info(b'[1, 2, 3]')
