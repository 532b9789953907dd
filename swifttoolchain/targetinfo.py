# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The Meson development team

"""The record printed by `swift-frontend -print-target-info`."""

from __future__ import annotations
import json
import typing as T
from dataclasses import dataclass, field

from .toollib import MalformedTargetInfo
from .triple import Triple


@dataclass(frozen=True)
class TargetInfoTarget:
    triple: Triple
    unversioned_triple: Triple
    module_triple: Triple
    # Whether the Swift libraries must be found through an rpath to their
    # system location (/usr/lib/swift)
    libraries_require_rpath: bool

    @classmethod
    def from_json(cls, data: T.Mapping[str, T.Any]) -> 'TargetInfoTarget':
        return cls(
            triple=Triple.parse(_str(data, 'triple')),
            unversioned_triple=Triple.parse(_str(data, 'unversionedTriple')),
            module_triple=Triple.parse(_str(data, 'moduleTriple')),
            libraries_require_rpath=_bool(data, 'librariesRequireRPath'),
        )

    def to_json(self) -> T.Dict[str, T.Any]:
        return {
            'triple': self.triple.triple,
            'unversionedTriple': self.unversioned_triple.triple,
            'moduleTriple': self.module_triple.triple,
            'librariesRequireRPath': self.libraries_require_rpath,
        }


@dataclass(frozen=True)
class TargetInfoPaths:
    runtime_library_paths: T.List[str] = field(default_factory=list)
    runtime_library_import_paths: T.List[str] = field(default_factory=list)
    runtime_resource_path: str = ''

    @classmethod
    def from_json(cls, data: T.Mapping[str, T.Any]) -> 'TargetInfoPaths':
        return cls(
            runtime_library_paths=_str_list(data, 'runtimeLibraryPaths'),
            runtime_library_import_paths=_str_list(data, 'runtimeLibraryImportPaths'),
            runtime_resource_path=_str(data, 'runtimeResourcePath'),
        )

    def to_json(self) -> T.Dict[str, T.Any]:
        return {
            'runtimeLibraryPaths': list(self.runtime_library_paths),
            'runtimeLibraryImportPaths': list(self.runtime_library_import_paths),
            'runtimeResourcePath': self.runtime_resource_path,
        }


@dataclass(frozen=True)
class FrontendTargetInfo:
    target: TargetInfoTarget
    target_variant: T.Optional[TargetInfoTarget]
    paths: TargetInfoPaths

    def to_json(self) -> T.Dict[str, T.Any]:
        out = {
            'target': self.target.to_json(),
            'paths': self.paths.to_json(),
        }  # type: T.Dict[str, T.Any]
        if self.target_variant is not None:
            out['targetVariant'] = self.target_variant.to_json()
        return out


def _str(data: T.Mapping[str, T.Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError('{} is not a string'.format(key))
    return value


def _bool(data: T.Mapping[str, T.Any], key: str) -> bool:
    value = data[key]
    if not isinstance(value, bool):
        raise TypeError('{} is not a boolean'.format(key))
    return value


def _str_list(data: T.Mapping[str, T.Any], key: str) -> T.List[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise TypeError('{} is not a list of strings'.format(key))
    return value


def parse_target_info(raw: bytes) -> FrontendTargetInfo:
    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError:
        raise MalformedTargetInfo(raw.decode('utf-8', errors='replace'))
    try:
        data = json.loads(text)
        variant = data.get('targetVariant')
        return FrontendTargetInfo(
            target=TargetInfoTarget.from_json(data['target']),
            target_variant=TargetInfoTarget.from_json(variant) if variant is not None else None,
            paths=TargetInfoPaths.from_json(data['paths']),
        )
    except (ValueError, KeyError, TypeError, AttributeError):
        raise MalformedTargetInfo(text)
