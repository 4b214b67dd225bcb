"""Tests for the built-in OS, package and library analyzers."""

import json

import pytest

from image_inventory.analyzers import ApkAnalyzer, NpmLockAnalyzer, OSReleaseAnalyzer
from image_inventory.analyzers.os_release import parse_os_release
from image_inventory.errors import AnalyzerError, LibraryAnalysisError
from image_inventory.registry import AnalyzerRegistry, default_registry
from image_inventory.resolver import get_libraries, get_os, get_packages
from image_inventory.types import OS, TYPE_BINARY, Library, Package

ALPINE_OS_RELEASE = b"""NAME="Alpine Linux"
ID=alpine
VERSION_ID=3.19.1
PRETTY_NAME="Alpine Linux v3.19"
"""

APK_INSTALLED = b"""C:Q1abc=
P:musl
V:1.2.4_git20230717-r4
A:x86_64

C:Q1def=
P:busybox
V:1.36.1-r15
A:x86_64
"""


def test_builtin_analyzers_self_register() -> None:
    registry = default_registry()

    assert any(isinstance(a, OSReleaseAnalyzer) for a in registry.os_analyzers)
    assert any(isinstance(a, ApkAnalyzer) for a in registry.pkg_analyzers)
    assert any(isinstance(a, NpmLockAnalyzer) for a in registry.library_analyzers)


class TestOSRelease:
    def test_parses_quoted_values(self) -> None:
        fields = parse_os_release('ID="debian"\n# comment\nVERSION_ID="12"\n')
        assert fields == {"ID": "debian", "VERSION_ID": "12"}

    def test_detects_alpine(self) -> None:
        result = OSReleaseAnalyzer().analyze({"etc/os-release": ALPINE_OS_RELEASE})
        assert result == OS(name="3.19.1", family="alpine")

    def test_falls_back_to_usr_lib(self) -> None:
        result = OSReleaseAnalyzer().analyze(
            {"usr/lib/os-release": b"ID=debian\nVERSION_ID=12\n"}
        )
        assert result == OS(name="12", family="debian")

    def test_missing_file_is_not_applicable(self) -> None:
        with pytest.raises(AnalyzerError):
            OSReleaseAnalyzer().analyze({})

    def test_missing_id_is_not_applicable(self) -> None:
        with pytest.raises(AnalyzerError, match="ID is missing"):
            OSReleaseAnalyzer().analyze({"etc/os-release": b"NAME=Mystery\n"})


class TestApk:
    def test_parses_installed_database(self) -> None:
        result = ApkAnalyzer().analyze({"lib/apk/db/installed": APK_INSTALLED})

        assert result == [
            Package(name="musl", version="1.2.4_git20230717-r4", type=TYPE_BINARY),
            Package(name="busybox", version="1.36.1-r15", type=TYPE_BINARY),
        ]

    def test_missing_database_is_not_applicable(self) -> None:
        with pytest.raises(AnalyzerError):
            ApkAnalyzer().analyze({})


class TestNpmLock:
    def test_lockfile_v1(self) -> None:
        lock = {
            "lockfileVersion": 1,
            "dependencies": {
                "express": {
                    "version": "4.18.2",
                    "dependencies": {"debug": {"version": "2.6.9"}},
                },
                "debug": {"version": "4.3.4"},
            },
        }

        result = NpmLockAnalyzer().analyze(
            {"app/package-lock.json": json.dumps(lock).encode()}
        )

        assert result == {
            "app/package-lock.json": [
                Library("debug", "2.6.9"),
                Library("debug", "4.3.4"),
                Library("express", "4.18.2"),
            ]
        }

    def test_lockfile_v3(self) -> None:
        lock = {
            "lockfileVersion": 3,
            "packages": {
                "": {"name": "app", "version": "1.0.0"},
                "node_modules/lodash": {"version": "4.17.21"},
                "node_modules/@scope/pkg": {"version": "2.0.0"},
                "node_modules/a/node_modules/lodash": {"version": "3.10.1"},
            },
        }

        result = NpmLockAnalyzer().analyze(
            {"srv/package-lock.json": json.dumps(lock).encode()}
        )

        assert result["srv/package-lock.json"] == [
            Library("@scope/pkg", "2.0.0"),
            Library("lodash", "3.10.1"),
            Library("lodash", "4.17.21"),
        ]

    def test_ignores_other_files(self) -> None:
        assert NpmLockAnalyzer().analyze({"etc/os-release": b"ID=alpine"}) == {}

    def test_invalid_lockfile_fails_library_resolution(self) -> None:
        registry = AnalyzerRegistry()
        registry.register_library_analyzer(NpmLockAnalyzer())

        with pytest.raises(LibraryAnalysisError, match="invalid package-lock.json"):
            get_libraries({"app/package-lock.json": b"{not json"}, registry)

    def test_non_object_package_entry_is_rejected(self) -> None:
        lock = {"lockfileVersion": 3, "packages": {"node_modules/x": "1.0.0"}}

        with pytest.raises(AnalyzerError, match="is not an object"):
            NpmLockAnalyzer().analyze(
                {"app/package-lock.json": json.dumps(lock).encode()}
            )


def test_resolvers_with_builtin_analyzers() -> None:
    registry = AnalyzerRegistry()
    registry.register_os_analyzer(OSReleaseAnalyzer())
    registry.register_pkg_analyzer(ApkAnalyzer())
    file_map = {
        "etc/os-release": ALPINE_OS_RELEASE,
        "lib/apk/db/installed": APK_INSTALLED,
    }

    assert get_os(file_map, registry).family == "alpine"
    assert [p.name for p in get_packages(file_map, registry)] == ["musl", "busybox"]
