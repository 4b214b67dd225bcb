"""npm dependencies from package-lock.json files anywhere in the image."""

from __future__ import annotations

import json
import posixpath

from ..errors import AnalyzerError
from ..registry import register_library_analyzer
from ..types import FileMap, FilePath, Library

LOCKFILE = "package-lock.json"


def _walk_v1(dependencies: dict, libs: dict[tuple[str, str], Library]) -> None:
    for name, dep in dependencies.items():
        version = dep.get("version", "")
        if version:
            libs.setdefault((name, version), Library(name=name, version=version))
        _walk_v1(dep.get("dependencies", {}), libs)


def parse_lockfile(content: bytes) -> list[Library]:
    """
    Parse a lockfile into libraries, sorted by name and version.

    Lockfile v2/v3 list installs under ``packages`` keyed by their
    ``node_modules`` path; v1 nests them under ``dependencies``.

    Raises:
        AnalyzerError: If the lockfile is not valid JSON.
    """
    try:
        lock = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise AnalyzerError(f"invalid {LOCKFILE}: {e}") from e
    if not isinstance(lock, dict):
        raise AnalyzerError(f"invalid {LOCKFILE}: expected an object")

    libs: dict[tuple[str, str], Library] = {}
    packages = lock.get("packages")
    if packages:
        for path, pkg in packages.items():
            # "" is the root project itself
            if not path:
                continue
            if not isinstance(pkg, dict):
                raise AnalyzerError(
                    f"invalid {LOCKFILE}: entry {path} is not an object"
                )
            name = pkg.get("name") or path.rsplit("node_modules/", 1)[-1]
            version = pkg.get("version", "")
            if version:
                libs.setdefault((name, version), Library(name=name, version=version))
    else:
        _walk_v1(lock.get("dependencies", {}), libs)

    return sorted(libs.values(), key=lambda lib: (lib.name, lib.version))


class NpmLockAnalyzer:
    def analyze(self, file_map: FileMap) -> dict[FilePath, list[Library]]:
        results: dict[FilePath, list[Library]] = {}
        for path, content in file_map.items():
            if posixpath.basename(path) != LOCKFILE:
                continue
            results[FilePath(path)] = parse_lockfile(content)
        return results

    def required_files(self) -> list[str]:
        return [LOCKFILE]


register_library_analyzer(NpmLockAnalyzer())
