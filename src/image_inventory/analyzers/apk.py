"""Alpine package enumeration from the apk installed database."""

from __future__ import annotations

from ..errors import AnalyzerError
from ..registry import register_pkg_analyzer
from ..types import TYPE_BINARY, FileMap, Package

APK_INSTALLED = "lib/apk/db/installed"


def parse_installed(content: str) -> list[Package]:
    """
    Parse the apk database.

    Records are separated by blank lines; each line is a one-letter key, a
    colon and a value. ``P`` is the package name and ``V`` its version.
    """
    packages = []
    name = version = ""
    for line in content.splitlines() + [""]:
        if not line.strip():
            if name or version:
                packages.append(Package(name=name, version=version, type=TYPE_BINARY))
            name = version = ""
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        if key == "P":
            name = value
        elif key == "V":
            version = value
    return packages


class ApkAnalyzer:
    def analyze(self, file_map: FileMap) -> list[Package]:
        content = file_map.get(APK_INSTALLED)
        if content is None:
            raise AnalyzerError(f"{APK_INSTALLED} not found")
        return parse_installed(content.decode("utf-8", errors="replace"))

    def required_files(self) -> list[str]:
        return [APK_INSTALLED]


register_pkg_analyzer(ApkAnalyzer())
