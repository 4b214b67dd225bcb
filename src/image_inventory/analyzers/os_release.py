"""OS detection from the os-release file."""

from __future__ import annotations

import shlex

from ..errors import AnalyzerError
from ..registry import register_os_analyzer
from ..types import OS, FileMap

OS_RELEASE_FILES = ["etc/os-release", "usr/lib/os-release"]


def parse_os_release(content: str) -> dict[str, str]:
    """Parse KEY=value lines, unquoting values the way a shell would."""
    fields: dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value.strip("\"'")]
        fields[key.strip()] = parts[0] if parts else ""
    return fields


class OSReleaseAnalyzer:
    """Reads ID and VERSION_ID; family is the ID, name is the version."""

    def analyze(self, file_map: FileMap) -> OS:
        for path in OS_RELEASE_FILES:
            content = file_map.get(path)
            if content is None:
                continue
            fields = parse_os_release(content.decode("utf-8", errors="replace"))
            family = fields.get("ID", "")
            if not family:
                raise AnalyzerError(f"{path}: ID is missing")
            return OS(name=fields.get("VERSION_ID", ""), family=family)
        raise AnalyzerError("os-release not found")

    def required_files(self) -> list[str]:
        return list(OS_RELEASE_FILES)


register_os_analyzer(OSReleaseAnalyzer())
