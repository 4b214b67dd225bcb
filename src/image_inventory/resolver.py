"""Resolve OS, packages and libraries from an extracted file map.

OS and package resolution stop at the first analyzer that succeeds. Library
resolution runs every analyzer and merges the results.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from .errors import LibraryAnalysisError, UnknownOSError, UnknownPackageManagerError
from .registry import AnalyzerRegistry, default_registry
from .types import OS, FileMap, FilePath, Library, Package

logger = logging.getLogger(__name__)


def try_in_order(
    analyzers: Iterable[Any],
    file_map: FileMap,
    exhausted: Callable[[], Exception],
) -> Any:
    """Return the result of the first analyzer that does not raise.

    Exceptions from individual analyzers mean "not applicable" and are
    discarded.

    Args:
        analyzers: Analyzers in priority order.
        file_map: Extracted image contents.
        exhausted: Factory for the exception raised when nothing matched.

    Returns:
        The winning analyzer's result.

    Raises:
        Exception: Whatever ``exhausted()`` builds, if no analyzer succeeds.
    """
    for analyzer in analyzers:
        try:
            result = analyzer.analyze(file_map)
        except Exception as e:
            logger.debug("%s skipped: %s", type(analyzer).__name__, e)
            continue
        logger.debug("%s matched", type(analyzer).__name__)
        return result
    raise exhausted()


def get_os(file_map: FileMap, registry: AnalyzerRegistry | None = None) -> OS:
    """Identify the operating system of an image.

    Raises:
        UnknownOSError: If no OS analyzer recognises the file map.
    """
    registry = registry or default_registry()
    return try_in_order(registry.os_analyzers, file_map, UnknownOSError)


def get_packages(
    file_map: FileMap, registry: AnalyzerRegistry | None = None
) -> list[Package]:
    """Enumerate installed OS packages.

    Results are returned as produced by the analyzer; use ``check_package``
    to drop incomplete records.

    Raises:
        UnknownPackageManagerError: If no package analyzer recognises the
            file map.
    """
    registry = registry or default_registry()
    return try_in_order(registry.pkg_analyzers, file_map, UnknownPackageManagerError)


def check_package(pkg: Package) -> bool:
    """Return True if the package has both a name and a version."""
    return pkg.name != "" and pkg.version != ""


def get_libraries(
    file_map: FileMap, registry: AnalyzerRegistry | None = None
) -> dict[FilePath, list[Library]]:
    """Run every library analyzer and merge their results.

    A later analyzer's libraries for a file path replace an earlier one's.

    Raises:
        LibraryAnalysisError: If any analyzer fails. Nothing is returned
            in that case.
    """
    registry = registry or default_registry()
    results: dict[FilePath, list[Library]] = {}
    for analyzer in registry.library_analyzers:
        try:
            lib_map = analyzer.analyze(file_map)
        except Exception as e:
            raise LibraryAnalysisError(f"failed to analyze libraries: {e}") from e

        for file_path, libs in lib_map.items():
            results[file_path] = libs
    return results
