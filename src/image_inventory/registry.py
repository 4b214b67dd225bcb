"""Analyzer plugin contracts and the registry that holds them.

Analyzers are grouped in three kinds. Each kind is kept in registration
order, which is also the priority order used by the resolvers.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

from .types import OS, FileMap, FilePath, Library, Package

logger = logging.getLogger(__name__)


@runtime_checkable
class OSAnalyzer(Protocol):
    """Detects the operating system of an image."""

    def analyze(self, file_map: FileMap) -> OS: ...

    def required_files(self) -> list[str]: ...


@runtime_checkable
class PkgAnalyzer(Protocol):
    """Enumerates packages installed by the OS package manager."""

    def analyze(self, file_map: FileMap) -> list[Package]: ...

    def required_files(self) -> list[str]: ...


@runtime_checkable
class LibraryAnalyzer(Protocol):
    """Finds language-level dependencies, keyed by the file they came from."""

    def analyze(self, file_map: FileMap) -> dict[FilePath, list[Library]]: ...

    def required_files(self) -> list[str]: ...


class AnalyzerRegistry:
    """Ordered, append-only collection of analyzers.

    Registration is guarded by a lock and readers always get a tuple
    snapshot, so analysis may run while plugins are still registering.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._os_analyzers: list[OSAnalyzer] = []
        self._pkg_analyzers: list[PkgAnalyzer] = []
        self._library_analyzers: list[LibraryAnalyzer] = []

    def register_os_analyzer(self, analyzer: OSAnalyzer) -> None:
        with self._lock:
            self._os_analyzers.append(analyzer)
        logger.debug("Registered OS analyzer %s", type(analyzer).__name__)

    def register_pkg_analyzer(self, analyzer: PkgAnalyzer) -> None:
        with self._lock:
            self._pkg_analyzers.append(analyzer)
        logger.debug("Registered package analyzer %s", type(analyzer).__name__)

    def register_library_analyzer(self, analyzer: LibraryAnalyzer) -> None:
        with self._lock:
            self._library_analyzers.append(analyzer)
        logger.debug("Registered library analyzer %s", type(analyzer).__name__)

    @property
    def os_analyzers(self) -> tuple[OSAnalyzer, ...]:
        with self._lock:
            return tuple(self._os_analyzers)

    @property
    def pkg_analyzers(self) -> tuple[PkgAnalyzer, ...]:
        with self._lock:
            return tuple(self._pkg_analyzers)

    @property
    def library_analyzers(self) -> tuple[LibraryAnalyzer, ...]:
        with self._lock:
            return tuple(self._library_analyzers)

    def required_filenames(self) -> list[str]:
        """Collect the files every registered analyzer needs.

        Order is OS analyzers, then package analyzers, then library
        analyzers. Duplicates are kept.

        Returns:
            List of file paths to pull out of the image.
        """
        filenames: list[str] = []
        for analyzer in self.os_analyzers:
            filenames.extend(analyzer.required_files())
        for analyzer in self.pkg_analyzers:
            filenames.extend(analyzer.required_files())
        for analyzer in self.library_analyzers:
            filenames.extend(analyzer.required_files())
        return filenames


_default_registry = AnalyzerRegistry()


def default_registry() -> AnalyzerRegistry:
    """Return the process-wide registry used by self-registering plugins."""
    return _default_registry


def register_os_analyzer(analyzer: OSAnalyzer) -> None:
    _default_registry.register_os_analyzer(analyzer)


def register_pkg_analyzer(analyzer: PkgAnalyzer) -> None:
    _default_registry.register_pkg_analyzer(analyzer)


def register_library_analyzer(analyzer: LibraryAnalyzer) -> None:
    _default_registry.register_library_analyzer(analyzer)


def required_filenames() -> list[str]:
    return _default_registry.required_filenames()
