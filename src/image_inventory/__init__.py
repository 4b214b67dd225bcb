"""
Image Inventory - pluggable OS, package and library detection for container images.

Analyzers register with an ``AnalyzerRegistry``. The registry's required
files are extracted from an image, and the resolvers then try the
registered analyzers against the extracted file map.
"""

__version__ = "0.1.0"

from .analyzer import Extractor, analyze, analyze_from_file
from .config import AnalyzerSettings, DockerOption
from .docker import DockerExtractor
from .errors import (
    AnalyzerError,
    DockerError,
    ExtractionCancelledError,
    ExtractionError,
    ExtractionTimeoutError,
    ImageInventoryError,
    LibraryAnalysisError,
    UnknownOSError,
    UnknownPackageManagerError,
)
from .registry import (
    AnalyzerRegistry,
    LibraryAnalyzer,
    OSAnalyzer,
    PkgAnalyzer,
    default_registry,
    register_library_analyzer,
    register_os_analyzer,
    register_pkg_analyzer,
    required_filenames,
)
from .resolver import check_package, get_libraries, get_os, get_packages, try_in_order
from .types import (
    OS,
    TYPE_BINARY,
    TYPE_SOURCE,
    FileMap,
    FilePath,
    Library,
    Package,
    SrcPackage,
)

__all__ = [
    "AnalyzerError",
    "AnalyzerRegistry",
    "AnalyzerSettings",
    "DockerError",
    "DockerExtractor",
    "DockerOption",
    "ExtractionCancelledError",
    "ExtractionError",
    "ExtractionTimeoutError",
    "Extractor",
    "FileMap",
    "FilePath",
    "ImageInventoryError",
    "Library",
    "LibraryAnalysisError",
    "LibraryAnalyzer",
    "OS",
    "OSAnalyzer",
    "Package",
    "PkgAnalyzer",
    "SrcPackage",
    "TYPE_BINARY",
    "TYPE_SOURCE",
    "UnknownOSError",
    "UnknownPackageManagerError",
    "analyze",
    "analyze_from_file",
    "check_package",
    "default_registry",
    "get_libraries",
    "get_os",
    "get_packages",
    "register_library_analyzer",
    "register_os_analyzer",
    "register_pkg_analyzer",
    "required_filenames",
    "try_in_order",
]
