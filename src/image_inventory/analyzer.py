"""Extract the files registered analyzers need from an image."""

from __future__ import annotations

import logging
import threading
from typing import IO, Iterable, Protocol

from .config import AnalyzerSettings
from .docker import DockerExtractor
from .errors import ExtractionCancelledError, ExtractionError, ExtractionTimeoutError
from .registry import AnalyzerRegistry, default_registry
from .types import FileMap

logger = logging.getLogger(__name__)


class Extractor(Protocol):
    """Produces a file map from an image reference or an image archive."""

    def extract(
        self,
        image_name: str,
        filenames: Iterable[str],
        *,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> FileMap: ...

    def extract_from_file(
        self,
        stream: IO[bytes],
        filenames: Iterable[str],
        *,
        cancel: threading.Event | None = None,
    ) -> FileMap: ...


def _extraction_failed(error: Exception) -> ExtractionError:
    message = f"failed to extract files: {error}"
    if isinstance(error, (ExtractionTimeoutError, TimeoutError)):
        return ExtractionTimeoutError(message)
    if isinstance(error, ExtractionCancelledError):
        return ExtractionCancelledError(message)
    return ExtractionError(message)


def analyze(
    image_name: str,
    *,
    registry: AnalyzerRegistry | None = None,
    extractor: Extractor | None = None,
    cancel: threading.Event | None = None,
    settings: AnalyzerSettings | None = None,
) -> FileMap:
    """Extract required files from an image by reference.

    Args:
        image_name: Image reference, e.g. "alpine:3.19".
        registry: Analyzers whose required files are extracted.
        extractor: Extraction backend (Docker CLI by default).
        cancel: Event that aborts the extraction once set.
        settings: Timeout and Docker settings.

    Returns:
        File map of the required files.

    Raises:
        ExtractionError: If extraction fails. Timeouts raise
            ExtractionTimeoutError and cancellation ExtractionCancelledError.
    """
    registry = registry or default_registry()
    settings = settings or AnalyzerSettings()
    extractor = extractor or DockerExtractor(settings.docker_option())

    try:
        return extractor.extract(
            image_name,
            registry.required_filenames(),
            timeout=settings.timeout,
            cancel=cancel,
        )
    except Exception as e:
        logger.debug("Extraction of %s failed: %s", image_name, e)
        raise _extraction_failed(e) from e


def analyze_from_file(
    stream: IO[bytes],
    *,
    registry: AnalyzerRegistry | None = None,
    extractor: Extractor | None = None,
    cancel: threading.Event | None = None,
) -> FileMap:
    """Extract required files from an exported image archive.

    The extractor takes ownership of ``stream`` and closes it. No timeout is
    applied.

    Raises:
        ExtractionError: If extraction fails.
    """
    try:
        registry = registry or default_registry()
        extractor = extractor or DockerExtractor()
        filenames = registry.required_filenames()
    except BaseException:
        stream.close()
        raise

    try:
        return extractor.extract_from_file(stream, filenames, cancel=cancel)
    except Exception as e:
        logger.debug("Extraction from archive failed: %s", e)
        raise _extraction_failed(e) from e
