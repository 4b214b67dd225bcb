"""Exception hierarchy for image analysis."""


class ImageInventoryError(Exception):
    """Base class for all image-inventory errors."""

    pass


class AnalyzerError(ImageInventoryError):
    """An analyzer does not recognise, or cannot parse, the file map."""

    pass


class ExtractionError(ImageInventoryError):
    """Files could not be extracted from an image or archive."""

    pass


class ExtractionTimeoutError(ExtractionError):
    """Extraction exceeded its time budget."""

    pass


class ExtractionCancelledError(ExtractionError):
    """Extraction was cancelled by the caller."""

    pass


class DockerError(ExtractionError):
    """Docker-specific errors."""

    pass


class UnknownOSError(ImageInventoryError):
    """No registered OS analyzer recognised the image."""

    def __init__(self, message: str = "unknown OS") -> None:
        super().__init__(message)


class UnknownPackageManagerError(UnknownOSError):
    """No registered package analyzer recognised the image."""

    def __init__(self, message: str = "unknown package manager") -> None:
        super().__init__(message)


class LibraryAnalysisError(ImageInventoryError):
    """A library analyzer failed; no libraries are reported."""

    pass
