"""Built-in analyzers.

Importing this package registers each analyzer with the default registry.
"""

from .apk import ApkAnalyzer
from .npm import NpmLockAnalyzer
from .os_release import OSReleaseAnalyzer

__all__ = ["ApkAnalyzer", "NpmLockAnalyzer", "OSReleaseAnalyzer"]
