"""
manifest

Runs independent checkers against a code change and publishes their
diagnostics as pull request comments, without duplicating comments across
runs and resolving the ones that no longer apply.
"""

__version__ = "0.1.0"

from .exceptions import ChecksReportedError, InspectionError, ManifestError
from .inspection import Inspection

__all__ = ["ChecksReportedError", "Inspection", "InspectionError", "ManifestError", "__version__"]
