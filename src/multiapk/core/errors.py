"""Error taxonomy for multi-APK planning.

Every error is fatal to the current planning run. They all derive from
``ValueError`` so command-line code can keep catching ``ValueError`` and
print the message verbatim.
"""

from __future__ import annotations


class ExportError(ValueError):
    """Base class for every planning failure."""


class InvalidProjectPath(ExportError):
    pass


class ManifestParseError(ExportError):
    pass


class PackageMismatch(ExportError):
    pass


class ForbiddenVersionCodeDeclared(ExportError):
    pass


class UnsupportedCodename(ExportError):
    pass


class MissingProjectConfig(ExportError):
    pass


class InvalidConfig(ExportError):
    pass


class MissingDataFiles(ExportError):
    pass


class DifferentiationError(ExportError):
    """Two manifests cannot be told apart at install time."""

    def __init__(self, message: str, *, location: str, other_location: str) -> None:
        super().__init__(message)
        self.location = location
        self.other_location = other_location


class IdenticalVariants(DifferentiationError):
    pass


class AmbiguousScreenOverlap(DifferentiationError):
    pass


class IndeterminateScreenPriority(DifferentiationError):
    pass


class TooManyVariants(ExportError):
    pass


class TooManyRevisions(ExportError):
    pass


class ReconciliationError(ExportError):
    pass


class StructureChanged(ReconciliationError):
    pass


class PropertiesChanged(ReconciliationError):
    pass


class LogIoError(ExportError):
    pass


class LogFormatError(ExportError):
    pass
