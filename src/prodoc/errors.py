"""
Error types raised by ProDoc operations.

Operations raise these; the editor's operation boundary turns them into
notifications so that no failure ends the editing session.
"""


class ProDocError(Exception):
    """Base class for all ProDoc errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ProDocError):
    """User input was rejected (bad URL, missing file, wrong table size...)."""


class ParseError(ProDocError):
    """Imported or persisted data could not be read."""


class ExternalServiceFailure(ProDocError):
    """A collaborator (rasterizer, PDF assembler, DOCX writer, disk) failed."""
