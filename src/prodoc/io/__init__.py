"""
Persistence, import and export of documents.
"""

from .storage import DocumentStorage
from .importer import DocumentImporter, ImportResult, read_image_file
from .exporter import DocumentExporter, ExportArtifact, ExportFormat

__all__ = [
    "DocumentStorage", "DocumentImporter", "ImportResult", "read_image_file",
    "DocumentExporter", "ExportArtifact", "ExportFormat",
]
