"""
ProDoc - a rich-text document engine.

Tracks an editable rich-text document, offers undo/redo over content
snapshots, and converts the document to text, Markdown, HTML, DOCX, PDF
and JSON.
"""

__version__ = "0.1.0"
