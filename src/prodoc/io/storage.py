"""
Keyed local storage for the persisted document record.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

import pydantic

from ..config import DEFAULT_STORAGE_KEY
from ..core.document_model import DocumentRecord
from ..errors import ExternalServiceFailure, ParseError


logger = logging.getLogger(__name__)


class DocumentStorage:
    """
    Stores one JSON document record under a key in a directory.

    The record lives at ``<directory>/<key>.json``. A missing record is not
    an error; an unreadable one raises ``ParseError`` so the caller can fall
    back to a fresh document.
    """

    def __init__(self, directory: Union[str, Path], key: str = DEFAULT_STORAGE_KEY):
        self.directory = Path(directory)
        self.key = key

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[DocumentRecord]:
        """
        Read the stored record.

        Returns:
            The record, or None when nothing has been stored yet

        Raises:
            ParseError: if the stored data is unreadable or malformed
        """
        if not self.path.exists():
            logger.info(f"No stored document at {self.path}")
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            record = DocumentRecord.from_wire(data)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, pydantic.ValidationError) as e:
            raise ParseError(f"Stored document is unreadable: {e}") from e

        logger.info(f"Loaded document '{record.title}' from {self.path}")
        return record

    def save(self, record: DocumentRecord) -> Path:
        """
        Write the record, replacing any previous one.

        Raises:
            ExternalServiceFailure: if the storage directory is not writable
        """
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(record.to_wire(), ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise ExternalServiceFailure(f"Could not save document: {e}") from e

        logger.debug(f"Saved document '{record.title}' to {self.path}")
        return self.path

