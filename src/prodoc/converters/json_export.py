"""
JSON export envelope: the document record plus derived fields.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ..core.document_model import DocumentRecord, now_ms


def build_envelope(record: DocumentRecord, plain_text: str,
                   exported_at: Optional[int] = None) -> Dict[str, Any]:
    """
    Build the exported JSON object.

    Args:
        record: Current document record (title and content already refreshed)
        plain_text: Visible text of the document
        exported_at: Export time in epoch milliseconds, defaults to now

    Returns:
        The record's wire fields plus ``plainText``, ``exportedAt`` and
        ``exportFormat``
    """
    envelope = record.to_wire()
    envelope.update({
        "plainText": plain_text,
        "exportedAt": now_ms() if exported_at is None else exported_at,
        "exportFormat": "json",
    })
    return envelope


def dumps_envelope(envelope: Dict[str, Any]) -> str:
    return json.dumps(envelope, indent=2, ensure_ascii=False)
