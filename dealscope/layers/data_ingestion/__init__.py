"""
Layer 1: Data Ingestion and Representation

Sources:
- CRM data exports (CSV)
- Meeting transcripts (plain text, PDF, Word)

Representation:
- Raw rows as string mappings
- Session event schema for audit logs
"""

from .ingestors import (
    SourceIngestor,
    CrmExportIngestor,
    TranscriptIngestor,
    combine_transcripts,
    TRANSCRIPT_DELIMITER
)
from .event_schema import SessionEvent, EventBuilder, EventCategory, EventStore

__all__ = [
    "SourceIngestor",
    "CrmExportIngestor",
    "TranscriptIngestor",
    "combine_transcripts",
    "TRANSCRIPT_DELIMITER",
    "SessionEvent",
    "EventBuilder",
    "EventCategory",
    "EventStore"
]
