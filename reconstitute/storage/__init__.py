"""
Storage Layer

RESPONSIBILITY: Persist numbered and cropped transcripts as JSON.
MUST NOT: Recompute counters or transform record content.
"""

from .transcript_store import (
    TRANSCRIPT_FORMAT,
    CROPPED_FORMAT,
    FORMAT_VERSION,
    TranscriptEncoder,
    TranscriptEntry,
    TranscriptDocument,
    transcript_document,
    cropped_document,
    write_transcript,
    write_cropped,
    load_document,
    read_transcript,
)

__all__ = [
    "TRANSCRIPT_FORMAT",
    "CROPPED_FORMAT",
    "FORMAT_VERSION",
    "TranscriptEncoder",
    "TranscriptEntry",
    "TranscriptDocument",
    "transcript_document",
    "cropped_document",
    "write_transcript",
    "write_cropped",
    "load_document",
    "read_transcript",
]
