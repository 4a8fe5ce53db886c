"""
Transcript Storage

JSON persistence for numbered and cropped transcripts.

PRINCIPLES:
===========
1. Counters are written in machine-recoverable form, never recomputed on read
2. Reading validates at the boundary; a record missing its counters is still
   readable (the cropper applies its safe default)
3. A document that is not a transcript fails loudly (TranscriptFormatError)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union
import json

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..contracts.base import TranscriptFormatError
from ..harvest.harvester import HarvestReport
from ..selection.cropper import SelectionResult


TRANSCRIPT_FORMAT = "reconstitute.transcript"
CROPPED_FORMAT = "reconstitute.cropped"
FORMAT_VERSION = 1

PathLike = Union[str, Path]


# =============================================================================
# ENCODER
# =============================================================================

class TranscriptEncoder(json.JSONEncoder):
    """
    Serializes transcript documents.

    Records are stored in documents as objects and written through their
    to_dict(); timestamps are written as ISO 8601 strings.
    """

    def default(self, obj: Any) -> Any:
        to_dict = getattr(obj, 'to_dict', None)
        if callable(to_dict):
            return to_dict()
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


# =============================================================================
# PERSISTED RECORD (read boundary)
# =============================================================================

class RunningTotalsEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: int = 0
    assistant: int = 0


class SelectionEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    position: int
    total: int


class TranscriptEntry(BaseModel):
    """
    A NumberedRecord as read back from disk.

    Counter fields are optional: an unusable global_index becomes None so the
    record still reaches the cropper.
    """
    model_config = ConfigDict(frozen=True, extra='ignore')

    identity: Optional[str] = None
    role: str = ""
    category: Optional[str] = None
    group_id: Optional[str] = None
    group_order: Optional[int] = None
    rich_content: str = ""
    plain_text: str = ""
    attachments: List[str] = Field(default_factory=list)
    global_index: Optional[int] = None
    category_index: Optional[int] = None
    running_totals: Optional[RunningTotalsEntry] = None
    index_label: Optional[str] = None
    selection: Optional[SelectionEntry] = None
    crop_warning: Optional[str] = None

    @field_validator('global_index', 'category_index', 'group_order', mode='before')
    @classmethod
    def lenient_int(cls, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return None

    @field_validator('rich_content', 'plain_text', 'role', mode='before')
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)


@dataclass
class TranscriptDocument:
    """A transcript as read from disk."""
    format: str
    version: int
    summary: Dict[str, Any] = field(default_factory=dict)
    records: List[TranscriptEntry] = field(default_factory=list)
    source: Optional[str] = None

    @property
    def is_cropped(self) -> bool:
        return self.format == CROPPED_FORMAT


# =============================================================================
# WRITE
# =============================================================================

def _write_json(path: PathLike, document: dict) -> Path:
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(document, f, cls=TranscriptEncoder, indent=2, ensure_ascii=False)
    return path


def transcript_document(report: HarvestReport, source: Optional[str] = None) -> dict:
    """Build the document for a harvest report; write it with TranscriptEncoder."""
    return {
        'format': TRANSCRIPT_FORMAT,
        'version': FORMAT_VERSION,
        'source': source,
        'summary': report.summary(),
        'written_at': datetime.now(timezone.utc),
        'records': list(report.records),
    }


def cropped_document(
    result: SelectionResult,
    source: Optional[str] = None,
    original_summary: Optional[Dict[str, Any]] = None
) -> dict:
    """Build the document for a selection result; write it with TranscriptEncoder."""
    summary = result.stats.to_dict()
    summary['spec'] = result.spec.spec
    summary['skipped_tokens'] = list(result.spec.skipped)
    if original_summary:
        summary['original'] = original_summary
    return {
        'format': CROPPED_FORMAT,
        'version': FORMAT_VERSION,
        'source': source,
        'summary': summary,
        'written_at': datetime.now(timezone.utc),
        'records': list(result.kept),
    }


def write_transcript(path: PathLike, report: HarvestReport, source: Optional[str] = None) -> Path:
    return _write_json(path, transcript_document(report, source))


def write_cropped(
    path: PathLike,
    result: SelectionResult,
    source: Optional[str] = None,
    original_summary: Optional[Dict[str, Any]] = None
) -> Path:
    return _write_json(path, cropped_document(result, source, original_summary))


# =============================================================================
# READ
# =============================================================================

def parse_entries(raw_records: Iterable[Any]) -> List[TranscriptEntry]:
    entries = []
    for position, raw in enumerate(raw_records):
        if not isinstance(raw, dict):
            raise TranscriptFormatError(
                f"record {position} must be an object, got {type(raw).__name__}"
            )
        try:
            entries.append(TranscriptEntry.model_validate(raw))
        except ValidationError as e:
            raise TranscriptFormatError(f"record {position} is malformed: {e}") from e
    return entries


def load_document(payload: Any) -> TranscriptDocument:
    """Validate an already-decoded transcript document."""
    if not isinstance(payload, dict) or not isinstance(payload.get('records'), list):
        raise TranscriptFormatError("transcript must be an object with a 'records' list")

    summary = payload.get('summary') or {}
    if not isinstance(summary, dict):
        summary = {}

    try:
        version = int(payload.get('version') or FORMAT_VERSION)
    except (TypeError, ValueError) as e:
        raise TranscriptFormatError(f"invalid version: {payload.get('version')!r}") from e

    return TranscriptDocument(
        format=str(payload.get('format') or TRANSCRIPT_FORMAT),
        version=version,
        summary=summary,
        records=parse_entries(payload['records']),
        source=payload.get('source'),
    )


def read_transcript(path: PathLike) -> TranscriptDocument:
    """Read a transcript or cropped transcript from disk."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise TranscriptFormatError(f"{path} is not valid JSON: {e}") from e
    except OSError as e:
        raise TranscriptFormatError(f"cannot read {path}: {e}") from e
    return load_document(payload)
