"""
Record Identity

Stable deduplication keys for harvested records.

RULES:
======
1. A source-provided id always wins
2. Otherwise the key is derived from category + normalized text prefix/suffix
3. Derived keys are scoped to their group so identical short replies in
   different turns never merge
"""

from __future__ import annotations
from typing import Tuple
import hashlib
import re

from ..contracts.records import Category, RawRecord


PREFIX_CHARS = 120
SUFFIX_CHARS = 120
SUFFIX_MIN_LENGTH = 240  # Shorter texts are fully covered by the prefix

_WHITESPACE = re.compile(r"\s+")
_TAG = re.compile(r"<[^>]+>")


def normalize_text(text: str) -> str:
    """Collapse runs of whitespace and trim."""
    return _WHITESPACE.sub(" ", text or "").strip()


def text_prefix_suffix(text: str) -> Tuple[str, str]:
    """Split normalized text into the prefix and suffix used for keys."""
    normalized = normalize_text(text)
    prefix = normalized[:PREFIX_CHARS]
    suffix = normalized[-SUFFIX_CHARS:] if len(normalized) > SUFFIX_MIN_LENGTH else ""
    return prefix, suffix


def fallback_key(category: Category, prefix: str, suffix: str) -> str:
    """
    Derive a deterministic key from category and text fragments.

    Pure and total: any input yields a key, equal inputs yield equal keys.
    """
    content = f"{category.value}::{prefix}::{suffix}"
    digest = hashlib.sha256(content.encode('utf-8')).hexdigest()
    return f"fp_{digest[:32]}"


def _key_text(raw: RawRecord) -> str:
    if raw.plain_text.strip():
        return raw.plain_text
    if raw.rich_content.strip():
        return _TAG.sub(" ", raw.rich_content)
    return " ".join(raw.attachments)


def record_identity(raw: RawRecord) -> str:
    """Identity of an observation: source id, else group-scoped fingerprint."""
    if raw.identity and raw.identity.strip():
        return raw.identity.strip()
    prefix, suffix = text_prefix_suffix(_key_text(raw))
    return f"{raw.group_id}/{fallback_key(raw.category, prefix, suffix)}"
