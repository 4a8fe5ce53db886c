"""
Record Contracts

Data structures flowing from the virtualized source to the numbered
transcript.

LIFECYCLE:
==========
RawRecord      - one observation, as extracted (immutable)
Record / Group - accumulated store entries, mutated ONLY by merge
NumberedRecord - final ordered output (immutable, counters never change)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from enum import Enum


# =============================================================================
# ENUMS
# =============================================================================

class Category(Enum):
    """Author category of a record."""
    USER = "user"
    ASSISTANT = "assistant"
    OTHER = "other"

    @classmethod
    def from_role(cls, role: Optional[str]) -> 'Category':
        """Map a raw author role string to a category."""
        normalized = (role or "").strip().lower()
        if normalized == cls.USER.value:
            return cls.USER
        if normalized == cls.ASSISTANT.value:
            return cls.ASSISTANT
        return cls.OTHER


# Flattening order inside a group
CATEGORY_PRECEDENCE: Dict[Category, int] = {
    Category.USER: 0,
    Category.ASSISTANT: 1,
    Category.OTHER: 2,
}


# =============================================================================
# RAW OBSERVATION
# =============================================================================

@dataclass(frozen=True)
class RawRecord:
    """
    A record as currently materialized by the source.

    `identity` is the source-provided id when the source exposes one.
    """
    role: str
    group_id: str
    identity: Optional[str] = None
    group_order: Optional[int] = None
    rich_content: str = ""
    plain_text: str = ""
    attachments: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def category(self) -> Category:
        return Category.from_role(self.role)

    @property
    def has_content(self) -> bool:
        """True if the record carries any content or attachment."""
        return bool(
            self.rich_content.strip()
            or self.plain_text.strip()
            or self.attachments
        )


# =============================================================================
# ACCUMULATED STORE ENTRIES
# =============================================================================

@dataclass
class Record:
    """A deduplicated record in the accumulated store."""
    identity: str
    role: str
    category: Category
    group_id: str
    rich_content: str = ""
    plain_text: str = ""
    attachments: List[str] = field(default_factory=list)


@dataclass
class Group:
    """
    A turn: records sharing `group_id`.

    Records are keyed by identity; dict order is first-observation order.
    """
    group_id: str
    discovery_order: int
    group_order: Optional[int] = None
    records: Dict[str, Record] = field(default_factory=dict)

    @property
    def has_order(self) -> bool:
        return self.group_order is not None


# =============================================================================
# NUMBERED OUTPUT
# =============================================================================

@dataclass(frozen=True)
class RunningTotals:
    """Cumulative per-category counts at a position in the sequence."""
    user: int = 0
    assistant: int = 0

    def label(self) -> str:
        return f"U:{self.user} + A:{self.assistant}"

    def to_dict(self) -> dict:
        return {'user': self.user, 'assistant': self.assistant}


@dataclass(frozen=True)
class NumberedRecord:
    """
    A record with its three counter families.

    IMMUTABLE: counters are assigned once, by a single forward pass.
    """
    identity: str
    role: str
    category: Category
    group_id: str
    group_order: Optional[int]
    rich_content: str
    plain_text: str
    attachments: Tuple[str, ...]
    global_index: int
    category_index: Optional[int]
    running_totals: RunningTotals

    @property
    def index_label(self) -> str:
        return f"Index #{self.global_index}"

    @property
    def badge(self) -> str:
        if self.category is Category.USER:
            return f"User {self.category_index}"
        if self.category is Category.ASSISTANT:
            return f"Assistant {self.category_index}"
        return self.role.upper()

    def to_dict(self) -> dict:
        return {
            'identity': self.identity,
            'role': self.role,
            'category': self.category.value,
            'group_id': self.group_id,
            'group_order': self.group_order,
            'rich_content': self.rich_content,
            'plain_text': self.plain_text,
            'attachments': list(self.attachments),
            'global_index': self.global_index,
            'category_index': self.category_index,
            'running_totals': self.running_totals.to_dict(),
            'index_label': self.index_label,
        }
