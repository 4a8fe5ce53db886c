"""
Turn Markup Extraction

Reads the structured records currently present in a chat page's markup.

MARKUP CONTRACT:
================
- Turn container:   [data-turn-id], optional numeric [data-turn]
- Message node:     [data-message-author-role], optional [data-message-id]
- Rich content:     first .markdown, else .prose, else [class*=markdown]

EXTRACTION RULES:
=================
1. Messages with no role, or no content and no attachments, are dropped
2. Turns with an empty id or no usable messages are dropped
3. Attachment names are collected from links, images, titles and
   aria-labels, de-duplicated in first-seen order
"""

from __future__ import annotations
from typing import List, Optional, Tuple
import re

from ..contracts.records import RawRecord
from .dom import Element, parse_html


TURN_ID_ATTR = 'data-turn-id'
TURN_ORDER_ATTR = 'data-turn'
ROLE_ATTR = 'data-message-author-role'
MESSAGE_ID_ATTR = 'data-message-id'

GENERIC_LABELS = {'Image', 'image', 'file'}

_EXTENSION = re.compile(r"\.[a-z0-9]{1,8}$", re.IGNORECASE)


# =============================================================================
# FILE NAME DETECTION
# =============================================================================

def basename(url: Optional[str]) -> str:
    """Last path segment of a URL or path, without query or fragment."""
    if not url:
        return ""
    without_fragment = url.split('#', 1)[0]
    without_query = without_fragment.split('?', 1)[0]
    return without_query.split('/')[-1]


def looks_like_filename(value: Optional[str]) -> bool:
    if not value:
        return False
    text = value.strip()
    if len(text) < 3 or len(text) > 180:
        return False
    if '.' not in text:
        return False
    if text.startswith(('http://', 'https://')):
        return bool(_EXTENSION.search(basename(text)))
    return bool(_EXTENSION.search(text))


def extract_attachments(node: Element) -> Tuple[str, ...]:
    """Collect file-like names referenced inside a message node."""
    found: List[str] = []

    for link in node.find_all(lambda el: el.tag == 'a' and el.has_attr('href')):
        text = link.text_content().strip()
        download = link.get('download').strip()
        for candidate in (download, text, basename(link.get('href'))):
            if looks_like_filename(candidate):
                found.append(candidate)

    for image in node.find_all(lambda el: el.tag == 'img'):
        for attr in ('alt', 'title', 'aria-label'):
            candidate = image.get(attr).strip()
            if looks_like_filename(candidate):
                found.append(candidate)
        src = image.get('src')
        if src.startswith('data:'):
            continue
        name = basename(src)
        if name:
            found.append(name)

    for titled in node.find_all(lambda el: el.has_attr('title') or el.has_attr('aria-label')):
        for attr in ('title', 'aria-label'):
            candidate = titled.get(attr).strip()
            if looks_like_filename(candidate):
                found.append(candidate)

    cleaned: List[str] = []
    for name in found:
        name = name.strip()
        if name and name not in GENERIC_LABELS and name not in cleaned:
            cleaned.append(name)
    return tuple(cleaned)


# =============================================================================
# TURNS AND MESSAGES
# =============================================================================

def parse_turn_order(raw: Optional[str]) -> Optional[int]:
    """Numeric turn order, or None if absent or not an integer."""
    if raw is None or not raw.strip():
        return None
    text = raw.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return None
    if value != value or value in (float('inf'), float('-inf')) or not value.is_integer():
        return None
    return int(value)


def _rich_content_node(message: Element) -> Optional[Element]:
    for selector in (
        lambda el: 'markdown' in el.classes,
        lambda el: 'prose' in el.classes,
        lambda el: 'markdown' in el.get('class'),
    ):
        node = message.find(selector)
        if node is not None:
            return node
    return None


def extract_message(message: Element, group_id: str, group_order: Optional[int]) -> Optional[RawRecord]:
    """Build a RawRecord from a message node, or None if unusable."""
    role = message.get(ROLE_ATTR).strip().lower()
    if not role:
        return None

    rich_node = _rich_content_node(message)
    record = RawRecord(
        role=role,
        group_id=group_id,
        identity=message.get(MESSAGE_ID_ATTR).strip() or None,
        group_order=group_order,
        rich_content=rich_node.inner_html() if rich_node is not None else "",
        plain_text=message.inner_text(),
        attachments=extract_attachments(message),
    )
    return record if record.has_content else None


def extract_turn(turn: Element) -> List[RawRecord]:
    group_id = turn.get(TURN_ID_ATTR).strip()
    if not group_id:
        return []
    group_order = parse_turn_order(turn.attrs.get(TURN_ORDER_ATTR))

    records = []
    for message in turn.find_all(lambda el: el.has_attr(ROLE_ATTR)):
        record = extract_message(message, group_id, group_order)
        if record is not None:
            records.append(record)
    return records


def parse_turns(html: str) -> List[RawRecord]:
    """Extract every usable message of every turn present in the markup."""
    root = parse_html(html)
    records: List[RawRecord] = []
    for turn in root.find_all(lambda el: el.has_attr(TURN_ID_ATTR)):
        records.extend(extract_turn(turn))
    return records
