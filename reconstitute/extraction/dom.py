"""
Minimal Element Tree

A forgiving element tree built with the standard library HTML parser.
Enough structure to query attributes, classes, inner HTML and inner text
of a saved page; not a full DOM.
"""

from __future__ import annotations
from html import escape
from html.parser import HTMLParser
from typing import Callable, Dict, Iterator, List, Optional, Union
import re


VOID_ELEMENTS = {
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'param', 'source', 'track', 'wbr',
}

SKIP_TAGS = {'script', 'style', 'noscript', 'template'}

BLOCK_TAGS = {
    'address', 'article', 'aside', 'blockquote', 'dd', 'div', 'dl', 'dt',
    'figcaption', 'figure', 'footer', 'form', 'h1', 'h2', 'h3', 'h4', 'h5',
    'h6', 'header', 'hr', 'li', 'main', 'nav', 'ol', 'p', 'pre', 'section',
    'table', 'tr', 'ul',
}

_SPACES = re.compile(r"[ \t\r\f\v\n]+")
_TRAILING_SPACES = re.compile(r"[ ]+\n")
_COLLAPSED_INDENT = re.compile(r"\n (?=[^ \n])")
_BLANK_LINES = re.compile(r"\n{3,}")

Node = Union['Element', str]


class Element:
    """An element with attributes and ordered children (elements or text)."""

    def __init__(self, tag: str, attrs: Optional[Dict[str, Optional[str]]] = None,
                 parent: Optional['Element'] = None):
        self.tag = tag
        self.attrs: Dict[str, Optional[str]] = attrs or {}
        self.parent = parent
        self.children: List[Node] = []

    def __repr__(self) -> str:
        return f"<Element {self.tag} {self.attrs!r}>"

    def get(self, name: str, default: str = "") -> str:
        value = self.attrs.get(name)
        return default if value is None else value

    def has_attr(self, name: str) -> bool:
        return name in self.attrs

    @property
    def classes(self) -> List[str]:
        return self.get('class').split()

    def iter_descendants(self) -> Iterator['Element']:
        """Depth-first, document order, excluding self."""
        for child in self.children:
            if isinstance(child, Element):
                yield child
                yield from child.iter_descendants()

    def find_all(self, predicate: Callable[['Element'], bool]) -> List['Element']:
        return [el for el in self.iter_descendants() if predicate(el)]

    def find(self, predicate: Callable[['Element'], bool]) -> Optional['Element']:
        for el in self.iter_descendants():
            if predicate(el):
                return el
        return None

    def text_content(self) -> str:
        parts = []
        for child in self.children:
            if isinstance(child, Element):
                parts.append(child.text_content())
            else:
                parts.append(child)
        return "".join(parts)

    def inner_html(self) -> str:
        return "".join(_serialize(child) for child in self.children)

    def inner_text(self) -> str:
        """Rendered-ish text: block elements on their own lines."""
        raw = _render_text(self, preformatted=self.tag == 'pre')
        raw = _TRAILING_SPACES.sub("\n", raw)
        raw = _COLLAPSED_INDENT.sub("\n", raw)
        raw = _BLANK_LINES.sub("\n\n", raw)
        return raw.strip()


def _serialize(node: Node) -> str:
    if not isinstance(node, Element):
        return escape(node, quote=False)
    attrs = "".join(
        f' {name}' if value is None else f' {name}="{escape(value, quote=True)}"'
        for name, value in node.attrs.items()
    )
    if node.tag in VOID_ELEMENTS:
        return f"<{node.tag}{attrs}>"
    return f"<{node.tag}{attrs}>{node.inner_html()}</{node.tag}>"


def _render_text(element: Element, preformatted: bool) -> str:
    parts = []
    for child in element.children:
        if not isinstance(child, Element):
            parts.append(child if preformatted else _SPACES.sub(" ", child))
            continue
        if child.tag == 'br':
            parts.append("\n")
            continue
        inner = _render_text(child, preformatted or child.tag == 'pre')
        if child.tag in BLOCK_TAGS:
            parts.append(f"\n{inner}\n")
        elif child.tag in ('td', 'th'):
            parts.append(f"{inner}\t")
        else:
            parts.append(inner)
    return "".join(parts)


class TreeBuilder(HTMLParser):
    """Builds an Element tree; tolerates unclosed and stray end tags."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = Element('#document')
        self._stack: List[Element] = [self.root]

    @property
    def _current(self) -> Element:
        return self._stack[-1]

    def handle_starttag(self, tag, attrs):
        element = Element(tag, dict(attrs), parent=self._current)
        self._current.children.append(element)
        if tag not in VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(self, tag, attrs):
        element = Element(tag, dict(attrs), parent=self._current)
        self._current.children.append(element)

    def handle_endtag(self, tag):
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth].tag == tag:
                del self._stack[depth:]
                return

    def handle_data(self, data):
        if self._current.tag in SKIP_TAGS:
            return
        self._current.children.append(data)


def parse_html(html: str) -> Element:
    """Parse markup into an Element tree rooted at a #document element."""
    builder = TreeBuilder()
    builder.feed(html or "")
    builder.close()
    return builder.root
