"""Predicate-based element search over a parsed HTML page.

Thin wrapper around a BeautifulSoup tree (lxml parser) exposing just the
queries the extractors need: find-by-tag with an optional attribute
filter, attribute lookup, inner HTML and descendant text nodes.

Usage::

    doc = Document.from_html(html)
    span = doc.first("span", "class", contains="stateface")
    name = next(span.texts(), None)
"""

from typing import Iterator, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

# Non-content string types that should never surface as text.
_SKIP_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


class Element:
    """A single element in a ``Document``."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag):
        self._tag = tag

    @property
    def name(self) -> str:
        return self._tag.name

    def attr(self, name: str) -> str:
        """Return the attribute value, or ``""`` if absent.

        Multi-valued attributes (``class``, ``rel``) are joined with spaces.
        """
        value = self._tag.get(name)
        if value is None:
            return ""
        if isinstance(value, list):
            return " ".join(value)
        return value

    def html(self) -> str:
        """Serialized inner HTML.  Script and style bodies are verbatim."""
        return self._tag.decode_contents()

    def texts(self) -> Iterator[str]:
        """All descendant text nodes, in document order."""
        for node in self._tag.descendants:
            if isinstance(node, NavigableString) and not isinstance(node, _SKIP_STRINGS):
                yield str(node)

    def children(self, tag: str | list[str]) -> Iterator["Element"]:
        """Direct child elements named ``tag`` (or any name in a list)."""
        for child in self._tag.find_all(tag, recursive=False):
            yield Element(child)

    def closest(self, tag: str) -> Optional["Element"]:
        """Nearest ancestor named ``tag``, or None."""
        parent = self._tag.find_parent(tag)
        return Element(parent) if parent is not None else None

    def find(
        self,
        tag: str,
        attr: Optional[str] = None,
        *,
        equals: Optional[str] = None,
        contains: Optional[str] = None,
    ) -> Iterator["Element"]:
        """Descendants named ``tag``, filtered like ``Document.find``."""
        _check_filters(attr, equals, contains)
        return _find(self._tag, tag, attr, equals, contains)

    def __eq__(self, other: object) -> bool:
        # same node, not structurally equal markup
        if not isinstance(other, Element):
            return NotImplemented
        return self._tag is other._tag

    def __hash__(self) -> int:
        return id(self._tag)

    def __repr__(self) -> str:
        return f"<Element {self._tag.name}>"


class Document:
    """An in-memory parsed page.  Owned by one region's processing step."""

    def __init__(self, soup: BeautifulSoup):
        self._soup = soup

    @classmethod
    def from_html(cls, html: str) -> "Document":
        return cls(BeautifulSoup(html, "lxml"))

    def find(
        self,
        tag: str,
        attr: Optional[str] = None,
        *,
        equals: Optional[str] = None,
        contains: Optional[str] = None,
    ) -> Iterator[Element]:
        """Lazily yield elements named ``tag`` in document order.

        When ``attr`` is given, ``equals`` keeps elements whose attribute
        value matches exactly and ``contains`` keeps those whose value
        contains the substring.  A missing attribute compares as ``""``.

        Raises:
            ValueError: If ``equals``/``contains`` is given without ``attr``.
        """
        _check_filters(attr, equals, contains)
        return _find(self._soup, tag, attr, equals, contains)

    def first(
        self,
        tag: str,
        attr: Optional[str] = None,
        *,
        equals: Optional[str] = None,
        contains: Optional[str] = None,
    ) -> Optional[Element]:
        """First match of ``find()``, or None."""
        return next(self.find(tag, attr, equals=equals, contains=contains), None)


def _check_filters(
    attr: Optional[str], equals: Optional[str], contains: Optional[str]
) -> None:
    if attr is None and (equals is not None or contains is not None):
        raise ValueError("equals/contains filters require an attribute name")


def _find(
    root: Tag,
    tag: str,
    attr: Optional[str],
    equals: Optional[str],
    contains: Optional[str],
) -> Iterator[Element]:
    for node in root.find_all(tag):
        element = Element(node)
        if attr is not None:
            value = element.attr(attr)
            if equals is not None and value != equals:
                continue
            if contains is not None and contains not in value:
                continue
        yield element
