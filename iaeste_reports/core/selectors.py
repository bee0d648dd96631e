"""
Selection helpers shared by the navigators and parsers.

Provides text extraction, id recovery from hyperlinks and header-driven
table column lookup on BeautifulSoup elements.
"""

import re
from typing import Iterable, Optional
from urllib.parse import urljoin

from bs4 import Tag

from .site import ROOT_URL


def text_of(element: Optional[Tag]) -> str:
    """Stripped text content of an element, "" for a missing element."""
    if element is None:
        return ""
    return element.get_text().strip()


def extract_id(href: Optional[str], pattern: re.Pattern) -> Optional[int]:
    """
    Recover a numeric id from a hyperlink.

    Args:
        href: Hyperlink (may be None)
        pattern: Regex with the id as its first group

    Returns:
        The id, or None when the link does not carry one
    """
    if not href:
        return None
    match = pattern.search(href)
    return int(match.group(1)) if match else None


def id_text_pairs(anchors: Iterable[Tag], pattern: re.Pattern) -> list[tuple[int, str]]:
    """(id, text) of every anchor whose href carries an id, in document order."""
    pairs = []
    for anchor in anchors:
        id_ = extract_id(anchor.get("href"), pattern)
        if id_ is not None:
            pairs.append((id_, text_of(anchor)))
    return pairs


def find_column(headers: list[str], label: str) -> Optional[int]:
    """
    Index of the first header containing `label` (case-insensitive).

    Returns:
        Zero-based column index, or None when no header matches
    """
    label = label.lower()
    for i, header in enumerate(headers):
        if label in header.lower():
            return i
    return None


def row_cells(row: Tag) -> list[Tag]:
    """Direct td children of a table row, in order."""
    return row.find_all("td", recursive=False)


def cell_at(row: Tag, index: Optional[int]) -> Optional[Tag]:
    """The index-th td of a row, None when the index is unknown or out of range."""
    if index is None:
        return None
    cells = row_cells(row)
    return cells[index] if index < len(cells) else None


def absolute_url(src: str) -> str:
    """Resolve a site-relative URL against the site root."""
    return urljoin(ROOT_URL, src)
