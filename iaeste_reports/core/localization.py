"""
Bilingual extraction: joining the English and Czech rendering of a page.

The English document decides which entities exist and in which order;
the Czech document only contributes translations, matched by the
numeric id embedded in hyperlinks.
"""

import asyncio
from typing import Optional

from bs4 import BeautifulSoup

from .http_client import DocumentCache, HttpClient
from .models import LocalizedString
from .site import LANG_CZECH, LANG_ENGLISH, localized_url


async def fetch_bilingual(
    client: HttpClient,
    url: str,
    cache: Optional[DocumentCache] = None,
) -> tuple[BeautifulSoup, BeautifulSoup]:
    """
    Fetch the English and Czech rendering of a page concurrently.

    Returns:
        (english_document, czech_document)
    """
    en_doc, cs_doc = await asyncio.gather(
        client.fetch_document(localized_url(url, LANG_ENGLISH), cache),
        client.fetch_document(localized_url(url, LANG_CZECH), cache),
    )
    return en_doc, cs_doc


def merge_localized(
    en_pairs: list[tuple[int, str]],
    cs_pairs: list[tuple[int, str]],
) -> list[tuple[int, LocalizedString]]:
    """
    Merge (id, text) pairs of both languages.

    Output follows the English order with one item per distinct id;
    a missing Czech translation becomes "".
    """
    cs_by_id: dict[int, str] = {}
    for id_, text in cs_pairs:
        cs_by_id.setdefault(id_, text)

    merged: dict[int, LocalizedString] = {}
    for id_, text in en_pairs:
        if id_ not in merged:
            merged[id_] = LocalizedString(cs=cs_by_id.get(id_, ""), en=text)
    return list(merged.items())
