"""
Specialization navigator: the field sub-listing page links to every
specialization of the field.
"""

from typing import Optional

from bs4 import BeautifulSoup

from iaeste_reports.core.http_client import DocumentCache
from iaeste_reports.core.localization import fetch_bilingual, merge_localized
from iaeste_reports.core.models import Specialization
from iaeste_reports.core.reader import SiteReader
from iaeste_reports.core.selectors import extract_id, id_text_pairs
from iaeste_reports.core.site import (
    FIELD_ID_REGEX,
    SPECIALIZATION_ID_REGEX,
    SUBLIST_LINKS_SELECTOR,
    field_sublist_url,
)


class SpecializationNavigator(SiteReader):

    async def get_specializations_of_field(
        self,
        field_id: int,
        cache: Optional[DocumentCache] = None,
    ) -> list[Specialization]:
        en_doc, cs_doc = await fetch_bilingual(self.client, field_sublist_url(field_id), cache)
        specializations = parse_specializations(field_id, en_doc, cs_doc)
        self.logger.debug("specializations_loaded", field_id=field_id, count=len(specializations))
        return specializations


def _specialization_pairs(doc: BeautifulSoup, field_id: int) -> list[tuple[int, str]]:
    anchors = [
        a for a in doc.select(SUBLIST_LINKS_SELECTOR)
        if extract_id(a.get("href"), FIELD_ID_REGEX) == field_id
    ]
    return id_text_pairs(anchors, SPECIALIZATION_ID_REGEX)


def parse_specializations(
    field_id: int,
    en_doc: BeautifulSoup,
    cs_doc: BeautifulSoup,
) -> list[Specialization]:
    """Specializations linked from a field sub-listing, in English link order."""
    return [
        Specialization(id=specialization_id, field_id=field_id, name=name)
        for specialization_id, name in merge_localized(
            _specialization_pairs(en_doc, field_id),
            _specialization_pairs(cs_doc, field_id),
        )
    ]
