"""
Report detail page parser.

The detail page follows a fixed template: an info table and a sequence
of free-text blocks whose meaning is given only by their position. The
position -> field tables below are the single description of that
template; pages with fewer rows or blocks are rejected up front.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, Tag

from iaeste_reports.core.errors import StructuralMismatch
from iaeste_reports.core.http_client import DocumentCache
from iaeste_reports.core.models import Photo, ReviewContent, ReviewInfo
from iaeste_reports.core.reader import SiteReader
from iaeste_reports.core.selectors import absolute_url, text_of
from iaeste_reports.core.site import (
    GALLERY_LINKS_SELECTOR,
    INFO_ROWS_SELECTOR,
    REPORT_CONTAINER_SELECTOR,
    REPORT_HEADING_SELECTOR,
    TEXT_BLOCKS_SELECTOR,
    YEAR_OF_STUDY_REGEX,
    review_url,
)

# Info table row -> attribute. Rows 10 and 11 are not used.
INFO_ROW_LAYOUT = {
    0: "faculty",
    1: "field_of_study",
    2: "field_name",
    3: "specialization_name",
    4: "period",
    5: "duration_weeks",
    6: "transport",
    7: "insurance",
    8: "visa",
    9: "visa_price",
    12: "internship_reference",
}
INFO_ROW_COUNT = max(INFO_ROW_LAYOUT) + 1

# Text block -> (content group, key)
CONTENT_BLOCK_LAYOUT = (
    ("place", "city"),
    ("place", "arrival"),
    ("place", "accommodation"),
    ("place", "food"),
    ("place", "costOfLiving"),
    ("place", "localTransport"),
    ("work", "employer"),
    ("work", "description"),
    ("work", "workingHours"),
    ("work", "salary"),
    ("work", "colleagues"),
    ("work", "language"),
    ("work", "benefits"),
    ("social_life", "localCommittee"),
    ("social_life", "freeTime"),
    ("social_life", "trips"),
    ("social_life", "otherInterns"),
    ("miscellaneous", "tips"),
    ("miscellaneous", "overall"),
    ("websites", "employer"),
    ("websites", "other"),
    ("websites", "localCommittee"),
)
# Blocks holding one entry per line
LIST_BLOCKS = {20}

INTEGER_REGEX = re.compile(r"\d+")


class ReviewDetailParser(SiteReader):
    """Reads the full body of a single report."""

    async def get_review_content(
        self,
        review_id: int,
        cache: Optional[DocumentCache] = None,
    ) -> ReviewContent:
        url = review_url(review_id)
        doc = await self.client.fetch_document(url, cache)
        content = parse_review_content(review_id, doc, url=url)

        self.logger.debug(
            "parsed_review",
            review_id=review_id,
            photos=len(content.photos),
            field=content.field_name,
        )
        return content


def _info_values(container: Tag, url: str) -> dict[str, str]:
    rows = container.select(INFO_ROWS_SELECTOR)
    if len(rows) < INFO_ROW_COUNT:
        raise StructuralMismatch("info table rows", INFO_ROW_COUNT, len(rows), url=url)

    values = {}
    for position, name in INFO_ROW_LAYOUT.items():
        cells = rows[position].find_all("td")
        values[name] = text_of(cells[-1]) if cells else ""
    return values


def _parse_int(text: str) -> Optional[int]:
    match = INTEGER_REGEX.search(text)
    return int(match.group(0)) if match else None


def _year_of_study(container: Tag) -> str:
    for heading in container.select(REPORT_HEADING_SELECTOR):
        match = YEAR_OF_STUDY_REGEX.search(text_of(heading))
        if match:
            return match.group(1)
    return ""


def _photos(container: Tag) -> list[Photo]:
    photos = []
    for anchor in container.select(GALLERY_LINKS_SELECTOR):
        img = anchor.find("img")
        thumbnail = img.get("src") if img else None
        full_size = anchor["href"]
        photos.append(
            Photo(
                thumbnail_url=absolute_url(thumbnail or full_size),
                full_size_url=absolute_url(full_size),
            )
        )
    return photos


def parse_review_content(review_id: int, doc: BeautifulSoup, url: str = "") -> ReviewContent:
    """
    Parse a report detail page.

    Raises:
        StructuralMismatch: when the page lacks the report container or has
                            fewer info rows / text blocks than the template
    """
    container = doc.select_one(REPORT_CONTAINER_SELECTOR)
    if container is None:
        raise StructuralMismatch("report container", REPORT_CONTAINER_SELECTOR, None, url=url)

    info = _info_values(container, url)

    blocks = container.select(TEXT_BLOCKS_SELECTOR)
    if len(blocks) < len(CONTENT_BLOCK_LAYOUT):
        raise StructuralMismatch("text blocks", len(CONTENT_BLOCK_LAYOUT), len(blocks), url=url)

    content = ReviewContent(
        id=review_id,
        year_of_study=_year_of_study(container),
        photos=_photos(container),
        info=ReviewInfo(
            faculty=info["faculty"],
            field_of_study=info["field_of_study"],
            period=info["period"],
            duration_weeks=_parse_int(info["duration_weeks"]),
            transport=info["transport"],
            insurance=info["insurance"],
            visa=info["visa"],
            visa_price=info["visa_price"],
            internship_reference=info["internship_reference"],
        ),
        field_name=info["field_name"],
        specialization_name=info["specialization_name"],
    )

    for position, (group, key) in enumerate(CONTENT_BLOCK_LAYOUT):
        text = blocks[position].get_text("\n", strip=True)
        if position in LIST_BLOCKS:
            getattr(content, group)[key] = [line.strip() for line in text.split("\n") if line.strip()]
        else:
            getattr(content, group)[key] = text

    return content
