"""
Review list navigator: report tables of the sub-listing pages.

The same table layout is served for three filters (country, field and
field + specialization). Column order differs between pages, so the
columns are located from the header row of every page.
"""

from enum import Enum
from typing import Optional

from bs4 import BeautifulSoup, Tag

from iaeste_reports.core.errors import StructuralMismatch
from iaeste_reports.core.http_client import DocumentCache
from iaeste_reports.core.localization import fetch_bilingual
from iaeste_reports.core.models import (
    CityOnly,
    CountryAndCity,
    LocalizedString,
    Location,
    ReviewEntry,
    ReviewLanguage,
    Student,
)
from iaeste_reports.core.reader import SiteReader
from iaeste_reports.core.selectors import (
    absolute_url,
    cell_at,
    extract_id,
    find_column,
    text_of,
)
from iaeste_reports.core.site import (
    REVIEW_ID_REGEX,
    REVIEW_IN_CZECH_ICON,
    SUBLIST_ROWS_SELECTOR,
    THUMBNAIL_SELECTOR,
    country_sublist_url,
    field_sublist_url,
    specialization_sublist_url,
)

REQUIRED_COLUMNS = ("year", "location", "student")
OPTIONAL_COLUMNS = ("university", "specialization")


class ListingScope(str, Enum):
    """Filter a sub-listing page was requested with."""
    COUNTRY = "country"
    FIELD = "field"
    SPECIALIZATION = "specialization"


class ReviewListNavigator(SiteReader):
    """Reads report entries from country, field and specialization listings."""

    async def get_review_entries_by_country(
        self,
        country_id: int,
        cache: Optional[DocumentCache] = None,
    ) -> list[ReviewEntry]:
        return await self._sublist_entries(country_sublist_url(country_id), ListingScope.COUNTRY, cache)

    async def get_review_entries_by_field(
        self,
        field_id: int,
        cache: Optional[DocumentCache] = None,
    ) -> list[ReviewEntry]:
        return await self._sublist_entries(field_sublist_url(field_id), ListingScope.FIELD, cache)

    async def get_review_entries_by_specialization(
        self,
        field_id: int,
        specialization_id: int,
        cache: Optional[DocumentCache] = None,
    ) -> list[ReviewEntry]:
        return await self._sublist_entries(
            specialization_sublist_url(field_id, specialization_id),
            ListingScope.SPECIALIZATION,
            cache,
        )

    async def _sublist_entries(
        self,
        url: str,
        scope: ListingScope,
        cache: Optional[DocumentCache],
    ) -> list[ReviewEntry]:
        en_doc, cs_doc = await fetch_bilingual(self.client, url, cache)
        entries = parse_review_entries(en_doc, cs_doc, scope, url=url)
        self.logger.debug("entries_loaded", url=url, scope=scope.value, count=len(entries))
        return entries


def parse_location(text: str, scope: ListingScope) -> Location:
    """
    Tag the location cell by the listing it came from.

    Country listings show the bare city, the other listings show
    "Country, City".
    """
    if scope is ListingScope.COUNTRY:
        return CityOnly(text)

    country, sep, city = text.partition(",")
    if not sep:
        return CityOnly(text.strip())
    return CountryAndCity(country=country.strip(), city=city.strip())


def parse_student(text: str) -> Student:
    """Split a "Surname, Name" cell."""
    surname, _, name = text.partition(",")
    return Student(name=name.strip(), surname=surname.strip())


def _row_review_id(row: Tag) -> Optional[int]:
    for anchor in row.select("a[href]"):
        review_id = extract_id(anchor["href"], REVIEW_ID_REGEX)
        if review_id is not None:
            return review_id
    return None


def _parse_year(text: str, url: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise StructuralMismatch("year cell", "an integer", text, url=url) from None


def _header_columns(header_row: Tag, url: str) -> dict[str, Optional[int]]:
    headers = [text_of(h).lower() for h in header_row.find_all(["td", "th"], recursive=False)]
    columns = {label: find_column(headers, label) for label in REQUIRED_COLUMNS + OPTIONAL_COLUMNS}

    missing = [label for label in REQUIRED_COLUMNS if columns[label] is None]
    if missing:
        raise StructuralMismatch("report table columns", list(REQUIRED_COLUMNS), headers, url=url)
    return columns


def parse_review_entries(
    en_doc: BeautifulSoup,
    cs_doc: BeautifulSoup,
    scope: ListingScope,
    url: str = "",
) -> list[ReviewEntry]:
    """
    Parse a report table rendered in both languages.

    The first row of each table is a header. English rows produce the
    entries; Czech rows only contribute the Czech university name.

    Returns:
        One entry per English data row, in table order
    """
    en_rows = en_doc.select(SUBLIST_ROWS_SELECTOR)
    cs_rows = cs_doc.select(SUBLIST_ROWS_SELECTOR)[1:]
    if len(en_rows) < 2:
        return []

    header, *en_rows = en_rows
    columns = _header_columns(header, url)

    cs_rows_by_id: dict[int, Tag] = {}
    for row in cs_rows:
        review_id = _row_review_id(row)
        if review_id is not None:
            cs_rows_by_id.setdefault(review_id, row)

    entries = []
    for row in en_rows:
        location_cell = cell_at(row, columns["location"])
        review_id = _row_review_id(location_cell) if location_cell else None
        if review_id is None:
            review_id = _row_review_id(row)
        if review_id is None:
            raise StructuralMismatch("review link in row", "an &id= link", text_of(row), url=url)

        university_en = text_of(cell_at(row, columns["university"]))
        cs_row = cs_rows_by_id.get(review_id)
        university_cs = text_of(cell_at(cs_row, columns["university"])) if cs_row else ""
        university = LocalizedString(cs=university_cs, en=university_en)

        thumbnail = row.select_one(THUMBNAIL_SELECTOR)
        in_czech = row.select_one(f'img[src*="{REVIEW_IN_CZECH_ICON}"]') is not None

        entries.append(
            ReviewEntry(
                id=review_id,
                year=_parse_year(text_of(cell_at(row, columns["year"])), url),
                location=parse_location(text_of(location_cell), scope),
                review_language=ReviewLanguage.CZECH if in_czech else ReviewLanguage.ENGLISH,
                student=parse_student(text_of(cell_at(row, columns["student"]))),
                university=None if university.is_empty else university,
                thumbnail_url=absolute_url(thumbnail["src"]) if thumbnail and thumbnail.get("src") else None,
            )
        )

    return entries
