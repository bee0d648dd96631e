"""
Taxonomy navigator: the root listing page.

The root page is a table whose cells hold h2 headings (country
categories) followed by country links, plus links to fields of study.
"""

from bs4 import BeautifulSoup, Tag

from iaeste_reports.core.errors import StructuralMismatch
from iaeste_reports.core.localization import fetch_bilingual, merge_localized
from iaeste_reports.core.models import (
    Categories,
    Country,
    CountryCategory,
    Field,
    LocalizedString,
)
from iaeste_reports.core.reader import SiteReader
from iaeste_reports.core.selectors import extract_id, id_text_pairs, text_of
from iaeste_reports.core.site import (
    BASE_TABLE_SELECTOR,
    BASE_URL,
    COUNTRY_ID_REGEX,
    FIELD_ID_REGEX,
)


class TaxonomyNavigator(SiteReader):
    """Reads country categories and fields from the root listing page."""

    async def get_base_categories(self) -> Categories:
        en_doc, cs_doc = await fetch_bilingual(self.client, BASE_URL)
        categories = parse_base_categories(en_doc, cs_doc)

        self.logger.info(
            "taxonomy_loaded",
            country_categories=len(categories.country_categories),
            countries=len(categories.countries),
            fields=len(categories.fields),
        )
        return categories


def base_table_cells(doc: BeautifulSoup) -> list[Tag]:
    table = doc.select_one(BASE_TABLE_SELECTOR)
    return table.select("td") if table else []


def _english_categories(cells: list[Tag]) -> list[tuple[str, list[tuple[int, str]]]]:
    """(heading, [(country id, name)]) per h2, in page order."""
    categories: list[tuple[str, list[tuple[int, str]]]] = []
    for cell in cells:
        countries = None
        for element in cell.find_all(True, recursive=False):
            if element.name == "h2":
                countries = []
                categories.append((text_of(element), countries))
                continue

            if countries is None or element.name != "a":
                continue

            country_id = extract_id(element.get("href"), COUNTRY_ID_REGEX)
            if country_id is not None:
                countries.append((country_id, text_of(element)))
    return categories


def parse_base_categories(en_doc: BeautifulSoup, cs_doc: BeautifulSoup) -> Categories:
    """
    Build the taxonomy from both renderings of the root page.

    Czech category headings are matched to English ones by position, Czech
    country and field names by id.

    Raises:
        StructuralMismatch: when the two renderings have a different number
                            of category headings
    """
    en_cells = base_table_cells(en_doc)
    cs_cells = base_table_cells(cs_doc)

    english = _english_categories(en_cells)
    cs_headings = [text_of(h) for cell in cs_cells for h in cell.select("h2")]
    if len(cs_headings) != len(english):
        raise StructuralMismatch("Czech category headings", len(english), len(cs_headings), url=BASE_URL)

    cs_anchors = [a for cell in cs_cells for a in cell.select("a")]
    en_anchors = [a for cell in en_cells for a in cell.select("a")]

    cs_countries: dict[int, str] = {}
    for country_id, name in id_text_pairs(cs_anchors, COUNTRY_ID_REGEX):
        cs_countries.setdefault(country_id, name)

    country_categories = [
        CountryCategory(
            name=LocalizedString(cs=cs_heading, en=en_heading),
            countries=[
                Country(id=country_id, name=LocalizedString(cs=cs_countries.get(country_id, ""), en=name))
                for country_id, name in countries
            ],
        )
        for (en_heading, countries), cs_heading in zip(english, cs_headings)
    ]

    fields = [
        Field(id=field_id, name=name)
        for field_id, name in merge_localized(
            id_text_pairs(en_anchors, FIELD_ID_REGEX),
            id_text_pairs(cs_anchors, FIELD_ID_REGEX),
        )
    ]

    return Categories(country_categories=country_categories, fields=fields)
