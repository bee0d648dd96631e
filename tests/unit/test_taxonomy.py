"""Tests for the taxonomy navigator."""

import pytest

from iaeste_reports.core.errors import StructuralMismatch
from iaeste_reports.core.models import LocalizedString
from iaeste_reports.core.site import BASE_URL
from iaeste_reports.navigators.taxonomy import TaxonomyNavigator, parse_base_categories

EN_CATEGORIES = [
    ("Europe", [(1, "Germany"), (2, "Austria")]),
    ("Asia", [(3, "Japan")]),
]
CS_CATEGORIES = [
    ("Evropa", [(2, "Rakousko"), (1, "Německo")]),
    ("Asie", [(3, "Japonsko")]),
]
EN_FIELDS = [(10, "Informatics"), (11, "Civil Engineering"), (10, "Informatics")]
CS_FIELDS = [(11, "Stavebnictví"), (10, "Informatika")]


@pytest.fixture
def documents(pages):
    return (
        pages.soup(pages.root(EN_CATEGORIES, EN_FIELDS)),
        pages.soup(pages.root(CS_CATEGORIES, CS_FIELDS)),
    )


class TestParseBaseCategories:
    """Tests for parse_base_categories function."""

    def test_categories_in_page_order(self, documents):
        categories = parse_base_categories(*documents)

        names = [c.name for c in categories.country_categories]
        assert names == [
            LocalizedString(cs="Evropa", en="Europe"),
            LocalizedString(cs="Asie", en="Asia"),
        ]

    def test_countries_joined_by_id(self, documents):
        """Test that Czech country names are matched by id, not position."""
        europe = parse_base_categories(*documents).country_categories[0]

        assert [c.id for c in europe.countries] == [1, 2]
        assert europe.countries[0].name == LocalizedString(cs="Německo", en="Germany")
        assert europe.countries[1].name == LocalizedString(cs="Rakousko", en="Austria")

    def test_fields_deduplicated(self, documents):
        fields = parse_base_categories(*documents).fields

        assert [f.id for f in fields] == [10, 11]
        assert fields[0].name == LocalizedString(cs="Informatika", en="Informatics")
        assert fields[1].name == LocalizedString(cs="Stavebnictví", en="Civil Engineering")

    def test_field_links_are_not_countries(self, documents):
        categories = parse_base_categories(*documents)
        assert sorted(c.id for c in categories.countries) == [1, 2, 3]

    def test_links_without_id_are_dropped(self, pages):
        """Test that anchors lacking a country id never become countries."""
        en = pages.root([("Europe", [(1, "Germany")])], [])
        en = en.replace("<h2>Europe</h2>", '<h2>Europe</h2><a href="/student-report?page=x">All</a>')
        cs = pages.root([("Evropa", [(1, "Německo")])], [])

        categories = parse_base_categories(pages.soup(en), pages.soup(cs))
        assert [c.id for c in categories.countries] == [1]

    def test_missing_czech_translation(self, pages):
        en = pages.soup(pages.root([("Europe", [(1, "Germany"), (5, "Malta")])], []))
        cs = pages.soup(pages.root([("Evropa", [(1, "Německo")])], []))

        malta = parse_base_categories(en, cs).countries[1]
        assert malta.name == LocalizedString(cs="", en="Malta")

    def test_heading_count_mismatch_raises(self, pages):
        en = pages.soup(pages.root(EN_CATEGORIES, []))
        cs = pages.soup(pages.root(CS_CATEGORIES[:1], []))

        with pytest.raises(StructuralMismatch) as exc_info:
            parse_base_categories(en, cs)
        assert exc_info.value.url == BASE_URL
        assert (exc_info.value.expected, exc_info.value.actual) == (2, 1)

    def test_deterministic(self, documents):
        """Test that parsing the same documents twice gives identical output."""
        first = parse_base_categories(*documents).to_dict()
        second = parse_base_categories(*documents).to_dict()
        assert first == second

    def test_empty_page(self, pages):
        empty = pages.soup(pages.wrap("<p>Maintenance</p>"))
        categories = parse_base_categories(empty, empty)
        assert categories.country_categories == []
        assert categories.fields == []


class TestTaxonomyNavigator:
    """Tests for TaxonomyNavigator."""

    @pytest.mark.asyncio
    async def test_get_base_categories(self, fake_site, pages):
        fake_site.add_root(pages.root(EN_CATEGORIES, EN_FIELDS), pages.root(CS_CATEGORIES, CS_FIELDS))

        async with fake_site.client() as client:
            categories = await TaxonomyNavigator(client).get_base_categories()

        assert len(categories.country_categories) == 2
        assert len(categories.fields) == 2
        assert len(fake_site.requests) == 2
