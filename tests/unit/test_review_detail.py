"""Tests for the report detail parser."""

import pytest

from iaeste_reports.core.errors import StructuralMismatch
from iaeste_reports.core.models import Photo
from iaeste_reports.core.site import review_url
from iaeste_reports.parsers.review_detail import (
    CONTENT_BLOCK_LAYOUT,
    INFO_ROW_COUNT,
    ReviewDetailParser,
    parse_review_content,
)

PHOTOS = [("/files/thumb/1.jpg", "/files/full/1.jpg"), ("/files/thumb/2.jpg", "/files/full/2.jpg")]


@pytest.fixture
def content(pages):
    return parse_review_content(42, pages.soup(pages.detail(photos=PHOTOS)))


class TestParseReviewContent:
    """Tests for parse_review_content function."""

    def test_identifier(self, content):
        assert content.id == 42

    def test_year_of_study(self, content):
        assert content.year_of_study == "3rd year (Bachelor)"

    def test_info_by_position(self, content):
        info = content.info
        assert info.faculty == "Faculty of Information Technology"
        assert info.field_of_study == "Computer Science"
        assert info.period == "07/2019 - 09/2019"
        assert info.duration_weeks == 10
        assert info.transport == "Train"
        assert info.insurance == "Travel insurance"
        assert info.visa == "Not needed"
        assert info.visa_price == "0 EUR"
        assert info.internship_reference == "DE-2019-1234"

    def test_taxonomy_labels(self, content):
        assert content.field_name == "Informatics"
        assert content.specialization_name == "Software Engineering"

    def test_text_blocks_by_position(self, content):
        assert content.place["city"] == "Block 0"
        assert content.place["localTransport"] == "Block 5"
        assert content.work["employer"] == "Block 6"
        assert content.work["benefits"] == "Block 12"
        assert content.social_life["localCommittee"] == "Block 13"
        assert content.miscellaneous["overall"] == "Block 18"
        assert content.websites["employer"] == "Block 19"
        assert content.websites["localCommittee"] == "Block 21"

    def test_other_websites_split_per_line(self, content):
        assert content.websites["other"] == ["https://example.com", "https://example.org"]

    def test_photos(self, content):
        assert content.photos == [
            Photo(
                thumbnail_url="https://www.iaeste.cz/files/thumb/1.jpg",
                full_size_url="https://www.iaeste.cz/files/full/1.jpg",
            ),
            Photo(
                thumbnail_url="https://www.iaeste.cz/files/thumb/2.jpg",
                full_size_url="https://www.iaeste.cz/files/full/2.jpg",
            ),
        ]

    def test_every_layout_key_filled(self, content):
        groups = {
            "place": content.place,
            "work": content.work,
            "social_life": content.social_life,
            "miscellaneous": content.miscellaneous,
            "websites": content.websites,
        }
        for group, key in CONTENT_BLOCK_LAYOUT:
            assert key in groups[group]

    def test_duration_without_number(self, pages):
        info = ["x"] * INFO_ROW_COUNT
        info[5] = "unknown"
        content = parse_review_content(1, pages.soup(pages.detail(info=info)))
        assert content.info.duration_weeks is None

    def test_no_year_heading(self, pages):
        content = parse_review_content(1, pages.soup(pages.detail(heading="Report")))
        assert content.year_of_study == ""

    def test_truncated_text_blocks_raise(self, pages):
        """Test that a template with fewer than 22 blocks is rejected."""
        doc = pages.soup(pages.detail(blocks=["text"] * 21))

        with pytest.raises(StructuralMismatch) as exc_info:
            parse_review_content(1, doc)
        assert exc_info.value.expected == len(CONTENT_BLOCK_LAYOUT)
        assert exc_info.value.actual == 21

    def test_truncated_info_table_raises(self, pages):
        doc = pages.soup(pages.detail(info=["x"] * (INFO_ROW_COUNT - 1)))

        with pytest.raises(StructuralMismatch):
            parse_review_content(1, doc)

    def test_missing_report_container_raises(self, pages):
        with pytest.raises(StructuralMismatch):
            parse_review_content(1, pages.soup(pages.wrap("<p>Not found</p>")))


class TestReviewDetailParser:
    """Tests for ReviewDetailParser."""

    @pytest.mark.asyncio
    async def test_fetches_single_page(self, fake_site, pages):
        fake_site.add(review_url(42), pages.detail())

        async with fake_site.client() as client:
            content = await ReviewDetailParser(client).get_review_content(42)

        assert content.id == 42
        assert fake_site.requests == [review_url(42)]
