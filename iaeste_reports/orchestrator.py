"""
Aggregator for the report scraping pipeline.

Coordinates:
- Taxonomy loading
- Field phase: entries + specializations of every field -> FieldIndex
- Country phase: entries + detail pages of every country
- Cross-referencing entries with field and specialization ids
"""

import asyncio
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

import structlog

from .core.concurrency import map_bounded
from .core.errors import ResolutionError
from .core.http_client import DocumentCache, HttpClient
from .core.models import (
    AllReviewData,
    Categories,
    Country,
    Field,
    Review,
    ReviewContent,
    ReviewEntry,
    Specialization,
)
from .core.reader import SiteReader
from .navigators.review_list import ReviewListNavigator
from .navigators.specializations import SpecializationNavigator
from .navigators.taxonomy import TaxonomyNavigator
from .parsers.review_detail import ReviewDetailParser

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FieldScrape:
    """Result of scraping one field's sub-listing."""
    field: Field
    entries: list[ReviewEntry]
    specializations: list[Specialization]


@dataclass(frozen=True)
class FieldIndex:
    """
    Lookup tables built by the field phase and read by the country phase.

    Specialization names are looked up per field, so equal names in
    different fields never resolve to each other's id.
    """
    review_field_ids: Mapping[int, int]
    specializations: tuple[Specialization, ...]
    specialization_ids: Mapping[tuple[int, str], int]

    @classmethod
    def build(cls, scrapes: list[FieldScrape]) -> "FieldIndex":
        review_field_ids: dict[int, int] = {}
        specializations: list[Specialization] = []
        specialization_ids: dict[tuple[int, str], int] = {}

        for scrape in scrapes:
            for entry in scrape.entries:
                review_field_ids[entry.id] = scrape.field.id
            for specialization in scrape.specializations:
                specializations.append(specialization)
                for name in (specialization.name.en, specialization.name.cs):
                    if name:
                        specialization_ids[(specialization.field_id, name)] = specialization.id

        return cls(
            review_field_ids=MappingProxyType(review_field_ids),
            specializations=tuple(specializations),
            specialization_ids=MappingProxyType(specialization_ids),
        )

    def field_of(self, review_id: int) -> int:
        """
        Raises:
            ResolutionError: when the review is in no field listing
        """
        try:
            return self.review_field_ids[review_id]
        except KeyError:
            raise ResolutionError(f"Review {review_id} does not appear in any field listing") from None

    def specialization_of(self, field_id: int, name: str) -> Optional[int]:
        return self.specialization_ids.get((field_id, name.strip()))


def merge_review(
    entry: ReviewEntry,
    content: ReviewContent,
    country: Country,
    index: FieldIndex,
) -> Review:
    """Join a listing entry with its detail page and resolve taxonomy ids."""
    field_id = index.field_of(entry.id)
    return Review(
        entry=entry,
        content=content,
        country_id=country.id,
        field_id=field_id,
        specialization_id=index.specialization_of(field_id, content.specialization_name),
    )


class ReviewAggregator(SiteReader):
    """
    Scrapes the whole site into one AllReviewData snapshot.

    Any failure aborts the run; no partial dataset is returned.
    """

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        country_concurrency: int = 4,
        field_concurrency: int = 32,
        entry_concurrency: int = 8,
    ):
        """
        Initialize aggregator.

        Args:
            http_client: Shared HTTP client (creates own if not provided)
            country_concurrency: Countries scraped at once
            field_concurrency: Fields scraped at once
            entry_concurrency: Detail pages fetched at once per country
        """
        super().__init__(http_client)
        self.country_concurrency = country_concurrency
        self.field_concurrency = field_concurrency
        self.entry_concurrency = entry_concurrency

        self.stats = {
            "fields": 0,
            "countries": 0,
            "specializations": 0,
            "reviews": 0,
            "unresolved_specializations": 0,
        }

    def _readers(self):
        client = self.client
        return (
            TaxonomyNavigator(client),
            SpecializationNavigator(client),
            ReviewListNavigator(client),
            ReviewDetailParser(client),
        )

    async def get_base_categories(self) -> Categories:
        taxonomy, *_ = self._readers()
        return await taxonomy.get_base_categories()

    async def get_data_dump(self) -> AllReviewData:
        """
        Run the full scrape.

        Returns:
            AllReviewData with every review cross-referenced

        Raises:
            FetchError, StructuralMismatch, ResolutionError
        """
        started = time.monotonic()
        taxonomy, specialization_reader, review_list, detail_parser = self._readers()

        categories = await taxonomy.get_base_categories()

        async def scrape_field(field: Field) -> FieldScrape:
            cache: DocumentCache = {}
            entries, specializations = await asyncio.gather(
                review_list.get_review_entries_by_field(field.id, cache),
                specialization_reader.get_specializations_of_field(field.id, cache),
            )
            return FieldScrape(field=field, entries=entries, specializations=specializations)

        scrapes = await map_bounded(scrape_field, categories.fields, self.field_concurrency)
        index = FieldIndex.build(scrapes)

        logger.info(
            "fields_indexed",
            fields=len(scrapes),
            reviews=len(index.review_field_ids),
            specializations=len(index.specializations),
        )

        async def scrape_country(country: Country) -> list[Review]:
            cache: DocumentCache = {}
            entries = await review_list.get_review_entries_by_country(country.id, cache)
            contents = await map_bounded(
                lambda entry: detail_parser.get_review_content(entry.id, cache),
                entries,
                self.entry_concurrency,
            )
            reviews = [merge_review(e, c, country, index) for e, c in zip(entries, contents)]

            logger.info("country_scraped", country=country.name.en, reviews=len(reviews))
            return reviews

        per_country = await map_bounded(scrape_country, categories.countries, self.country_concurrency)

        reviews_by_id: dict[int, Review] = {}
        for reviews in per_country:
            for review in reviews:
                reviews_by_id.setdefault(review.id, review)
        reviews = list(reviews_by_id.values())

        self.stats.update(
            fields=len(categories.fields),
            countries=len(categories.countries),
            specializations=len(index.specializations),
            reviews=len(reviews),
            unresolved_specializations=sum(1 for r in reviews if r.specialization_id is None),
        )
        logger.info(
            "data_dump_complete",
            elapsed=round(time.monotonic() - started, 1),
            **self.stats,
        )

        return AllReviewData(
            categories=categories,
            specializations=list(index.specializations),
            reviews=reviews,
        )


async def get_data_dump(http_client: Optional[HttpClient] = None, **kwargs) -> AllReviewData:
    """
    Run one full scrape.

    Args:
        http_client: Shared HTTP client (a default one is opened if not provided)
        **kwargs: Concurrency limits for ReviewAggregator
    """
    async with ReviewAggregator(http_client, **kwargs) as aggregator:
        return await aggregator.get_data_dump()


async def get_base_categories(http_client: Optional[HttpClient] = None) -> Categories:
    """Read the taxonomy only."""
    async with TaxonomyNavigator(http_client) as taxonomy:
        return await taxonomy.get_base_categories()
