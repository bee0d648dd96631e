"""
Core layer - stable foundation for the scraping system.

Components:
- models: taxonomy, review entry/content/review dataclasses
- http_client: Retrying HTTP client returning parsed documents
- concurrency: Bounded fan-out
- selectors: Text, id and table column helpers
- localization: English/Czech joins by hyperlink id
- errors: FetchError, StructuralMismatch, ResolutionError
"""

from .errors import FetchError, ResolutionError, ScraperError, StructuralMismatch
from .models import (
    AllReviewData,
    Categories,
    CityOnly,
    Country,
    CountryAndCity,
    CountryCategory,
    Field,
    LocalizedString,
    Photo,
    Review,
    ReviewContent,
    ReviewEntry,
    ReviewInfo,
    ReviewLanguage,
    Specialization,
    Student,
)
from .http_client import HttpClient, backoff_seconds
from .concurrency import map_bounded

__all__ = [
    "FetchError",
    "ResolutionError",
    "ScraperError",
    "StructuralMismatch",
    "AllReviewData",
    "Categories",
    "CityOnly",
    "Country",
    "CountryAndCity",
    "CountryCategory",
    "Field",
    "LocalizedString",
    "Photo",
    "Review",
    "ReviewContent",
    "ReviewEntry",
    "ReviewInfo",
    "ReviewLanguage",
    "Specialization",
    "Student",
    "HttpClient",
    "backoff_seconds",
    "map_bounded",
]
