"""
Data models for the student report scraper.

Every record serializes to the camelCase JSON served by the API.
Optional attributes left as None are omitted from the output.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


def _without_none(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


class ReviewLanguage(str, Enum):
    """Language the report itself is written in."""
    CZECH = "cs"
    ENGLISH = "en"


@dataclass(frozen=True)
class LocalizedString:
    """A user-facing name in both site languages."""
    cs: str = ""
    en: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.cs and not self.en

    def to_dict(self) -> dict:
        return {"cs": self.cs, "en": self.en}


# Taxonomy

@dataclass(frozen=True)
class Country:
    id: int
    name: LocalizedString

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name.to_dict()}


@dataclass
class CountryCategory:
    """A heading on the root listing page with the countries under it."""
    name: LocalizedString
    countries: list[Country] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name.to_dict(),
            "countries": [c.to_dict() for c in self.countries],
        }


@dataclass(frozen=True)
class Field:
    id: int
    name: LocalizedString

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name.to_dict()}


@dataclass(frozen=True)
class Specialization:
    """Specialization of a field. The id is only unique within field_id."""
    id: int
    field_id: int
    name: LocalizedString

    def to_dict(self) -> dict:
        return {"id": self.id, "fieldId": self.field_id, "name": self.name.to_dict()}


@dataclass
class Categories:
    country_categories: list[CountryCategory] = field(default_factory=list)
    fields: list[Field] = field(default_factory=list)

    @property
    def countries(self) -> list[Country]:
        return [c for category in self.country_categories for c in category.countries]

    def to_dict(self) -> dict:
        return {
            "countryCategories": [c.to_dict() for c in self.country_categories],
            "fields": [f.to_dict() for f in self.fields],
        }


# Listing entries

@dataclass(frozen=True)
class CityOnly:
    """Location cell of a country-scoped listing."""
    city: str

    @property
    def raw(self) -> str:
        return self.city


@dataclass(frozen=True)
class CountryAndCity:
    """Location cell of a field- or specialization-scoped listing."""
    country: str
    city: str

    @property
    def raw(self) -> str:
        return f"{self.country}, {self.city}"


Location = Union[CityOnly, CountryAndCity]


@dataclass(frozen=True)
class Student:
    name: str
    surname: str

    def to_dict(self) -> dict:
        return {"name": self.name, "surname": self.surname}


@dataclass
class ReviewEntry:
    """One row of a report listing table."""
    id: int
    year: int
    location: Location
    review_language: ReviewLanguage
    student: Student
    university: Optional[LocalizedString] = None
    thumbnail_url: Optional[str] = None

    def to_dict(self) -> dict:
        return _without_none({
            "id": self.id,
            "year": self.year,
            "location": self.location.raw,
            "reviewLanguage": self.review_language.value,
            "student": self.student.to_dict(),
            "university": self.university.to_dict() if self.university else None,
            "thumbnailUrl": self.thumbnail_url,
        })


# Detail page

@dataclass(frozen=True)
class Photo:
    thumbnail_url: str
    full_size_url: str

    def to_dict(self) -> dict:
        return {"thumbnailUrl": self.thumbnail_url, "fullSizeUrl": self.full_size_url}


@dataclass
class ReviewInfo:
    """Metadata table of a report detail page."""
    faculty: str = ""
    field_of_study: str = ""
    period: str = ""
    duration_weeks: Optional[int] = None
    transport: str = ""
    insurance: str = ""
    visa: str = ""
    visa_price: str = ""
    internship_reference: str = ""

    def to_dict(self) -> dict:
        return _without_none({
            "faculty": self.faculty,
            "fieldOfStudy": self.field_of_study,
            "period": self.period,
            "durationWeeks": self.duration_weeks,
            "transport": self.transport,
            "insurance": self.insurance,
            "visa": self.visa,
            "visaPrice": self.visa_price,
            "internshipReference": self.internship_reference,
        })


@dataclass
class ReviewContent:
    """
    Full body of a report detail page.

    field_name and specialization_name are the raw labels of the page,
    used only to cross-reference the taxonomy.
    """
    id: int
    year_of_study: str = ""
    place: dict[str, str] = field(default_factory=dict)
    work: dict[str, str] = field(default_factory=dict)
    social_life: dict[str, str] = field(default_factory=dict)
    miscellaneous: dict[str, str] = field(default_factory=dict)
    websites: dict[str, Union[str, list[str]]] = field(default_factory=dict)
    photos: list[Photo] = field(default_factory=list)
    info: ReviewInfo = field(default_factory=ReviewInfo)
    field_name: str = ""
    specialization_name: str = ""

    def body_dict(self) -> dict:
        """Serialized body without the raw taxonomy labels."""
        return {
            "yearOfStudy": self.year_of_study,
            "place": dict(self.place),
            "work": dict(self.work),
            "socialLife": dict(self.social_life),
            "miscellaneous": dict(self.miscellaneous),
            "websites": dict(self.websites),
            "photos": [p.to_dict() for p in self.photos],
            "info": self.info.to_dict(),
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            **self.body_dict(),
            "fieldName": self.field_name,
            "specializationName": self.specialization_name,
        }


# Aggregate

@dataclass
class Review:
    """A listing entry merged with its detail page and resolved taxonomy ids."""
    entry: ReviewEntry
    content: ReviewContent
    country_id: int
    field_id: int
    specialization_id: Optional[int] = None

    @property
    def id(self) -> int:
        return self.entry.id

    @property
    def city(self) -> str:
        return self.entry.location.city

    def to_dict(self) -> dict:
        entry = self.entry.to_dict()
        entry.pop("location")
        return _without_none({
            **entry,
            "city": self.city,
            "countryId": self.country_id,
            "fieldId": self.field_id,
            "specializationId": self.specialization_id,
            **self.content.body_dict(),
        })


@dataclass
class AllReviewData:
    """The whole exported dataset of one scrape run."""
    categories: Categories
    specializations: list[Specialization] = field(default_factory=list)
    reviews: list[Review] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            **self.categories.to_dict(),
            "specializations": [s.to_dict() for s in self.specializations],
            "reviews": [r.to_dict() for r in self.reviews],
            "fetchedAt": self.fetched_at.isoformat(),
        }
