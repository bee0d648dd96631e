"""
Navigators for the listing pages.

- TaxonomyNavigator: root page -> country categories, fields
- SpecializationNavigator: field sub-listing -> specializations
- ReviewListNavigator: country/field/specialization sub-listing -> entries
"""

from .review_list import ListingScope, ReviewListNavigator
from .specializations import SpecializationNavigator
from .taxonomy import TaxonomyNavigator

__all__ = [
    "ListingScope",
    "ReviewListNavigator",
    "SpecializationNavigator",
    "TaxonomyNavigator",
]
