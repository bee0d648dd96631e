"""
Exceptions raised by the scraping pipeline.
"""

from typing import Optional


class ScraperError(Exception):
    """Base class for all pipeline failures."""


class FetchError(ScraperError):
    """A URL could not be fetched after all retry attempts."""

    def __init__(self, url: str, attempts: int, last_error: Optional[BaseException] = None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        detail = f": {last_error}" if last_error else ""
        super().__init__(f"Failed to fetch {url} after {attempts} attempts{detail}")


class StructuralMismatch(ScraperError, ValueError):
    """A page does not have the layout the parsers depend on."""

    def __init__(self, what: str, expected, actual, url: str = ""):
        self.what = what
        self.expected = expected
        self.actual = actual
        self.url = url
        where = f" ({url})" if url else ""
        super().__init__(f"Unexpected page layout{where}: {what} expected {expected}, got {actual}")


class ResolutionError(ScraperError, LookupError):
    """A scraped record could not be cross-referenced with the taxonomy."""
