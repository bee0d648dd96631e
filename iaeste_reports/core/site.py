"""
Constants describing the IAESTE CZ student report site.

URLs, query fragments, CSS selectors and id patterns used by the
navigators and parsers.
"""

import re

ROOT_URL = "https://www.iaeste.cz"
BASE_URL = ROOT_URL + "/student-report?page=student_report_list"
SUBLIST_URL = ROOT_URL + "/student-report?page=student_report_country"
REVIEW_URL = ROOT_URL + "/student-report?page=student_report&id="

# Rendering locale
LANG_URL_FRAGMENT = "&lang="
LANG_CZECH = "cs_cz"
LANG_ENGLISH = "en_us"

# Sub-listing filters
COUNTRY_URL_FRAGMENT = "&country="
FIELD_URL_FRAGMENT = "&faculty="
SPECIALIZATION_URL_FRAGMENT = "&specialization="
REVIEW_ID_URL_FRAGMENT = "&id="

COUNTRY_ID_REGEX = re.compile(r"&country=(\d+)")
FIELD_ID_REGEX = re.compile(r"&faculty=(\d+)")
SPECIALIZATION_ID_REGEX = re.compile(r"&specialization=(\d+)")
REVIEW_ID_REGEX = re.compile(r"&id=(\d+)")

# Listing pages
BASE_TABLE_SELECTOR = ".content .tablediv table"
# lxml does not insert implicit tbody elements
SUBLIST_ROWS_SELECTOR = ".content .tablist table tr"
SUBLIST_LINKS_SELECTOR = ".content a[href]"
REVIEW_IN_CZECH_ICON = "i-cz.png"
THUMBNAIL_SELECTOR = "img.thumb_img"

# Detail page
REPORT_CONTAINER_SELECTOR = ".content .student_report"
REPORT_HEADING_SELECTOR = "h1, h2, h3"
GALLERY_LINKS_SELECTOR = ".gallery a[href]"
INFO_ROWS_SELECTOR = ".report_info table tr"
TEXT_BLOCKS_SELECTOR = ".report_text"
YEAR_OF_STUDY_REGEX = re.compile(r"(\S+\s+year\s*\([^)]*\))", re.IGNORECASE)


def localized_url(url: str, lang: str) -> str:
    """Append the rendering locale to a site URL."""
    return url + LANG_URL_FRAGMENT + lang


def country_sublist_url(country_id: int) -> str:
    return SUBLIST_URL + COUNTRY_URL_FRAGMENT + str(country_id)


def field_sublist_url(field_id: int) -> str:
    return SUBLIST_URL + FIELD_URL_FRAGMENT + str(field_id)


def specialization_sublist_url(field_id: int, specialization_id: int) -> str:
    return (
        SUBLIST_URL
        + FIELD_URL_FRAGMENT
        + str(field_id)
        + SPECIALIZATION_URL_FRAGMENT
        + str(specialization_id)
    )


def review_url(review_id: int) -> str:
    return REVIEW_URL + str(review_id)
