"""Shared fixtures: HTML builders for the report site and a fake HTTP backend."""

import httpx
import pytest
from bs4 import BeautifulSoup

from iaeste_reports.core.http_client import HttpClient
from iaeste_reports.core.site import (
    BASE_URL,
    LANG_CZECH,
    LANG_ENGLISH,
    localized_url,
)

LINK = "/student-report?page="


class PageBuilder:
    """Builds HTML documents shaped like the report site's pages."""

    @staticmethod
    def wrap(body: str) -> str:
        return (
            "<html><head><title>Student reports</title></head><body>"
            '<div class="menu"><a href="/student-report?page=student_report_list&country=999">Menu</a></div>'
            f'<div class="content">{body}</div>'
            "</body></html>"
        )

    @staticmethod
    def soup(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")

    def root(self, categories, fields) -> str:
        """
        categories: [(heading, [(country_id, name)])]
        fields: [(field_id, name)]
        """
        cells = []
        for heading, countries in categories:
            links = "".join(
                f'<a href="{LINK}student_report_country&country={cid}">{name}</a><br>'
                for cid, name in countries
            )
            cells.append(f"<td><h2>{heading}</h2>{links}</td>")
        field_links = "".join(
            f'<a href="{LINK}student_report_country&faculty={fid}">{name}</a><br>'
            for fid, name in fields
        )
        cells.append(f"<td><h3>Fields</h3>{field_links}</td>")
        return self.wrap(f'<div class="tablediv"><table><tr>{"".join(cells)}</tr></table></div>')

    def sublist(self, headers, rows, extra: str = "") -> str:
        """
        headers: header labels
        rows: list of cell html lists
        extra: html placed before the table (filters, specialization links)
        """
        header = "".join(f"<th>{h}</th>" for h in headers)
        body = "".join("<tr>" + "".join(f"<td>{c}</td>" for c in row) + "</tr>" for row in rows)
        return self.wrap(
            f'<div class="filters">{extra}</div>'
            f'<div class="tablist"><table><tbody><tr>{header}</tr>{body}</tbody></table></div>'
        )

    @staticmethod
    def review_link(review_id: int, text: str) -> str:
        return f'<a href="{LINK}student_report&id={review_id}">{text}</a>'

    @staticmethod
    def specialization_link(field_id: int, specialization_id: int, name: str) -> str:
        return (
            f'<a href="{LINK}student_report_country&faculty={field_id}'
            f'&specialization={specialization_id}">{name}</a>'
        )

    def report_row(
        self,
        review_id: int,
        year: int,
        location: str,
        student: str,
        university: str = "",
        specialization: str = "",
        czech: bool = False,
        thumbnail: str = "",
    ) -> list[str]:
        """Cells in the default column order Year, Location, Student, University, Specialization."""
        flag = '<img src="/img/i-cz.png" alt="cz">' if czech else ""
        thumb = f'<img class="thumb_img" src="{thumbnail}">' if thumbnail else ""
        return [
            str(year),
            self.review_link(review_id, location) + thumb,
            student + flag,
            university,
            specialization,
        ]

    def detail(
        self,
        info=None,
        blocks=None,
        heading: str = "Petr Novák, 3rd year (Bachelor)",
        photos=(),
    ) -> str:
        info = info if info is not None else default_info()
        blocks = blocks if blocks is not None else default_blocks()
        info_rows = "".join(f"<tr><th>Label {i}</th><td>{v}</td></tr>" for i, v in enumerate(info))
        text_blocks = "".join(f'<div class="report_text">{b}</div>' for b in blocks)
        gallery = "".join(f'<a href="{full}"><img src="{thumb}"></a>' for thumb, full in photos)
        return self.wrap(
            '<div class="student_report">'
            "<h1>Student report</h1>"
            f"<h2>{heading}</h2>"
            f'<div class="report_info"><table>{info_rows}</table></div>'
            f"{text_blocks}"
            f'<div class="gallery">{gallery}</div>'
            "</div>"
        )


def default_info():
    return [
        "Faculty of Information Technology",
        "Computer Science",
        "Informatics",
        "Software Engineering",
        "07/2019 - 09/2019",
        "10 weeks",
        "Train",
        "Travel insurance",
        "Not needed",
        "0 EUR",
        "",
        "",
        "DE-2019-1234",
    ]


def default_blocks():
    blocks = [f"Block {i}" for i in range(22)]
    blocks[20] = "https://example.com<br>https://example.org"
    return blocks


class FakeSite:
    """In-memory HTTP backend for httpx.MockTransport."""

    def __init__(self):
        self.pages: dict[str, tuple[int, str]] = {}
        self.failures: dict[str, list[int]] = {}
        self.requests: list[str] = []
        self.sleeps: list[float] = []

    def add(self, url: str, html: str, status: int = 200) -> None:
        self.pages[url] = (status, html)

    def add_localized(self, url: str, en_html: str, cs_html: str) -> None:
        self.add(localized_url(url, LANG_ENGLISH), en_html)
        self.add(localized_url(url, LANG_CZECH), cs_html)

    def add_root(self, en_html: str, cs_html: str) -> None:
        self.add_localized(BASE_URL, en_html, cs_html)

    def fail(self, url: str, *statuses: int) -> None:
        """Answer the next requests of url with the given error statuses."""
        self.failures[url] = list(statuses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)

        pending = self.failures.get(url)
        if pending:
            return httpx.Response(pending.pop(0), text="unavailable")

        if url not in self.pages:
            return httpx.Response(404, text="not found")
        status, html = self.pages[url]
        return httpx.Response(status, text=html, headers={"Content-Type": "text/html; charset=utf-8"})

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)

    def client(self, **kwargs) -> HttpClient:
        kwargs.setdefault("max_attempts", 2)
        return HttpClient(transport=httpx.MockTransport(self.handler), sleep=self.sleep, **kwargs)

    def count(self, url: str) -> int:
        return self.requests.count(url)


@pytest.fixture
def pages():
    return PageBuilder()


@pytest.fixture
def fake_site():
    return FakeSite()
