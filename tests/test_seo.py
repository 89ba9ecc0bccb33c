"""Unit tests for routes, sitemap, robots and social tags."""

from __future__ import annotations

import datetime as dt

import pytest
from bs4 import BeautifulSoup

from brandsite.seo import (
    PageMeta,
    apply_placeholders,
    base_url,
    canonical_url,
    generate_robots_txt,
    generate_sitemap,
    hero_image_name,
    index_page,
    open_graph_tags,
    page_route,
)

PAGES = ["Games", "Casino", "Mobile App"]


@pytest.mark.parametrize(
    ("page", "expected"),
    [("Casino", "/"), ("Games", "/games"), ("Mobile App", "/mobile-app")],
)
def test_page_route(page: str, expected: str) -> None:
    """The home-equivalent page is the root; others get hyphenated slugs."""
    assert page_route(page, PAGES) == expected


def test_index_page_defaults_to_first_page() -> None:
    """Without a casino or home page the first page takes the root."""
    assert index_page(["Games", "Bonuses"]) == "Games"
    assert page_route("Games", ["Games", "Bonuses"]) == "/"


@pytest.mark.parametrize(
    ("domain", "expected"),
    [
        ("lucky.example", "https://lucky.example"),
        ("lucky.example/", "https://lucky.example"),
        ("http://lucky.example", "http://lucky.example"),
    ],
)
def test_base_url(domain: str, expected: str) -> None:
    """A missing scheme becomes https and trailing slashes go."""
    assert base_url(domain) == expected


def test_sitemap_lists_every_page_with_priorities() -> None:
    """The root page has priority 1.0, the rest 0.8."""
    xml = generate_sitemap("lucky.example", PAGES, today=dt.date(2025, 1, 2))
    soup = BeautifulSoup(xml, "html.parser")

    entries = {
        url.find("loc").text: url.find("priority").text for url in soup.find_all("url")
    }
    assert entries == {
        "https://lucky.example/games": "0.8",
        "https://lucky.example/": "1.0",
        "https://lucky.example/mobile-app": "0.8",
    }
    assert {tag.text for tag in soup.find_all("lastmod")} == {"2025-01-02"}


def test_robots_points_at_sitemap() -> None:
    """robots.txt allows crawling and links the sitemap."""
    robots = generate_robots_txt("lucky.example")
    assert "User-agent: *" in robots
    assert robots.rstrip().endswith("Sitemap: https://lucky.example/sitemap.xml")


def test_apply_placeholders_is_case_insensitive() -> None:
    """Brand, domain and page placeholders match in any case."""
    result = apply_placeholders(
        "{{Brand}} on {{DOMAIN}} - {{page}}",
        brand="Lucky",
        domain="lucky.example",
        page="Games",
    )
    assert result == "Lucky on lucky.example - Games"


def test_open_graph_tags_use_canonical_and_hero_image() -> None:
    """OG and Twitter tags share the canonical URL and hero image."""
    tags = open_graph_tags(
        PageMeta(title="Games", description="All the games"),
        domain="lucky.example",
        page="Games",
        brand="Lucky Star",
        pages=PAGES,
    )

    assert tags["og:url"] == canonical_url("lucky.example", "Games", PAGES)
    assert tags["og:image"] == (
        f"https://lucky.example/images/{hero_image_name('Games')}"
    )
    assert tags["twitter:site"] == "@LuckyStar"
    assert tags["twitter:card"] == "summary_large_image"
