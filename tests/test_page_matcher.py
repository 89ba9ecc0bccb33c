"""Unit tests for page label resolution."""

from __future__ import annotations

import pytest

from brandsite.page_matcher import PAGE_ALIASES, PageConcept, resolve_page_name


@pytest.mark.parametrize(
    ("label", "pages", "expected"),
    [
        ("Casino (Homepage)", ["Live Casino", "Casino"], "Casino"),
        ("GAMES", ["Casino", "Games"], "Games"),
        ("Live Casino Games", ["Bonuses", "Live Casino"], "Live Casino"),
        ("Bonus offers", ["Casino", "Bonuses"], "Bonuses"),
        ("Mobile APK", ["Casino", "App"], "App"),
        ("Sign in", ["Casino", "Login", "App"], "Login"),
        ("Home", ["Casino", "Games"], "Casino"),
        ("Zzz Foobar", ["Games", "Bonuses"], "Games"),
    ],
    ids=[
        "exact-beats-containment",
        "case-insensitive-exact",
        "containment",
        "first-token-prefix",
        "alias-app",
        "alias-login",
        "home-is-casino",
        "fallback-first-page",
    ],
)
def test_resolve_page_name(label: str, pages: list[str], expected: str) -> None:
    """Labels resolve through the documented precedence chain."""
    resolved = resolve_page_name(label, pages)
    assert resolved == expected, f"{label!r} resolved to {resolved!r}"


def test_resolve_page_name_always_returns_a_declared_page() -> None:
    """Whatever the label, the result is one of the declared pages."""
    pages = ["Aviator", "Betting", "FAQ"]
    for label in ["", "   ", "(only brackets)", "???", "Crash game", "Sportsbook"]:
        assert resolve_page_name(label, pages) in pages, f"{label!r} escaped"


def test_resolve_page_name_requires_pages() -> None:
    """An empty page list is a programming error."""
    with pytest.raises(ValueError, match="declared page"):
        resolve_page_name("Casino", [])


def test_alias_table_covers_every_concept() -> None:
    """Each concept has synonyms, including its own name."""
    assert set(PAGE_ALIASES) == set(PageConcept)
    for concept, aliases in PAGE_ALIASES.items():
        assert concept.value in aliases, f"{concept} missing from its aliases"
