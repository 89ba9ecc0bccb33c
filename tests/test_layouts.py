"""Unit tests for page layout selection."""

from __future__ import annotations

import pytest

from brandsite.layouts import LAYOUT_FALLBACKS, LAYOUT_MAP, LayoutId, select_layout


@pytest.mark.parametrize(
    ("page", "expected"),
    [
        ("Casino", LayoutId.CASINO_HOME),
        ("  home ", LayoutId.CASINO_HOME),
        ("Live Casino", LayoutId.CASINO_GAMES),
        ("PROMOTIONS", LayoutId.CASINO_BONUSES),
        ("Mobile App", LayoutId.CASINO_APP),
        ("Aviator", LayoutId.CASINO_AVIATOR),
        ("Betting", LayoutId.CASINO_BETTING),
        ("Login", LayoutId.CASINO_LOGIN),
        ("Contact", LayoutId.CONTACT_CARDS),
        ("FAQ", LayoutId.ACCORDION),
    ],
)
def test_mapped_pages_ignore_seed(page: str, expected: LayoutId) -> None:
    """Known page names map to fixed layouts whatever the seed."""
    for seed in (0, 1, 999_999):
        assert select_layout(page, 3, 7, seed) is expected


def test_unmapped_page_uses_seeded_fallback() -> None:
    """Unknown pages pick ``(seed + index*13 + total*7) % 10``."""
    assert select_layout("Responsible Gaming", 2, 5, 7) is LayoutId.CASINO_BETTING
    assert select_layout("Responsible Gaming", 0, 1, 3) is LAYOUT_FALLBACKS[0]


def test_unmapped_page_layout_is_repeatable() -> None:
    """The same page, position and seed always choose the same layout."""
    first = select_layout("UnknownPage", 2, 7, 1000)

    assert first is LAYOUT_FALLBACKS[5]
    assert all(select_layout("UnknownPage", 2, 7, 1000) is first for _ in range(5))


def test_fallback_handles_negative_seeds() -> None:
    """Negative seeds still land inside the fallback list."""
    assert select_layout("Tournaments", 1, 4, -12345) in LAYOUT_FALLBACKS


def test_layout_catalogue_shape() -> None:
    """Thirteen layouts exist; ten are fallbacks and ``default`` is not one."""
    assert len(LayoutId) == 13
    assert len(LAYOUT_FALLBACKS) == 10
    assert LayoutId.DEFAULT not in LAYOUT_FALLBACKS
    assert all(key == key.strip().lower() for key in LAYOUT_MAP)
