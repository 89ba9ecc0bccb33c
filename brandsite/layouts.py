"""Map page names onto the closed catalogue of page layouts.

Known page names map straight to a layout. Any other page draws one from
:data:`LAYOUT_FALLBACKS` with seeded modular arithmetic, so the same
``(seed, index, total)`` always yields the same layout.

Examples
--------
>>> from brandsite.layouts import LayoutId, select_layout
>>> select_layout("Games", 1, 4, seed=7) is LayoutId.CASINO_GAMES
True
>>> select_layout("UnknownPage", 2, 7, 1000) == select_layout("UnknownPage", 2, 7, 1000)
True
"""

from __future__ import annotations

import enum
import typing as typ


class LayoutId(enum.StrEnum):
    """Page layout identifiers understood by the page renderer."""

    CASINO_HOME = "casino-home"
    CASINO_GAMES = "casino-games"
    CASINO_BONUSES = "casino-bonuses"
    CASINO_APP = "casino-app"
    CASINO_AVIATOR = "casino-aviator"
    CASINO_BETTING = "casino-betting"
    CASINO_TIMELINE = "casino-timeline"
    CASINO_BENTO = "casino-bento"
    CASINO_LOGIN = "casino-login"
    CASINO_SECTIONS = "casino-sections"
    CONTACT_CARDS = "contact-cards"
    ACCORDION = "accordion"
    DEFAULT = "default"


LAYOUT_MAP: typ.Final[dict[str, LayoutId]] = {
    "casino": LayoutId.CASINO_HOME,
    "home": LayoutId.CASINO_HOME,
    "games": LayoutId.CASINO_GAMES,
    "slots": LayoutId.CASINO_GAMES,
    "live casino": LayoutId.CASINO_GAMES,
    "bonuses": LayoutId.CASINO_BONUSES,
    "promotions": LayoutId.CASINO_BONUSES,
    "mobile app": LayoutId.CASINO_APP,
    "app": LayoutId.CASINO_APP,
    "aviator": LayoutId.CASINO_AVIATOR,
    "betting": LayoutId.CASINO_BETTING,
    "login": LayoutId.CASINO_LOGIN,
    "contact": LayoutId.CONTACT_CARDS,
    "faq": LayoutId.ACCORDION,
}

LAYOUT_FALLBACKS: typ.Final[tuple[LayoutId, ...]] = (
    LayoutId.CASINO_HOME,
    LayoutId.CASINO_GAMES,
    LayoutId.CASINO_BONUSES,
    LayoutId.CASINO_APP,
    LayoutId.CASINO_AVIATOR,
    LayoutId.CASINO_TIMELINE,
    LayoutId.CASINO_BENTO,
    LayoutId.CASINO_LOGIN,
    LayoutId.CASINO_BETTING,
    LayoutId.CASINO_SECTIONS,
)


def fallback_index(index: int, total_pages: int, seed: int) -> int:
    """Return the :data:`LAYOUT_FALLBACKS` position for an unmapped page."""
    return abs((seed + index * 13 + total_pages * 7) % len(LAYOUT_FALLBACKS))


def select_layout(
    page_name: str, index: int, total_pages: int, seed: int
) -> LayoutId:
    """Choose the layout for the page at ``index`` of ``total_pages``.

    Parameters
    ----------
    page_name : str
        Declared page name; matched case-insensitively after stripping.
    index : int
        Zero-based position of the page in the declared order.
    total_pages : int
        Number of declared pages.
    seed : int
        Per-job layout seed.

    Returns
    -------
    LayoutId
        The mapped layout, or a seeded pick from :data:`LAYOUT_FALLBACKS`.
    """
    mapped = LAYOUT_MAP.get(page_name.strip().lower())
    if mapped is not None:
        return mapped
    return LAYOUT_FALLBACKS[fallback_index(index, total_pages, seed)]


__all__ = [
    "LAYOUT_FALLBACKS",
    "LAYOUT_MAP",
    "LayoutId",
    "fallback_index",
    "select_layout",
]
