"""Resolve free-text page labels onto the pages a project declares.

Content templates name pages loosely ("Casino (Homepage)", "Sign in",
"Mobile APK"). :func:`resolve_page_name` maps such a label onto one of the
declared page names and never fails: a label that matches nothing falls back
to the first declared page, so its content still lands somewhere.

Examples
--------
>>> from brandsite.page_matcher import resolve_page_name
>>> resolve_page_name("Casino (Homepage)", ["Casino", "Games"])
'Casino'
>>> resolve_page_name("Zzz Foobar", ["Games", "Bonuses"])
'Games'
"""

from __future__ import annotations

import enum
import re
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

PARENTHETICAL_PATTERN = re.compile(r"\s*\([^)]*\)")


class PageConcept(enum.StrEnum):
    """Canonical page concepts recognised in content templates."""

    CASINO = "casino"
    LOGIN = "login"
    APP = "app"
    BONUSES = "bonuses"
    AVIATOR = "aviator"
    GAMES = "games"
    BETTING = "betting"


PAGE_ALIASES: typ.Final[dict[PageConcept, tuple[str, ...]]] = {
    PageConcept.CASINO: ("home", "homepage", "main", "casino"),
    PageConcept.LOGIN: ("login", "sign in", "signin", "secure access"),
    PageConcept.APP: ("app", "mobile", "download", "mobile app", "apk"),
    PageConcept.BONUSES: ("bonuses", "bonus", "promotions", "welcome bonus"),
    PageConcept.AVIATOR: ("aviator", "crash", "crash game"),
    PageConcept.GAMES: ("games", "slots", "game", "slot"),
    PageConcept.BETTING: ("betting", "sports", "sportsbook", "bet"),
}


def clean_label(raw_label: str) -> str:
    """Lower-case ``raw_label`` and drop any parenthetical qualifiers."""
    return PARENTHETICAL_PATTERN.sub("", raw_label.lower()).strip()


def _match_direct(
    label: str, first_token: str, pages: list[tuple[str, str]]
) -> str | None:
    for page, lowered in pages:
        if lowered == label:
            return page
    for page, lowered in pages:
        if lowered in label or label in lowered:
            return page
    for page, lowered in pages:
        if lowered.startswith(first_token) or first_token.startswith(lowered):
            return page
    return None


def _concepts_for(label: str) -> list[PageConcept]:
    return [
        concept
        for concept, aliases in PAGE_ALIASES.items()
        if concept.value in label or any(alias in label for alias in aliases)
    ]


def _page_fits_concept(lowered: str, concept: PageConcept, label: str) -> bool:
    aliases = PAGE_ALIASES[concept]
    match lowered:
        case "casino":
            if concept is PageConcept.CASINO:
                return True
        case "home":
            if concept is PageConcept.CASINO or "homepage" in aliases:
                return True
        case "mobile app":
            if concept is PageConcept.APP or "app" in label:
                return True
    return any(alias in lowered or lowered in alias for alias in aliases)


def _match_alias(label: str, pages: list[tuple[str, str]]) -> str | None:
    for concept in _concepts_for(label):
        for page, lowered in pages:
            if _page_fits_concept(lowered, concept, label):
                return page
    return None


def resolve_page_name(raw_label: str, declared_pages: cabc.Sequence[str]) -> str:
    """Return the declared page that best matches ``raw_label``.

    Parameters
    ----------
    raw_label : str
        Page label as written in the content template.
    declared_pages : Sequence[str]
        Page names configured for the project, in display order.

    Returns
    -------
    str
        The first declared page matched by, in order: exact equality,
        containment in either direction, a first-token prefix match, or the
        alias table. Falls back to the first declared page.

    Raises
    ------
    ValueError
        If ``declared_pages`` is empty. Project validation rejects such
        configurations before parsing ever starts.
    """
    if not declared_pages:
        msg = "At least one declared page is required to resolve page labels."
        raise ValueError(msg)

    label = clean_label(raw_label)
    if not label:
        return declared_pages[0]

    pages = [(page, page.lower().strip()) for page in declared_pages]
    pages = [(page, lowered) for page, lowered in pages if lowered]
    first_token = label.split()[0]
    return (
        _match_direct(label, first_token, pages)
        or _match_alias(label, pages)
        or declared_pages[0]
    )


__all__ = ["PAGE_ALIASES", "PageConcept", "clean_label", "resolve_page_name"]
