"""Shared dataclasses used by the page rendering and project pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from brandsite.layouts import LayoutId
    from brandsite.sections import Section
    from brandsite.seo import PageMeta


@dc.dataclass(slots=True)
class PageBlock:
    """One renderable block of a page.

    Attributes
    ----------
    macro : str
        Qualified macro name, ``"<module>.<macro>"``, resolved against the
        macro files under ``templates/macros``.
    params : dict[str, Any]
        Keyword arguments passed to the macro.
    """

    macro: str
    params: dict[str, typ.Any]


@dc.dataclass(slots=True)
class StyleAssets:
    """Per-page visual inputs that do not come from content.

    Attributes
    ----------
    hero_image : str or None
        Public path of the page hero image, when one was generated.
    site_url : str
        Absolute site URL.
    domain : str
        Bare domain used in contact details.
    offer_url : str
        Destination of inline sign-up links.
    animation_set : tuple[str, ...]
        Animation names chosen for the project.
    sport_images : dict[str, str]
        Public paths of bundled sport images keyed by sport.
    has_game_assets : bool
        ``True`` when the project bundles game thumbnails.
    """

    hero_image: str | None = None
    site_url: str = ""
    domain: str = ""
    offer_url: str = "#"
    animation_set: tuple[str, ...] = ()
    sport_images: dict[str, str] = dc.field(default_factory=dict)
    has_game_assets: bool = False


@dc.dataclass(slots=True)
class PageDocument:
    """Structured page: hero, ordered content blocks and closing call to action."""

    page_name: str
    component_name: str
    layout: LayoutId
    hero: PageBlock
    blocks: list[PageBlock]
    bottom_cta: PageBlock
    imports: list[str]


@dc.dataclass(slots=True)
class PageCopy:
    """Hero copy and sections resolved for one page."""

    hero_title: str
    hero_subtitle: str
    sections: list[Section]
    cta_text: str = "Play Now"


@dc.dataclass(slots=True)
class ProjectArchive:
    """A generated ZIP archive and the project name it unpacks to."""

    data: bytes
    project_name: str

    @property
    def size(self) -> int:
        """Return the archive size in bytes."""
        return len(self.data)


@dc.dataclass(slots=True)
class PageSeo:
    """Head metadata serialized into a page's ``SEOHead`` element."""

    meta: PageMeta
    canonical: str
    og_tags: dict[str, str]


__all__ = [
    "PageBlock",
    "PageCopy",
    "PageDocument",
    "PageSeo",
    "ProjectArchive",
    "StyleAssets",
]
