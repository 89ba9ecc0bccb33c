"""Typed dataclasses describing a brand site generation request."""

from __future__ import annotations

import dataclasses as dc


class ProjectConfigError(ValueError):
    """Raised when a project configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class MetaTemplate:
    """Meta tag templates that may contain ``{{brand}}``-style placeholders."""

    title: str = ""
    description: str = ""
    keywords: str = ""

    @property
    def is_complete(self) -> bool:
        """Return ``True`` when both title and description are provided."""
        return bool(self.title.strip() and self.description.strip())


@dc.dataclass(slots=True)
class LogoAsset:
    """Logo bytes together with their declared MIME type."""

    data: bytes
    mime_type: str
    filename: str | None = None


@dc.dataclass(frozen=True, slots=True)
class ColorPalette:
    """Tailwind colour families used by the generated site."""

    primary: str
    accent: str
    bg: str = "slate"


@dc.dataclass(frozen=True, slots=True)
class FontSet:
    """A Google Fonts family and the stylesheet URL that loads it."""

    name: str
    url: str
    family: str


@dc.dataclass(slots=True)
class ProjectConfig:
    """Validated inputs for one generation job.

    Attributes
    ----------
    brand : str
        Brand name shown in headers, footers and generated copy.
    domain : str
        Public domain; used for canonical URLs, the sitemap and robots.txt.
    pages : list[str]
        Declared page names in navigation order. Never empty.
    offer_url : str
        Destination for every call-to-action button.
    content_template : str or None
        Optional free-text content template parsed into page sections.
    logo : LogoAsset or None
        Optional logo copied into ``public/``.
    meta : MetaTemplate
        Meta tag templates applied to every page.
    image_style : str
        Hero image style tag (``business``, ``modern``, ``creative``,
        ``nature`` or ``minimalist``).
    color_scheme : str
        Colour scheme key from :data:`brandsite.config.COLOR_SCHEMES`.
    """

    brand: str
    domain: str
    pages: list[str]
    offer_url: str = "#"
    content_template: str | None = None
    logo: LogoAsset | None = None
    meta: MetaTemplate = dc.field(default_factory=MetaTemplate)
    image_style: str = "modern"
    color_scheme: str = "gold"


__all__ = [
    "ColorPalette",
    "FontSet",
    "LogoAsset",
    "MetaTemplate",
    "ProjectConfig",
    "ProjectConfigError",
]
