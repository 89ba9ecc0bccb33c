"""Derive URLs, sitemap, robots and social tags from a domain and page list.

All helpers are deterministic: the same domain and page list always produce
the same routes. The home-equivalent page (``casino`` or ``home``) is served
from the site root and every other page from a lower-cased, hyphenated slug.
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import re
import typing as typ
from xml.sax.saxutils import escape as xml_escape

from ._constants import HERO_IMAGE_TEMPLATE, INDEX_PAGES

if typ.TYPE_CHECKING:
    import collections.abc as cabc

PLACEHOLDER_PATTERNS = {
    "brand": re.compile(r"\{\{brand\}\}", re.IGNORECASE),
    "domain": re.compile(r"\{\{domain\}\}", re.IGNORECASE),
    "page": re.compile(r"\{\{page\}\}", re.IGNORECASE),
}
_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^a-zA-Z0-9\s]")
_UNSAFE_SLUG = re.compile(r"[^a-z0-9-]")


@dc.dataclass(slots=True)
class PageMeta:
    """Title, description and keywords emitted into a page head."""

    title: str
    description: str
    keywords: str = ""


def base_url(domain: str) -> str:
    """Return ``domain`` as an absolute URL without a trailing slash."""
    domain = domain.strip().rstrip("/")
    if domain.startswith(("http://", "https://")):
        return domain
    return f"https://{domain}"


def page_key(page: str) -> str:
    """Return the lower-cased, stripped comparison key for ``page``."""
    return page.strip().lower()


def index_page(pages: cabc.Sequence[str]) -> str | None:
    """Return the page served from the site root.

    The first declared page named ``casino`` or ``home`` wins; without one
    the first declared page takes the root.
    """
    for page in pages:
        if page_key(page) in INDEX_PAGES:
            return page
    return pages[0] if pages else None


def path_slug(page: str) -> str:
    """Return the hyphenated slug used for routes and asset names."""
    slug = _UNSAFE_SLUG.sub("", _WHITESPACE.sub("-", page_key(page)))
    return slug or "page"


def page_route(page: str, pages: cabc.Sequence[str]) -> str:
    """Return the router path for ``page``: ``/`` for the index page."""
    root = index_page(pages)
    if root is not None and page_key(page) == page_key(root):
        return "/"
    return f"/{path_slug(page)}"


def canonical_url(domain: str, page: str, pages: cabc.Sequence[str]) -> str:
    """Return the absolute canonical URL for ``page``."""
    return f"{base_url(domain)}{page_route(page, pages)}"


def hero_image_name(page: str) -> str:
    """Return the hero image filename stored under ``public/images``."""
    return HERO_IMAGE_TEMPLATE.format(slug=path_slug(page))


def component_name(page: str) -> str:
    """Return a PascalCase React component name for ``page``.

    >>> component_name("mobile app")
    'MobileApp'
    >>> component_name("24/7 Support")
    'Page247Support'
    """
    words = _NON_WORD.sub("", page).split()
    name = "".join(word[:1].upper() + word[1:].lower() for word in words)
    if not name or name[0].isdigit():
        name = f"Page{name}"
    return name


def generate_sitemap(
    domain: str, pages: cabc.Sequence[str], *, today: dt.date | None = None
) -> str:
    """Render ``sitemap.xml`` for ``pages``.

    The index page gets priority ``1.0`` and the rest ``0.8``. Every entry
    carries ``lastmod`` (``today``, defaulting to the current UTC date) and a
    weekly change frequency.
    """
    stamp = (today or dt.datetime.now(dt.UTC).date()).isoformat()
    root = index_page(pages)
    entries = []
    for page in pages:
        is_root = root is not None and page_key(page) == page_key(root)
        entries.append(
            "  <url>\n"
            f"    <loc>{xml_escape(canonical_url(domain, page, pages))}</loc>\n"
            f"    <lastmod>{stamp}</lastmod>\n"
            "    <changefreq>weekly</changefreq>\n"
            f"    <priority>{'1.0' if is_root else '0.8'}</priority>\n"
            "  </url>"
        )
    body = "\n".join(entries)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{body}\n"
        "</urlset>\n"
    )


def generate_robots_txt(domain: str) -> str:
    """Render ``robots.txt`` allowing everything and pointing at the sitemap."""
    return f"User-agent: *\nAllow: /\n\nSitemap: {base_url(domain)}/sitemap.xml\n"


def apply_placeholders(template: str, *, brand: str, domain: str, page: str) -> str:
    """Substitute ``{{brand}}``, ``{{domain}}`` and ``{{page}}`` (any case)."""
    values = {"brand": brand, "domain": domain, "page": page}
    for key, pattern in PLACEHOLDER_PATTERNS.items():
        template = pattern.sub(lambda _match, value=values[key]: value, template)
    return template


def open_graph_tags(
    meta: PageMeta,
    *,
    domain: str,
    page: str,
    brand: str,
    pages: cabc.Sequence[str],
) -> dict[str, str]:
    """Return Open Graph and Twitter card tags for ``page``."""
    image_url = f"{base_url(domain)}/images/{hero_image_name(page)}"
    handle = f"@{_WHITESPACE.sub('', brand)}"
    alt = f"{page} - {brand}"
    return {
        "og:title": meta.title,
        "og:description": meta.description,
        "og:type": "website",
        "og:url": canonical_url(domain, page, pages),
        "og:site_name": brand,
        "og:image": image_url,
        "og:image:secure_url": image_url,
        "og:image:type": "image/jpeg",
        "og:image:alt": alt,
        "og:locale": "en_US",
        "twitter:card": "summary_large_image",
        "twitter:site": handle,
        "twitter:title": meta.title,
        "twitter:description": meta.description,
        "twitter:image": image_url,
        "twitter:image:alt": alt,
    }


__all__ = [
    "PageMeta",
    "apply_placeholders",
    "base_url",
    "canonical_url",
    "component_name",
    "generate_robots_txt",
    "generate_sitemap",
    "hero_image_name",
    "index_page",
    "open_graph_tags",
    "page_key",
    "page_route",
    "path_slug",
]
