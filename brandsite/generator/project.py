"""Generate a complete React/Vite/Tailwind project archive for one brand.

:class:`ProjectGenerator` sequences a whole run: configuration files and
logo, one hero image per page, copy and meta tags per page, sitemap and
robots, then the shared components and page modules. Progress is reported
through a callback after each of the ``3 + 3 * pages`` steps.

Network-bound collaborators run in worker threads so the event loop that
streams progress stays responsive. Everything else is synchronous and
deterministic for a given :class:`random.Random` and date.

Examples
--------
>>> import asyncio
>>> from brandsite.config import ProjectConfig
>>> from brandsite.generator.project import ProjectGenerator
>>> generator = ProjectGenerator()
>>> config = ProjectConfig(
...     brand="Lucky Star", domain="lucky.example", pages=["Casino"]
... )
>>> archive = asyncio.run(generator.generate(config))  # doctest: +SKIP
>>> archive.project_name  # doctest: +SKIP
'lucky-star'
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses as dc
import io
import logging
import random
import typing as typ
import zipfile

from brandsite._constants import DEFAULT_CTA_TEXT
from brandsite.config import (
    ANIMATION_SETS,
    FONT_SETS,
    logo_extension,
    resolve_palette,
    slugify_brand,
)
from brandsite.content_parser import hero_subtitle, parse_content_by_pages
from brandsite.copywriter import (
    TextGenerationClient,
    fallback_meta,
    placeholder_copy,
    templated_meta,
)
from brandsite.images import ImageGenerationClient
from brandsite.layouts import select_layout
from brandsite.sections import assemble_sections
from brandsite.seo import (
    base_url,
    canonical_url,
    component_name,
    generate_robots_txt,
    generate_sitemap,
    open_graph_tags,
    page_route,
)

from .models import PageCopy, PageSeo, ProjectArchive, StyleAssets
from .renderer import PageRenderer

if typ.TYPE_CHECKING:
    import datetime as dt
    from pathlib import Path

    from brandsite.config import LogoAsset, ProjectConfig, ServiceSettings
    from brandsite.content_parser import PageContent
    from brandsite.images import GeneratedImage

logger = logging.getLogger(__name__)

ProgressCallback = cabc.Callable[[int, int, str], None]

GAME_EXTENSIONS = (".webp", ".png", ".jpg", ".jpeg")
SPORT_IMAGES: typ.Final[dict[str, str]] = {
    "cricket": "cricket.webp",
    "football": "football.jpg",
    "esports": "esports.jpg",
    "other": "other.jpg",
}
CONFIG_FILES: typ.Final[tuple[tuple[str, str], ...]] = (
    ("package.json.jinja", "package.json"),
    ("vite.config.js.jinja", "vite.config.js"),
    ("tailwind.config.js.jinja", "tailwind.config.js"),
    ("postcss.config.js.jinja", "postcss.config.js"),
    ("index.html.jinja", "index.html"),
    ("favicon.svg.jinja", "public/favicon.svg"),
)
SOURCE_FILES: typ.Final[tuple[tuple[str, str], ...]] = (
    ("index.css.jinja", "src/index.css"),
    ("main.jsx.jinja", "src/main.jsx"),
    ("App.jsx.jinja", "src/App.jsx"),
    ("Header.jsx.jinja", "src/components/Header.jsx"),
    ("Footer.jsx.jinja", "src/components/Footer.jsx"),
    ("CTAButton.jsx.jinja", "src/components/CTAButton.jsx"),
    ("SEOHead.jsx.jinja", "src/components/SEOHead.jsx"),
    ("Ticker.jsx.jinja", "src/components/Ticker.jsx"),
)
_ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)


@dc.dataclass(slots=True)
class BundledAssets:
    """Game thumbnails and sport images copied into ``public/``."""

    games: list[dict[str, str]] = dc.field(default_factory=list)
    sport_images: dict[str, str] = dc.field(default_factory=dict)


class ArchiveWriter:
    """Accumulate files under a single root folder of an in-memory ZIP.

    Entries carry a fixed timestamp so identical inputs give identical bytes.
    """

    def __init__(self, root: str) -> None:
        self.root = root
        self._buffer = io.BytesIO()
        self._zip = zipfile.ZipFile(self._buffer, "w", zipfile.ZIP_DEFLATED)
        self.names: list[str] = []

    def write_bytes(self, path: str, data: bytes) -> None:
        """Store ``data`` at ``<root>/<path>``."""
        info = zipfile.ZipInfo(f"{self.root}/{path}", date_time=_ZIP_TIMESTAMP)
        info.compress_type = zipfile.ZIP_DEFLATED
        info.external_attr = 0o644 << 16
        self._zip.writestr(info, data)
        self.names.append(path)

    def write_text(self, path: str, text: str) -> None:
        """Store ``text`` encoded as UTF-8 at ``<root>/<path>``."""
        self.write_bytes(path, text.encode("utf-8"))

    def close(self) -> bytes:
        """Finish the archive and return its bytes."""
        self._zip.close()
        return self._buffer.getvalue()


class _Progress:
    def __init__(self, total: int, emit: ProgressCallback | None) -> None:
        self.total = total
        self.current = 0
        self._emit = emit

    def step(self, message: str) -> None:
        self.current += 1
        logger.info("[%d/%d] %s", self.current, self.total, message)
        if self._emit is not None:
            self._emit(self.current, self.total, message)


def game_display_name(stem: str) -> str:
    """Return a human-readable game name for a file stem.

    >>> game_display_name("gates_of_olympus")
    'Gates Of Olympus'
    """
    return " ".join(word[:1].upper() + word[1:].lower() for word in stem.split("_"))


def bundle_assets(assets_dir: Path | None, archive: ArchiveWriter) -> BundledAssets:
    """Copy optional ``games/`` and ``sports/`` images into ``archive``."""
    bundled = BundledAssets()
    if assets_dir is None:
        return bundled

    games_dir = assets_dir / "games"
    if games_dir.is_dir():
        for path in sorted(games_dir.iterdir()):
            if not path.is_file() or path.suffix.lower() not in GAME_EXTENSIONS:
                continue
            archive.write_bytes(f"public/games/{path.name}", path.read_bytes())
            bundled.games.append(
                {"src": f"/games/{path.name}", "name": game_display_name(path.stem)}
            )

    sports_dir = assets_dir / "sports"
    for sport, filename in SPORT_IMAGES.items():
        path = sports_dir / filename
        if path.is_file():
            archive.write_bytes(f"public/sports/{filename}", path.read_bytes())
            bundled.sport_images[sport] = f"/sports/{filename}"
    return bundled


def unique_component_names(pages: cabc.Sequence[str]) -> dict[str, str]:
    """Map each page to a component name, suffixing repeats with a counter."""
    names: dict[str, str] = {}
    taken: set[str] = set()
    for page in pages:
        base = component_name(page)
        name = base
        counter = 2
        while name in taken:
            name = f"{base}{counter}"
            counter += 1
        taken.add(name)
        names[page] = name
    return names


class ProjectGenerator:
    """Turn a :class:`ProjectConfig` into a :class:`ProjectArchive`."""

    def __init__(  # noqa: PLR0913 - collaborators are injected for tests
        self,
        *,
        renderer: PageRenderer | None = None,
        image_client: ImageGenerationClient | None = None,
        text_client: TextGenerationClient | None = None,
        assets_dir: Path | None = None,
        rng: random.Random | None = None,
        today: dt.date | None = None,
    ) -> None:
        """Wire the generator's collaborators.

        Parameters
        ----------
        renderer : PageRenderer, optional
            Page renderer; a default one is created when omitted.
        image_client : ImageGenerationClient, optional
            Hero image source. Pages go without images when omitted.
        text_client : TextGenerationClient, optional
            Copy and meta source. Placeholder copy and default meta tags are
            used when omitted.
        assets_dir : Path, optional
            Directory holding ``games/`` and ``sports/`` image bundles.
        rng : random.Random, optional
            Source of the layout seed and the font and animation picks.
        today : datetime.date, optional
            ``lastmod`` date written to the sitemap.
        """
        self.renderer = renderer or PageRenderer()
        self.image_client = image_client
        self.text_client = text_client
        self.assets_dir = assets_dir
        self._rng = rng or random.Random()  # noqa: S311 - not security sensitive
        self._today = today

    @classmethod
    def from_settings(
        cls,
        settings: ServiceSettings,
        *,
        use_ai: bool = True,
        rng: random.Random | None = None,
    ) -> ProjectGenerator:
        """Build a generator whose clients point at the configured services."""
        image_client = text_client = None
        if use_ai:
            image_client = ImageGenerationClient(
                api_key=settings.api_key, api_base=settings.image_api
            )
            text_client = TextGenerationClient(
                api_key=settings.api_key, api_url=settings.text_api
            )
        return cls(
            image_client=image_client,
            text_client=text_client,
            assets_dir=settings.assets_dir,
            rng=rng,
        )

    async def generate(
        self, config: ProjectConfig, emit: ProgressCallback | None = None
    ) -> ProjectArchive:
        """Generate the project archive for ``config``.

        Parameters
        ----------
        config : ProjectConfig
            Validated brand configuration.
        emit : callable, optional
            Called as ``emit(step, total, message)`` after each step starts.

        Returns
        -------
        ProjectArchive
            ZIP bytes whose single root folder is the brand slug.
        """
        pages = list(config.pages)
        project_name = slugify_brand(config.brand)
        colors = resolve_palette(config.color_scheme)
        font = self._rng.choice(FONT_SETS)
        animation_set = self._rng.choice(ANIMATION_SETS)
        layout_seed = self._rng.randrange(1_000_000)
        parsed = parse_content_by_pages(config.content_template, pages) or {}
        components = unique_component_names(pages)
        progress = _Progress(3 + 3 * len(pages), emit)
        archive = ArchiveWriter(project_name)

        progress.step("Creating project structure...")
        logo_path = self._write_logo(archive, config.logo)
        bundled = bundle_assets(self.assets_dir, archive)
        context: dict[str, typ.Any] = {
            "brand": config.brand,
            "domain": config.domain,
            "project_name": project_name,
            "offer_url": config.offer_url,
            "colors": colors,
            "font": font,
            "animation_set": animation_set,
            "logo_path": logo_path,
            "games": bundled.games,
            "links": [
                {
                    "label": page,
                    "route": page_route(page, pages),
                    "component": components[page],
                }
                for page in pages
            ],
        }
        for template, path in CONFIG_FILES:
            archive.write_text(path, self._render(template, context))

        hero_images: dict[str, str] = {}
        for page in pages:
            progress.step(f'Generating image for "{page}" page...')
            image = await self._generate_image(page, config)
            if image is not None:
                archive.write_bytes(f"public/images/{image.filename}", image.data)
                hero_images[page] = f"/images/{image.filename}"

        page_data: dict[str, tuple[PageCopy, PageSeo]] = {}
        for index, page in enumerate(pages):
            progress.step(f'Generating content for "{page}" page...')
            copy = await self._page_copy(
                config, page, parsed.get(page), layout_seed + index
            )
            progress.step(f'Generating meta tags for "{page}" page...')
            page_data[page] = (copy, await self._page_seo(config, page))

        progress.step("Generating SEO files...")
        archive.write_text(
            "public/sitemap.xml",
            generate_sitemap(config.domain, pages, today=self._today),
        )
        archive.write_text("public/robots.txt", generate_robots_txt(config.domain))

        progress.step("Assembling React components...")
        for template, path in SOURCE_FILES:
            archive.write_text(path, self._render(template, context))
        if bundled.games:
            archive.write_text(
                "src/components/GameGrid.jsx",
                self._render("GameGrid.jsx.jinja", context),
            )
        for index, page in enumerate(pages):
            copy, seo = page_data[page]
            assets = StyleAssets(
                hero_image=hero_images.get(page),
                site_url=base_url(config.domain),
                domain=config.domain,
                offer_url=config.offer_url,
                animation_set=animation_set,
                sport_images=bundled.sport_images,
                has_game_assets=bool(bundled.games),
            )
            document = self.renderer.render(
                page,
                copy.sections,
                copy.hero_title,
                copy.hero_subtitle,
                copy.cta_text,
                select_layout(page, index, len(pages), layout_seed),
                colors,
                layout_seed + index,
                assets,
            )
            document.component_name = components[page]
            archive.write_text(
                f"src/pages/{document.component_name}.jsx",
                self.renderer.serialize(document, seo),
            )
        archive.write_text("README.md", self._render("README.md.jinja", context))

        data = archive.close()
        logger.info("Generated %s (%d KB)", project_name, len(data) // 1024)
        return ProjectArchive(data=data, project_name=project_name)

    def _render(self, template: str, context: dict[str, typ.Any]) -> str:
        return self.renderer.env.get_template(f"project/{template}").render(context)

    @staticmethod
    def _write_logo(archive: ArchiveWriter, logo: LogoAsset | None) -> str | None:
        if logo is None:
            return None
        filename = f"logo{logo_extension(logo)}"
        archive.write_bytes(f"public/{filename}", logo.data)
        return f"/{filename}"

    async def _generate_image(
        self, page: str, config: ProjectConfig
    ) -> GeneratedImage | None:
        if self.image_client is None:
            return None
        return await asyncio.to_thread(
            self.image_client.generate, page, config.brand, config.image_style
        )

    async def _page_copy(
        self,
        config: ProjectConfig,
        page: str,
        content: PageContent | None,
        seed: int,
    ) -> PageCopy:
        if content is not None and content.blocks:
            sections = assemble_sections(content.blocks, shuffle=True, seed=seed)
            if sections:
                return PageCopy(
                    hero_title=sections[0].title,
                    hero_subtitle=hero_subtitle(content, config.brand, page),
                    sections=sections,
                    cta_text=DEFAULT_CTA_TEXT,
                )
        if self.text_client is not None:
            return await asyncio.to_thread(
                self.text_client.generate_page_copy,
                config.brand,
                config.domain,
                page,
                config.offer_url,
            )
        return placeholder_copy(config.brand, config.domain, page)

    async def _page_seo(self, config: ProjectConfig, page: str) -> PageSeo:
        if self.text_client is not None:
            meta = await asyncio.to_thread(
                self.text_client.generate_meta,
                config.brand,
                config.domain,
                page,
                config.meta,
            )
        elif config.meta.is_complete:
            meta = templated_meta(config.brand, config.domain, page, config.meta)
        else:
            meta = fallback_meta(config.brand, config.domain, page)
        return PageSeo(
            meta=meta,
            canonical=canonical_url(config.domain, page, config.pages),
            og_tags=open_graph_tags(
                meta,
                domain=config.domain,
                page=page,
                brand=config.brand,
                pages=config.pages,
            ),
        )


__all__ = [
    "ArchiveWriter",
    "BundledAssets",
    "ProgressCallback",
    "ProjectGenerator",
    "bundle_assets",
    "game_display_name",
    "unique_component_names",
]
