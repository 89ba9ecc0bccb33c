"""Render assembled sections into React page modules.

The renderer works in two steps. :meth:`PageRenderer.render` turns a page's
sections, hero copy, layout and seed into a :class:`PageDocument`: an ordered
list of :class:`PageBlock` objects, each naming a Jinja macro and its
arguments. :meth:`PageRenderer.serialize` then expands those macros into the
final ``.jsx`` module text.

Visual variety comes from seeded modular arithmetic over ordered macro
catalogues (:data:`SECTION_TEMPLATES`, :data:`HERO_VARIANTS` and
:data:`STATS_VARIANTS`). Nothing reads the clock or a random source, so the
same inputs always produce byte-identical output.

Examples
--------
>>> from brandsite.config import resolve_palette
>>> from brandsite.generator.renderer import PageRenderer
>>> from brandsite.layouts import LayoutId
>>> renderer = PageRenderer()
>>> document = renderer.render(  # doctest: +SKIP
...     "Casino", sections, "Big Wins", "Spin today", "Play Now",
...     LayoutId.CASINO_HOME, resolve_palette("gold"), 42,
... )
>>> print(renderer.serialize(document, seo))  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from brandsite._constants import DEFAULT_CTA_TEXT, DEFAULT_TRUNCATE_LENGTH
from brandsite.layouts import LayoutId
from brandsite.seo import component_name

from .models import PageBlock, PageDocument, StyleAssets

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from brandsite.config import ColorPalette
    from brandsite.sections import Section

    from .models import PageSeo

SECTION_TEMPLATES: typ.Final[tuple[str, ...]] = (
    "split_media",
    "gradient_panel",
    "centered_story",
    "rail_timeline",
    "feature_quad",
    "masonry_card",
    "wide_with_aside",
    "glow_card",
    "mosaic",
    "vertical_timeline",
    "accent_border",
    "wide_split",
    "numbered_step",
    "banner_strip",
    "checklist_columns",
    "icon_row",
    "index_highlight",
    "quote_block",
    "pill_header",
    "stacked_cards",
    "spotlight",
    "ticket_card",
    "sidebar_title",
    "minimal_divider",
)
HERO_VARIANTS: typ.Final[tuple[str, ...]] = (
    "hero_left",
    "hero_centered",
    "hero_split",
    "hero_compact",
    "hero_badge",
)
STATS_VARIANTS: typ.Final[tuple[str, ...]] = (
    "stats_plain",
    "stats_cards",
    "stats_gradient",
)

EMOJIS: typ.Final[tuple[str, ...]] = (
    "🎰",
    "🃏",
    "💰",
    "🎲",
    "🎯",
    "🔥",
    "⭐",
    "🏆",
    "💎",
    "🚀",
    "♠️",
    "🎁",
)
ANIMATION_CLASSES: typ.Final[tuple[str, ...]] = (
    "animate-float",
    "animate-pulse",
    "animate-shimmer",
    "animate-bounce",
    "animate-glow",
    "animate-slide-up",
    "animate-wiggle",
    "animate-fade-in",
    "animate-scale-in",
)
BACKGROUND_PATTERNS: typ.Final[tuple[str, ...]] = (
    "bg-slate-800/50",
    "bg-slate-900/60",
    "bg-slate-800/30",
    "bg-slate-900/50",
    "bg-slate-800/40",
    "bg-slate-900/70",
    "bg-gradient-to-r from-slate-800/50 to-slate-900/50",
    "bg-gradient-to-b from-slate-800/40 to-slate-900/60",
    "bg-gradient-to-br from-{primary}-900/10 to-slate-900/60",
    "bg-slate-800/60",
    "bg-slate-900/40",
    "bg-gradient-to-tr from-slate-800/60 to-slate-900/50",
)
SITE_STATS: typ.Final[tuple[tuple[str, str], ...]] = (
    ("1500+", "Games"),
    ("90s", "Withdrawal"),
    ("250%", "Welcome Bonus"),
    ("24/7", "Support"),
)
AVIATOR_STATS: typ.Final[tuple[tuple[str, str], ...]] = (
    ("97%", "RTP Rate"),
    ("100x+", "Max Multiplier"),
    ("5s", "Per Round"),
    ("24/7", "Available"),
)
APP_STEPS: typ.Final[tuple[str, ...]] = (
    "Download APK from official site",
    "Enable Unknown Sources on Android",
    "Install and log in",
    "Start playing 500+ games instantly",
)
SPORT_CARDS: typ.Final[tuple[dict[str, str], ...]] = (
    {"key": "cricket", "emoji": "🏏", "name": "Cricket", "desc": "IPL, T20, Ashes"},
    {
        "key": "football",
        "emoji": "⚽",
        "name": "Football",
        "desc": "Premier League, UCL",
    },
    {
        "key": "esports",
        "emoji": "🎮",
        "name": "eSports",
        "desc": "PUBG, Valorant, FIFA",
    },
    {
        "key": "other",
        "emoji": "🏀",
        "name": "More Sports",
        "desc": "Tennis, NBA, Kabaddi",
    },
)

HOME_TAKE = (3, 4, 2, 4, 5)
GAMES_TAKE = (6, 8, 4, 6, 4)
BONUS_TAKE = (6, 4, 4)

_JS_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "`": "\\`",
    "$": "\\$",
    "\n": "\\n",
    "\r": "",
    "<": "\\u003c",
    ">": "\\u003e",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}
_JS_ESCAPE_PATTERN = re.compile("|".join(map(re.escape, _JS_ESCAPES)))


def escape_jsx(value: object) -> str:
    """Escape ``value`` for use inside a double-quoted JS string literal.

    Backslashes, double quotes, backticks, ``$`` and newlines are escaped;
    ``<`` and ``>`` are written as unicode escapes so no text can open a tag.

    >>> escape_jsx('Say "hi" <b>${x}</b>')
    'Say \\\\"hi\\\\" \\\\u003cb\\\\u003e\\\\${x}\\\\u003c/b\\\\u003e'
    """
    text = "" if value is None else str(value)
    return _JS_ESCAPE_PATTERN.sub(lambda match: _JS_ESCAPES[match.group(0)], text)


def jsx_text(value: object) -> str:
    """Return ``value`` as a JSX expression container holding a string."""
    return '{"' + escape_jsx(value) + '"}'


def truncate_text(value: object, limit: int = DEFAULT_TRUNCATE_LENGTH) -> str:
    """Shorten ``value`` to at most ``limit`` characters plus an ellipsis.

    Whitespace is collapsed first. The cut happens at the last whitespace at
    or before ``limit``, never inside a word. A first word longer than
    ``limit`` is kept whole.
    """
    clean = " ".join(str(value or "").split())
    if len(clean) <= limit:
        return clean
    cut = clean[: limit + 1].rfind(" ")
    if cut <= 0:
        return f"{clean.split(' ', 1)[0]}..."
    return f"{clean[:cut].rstrip(' ,;:-')}..."


def select_section_template(seed: int, section_index: int, global_index: int) -> str:
    """Return the section macro for a section position.

    ``section_index`` is the position within the current run of generic
    sections and ``global_index`` the position within the whole page.
    """
    position = (seed * 31 + section_index * 17 + global_index * 7) % len(
        SECTION_TEMPLATES
    )
    return SECTION_TEMPLATES[position]


def select_hero_variant(seed: int) -> str:
    """Return the hero macro for ``seed``."""
    return HERO_VARIANTS[seed % len(HERO_VARIANTS)]


def select_stats_variant(seed: int) -> str:
    """Return the stats macro for ``seed``."""
    return STATS_VARIANTS[seed % len(STATS_VARIANTS)]


def emoji_at(position: int) -> str:
    """Return the decorative emoji at ``position``, wrapping around."""
    return EMOJIS[position % len(EMOJIS)]


@dc.dataclass(frozen=True, slots=True)
class SectionView:
    """Template-facing view of one section at a fixed page position."""

    title: str
    content: str
    items: tuple[str, ...]
    is_list: bool
    has_cta: bool
    idx: int
    anim: str
    bg: str
    cta_text: str


@dc.dataclass(frozen=True, slots=True)
class _Page:
    page_name: str
    sections: tuple[Section, ...]
    hero_title: str
    hero_subtitle: str
    cta_text: str
    colors: ColorPalette
    seed: int
    assets: StyleAssets

    @property
    def image(self) -> str | None:
        return self.assets.hero_image

    @property
    def image_alt(self) -> str:
        return f"{self.page_name} image"


class PageRenderer:
    """Render pages into :class:`PageDocument` objects and JSX modules."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        """Initialize the Jinja environment used to expand page macros.

        Parameters
        ----------
        templates_dir : Path, optional
            Directory containing ``page.jsx.jinja`` and ``macros/``. Defaults
            to the ``templates`` directory shipped with the package.
        """
        self.templates_dir = templates_dir or Path(__file__).parents[1] / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html.jinja", "xml.jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["jsx"] = escape_jsx
        self.env.filters["jsx_text"] = jsx_text
        self.env.filters["clip"] = truncate_text
        self.env.globals["emoji"] = emoji_at
        self.page_template = self.env.get_template("page.jsx.jinja")
        self._macro_modules: dict[str, typ.Any] = {}
        self._strategies: dict[
            LayoutId, cabc.Callable[[_Page], tuple[PageBlock, list[PageBlock]]]
        ] = {
            LayoutId.CASINO_HOME: self._casino_home,
            LayoutId.CASINO_GAMES: self._casino_games,
            LayoutId.CASINO_BONUSES: self._casino_bonuses,
            LayoutId.CASINO_APP: self._casino_app,
            LayoutId.CASINO_AVIATOR: self._casino_aviator,
            LayoutId.CASINO_BETTING: self._casino_betting,
            LayoutId.CASINO_TIMELINE: self._casino_timeline,
            LayoutId.CASINO_BENTO: self._casino_bento,
            LayoutId.CASINO_LOGIN: self._casino_login,
            LayoutId.CASINO_SECTIONS: self._casino_sections,
            LayoutId.CONTACT_CARDS: self._contact_cards,
            LayoutId.ACCORDION: self._accordion,
            LayoutId.DEFAULT: self._default,
        }

    def render(  # noqa: PLR0913 - mirrors the page pipeline inputs
        self,
        page_name: str,
        sections: cabc.Sequence[Section],
        hero_title: str,
        hero_subtitle: str,
        cta_text: str,
        layout: LayoutId,
        colors: ColorPalette,
        seed: int,
        assets: StyleAssets | None = None,
    ) -> PageDocument:
        """Build the structured document for one page.

        Parameters
        ----------
        page_name : str
            Declared page name.
        sections : Sequence[Section]
            Assembled sections in display order.
        hero_title, hero_subtitle : str
            Hero copy.
        cta_text : str
            Label of the primary call-to-action buttons.
        layout : LayoutId
            Layout chosen by :func:`brandsite.layouts.select_layout`.
        colors : ColorPalette
            Tailwind colour families.
        seed : int
            Per-page seed driving every variant choice.
        assets : StyleAssets, optional
            Hero image, site URL and bundled media.

        Returns
        -------
        PageDocument
            Hero block, ordered content blocks and the closing call to action.
        """
        page = _Page(
            page_name=page_name,
            sections=tuple(sections),
            hero_title=hero_title,
            hero_subtitle=hero_subtitle,
            cta_text=cta_text or DEFAULT_CTA_TEXT,
            colors=colors,
            seed=seed,
            assets=assets or StyleAssets(),
        )
        hero, blocks = self._strategies[layout](page)
        imports = [
            "import SEOHead from '../components/SEOHead';",
            "import CTAButton from '../components/CTAButton';",
        ]
        if layout is LayoutId.CASINO_GAMES and page.assets.has_game_assets:
            imports.insert(0, "import GameGrid from '../components/GameGrid';")
            blocks.append(self._block("layouts.game_grid", page))
        return PageDocument(
            page_name=page_name,
            component_name=component_name(page_name),
            layout=layout,
            hero=hero,
            blocks=blocks,
            bottom_cta=self._block("layouts.bottom_cta", page),
            imports=imports,
        )

    def serialize(self, document: PageDocument, seo: PageSeo) -> str:
        """Expand ``document`` into the text of its ``.jsx`` module."""
        parts = [self._expand(document.hero)]
        parts.extend(self._expand(block) for block in document.blocks)
        parts.append(self._expand(document.bottom_cta))
        body = [
            "\n".join(line for line in part.splitlines() if line.strip())
            for part in parts
        ]
        return self.page_template.render(
            document=document, seo=seo, body=[part for part in body if part]
        )

    def render_sections(
        self,
        sections: cabc.Sequence[Section],
        *,
        start: int,
        seed: int,
        colors: ColorPalette,
        cta_text: str = DEFAULT_CTA_TEXT,
    ) -> list[PageBlock]:
        """Map generic sections onto catalogue macros.

        Parameters
        ----------
        sections : Sequence[Section]
            Sections to render, in order.
        start : int
            Page position of the first section in ``sections``.
        seed : int
            Page seed.
        colors : ColorPalette
            Palette handed to each macro.
        cta_text : str, optional
            Button label for sections that carry a call to action.

        Returns
        -------
        list[PageBlock]
            One block per section.
        """
        blocks = []
        for offset, section in enumerate(sections):
            position = start + offset
            view = SectionView(
                title=section.title,
                content=section.content,
                items=tuple(
                    line.strip() for line in section.content.split("\n") if line.strip()
                ),
                is_list=section.kind == "list",
                has_cta=section.has_cta,
                idx=position,
                anim=ANIMATION_CLASSES[(seed + offset * 3) % len(ANIMATION_CLASSES)],
                bg=BACKGROUND_PATTERNS[
                    (seed + offset * 11) % len(BACKGROUND_PATTERNS)
                ].format(primary=colors.primary),
                cta_text=cta_text,
            )
            macro = select_section_template(seed, offset, position)
            blocks.append(PageBlock(f"sections.{macro}", {"s": view, "c": colors}))
        return blocks

    def _expand(self, block: PageBlock) -> str:
        module_name, _, macro_name = block.macro.partition(".")
        module = self._macro_modules.get(module_name)
        if module is None:
            template = self.env.get_template(f"macros/{module_name}.jsx.jinja")
            module = template.module
            self._macro_modules[module_name] = module
        return str(getattr(module, macro_name)(**block.params))

    def _block(self, macro: str, page: _Page, **extra: typ.Any) -> PageBlock:
        params: dict[str, typ.Any] = {
            "c": page.colors,
            "v": {
                "title": page.hero_title,
                "subtitle": page.hero_subtitle,
                "cta_text": page.cta_text,
                "page_name": page.page_name,
                "image": page.image,
                "image_alt": page.image_alt,
                "site_url": page.assets.site_url,
                "seed": page.seed,
                **extra,
            },
        }
        return PageBlock(macro, params)

    def _sections(self, page: _Page, sections: cabc.Sequence[Section], start: int):
        return self.render_sections(
            sections,
            start=start,
            seed=page.seed,
            colors=page.colors,
            cta_text=page.cta_text,
        )

    def _hero(self, page: _Page) -> PageBlock:
        return self._block(f"heroes.{select_hero_variant(page.seed)}", page)

    def _stats(self, page: _Page) -> PageBlock:
        return self._block(
            f"heroes.{select_stats_variant(page.seed)}", page, stats=SITE_STATS
        )

    def _banner(self, page: _Page) -> list[PageBlock]:
        if not page.image:
            return []
        return [self._block("layouts.image_banner", page)]

    def _casino_home(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        variant = page.seed % len(HOME_TAKE)
        take = HOME_TAKE[variant]
        secs = page.sections
        blocks = [
            self._stats(page),
            self._block(
                "layouts.home_features",
                page,
                variant=variant,
                cards=secs[:take],
            ),
            *self._sections(page, secs[take:], take),
            *self._banner(page),
        ]
        return self._hero(page), blocks

    def _casino_games(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        variant = (page.seed + 1) % len(GAMES_TAKE)
        take = GAMES_TAKE[variant]
        secs = page.sections
        intro = truncate_text(secs[0].content, 200) if secs else ""
        blocks = [
            self._block(
                "layouts.games_showcase",
                page,
                variant=variant,
                intro=intro,
                cards=secs[:take],
            ),
            *self._sections(page, secs[take:], take),
            self._stats(page),
        ]
        return self._hero(page), blocks

    def _casino_bonuses(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        variant = (page.seed + 2) % len(BONUS_TAKE)
        take = BONUS_TAKE[variant]
        secs = page.sections
        blocks = [
            self._block("layouts.bonus_cards", page, variant=variant, cards=secs[:take]),
            *self._sections(page, secs[take:], take),
            self._stats(page),
        ]
        return self._block("layouts.bonus_hero", page), blocks

    def _casino_app(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        secs = page.sections
        lead = secs[0] if secs else None
        blocks = [
            self._block(
                "layouts.app_download",
                page,
                heading=lead.title if lead else "Download the App",
                body=lead.content if lead else "",
                steps=APP_STEPS,
            )
        ]
        if len(secs) > 1:
            blocks.append(self._block("layouts.app_features", page, cards=secs[1:5]))
        blocks.extend(self._sections(page, secs[5:], 5))
        return self._hero(page), blocks

    def _casino_aviator(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        secs = page.sections
        blocks = [
            self._block("heroes.stats_tiles", page, stats=AVIATOR_STATS),
            self._block("layouts.aviator_howto", page, steps=secs[:3]),
            *self._sections(page, secs[3:], 3),
        ]
        return self._block("layouts.aviator_hero", page), blocks

    def _casino_betting(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        secs = page.sections
        sports = [
            {**card, "image": page.assets.sport_images.get(card["key"])}
            for card in SPORT_CARDS
        ]
        blocks = [
            self._block("layouts.sports_cards", page, sports=sports),
            *self._sections(page, secs[:4], 0),
            *self._sections(page, secs[4:], 4),
            self._stats(page),
        ]
        return self._hero(page), blocks

    def _casino_timeline(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        secs = page.sections
        blocks = [
            self._block("layouts.timeline_steps", page, steps=secs[:6]),
            *self._sections(page, secs[6:], 6),
            self._stats(page),
        ]
        return self._block("layouts.timeline_hero", page), blocks

    def _casino_bento(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        secs = page.sections
        tiles = secs[:8]
        blocks = [
            self._block(
                "layouts.bento_grid",
                page,
                tiles=tiles,
                cta_index=min(7, len(secs) - 1),
            ),
            *self._sections(page, secs[8:], 8),
            self._stats(page),
        ]
        return self._block("layouts.bento_hero", page), blocks

    def _casino_login(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        secs = page.sections
        blocks = [
            self._block(
                "layouts.login_panel",
                page,
                cards=secs[:4],
                offer_url=page.assets.offer_url,
            ),
            *self._sections(page, secs[4:], 4),
        ]
        return self._block("layouts.login_hero", page), blocks

    def _contact_cards(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        contacts = (
            ("📧", "Email", f"info@{page.assets.domain}" if page.assets.domain else ""),
            ("📞", "Phone", "+1 (800) 123-4567"),
            ("💬", "Live Chat", "Available 24/7"),
            ("🕐", "Hours", "Always Open"),
        )
        blocks = [
            self._block(
                "layouts.contact_panel",
                page,
                contacts=[entry for entry in contacts if entry[2]],
            ),
            *self._sections(page, page.sections, 0),
        ]
        return self._block("layouts.contact_hero", page), blocks

    def _casino_sections(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        blocks = [
            self._stats(page),
            *self._sections(page, page.sections, 0),
            *self._banner(page),
        ]
        return self._hero(page), blocks

    def _accordion(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        blocks = [self._block("layouts.accordion_panel", page, entries=page.sections)]
        return self._block("layouts.accordion_hero", page), blocks

    def _default(self, page: _Page) -> tuple[PageBlock, list[PageBlock]]:
        secs = page.sections
        lead = secs[:3] if len(secs) >= 3 else ()
        rest = secs[3:] if len(secs) >= 3 else secs
        blocks = [
            self._block("layouts.default_content", page, cards=lead, panels=rest),
            self._stats(page),
        ]
        return self._hero(page), blocks


__all__ = [
    "EMOJIS",
    "HERO_VARIANTS",
    "SECTION_TEMPLATES",
    "STATS_VARIANTS",
    "PageRenderer",
    "SectionView",
    "emoji_at",
    "escape_jsx",
    "jsx_text",
    "select_hero_variant",
    "select_section_template",
    "select_stats_variant",
    "truncate_text",
]
