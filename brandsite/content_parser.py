"""Parse loosely structured content templates into page-scoped blocks.

A content template is free text written in a word processor, for example::

    1. Casino (Homepage) - Play the best slots
    Welcome to the lobby where every spin counts.
    ✅ Fast payouts
    ✅ Big bonuses

    2. Bonuses - Get more
    Claim yours today.

Numbered lines start a page. The text before the first dash is the page
label and the rest is the hero subtitle. The label goes through
:func:`brandsite.page_matcher.resolve_page_name`, so the block always lands
on one of the declared pages. The lines below a page heading are segmented
into :class:`ContentBlock` objects using marker glyphs, bullets and a
heading heuristic. Everything here is pure and synchronous.

Examples
--------
>>> from brandsite.content_parser import parse_content_by_pages
>>> parsed = parse_content_by_pages(
...     "1. Casino - Play Now\\n✅ Fast payouts\\n✅ Big bonuses",
...     ["Casino", "Login"],
... )
>>> parsed["Casino"].blocks[0].kind
'list'
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from .page_matcher import resolve_page_name

if typ.TYPE_CHECKING:
    import collections.abc as cabc

BlockKind = typ.Literal["list", "paragraph"]

_WORD_CHAR_MAP = {
    "‘": "'",
    "’": "'",
    "‚": "'",
    "“": '"',
    "”": '"',
    "„": '"',
    "–": "-",
    "—": "-",
    "…": "...",
    " ": " ",
    "​": "",
}
_WORD_CHAR_PATTERN = re.compile("|".join(map(re.escape, _WORD_CHAR_MAP)))

PAGE_SPLIT_PATTERN = re.compile(r"\n\s*(?=\d+\.\s+)")
PAGE_HEADING_PATTERN = re.compile(r"^\d+\.\s+")
PAGE_TITLE_PATTERN = re.compile(r"^\d+\.\s+([^-]+)(?:\s*-\s*(.+?))?$")

MARKER_GLYPHS = (
    "📝",
    "📲",
    "🎁",
    "🔥",
    "🎯",
    "♠",
    "🏆",
    "🎮",
    "💡",
    "🔒",
    "🚀",
    "⚽",
    "🏏",
    "🎾",
    "📱",
    "✈",
)
MARKER_PATTERN = re.compile(
    r"^(?:" + "|".join(map(re.escape, MARKER_GLYPHS)) + ")️?" + r"\s+(.+)$"
)
BULLET_PATTERN = re.compile(r"^[✅•\-]\s+(.+)$")
SENTENCE_BREAK_PATTERN = re.compile(r"[.!?]")
EMBEDDED_DASH_PATTERN = re.compile(r"\s-\s")

_MIN_LINE_LENGTH = 10
_MAX_HEADING_LENGTH = 80
_MAX_HEADING_WORDS = 12


class ContentParseError(ValueError):
    """Raised when a content template yields no page blocks at all."""


@dc.dataclass(frozen=True, slots=True)
class ContentBlock:
    """A titled or untitled span of parsed text destined for one page.

    Attributes
    ----------
    title : str or None
        Heading text taken from a marker or heading line. ``None`` when the
        block started without one; the section assembler derives a title.
    content : str
        Block body. List items are joined with newlines.
    kind : {"list", "paragraph"}
        ``"list"`` when at least one bullet line contributed to the block.
    """

    title: str | None
    content: str
    kind: BlockKind = "paragraph"


@dc.dataclass(slots=True)
class PageContent:
    """Parsed content for a single declared page."""

    subtitle: str
    blocks: list[ContentBlock]
    raw_text: str


def normalize_word_chars(text: str) -> str:
    """Replace word-processor punctuation with plain ASCII equivalents.

    Smart quotes become straight quotes, en and em dashes become hyphens, the
    ellipsis character becomes three dots, non-breaking spaces become spaces,
    zero-width spaces are removed and CRLF/CR line endings become LF.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return _WORD_CHAR_PATTERN.sub(lambda match: _WORD_CHAR_MAP[match.group(0)], text)


def first_sentence(text: str) -> str:
    """Return the text before the first sentence terminator, stripped."""
    return SENTENCE_BREAK_PATTERN.split(text, maxsplit=1)[0].strip()


def is_heading_line(line: str) -> bool:
    """Return ``True`` when ``line`` looks like a section heading.

    Headings are 10 to 79 characters long, carry no trailing period and do
    not contain ``..``. A line qualifies when it ends in ``?`` or ``!``, or
    when it starts with an uppercase character and either embeds a spaced
    dash or is a short comma-free phrase of at most twelve words.
    """
    if not _MIN_LINE_LENGTH <= len(line) < _MAX_HEADING_LENGTH:
        return False
    if BULLET_PATTERN.match(line) or ".." in line:
        return False
    if line.endswith(("?", "!")):
        return True
    if line.endswith("."):
        return False
    if not (line[0].isupper() or line.startswith("🎰")):
        return False
    if EMBEDDED_DASH_PATTERN.search(line):
        return True
    return "," not in line and len(line.split()) <= _MAX_HEADING_WORDS


class _BlockAccumulator:
    """Collect lines for the block currently being built."""

    def __init__(self) -> None:
        self.blocks: list[ContentBlock] = []
        self.title: str | None = None
        self.lines: list[str] = []
        self.is_list = False

    @property
    def is_open(self) -> bool:
        return bool(self.lines) or self.title is not None

    def flush(self) -> None:
        content = "\n".join(self.lines).strip()
        if len(content) > _MIN_LINE_LENGTH or (self.title and content):
            self.blocks.append(
                ContentBlock(
                    title=self.title,
                    content=content,
                    kind="list" if self.is_list else "paragraph",
                )
            )
        self.title = None
        self.lines = []
        self.is_list = False


def extract_blocks(text: str) -> list[ContentBlock]:
    """Segment the body of one page into content blocks.

    Parameters
    ----------
    text : str
        Normalized page body without its numbered heading line.

    Returns
    -------
    list[ContentBlock]
        Blocks in source order. Blocks with too little content are dropped.
    """
    acc = _BlockAccumulator()
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        if marker := MARKER_PATTERN.match(line):
            acc.flush()
            acc.title = marker.group(1).strip()
            continue
        if bullet := BULLET_PATTERN.match(line):
            acc.lines.append(bullet.group(1).strip())
            acc.is_list = True
            continue
        if is_heading_line(line):
            if acc.is_open:
                acc.flush()
            acc.title = line
            continue
        if len(line) > _MIN_LINE_LENGTH:
            acc.lines.append(line)
    acc.flush()
    return acc.blocks


def parse_content_by_pages(
    raw_text: str | None, declared_pages: cabc.Sequence[str]
) -> dict[str, PageContent] | None:
    """Split a content template into per-page content.

    Parameters
    ----------
    raw_text : str or None
        Template text as typed or pasted by the user.
    declared_pages : Sequence[str]
        Page names configured for the project, in display order.

    Returns
    -------
    dict[str, PageContent] or None
        Mapping keyed by declared page name. ``None`` when the input is empty
        or when no numbered page heading is recognized.

    Notes
    -----
    Two headings that resolve to the same declared page are merged: their
    blocks are concatenated in heading order and their raw text is joined
    with a blank line. The subtitle of the first heading wins.
    """
    if not raw_text or not raw_text.strip():
        return None

    normalized = normalize_word_chars(raw_text)
    result: dict[str, PageContent] = {}
    for chunk in PAGE_SPLIT_PATTERN.split(normalized):
        trimmed = chunk.strip()
        if not trimmed or not PAGE_HEADING_PATTERN.match(trimmed):
            continue
        first_line, _, body = trimmed.partition("\n")
        match = PAGE_TITLE_PATTERN.match(first_line.strip())
        if match is None:
            continue
        label = match.group(1).strip()
        if not label:
            continue
        subtitle = (match.group(2) or "").strip()
        body = body.strip()
        page = resolve_page_name(label, declared_pages)
        blocks = extract_blocks(body)

        existing = result.get(page)
        if existing is None:
            result[page] = PageContent(subtitle=subtitle, blocks=blocks, raw_text=body)
        else:
            existing.blocks.extend(blocks)
            existing.raw_text = f"{existing.raw_text}\n\n{body}"

    return result or None


def require_content(
    raw_text: str | None, declared_pages: cabc.Sequence[str]
) -> dict[str, PageContent]:
    """Parse ``raw_text`` and raise when nothing usable comes out of it."""
    parsed = parse_content_by_pages(raw_text, declared_pages)
    if parsed is None:
        msg = "No numbered page headings found in the content template."
        raise ContentParseError(msg)
    return parsed


def hero_subtitle(page: PageContent | None, brand: str, page_name: str) -> str:
    """Pick the hero subtitle for a page.

    The parsed heading subtitle wins when it is longer than 20 characters.
    Otherwise the first sentence of the first block is used when it is longer
    than 25 characters. A branded default covers everything else.
    """
    if page is not None:
        if len(page.subtitle) > 20:
            return page.subtitle
        if page.blocks:
            sentence = first_sentence(page.blocks[0].content)
            if len(sentence) > 25:
                return f"{sentence}."
    return f"Welcome to {brand} - discover the best {page_name} experience. Play now!"


def derive_title(content: str) -> str:
    """Derive a display title for an untitled block.

    Uses the first sentence when it is 15 to 70 characters long, otherwise
    the first eight words capped at 50 characters, followed by an ellipsis.
    """
    if not content.strip():
        return "More Info"
    sentence = first_sentence(content)
    if 15 <= len(sentence) <= 70:
        return sentence if sentence.endswith(".") else f"{sentence}."
    words = " ".join(content.split()[:8])
    if len(words) > 50:
        return f"{words[:50].rstrip()}..."
    return f"{words}..."


__all__ = [
    "BlockKind",
    "ContentBlock",
    "ContentParseError",
    "PageContent",
    "derive_title",
    "extract_blocks",
    "first_sentence",
    "hero_subtitle",
    "is_heading_line",
    "normalize_word_chars",
    "parse_content_by_pages",
    "require_content",
]
