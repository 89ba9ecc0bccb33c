"""Expand parsed content blocks into uniformly sized, uniquely titled sections.

Every block is split into parts that fit the display ceiling
(:data:`brandsite._constants.MAX_SECTION_LENGTH`). Each part becomes a
:class:`Section`. The first part keeps the block title, or a derived one when
the block had none. Later parts get titles derived from their own text. A
per-call set of used titles keeps every title unique within the page. The
first and last sections carry the call-to-action flag.

Examples
--------
>>> from brandsite.content_parser import ContentBlock
>>> from brandsite.sections import assemble_sections
>>> sections = assemble_sections(
...     [ContentBlock(title="Fast payouts", content="Withdraw in 90 seconds.")]
... )
>>> sections[0].has_cta
True
"""

from __future__ import annotations

import dataclasses as dc
import re
import time
import typing as typ

from ._constants import MAX_SECTION_LENGTH
from .content_parser import BlockKind, derive_title

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .content_parser import ContentBlock

SENTENCE_SPLIT_PATTERN = re.compile(r"(?<=[.!?])\s+")
SENTENCE_BREAK_PATTERN = re.compile(r"[.!?]")
CLAUSE_BREAK_PATTERN = re.compile(r"[,;]|\s-\s")

_SHUFFLE_BUCKETS = 5


@dc.dataclass(frozen=True, slots=True)
class Section:
    """A finalized unit of page content ready for rendering.

    Attributes
    ----------
    title : str
        Heading, unique within the page.
    content : str
        Body text no longer than the section ceiling unless a single word
        exceeds it.
    has_cta : bool
        ``True`` for the first and last section of a page.
    kind : {"list", "paragraph"}
        Inherited from the source block; list content is newline separated.
    """

    title: str
    content: str
    has_cta: bool = False
    kind: BlockKind = "paragraph"


def _split_words(text: str, max_len: int) -> list[str]:
    return _pack(text.split(), " ", max_len)


def _pack(units: cabc.Iterable[str], sep: str, max_len: int) -> list[str]:
    parts: list[str] = []
    current = ""
    for unit in units:
        candidate = f"{current}{sep}{unit}" if current else unit
        if len(candidate) > max_len and current:
            parts.append(current.strip())
            current = unit
        else:
            current = candidate
    if current.strip():
        parts.append(current.strip())
    return parts


def _bounded(units: cabc.Iterable[str], max_len: int) -> list[str]:
    bounded: list[str] = []
    for unit in units:
        if len(unit) > max_len:
            bounded.extend(_split_words(unit, max_len))
        else:
            bounded.append(unit)
    return bounded


def split_long_content(text: str, max_len: int = MAX_SECTION_LENGTH) -> list[str]:
    """Split ``text`` into parts no longer than ``max_len`` characters.

    Line-structured text whose lines are all shorter than twice the ceiling
    is packed line by line. Anything else is packed sentence by sentence.
    Lines or sentences that are longer than the ceiling on their own are
    packed word by word, so no part is ever cut inside a word.

    Parameters
    ----------
    text : str
        Block content to split.
    max_len : int, optional
        Length ceiling for each part. Defaults to
        :data:`~brandsite._constants.MAX_SECTION_LENGTH`.

    Returns
    -------
    list[str]
        Non-empty parts in source order, or ``[text.strip()]`` when the text
        already fits.
    """
    stripped = text.strip()
    if len(stripped) <= max_len:
        return [stripped]

    lines = [line.strip() for line in stripped.split("\n") if line.strip()]
    if len(lines) > 1 and all(len(line) < max_len * 2 for line in lines):
        return _pack(_bounded(lines, max_len), "\n", max_len)

    sentences = [s for s in SENTENCE_SPLIT_PATTERN.split(stripped) if s]
    return _pack(_bounded(sentences, max_len), " ", max_len)


def extract_unique_title(content: str, used_titles: cabc.Set[str]) -> str:
    """Derive a title for ``content`` that is not in ``used_titles``.

    Tries, in order: a sentence of 15 to 65 characters, a clause of 11 to 59
    characters, and the first seven words with an ellipsis. When all of these
    collide, the first five words get a numeric ``(n)`` suffix.
    """
    if not content.strip():
        base = "Learn More"
        if base not in used_titles:
            return base
        return _numbered(base, used_titles)

    for sentence in SENTENCE_BREAK_PATTERN.split(content):
        candidate = sentence.strip()
        if 15 <= len(candidate) <= 65 and candidate not in used_titles:
            return candidate

    for clause in CLAUSE_BREAK_PATTERN.split(content):
        candidate = clause.strip()
        if 10 < len(candidate) < 60 and candidate not in used_titles:
            return candidate

    words = content.split()
    snippet = f"{' '.join(words[:7])}..."
    if snippet not in used_titles:
        return snippet
    return _numbered(" ".join(words[:5]), used_titles)


def _numbered(base: str, used_titles: cabc.Set[str]) -> str:
    counter = len(used_titles) + 1
    while f"{base} ({counter})" in used_titles:
        counter += 1
    return f"{base} ({counter})"


def default_shuffle_seed() -> int:
    """Return a time-derived seed in ``range(1000)``."""
    return time.time_ns() // 1_000_000 % 1000


def shuffle_sections(
    sections: cabc.Sequence[Section], seed: int | None = None
) -> list[Section]:
    """Reorder the middle of ``sections`` into coarse seeded buckets.

    The first and last sections keep their positions. The middle sections
    are stable-sorted by ``(ord(title[0]) + seed) % 5``. The result is a
    permutation of the input; lists of two or fewer sections are returned
    unchanged.
    """
    items = list(sections)
    if len(items) <= 2:
        return items
    if seed is None:
        seed = default_shuffle_seed()

    def _bucket(section: Section) -> int:
        lead = ord(section.title[0]) if section.title else 0
        return (lead + seed) % _SHUFFLE_BUCKETS

    middle = sorted(items[1:-1], key=_bucket)
    return [items[0], *middle, items[-1]]


def assemble_sections(
    blocks: cabc.Iterable[ContentBlock],
    *,
    shuffle: bool = False,
    seed: int | None = None,
    max_len: int = MAX_SECTION_LENGTH,
) -> list[Section]:
    """Turn parsed content blocks into a page's ordered section list.

    Parameters
    ----------
    blocks : Iterable[ContentBlock]
        Blocks for one page, in parsed order.
    shuffle : bool, optional
        Reorder the middle sections with :func:`shuffle_sections`.
    seed : int, optional
        Shuffle seed. A time-derived seed is used when omitted.
    max_len : int, optional
        Content length ceiling per section.

    Returns
    -------
    list[Section]
        Sections with pairwise distinct titles. Exactly the first and last
        entries have ``has_cta`` set (a single section has it alone).
    """
    used_titles: set[str] = set()
    expanded: list[Section] = []
    for block in blocks:
        for index, part in enumerate(split_long_content(block.content, max_len)):
            if index == 0:
                title = block.title or derive_title(part)
                if title in used_titles:
                    title = extract_unique_title(part, used_titles)
            else:
                title = extract_unique_title(part, used_titles)
            used_titles.add(title)
            expanded.append(Section(title=title, content=part, kind=block.kind))

    if shuffle:
        expanded = shuffle_sections(expanded, seed)

    last = len(expanded) - 1
    return [
        dc.replace(section, has_cta=index in (0, last))
        for index, section in enumerate(expanded)
    ]


__all__ = [
    "Section",
    "assemble_sections",
    "default_shuffle_seed",
    "extract_unique_title",
    "shuffle_sections",
    "split_long_content",
]
