"""Unit tests for content template parsing."""

from __future__ import annotations

import pytest

from brandsite.content_parser import (
    ContentBlock,
    ContentParseError,
    PageContent,
    derive_title,
    extract_blocks,
    hero_subtitle,
    is_heading_line,
    normalize_word_chars,
    parse_content_by_pages,
    require_content,
)

PAGES = ["Casino", "Login", "App"]

TEMPLATE = (
    "Intro text before any heading is ignored.\n"
    "1. Casino (Homepage) - Spin the reels at the best casino in town\n"
    "🔥 Hot Slots\n"
    "Discover hundreds of slot machines with huge jackpots every day.\n"
    "✅ Fast withdrawals\n"
    "✅ Daily cashback\n"
    "2. Sign in - Access your account\n"
    "Log in with your username and password to continue playing.\n"
    "3. Casino – Extra\n"
    "More details about the casino lobby and its live tables.\n"
)


def test_normalize_word_chars_maps_word_punctuation() -> None:
    """Smart quotes, dashes and special spaces become plain ASCII."""
    assert normalize_word_chars("‘a’ “b”") == "'a' \"b\""
    assert normalize_word_chars("x – y — z") == "x - y - z"
    assert normalize_word_chars("wait…") == "wait..."
    assert normalize_word_chars("a\u00a0b\u200bc") == "a bc"
    assert normalize_word_chars("one\r\ntwo\rthree") == "one\ntwo\nthree"


@pytest.mark.parametrize("raw", [None, "", "   \n\t "])
def test_parse_returns_none_for_blank_input(raw: str | None) -> None:
    """Empty or whitespace-only templates yield no mapping."""
    assert parse_content_by_pages(raw, PAGES) is None


def test_parse_returns_none_without_page_headings() -> None:
    """Text with no numbered page heading is not content."""
    assert parse_content_by_pages("Just some prose about slots.", PAGES) is None


def test_parse_splits_pages_and_resolves_labels() -> None:
    """Headings resolve onto declared pages; front matter is dropped."""
    parsed = parse_content_by_pages(TEMPLATE, PAGES)

    assert parsed is not None
    assert set(parsed) == {"Casino", "Login"}, f"unexpected pages {sorted(parsed)}"
    login = parsed["Login"]
    assert login.subtitle == "Access your account"
    assert login.blocks == [
        ContentBlock(
            title=None,
            content="Log in with your username and password to continue playing.",
        )
    ]


def test_parse_normalizes_en_dash_headings() -> None:
    """En-dash page headings split into pages with their subtitles."""
    template = (
        "1. Casino – Play Now\n"
        "Welcome!\n"
        "✅ Fast payouts\n"
        "✅ Big bonuses\n"
        "\n"
        "2. Bonuses – Get More\n"
        "Claim yours today."
    )

    parsed = parse_content_by_pages(template, ["Casino", "Bonuses", "Login"])

    assert parsed is not None
    assert list(parsed) == ["Casino", "Bonuses"]
    assert "Login" not in parsed
    assert parsed["Casino"].subtitle == "Play Now"
    assert parsed["Bonuses"].subtitle == "Get More"
    assert parsed["Casino"].blocks == [
        ContentBlock(title=None, content="Fast payouts\nBig bonuses", kind="list")
    ]
    assert parsed["Bonuses"].blocks == [
        ContentBlock(title=None, content="Claim yours today.")
    ]


def test_parse_merges_headings_for_the_same_page() -> None:
    """Two headings resolving to one page concatenate blocks and raw text."""
    parsed = parse_content_by_pages(TEMPLATE, PAGES)
    assert parsed is not None

    casino = parsed["Casino"]
    assert casino.subtitle == "Spin the reels at the best casino in town"
    assert len(casino.blocks) == 2, f"expected merged blocks, got {casino.blocks}"
    assert casino.blocks[0] == ContentBlock(
        title="Hot Slots",
        content=(
            "Discover hundreds of slot machines with huge jackpots every day.\n"
            "Fast withdrawals\n"
            "Daily cashback"
        ),
        kind="list",
    )
    assert casino.blocks[1].content.startswith("More details about the casino")
    assert "\n\nMore details" in casino.raw_text


def test_extract_blocks_uses_heading_lines_as_titles() -> None:
    """Heuristic headings open a titled block."""
    blocks = extract_blocks(
        "Why Choose Our Casino?\n"
        "We pay out faster than anyone else in the business.\n"
        "Short\n"
        "Top Games To Play Tonight\n"
        "Slots, poker and live roulette tables all night long."
    )

    assert [block.title for block in blocks] == [
        "Why Choose Our Casino?",
        "Top Games To Play Tonight",
    ]
    assert all(block.kind == "paragraph" for block in blocks)


def test_extract_blocks_drops_tiny_untitled_blocks() -> None:
    """Untitled blocks need more than ten characters of content."""
    assert extract_blocks("tiny") == []


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("Why Choose Our Casino?", True),
        ("Fast Payouts - Every Time", True),
        ("Top Games To Play Tonight", True),
        ("This line ends with a period.", False),
        ("Wait.. what now", False),
        ("short", False),
        ("lowercase heading words", False),
        ("Slots, Poker and Roulette Games", False),
    ],
)
def test_is_heading_line(line: str, expected: bool) -> None:
    """The heading heuristic accepts short title-like lines only."""
    assert is_heading_line(line) is expected, f"{line!r} misclassified"


def test_hero_subtitle_prefers_parsed_subtitle() -> None:
    """A subtitle longer than 20 characters wins."""
    page = PageContent(
        subtitle="The friendliest casino on the internet", blocks=[], raw_text=""
    )
    assert hero_subtitle(page, "Lucky", "Casino") == page.subtitle


def test_hero_subtitle_falls_back_to_first_sentence() -> None:
    """The first sentence of the first block is used when long enough."""
    page = PageContent(
        subtitle="Short",
        blocks=[
            ContentBlock(
                title=None,
                content="Our casino offers the fastest withdrawals online. More.",
            )
        ],
        raw_text="",
    )
    assert (
        hero_subtitle(page, "Lucky", "Casino")
        == "Our casino offers the fastest withdrawals online."
    )


def test_hero_subtitle_default_is_branded() -> None:
    """Without parsed content the subtitle names brand and page."""
    assert hero_subtitle(None, "Lucky", "Games") == (
        "Welcome to Lucky - discover the best Games experience. Play now!"
    )


def test_derive_title_strategies() -> None:
    """Titles come from the first sentence, then the first words."""
    assert derive_title("Play the best slots today. More text") == (
        "Play the best slots today."
    )
    assert derive_title("word " * 20) == (
        "word word word word word word word word..."
    )
    assert derive_title("   ") == "More Info"


def test_require_content_raises_when_nothing_parses() -> None:
    """The strict variant raises instead of returning ``None``."""
    with pytest.raises(ContentParseError):
        require_content("no headings", PAGES)
