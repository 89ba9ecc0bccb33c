"""Page copy and meta tags from a chat-completions text endpoint.

The client asks the model for JSON, strips any code fences it wraps the
answer in and decodes the result with msgspec. Every public method has a
deterministic fallback, so a dead text service degrades copy quality but
never fails a generation job.
"""

from __future__ import annotations

import logging
import re
import typing as typ

import msgspec
import msgspec.json as msgspec_json
import requests
from tenacity import wait_fixed

from ._constants import DEFAULT_CTA_TEXT
from .config.settings import DEFAULT_TEXT_API
from .generator.models import PageCopy
from .http_client import CollaboratorError, auth_headers, build_session, retrying
from .sections import Section, extract_unique_title
from .seo import PageMeta, apply_placeholders

if typ.TYPE_CHECKING:
    from tenacity.wait import wait_base

    from .config import MetaTemplate

logger = logging.getLogger(__name__)

TEXT_MODEL = "openai"
MAX_TOKENS = 2000
_FENCE_PATTERN = re.compile(r"```(?:json)?\s*")
_JSON_HEADERS = {"Content-Type": "application/json"}

COPY_SYSTEM_PROMPT = (
    "You are a creative web content writer for online casino and gaming "
    "websites. Generate vibrant, exciting content in JSON format. Output ONLY "
    "valid JSON, no markdown, no code fences."
)
META_SYSTEM_PROMPT = (
    "You are an SEO expert. Generate meta tags. Output ONLY valid JSON, no "
    "markdown."
)


class ChatMessage(msgspec.Struct):
    """One chat turn."""

    role: str
    content: str


class ChatRequest(msgspec.Struct):
    """Chat-completions request body."""

    model: str
    messages: list[ChatMessage]
    temperature: float
    max_tokens: int = MAX_TOKENS


class _ReplyMessage(msgspec.Struct):
    content: str


class _Choice(msgspec.Struct):
    message: _ReplyMessage


class ChatResponse(msgspec.Struct):
    """The subset of a chat-completions response the client reads."""

    choices: list[_Choice]


class SectionPayload(msgspec.Struct):
    """A section as returned by the model."""

    title: str
    content: str
    has_cta: bool = msgspec.field(default=False, name="hasCTA")


class PageCopyPayload(msgspec.Struct, rename="camel"):
    """Page copy as returned by the model."""

    hero_title: str
    hero_subtitle: str
    sections: list[SectionPayload]
    cta_text: str = DEFAULT_CTA_TEXT


class MetaPayload(msgspec.Struct):
    """Meta tags as returned by the model."""

    title: str
    description: str
    keywords: str = ""


def strip_code_fences(raw: str) -> str:
    """Remove Markdown code fences wrapped around a JSON answer."""
    return _FENCE_PATTERN.sub("", raw).strip()


def copy_prompt(brand: str, domain: str, page: str, offer_url: str) -> str:
    """Return the user prompt requesting copy for one page."""
    return (
        f'Generate content for the "{page}" page of the "{brand}" online casino '
        f"website ({domain}).\n\n"
        "Return JSON with this exact structure:\n"
        '{"heroTitle": "main heading for the page", '
        '"heroSubtitle": "subtitle/description under the heading", '
        '"sections": [{"title": "section heading", '
        '"content": "2-3 sentences of content", "hasCTA": true}], '
        '"ctaText": "call to action button text"}\n\n'
        "Requirements:\n"
        "- heroTitle: catchy, exciting, casino/gaming themed, 5-10 words\n"
        "- heroSubtitle: compelling, inviting, 20-40 words\n"
        f'- Generate 5-6 sections relevant to "{page}"\n'
        "- Each section content: 2-4 sentences, engaging casino vocabulary\n"
        '- ctaText: action text like "Play Now" or "Claim Bonus" (2-4 words)\n'
        "- Tone: fun and colorful, not formal or corporate\n"
        f"- The CTA link is: {offer_url}"
    )


def placeholder_copy(brand: str, domain: str, page: str) -> PageCopy:
    """Return the built-in copy used when no other source is available."""
    entries = [
        (
            f"Play & Win at {brand}",
            f"{brand} offers thrilling slots, live casino, and exclusive "
            f"bonuses. Join thousands of winners at {domain}. Experience "
            "world-class entertainment 24/7.",
        ),
        (
            f"Why Players Love {brand}",
            f"Big jackpots, fast payouts, and 24/7 support. {brand} delivers "
            "non-stop excitement and rewards. Our platform is trusted by "
            "players worldwide.",
        ),
        (
            "Exclusive VIP Program",
            "Join our VIP program for personalized rewards, higher limits, and "
            "dedicated account managers. The more you play, the more you earn!",
        ),
        (
            "Lightning-Fast Payouts",
            "Withdraw your winnings in under 90 seconds via trusted payment "
            "methods. We support all major e-wallets, cards, and crypto "
            "payments.",
        ),
        (
            "Safe & Secure Gaming",
            "Your security is our top priority. We use industry-leading "
            "encryption and are fully licensed to ensure fair play at all "
            "times.",
        ),
        (
            "Claim Your Bonus Now",
            f"Ready to play? Visit {domain} and grab your welcome bonus. The "
            "next big win could be yours! Start spinning today.",
        ),
    ]
    last = len(entries) - 1
    return PageCopy(
        hero_title=f"Welcome to {brand} - {page}",
        hero_subtitle=(
            f"Spin the reels, hit the jackpot! {brand} brings you the best "
            "casino games, exclusive bonuses, and the ultimate gaming "
            f"experience at {domain}."
        ),
        sections=[
            Section(title=title, content=content, has_cta=index in (0, last))
            for index, (title, content) in enumerate(entries)
        ],
        cta_text=DEFAULT_CTA_TEXT,
    )


def fallback_meta(brand: str, domain: str, page: str) -> PageMeta:
    """Return deterministic meta tags for ``page``."""
    return PageMeta(
        title=f"{page} - {brand} | {domain}",
        description=f"{page} page of {brand}. Visit {domain} for more information.",
        keywords=f"{brand}, {page}, {domain}",
    )


def templated_meta(brand: str, domain: str, page: str, meta: MetaTemplate) -> PageMeta:
    """Return ``meta`` with its placeholders filled in for ``page``."""
    values = {"brand": brand, "domain": domain, "page": page}
    return PageMeta(
        title=apply_placeholders(meta.title, **values),
        description=apply_placeholders(meta.description, **values),
        keywords=apply_placeholders(meta.keywords, **values),
    )


def _sections_from_payload(payload: PageCopyPayload) -> list[Section]:
    used: set[str] = set()
    sections: list[Section] = []
    for entry in payload.sections:
        content = entry.content.strip()
        if not content:
            continue
        title = entry.title.strip()
        if not title or title in used:
            title = extract_unique_title(content, used)
        used.add(title)
        sections.append(Section(title=title, content=content))
    last = len(sections) - 1
    return [
        Section(title=s.title, content=s.content, has_cta=index in (0, last))
        for index, s in enumerate(sections)
    ]


class TextGenerationClient:
    """Generate page copy and meta tags with deterministic fallbacks."""

    def __init__(  # noqa: PLR0913 - transport knobs are independent
        self,
        *,
        api_key: str | None = None,
        api_url: str = DEFAULT_TEXT_API,
        session: requests.Session | None = None,
        timeout: float = 60.0,
        attempts: int = 3,
        wait: wait_base | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._session = session or build_session()
        self.timeout = timeout
        self.attempts = attempts
        self._wait = wait or wait_fixed(2)

    def complete(self, messages: list[ChatMessage], *, temperature: float) -> str:
        """Return the model's reply to ``messages``.

        Raises
        ------
        CollaboratorError
            When every attempt fails.
        """
        body = msgspec_json.encode(
            ChatRequest(model=TEXT_MODEL, messages=messages, temperature=temperature)
        )
        for attempt in retrying(self.attempts, self._wait, logger):
            with attempt:
                return self._post(body)
        msg = "Text generation made no attempts."  # pragma: no cover
        raise CollaboratorError(msg)  # pragma: no cover

    def _post(self, body: bytes) -> str:
        try:
            response = self._session.post(
                self._api_url,
                data=body,
                headers=auth_headers(self._api_key, **_JSON_HEADERS),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            msg = f"Text request failed: {exc}"
            raise CollaboratorError(msg) from exc
        try:
            reply = msgspec_json.decode(response.content, type=ChatResponse)
        except msgspec.DecodeError as exc:
            msg = f"Text API returned an unexpected payload: {exc}"
            raise CollaboratorError(msg) from exc
        if not reply.choices:
            msg = "Text API returned no choices."
            raise CollaboratorError(msg)
        return reply.choices[0].message.content

    def generate_page_copy(
        self, brand: str, domain: str, page: str, offer_url: str
    ) -> PageCopy:
        """Return model-written copy for ``page``, or the placeholder copy."""
        messages = [
            ChatMessage("system", COPY_SYSTEM_PROMPT),
            ChatMessage("user", copy_prompt(brand, domain, page, offer_url)),
        ]
        try:
            raw = self.complete(messages, temperature=0.7)
            payload = msgspec_json.decode(
                strip_code_fences(raw), type=PageCopyPayload
            )
        except (CollaboratorError, msgspec.DecodeError) as exc:
            logger.warning("Using placeholder copy for %r: %s", page, exc)
            return placeholder_copy(brand, domain, page)

        sections = _sections_from_payload(payload)
        if not sections:
            logger.warning("Model returned no sections for %r", page)
            return placeholder_copy(brand, domain, page)
        return PageCopy(
            hero_title=payload.hero_title.strip() or f"{page} - {brand}",
            hero_subtitle=payload.hero_subtitle.strip(),
            sections=sections,
            cta_text=payload.cta_text.strip() or DEFAULT_CTA_TEXT,
        )

    def generate_meta(
        self,
        brand: str,
        domain: str,
        page: str,
        meta: MetaTemplate,
        *,
        use_model: bool = True,
    ) -> PageMeta:
        """Return meta tags for ``page``.

        Complete templates win and have their placeholders substituted. The
        model is asked otherwise, and :func:`fallback_meta` covers failures or
        ``use_model=False``.
        """
        if meta.is_complete:
            return templated_meta(brand, domain, page, meta)
        if not use_model:
            return fallback_meta(brand, domain, page)

        messages = [
            ChatMessage("system", META_SYSTEM_PROMPT),
            ChatMessage(
                "user",
                f'Generate SEO meta tags for the "{page}" page of "{brand}" '
                f'({domain}). Return JSON: {{"title":"...","description":"...",'
                '"keywords":"..."}',
            ),
        ]
        try:
            raw = self.complete(messages, temperature=0.5)
            payload = msgspec_json.decode(strip_code_fences(raw), type=MetaPayload)
        except (CollaboratorError, msgspec.DecodeError) as exc:
            logger.warning("Using fallback meta for %r: %s", page, exc)
            return fallback_meta(brand, domain, page)
        if not payload.title.strip() or not payload.description.strip():
            return fallback_meta(brand, domain, page)
        return PageMeta(
            title=payload.title.strip(),
            description=payload.description.strip(),
            keywords=payload.keywords.strip(),
        )


__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "MetaPayload",
    "PageCopyPayload",
    "TextGenerationClient",
    "copy_prompt",
    "fallback_meta",
    "placeholder_copy",
    "strip_code_fences",
    "templated_meta",
]
