"""Hero image generation against a Pollinations-style image endpoint.

Each page gets one landscape hero image. Prompts are casino themed, keyed by
page name with a generic fallback, and tinted by the configured image style.
Failures are retried with an increasing delay; once the attempts are spent
the page simply goes without an image.

Examples
--------
>>> from brandsite.images import ImageGenerationClient
>>> client = ImageGenerationClient(api_key="sk-example")  # doctest: +SKIP
>>> image = client.generate("Bonuses", "Lucky Star", "modern")  # doctest: +SKIP
>>> image.filename  # doctest: +SKIP
'bonuses-hero.jpg'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import random
import typing as typ
from http import HTTPStatus
from urllib.parse import quote

import requests
from tenacity import wait_incrementing

from .config.settings import DEFAULT_IMAGE_API
from .http_client import CollaboratorError, auth_headers, build_session, retrying
from .seo import hero_image_name, page_key

if typ.TYPE_CHECKING:
    from tenacity.wait import wait_base

logger = logging.getLogger(__name__)

IMAGE_MODEL = "klein"
FULL_SIZE = (1200, 630)
REDUCED_SIZE = (800, 420)
MAX_IMAGE_BYTES = 500 * 1024
MAX_SEED = 999_999

PAGE_PROMPTS: typ.Final[dict[str, str]] = {
    "home": (
        "luxurious casino interior with golden chandeliers, slot machines, "
        "neon lights, vibrant atmosphere, Las Vegas style"
    ),
    "about": (
        "elegant casino lobby with red carpet, golden accents, professional "
        "staff, premium gaming floor"
    ),
    "games": (
        "colorful slot machines and roulette tables, casino gaming floor, "
        "bright lights, excitement"
    ),
    "bonuses": (
        "golden coins and casino chips scattered, bonus jackpot concept, "
        "celebratory confetti"
    ),
    "promotions": (
        "festive casino promotion banner, special offer concept, golden and "
        "red colors"
    ),
    "contact": (
        "modern casino customer support, friendly atmosphere, professional "
        "service desk"
    ),
    "faq": "casino information desk, helpful staff, bright welcoming environment",
    "blog": "casino lifestyle, entertainment and gaming concept, vibrant colors",
    "slots": "colorful slot machine reels, jackpot symbols, bright casino lights",
    "live": "live casino table with dealer, cards and chips, professional gaming",
}
STYLE_PROMPTS: typ.Final[dict[str, str]] = {
    "business": "elegant casino photography, premium luxury, professional",
    "modern": "modern casino design, sleek neon, contemporary gaming",
    "creative": "vibrant artistic casino, bold colors, dynamic composition",
    "nature": "organic casino aesthetic, warm golden tones",
    "minimalist": "clean casino design, refined luxury, minimal clutter",
}


@dc.dataclass(slots=True)
class GeneratedImage:
    """Image bytes ready to be written under ``public/images``."""

    filename: str
    data: bytes
    content_type: str = "image/jpeg"

    @property
    def size(self) -> int:
        """Return the payload size in bytes."""
        return len(self.data)


def image_prompt(page: str, brand: str, style: str) -> str:
    """Return the generation prompt for ``page``."""
    key = page_key(page)
    base = PAGE_PROMPTS.get(key) or (
        f"luxurious casino {key} concept, golden accents, neon lights, "
        f"vibrant gaming atmosphere, {brand}"
    )
    style_text = STYLE_PROMPTS.get(style) or STYLE_PROMPTS["modern"]
    return f"{base}, {style_text}, photorealistic, high quality, no text, no watermark"


class ImageGenerationClient:
    """Request hero images and enforce the size ceiling."""

    def __init__(  # noqa: PLR0913 - transport knobs are independent
        self,
        *,
        api_key: str | None = None,
        api_base: str = DEFAULT_IMAGE_API,
        session: requests.Session | None = None,
        timeout: float = 120.0,
        attempts: int = 3,
        wait: wait_base | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Configure the endpoint, transport and retry policy.

        Parameters
        ----------
        api_key : str, optional
            Bearer token sent with every request.
        api_base : str, optional
            Image endpoint; the URL-encoded prompt is appended as a path
            segment.
        session : requests.Session, optional
            Session to reuse. Defaults to :func:`build_session`.
        timeout : float, optional
            Per-request timeout in seconds.
        attempts : int, optional
            Total attempts per image.
        wait : tenacity wait strategy, optional
            Delay between attempts. Defaults to 5s, then 10s.
        rng : random.Random, optional
            Source of the per-image generation seed.
        """
        self._api_key = api_key
        self._api_base = api_base.rstrip("/")
        self._session = session or build_session()
        self.timeout = timeout
        self.attempts = attempts
        self._wait = wait or wait_incrementing(start=5, increment=5)
        self._rng = rng or random.Random()  # noqa: S311 - not security sensitive

    def generate(self, page: str, brand: str, style: str) -> GeneratedImage | None:
        """Return a hero image for ``page`` or ``None`` once retries run out."""
        prompt = image_prompt(page, brand, style)
        seed = self._rng.randint(0, MAX_SEED)
        logger.info("Generating image for %r (seed %s)", page, seed)
        try:
            for attempt in retrying(self.attempts, self._wait, logger):
                with attempt:
                    data, content_type = self._fetch(prompt, seed, FULL_SIZE)
                    if len(data) > MAX_IMAGE_BYTES:
                        logger.info(
                            "Image for %r is %d KB, requesting a smaller one",
                            page,
                            len(data) // 1024,
                        )
                        data, content_type = self._fetch(prompt, seed, REDUCED_SIZE)
        except CollaboratorError as exc:
            logger.error("Image generation failed for %r: %s", page, exc)  # noqa: TRY400
            return None
        logger.info("Image ready for %r: %d KB", page, len(data) // 1024)
        return GeneratedImage(
            filename=hero_image_name(page), data=data, content_type=content_type
        )

    def _fetch(
        self, prompt: str, seed: int, size: tuple[int, int]
    ) -> tuple[bytes, str]:
        width, height = size
        url = f"{self._api_base}/{quote(prompt, safe='')}"
        params = {
            "model": IMAGE_MODEL,
            "width": str(width),
            "height": str(height),
            "seed": str(seed),
        }
        try:
            response = self._session.get(
                url,
                params=params,
                headers=auth_headers(self._api_key, Accept="image/*"),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            msg = f"Image request failed: {exc}"
            raise CollaboratorError(msg) from exc

        match response.status_code:
            case HTTPStatus.UNAUTHORIZED:
                msg = "Image API rejected the API key (401)."
                raise CollaboratorError(msg)
            case HTTPStatus.PAYMENT_REQUIRED:
                msg = "Image API balance exhausted (402)."
                raise CollaboratorError(msg)
            case status if status >= HTTPStatus.BAD_REQUEST:
                msg = f"Image API error {status}: {response.text[:300]}"
                raise CollaboratorError(msg)

        content_type = response.headers.get("Content-Type", "")
        if "image" not in content_type:
            msg = f"Expected an image, got {content_type or 'no content type'}."
            raise CollaboratorError(msg)
        return response.content, content_type.split(";", 1)[0].strip()


__all__ = [
    "PAGE_PROMPTS",
    "STYLE_PROMPTS",
    "GeneratedImage",
    "ImageGenerationClient",
    "image_prompt",
]
