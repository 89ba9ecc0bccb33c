"""Lookup tables and small helpers shared by the configuration loader."""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
import typing as typ
from pathlib import Path

from .models import ColorPalette, FontSet, LogoAsset, ProjectConfigError

_LOGO_SUFFIX = re.compile(r"\.[a-z0-9]{1,5}")

DEFAULT_COLOR_SCHEME = "gold"
DEFAULT_IMAGE_STYLE = "modern"

COLOR_SCHEMES: typ.Final[dict[str, ColorPalette]] = {
    "gold": ColorPalette(primary="amber", accent="yellow"),
    "red": ColorPalette(primary="red", accent="rose"),
    "purple": ColorPalette(primary="purple", accent="violet"),
    "neon": ColorPalette(primary="emerald", accent="cyan"),
    "blue": ColorPalette(primary="blue", accent="indigo"),
    "orange": ColorPalette(primary="orange", accent="amber"),
}

_FONT_CSS = "https://fonts.googleapis.com/css2?family={query}&display=swap"

FONT_SETS: typ.Final[tuple[FontSet, ...]] = (
    FontSet(
        "Poppins",
        _FONT_CSS.format(query="Poppins:wght@400;600;700;800"),
        "'Poppins', sans-serif",
    ),
    FontSet(
        "Outfit",
        _FONT_CSS.format(query="Outfit:wght@400;600;700;800"),
        "'Outfit', sans-serif",
    ),
    FontSet(
        "Exo 2",
        _FONT_CSS.format(query="Exo+2:wght@400;600;700;800"),
        "'Exo 2', sans-serif",
    ),
    FontSet(
        "Raleway",
        _FONT_CSS.format(query="Raleway:wght@400;600;700;800"),
        "'Raleway', sans-serif",
    ),
    FontSet(
        "Oswald",
        _FONT_CSS.format(query="Oswald:wght@400;600;700"),
        "'Oswald', sans-serif",
    ),
    FontSet(
        "Bebas Neue",
        _FONT_CSS.format(query="Bebas+Neue&family=Inter:wght@400;600"),
        "'Bebas Neue', 'Inter', sans-serif",
    ),
)

ANIMATION_SETS: typ.Final[tuple[tuple[str, ...], ...]] = (
    ("float", "shimmer", "ticker"),
    ("slide-up", "pulse", "ticker"),
    ("bounce", "glow", "shimmer"),
    ("spin-slow", "float", "pulse"),
)

IMAGE_STYLES = ("business", "modern", "creative", "nature", "minimalist")

LOGO_EXTENSIONS: typ.Final[dict[str, str]] = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/svg+xml": ".svg",
    "image/webp": ".webp",
}

DATA_URL_PATTERN = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)
_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def resolve_palette(scheme: str | None) -> ColorPalette:
    """Return the palette for ``scheme``, falling back to gold."""
    return COLOR_SCHEMES.get((scheme or "").strip().lower()) or COLOR_SCHEMES[
        DEFAULT_COLOR_SCHEME
    ]


def slugify_brand(brand: str) -> str:
    """Return the archive folder name for ``brand``.

    >>> slugify_brand("Lucky Star Casino!")
    'lucky-star-casino'
    """
    slug = _SLUG_PATTERN.sub("-", brand.lower()).strip("-")
    return slug or "site"


def logo_extension(logo: LogoAsset) -> str:
    """Return the file extension used when writing ``logo`` to disk."""
    ext = LOGO_EXTENSIONS.get(logo.mime_type.lower())
    if ext:
        return ext
    suffix = Path(logo.filename or "").suffix.lower()
    if _LOGO_SUFFIX.fullmatch(suffix):
        return suffix
    return ".png"


def decode_data_url(value: str, *, filename: str | None = None) -> LogoAsset:
    """Decode a ``data:<mime>;base64,<payload>`` URL into a logo asset.

    Raises
    ------
    ProjectConfigError
        If the value is not a base64 data URL or the payload is corrupt.
    """
    match = DATA_URL_PATTERN.match(value.strip())
    if match is None:
        msg = "Logo must be a data URL of the form data:image/...;base64,..."
        raise ProjectConfigError(msg)
    mime_type, payload = match.groups()
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        msg = "Logo data URL does not contain valid base64."
        raise ProjectConfigError(msg) from exc
    return LogoAsset(data=data, mime_type=mime_type.lower(), filename=filename)


def read_logo_file(path: Path) -> LogoAsset:
    """Load a logo from disk, inferring its MIME type from the suffix."""
    if not path.is_file():
        msg = f"Logo file '{path}' not found."
        raise ProjectConfigError(msg)
    mime_type, _ = mimetypes.guess_type(path.name)
    return LogoAsset(
        data=path.read_bytes(),
        mime_type=mime_type or "image/png",
        filename=path.name,
    )


__all__ = [
    "ANIMATION_SETS",
    "COLOR_SCHEMES",
    "DEFAULT_COLOR_SCHEME",
    "DEFAULT_IMAGE_STYLE",
    "FONT_SETS",
    "IMAGE_STYLES",
    "LOGO_EXTENSIONS",
    "decode_data_url",
    "logo_extension",
    "read_logo_file",
    "resolve_palette",
    "slugify_brand",
]
