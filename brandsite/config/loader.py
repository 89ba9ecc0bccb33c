"""Load brand site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from brandsite.seo import page_key, path_slug

from .helpers import (
    DEFAULT_COLOR_SCHEME,
    DEFAULT_IMAGE_STYLE,
    decode_data_url,
    read_logo_file,
)
from .models import LogoAsset, MetaTemplate, ProjectConfig, ProjectConfigError

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def load_project_config(path: Path) -> ProjectConfig:
    """Load the YAML file describing one brand site.

    Parameters
    ----------
    path : Path
        Filesystem path to the brand YAML file (for example, ``brand.yaml``).
        Relative ``content_file`` and ``logo`` entries resolve against the
        file's directory.

    Returns
    -------
    ProjectConfig
        Validated configuration ready for generation.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    ProjectConfigError
        If required fields are missing or invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from brandsite.config import load_project_config
    >>> config = load_project_config(Path("brand.yaml"))  # doctest: +SKIP
    >>> config.pages  # doctest: +SKIP
    ['Casino', 'Games', 'Bonuses']
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    return build_project_config(loaded, base_dir=path.parent)


def build_project_config(
    raw: cabc.Mapping[str, typ.Any], *, base_dir: Path | None = None
) -> ProjectConfig:
    """Validate a raw mapping and build a :class:`ProjectConfig`.

    ``raw`` uses snake_case keys: ``brand``, ``domain``, ``pages``,
    ``offer_url``, ``content`` or ``content_file``, ``logo`` (a path) or
    ``logo_data`` (a data URL), ``meta``, ``image_style`` and
    ``color_scheme``. The HTTP service and the YAML loader share this
    validation, so a bad request fails before any job exists.
    """
    brand = _require_text(raw, "brand")
    domain = _require_text(raw, "domain")
    pages = _build_pages(raw.get("pages"))

    return ProjectConfig(
        brand=brand,
        domain=domain,
        pages=pages,
        offer_url=_optional_text(raw, "offer_url") or "#",
        content_template=_build_content(raw, base_dir),
        logo=_build_logo(raw, base_dir),
        meta=_build_meta(raw.get("meta")),
        image_style=_optional_text(raw, "image_style") or DEFAULT_IMAGE_STYLE,
        color_scheme=_optional_text(raw, "color_scheme") or DEFAULT_COLOR_SCHEME,
    )


def _require_text(raw: cabc.Mapping[str, typ.Any], key: str) -> str:
    value = _optional_text(raw, key)
    if not value:
        msg = f"'{key}' is required."
        raise ProjectConfigError(msg)
    return value


def _optional_text(raw: cabc.Mapping[str, typ.Any], key: str) -> str | None:
    value = raw.get(key)
    match value:
        case None:
            return None
        case str():
            return value.strip() or None
        case int() | float():
            return str(value)
        case _:
            msg = f"'{key}' must be a string."
            raise ProjectConfigError(msg)


def _build_pages(value: object) -> list[str]:
    match value:
        case str():
            candidates = value.split(",")
        case list() | tuple():
            candidates = list(value)
        case None:
            candidates = []
        case _:
            msg = "'pages' must be a list of page names."
            raise ProjectConfigError(msg)

    pages: list[str] = []
    seen: set[str] = set()
    slugs: dict[str, str] = {}
    for candidate in candidates:
        if not isinstance(candidate, str | int):
            msg = "'pages' entries must be strings."
            raise ProjectConfigError(msg)
        name = str(candidate).strip()
        if not name:
            continue
        key = page_key(name)
        if key in seen:
            msg = f"Page '{name}' is declared more than once."
            raise ProjectConfigError(msg)
        slug = path_slug(name)
        if slug in slugs:
            msg = f"Pages '{slugs[slug]}' and '{name}' map to the same URL."
            raise ProjectConfigError(msg)
        seen.add(key)
        slugs[slug] = name
        pages.append(name)

    if not pages:
        msg = "At least one page is required."
        raise ProjectConfigError(msg)
    return pages


def _build_content(
    raw: cabc.Mapping[str, typ.Any], base_dir: Path | None
) -> str | None:
    content = raw.get("content")
    if content is not None and not isinstance(content, str):
        msg = "'content' must be a string."
        raise ProjectConfigError(msg)
    if content and content.strip():
        return content

    content_file = _optional_text(raw, "content_file")
    if content_file is None:
        return None
    path = _resolve(Path(content_file), base_dir)
    if not path.is_file():
        msg = f"Content file '{path}' not found."
        raise ProjectConfigError(msg)
    return path.read_text(encoding="utf-8")


def _build_logo(
    raw: cabc.Mapping[str, typ.Any], base_dir: Path | None
) -> LogoAsset | None:
    data_url = raw.get("logo_data")
    match data_url:
        case None | "":
            pass
        case str():
            return decode_data_url(data_url, filename=raw.get("logo_name"))
        case {"base64": str() as encoded, **rest}:
            return decode_data_url(encoded, filename=rest.get("name"))
        case _:
            msg = "'logo_data' must be a data URL."
            raise ProjectConfigError(msg)

    logo_path = _optional_text(raw, "logo")
    if logo_path is None:
        return None
    return read_logo_file(_resolve(Path(logo_path), base_dir))


def _build_meta(value: object) -> MetaTemplate:
    match value:
        case None:
            return MetaTemplate()
        case dict():
            return MetaTemplate(
                title=str(value.get("title") or ""),
                description=str(value.get("description") or ""),
                keywords=str(value.get("keywords") or ""),
            )
        case _:
            msg = "'meta' must be a mapping with title/description/keywords."
            raise ProjectConfigError(msg)


def _resolve(path: Path, base_dir: Path | None) -> Path:
    if path.is_absolute() or base_dir is None:
        return path
    return base_dir / path


__all__ = ["build_project_config", "load_project_config"]
