"""Load and validate brand site configuration.

This subpackage turns a brand YAML file (for the CLI) or a decoded request
body (for the HTTP service) into a :class:`ProjectConfig`. Brand, domain and
at least one page are mandatory, page names must be unique, and logos arrive
either as a file path or as a base64 data URL. It also carries the colour,
font and animation tables the generated project draws from, plus the
environment-driven :class:`ServiceSettings`.

Examples
--------
>>> from pathlib import Path
>>> from brandsite.config import load_project_config
>>> config = load_project_config(Path("brand.yaml"))  # doctest: +SKIP
>>> config.brand  # doctest: +SKIP
'Lucky Star'
"""

from .helpers import (
    ANIMATION_SETS,
    COLOR_SCHEMES,
    FONT_SETS,
    IMAGE_STYLES,
    decode_data_url,
    logo_extension,
    resolve_palette,
    slugify_brand,
)
from .loader import build_project_config, load_project_config
from .models import (
    ColorPalette,
    FontSet,
    LogoAsset,
    MetaTemplate,
    ProjectConfig,
    ProjectConfigError,
)
from .settings import ServiceSettings

__all__ = [
    "ANIMATION_SETS",
    "COLOR_SCHEMES",
    "FONT_SETS",
    "IMAGE_STYLES",
    "ColorPalette",
    "FontSet",
    "LogoAsset",
    "MetaTemplate",
    "ProjectConfig",
    "ProjectConfigError",
    "ServiceSettings",
    "build_project_config",
    "decode_data_url",
    "load_project_config",
    "logo_extension",
    "resolve_palette",
    "slugify_brand",
]
