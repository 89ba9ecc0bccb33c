"""Render pages into React modules and package them as project archives.

:mod:`brandsite.generator.renderer` holds the per-layout page strategies and
the JSX serializer. :mod:`brandsite.generator.project` drives a whole
generation run and is imported from there directly.
"""

from .models import (
    PageBlock,
    PageCopy,
    PageDocument,
    PageSeo,
    ProjectArchive,
    StyleAssets,
)
from .renderer import PageRenderer, escape_jsx, truncate_text

__all__ = [
    "PageBlock",
    "PageCopy",
    "PageDocument",
    "PageRenderer",
    "PageSeo",
    "ProjectArchive",
    "StyleAssets",
    "escape_jsx",
    "truncate_text",
]
