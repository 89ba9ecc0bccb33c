"""Common literal values used across brandsite.

These constants keep length ceilings, retention windows and archive naming in
one place so the pipeline, the HTTP service and the tests agree on them.
Intended for internal use within the brandsite package.

Examples
--------
>>> from brandsite import _constants
>>> _constants.PROJECT_ARCHIVE_TEMPLATE.format(project="lucky-star")
'lucky-star-project.zip'
>>> _constants.MAX_SECTION_LENGTH
220
"""

MAX_SECTION_LENGTH = 220
DEFAULT_TRUNCATE_LENGTH = 160

INDEX_PAGES = ("casino", "home")

DEFAULT_CTA_TEXT = "Play Now"
FALLBACK_PAGE = "Casino"

PROJECT_ARCHIVE_TEMPLATE = "{project}-project.zip"
HERO_IMAGE_TEMPLATE = "{slug}-hero.jpg"

JOB_RETENTION_SECONDS = 60 * 60
REAPER_INTERVAL_SECONDS = 10 * 60
BUILD_TIMEOUT_SECONDS = 300.0
