"""Process-level settings for the generation service, read from the environment."""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ
from pathlib import Path

from brandsite._constants import (
    BUILD_TIMEOUT_SECONDS,
    JOB_RETENTION_SECONDS,
    REAPER_INTERVAL_SECONDS,
)

from .models import ProjectConfigError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

DEFAULT_IMAGE_API = "https://gen.pollinations.ai/image"
DEFAULT_TEXT_API = "https://gen.pollinations.ai/v1/chat/completions"


@dc.dataclass(slots=True)
class ServiceSettings:
    """Runtime knobs shared by the CLI and the HTTP service.

    Attributes
    ----------
    api_key : str or None
        Bearer token for the image and text generation services.
    image_api : str
        Base URL of the image generation endpoint.
    text_api : str
        Chat-completions URL of the text generation endpoint.
    job_retention : float
        Seconds a finished or abandoned job stays in memory.
    reaper_interval : float
        Seconds between sweeps of expired jobs.
    build_timeout : float
        Wall-clock limit for ``npm install`` plus ``npm run build``.
    assets_dir : Path or None
        Directory holding optional ``games/`` and ``sports/`` image bundles.
    host, port : str, int
        Bind address for ``brandsite serve``.
    """

    api_key: str | None = None
    image_api: str = DEFAULT_IMAGE_API
    text_api: str = DEFAULT_TEXT_API
    job_retention: float = JOB_RETENTION_SECONDS
    reaper_interval: float = REAPER_INTERVAL_SECONDS
    build_timeout: float = BUILD_TIMEOUT_SECONDS
    assets_dir: Path | None = None
    host: str = "127.0.0.1"
    port: int = 3001

    @classmethod
    def from_env(
        cls, environ: cabc.Mapping[str, str] | None = None
    ) -> ServiceSettings:
        """Build settings from ``BRANDSITE_*`` variables.

        The API key falls back to ``POLLINATIONS_API_KEY`` and the port to
        ``PORT`` when the prefixed variables are unset.
        """
        env = os.environ if environ is None else environ
        assets = env.get("BRANDSITE_ASSETS_DIR")
        return cls(
            api_key=env.get("BRANDSITE_API_KEY") or env.get("POLLINATIONS_API_KEY"),
            image_api=env.get("BRANDSITE_IMAGE_API") or DEFAULT_IMAGE_API,
            text_api=env.get("BRANDSITE_TEXT_API") or DEFAULT_TEXT_API,
            job_retention=_float(env, "BRANDSITE_JOB_RETENTION", JOB_RETENTION_SECONDS),
            reaper_interval=_float(
                env, "BRANDSITE_REAPER_INTERVAL", REAPER_INTERVAL_SECONDS
            ),
            build_timeout=_float(env, "BRANDSITE_BUILD_TIMEOUT", BUILD_TIMEOUT_SECONDS),
            assets_dir=Path(assets) if assets else None,
            host=env.get("BRANDSITE_HOST") or "127.0.0.1",
            port=int(_float(env, "BRANDSITE_PORT", float(env.get("PORT") or 3001))),
        )


def _float(env: cabc.Mapping[str, str], key: str, default: float) -> float:
    value = env.get(key)
    if not value:
        return default
    try:
        return float(value)
    except ValueError as exc:
        msg = f"{key} must be numeric, got {value!r}."
        raise ProjectConfigError(msg) from exc


__all__ = ["DEFAULT_IMAGE_API", "DEFAULT_TEXT_API", "ServiceSettings"]
