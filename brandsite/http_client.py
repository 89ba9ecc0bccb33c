"""Shared transport plumbing for the image and text generation clients."""

from __future__ import annotations

import logging
import typing as typ

import requests
from requests.adapters import HTTPAdapter
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)
from urllib3.util.retry import Retry

if typ.TYPE_CHECKING:
    from tenacity.wait import wait_base

USER_AGENT = "brandsite/0.1"


class CollaboratorError(RuntimeError):
    """Raised when an external generation service fails or answers garbage."""


def build_session() -> requests.Session:
    """Return a session that retries dropped connections at the transport level.

    Status-level retries are left to the callers, which wrap whole requests
    in :func:`retrying` so that malformed payloads are retried too.
    """
    session = requests.Session()
    retry = Retry(
        total=2,
        connect=2,
        read=0,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "POST"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def auth_headers(api_key: str | None, **extra: str) -> dict[str, str]:
    """Return request headers, adding a bearer token when ``api_key`` is set."""
    headers = {"User-Agent": USER_AGENT, **extra}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def retrying(attempts: int, wait: wait_base, logger: logging.Logger) -> Retrying:
    """Return a tenacity controller retrying :class:`CollaboratorError`.

    The last error is re-raised once ``attempts`` are used up.
    """
    return Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait,
        retry=retry_if_exception_type(CollaboratorError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


__all__ = [
    "USER_AGENT",
    "CollaboratorError",
    "auth_headers",
    "build_session",
    "retrying",
]
