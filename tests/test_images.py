"""Tests for the hero image client."""

from __future__ import annotations

import random
import typing as typ

import pytest
import requests
from tenacity import wait_none

from brandsite.images import (
    MAX_IMAGE_BYTES,
    PAGE_PROMPTS,
    ImageGenerationClient,
    image_prompt,
)

if typ.TYPE_CHECKING:
    from unittest.mock import Mock

    from pytest_mock import MockerFixture


def _response(
    mocker: MockerFixture,
    *,
    status: int = 200,
    content: bytes = b"\xff\xd8jpeg",
    content_type: str = "image/jpeg",
) -> Mock:
    response = mocker.Mock(spec=requests.Response)
    response.status_code = status
    response.content = content
    response.text = content.decode("latin-1")
    response.headers = {"Content-Type": content_type}
    return response


@pytest.fixture
def session(mocker: MockerFixture) -> Mock:
    """Provide a stand-in HTTP session."""
    return mocker.Mock(spec=requests.Session)


def _client(session: Mock, **kwargs: typ.Any) -> ImageGenerationClient:
    return ImageGenerationClient(
        api_key="sk-test",
        api_base="https://images.example/image/",
        session=session,
        wait=wait_none(),
        rng=random.Random(1),
        **kwargs,
    )


def test_generate_returns_hero_image(mocker: MockerFixture, session: Mock) -> None:
    """A successful response yields a named JPEG for the page."""
    session.get.return_value = _response(mocker, content_type="image/jpeg; q=1")

    image = _client(session).generate("Bonuses", "Lucky", "modern")

    assert image is not None
    assert image.filename == "bonuses-hero.jpg"
    assert image.content_type == "image/jpeg"
    url = session.get.call_args.args[0]
    kwargs = session.get.call_args.kwargs
    assert url.startswith("https://images.example/image/golden%20coins")
    assert kwargs["params"]["width"] == "1200"
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"


def test_generate_refetches_oversized_images(
    mocker: MockerFixture, session: Mock
) -> None:
    """Images above the size ceiling are requested again at a smaller size."""
    session.get.side_effect = [
        _response(mocker, content=b"x" * (MAX_IMAGE_BYTES + 1)),
        _response(mocker, content=b"small"),
    ]

    image = _client(session).generate("Games", "Lucky", "modern")

    assert image is not None
    assert image.data == b"small"
    sizes = [call.kwargs["params"]["width"] for call in session.get.call_args_list]
    assert sizes == ["1200", "800"]


def test_generate_retries_non_image_responses(
    mocker: MockerFixture, session: Mock
) -> None:
    """A non-image body counts as a failure and is retried."""
    session.get.side_effect = [
        _response(mocker, content=b"<html>", content_type="text/html"),
        _response(mocker),
    ]

    assert _client(session).generate("FAQ", "Lucky", "nature") is not None
    assert session.get.call_count == 2


@pytest.mark.parametrize("status", [401, 402, 500])
def test_generate_gives_up_after_attempts(
    mocker: MockerFixture, session: Mock, status: int
) -> None:
    """Persistent HTTP errors leave the page without an image."""
    session.get.return_value = _response(mocker, status=status, content=b"nope")

    assert _client(session, attempts=3).generate("Casino", "Lucky", "modern") is None
    assert session.get.call_count == 3


def test_generate_survives_transport_errors(session: Mock) -> None:
    """Connection failures are retried and then swallowed into ``None``."""
    session.get.side_effect = requests.ConnectionError("down")

    assert _client(session, attempts=2).generate("Casino", "Lucky", "modern") is None
    assert session.get.call_count == 2


def test_image_prompt_fallback_and_style() -> None:
    """Unknown pages get a generic prompt; unknown styles fall back to modern."""
    assert image_prompt("Games", "Lucky", "nature").startswith(PAGE_PROMPTS["games"])
    prompt = image_prompt("Tournaments", "Lucky", "plaid")
    assert "casino tournaments concept" in prompt
    assert "modern casino design" in prompt
    assert prompt.endswith("no text, no watermark")
