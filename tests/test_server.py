"""HTTP tests for the generation service."""

from __future__ import annotations

import asyncio
import base64
import json
import typing as typ

import pytest
from fastapi.testclient import TestClient

from brandsite.build import BuildError, BuildRunner
from brandsite.config import ServiceSettings
from brandsite.generator.models import ProjectArchive
from brandsite.jobs import JobOrchestrator, JobStore
from brandsite.server import create_app

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from brandsite.config import ProjectConfig

ARCHIVE = ProjectArchive(data=b"PK-project", project_name="lucky-star")
REQUEST = {
    "brand": "Lucky Star",
    "domain": "lucky.example",
    "pages": ["Casino", "Games"],
    "offerUrl": "https://lucky.example/join",
    "colorScheme": "neon",
}
TEMPLATE = (
    "1. Casino - The friendliest casino on the whole internet\n"
    "🔥 Jackpot Nights\n"
    "Every Friday the progressive jackpot pool doubles for members.\n"
    "2. Games - Hundreds of titles\n"
    "Slots, roulette and blackjack from the best studios.\n"
)


class RecordingGenerator:
    """Generator stand-in that records configs and emits two steps."""

    def __init__(self, *, error: Exception | None = None, hang: bool = False) -> None:
        self.configs: list[ProjectConfig] = []
        self.error = error
        self.hang = hang

    async def generate(
        self,
        config: ProjectConfig,
        emit: cabc.Callable[[int, int, str], None] | None = None,
    ) -> ProjectArchive:
        self.configs.append(config)
        if emit is not None:
            emit(1, 2, "Creating project structure...")
        if self.hang:
            await asyncio.sleep(3600)
        await asyncio.sleep(0)
        if emit is not None:
            emit(2, 2, "Assembling React components...")
        if self.error is not None:
            raise self.error
        return ARCHIVE


class StubBuildRunner(BuildRunner):
    """Build runner that skips npm and returns a canned archive."""

    def __init__(self, error: BuildError | None = None) -> None:
        super().__init__(timeout=1)
        self.error = error
        self.built: list[ProjectArchive] = []

    async def build(self, archive: ProjectArchive) -> ProjectArchive:
        self.built.append(archive)
        if self.error is not None:
            raise self.error
        return ProjectArchive(b"PK-dist", f"{archive.project_name}-build")


def _client(
    generator: RecordingGenerator | None = None,
    build_runner: BuildRunner | None = None,
) -> TestClient:
    store = JobStore(retention=60)
    orchestrator = JobOrchestrator(store, generator or RecordingGenerator())
    app = create_app(
        settings=ServiceSettings(),
        store=store,
        orchestrator=orchestrator,
        build_runner=build_runner or StubBuildRunner(),
    )
    return TestClient(app)


def _events(body: str) -> list[dict[str, typ.Any]]:
    return [
        json.loads(chunk.removeprefix("data: "))
        for chunk in body.split("\n\n")
        if chunk.startswith("data: ")
    ]


def _start_and_finish(client: TestClient, body: dict[str, typ.Any]) -> str:
    response = client.post("/api/generate", json=body)
    assert response.status_code == 200, response.text
    job_id = response.json()["jobId"]
    stream = client.get(f"/api/progress/{job_id}")
    assert _events(stream.text)[-1]["type"] in {"complete", "error"}
    return job_id


def test_generate_runs_job_to_completion() -> None:
    """A valid request starts a job whose stream ends with ``complete``."""
    generator = RecordingGenerator()
    with _client(generator) as client:
        job_id = _start_and_finish(client, REQUEST)
        status = client.get(f"/api/jobs/{job_id}").json()

    assert status["status"] == "complete"
    assert status["projectName"] == "lucky-star"
    config = generator.configs[0]
    assert config.pages == ["Casino", "Games"]
    assert config.offer_url == "https://lucky.example/join"
    assert config.color_scheme == "neon"


def test_generate_accepts_logo_objects_and_meta() -> None:
    """Logos may be sent as ``{base64, name}`` objects; meta is passed through."""
    data_url = "data:image/png;base64," + base64.b64encode(b"png").decode()
    generator = RecordingGenerator()
    body = {
        **REQUEST,
        "logoData": {"base64": data_url, "name": "logo.png"},
        "meta": {"title": "{{page}} | {{brand}}", "description": "Play now"},
        "contentTemplate": TEMPLATE,
    }
    with _client(generator) as client:
        _start_and_finish(client, body)

    config = generator.configs[0]
    assert config.logo is not None
    assert config.logo.data == b"png"
    assert config.logo.filename == "logo.png"
    assert config.meta.is_complete
    assert config.content_template == TEMPLATE


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({"domain": "x.example", "pages": ["Casino"]}, "'brand' is required"),
        ({"brand": "X", "domain": "x.example", "pages": []}, "At least one page"),
        ({"brand": "X", "domain": "x.example", "pages": "Casino"}, "Invalid request"),
        (
            {"brand": "X", "domain": "x.example", "pages": ["A"], "logoData": "nope"},
            "data URL",
        ),
    ],
    ids=["missing-brand", "no-pages", "wrong-type", "bad-logo"],
)
def test_generate_rejects_invalid_requests(
    body: dict[str, typ.Any], message: str
) -> None:
    """Validation failures are 400s and never create a job."""
    generator = RecordingGenerator()
    with _client(generator) as client:
        response = client.post("/api/generate", json=body)

    assert response.status_code == 400
    assert message in response.json()["error"]
    assert generator.configs == []


def test_generate_rejects_malformed_json() -> None:
    """A body that is not JSON is a 400."""
    with _client() as client:
        response = client.post(
            "/api/generate",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request body")


def test_failed_job_streams_error_event() -> None:
    """Generator failures reach subscribers and the status endpoint."""
    generator = RecordingGenerator(error=RuntimeError("image service down"))
    with _client(generator) as client:
        job_id = client.post("/api/generate", json=REQUEST).json()["jobId"]
        stream = client.get(f"/api/progress/{job_id}")
        status = client.get(f"/api/jobs/{job_id}").json()
        download = client.get(f"/api/download/{job_id}")

    assert stream.headers["content-type"].startswith("text/event-stream")
    assert stream.headers["cache-control"] == "no-cache"
    assert _events(stream.text)[-1] == {"type": "error", "data": "image service down"}
    assert status["status"] == "error"
    assert status["error"] == "image service down"
    assert download.status_code == 400


def test_progress_stream_events_are_well_formed() -> None:
    """Every event is tagged and the last one is terminal."""
    with _client() as client:
        job_id = client.post("/api/generate", json=REQUEST).json()["jobId"]
        events = _events(client.get(f"/api/progress/{job_id}").text)

    assert events[-1] == {"type": "complete"}
    for event in events[:-1]:
        assert event["type"] == "progress"
        assert set(event["data"]) == {"step", "total", "message"}


def test_download_returns_project_zip() -> None:
    """Finished jobs download as ``<project>-project.zip``."""
    with _client() as client:
        job_id = _start_and_finish(client, REQUEST)
        response = client.get(f"/api/download/{job_id}")

    assert response.status_code == 200
    assert response.content == ARCHIVE.data
    assert response.headers["content-type"] == "application/zip"
    assert response.headers["content-disposition"] == (
        'attachment; filename="lucky-star-project.zip"'
    )


def test_download_before_completion_is_rejected() -> None:
    """Downloads of a running job are refused."""
    with _client(RecordingGenerator(hang=True)) as client:
        job_id = client.post("/api/generate", json=REQUEST).json()["jobId"]
        response = client.get(f"/api/download/{job_id}")
        build = client.get(f"/api/download-build/{job_id}")

    assert response.status_code == 400
    assert response.json() == {"error": "Job is not complete yet"}
    assert build.status_code == 400


@pytest.mark.parametrize(
    "path",
    [
        "/api/jobs/{id}",
        "/api/progress/{id}",
        "/api/download/{id}",
        "/api/download-build/{id}",
    ],
)
def test_unknown_jobs_are_404(path: str) -> None:
    """Every job route answers 404 for unknown ids."""
    with _client() as client:
        response = client.get(path.format(id="missing"))
    assert response.status_code == 404
    assert response.json() == {"error": "Job not found"}


def test_download_build_returns_built_archive() -> None:
    """The build route runs the builder on the stored archive."""
    runner = StubBuildRunner()
    with _client(build_runner=runner) as client:
        job_id = _start_and_finish(client, REQUEST)
        response = client.get(f"/api/download-build/{job_id}")

    assert response.status_code == 200
    assert response.content == b"PK-dist"
    assert response.headers["content-disposition"] == (
        'attachment; filename="lucky-star-build.zip"'
    )
    assert runner.built == [ARCHIVE]


def test_download_build_failure_is_500() -> None:
    """Build failures are reported as a JSON 500."""
    runner = StubBuildRunner(BuildError("npm install failed: ERESOLVE"))
    with _client(build_runner=runner) as client:
        job_id = _start_and_finish(client, REQUEST)
        response = client.get(f"/api/download-build/{job_id}")

    assert response.status_code == 500
    assert response.json() == {"error": "npm install failed: ERESOLVE"}


def test_parse_content_previews_sections() -> None:
    """Templates are split into pages with assembled sections."""
    with _client() as client:
        response = client.post(
            "/api/parse-content",
            json={"content": TEMPLATE, "pages": ["Casino", "Games"]},
        )

    assert response.status_code == 200
    pages = response.json()["pages"]
    assert set(pages) == {"Casino", "Games"}
    assert pages["Casino"]["subtitle"] == (
        "The friendliest casino on the whole internet"
    )
    assert pages["Casino"]["sections"][0] == {
        "title": "Jackpot Nights",
        "content": "Every Friday the progressive jackpot pool doubles for members.",
        "hasCTA": True,
        "kind": "paragraph",
    }


@pytest.mark.parametrize(
    ("body", "status"),
    [
        ({"content": "no headings here", "pages": ["Casino"]}, 422),
        ({"content": TEMPLATE, "pages": ["  "]}, 400),
        ({"content": TEMPLATE}, 400),
    ],
    ids=["nothing-parsed", "blank-pages", "missing-pages"],
)
def test_parse_content_errors(body: dict[str, typ.Any], status: int) -> None:
    """Unparseable templates are 422; invalid requests are 400."""
    with _client() as client:
        response = client.post("/api/parse-content", json=body)
    assert response.status_code == status
    assert "error" in response.json()


def test_cors_allows_any_origin() -> None:
    """Browsers on other origins may call the API."""
    with _client() as client:
        response = client.options(
            "/api/generate",
            headers={
                "Origin": "https://studio.example",
                "Access-Control-Request-Method": "POST",
            },
        )
    assert response.headers["access-control-allow-origin"] in {
        "*",
        "https://studio.example",
    }
