"""Behaviour tests for generating a brand site through the HTTP service.

These scenarios drive the FastAPI application end to end with the real
project generator and no image or text collaborators, so no network access
is needed. They cover a successful run followed through its progress stream
and download, content templates flowing into page modules, and request
validation.

Usage
-----
Run ``pytest tests/bdd/test_generate_project.py -v``.
"""

from __future__ import annotations

import io
import json
import random
import typing as typ
import zipfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pytest_bdd import given, parsers, scenarios, then, when

from brandsite.config import ServiceSettings
from brandsite.generator.project import ProjectGenerator
from brandsite.jobs import JobOrchestrator, JobStore
from brandsite.seo import component_name
from brandsite.server import create_app

if typ.TYPE_CHECKING:
    import collections.abc as cabc

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "generate_project.feature"
)
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]

CASINO_TEMPLATE = (
    "1. Casino - The friendliest casino on the whole internet\n"
    "🔥 Jackpot Nights\n"
    "Every Friday the progressive jackpot pool doubles for members.\n"
)


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps."""
    return {}


@pytest.fixture
def service() -> cabc.Iterator[TestClient]:
    """Run the service with an offline, seeded generator."""
    store = JobStore(retention=60)
    generator = ProjectGenerator(rng=random.Random(11))
    app = create_app(
        settings=ServiceSettings(),
        store=store,
        orchestrator=JobOrchestrator(store, generator),
    )
    with TestClient(app) as client:
        yield client


def _zip_names(data: bytes) -> set[str]:
    return set(zipfile.ZipFile(io.BytesIO(data)).namelist())


@given("a generation service without AI collaborators")
def given_service(service: TestClient, scenario_state: ScenarioState) -> None:
    """Record the client used by later steps."""
    scenario_state["client"] = service


@given(parsers.parse('a content template for the "{page}" page'))
def given_template(page: str, scenario_state: ScenarioState) -> None:
    """Attach a content template whose only heading is ``page``."""
    assert page == "Casino"
    scenario_state["content"] = CASINO_TEMPLATE


@when(parsers.parse('I request a site for "{brand}" with pages "{pages}"'))
def request_site(brand: str, pages: str, scenario_state: ScenarioState) -> None:
    """Post a generation request and keep the job id."""
    client: TestClient = scenario_state["client"]
    page_list = [page.strip() for page in pages.split(",")]
    body: dict[str, typ.Any] = {
        "brand": brand,
        "domain": "lucky.example",
        "pages": page_list,
    }
    if "content" in scenario_state:
        body["contentTemplate"] = scenario_state["content"]
    response = client.post("/api/generate", json=body)
    assert response.status_code == 200, response.text
    scenario_state["pages"] = page_list
    scenario_state["job_id"] = response.json()["jobId"]


@when(parsers.parse('I request a site for "{brand}" with no pages'))
def request_site_without_pages(brand: str, scenario_state: ScenarioState) -> None:
    """Post a request that must fail validation."""
    client: TestClient = scenario_state["client"]
    scenario_state["response"] = client.post(
        "/api/generate", json={"brand": brand, "domain": "lucky.example", "pages": []}
    )


@when("I follow the progress stream to the end")
def follow_stream(scenario_state: ScenarioState) -> None:
    """Read the Server-Sent Events stream until the service closes it."""
    client: TestClient = scenario_state["client"]
    response = client.get(f"/api/progress/{scenario_state['job_id']}")
    assert response.status_code == 200
    scenario_state["events"] = [
        json.loads(chunk.removeprefix("data: "))
        for chunk in response.text.split("\n\n")
        if chunk.startswith("data: ")
    ]


@then("the stream ends with a complete event")
def stream_completes(scenario_state: ScenarioState) -> None:
    """The final event of the stream is terminal and successful."""
    assert scenario_state["events"][-1] == {"type": "complete"}


@then(parsers.parse("the job reports step {step:d} of {total:d}"))
def job_progress(step: int, total: int, scenario_state: ScenarioState) -> None:
    """The job status carries the last progress snapshot."""
    client: TestClient = scenario_state["client"]
    status = client.get(f"/api/jobs/{scenario_state['job_id']}").json()
    assert status["status"] == "complete"
    assert (status["progress"]["step"], status["progress"]["total"]) == (step, total)


@then("the downloaded archive has a page module for every page")
def archive_has_pages(scenario_state: ScenarioState) -> None:
    """Each declared page becomes a component under ``src/pages``."""
    client: TestClient = scenario_state["client"]
    response = client.get(f"/api/download/{scenario_state['job_id']}")
    assert response.status_code == 200
    names = _zip_names(response.content)
    for page in scenario_state["pages"]:
        module = f"lucky-star/src/pages/{component_name(page)}.jsx"
        assert module in names, f"{module} missing from archive"


@then(parsers.parse('the "{page}" page module contains the template copy'))
def page_uses_template(page: str, scenario_state: ScenarioState) -> None:
    """Template sections appear in the generated page."""
    client: TestClient = scenario_state["client"]
    response = client.get(f"/api/download/{scenario_state['job_id']}")
    bundle = zipfile.ZipFile(io.BytesIO(response.content))
    source = bundle.read(f"lucky-star/src/pages/{component_name(page)}.jsx").decode()
    assert "The friendliest casino on the whole internet" in source
    assert "progressive jackpot pool doubles" in source


@then("the service answers 400 with an error message")
def answers_400(scenario_state: ScenarioState) -> None:
    """Validation failures are structured JSON errors."""
    response = scenario_state["response"]
    assert response.status_code == 400
    assert response.json() == {"error": "At least one page is required."}
