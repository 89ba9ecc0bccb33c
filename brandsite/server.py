"""FastAPI service exposing generation jobs, progress streams and downloads.

Routes
------
``POST /api/generate``
    Validate a brand request and start a background job.
``POST /api/parse-content``
    Preview how a content template splits into pages and sections.
``GET /api/jobs/{job_id}``
    Current job status.
``GET /api/progress/{job_id}``
    Server-Sent Events stream of progress, ending with the terminal event.
``GET /api/download/{job_id}``
    The generated project ZIP.
``GET /api/download-build/{job_id}``
    The project built with npm, zipped.

Every failure is answered with a JSON ``{"error": ...}`` body.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import typing as typ

import msgspec
import msgspec.json as msgspec_json
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse

from ._constants import PROJECT_ARCHIVE_TEMPLATE
from .build import BuildError, BuildRunner
from .config import ProjectConfigError, ServiceSettings, build_project_config
from .content_parser import ContentParseError, require_content
from .generator.project import ProjectGenerator
from .jobs import (
    GenerationJob,
    JobOrchestrator,
    JobStateError,
    JobStatus,
    JobStore,
    encode_event,
    is_terminal_event,
)
from .sections import assemble_sections

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .generator.models import ProjectArchive

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
SSE_HEADERS: typ.Final[dict[str, str]] = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def configure_logging(level: int | str = logging.INFO) -> None:
    """Send log records to stderr with timestamps."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


class JobNotFoundError(LookupError):
    """Raised when a job id is unknown or has expired."""


class JobNotReadyError(RuntimeError):
    """Raised when a download is requested before the job completed."""


class LogoPayload(msgspec.Struct):
    """Logo sent as an object with the data URL and the original file name."""

    base64: str
    name: str | None = None


class MetaFields(msgspec.Struct):
    """Meta tag templates as sent by the client."""

    title: str = ""
    description: str = ""
    keywords: str = ""


class GenerateRequest(msgspec.Struct, rename="camel"):
    """Body of ``POST /api/generate``."""

    brand: str = ""
    domain: str = ""
    pages: list[str] = msgspec.field(default_factory=list)
    content_template: str | None = None
    logo_data: str | LogoPayload | None = None
    meta: MetaFields | None = None
    offer_url: str = ""
    image_style: str = ""
    color_scheme: str = ""

    def to_mapping(self) -> dict[str, typ.Any]:
        """Return the snake_case mapping understood by the config loader."""
        logo = self.logo_data
        return {
            "brand": self.brand,
            "domain": self.domain,
            "pages": self.pages,
            "content": self.content_template,
            "logo_data": logo.base64 if isinstance(logo, LogoPayload) else logo,
            "logo_name": logo.name if isinstance(logo, LogoPayload) else None,
            "meta": msgspec.to_builtins(self.meta) if self.meta else None,
            "offer_url": self.offer_url,
            "image_style": self.image_style,
            "color_scheme": self.color_scheme,
        }


class ParseContentRequest(msgspec.Struct):
    """Body of ``POST /api/parse-content``."""

    content: str
    pages: list[str]


def _decode(body: bytes, kind: type[typ.Any]) -> typ.Any:
    try:
        return msgspec_json.decode(body, type=kind)
    except msgspec.DecodeError as exc:
        msg = f"Invalid request body: {exc}"
        raise ProjectConfigError(msg) from exc


def _error_handler(
    status_code: int, *, log_level: int = logging.INFO
) -> cabc.Callable[[Request, Exception], cabc.Awaitable[JSONResponse]]:
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.log(
            log_level,
            "%s %s -> %d: %s",
            request.method,
            request.url.path,
            status_code,
            exc,
        )
        return JSONResponse({"error": str(exc)}, status_code=status_code)

    return handler


def _zip_response(data: bytes, filename: str) -> Response:
    return Response(
        content=data,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


async def _event_stream(job: GenerationJob) -> cabc.AsyncIterator[bytes]:
    queue = job.subscribe()
    try:
        while True:
            event = await queue.get()
            yield b"data: " + encode_event(event) + b"\n\n"
            if is_terminal_event(event):
                break
    finally:
        job.unsubscribe(queue)


def create_app(
    *,
    settings: ServiceSettings | None = None,
    store: JobStore | None = None,
    orchestrator: JobOrchestrator | None = None,
    build_runner: BuildRunner | None = None,
) -> FastAPI:
    """Assemble the FastAPI application.

    Parameters
    ----------
    settings : ServiceSettings, optional
        Service configuration; read from the environment when omitted.
    store : JobStore, optional
        Job registry. Defaults to one using ``settings.job_retention``.
    orchestrator : JobOrchestrator, optional
        Job runner. Defaults to one wrapping a generator built from
        ``settings``.
    build_runner : BuildRunner, optional
        npm build runner. Defaults to one using ``settings.build_timeout``.

    Returns
    -------
    FastAPI
        Application whose lifespan runs the expired-job reaper.
    """
    settings = settings or ServiceSettings.from_env()
    store = store or JobStore(retention=settings.job_retention)
    orchestrator = orchestrator or JobOrchestrator(
        store, ProjectGenerator.from_settings(settings)
    )
    build_runner = build_runner or BuildRunner(timeout=settings.build_timeout)

    @contextlib.asynccontextmanager
    async def lifespan(_app: FastAPI) -> cabc.AsyncIterator[None]:
        reaper = asyncio.create_task(store.run_reaper(settings.reaper_interval))
        logger.info("brandsite service ready")
        try:
            yield
        finally:
            reaper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reaper
            await orchestrator.aclose()

    app = FastAPI(title="brandsite", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.orchestrator = orchestrator
    app.state.build_runner = build_runner

    app.add_middleware(
        CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]
    )
    app.add_exception_handler(ProjectConfigError, _error_handler(400))
    app.add_exception_handler(ContentParseError, _error_handler(422))
    app.add_exception_handler(JobNotFoundError, _error_handler(404))
    app.add_exception_handler(JobNotReadyError, _error_handler(400))
    app.add_exception_handler(
        BuildError, _error_handler(500, log_level=logging.ERROR)
    )
    app.add_exception_handler(
        JobStateError, _error_handler(409, log_level=logging.ERROR)
    )

    async def lookup(job_id: str) -> GenerationJob:
        job = await store.get(job_id)
        if job is None:
            msg = "Job not found"
            raise JobNotFoundError(msg)
        return job

    async def finished_archive(job_id: str) -> ProjectArchive:
        job = await lookup(job_id)
        if job.status is not JobStatus.COMPLETE or job.result is None:
            msg = "Job is not complete yet"
            raise JobNotReadyError(msg)
        return job.result

    @app.post("/api/generate")
    async def generate(request: Request) -> dict[str, str]:
        payload = _decode(await request.body(), GenerateRequest)
        config = build_project_config(payload.to_mapping())
        job = await orchestrator.start(config)
        return {"jobId": job.id}

    @app.post("/api/parse-content")
    async def parse_content(request: Request) -> dict[str, typ.Any]:
        payload = _decode(await request.body(), ParseContentRequest)
        if not [page for page in payload.pages if page.strip()]:
            msg = "At least one page is required."
            raise ProjectConfigError(msg)
        parsed = require_content(payload.content, payload.pages)
        return {
            "pages": {
                page: {
                    "subtitle": content.subtitle,
                    "sections": [
                        {
                            "title": section.title,
                            "content": section.content,
                            "hasCTA": section.has_cta,
                            "kind": section.kind,
                        }
                        for section in assemble_sections(content.blocks)
                    ],
                }
                for page, content in parsed.items()
            }
        }

    @app.get("/api/jobs/{job_id}")
    async def job_status(job_id: str) -> dict[str, typ.Any]:
        return (await lookup(job_id)).snapshot()

    @app.get("/api/progress/{job_id}")
    async def progress(job_id: str) -> StreamingResponse:
        job = await lookup(job_id)
        return StreamingResponse(
            _event_stream(job), media_type="text/event-stream", headers=SSE_HEADERS
        )

    @app.get("/api/download/{job_id}")
    async def download(job_id: str) -> Response:
        archive = await finished_archive(job_id)
        filename = PROJECT_ARCHIVE_TEMPLATE.format(project=archive.project_name)
        return _zip_response(archive.data, filename)

    @app.get("/api/download-build/{job_id}")
    async def download_build(job_id: str) -> Response:
        built = await build_runner.build(await finished_archive(job_id))
        return _zip_response(built.data, f"{built.project_name}.zip")

    return app


__all__ = [
    "GenerateRequest",
    "JobNotFoundError",
    "JobNotReadyError",
    "ParseContentRequest",
    "configure_logging",
    "create_app",
]
