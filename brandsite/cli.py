"""Cyclopts CLI entrypoint for generating and building brand sites.

The ``brandsite`` console script can generate a project ZIP offline from a
brand YAML file, preview how a content template splits into pages, build a
generated project with npm, and run the HTTP service.

Examples
--------
Generate a project without calling the image or text services:

>>> from brandsite.cli import app
>>> app(["generate", "--config", "brand.yaml", "--no-ai"])  # doctest: +SKIP

Preview a content template:

>>> app(
...     ["parse", "--content", "content.txt", "--page", "Casino", "--page", "App"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import asyncio
import random
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import PROJECT_ARCHIVE_TEMPLATE
from .build import BuildRunner
from .config import ServiceSettings, load_project_config
from .content_parser import require_content
from .generator.models import ProjectArchive
from .generator.project import ProjectGenerator
from .sections import assemble_sections

DEFAULT_CONFIG = Path("brand.yaml")

app = App(name="brandsite", config=cyclopts.config.Env("BRANDSITE_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _output_path(output: Path | None, filename: str) -> Path:
    if output is None:
        return Path(filename)
    if output.is_dir():
        return output / filename
    return output


@app.command(help="Generate a React/Vite project ZIP from a brand YAML file.")
def generate(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to brand config", env_var="BRANDSITE_CONFIG")
    ] = DEFAULT_CONFIG,
    output: typ.Annotated[
        Path | None,
        Parameter(help="ZIP path or folder to write into", env_var="BRANDSITE_OUTPUT"),
    ] = None,
    seed: typ.Annotated[
        int | None, Parameter(help="Seed for layout, font and animation picks")
    ] = None,
    ai: typ.Annotated[
        bool, Parameter(help="Call the image and text generation services")
    ] = True,
    require_parsed_content: typ.Annotated[
        bool,
        Parameter(
            name="--require-content",
            help="Fail when the content template yields no page sections",
        ),
    ] = False,
) -> None:
    """Generate the project archive described by ``config``.

    Parameters
    ----------
    config : Path, optional
        Brand YAML file (overridable via ``BRANDSITE_CONFIG``).
    output : Path or None, optional
        Destination ZIP, or a folder receiving ``<slug>-project.zip``.
        Defaults to the current directory.
    seed : int or None, optional
        Makes the archive reproducible when set.
    ai : bool, optional
        ``--no-ai`` skips the external services and uses placeholder copy,
        templated or default meta tags and no hero images.
    require_parsed_content : bool, optional
        Raise :class:`~brandsite.content_parser.ContentParseError` when the
        content template has no recognisable page headings.
    """
    project = load_project_config(config)
    if require_parsed_content:
        require_content(project.content_template, project.pages)

    generator = ProjectGenerator.from_settings(
        ServiceSettings.from_env(),
        use_ai=ai,
        rng=random.Random(seed) if seed is not None else None,  # noqa: S311
    )
    archive = asyncio.run(generator.generate(project))
    path = _output_path(
        output, PROJECT_ARCHIVE_TEMPLATE.format(project=archive.project_name)
    )
    path.write_bytes(archive.data)
    print(f"wrote {_format_path(path)}")


@app.command(help="Show how a content template splits into pages and sections.")
def parse(
    *,
    content: typ.Annotated[Path, Parameter(help="Content template text file")],
    page: typ.Annotated[
        list[str], Parameter(help="Declared page name; repeat for each page")
    ],
) -> None:
    """Print the parsed pages of ``content`` and their assembled sections."""
    parsed = require_content(content.read_text(encoding="utf-8"), page)
    for name, page_content in parsed.items():
        print(f"{name}: {page_content.subtitle}" if page_content.subtitle else name)
        for section in assemble_sections(page_content.blocks):
            marker = " [cta]" if section.has_cta else ""
            print(f"  - {section.title} ({section.kind}){marker}")


@app.command(help="Build a generated project ZIP with npm.")
def build(
    *,
    archive: typ.Annotated[Path, Parameter(help="Generated project ZIP")],
    output: typ.Annotated[
        Path | None, Parameter(help="ZIP path or folder to write into")
    ] = None,
    timeout: typ.Annotated[
        float | None,
        Parameter(help="Seconds allowed for npm install and npm run build"),
    ] = None,
) -> None:
    """Build ``archive`` and write the zipped ``dist/`` folder."""
    settings = ServiceSettings.from_env()
    runner = BuildRunner(timeout=timeout or settings.build_timeout)
    project = ProjectArchive(
        data=archive.read_bytes(),
        project_name=archive.stem.removesuffix("-project"),
    )
    built = asyncio.run(runner.build(project))
    path = _output_path(output, f"{built.project_name}.zip")
    path.write_bytes(built.data)
    print(f"wrote {_format_path(path)}")


@app.command(help="Run the HTTP generation service.")
def serve(
    *,
    host: typ.Annotated[str | None, Parameter(help="Bind address")] = None,
    port: typ.Annotated[int | None, Parameter(help="Bind port")] = None,
    log_level: typ.Annotated[str, Parameter(help="Logging level")] = "INFO",
) -> None:
    """Serve the API with uvicorn until interrupted."""
    import uvicorn

    from .server import configure_logging, create_app

    settings = ServiceSettings.from_env()
    configure_logging(log_level.upper())
    uvicorn.run(
        create_app(settings=settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level=log_level.lower(),
    )


def main() -> None:
    """Invoke the Cyclopts application that powers the ``brandsite`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
