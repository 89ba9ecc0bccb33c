"""Build a generated project archive into a production bundle with npm.

The archive is unpacked into a temporary directory, ``npm install`` and
``npm run build`` run inside the project folder, and the resulting ``dist/``
tree is zipped. Both commands share one wall-clock budget; running over it
kills the active command together with every process it started. The
temporary directory is always removed.
"""

from __future__ import annotations

import asyncio
import io
import logging
import os
import shutil
import signal
import tempfile
import typing as typ
import zipfile
from pathlib import Path

from ._constants import BUILD_TIMEOUT_SECONDS
from .generator.models import ProjectArchive

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

_MAX_ERROR_OUTPUT = 2000


class BuildError(RuntimeError):
    """Raised when a project cannot be built."""


def archive_root(archive: zipfile.ZipFile) -> str:
    """Return the top-level folder of the first file entry in ``archive``."""
    for info in archive.infolist():
        if not info.is_dir():
            root = info.filename.split("/", 1)[0]
            if root:
                return root
    return "site"


def safe_extract(archive: zipfile.ZipFile, destination: Path) -> None:
    """Extract ``archive`` into ``destination``, refusing escaping paths.

    Raises
    ------
    BuildError
        If an entry would land outside ``destination``.
    """
    base = destination.resolve()
    for info in archive.infolist():
        target = (base / info.filename).resolve()
        if target != base and base not in target.parents:
            msg = f"Archive entry '{info.filename}' escapes the build directory."
            raise BuildError(msg)
    archive.extractall(base)


def zip_directory(directory: Path) -> bytes:
    """Return a ZIP of every file under ``directory``, paths relative to it."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as bundle:
        for path in sorted(directory.rglob("*")):
            if path.is_file():
                bundle.write(path, path.relative_to(directory).as_posix())
    return buffer.getvalue()


def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    """Kill ``process`` and every process in its group."""
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        logger.debug("Process group %d already exited", process.pid)

class BuildRunner:
    """Run the npm build for a project archive."""

    def __init__(
        self, *, timeout: float = BUILD_TIMEOUT_SECONDS, npm: str = "npm"
    ) -> None:
        """Configure the build.

        Parameters
        ----------
        timeout : float, optional
            Seconds allowed for ``npm install`` and ``npm run build`` together.
        npm : str, optional
            npm executable name or path, resolved through ``PATH``.
        """
        self.timeout = timeout
        self.npm = npm

    async def build(self, archive: ProjectArchive) -> ProjectArchive:
        """Build ``archive`` and return the zipped ``dist/`` folder.

        Raises
        ------
        BuildError
            If the archive is invalid, npm is missing, a command fails, or
            the time budget runs out.
        """
        with tempfile.TemporaryDirectory(prefix="brandsite-build-") as tmp:
            workdir, project = await asyncio.to_thread(
                self._extract, archive.data, Path(tmp)
            )
            npm = shutil.which(self.npm)
            if npm is None:
                msg = f"'{self.npm}' was not found on PATH."
                raise BuildError(msg)
            try:
                async with asyncio.timeout(self.timeout):
                    await self._run([npm, "install"], workdir)
                    await self._run([npm, "run", "build"], workdir)
            except TimeoutError as exc:
                msg = f"Build timed out after {self.timeout:g}s."
                raise BuildError(msg) from exc

            dist = workdir / "dist"
            if not dist.is_dir():
                msg = "Build finished but produced no dist folder."
                raise BuildError(msg)
            data = await asyncio.to_thread(zip_directory, dist)
        logger.info("Built %s (%d KB)", project, len(data) // 1024)
        return ProjectArchive(data=data, project_name=f"{project}-build")

    @staticmethod
    def _extract(data: bytes, tmp: Path) -> tuple[Path, str]:
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as bundle:
                project = archive_root(bundle)
                safe_extract(bundle, tmp)
        except zipfile.BadZipFile as exc:
            msg = f"Project archive is not a valid ZIP: {exc}"
            raise BuildError(msg) from exc
        workdir = tmp / project
        if not (workdir / "package.json").is_file():
            msg = "Invalid project: package.json not found."
            raise BuildError(msg)
        return workdir, project

    async def _run(self, args: cabc.Sequence[str], cwd: Path) -> None:
        command = " ".join([Path(args[0]).stem, *args[1:]])
        logger.info("Running %s in %s", command, cwd)
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as exc:
            msg = f"{command} could not start: {exc}"
            raise BuildError(msg) from exc
        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            # npm runs its scripts in child processes that share the pipes.
            _kill_process_group(process)
            await process.wait()
            raise
        if process.returncode != 0:
            output = (stderr or stdout).decode("utf-8", "replace").strip()
            msg = f"{command} failed: {output[-_MAX_ERROR_OUTPUT:] or 'unknown error'}"
            raise BuildError(msg)


__all__ = ["BuildError", "BuildRunner", "archive_root", "safe_extract", "zip_directory"]
