"""
Toolchain Service.

Runs the external .NET toolchain: a version query to validate the installed
SDK and the build of a staged workspace. Child output is drained from both
pipes while the process runs so a chatty build can never block on a full pipe.
"""

from __future__ import annotations

import asyncio
import contextlib
import re
import shutil
import time
from pathlib import Path

from ...core.config import Config, get_config
from ...core.exceptions import ProcessError, RedirectBuilderError, ToolNotFoundError, ValidationError
from ...core.logging import CHILD_OUTPUT_EVENT, get_logger
from ...core.types import ServiceResult
from ...models.build import CommandResult, ToolchainVersion

logger = get_logger(__name__)

_READ_SIZE = 64 * 1024
_VERSION_PATTERN = re.compile(r"^\s*v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")
_FAILURE_TAIL_LINES = 40


def parse_version(output: str) -> ToolchainVersion:
    """Parse the first version number printed by the toolchain.

    Raises:
        ValidationError: If no version can be found.
    """
    for line in output.splitlines():
        match = _VERSION_PATTERN.match(line)
        if match:
            major, minor, patch = match.groups()
            return ToolchainVersion(
                major=int(major),
                minor=int(minor or 0),
                patch=int(patch or 0),
                raw=line.strip(),
            )
    raise ValidationError(
        message=f"Unrecognised toolchain version output: {output.strip()[:200]!r}",
        field_name="toolchain_version",
    )


class _LineSplitter:
    """Splits a byte stream into lines without rescanning earlier chunks."""

    def __init__(self) -> None:
        self._partial: list[bytes] = []

    def feed(self, chunk: bytes) -> list[bytes]:
        """Add a chunk and return the lines it completes."""
        *complete, rest = chunk.split(b"\n")
        lines: list[bytes] = []
        if complete:
            self._partial.append(complete[0])
            lines.append(b"".join(self._partial))
            lines.extend(complete[1:])
            self._partial = []
        if rest:
            self._partial.append(rest)
        return lines

    def flush(self) -> bytes:
        """Return the unterminated tail, if any."""
        tail = b"".join(self._partial)
        self._partial = []
        return tail


async def _drain(stream: asyncio.StreamReader, stream_name: str) -> str:
    """Read a pipe to EOF, logging complete lines as they arrive."""
    chunks: list[bytes] = []
    splitter = _LineSplitter()
    while chunk := await stream.read(_READ_SIZE):
        chunks.append(chunk)
        for line in splitter.feed(chunk):
            _log_line(stream_name, line)
    tail = splitter.flush()
    if tail:
        _log_line(stream_name, tail)
    return b"".join(chunks).decode("utf-8", errors="replace")


def _log_line(stream_name: str, line: bytes) -> None:
    logger.debug(CHILD_OUTPUT_EVENT, stream=stream_name, line=line.decode("utf-8", errors="replace").rstrip())


async def run_command(cmd: list[str], cwd: Path | None = None) -> CommandResult:
    """Run a command, draining stdout and stderr concurrently with the exit wait.

    There is no timeout: a hung child hangs the caller. If the caller is
    cancelled or draining fails, the child is killed and reaped.

    Raises:
        FileNotFoundError: If the executable cannot be started.
    """
    logger.info("Running command", command=" ".join(cmd), cwd=str(cwd) if cwd else None)

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
    )

    try:
        stdout, stderr, returncode = await asyncio.gather(
            _drain(process.stdout, "stdout"),  # type: ignore[arg-type]
            _drain(process.stderr, "stderr"),  # type: ignore[arg-type]
            process.wait(),
        )
    finally:
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

    logger.info("Command completed", returncode=returncode)
    return CommandResult(command=cmd, returncode=returncode, stdout=stdout, stderr=stderr)


def _tail(text: str, lines: int = _FAILURE_TAIL_LINES) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])


class ToolchainInvoker:
    """Drives the external build toolchain."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or get_config()

    def _find_executable(self) -> str:
        executable = self.config.toolchain.executable
        resolved = shutil.which(executable)
        if resolved:
            return resolved
        if Path(executable).is_file():
            return executable
        raise ToolNotFoundError(
            message="executable is not on PATH",
            tool_name=executable,
            install_hint=f"Install the .NET SDK {self.config.toolchain.min_major_version} or newer",
        )

    async def check_toolchain_version(self) -> ServiceResult[ToolchainVersion]:
        """Query and validate the installed toolchain version.

        Returns:
            ServiceResult containing the ToolchainVersion, or a validation
            failure when the query fails, prints garbage or reports a major
            version below the supported minimum.
        """
        toolchain = self.config.toolchain
        try:
            executable = self._find_executable()
            result = await run_command([executable, *toolchain.version_args])
            if result.returncode != 0:
                raise ValidationError(
                    message=(
                        f"Toolchain version query exited with code {result.returncode}: "
                        f"{_tail(result.stderr or result.stdout, 5)}"
                    ),
                    field_name="toolchain_version",
                )

            version = parse_version(result.stdout)
            if version.major < toolchain.min_major_version:
                raise ValidationError(
                    message=(
                        f"Toolchain version {version} is not supported; "
                        f"version {toolchain.min_major_version} or newer is required"
                    ),
                    field_name="toolchain_version",
                )

            logger.info("Toolchain validated", version=str(version))
            return ServiceResult.ok(version)

        except FileNotFoundError as e:
            return ServiceResult.from_error(ToolNotFoundError(
                message=str(e), tool_name=toolchain.executable, cause=e,
            ))
        except RedirectBuilderError as e:
            logger.warning("Toolchain validation failed", error=str(e))
            return ServiceResult.from_error(e)

    def build_command(self, executable: str, project_file: Path) -> list[str]:
        toolchain = self.config.toolchain
        return [executable, toolchain.build_verb, str(project_file), "-c", toolchain.configuration]

    async def run_build(self, workspace_dir: Path, project_file: Path) -> ServiceResult[CommandResult]:
        """Build a workspace's project descriptor.

        Args:
            workspace_dir: Working directory of the build.
            project_file: Project descriptor inside the workspace.

        Returns:
            ServiceResult containing the CommandResult, or a process failure
            carrying the exit code and captured error output.
        """
        start_time = time.perf_counter()
        try:
            executable = self._find_executable()
            result = await run_command(self.build_command(executable, project_file), cwd=workspace_dir)

            if result.returncode != 0:
                # dotnet reports compiler errors on stdout
                detail = _tail(result.stderr) or _tail(result.stdout)
                raise ProcessError(
                    message="Build failed",
                    exit_code=result.returncode,
                    stderr=detail,
                )

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info("Build completed", duration_ms=duration_ms)
            return ServiceResult.ok(result, duration_ms=duration_ms)

        except FileNotFoundError as e:
            return ServiceResult.from_error(ToolNotFoundError(
                message=str(e), tool_name=self.config.toolchain.executable, cause=e,
            ))
        except RedirectBuilderError as e:
            logger.warning("Build failed", error=str(e))
            return ServiceResult.from_error(e)
