"""
Template Staging Service.

Locates the app host template and copies it into an isolated, per-package
build workspace. The template itself is only ever read.
"""

from __future__ import annotations

import os
import shutil
import time
from collections.abc import Awaitable, Callable
from pathlib import Path

from ...core.config import Config, get_config
from ...core.exceptions import BuildIOError, RedirectBuilderError, UserCancelledError, ValidationError
from ...core.logging import get_logger
from ...core.types import ServiceResult
from ...models.build import BuildWorkspace

logger = get_logger(__name__)

ConfirmOverwrite = Callable[[Path], Awaitable[bool]]


def find_project_descriptor(directory: Path, pattern: str = "*.csproj") -> Path:
    """Return the single project descriptor at the top of a directory.

    Raises:
        ValidationError: If there is not exactly one descriptor.
    """
    matches = sorted(p for p in directory.glob(pattern) if p.is_file())
    if len(matches) != 1:
        raise ValidationError(
            message=f"Expected exactly one {pattern} in {directory}, found {len(matches)}",
            field_name="project_descriptor",
            context={"matches": [m.name for m in matches]},
        )
    return matches[0]


def _is_template_root(directory: Path, config: Config) -> bool:
    if not directory.is_dir():
        return False
    descriptors = [p for p in directory.glob(config.template.project_glob) if p.is_file()]
    return len(descriptors) == 1 and (directory / config.template.manifest_file).is_file()


class BuildSession:
    """Holds the selected template root for the lifetime of one session.

    The root is resolved once, when the session is created, and then passed
    explicitly into every build.
    """

    def __init__(self, template_root: Path) -> None:
        self.template_root = template_root.resolve()

    def __repr__(self) -> str:
        return f"BuildSession(template_root={self.template_root!s})"

    @classmethod
    def discover(
        cls,
        explicit: Path | None = None,
        search_from: Path | None = None,
        config: Config | None = None,
    ) -> BuildSession:
        """Resolve the template root.

        Tries, in order: an explicit directory, the configured
        ``app_host_dir``, then the search directory and its immediate and
        ``src/`` children.

        Raises:
            ValidationError: If an explicitly selected directory is not a template.
            UserCancelledError: If no host directory could be selected.
        """
        config = config or get_config()

        selected = explicit or config.template.app_host_dir
        if selected is not None:
            selected = selected.expanduser()
            if not _is_template_root(selected, config):
                raise ValidationError(
                    message=(
                        f"{selected} is not an app host template "
                        f"(needs one {config.template.project_glob} and {config.template.manifest_file})"
                    ),
                    field_name="template_root",
                )
            logger.info("Using selected app host directory", template_root=str(selected))
            return cls(selected)

        base = (search_from or Path.cwd()).resolve()
        candidates = [base]
        for parent in (base, base / "src"):
            if parent.is_dir():
                candidates.extend(sorted(p for p in parent.iterdir() if p.is_dir()))

        for candidate in candidates:
            if candidate.name == config.template.workspace_container:
                continue
            if _is_template_root(candidate, config):
                logger.info("Discovered app host directory", template_root=str(candidate))
                return cls(candidate)

        raise UserCancelledError(
            message="No app host directory selected",
            context={"searched": str(base)},
        )


class TemplateStager:
    """Copies the template root into a per-package build workspace."""

    def __init__(self, config: Config | None = None) -> None:
        """Initialize the stager.

        Args:
            config: Template layout configuration; the global config when omitted.
        """
        self.config = config or get_config()

    def workspace_path(self, template_root: Path, package_name: str) -> Path:
        """Compute the workspace directory for a package."""
        if not package_name or any(sep in package_name for sep in ("/", "\\")) or ".." in package_name:
            raise ValidationError(
                message=f"Invalid package name: {package_name!r}",
                field_name="package_name",
            )
        template = self.config.template
        return template_root / template.workspace_container / f"{template.workspace_prefix}{package_name}"

    def _iter_template_files(self, template_root: Path) -> list[Path]:
        """List template files relative to the root, skipping workspaces and build output."""
        template = self.config.template
        excluded = set(template.excluded_dirs)
        files: list[Path] = []

        for dirpath, dirnames, filenames in os.walk(template_root):
            current = Path(dirpath)
            rel_dir = current.relative_to(template_root)
            dirnames[:] = sorted(
                d for d in dirnames
                if d not in excluded
                and not (rel_dir == Path(".") and d == template.workspace_container)
            )
            files.extend(rel_dir / name for name in sorted(filenames))

        return files

    def _clear_workspace(self, workspace: Path) -> None:
        try:
            shutil.rmtree(workspace)
        except OSError as e:
            raise BuildIOError(
                message="Failed to delete existing workspace",
                path=str(workspace),
                cause=e,
            )
        if workspace.exists():
            raise BuildIOError(message="Existing workspace was not fully deleted", path=str(workspace))

    def _copy_tree(self, template_root: Path, workspace: Path) -> int:
        copied = 0
        for rel_path in self._iter_template_files(template_root):
            destination = workspace / rel_path
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(template_root / rel_path, destination)
            except OSError as e:
                raise BuildIOError(
                    message=f"Failed to copy {rel_path.as_posix()}",
                    path=str(destination),
                    cause=e,
                )
            copied += 1
        return copied

    async def stage(
        self,
        template_root: Path,
        package_name: str,
        confirm_overwrite: ConfirmOverwrite,
    ) -> ServiceResult[BuildWorkspace]:
        """Stage a fresh workspace for a package.

        Args:
            template_root: The never-mutated template project.
            package_name: Package the workspace is dedicated to.
            confirm_overwrite: Asked before an existing workspace is deleted;
                declining cancels staging and leaves the workspace untouched.

        Returns:
            ServiceResult containing the BuildWorkspace, or a failure whose
            error_kind is validation, io or user_cancelled.
        """
        start_time = time.perf_counter()
        pattern = self.config.template.project_glob

        try:
            find_project_descriptor(template_root, pattern)
            workspace = self.workspace_path(template_root, package_name)
            logger.info("Staging workspace", workspace=str(workspace))

            if workspace.exists():
                if not await confirm_overwrite(workspace):
                    raise UserCancelledError(
                        message=f"Overwrite of existing workspace declined: {workspace}",
                        context={"workspace": str(workspace)},
                    )
                logger.info("Deleting existing workspace", workspace=str(workspace))
                self._clear_workspace(workspace)

            try:
                workspace.mkdir(parents=True)
            except OSError as e:
                raise BuildIOError(message="Failed to create workspace", path=str(workspace), cause=e)

            copied = self._copy_tree(template_root, workspace)

            try:
                project_file = find_project_descriptor(workspace, pattern)
            except ValidationError as e:
                raise BuildIOError(
                    message="Staged workspace has no project descriptor",
                    path=str(workspace),
                    cause=e,
                )

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info("Workspace staged", files=copied, duration_ms=duration_ms)

            return ServiceResult.ok(
                BuildWorkspace(package_name=package_name, root=workspace, project_file=project_file),
                files_copied=copied,
                duration_ms=duration_ms,
            )

        except RedirectBuilderError as e:
            logger.warning("Staging failed", error=str(e), kind=e.kind.value)
            return ServiceResult.from_error(e)
