"""
Icon Installation Service.

Copies the user's icon images into the workspace drawable resources and, when
an accent color is chosen, renders adaptive icon layers from the monochrome
image.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from ...core.config import Config, get_config
from ...core.exceptions import BuildIOError, RedirectBuilderError, ValidationError
from ...core.logging import get_logger
from ...core.types import ServiceResult
from ...models.build import BuildRequest, BuildWorkspace
from ...models.color import Color
from ...presentation.interface import FileFilter, Presenter
from ..colors.render import render_adaptive_layers

logger = get_logger(__name__)


class IconInstaller:
    """Installs icon assets into a staged workspace."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or get_config()

    def _check_image_type(self, path: Path) -> None:
        allowed = {ext.lower() for ext in self.config.icons.image_extensions}
        if path.suffix.lower() not in allowed:
            raise ValidationError(
                message=f"Unsupported image type: {path.name} (expected {', '.join(sorted(allowed))})",
                field_name="image_path",
            )

    def _copy_icon(self, source: Path, drawable_dir: Path) -> Path:
        destination = drawable_dir / source.name
        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            raise BuildIOError(message=f"Failed to copy icon {source.name}", path=str(source), cause=e)
        return destination

    async def install_icons(
        self,
        workspace: BuildWorkspace,
        foreground_path: Path | None = None,
        background_path: Path | None = None,
        monochrome_path: Path | None = None,
        accent: Color | None = None,
    ) -> ServiceResult[list[Path]]:
        """Copy icons into the drawable directory under their original names.

        Absent paths are skipped. Existing files of the same name are
        overwritten.

        Returns:
            ServiceResult listing every file written to the drawable directory.
        """
        drawable_dir = workspace.root / self.config.template.drawable_dir
        installed: list[Path] = []

        try:
            sources = [p for p in (foreground_path, background_path, monochrome_path) if p]
            for source in sources:
                self._check_image_type(source)

            if sources:
                try:
                    drawable_dir.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise BuildIOError(message="Failed to create drawable directory", path=str(drawable_dir), cause=e)

            for source in sources:
                installed.append(self._copy_icon(source, drawable_dir))
                logger.info("Installed icon", icon=source.name)

            if monochrome_path and accent:
                installed.extend(render_adaptive_layers(
                    monochrome_path,
                    accent,
                    drawable_dir,
                    tinted_name=self.config.icons.tinted_layer_name,
                    background_name=self.config.icons.background_layer_name,
                ))

        except RedirectBuilderError as e:
            logger.warning("Icon installation failed", error=str(e))
            return ServiceResult.from_error(e)

        if not installed:
            logger.info("No icon assets supplied")
        return ServiceResult.ok(installed)

    async def install_for_request(self, workspace: BuildWorkspace, request: BuildRequest) -> ServiceResult[list[Path]]:
        """Install the icons named by a build request."""
        return await self.install_icons(
            workspace,
            foreground_path=request.foreground_image_path,
            background_path=request.background_image_path,
            monochrome_path=request.monochrome_image_path,
            accent=request.accent_color,
        )


async def pick_image(presenter: Presenter, title: str, config: Config | None = None) -> Path | None:
    """Ask the presenter for an icon image.

    Files that are not png/jpg/jpeg are rejected with an "Invalid File Type"
    notification.

    Returns:
        The picked path, or None when nothing valid was picked.
    """
    config = config or get_config()
    file_filter = FileFilter(title=title, extensions=config.icons.image_extensions)
    picked = await presenter.pick_file(file_filter)
    if picked is None:
        return None
    if not file_filter.accepts(picked):
        await presenter.notify(
            "Invalid File Type",
            "Please select a valid image file (jpg, png, jpeg).",
        )
        return None
    return picked
