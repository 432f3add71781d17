"""
Artifact Services.

Finds the APK produced by a build and offers to save it.
"""

from __future__ import annotations

from pathlib import Path

from ...core.config import Config, get_config
from ...core.exceptions import ArtifactNotFoundError
from ...core.logging import get_logger
from ...core.types import ServiceResult
from ...models.build import ArtifactResult, BuildOutcome, BuildRequest
from ...presentation.interface import Presenter
from ...storage import StorageBackend

logger = get_logger(__name__)


class ArtifactLocator:
    """Searches a workspace's build output for the produced APK."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or get_config()

    def candidates(self, workspace_dir: Path) -> list[Path]:
        """All artifact files under the output tree, in lexicographic relative-path order."""
        artifacts = self.config.artifacts
        search_root = workspace_dir / artifacts.output_dir
        if not search_root.is_dir():
            return []
        suffix = artifacts.extension.lower()
        matches = [p for p in search_root.rglob("*") if p.is_file() and p.suffix.lower() == suffix]
        return sorted(matches, key=lambda p: p.relative_to(search_root).as_posix())

    def find_artifact(self, workspace_dir: Path) -> ServiceResult[ArtifactResult]:
        """Pick the artifact to offer, preferring a signed build.

        Returns:
            ServiceResult containing the ArtifactResult, or a not_found failure
            when the output tree holds no artifact.
        """
        marker = self.config.artifacts.signed_marker
        matches = self.candidates(workspace_dir)
        logger.info("Artifact search", candidates=[p.name for p in matches])

        if not matches:
            error = ArtifactNotFoundError(
                message=f"No {self.config.artifacts.extension} found after build",
                search_root=str(workspace_dir / self.config.artifacts.output_dir),
            )
            return ServiceResult.from_error(error)

        for path in matches:
            if marker in path.name:
                return ServiceResult.ok(ArtifactResult(path=path, signed=True))
        return ServiceResult.ok(ArtifactResult(path=matches[0], signed=False))


class ArtifactSaveService:
    """Offers a built artifact for saving and stores it on acceptance.

    Saving is best effort: failures are logged and reported to the user but
    never change the outcome of the build.
    """

    def __init__(self, presenter: Presenter, storage: StorageBackend) -> None:
        self.presenter = presenter
        self.storage = storage

    def storage_key(self, request: BuildRequest, artifact: ArtifactResult) -> str:
        return f"artifacts/{request.package_name}/{artifact.path.name}"

    async def offer(self, artifact: ArtifactResult, request: BuildRequest, outcome: BuildOutcome | None = None) -> str | None:
        """Ask whether to save the artifact and store it if accepted.

        Returns:
            The storage key of the saved artifact, or None when declined or failed.
        """
        try:
            accepted = await self.presenter.confirm(
                "Save APK",
                f"Save {artifact.path.name} for {request.app_name}?",
            )
            if not accepted:
                logger.info("Artifact save declined", artifact=artifact.path.name)
                return None

            key = self.storage_key(request, artifact)
            await self.storage.store_file(key, artifact.path, {
                "package_name": request.package_name,
                "app_name": request.app_name,
                "signed": artifact.signed,
            })
            if outcome is not None:
                await self.storage.store_model(f"{key}.build.json", outcome)

            location = self.storage.get_local_path(key) or key
            logger.info("Artifact saved", key=key)
            await self.presenter.notify("APK Saved", f"Saved to {location}")
            return key

        except Exception as e:
            logger.error("Failed to save artifact", error=str(e), artifact=str(artifact.path))
            await self.presenter.notify("Save Failed", f"Could not save {artifact.path.name}: {e}")
            return None
