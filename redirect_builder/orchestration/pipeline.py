"""
Build orchestration for Redirect Builder.

Sequences toolchain validation, workspace staging, token substitution, icon
installation, the build itself and artifact discovery. The first failing
stage ends the run; every run ends with exactly one notification.

One orchestrator may serve overlapping runs: all per-run state lives in a
``BuildRun`` created by ``run()``.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

from ..core.config import Config, get_config
from ..core.logging import bind_stage, build_context, get_logger
from ..core.types import ErrorKind, ServiceResult, StageResult
from ..models.build import BuildOutcome, BuildRequest, BuildStage, BuildWorkspace
from ..presentation.interface import Presenter, busy
from ..services.artifacts import ArtifactLocator, ArtifactSaveService
from ..services.icons import IconInstaller
from ..services.staging import BuildSession, TemplateStager
from ..services.substitution import SubstitutionService
from ..services.toolchain import ToolchainInvoker

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class BuildRun:
    """Mutable state of one in-flight build."""

    request: BuildRequest
    session: BuildSession
    run_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    stage: BuildStage = BuildStage.IDLE
    stages: list[StageResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    workspace: BuildWorkspace | None = None

    def enter(self, stage: BuildStage) -> StageResult:
        """Move to a stage and open its record."""
        self.stage = stage
        bind_stage(stage.value)
        record = StageResult(stage_name=stage.value)
        self.stages.append(record)
        logger.info("Entering stage", stage=stage.value)
        return record


class BuildOrchestrator:
    """Runs build requests through every pipeline stage."""

    def __init__(
        self,
        presenter: Presenter,
        config: Config | None = None,
        toolchain: ToolchainInvoker | None = None,
        stager: TemplateStager | None = None,
        substitution: SubstitutionService | None = None,
        icons: IconInstaller | None = None,
        locator: ArtifactLocator | None = None,
        saver: ArtifactSaveService | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            presenter: UI capabilities for prompts, notifications and busy state.
            config: Configuration shared by the default services.
            toolchain: Toolchain invoker; built from config when omitted.
            stager: Workspace stager; built from config when omitted.
            substitution: Token substitution service; built from config when omitted.
            icons: Icon installer; built from config when omitted.
            locator: Artifact locator; built from config when omitted.
            saver: Save prompt for successful builds; no prompt when omitted.
        """
        self.presenter = presenter
        self.config = config or get_config()
        self.toolchain = toolchain or ToolchainInvoker(self.config)
        self.stager = stager or TemplateStager(self.config)
        self.substitution = substitution or SubstitutionService(self.config)
        self.icons = icons or IconInstaller(self.config)
        self.locator = locator or ArtifactLocator(self.config)
        self.saver = saver

    async def _run_stage(
        self,
        run: BuildRun,
        stage: BuildStage,
        operation: Awaitable[ServiceResult[T]],
    ) -> ServiceResult[T]:
        """Enter a stage, await its operation and record the stage result."""
        record = run.enter(stage)

        result = await operation

        if result.success:
            record.warnings.extend(result.warnings)
            record.mark_completed()
        else:
            record.mark_failed(result.error or "unknown error")
        return result

    def _confirm_overwrite(self, request: BuildRequest) -> Callable[[Path], Awaitable[bool]]:
        async def confirm(workspace: Path) -> bool:
            return await self.presenter.confirm(
                "Workspace Exists",
                f"A build workspace for {request.package_name} already exists:\n"
                f"{workspace}\n\nDelete it and build again?",
            )
        return confirm

    def _failure(self, run: BuildRun, stage: BuildStage, result: ServiceResult[Any]) -> BuildOutcome:
        return BuildOutcome(
            success=False,
            stage=stage,
            error_kind=result.error_kind or ErrorKind.UNEXPECTED,
            message=result.error or "",
            workspace=run.workspace.root if run.workspace else None,
            stages=run.stages,
            started_at=run.started_at,
            completed_at=datetime.utcnow(),
        )

    async def _execute(self, run: BuildRun) -> BuildOutcome:
        request = run.request

        version = await self._run_stage(
            run, BuildStage.VALIDATING_TOOLCHAIN, self.toolchain.check_toolchain_version()
        )
        if not version.success:
            return self._failure(run, BuildStage.VALIDATING_TOOLCHAIN, version)

        staged = await self._run_stage(
            run,
            BuildStage.STAGING,
            self.stager.stage(run.session.template_root, request.package_name, self._confirm_overwrite(request)),
        )
        if not staged.success or staged.data is None:
            return self._failure(run, BuildStage.STAGING, staged)
        workspace = run.workspace = staged.data

        substituted = await self._run_stage(
            run, BuildStage.SUBSTITUTING, self.substitution.apply(workspace, request)
        )
        if not substituted.success:
            return self._failure(run, BuildStage.SUBSTITUTING, substituted)

        installed = await self._run_stage(
            run, BuildStage.INSTALLING_ICONS, self.icons.install_for_request(workspace, request)
        )
        if not installed.success:
            return self._failure(run, BuildStage.INSTALLING_ICONS, installed)

        built = await self._run_stage(
            run, BuildStage.BUILDING, self.toolchain.run_build(workspace.root, workspace.project_file)
        )
        if not built.success:
            return self._failure(run, BuildStage.BUILDING, built)

        record = run.enter(BuildStage.LOCATING_ARTIFACT)
        located = self.locator.find_artifact(workspace.root)
        artifact = located.data if located.success else None
        missing_message = "" if artifact else (located.error or "artifact missing")
        if missing_message:
            record.warnings.append(missing_message)
        record.mark_completed([artifact.path] if artifact else [])

        return BuildOutcome(
            success=True,
            stage=BuildStage.LOCATING_ARTIFACT,
            error_kind=None if artifact else located.error_kind,
            message=missing_message,
            artifact=artifact,
            workspace=workspace.root,
            stages=run.stages,
            started_at=run.started_at,
            completed_at=datetime.utcnow(),
        )

    async def _report(self, outcome: BuildOutcome, request: BuildRequest) -> None:
        """Show the single terminal notification for an outcome."""
        if outcome.success and outcome.artifact is not None:
            signed = "signed " if outcome.artifact.signed else ""
            await self.presenter.notify(
                "Build Succeeded",
                f"Built {signed}APK for {request.app_name}:\n{outcome.artifact.path}",
            )
        elif outcome.success:
            await self.presenter.notify(
                "Artifact Missing",
                f"The build finished but no APK was found.\n{outcome.message}",
            )
        elif outcome.cancelled:
            await self.presenter.notify("Build Cancelled", outcome.message)
        else:
            await self.presenter.notify(
                "Build Failed",
                f"Stage: {outcome.stage.value}\n{outcome.message}",
            )

    async def run(self, request: BuildRequest, session: BuildSession) -> BuildOutcome:
        """Build a redirect application.

        Args:
            request: What to build.
            session: Session holding the selected template root.

        Returns:
            The terminal BuildOutcome. Never raises for pipeline failures.
        """
        run = BuildRun(request=request, session=session)

        with build_context(run.run_id, request.package_name):
            logger.info(
                "Building redirect application",
                app_name=request.app_name,
                template_root=str(session.template_root),
                icons=[p.name for p in request.icon_paths],
            )

            try:
                async with busy(self.presenter, f"Building {request.app_name}..."):
                    outcome = await self._execute(run)
            except Exception as e:
                logger.exception("Unexpected build failure")
                if run.stages and run.stages[-1].completed_at is None:
                    run.stages[-1].mark_failed(str(e))
                outcome = self._failure(run, run.stage, ServiceResult.fail(str(e)))

            run.stage = BuildStage.DONE
            bind_stage(run.stage.value)
            logger.info(
                "Build finished",
                success=outcome.success,
                failed_stage=None if outcome.success else outcome.stage.value,
                error_kind=outcome.error_kind.value if outcome.error_kind else None,
            )

            await self._report(outcome, request)
            if outcome.success and outcome.artifact is not None and self.saver is not None:
                await self.saver.offer(outcome.artifact, request, outcome)

            return outcome
