"""
Build pipeline data models.

These models describe a single build invocation: the immutable request coming
from the presentation layer, the staged workspace, toolchain results, the
discovered artifact and the terminal outcome reported back to the caller.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from ..core.types import ErrorKind, StageResult
from .color import Color


class BuildStage(str, Enum):
    """States of the build orchestrator."""

    IDLE = "idle"
    VALIDATING_TOOLCHAIN = "validating_toolchain"
    STAGING = "staging"
    SUBSTITUTING = "substituting"
    INSTALLING_ICONS = "installing_icons"
    BUILDING = "building"
    LOCATING_ARTIFACT = "locating_artifact"
    DONE = "done"


class BuildRequest(BaseModel):
    """Everything needed to specialize the app host for one package."""

    package_name: str = Field(min_length=1, description="Target package to launch")
    app_name: str = Field(min_length=1, description="Display name of the redirect app")
    foreground_image_path: Path | None = Field(default=None)
    background_image_path: Path | None = Field(default=None)
    monochrome_image_path: Path | None = Field(default=None)
    accent_color: Color | None = Field(
        default=None, description="Accent used to render adaptive icon layers"
    )

    model_config = {"frozen": True, "str_strip_whitespace": True}

    @field_validator(
        "foreground_image_path", "background_image_path", "monochrome_image_path", mode="before"
    )
    @classmethod
    def _empty_path_is_absent(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return value

    @property
    def icon_paths(self) -> list[Path]:
        """Supplied icon files, in foreground/background/monochrome order."""
        paths = [
            self.foreground_image_path,
            self.background_image_path,
            self.monochrome_image_path,
        ]
        return [p for p in paths if p is not None]


class BuildWorkspace(BaseModel):
    """A staged, disposable copy of the template root."""

    package_name: str
    root: Path
    project_file: Path


class ToolchainVersion(BaseModel):
    """Version reported by the toolchain's version query."""

    major: int
    minor: int = 0
    patch: int = 0
    raw: str = ""

    def __str__(self) -> str:
        return self.raw or f"{self.major}.{self.minor}.{self.patch}"


class CommandResult(BaseModel):
    """Captured result of a finished child process."""

    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""


class ArtifactResult(BaseModel):
    """A built APK found in the workspace output tree."""

    path: Path
    signed: bool = False


class BuildOutcome(BaseModel):
    """Terminal result of one orchestrated build."""

    success: bool
    stage: BuildStage = Field(description="Stage reached, or the stage that failed")
    error_kind: ErrorKind | None = None
    message: str = ""
    artifact: ArtifactResult | None = None
    workspace: Path | None = None
    stages: list[StageResult] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: datetime | None = None

    @property
    def artifact_missing(self) -> bool:
        """True when the build succeeded but produced no discoverable APK."""
        return self.success and self.artifact is None

    @property
    def cancelled(self) -> bool:
        return self.error_kind == ErrorKind.USER_CANCELLED
