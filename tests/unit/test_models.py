"""Unit tests for core models and configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from redirect_builder.core.config import Config
from redirect_builder.core.exceptions import ProcessError, ToolNotFoundError, UserCancelledError
from redirect_builder.core.types import ErrorKind, ServiceResult, StageResult, StageStatus
from redirect_builder.models.build import ArtifactResult, BuildOutcome, BuildRequest, BuildStage


class TestBuildRequest:
    """Tests for build request validation."""

    def test_minimal_request(self):
        request = BuildRequest(package_name="com.acme.app", app_name="Acme")

        assert request.icon_paths == []
        assert request.accent_color is None

    def test_strips_whitespace(self):
        request = BuildRequest(package_name="  com.acme.app ", app_name=" Acme ")

        assert request.package_name == "com.acme.app"
        assert request.app_name == "Acme"

    @pytest.mark.parametrize("field", ["package_name", "app_name"])
    def test_blank_required_field_rejected(self, field):
        values = {"package_name": "com.acme.app", "app_name": "Acme", field: "   "}

        with pytest.raises(PydanticValidationError):
            BuildRequest(**values)

    def test_empty_image_path_is_absent(self):
        request = BuildRequest(
            package_name="com.acme.app",
            app_name="Acme",
            foreground_image_path="",
            background_image_path="bg.png",
            monochrome_image_path="  ",
        )

        assert request.foreground_image_path is None
        assert request.monochrome_image_path is None
        assert request.icon_paths == [Path("bg.png")]

    def test_frozen(self):
        request = BuildRequest(package_name="com.acme.app", app_name="Acme")

        with pytest.raises(PydanticValidationError):
            request.app_name = "Other"


class TestBuildOutcome:
    """Tests for outcome helpers."""

    def test_artifact_missing(self):
        outcome = BuildOutcome(success=True, stage=BuildStage.LOCATING_ARTIFACT, error_kind=ErrorKind.NOT_FOUND)

        assert outcome.artifact_missing
        assert not outcome.cancelled

    def test_with_artifact(self):
        outcome = BuildOutcome(
            success=True,
            stage=BuildStage.LOCATING_ARTIFACT,
            artifact=ArtifactResult(path=Path("bin/app-Signed.apk"), signed=True),
        )

        assert not outcome.artifact_missing

    def test_cancelled(self):
        outcome = BuildOutcome(success=False, stage=BuildStage.STAGING, error_kind=ErrorKind.USER_CANCELLED)

        assert outcome.cancelled
        assert not outcome.artifact_missing


class TestServiceResult:
    """Tests for the service result wrapper."""

    def test_from_error_keeps_kind(self):
        result = ServiceResult.from_error(UserCancelledError(message="declined"))

        assert not result.success
        assert result.error_kind == ErrorKind.USER_CANCELLED
        assert result.error == "declined"

    def test_from_plain_exception(self):
        result = ServiceResult.from_error(RuntimeError("boom"))

        assert result.error_kind == ErrorKind.UNEXPECTED

    def test_ok_duration(self):
        result = ServiceResult.ok("data", duration_ms=12.5, files_copied=3)

        assert result.duration_ms == 12.5
        assert result.metadata == {"files_copied": 3}

    def test_process_error_message(self):
        error = ProcessError(message="Build failed", exit_code=1, stderr="error CS0001: boom")

        assert str(error) == "Build failed (exit code 1)\nerror CS0001: boom"
        assert error.kind == ErrorKind.PROCESS

    def test_tool_not_found_is_validation(self):
        assert ToolNotFoundError(message="missing", tool_name="dotnet").kind == ErrorKind.VALIDATION


class TestStageResult:
    def test_completed(self):
        stage = StageResult(stage_name="building")
        stage.mark_completed([Path("bin/app.apk")])

        assert stage.status == StageStatus.COMPLETED
        assert stage.duration_seconds >= 0
        assert stage.artifacts == [Path("bin/app.apk")]

    def test_failed(self):
        stage = StageResult(stage_name="building")
        stage.mark_failed("boom")

        assert stage.status == StageStatus.FAILED
        assert stage.error_message == "boom"


class TestConfig:
    """Tests for environment configuration."""

    def test_defaults(self):
        config = Config()

        assert config.toolchain.executable == "dotnet"
        assert config.toolchain.configuration == "Release"
        assert config.toolchain.min_major_version == 9
        assert config.tokens.package_token == "?package_name?"
        assert config.tokens.redirect_package_token == "?redirect_package_name?"
        assert config.tokens.module_name == "AndroidRedirect.AppHost"
        assert config.artifacts.signed_marker == "-Signed"

    def test_from_env(self, monkeypatch, temp_dir):
        monkeypatch.setenv("ARB_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ARB_APPHOST_DIR", str(temp_dir))
        monkeypatch.setenv("ARB_TOOLCHAIN", "/opt/dotnet/dotnet")
        monkeypatch.setenv("ARB_BUILD_CONFIGURATION", "Debug")
        monkeypatch.setenv("ARB_MIN_TOOLCHAIN_MAJOR", "10")
        monkeypatch.setenv("ARB_OUTPUT_PATH", str(temp_dir / "out"))

        config = Config.from_env()

        assert config.log_level == "DEBUG"
        assert config.template.app_host_dir == temp_dir
        assert config.toolchain.executable == "/opt/dotnet/dotnet"
        assert config.toolchain.configuration == "Debug"
        assert config.toolchain.min_major_version == 10
        assert config.storage.base_path == temp_dir / "out"
