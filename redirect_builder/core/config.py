"""
Configuration management for Redirect Builder.

Provides centralized, type-safe configuration with environment variable overrides
and sensible defaults for the template layout, toolchain and artifact handling.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load .env file if it exists (looks in cwd and parent directories)
load_dotenv()


class TemplateConfig(BaseModel):
    """Layout of the app host template project."""

    app_host_dir: Path | None = Field(
        default=None, description="Selected app host template directory"
    )
    workspace_container: str = Field(
        default="AppHostApplications", description="Directory holding build workspaces"
    )
    workspace_prefix: str = Field(default="AppHost_", description="Workspace directory prefix")
    project_glob: str = Field(default="*.csproj", description="Project descriptor pattern")
    activity_file: str = Field(default="MainActivity.cs", description="Redirect activity source")
    manifest_file: str = Field(default="AndroidManifest.xml", description="Android manifest")
    strings_file: str = Field(
        default="Resources/values/strings.xml", description="Display name resource"
    )
    drawable_dir: str = Field(default="Resources/drawable", description="Icon resource directory")
    excluded_dirs: list[str] = Field(
        default_factory=lambda: ["bin", "obj"],
        description="Template directories never copied into a workspace",
    )


class TokenConfig(BaseModel):
    """Literal placeholders replaced in the staged workspace."""

    package_token: str = Field(default="?package_name?")
    redirect_package_token: str = Field(default="?redirect_package_name?")
    module_name: str = Field(default="AndroidRedirect.AppHost")
    redirect_suffix: str = Field(default=".redirect")


class ToolchainConfig(BaseModel):
    """External build toolchain configuration."""

    executable: str = Field(default="dotnet", description="Toolchain executable")
    version_args: list[str] = Field(default_factory=lambda: ["--version"])
    build_verb: str = Field(default="build", description="Build sub-command")
    configuration: str = Field(default="Release", description="Build configuration")
    min_major_version: int = Field(default=9, ge=1, description="Minimum supported major version")


class ArtifactConfig(BaseModel):
    """Build output discovery configuration."""

    output_dir: str = Field(default="bin", description="Build output subtree of a workspace")
    extension: str = Field(default=".apk", description="Binary artifact extension")
    signed_marker: str = Field(default="-Signed", description="Signed artifact name marker")


class IconConfig(BaseModel):
    """Icon asset configuration."""

    accent_palette: list[str] = Field(
        default_factory=lambda: ["#F6C177", "#50C878", "#EB6F92", "#9CCFD8"],
        description="Preset accent colors",
    )
    image_extensions: list[str] = Field(default_factory=lambda: [".png", ".jpg", ".jpeg"])
    tinted_layer_name: str = Field(default="adaptive_tinted.png")
    background_layer_name: str = Field(default="adaptive_background.png")


class StorageConfig(BaseModel):
    """Storage configuration for saved artifacts."""

    backend: Literal["local"] = Field(default="local", description="Storage backend")
    base_path: Path = Field(
        default=Path("./output"), description="Base path for local storage"
    )


class Config(BaseModel):
    """Root configuration for Redirect Builder."""

    project_name: str = Field(default="RedirectBuilder", description="Project identifier")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    template: TemplateConfig = Field(default_factory=TemplateConfig)
    tokens: TokenConfig = Field(default_factory=TokenConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    artifacts: ArtifactConfig = Field(default_factory=ArtifactConfig)
    icons: IconConfig = Field(default_factory=IconConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    model_config = {"extra": "ignore"}

    @classmethod
    def from_env(cls) -> Config:
        """Create configuration from environment variables."""
        app_host_dir = os.environ.get("ARB_APPHOST_DIR")
        return cls(
            log_level=os.environ.get("ARB_LOG_LEVEL", "INFO"),  # type: ignore
            template=TemplateConfig(
                app_host_dir=Path(app_host_dir).expanduser() if app_host_dir else None,
            ),
            toolchain=ToolchainConfig(
                executable=os.environ.get("ARB_TOOLCHAIN", "dotnet"),
                configuration=os.environ.get("ARB_BUILD_CONFIGURATION", "Release"),
                min_major_version=int(os.environ.get("ARB_MIN_TOOLCHAIN_MAJOR", "9")),
            ),
            storage=StorageConfig(
                base_path=Path(os.environ.get("ARB_OUTPUT_PATH", "./output")),
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()
