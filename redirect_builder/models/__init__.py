"""
Redirect Builder data models.

Pydantic models shared between the services, the orchestrator and the CLI.
"""

from .build import (
    ArtifactResult,
    BuildOutcome,
    BuildRequest,
    BuildStage,
    BuildWorkspace,
    CommandResult,
    ToolchainVersion,
)
from .color import Color, ColorPair, Pixel

__all__ = [
    "ArtifactResult",
    "BuildOutcome",
    "BuildRequest",
    "BuildStage",
    "BuildWorkspace",
    "CommandResult",
    "ToolchainVersion",
    "Color",
    "ColorPair",
    "Pixel",
]
