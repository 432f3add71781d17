"""Core infrastructure components for Redirect Builder."""

from .config import Config, get_config
from .exceptions import (
    ArtifactNotFoundError,
    BuildIOError,
    ProcessError,
    RedirectBuilderError,
    ToolNotFoundError,
    UserCancelledError,
    ValidationError,
)
from .logging import bind_stage, build_context, get_logger, setup_logging
from .types import ArtifactPath, ErrorKind, Hash, ServiceResult, StageResult, StageStatus

__all__ = [
    "Config",
    "get_config",
    "ArtifactNotFoundError",
    "BuildIOError",
    "ProcessError",
    "RedirectBuilderError",
    "ToolNotFoundError",
    "UserCancelledError",
    "ValidationError",
    "get_logger",
    "setup_logging",
    "bind_stage",
    "build_context",
    "ArtifactPath",
    "ErrorKind",
    "Hash",
    "ServiceResult",
    "StageResult",
    "StageStatus",
]
