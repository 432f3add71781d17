"""
Custom exception hierarchy for Redirect Builder.

All exceptions inherit from RedirectBuilderError to enable consistent error handling
across the build pipeline. Each exception type carries the ErrorKind reported in a
failed build outcome, plus context for debugging and logging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from .types import ErrorKind


@dataclass
class RedirectBuilderError(Exception):
    """Base exception for all Redirect Builder errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.UNEXPECTED

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class ValidationError(RedirectBuilderError):
    """Raised when a template file is missing or the toolchain is unsupported."""

    kind: ClassVar[ErrorKind] = ErrorKind.VALIDATION

    field_name: str | None = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.field_name:
            return f"Validation failed for '{self.field_name}': {base}"
        return f"Validation failed: {base}"


@dataclass
class BuildIOError(RedirectBuilderError):
    """Raised when a copy, delete or write in a workspace fails."""

    kind: ClassVar[ErrorKind] = ErrorKind.IO

    path: str = ""

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base} (path: {self.path})" if self.path else base


@dataclass
class ProcessError(RedirectBuilderError):
    """Raised when a toolchain process exits with a non-zero code."""

    kind: ClassVar[ErrorKind] = ErrorKind.PROCESS

    exit_code: int = 0
    stderr: str = ""

    def __str__(self) -> str:
        detail = f"\n{self.stderr}" if self.stderr else ""
        return f"{self.message} (exit code {self.exit_code}){detail}"


@dataclass
class UserCancelledError(RedirectBuilderError):
    """Raised when the user declines a prompt or no host directory is selected."""

    kind: ClassVar[ErrorKind] = ErrorKind.USER_CANCELLED


@dataclass
class ArtifactNotFoundError(RedirectBuilderError):
    """Raised when no artifact exists after an apparently successful build."""

    kind: ClassVar[ErrorKind] = ErrorKind.NOT_FOUND

    search_root: str = ""


@dataclass
class ToolNotFoundError(RedirectBuilderError):
    """Raised when a required external tool is not available."""

    kind: ClassVar[ErrorKind] = ErrorKind.VALIDATION

    tool_name: str = ""
    install_hint: str = ""

    def __str__(self) -> str:
        hint = f" Install hint: {self.install_hint}" if self.install_hint else ""
        return f"Tool '{self.tool_name}' not found: {self.message}.{hint}"
