"""
Core type definitions for Redirect Builder.

Provides the result types used by every service so that expected failures flow
back to the orchestrator as values instead of exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


# Type aliases
ArtifactPath = Path
Hash = str  # SHA-256 hash


class ErrorKind(str, Enum):
    """Category of a pipeline failure."""

    VALIDATION = "validation"
    IO = "io"
    PROCESS = "process"
    USER_CANCELLED = "user_cancelled"
    NOT_FOUND = "not_found"
    UNEXPECTED = "unexpected"


class StageStatus(str, Enum):
    """Status of a pipeline stage."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """Result wrapper for service operations.

    Provides a consistent return type that includes success/failure status,
    the result data, the kind of any error, and warnings.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    warnings: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0.0

    @classmethod
    def ok(cls, data: T, **metadata: Any) -> ServiceResult[T]:
        """Create a successful result."""
        duration_ms = metadata.pop("duration_ms", 0.0)
        return cls(success=True, data=data, metadata=metadata, duration_ms=duration_ms)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.UNEXPECTED, **metadata: Any) -> ServiceResult[T]:
        """Create a failed result."""
        return cls(success=False, error=error, error_kind=kind, metadata=metadata)

    @classmethod
    def from_error(cls, exc: Exception, **metadata: Any) -> ServiceResult[T]:
        """Create a failed result from an exception, keeping its error kind."""
        kind = getattr(exc, "kind", ErrorKind.UNEXPECTED)
        return cls.fail(str(exc), kind, **metadata)

    @classmethod
    def with_warnings(cls, data: T, warnings: list[str], **metadata: Any) -> ServiceResult[T]:
        """Create a successful result with warnings."""
        return cls(success=True, data=data, warnings=warnings, metadata=metadata)


class StageResult(BaseModel):
    """Result of a pipeline stage execution."""

    stage_name: str = Field(description="Name of the pipeline stage")
    status: StageStatus = Field(default=StageStatus.RUNNING, description="Execution status")
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: datetime | None = Field(default=None)
    duration_seconds: float = Field(default=0.0)
    artifacts: list[ArtifactPath] = Field(default_factory=list, description="Produced files")
    error_message: str | None = Field(default=None)
    warnings: list[str] = Field(default_factory=list)

    def mark_completed(self, artifacts: list[ArtifactPath] | None = None) -> None:
        """Mark stage as successfully completed."""
        self.status = StageStatus.COMPLETED
        self.completed_at = datetime.utcnow()
        self.artifacts = artifacts or []
        if self.started_at:
            self.duration_seconds = (self.completed_at - self.started_at).total_seconds()

    def mark_failed(self, error: str) -> None:
        """Mark stage as failed."""
        self.status = StageStatus.FAILED
        self.completed_at = datetime.utcnow()
        self.error_message = error
        if self.started_at:
            self.duration_seconds = (self.completed_at - self.started_at).total_seconds()
