"""Orchestration module for Redirect Builder."""

from .pipeline import BuildOrchestrator, BuildRun

__all__ = ["BuildOrchestrator", "BuildRun"]
