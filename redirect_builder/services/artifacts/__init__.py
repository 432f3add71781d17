"""Artifact discovery and saving."""

from .service import ArtifactLocator, ArtifactSaveService

__all__ = ["ArtifactLocator", "ArtifactSaveService"]
