"""Template discovery and workspace staging."""

from .service import BuildSession, TemplateStager, find_project_descriptor

__all__ = ["BuildSession", "TemplateStager", "find_project_descriptor"]
