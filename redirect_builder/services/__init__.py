"""Services package for Redirect Builder."""

from .artifacts import ArtifactLocator, ArtifactSaveService
from .icons import IconInstaller
from .staging import BuildSession, TemplateStager
from .substitution import SubstitutionService
from .toolchain import ToolchainInvoker

__all__ = [
    "ArtifactLocator",
    "ArtifactSaveService",
    "BuildSession",
    "IconInstaller",
    "SubstitutionService",
    "TemplateStager",
    "ToolchainInvoker",
]
