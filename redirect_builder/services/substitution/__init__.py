"""Literal token substitution in staged workspaces."""

from .service import Substitution, SubstitutionService, substitute

__all__ = ["Substitution", "SubstitutionService", "substitute"]
