"""Icon asset installation."""

from .service import IconInstaller, pick_image

__all__ = ["IconInstaller", "pick_image"]
