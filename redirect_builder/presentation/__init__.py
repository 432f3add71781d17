"""Presentation capabilities consumed by the build pipeline."""

from .console import ConsolePresenter
from .interface import BusyHandle, FileFilter, Presenter, busy

__all__ = ["BusyHandle", "ConsolePresenter", "FileFilter", "Presenter", "busy"]
