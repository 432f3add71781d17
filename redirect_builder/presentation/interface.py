"""
Presentation capability interface.

The build pipeline never draws anything itself. It asks a Presenter to show
messages, ask yes/no questions, pick files and display a busy indicator. Every
call is awaited and may suspend indefinitely on user input; implementations
decide which execution context actually renders the UI.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

BusyHandle = Any


class FileFilter(BaseModel):
    """File types accepted by a file pick."""

    title: str = Field(default="Select a file")
    extensions: list[str] = Field(default_factory=list, description="Accepted suffixes, e.g. '.png'")

    def accepts(self, path: Path) -> bool:
        if not self.extensions:
            return True
        return path.suffix.lower() in {ext.lower() for ext in self.extensions}


class Presenter(ABC):
    """UI capabilities required by the build pipeline."""

    @abstractmethod
    async def confirm(self, title: str, message: str) -> bool:
        """Ask a yes/no question. Returns True when the user accepts."""
        ...

    @abstractmethod
    async def notify(self, title: str, message: str) -> None:
        """Show a message and return once it has been delivered."""
        ...

    @abstractmethod
    async def pick_file(self, file_filter: FileFilter) -> Path | None:
        """Let the user choose a file. Returns None when nothing was picked."""
        ...

    @abstractmethod
    async def show_busy(self, message: str) -> BusyHandle:
        """Show a busy indicator and return a handle for hide_busy."""
        ...

    @abstractmethod
    async def hide_busy(self, handle: BusyHandle) -> None:
        """Hide a busy indicator previously shown with show_busy."""
        ...


@asynccontextmanager
async def busy(presenter: Presenter, message: str) -> AsyncIterator[None]:
    """Hold a busy indicator for the duration of a block, releasing it on every exit path."""
    handle = await presenter.show_busy(message)
    try:
        yield
    finally:
        await presenter.hide_busy(handle)
