"""
Rich console presenter.

Implements the presentation capabilities for the command line: panels for
notifications, Confirm/Prompt for questions and a status spinner while busy.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.status import Status

from .interface import BusyHandle, FileFilter, Presenter


class ConsolePresenter(Presenter):
    """Presenter backed by a rich Console."""

    def __init__(self, console: Console | None = None, assume_yes: bool = False) -> None:
        """Initialize the presenter.

        Args:
            console: Console to render on; a new one when omitted.
            assume_yes: Accept every confirmation without prompting.
        """
        self.console = console or Console()
        self.assume_yes = assume_yes
        self._status: Status | None = None

    async def _ask(self, func, *args, **kwargs):
        # A live spinner would overwrite the prompt line
        if self._status is not None:
            self._status.stop()
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        finally:
            if self._status is not None:
                self._status.start()

    async def confirm(self, title: str, message: str) -> bool:
        if self.assume_yes:
            self.console.print(f"[bold]{title}:[/bold] {message} [dim](yes)[/dim]")
            return True
        return await self._ask(
            Confirm.ask, f"[bold]{title}[/bold]\n{message}", console=self.console, default=False
        )

    async def notify(self, title: str, message: str) -> None:
        self.console.print(Panel.fit(message, title=title, border_style="blue"))

    async def pick_file(self, file_filter: FileFilter) -> Path | None:
        accepted = ", ".join(file_filter.extensions) or "any"
        answer = await self._ask(
            Prompt.ask,
            f"{file_filter.title} [dim]({accepted}, blank to skip)[/dim]",
            console=self.console,
            default="",
            show_default=False,
        )
        answer = answer.strip()
        return Path(answer).expanduser() if answer else None

    async def show_busy(self, message: str) -> BusyHandle:
        self._status = Status(message, console=self.console)
        self._status.start()
        return self._status

    async def hide_busy(self, handle: BusyHandle) -> None:
        if isinstance(handle, Status):
            handle.stop()
        if handle is self._status:
            self._status = None
