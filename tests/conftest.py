"""Test configuration for Redirect Builder."""

import logging
import tempfile
from pathlib import Path

import pytest
import structlog

from redirect_builder.core.config import Config
from redirect_builder.presentation.interface import FileFilter, Presenter

ACTIVITY_SOURCE = """using Android.Content;

namespace AndroidRedirect.AppHost
{
    [Activity(Label = "@string/app_name", MainLauncher = true)]
    public class MainActivity : Activity
    {
        protected override void OnCreate(Bundle? savedInstanceState)
        {
            base.OnCreate(savedInstanceState);
            var intent = PackageManager?.GetLaunchIntentForPackage("?package_name?");
            if (intent != null)
            {
                StartActivity(intent);
            }
            FinishAndRemoveTask();
        }
    }
}
"""

MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android" package="?redirect_package_name?">
  <application android:label="@string/app_name" android:icon="@mipmap/appicon"></application>
  <queries><package android:name="?package_name?" /></queries>
</manifest>
"""

STRINGS = """<resources>
  <string name="app_name">AndroidRedirect.AppHost</string>
</resources>
"""


class FakePresenter(Presenter):
    """Presenter that records every call and answers from a script."""

    def __init__(self, confirm_answers=None, picks=None):
        self.confirm_answers = list(confirm_answers or [])
        self.picks = list(picks or [])
        self.confirms = []
        self.notifications = []
        self.busy_shown = 0
        self.busy_hidden = 0

    async def confirm(self, title, message):
        self.confirms.append((title, message))
        return self.confirm_answers.pop(0) if self.confirm_answers else True

    async def notify(self, title, message):
        self.notifications.append((title, message))

    async def pick_file(self, file_filter: FileFilter):
        return self.picks.pop(0) if self.picks else None

    async def show_busy(self, message):
        self.busy_shown += 1
        return f"busy-{self.busy_shown}"

    async def hide_busy(self, handle):
        self.busy_hidden += 1

    @property
    def busy_active(self):
        return self.busy_shown - self.busy_hidden

    @property
    def titles(self):
        return [title for title, _ in self.notifications]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests.

    Yields:
        Path: A Path object pointing to the temporary directory.
            The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config():
    """Default configuration, independent of the environment."""
    return Config()


@pytest.fixture
def template_root(temp_dir):
    """Create a minimal app host template project.

    Returns:
        Path: The template root holding one .csproj, the manifest, the redirect
            activity and the resource layout.
    """
    root = temp_dir / "AndroidRedirect.AppHost"
    (root / "Resources" / "values").mkdir(parents=True)
    (root / "Resources" / "drawable").mkdir(parents=True)
    (root / "Resources" / "mipmap-anydpi-v26").mkdir(parents=True)

    (root / "AndroidRedirect.AppHost.csproj").write_text(
        '<Project Sdk="Microsoft.NET.Sdk"></Project>\n', encoding="utf-8"
    )
    (root / "MainActivity.cs").write_text(ACTIVITY_SOURCE, encoding="utf-8")
    (root / "AndroidManifest.xml").write_text(MANIFEST, encoding="utf-8")
    (root / "Resources" / "values" / "strings.xml").write_text(STRINGS, encoding="utf-8")
    (root / "Resources" / "drawable" / "placeholder.png").write_bytes(b"\x89PNG\r\n\x1a\nplaceholder")
    (root / "Resources" / "mipmap-anydpi-v26" / "appicon.xml").write_text(
        "<adaptive-icon />\n", encoding="utf-8"
    )
    return root


@pytest.fixture
def presenter():
    """A presenter that accepts every prompt."""
    return FakePresenter()


@pytest.fixture
def presenter_factory():
    """Build presenters with scripted answers."""
    return FakePresenter


def snapshot(root: Path) -> dict[str, bytes]:
    """Map every file under root (relative posix path) to its bytes."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def tree_snapshot():
    return snapshot


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging during a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
