"""Unit tests for icon installation."""

import pytest
from PIL import Image

from redirect_builder.core.types import ErrorKind
from redirect_builder.models.build import BuildRequest, BuildWorkspace
from redirect_builder.models.color import Color
from redirect_builder.services.icons import IconInstaller, pick_image


@pytest.fixture
def workspace(template_root):
    return BuildWorkspace(
        package_name="com.acme.app",
        root=template_root,
        project_file=template_root / "AndroidRedirect.AppHost.csproj",
    )


@pytest.fixture
def images(temp_dir):
    """Foreground, background and monochrome images outside the workspace."""
    source = temp_dir / "images"
    source.mkdir()
    Image.new("RGBA", (8, 8), (255, 0, 0, 255)).save(source / "fg.png")
    Image.new("RGB", (8, 8), (0, 0, 255)).save(source / "bg.jpg")
    mono = Image.new("RGBA", (8, 8), (0, 0, 0, 0))
    mono.putpixel((4, 4), (255, 255, 255, 200))
    mono.save(source / "mono.png")
    return source


@pytest.mark.asyncio
class TestIconInstaller:
    """Tests for copying and rendering icons."""

    async def test_copies_under_original_names(self, workspace, images, config):
        result = await IconInstaller(config).install_icons(
            workspace,
            foreground_path=images / "fg.png",
            background_path=images / "bg.jpg",
            monochrome_path=images / "mono.png",
        )

        assert result.success
        drawable = workspace.root / "Resources" / "drawable"
        for name in ("fg.png", "bg.jpg", "mono.png"):
            assert (drawable / name).read_bytes() == (images / name).read_bytes()
        assert [p.name for p in result.data] == ["fg.png", "bg.jpg", "mono.png"]

    async def test_absent_paths_are_skipped(self, workspace, config, tree_snapshot):
        before = tree_snapshot(workspace.root)

        result = await IconInstaller(config).install_icons(workspace)

        assert result.success
        assert result.data == []
        assert tree_snapshot(workspace.root) == before

    async def test_overwrites_existing(self, workspace, temp_dir, config):
        source = temp_dir / "placeholder.png"
        source.write_bytes(b"new icon bytes")

        result = await IconInstaller(config).install_icons(workspace, foreground_path=source)

        assert result.success
        assert (workspace.root / "Resources" / "drawable" / "placeholder.png").read_bytes() == b"new icon bytes"

    async def test_rejects_unsupported_type(self, workspace, temp_dir, config):
        source = temp_dir / "icon.gif"
        source.write_bytes(b"GIF89a")

        result = await IconInstaller(config).install_icons(workspace, background_path=source)

        assert not result.success
        assert result.error_kind == ErrorKind.VALIDATION
        assert not (workspace.root / "Resources" / "drawable" / "icon.gif").exists()

    async def test_accepts_uppercase_extension(self, workspace, temp_dir, config):
        source = temp_dir / "ICON.PNG"
        source.write_bytes(b"png")

        result = await IconInstaller(config).install_icons(workspace, foreground_path=source)

        assert result.success

    async def test_missing_source_is_io_error(self, workspace, temp_dir, config):
        result = await IconInstaller(config).install_icons(workspace, foreground_path=temp_dir / "nope.png")

        assert not result.success
        assert result.error_kind == ErrorKind.IO

    async def test_renders_adaptive_layers_with_accent(self, workspace, images, config):
        request = BuildRequest(
            package_name="com.acme.app",
            app_name="Acme",
            monochrome_image_path=images / "mono.png",
            accent_color=Color.from_hex("#EB6F92"),
        )

        result = await IconInstaller(config).install_for_request(workspace, request)

        assert result.success
        drawable = workspace.root / "Resources" / "drawable"
        assert [p.name for p in result.data] == ["mono.png", "adaptive_tinted.png", "adaptive_background.png"]
        with Image.open(drawable / "adaptive_tinted.png") as tinted:
            assert tinted.getpixel((4, 4)) == (235, 111, 146, 200)

    async def test_no_layers_without_accent(self, workspace, images, config):
        result = await IconInstaller(config).install_icons(workspace, monochrome_path=images / "mono.png")

        assert result.success
        assert not (workspace.root / "Resources" / "drawable" / "adaptive_tinted.png").exists()


@pytest.mark.asyncio
class TestPickImage:
    """Tests for picking icon images through the presenter."""

    async def test_valid_pick(self, presenter_factory, temp_dir, config):
        presenter = presenter_factory(picks=[temp_dir / "icon.jpeg"])
        assert await pick_image(presenter, "Select", config) == temp_dir / "icon.jpeg"
        assert presenter.notifications == []

    async def test_invalid_type_is_reported(self, presenter_factory, temp_dir, config):
        presenter = presenter_factory(picks=[temp_dir / "icon.bmp"])
        assert await pick_image(presenter, "Select", config) is None
        assert presenter.titles == ["Invalid File Type"]

    async def test_nothing_picked(self, presenter_factory, config):
        presenter = presenter_factory()
        assert await pick_image(presenter, "Select", config) is None
        assert presenter.notifications == []
