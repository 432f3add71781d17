"""Unit tests for token substitution."""

import pytest

from redirect_builder.core.exceptions import ValidationError
from redirect_builder.core.types import ErrorKind
from redirect_builder.models.build import BuildRequest, BuildWorkspace
from redirect_builder.services.substitution import SubstitutionService, substitute


@pytest.fixture
def workspace(template_root):
    """Use the template fixture directly as a staged workspace."""
    return BuildWorkspace(
        package_name="com.acme.app",
        root=template_root,
        project_file=template_root / "AndroidRedirect.AppHost.csproj",
    )


@pytest.fixture
def request_():
    return BuildRequest(package_name="com.acme.app", app_name="Acme Redirect")


@pytest.mark.asyncio
class TestSubstitute:
    """Tests for single-file substitution."""

    async def test_replaces_every_occurrence(self, temp_dir):
        path = temp_dir / "file.txt"
        path.write_text("?x? and ?x? and again ?x?", encoding="utf-8")

        count = await substitute(path, "?x?", "value")

        assert count == 3
        assert path.read_text(encoding="utf-8") == "value and value and again value"

    async def test_literal_case_sensitive_match(self, temp_dir):
        path = temp_dir / "file.txt"
        path.write_text("a.b a_b A.B", encoding="utf-8")

        count = await substitute(path, "a.b", "X")

        assert count == 1
        assert path.read_text(encoding="utf-8") == "X a_b A.B"

    async def test_absent_token_is_noop(self, temp_dir):
        path = temp_dir / "file.txt"
        path.write_bytes(b"nothing here\r\n")
        mtime = path.stat().st_mtime_ns

        count = await substitute(path, "?x?", "value")

        assert count == 0
        assert path.read_bytes() == b"nothing here\r\n"
        assert path.stat().st_mtime_ns == mtime

    async def test_line_endings_preserved(self, temp_dir):
        path = temp_dir / "file.txt"
        path.write_bytes(b"first ?x?\r\nsecond\r\n")

        await substitute(path, "?x?", "y")

        assert path.read_bytes() == b"first y\r\nsecond\r\n"

    async def test_missing_file(self, temp_dir):
        with pytest.raises(ValidationError) as exc_info:
            await substitute(temp_dir / "AndroidManifest.xml", "?x?", "y")
        assert "AndroidManifest.xml" in str(exc_info.value)


@pytest.mark.asyncio
class TestSubstitutionService:
    """Tests for the three workspace substitutions."""

    async def test_manifest_gets_redirect_package(self, workspace, request_, config):
        result = await SubstitutionService(config).apply(workspace, request_)

        assert result.success
        manifest = (workspace.root / "AndroidManifest.xml").read_text(encoding="utf-8")
        assert 'package="com.acme.app.redirect"' in manifest
        assert "?redirect_package_name?" not in manifest

    async def test_activity_gets_package(self, workspace, request_, config):
        await SubstitutionService(config).apply(workspace, request_)

        activity = (workspace.root / "MainActivity.cs").read_text(encoding="utf-8")
        assert 'GetLaunchIntentForPackage("com.acme.app")' in activity
        assert "?package_name?" not in activity

    async def test_strings_get_app_name(self, workspace, request_, config):
        result = await SubstitutionService(config).apply(workspace, request_)

        strings = (workspace.root / "Resources" / "values" / "strings.xml").read_text(encoding="utf-8")
        assert '<string name="app_name">Acme Redirect</string>' in strings
        assert result.data["Resources/values/strings.xml"] == 1

    async def test_manifest_only_replaces_its_own_token(self, workspace, request_, config):
        await SubstitutionService(config).apply(workspace, request_)

        manifest = (workspace.root / "AndroidManifest.xml").read_text(encoding="utf-8")
        assert '<package android:name="?package_name?" />' in manifest

    async def test_missing_target_stops_but_keeps_earlier_steps(self, workspace, request_, config):
        (workspace.root / "AndroidManifest.xml").unlink()

        result = await SubstitutionService(config).apply(workspace, request_)

        assert not result.success
        assert result.error_kind == ErrorKind.VALIDATION
        assert "AndroidManifest.xml" in result.error
        assert result.metadata["applied"] == {"MainActivity.cs": 1}
        assert "com.acme.app" in (workspace.root / "MainActivity.cs").read_text(encoding="utf-8")
        strings = (workspace.root / "Resources" / "values" / "strings.xml").read_text(encoding="utf-8")
        assert "AndroidRedirect.AppHost" in strings


class TestSubstitutionPlan:
    """Tests for the substitution plan."""

    def test_plan_order(self, request_, config):
        plan = SubstitutionService(config).plan(request_)
        assert [p.relative_path for p in plan] == [
            "MainActivity.cs",
            "AndroidManifest.xml",
            "Resources/values/strings.xml",
        ]
