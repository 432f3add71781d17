"""
Text Substitution Service.

Replaces literal placeholder tokens in the staged workspace with the values of
a build request.
"""

from __future__ import annotations

from pathlib import Path

import aiofiles
from pydantic import BaseModel

from ...core.config import Config, get_config
from ...core.exceptions import BuildIOError, RedirectBuilderError, ValidationError
from ...core.logging import get_logger
from ...core.types import ServiceResult
from ...models.build import BuildRequest, BuildWorkspace

logger = get_logger(__name__)


class Substitution(BaseModel):
    """One token replacement applied to one workspace file."""

    relative_path: str
    token: str
    replacement: str


async def substitute(file_path: Path, token: str, replacement: str) -> int:
    """Replace every literal occurrence of a token in a text file.

    Matching is exact and case-sensitive. The file is rewritten in place only
    when the token occurs.

    Returns:
        Number of occurrences replaced.

    Raises:
        ValidationError: If the file does not exist.
        BuildIOError: If the file cannot be read or written.
    """
    if not file_path.is_file():
        raise ValidationError(
            message=f"Required template file is missing: {file_path.name}",
            field_name=file_path.name,
            context={"path": str(file_path)},
        )

    try:
        async with aiofiles.open(file_path, "r", encoding="utf-8", newline="") as f:
            content = await f.read()

        count = content.count(token) if token else 0
        if count:
            async with aiofiles.open(file_path, "w", encoding="utf-8", newline="") as f:
                await f.write(content.replace(token, replacement))
    except OSError as e:
        raise BuildIOError(message=f"Failed to rewrite {file_path.name}", path=str(file_path), cause=e)

    return count


class SubstitutionService:
    """Applies the package and display-name substitutions to a workspace."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or get_config()

    def plan(self, request: BuildRequest) -> list[Substitution]:
        """The three substitutions every build applies, in order."""
        template = self.config.template
        tokens = self.config.tokens
        return [
            Substitution(
                relative_path=template.activity_file,
                token=tokens.package_token,
                replacement=request.package_name,
            ),
            Substitution(
                relative_path=template.manifest_file,
                token=tokens.redirect_package_token,
                replacement=f"{request.package_name}{tokens.redirect_suffix}",
            ),
            Substitution(
                relative_path=template.strings_file,
                token=tokens.module_name,
                replacement=request.app_name,
            ),
        ]

    async def apply(self, workspace: BuildWorkspace, request: BuildRequest) -> ServiceResult[dict[str, int]]:
        """Apply every planned substitution.

        Stops at the first missing file. Substitutions already applied stay in
        place; the result reports the failure.

        Returns:
            ServiceResult mapping each rewritten file to its replacement count.
        """
        counts: dict[str, int] = {}
        try:
            for item in self.plan(request):
                count = await substitute(workspace.root / item.relative_path, item.token, item.replacement)
                counts[item.relative_path] = count
                logger.info("Substituted token", file=item.relative_path, token=item.token, occurrences=count)
                if count == 0:
                    logger.warning("Token not found", file=item.relative_path, token=item.token)
        except RedirectBuilderError as e:
            logger.warning("Substitution failed", error=str(e), applied=list(counts))
            return ServiceResult.from_error(e, applied=counts)

        return ServiceResult.ok(counts)
