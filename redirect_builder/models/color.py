"""
Color data models.

Colors are 8-bit RGBA values. A ColorPair couples an accent (foreground) color
with the background derived from it; pairs are recomputed on demand and never
persisted.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

Pixel = tuple[int, int, int, int]


class Color(BaseModel):
    """An 8-bit RGBA color."""

    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)
    a: int = Field(default=255, ge=0, le=255)

    model_config = {"frozen": True}

    @classmethod
    def from_hex(cls, value: str) -> Color:
        """Parse ``#RRGGBB`` or ``#AARRGGBB``.

        Raises:
            ValueError: If the string is not a hex color.
        """
        digits = value.strip().lstrip("#")
        if len(digits) not in (6, 8):
            raise ValueError(f"Invalid hex color: {value!r}")
        try:
            channels = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        except ValueError as e:
            raise ValueError(f"Invalid hex color: {value!r}") from e
        if len(channels) == 4:
            a, r, g, b = channels
        else:
            r, g, b = channels
            a = 255
        return cls(r=r, g=g, b=b, a=a)

    def to_hex(self) -> str:
        """Format as ``#RRGGBB``, or ``#AARRGGBB`` when not fully opaque."""
        if self.a == 255:
            return f"#{self.r:02X}{self.g:02X}{self.b:02X}"
        return f"#{self.a:02X}{self.r:02X}{self.g:02X}{self.b:02X}"

    def with_alpha(self, alpha: int) -> Color:
        """Return the same color with a different alpha."""
        return Color(r=self.r, g=self.g, b=self.b, a=alpha)

    @property
    def rgba(self) -> Pixel:
        return (self.r, self.g, self.b, self.a)


class ColorPair(BaseModel):
    """Accent color and the background derived from it."""

    foreground: Color
    background: Color

    model_config = {"frozen": True}
