"""
Color transforms.

Pure functions for HSL conversion, accent-to-background derivation and
per-pixel tint compositing. Hue, saturation and lightness are normalized to
[0, 1]; hue 1.0 wraps to 0.0 (360 degrees).
"""

from __future__ import annotations

import colorsys

from ...models.color import Color, ColorPair, Pixel

BACKGROUND_SATURATION_FACTOR = 0.2
BACKGROUND_LIGHTNESS_FACTOR = 0.25


def _to_channel(value: float) -> int:
    # truncates toward zero
    return max(0, min(255, int(value * 255)))


def to_hsl(color: Color) -> tuple[float, float, float]:
    """Convert the RGB channels of a color to (hue, saturation, lightness)."""
    h, l, s = colorsys.rgb_to_hls(color.r / 255, color.g / 255, color.b / 255)
    return h, s, l


def to_rgb(h: float, s: float, l: float, alpha: int = 255) -> Color:
    """Convert (hue, saturation, lightness) back to an 8-bit color."""
    r, g, b = colorsys.hls_to_rgb(h % 1.0, l, s)
    return Color(r=_to_channel(r), g=_to_channel(g), b=_to_channel(b), a=alpha)


def derive_background(foreground: Color) -> Color:
    """Mute an accent color into its icon background.

    Saturation is scaled by 0.2 and lightness by 0.25; the result is always
    fully opaque. Not idempotent: apply exactly once per derivation.
    """
    h, s, l = to_hsl(foreground)
    return to_rgb(h, s * BACKGROUND_SATURATION_FACTOR, l * BACKGROUND_LIGHTNESS_FACTOR)


def color_pair(accent: Color) -> ColorPair:
    """Build the foreground/background pair for an accent color."""
    foreground = accent.with_alpha(255)
    return ColorPair(foreground=foreground, background=derive_background(foreground))


def composite_tint(source: Pixel, foreground: Color, background: Color) -> Pixel:
    """Tint one pixel of a monochrome mask.

    Visible pixels take the foreground RGB and keep their own alpha; fully
    transparent pixels become the background color at full opacity.
    """
    alpha = source[3]
    if alpha > 0:
        return (foreground.r, foreground.g, foreground.b, alpha)
    return (background.r, background.g, background.b, 255)
