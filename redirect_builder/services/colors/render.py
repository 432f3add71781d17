"""
Adaptive icon layer rendering.

Synthesizes the two adaptive-icon layers from a single monochrome mask and an
accent color using Pillow.
"""

from __future__ import annotations

from pathlib import Path

from PIL import Image

from ...core.exceptions import BuildIOError, ValidationError
from ...core.logging import get_logger
from ...models.color import Color, ColorPair
from .transform import color_pair, composite_tint

logger = get_logger(__name__)


def tint_image(mask: Image.Image, pair: ColorPair) -> Image.Image:
    """Apply composite_tint to every pixel of a mask.

    Args:
        mask: Source image; converted to RGBA first.
        pair: Foreground and background tints.

    Returns:
        A new RGBA image the same size as the mask.
    """
    source = mask.convert("RGBA")
    tinted = Image.new("RGBA", source.size)
    tinted.putdata([
        composite_tint(pixel, pair.foreground, pair.background)
        for pixel in source.getdata()
    ])
    return tinted


def fill_layer(size: tuple[int, int], color: Color) -> Image.Image:
    """Create a solid, fully opaque layer."""
    return Image.new("RGBA", size, color.with_alpha(255).rgba)


def render_adaptive_layers(
    monochrome_path: Path,
    accent: Color,
    output_dir: Path,
    tinted_name: str = "adaptive_tinted.png",
    background_name: str = "adaptive_background.png",
) -> list[Path]:
    """Render the tinted and background layers for a monochrome icon.

    Args:
        monochrome_path: Grayscale/alpha mask image.
        accent: Accent color driving both layers.
        output_dir: Directory receiving the PNG layers.
        tinted_name: File name of the tinted layer.
        background_name: File name of the background layer.

    Returns:
        Paths of the written layers, tinted first.

    Raises:
        ValidationError: If the mask cannot be read as an image.
        BuildIOError: If a layer cannot be written.
    """
    pair = color_pair(accent)
    try:
        with Image.open(monochrome_path) as mask:
            tinted = tint_image(mask, pair)
    except FileNotFoundError as e:
        raise BuildIOError(
            message="Monochrome image not found",
            path=str(monochrome_path),
            cause=e,
        )
    except OSError as e:
        raise ValidationError(
            message=f"Cannot read monochrome image {monochrome_path.name}",
            field_name="monochrome_image_path",
            cause=e,
        )

    background = fill_layer(tinted.size, pair.background)
    tinted_path = output_dir / tinted_name
    background_path = output_dir / background_name
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        tinted.save(tinted_path, format="PNG")
        background.save(background_path, format="PNG")
    except OSError as e:
        raise BuildIOError(message="Failed to write adaptive icon layers", path=str(output_dir), cause=e)

    logger.info(
        "Rendered adaptive icon layers",
        foreground=pair.foreground.to_hex(),
        background=pair.background.to_hex(),
        size=tinted.size,
    )
    return [tinted_path, background_path]
