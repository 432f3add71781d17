"""Accent color derivation and adaptive icon rendering."""

from .render import fill_layer, render_adaptive_layers, tint_image
from .transform import color_pair, composite_tint, derive_background, to_hsl, to_rgb

__all__ = [
    "color_pair",
    "composite_tint",
    "derive_background",
    "fill_layer",
    "render_adaptive_layers",
    "tint_image",
    "to_hsl",
    "to_rgb",
]
