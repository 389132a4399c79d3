"""CHIP-8 rendering utilities for frontends."""

from typing import Tuple

import jax.numpy as jnp
import numpy as np

from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, DISPLAY_SIZE

# ARGB8888 words used by the gradient renderer.
ARGB_BLACK = 0xFF000000
ARGB_GRADIENT_BASE = 0xFFFFFFFF
ARGB_GRADIENT_STEP = 8191


def display_to_pixels(display: jnp.ndarray) -> np.ndarray:
    """Reshape the flat 2048-cell display into a (32, 64) boolean image."""
    pixels = np.array(display, dtype=np.bool_)
    if pixels.size != DISPLAY_SIZE:
        raise ValueError(f"Expected {DISPLAY_SIZE} display cells, got {pixels.size}")
    return pixels.reshape(SCREEN_HEIGHT, SCREEN_WIDTH)


def chip8_display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Tuple[int, int, int] = (0, 255, 0),
    off_color: Tuple[int, int, int] = (0, 0, 0),
) -> np.ndarray:
    """Convert CHIP-8 display to RGB array with optional upscaling.

    Args:
        display: Flat boolean array of 2048 cells, row-major
        scale: Upscaling factor for better visibility (default: 8x)
        on_color: RGB color for "on" pixels (default: green)
        off_color: RGB color for "off" pixels (default: black)

    Returns:
        RGB array of shape (32*scale, 64*scale, 3) with uint8 values
    """
    pixels = display_to_pixels(display)
    height, width = pixels.shape

    rgb_frame = np.zeros((height, width, 3), dtype=np.uint8)

    rgb_frame[pixels] = on_color
    rgb_frame[~pixels] = off_color

    # Apply upscaling using nearest neighbor interpolation
    if scale > 1:
        rgb_frame = np.repeat(np.repeat(rgb_frame, scale, axis=0), scale, axis=1)

    return rgb_frame


def chip8_display_to_argb(display: jnp.ndarray, gradient: bool = True) -> np.ndarray:
    """Convert CHIP-8 display to 2048 ARGB8888 words for streaming textures.

    Clear cells are opaque black. Set cells are white, or with ``gradient``
    a colour that starts at 0xFFFFFFFF and drops by 8191 per cell in scan
    order, giving a diagonal colour wash across the screen.
    """
    pixels = display_to_pixels(display).reshape(-1)
    if gradient:
        lit = ARGB_GRADIENT_BASE - ARGB_GRADIENT_STEP * np.arange(DISPLAY_SIZE, dtype=np.uint64)
    else:
        lit = np.full(DISPLAY_SIZE, ARGB_GRADIENT_BASE, dtype=np.uint64)
    return np.where(pixels, lit, ARGB_BLACK).astype(np.uint32)


def create_color_scheme(
    scheme: str = "classic",
) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """Get predefined color schemes for CHIP-8 rendering.

    Args:
        scheme: Color scheme name ("classic", "amber", "white", "blue", "retro")

    Returns:
        Tuple of (on_color, off_color) as RGB tuples
    """
    schemes = {
        "classic": ((0, 255, 0), (0, 0, 0)),  # Green on black
        "amber": ((255, 176, 0), (0, 0, 0)),  # Amber on black
        "white": ((255, 255, 255), (0, 0, 0)),  # White on black
        "blue": ((0, 255, 255), (0, 0, 64)),  # Cyan on dark blue
        "retro": ((255, 255, 0), (64, 0, 64)),  # Yellow on purple
    }

    if scheme not in schemes:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(schemes.keys())}"
        )

    return schemes[scheme]
