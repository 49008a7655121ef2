"""
Palette encoding of per-triangle colors.

SMD has no vertex color channel, so each triangle's color is quantized to
5 bits per RGBA channel and stored as a UV lookup into a 1024x1024 palette
texture that holds every quantized color:

    column = qr + 32 * qg
    row    = qb + 32 * qa     (counted from the top of the image)

Rounding rules:
    blend_colors: rgb converted to linear light with the sRGB transfer
        function and premultiplied by alpha, blended, then unmultiplied and
        converted back; alpha blends linearly. Every channel is rounded
        half up to 8 bits.
    quantize_channel: floor division by 8 (0..255 -> 0..31).
    expand_channel: round(q * 255 / 31), so 31 maps back to 255.
"""

from __future__ import annotations

import math
import struct
from typing import Sequence, Tuple

import numpy as np

Color = Tuple[int, int, int, int]

QUANT_LEVELS = 32
PALETTE_SIZE = QUANT_LEVELS * QUANT_LEVELS  # 1024
OPAQUE_LEVEL = QUANT_LEVELS - 1


def srgb_to_linear(value: int) -> float:
    """8-bit sRGB channel to linear light in [0, 1]."""
    c = value / 255.0
    if c <= 0.04045:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def linear_to_srgb(value: float) -> int:
    """Linear light in [0, 1] to an 8-bit sRGB channel, rounded half up."""
    if value <= 0.0:
        return 0
    if value >= 1.0:
        return 255
    if value <= 0.0031308:
        c = 12.92 * value
    else:
        c = 1.055 * value ** (1.0 / 2.4) - 0.055
    return min(255, int(math.floor(c * 255.0 + 0.5)))


def blend_colors(c0: Sequence[int], c1: Sequence[int], t: float) -> Color:
    """Blend two unmultiplied sRGB colors in premultiplied linear light.

    Args:
        c0: RGBA at t=0, 8-bit unmultiplied sRGB
        c1: RGBA at t=1
        t: Blend factor, clamped to [0, 1]

    Returns:
        Unmultiplied 8-bit sRGB RGBA. A fully transparent blend is (0, 0, 0, 0).
    """
    t = min(max(t, 0.0), 1.0)
    a0 = c0[3] / 255.0
    a1 = c1[3] / 255.0
    alpha = a0 * (1.0 - t) + a1 * t
    alpha_byte = min(255, int(math.floor(alpha * 255.0 + 0.5)))
    if alpha <= 0.0:
        return (0, 0, 0, alpha_byte)

    rgb = tuple(
        linear_to_srgb(
            (srgb_to_linear(x0) * a0 * (1.0 - t) + srgb_to_linear(x1) * a1 * t) / alpha
        )
        for x0, x1 in zip(c0[:3], c1[:3])
    )
    return rgb + (alpha_byte,)


def quantize_channel(value: int) -> int:
    return int(value) // 8


def quantize_color(color: Sequence[int]) -> Tuple[int, int, int, int]:
    return tuple(quantize_channel(c) for c in color)


def expand_channel(level: int) -> int:
    return int(round(level * 255 / OPAQUE_LEVEL))


def is_opaque(quantized: Sequence[int]) -> bool:
    return quantized[3] == OPAQUE_LEVEL


def palette_uv(quantized: Sequence[int]) -> Tuple[float, float]:
    """Texel center of a quantized color in the palette texture.

    v is flipped because the model compiler counts rows from the bottom.
    """
    qr, qg, qb, qa = quantized
    u = ((qr + qg * QUANT_LEVELS) + 0.5) / PALETTE_SIZE
    v = 1.0 - ((qb + qa * QUANT_LEVELS) + 0.5) / PALETTE_SIZE
    return (u, v)


def color_for_segment(colors: Sequence[Sequence[int]], t_value: float) -> Color:
    """Get the color of the curve at parameter t_value.

    Args:
        colors: One RGBA color per control point
        t_value: Curve parameter; the integer part picks the segment

    Returns:
        Blend of the two colors bounding the segment, clamped to the last
        point past the end
    """
    last = len(colors) - 1
    segment = min(max(int(math.floor(t_value)), 0), last)
    following = min(int(math.ceil(t_value)), last)
    fraction = t_value - math.floor(t_value)
    return blend_colors(colors[segment], colors[max(following, segment)], fraction)


# ---------------------------------------------------------------------------
# Palette texture
# ---------------------------------------------------------------------------

def build_palette_image() -> np.ndarray:
    """RGBA8888 palette, shape (1024, 1024, 4), row 0 at the top."""
    levels = np.array([expand_channel(q) for q in range(QUANT_LEVELS)], dtype=np.uint8)
    col = np.arange(PALETTE_SIZE)
    row = np.arange(PALETTE_SIZE)

    image = np.empty((PALETTE_SIZE, PALETTE_SIZE, 4), dtype=np.uint8)
    image[:, :, 0] = levels[col % QUANT_LEVELS][np.newaxis, :]
    image[:, :, 1] = levels[col // QUANT_LEVELS][np.newaxis, :]
    image[:, :, 2] = levels[row % QUANT_LEVELS][:, np.newaxis]
    image[:, :, 3] = levels[row // QUANT_LEVELS][:, np.newaxis]
    return image


# VTF constants
VTF_VERSION = (7, 2)
VTF_HEADER_SIZE = 80
IMAGE_FORMAT_RGBA8888 = 0
IMAGE_FORMAT_NONE = 0xFFFFFFFF

TEXTUREFLAGS_POINTSAMPLE = 0x0001
TEXTUREFLAGS_CLAMPS = 0x0004
TEXTUREFLAGS_CLAMPT = 0x0008
TEXTUREFLAGS_NOMIP = 0x0100
TEXTUREFLAGS_NOLOD = 0x0200
TEXTUREFLAGS_EIGHTBITALPHA = 0x2000

PALETTE_FLAGS = (TEXTUREFLAGS_POINTSAMPLE | TEXTUREFLAGS_CLAMPS | TEXTUREFLAGS_CLAMPT
                 | TEXTUREFLAGS_NOMIP | TEXTUREFLAGS_NOLOD | TEXTUREFLAGS_EIGHTBITALPHA)


def encode_vtf(image: np.ndarray, flags: int = PALETTE_FLAGS) -> bytes:
    """Single-frame, single-mip VTF 7.2 with uncompressed RGBA8888 data."""
    height, width, channels = image.shape
    if channels != 4:
        raise ValueError(f"expected RGBA image, got {channels} channels")

    reflectivity = image[:, :, :3].reshape(-1, 3).mean(axis=0) / 255.0
    header = struct.pack(
        "<4s2IIHHIHH4x3f4xfIBIBBH",
        b"VTF\0",
        VTF_VERSION[0], VTF_VERSION[1],
        VTF_HEADER_SIZE,
        width, height,
        flags,
        1,      # frames
        0,      # first frame
        float(reflectivity[0]), float(reflectivity[1]), float(reflectivity[2]),
        1.0,    # bumpmap scale
        IMAGE_FORMAT_RGBA8888,
        1,      # mipmap count
        IMAGE_FORMAT_NONE,
        0, 0,   # no low-res thumbnail
        1,      # depth
    )
    header = header.ljust(VTF_HEADER_SIZE, b"\0")
    return header + np.ascontiguousarray(image, dtype=np.uint8).tobytes()


def build_palette_vtf() -> bytes:
    return encode_vtf(build_palette_image())
