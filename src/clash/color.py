"""Deterministic player colors.

A player's color depends only on their identifier: the identifier is
hashed with 32-bit FNV-1a, the hash picks a hue, and the hue is rendered at
a fixed OKLCH lightness and chroma, pulled back into the sRGB gamut if
needed. Everything here is pure and uses explicit 32-bit wraparound so any
implementation following the same steps produces the same hex strings.
"""

import math
from dataclasses import dataclass
from uuid import UUID

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193

LIGHTNESS = 0.8
BASE_CHROMA = 0.12
GAMUT_SEARCH_STEPS = 24  # Converges well below one 8-bit step
TEXT_COLOR = "#ffffff"


@dataclass(frozen=True)
class PlayerColor:
    """Colors used to render a player's badge."""

    background: str
    text: str


def fnv1a_32(data: str | bytes) -> int:
    """32-bit FNV-1a hash of a string (UTF-8) or bytes."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    h = FNV_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return h


def _srgb_encode(u: float) -> float:
    """Apply the sRGB transfer curve to a linear channel."""
    if u <= 0.0031308:
        return 12.92 * u
    return 1.055 * u ** (1 / 2.4) - 0.055


def oklch_to_srgb(lightness: float, chroma: float, hue: float) -> tuple[float, float, float]:
    """Convert OKLCH to gamma-encoded sRGB.

    Channels are not clamped; values outside [0, 1] mean out of gamut.

    Args:
        lightness: Perceptual lightness (0..1)
        chroma: Perceptual chroma
        hue: Hue angle in degrees

    Returns:
        (r, g, b) floats
    """
    hue_rad = hue * math.pi / 180
    a = chroma * math.cos(hue_rad)
    b = chroma * math.sin(hue_rad)

    l_ = lightness + 0.3963377774 * a + 0.2158037573 * b
    m_ = lightness - 0.1055613458 * a - 0.0638541728 * b
    s_ = lightness - 0.0894841775 * a - 1.2914855480 * b

    l3 = l_ * l_ * l_
    m3 = m_ * m_ * m_
    s3 = s_ * s_ * s_

    r_lin = 4.0767416621 * l3 - 3.3077115913 * m3 + 0.2309699292 * s3
    g_lin = -1.2684380046 * l3 + 2.6097574011 * m3 - 0.3413193965 * s3
    b_lin = -0.0041960863 * l3 - 0.7034186147 * m3 + 1.7076147010 * s3

    return _srgb_encode(r_lin), _srgb_encode(g_lin), _srgb_encode(b_lin)


def _in_gamut(rgb: tuple[float, float, float]) -> bool:
    return all(0.0 <= c <= 1.0 for c in rgb)


def _fit_chroma(lightness: float, chroma: float, hue: float) -> tuple[float, float, float]:
    """Render the color, reducing chroma just enough to stay inside sRGB."""
    rgb = oklch_to_srgb(lightness, chroma, hue)
    if _in_gamut(rgb):
        return rgb

    # Largest scale in [0, 1] that is still in gamut; scale 0 is gray and always fits
    lo, hi = 0.0, 1.0
    for _ in range(GAMUT_SEARCH_STEPS):
        mid = (lo + hi) / 2
        if _in_gamut(oklch_to_srgb(lightness, chroma * mid, hue)):
            lo = mid
        else:
            hi = mid
    return oklch_to_srgb(lightness, chroma * lo, hue)


def _to_byte(channel: float) -> int:
    clamped = min(max(channel, 0.0), 1.0)
    return int(math.floor(clamped * 255 + 0.5))


def to_hex(rgb: tuple[float, float, float]) -> str:
    """Quantize an sRGB triple to ``#rrggbb``."""
    return "#" + "".join(f"{_to_byte(c):02x}" for c in rgb)


def hue_for(player_id: UUID | str) -> int:
    """Hue in degrees [0, 360) derived from the identifier."""
    return fnv1a_32(str(player_id).lower()) % 360


def color_for(player_id: UUID | str) -> PlayerColor:
    """Derive the display colors of a player from their identifier."""
    hue = hue_for(player_id)
    chroma = BASE_CHROMA * (0.98 - 0.04 * math.cos((hue - 305) * math.pi / 180))
    rgb = _fit_chroma(LIGHTNESS, chroma, hue)
    return PlayerColor(background=to_hex(rgb), text=TEXT_COLOR)
