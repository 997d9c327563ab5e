"""Color parsing, HSL adjustments and hex formatting for path previews.

Provides:
    - parse_color(): Named color or hex string → RGB floats in [0, 1]
    - to_hex(): RGB floats → "#RRGGBB" (uppercase)
    - darken(): Scale HSL lightness down by a ratio
    - lightness(): HSL lightness of a color, for ordering checks

Used by:
    - Slider gradient: progressively darkened copies of a base color
    - Config validation: base color must parse

Invariants:
    - RGB channels are floats in [0, 1] internally
    - Hex strings are emitted uppercase with a leading '#'
    - darken(c, 0) == c; darken(c, 1) is black
"""

import colorsys
import math
from typing import Tuple, Union

RGB = Tuple[float, float, float]

NAMED_COLORS = {
    'black': '#000000',
    'white': '#FFFFFF',
    'red': '#FF0000',
    'lime': '#00FF00',
    'green': '#008000',
    'blue': '#0000FF',
    'yellow': '#FFFF00',
    'orange': '#FFA500',
    'cyan': '#00FFFF',
    'magenta': '#FF00FF',
    'gray': '#808080',
}


def parse_color(value: Union[str, RGB]) -> RGB:
    """Parse a color into RGB floats.

    Parameters
    ----------
    value : str or tuple
        CSS-style name ("yellow"), "#RRGGBB", "#RGB", or an RGB float triple

    Returns
    -------
    tuple[float, float, float]
        RGB in [0, 1]

    Raises
    ------
    ValueError
        If the color cannot be parsed
    """
    if isinstance(value, tuple):
        if len(value) != 3 or not all(0.0 <= c <= 1.0 for c in value):
            raise ValueError(f"RGB triple must have 3 channels in [0, 1], got {value!r}")
        return (float(value[0]), float(value[1]), float(value[2]))

    text = NAMED_COLORS.get(value.strip().lower(), value.strip())
    if not text.startswith('#'):
        raise ValueError(f"Unknown color: {value!r}")

    digits = text[1:]
    if len(digits) == 3:
        digits = ''.join(ch * 2 for ch in digits)
    if len(digits) != 6:
        raise ValueError(f"Hex color must have 3 or 6 digits, got {value!r}")

    try:
        channels = [int(digits[i:i + 2], 16) for i in (0, 2, 4)]
    except ValueError as exc:
        raise ValueError(f"Invalid hex color {value!r}") from exc
    return (channels[0] / 255.0, channels[1] / 255.0, channels[2] / 255.0)


def _channel_to_byte(c: float) -> int:
    # Round half up, matching browser color serializers. HLS round trips
    # leave channels like 0.4999999 that must land on the same byte as 0.5
    return max(0, min(255, int(math.floor(round(c * 255.0, 6) + 0.5))))


def to_hex(rgb: RGB) -> str:
    """Format RGB floats as uppercase "#RRGGBB"."""
    return '#' + ''.join(f"{_channel_to_byte(c):02X}" for c in rgb)


def darken(color: Union[str, RGB], ratio: float) -> RGB:
    """Darken a color by reducing its HSL lightness.

    Parameters
    ----------
    color : str or tuple
        Input color (see :func:`parse_color`)
    ratio : float
        Fraction of the current lightness to remove, clamped to [0, 1]

    Returns
    -------
    tuple[float, float, float]
        Darkened RGB

    Notes
    -----
    New lightness is ``l - l * ratio``; hue and saturation are preserved.

    Examples
    --------
    >>> to_hex(darken("yellow", 0.5))
    '#808000'
    """
    r, g, b = parse_color(color)
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    ratio = min(max(ratio, 0.0), 1.0)
    return colorsys.hls_to_rgb(h, l - l * ratio, s)


def lightness(color: Union[str, RGB]) -> float:
    """HSL lightness of a color in [0, 1]."""
    r, g, b = parse_color(color)
    return colorsys.rgb_to_hls(r, g, b)[1]
