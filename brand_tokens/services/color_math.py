# brand_tokens/services/color_math.py
"""
Color helpers for token synthesis.

Both public functions are total: a color they cannot parse produces a
documented fallback instead of an exception, so a bad neutral base never
breaks synthesis of the rest of the token set.

Light/dark variations shift CIE Lab lightness by ``LAB_STEP * amount``
(the same scheme chroma.js uses for ``brighten``/``darken``) and clip the
result back into sRGB.
"""
from __future__ import annotations

import colorsys
import logging
import math
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

NEUTRAL_FALLBACK: Tuple[str, ...] = (
    "#ffffff",
    "#f8f9fa",
    "#e9ecef",
    "#dee2e6",
    "#ced4da",
    "#adb5bd",
    "#6c757d",
    "#495057",
    "#343a40",
    "#212529",
    "#000000",
)

LAB_STEP = 18.0
LIGHT_AMOUNT = 1.5
EXTRA_AMOUNT = 3.0

_NEUTRAL_HSL_RE = re.compile(r"hsl\((\d{1,3}),\s*(\d{1,3})%,\s*(\d{1,3})%\)")
_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_RGB_RE = re.compile(r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*[\d.]+\s*)?\)$")
_HSL_RE = re.compile(
    r"^hsla?\(\s*(\d{1,3}(?:\.\d+)?)\s*,\s*(\d{1,3}(?:\.\d+)?)%\s*,\s*(\d{1,3}(?:\.\d+)?)%\s*(?:,\s*[\d.]+\s*)?\)$"
)

# D65 reference white
_XN, _YN, _ZN = 0.950470, 1.0, 1.088830
_T0 = 4 / 29
_T1 = 6 / 29
_T2 = 3 * _T1 ** 2
_T3 = _T1 ** 3

RGB = Tuple[float, float, float]


@dataclass(frozen=True)
class ColorVariations:
    x_light: str
    light: str
    dark: str
    x_dark: str


# ── Parsing ───────────────────────────────────────────────────────────────────
def _hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    r, g, b = colorsys.hls_to_rgb((h % 360) / 360.0, l / 100.0, s / 100.0)
    return (r * 255, g * 255, b * 255)


def parse_color(value: str) -> Optional[RGB]:
    """Parse ``#rgb``, ``#rrggbb``, ``rgb()`` or ``hsl()`` into 0-255 channels."""
    if not isinstance(value, str):
        return None
    s = value.strip()

    m = _HEX_RE.match(s)
    if m:
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return tuple(float(int(digits[i:i + 2], 16)) for i in (0, 2, 4))  # type: ignore[return-value]

    m = _RGB_RE.match(s)
    if m:
        channels = tuple(float(c) for c in m.groups())
        if all(c <= 255 for c in channels):
            return channels  # type: ignore[return-value]
        return None

    m = _HSL_RE.match(s)
    if m:
        h, sat, light = (float(x) for x in m.groups())
        if sat > 100 or light > 100:
            return None
        return _hsl_to_rgb(h, sat, light)

    return None


def rgb_to_hex(rgb: RGB) -> str:
    r, g, b = (int(round(min(255.0, max(0.0, c)))) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


# ── Lab conversion ────────────────────────────────────────────────────────────
def _rgb_xyz(c: float) -> float:
    c /= 255.0
    return c / 12.92 if c <= 0.04045 else ((c + 0.055) / 1.055) ** 2.4


def _xyz_lab(t: float) -> float:
    return t ** (1 / 3) if t > _T3 else t / _T2 + _T0


def _lab_xyz(t: float) -> float:
    return t ** 3 if t > _T1 else _T2 * (t - _T0)


def _xyz_rgb(c: float) -> float:
    c = 12.92 * c if c <= 0.00304 else 1.055 * math.copysign(abs(c) ** (1 / 2.4), c) - 0.055
    return 255.0 * c


def rgb_to_lab(rgb: RGB) -> Tuple[float, float, float]:
    r, g, b = (_rgb_xyz(c) for c in rgb)
    x = _xyz_lab((0.4124564 * r + 0.3575761 * g + 0.1804375 * b) / _XN)
    y = _xyz_lab((0.2126729 * r + 0.7151522 * g + 0.0721750 * b) / _YN)
    z = _xyz_lab((0.0193339 * r + 0.1191920 * g + 0.9503041 * b) / _ZN)
    return (116 * y - 16, 500 * (x - y), 200 * (y - z))


def lab_to_rgb(lab: Tuple[float, float, float]) -> RGB:
    l, a, b = lab
    y = (l + 16) / 116
    x = y + a / 500
    z = y - b / 200
    x, y, z = _XN * _lab_xyz(x), _YN * _lab_xyz(y), _ZN * _lab_xyz(z)
    return (
        _xyz_rgb(3.2404542 * x - 1.5371385 * y - 0.4985314 * z),
        _xyz_rgb(-0.9692660 * x + 1.8760108 * y + 0.0415560 * z),
        _xyz_rgb(0.0556434 * x - 0.2040259 * y + 1.0572252 * z),
    )


def brighten(rgb: RGB, amount: float) -> str:
    """Shift Lab lightness by ``LAB_STEP * amount``; negative amounts darken."""
    l, a, b = rgb_to_lab(rgb)
    return rgb_to_hex(lab_to_rgb((l + LAB_STEP * amount, a, b)))


def lightness(value: str) -> Optional[float]:
    rgb = parse_color(value)
    return rgb_to_lab(rgb)[0] if rgb is not None else None


# ── Public API ────────────────────────────────────────────────────────────────
def neutral_scale(base: str) -> List[str]:
    """11 shades from white-ish (index 0) to black-ish (index 10).

    Only ``hsl(h, s%, l%)`` bases are expanded; hue and saturation are kept
    and lightness steps 100, 90, ..., 0. Anything else yields NEUTRAL_FALLBACK.
    """
    m = _NEUTRAL_HSL_RE.search(base) if isinstance(base, str) else None
    if not m:
        logger.debug("neutral base %r is not hsl(), using fallback scale", base)
        return list(NEUTRAL_FALLBACK)
    hue, saturation = int(m.group(1)), int(m.group(2))
    return [f"hsl({hue}, {saturation}%, {100 - i * 10}%)" for i in range(11)]


def color_variations(base: str) -> ColorVariations:
    rgb = parse_color(base)
    if rgb is None:
        logger.warning("cannot derive variations for color %r", base)
        return ColorVariations(x_light=base, light=base, dark=base, x_dark=base)
    return ColorVariations(
        x_light=brighten(rgb, EXTRA_AMOUNT),
        light=brighten(rgb, LIGHT_AMOUNT),
        dark=brighten(rgb, -LIGHT_AMOUNT),
        x_dark=brighten(rgb, -EXTRA_AMOUNT),
    )
