# common/colors.py
from __future__ import annotations
from typing import Dict, List, Sequence, Tuple
import colorsys

# Fill for regions/tiles without a value, and the hatch drawn over it
NO_DATA_COLOR = "#D9D9D9"
NO_DATA_HATCH = "///"

ATTENDANCE_CMAP = "YlOrRd"     # choropleth scale
LINE_COLOR      = "#1F77B4"
BAR_COLOR       = "#80C4E9"
BOX_COLOR       = "#A6CEE3"
OUTLIER_COLOR   = "#D62728"


# -------------------- Simple color math --------------------
def _hex_to_rgb(hexs: str) -> Tuple[float, float, float]:
    h = hexs.strip().lstrip("#")
    return int(h[0:2], 16) / 255.0, int(h[2:4], 16) / 255.0, int(h[4:6], 16) / 255.0


def _rgb_to_hex(r: float, g: float, b: float) -> str:
    return "#{:02X}{:02X}{:02X}".format(int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))


def lighten_or_darken(hexs: str, factor: float = 0.15) -> str:
    """Positive factor lightens, negative darkens."""
    r, g, b = _hex_to_rgb(hexs)
    if factor >= 0:
        r += (1 - r) * factor; g += (1 - g) * factor; b += (1 - b) * factor
    else:
        r *= (1 + factor); g *= (1 + factor); b *= (1 + factor)
    return _rgb_to_hex(r, g, b)


def is_light_color(hexs: str, thr: float = 0.60) -> bool:
    """Perceived luminance (Y) above `thr` -> dark text reads better on it."""
    try:
        r, g, b = _hex_to_rgb(hexs)
    except (ValueError, IndexError):
        return False
    return 0.2126 * r + 0.7152 * g + 0.0722 * b >= thr


def text_color_for(hexs: str) -> str:
    return "black" if is_light_color(hexs) else "white"


# -------------------- Palettes --------------------
def categorical_palette(n: int, saturation: float = 0.55, value: float = 0.85) -> List[str]:
    """`n` evenly spaced hues. Depends only on `n`, so colors are stable run to run."""
    if n <= 0:
        return []
    return [_rgb_to_hex(*colorsys.hsv_to_rgb(i / n, saturation, value)) for i in range(n)]


def colors_by_label(labels: Sequence[str]) -> Dict[str, str]:
    """{label -> color}, assigned in the given order."""
    return dict(zip(labels, categorical_palette(len(labels))))


def tile_shades(base: str, n: int, spread: float = 0.55) -> List[str]:
    """`n` shades of `base` going from the color itself towards white."""
    if n <= 1:
        return [base] * max(n, 0)
    return [lighten_or_darken(base, spread * i / (n - 1)) for i in range(n)]
