import re

import numpy as np
from matplotlib.colors import LinearSegmentedColormap, to_rgba

_RGBA_RE = re.compile(
    r"^\s*rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)\s*$",
    flags=re.IGNORECASE,
)


def css_to_rgba(color: str) -> tuple:
    """Convert a CSS colour (``rgba(...)``, ``rgb(...)``, ``#hex``) to a matplotlib RGBA tuple."""
    m = _RGBA_RE.match(str(color))
    if m:
        r, g, b = (min(max(float(m.group(i)) / 255.0, 0.0), 1.0) for i in (1, 2, 3))
        a = float(m.group(4)) if m.group(4) is not None else 1.0
        return (r, g, b, min(max(a, 0.0), 1.0))
    return to_rgba(color)


def gradient_colormap(stops) -> LinearSegmentedColormap:
    """Colormap running from the bottom stop (0) to the top stop (1)."""
    ordered = sorted(stops, key=lambda s: s[0], reverse=True)
    return LinearSegmentedColormap.from_list(
        "series_gradient",
        [(1.0 - pos, css_to_rgba(col)) for pos, col in ordered],
    )


def gradient_column(samples: int = 256) -> np.ndarray:
    return np.linspace(0.0, 1.0, samples).reshape(-1, 1)


def display_label(value) -> str:
    return "" if value is None else str(value)


def format_value(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return "" if value is None else str(value)


def make_unique_name(name: str, existing_names: set) -> str:
    base = str(name).strip() if str(name).strip() else "(blank)"
    if base not in existing_names:
        return base
    i = 2
    while f"{base} ({i})" in existing_names:
        i += 1
    return f"{base} ({i})"


def unique_labels(labels) -> list:
    """Distinct slice names; surfaces that merge equal labels would otherwise aggregate rows."""
    seen: set = set()
    out = []
    for lbl in labels:
        name = make_unique_name(display_label(lbl), seen)
        seen.add(name)
        out.append(name)
    return out
