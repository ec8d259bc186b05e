"""Color values in style text (``#RRGGBB``, ``#AARRGGBB`` or a name) to openpyxl ARGB."""

from __future__ import annotations

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#?([0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")

NAMED_COLORS = {
    "AQUA": "00FFFF",
    "BLACK": "000000",
    "BLUE": "0000FF",
    "BLUE_GREY": "666699",
    "BRIGHT_GREEN": "00FF00",
    "BROWN": "993300",
    "CORAL": "FF8080",
    "CORNFLOWER_BLUE": "9999FF",
    "DARK_BLUE": "000080",
    "DARK_GREEN": "003300",
    "DARK_RED": "800000",
    "DARK_TEAL": "003366",
    "DARK_YELLOW": "808000",
    "GOLD": "FFCC00",
    "GREEN": "008000",
    "GREY_25_PERCENT": "C0C0C0",
    "GREY_40_PERCENT": "969696",
    "GREY_50_PERCENT": "808080",
    "GREY_80_PERCENT": "333333",
    "INDIGO": "333399",
    "LAVENDER": "CC99FF",
    "LEMON_CHIFFON": "FFFFCC",
    "LIGHT_BLUE": "3366FF",
    "LIGHT_CORNFLOWER_BLUE": "CCCCFF",
    "LIGHT_GREEN": "CCFFCC",
    "LIGHT_ORANGE": "FF9900",
    "LIGHT_TURQUOISE": "CCFFFF",
    "LIGHT_YELLOW": "FFFF99",
    "LIME": "99CC00",
    "MAROON": "7F0000",
    "OLIVE_GREEN": "333300",
    "ORANGE": "FF6600",
    "ORCHID": "660066",
    "PALE_BLUE": "99CCFF",
    "PINK": "FF00FF",
    "PLUM": "993366",
    "RED": "FF0000",
    "ROSE": "FF99CC",
    "ROYAL_BLUE": "0066CC",
    "SEA_GREEN": "339966",
    "SKY_BLUE": "00CCFF",
    "TAN": "FFCC99",
    "TEAL": "008080",
    "TURQUOISE": "00FFFF",
    "VIOLET": "800080",
    "WHITE": "FFFFFF",
    "YELLOW": "FFFF00",
    "GRAY": "808080",
    "GREY": "808080",
    "SILVER": "C0C0C0",
    "NAVY": "000080",
    "PURPLE": "800080",
    "FUCHSIA": "FF00FF",
}


def to_argb(color: Optional[str]) -> Optional[str]:
    """
    ``"#1F4E78"`` -> ``"FF1F4E78"``; ``"dark_blue"`` -> ``"FF000080"``.

    Returns ``None`` for ``None`` and for anything unrecognized (logged).
    """
    if color is None:
        return None
    text = color.strip()
    m = _HEX_COLOR.match(text)
    if m:
        digits = m.group(1).upper()
        return digits if len(digits) == 8 else "FF" + digits
    named = NAMED_COLORS.get(text.upper().replace(" ", "_").replace("-", "_"))
    if named is not None:
        return "FF" + named
    logger.debug("Unknown color %r ignored", color)
    return None
