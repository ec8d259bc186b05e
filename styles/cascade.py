from __future__ import annotations

import logging
from typing import Dict, List, Optional

from dto.style import Style

logger = logging.getLogger(__name__)


def resolve_style(
    style_map: Dict[str, Style],
    class_names: List[str],
    inline: Optional[Style] = None,
    location: str = "",
) -> Style:
    """
    Combine style classes and an inline style into one Style.

    Classes apply in the order given, so a later class overrides an earlier
    one; the inline style overrides them all.
    """
    result = Style()
    for name in class_names:
        style = style_map.get(name)
        if style is None:
            logger.warning("Unknown style class %r ignored%s", name, location)
            continue
        result.apply(style)
    if inline is not None:
        result.apply(inline)
    logger.debug("Resolved style from classes %s (inline=%s)", class_names, inline is not None)
    return result
