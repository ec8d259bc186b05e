"""
Tags.

A tag is markup in cell text (``<jt:forEach items="${rows}" var="row">``)
whose start and end cells delimit the block it works on.  The loop tags live
in ``loops``; ``tags.registry`` collects every built-in tag.
"""

from tags.base import BaseTag
from tags.style import StyleTag

__all__ = [
    "BaseTag",
    "StyleTag",
]
