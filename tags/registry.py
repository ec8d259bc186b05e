"""Built-in tags, keyed by their namespaced name (``jt:forEach``)."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from loops.for_each import ForEachTag
from loops.for_range import ForTag
from loops.multi_for_each import MultiForEachTag
from tags.style import StyleTag

BUILT_IN_TAGS = (ForEachTag, MultiForEachTag, ForTag, StyleTag)


def default_registry(namespace: str, extra_tags: Optional[Iterable[type]] = None) -> Dict[str, type]:
    """
    Map ``namespace:name`` to tag class for the built-in tags plus
    ``extra_tags`` (subclasses of ``BaseTag`` with a ``name``).
    """
    registry: Dict[str, type] = {}
    for tag_class in list(BUILT_IN_TAGS) + list(extra_tags or []):
        registry[f"{namespace}:{tag_class.name}"] = tag_class
    return registry
