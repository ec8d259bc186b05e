from __future__ import annotations

from typing import Dict

from pydantic import BaseModel


class TagInfo(BaseModel):
    """Structural result of parsing one tag out of cell text."""

    is_tag: bool = False
    is_end_tag: bool = False
    is_bodiless: bool = False
    namespace: str = ""
    tag_name: str = ""
    attributes: Dict[str, str] = {}
    tag_start_idx: int = -1
    after_tag_idx: int = -1
    tag_text: str = ""

    @property
    def namespace_and_tag_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}:{self.tag_name}"
        return self.tag_name
