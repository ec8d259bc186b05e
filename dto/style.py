from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class Style(BaseModel):
    """
    A bundle of optional visual properties.

    Only the properties that were explicitly set are applied to a cell;
    everything left as ``None`` keeps the cell's current value.  Enumerated
    values are held in openpyxl vocabulary (``"center"``, ``"thin"``,
    ``"solid"``, ...).  Colors are kept as written (``#RRGGBB`` or a color
    name) and resolved when applied.
    """

    style_to_apply: bool = False

    alignment: Optional[str] = None
    border_bottom: Optional[str] = None
    border_left: Optional[str] = None
    border_right: Optional[str] = None
    border_top: Optional[str] = None
    border_bottom_color: Optional[str] = None
    border_left_color: Optional[str] = None
    border_right_color: Optional[str] = None
    border_top_color: Optional[str] = None
    # 1/256 character units
    column_width: Optional[int] = None
    data_format: Optional[str] = None
    fill_background_color: Optional[str] = None
    fill_foreground_color: Optional[str] = None
    fill_pattern: Optional[str] = None
    hidden: Optional[bool] = None
    indention: Optional[int] = None
    locked: Optional[bool] = None
    rotation: Optional[int] = None
    # twips (1/20 point)
    row_height: Optional[int] = None
    vertical_alignment: Optional[str] = None
    wrap_text: Optional[bool] = None

    font_bold: Optional[bool] = None
    font_charset: Optional[int] = None
    font_color: Optional[str] = None
    font_height_in_points: Optional[float] = None
    font_italic: Optional[bool] = None
    font_name: Optional[str] = None
    font_strikeout: Optional[bool] = None
    font_type_offset: Optional[str] = None
    font_underline: Optional[str] = None

    def set(self, **properties) -> None:
        for name, value in properties.items():
            setattr(self, name, value)
        self.style_to_apply = True

    def apply(self, other: "Style") -> None:
        """Overlay every property that ``other`` sets."""
        for name in type(self).model_fields:
            if name == "style_to_apply":
                continue
            value = getattr(other, name)
            if value is not None:
                setattr(self, name, value)
                self.style_to_apply = True

    @property
    def has_font_properties(self) -> bool:
        return any(
            getattr(self, name) is not None
            for name in type(self).model_fields
            if name.startswith("font_")
        )
