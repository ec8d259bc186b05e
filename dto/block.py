"""
Block geometry.

A block is a rectangular region of cells, 0-based and inclusive on all four
sides.  Tags own a block (the cells between the start and end tag); loops
copy their block once per iteration and the copies react to each other's
growth.

A collapsed block has ``right == left - 1`` or ``bottom == top - 1``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Direction(str, Enum):
    """Direction in which a block's content is copied or shifted."""

    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    NONE = "none"


class Block(BaseModel):
    left: int
    right: int
    top: int
    bottom: int
    direction: Direction = Direction.VERTICAL
    # Navigation only; the parent does not own its children.
    parent: Optional["Block"] = Field(default=None, repr=False)
    iteration_nbr: int = 0

    # -------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------

    @classmethod
    def from_tag_cells(
        cls,
        parent: Optional["Block"],
        start_row: int,
        start_col: int,
        end_row: int,
        end_col: int,
    ) -> "Block":
        """Block spanning a start tag cell and its matching end tag cell."""
        return cls(
            left=start_col,
            right=end_col,
            top=start_row,
            bottom=end_row,
            parent=parent,
        )

    @classmethod
    def bodiless(cls, parent: Optional["Block"], row: int, col: int) -> "Block":
        """Single-cell block for a bodiless tag."""
        return cls(
            left=col,
            right=col,
            top=row,
            bottom=row,
            parent=parent,
            direction=Direction.NONE,
        )

    # -------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1

    @property
    def is_collapsed(self) -> bool:
        return self.right < self.left or self.bottom < self.top

    def contains(self, row: int, col: int) -> bool:
        return self.top <= row <= self.bottom and self.left <= col <= self.right

    def translate(self, d_col: int, d_row: int) -> None:
        self.left += d_col
        self.right += d_col
        self.top += d_row
        self.bottom += d_row

    def expand(self, d_col: int, d_row: int) -> None:
        """Grow (or shrink, with negative deltas) the right and bottom edges."""
        self.right += d_col
        self.bottom += d_row

    def collapse(self) -> None:
        self.right = self.left - 1
        self.bottom = self.top - 1

    def react_to_growth(self, sibling: "Block", col_growth: int, row_growth: int) -> None:
        """
        Adjust this block after an earlier sibling copy grew.

        Vertical copies sit below the sibling: they move down by the row
        growth and widen to the sibling's width if the sibling got wider.
        Horizontal copies mirror that.  A block never shrinks here.
        """
        if self.direction == Direction.VERTICAL:
            if col_growth > 0:
                diff = sibling.width - self.width
                if diff > 0:
                    self.expand(diff, 0)
            self.translate(0, row_growth)
        elif self.direction == Direction.HORIZONTAL:
            self.translate(col_growth, 0)
            if row_growth > 0:
                diff = sibling.height - self.height
                if diff > 0:
                    self.expand(0, diff)

    def __str__(self) -> str:
        return (
            f"Block(left={self.left}, right={self.right}, top={self.top}, "
            f"bottom={self.bottom}, direction={self.direction.value})"
        )


Block.model_rebuild()
