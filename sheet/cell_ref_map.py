"""
Cell-reference map.

Maps each original template cell (``Sheet1!B3``, optionally followed by the
loop suffix of the copy it belongs to, e.g. ``Sheet1!B3[0,1]``) to the list
of positions its copies occupy after the transformation.  A later formula
rewriting pass uses this to expand ``B3`` into ``B3:B7`` and the like.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterator, List, Optional, Tuple

from dto.block import Block
from dto.cell_ref import CellRef
from utils.cells import cell_key

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^(?P<base>[^\[]+)(?P<suffix>(\[\d+,\d+\])*)$")


def split_key(key: str) -> Tuple[str, str]:
    """``"Sheet1!B3[0,1]"`` -> ``("Sheet1!B3", "[0,1]")``."""
    m = _KEY_PATTERN.match(key)
    if m is None:
        return key, ""
    return m.group("base"), m.group("suffix")


class CellRefMap:
    def __init__(self):
        self._refs: Dict[str, List[CellRef]] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._refs

    def __len__(self) -> int:
        return len(self._refs)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._refs))

    def get(self, key: str) -> List[CellRef]:
        return self._refs.get(key, [])

    def put(self, key: str, refs: List[CellRef]) -> None:
        self._refs[key] = list(refs)

    def add(self, key: str, ref: CellRef) -> None:
        refs = self._refs.setdefault(key, [])
        if ref not in refs:
            refs.append(ref)

    def items(self):
        return list(self._refs.items())

    # -------------------------------------------------------------------
    # Template registration
    # -------------------------------------------------------------------

    def register_sheet(self, sheet_name: str, positions: List[Tuple[int, int]]) -> None:
        """Seed identity entries for template cells that formulas reference."""
        for row, col in positions:
            key = cell_key(sheet_name, row, col)
            if key not in self._refs:
                self._refs[key] = [CellRef.from_coords(row, col, sheet_name=sheet_name)]

    # -------------------------------------------------------------------
    # Maintenance after sheet operations
    # -------------------------------------------------------------------

    def shift_in_range(
        self,
        sheet_name: str,
        block: Block,
        d_rows: int,
        d_cols: int,
    ) -> None:
        """Translate every mapped position that lies inside ``block``."""
        for key, refs in self._refs.items():
            self._refs[key] = [
                ref.translate(d_rows, d_cols)
                if self._on_sheet(ref, sheet_name) and block.contains(ref.row, ref.col)
                else ref
                for ref in refs
            ]

    def remove_in_range(self, sheet_name: str, block: Block) -> None:
        """Forget mapped positions whose cells were deleted."""
        for key, refs in self._refs.items():
            self._refs[key] = [
                ref for ref in refs
                if not (self._on_sheet(ref, sheet_name) and block.contains(ref.row, ref.col))
            ]

    def copy_for_block(
        self,
        sheet_name: str,
        block: Block,
        d_rows: int,
        d_cols: int,
        curr_suffix: str,
        new_suffix: str,
    ) -> None:
        """
        Record where the cells of ``block`` went when copied by
        ``(d_rows, d_cols)`` for the iteration ``new_suffix``.

        Keys already carrying a suffix that is a prefix of the current one
        gain the translated positions.  Keys without a suffix gain a new
        suffixed entry for the copy.
        """
        additions: Dict[str, List[CellRef]] = {}
        for key, refs in self._refs.items():
            base, suffix = split_key(key)
            in_block = [
                ref for ref in refs
                if self._on_sheet(ref, sheet_name) and block.contains(ref.row, ref.col)
            ]
            if not in_block:
                continue
            translated = [ref.translate(d_rows, d_cols) for ref in in_block]
            if suffix and curr_suffix.startswith(suffix):
                for ref in translated:
                    if ref not in refs:
                        refs.append(ref)
            elif not suffix:
                new_key = base + curr_suffix + new_suffix
                additions.setdefault(new_key, []).extend(translated)
        for key, refs in additions.items():
            for ref in refs:
                self.add(key, ref)
        logger.debug("Cell ref map has %d entries after copying %s", len(self._refs), block)

    @staticmethod
    def _on_sheet(ref: CellRef, sheet_name: Optional[str]) -> bool:
        return ref.sheet_name is None or ref.sheet_name == sheet_name
