"""
Cell styling.

  1. StyleParser output (``name -> Style``) is registered on the workbook
     context.
  2. ``resolve_style`` combines class references and an inline style.
  3. ``apply_style`` writes the result to a cell through the font and cell
     format caches.
"""

from styles.apply import apply_style
from styles.cache import CellFormat, CellStyleCache, FontCache
from styles.cascade import resolve_style
from styles.colors import to_argb

__all__ = [
    "apply_style",
    "CellFormat",
    "CellStyleCache",
    "FontCache",
    "resolve_style",
    "to_argb",
]
