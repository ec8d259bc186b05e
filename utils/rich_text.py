"""
Helpers for editing cell text that may be rich text.

openpyxl represents formatted cell text as ``CellRichText``: a list of plain
``str`` runs and ``TextBlock`` runs that carry an ``InlineFont``.  Template
processing cuts tags and metadata out of cell text and renames variables in
expressions; these helpers do that while keeping every run's formatting.
"""

from __future__ import annotations

from typing import List, Union

from openpyxl.cell.rich_text import CellRichText, TextBlock

CellText = Union[str, CellRichText]


def is_rich(value) -> bool:
    return isinstance(value, CellRichText)


def plain_text(value: CellText) -> str:
    return str(value) if value is not None else ""


def _run_text(run) -> str:
    return run.text if isinstance(run, TextBlock) else run


def _with_text(run, text: str):
    if isinstance(run, TextBlock):
        return TextBlock(run.font, text)
    return text


def _normalize(runs: List) -> CellText:
    runs = [r for r in runs if _run_text(r)]
    if not runs:
        return ""
    if all(isinstance(r, str) for r in runs):
        return "".join(runs)
    return CellRichText(runs)


def substring(value: CellText, start: int, end: int) -> CellText:
    """Characters ``[start, end)`` of the text, formatting kept."""
    if not is_rich(value):
        return value[start:end]
    runs = []
    pos = 0
    for run in value:
        text = _run_text(run)
        run_start, run_end = pos, pos + len(text)
        pos = run_end
        lo, hi = max(start, run_start), min(end, run_end)
        if lo < hi:
            runs.append(_with_text(run, text[lo - run_start:hi - run_start]))
    return _normalize(runs)


def remove_range(value: CellText, start: int, end: int) -> CellText:
    """Delete characters ``[start, end)``."""
    if not is_rich(value):
        return value[:start] + value[end:]
    length = len(plain_text(value))
    head = substring(value, 0, start)
    tail = substring(value, end, length)
    return concat(head, tail)


def concat(first: CellText, second: CellText) -> CellText:
    if not is_rich(first) and not is_rich(second):
        return first + second
    runs = list(first) if is_rich(first) else [first]
    runs += list(second) if is_rich(second) else [second]
    return _normalize(runs)


def replace_all(value: CellText, old: str, new: str) -> CellText:
    """
    Replace every occurrence of ``old``.

    A replacement takes the formatting of the run holding the first
    character of the match.
    """
    if not old:
        return value
    if not is_rich(value):
        return value.replace(old, new)
    result: CellText = value
    text = plain_text(result)
    idx = text.find(old)
    while idx >= 0:
        replacement = substring(result, idx, idx + 1)
        if is_rich(replacement):
            replacement = CellRichText([_with_text(list(replacement)[0], new)])
        else:
            replacement = new
        result = concat(concat(substring(result, 0, idx), replacement),
                        substring(result, idx + len(old), len(text)))
        text = plain_text(result)
        idx = text.find(old, idx + len(new))
    return result
