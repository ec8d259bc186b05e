from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class LoopMetadata(BaseModel):
    """
    Loop settings carried in ``?@key=value;...`` cell metadata.

    Values stay as raw strings; they are evaluated later like tag
    attributes.  ``left`` / ``right`` set ``defining_cols`` because they
    widen the block beyond the cell that carries the metadata.
    """

    extra_rows: Optional[str] = None
    cols_left: Optional[str] = None
    cols_right: Optional[str] = None
    defining_cols: bool = False
    copy_right: Optional[str] = None
    fixed: Optional[str] = None
    past_end_action: Optional[str] = None
    replace_value: str = ""
    group_dir: Optional[str] = None
    collapse: Optional[str] = None
    on_loop_processed: Optional[str] = None
    on_processed: Optional[str] = None
    index_var: Optional[str] = None
    limit: Optional[str] = None
    var_status: Optional[str] = None
