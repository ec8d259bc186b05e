"""
Metadata parsers.

Cell metadata follows the ``?@`` marker at the end of a cell's text and
configures the implicit loop that the cell starts:

    ${employees.name}?@extraRows=1;pastEndAction=remove;varStatus="status"

The sheet-name variant accepts a shorter vocabulary (single-letter
abbreviations) and rejects the keys that make no sense when a whole sheet is
the loop body.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Optional

from dto.metadata import LoopMetadata
from exceptions import MetadataParseError
from scanners.metadata import MetadataScanner, MetadataToken

logger = logging.getLogger(__name__)

METADATA_MARKER = "?@"

# key in the template -> LoopMetadata field
METADATA_KEYS: Dict[str, str] = {
    "extraRows": "extra_rows",
    "left": "cols_left",
    "right": "cols_right",
    "copyRight": "copy_right",
    "fixed": "fixed",
    "pastEndAction": "past_end_action",
    "replaceValue": "replace_value",
    "groupDir": "group_dir",
    "collapse": "collapse",
    "onLoopProcessed": "on_loop_processed",
    "onProcessed": "on_processed",
    "indexVar": "index_var",
    "limit": "limit",
    "varStatus": "var_status",
}


def split_metadata(text: str):
    """Split cell text into ``(text_before_marker, metadata_or_None)``."""
    idx = text.rfind(METADATA_MARKER)
    if idx < 0:
        return text, None
    return text[:idx], text[idx + len(METADATA_MARKER):]


class MetadataParser:
    def __init__(self, metadata_text: str, location: str = ""):
        self._text = metadata_text or ""
        self._location = location

    def _error(self, message: str) -> MetadataParseError:
        return MetadataParseError(message, self._text, self._location)

    # -------------------------------------------------------------------
    # Vocabulary hooks
    # -------------------------------------------------------------------

    def canonical_name(self, name: str) -> str:
        return name

    def restricted_names(self) -> FrozenSet[str]:
        return frozenset()

    # -------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------

    def parse(self) -> LoopMetadata:
        metadata = LoopMetadata()
        scanner = MetadataScanner(self._text)
        var_name: Optional[str] = None
        value: Optional[str] = None
        seen_equals = False
        inside_quotes = False

        token = scanner.next_token()
        while True:
            if token == MetadataToken.WHITESPACE:
                pass
            elif token == MetadataToken.STRING:
                if inside_quotes:
                    value = scanner.current_lexeme
                elif var_name is None:
                    var_name = scanner.current_lexeme.strip()
                elif seen_equals:
                    value = scanner.current_lexeme.strip()
                else:
                    raise self._error(f'Expected "=" after variable name "{var_name}"')
            elif token == MetadataToken.EQUALS:
                if var_name is None:
                    raise self._error('Variable name missing before "="')
                seen_equals = True
            elif token == MetadataToken.DOUBLE_QUOTE:
                if inside_quotes and value is None:
                    value = ""
                inside_quotes = not inside_quotes
            elif token in (MetadataToken.SEMICOLON, MetadataToken.EOI):
                if var_name is not None:
                    if not seen_equals:
                        raise self._error("Found end of metadata before equals sign")
                    if value is None:
                        raise self._error("Found end of metadata before variable value")
                    self._set_value(metadata, var_name, value)
                var_name = None
                value = None
                seen_equals = False
                if token == MetadataToken.EOI:
                    break
            else:
                raise self._error("Found end of input while scanning metadata value")
            token = scanner.next_token()

        return metadata

    def _set_value(self, metadata: LoopMetadata, name: str, value: str) -> None:
        name = self.canonical_name(name)
        if name in self.restricted_names():
            raise self._error(f'Variable name "{name}" is restricted in this context.')
        field = METADATA_KEYS.get(name)
        if field is None:
            raise self._error(f'Unrecognized variable name "{name}"')
        setattr(metadata, field, value)
        if field in ("cols_left", "cols_right"):
            metadata.defining_cols = True
        logger.debug("Metadata %s = %r", name, value)


class SheetNameMetadataParser(MetadataParser):
    """Metadata parser for loops declared in a sheet name."""

    ABBREVIATIONS: Dict[str, str] = {
        "i": "indexVar",
        "l": "limit",
        "r": "replaceValue",
        "v": "varStatus",
    }

    RESTRICTED: FrozenSet[str] = frozenset({
        "extraRows",
        "left",
        "right",
        "copyRight",
        "fixed",
        "pastEndAction",
        "groupDir",
        "collapse",
        "onLoopProcessed",
        "onProcessed",
    })

    def canonical_name(self, name: str) -> str:
        return self.ABBREVIATIONS.get(name, name)

    def restricted_names(self) -> FrozenSet[str]:
        return self.RESTRICTED
