from parsers.tag import TagParser
from parsers.formula import FormulaParser
from parsers.metadata import MetadataParser, SheetNameMetadataParser
from parsers.style import StyleParser, add_style

__all__ = [
    "TagParser",
    "FormulaParser",
    "MetadataParser",
    "SheetNameMetadataParser",
    "StyleParser",
    "add_style",
]
