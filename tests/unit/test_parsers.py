from __future__ import annotations

import pytest

from dto.cell_ref import CellRef, quote_sheet_name
from exceptions import FormulaParseError, MetadataParseError, StyleParseError, TagParseError
from parsers.formula import FormulaParser
from parsers.metadata import MetadataParser, SheetNameMetadataParser, split_metadata
from parsers.style import StyleParser
from parsers.tag import TagParser

# -------------------------------------------------------------------
# Tags
# -------------------------------------------------------------------


def test_start_tag_with_attributes() -> None:
    text = 'x <jt:forEach items="${employees}" var="e">${e.name}'
    info = TagParser(text).parse()
    assert info.is_tag and not info.is_end_tag and not info.is_bodiless
    assert info.namespace_and_tag_name == "jt:forEach"
    assert info.attributes == {"items": "${employees}", "var": "e"}
    assert info.tag_start_idx == 2
    assert text[info.after_tag_idx:] == "${e.name}"


def test_end_and_bodiless_tags() -> None:
    end = TagParser("${e.salary}</jt:forEach>").parse()
    assert end.is_end_tag
    assert end.tag_name == "forEach"

    bodiless = TagParser('<jt:style class="a"/>').parse()
    assert bodiless.is_bodiless


def test_parse_from_start_index_finds_next_tag() -> None:
    text = "<jt:a></jt:a>"
    first = TagParser(text).parse()
    second = TagParser(text, first.after_tag_idx).parse()
    assert second.is_end_tag
    assert second.tag_start_idx == first.after_tag_idx


def test_text_without_tag() -> None:
    assert not TagParser("price < 5").parse().is_tag
    assert not TagParser("no tags here").parse().is_tag


def test_angle_bracket_inside_formula_is_not_a_tag() -> None:
    assert not TagParser("$[IF(A1<B1, 1, 0)]").parse().is_tag


def test_empty_attribute_value() -> None:
    info = TagParser('<jt:x a="">').parse()
    assert info.attributes == {"a": ""}


def test_escapes_in_attribute_values() -> None:
    info = TagParser(r'<jt:x a="say \"hi\"">').parse()
    assert info.attributes["a"] == 'say "hi"'


@pytest.mark.parametrize(
    "text",
    [
        '<jt:forEach items="${x}"',
        '<jt:forEach items="${x}>',
        '<jt:forEach ="a">',
        '<jt:forEach a:b="c">',
        "<jt:forEach <jt:x>",
        "<jt:>",
    ],
)
def test_malformed_tags(text: str) -> None:
    with pytest.raises(TagParseError):
        TagParser(text, location=" at Sheet1!A1").parse()


# -------------------------------------------------------------------
# Formulas
# -------------------------------------------------------------------


def test_formula_references() -> None:
    refs = FormulaParser("SUM(Sheet1!B2, Sheet1!B2) + C3").parse()
    assert refs == [CellRef.from_string("Sheet1!B2"), CellRef.from_string("C3")]


def test_formula_function_names_are_not_references() -> None:
    refs = FormulaParser("SUM(A1:A10)").parse()
    assert [r.format_as_string() for r in refs] == ["A1", "A10"]


def test_formula_default_value() -> None:
    refs = FormulaParser("${Sheet1!C3||0}").parse()
    assert len(refs) == 1
    assert refs[0].sheet_name == "Sheet1"
    assert refs[0].default_value == "0"
    assert str(refs[0]).endswith("!C3||0")


def test_formula_negative_default_value() -> None:
    refs = FormulaParser("C3||-1").parse()
    assert refs[0].default_value == "-1"


def test_formula_quoted_sheet_name() -> None:
    refs = FormulaParser("'My Sheet'!$B$2").parse()
    assert refs[0].sheet_name == "My Sheet"
    assert refs[0].row_absolute and refs[0].col_absolute
    assert refs[0].format_as_string() == "'My Sheet'!$B$2"


@pytest.mark.parametrize(
    "name, expected",
    [("Sheet1", "Sheet1"), ("Data", "Data"), ("A1", "'A1'"), ("xfd10", "'xfd10'"),
     ("XFE1", "XFE1"), ("My Sheet", "'My Sheet'"), ("O'Brien", "'O''Brien'")],
)
def test_quote_sheet_name(name: str, expected: str) -> None:
    assert quote_sheet_name(name) == expected
    assert CellRef.from_string("B2", sheet_name=name).format_as_string() == f"{expected}!B2"



@pytest.mark.parametrize("text", ["||0", "A1||0||1", "!A1", "'Sheet1!A1"])
def test_malformed_formulas(text: str) -> None:
    with pytest.raises(FormulaParseError):
        FormulaParser(text).parse()


# -------------------------------------------------------------------
# Metadata
# -------------------------------------------------------------------


def test_split_metadata() -> None:
    assert split_metadata("${a.b}?@extraRows=1") == ("${a.b}", "extraRows=1")
    assert split_metadata("${a.b}") == ("${a.b}", None)


def test_metadata_values() -> None:
    metadata = MetadataParser('extraRows=1; left=2; pastEndAction=replaceExpr; replaceValue=" - "').parse()
    assert metadata.extra_rows == "1"
    assert metadata.cols_left == "2"
    assert metadata.defining_cols
    assert metadata.past_end_action == "replaceExpr"
    assert metadata.replace_value == " - "


def test_metadata_empty_quoted_value() -> None:
    assert MetadataParser('replaceValue=""').parse().replace_value == ""


@pytest.mark.parametrize("text", ["extraRows", "extraRows=", "=1", "unknown=1", 'limit="5'])
def test_malformed_metadata(text: str) -> None:
    with pytest.raises(MetadataParseError):
        MetadataParser(text).parse()


def test_metadata_error_message_ends_with_location() -> None:
    with pytest.raises(MetadataParseError) as info:
        MetadataParser("extraRows", " at Sheet1!A1").parse()
    assert str(info.value) == 'Found end of metadata before equals sign: "extraRows" at Sheet1!A1'



def test_sheet_name_metadata_abbreviations() -> None:
    metadata = SheetNameMetadataParser("i=idx;l=3;r=x;v=status").parse()
    assert metadata.index_var == "idx"
    assert metadata.limit == "3"
    assert metadata.replace_value == "x"
    assert metadata.var_status == "status"


def test_sheet_name_metadata_restricted_keys() -> None:
    with pytest.raises(MetadataParseError, match="restricted"):
        SheetNameMetadataParser("extraRows=1").parse()


# -------------------------------------------------------------------
# Styles
# -------------------------------------------------------------------


def test_style_sheet() -> None:
    styles = StyleParser(
        """
        /* header cells */
        .header { font-weight: bold; fill-pattern: solid; fill-foreground-color: #D9E1F2 }
        .money { data-format: #,##0.00; alignment: right; }
        """
    ).parse()
    assert set(styles) == {"header", "money"}
    header = styles["header"]
    assert header.font_bold is True
    assert header.fill_pattern == "solid"
    assert header.fill_foreground_color == "#D9E1F2"
    assert styles["money"].data_format == "#,##0.00"
    assert styles["money"].alignment == "right"


def test_inline_style() -> None:
    style = StyleParser("font-italic: true; border: thin; font-name: Courier New").parse_inline()
    assert style.font_italic is True
    assert style.border_top == style.border_bottom == style.border_left == style.border_right == "thin"
    assert style.font_name == "Courier New"
    assert style.style_to_apply


def test_unknown_style_property_is_skipped() -> None:
    style = StyleParser("bogus: 1; wrap-text: true").parse_inline()
    assert style.wrap_text is True


def test_style_dimensions() -> None:
    style = StyleParser("column-width-in-chars: 10; row-height-in-points: 15.5").parse_inline()
    assert style.column_width == 2560
    assert style.row_height == 310


@pytest.mark.parametrize("text", [".a { b: c", "a { b: c }", ".a b: c }", ".a { b c }", "/* open"])
def test_malformed_style_sheets(text: str) -> None:
    with pytest.raises(StyleParseError):
        StyleParser(text).parse()
