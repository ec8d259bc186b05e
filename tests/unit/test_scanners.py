from __future__ import annotations

from scanners.formula import FormulaScanner, FormulaToken
from scanners.metadata import MetadataScanner, MetadataToken
from scanners.style import StyleScanner, StyleToken
from scanners.tag import TagScanner, TagToken


def _tokens(scanner) -> list[tuple[int, str]]:
    result = []
    while True:
        token = scanner.next_token()
        result.append((token, scanner.current_lexeme))
        if token == 99 or token < 0:
            return result


def test_tag_scanner_tokens() -> None:
    tokens = _tokens(TagScanner('<jt:forEach items="${x}">'))
    assert [t for t, _ in tokens] == [
        TagToken.BEGIN_ANGLE_BRACKET,
        TagToken.STRING,
        TagToken.COLON,
        TagToken.STRING,
        TagToken.WHITESPACE,
        TagToken.STRING,
        TagToken.EQUALS,
        TagToken.DOUBLE_QUOTE,
        TagToken.STRING,
        TagToken.DOUBLE_QUOTE,
        TagToken.END_ANGLE_BRACKET,
        TagToken.EOI,
    ]
    assert tokens[8][1] == "${x}"


def test_tag_scanner_end_and_bodiless_brackets() -> None:
    assert [t for t, _ in _tokens(TagScanner("</jt:for>"))][0] == TagToken.BEGIN_ANGLE_BRACKET_SLASH
    assert [t for t, _ in _tokens(TagScanner("<jt:x/>"))][-2] == TagToken.SLASH_END_ANGLE_BRACKET


def test_tag_scanner_unterminated_quote_is_error_token() -> None:
    tokens = _tokens(TagScanner('<jt:x a="abc'))
    assert tokens[-1][0] == TagToken.ERROR_EOI_IN_DQUOTES


def test_tag_scanner_empty_value() -> None:
    tokens = [t for t, _ in _tokens(TagScanner('a=""'))]
    assert tokens == [TagToken.STRING, TagToken.EQUALS, TagToken.DOUBLE_QUOTE, TagToken.DOUBLE_QUOTE, TagToken.EOI]


def test_scanner_restarts_with_set_input() -> None:
    scanner = TagScanner("<a>")
    _tokens(scanner)
    scanner.set_input("b")
    assert scanner.next_token() == TagToken.STRING
    assert scanner.current_lexeme == "b"
    assert scanner.next_token() == TagToken.EOI


def test_empty_input_is_end_of_input() -> None:
    assert TagScanner("").next_token() == TagToken.EOI
    assert FormulaScanner("").next_token() == FormulaToken.EOI
    assert MetadataScanner("").next_token() == MetadataToken.EOI
    assert StyleScanner("").next_token() == StyleToken.EOI


def test_formula_scanner_tokens() -> None:
    tokens = _tokens(FormulaScanner("SUM(Sheet1!C3||0)"))
    assert [t for t, _ in tokens] == [
        FormulaToken.STRING,
        FormulaToken.LEFT_PAREN,
        FormulaToken.STRING,
        FormulaToken.EXCLAMATION,
        FormulaToken.STRING,
        FormulaToken.DOUBLE_PIPE,
        FormulaToken.STRING,
        FormulaToken.RIGHT_PAREN,
        FormulaToken.EOI,
    ]


def test_formula_scanner_single_quoted_sheet_name() -> None:
    tokens = _tokens(FormulaScanner("'My Sheet'!A1"))
    assert tokens[0][0] == FormulaToken.SINGLE_QUOTE
    assert tokens[1] == (FormulaToken.STRING, "My Sheet")
    assert tokens[2][0] == FormulaToken.SINGLE_QUOTE
    assert tokens[3][0] == FormulaToken.EXCLAMATION


def test_formula_scanner_single_pipe_is_operator() -> None:
    tokens = [t for t, _ in _tokens(FormulaScanner("A1|B1"))]
    assert tokens == [FormulaToken.STRING, FormulaToken.OPERATOR, FormulaToken.STRING, FormulaToken.EOI]


def test_metadata_scanner_keeps_interior_spaces() -> None:
    tokens = _tokens(MetadataScanner('extraRows=1; replaceValue="n a"'))
    assert (MetadataToken.STRING, "extraRows") in tokens
    assert (MetadataToken.STRING, "replaceValue") in tokens
    assert (MetadataToken.STRING, "n a") in tokens
    assert tokens[-1][0] == MetadataToken.EOI


def test_style_scanner_skips_comments() -> None:
    tokens = [t for t, _ in _tokens(StyleScanner("/* c */.a{b:c}"))]
    assert tokens == [
        StyleToken.PERIOD,
        StyleToken.STRING,
        StyleToken.BEGIN_BRACE,
        StyleToken.STRING,
        StyleToken.COLON,
        StyleToken.STRING,
        StyleToken.END_BRACE,
        StyleToken.EOI,
    ]


def test_style_scanner_unterminated_comment() -> None:
    assert StyleScanner("/* never closed").next_token() == StyleToken.ERROR_EOI_IN_COMMENT
