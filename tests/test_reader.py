import textwrap

import pytest

from dkb_import import ParseError, read_rows
from dkb_import.reader import iter_rows
from tests.helpers.statements import HEADER_COLUMNS, build_statement, dkb_row


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n")


def test_four_junk_lines_then_header_then_two_rows():
    text = _dedent(
        """
        junk one
        junk two
        junk three
        junk four
        Date;Amount;Payee
        01.02.24;-1,00;Alice
        02.02.24;2,50;Bob
        """
    )

    rows = read_rows(text, delimiter=";", skip_lines=4)

    assert rows == [
        {"Date": "01.02.24", "Amount": "-1,00", "Payee": "Alice"},
        {"Date": "02.02.24", "Amount": "2,50", "Payee": "Bob"},
    ]


def test_dkb_export_with_quotes_and_preamble():
    text = build_statement([dkb_row(), dkb_row(booking="17.10.26", amount="1.200,00")])

    rows = read_rows(text)

    assert len(rows) == 2
    assert list(rows[0]) == list(HEADER_COLUMNS)
    assert rows[0]["Betrag (€)"] == "-45,67"
    assert rows[1]["Betrag (€)"] == "1.200,00"
    assert rows[1]["Buchungsdatum"] == "17.10.26"


def test_short_rows_are_padded_and_long_rows_truncated():
    text = "h1;h2;h3\na\nb;c;d;e;f\n"

    rows = read_rows(text, skip_lines=0)

    assert rows == [
        {"h1": "a", "h2": "", "h3": ""},
        {"h1": "b", "h2": "c", "h3": "d"},
    ]


def test_blank_lines_are_skipped():
    text = "meta\nA;B\n\n1;2\n\n\n3;4\n"

    assert read_rows(text, skip_lines=1) == [{"A": "1", "B": "2"}, {"A": "3", "B": "4"}]


def test_quoted_field_with_embedded_delimiter_and_newline():
    text = 'A;B\n"x;y";"line1\nline2"\n'

    assert read_rows(text, skip_lines=0) == [{"A": "x;y", "B": "line1\nline2"}]


def test_bom_and_crlf_are_tolerated():
    text = "\ufeffmeta\r\nA;B\r\n1;2\r\n"

    assert read_rows(text, skip_lines=1) == [{"A": "1", "B": "2"}]


def test_header_only_yields_no_rows():
    assert read_rows("a\nb\nc\nd\nX;Y\n") == []


def test_line_numbers_count_from_top_of_file():
    text = "m1\nm2\nA;B\n1;2\n\n3;4\n"

    numbered = list(iter_rows(text, skip_lines=2))

    assert [n for n, _ in numbered] == [4, 6]


@pytest.mark.parametrize("skip", [5, 10])
def test_skip_beyond_available_lines_is_parse_error(skip: int):
    with pytest.raises(ParseError):
        read_rows("a\nb\nc\nd\nH\n", skip_lines=skip)


def test_empty_content_is_parse_error():
    with pytest.raises(ParseError):
        read_rows("", skip_lines=0)


def test_empty_header_line_is_parse_error():
    with pytest.raises(ParseError, match="header"):
        read_rows("a\nb\nc\nd\n\n1;2\n")


def test_header_of_only_delimiters_is_parse_error():
    with pytest.raises(ParseError):
        read_rows(";;;\n1;2;3;4\n", skip_lines=0)


def test_negative_skip_is_parse_error():
    with pytest.raises(ParseError):
        read_rows("A\n1\n", skip_lines=-1)


def test_multi_character_delimiter_is_rejected():
    with pytest.raises(ValueError):
        read_rows("A;;B\n", delimiter=";;", skip_lines=0)


@pytest.mark.parametrize("sep", ["\x0c", "\x0b", "\x1c", "\x85", "\u2028"])
def test_only_newline_ends_a_line(sep: str):
    text = f"meta{sep}more\nm2\nm3\nm4\nA;B\n1;x{sep}y\n"

    numbered = list(iter_rows(text, skip_lines=4))

    assert numbered == [(6, {"A": "1", "B": f"x{sep}y"})]
