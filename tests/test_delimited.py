"""Tests für den zeilenweisen CSV-Parser."""

import io

import pytest

from data.delimited import (
    DelimitedParseError,
    DelimitedReader,
    format_field,
    format_row,
    parse_line,
)


# ─── PARSE_LINE ───────────────────────────────────────────────────────────────

class TestParseLine:
    def test_simple_fields(self):
        assert parse_line("1,CS101,Programming,15") == ["1", "CS101", "Programming", "15"]

    def test_unquoted_fields_are_trimmed(self):
        """Leerzeichen um ungequotete Felder werden entfernt."""
        assert parse_line("  a ,\tb  , c") == ["a", "b", "c"]

    def test_quoted_field_keeps_whitespace(self):
        """Quoted-Felder werden wörtlich übernommen."""
        assert parse_line('" a ",b') == [" a ", "b"]

    def test_quoted_field_with_comma(self):
        assert parse_line('3,"Databases, Design & SQL",30') == [
            "3", "Databases, Design & SQL", "30"
        ]

    def test_escaped_quotes(self):
        """'""' innerhalb eines Quoted-Felds ist ein literales Anführungszeichen."""
        assert parse_line('"He said ""hi"", then left",x') == [
            'He said "hi", then left', "x"
        ]

    def test_only_escaped_quote(self):
        assert parse_line('""""') == ['"']

    def test_trailing_comma_adds_empty_field(self):
        assert parse_line("a,b,") == ["a", "b", ""]

    def test_trailing_comma_after_quoted_field(self):
        assert parse_line('a,"b",') == ["a", "b", ""]

    def test_whitespace_between_quote_and_comma(self):
        assert parse_line('"a"   ,b') == ["a", "b"]

    def test_empty_middle_field(self):
        assert parse_line("1,Exam,,x") == ["1", "Exam", "", "x"]

    def test_single_comma(self):
        assert parse_line(",") == ["", ""]

    def test_empty_line(self):
        """Leere Zeile → keine Felder."""
        assert parse_line("") == []
        assert parse_line("\n") == []

    def test_line_endings_stripped(self):
        assert parse_line("a,b\r\n") == ["a", "b"]

    def test_empty_quoted_field(self):
        assert parse_line('1,"",3') == ["1", "", "3"]

    def test_text_after_closing_quote_starts_next_field(self):
        assert parse_line('"ab"cd,e') == ["ab", "cd", "e"]

    def test_unterminated_quote_raises(self):
        with pytest.raises(DelimitedParseError):
            parse_line('1,"never closed,3')

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_line('"')


# ─── FORMAT_ROW / ROUNDTRIP ───────────────────────────────────────────────────

class TestFormatRow:
    def test_plain_fields_not_quoted(self):
        assert format_row(["1", "Exam", "65.00"]) == "1,Exam,65.00"

    def test_inner_spaces_not_quoted(self):
        assert format_field("Problem Sheet 1") == "Problem Sheet 1"

    def test_comma_is_quoted(self):
        assert format_field("a,b") == '"a,b"'

    def test_quote_is_escaped(self):
        assert format_field('say "hi"') == '"say ""hi"""'

    def test_leading_whitespace_is_quoted(self):
        assert format_field(" x") == '" x"'

    def test_blank_trailing_field(self):
        assert format_row(["1", "Exam", ""]) == "1,Exam,"

    def test_single_empty_field(self):
        assert format_row([""]) == '""'

    @pytest.mark.parametrize("fields", [
        ["1", "CS101", "Programming I", "15"],
        ["3", "Databases, Design & SQL", "30"],
        ['He said ""hi"", with comma', "x"],
        ['He said "hi", then left', "", ""],
        ["  padded  ", "\ttab"],
        ["", "", ""],
        [""],
        ['"', '""', ","],
    ])
    def test_roundtrip(self, fields):
        """parse_line(format_row(f)) liefert exakt f zurück."""
        assert parse_line(format_row(fields)) == fields


# ─── READER ───────────────────────────────────────────────────────────────────

class TestDelimitedReader:
    def test_rows_then_end_of_input(self):
        reader = DelimitedReader(io.StringIO("a,b\nc,d\n"))
        assert reader.read_row() == ["a", "b"]
        assert reader.read_row() == ["c", "d"]
        assert reader.read_row() is None
        assert reader.read_row() is None

    def test_empty_stream(self):
        assert DelimitedReader(io.StringIO("")).read_row() is None

    def test_last_line_without_newline(self):
        reader = DelimitedReader(io.StringIO("a,b\nc,"))
        assert list(reader) == [["a", "b"], ["c", ""]]

    def test_blank_line_yields_empty_row(self):
        """Leerzeile ist eine Zeile ohne Felder, nicht das Dateiende."""
        reader = DelimitedReader(io.StringIO("a\n\nb\n"))
        assert list(reader) == [["a"], [], ["b"]]

    def test_error_is_distinct_and_reader_continues(self):
        """Fehlerhafte Zeile → Exception mit Zeilennummer; danach geht es weiter."""
        reader = DelimitedReader(io.StringIO('ok,1\n"broken,2\nok,3\n'))
        assert reader.read_row() == ["ok", "1"]
        with pytest.raises(DelimitedParseError) as exc:
            reader.read_row()
        assert exc.value.line_number == 2
        assert "Zeile 2" in str(exc.value)
        assert reader.read_row() == ["ok", "3"]
        assert reader.read_row() is None

    def test_binary_stream_decoded_per_line(self):
        """Ungültige Bytes → Fehler nur für diese Zeile, danach geht es weiter."""
        reader = DelimitedReader(io.BytesIO(
            b"\xef\xbb\xbfid,name\n1,Einf\xfchrung\n2,\xc3\x9cbung\n"
        ))
        assert reader.read_row() == ["id", "name"]
        with pytest.raises(DelimitedParseError) as exc:
            reader.read_row()
        assert exc.value.line_number == 2
        assert reader.read_row() == ["2", "Übung"]
        assert reader.read_row() is None

    def test_binary_stream_other_encoding(self):
        reader = DelimitedReader(io.BytesIO("1,Einführung\n".encode("cp1252")),
                                 encoding="cp1252")
        assert list(reader) == [["1", "Einführung"]]
