"""Tests for the CSV tokenizer, exporter and importer."""

import pytest
from datetime import date
from decimal import Decimal

from networth.csv_codec import (
    COLUMN_COUNT,
    CSV_HEADER,
    EXPORT_TEMPLATE,
    ImportFailure,
    ParseError,
    asset_from_row,
    export_records,
    liability_from_row,
    parse_records,
    split_csv_line,
    split_csv_lines,
)
from networth.models.records import AssetCategory, LiabilityCategory


HEADER_LINE = ",".join(CSV_HEADER)


class TestTokenizer:
    """Tests for the quote-aware line splitter."""

    def test_plain_fields(self):
        assert split_csv_line("a,b,c") == ["a", "b", "c"]

    def test_fields_are_trimmed(self):
        assert split_csv_line("  a , b ,c  ") == ["a", "b", "c"]

    def test_empty_fields_are_kept(self):
        assert split_csv_line("a,,b,") == ["a", "", "b", ""]

    def test_quoted_comma(self):
        assert split_csv_line('x,"Smith, John",y') == ["x", "Smith, John", "y"]

    def test_doubled_quote_is_literal(self):
        assert split_csv_line('"say ""hi""",x') == ['say "hi"', "x"]

    def test_empty_quoted_field(self):
        assert split_csv_line('"",a') == ["", "a"]

    def test_unbalanced_quote_runs_to_end_of_line(self):
        assert split_csv_line('a,"b,c') == ["a", "b,c"]

    def test_blank_lines_dropped(self):
        text = "one\r\n\r\n  \ntwo\n"
        assert split_csv_lines(text) == ["one", "two"]

    def test_quoted_field_does_not_span_lines(self):
        """Tokenizing is line-based; an open quote runs to the end of its line."""
        lines = split_csv_lines('a,"b\nc",d')
        assert lines == ['a,"b', 'c",d']
        assert split_csv_line(lines[0]) == ["a", "b"]


class TestExport:
    """Tests for serializing records."""

    def test_empty_export_is_header_only(self):
        assert export_records([], []) == HEADER_LINE + "\n"

    def test_asset_row(self, make_asset):
        content = export_records([make_asset(notes="Primary residence")], [])
        lines = content.splitlines()
        assert lines[1] == "Asset,Home,Real Estate,2020-01-01,300000,350000,,,,,Primary residence"

    def test_liability_row_is_column_aligned(self, make_liability):
        """Every liability figure lands under its own header."""
        content = export_records([], [make_liability(notes="30-year fixed")])
        fields = split_csv_line(content.splitlines()[1])

        assert len(fields) == COLUMN_COUNT
        row = dict(zip(CSV_HEADER, fields))
        assert row["Type"] == "Liability"
        assert row["Purchase Date"] == ""
        assert row["Purchase Price"] == ""
        assert row["Current Value"] == ""
        assert row["Original Amount"] == "250000"
        assert row["Current Balance"] == "240000"
        assert row["Interest Rate"] == "3.5"
        assert row["Start Date"] == "2020-01-01"
        assert row["Notes"] == "30-year fixed"

    def test_assets_come_before_liabilities(self, make_asset, make_liability):
        content = export_records([make_asset()], [make_liability()])
        types = [line.split(",")[0] for line in content.splitlines()[1:]]
        assert types == ["Asset", "Liability"]

    def test_commas_and_quotes_are_escaped(self, make_asset):
        asset = make_asset(name="Smith, John's car", notes='The "good" one')
        line = export_records([asset], []).splitlines()[1]
        assert '"Smith, John\'s car"' in line
        assert '"The ""good"" one"' in line

    def test_newlines_flattened(self, make_asset):
        """The importer is line-based, so every record must stay on one line."""
        content = export_records([make_asset(notes="line one\nline two")], [])
        assert len(content.splitlines()) == 2
        assert content.splitlines()[1].endswith("line one line two")


class TestRowMapping:

    def test_asset_from_row(self):
        fields = split_csv_line("Asset,Car,Vehicle,2021-06-15,25000,18000,,,,,Honda")
        asset = asset_from_row(fields)
        assert asset.category == AssetCategory.VEHICLE
        assert asset.purchase_date == date(2021, 6, 15)
        assert asset.current_value == Decimal("18000")
        assert asset.notes == "Honda"

    def test_liability_from_row(self):
        fields = split_csv_line("Liability,Loan,Auto Loan,,,,25000,12000,4.5,2021-06-15,")
        liability = liability_from_row(fields)
        assert liability.category == LiabilityCategory.AUTO_LOAN
        assert liability.interest_rate == Decimal("4.5")
        assert liability.notes is None

    def test_unreadable_interest_rate_is_zero(self):
        fields = split_csv_line("Liability,Loan,Auto Loan,,,,25000,12000,n/a,2021-06-15,")
        assert liability_from_row(fields).interest_rate == Decimal("0")

    def test_non_numeric_amount_raises(self):
        fields = split_csv_line("Asset,Car,Vehicle,2021-06-15,abc,18000,,,,,")
        with pytest.raises(ParseError, match="Purchase Price"):
            asset_from_row(fields)

    def test_missing_name_raises(self):
        fields = split_csv_line("Asset,,Vehicle,2021-06-15,1,1,,,,,")
        with pytest.raises(ParseError, match="Name is required"):
            asset_from_row(fields)

    def test_unknown_category_raises(self):
        fields = split_csv_line("Asset,Boat,Boats,2021-06-15,1,1,,,,,")
        with pytest.raises(ParseError):
            asset_from_row(fields)

    def test_bad_date_raises(self):
        fields = split_csv_line("Liability,Loan,Auto Loan,,,,1,1,1,06/15/2021,")
        with pytest.raises(ParseError, match="Start Date"):
            liability_from_row(fields)


class TestImport:
    """Tests for parsing whole documents."""

    def test_template_parses_cleanly(self):
        parsed = parse_records(EXPORT_TEMPLATE)
        assert [a.name for a in parsed.assets] == ["Example Home", "Example Car", "Savings Account"]
        assert [l.name for l in parsed.liabilities] == ["Home Mortgage", "Car Loan"]
        assert parsed.rows_skipped == 0

    def test_header_only(self):
        parsed = parse_records(HEADER_LINE)
        assert parsed.assets == []
        assert parsed.liabilities == []

    def test_empty_content_imports_nothing(self):
        for content in ("", "  \n\n", b""):
            parsed = parse_records(content)
            assert parsed.assets == []
            assert parsed.liabilities == []
            assert parsed.rows_skipped == 0

    def test_out_of_range_amounts_are_skipped(self):
        content = "\n".join([
            HEADER_LINE,
            "Asset,Gold,Other,2020-01-01,0,1e1000000,,,,,",
            "Asset,Dust,Other,2020-01-01,0,1e-1000000,,,,,",
            "Liability,Loan,Personal Loan,,,,2e15,100,0,2020-01-01,",
            "Asset,Home,Real Estate,2020-01-01,300000,350000,,,,,",
        ])
        parsed = parse_records(content)

        assert [a.name for a in parsed.assets] == ["Home"]
        assert parsed.liabilities == []
        assert parsed.rows_skipped == 3

    def test_bad_rows_are_skipped_and_counted(self):
        content = "\n".join([
            HEADER_LINE,
            "Asset,Home,Real Estate,2020-01-01,300000,350000,,,,,ok",
            "Asset,Short,Vehicle",
            "Asset,Car,Vehicle,2021-06-15,lots,18000,,,,,",
            "Boat,Dinghy,Other,2021-06-15,1,1,,,,,",
            "Liability,Loan,Auto Loan,,,,25000,12000,4.5,2021-06-15,",
        ])
        parsed = parse_records(content)
        assert len(parsed.assets) == 1
        assert len(parsed.liabilities) == 1
        assert parsed.rows_skipped == 3

    def test_extra_columns_are_ignored(self):
        content = HEADER_LINE + "\nAsset,Cash,Cash,2020-01-01,0,500,,,,,note,extra"
        parsed = parse_records(content)
        assert parsed.assets[0].current_value == Decimal("500")

    def test_imported_records_are_fresh(self, make_asset):
        original = make_asset()
        parsed = parse_records(export_records([original], []))
        assert parsed.assets[0].id != original.id
        assert parsed.assets[0].associated_debt_id is None

    def test_round_trip_preserves_text(self, make_asset, make_liability):
        asset = make_asset(name="Smith, John", notes='Say "hello", then leave')
        liability = make_liability(notes="Fixed, 30 years")
        parsed = parse_records(export_records([asset], [liability]))

        assert parsed.assets[0].name == "Smith, John"
        assert parsed.assets[0].notes == 'Say "hello", then leave'
        assert parsed.liabilities[0].notes == "Fixed, 30 years"
        assert parsed.liabilities[0].current_balance == Decimal("240000")
        assert parsed.liabilities[0].interest_rate == Decimal("3.5")

    def test_bytes_with_bom(self):
        content = ("\ufeff" + EXPORT_TEMPLATE).encode("utf-8")
        parsed = parse_records(content)
        assert len(parsed.assets) == 3

    def test_string_with_bom(self):
        parsed = parse_records("\ufeff" + EXPORT_TEMPLATE)
        assert len(parsed.liabilities) == 2

    def test_undecodable_bytes_fail(self):
        with pytest.raises(ImportFailure):
            parse_records(b"\xff\xfe\x00bad")

    def test_non_text_fails(self):
        with pytest.raises(ImportFailure):
            parse_records(12345)
