"""Tests for the row normalizer (cell cleaning, chart/table/label rows)."""

import pytest

from subsidy_scraper.document import Document
from subsidy_scraper.exceptions import ParseError, RegionNameNotFound, TableNotFound
from subsidy_scraper.models import ChartRecord
from subsidy_scraper.normalize import (
    aria_label_rows,
    chart_rows,
    clean_cell,
    format_spending,
    is_aggregate_region,
    region_name,
    table_rows,
)

CAPTION = "Programs included in livestock subsidies"


class TestCellFormatting:
    """Tests for clean_cell and format_spending."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("$1,000", "1000"),
            ("2", "2"),
            ("  $12,345,678.90 ", "12345678.90"),
            ("Livestock Forage Program", "Livestock Forage Program"),
            ("", ""),
        ],
    )
    def test_clean_cell(self, raw, expected):
        assert clean_cell(raw) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            (1000.5, "1000.5"),
            (1000.0, "1000"),
            (0.0, "0"),
            (123456789.25, "123456789.25"),
            (1e20, "100000000000000000000"),
            (1e-7, "0.0000001"),
            (-42.5, "-42.5"),
        ],
    )
    def test_format_spending_plain_decimal(self, value, expected):
        assert format_spending(value) == expected


class TestRegionName:
    """Tests for reading the state name from the stateface span."""

    def test_reads_stateface_span(self):
        doc = Document.from_html('<span class="stateface-AL">Alabama</span>')
        assert region_name(doc) == "Alabama"

    def test_skips_spans_without_stateface(self):
        doc = Document.from_html(
            '<span class="logo">EWG</span>'
            '<span class="stateface stateface-IA"> Iowa </span>'
        )
        assert region_name(doc) == "Iowa"

    def test_missing_span_raises(self):
        doc = Document.from_html("<span>Alabama</span>")
        with pytest.raises(RegionNameNotFound):
            region_name(doc)

    @pytest.mark.parametrize("name", ["../../etc", "a\\b", "..", "."])
    def test_unsafe_file_name_rejected(self, name):
        doc = Document.from_html(f'<span class="stateface">{name}</span>')
        with pytest.raises(ParseError, match="not a safe file name"):
            region_name(doc)

    def test_aggregate_detection(self):
        assert is_aggregate_region("United States")
        assert is_aggregate_region("United States Total")
        assert not is_aggregate_region("Alabama")


class TestChartRows:
    """Tests for rows built from chart records."""

    def test_region_year_spending(self):
        records = [
            ChartRecord(year="2020", spending=1000.5),
            ChartRecord(year="2021", spending=2000),
        ]
        assert chart_rows("Alabama", records) == [
            ("Alabama", "2020", "1000.5"),
            ("Alabama", "2021", "2000"),
        ]

    def test_no_records(self):
        assert chart_rows("Alabama", []) == []


class TestTableRows:
    """Tests for the titled programs table."""

    def test_skips_header_and_cleans_cells(self):
        doc = Document.from_html(
            f'<table title="{CAPTION}">'
            "<tr><th>Program</th><th>Amount</th></tr>"
            "<tr><td>$1,000</td><td>2</td></tr>"
            "<tr><td>$1,000</td><td>2</td></tr>"
            "</table>"
        )
        rows = table_rows(doc, "Alabama", CAPTION, width=3)
        assert rows == [("Alabama", "1000", "2"), ("Alabama", "1000", "2")]

    def test_nested_markup_joined_per_cell(self):
        doc = Document.from_html(
            f'<table title="{CAPTION}"><tbody>'
            "<tr><th>Program</th><th>Total</th></tr>"
            '<tr><td><a href="/p?x=1">Livestock <b>Forage</b> Program</a></td>'
            "<td>\n  $57,321,008\n</td></tr>"
            "</tbody></table>"
        )
        rows = table_rows(doc, "Iowa", CAPTION, width=3)
        assert rows == [("Iowa", "Livestock Forage Program", "57321008")]

    def test_rows_follow_document_order_across_sections(self):
        doc = Document.from_html(
            f'<table title="{CAPTION}">'
            "<thead><tr><th>Program</th><th>Amount</th></tr></thead>"
            "<tbody><tr><td>x</td><td>$1,0</td></tr></tbody>"
            "<tr><td>y</td><td>2</td></tr>"
            "</table>"
        )
        rows = table_rows(doc, "R", CAPTION, width=3)
        assert rows == [("R", "x", "10"), ("R", "y", "2")]

    def test_nested_table_rows_not_counted(self):
        doc = Document.from_html(
            f'<table title="{CAPTION}">'
            "<tr><th>Program</th><th>Amount</th></tr>"
            "<tr><td>a<table><tr><td>b</td></tr></table></td><td>1</td></tr>"
            "</table>"
        )
        rows = table_rows(doc, "R", CAPTION, width=3)
        assert rows == [("R", "ab", "1")]

    def test_title_must_match_exactly(self):
        doc = Document.from_html(
            f'<table title="{CAPTION} (2019)"><tr><td>a</td></tr></table>'
        )
        with pytest.raises(TableNotFound):
            table_rows(doc, "Alabama", CAPTION, width=3)

    def test_header_only_table_yields_no_rows(self):
        doc = Document.from_html(
            f'<table title="{CAPTION}"><tr><th>Program</th><th>Amount</th></tr></table>'
        )
        assert table_rows(doc, "Alabama", CAPTION, width=3) == []

    def test_width_mismatch_raises(self):
        doc = Document.from_html(
            f'<table title="{CAPTION}">'
            "<tr><th>Program</th><th>Amount</th></tr>"
            "<tr><td>Only one cell</td></tr>"
            "</table>"
        )
        with pytest.raises(ParseError, match="expected 2"):
            table_rows(doc, "Alabama", CAPTION, width=3)


class TestAriaLabelRows:
    """Tests for rendered chart bars labelled via aria-label."""

    def test_extracts_year_and_amount(self):
        doc = Document.from_html(
            "<svg>"
            '<g aria-label="Spending in 2021: $1,234,567"></g>'
            '<g aria-label="Spending in 2022: $89"></g>'
            '<g aria-label="Axis"></g>'
            "</svg>"
        )
        assert aria_label_rows(doc, "Alabama") == [
            ("Alabama", "2021", "1234567"),
            ("Alabama", "2022", "89"),
        ]

    def test_no_bars(self):
        doc = Document.from_html("<svg><g></g></svg>")
        assert aria_label_rows(doc, "Alabama") == []

    def test_unrecognized_label_raises(self):
        doc = Document.from_html('<svg><g aria-label="Total Spending"></g></svg>')
        with pytest.raises(ParseError, match="Unrecognized spending label"):
            aria_label_rows(doc, "Alabama")
