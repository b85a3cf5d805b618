"""Row normalizer: turns extracted page data into region-keyed table rows.

Three row sources are supported:

- chart records decoded from embedded JSON (``chart_rows``)
- an HTML table located by its ``title`` attribute (``table_rows``)
- rendered chart bars carrying ``aria-label`` text (``aria_label_rows``)

Every row starts with the region identifier.  Currency and thousands
formatting (``$`` and ``,``) is stripped from scraped cell text.
"""

import logging
import re
from decimal import Decimal
from typing import Iterable

from subsidy_scraper.document import Document, Element
from subsidy_scraper.exceptions import ParseError, RegionNameNotFound, TableNotFound
from subsidy_scraper.models import ChartRecord, TableRow

logger = logging.getLogger(__name__)

AGGREGATE_REGION = "United States"

# Bar labels read like "Spending in 2021: 123456789" once $ and , are gone.
_ARIA_SPENDING_RE = re.compile(r"in (\d{4}): (\d+)")

_UNSAFE_NAME_CHARS = ("/", "\\", "\0")


def clean_cell(text: str) -> str:
    """Strip ``$`` and ``,`` characters and surrounding whitespace."""
    return text.replace(",", "").replace("$", "").strip()


def format_spending(value: float) -> str:
    """Format an amount as a plain decimal string.

    No exponent notation, and integral amounts drop the ``.0``:
    ``1000.0 -> "1000"``, ``1000.5 -> "1000.5"``, ``1e20 -> "100000000000000000000"``.
    """
    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def region_name(document: Document) -> str:
    """Return the region name shown in the page's stateface span.

    Raises:
        RegionNameNotFound: If no stateface span, or the span has no text.
        ParseError: If the name cannot be used as a file name.
    """
    for span in document.find("span", "class", contains="stateface"):
        for text in span.texts():
            name = text.strip()
            if name:
                _check_file_name(name)
                return name
    raise RegionNameNotFound("Unable to find state name (stateface span)", stage="parse")


def _check_file_name(name: str) -> None:
    # the name becomes an output file name
    if name in (".", "..") or any(c in name for c in _UNSAFE_NAME_CHARS):
        raise ParseError(
            f"Region name {name!r} is not a safe file name", stage="parse"
        )


def is_aggregate_region(name: str) -> bool:
    """True for the national roll-up page, which is not a region of its own."""
    return AGGREGATE_REGION in name


def chart_rows(region: str, records: Iterable[ChartRecord]) -> list[TableRow]:
    """``[region, year, spending]`` per chart record."""
    return [(region, r.year, format_spending(r.spending)) for r in records]


def _cell_text(cell: Element) -> str:
    return clean_cell(" ".join("".join(cell.texts()).split()))


def _table_body_rows(table: Element) -> list[Element]:
    """Rows of ``table`` in document order, excluding rows of nested tables."""
    return [tr for tr in table.find("tr") if tr.closest("table") == table]


def table_rows(
    document: Document,
    region: str,
    caption: str,
    width: int,
) -> list[TableRow]:
    """Rows of the table whose ``title`` is exactly ``caption``.

    The first row is treated as the header and skipped.  Each remaining
    row becomes ``[region, cell, cell, ...]`` with the cell text cleaned.

    Args:
        document: Parsed page.
        region: Region identifier for the first cell.
        caption: Exact ``title`` attribute of the target table.
        width: Expected total cells per output row (including region).

    Raises:
        TableNotFound: If no table carries ``title=caption``.
        ParseError: If a data row does not have ``width - 1`` cells.
    """
    table = document.first("table", "title", equals=caption)
    if table is None:
        raise TableNotFound(f"No table titled {caption!r}", stage="parse")

    rows: list[TableRow] = []
    for i, tr in enumerate(_table_body_rows(table)[1:], start=1):
        cells = list(tr.children(["td", "th"]))
        row = (region, *(_cell_text(c) for c in cells))
        if len(row) != width:
            raise ParseError(
                f"Row {i} of {caption!r} has {len(row) - 1} cells, "
                f"expected {width - 1}",
                stage="parse",
            )
        rows.append(row)

    logger.debug("Table %r: %d rows for %s", caption, len(rows), region)
    return rows


def aria_label_rows(document: Document, region: str) -> list[TableRow]:
    """``[region, year, spending]`` per rendered chart bar.

    Bars are ``<g>`` elements whose ``aria-label`` mentions "Spending".

    Raises:
        ParseError: If a matching label does not contain a year and amount.
    """
    rows: list[TableRow] = []
    for g in document.find("g", "aria-label", contains="Spending"):
        label = clean_cell(g.attr("aria-label"))
        match = _ARIA_SPENDING_RE.search(label)
        if match is None:
            raise ParseError(
                f"Unrecognized spending label {label!r}", stage="parse"
            )
        rows.append((region, match.group(1), match.group(2)))
    return rows
