"""Dataset registry: the enumerated run modes selectable from the CLI.

Each ``Dataset`` binds together everything that differs between sources:
which regions to walk, how to build the page URL, which fetcher reads it,
how rows are pulled out of the page, and where the table is written.
The pipeline itself is source-agnostic.

Registered datasets:

* ``livestock`` -- EWG livestock program page per FIPS state; yearly
  totals from the embedded ``chartData`` array.
* ``livestock-programs`` -- same EWG page; the per-program breakdown
  table.
* ``spending`` -- usaspending.gov state profile (client-side rendered);
  yearly totals from the chart bar labels.
* ``program`` -- EWG program page per FIPS state for any program code
  given with ``--progcode``; yearly totals from the embedded ``data``
  array.
"""

import re
from dataclasses import dataclass, replace
from functools import partial
from typing import Callable

from subsidy_scraper.config import ScraperConfig
from subsidy_scraper.document import Document
from subsidy_scraper.embedded_json import EmbeddedJsonSpec, extract_records
from subsidy_scraper.models import TableRow
from subsidy_scraper.normalize import aria_label_rows, chart_rows, table_rows
from subsidy_scraper.regions import Region, RegionCatalog

DIRECT = "direct"
RENDERED = "rendered"

EWG_PROGDETAIL_TEMPLATE = "{base}/progdetail.php?fips={key}&progcode={progcode}"
USASPENDING_STATE_TEMPLATE = "{base}/state/{key}/latest"

LIVESTOCK_PROGRAMS_CAPTION = "Programs included in livestock subsidies"
SPENDING_MARKER = "Spending in "

# Program codes end up in both the URL and the output directory name.
_PROGCODE_RE = re.compile(r"^[A-Za-z0-9_-]+$")

YEAR_HEADER = ("state", "year", "spending")
PROGRAM_HEADER = ("state", "program", "spending")

RowExtractor = Callable[[Document, str], list[TableRow]]


@dataclass(frozen=True)
class Dataset:
    """One enumerated scrape mode.

    Attributes:
        name: CLI mode name.
        catalog: Regions to iterate.
        fetcher: ``DIRECT`` or ``RENDERED``.
        url_template: Formatted with ``base``, ``key`` and ``progcode``.
        base_url_field: ``ScraperConfig`` attribute supplying ``base``.
        header: Output column names.
        extract_rows: ``(document, region_name) -> rows``.
        path_template: Output path relative to the output dir, formatted
            with ``name`` (the resolved region name) and
            ``progcode``.
        progcode: EWG program code, when the URL needs one.
        needs_progcode: The program code comes from the user at run time.
        marker: Substring that must be present in the fetched page.
        named_by_page: Resolve the region name from the page's stateface
            span and skip the national aggregate.
    """

    name: str
    catalog: RegionCatalog
    fetcher: str
    url_template: str
    base_url_field: str
    header: tuple[str, ...]
    extract_rows: RowExtractor
    path_template: str
    progcode: str | None = None
    marker: str | None = None
    named_by_page: bool = False
    needs_progcode: bool = False

    def url(self, config: ScraperConfig, region: Region) -> str:
        return self.url_template.format(
            base=getattr(config, self.base_url_field).rstrip("/"),
            key=region.key,
            progcode=self.progcode,
        )

    def output_path(self, region_name: str) -> str:
        return self.path_template.format(name=region_name, progcode=self.progcode)


def embedded_chart_rows(
    document: Document, region: str, spec: EmbeddedJsonSpec
) -> list[TableRow]:
    """Rows from the chart array assigned to ``spec.variable``."""
    return chart_rows(region, extract_records(document, spec))


DATASETS: dict[str, Dataset] = {
    "livestock": Dataset(
        name="livestock",
        catalog=RegionCatalog.fips(),
        fetcher=DIRECT,
        url_template=EWG_PROGDETAIL_TEMPLATE,
        base_url_field="ewg_base_url",
        header=YEAR_HEADER,
        extract_rows=partial(embedded_chart_rows, spec=EmbeddedJsonSpec("chartData")),
        path_template="livestock/{name}.tsv",
        progcode="livestock",
        named_by_page=True,
    ),
    "livestock-programs": Dataset(
        name="livestock-programs",
        catalog=RegionCatalog.fips(),
        fetcher=DIRECT,
        url_template=EWG_PROGDETAIL_TEMPLATE,
        base_url_field="ewg_base_url",
        header=PROGRAM_HEADER,
        extract_rows=partial(
            table_rows,
            caption=LIVESTOCK_PROGRAMS_CAPTION,
            width=len(PROGRAM_HEADER),
        ),
        path_template="livestock/programs_{name}.tsv",
        progcode="livestock",
        named_by_page=True,
    ),
    "spending": Dataset(
        name="spending",
        catalog=RegionCatalog.states(),
        fetcher=RENDERED,
        url_template=USASPENDING_STATE_TEMPLATE,
        base_url_field="usaspending_base_url",
        header=YEAR_HEADER,
        extract_rows=aria_label_rows,
        path_template="spending/year_{name}.tsv",
        marker=SPENDING_MARKER,
    ),
    "program": Dataset(
        name="program",
        catalog=RegionCatalog.fips(),
        fetcher=DIRECT,
        url_template=EWG_PROGDETAIL_TEMPLATE,
        base_url_field="ewg_base_url",
        header=YEAR_HEADER,
        extract_rows=partial(embedded_chart_rows, spec=EmbeddedJsonSpec("data")),
        path_template="{progcode}/{name}.tsv",
        named_by_page=True,
        needs_progcode=True,
    ),
}


def get_dataset(name: str, progcode: str | None = None) -> Dataset:
    """Look up a registered dataset, binding ``progcode`` where it takes one.

    Raises:
        KeyError: If ``name`` is not registered; the message lists valid names.
        ValueError: If ``progcode`` does not fit the dataset.
    """
    try:
        dataset = DATASETS[name]
    except KeyError:
        raise KeyError(
            f"Unknown dataset {name!r}. Valid datasets: {sorted(DATASETS)}"
        ) from None

    if not dataset.needs_progcode:
        if progcode is not None:
            raise ValueError(f"Dataset {name!r} does not take a program code")
        return dataset
    if progcode is None:
        raise ValueError(f"Dataset {name!r} requires a program code")
    if not _PROGCODE_RE.match(progcode):
        raise ValueError(
            f"Invalid program code {progcode!r}: use letters, digits, '_' or '-'"
        )
    return replace(dataset, progcode=progcode)
