"""Pipeline orchestration for the subsidy scraper.

Provides ``run`` (open the right fetcher, walk one dataset, close the
fetcher) and its building blocks:

* **process_region** -- fetch, parse, extract and write one region.
  Never raises for scraper errors; the result is a ``RegionOutcome``
  (``written``, ``skipped`` with a reason, or ``fatal``).
* **run_dataset** -- the strictly sequential region loop.  Logs each
  outcome, keeps going past skips, stops at the first fatal outcome.
* **RunSummary** -- per-run counts and an end-of-run report.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from subsidy_scraper.config import ScraperConfig
from subsidy_scraper.datasets import DIRECT, Dataset
from subsidy_scraper.document import Document
from subsidy_scraper.exceptions import SubsidyScraperError
from subsidy_scraper.http_client import DirectFetcher, RenderedFetcher
from subsidy_scraper.models import OutputTable
from subsidy_scraper.normalize import is_aggregate_region, region_name
from subsidy_scraper.regions import Region
from subsidy_scraper.storage import TableWriter

logger = logging.getLogger(__name__)

WRITTEN = "written"
SKIPPED = "skipped"
FATAL = "fatal"


@dataclass
class RegionOutcome:
    """What happened to one region."""

    region: Region
    status: str
    name: str = ""
    url: str | None = None
    stage: str | None = None
    reason: str | None = None
    path: Path | None = None
    rows: int = 0
    error: SubsidyScraperError | None = None


# ---------------------------------------------------------------------------
# Run summary
# ---------------------------------------------------------------------------

@dataclass
class RunSummary:
    """Aggregated outcomes for one dataset run."""

    dataset: str
    total: int = 0
    outcomes: list[RegionOutcome] = field(default_factory=list)
    halted: bool = False
    halt_reason: str | None = None
    _start_time: float = field(default_factory=time.monotonic, repr=False)

    def record(self, outcome: RegionOutcome) -> None:
        self.outcomes.append(outcome)

    def halt(self, reason: str) -> None:
        self.halted = True
        self.halt_reason = reason

    def _count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def written(self) -> int:
        return self._count(WRITTEN)

    @property
    def skipped(self) -> int:
        return self._count(SKIPPED)

    @property
    def rows(self) -> int:
        return sum(o.rows for o in self.outcomes)

    def format_summary(self) -> str:
        """Return a human-readable multiline summary string."""
        wall = time.monotonic() - self._start_time
        minutes, seconds = divmod(wall, 60)
        lines = [
            "=" * 60,
            f"Dataset {self.dataset} complete",
            "-" * 60,
            f"Regions:   {len(self.outcomes)}/{self.total} processed",
            f"Written:   {self.written} tables ({self.rows} rows)",
            f"Skipped:   {self.skipped}",
            f"Wall time: {int(minutes)}m {seconds:.1f}s",
        ]
        if self.halted:
            lines.append(f"Halted:    {self.halt_reason}")
        lines.append("=" * 60)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Per-region processing
# ---------------------------------------------------------------------------

async def process_region(
    dataset: Dataset,
    region: Region,
    fetcher,        # DirectFetcher | RenderedFetcher
    writer: TableWriter,
    config: ScraperConfig,
) -> RegionOutcome:
    """Fetch, parse, extract and write one region's table.

    Scraper errors are captured in the returned outcome, tagged with the
    region, URL and the stage that failed.  Errors flagged ``fatal``
    produce a ``FATAL`` outcome; everything else is ``SKIPPED``.

    Returns:
        RegionOutcome describing the result.
    """
    url = dataset.url(config, region)
    name = region.name
    stage = "fetch"
    try:
        html = await fetcher.fetch(url, marker=dataset.marker)

        stage = "parse"
        document = Document.from_html(html)
        if dataset.named_by_page:
            name = region_name(document)
            if is_aggregate_region(name):
                return RegionOutcome(
                    region=region, status=SKIPPED, name=name, url=url,
                    stage=stage, reason="national aggregate",
                )

        stage = "extract"
        rows = dataset.extract_rows(document, name)
        table = OutputTable(header=dataset.header, rows=rows)

        stage = "write"
        path = writer.write(dataset.output_path(name), table)
    except SubsidyScraperError as exc:
        exc.region = exc.region or name
        exc.url = exc.url or url
        exc.stage = exc.stage or stage
        return RegionOutcome(
            region=region,
            status=FATAL if exc.fatal else SKIPPED,
            name=name,
            url=url,
            stage=exc.stage,
            reason=f"{type(exc).__name__}: {exc}",
            error=exc,
        )

    return RegionOutcome(
        region=region, status=WRITTEN, name=name, url=url,
        path=path, rows=len(table),
    )


async def run_dataset(
    dataset: Dataset,
    fetcher,        # DirectFetcher | RenderedFetcher
    writer: TableWriter,
    config: ScraperConfig,
) -> RunSummary:
    """Process every region of ``dataset`` in order, one at a time.

    Skipped regions are logged and the loop continues; the first fatal
    outcome stops the loop and marks the summary halted.
    """
    regions = list(dataset.catalog)
    summary = RunSummary(dataset=dataset.name, total=len(regions))

    for i, region in enumerate(regions, start=1):
        start = time.monotonic()
        outcome = await process_region(dataset, region, fetcher, writer, config)
        summary.record(outcome)
        elapsed = time.monotonic() - start
        progress = f"[{i}/{len(regions)}]"

        if outcome.status == WRITTEN:
            logger.info(
                "%s %s ok: %d rows -> %s (%.1fs)",
                progress, outcome.name, outcome.rows, outcome.path, elapsed,
            )
        elif outcome.status == SKIPPED:
            logger.warning(
                "%s %s skipped at %s stage (%s): %s",
                progress, outcome.name, outcome.stage, outcome.url, outcome.reason,
            )
        else:
            logger.error(
                "%s %s FATAL at %s stage (%s): %s",
                progress, outcome.name, outcome.stage, outcome.url, outcome.reason,
            )
            summary.halt(
                f"{outcome.reason} (region {outcome.name}, stage {outcome.stage})"
            )
            break

    return summary


def make_fetcher(dataset: Dataset, config: ScraperConfig):
    """Build the fetcher kind ``dataset`` needs (not yet started)."""
    if dataset.fetcher == DIRECT:
        return DirectFetcher(config)
    return RenderedFetcher(config)


async def run(dataset: Dataset, config: ScraperConfig, fetcher=None) -> RunSummary:
    """Open a fetcher session, run ``dataset`` through it, always close it.

    Args:
        dataset: The mode to run.
        config: Scraper configuration.
        fetcher: Optional pre-built fetcher (defaults to ``make_fetcher``).

    Returns:
        RunSummary. ``halted`` is set when the session could not be
        opened or a region failed fatally.
    """
    if fetcher is None:
        fetcher = make_fetcher(dataset, config)
    writer = TableWriter(config.output_dir)

    try:
        async with fetcher:
            return await run_dataset(dataset, fetcher, writer, config)
    except SubsidyScraperError as exc:
        if not exc.fatal:
            raise
        logger.error("Cannot start %s session: %s", dataset.fetcher, exc)
        summary = RunSummary(dataset=dataset.name)
        summary.halt(f"{type(exc).__name__}: {exc} (stage {exc.stage or 'connect'})")
        return summary
