"""Record and table types for the subsidy scraper.

Re-exports all model classes for convenient import::

    from subsidy_scraper.models import ChartRecord, OutputTable, TableRow
"""

from .chart_record import ChartRecord
from .table import COL_SEPARATOR, OutputTable, TableRow

__all__ = [
    "ChartRecord",
    "OutputTable",
    "TableRow",
    "COL_SEPARATOR",
]
