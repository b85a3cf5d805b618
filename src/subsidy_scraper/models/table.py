"""Tabular output types shared by the normalizer and the table writer."""

from dataclasses import dataclass, field

COL_SEPARATOR = "\t"

# Ordered string cells; the first cell is always the region identifier.
TableRow = tuple[str, ...]


@dataclass
class OutputTable:
    """A header plus data rows destined for one per-region file.

    Raises:
        ValueError: If any row's width differs from the header's.
    """

    header: tuple[str, ...]
    rows: list[TableRow] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.header = tuple(self.header)
        self.rows = [tuple(row) for row in self.rows]
        width = len(self.header)
        for i, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {i} has {len(row)} cells, header has {width}: {row!r}"
                )

    def __len__(self) -> int:
        return len(self.rows)
