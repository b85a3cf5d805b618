"""Filesystem storage for per-region output tables.

Writes tab-separated tables under one base directory, one file per
region, organized by dataset::

    base_dir/
      livestock/
        Alabama.tsv
        programs_Alabama.tsv
      spending/
        year_Alabama.tsv

Each file is a header row followed by data rows, cells joined by a tab
and rows joined by a newline.  Files are replaced atomically, so a failed
run never leaves a half-written table behind.
"""

import os
import tempfile
from pathlib import Path

from subsidy_scraper.exceptions import OutputError
from subsidy_scraper.models import COL_SEPARATOR, OutputTable


class TableWriter:
    """Atomic TSV write/read/exists filesystem layer.

    Usage::

        writer = TableWriter("out")
        path = writer.write("livestock/Alabama.tsv", table)
        table = writer.read("livestock/Alabama.tsv")
    """

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    def write(self, relative_path: str | Path, table: OutputTable) -> Path:
        """Write ``table`` to ``base_dir / relative_path``, replacing any old file.

        Args:
            relative_path: Destination path relative to ``base_dir``.
            table: Header and rows. Cells must not contain tabs or newlines.

        Returns:
            Path to the written file.

        Raises:
            OutputError: If the directory or file cannot be created or written.
        """
        file_path = self.base_dir / relative_path
        lines = [COL_SEPARATOR.join(table.header)]
        lines.extend(COL_SEPARATOR.join(row) for row in table.rows)
        text = "\n".join(lines)

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                    fh.write(text)
                os.replace(tmp_name, file_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise OutputError(
                f"Cannot write table {file_path}: {exc}", stage="write"
            ) from exc
        return file_path

    def read(self, relative_path: str | Path) -> OutputTable:
        """Load a table previously written by ``write()``.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        file_path = self.base_dir / relative_path
        if not file_path.exists():
            raise FileNotFoundError(f"No saved table: {file_path}")
        lines = file_path.read_text(encoding="utf-8").split("\n")
        header = tuple(lines[0].split(COL_SEPARATOR))
        rows = [tuple(line.split(COL_SEPARATOR)) for line in lines[1:]]
        return OutputTable(header=header, rows=rows)

    def exists(self, relative_path: str | Path) -> bool:
        """Check whether a table file exists on disk."""
        return (self.base_dir / relative_path).exists()
