"""Embedded-JSON extractor for chart data assigned inside script blocks.

EWG program pages ship their chart series as a JavaScript assignment::

    <script>
      var chartData = [{"year":"2020","spending":1000.5}, ];
    </script>

The literal is delimited by plain string slicing: it starts right after
``var <name> = `` and ends at the first ``;``.  This is a narrow heuristic
for these pages, not a JavaScript parser -- a ``;`` inside a string value
would truncate the literal and surface as a ``JsonDecodeError``.

Provides:
- extract_records: pure function, Document + EmbeddedJsonSpec in, records out
- EmbeddedJsonSpec: which variable to read and which model validates each entry
- the individual steps (find, slice, repair, decode) for reuse and testing
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from subsidy_scraper.document import Document, Element
from subsidy_scraper.exceptions import (
    AssignmentNotFound,
    JsonDecodeError,
    RecordSchemaError,
    TerminatorNotFound,
)
from subsidy_scraper.models import ChartRecord

logger = logging.getLogger(__name__)

# Trailing comma before the array close, as emitted by the page templates.
_TRAILING_COMMA = ", ]"


@dataclass(frozen=True)
class EmbeddedJsonSpec:
    """Which script variable holds the data and how each entry is validated."""

    variable: str
    record_model: type[BaseModel] = ChartRecord

    @property
    def assignment(self) -> str:
        return f"var {self.variable} = "


def find_assignment_script(document: Document, variable: str) -> Element:
    """Return the first script element that assigns ``variable``.

    Raises:
        AssignmentNotFound: If no script contains ``var <variable> = ``.
    """
    needle = f"var {variable} = "
    script = next(
        (s for s in document.find("script") if needle in s.html()),
        None,
    )
    if script is None:
        raise AssignmentNotFound(
            f"No script block assigns {variable!r}", stage="extract"
        )
    return script


def slice_json_literal(source: str, variable: str) -> str:
    """Return the text between ``var <variable> = `` and the next ``;``.

    Raises:
        AssignmentNotFound: If the assignment is absent from ``source``.
        TerminatorNotFound: If no ``;`` follows the assignment.
    """
    needle = f"var {variable} = "
    pos = source.find(needle)
    if pos < 0:
        raise AssignmentNotFound(
            f"Assignment {needle!r} not found", stage="extract"
        )
    start = pos + len(needle)
    end = source.find(";", start)
    if end < 0:
        raise TerminatorNotFound(
            f"No ';' terminates the {variable!r} assignment", stage="extract"
        )
    return source[start:end]


def repair_json_literal(text: str) -> str:
    """Drop the trailing comma before an array close (``, ]`` -> ``]``).

    Only that exact sequence is rewritten; any other malformation is left
    for the decoder to reject.
    """
    return text.replace(_TRAILING_COMMA, "]")


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not a JSON number")


def decode_json_literal(text: str, variable: str = "") -> list[dict[str, Any]]:
    """Decode a repaired literal into a list of JSON objects.

    Raises:
        JsonDecodeError: If ``text`` is not valid JSON (``NaN`` and
            ``Infinity`` included).
        RecordSchemaError: If the value is not an array of objects.
    """
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise JsonDecodeError(
            f"Invalid JSON in {variable or 'literal'}: {exc}", stage="decode"
        ) from exc

    if not isinstance(value, list):
        raise RecordSchemaError(
            f"Expected a JSON array in {variable or 'literal'}, "
            f"got {type(value).__name__}",
            stage="decode",
        )
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise RecordSchemaError(
                f"Entry {i} of {variable or 'literal'} is "
                f"{type(item).__name__}, expected an object",
                stage="decode",
            )
    return value


def extract_records(document: Document, spec: EmbeddedJsonSpec) -> list[BaseModel]:
    """Extract and validate every record assigned to ``spec.variable``.

    Pure function: the same document always yields the same records.
    Extraction is all-or-nothing -- one invalid entry fails the whole
    extraction rather than dropping that entry.

    Args:
        document: Parsed page.
        spec: Variable name and per-entry validation model.

    Returns:
        List of ``spec.record_model`` instances in array order.

    Raises:
        AssignmentNotFound: No script assigns the variable.
        TerminatorNotFound: The assignment is never terminated.
        JsonDecodeError: The literal is not valid JSON after repair.
        RecordSchemaError: Not an array of objects, or an entry fails
            validation (missing or mistyped field).
    """
    script = find_assignment_script(document, spec.variable)
    literal = repair_json_literal(slice_json_literal(script.html(), spec.variable))
    items = decode_json_literal(literal, spec.variable)

    records: list[BaseModel] = []
    for i, item in enumerate(items):
        try:
            records.append(spec.record_model.model_validate(item))
        except ValidationError as exc:
            raise RecordSchemaError(
                f"Entry {i} of {spec.variable} failed "
                f"{spec.record_model.__name__} validation: {exc}",
                stage="decode",
            ) from exc

    logger.debug("Extracted %d %s records", len(records), spec.variable)
    return records
