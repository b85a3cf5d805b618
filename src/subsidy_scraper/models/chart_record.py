"""Pydantic v2 validation model for embedded chart records."""

from pydantic import BaseModel, ConfigDict


class ChartRecord(BaseModel):
    """One year/spending point decoded from an embedded ``chartData`` array.

    Strict mode mirrors the JSON types the pages emit: ``year`` must be a
    JSON string and ``spending`` a JSON number (integers are accepted,
    booleans and numeric strings are not).  Non-finite amounts are rejected.
    Extra keys are ignored.
    """

    model_config = ConfigDict(strict=True, frozen=True, allow_inf_nan=False)

    year: str
    spending: float
