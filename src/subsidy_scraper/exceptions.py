"""Custom exception hierarchy for the subsidy scraper.

Exception tree:
    SubsidyScraperError
    +-- FetchError
    |   +-- NetworkError          (HTTP error or non-2xx status)
    |   +-- MarkerTimeout         (rendered page never showed its marker)
    |   +-- BrowserSessionError   (automation transport failure, fatal)
    +-- ParseError                (expected DOM structure absent)
    |   +-- MarkerNotFound
    |   |   +-- AssignmentNotFound  (no ``var <name> = `` in any script)
    |   |   +-- TerminatorNotFound  (no ``;`` after the assignment)
    |   +-- TableNotFound
    |   +-- RegionNameNotFound
    +-- DecodeError               (embedded JSON malformed or off-schema)
    |   +-- JsonDecodeError
    |   +-- RecordSchemaError
    +-- OutputError               (table file cannot be written, fatal)

Every class carries a ``fatal`` flag.  Recoverable errors skip one region;
fatal errors halt the run.
"""

from typing import Optional


class SubsidyScraperError(Exception):
    """Base exception for all subsidy scraper errors."""

    fatal = False

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        region: Optional[str] = None,
        stage: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.url = url
        self.region = region
        self.stage = stage
        self.status_code = status_code
        super().__init__(message)


class FetchError(SubsidyScraperError):
    """A page could not be retrieved."""

    pass


class NetworkError(FetchError):
    """Direct fetch failed: connection error, timeout, or non-2xx status.

    Recoverable -- the caller skips this region and continues.
    """

    pass


class MarkerTimeout(FetchError):
    """The rendered page never showed its marker substring.

    Raised once the bounded poll gives up.  The browser session itself is
    still usable, so this only skips the region.
    """

    pass


class BrowserSessionError(FetchError):
    """Transport error from the browser automation session.

    Fatal -- the session is shared across regions and its navigation
    state can no longer be trusted.
    """

    fatal = True


class ParseError(SubsidyScraperError):
    """Expected DOM structure or attribute is absent from the page."""

    pass


class MarkerNotFound(ParseError):
    """The embedded JSON literal could not be delimited."""

    pass


class AssignmentNotFound(MarkerNotFound):
    """No script block contains the ``var <name> = `` assignment."""

    pass


class TerminatorNotFound(MarkerNotFound):
    """The assignment was found but no ``;`` follows it."""

    pass


class TableNotFound(ParseError):
    """No table carries the expected ``title`` attribute."""

    pass


class RegionNameNotFound(ParseError):
    """The page does not name its region (no stateface span)."""

    pass


class DecodeError(SubsidyScraperError):
    """Embedded JSON is malformed or does not match the record schema.

    Never partial: a region either yields every record or none.
    """

    pass


class JsonDecodeError(DecodeError):
    """The repaired JSON literal is not valid JSON."""

    pass


class RecordSchemaError(DecodeError):
    """Decoded JSON is not an array of objects with the required fields."""

    pass


class OutputError(SubsidyScraperError):
    """The output table could not be created or written.  Fatal."""

    fatal = True
