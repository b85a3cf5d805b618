"""Region catalog: the fixed set of states each dataset iterates over.

Two catalog forms are supported:

* ``RegionCatalog.fips()`` -- numeric state indices 1..56 mapped to
  5-digit county-style FIPS codes (``1 -> "01000"``).  Some indices in
  that range are unassigned or name the national aggregate; those are
  detected from the fetched page, not here.
* ``RegionCatalog.states()`` -- the 50 states plus the District of
  Columbia, keyed by a lowercase URL slug.

Catalogs are restartable: each ``iter()`` starts a fresh generator.
"""

from dataclasses import dataclass
from typing import Callable, Iterator

FIPS_FIRST = 1
FIPS_LAST = 56

STATE_NAMES: tuple[str, ...] = (
    "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado",
    "Connecticut", "Delaware", "District of Columbia", "Florida", "Georgia",
    "Hawaii", "Idaho", "Illinois", "Indiana", "Iowa", "Kansas", "Kentucky",
    "Louisiana", "Maine", "Maryland", "Massachusetts", "Michigan",
    "Minnesota", "Mississippi", "Missouri", "Montana", "Nebraska", "Nevada",
    "New Hampshire", "New Jersey", "New Mexico", "New York",
    "North Carolina", "North Dakota", "Ohio", "Oklahoma", "Oregon",
    "Pennsylvania", "Rhode Island", "South Carolina", "South Dakota",
    "Tennessee", "Texas", "Utah", "Vermont", "Virginia", "Washington",
    "West Virginia", "Wisconsin", "Wyoming",
)


@dataclass(frozen=True)
class Region:
    """One state being scraped.

    ``name`` is the identifier written to output rows.  For FIPS regions
    it starts out as the code and is replaced by the name the page
    reports.  ``key`` is the value substituted into the request URL.
    """

    name: str
    key: str


def fips_code(index: int) -> str:
    """State index to 5-digit FIPS code: ``1 -> "01000"``."""
    return f"{index * 1000:05d}"


def state_slug(name: str) -> str:
    """State name to URL slug: ``"New York" -> "new-york"``."""
    return "-".join(name.lower().split())


class RegionCatalog:
    """Lazy, finite, restartable sequence of ``Region`` values."""

    def __init__(self, kind: str, factory: Callable[[], Iterator[Region]]):
        self.kind = kind
        self._factory = factory

    @classmethod
    def fips(cls, start: int = FIPS_FIRST, end: int = FIPS_LAST) -> "RegionCatalog":
        """Catalog of FIPS codes for state indices ``start..=end``."""

        def _generate() -> Iterator[Region]:
            for index in range(start, end + 1):
                code = fips_code(index)
                yield Region(name=code, key=code)

        return cls("fips", _generate)

    @classmethod
    def states(cls, names: tuple[str, ...] = STATE_NAMES) -> "RegionCatalog":
        """Catalog of named states keyed by lowercase slug."""

        def _generate() -> Iterator[Region]:
            for name in names:
                yield Region(name=name, key=state_slug(name))

        return cls("states", _generate)

    def __iter__(self) -> Iterator[Region]:
        return self._factory()

    def __repr__(self) -> str:
        return f"RegionCatalog(kind={self.kind!r})"
