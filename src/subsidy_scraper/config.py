"""Scraper configuration with sensible defaults for the subsidy sources."""

from dataclasses import dataclass

EWG_BASE_URL = "https://farm.ewg.org"
USASPENDING_BASE_URL = "https://www.usaspending.gov"


@dataclass
class ScraperConfig:
    """Configuration for the subsidy scraper.

    All timing values are in seconds.
    """

    # Source sites
    ewg_base_url: str = EWG_BASE_URL
    usaspending_base_url: str = USASPENDING_BASE_URL

    # Output tables are written under this directory, one subdirectory
    # per dataset.
    output_dir: str = "."

    # Direct fetch: per-request timeout for requests.get()
    request_timeout: float = 30.0

    # Rendered fetch: browser automation endpoint.  The browser must be
    # started with --remote-debugging-port matching browser_port unless
    # launch_browser is set.
    browser_host: str = "127.0.0.1"
    browser_port: int = 9515
    launch_browser: bool = False

    # Marker polling for rendered pages.  Polling stops at whichever
    # bound is hit first.
    poll_interval: float = 1.0
    max_polls: int = 60
    marker_timeout: float = 60.0

    # Seconds to wait after navigation before the first source poll
    page_load_wait: float = 0.5

    # Browser family for fake-useragent on direct fetches
    user_agent_browser: str = "Chrome"
