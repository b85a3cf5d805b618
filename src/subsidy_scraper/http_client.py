"""Page fetchers: plain HTTP for static pages, a real browser for rendered ones.

Both fetchers expose the same async contract::

    async with fetcher:
        html = await fetcher.fetch(url, marker=...)

``DirectFetcher`` issues one GET per page through a requests Session
(run in a worker thread so the event loop stays free).  Any transport
error or non-2xx status raises ``NetworkError`` and the region is skipped.

``RenderedFetcher`` drives a browser over the Chrome DevTools protocol
with nodriver.  usaspending.gov builds its state profile client-side, so
after navigation the page source is polled until a marker substring
shows up.  Polling is bounded by tenacity (attempt count and wall-clock
timeout) and ends in ``MarkerTimeout``.  The browser session is shared by
every region, so any transport error from it raises ``BrowserSessionError``,
which halts the run.
"""

import asyncio
import logging
from typing import Any

import nodriver
import requests
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_fixed,
)

from subsidy_scraper.config import ScraperConfig
from subsidy_scraper.exceptions import BrowserSessionError, MarkerTimeout, NetworkError
from subsidy_scraper.user_agents import UserAgentRotator

logger = logging.getLogger(__name__)

_PAGE_SOURCE_JS = "document.documentElement.outerHTML"


class DirectFetcher:
    """Single-request HTML fetcher backed by ``requests.Session``.

    Usage:
        async with DirectFetcher(config) as fetcher:
            html = await fetcher.fetch("https://farm.ewg.org/progdetail.php?...")
    """

    def __init__(self, config: ScraperConfig | None = None):
        if config is None:
            config = ScraperConfig()
        self._config = config
        self._session: requests.Session | None = None
        self._request_count = 0
        self._success_count = 0

    async def start(self) -> None:
        """Open the HTTP session with a fixed browser User-Agent."""
        self._session = requests.Session()
        self._session.headers.update(
            UserAgentRotator(self._config.user_agent_browser).get_headers()
        )

    async def fetch(self, url: str, marker: str | None = None) -> str:
        """GET ``url`` and return the decoded body.

        Args:
            url: The full URL to fetch.
            marker: Optional substring the body must contain.  Static pages
                are not re-polled; a missing marker is a failed fetch.

        Raises:
            NetworkError: Connection failure, timeout, non-2xx status, or
                missing marker.
        """
        if self._session is None:
            raise NetworkError("Session not started. Call start() first.", url=url)

        self._request_count += 1
        try:
            resp = await asyncio.to_thread(
                self._session.get, url, timeout=self._config.request_timeout
            )
        except requests.RequestException as exc:
            raise NetworkError(f"Failed to fetch {url}: {exc}", url=url, stage="fetch") from exc

        if not 200 <= resp.status_code < 300:
            raise NetworkError(
                f"HTTP {resp.status_code} from {url}",
                url=url,
                stage="fetch",
                status_code=resp.status_code,
            )

        html = resp.content.decode("utf-8", errors="replace")
        if marker and marker not in html:
            raise NetworkError(
                f"Content marker {marker!r} not found on {url} ({len(html)} chars)",
                url=url,
                stage="fetch",
                status_code=resp.status_code,
            )

        self._success_count += 1
        logger.debug("Fetched %s (%d chars)", url, len(html))
        return html

    async def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    async def __aenter__(self) -> "DirectFetcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def stats(self) -> dict:
        """Return current fetcher statistics."""
        return {"requests": self._request_count, "successes": self._success_count}


class RenderedFetcher:
    """Browser-backed fetcher for client-side rendered pages.

    Connects to a browser already listening for DevTools connections on
    ``browser_host:browser_port`` (or launches one when
    ``config.launch_browser`` is set) and reuses a single tab for every
    navigation.  Not safe for concurrent use: callers must fetch one page
    at a time.

    Usage:
        async with RenderedFetcher(config) as fetcher:
            html = await fetcher.fetch(url, marker="Spending in ")
    """

    def __init__(self, config: ScraperConfig | None = None):
        if config is None:
            config = ScraperConfig()
        self._config = config
        self._browser: nodriver.Browser | None = None
        self._tab = None
        self._request_count = 0
        self._success_count = 0
        self._timeout_count = 0

    async def start(self) -> None:
        """Attach to (or launch) the browser and open the working tab.

        Raises:
            BrowserSessionError: If the automation endpoint is unreachable.
        """
        try:
            if self._config.launch_browser:
                self._browser = await nodriver.start(headless=True, no_sandbox=True)
            else:
                self._browser = await nodriver.start(
                    host=self._config.browser_host,
                    port=self._config.browser_port,
                )
            self._tab = await self._browser.get("about:blank")
        except Exception as exc:
            endpoint = f"{self._config.browser_host}:{self._config.browser_port}"
            raise BrowserSessionError(
                f"Failed to connect to browser on {endpoint}: {exc}",
                stage="connect",
            ) from exc
        logger.info(
            "Browser session ready (%s)",
            "launched" if self._config.launch_browser
            else f"{self._config.browser_host}:{self._config.browser_port}",
        )

    async def _page_source(self, url: str) -> str:
        try:
            html = await self._tab.evaluate(_PAGE_SOURCE_JS)
        except Exception as exc:
            raise BrowserSessionError(
                f"Failed to read page source for {url}: {exc}", url=url, stage="fetch"
            ) from exc
        # nodriver may return ExceptionDetails instead of str on error
        return html if isinstance(html, str) else ""

    async def fetch(self, url: str, marker: str | None = None) -> str:
        """Navigate to ``url`` and return the rendered HTML.

        Args:
            url: The full URL to navigate to.
            marker: Substring that signals the page finished rendering.
                Without one, the source is returned after ``page_load_wait``.

        Raises:
            MarkerTimeout: The marker did not appear within ``max_polls``
                polls or ``marker_timeout`` seconds.
            BrowserSessionError: Navigation or source retrieval failed.
        """
        if self._browser is None or self._tab is None:
            raise BrowserSessionError("Browser not started. Call start() first.", url=url)

        self._request_count += 1
        try:
            await self._tab.get(url)
        except Exception as exc:
            raise BrowserSessionError(
                f"Failed to navigate to {url}: {exc}", url=url, stage="fetch"
            ) from exc
        await asyncio.sleep(self._config.page_load_wait)

        if not marker:
            html = await self._page_source(url)
        else:
            html = await self._poll_for_marker(url, marker)

        self._success_count += 1
        logger.debug("Fetched %s (%d chars)", url, len(html))
        return html

    async def _poll_for_marker(self, url: str, marker: str) -> str:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(MarkerTimeout),
            wait=wait_fixed(self._config.poll_interval),
            stop=(
                stop_after_attempt(self._config.max_polls)
                | stop_after_delay(self._config.marker_timeout)
            ),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        )
        html = ""
        try:
            async for attempt in retrying:
                with attempt:
                    html = await self._page_source(url)
                    if marker not in html:
                        raise MarkerTimeout(
                            f"Content marker {marker!r} not found on {url} "
                            f"({len(html)} chars)",
                            url=url,
                            stage="fetch",
                        )
        except MarkerTimeout:
            self._timeout_count += 1
            raise
        return html

    async def close(self) -> None:
        """Detach from the browser.  Safe to call more than once."""
        if self._browser is None:
            return
        browser = self._browser
        self._browser = None
        self._tab = None
        try:
            browser.stop()
        except Exception as exc:
            logger.warning("Error while stopping browser session: %s", exc)

    async def __aenter__(self) -> "RenderedFetcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def stats(self) -> dict:
        """Return current fetcher statistics."""
        return {
            "requests": self._request_count,
            "successes": self._success_count,
            "marker_timeouts": self._timeout_count,
        }
