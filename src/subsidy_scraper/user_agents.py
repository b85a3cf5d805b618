"""User-Agent headers for direct (non-browser) page fetches.

Real browsers do not change User-Agent mid-session, so ``DirectFetcher``
calls ``get_headers()`` once when its session opens and reuses the result
for every region.
"""

from fake_useragent import UserAgent

_KNOWN_FAMILIES = ("Chrome", "Firefox", "Safari", "Edge")


class UserAgentRotator:
    """Picks desktop User-Agent strings from a single browser family."""

    def __init__(self, browser: str = "Chrome"):
        self._browser_family = self._normalize_family(browser)
        self._ua = UserAgent(
            browsers=[self._browser_family],
            platforms=["desktop"],
            min_version=120.0 if self._browser_family in ("Chrome", "Edge") else 0.0,
        )

    @staticmethod
    def _normalize_family(browser: str) -> str:
        """Map a loose browser name to a fake-useragent family.

        Unknown names fall back to "Chrome".
        """
        for family in _KNOWN_FAMILIES:
            if browser.lower().startswith(family.lower()):
                return family
        return "Chrome"

    @property
    def browser_family(self) -> str:
        return self._browser_family

    def get(self) -> str:
        """Return a random UA string from the configured browser family."""
        return self._ua.random

    def get_headers(self) -> dict[str, str]:
        """Return a headers dict with User-Agent and an HTML Accept header.

        Chrome-family sessions also carry the Client Hints real Chrome sends.
        """
        headers: dict[str, str] = {
            "User-Agent": self.get(),
            "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
        }
        if self._browser_family in ("Chrome", "Edge"):
            headers["Sec-CH-UA-Platform"] = '"Windows"'
            headers["Sec-CH-UA-Mobile"] = "?0"
        return headers
