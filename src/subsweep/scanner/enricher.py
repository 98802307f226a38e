"""HTTP enrichment - status code and page title for confirmed subdomains.

Purely informational. A subdomain that resolved stays confirmed no matter
what happens here; any network, status or parse problem just leaves the
corresponding field empty.
"""

import logging
from typing import Optional

import requests
from bs4 import BeautifulSoup

from subsweep.util.types import EnrichmentInfo

logger = logging.getLogger(__name__)

USER_AGENT = 'subsweep/1.0 (+subdomain discovery)'


def extract_title(html: str) -> Optional[str]:
    """Text of the first <title> element, trimmed. None if missing or empty."""
    soup = BeautifulSoup(html, 'html.parser')
    tag = soup.find('title')
    if tag is None:
        return None
    title = tag.get_text().strip()
    return title or None


class Enricher:
    """Fetches http://<name>/ once and derives status and title from it.

    The status code and title share a single GET.
    """

    def __init__(self,
                 check_status: bool = False,
                 fetch_title: bool = False,
                 timeout: float = 8.0,
                 session: Optional[requests.Session] = None):
        """Initialize enricher.

        Args:
            check_status: Record the HTTP status code
            fetch_title: Record the page title (only for 200 responses)
            timeout: Seconds allowed for the HTTP request
            session: HTTP session to use (a fresh requests.Session by default)
        """
        self.check_status = check_status
        self.fetch_title = fetch_title
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': USER_AGENT})

    @property
    def enabled(self) -> bool:
        return self.check_status or self.fetch_title

    def enrich(self, name: str) -> Optional[EnrichmentInfo]:
        """Fetch status and/or title for name. None when enrichment is off."""
        if not self.enabled:
            return None

        info = EnrichmentInfo()
        url = f"http://{name}"

        try:
            resp = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            logger.debug(f"HTTP error for {url}: {e}")
            info.error = f"HTTP error: {type(e).__name__}"
            return info

        try:
            if self.check_status:
                info.status_code = resp.status_code

            if self.fetch_title:
                if resp.status_code == 200:
                    info.title = extract_title(resp.text)
                else:
                    logger.debug(f"No title for {url}: HTTP {resp.status_code}")
        except Exception as e:
            logger.debug(f"Failed to parse response from {url}: {e}")
            info.error = f"Parse error: {type(e).__name__}"
        finally:
            resp.close()

        return info

    def close(self) -> None:
        self.session.close()
