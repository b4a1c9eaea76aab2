"""One-way analytics submission. POST only, no response body parsed.

Hits follow the Google Analytics Measurement Protocol. The client holds no
mutable state after construction, so report threads may share one instance.
"""
from __future__ import annotations

import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Mapping

from pdk import __version__
from pdk.analytics.config import AnalyticsConfig
from pdk.errors import AnalyticsError

logger = logging.getLogger(__name__)

ANALYTICS_ENDPOINT = "https://www.google-analytics.com/collect"
TRACKING_ID = "UA-139917834-1"
TIMEOUT_SECONDS = 5

# Maximum time a command waits for its analytics hit before moving on.
FLUSH_DURATION = 0.5


class Client:
    """Sends screenview hits for one anonymous user."""

    def __init__(
        self,
        config: AnalyticsConfig,
        endpoint: str = ANALYTICS_ENDPOINT,
        tracking_id: str = TRACKING_ID,
        timeout: float = TIMEOUT_SECONDS,
    ):
        self.config = config
        self.endpoint = endpoint
        self.tracking_id = tracking_id
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return not self.config.disabled

    def build_hit(self, name: str, params: Mapping[str, Any] | None = None) -> dict[str, str]:
        """Build the form fields of a screenview hit."""
        hit = {
            "v": "1",
            "tid": self.tracking_id,
            "cid": self.config.user_id,
            "t": "screenview",
            "an": "pdk",
            "av": __version__,
            "cd": name,
            "ds": "cli",
        }
        for key, value in (params or {}).items():
            hit[str(key)] = str(value)
        return hit

    def screenview(self, name: str, params: Mapping[str, Any] | None = None) -> None:
        """Record a view of the `name` screen.

        Raises AnalyticsError if the hit could not be delivered.
        """
        if not self.enabled:
            logger.debug("Analytics disabled, not sending screenview %s", name)
            return

        data = urllib.parse.urlencode(self.build_hit(name, params)).encode("utf-8")
        req = urllib.request.Request(
            self.endpoint,
            data=data,
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "User-Agent": f"pdk/{__version__}",
            },
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                status = resp.status
        except (urllib.error.URLError, OSError, ValueError) as e:
            raise AnalyticsError(f"screenview {name} failed: {e}") from e

        logger.debug("Analytics POST %s: HTTP %d", self.endpoint, status)
        if not 200 <= status < 300:
            raise AnalyticsError(f"screenview {name} rejected: HTTP {status}")
