"""
Stytch B2B client wrapper.

Provides a singleton client instance configured from settings. Every HTTP
request the SDK makes goes through a session whose adapter applies
STYTCH_TIMEOUT_SECONDS, since the SDK itself sends without a timeout.
"""

from functools import lru_cache

import requests
import stytch
from requests.adapters import HTTPAdapter

from config.settings.base import settings


class TimeoutHTTPAdapter(HTTPAdapter):
    """HTTPAdapter that fills in a default timeout when the caller gives none."""

    def __init__(self, *args, timeout: float, **kwargs):
        self.timeout = timeout
        super().__init__(*args, **kwargs)

    def send(self, request, **kwargs):
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = self.timeout
        return super().send(request, **kwargs)


def build_stytch_session(timeout: float) -> requests.Session:
    """Create a requests session that bounds every Stytch call by `timeout` seconds."""
    session = requests.Session()
    adapter = TimeoutHTTPAdapter(timeout=timeout)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


@lru_cache(maxsize=1)
def get_stytch_client() -> stytch.B2BClient:
    """
    Get configured Stytch B2B client (singleton).

    Uses lru_cache to ensure only one client instance is created.
    """
    return stytch.B2BClient(
        project_id=settings.STYTCH_PROJECT_ID,
        secret=settings.STYTCH_SECRET,
        sync_session=build_stytch_session(settings.STYTCH_TIMEOUT_SECONDS),
    )
