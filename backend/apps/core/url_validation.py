"""
URL validation utilities for redirect targets.

Checkout success/cancel URLs and invite links are built from a configured
base URL. Stripe rejects relative or scheme-less URLs, so the base is
normalized before any external call is made.
"""

from urllib.parse import urlencode, urlparse

ALLOWED_SCHEMES = frozenset({"http", "https"})


class InvalidBaseURLError(ValueError):
    """Raised when a base URL cannot be turned into an absolute http(s) URL."""

    pass


def normalize_base_url(url: str) -> str:
    """
    Normalize a site base URL.

    - Adds an https:// scheme when none is present
    - Rejects schemes other than http/https
    - Requires a hostname
    - Strips trailing slashes, query and fragment

    Args:
        url: Raw base URL, e.g. 'app.example.com' or 'http://localhost:3000/'

    Returns:
        Absolute base URL without trailing slash, e.g. 'https://app.example.com'

    Raises:
        InvalidBaseURLError: If the URL is empty or has no usable host
    """
    candidate = (url or "").strip()
    if not candidate:
        raise InvalidBaseURLError("Empty base URL")

    if "://" not in candidate:
        candidate = f"https://{candidate}"

    parsed = urlparse(candidate)

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidBaseURLError(f"Base URL must use http or https, got: {parsed.scheme}")

    if not parsed.hostname:
        raise InvalidBaseURLError("Base URL has no hostname")

    path = parsed.path.rstrip("/")
    return f"{parsed.scheme.lower()}://{parsed.netloc}{path}"


def build_url(base_url: str, path: str, **query: str) -> str:
    """
    Join a normalized base URL with a path and simple query parameters.

    Example:
        build_url("https://app.example.com", "/login", setup_success="true")
        -> "https://app.example.com/login?setup_success=true"
    """
    url = f"{normalize_base_url(base_url)}/{path.lstrip('/')}"
    if query:
        url += f"?{urlencode(query)}"
    return url
