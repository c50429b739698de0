"""
Share links of the form ``<origin>/f/<object id>#key=<secret>``.

The secret rides in the URL fragment. Browsers never send the fragment to a
server, so the blob store and any proxy in between only ever see the object
id.
"""

from __future__ import annotations

from urllib.parse import parse_qs, quote, unquote, urlsplit

from .exceptions import InvalidLocatorError
from .models import ShareLocator

LOCATOR_PATH_PREFIX = "f"
LOCATOR_KEY_PARAM = "key"


def build_locator(object_id: str, secret: str, base_origin: str) -> str:
    if not object_id:
        raise ValueError("object_id must not be empty")
    if not secret:
        raise ValueError("secret must not be empty")
    origin = base_origin.rstrip("/")
    return (
        f"{origin}/{LOCATOR_PATH_PREFIX}/{quote(object_id, safe='')}"
        f"#{LOCATOR_KEY_PARAM}={quote(secret, safe='')}"
    )


def parse_locator(url: str) -> ShareLocator:
    """
    Extract the object id (last path segment) and secret (``key`` in the
    fragment) from a share link.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidLocatorError("share link is empty")

    try:
        parts = urlsplit(url.strip())
    except ValueError as exc:
        raise InvalidLocatorError(f"share link is not a valid URL: {exc}") from exc

    object_id = unquote(parts.path.rsplit("/", 1)[-1])
    if not object_id:
        raise InvalidLocatorError("share link has no object id")

    params = parse_qs(parts.fragment, keep_blank_values=False)
    secret = params.get(LOCATOR_KEY_PARAM, [None])[0]
    if not secret:
        raise InvalidLocatorError("share link has no key in its fragment")

    return ShareLocator(object_id=object_id, secret=secret)
