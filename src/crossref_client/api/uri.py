"""Request URI construction."""

from typing import Optional

BASE_URI = "https://api.crossref.org"


def build_uri(path: str, version: Optional[str] = None) -> str:
    """Build an absolute request URI rooted at the Crossref API.

    A relative path gets the version segment prepended when one is set;
    an absolute path (leading ``/``) is used as given.

    Example:
        >>> build_uri("works", "v1")
        'https://api.crossref.org/v1/works'
        >>> build_uri("/works", "v1")
        'https://api.crossref.org/works'
    """
    if version and not path.startswith("/"):
        path = f"{version}/{path}"

    return f"{BASE_URI}/{path.lstrip('/')}"
