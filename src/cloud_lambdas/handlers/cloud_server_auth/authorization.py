"""Allow-list of cloud server paths that may be relayed."""

__all__ = [
    "AUTHORIZED_PATH_PREFIXES",
    "EXACT_MATCH_PATTERNS",
    "is_authorized",
]

import re
from typing import List, Pattern
from urllib.parse import urlsplit

# Literal string prefixes, not path segments: "api/installationX" is accepted.
AUTHORIZED_PATH_PREFIXES: List[str] = [
    "api/installation",
    "/api/installation",
    "api/cluster_installation",
    "/api/cluster_installation",
    "api/webhooks",
    "/api/webhooks",
    "/api/webhook",
    "api/webhook",
]

EXACT_MATCH_PATTERNS: List[Pattern[str]] = [
    re.compile(r"^/api/security/installation/[a-zA-Z0-9]{26}/deletion/lock$"),
    re.compile(r"^/api/security/installation/[a-zA-Z0-9]{26}/deletion/unlock$"),
]


def is_authorized(url: str) -> bool:
    """Whether the escaped path of `url` may be relayed to the cloud server.

    Args:
        url (str): Absolute URL or bare path. Only the path component is checked.

    Returns:
        True if the path starts with an allowed prefix or fully matches one of
        the security deletion lock/unlock endpoints.
    """
    path = urlsplit(url).path
    if any(path.startswith(prefix) for prefix in AUTHORIZED_PATH_PREFIXES):
        return True
    return any(pattern.fullmatch(path) for pattern in EXACT_MATCH_PATTERNS)
