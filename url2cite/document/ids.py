"""URL detection and citation-key escaping."""

import re


_URL_PATTERN = re.compile(r"^https?://\S+$")
_KEY_SAFE = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789")


def is_url(value: str) -> bool:
    """Check whether a citation id or link target is an absolute web URL."""
    return bool(_URL_PATTERN.match(value))


def escape_url(url: str, escape: bool = True) -> str:
    """Turn a URL into a citation key.

    With escaping on, ASCII letters and digits are kept and every other
    character becomes ``-`` followed by its UTF-8 bytes in uppercase hex,
    so ``http://x`` becomes ``http-3A-2F-2Fx``. The mapping is injective and
    the result is a valid key for both citeproc and biber.

    Args:
        url: Absolute URL
        escape: When False, return the URL unchanged

    Returns:
        Citation key for the URL.
    """
    if not escape:
        return url
    parts = []
    for char in url:
        if char in _KEY_SAFE:
            parts.append(char)
        else:
            parts.append("".join(f"-{byte:02X}" for byte in char.encode("utf-8")))
    return "".join(parts)
