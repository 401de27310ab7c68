"""Resolution of connection settings from flags and environment variables."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Optional
from urllib.parse import urlsplit

from .errors import validation_error

__all__ = [
    "resolve_bbs_url",
    "resolve_locket_api_location",
    "resolve_timeout",
    "validate_readable_file",
]

_HINT_BBS = "Please specify one with the '--bbsURL' flag or the 'BBS_URL' environment variable."
_MISSING_BBS_URL = "BBS URL not set. " + _HINT_BBS
_MISSING_LOCKET = (
    "Locket API Location not set. Please specify one with the '--locketAPILocation' "
    "flag or the 'LOCKET_API_LOCATION' environment variable."
)
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT16_MIN, _INT16_MAX = -(2**15), 2**15 - 1


def _env(environ: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def _is_parsable_url(url: str) -> bool:
    if url.startswith(":"):
        return False
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in url):
        return False
    if _BAD_ESCAPE.search(url):
        return False
    try:
        urlsplit(url).port
    except ValueError:
        return False
    return True


def resolve_bbs_url(bbs_url: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the BBS URL from the flag or BBS_URL; it must be a valid https URL."""
    url = bbs_url or _env(environ).get("BBS_URL", "")
    if not url:
        raise validation_error(ValueError(_MISSING_BBS_URL))
    if not _is_parsable_url(url):
        raise validation_error(
            ValueError(f"The value '{url}' is not a valid BBS URL. {_HINT_BBS}")
        )
    if urlsplit(url).scheme != "https":
        raise validation_error(
            ValueError(f"The URL '{url}' does not have an 'https' scheme. {_HINT_BBS}")
        )
    return url


def resolve_locket_api_location(
    location: str, environ: Optional[Mapping[str, str]] = None
) -> str:
    """Return the Locket address from the flag or LOCKET_API_LOCATION."""
    resolved = location or _env(environ).get("LOCKET_API_LOCATION", "")
    if not resolved:
        raise validation_error(ValueError(_MISSING_LOCKET))
    return resolved


def resolve_timeout(timeout: int, environ: Optional[Mapping[str, str]] = None) -> int:
    """Return the request timeout in seconds, falling back to CFDOT_TIMEOUT when unset."""
    raw = _env(environ).get("CFDOT_TIMEOUT", "")
    if timeout != 0 or raw == "":
        return timeout
    if not _INTEGER.fullmatch(raw):
        raise ValueError(f'strconv.ParseInt: parsing "{raw}": invalid syntax')
    value = int(raw)
    if not _INT16_MIN <= value <= _INT16_MAX:
        raise ValueError(f'strconv.ParseInt: parsing "{raw}": value out of range')
    return value


def validate_readable_file(filename: str, filetype: str) -> str:
    """Check that ``filename`` can be opened for reading and return it."""
    try:
        with open(filename, "rb"):
            pass
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise validation_error(
            ValueError(
                f"{filetype} file '{filename}' doesn't exist or is not readable: "
                f"open {filename}: {reason.lower()}"
            )
        ) from exc
    return filename