"""Commands that list domains and mark a domain as fresh.

The BBS client is any object offering ``domains(trace_id)`` and
``upsert_domain(trace_id, domain, ttl)``. Failures raised by the client
propagate unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta
from typing import Any, TextIO

from .common import generate_trace_id, write_json
from .errors import extra_arguments, missing_arguments

__all__ = [
    "validate_domains_arguments",
    "domains",
    "validate_set_domain_args",
    "set_domain",
]

_log = logging.getLogger("cfdot")


def _check_count(args: Sequence[str], minimum: int = 0, maximum: int = 0) -> None:
    count = len(args)
    if count > maximum:
        raise extra_arguments()
    if count < minimum:
        raise missing_arguments()


def validate_domains_arguments(args: Sequence[str]) -> None:
    """Reject any positional arguments."""
    _check_count(args)


def domains(stdout: TextIO, stderr: TextIO, bbs_client: Any) -> None:
    """Write every fresh domain as a JSON line."""
    trace_id = generate_trace_id()
    for domain in bbs_client.domains(trace_id) or ():
        try:
            write_json(stdout, domain)
        except (TypeError, ValueError, OSError) as exc:
            _log.error("domains.failed-to-marshal trace-id=%s: %s", trace_id, exc)


def validate_set_domain_args(args: Sequence[str]) -> str:
    """Return the single non-empty domain."""
    if not args:
        raise missing_arguments()
    if len(args) > 1:
        raise extra_arguments()
    if args[0] == "":
        raise ValueError("No domain given")
    return args[0]


def set_domain(
    stdout: TextIO, stderr: TextIO, bbs_client: Any, domain: str, ttl: timedelta
) -> None:
    """Mark ``domain`` fresh for ``ttl``; a zero ttl keeps it fresh permanently."""
    trace_id = generate_trace_id()
    bbs_client.upsert_domain(trace_id, domain, ttl)