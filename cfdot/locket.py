"""Commands that claim, release and list Locket locks and presences.

The Locket client is any object offering ``lock(request)``,
``release(request)`` and ``fetch_all(request)``. ``fetch_all`` returns a
response with a ``resources`` attribute (or key) listing the resources
found. Failures raised by the client propagate unchanged.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional, TextIO

from .common import write_json
from .errors import extra_arguments, missing_arguments, validation_error

__all__ = [
    "TypeCode",
    "Resource",
    "LockRequest",
    "ReleaseRequest",
    "FetchAllRequest",
    "validate_claim_lock_arguments",
    "claim_lock",
    "validate_claim_presence_arguments",
    "claim_presence",
    "validate_release_lock_arguments",
    "release_lock",
    "validate_locks_arguments",
    "locks",
    "validate_presences_arguments",
    "presences",
]

_log = logging.getLogger("cfdot")


class TypeCode(enum.IntEnum):
    """The kind of a Locket resource."""

    UNKNOWN = 0
    LOCK = 1
    PRESENCE = 2


@dataclass(frozen=True)
class Resource:
    """A Locket resource; unset fields are left out of its JSON form."""

    key: Optional[str] = None
    owner: Optional[str] = None
    value: Optional[str] = None
    type: Optional[str] = None
    type_code: Optional[TypeCode] = None


@dataclass(frozen=True)
class LockRequest:
    """A request to claim a lock or presence for a number of seconds."""

    resource: Resource
    ttl_in_seconds: int


@dataclass(frozen=True)
class ReleaseRequest:
    """A request to release a held resource."""

    resource: Resource


@dataclass(frozen=True)
class FetchAllRequest:
    """A request to list every resource of one kind."""

    type_code: TypeCode
    type: Optional[str] = None


def _check_count(args: Sequence[str], minimum: int = 0, maximum: int = 0) -> None:
    count = len(args)
    if count > maximum:
        raise extra_arguments()
    if count < minimum:
        raise missing_arguments()


def _validate_claim(args: Sequence[str], key: str, owner: str, ttl: int) -> None:
    if args:
        raise extra_arguments()
    if key == "":
        raise validation_error(ValueError("key cannot be empty"))
    if owner == "":
        raise validation_error(ValueError("owner cannot be empty"))
    if ttl <= 0:
        raise validation_error(ValueError("ttl should be an integer greater than zero"))


def _claim(
    locket_client: Any,
    key: str,
    owner: str,
    value: str,
    ttl: int,
    type_code: TypeCode,
    session: str,
) -> None:
    request = LockRequest(
        resource=Resource(key=key, owner=owner, value=value, type_code=type_code),
        ttl_in_seconds=int(ttl),
    )
    locket_client.lock(request)
    _log.info("%s.completed", session)


def validate_claim_lock_arguments(
    args: Sequence[str], key: str, owner: str, value: str, ttl: int
) -> None:
    """Reject positional arguments, an empty key or owner, and a ttl below one."""
    _validate_claim(args, key, owner, ttl)


def claim_lock(
    stdout: TextIO,
    stderr: TextIO,
    locket_client: Any,
    key: str,
    owner: str,
    value: str,
    ttl: int,
) -> None:
    """Claim the lock ``key`` for ``owner`` for ``ttl`` seconds."""
    _claim(locket_client, key, owner, value, ttl, TypeCode.LOCK, "claim-lock")


def validate_claim_presence_arguments(
    args: Sequence[str], key: str, owner: str, value: str, ttl: int
) -> None:
    """Reject positional arguments, an empty key or owner, and a ttl below one."""
    _validate_claim(args, key, owner, ttl)


def claim_presence(
    stdout: TextIO,
    stderr: TextIO,
    locket_client: Any,
    key: str,
    owner: str,
    value: str,
    ttl: int,
) -> None:
    """Claim the presence ``key`` for ``owner`` for ``ttl`` seconds."""
    _claim(locket_client, key, owner, value, ttl, TypeCode.PRESENCE, "claim-presence")


def validate_release_lock_arguments(args: Sequence[str], key: str, owner: str) -> None:
    """Reject positional arguments and an empty key or owner."""
    if args:
        raise extra_arguments()
    if key == "":
        raise validation_error(ValueError("key cannot be empty"))
    if owner == "":
        raise validation_error(ValueError("owner cannot be empty"))


def release_lock(
    stdout: TextIO, stderr: TextIO, locket_client: Any, key: str, owner: str
) -> None:
    """Release the lock ``key`` held by ``owner``."""
    locket_client.release(ReleaseRequest(resource=Resource(key=key, owner=owner)))
    _log.info("release-lock.completed")


def _resources(response: Any) -> Any:
    if isinstance(response, Mapping):
        return response.get("resources") or ()
    return getattr(response, "resources", None) or ()


def _list(stdout: TextIO, locket_client: Any, type_code: TypeCode, session: str) -> None:
    response = locket_client.fetch_all(FetchAllRequest(type_code=type_code))
    for resource in _resources(response):
        try:
            write_json(stdout, resource)
        except (TypeError, ValueError, OSError) as exc:
            _log.error("%s.failed-to-marshal: %s", session, exc)
            raise


def validate_locks_arguments(args: Sequence[str]) -> None:
    """Reject any positional arguments."""
    _check_count(args)


def locks(stdout: TextIO, stderr: TextIO, locket_client: Any) -> None:
    """Write every lock held in Locket as a JSON line."""
    _list(stdout, locket_client, TypeCode.LOCK, "locks")


def validate_presences_arguments(args: Sequence[str]) -> None:
    """Reject any positional arguments."""
    _check_count(args)


def presences(stdout: TextIO, stderr: TextIO, locket_client: Any) -> None:
    """Write every presence registered in Locket as a JSON line."""
    _list(stdout, locket_client, TypeCode.PRESENCE, "presences")