# cfdot

Operations for a Diego deployment. The package provides what an operator
needs against the BBS (LRPs, tasks, cells, domains, events) and against
Locket (locks and presences). Every listing or lookup writes its results to
a text stream as one compact JSON document per line.

## Installation

```
pip install .
```

## What the package does not do

- It has no command-line program and installs no command. You call the
  functions from your own Python code.
- It opens no network connections. Every operation takes a client object
  that you supply and that makes the remote calls (see below).

## Clients

Each operation takes a duck-typed client. The methods it calls are:

- BBS client, `cfdot.lrps`: `actual_lrp_groups(trace_id, lrp_filter)`,
  `actual_lrp_groups_by_process_guid(trace_id, process_guid)`,
  `actual_lrp_group_by_process_guid_and_index(trace_id, process_guid, index)`,
  `actual_lrps(trace_id, lrp_filter)`,
  `desired_lrp_by_process_guid(trace_id, process_guid)`,
  `desired_lrps(trace_id, lrp_filter)`,
  `desired_lrp_scheduling_infos(trace_id, lrp_filter)`.
- BBS client, `cfdot.lrp_admin`: `desire_lrp(trace_id, desired_lrp)`,
  `remove_desired_lrp(trace_id, process_guid)`,
  `desired_lrp_by_process_guid(trace_id, process_guid)`,
  `retire_actual_lrp(trace_id, actual_lrp_key)`.
- BBS client, `cfdot.domains`: `domains(trace_id)`,
  `upsert_domain(trace_id, domain, ttl)`.
- BBS client, `cfdot.events`: `subscribe_to_events_by_cell_id(cell_id)`,
  `subscribe_to_instance_events_by_cell_id(cell_id)`,
  `subscribe_to_task_events()`. Each returns an iterable of events with a
  `close()` method; an event has an `event_type` attribute or method.
- BBS client, `cfdot.cells`: `cells(trace_id)`. A rep client factory offers
  `create_client(rep_address, rep_url, trace_id)`, whose client offers
  `state()`.
- BBS client, `cfdot.tasks`: `task_by_guid`, `tasks_with_filter`,
  `cancel_task`, `desire_task(trace_id, task_guid, domain, task_definition)`,
  `resolving_task`, `delete_task`.
- Locket client, `cfdot.locket`: `lock(request)`, `release(request)`,
  `fetch_all(request)`; the response of `fetch_all` has a `resources`
  attribute or key.

Trace ids come from `cfdot.common.generate_trace_id()`: 32 lower-case hex
digits. Errors raised by a client propagate unchanged.

## Usage

```python
import sys

from cfdot.errors import cfdot_error, validation_error
from cfdot.lrps import desired_lrps, validate_desired_lrps_arguments

try:
    validate_desired_lrps_arguments([])
except ValueError as exc:
    err = validation_error(exc)
    print(err, file=sys.stderr)
    sys.exit(err.exit_code)

try:
    desired_lrps(sys.stdout, sys.stderr, bbs_client, "cf-apps")
except Exception as exc:
    err = cfdot_error(exc)
    print(err, file=sys.stderr)
    sys.exit(err.exit_code)
```

Most `validate_*` functions raise a plain `ValueError` ("Missing arguments",
"Too many arguments specified", "Process guid should be non empty string",
"Index must be a non-negative integer", ...). The Locket validators
(`validate_claim_lock_arguments`, `validate_claim_presence_arguments`,
`validate_release_lock_arguments`) raise a `CFDotError` with exit code 3 for
an empty key or owner or a ttl below one.

## Errors and exit codes

`cfdot.errors.CFDotError` wraps a failure; its `exit_code` property gives
the code the process should exit with, and `silence_usage` says whether a
usage message should be left out.

| Code | Made by |
|------|---------|
| 3 | `validation_error(err)` |
| 4 | `component_error(err)`, or `cfdot_error(err)` when `err` is a `BBSError` |
| 5 | `cfdot_error(err)` for any other error |

A `CFDotError` wrapping a `BBSError` prints as
`BBS error`, `Type <code>: <name>`, `Message: <message>` on three lines.

## Configuration

`cfdot.flags` resolves settings from an explicit value first and from the
environment (`os.environ`, or the mapping passed as `environ`) second:

- `resolve_bbs_url(bbs_url, environ)` falls back to `BBS_URL`; it raises a
  validation `CFDotError` when the URL is missing, cannot be parsed or does
  not use the `https` scheme.
- `resolve_locket_api_location(location, environ)` falls back to
  `LOCKET_API_LOCATION`; it raises a validation `CFDotError` when missing.
- `resolve_timeout(timeout, environ)` uses `CFDOT_TIMEOUT` only when
  `timeout` is 0; a value that is not a 16-bit integer raises `ValueError`.
- `validate_readable_file(filename, filetype)` raises a validation
  `CFDotError` when the file cannot be opened.

`cfdot.config.TLSConfig` holds connection settings (`bbs_url`,
`locket_api_location`, `ca_cert_file`, `cert_file`, `key_file`,
`skip_cert_verify`, `timeout`). `merge(other)` takes every setting that
`other` has set, in place.

## Operations

- **LRPs** (`cfdot.lrps`): `actual_lrp_groups` and `actual_lrp_groups_for_guid`
  (deprecated group listings), `actual_lrps`, `desired_lrp`, `desired_lrps`,
  `desired_lrp_scheduling_infos`, with the filters `ActualLRPFilter` and
  `DesiredLRPFilter`.
- **LRP administration** (`cfdot.lrp_admin`): `create_desired_lrp`,
  `delete_desired_lrp`, `retire_actual_lrp` (which looks up the domain and
  passes an `ActualLRPKey`).
- **Domains** (`cfdot.domains`): `domains`, `set_domain` (a `timedelta` ttl;
  zero keeps the domain fresh permanently).
- **Events** (`cfdot.events`): `lrp_events` writes `LRPEvent` lines until every
  stream ends, merging the deprecated actual LRP group events unless
  excluded; `print_lrp_group_events_warning` writes the deprecation notice;
  `task_events` writes `TaskEvent` lines.
- **Cells** (`cfdot.cells`): `cell`, `cells`, `fetch_cell_registration`,
  `fetch_cell_state`, `fetch_cell_states` (collects rep failures and raises
  them together with exit code 4).
- **Tasks** (`cfdot.tasks`): `task_by_guid`, `tasks` (with `TaskFilter`),
  `cancel_task_by_guid`, `create_task`, `delete_task` (resolves, then deletes).
- **Locket** (`cfdot.locket`): `claim_lock`, `claim_presence`, `release_lock`,
  `locks`, `presences`, with `TypeCode`, `Resource`, `LockRequest`,
  `ReleaseRequest` and `FetchAllRequest`.

`create_desired_lrp` and `create_task` take a JSON spec.
`validate_create_desired_lrp_arguments` and `validate_create_task_arguments`
return that spec as bytes from the single argument: the JSON text itself, or
`@path` to read it from a file. Invalid JSON raises
`ValueError("Invalid JSON: ...")`.

## JSON output

`cfdot.common.write_json(stream, value)` writes one compact JSON line.
`to_jsonable` turns dataclasses (leaving out `None` fields), enums, mappings
(keys sorted), bytes (base64), `timedelta` (nanoseconds) and sequences into
plain JSON data; `<`, `>` and `&` are written as `\u` escapes.