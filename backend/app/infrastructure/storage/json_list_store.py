"""Durable list store backed by a single JSON document on disk.

File layout:
    {"version": 1, "lastSequence": <int>, "records": [<record>, ...]}

A bare JSON array (the layout written before the version marker existed)
is read as a version-0 file and rewritten in the current layout on the
next mutation. Records are plain JSON objects; which keys hold the id,
sequence code, status, timestamps, searchable text and amount is decided
by a ``ListSchema``.
"""

import asyncio
import copy
import json
import logging
import math
import os
import secrets
import string
import tempfile
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from app.domain.exceptions import CorruptStoreError, StoreError, StoreIOError

logger = logging.getLogger(__name__)

STORE_VERSION = 1

# Status value meaning "do not filter by status".
NO_STATUS_FILTER = "All"

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 9
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

Document = dict[str, Any]


# ── Clock / id helpers ──────────────────────────────────────────────

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with millisecond precision: ``...T10:00:00.000Z``."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Inverse of ``format_timestamp``; also accepts explicit offsets."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def generate_record_id(moment: datetime) -> str:
    """Return ``<epoch-ms>-<9 random base36 chars>``."""
    millis = int(moment.timestamp() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"{millis}-{suffix}"


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant {token}")


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# ── Schema / result types ───────────────────────────────────────────

@dataclass(frozen=True)
class ListSchema:
    """Field names and policies the store applies to every document."""

    code_prefix: str
    statuses: tuple[str, ...]
    initial_status: str
    value_status: str          # records in this status contribute to total_value
    amount_field: str
    search_fields: tuple[str, ...]
    code_width: int = 6
    id_field: str = "id"
    code_field: str = "sequenceCode"
    status_field: str = "status"
    created_field: str = "createdAt"
    updated_field: str = "updatedAt"

    @property
    def assigned_fields(self) -> frozenset[str]:
        """Keys the store sets itself on create."""
        return frozenset({
            self.id_field,
            self.code_field,
            self.status_field,
            self.created_field,
            self.updated_field,
        })

    @property
    def immutable_fields(self) -> frozenset[str]:
        """Keys an update may never change."""
        return frozenset({self.id_field, self.code_field, self.created_field})

    def format_code(self, ordinal: int) -> str:
        return f"{self.code_prefix}{str(ordinal).zfill(self.code_width)}"

    def parse_code(self, code: Any) -> int | None:
        """Return the ordinal encoded in a sequence code, or None if it is not one of ours."""
        if not isinstance(code, str) or not code.startswith(self.code_prefix):
            return None
        digits = code[len(self.code_prefix):]
        return int(digits) if digits.isdigit() else None


@dataclass
class ListPage:
    """One page of a filtered listing."""

    records: list[Document]
    total: int
    pages: int


@dataclass
class StoreStats:
    """Aggregate summary over the whole store."""

    total: int
    by_status: dict[str, int]
    total_value: float
    average_value: int


@dataclass
class _Snapshot:
    records: list[Document] = field(default_factory=list)
    last_sequence: int = 0


# ── Store ───────────────────────────────────────────────────────────

class JsonListStore:
    """Create / query / update / delete over one homogeneous list of JSON records.

    Every mutation reads the whole file, changes the list in memory and
    writes the whole file back. Mutations are serialized through a single
    ``asyncio.Lock`` so two concurrent writers can never interleave their
    read and write phases. Writes go to a temp file that is renamed over
    the backing file, so readers always see a complete document and never
    take the lock.

    One instance must own a given file per process; separate processes
    writing the same file are not coordinated.
    """

    def __init__(
        self,
        path: str | Path,
        schema: ListSchema,
        *,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[datetime], str] = generate_record_id,
    ):
        self._path = Path(path)
        self._schema = schema
        self._clock = clock
        self._id_factory = id_factory
        self._write_lock = asyncio.Lock()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def schema(self) -> ListSchema:
        return self._schema

    # ── Mutations ───────────────────────────────────────────────────

    async def create(self, fields: Mapping[str, Any]) -> Document:
        """Append a new record built from ``fields`` and return it.

        ``id``, the sequence code, status and both timestamps are assigned
        here; callers supplying any of them are ignored.
        """
        schema = self._schema
        async with self._write_lock:
            snapshot = await self._load()
            now = self._clock()
            stamp = format_timestamp(now)
            ordinal = snapshot.last_sequence + 1

            record: Document = {
                schema.id_field: self._new_id(now, snapshot.records),
                schema.code_field: schema.format_code(ordinal),
            }
            record.update(
                (key, value) for key, value in fields.items()
                if key not in schema.assigned_fields
            )
            record[schema.status_field] = schema.initial_status
            record[schema.created_field] = stamp
            record[schema.updated_field] = stamp

            snapshot.records.append(record)
            snapshot.last_sequence = ordinal
            await self._persist(snapshot)

        logger.info("Created record %s in %s", record[schema.code_field], self._path.name)
        return copy.deepcopy(record)

    async def update(self, record_id: str, changes: Mapping[str, Any]) -> Document | None:
        """Shallow-merge ``changes`` into a record. Returns None when the id is unknown."""
        schema = self._schema
        async with self._write_lock:
            snapshot = await self._load()
            index = self._index_of(snapshot.records, record_id)
            if index is None:
                return None

            current = snapshot.records[index]
            now = max(self._clock(), self._created_at(current))
            updated: Document = {**current}
            updated.update(
                (key, value) for key, value in changes.items()
                if key not in schema.immutable_fields
            )
            updated[schema.updated_field] = format_timestamp(now)

            snapshot.records[index] = updated
            await self._persist(snapshot)

        logger.info("Updated record %s in %s", updated.get(schema.code_field), self._path.name)
        return copy.deepcopy(updated)

    async def delete(self, record_id: str) -> bool:
        """Remove a record. Returns False (and writes nothing) when the id is unknown."""
        async with self._write_lock:
            snapshot = await self._load()
            remaining = [
                r for r in snapshot.records if r.get(self._schema.id_field) != record_id
            ]
            if len(remaining) == len(snapshot.records):
                return False

            snapshot.records = remaining
            await self._persist(snapshot)

        logger.info("Deleted record %s from %s", record_id, self._path.name)
        return True

    # ── Queries ─────────────────────────────────────────────────────

    async def find_all(
        self,
        *,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> ListPage:
        """Filter, sort newest-first and slice one page.

        ``total`` counts the filtered records before slicing. A page past
        the end is empty. ``limit`` must be positive; it is not checked here.
        """
        snapshot = await self._load()
        matches = [
            r for r in snapshot.records
            if self._matches_status(r, status) and self._matches_search(r, search)
        ]
        total = len(matches)
        pages = math.ceil(total / limit)

        matches.sort(key=self._created_at, reverse=True)
        start = (page - 1) * limit
        return ListPage(
            records=copy.deepcopy(matches[start:start + limit]),
            total=total,
            pages=pages,
        )

    async def find_by_id(self, record_id: str) -> Document | None:
        snapshot = await self._load()
        index = self._index_of(snapshot.records, record_id)
        if index is None:
            return None
        return copy.deepcopy(snapshot.records[index])

    async def count(self, status: str | None = None) -> int:
        snapshot = await self._load()
        return sum(1 for r in snapshot.records if self._matches_status(r, status))

    async def stats(self) -> StoreStats:
        """Counts per status, value of records in the value status, and mean amount.

        The mean runs over every record; records without an amount count as 0.
        """
        schema = self._schema
        snapshot = await self._load()
        records = snapshot.records

        by_status = {status: 0 for status in schema.statuses}
        for record in records:
            status = record.get(schema.status_field)
            if isinstance(status, str):
                by_status[status] = by_status.get(status, 0) + 1

        total_value = sum(
            self._amount(r) for r in records
            if r.get(schema.status_field) == schema.value_status
        )
        all_value = sum(self._amount(r) for r in records)
        average_value = round_half_up(all_value / len(records)) if records else 0

        return StoreStats(
            total=len(records),
            by_status=by_status,
            total_value=total_value,
            average_value=average_value,
        )

    # ── Record helpers ──────────────────────────────────────────────

    def _new_id(self, now: datetime, records: Iterable[Document]) -> str:
        taken = {r.get(self._schema.id_field) for r in records}
        record_id = self._id_factory(now)
        while record_id in taken:
            record_id = self._id_factory(now)
        return record_id

    def _index_of(self, records: list[Document], record_id: str) -> int | None:
        for index, record in enumerate(records):
            if record.get(self._schema.id_field) == record_id:
                return index
        return None

    def _matches_status(self, record: Document, status: str | None) -> bool:
        if not status or status == NO_STATUS_FILTER:
            return True
        return record.get(self._schema.status_field) == status

    def _matches_search(self, record: Document, search: str | None) -> bool:
        if not search:
            return True
        needle = search.lower()
        for name in self._schema.search_fields:
            value = record.get(name)
            if value is not None and needle in str(value).lower():
                return True
        return False

    def _created_at(self, record: Document) -> datetime:
        raw = record.get(self._schema.created_field)
        if not isinstance(raw, str):
            return _EPOCH
        try:
            return parse_timestamp(raw)
        except ValueError:
            return _EPOCH

    def _amount(self, record: Document) -> float:
        value = record.get(self._schema.amount_field)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return 0
        return value

    # ── Persistence ─────────────────────────────────────────────────

    async def _load(self) -> _Snapshot:
        return await asyncio.to_thread(self._read_snapshot)

    async def _persist(self, snapshot: _Snapshot) -> None:
        await asyncio.to_thread(self._write_snapshot, snapshot)

    def _read_snapshot(self) -> _Snapshot:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return _Snapshot()
        except UnicodeDecodeError as exc:
            raise CorruptStoreError(self._path, "not valid UTF-8") from exc
        except OSError as exc:
            raise StoreIOError(self._path, "read") from exc

        if not raw.strip():
            return _Snapshot()

        try:
            payload = json.loads(raw, parse_constant=_reject_constant)
        except json.JSONDecodeError as exc:
            raise CorruptStoreError(
                self._path, f"invalid JSON ({exc.msg} at line {exc.lineno})"
            ) from exc
        except ValueError as exc:
            raise CorruptStoreError(self._path, str(exc)) from exc

        if isinstance(payload, list):
            records, last_sequence = payload, 0
        elif isinstance(payload, dict):
            records, last_sequence = self._unwrap(payload)
        else:
            raise CorruptStoreError(
                self._path, f"expected an object or array, got {type(payload).__name__}"
            )

        if not all(isinstance(r, dict) for r in records):
            raise CorruptStoreError(self._path, "every record must be a JSON object")

        highest_code = max(
            (n for n in (self._schema.parse_code(r.get(self._schema.code_field)) for r in records)
             if n is not None),
            default=0,
        )
        logger.debug("Loaded %d records from %s", len(records), self._path)
        return _Snapshot(
            records=records,
            last_sequence=max(last_sequence, len(records), highest_code),
        )

    def _unwrap(self, payload: dict[str, Any]) -> tuple[list[Any], int]:
        version = payload.get("version")
        if isinstance(version, bool) or not isinstance(version, int) or version < 1:
            raise CorruptStoreError(self._path, f"missing or invalid version marker: {version!r}")
        if version > STORE_VERSION:
            raise CorruptStoreError(
                self._path, f"written by a newer format (version {version} > {STORE_VERSION})"
            )

        records = payload.get("records")
        if not isinstance(records, list):
            raise CorruptStoreError(self._path, "'records' must be an array")

        last_sequence = payload.get("lastSequence", 0)
        if isinstance(last_sequence, bool) or not isinstance(last_sequence, int):
            raise CorruptStoreError(self._path, "'lastSequence' must be an integer")
        return records, last_sequence

    def _write_snapshot(self, snapshot: _Snapshot) -> None:
        document = {
            "version": STORE_VERSION,
            "lastSequence": snapshot.last_sequence,
            "records": snapshot.records,
        }
        try:
            content = json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False)
        except ValueError as exc:
            logger.error("Refusing to write non-finite number to %s", self._path)
            raise StoreError(self._path, "Refusing to write a non-finite number") from exc

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self._path.parent),
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(content)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_path, self._path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.error("Failed to write %s: %s", self._path, exc)
            raise StoreIOError(self._path, "write") from exc
