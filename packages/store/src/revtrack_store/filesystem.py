"""FileRecordStore: one JSON file per record.

Layout: ``<root>/<collection>/<id>.json``, each file holding the complete
record. There is no index file; list_records() enumerates the directory,
sorts names descending (ids sort by creation time) and reads files until
``limit`` matches are collected. Cost is O(files read), not O(limit), since
the status filter runs after each read. Keep that in mind before pointing
this at very large collections.

Writes go to a hidden temp file in the same directory and are moved into
place with os.replace, so readers see either the old record or the new
one, never a partial file.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path

from revtrack_store.base import DEFAULT_LIMIT, BaseStore
from revtrack_store.errors import MalformedRecord, ReadFailure, RecordNotFound, WriteFailure
from revtrack_store.ids import later_than, new_id, now_iso

logger = logging.getLogger(__name__)

_SUFFIX = ".json"
_IMMUTABLE_KEYS = ("id", "created_at")


def write_atomic(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` via temp file + os.replace().

    Raises WriteFailure; the previous content of ``path`` is left untouched.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise WriteFailure(path, str(e)) from e
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except OSError as e:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise WriteFailure(path, str(e)) from e


class FileRecordStore(BaseStore):
    """Stores one collection as ``<root>/<collection>/<id>.json`` files.

    ``prefix`` names the entity family in generated ids. With
    ``track_updates=False`` records get no ``updated_at`` stamp (reviews).
    """

    def __init__(self, root: str | Path, collection: str, prefix: str, track_updates: bool = True):
        self.root = Path(root)
        self.collection = collection
        self.prefix = prefix
        self.track_updates = track_updates

    @property
    def directory(self) -> Path:
        return self.root / self.collection

    def path_for(self, record_id: str) -> Path:
        # Ids are bare file names; anything that could escape the directory
        # cannot name a record here.
        if not record_id or Path(record_id).name != record_id or record_id.startswith("."):
            raise RecordNotFound(self.collection, record_id)
        return self.directory / f"{record_id}{_SUFFIX}"

    def create(self, fields: dict) -> dict:
        record_id = new_id(self.prefix)
        stamp = now_iso()
        record = {"id": record_id, "created_at": stamp}
        if self.track_updates:
            record["updated_at"] = stamp
        record.update({k: v for k, v in fields.items() if k not in ("id", "created_at", "updated_at")})
        self._write(self.directory / f"{record_id}{_SUFFIX}", record)
        logger.debug("Created %s/%s", self.collection, record_id)
        return record

    def get(self, record_id: str) -> dict:
        return self._read(self.path_for(record_id), record_id)

    def update(self, record_id: str, fields: dict) -> dict:
        for key in _IMMUTABLE_KEYS:
            if key in fields:
                raise ValueError(f"{key!r} is set once at creation and cannot be updated")
        path = self.path_for(record_id)
        record = self._read(path, record_id)
        record.update(fields)
        if self.track_updates:
            record["updated_at"] = later_than(record.get("updated_at"))
        self._write(path, record)
        logger.debug("Updated %s/%s (%s)", self.collection, record_id, ", ".join(sorted(fields)) or "no fields")
        return record

    def list_records(self, status: str | None = None, limit: int | None = DEFAULT_LIMIT) -> list[dict]:
        if limit is not None and limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit}")
        try:
            names = [entry.name for entry in os.scandir(self.directory) if entry.name.endswith(_SUFFIX)]
        except FileNotFoundError:
            return []

        names.sort(reverse=True)
        out: list[dict] = []
        for name in names:
            record_id = name[: -len(_SUFFIX)]
            try:
                record = self._read(self.directory / name, record_id)
            except RecordNotFound:
                # Deleted by another writer between scandir() and open().
                continue
            if status is not None and record.get("status") != status:
                continue
            out.append(record)
            if limit is not None and len(out) >= limit:
                break
        return out

    def delete(self, record_id: str) -> None:
        path = self.path_for(record_id)
        try:
            path.unlink()
        except FileNotFoundError:
            raise RecordNotFound(self.collection, record_id) from None
        except OSError as e:
            raise WriteFailure(path, str(e)) from e
        logger.debug("Deleted %s/%s", self.collection, record_id)

    def _read(self, path: Path, record_id: str) -> dict:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise RecordNotFound(self.collection, record_id) from None
        except UnicodeDecodeError as e:
            logger.warning("Undecodable record file %s: %s", path, e)
            raise MalformedRecord(path, f"not valid UTF-8 ({e})") from e
        except OSError as e:
            raise ReadFailure(path, str(e)) from e
        try:
            record = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Unparseable record file %s: %s", path, e)
            raise MalformedRecord(path, f"invalid JSON ({e})") from e
        if not isinstance(record, dict) or record.get("id") != record_id:
            logger.warning("Record file %s does not hold record %s", path, record_id)
            raise MalformedRecord(path, "file does not contain a record with a matching id")
        return record

    def _write(self, path: Path, record: dict) -> None:
        write_atomic(path, json.dumps(record, indent=2, ensure_ascii=False))
