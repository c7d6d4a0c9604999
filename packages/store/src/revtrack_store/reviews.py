"""ReviewStore: typed access to the "reviews" collection.

Reviews are written once. There is no update or delete: correcting a
review means saving a new one.
"""

from __future__ import annotations

from pathlib import Path

from revtrack_store.base import DEFAULT_LIMIT, BaseStore
from revtrack_store.errors import MalformedRecord
from revtrack_store.filesystem import FileRecordStore, write_atomic
from revtrack_store.ids import REVIEW_PREFIX
from revtrack_store.models import Review, review_from_dict, review_to_dict

COLLECTION = "reviews"


class ReviewStore:
    def __init__(self, data_dir: str | Path, backend: BaseStore | None = None):
        self._store = backend or FileRecordStore(data_dir, COLLECTION, REVIEW_PREFIX, track_updates=False)
        self._data_dir = Path(data_dir)

    def save(self, review: Review) -> Review:
        """Persist a new review and return it with ``id`` and ``created_at`` filled in.

        Any id/created_at already on ``review`` is ignored.
        """
        fields = review_to_dict(review)
        return self._to_review(self._store.create(fields))

    def get(self, review_id: str) -> Review:
        return self._to_review(self._store.get(review_id))

    def list_reviews(self, limit: int | None = DEFAULT_LIMIT) -> list[Review]:
        """Return reviews newest first."""
        return [self._to_review(d) for d in self._store.list_records(limit=limit)]

    def latest(self) -> Review | None:
        reviews = self.list_reviews(limit=1)
        return reviews[0] if reviews else None

    def save_markdown(self, review_id: str, content: str) -> Path:
        """Write a rendered report next to the record as ``<id>.md``."""
        self.get(review_id)
        path = self._data_dir / COLLECTION / f"{review_id}.md"
        write_atomic(path, content)
        return path

    def close(self) -> None:
        self._store.close()

    def _to_review(self, d: dict) -> Review:
        try:
            return review_from_dict(d)
        except ValueError as e:
            raise MalformedRecord(f"{COLLECTION}/{d.get('id', '?')}", str(e)) from e
