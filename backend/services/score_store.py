"""In-memory score snapshot with a per-subject composite cache."""

import hashlib
import json
import logging
import threading
from collections import OrderedDict

from models.schemas.pillar_scores import PillarScores
from models.schemas.subject import ScoreRecord
from models.schemas.taxonomy import Category
from models.schemas.weights import WeightVector
from services import ranking

logger = logging.getLogger(__name__)


def weight_vector_hash(weights: WeightVector) -> str:
    """Stable hash of a weight vector, independent of key order."""
    canonical = json.dumps(
        {
            "category": weights.category.value,
            "weights": {p.value: w for p, w in weights.weights.items()},
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class ScoreStore:
    """Latest pillar scores per subject.

    ``upsert`` swaps the score record and drops that subject's cached
    composites under one lock, so a reader never sees new scores next to a
    composite computed from the old ones. ``subject_lock`` serializes the
    build-score-upsert sequence of a single subject. At most ``max_composites``
    composites are cached; the least recently used one is evicted first.
    """

    def __init__(self, max_composites: int = 10000) -> None:
        if max_composites < 1:
            raise ValueError("max_composites must be at least 1")
        self._lock = threading.Lock()
        self._records: dict[str, ScoreRecord] = {}
        self._composites: OrderedDict[tuple[str, Category, str], float] = OrderedDict()
        self._max_composites = max_composites
        self._subject_locks: dict[str, threading.Lock] = {}

    def subject_lock(self, subject_id: str) -> threading.Lock:
        with self._lock:
            lock = self._subject_locks.get(subject_id)
            if lock is None:
                lock = self._subject_locks[subject_id] = threading.Lock()
            return lock

    def get(self, subject_id: str) -> ScoreRecord | None:
        with self._lock:
            return self._records.get(subject_id)

    def all(self) -> list[ScoreRecord]:
        with self._lock:
            return list(self._records.values())

    def upsert(self, subject_id: str, category: Category, scores: PillarScores) -> bool:
        """Insert or replace a subject's scores. Returns True if anything changed."""
        with self._lock:
            previous = self._records.get(subject_id)
            if previous is not None and previous.category == category and previous.scores == scores:
                return False
            revision = previous.revision + 1 if previous else 1
            self._records[subject_id] = ScoreRecord(
                subject_id=subject_id, category=category, scores=scores, revision=revision,
            )
            stale = [key for key in self._composites if key[0] == subject_id]
            for key in stale:
                del self._composites[key]
        logger.debug("Stored scores for %s (revision %d)", subject_id, revision)
        return True

    def composite(self, subject_id: str, weights: WeightVector) -> float | None:
        """Cached composite keyed by (subject, category, weight vector hash)."""
        key = (subject_id, weights.category, weight_vector_hash(weights))
        with self._lock:
            if key in self._composites:
                self._composites.move_to_end(key)
                return self._composites[key]
            record = self._records.get(subject_id)
            if record is None:
                return None
            value = ranking.composite(record.scores, weights)
            self._composites[key] = value
            while len(self._composites) > self._max_composites:
                self._composites.popitem(last=False)
            return value

    def cached_composites(self) -> int:
        with self._lock:
            return len(self._composites)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
            self._composites.clear()
            self._subject_locks.clear()
