"""In-memory people and candidacies, optionally loaded from a JSON export."""

import json
import logging
import threading
from pathlib import Path

from models.schemas.subject import Candidacy, Person
from models.schemas.taxonomy import Category
from services.adapters.registry import get_adapter

logger = logging.getLogger(__name__)


class SubjectRepository:
    """Holds each person once and any number of candidacies pointing at them."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._persons: dict[str, Person] = {}
        self._candidacies: dict[str, Candidacy] = {}

    def add_person(self, person: Person) -> None:
        with self._lock:
            self._persons[person.person_id] = person

    def add_candidacy(self, candidacy: Candidacy) -> None:
        with self._lock:
            if candidacy.person_id not in self._persons:
                raise KeyError(f"Unknown person: {candidacy.person_id}")
            self._candidacies[candidacy.candidacy_id] = candidacy

    def get_person(self, person_id: str) -> Person:
        with self._lock:
            try:
                return self._persons[person_id]
            except KeyError:
                raise KeyError(f"Unknown person: {person_id}") from None

    def get_candidacy(self, candidacy_id: str) -> Candidacy:
        with self._lock:
            try:
                return self._candidacies[candidacy_id]
            except KeyError:
                raise KeyError(f"Unknown subject: {candidacy_id}") from None

    def has_candidacy(self, candidacy_id: str) -> bool:
        with self._lock:
            return candidacy_id in self._candidacies

    def candidacies(self, category: Category | None = None) -> list[Candidacy]:
        with self._lock:
            items = list(self._candidacies.values())
        if category is not None:
            items = [c for c in items if c.category == category]
        return items

    def candidacy_ids(self) -> list[str]:
        with self._lock:
            return list(self._candidacies)

    def __len__(self) -> int:
        with self._lock:
            return len(self._candidacies)


def load_json(path: str | Path, source: str = "platform") -> SubjectRepository:
    """Build a repository from ``{"persons": [...], "candidacies": [...]}``.

    Each person carries its upstream ``record`` payload, adapted with the
    person's own ``source`` or the default one.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    repository = SubjectRepository()
    for item in data.get("persons", []):
        adapter = get_adapter(item.get("source") or source)
        repository.add_person(Person(
            person_id=str(item["person_id"]),
            full_name=item.get("full_name") or "",
            record=adapter.adapt(item.get("record") or {}),
        ))
    for item in data.get("candidacies", []):
        repository.add_candidacy(Candidacy.model_validate(item))

    logger.info("Loaded %d persons and %d candidacies from %s",
                len(data.get("persons", [])), len(repository), path)
    return repository
