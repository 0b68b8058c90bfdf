"""Batch recomputation of pillar scores (Profile Builder + Pillar Scorer)."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from models.responses import RecomputeSummary
from services.pillar_scorer import score
from services.profile_builder import build_profile
from services.repository import SubjectRepository
from services.rule_table import DEFAULT_RULES, RuleTable
from services.score_store import ScoreStore

logger = logging.getLogger(__name__)


def recompute_subject(subject_id: str, repository: SubjectRepository, store: ScoreStore,
                      rules: RuleTable | None = None) -> bool:
    """Rebuild and store one candidacy's scores. Returns True if they changed."""
    rules = rules or DEFAULT_RULES
    with store.subject_lock(subject_id):
        candidacy = repository.get_candidacy(subject_id)
        person = repository.get_person(candidacy.person_id)
        profile = build_profile(person.record, rules)
        scores = score(profile, candidacy.category, rules, plan_viability=candidacy.plan_viability)
        return store.upsert(subject_id, candidacy.category, scores)


def recompute(repository: SubjectRepository, store: ScoreStore, subject_id: str | None = None,
              rules: RuleTable | None = None, workers: int = 4) -> RecomputeSummary:
    """Recompute one subject or all of them.

    Subjects are independent, so they fan out over a thread pool. A failing
    subject is logged and counted and the batch carries on.
    """
    if subject_id is not None:
        repository.get_candidacy(subject_id)  # unknown ids raise KeyError
        subject_ids = [subject_id]
    else:
        subject_ids = repository.candidacy_ids()

    summary = RecomputeSummary()
    if not subject_ids:
        return summary

    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        futures = {
            pool.submit(recompute_subject, sid, repository, store, rules): sid
            for sid in subject_ids
        }
        for future in as_completed(futures):
            sid = futures[future]
            summary.processed += 1
            try:
                if future.result():
                    summary.updated += 1
            except Exception:
                summary.errored += 1
                logger.warning("Recompute failed for %s", sid, exc_info=True)

    logger.info(
        "Recompute finished: %d processed, %d updated, %d errored",
        summary.processed, summary.updated, summary.errored,
    )
    return summary
