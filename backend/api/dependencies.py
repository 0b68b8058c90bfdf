"""Shared dependencies for API routes."""

import logging

from config import settings
from services.repository import SubjectRepository, load_json
from services.rule_table import RuleTable, load_rule_table
from services.score_store import ScoreStore
from services.weight_manager import WeightManager, load_bounds_table

logger = logging.getLogger(__name__)

_repository: SubjectRepository | None = None
_store: ScoreStore | None = None
_weight_manager: WeightManager | None = None
_rules: RuleTable | None = None


def get_repository() -> SubjectRepository:
    global _repository
    if _repository is None:
        if settings.data_file:
            _repository = load_json(settings.data_file, source=settings.data_source)
        else:
            logger.warning("No DATA_FILE set - starting with an empty repository")
            _repository = SubjectRepository()
    return _repository


def get_store() -> ScoreStore:
    global _store
    if _store is None:
        _store = ScoreStore(max_composites=settings.composite_cache_size)
    return _store


def get_weight_manager() -> WeightManager:
    global _weight_manager
    if _weight_manager is None:
        _weight_manager = WeightManager(load_bounds_table(settings.rules_file or None))
    return _weight_manager


def get_rules() -> RuleTable:
    global _rules
    if _rules is None:
        _rules = load_rule_table(settings.rules_file or None, reference_year=settings.reference_year)
    return _rules
