"""Tests for the score store, the subject repository and batch recompute."""

import importlib.util
import json
import threading
from pathlib import Path

import pytest

from models.schemas.pillar_scores import PillarScores
from models.schemas.subject import Candidacy, Person
from models.schemas.taxonomy import Category, Pillar
from services import ranking
from services import recompute as recompute_module
from services.recompute import recompute, recompute_subject
from services.repository import SubjectRepository, load_json
from services.rule_table import load_rule_table
from services.score_store import ScoreStore, weight_vector_hash
from services.weight_manager import WeightManager

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "recompute_scores.py"


@pytest.fixture
def store():
    return ScoreStore()


class TestScoreStore:
    def test_upsert_bumps_revision_only_on_change(self, store):
        assert store.upsert("s1", Category.SENADOR, PillarScores(competence=10))
        assert not store.upsert("s1", Category.SENADOR, PillarScores(competence=10))
        assert store.get("s1").revision == 1
        assert store.upsert("s1", Category.SENADOR, PillarScores(competence=20))
        assert store.get("s1").revision == 2

    def test_composite_is_cached_and_invalidated(self, store):
        weights = WeightManager().apply_preset(Category.SENADOR, "balanced")
        store.upsert("s1", Category.SENADOR, PillarScores(competence=100, integrity=100))
        store.upsert("s2", Category.SENADOR, PillarScores(competence=0, integrity=100))

        assert store.composite("s1", weights) == pytest.approx(90)
        store.composite("s2", weights)
        assert store.cached_composites() == 2

        store.upsert("s1", Category.SENADOR, PillarScores(competence=0, integrity=100))
        assert store.cached_composites() == 1
        assert store.composite("s1", weights) == pytest.approx(45)

    def test_composite_of_unknown_subject(self, store):
        weights = WeightManager().apply_preset(Category.SENADOR, "balanced")
        assert store.composite("ghost", weights) is None

    def test_composite_cache_is_bounded(self):
        store = ScoreStore(max_composites=50)
        manager = WeightManager()
        scores = PillarScores(competence=80, integrity=60, transparency=40)
        store.upsert("s1", Category.SENADOR, scores)
        vectors = [
            manager.select_weights(Category.SENADOR, "custom", {
                Pillar.COMPETENCE: 0.30 + i * 0.001,
                Pillar.INTEGRITY: 0.60 - i * 0.001,
                Pillar.TRANSPARENCY: 0.10,
            })
            for i in range(200)
        ]
        for vector in vectors:
            assert store.composite("s1", vector) == pytest.approx(ranking.composite(scores, vector))
        assert store.cached_composites() == 50

        # evicted vectors are recomputed, not lost
        assert store.composite("s1", vectors[0]) == pytest.approx(ranking.composite(scores, vectors[0]))
        assert store.cached_composites() == 50

    def test_cache_size_must_be_positive(self):
        with pytest.raises(ValueError):
            ScoreStore(max_composites=0)

    def test_clear_drops_everything(self, store):
        weights = WeightManager().apply_preset(Category.SENADOR, "balanced")
        store.upsert("s1", Category.SENADOR, PillarScores(competence=10))
        store.composite("s1", weights)
        lock = store.subject_lock("s1")

        store.clear()
        assert store.get("s1") is None
        assert store.cached_composites() == 0
        assert store.subject_lock("s1") is not lock

    def test_hash_ignores_key_order(self):
        manager = WeightManager()
        vector = manager.apply_preset(Category.SENADOR, "balanced")
        reordered = vector.model_copy(update={"weights": dict(reversed(vector.weights.items()))})
        assert weight_vector_hash(vector) == weight_vector_hash(reordered)
        merit = manager.apply_preset(Category.SENADOR, "merit")
        assert weight_vector_hash(vector) != weight_vector_hash(merit)


class TestRepository:
    def test_candidacy_needs_a_person(self):
        repo = SubjectRepository()
        with pytest.raises(KeyError):
            repo.add_candidacy(Candidacy(candidacy_id="c", person_id="nobody",
                                         category=Category.DIPUTADO))

    def test_person_shared_across_candidacies(self, repository):
        senate = repository.get_candidacy("c-p1-sen")
        presidential = repository.get_candidacy("c-p1-pres")
        assert senate.person_id == presidential.person_id
        assert len(repository.candidacies(Category.SENADOR)) == 2
        assert len(repository) == 3

    def test_load_json(self, tmp_path):
        path = tmp_path / "candidates.json"
        path.write_text(json.dumps({
            "persons": [
                {"person_id": "p1", "full_name": "Ana", "record": {"dni": "1"}},
                {"person_id": 2, "source": "jne", "record": {"penal_sentences_detail": []}},
            ],
            "candidacies": [
                {"candidacy_id": "c1", "person_id": "p1", "category": "diputado"},
                {"candidacy_id": "c2", "person_id": "2", "category": "senador"},
            ],
        }), encoding="utf-8")
        repo = load_json(path)
        assert repo.get_person("p1").record.dni == "1"
        assert repo.get_person("2").record.sentences_declared is True
        assert repo.candidacy_ids() == ["c1", "c2"]


class TestRecompute:
    def test_scores_every_candidacy(self, repository, store):
        summary = recompute(repository, store)
        assert (summary.processed, summary.updated, summary.errored) == (3, 3, 0)
        assert store.get("c-p1-pres").scores.plan_viability == 70
        assert store.get("c-p1-sen").scores.plan_viability is None

    def test_second_run_changes_nothing(self, repository, store):
        recompute(repository, store)
        summary = recompute(repository, store)
        assert summary.updated == 0
        assert store.get("c-p1-sen").revision == 1

    def test_person_facts_apply_to_every_candidacy(self, repository, store):
        recompute(repository, store)
        p1 = store.get("c-p1-sen").scores
        assert store.get("c-p1-pres").scores.integrity == p1.integrity == 100
        # firm sentence 70, violence 50, two resignations 10
        assert store.get("c-p2-sen").scores.integrity == 0

    def test_concurrent_recompute_of_one_subject(self, repository, store):
        subject_id = "c-p1-sen"
        weights = WeightManager().apply_preset(Category.SENADOR, "balanced")
        store.upsert(subject_id, Category.SENADOR,
                     PillarScores(competence=0, integrity=0, transparency=0))
        assert store.composite(subject_id, weights) == 0

        tables = [load_rule_table(), load_rule_table(confidence_coverage_points=0)]
        expected = []
        for rules in tables:
            fresh = ScoreStore()
            recompute_subject(subject_id, repository, fresh, rules)
            expected.append(fresh.get(subject_id).scores)

        n_threads = 8
        barrier = threading.Barrier(n_threads)
        results = []

        def worker(i):
            barrier.wait()
            results.append(recompute_subject(subject_id, repository, store, tables[i % 2]))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(n_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        record = store.get(subject_id)
        assert len(results) == n_threads
        assert any(results)
        assert record.revision == 1 + sum(results)
        assert record.scores in expected
        assert store.composite(subject_id, weights) == pytest.approx(
            ranking.composite(record.scores, weights))
        assert store.composite(subject_id, weights) > 0

    def test_single_subject(self, repository, store):
        summary = recompute(repository, store, subject_id="c-p2-sen")
        assert summary.processed == 1
        assert store.get("c-p1-sen") is None

    def test_unknown_subject(self, repository, store):
        with pytest.raises(KeyError):
            recompute(repository, store, subject_id="ghost")

    def test_failure_is_counted_and_batch_continues(self, repository, store, monkeypatch):
        real_score = recompute_module.score

        def flaky(profile, category, *args, **kwargs):
            if category == Category.PRESIDENTE:
                raise RuntimeError("boom")
            return real_score(profile, category, *args, **kwargs)

        monkeypatch.setattr(recompute_module, "score", flaky)
        summary = recompute(repository, store, workers=2)
        assert (summary.processed, summary.updated, summary.errored) == (3, 2, 1)
        assert store.get("c-p1-pres") is None

    def test_rule_changes_are_picked_up(self, repository, store):
        recompute_subject("c-p1-sen", repository, store)
        before = store.get("c-p1-sen").scores.confidence
        rules = load_rule_table(confidence_verification_points=0, confidence_coverage_points=0)
        assert recompute_subject("c-p1-sen", repository, store, rules)
        assert store.get("c-p1-sen").scores.confidence == 0 < before


class TestScript:
    def _load(self):
        spec = importlib.util.spec_from_file_location("recompute_scores", SCRIPT)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def _data(self, tmp_path):
        path = tmp_path / "candidates.json"
        path.write_text(json.dumps({
            "persons": [{"person_id": "p1", "record": {"dni": "1", "data_verified": True}}],
            "candidacies": [{"candidacy_id": "c1", "person_id": "p1", "category": "senador"}],
        }), encoding="utf-8")
        return path

    def test_writes_scores(self, tmp_path, capsys):
        output = tmp_path / "scores.json"
        code = self._load().main(["--data", str(self._data(tmp_path)), "--output", str(output)])
        assert code == 0
        assert json.loads(capsys.readouterr().out.strip().splitlines()[-1])["processed"] == 1
        records = json.loads(output.read_text(encoding="utf-8"))
        assert records[0]["subject_id"] == "c1"

    def test_unknown_subject_exit_code(self, tmp_path):
        code = self._load().main(["--data", str(self._data(tmp_path)), "--subject", "zz"])
        assert code == 2
