"""Recompute pillar scores for every candidacy in a JSON export.

Usage:
    python backend/scripts/recompute_scores.py --data data/candidates.json \
        [--source platform] [--rules rules.yaml] [--subject ID] [--output scores.json]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Recompute candidate pillar scores")
    parser.add_argument("--data", required=True, help="JSON file with persons and candidacies")
    parser.add_argument("--source", default="platform", help="Default record adapter (platform | jne)")
    parser.add_argument("--rules", default=None, help="YAML file with scoring overrides")
    parser.add_argument("--subject", default=None, help="Recompute only this candidacy id")
    parser.add_argument("--workers", type=int, default=4)
    parser.add_argument("--output", default=None, help="Write the computed scores to this JSON file")
    args = parser.parse_args(argv)

    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
    from services.recompute import recompute
    from services.repository import load_json
    from services.rule_table import load_rule_table
    from services.score_store import ScoreStore

    repository = load_json(args.data, source=args.source)
    rules = load_rule_table(args.rules)
    store = ScoreStore()

    try:
        summary = recompute(repository, store, subject_id=args.subject, rules=rules,
                            workers=args.workers)
    except KeyError as exc:
        logger.error("%s", exc)
        return 2

    print(json.dumps(summary.model_dump()))

    if args.output:
        records = [r.model_dump(mode="json") for r in store.all()]
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
        logger.info("Wrote %d score records to %s", len(records), args.output)

    return 1 if summary.errored else 0


if __name__ == "__main__":
    sys.exit(main())
