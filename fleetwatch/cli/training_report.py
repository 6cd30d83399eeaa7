"""Per-driver defensive-driving compliance report.

Purpose:
  - Classify every driver's training obligation for a given instant without persisting anything.
Outputs:
  - One line per driver: id, state, signed days, display days, reference source.
Example:
  - PYTHONPATH=. python3 fleetwatch/cli/training_report.py --snapshot export.json --now 2025-01-10
"""

from __future__ import annotations

import argparse
from typing import Optional

from fleetwatch.app_api.factories.build_app import build_snapshot_provider, resolve_config
from fleetwatch.cli._debug_utils import _dbg, make_debug_fn
from fleetwatch.cli.run_evaluation import resolve_now
from fleetwatch.core.calendar.normalizer import display_days
from fleetwatch.core.domain.enums import ObligationType, needs_attention
from fleetwatch.core.engine.orchestrator import evaluate_pass


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Report training compliance per driver")
    parser.add_argument("--snapshot", required=True, help="Snapshot JSON file or CSV export directory")
    parser.add_argument("--now", help="Evaluation instant (ISO-8601, default: current UTC time)")
    parser.add_argument("--profile", default="default", help="Engine config profile name")
    parser.add_argument("--config", help="Explicit engine config JSON path (overrides --profile)")
    parser.add_argument("--attention-only", action="store_true", help="Only drivers needing attention")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--debug-limit", type=int, default=25, help="Max debug lines (0 = no limit)")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    now = resolve_now(args.now)
    config = resolve_config(args.profile, args.config)
    snapshot = build_snapshot_provider(args.snapshot).get_snapshot()

    evaluations = [
        e
        for e in evaluate_pass(snapshot, now, config, debug=make_debug_fn(args))
        if e.obligation.obligation_type == ObligationType.TRAINING_COMPLIANCE
    ]
    _dbg(args, f"drivers={len(evaluations)}")

    shown = 0
    for evaluation in evaluations:
        if args.attention_only and not needs_attention(evaluation.state):
            continue
        result = evaluation.result
        source = result.reference.source.value if result.reference is not None else "-"
        name = evaluation.obligation.context.get("name", "")
        print(
            f"{evaluation.obligation.entity_id} {evaluation.state.value} "
            f"days={result.as_of_days} display={display_days(result.as_of_days, config.display_cap)} "
            f"source={source} name={name}"
        )
        shown += 1
    print(f"COUNT={shown}")


if __name__ == "__main__":
    main()
