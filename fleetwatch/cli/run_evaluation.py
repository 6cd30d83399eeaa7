"""Run one evaluation pass over a fleet snapshot and store the resulting notifications.

Purpose:
  - Classify every tracked obligation, emit deduplicated alerts, apply retention.
Inputs:
  - CLI args for snapshot path (JSON file or CSV directory), DB path, evaluation instant, config.
Outputs:
  - Writes notification / compliance_state / compliance_transition / eval_run rows.
  - Prints KEY value summary lines to stdout.
Example:
  - PYTHONPATH=. python3 fleetwatch/cli/run_evaluation.py --snapshot export.json --db fleetwatch.db
Debug:
  - --debug / --debug-limit control diagnostic output volume.
"""

from __future__ import annotations

import argparse
import datetime
from typing import Optional

from fleetwatch.app_api.factories import build_fleetwatch_app
from fleetwatch.app_api.factories.build_app import build_snapshot_provider, resolve_config
from fleetwatch.cli._debug_utils import _dbg, _effective_limit, make_debug_fn
from fleetwatch.core.calendar.normalizer import DateParseError, normalize
from fleetwatch.infra.sqlite.db import get_connection


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a fleetwatch evaluation pass")
    parser.add_argument("--snapshot", required=True, help="Snapshot JSON file or CSV export directory")
    parser.add_argument("--db", default="fleetwatch.db", help="SQLite database path")
    parser.add_argument("--now", help="Evaluation instant (ISO-8601, default: current UTC time)")
    parser.add_argument("--profile", default="default", help="Engine config profile name")
    parser.add_argument("--config", help="Explicit engine config JSON path (overrides --profile)")
    parser.add_argument("--dry-run", action="store_true", help="Evaluate without persisting")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--debug-limit", type=int, default=25, help="Max debug lines (0 = no limit)")
    return parser.parse_args(argv)


def resolve_now(raw: Optional[str]) -> datetime.datetime:
    if not raw:
        return datetime.datetime.now(datetime.timezone.utc)
    try:
        return normalize(raw).instant
    except DateParseError as exc:
        raise SystemExit(f"Invalid --now value: {raw}") from exc


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    now = resolve_now(args.now)
    config = resolve_config(args.profile, args.config)

    provider = build_snapshot_provider(args.snapshot)
    snapshot = provider.get_snapshot()
    _dbg(
        args,
        f"snapshot vehicles={len(snapshot.vehicles)} drivers={len(snapshot.drivers)} "
        f"stock={len(snapshot.stock)} plans={len(snapshot.maintenance_plans)} "
        f"repairs={len(snapshot.repairs)} skipped={getattr(provider, 'skipped', 0)}",
    )

    conn = get_connection(args.db)
    try:
        app = build_fleetwatch_app(conn, config=config, debug=make_debug_fn(args))
        summary = app.run_pass(snapshot, now, dry_run=args.dry_run)
    finally:
        conn.close()

    print(f"RUN_ID {summary.run_id}")
    print(f"AS_OF {summary.as_of}")
    print(f"PROFILE {config.profile}")
    print(f"OBLIGATIONS {summary.obligation_count}")
    for state, count in summary.state_counts.items():
        print(f"STATE {state} {count}")
    print(f"CANDIDATES {summary.candidate_count}")
    print(f"EMITTED {len(summary.emitted)}")
    print(f"TRANSITIONS {len(summary.transitions)}")
    print(f"NOTIFICATIONS {summary.notification_count}")
    print(f"CHANGED {int(summary.changed)}")
    print(f"DRY_RUN {int(args.dry_run)}")

    shown = _effective_limit(args, summary.emitted)
    for record in summary.emitted[:shown]:
        _dbg(args, f"emitted {record.severity.value} {record.key} {record.message}")


if __name__ == "__main__":
    main()
