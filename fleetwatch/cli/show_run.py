"""Show the latest evaluation run, its transitions and stored per-entity state.

Purpose:
  - Audit what the last pass saw without re-running it.
Outputs:
  - KEY value lines for the run, one TRANSITION line per state change, optional STATE line.
Example:
  - PYTHONPATH=. python3 fleetwatch/cli/show_run.py --db fleetwatch.db
  - PYTHONPATH=. python3 fleetwatch/cli/show_run.py --db fleetwatch.db --entity STOCK_REORDER:s1
  - PYTHONPATH=. python3 fleetwatch/cli/show_run.py --db fleetwatch.db --history --limit 5
"""

from __future__ import annotations

import argparse
from typing import Optional

from fleetwatch.cli._debug_utils import _take_head_tail
from fleetwatch.core.domain.enums import ObligationType
from fleetwatch.core.domain.models import Transition
from fleetwatch.infra.sqlite.db import get_readonly_connection
from fleetwatch.infra.sqlite.repos.compliance_state_repo import ComplianceStateRepo
from fleetwatch.infra.sqlite.repos.eval_run_repo import EvalRunRepo

RUN_FIELDS = (
    ("RUN_ID", "run_id"),
    ("CREATED_AT", "created_at"),
    ("AS_OF", "as_of"),
    ("ENGINE_VERSION", "engine_version"),
    ("PROFILE", "profile"),
    ("OBLIGATIONS", "obligation_count"),
    ("EMITTED", "emitted_count"),
    ("NOTIFICATIONS", "notification_count"),
)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show the latest fleetwatch evaluation run")
    parser.add_argument("--db", required=True, help="SQLite database path")
    parser.add_argument("--entity", metavar="TYPE:ID", help="Also show stored state, e.g. STOCK_REORDER:s1")
    parser.add_argument("--history", action="store_true", help="List transitions of every run, not just the latest")
    parser.add_argument("--limit", type=int, default=20, help="Transitions shown at head and tail (0 = all)")
    return parser.parse_args(argv)


def parse_entity(raw: str) -> tuple[ObligationType, str]:
    type_name, sep, entity_id = raw.partition(":")
    if not sep or not entity_id:
        raise SystemExit(f"Invalid --entity value: {raw} (expected TYPE:ID)")
    try:
        return ObligationType(type_name.strip().upper()), entity_id
    except ValueError as exc:
        raise SystemExit(f"Unknown obligation type: {type_name}") from exc


def format_transition(transition: Transition) -> str:
    marker = " progression" if transition.is_progression else ""
    return (
        f"TRANSITION {transition.obligation_type.value} {transition.entity_id} "
        f"{transition.from_state.value} -> {transition.to_state.value}{marker}"
    )


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    entity = parse_entity(args.entity) if args.entity else None

    try:
        conn = get_readonly_connection(args.db)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    try:
        run = EvalRunRepo(conn).latest_run()
        state_repo = ComplianceStateRepo(conn)
        if run is None:
            print("RUN_ID -")
            transitions: list[Transition] = []
        else:
            for label, column in RUN_FIELDS:
                print(f"{label} {run[column]}")
            transitions = state_repo.list_transitions(None if args.history else str(run["run_id"]))
        stored = state_repo.get_state(*entity) if entity is not None else None
    finally:
        conn.close()

    lines = [format_transition(t) for t in transitions]
    head, tail = _take_head_tail(lines, args.limit)
    for line in head:
        print(line)
    if tail:
        hidden = len(lines) - len(head) - len(tail)
        if hidden > 0:
            print(f"... {hidden} more")
        for line in tail:
            print(line)
    print(f"TRANSITIONS {len(lines)}")

    if entity is not None:
        obligation_type, entity_id = entity
        if stored is None:
            print(f"STATE {obligation_type.value} {entity_id} NOT_FOUND")
        else:
            state, as_of_days, detail_json = stored
            print(f"STATE {obligation_type.value} {entity_id} {state.value} days={as_of_days} detail={detail_json}")


if __name__ == "__main__":
    main()
