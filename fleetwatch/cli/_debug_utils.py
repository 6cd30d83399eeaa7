from __future__ import annotations

import argparse
from typing import Callable, List, Optional, Sequence


def _debug_enabled(args: argparse.Namespace) -> bool:
    return bool(getattr(args, "debug", False))


def _debug_limit(args: argparse.Namespace) -> int | None:
    limit = getattr(args, "debug_limit", 0)
    return None if limit == 0 else limit


def _effective_limit(args: argparse.Namespace, items: Sequence[object]) -> int:
    if not items:
        return 0
    raw = getattr(args, "debug_limit", 0)
    if raw == 0:
        return len(items)
    return min(raw, len(items))


def _dbg(args: argparse.Namespace, msg: str) -> None:
    if _debug_enabled(args):
        print(f"[debug] {msg}")


def _take_head_tail(items: List[str], limit: int | None) -> tuple[List[str], List[str]]:
    if limit is None or limit <= 0:
        return items, []
    head = items[:limit]
    # Tail never repeats an item already in head.
    tail = items[max(limit, len(items) - limit):]
    return head, tail


def make_debug_fn(args: argparse.Namespace) -> Optional[Callable[[str], None]]:
    """Engine debug callback honouring --debug-limit; None when debug is off."""
    if not _debug_enabled(args):
        return None
    limit = _debug_limit(args)
    seen = [0]

    def _emit(msg: str) -> None:
        seen[0] += 1
        if limit is None or seen[0] <= limit:
            _dbg(args, msg)
        elif seen[0] == limit + 1:
            _dbg(args, f"... further lines suppressed (--debug-limit {limit})")

    return _emit
