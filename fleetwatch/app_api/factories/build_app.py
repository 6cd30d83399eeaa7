"""Construct a fully wired app instance for running evaluation passes.

Responsibilities:
  - Assemble config, providers and persistence ports.
Must not:
  - Implement classification logic; composition only.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Callable, Optional

from fleetwatch.app_api.facade import FleetwatchApplication
from fleetwatch.app_api.ports import SnapshotProvider
from fleetwatch.app_api.providers.csv_snapshot_provider import CsvSnapshotProvider
from fleetwatch.app_api.providers.json_snapshot_provider import JsonSnapshotProvider
from fleetwatch.app_api.providers.sqlite_prev_state_provider import SQLitePrevStateProvider
from fleetwatch.config.engine_config import EngineConfig, load_engine_config, load_engine_config_file
from fleetwatch.infra.sqlite.migrator import apply_migrations

ENGINE_VERSION = "1.0.0"


def build_snapshot_provider(path: str | Path) -> SnapshotProvider:
    """JSON file -> JsonSnapshotProvider, directory -> CsvSnapshotProvider."""
    snapshot_path = Path(path)
    if snapshot_path.is_dir():
        return CsvSnapshotProvider(snapshot_path)
    return JsonSnapshotProvider(snapshot_path)


def resolve_config(profile: str = "default", config_path: Optional[str] = None) -> EngineConfig:
    if config_path:
        return load_engine_config_file(config_path)
    return load_engine_config(profile)


def build_fleetwatch_app(
    conn: sqlite3.Connection,
    config: Optional[EngineConfig] = None,
    debug: Optional[Callable[[str], None]] = None,
    **kwargs: Any,
) -> FleetwatchApplication:
    """
    Composition root: migrate the schema, wire config and ports,
    and return the application facade.
    """
    engine_version = kwargs.pop("engine_version", ENGINE_VERSION)
    profile = kwargs.pop("profile", "default")
    config_path = kwargs.pop("config_path", None)
    if kwargs:
        raise ValueError(f"Unknown build options: {sorted(kwargs)}")

    apply_migrations(conn)
    return FleetwatchApplication(
        conn=conn,
        config=config or resolve_config(profile, config_path),
        prev_state_provider=SQLitePrevStateProvider(conn),
        engine_version=engine_version,
        debug=debug,
    )
