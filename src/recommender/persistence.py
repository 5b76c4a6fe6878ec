"""Persistence helpers for behavior state.

This module provides the optional durable-store collaborator for the
in-memory behavior store: joblib snapshots of every profile, and CSV replay
of historical behavior events. Nothing here runs on the recommendation path.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict

import joblib
import pandas as pd

from src.recommender.behavior import UserBehaviorProfile, UserBehaviorStore

# Configure module logger
logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT_VERSION = 1
EVENT_COLUMNS = ["user_id", "action", "data", "timestamp"]


def save_snapshot(store: UserBehaviorStore, snapshot_path: str) -> int:
    """Write every behavior profile in ``store`` to a joblib file.

    Creates the parent directory if it doesn't exist.

    Args:
        store: Behavior store to snapshot.
        snapshot_path: Destination file path.

    Returns:
        Number of profiles written.

    Raises:
        OSError: If unable to create the directory or write the file.
    """
    path = Path(snapshot_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    profiles = store.snapshot()
    payload = {"version": SNAPSHOT_FORMAT_VERSION, "profiles": profiles}
    joblib.dump(payload, path)

    logger.info(f"Saved {len(profiles)} behavior profiles to {path}")
    return len(profiles)


def load_snapshot(snapshot_path: str) -> Dict[str, UserBehaviorProfile]:
    """Load behavior profiles written by ``save_snapshot``.

    Args:
        snapshot_path: Path of the joblib snapshot.

    Returns:
        Dictionary mapping user ids to profiles.

    Raises:
        FileNotFoundError: If the snapshot file does not exist.
        ValueError: If the file does not hold a behavior snapshot.
    """
    path = Path(snapshot_path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {snapshot_path}")

    logger.info(f"Loading behavior snapshot from {path}")
    payload = joblib.load(path)

    if not isinstance(payload, dict) or payload.get("version") != SNAPSHOT_FORMAT_VERSION:
        raise ValueError(f"Unrecognized snapshot format in {snapshot_path}")

    profiles = payload.get("profiles")
    if not isinstance(profiles, dict) or not all(
        isinstance(profile, UserBehaviorProfile) for profile in profiles.values()
    ):
        raise ValueError(f"Snapshot {snapshot_path} does not contain behavior profiles")

    logger.info(f"Loaded {len(profiles)} behavior profiles")
    return profiles


def check_snapshot_exists(snapshot_path: str) -> bool:
    """Check if a snapshot file exists at ``snapshot_path``."""
    return Path(snapshot_path).is_file()


def _parse_data(raw: Any) -> Dict[str, Any]:
    if raw is None or (isinstance(raw, float) and pd.isna(raw)) or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError(f"Event data must be a JSON object, got {raw!r}")
    return parsed


def load_events_csv(csv_path: str) -> pd.DataFrame:
    """Load behavior events from CSV.

    The file needs ``user_id``, ``action``, ``data`` (JSON object) and
    ``timestamp`` columns. Rows are returned sorted by timestamp.

    Args:
        csv_path: Path to the events CSV.

    Returns:
        DataFrame with parsed ``data`` dicts and UTC ``timestamp`` values.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        ValueError: If columns are missing or a row cannot be parsed.
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"Events CSV not found: {csv_path}")

    logger.info(f"Loading behavior events from {csv_path}")
    df = pd.read_csv(csv_file, dtype={"user_id": str, "action": str, "data": str})

    missing = set(EVENT_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Events CSV missing required columns: {sorted(missing)}")

    df["data"] = df["data"].map(_parse_data)
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    df = df.sort_values("timestamp", kind="stable").reset_index(drop=True)

    logger.info(
        f"Loaded {len(df)} events for {df['user_id'].nunique()} users"
    )
    return df


def replay_events(store: UserBehaviorStore, events: pd.DataFrame) -> int:
    """Track every event row into ``store`` in order.

    Returns:
        Number of events replayed.
    """
    for row in events.itertuples(index=False):
        store.track(
            str(row.user_id),
            str(row.action),
            row.data,
            timestamp=row.timestamp.to_pydatetime(),
        )

    logger.info(f"Replayed {len(events)} behavior events")
    return len(events)
