"""Generate fake QR Studio behavior events for testing and development.

This module creates synthetic user behavior (QR codes created, features
used, pages visited, products viewed) in the CSV layout read by
``src.recommender.persistence.load_events_csv``.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_events
        df = generate_fake_events(num_users=20, num_events=500)
"""

import json
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pandas as pd

# Default configuration constants
DEFAULT_NUM_USERS = 50
DEFAULT_NUM_EVENTS = 2000
DEFAULT_DAYS_BACK = 30
SECONDS_PER_DAY = 86400

QR_TYPES = ["url", "business", "bulk", "wifi", "vcard"]
FEATURES = [
    "qr_generation",
    "analytics",
    "bulk_generation",
    "team_collaboration",
    "custom_branding",
    "api_access",
    "data_export",
]
PAGES = ["dashboard", "generator", "analytics", "templates", "settings"]
PRODUCT_IDS = [
    "qr-pro-plus",
    "analytics-dashboard",
    "white-label-solution",
    "mobile-app",
    "design-templates",
    "api-integration",
]

# Relative frequency of each action
ACTION_WEIGHTS = {
    "qr_created": 0.4,
    "feature_used": 0.3,
    "page_visited": 0.2,
    "product_viewed": 0.1,
}


def _random_data(action: str) -> dict:
    if action == "qr_created":
        return {"type": random.choice(QR_TYPES)}
    if action == "feature_used":
        return {"feature": random.choice(FEATURES)}
    if action == "page_visited":
        return {"page": random.choice(PAGES)}
    return {"productId": random.choice(PRODUCT_IDS)}


def generate_fake_events(
    num_users: int = DEFAULT_NUM_USERS,
    num_events: int = DEFAULT_NUM_EVENTS,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> pd.DataFrame:
    """Generate synthetic behavior events.

    Args:
        num_users: Number of unique users to simulate. Must be positive.
        num_events: Total number of events to generate. Must be positive.
        start_date: Earliest event time. Defaults to 30 days before end_date.
        end_date: Latest event time. Defaults to now (UTC).

    Returns:
        DataFrame with ``user_id``, ``action``, ``data`` (JSON string) and
        ``timestamp`` columns, sorted by timestamp.

    Raises:
        ValueError: If a count is non-positive or start_date is not before
            end_date.
    """
    if num_users <= 0 or num_events <= 0:
        raise ValueError("num_users and num_events must be positive")

    if end_date is None:
        end_date = datetime.now(timezone.utc)
    if start_date is None:
        start_date = end_date - timedelta(days=DEFAULT_DAYS_BACK)

    if start_date >= end_date:
        raise ValueError("start_date must be before end_date")

    total_seconds = int((end_date - start_date).total_seconds())
    actions = list(ACTION_WEIGHTS)
    weights = list(ACTION_WEIGHTS.values())

    events = []
    for _ in range(num_events):
        action = random.choices(actions, weights=weights)[0]
        events.append({
            "user_id": f"user-{random.randint(1, num_users)}",
            "action": action,
            "data": json.dumps(_random_data(action)),
            "timestamp": start_date + timedelta(seconds=random.randrange(total_seconds)),
        })

    df = pd.DataFrame(events)
    df = df.sort_values("timestamp").reset_index(drop=True)
    return df


def main() -> None:
    """Generate default fake events and save them to data/fake_events.csv."""
    print(f"Generating {DEFAULT_NUM_EVENTS} fake events for {DEFAULT_NUM_USERS} users...")

    try:
        df = generate_fake_events()
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    data_dir = Path(__file__).parent.parent / "data"
    data_dir.mkdir(exist_ok=True)

    output_path = data_dir / "fake_events.csv"
    df.to_csv(output_path, index=False)

    print(f"\nData generated successfully!")
    print(f"Saved to: {output_path}")
    print(f"\nData preview:")
    print(df.head(10))
    print(f"\nData summary:")
    print(f"  Total events: {len(df)}")
    print(f"  Unique users: {df['user_id'].nunique()}")
    print(f"  Events per action:")
    for action, count in df["action"].value_counts().items():
        print(f"    {action}: {count}")
    print(f"  Date range: {df['timestamp'].min()} to {df['timestamp'].max()}")


if __name__ == "__main__":
    main()
