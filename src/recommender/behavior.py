"""User behavior tracking.

Keeps one ``UserBehaviorProfile`` per user: a bounded log of raw action
records plus preference counters derived from every action ever tracked.
Counters are updated incrementally on each ``track`` call so they keep
summarising records that the retention policy has already evicted.

Writes to the same profile are serialized with a per-user lock. Reads return
a copy taken under that lock, so callers never observe a half-applied action.
"""

import copy
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Deque, Dict, List, Mapping, Optional

from src.recommender.clock import SystemClock, ensure_utc
from src.recommender.config import DEFAULT_MAX_ACTIONS_PER_USER

# Configure module logger
logger = logging.getLogger(__name__)

# Actions that feed preference counters
QR_CREATED = "qr_created"
FEATURE_USED = "feature_used"
PAGE_VISITED = "page_visited"
PRODUCT_VIEWED = "product_viewed"

# action -> (preference counter, key read from the action data)
COUNTER_RULES: Dict[str, tuple] = {
    QR_CREATED: ("qr_types", "type"),
    FEATURE_USED: ("features", "feature"),
    PAGE_VISITED: ("pages", "page"),
}
VIEWED_PRODUCT_KEY = "productId"


@dataclass(frozen=True)
class ActionRecord:
    """A single tracked action."""

    action: str
    data: Dict[str, Any]
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "data": dict(self.data),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Preferences:
    """Preference counters derived from tracked actions."""

    qr_types: Dict[str, int] = field(default_factory=dict)
    features: Dict[str, int] = field(default_factory=dict)
    pages: Dict[str, int] = field(default_factory=dict)
    viewed_products: List[str] = field(default_factory=list)

    def top_qr_type(self) -> Optional[str]:
        """Most-used QR type; the first one tracked wins a tie."""
        if not self.qr_types:
            return None
        return max(self.qr_types, key=self.qr_types.__getitem__)


@dataclass
class UserBehaviorProfile:
    """Accumulated behavior for one user.

    Attributes:
        user_id: Owner of the profile.
        actions: Retained action records, oldest first.
        preferences: Counters derived from the full tracked history.
        action_counts: Number of times each action name was tracked.
        total_actions: Number of actions ever tracked, evicted ones included.
        last_active: Timestamp of the most recently tracked action.
        profile: Free-form attributes, not used for scoring.
    """

    user_id: str
    last_active: datetime
    actions: Deque[ActionRecord] = field(default_factory=deque)
    preferences: Preferences = field(default_factory=Preferences)
    action_counts: Dict[str, int] = field(default_factory=dict)
    total_actions: int = 0
    profile: Dict[str, Any] = field(default_factory=dict)

    def count(self, action: str) -> int:
        """Number of times ``action`` was tracked."""
        return self.action_counts.get(action, 0)

    def apply(self, record: ActionRecord) -> None:
        """Append ``record`` and fold it into the preference counters."""
        self.actions.append(record)
        self.total_actions += 1
        self.action_counts[record.action] = self.action_counts.get(record.action, 0) + 1
        self.last_active = record.timestamp

        rule = COUNTER_RULES.get(record.action)
        if rule is not None:
            counter_name, data_key = rule
            value = record.data.get(data_key)
            if value is None:
                logger.debug(
                    "Action data missing preference key",
                    extra={"user_id": self.user_id, "action": record.action, "key": data_key},
                )
                return
            counter = getattr(self.preferences, counter_name)
            counter[str(value)] = counter.get(str(value), 0) + 1
        elif record.action == PRODUCT_VIEWED:
            product_id = record.data.get(VIEWED_PRODUCT_KEY)
            if product_id is None:
                return
            if str(product_id) not in self.preferences.viewed_products:
                self.preferences.viewed_products.append(str(product_id))

    def copy(self) -> "UserBehaviorProfile":
        """Independent copy safe to hand to readers."""
        return UserBehaviorProfile(
            user_id=self.user_id,
            last_active=self.last_active,
            actions=deque(self.actions, maxlen=self.actions.maxlen),
            preferences=copy.deepcopy(self.preferences),
            action_counts=dict(self.action_counts),
            total_actions=self.total_actions,
            profile=copy.deepcopy(self.profile),
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation used for data exports."""
        return {
            "user_id": self.user_id,
            "actions": [record.to_dict() for record in self.actions],
            "preferences": {
                "qr_types": dict(self.preferences.qr_types),
                "features": dict(self.preferences.features),
                "pages": dict(self.preferences.pages),
                "viewed_products": list(self.preferences.viewed_products),
            },
            "action_counts": dict(self.action_counts),
            "total_actions": self.total_actions,
            "last_active": self.last_active.isoformat(),
            "profile": copy.deepcopy(self.profile),
        }


class UserBehaviorStore:
    """In-memory mapping from user id to behavior profile.

    Args:
        clock: Source of server-assigned timestamps.
        max_actions_per_user: Raw records retained per user; None keeps all.
    """

    def __init__(
        self,
        clock: Optional[Any] = None,
        max_actions_per_user: Optional[int] = DEFAULT_MAX_ACTIONS_PER_USER,
    ):
        self.clock = clock or SystemClock()
        self.max_actions_per_user = max_actions_per_user
        self._profiles: Dict[str, UserBehaviorProfile] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, user_id: str, create: bool) -> Optional[threading.Lock]:
        with self._registry_lock:
            lock = self._locks.get(user_id)
            if lock is None and create:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    def track(
        self,
        user_id: str,
        action: str,
        data: Optional[Mapping[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> ActionRecord:
        """Record an action for a user, creating the profile on first use.

        Every call appends a record, including duplicates of an earlier event.

        Args:
            user_id: User the action belongs to.
            action: Action name, e.g. ``qr_created``.
            data: Action payload. Copied before storing.
            timestamp: Caller-supplied event time; the clock is used if None.

        Returns:
            The stored ActionRecord.
        """
        when = ensure_utc(timestamp) if timestamp is not None else self.clock.now()
        record = ActionRecord(action=action, data=dict(data or {}), timestamp=when)

        while True:
            lock = self._lock_for(user_id, create=True)
            with lock:
                with self._registry_lock:
                    # The lock is replaced when the profile is cleared or restored
                    if self._locks.get(user_id) is not lock:
                        continue
                    profile = self._profiles.get(user_id)
                    if profile is None:
                        profile = UserBehaviorProfile(
                            user_id=user_id,
                            last_active=when,
                            actions=deque(maxlen=self.max_actions_per_user),
                        )
                        self._profiles[user_id] = profile
                        logger.info("Created behavior profile", extra={"user_id": user_id})
                profile.apply(record)
                break

        logger.debug(
            "Tracked action",
            extra={"user_id": user_id, "action": action, "total_actions": profile.total_actions},
        )
        return record

    def get(self, user_id: str) -> Optional[UserBehaviorProfile]:
        """Return a copy of the user's profile, or None if never tracked."""
        lock = self._lock_for(user_id, create=False)
        if lock is None:
            return None
        with lock:
            profile = self._profiles.get(user_id)
            return profile.copy() if profile is not None else None

    def clear(self, user_id: str) -> bool:
        """Delete a user's profile.

        Returns:
            True if a profile existed and was removed.
        """
        lock = self._lock_for(user_id, create=False)
        if lock is None:
            return False
        with lock:
            with self._registry_lock:
                removed = self._profiles.pop(user_id, None) is not None
                self._locks.pop(user_id, None)

        if removed:
            logger.info("Cleared behavior profile", extra={"user_id": user_id})
        return removed

    def user_ids(self) -> List[str]:
        with self._registry_lock:
            return list(self._profiles)

    def snapshot(self) -> Dict[str, UserBehaviorProfile]:
        """Copies of every profile, keyed by user id."""
        snapshot = {}
        for user_id in self.user_ids():
            profile = self.get(user_id)
            if profile is not None:
                snapshot[user_id] = profile
        return snapshot

    def restore(self, profiles: Mapping[str, UserBehaviorProfile]) -> None:
        """Replace all state with ``profiles``.

        Restored logs are re-bounded to this store's retention limit.
        """
        restored = {}
        for user_id, profile in profiles.items():
            restored_profile = profile.copy()
            restored_profile.actions = deque(
                restored_profile.actions, maxlen=self.max_actions_per_user
            )
            restored[user_id] = restored_profile

        with self._registry_lock:
            self._profiles = restored
            self._locks = {user_id: threading.Lock() for user_id in restored}

        logger.info("Restored behavior profiles", extra={"num_users": len(restored)})

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._profiles)

    def __contains__(self, user_id: object) -> bool:
        with self._registry_lock:
            return user_id in self._profiles
