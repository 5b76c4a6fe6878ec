"""Result records returned by the recommendation generators.

Each generator returns its own record type rather than ad hoc dicts. The
``KIND`` tag of a record is included when it is serialized, so mixed feeds
stay self-describing.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from src.recommender.catalog import Product

# Priority / urgency levels
HIGH = "high"
MEDIUM = "medium"
LOW = "low"


@dataclass(frozen=True)
class ScoredProduct:
    """A catalog product ranked for a specific user.

    Attributes:
        product: The ranked product.
        score: Relevance score used for ranking.
        reason: Human-readable justification.
        method: ``personalized`` for scored rankings, ``popular`` for the
            popularity fallback used when the user has no profile.
        highlight: Set by presentation experiments (variant B).
    """

    KIND: ClassVar[str] = "scored_product"

    product: Product
    score: float
    reason: str
    method: str = "personalized"
    highlight: bool = False


@dataclass(frozen=True)
class ContentRecommendation:
    """Tutorial or feature suggestion."""

    KIND: ClassVar[str] = "content"

    type: str
    title: str
    description: str
    priority: str
    url: Optional[str] = None
    action: Optional[str] = None


@dataclass(frozen=True)
class UpsellRecommendation:
    """Plan upgrade or add-on offer."""

    KIND: ClassVar[str] = "upsell"

    type: str
    title: str
    description: str
    product: str
    urgency: str
    savings: Optional[str] = None


@dataclass(frozen=True)
class PromotionalRecommendation:
    """Seasonal promotion."""

    KIND: ClassVar[str] = "promotion"

    type: str
    title: str
    description: str
    product: str
    discount: int
    expires: Optional[date] = None
    code: Optional[str] = None


@dataclass(frozen=True)
class PredictiveRecommendation:
    """Retention or feature-adoption prompt."""

    KIND: ClassVar[str] = "predictive"

    type: str
    title: str
    description: str
    action: str
    priority: str


@dataclass(frozen=True)
class SmartSuggestion:
    """Context-specific suggestion shown while editing a QR code."""

    KIND: ClassVar[str] = "suggestion"

    id: str
    title: str
    description: str
    action: str
    priority: str


@dataclass(frozen=True)
class UserDataExport:
    """Data-portability snapshot for one user."""

    KIND: ClassVar[str] = "user_export"

    user_id: str
    profile: Optional[Dict[str, Any]]
    recommendations: List[ScoredProduct] = field(default_factory=list)
    export_date: Optional[datetime] = None


def _to_json(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return serialize_record(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_json(item) for key, item in value.items()}
    return value


def serialize_record(record: Any) -> Dict[str, Any]:
    """Convert a result record to a JSON-friendly dict with its ``kind`` tag.

    ``ScoredProduct`` is flattened so the product fields sit next to
    ``score`` and ``reason``.
    """
    if isinstance(record, ScoredProduct):
        payload = serialize_record(record.product)
        payload.update(
            {
                "kind": ScoredProduct.KIND,
                "score": record.score,
                "reason": record.reason,
                "method": record.method,
                "highlight": record.highlight,
            }
        )
        return payload

    payload = {"kind": type(record).KIND}
    for f in fields(record):
        payload[f.name] = _to_json(getattr(record, f.name))
    return payload


def record_key(record: Any) -> tuple:
    """Identity used to de-duplicate records within a feed."""
    if isinstance(record, ScoredProduct):
        return ("product", record.product.id)
    if isinstance(record, Product):
        return ("product", record.id)
    if isinstance(record, SmartSuggestion):
        return (record.KIND, record.id)
    return (type(record).KIND, getattr(record, "title", None))
