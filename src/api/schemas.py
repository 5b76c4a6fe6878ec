"""Request and response models for the QRRec API."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from src.recommender.catalog import Product
from src.recommender.models import ScoredProduct, serialize_record


class ProductModel(BaseModel):
    """A catalog product."""

    kind: str = "product"
    id: str
    name: str
    category: str
    price: float
    features: List[str]
    target_users: List[str]
    description: str
    compatibility: List[str]
    rating: float
    popularity: float

    @classmethod
    def from_product(cls, product: Product) -> "ProductModel":
        return cls.model_validate(serialize_record(product))


class ScoredProductModel(ProductModel):
    """A product ranked for a user, with the reason it was picked."""

    kind: str = "scored_product"
    score: float
    reason: str
    method: str = "personalized"
    highlight: bool = False

    @classmethod
    def from_scored(cls, scored: ScoredProduct) -> "ScoredProductModel":
        return cls.model_validate(serialize_record(scored))


class ProductListResponse(BaseModel):
    products: List[ProductModel] = Field(..., description="Products, best first")


class PersonalizedResponse(BaseModel):
    """Response model for personalized recommendation requests.

    Attributes:
        user_id: The user the list was generated for.
        recommendations: Ranked products with score and reason.
        scores: Optional score breakdown per product id.
    """

    user_id: str = Field(..., description="User ID for recommendations")
    recommendations: List[ScoredProductModel] = Field(
        ..., description="Ranked product recommendations"
    )
    scores: Optional[Dict[str, Dict[str, float]]] = Field(
        default=None, description="Score components per product id"
    )


class RecordListResponse(BaseModel):
    """Rule-based recommendations; every record carries a ``kind`` tag."""

    user_id: Optional[str] = None
    recommendations: List[Dict[str, Any]]


class TrackRequest(BaseModel):
    action: str = Field(..., min_length=1, description="Action name, e.g. qr_created")
    data: Dict[str, Any] = Field(default_factory=dict, description="Action payload")
    timestamp: Optional[datetime] = Field(
        default=None, description="Event time; server time when omitted"
    )


class InteractionRequest(BaseModel):
    event: Literal["accepted", "dismissed"]
    recommendation_id: Optional[str] = None
    recommendation_type: Optional[str] = None
    context: str = "general"


class SuggestionRequest(BaseModel):
    context: str
    data: Dict[str, Any] = Field(default_factory=dict)


class ApplySuggestionRequest(BaseModel):
    user_id: str
    context: str = "qr_generator"


class ExportResponse(BaseModel):
    user_id: str
    profile: Optional[Dict[str, Any]]
    recommendations: List[ScoredProductModel]
    export_date: datetime


class StatusResponse(BaseModel):
    status: str
