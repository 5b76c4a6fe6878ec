"""QRRec: product recommendations for the QR Studio dashboard.

This package provides a backend service that tracks user behavior in the QR
code generator and turns it into ranked product, upsell, promotional and
content recommendations.

Modules:
    api: FastAPI application and REST API endpoints
    recommender: Catalog, behavior tracking, scoring and recommendation logic
"""

__version__ = "0.1.0"
