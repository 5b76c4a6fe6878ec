"""FastAPI application module for QRRec.

This module contains the FastAPI application, route handlers, and API
endpoints for the recommendation service. It wraps an in-process
RecommendationService without changing its semantics.
"""
