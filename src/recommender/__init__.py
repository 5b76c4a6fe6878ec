"""Recommendation engine for QRRec.

This module contains the product catalog, the per-user behavior store, the
relevance scoring functions, and the generators that turn tracked behavior
into personalized, upsell, promotional, content and predictive
recommendations.
"""
