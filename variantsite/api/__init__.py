"""
VariantSite API - FastAPI application for the marketing site.

Provides REST API endpoints for content queries, customer variant lookup
and term-substituted rendering, plus studio workflow actions.
"""

__version__ = "1.0.0"
