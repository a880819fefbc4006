"""
VariantSite - Customer-variant content rendering for a headless CMS.

Resolves experiment-wrapped rich text and substitutes annotated terms
using per-customer replacement tables.
"""

__version__ = "1.0.0"
__author__ = "VariantSite Team"
