"""
Command-line interface for VariantSite
"""
