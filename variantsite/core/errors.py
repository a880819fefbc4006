"""
Exception types shared by the content services and the API.
"""

from typing import Optional


class VariantSiteError(Exception):
    """Base class for VariantSite errors"""


class ContentConfigError(VariantSiteError):
    """Content backend is not configured for the requested operation"""


class ContentFetchError(VariantSiteError):
    """The content backend could not answer a query or mutation"""

    def __init__(self, message: str, status_code: Optional[int] = None, query: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.query = query


class ContentShapeError(VariantSiteError):
    """A content value is neither a block list nor experiment content"""
