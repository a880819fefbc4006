"""
Content backend client and utilities
"""

from typing import Optional
from .config import Config
from .sanity_client import SanityClient


_content_client: Optional[SanityClient] = None


def get_content_client() -> SanityClient:
    """
    Get or create the content backend client (singleton pattern)

    Returns:
        SanityClient instance
    """
    global _content_client

    if _content_client is None:
        Config.validate()
        _content_client = SanityClient(
            project_id=Config.SANITY_PROJECT_ID,
            dataset=Config.SANITY_DATASET,
            api_version=Config.SANITY_API_VERSION,
            token=Config.SANITY_TOKEN or None,
            use_cdn=Config.SANITY_USE_CDN,
            timeout=Config.SANITY_TIMEOUT_SECONDS,
        )

    return _content_client


def reset_content_client():
    """Reset the content client (useful for testing)"""
    global _content_client
    _content_client = None
