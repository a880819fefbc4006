"""
Core module - Content backend client, configuration, and data models
"""

from .content_client import get_content_client
from .config import Config

__all__ = ['get_content_client', 'Config']
