"""
Shared fixtures: customer variant documents, block content and a fake
content backend client.
"""

import pytest
from unittest.mock import MagicMock, AsyncMock

from variantsite.services.query_cache import QueryCache


def make_block(text, original_term=None, key="b1", mark_key=None):
    """Single-span block, optionally annotated with a variant mark."""
    block = {
        "_type": "block",
        "_key": key,
        "style": "normal",
        "children": [{"_type": "span", "_key": f"{key}-s0", "text": text, "marks": []}],
        "markDefs": [],
    }
    if original_term is not None:
        mark_def = {"_type": "variant", "originalTerm": original_term}
        if mark_key:
            mark_def["_key"] = mark_key
            block["children"][0]["marks"] = [mark_key]
        block["markDefs"].append(mark_def)
    return block


def make_fake_client(responses):
    """
    Client whose ``fetch`` answers from a {query: result} mapping.

    A result may be a callable taking (query, params), or an exception
    instance to raise.
    """
    async def fake_fetch(query, params=None):
        result = responses.get(query)
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(query, params)
        return result

    client = MagicMock()
    client.fetch = AsyncMock(side_effect=fake_fetch)
    client.patch = AsyncMock(return_value={"transactionId": "tx-1"})
    return client


@pytest.fixture
def disney_doc():
    return {
        "_id": "variant-disney",
        "_type": "customerVariant",
        "name": "Disney",
        "slug": {"_type": "slug", "current": "disney"},
        "isDefault": False,
        "replacements": [
            {"_key": "r1", "originalTerm": "employee", "replacementTerm": "cast member", "isPlural": False},
            {"_key": "r2", "originalTerm": "customer", "replacementTerm": "guest", "isPlural": None},
        ],
    }


@pytest.fixture
def google_doc():
    return {
        "_id": "variant-google",
        "_type": "customerVariant",
        "name": "Google",
        "slug": {"_type": "slug", "current": "google"},
        "isDefault": True,
        "replacements": [
            {"_key": "r1", "originalTerm": "employee", "replacementTerm": "Googler", "isPlural": False},
        ],
    }


@pytest.fixture
def cache():
    return QueryCache(ttl_seconds=60)


@pytest.fixture
def block():
    """Factory fixture for single-span blocks."""
    return make_block


@pytest.fixture
def fake_client():
    """Factory fixture for fake content backend clients."""
    return make_fake_client
