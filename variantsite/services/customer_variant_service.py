"""
CustomerVariantService - Read access to customer variants.

Customer variants are named audiences (e.g., Disney, Google, Nike), each with
a table of term replacements ("employee" -> "cast member"). At most one
variant is flagged as the default; zero defaults is tolerated and means no
substitution happens unless a variant is chosen explicitly.

Variant resolution policy (used by every render path):
- explicit variant id  -> that variant, or None if it does not exist
- no variant id        -> the default variant, or None if there is none

Part of the Service Layer - contains business logic, no UI or API code.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..core.content_client import get_content_client
from ..core.models import CUSTOMER_VARIANT_TYPE, CustomerVariant, TermUsage, VARIANT_MARK_TYPE
from ..core.sanity_client import SanityClient
from .experiment_content import get_content_value
from .query_cache import QueryCache, get_query_cache

logger = logging.getLogger(__name__)


LIST_VARIANTS_QUERY = f'*[_type == "{CUSTOMER_VARIANT_TYPE}"] | order(name asc)'
VARIANT_BY_ID_QUERY = f'*[_type == "{CUSTOMER_VARIANT_TYPE}" && _id == $id][0]'
DEFAULT_VARIANT_QUERY = f'*[_type == "{CUSTOMER_VARIANT_TYPE}" && isDefault == true][0]'
USAGE_DOCUMENTS_QUERY = '*[_type in ["post", "page"]]{_id, title, _type, content}'


class CustomerVariantService:
    """
    Service for looking up customer variants.

    Provides methods for:
    - Listing variants (name ascending)
    - Single and default variant lookup
    - Resolving the variant a render should use
    - Finding documents that use a variant's terms
    """

    def __init__(
        self,
        client: Optional[SanityClient] = None,
        cache: Optional[QueryCache] = None,
    ):
        """Initialize CustomerVariantService."""
        self.client = client or get_content_client()
        self.cache = cache or get_query_cache()
        logger.info("CustomerVariantService initialized")

    # ============================================
    # HELPER METHODS
    # ============================================

    async def _fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.cache.get_or_fetch(query, params, self.client.fetch)

    @staticmethod
    def _parse_variant(raw: Any) -> Optional[CustomerVariant]:
        if not isinstance(raw, dict):
            return None
        try:
            return CustomerVariant.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Skipping malformed customer variant {raw.get('_id')}: {e}")
            return None

    # ============================================
    # LOOKUPS
    # ============================================

    async def list_variants(self) -> List[CustomerVariant]:
        """
        Get all customer variants.

        Returns:
            List of CustomerVariant, ordered by name (empty if none exist)
        """
        raw = await self._fetch(LIST_VARIANTS_QUERY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning(f"Expected a list of customer variants, got {type(raw).__name__}")
            return []

        variants = [v for v in (self._parse_variant(item) for item in raw) if v is not None]
        return sorted(variants, key=lambda v: v.name)

    async def get_variant(self, variant_id: str) -> Optional[CustomerVariant]:
        """
        Get a single customer variant by ID.

        Args:
            variant_id: Document id of the variant

        Returns:
            CustomerVariant or None if not found
        """
        if not variant_id:
            return None
        raw = await self._fetch(VARIANT_BY_ID_QUERY, {"id": variant_id})
        return self._parse_variant(raw)

    async def get_default_variant(self) -> Optional[CustomerVariant]:
        """
        Get the default customer variant.

        Returns:
            The variant flagged isDefault, or None when no variant is flagged
        """
        raw = await self._fetch(DEFAULT_VARIANT_QUERY)
        return self._parse_variant(raw)

    async def resolve_variant(self, variant_id: Optional[str] = None) -> Optional[CustomerVariant]:
        """
        Resolve the variant a render should use.

        Args:
            variant_id: Explicitly selected variant id, if any

        Returns:
            The selected variant, else the default, else None
        """
        if variant_id:
            variant = await self.get_variant(variant_id)
            if variant is None:
                logger.warning(f"Customer variant not found: {variant_id}")
            return variant

        return await self.get_default_variant()

    # ============================================
    # USAGE
    # ============================================

    async def find_term_usages(self, variant: CustomerVariant) -> List[TermUsage]:
        """
        Find post and page documents that annotate any of a variant's terms.

        Experiment content is inspected through its default body only.

        Args:
            variant: Customer variant whose original terms are searched

        Returns:
            One TermUsage per matching document, terms in first-seen order
        """
        original_terms = set(variant.original_terms())
        if not original_terms:
            return []

        documents = await self._fetch(USAGE_DOCUMENTS_QUERY)
        usages = []

        for doc in documents or []:
            if not isinstance(doc, dict) or not doc.get('content'):
                continue

            found_terms: List[str] = []
            for block in get_content_value(doc['content']):
                if not isinstance(block, dict) or block.get('_type') != 'block':
                    continue
                for mark in block.get('markDefs') or []:
                    if not isinstance(mark, dict) or mark.get('_type') != VARIANT_MARK_TYPE:
                        continue
                    term = mark.get('originalTerm')
                    if term in original_terms and term not in found_terms:
                        found_terms.append(term)

            if found_terms:
                usages.append(TermUsage(
                    document_id=doc.get('_id', ''),
                    title=doc.get('title') or 'Untitled',
                    document_type=doc.get('_type', ''),
                    original_terms=found_terms,
                ))

        logger.info(f"Variant {variant.id} terms used in {len(usages)} documents")
        return usages
