"""
VariantTextService - Render content fields for a customer variant.

Ties together experiment resolution, customer variant lookup and term
substitution:

    variant id (or default) -> experiment body -> substituted text

Malformed content and backend failures while resolving the variant are
logged and degrade the output (empty body, literal terms) instead of
failing the render.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..core.content_client import get_content_client
from ..core.errors import ContentFetchError, ContentShapeError
from ..core.models import CustomerVariant
from ..core.sanity_client import SanityClient
from .customer_variant_service import CustomerVariantService
from .experiment_content import list_experiment_variant_ids, resolve_body
from .query_cache import LatestRequestGuard, QueryCache, get_query_cache
from .variant_renderer import RenderedBlock, TermSubstitutionRenderer

logger = logging.getLogger(__name__)


POST_BY_SLUG_QUERY = '*[_type == "post" && slug.current == $slug][0]{_id, title, "slug": slug.current, content}'


@dataclass
class RenderResult:
    """Rendered content plus what was used to render it."""
    text: str
    blocks: List[RenderedBlock] = field(default_factory=list)
    customer_variant: Optional[CustomerVariant] = None
    experiment_variant: Optional[str] = None
    experiment_variants: List[str] = field(default_factory=list)
    document_id: Optional[str] = None
    title: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)


class VariantTextService:
    """
    Service for rendering content with customer term substitution.

    Example:
        >>> service = VariantTextService()
        >>> result = await service.render(post["content"], customer_variant_id="variant-disney")
        >>> print(result.text)
        Each cast member contributes to our success.
    """

    def __init__(
        self,
        client: Optional[SanityClient] = None,
        cache: Optional[QueryCache] = None,
        variants: Optional[CustomerVariantService] = None,
        renderer: Optional[TermSubstitutionRenderer] = None,
    ):
        """Initialize VariantTextService."""
        self.client = client or get_content_client()
        self.cache = cache or get_query_cache()
        self.variants = variants or CustomerVariantService(client=self.client, cache=self.cache)
        self.renderer = renderer or TermSubstitutionRenderer()
        logger.info("VariantTextService initialized")

    async def render(
        self,
        content: Any,
        customer_variant_id: Optional[str] = None,
        experiment_variant: Optional[str] = None,
    ) -> RenderResult:
        """
        Render a content field.

        Args:
            content: Raw field value (block list or experiment content)
            customer_variant_id: Selected customer variant; default variant if None
            experiment_variant: Selected experiment variant id, if any

        Returns:
            RenderResult; ``warnings`` lists what degraded
        """
        warnings = []

        try:
            blocks = resolve_body(content, experiment_variant)
        except ContentShapeError as e:
            logger.warning(f"Rendering empty body for malformed content: {e}")
            blocks = []
            warnings.append("malformed_content")

        try:
            variant = await self.variants.resolve_variant(customer_variant_id)
        except ContentFetchError as e:
            logger.error(f"Error fetching customer variant: {e}")
            variant = None
            warnings.append("variant_unavailable")

        if customer_variant_id and variant is None and "variant_unavailable" not in warnings:
            warnings.append("variant_not_found")

        try:
            rendered = self.renderer.render_blocks(blocks, variant)
        except ContentShapeError as e:
            logger.warning(f"Rendering empty body for malformed content: {e}")
            rendered = []
            warnings.append("malformed_content")

        return RenderResult(
            text=self.renderer.to_text(rendered),
            blocks=rendered,
            customer_variant=variant,
            experiment_variant=experiment_variant,
            experiment_variants=list_experiment_variant_ids(content),
            warnings=warnings,
        )

    async def render_post(
        self,
        slug: str,
        customer_variant_id: Optional[str] = None,
        experiment_variant: Optional[str] = None,
    ) -> Optional[RenderResult]:
        """
        Fetch a post by slug and render its content.

        Returns:
            RenderResult, or None if no post has this slug

        Raises:
            ContentFetchError: If the post itself cannot be fetched
        """
        post = await self.cache.get_or_fetch(POST_BY_SLUG_QUERY, {"slug": slug}, self.client.fetch)
        if not isinstance(post, dict) or not post.get('_id'):
            logger.info(f"Post not found: {slug}")
            return None

        result = await self.render(post.get('content'), customer_variant_id, experiment_variant)
        result.document_id = post['_id']
        result.title = post.get('title')
        return result


class VariantSelection:
    """
    Customer variant selection for one rendered content instance.

    Every ``select`` call takes a new request id. When renders overlap
    (rapid re-selection), only the result of the latest selection is kept;
    earlier ones are discarded when they complete.
    """

    def __init__(
        self,
        service: VariantTextService,
        content: Any,
        experiment_variant: Optional[str] = None,
    ):
        self.service = service
        self.content = content
        self.experiment_variant = experiment_variant
        self.selected_variant_id: Optional[str] = None
        self.result: Optional[RenderResult] = None
        self._guard = LatestRequestGuard()

    async def select(self, variant_id: Optional[str]) -> Optional[RenderResult]:
        """
        Select a customer variant (None for the default) and render.

        Returns:
            The render result, or None if a newer selection superseded it
        """
        request_id = self._guard.issue()
        self.selected_variant_id = variant_id

        result = await self.service.render(self.content, variant_id, self.experiment_variant)

        if not self._guard.is_current(request_id):
            logger.info(f"Discarding superseded render for variant {variant_id} (request {request_id})")
            return None

        self.result = result
        return result
