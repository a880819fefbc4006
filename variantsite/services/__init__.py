"""
Services layer for VariantSite.

Separates content access (CustomerVariantService, QueryCache) from
rendering logic (experiment resolution, TermSubstitutionRenderer) and
editorial actions (WorkflowService).
"""

from .customer_variant_service import CustomerVariantService
from .experiment_content import get_content_value, resolve_body
from .query_cache import QueryCache, LatestRequestGuard, get_query_cache
from .variant_renderer import TermSubstitutionRenderer, RenderedBlock, RenderedSpan
from .variant_text_service import VariantTextService, VariantSelection, RenderResult
from .workflow_service import WorkflowService, WorkflowState, ActionResult

__all__ = [
    'CustomerVariantService',
    'get_content_value',
    'resolve_body',
    'QueryCache',
    'LatestRequestGuard',
    'get_query_cache',
    'TermSubstitutionRenderer',
    'RenderedBlock',
    'RenderedSpan',
    'VariantTextService',
    'VariantSelection',
    'RenderResult',
    'WorkflowService',
    'WorkflowState',
    'ActionResult',
]
