"""
VariantSite FastAPI Application.

REST API for the marketing site frontend and editorial tooling.

Features:
- Query passthrough to the content backend (/api/content)
- Customer variant listing and term usage
- Content rendering with customer term substitution
- Workflow document actions (API key protected)
- Rate limiting
- Health check endpoint
- Automatic OpenAPI documentation
"""

# Load environment variables FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import json
import logging
import os
from typing import List, Optional
from datetime import datetime

from fastapi import FastAPI, HTTPException, Depends, Request, status
from fastapi.security import APIKeyHeader
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from .. import __version__
from ..core.config import Config, load_experiment_config
from ..core.content_client import get_content_client
from ..core.errors import ContentConfigError, ContentFetchError
from ..core.models import CustomerVariant
from ..core.observability import configure_logging, is_logfire_configured, setup_logfire
from ..services.customer_variant_service import CustomerVariantService
from ..services.query_cache import QueryCache, get_query_cache
from ..services.schema_types import export_schema
from ..services.variant_text_service import RenderResult, VariantTextService
from ..services.workflow_service import ActionResult, WorkflowService, workflow_states
from .models import (
    CustomerVariantResponse,
    ErrorResponse,
    ExperimentResponse,
    HealthResponse,
    RenderedBlockResponse,
    RenderRequest,
    RenderResponse,
    TermReplacementResponse,
    TermUsageResponse,
    VariantListResponse,
    WorkflowActionResponse,
    WorkflowAdvanceRequest,
    WorkflowInitialRequest,
)

# ============================================================================
# Logging Configuration
# ============================================================================

configure_logging()
logger = logging.getLogger(__name__)

# ============================================================================
# FastAPI Application Setup
# ============================================================================

app = FastAPI(
    title="VariantSite API",
    description="Content API with customer-variant term substitution",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# ============================================================================
# CORS Configuration
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Rate Limiting
# ============================================================================

limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

RATE_LIMIT = f"{Config.RATE_LIMIT_PER_MINUTE}/minute"

# ============================================================================
# API Key Authentication
# ============================================================================

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)

async def verify_api_key(api_key: Optional[str] = Depends(API_KEY_HEADER)):
    """
    Verify API key from request header.

    Checks against environment variable VARIANTSITE_API_KEY.
    If not set, allows all requests (development mode).

    Raises:
        HTTPException: If API key is invalid or missing
    """
    expected_key = os.getenv("VARIANTSITE_API_KEY")

    # Development mode - no API key required
    if not expected_key:
        logger.warning("VARIANTSITE_API_KEY not set - running in development mode (no auth)")
        return True

    if not api_key:
        logger.warning("API key missing from request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required. Provide via X-API-Key header."
        )

    if api_key != expected_key:
        logger.warning(f"Invalid API key attempt: {api_key[:4]}...")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key"
        )

    return True


# ============================================================================
# Service Dependencies
# ============================================================================

def get_cache() -> QueryCache:
    return get_query_cache()


def get_variant_service() -> CustomerVariantService:
    return CustomerVariantService()


def get_text_service() -> VariantTextService:
    return VariantTextService()


def get_workflow_service() -> WorkflowService:
    return WorkflowService()


def _variant_response(variant: CustomerVariant) -> CustomerVariantResponse:
    return CustomerVariantResponse(
        id=variant.id,
        name=variant.name,
        slug=variant.slug,
        is_default=variant.is_default,
        replacements=[
            TermReplacementResponse(
                original_term=r.original_term,
                replacement_term=r.replacement_term,
                is_plural=r.is_plural,
            )
            for r in variant.replacements
        ],
    )


def _render_response(result: RenderResult) -> RenderResponse:
    return RenderResponse(
        text=result.text,
        blocks=[
            RenderedBlockResponse(
                block_type=block.block_type,
                key=block.key,
                style=block.style,
                text=block.text,
                spans=[vars(span) for span in block.spans],
            )
            for block in result.blocks
        ],
        customer_variant=_variant_response(result.customer_variant) if result.customer_variant else None,
        experiment_variant=result.experiment_variant,
        experiment_variants=result.experiment_variants,
        document_id=result.document_id,
        title=result.title,
        warnings=result.warnings,
    )


def _action_response(result: ActionResult) -> WorkflowActionResponse:
    return WorkflowActionResponse(
        success=result.ok,
        message=result.message,
        tone=result.tone,
        state=result.state,
    )


# ============================================================================
# Health Check Endpoint
# ============================================================================

@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["System"],
    summary="Health check endpoint"
)
async def health_check():
    """
    Check API health and service status.

    Reports whether the content backend is configured, the cache state
    and whether Logfire tracing is active.
    """
    services = {}

    try:
        Config.validate()
        services["content_backend"] = "configured"
    except ValueError as e:
        logger.error(f"Content backend health check failed: {e}")
        services["content_backend"] = "error"

    services["query_cache"] = "entries={entries} hits={hits} misses={misses}".format(
        **get_query_cache().stats()
    )
    services["logfire"] = "configured" if is_logfire_configured() else "disabled"

    overall_status = "healthy" if all(
        s != "error" for s in services.values()
    ) else "degraded"

    return HealthResponse(
        status=overall_status,
        version=__version__,
        timestamp=datetime.now(),
        services=services
    )


# ============================================================================
# Content Query Passthrough
# ============================================================================

@app.get(
    "/api/content",
    tags=["Content"],
    summary="Run a query against the content backend",
    responses={
        400: {"description": "Missing query or invalid params"},
        500: {"description": "Content backend failure"}
    }
)
@limiter.limit(RATE_LIMIT)
async def content_query(
    request: Request,
    query: Optional[str] = None,
    params: Optional[str] = None,
    fresh: bool = False,
    cache: QueryCache = Depends(get_cache),
):
    """
    Return the raw result of a content query as JSON.

    **Query string:**
    - `query`: query text (required)
    - `params`: JSON object of query parameters (optional)
    - `fresh`: skip cached results and refetch (optional, for editors)
    """
    if not query:
        return JSONResponse({"error": "Query parameter is required"}, status_code=400)

    try:
        query_params = json.loads(params) if params else {}
    except ValueError:
        return JSONResponse({"error": "params must be valid JSON"}, status_code=400)

    if not isinstance(query_params, dict):
        return JSONResponse({"error": "params must be a JSON object"}, status_code=400)

    try:
        client = get_content_client()
        if fresh:
            cache.invalidate(query)
        data = await cache.get_or_fetch(query, query_params, client.fetch)
    except (ContentFetchError, ContentConfigError, ValueError) as e:
        logger.error(f"Error fetching from content backend: {e}")
        return JSONResponse({"error": "Failed to fetch data"}, status_code=500)

    return JSONResponse(data)


# ============================================================================
# Customer Variant Endpoints
# ============================================================================

@app.get(
    "/api/variants",
    response_model=VariantListResponse,
    tags=["Variants"],
    summary="List customer variants"
)
@limiter.limit(RATE_LIMIT)
async def list_variants(
    request: Request,
    service: CustomerVariantService = Depends(get_variant_service),
):
    """List customer variants by name, with whether a default exists."""
    variants = await service.list_variants()
    return VariantListResponse(
        variants=[_variant_response(v) for v in variants],
        has_default=any(v.is_default for v in variants),
    )


@app.get(
    "/api/variants/{variant_id}",
    response_model=CustomerVariantResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Variants"],
    summary="Get one customer variant"
)
@limiter.limit(RATE_LIMIT)
async def get_variant(
    request: Request,
    variant_id: str,
    service: CustomerVariantService = Depends(get_variant_service),
):
    variant = await service.get_variant(variant_id)
    if variant is None:
        raise HTTPException(status_code=404, detail=f"Customer variant not found: {variant_id}")
    return _variant_response(variant)


@app.get(
    "/api/variants/{variant_id}/usages",
    response_model=List[TermUsageResponse],
    responses={404: {"model": ErrorResponse}},
    tags=["Variants"],
    summary="Documents using a variant's terms"
)
@limiter.limit(RATE_LIMIT)
async def variant_usages(
    request: Request,
    variant_id: str,
    service: CustomerVariantService = Depends(get_variant_service),
):
    """List posts and pages whose variant annotations use this variant's terms."""
    variant = await service.get_variant(variant_id)
    if variant is None:
        raise HTTPException(status_code=404, detail=f"Customer variant not found: {variant_id}")
    usages = await service.find_term_usages(variant)
    return [TermUsageResponse(**usage.model_dump()) for usage in usages]


@app.get(
    "/api/experiments",
    response_model=List[ExperimentResponse],
    tags=["Variants"],
    summary="Experiment catalog"
)
async def list_experiments():
    """Field-level experiments offered to editors."""
    try:
        experiments = load_experiment_config()
    except FileNotFoundError as e:
        logger.warning(f"No experiment catalog: {e}")
        return []
    return [
        ExperimentResponse(
            id=exp.id,
            label=exp.label,
            variants=[{"id": v.id, "label": v.label} for v in exp.variants],
        )
        for exp in experiments
    ]


# ============================================================================
# Render Endpoints
# ============================================================================

@app.post(
    "/api/render",
    response_model=RenderResponse,
    tags=["Render"],
    summary="Render a content field for a customer variant"
)
@limiter.limit(RATE_LIMIT)
async def render_content(
    request: Request,
    render_request: RenderRequest,
    service: VariantTextService = Depends(get_text_service),
):
    """
    Resolve experiment content and substitute annotated terms.

    Malformed content renders as an empty body and an unavailable variant
    renders literal terms; both are reported in `warnings`.
    """
    result = await service.render(
        render_request.content,
        customer_variant_id=render_request.customer_variant_id,
        experiment_variant=render_request.experiment_variant,
    )
    return _render_response(result)


@app.get(
    "/api/posts/{slug}",
    response_model=RenderResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Render"],
    summary="Render a post"
)
@limiter.limit(RATE_LIMIT)
async def render_post(
    request: Request,
    slug: str,
    variant: Optional[str] = None,
    experiment: Optional[str] = None,
    service: VariantTextService = Depends(get_text_service),
):
    """
    Render a post's content.

    **Query string:**
    - `variant`: customer variant id (default variant when omitted)
    - `experiment`: experiment variant id
    """
    result = await service.render_post(slug, customer_variant_id=variant, experiment_variant=experiment)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Post not found: {slug}")
    return _render_response(result)


# ============================================================================
# Schema & Workflow Endpoints
# ============================================================================

@app.get("/api/schema", tags=["Studio"], summary="Content type declarations")
async def schema_types():
    try:
        experiments = load_experiment_config()
    except FileNotFoundError:
        experiments = None
    return export_schema(experiments)


@app.get("/api/workflow/states", tags=["Studio"], summary="Workflow states and transitions")
async def list_workflow_states():
    return workflow_states()


@app.post(
    "/api/documents/{document_id}/workflow/initial",
    response_model=WorkflowActionResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    tags=["Studio"],
    summary="Set Initial State action"
)
@limiter.limit(RATE_LIMIT)
async def set_initial_state(
    request: Request,
    document_id: str,
    action: WorkflowInitialRequest,
    authenticated: bool = Depends(verify_api_key),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Set workflowState to the document type's initial state."""
    result = await service.set_initial_state(document_id, action.doc_type)
    return _action_response(result)


@app.post(
    "/api/documents/{document_id}/workflow/advance",
    response_model=WorkflowActionResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    tags=["Studio"],
    summary="Change State action"
)
@limiter.limit(RATE_LIMIT)
async def advance_state(
    request: Request,
    document_id: str,
    action: WorkflowAdvanceRequest,
    authenticated: bool = Depends(verify_api_key),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Move the document along the first available transition."""
    result = await service.change_state(document_id, action.doc_type, action.current_state)
    return _action_response(result)


# ============================================================================
# Error Handlers
# ============================================================================

@app.exception_handler(ContentFetchError)
async def content_fetch_exception_handler(request: Request, exc: ContentFetchError):
    """Backend failures are logged; clients get a generic message."""
    logger.error(f"Content backend failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Failed to fetch data"})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent error format."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.detail,
            detail=str(exc),
            timestamp=datetime.now()
        ).model_dump(mode="json")
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            timestamp=datetime.now()
        ).model_dump(mode="json")
    )


# ============================================================================
# Startup/Shutdown Events
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Configure tracing and log startup information."""
    setup_logfire()
    logger.info("="*60)
    logger.info("VariantSite API Starting...")
    logger.info(f"API Version: {__version__}")
    logger.info(f"Docs available at: /docs")
    logger.info(f"Auth mode: {'Production (API key required)' if os.getenv('VARIANTSITE_API_KEY') else 'Development (no auth)'}")
    logger.info("="*60)


@app.on_event("shutdown")
async def shutdown_event():
    """Log shutdown information."""
    logger.info("VariantSite API Shutting down...")


# ============================================================================
# Root Endpoint
# ============================================================================

@app.get("/", tags=["System"])
async def root():
    """
    API root endpoint with basic information.
    """
    return {
        "name": "VariantSite API",
        "version": __version__,
        "description": "Content API with customer-variant term substitution",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "content_query": "/api/content?query=...&params=...",
            "variants": "/api/variants",
            "render": "/api/render",
            "posts": "/api/posts/{slug}",
        }
    }
