"""
API Request and Response Models.

Pydantic models for FastAPI request/response validation and
automatic OpenAPI documentation generation.
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime


# ============================================================================
# Customer Variant Models
# ============================================================================

class TermReplacementResponse(BaseModel):
    """One replacement table row."""
    original_term: Optional[str] = None
    replacement_term: Optional[str] = None
    is_plural: bool = False


class CustomerVariantResponse(BaseModel):
    """Customer variant with its replacement table."""
    id: str = Field(..., description="Document id of the variant")
    name: str = Field(..., description="Display name (e.g., 'Disney')")
    slug: Optional[str] = None
    is_default: bool = False
    replacements: List[TermReplacementResponse] = Field(default_factory=list)


class VariantListResponse(BaseModel):
    """
    Customer variants, name ascending.

    ``has_default`` tells selectors whether to offer an explicit
    "Default" (no variant) choice: it is only needed when no variant is
    flagged as the default.
    """
    variants: List[CustomerVariantResponse] = Field(default_factory=list)
    has_default: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "variants": [
                    {
                        "id": "variant-disney",
                        "name": "Disney",
                        "slug": "disney",
                        "is_default": False,
                        "replacements": [
                            {"original_term": "employee", "replacement_term": "cast member", "is_plural": False}
                        ]
                    }
                ],
                "has_default": False
            }
        }


class TermUsageResponse(BaseModel):
    """A document using some of a variant's terms."""
    document_id: str
    title: str
    document_type: str
    original_terms: List[str] = Field(default_factory=list)


class ExperimentVariantResponse(BaseModel):
    id: str
    label: str


class ExperimentResponse(BaseModel):
    """Field-level experiment from the experiment catalog."""
    id: str
    label: str
    variants: List[ExperimentVariantResponse] = Field(default_factory=list)


# ============================================================================
# Render Models
# ============================================================================

class RenderRequest(BaseModel):
    """
    Request model for rendering a content field.

    ``content`` is the raw field value: a block list or experiment content.
    """
    content: Any = Field(None, description="Block list or experimentBlockContent object")
    customer_variant_id: Optional[str] = Field(
        None,
        description="Customer variant id; the default variant is used when omitted"
    )
    experiment_variant: Optional[str] = Field(
        None,
        description="Experiment variant id selecting an alternative body"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "content": [
                    {
                        "_type": "block",
                        "children": [{"_type": "span", "text": "employee"}],
                        "markDefs": [{"_type": "variant", "originalTerm": "employee"}]
                    }
                ],
                "customer_variant_id": "variant-disney",
                "experiment_variant": None
            }
        }


class RenderedSpanResponse(BaseModel):
    original_text: str
    text: str
    original_term: Optional[str] = None
    replaced: bool = False


class RenderedBlockResponse(BaseModel):
    block_type: str
    key: Optional[str] = None
    style: Optional[str] = None
    text: str = ""
    spans: List[RenderedSpanResponse] = Field(default_factory=list)


class RenderResponse(BaseModel):
    """Rendered content and what it was rendered with."""
    text: str = Field(..., description="Rendered plain text, blocks separated by blank lines")
    blocks: List[RenderedBlockResponse] = Field(default_factory=list)
    customer_variant: Optional[CustomerVariantResponse] = None
    experiment_variant: Optional[str] = None
    experiment_variants: List[str] = Field(
        default_factory=list,
        description="Experiment variant ids the content offers"
    )
    document_id: Optional[str] = None
    title: Optional[str] = None
    warnings: List[str] = Field(
        default_factory=list,
        description="What degraded (malformed_content, variant_unavailable, variant_not_found)"
    )


# ============================================================================
# Workflow Models
# ============================================================================

class WorkflowInitialRequest(BaseModel):
    """Request model for the Set Initial State action."""
    doc_type: str = Field(..., description="Document type (post or page)")


class WorkflowAdvanceRequest(BaseModel):
    """Request model for the Change State action."""
    doc_type: str = Field(..., description="Document type (post or page)")
    current_state: Optional[str] = Field(
        None,
        description="workflowState of the draft, else of the published document"
    )


class WorkflowActionResponse(BaseModel):
    """Outcome of a workflow action."""
    success: bool
    message: str
    tone: Optional[str] = None
    state: Optional[str] = None


# ============================================================================
# Health Check Models
# ============================================================================

class HealthResponse(BaseModel):
    """Response model for health check endpoint."""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(default_factory=datetime.now)
    services: Dict[str, str] = Field(
        default_factory=dict,
        description="Status of dependent services (content backend, cache, logfire)"
    )


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    timestamp: datetime = Field(default_factory=datetime.now)
