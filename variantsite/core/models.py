"""
Pydantic models for content documents

Field names follow Python conventions; aliases match the JSON the content
backend returns (``_id``, ``_type``, ``markDefs``, ``isDefault`` ...).
"""

from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ContentShapeError


VARIANT_MARK_TYPE = "variant"
EXPERIMENT_CONTENT_TYPE = "experimentBlockContent"
CUSTOMER_VARIANT_TYPE = "customerVariant"


class ContentModel(BaseModel):
    """Base for backend documents: accepts aliases or field names, keeps unknown keys"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")


# ============================================================================
# Customer Variants
# ============================================================================

class TermReplacement(ContentModel):
    """
    One row of a customer variant's replacement table.

    Half-edited rows may lack either term; such rows never match.
    """
    original_term: Optional[str] = Field(default=None, alias="originalTerm", description="Term as authored (e.g., 'employee')")
    replacement_term: Optional[str] = Field(default=None, alias="replacementTerm", description="Term shown instead (e.g., 'cast member')")
    is_plural: bool = Field(default=False, alias="isPlural", description="Plurality metadata, not used for matching")

    @field_validator('is_plural', mode='before')
    @classmethod
    def convert_none_to_false(cls, v):
        """Backend returns null for unset booleans"""
        return bool(v) if v is not None else False

    @property
    def is_complete(self) -> bool:
        return bool(self.original_term) and bool(self.replacement_term)


class CustomerVariant(ContentModel):
    """Named customer audience with its own term replacement table"""
    id: str = Field(..., alias="_id")
    name: str
    slug: Optional[str] = None
    is_default: bool = Field(default=False, alias="isDefault")
    replacements: List[TermReplacement] = Field(default_factory=list)

    @field_validator('slug', mode='before')
    @classmethod
    def unwrap_slug(cls, v):
        """Slugs arrive as {"_type": "slug", "current": "..."}"""
        if isinstance(v, dict):
            return v.get('current')
        return v

    @field_validator('is_default', mode='before')
    @classmethod
    def convert_none_to_false(cls, v):
        return bool(v) if v is not None else False

    @field_validator('replacements', mode='before')
    @classmethod
    def convert_none_to_empty_list(cls, v):
        """Convert None to empty list for list fields"""
        return v if v is not None else []

    def find_replacement(self, original_term: str) -> Optional[TermReplacement]:
        """First complete replacement whose original term equals ``original_term`` exactly."""
        for replacement in self.replacements:
            if replacement.is_complete and replacement.original_term == original_term:
                return replacement
        return None

    def original_terms(self) -> List[str]:
        return [r.original_term for r in self.replacements if r.original_term]


# ============================================================================
# Rich Text (Portable Text)
# ============================================================================

class TermAnnotation(ContentModel):
    """Inline ``variant`` mark definition flagging a substitutable term"""
    key: Optional[str] = Field(default=None, alias="_key")
    type: str = Field(default=VARIANT_MARK_TYPE, alias="_type")
    original_term: Optional[str] = Field(default=None, alias="originalTerm")
    is_plural: bool = Field(default=False, alias="isPlural")

    @field_validator('is_plural', mode='before')
    @classmethod
    def convert_none_to_false(cls, v):
        return bool(v) if v is not None else False


def _variant_annotations(mark_defs: List[Dict[str, Any]]) -> List[TermAnnotation]:
    """
    Parse the ``variant`` mark definitions out of a markDefs list.

    Raises:
        ContentShapeError: If a variant definition has fields of the wrong type
    """
    try:
        return [
            TermAnnotation.model_validate(mark_def)
            for mark_def in mark_defs
            if isinstance(mark_def, dict) and mark_def.get('_type') == VARIANT_MARK_TYPE
        ]
    except ValidationError as e:
        raise ContentShapeError(f"Malformed variant annotation: {e}") from e


class Span(ContentModel):
    """Text run inside a block"""
    type: str = Field(default="span", alias="_type")
    key: Optional[str] = Field(default=None, alias="_key")
    text: str = ""
    marks: List[str] = Field(default_factory=list)
    # Legacy shape: annotation definitions carried on the span itself
    mark_defs: List[Dict[str, Any]] = Field(default_factory=list, alias="markDefs")

    @field_validator('text', mode='before')
    @classmethod
    def convert_none_to_empty_string(cls, v):
        return v if v is not None else ""

    @field_validator('marks', 'mark_defs', mode='before')
    @classmethod
    def convert_none_to_empty_list(cls, v):
        return v if v is not None else []

    def variant_annotations(self) -> List[TermAnnotation]:
        return _variant_annotations(self.mark_defs)


class Block(ContentModel):
    """
    A rich-text block node.

    Only ``_type == "block"`` nodes carry text; other node types (images,
    code objects) keep their fields as extras and render no text.
    """
    type: str = Field(..., alias="_type")
    key: Optional[str] = Field(default=None, alias="_key")
    style: Optional[str] = None
    children: List[Span] = Field(default_factory=list)
    mark_defs: List[Dict[str, Any]] = Field(default_factory=list, alias="markDefs")

    @field_validator('children', 'mark_defs', mode='before')
    @classmethod
    def convert_none_to_empty_list(cls, v):
        return v if v is not None else []

    @property
    def is_text_block(self) -> bool:
        return self.type == "block"

    @property
    def plain_text(self) -> str:
        return "".join(child.text for child in self.children)

    def variant_annotations(self) -> List[TermAnnotation]:
        return _variant_annotations(self.mark_defs)


# ============================================================================
# Experiment Content
# ============================================================================

class ExperimentVariant(ContentModel):
    """Alternative body of an experiment, keyed by variant id"""
    key: Optional[str] = Field(default=None, alias="_key")
    variant_id: Optional[str] = Field(default=None, alias="variantId")
    experiment_id: Optional[str] = Field(default=None, alias="experimentId")
    value: Optional[List[Block]] = None


class ExperimentBlockContent(ContentModel):
    """Rich-text field wrapped as a default body plus keyed alternatives"""
    type: str = Field(default=EXPERIMENT_CONTENT_TYPE, alias="_type")
    default: Optional[List[Block]] = None
    active: Optional[str] = None
    experiment_id: Optional[str] = Field(default=None, alias="experimentId")
    variants: List[ExperimentVariant] = Field(default_factory=list)

    @field_validator('type')
    @classmethod
    def validate_type(cls, v: str) -> str:
        if v != EXPERIMENT_CONTENT_TYPE:
            raise ValueError(f"expected _type '{EXPERIMENT_CONTENT_TYPE}', got '{v}'")
        return v

    @field_validator('variants', mode='before')
    @classmethod
    def convert_none_to_empty_list(cls, v):
        return v if v is not None else []


@dataclass(frozen=True)
class PlainBody:
    """Content authored directly as a block list"""
    blocks: List[Block]


@dataclass(frozen=True)
class ExperimentBody:
    """Content wrapped in an experiment container"""
    content: ExperimentBlockContent


ContentBody = Union[PlainBody, ExperimentBody]


def is_experiment_content(value: Any) -> bool:
    """True for raw dicts or models tagged as experiment content."""
    if isinstance(value, ExperimentBlockContent):
        return True
    return isinstance(value, dict) and value.get('_type') == EXPERIMENT_CONTENT_TYPE


def decode_blocks(raw: Any) -> List[Block]:
    """
    Validate a raw block list.

    Raises:
        ContentShapeError: If ``raw`` is not a list of block objects
    """
    if not isinstance(raw, list):
        raise ContentShapeError(f"Expected a list of blocks, got {type(raw).__name__}")
    try:
        blocks = [Block.model_validate(block) for block in raw]
    except ValidationError as e:
        raise ContentShapeError(f"Malformed block content: {e}") from e
    _check_annotations(blocks)
    return blocks


def _check_annotations(blocks: Optional[List[Block]]) -> None:
    """Parse every variant annotation so bad ones fail at decode time."""
    for block in blocks or []:
        block.variant_annotations()
        for span in block.children:
            span.variant_annotations()


def decode_content(raw: Any) -> ContentBody:
    """
    Decode a content field value into PlainBody or ExperimentBody.

    ``None`` decodes to an empty PlainBody.

    Raises:
        ContentShapeError: If the value is neither a block list nor
            experiment content, or its fields have the wrong types
    """
    if raw is None:
        return PlainBody(blocks=[])
    if isinstance(raw, (PlainBody, ExperimentBody)):
        return raw
    if isinstance(raw, ExperimentBlockContent):
        return ExperimentBody(content=raw)

    if is_experiment_content(raw):
        try:
            content = ExperimentBlockContent.model_validate(raw)
        except ValidationError as e:
            raise ContentShapeError(f"Malformed experiment content: {e}") from e
        _check_annotations(content.default)
        for variant in content.variants:
            _check_annotations(variant.value)
        return ExperimentBody(content=content)

    if isinstance(raw, list):
        return PlainBody(blocks=decode_blocks(raw))

    raise ContentShapeError(f"Unsupported content shape: {type(raw).__name__}")


# ============================================================================
# Usage
# ============================================================================

class TermUsage(BaseModel):
    """A document referencing some of a customer variant's terms"""
    document_id: str
    title: str = "Untitled"
    document_type: str
    original_terms: List[str] = Field(default_factory=list)
