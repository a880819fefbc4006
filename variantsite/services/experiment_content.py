"""
Experiment content resolution.

A rich-text field is either a plain block list or an
``experimentBlockContent`` wrapper holding a default body and alternative
bodies keyed by experiment variant id. Resolution precedence:

1. no content                                  -> []
2. experiment + selector + matching non-empty   -> that variant's value
3. experiment with a default body               -> default
4. plain block list                             -> unchanged
5. anything else                                -> []
"""

import logging
from typing import Any, Iterator, List, Optional, Tuple

from ..core.models import (
    Block,
    ExperimentBlockContent,
    ExperimentBody,
    PlainBody,
    decode_content,
    is_experiment_content,
)

logger = logging.getLogger(__name__)


def _iter_experiment_variants(content: Any) -> Iterator[Tuple[Optional[str], Any]]:
    if isinstance(content, ExperimentBlockContent):
        for variant in content.variants:
            yield variant.variant_id, variant.value
        return
    variants = content.get('variants')
    if not isinstance(variants, list):
        return
    for variant in variants:
        if isinstance(variant, dict):
            yield variant.get('variantId'), variant.get('value')


def _experiment_default(content: Any) -> Any:
    if isinstance(content, ExperimentBlockContent):
        return content.default
    return content.get('default')


def get_content_value(content: Any, active_variant: Optional[str] = None) -> List[Any]:
    """
    Pick the active body of a content value.

    Accepts raw JSON (list or dict) as returned by the backend, or values
    already decoded with ``decode_content``.

    Args:
        content: Field value
        active_variant: Experiment variant id selected by the caller

    Returns:
        Block list (raw dicts or Block models, matching the input)
    """
    if content is None:
        return []

    if isinstance(content, PlainBody):
        return content.blocks
    if isinstance(content, ExperimentBody):
        content = content.content

    if is_experiment_content(content):
        if active_variant:
            match = next(
                (value for variant_id, value in _iter_experiment_variants(content)
                 if variant_id == active_variant),
                None
            )
            if match:
                return match

        default = _experiment_default(content)
        if default is not None:
            return default

    return content if isinstance(content, list) else []


def resolve_body(raw: Any, active_variant: Optional[str] = None) -> List[Block]:
    """
    Decode a raw field value and pick its active body.

    Raises:
        ContentShapeError: If the value is malformed
    """
    return get_content_value(decode_content(raw), active_variant)


def list_experiment_variant_ids(content: Any) -> List[str]:
    """Variant ids carried by experiment content, in authored order."""
    if isinstance(content, ExperimentBody):
        content = content.content
    if not is_experiment_content(content):
        return []
    return [variant_id for variant_id, _ in _iter_experiment_variants(content) if variant_id]
