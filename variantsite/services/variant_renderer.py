"""
TermSubstitutionRenderer - Render rich text with customer-specific terms.

For every span annotated with a ``variant`` mark, the annotation's
``originalTerm`` is looked up in the active customer variant's replacement
table. A hit renders the replacement term; a miss, a missing annotation or
no active variant renders the span's literal text. Text is never blanked.

Rendering is a pure transform and is recomputed on every call.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..core.models import Block, CustomerVariant, Span, TermAnnotation, decode_blocks

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "\n\n"


@dataclass
class RenderedSpan:
    """A span after substitution."""
    original_text: str
    text: str
    original_term: Optional[str] = None
    replaced: bool = False


@dataclass
class RenderedBlock:
    """A block after substitution. Non-text blocks have no spans."""
    block_type: str
    key: Optional[str] = None
    style: Optional[str] = None
    spans: List[RenderedSpan] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)


class TermSubstitutionRenderer:
    """
    Renders resolved block lists against a customer variant.

    Example:
        >>> renderer = TermSubstitutionRenderer()
        >>> renderer.render_text(blocks, disney)
        'Each cast member contributes to our success.'
    """

    def annotation_for_span(self, block: Block, span: Span) -> Optional[TermAnnotation]:
        """
        Find the variant annotation attached to a span.

        Lookup order:
        1. block mark definition whose _key is listed in span.marks
        2. variant mark definition carried on the span itself
        3. first block definition, when the block has a single span (its
           marks need not reference the definition)
        """
        annotations = block.variant_annotations()

        for annotation in annotations:
            if annotation.key and annotation.key in span.marks:
                return annotation

        span_annotations = span.variant_annotations()
        if span_annotations:
            return span_annotations[0]

        if len(block.children) == 1 and annotations:
            return annotations[0]

        return None

    def render_span(
        self,
        block: Block,
        span: Span,
        variant: Optional[CustomerVariant],
    ) -> RenderedSpan:
        annotation = self.annotation_for_span(block, span)
        original_term = annotation.original_term if annotation else None

        if variant is None or annotation is None or original_term is None:
            return RenderedSpan(original_text=span.text, text=span.text, original_term=original_term)

        replacement = variant.find_replacement(original_term)
        if replacement is None:
            logger.debug(f"No replacement for '{original_term}' in variant {variant.id}")
            return RenderedSpan(original_text=span.text, text=span.text, original_term=original_term)

        return RenderedSpan(
            original_text=span.text,
            text=replacement.replacement_term,
            original_term=original_term,
            replaced=True,
        )

    def render_span_text(self, block: Block, span: Span, variant: Optional[CustomerVariant]) -> str:
        return self.render_span(block, span, variant).text

    def render_blocks(
        self,
        blocks: List[Any],
        variant: Optional[CustomerVariant] = None,
    ) -> List[RenderedBlock]:
        """
        Render a resolved block list.

        Args:
            blocks: Block models or raw block dicts
            variant: Active customer variant, or None for literal text

        Returns:
            One RenderedBlock per input block

        Raises:
            ContentShapeError: If raw blocks are malformed
        """
        models = blocks
        if not all(isinstance(b, Block) for b in blocks):
            models = decode_blocks(list(blocks))

        rendered = []
        for block in models:
            if not block.is_text_block:
                rendered.append(RenderedBlock(block_type=block.type, key=block.key))
                continue
            rendered.append(RenderedBlock(
                block_type=block.type,
                key=block.key,
                style=block.style,
                spans=[self.render_span(block, span, variant) for span in block.children],
            ))
        return rendered

    def render_text(self, blocks: List[Any], variant: Optional[CustomerVariant] = None) -> str:
        """Render blocks to plain text, one paragraph per text block."""
        return self.to_text(self.render_blocks(blocks, variant))

    @staticmethod
    def to_text(rendered: List[RenderedBlock]) -> str:
        return BLOCK_SEPARATOR.join(b.text for b in rendered if b.block_type == "block")
