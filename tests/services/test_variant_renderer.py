"""
Unit tests for TermSubstitutionRenderer.
"""

import pytest

from variantsite.core.errors import ContentShapeError
from variantsite.core.models import Block, CustomerVariant
from variantsite.services.variant_renderer import TermSubstitutionRenderer


@pytest.fixture
def renderer():
    return TermSubstitutionRenderer()


@pytest.fixture
def disney(disney_doc):
    return CustomerVariant.model_validate(disney_doc)


EMPLOYEE_CONTENT = [{
    "_type": "block",
    "children": [{"text": "employee"}],
    "markDefs": [{"_type": "variant", "originalTerm": "employee"}],
}]


class TestSubstitution:

    def test_replaces_annotated_term(self, renderer, disney):
        assert renderer.render_text(EMPLOYEE_CONTENT, disney) == "cast member"

    def test_no_variant_renders_literal(self, renderer):
        assert renderer.render_text(EMPLOYEE_CONTENT, None) == "employee"

    def test_unknown_term_renders_literal(self, renderer, disney):
        content = [{
            "_type": "block",
            "children": [{"text": "manager"}],
            "markDefs": [{"_type": "variant", "originalTerm": "manager"}],
        }]
        assert renderer.render_text(content, disney) == "manager"

    def test_duplicate_terms_first_wins(self, renderer):
        variant = CustomerVariant.model_validate({
            "_id": "v",
            "name": "Dup",
            "replacements": [
                {"originalTerm": "employee", "replacementTerm": "first"},
                {"originalTerm": "employee", "replacementTerm": "second"},
            ],
        })
        assert renderer.render_text(EMPLOYEE_CONTENT, variant) == "first"

    def test_unannotated_span_untouched(self, renderer, disney, block):
        assert renderer.render_text([block("employee")], disney) == "employee"

    def test_annotation_without_term_renders_literal(self, renderer, disney):
        content = [{
            "_type": "block",
            "children": [{"text": "employee"}],
            "markDefs": [{"_type": "variant"}],
        }]
        assert renderer.render_text(content, disney) == "employee"

    def test_rendered_span_details(self, renderer, disney):
        rendered = renderer.render_blocks(EMPLOYEE_CONTENT, disney)
        span = rendered[0].spans[0]
        assert span.original_text == "employee"
        assert span.text == "cast member"
        assert span.original_term == "employee"
        assert span.replaced is True


class TestAnnotationLookup:

    def test_keyed_mark_applies_only_to_marked_span(self, renderer, disney):
        content = [{
            "_type": "block",
            "_key": "b1",
            "children": [
                {"_type": "span", "text": "Each ", "marks": []},
                {"_type": "span", "text": "employee", "marks": ["m1"]},
                {"_type": "span", "text": " contributes to our success.", "marks": []},
            ],
            "markDefs": [{"_type": "variant", "_key": "m1", "originalTerm": "employee"}],
        }]
        assert renderer.render_text(content, disney) == "Each cast member contributes to our success."

    def test_span_level_mark_defs(self, renderer, disney):
        content = [{
            "_type": "block",
            "children": [
                {"_type": "span", "text": "Dear "},
                {
                    "_type": "span",
                    "text": "customer",
                    "markDefs": [{"_type": "variant", "originalTerm": "customer"}],
                },
            ],
        }]
        assert renderer.render_text(content, disney) == "Dear guest"

    def test_unkeyed_mark_needs_single_span(self, renderer, disney):
        content = [{
            "_type": "block",
            "children": [{"text": "employee"}, {"text": " of the month"}],
            "markDefs": [{"_type": "variant", "originalTerm": "employee"}],
        }]
        assert renderer.render_text(content, disney) == "employee of the month"

    def test_single_span_uses_keyed_definition_without_mark(self, renderer, disney, block):
        content = block("employee", original_term="employee", mark_key="m1")
        content["children"][0]["marks"] = []
        assert renderer.render_text([content], disney) == "cast member"


class TestRenderSpanText:

    def test_replaced_term(self, renderer, disney, block):
        model = Block.model_validate(block("employee", original_term="employee", mark_key="m1"))
        assert renderer.render_span_text(model, model.children[0], disney) == "cast member"

    def test_no_variant_is_literal(self, renderer, block):
        model = Block.model_validate(block("employee", original_term="employee"))
        assert renderer.render_span_text(model, model.children[0], None) == "employee"

    def test_unknown_term_is_never_blank(self, renderer, disney, block):
        model = Block.model_validate(block("associate", original_term="associate"))
        assert renderer.render_span_text(model, model.children[0], disney) == "associate"


class TestRenderBlocks:

    def test_blocks_joined_as_paragraphs(self, renderer, disney, block):
        content = [
            block("employee", original_term="employee", key="b1", mark_key="m1"),
            block("Welcome, customer", key="b2"),
        ]
        assert renderer.render_text(content, disney) == "cast member\n\nWelcome, customer"

    def test_non_text_blocks_render_no_text(self, renderer, disney, block):
        content = [{"_type": "image", "_key": "img"}, block("Hello", key="b2")]
        rendered = renderer.render_blocks(content, disney)
        assert rendered[0].block_type == "image"
        assert rendered[0].spans == []
        assert renderer.to_text(rendered) == "Hello"

    def test_empty(self, renderer, disney):
        assert renderer.render_blocks([], disney) == []
        assert renderer.render_text([], disney) == ""

    def test_malformed_raw_blocks(self, renderer, disney):
        with pytest.raises(ContentShapeError):
            renderer.render_blocks([{"children": "nope"}], disney)

    def test_recomputed_per_variant(self, renderer, disney, google_doc):
        google = CustomerVariant.model_validate(google_doc)
        assert renderer.render_text(EMPLOYEE_CONTENT, disney) == "cast member"
        assert renderer.render_text(EMPLOYEE_CONTENT, google) == "Googler"
        assert renderer.render_text(EMPLOYEE_CONTENT, None) == "employee"
