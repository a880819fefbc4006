"""
Unit tests for schema declarations and document validation.
"""

from variantsite.core.config import ExperimentDefinition, ExperimentVariantOption
from variantsite.services.schema_types import (
    CUSTOMER_VARIANT_SCHEMA,
    build_experiment_content_schema,
    customer_variant_preview,
    export_schema,
    validate_document,
)


class TestCustomerVariantSchema:

    def test_declared_fields(self):
        assert [f.name for f in CUSTOMER_VARIANT_SCHEMA.fields] == ["name", "slug", "isDefault", "replacements"]
        assert CUSTOMER_VARIANT_SCHEMA.get_field("isDefault").initial_value is False
        assert CUSTOMER_VARIANT_SCHEMA.get_field("slug").options["source"] == "name"

    def test_studio_dict(self):
        studio = CUSTOMER_VARIANT_SCHEMA.to_studio_dict()
        assert studio["name"] == "customerVariant"
        assert studio["type"] == "document"
        replacements = studio["fields"][3]
        assert replacements["type"] == "array"
        member_fields = [f["name"] for f in replacements["of"][0]["fields"]]
        assert member_fields == ["originalTerm", "replacementTerm", "isPlural"]

    def test_valid_document(self, disney_doc):
        assert validate_document(disney_doc) == []

    def test_missing_required_values(self):
        doc = {
            "_type": "customerVariant",
            "name": "  ",
            "slug": {"_type": "slug"},
            "replacements": [{"originalTerm": "employee"}, "junk"],
        }
        assert validate_document(doc) == [
            "name is required",
            "slug is required",
            "replacements[0].replacementTerm is required",
            "replacements[1] must be an object",
        ]

    def test_undeclared_type_is_not_validated(self):
        assert validate_document({"_type": "post"}) == []


class TestExperimentContentSchema:

    def test_without_catalog(self):
        schema = build_experiment_content_schema()
        assert schema.get_field("active").read_only is True
        assert schema.get_field("experimentId").options == {}

    def test_catalog_options(self):
        experiments = [ExperimentDefinition(
            id="customerVariants",
            label="Customer Variants",
            variants=[ExperimentVariantOption("disney", "Disney"), ExperimentVariantOption("nike", "Nike")],
        )]
        schema = build_experiment_content_schema(experiments)

        variant_id = schema.get_field("variants").of[0]
        assert variant_id.options["list"] == [
            {"title": "Disney", "value": "disney"},
            {"title": "Nike", "value": "nike"},
        ]
        assert schema.get_field("experimentId").options["list"] == [
            {"title": "Customer Variants", "value": "customerVariants"}
        ]


class TestExport:

    def test_exports_all_types(self):
        names = [t["name"] for t in export_schema()]
        assert names == ["customerVariant", "variant", "experimentBlockContent", "code"]


class TestPreview:

    def test_default_suffix(self):
        assert customer_variant_preview({"name": "Google", "isDefault": True}) == {
            "title": "Google (Default)",
            "subtitle": "Customer Variant",
        }

    def test_plain(self):
        assert customer_variant_preview({"name": "Nike"})["title"] == "Nike"
