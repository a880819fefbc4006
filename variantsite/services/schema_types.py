"""
Content schema declarations for the editing studio.

Declares the document and object types the variant feature relies on:

    customerVariant        document  name, slug, isDefault, replacements[]
    variant                object    inline annotation marking a swappable term
    experimentBlockContent object    default body + bodies keyed by variant id
    code                   object    code snippet with a language

Declarations export to plain dicts (``to_studio_dict``) for the studio and
validate raw documents (``validate_document``) before they are trusted.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..core.config import ExperimentDefinition
from ..core.models import CUSTOMER_VARIANT_TYPE, EXPERIMENT_CONTENT_TYPE, VARIANT_MARK_TYPE


@dataclass(frozen=True)
class SchemaField:
    """One field of a schema type.

    Attributes:
        name: Field name in the stored document.
        type: Studio field type (string, slug, boolean, array, object, text,
            blockContent).
        title: Label shown to editors.
        required: Whether validation rejects a missing value.
        description: Help text shown to editors.
        initial_value: Value for new documents.
        options: Type-specific options (slug source, list choices ...).
        of: Member object fields for ``array`` fields holding objects.
        read_only: Whether editors may change the value.
    """

    name: str
    type: str
    title: str = ""
    required: bool = False
    description: Optional[str] = None
    initial_value: Any = None
    options: Dict[str, Any] = field(default_factory=dict)
    of: Tuple["SchemaField", ...] = ()
    read_only: bool = False

    def to_studio_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "title": self.title or self.name, "type": self.type}
        if self.description:
            out["description"] = self.description
        if self.required:
            out["validation"] = {"required": True}
        if self.initial_value is not None:
            out["initialValue"] = self.initial_value
        if self.options:
            out["options"] = dict(self.options)
        if self.of:
            out["of"] = [{"type": "object", "fields": [f.to_studio_dict() for f in self.of]}]
        if self.read_only:
            out["readOnly"] = True
        return out


@dataclass(frozen=True)
class SchemaType:
    """A document or object type declaration."""

    name: str
    title: str
    type: str
    fields: Tuple[SchemaField, ...]

    def get_field(self, name: str) -> Optional[SchemaField]:
        return next((f for f in self.fields if f.name == name), None)

    def to_studio_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "type": self.type,
            "fields": [f.to_studio_dict() for f in self.fields],
        }

    def validate(self, doc: Dict[str, Any]) -> List[str]:
        """Return one message per missing required value (empty if valid)."""
        return _validate_fields(self.fields, doc, prefix="")


def _is_missing(schema_field: SchemaField, value: Any) -> bool:
    if value is None:
        return True
    if schema_field.type == "slug":
        return not (isinstance(value, dict) and value.get("current")) and not (isinstance(value, str) and value)
    if isinstance(value, str):
        return not value.strip()
    return False


def _validate_fields(fields: Tuple[SchemaField, ...], doc: Dict[str, Any], prefix: str) -> List[str]:
    errors = []
    for schema_field in fields:
        value = doc.get(schema_field.name)
        path = f"{prefix}{schema_field.name}"

        if schema_field.required and _is_missing(schema_field, value):
            errors.append(f"{path} is required")
            continue

        if schema_field.of and isinstance(value, list):
            for index, item in enumerate(value):
                if not isinstance(item, dict):
                    errors.append(f"{path}[{index}] must be an object")
                    continue
                errors.extend(_validate_fields(schema_field.of, item, prefix=f"{path}[{index}]."))
    return errors


# ============================================================================
# Declarations
# ============================================================================

CODE_LANGUAGES = [
    {"title": "JavaScript", "value": "javascript"},
    {"title": "TypeScript", "value": "typescript"},
    {"title": "HTML", "value": "html"},
    {"title": "CSS", "value": "css"},
    {"title": "JSON", "value": "json"},
    {"title": "Markdown", "value": "markdown"},
]

CUSTOMER_VARIANT_SCHEMA = SchemaType(
    name=CUSTOMER_VARIANT_TYPE,
    title="Customer Variant",
    type="document",
    fields=(
        SchemaField(
            name="name",
            title="Name",
            type="string",
            required=True,
            description="The name of the customer (e.g., Disney, Google, Nike)",
        ),
        SchemaField(
            name="slug",
            title="Slug",
            type="slug",
            required=True,
            options={"source": "name", "maxLength": 96},
            description="A unique identifier for this customer variant",
        ),
        SchemaField(
            name="isDefault",
            title="Is Default Variant",
            type="boolean",
            initial_value=False,
            description="Set to true if this is the default variant used when no specific customer is selected",
        ),
        SchemaField(
            name="replacements",
            title="Term Replacements",
            type="array",
            description="List of terms that should be replaced for this customer variant.",
            of=(
                SchemaField(
                    name="originalTerm",
                    title="Original Term",
                    type="string",
                    required=True,
                    description='The term to be replaced (e.g., "employee")',
                ),
                SchemaField(
                    name="replacementTerm",
                    title="Replacement Term",
                    type="string",
                    required=True,
                    description='The term to use instead (e.g., "cast member")',
                ),
                SchemaField(name="isPlural", title="Is Plural", type="boolean", initial_value=False),
            ),
        ),
    ),
)

VARIANT_ANNOTATION_SCHEMA = SchemaType(
    name=VARIANT_MARK_TYPE,
    title="Variant Term",
    type="object",
    fields=(
        SchemaField(
            name="originalTerm",
            title="Original Term",
            type="string",
            required=True,
            description="Term looked up in the selected customer variant's replacements",
        ),
        SchemaField(name="isPlural", title="Is Plural", type="boolean", initial_value=False),
    ),
)

CODE_SCHEMA = SchemaType(
    name="code",
    title="Code",
    type="object",
    fields=(
        SchemaField(name="code", title="Code", type="text"),
        SchemaField(name="language", title="Language", type="string", options={"list": CODE_LANGUAGES}),
    ),
)


def build_experiment_content_schema(
    experiments: Optional[List[ExperimentDefinition]] = None,
) -> SchemaType:
    """
    Declare experimentBlockContent, offering the configured experiment
    variants as choices for ``variantId`` when a catalog is given.
    """
    variant_options: Dict[str, Any] = {}
    experiment_options: Dict[str, Any] = {}
    if experiments:
        variant_options = {"list": [
            {"title": v.label, "value": v.id} for exp in experiments for v in exp.variants
        ]}
        experiment_options = {"list": [{"title": exp.label, "value": exp.id} for exp in experiments]}

    return SchemaType(
        name=EXPERIMENT_CONTENT_TYPE,
        title="Experiment Block Content",
        type="object",
        fields=(
            SchemaField(name="default", title="Default", type="blockContent"),
            SchemaField(name="active", title="Active", type="boolean", read_only=True),
            SchemaField(name="experimentId", title="Experiment", type="string", options=experiment_options),
            SchemaField(
                name="variants",
                title="Variants",
                type="array",
                of=(
                    SchemaField(name="variantId", title="Variant", type="string", required=True, options=variant_options),
                    SchemaField(name="experimentId", title="Experiment", type="string"),
                    SchemaField(name="value", title="Content", type="blockContent"),
                ),
            ),
        ),
    )


def build_schema_types(
    experiments: Optional[List[ExperimentDefinition]] = None,
) -> List[SchemaType]:
    return [
        CUSTOMER_VARIANT_SCHEMA,
        VARIANT_ANNOTATION_SCHEMA,
        build_experiment_content_schema(experiments),
        CODE_SCHEMA,
    ]


def export_schema(experiments: Optional[List[ExperimentDefinition]] = None) -> List[Dict[str, Any]]:
    """Studio-ready declarations for every type."""
    return [schema_type.to_studio_dict() for schema_type in build_schema_types(experiments)]


def validate_document(doc: Dict[str, Any]) -> List[str]:
    """
    Validate a raw document against its declared type.

    Returns:
        Error messages; empty when valid or when the type is not declared here
    """
    schema_type = next((t for t in build_schema_types() if t.name == doc.get("_type")), None)
    if schema_type is None:
        return []
    return schema_type.validate(doc)


def customer_variant_preview(doc: Dict[str, Any]) -> Dict[str, str]:
    """List preview for a customer variant document."""
    title = doc.get("name") or ""
    if doc.get("isDefault"):
        title = f"{title} (Default)"
    return {"title": title, "subtitle": "Customer Variant"}
