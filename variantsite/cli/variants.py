"""
Customer variant commands for VariantSite CLI
"""

import asyncio

import click

from ..core.models import CUSTOMER_VARIANT_TYPE
from ..services.customer_variant_service import CustomerVariantService
from ..services.schema_types import validate_document


@click.group('variants')
def variants_group():
    """Inspect customer variants"""
    pass


@variants_group.command('list')
def list_variants():
    """
    List all customer variants

    Examples:
        variantsite variants list
    """
    try:
        service = CustomerVariantService()
        variants = asyncio.run(service.list_variants())

        if not variants:
            click.echo("No customer variants found.")
            return

        click.echo(f"\n{'='*60}")
        click.echo(f"📋 Customer Variants ({len(variants)})")
        click.echo(f"{'='*60}\n")

        for variant in variants:
            default_marker = " (Default)" if variant.is_default else ""
            click.echo(f"🏢 {variant.name}{default_marker}")
            click.echo(f"   ID: {variant.id}")
            if variant.slug:
                click.echo(f"   Slug: {variant.slug}")
            click.echo(f"   Replacements: {len(variant.replacements)}")
            click.echo()

        if not any(v.is_default for v in variants):
            click.echo("⚠️  No default variant: content renders literal terms unless a variant is selected")

    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)


@variants_group.command('show')
@click.argument('variant_id')
def show_variant(variant_id: str):
    """
    Show a customer variant and its replacement table

    Examples:
        variantsite variants show variant-disney
    """
    try:
        service = CustomerVariantService()
        variant = asyncio.run(service.get_variant(variant_id))

        if variant is None:
            click.echo(f"❌ Customer variant '{variant_id}' not found", err=True)
            return

        click.echo(f"\n{'='*60}")
        click.echo(f"🏢 {variant.name}{' (Default)' if variant.is_default else ''}")
        click.echo(f"{'='*60}\n")

        click.echo(f"ID: {variant.id}")
        click.echo(f"Slug: {variant.slug or '-'}")

        click.echo(f"\n🔁 Replacements ({len(variant.replacements)}):")
        if variant.replacements:
            for replacement in variant.replacements:
                plural = " [plural]" if replacement.is_plural else ""
                incomplete = "" if replacement.is_complete else " [incomplete, ignored]"
                click.echo(f"   - {replacement.original_term or '?'} → {replacement.replacement_term or '?'}{plural}{incomplete}")
        else:
            click.echo("   None")

        doc = {**variant.model_dump(by_alias=True), "_type": CUSTOMER_VARIANT_TYPE}
        problems = validate_document(doc)
        if problems:
            click.echo(f"\n⚠️  Validation ({len(problems)}):")
            for problem in problems:
                click.echo(f"   - {problem}")

        click.echo()

    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)


@variants_group.command('usages')
@click.argument('variant_id')
def variant_usages(variant_id: str):
    """
    List posts and pages that use a variant's terms

    Examples:
        variantsite variants usages variant-disney
    """
    try:
        service = CustomerVariantService()

        async def _usages():
            variant = await service.get_variant(variant_id)
            if variant is None:
                return None, []
            return variant, await service.find_term_usages(variant)

        variant, usages = asyncio.run(_usages())

        if variant is None:
            click.echo(f"❌ Customer variant '{variant_id}' not found", err=True)
            return

        click.echo(f"\n{'='*60}")
        click.echo(f"📄 Documents using {variant.name} terms ({len(usages)})")
        click.echo(f"{'='*60}\n")

        if not usages:
            click.echo("No documents use this variant's terms.")
            return

        for usage in usages:
            click.echo(f"📝 {usage.title} ({usage.document_type})")
            click.echo(f"   ID: {usage.document_id}")
            click.echo(f"   Terms: {', '.join(usage.original_terms)}")
            click.echo()

    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
