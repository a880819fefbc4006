"""
Content and schema commands for VariantSite CLI
"""

import asyncio
import json
from typing import Optional

import click

from ..core.config import load_experiment_config
from ..core.content_client import get_content_client
from ..services.query_cache import get_query_cache
from ..services.schema_types import export_schema
from ..services.variant_text_service import RenderResult, VariantTextService


@click.group('content')
def content_group():
    """Query and render content"""
    pass


def _echo_render(result: RenderResult):
    variant_name = result.customer_variant.name if result.customer_variant else "none (literal terms)"

    click.echo(f"\n{'='*60}")
    if result.title:
        click.echo(f"📝 {result.title}")
    click.echo(f"🏢 Customer variant: {variant_name}")
    if result.experiment_variant:
        click.echo(f"🧪 Experiment variant: {result.experiment_variant}")
    if result.experiment_variants:
        click.echo(f"🧪 Experiment variants offered: {', '.join(result.experiment_variants)}")
    click.echo(f"{'='*60}\n")

    click.echo(result.text or "(empty)")

    if result.warnings:
        click.echo(f"\n⚠️  Warnings: {', '.join(result.warnings)}")
    click.echo()


@content_group.command('query')
@click.argument('query')
@click.option('--params', '-p', help='Query parameters as a JSON object')
def run_query(query: str, params: Optional[str]):
    """
    Run a query against the content backend and print the JSON result

    Examples:
        variantsite content query '*[_type == "customerVariant"]'
        variantsite content query '*[_id == $id][0]' -p '{"id": "variant-disney"}'
    """
    try:
        query_params = json.loads(params) if params else {}
        if not isinstance(query_params, dict):
            click.echo("❌ --params must be a JSON object", err=True)
            return

        client = get_content_client()
        data = asyncio.run(get_query_cache().get_or_fetch(query, query_params, client.fetch))
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))

    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)


@content_group.command('render')
@click.argument('content_file', type=click.File('r'))
@click.option('--variant', '-v', 'variant_id', help='Customer variant id (default variant if omitted)')
@click.option('--experiment', '-e', help='Experiment variant id')
def render_file(content_file, variant_id: Optional[str], experiment: Optional[str]):
    """
    Render a content field read from a JSON file

    The file holds a block list or an experimentBlockContent object.

    Examples:
        variantsite content render body.json --variant variant-disney
    """
    try:
        content = json.load(content_file)
        service = VariantTextService()
        result = asyncio.run(service.render(content, variant_id, experiment))
        _echo_render(result)

    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)


@content_group.command('post')
@click.argument('slug')
@click.option('--variant', '-v', 'variant_id', help='Customer variant id (default variant if omitted)')
@click.option('--experiment', '-e', help='Experiment variant id')
def render_post(slug: str, variant_id: Optional[str], experiment: Optional[str]):
    """
    Render a post by slug

    Examples:
        variantsite content post welcome --variant variant-google
    """
    try:
        service = VariantTextService()
        result = asyncio.run(service.render_post(slug, variant_id, experiment))

        if result is None:
            click.echo(f"❌ Post '{slug}' not found", err=True)
            return

        _echo_render(result)

    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)


@click.group('schema')
def schema_group():
    """Content type declarations"""
    pass


@schema_group.command('export')
@click.option('--output', '-o', type=click.Path(), help='Write declarations to this file')
@click.option('--experiments', 'experiments_path', type=click.Path(), help='Experiment catalog (YAML)')
def export_schema_command(output: Optional[str], experiments_path: Optional[str]):
    """
    Export schema declarations as JSON

    Examples:
        variantsite schema export -o schema.json
    """
    try:
        try:
            experiments = load_experiment_config(experiments_path)
        except FileNotFoundError:
            click.echo("⚠️  No experiment catalog found, exporting without variant options", err=True)
            experiments = None

        payload = json.dumps(export_schema(experiments), indent=2)

        if output:
            with open(output, 'w') as f:
                f.write(payload)
            click.echo(f"✅ Schema written to {output}")
        else:
            click.echo(payload)

    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
