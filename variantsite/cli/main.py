"""
Main CLI entry point for VariantSite
"""

import click

from ..core.observability import configure_logging
from .variants import variants_group
from .content import content_group, schema_group
from .workflow import workflow_group


@click.group()
@click.version_option(version='1.0.0')
@click.option('--log-level', default='WARNING', help='Log level for service output')
def cli(log_level: str):
    """
    VariantSite - Customer-variant content tooling

    Query the content backend, inspect customer variants and render
    content with customer term substitution.
    """
    configure_logging(log_level)


# Register command groups
cli.add_command(variants_group)
cli.add_command(content_group)
cli.add_command(schema_group)
cli.add_command(workflow_group)


if __name__ == '__main__':
    cli()
