"""
Workflow commands for VariantSite CLI
"""

import asyncio
from typing import Optional

import click

from ..services.workflow_service import ActionResult, WorkflowService, WORKFLOW_DOCUMENT_TYPES


@click.group('workflow')
def workflow_group():
    """Move posts and pages through the editorial workflow"""
    pass


def _echo_result(result: ActionResult):
    if result.ok:
        click.echo(f"✅ {result.message}")
    else:
        click.echo(f"❌ {result.message}", err=True)


@workflow_group.command('initial')
@click.argument('document_id')
@click.option('--type', 'doc_type', type=click.Choice(WORKFLOW_DOCUMENT_TYPES), required=True, help='Document type')
def set_initial(document_id: str, doc_type: str):
    """
    Set a document to its type's initial workflow state

    Examples:
        variantsite workflow initial post-123 --type post
    """
    try:
        service = WorkflowService()
        _echo_result(asyncio.run(service.set_initial_state(document_id, doc_type)))

    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)


@workflow_group.command('advance')
@click.argument('document_id')
@click.option('--type', 'doc_type', type=click.Choice(WORKFLOW_DOCUMENT_TYPES), required=True, help='Document type')
@click.option('--state', 'current_state', help='Current workflowState of the document')
def advance(document_id: str, doc_type: str, current_state: Optional[str]):
    """
    Move a document along its first available transition

    Examples:
        variantsite workflow advance post-123 --type post --state inReview
    """
    try:
        service = WorkflowService()
        _echo_result(asyncio.run(service.change_state(document_id, doc_type, current_state)))

    except Exception as e:
        click.echo(f"❌ Error: {e}", err=True)
