"""
WorkflowService - Editorial status for posts and pages.

Documents carry a ``workflowState`` field drawn from a fixed vocabulary.
Two transition tables exist:

- WORKFLOW_TRANSITIONS: what the studio workflow allows between states
- ACTION_TRANSITIONS: what the "Change State" document action does per
  document type (it always takes the first available transition)

Actions report their outcome as an ActionResult (message + tone) instead of
raising, matching how studio document actions surface results.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from ..core.content_client import get_content_client
from ..core.errors import VariantSiteError
from ..core.sanity_client import SanityClient

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    """Editorial states"""
    DRAFT = "draft"
    IN_REVIEW = "inReview"
    PUBLISHED = "published"
    ARCHIVED = "archived"


WORKFLOW_STATE_TITLES = {
    WorkflowState.DRAFT: ("Draft", "warning"),
    WorkflowState.IN_REVIEW: ("In Review", "primary"),
    WorkflowState.PUBLISHED: ("Published", "success"),
    WorkflowState.ARCHIVED: ("Archived", "danger"),
}

WORKFLOW_DOCUMENT_TYPES = ["page", "post"]

# Valid status transitions
WORKFLOW_TRANSITIONS: Dict[str, List[str]] = {
    "draft": ["inReview", "published"],
    "inReview": ["published"],
    "published": ["archived"],
    "archived": [],
}

# Transitions taken by the "Change State" action, per document type
ACTION_TRANSITIONS: Dict[str, Dict[str, List[str]]] = {
    "post": {
        "draft": ["inReview"],
        "inReview": ["published"],
        "published": [],
    },
    "page": {
        "draft": ["published"],
        "published": ["archived"],
        "archived": [],
    },
}

WORKFLOW_FIELD = "workflowState"


@dataclass
class ActionResult:
    """Outcome of a document action."""
    message: str
    tone: Optional[str] = None
    state: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.tone not in ("critical", "caution")


def can_transition(current: str, new_state: str) -> bool:
    """Whether the workflow allows moving from ``current`` to ``new_state``."""
    return new_state in WORKFLOW_TRANSITIONS.get(current, [])


def initial_state_for(doc_type: str) -> str:
    """Posts start in review; every other type starts as a draft."""
    return WorkflowState.IN_REVIEW.value if doc_type == "post" else WorkflowState.DRAFT.value


def available_transitions(doc_type: str, current: Optional[str]) -> List[str]:
    return list(ACTION_TRANSITIONS.get(doc_type, {}).get(current or "", []))


def workflow_states() -> List[Dict[str, object]]:
    """State declarations as configured for the studio workflow."""
    return [
        {
            "id": state.value,
            "title": WORKFLOW_STATE_TITLES[state][0],
            "color": WORKFLOW_STATE_TITLES[state][1],
            "transitions": WORKFLOW_TRANSITIONS[state.value],
        }
        for state in WorkflowState
    ]


class WorkflowService:
    """Service for moving documents through the editorial workflow."""

    def __init__(self, client: Optional[SanityClient] = None):
        self.client = client or get_content_client()

    async def set_initial_state(self, document_id: str, doc_type: str) -> ActionResult:
        """
        Set a document's workflow state to its type's initial state.

        Args:
            document_id: Document id
            doc_type: Document type ("post", "page")

        Returns:
            ActionResult with the state that was set
        """
        initial_state = initial_state_for(doc_type)

        try:
            await self.client.patch(document_id, {WORKFLOW_FIELD: initial_state})
        except VariantSiteError as e:
            logger.error(f"Error setting workflow state on {document_id}: {e}")
            return ActionResult(message="Error setting workflow state", tone="critical")

        logger.info(f"Document {document_id} set to {initial_state}")
        return ActionResult(message=f"Document set to {initial_state} state", state=initial_state)

    async def change_state(
        self,
        document_id: str,
        doc_type: str,
        current_state: Optional[str],
    ) -> ActionResult:
        """
        Advance a document along its type's action transitions.

        Takes the first available transition from ``current_state``.

        Args:
            document_id: Document id
            doc_type: Document type ("post", "page")
            current_state: workflowState of the draft, else the published document

        Returns:
            ActionResult; tone "caution" when no transition is available
        """
        transitions = available_transitions(doc_type, current_state)

        if not transitions:
            return ActionResult(message="No available transitions", tone="caution", state=current_state)

        next_state = transitions[0]

        try:
            await self.client.patch(document_id, {WORKFLOW_FIELD: next_state})
        except VariantSiteError as e:
            logger.error(f"Error changing workflow state on {document_id}: {e}")
            return ActionResult(message="Error changing workflow state", tone="critical", state=current_state)

        logger.info(f"Document {document_id} moved from {current_state} to {next_state}")
        return ActionResult(message=f"Document moved to {next_state} state", state=next_state)
