"""
Unit tests for WorkflowService and the workflow vocabulary.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from variantsite.core.errors import ContentConfigError, ContentFetchError
from variantsite.services.workflow_service import (
    WORKFLOW_TRANSITIONS,
    WorkflowService,
    WorkflowState,
    available_transitions,
    can_transition,
    initial_state_for,
    workflow_states,
)


@pytest.fixture
def client():
    client = MagicMock()
    client.patch = AsyncMock(return_value={"transactionId": "tx-1"})
    return client


class TestVocabulary:

    def test_states(self):
        assert [s.value for s in WorkflowState] == ["draft", "inReview", "published", "archived"]

    def test_every_transition_targets_a_state(self):
        values = {s.value for s in WorkflowState}
        for targets in WORKFLOW_TRANSITIONS.values():
            assert set(targets) <= values

    def test_can_transition(self):
        assert can_transition("draft", "inReview")
        assert can_transition("published", "archived")
        assert not can_transition("archived", "draft")
        assert not can_transition("unknown", "draft")

    def test_initial_state(self):
        assert initial_state_for("post") == "inReview"
        assert initial_state_for("page") == "draft"

    def test_available_transitions(self):
        assert available_transitions("post", "draft") == ["inReview"]
        assert available_transitions("page", "draft") == ["published"]
        assert available_transitions("post", "published") == []
        assert available_transitions("post", None) == []
        assert available_transitions("product", "draft") == []

    def test_workflow_states(self):
        states = workflow_states()
        assert states[1] == {
            "id": "inReview",
            "title": "In Review",
            "color": "primary",
            "transitions": ["published"],
        }


class TestSetInitialState:

    @pytest.mark.asyncio
    async def test_post(self, client):
        result = await WorkflowService(client=client).set_initial_state("post-1", "post")

        client.patch.assert_awaited_once_with("post-1", {"workflowState": "inReview"})
        assert result.message == "Document set to inReview state"
        assert result.ok

    @pytest.mark.asyncio
    async def test_backend_error(self, client):
        client.patch.side_effect = ContentConfigError("no token")

        result = await WorkflowService(client=client).set_initial_state("page-1", "page")

        assert result.message == "Error setting workflow state"
        assert result.tone == "critical"
        assert not result.ok


class TestChangeState:

    @pytest.mark.asyncio
    async def test_takes_first_transition(self, client):
        result = await WorkflowService(client=client).change_state("page-1", "page", "published")

        client.patch.assert_awaited_once_with("page-1", {"workflowState": "archived"})
        assert result.message == "Document moved to archived state"
        assert result.state == "archived"

    @pytest.mark.asyncio
    async def test_no_transitions(self, client):
        result = await WorkflowService(client=client).change_state("post-1", "post", "published")

        client.patch.assert_not_awaited()
        assert result.message == "No available transitions"
        assert result.tone == "caution"

    @pytest.mark.asyncio
    async def test_backend_error(self, client):
        client.patch.side_effect = ContentFetchError("down", status_code=500)

        result = await WorkflowService(client=client).change_state("post-1", "post", "draft")

        assert result.message == "Error changing workflow state"
        assert result.state == "draft"
        assert not result.ok
