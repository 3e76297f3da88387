from unittest.mock import MagicMock, patch

import pytest

from services.automation_service.automation_registry import AutomationRegistry
from services.automation_service.exceptions import StoreError
from services.automation_service.models import (
    AutomationWorkflow, AutomationExecution, AutomationStatus, AutomationType
)

from conftest import run

@pytest.fixture
def redis_client():
    client = MagicMock()
    client.set.return_value = True
    return client

@pytest.fixture
def registry(redis_client):
    return AutomationRegistry(redis_client=redis_client)

def make_workflow(**overrides):
    data = {
        "name": "Welcome",
        "type": AutomationType.LEAD_NURTURING,
        "triggers": [{"type": "lead_created"}],
        "actions": [{"type": "send_email", "parameters": {"template": "welcome-1"}}],
        "site_id": "site-1",
    }
    data.update(overrides)
    return AutomationWorkflow(**data)

def make_execution(**overrides):
    data = {"automation_id": "wf-1", "site_id": "site-1", "trigger": "lead_created"}
    data.update(overrides)
    return AutomationExecution(**data)

def test_create_workflow_stores_definition_and_site_index(registry, redis_client):
    workflow = make_workflow()

    run(registry.create_workflow(workflow))

    key, payload = redis_client.set.call_args.args
    assert key == f"automation:def:{workflow.id}"
    assert AutomationWorkflow.model_validate_json(payload) == workflow
    assert redis_client.set.call_args.kwargs == {"nx": True}
    redis_client.zadd.assert_called_once_with(
        "automations:site:site-1", {workflow.id: workflow.created_at.timestamp()}
    )

def test_create_workflow_with_taken_id(registry, redis_client):
    redis_client.set.return_value = None

    with pytest.raises(StoreError, match="already exists"):
        run(registry.create_workflow(make_workflow()))
    redis_client.zadd.assert_not_called()

def test_update_of_missing_workflow(registry, redis_client):
    redis_client.set.return_value = None

    with pytest.raises(StoreError, match="does not exist"):
        run(registry.update_workflow(make_workflow()))
    assert redis_client.set.call_args.kwargs == {"xx": True}

def test_redis_failures_become_store_errors(registry, redis_client):
    redis_client.set.side_effect = ConnectionError("connection refused")

    with pytest.raises(StoreError, match="connection refused"):
        run(registry.create_workflow(make_workflow()))
    with pytest.raises(StoreError):
        run(registry.create_execution(make_execution()))

def test_get_missing_workflow(registry, redis_client):
    redis_client.get.return_value = None
    assert run(registry.get_workflow("missing")) is None

def test_list_workflows_filters_by_status(registry, redis_client):
    active = make_workflow(status=AutomationStatus.ACTIVE)
    draft = make_workflow()
    stored = {
        f"automation:def:{active.id}": active.model_dump_json(),
        f"automation:def:{draft.id}": draft.model_dump_json(),
    }
    redis_client.zrevrange.return_value = [draft.id, active.id]
    redis_client.get.side_effect = stored.get

    assert [w.id for w in run(registry.list_workflows("site-1"))] == [draft.id, active.id]
    assert [w.id for w in run(registry.list_workflows("site-1", AutomationStatus.ACTIVE))] == [active.id]
    redis_client.zrevrange.assert_called_with("automations:site:site-1", 0, -1)

def test_create_execution_indexes_by_workflow(registry, redis_client):
    execution = make_execution()

    run(registry.create_execution(execution))

    assert redis_client.set.call_args.args[0] == f"automation:exec:{execution.id}"
    assert redis_client.set.call_args.kwargs == {"nx": True}
    score = execution.started_at.timestamp()
    redis_client.zadd.assert_called_once_with("executions:automation:wf-1", {execution.id: score})
    redis_client.expire.assert_not_called()

def test_execution_retention(registry, redis_client):
    execution = make_execution()

    with patch("services.automation_service.automation_registry.settings") as settings:
        settings.execution_retention_days = 7
        run(registry.create_execution(execution))

    redis_client.expire.assert_called_once_with(f"automation:exec:{execution.id}", 7 * 24 * 3600)

def test_update_execution_keeps_ttl(registry, redis_client):
    run(registry.update_execution(make_execution()))
    assert redis_client.set.call_args.kwargs == {"xx": True, "keepttl": True}

def test_list_executions_limit_and_expired_entries(registry, redis_client):
    kept = make_execution()
    redis_client.zrevrange.return_value = [kept.id, "expired-1"]
    redis_client.get.side_effect = {f"automation:exec:{kept.id}": kept.model_dump_json()}.get

    executions = run(registry.list_executions("wf-1", limit=2))

    assert [e.id for e in executions] == [kept.id]
    redis_client.zrevrange.assert_called_once_with("executions:automation:wf-1", 0, 1)
    redis_client.zrem.assert_called_once_with("executions:automation:wf-1", "expired-1")

def test_list_executions_with_non_positive_limit(registry, redis_client):
    assert run(registry.list_executions("wf-1", limit=0)) == []
    redis_client.zrevrange.assert_not_called()
