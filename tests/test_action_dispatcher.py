import httpx
import pytest
from pydantic import BaseModel

from services.automation_service.action_dispatcher import ActionDispatcher
from services.automation_service.capabilities import Capabilities, HttpWebhookCaller
from services.automation_service.exceptions import ActionExecutionError, UnsupportedActionError
from services.automation_service.models import AutomationAction

from conftest import run

def execute(dispatcher, action_type, parameters, input_data=None):
    action = AutomationAction(type=action_type, parameters=parameters)
    return run(dispatcher.execute(action, input_data))

def test_send_email_falls_back_to_input_recipient(dispatcher, providers):
    result = execute(dispatcher, "send_email", {"template": "welcome-1"}, {"email": "jane@example.com"})

    assert result["sent"] is True
    assert result["recipient"] == "jane@example.com"
    assert result["template"] == "welcome-1"
    assert result["message_id"] == "send_email-1"
    assert "sent_at" in result
    assert providers.calls == [("send_email", ("jane@example.com", None, "welcome-1"))]

def test_send_sms_accepts_camel_case_parameters(dispatcher, providers):
    result = execute(dispatcher, "send_sms", {"phoneNumber": "+15550100", "message": "Hi"})

    assert result["sent"] is True
    assert result["phone_number"] == "+15550100"
    assert providers.call_names == ["send_sms"]

def test_send_sms_without_phone_number_fails(dispatcher, providers):
    with pytest.raises(ActionExecutionError, match="phoneNumber"):
        execute(dispatcher, "send_sms", {"message": "Hi"})
    assert providers.calls == []

def test_create_task(dispatcher):
    result = execute(dispatcher, "create_task", {
        "title": "Call lead", "description": "Follow up", "assignee": "sales-1", "dueDate": "2026-11-01"
    })
    assert result["created"] is True
    assert result["task_id"]
    assert result["due_date"] == "2026-11-01"

def test_update_lead_with_field_form(dispatcher, providers):
    result = execute(
        dispatcher, "update_lead",
        {"field": "score", "operation": "increment", "value": 10},
        {"leadId": "lead-1"},
    )
    assert result["updated"] is True
    assert result["lead_id"] == "lead-1"
    assert result["updates"] == {"score": {"operation": "increment", "value": 10}}
    assert providers.calls[0][0] == "update_lead"

def test_update_lead_requires_lead_id(dispatcher):
    with pytest.raises(ActionExecutionError, match="leadId"):
        execute(dispatcher, "update_lead", {"updates": {"status": "qualified"}})

def test_update_lead_requires_updates(dispatcher):
    with pytest.raises(ActionExecutionError, match="updates"):
        execute(dispatcher, "update_lead", {"leadId": "lead-1"})

def test_segment_membership(dispatcher, providers):
    added = execute(dispatcher, "add_to_segment", {"segmentId": "vip"}, {"leadId": "lead-1"})
    removed = execute(dispatcher, "remove_from_segment", {"lead_id": "lead-1", "segment_id": "trial"})

    assert added["added"] is True and added["segment_id"] == "vip"
    assert removed["removed"] is True and removed["segment_id"] == "trial"
    assert providers.call_names == ["add_to_segment", "remove_from_segment"]

def test_post_social_and_create_campaign(dispatcher):
    post = execute(dispatcher, "post_social", {"platform": "twitter", "content": "Thanks!"})
    campaign = execute(dispatcher, "create_campaign", {
        "name": "Spring", "type": "email", "targetAudience": ["trial"], "budget": 500
    })

    assert post["posted"] is True and post["post_id"]
    assert campaign["created"] is True
    assert campaign["target_audience"] == ["trial"]
    assert campaign["budget"] == 500

def test_send_webhook_records_status_code(dispatcher, providers):
    result = execute(dispatcher, "send_webhook", {"url": "https://hooks.example.com/x", "method": "post"})

    assert result["sent"] is True
    assert result["status_code"] == 200
    assert result["method"] == "POST"
    assert result["webhook_id"].startswith("webhook-")

def test_send_webhook_non_2xx_is_an_action_failure(dispatcher, providers):
    providers.webhook_status = 503
    with pytest.raises(ActionExecutionError, match="HTTP 503"):
        execute(dispatcher, "send_webhook", {"url": "https://hooks.example.com/x"})

def test_invalid_parameters_are_rejected_before_the_capability(dispatcher, providers):
    with pytest.raises(ActionExecutionError, match="Invalid parameters for post_social"):
        execute(dispatcher, "post_social", {"platform": "twitter"})
    assert providers.calls == []

def test_capability_errors_are_wrapped(dispatcher, providers):
    providers.failures["send_email"] = ConnectionError("smtp down")
    with pytest.raises(ActionExecutionError, match="smtp down") as excinfo:
        execute(dispatcher, "send_email", {"template": "t"})
    assert excinfo.value.action_type == "send_email"

def test_unknown_action_type_is_unsupported(dispatcher):
    with pytest.raises(UnsupportedActionError, match="Unsupported action type: unsupported_action"):
        execute(dispatcher, "unsupported_action", {})

def test_custom_action_requires_a_registered_handler(dispatcher):
    with pytest.raises(UnsupportedActionError):
        execute(dispatcher, "custom", {})

    class ScoreParameters(BaseModel):
        points: int

    async def add_points(params, input_data, capabilities):
        return {"updated": True, "points": params.points, "lead_id": input_data["leadId"]}

    dispatcher.register_handler("custom", ScoreParameters, add_points)

    assert dispatcher.supports("custom")
    assert execute(dispatcher, "custom", {"points": 5}, {"leadId": "lead-1"}) == {
        "updated": True, "points": 5, "lead_id": "lead-1"
    }

def test_http_webhook_caller_sends_json_body():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["body"] = request.content
        seen["header"] = request.headers.get("x-token")
        return httpx.Response(201)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    caller = HttpWebhookCaller(http_client=client)

    status_code = run(caller.call("https://hooks.example.com/x", "put", {"x-token": "abc"}, {"a": 1}))

    assert status_code == 201
    assert seen["method"] == "PUT"
    assert seen["header"] == "abc"
    assert b'"a"' in seen["body"]

def test_default_capabilities_are_simulated():
    dispatcher = ActionDispatcher(Capabilities(webhooks=HttpWebhookCaller(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    )))
    result = execute(dispatcher, "send_email", {"recipient": "a@b.c", "template": "t"})
    assert result["message_id"].startswith("email-")
