# action_dispatcher.py - Typed action execution for automation workflows
# This file maps each action type to a parameter schema and a handler that calls
# exactly one capability provider.

import logging
from datetime import datetime
from typing import Dict, Any, Optional, Callable, Awaitable, Type, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import AutomationAction, ActionType
from .capabilities import Capabilities, generate_id
from .exceptions import ActionExecutionError, UnsupportedActionError

logger = logging.getLogger(__name__)

HandlerFunc = Callable[[BaseModel, Dict[str, Any], Capabilities], Awaitable[Dict[str, Any]]]

class ActionHandler(NamedTuple):
    schema: Type[BaseModel]
    func: HandlerFunc

ACTION_HANDLERS: Dict[str, ActionHandler] = {}

def action_handler(action_type: ActionType, schema: Type[BaseModel]):
    """Register a handler for an action type."""
    def decorator(func: HandlerFunc) -> HandlerFunc:
        ACTION_HANDLERS[action_type.value] = ActionHandler(schema, func)
        return func
    return decorator

def _from_input(input_data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if input_data.get(key) is not None:
            return input_data[key]
    return None

def _require(action_type: str, name: str, value: Any) -> Any:
    if value is None or value == "":
        raise ActionExecutionError(action_type, f"{action_type} requires '{name}'")
    return value

# =========================
# PARAMETER SCHEMAS
# =========================

class ActionParameters(BaseModel):
    # Accept both camelCase and snake_case keys; unknown keys are kept
    model_config = ConfigDict(populate_by_name=True, extra="allow")

class SendEmailParameters(ActionParameters):
    recipient: Optional[str] = None
    subject: Optional[str] = None
    template: Optional[str] = None
    content: Optional[str] = None

class SendSMSParameters(ActionParameters):
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    message: str

class CreateTaskParameters(ActionParameters):
    title: str
    description: Optional[str] = None
    assignee: Optional[str] = None
    due_date: Optional[str] = Field(default=None, alias="dueDate")

class UpdateLeadParameters(ActionParameters):
    lead_id: Optional[str] = Field(default=None, alias="leadId")
    updates: Optional[Dict[str, Any]] = None
    field: Optional[str] = None
    operation: Optional[str] = None
    value: Any = None

class SegmentParameters(ActionParameters):
    lead_id: Optional[str] = Field(default=None, alias="leadId")
    segment_id: str = Field(alias="segmentId")

class PostSocialParameters(ActionParameters):
    platform: str
    content: str
    image: Optional[str] = None

class CreateCampaignParameters(ActionParameters):
    name: str
    type: Optional[str] = None
    target_audience: Any = Field(default=None, alias="targetAudience")
    budget: Optional[float] = Field(default=None, ge=0)

class SendWebhookParameters(ActionParameters):
    url: str
    method: str = "POST"
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Any = None

# =========================
# HANDLERS
# =========================

@action_handler(ActionType.SEND_EMAIL, SendEmailParameters)
async def send_email(params: SendEmailParameters, input_data, capabilities):
    recipient = params.recipient or _from_input(input_data, "recipient", "email")
    message_id = await capabilities.email.send_email(
        recipient, params.subject, params.template, params.content
    )
    return {
        "sent": True,
        "message_id": message_id,
        "recipient": recipient,
        "subject": params.subject,
        "template": params.template,
        "sent_at": datetime.utcnow().isoformat(),
    }

@action_handler(ActionType.SEND_SMS, SendSMSParameters)
async def send_sms(params: SendSMSParameters, input_data, capabilities):
    phone_number = _require(
        ActionType.SEND_SMS.value, "phoneNumber",
        params.phone_number or _from_input(input_data, "phoneNumber", "phone_number", "phone"),
    )
    message_id = await capabilities.sms.send_sms(phone_number, params.message)
    return {
        "sent": True,
        "message_id": message_id,
        "phone_number": phone_number,
        "message": params.message,
        "sent_at": datetime.utcnow().isoformat(),
    }

@action_handler(ActionType.CREATE_TASK, CreateTaskParameters)
async def create_task(params: CreateTaskParameters, input_data, capabilities):
    task_id = await capabilities.tasks.create_task(
        params.title, params.description, params.assignee, params.due_date
    )
    return {
        "created": True,
        "task_id": task_id,
        "title": params.title,
        "description": params.description,
        "assignee": params.assignee,
        "due_date": params.due_date,
        "created_at": datetime.utcnow().isoformat(),
    }

@action_handler(ActionType.UPDATE_LEAD, UpdateLeadParameters)
async def update_lead(params: UpdateLeadParameters, input_data, capabilities):
    lead_id = _require(
        ActionType.UPDATE_LEAD.value, "leadId",
        params.lead_id or _from_input(input_data, "leadId", "lead_id"),
    )
    updates = dict(params.updates or {})
    if params.field:
        # Field-level form used by the scoring templates
        updates[params.field] = {"operation": params.operation or "set", "value": params.value}
    if not updates:
        raise ActionExecutionError(ActionType.UPDATE_LEAD.value, "update_lead requires 'updates' or 'field'")

    update_id = await capabilities.leads.update_lead(str(lead_id), updates)
    return {
        "updated": True,
        "update_id": update_id,
        "lead_id": lead_id,
        "updates": updates,
        "updated_at": datetime.utcnow().isoformat(),
    }

@action_handler(ActionType.ADD_TO_SEGMENT, SegmentParameters)
async def add_to_segment(params: SegmentParameters, input_data, capabilities):
    lead_id = _require(
        ActionType.ADD_TO_SEGMENT.value, "leadId",
        params.lead_id or _from_input(input_data, "leadId", "lead_id"),
    )
    membership_id = await capabilities.segments.add_to_segment(str(lead_id), params.segment_id)
    return {
        "added": True,
        "membership_id": membership_id,
        "lead_id": lead_id,
        "segment_id": params.segment_id,
        "added_at": datetime.utcnow().isoformat(),
    }

@action_handler(ActionType.REMOVE_FROM_SEGMENT, SegmentParameters)
async def remove_from_segment(params: SegmentParameters, input_data, capabilities):
    lead_id = _require(
        ActionType.REMOVE_FROM_SEGMENT.value, "leadId",
        params.lead_id or _from_input(input_data, "leadId", "lead_id"),
    )
    membership_id = await capabilities.segments.remove_from_segment(str(lead_id), params.segment_id)
    return {
        "removed": True,
        "membership_id": membership_id,
        "lead_id": lead_id,
        "segment_id": params.segment_id,
        "removed_at": datetime.utcnow().isoformat(),
    }

@action_handler(ActionType.POST_SOCIAL, PostSocialParameters)
async def post_social(params: PostSocialParameters, input_data, capabilities):
    post_id = await capabilities.social.post(params.platform, params.content, params.image)
    return {
        "posted": True,
        "post_id": post_id,
        "platform": params.platform,
        "content": params.content,
        "image": params.image,
        "posted_at": datetime.utcnow().isoformat(),
    }

@action_handler(ActionType.CREATE_CAMPAIGN, CreateCampaignParameters)
async def create_campaign(params: CreateCampaignParameters, input_data, capabilities):
    campaign_id = await capabilities.campaigns.create_campaign(
        params.name, params.type, params.target_audience, params.budget
    )
    return {
        "created": True,
        "campaign_id": campaign_id,
        "name": params.name,
        "type": params.type,
        "target_audience": params.target_audience,
        "budget": params.budget,
        "created_at": datetime.utcnow().isoformat(),
    }

@action_handler(ActionType.SEND_WEBHOOK, SendWebhookParameters)
async def send_webhook(params: SendWebhookParameters, input_data, capabilities):
    webhook_id = generate_id("webhook")
    status_code = await capabilities.webhooks.call(
        params.url, params.method, params.headers, params.body
    )
    if not 200 <= status_code < 300:
        raise ActionExecutionError(
            ActionType.SEND_WEBHOOK.value,
            f"Webhook {params.url} returned HTTP {status_code}",
        )
    return {
        "sent": True,
        "webhook_id": webhook_id,
        "url": params.url,
        "method": params.method.upper(),
        "status_code": status_code,
        "sent_at": datetime.utcnow().isoformat(),
    }

class ActionDispatcher:
    """Runs a single action through its registered handler."""

    def __init__(self, capabilities: Optional[Capabilities] = None):
        self.capabilities = capabilities or Capabilities()
        self.handlers: Dict[str, ActionHandler] = dict(ACTION_HANDLERS)

    def register_handler(self, action_type: str, schema: Type[BaseModel], func: HandlerFunc):
        """Register (or replace) the handler for an action type, e.g. 'custom'."""
        self.handlers[action_type] = ActionHandler(schema, func)
        logger.info(f"Registered handler for action type {action_type}")

    def supports(self, action_type: str) -> bool:
        return action_type in self.handlers

    async def execute(self, action: AutomationAction, input_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        handler = self.handlers.get(action.type)
        if handler is None:
            raise UnsupportedActionError(action.type)

        input_data = input_data or {}
        try:
            params = handler.schema.model_validate(action.parameters)
        except ValidationError as e:
            raise ActionExecutionError(
                action.type, f"Invalid parameters for {action.type}: {e.errors()}"
            ) from e

        try:
            return await handler.func(params, input_data, self.capabilities)
        except ActionExecutionError:
            raise
        except Exception as e:
            logger.error(f"Failed to execute action {action.type}: {str(e)}")
            raise ActionExecutionError(action.type, str(e)) from e
