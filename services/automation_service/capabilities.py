# capabilities.py - External capability providers invoked by automation actions
# This file defines the interfaces for email, SMS, task, lead, segment, social,
# campaign and webhook providers, plus the default implementations.

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import logging
import uuid

import httpx

from .config import settings

logger = logging.getLogger(__name__)

def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"

class EmailSender(ABC):
    @abstractmethod
    async def send_email(self, recipient: Optional[str], subject: Optional[str],
                         template: Optional[str], content: Optional[str] = None) -> str:
        """Deliver an email and return its message id."""

class SMSSender(ABC):
    @abstractmethod
    async def send_sms(self, phone_number: str, message: str) -> str:
        """Deliver an SMS and return its message id."""

class TaskCreator(ABC):
    @abstractmethod
    async def create_task(self, title: str, description: Optional[str],
                          assignee: Optional[str], due_date: Optional[str] = None) -> str:
        """Create a task and return its id."""

class LeadUpdater(ABC):
    @abstractmethod
    async def update_lead(self, lead_id: str, updates: Dict[str, Any]) -> str:
        """Apply field updates to a lead and return an update id."""

class SegmentManager(ABC):
    @abstractmethod
    async def add_to_segment(self, lead_id: str, segment_id: str) -> str:
        pass

    @abstractmethod
    async def remove_from_segment(self, lead_id: str, segment_id: str) -> str:
        pass

class SocialPoster(ABC):
    @abstractmethod
    async def post(self, platform: str, content: str, image: Optional[str] = None) -> str:
        """Publish a post and return its id."""

class CampaignCreator(ABC):
    @abstractmethod
    async def create_campaign(self, name: str, campaign_type: Optional[str],
                              target_audience: Any, budget: Optional[float]) -> str:
        """Create a marketing campaign and return its id."""

class WebhookCaller(ABC):
    @abstractmethod
    async def call(self, url: str, method: str, headers: Dict[str, str],
                   body: Any) -> int:
        """Send the request and return the response status code."""

# =========================
# DEFAULT PROVIDERS
# =========================

class SimulatedEmailSender(EmailSender):
    async def send_email(self, recipient, subject, template, content=None):
        message_id = generate_id("email")
        logger.info(f"Simulated email {message_id} to {recipient} using template {template}")
        return message_id

class SimulatedSMSSender(SMSSender):
    async def send_sms(self, phone_number, message):
        message_id = generate_id("sms")
        logger.info(f"Simulated SMS {message_id} to {phone_number}")
        return message_id

class SimulatedTaskCreator(TaskCreator):
    async def create_task(self, title, description, assignee, due_date=None):
        task_id = generate_id("task")
        logger.info(f"Simulated task {task_id} '{title}' for {assignee}")
        return task_id

class SimulatedLeadUpdater(LeadUpdater):
    async def update_lead(self, lead_id, updates):
        update_id = generate_id("lead-update")
        logger.info(f"Simulated update {update_id} of lead {lead_id}: {list(updates.keys())}")
        return update_id

class SimulatedSegmentManager(SegmentManager):
    async def add_to_segment(self, lead_id, segment_id):
        membership_id = generate_id("segment")
        logger.info(f"Simulated add of lead {lead_id} to segment {segment_id}")
        return membership_id

    async def remove_from_segment(self, lead_id, segment_id):
        membership_id = generate_id("segment")
        logger.info(f"Simulated removal of lead {lead_id} from segment {segment_id}")
        return membership_id

class SimulatedSocialPoster(SocialPoster):
    async def post(self, platform, content, image=None):
        post_id = generate_id("post")
        logger.info(f"Simulated {platform} post {post_id}")
        return post_id

class SimulatedCampaignCreator(CampaignCreator):
    async def create_campaign(self, name, campaign_type, target_audience, budget):
        campaign_id = generate_id("campaign")
        logger.info(f"Simulated campaign {campaign_id}: {name}")
        return campaign_id

class HttpWebhookCaller(WebhookCaller):
    """Performs the webhook request for real."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.webhook_timeout)
        )

    async def call(self, url, method, headers, body):
        request_kwargs: Dict[str, Any] = {"headers": headers}
        if body is not None:
            if isinstance(body, (dict, list)):
                request_kwargs["json"] = body
            else:
                request_kwargs["content"] = str(body)

        response = await self.http_client.request(method.upper(), url, **request_kwargs)
        logger.info(f"Webhook {method.upper()} {url} answered {response.status_code}")
        return response.status_code

    async def close(self):
        await self.http_client.aclose()

class Capabilities:
    """The set of providers the action dispatcher may call."""

    def __init__(self, email: Optional[EmailSender] = None, sms: Optional[SMSSender] = None,
                 tasks: Optional[TaskCreator] = None, leads: Optional[LeadUpdater] = None,
                 segments: Optional[SegmentManager] = None, social: Optional[SocialPoster] = None,
                 campaigns: Optional[CampaignCreator] = None,
                 webhooks: Optional[WebhookCaller] = None):
        self.email = email or SimulatedEmailSender()
        self.sms = sms or SimulatedSMSSender()
        self.tasks = tasks or SimulatedTaskCreator()
        self.leads = leads or SimulatedLeadUpdater()
        self.segments = segments or SimulatedSegmentManager()
        self.social = social or SimulatedSocialPoster()
        self.campaigns = campaigns or SimulatedCampaignCreator()
        self.webhooks = webhooks or HttpWebhookCaller()

    async def close(self):
        if isinstance(self.webhooks, HttpWebhookCaller):
            await self.webhooks.close()
